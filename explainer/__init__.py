from .engine import ExplanationEngine, generic_function_call_description
from .methods import (
    ArgumentDecodeError,
    KnownMethod,
    MethodContext,
    UnrecognizedMethod,
    decode_method_args,
    describe_method,
    resolve_method,
)
from .models import Explanation

__all__ = [
    "ArgumentDecodeError",
    "Explanation",
    "ExplanationEngine",
    "KnownMethod",
    "MethodContext",
    "UnrecognizedMethod",
    "decode_method_args",
    "describe_method",
    "generic_function_call_description",
    "resolve_method",
]
