from .models import (
    Action,
    ActionFormatError,
    ActionType,
    FunctionCallAction,
    MultisigMember,
    MultisigRequest,
    PendingRequest,
    RequestStatus,
    SignableTransaction,
    TransferAction,
    UnknownAction,
    action_from_dict,
)
from .builder import (
    PreconditionError,
    build_confirm_request,
    build_delete_request,
    build_function_call_action,
    build_request,
    wrap_as_multisig_request,
)
from .amounts import format_amount, format_gas, format_near, parse_amount
from .views import MultisigViewer

__all__ = [
    "Action",
    "ActionFormatError",
    "ActionType",
    "FunctionCallAction",
    "MultisigMember",
    "MultisigRequest",
    "MultisigViewer",
    "PendingRequest",
    "PreconditionError",
    "RequestStatus",
    "SignableTransaction",
    "TransferAction",
    "UnknownAction",
    "action_from_dict",
    "build_confirm_request",
    "build_delete_request",
    "build_function_call_action",
    "build_request",
    "format_amount",
    "format_gas",
    "format_near",
    "parse_amount",
    "wrap_as_multisig_request",
]
