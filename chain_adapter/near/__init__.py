from .config import MAINNET, ConfigError, NetworkConfig, load_network_config
from .models import (
    ChainError,
    ChainQuery,
    FungibleTokenMetadata,
    NetworkError,
    SubmissionUnknownError,
    Submitter,
    TxOutcome,
)
from .rpc import JsonRpcClient, RpcError, RpcSubmitter
from .simulator import DryRunSubmitter, SimulationError
from .tokens import LiquidityPool, TokenMetadataResolver, get_ref_pool

__all__ = [
    "ChainError",
    "ChainQuery",
    "ConfigError",
    "DryRunSubmitter",
    "FungibleTokenMetadata",
    "JsonRpcClient",
    "LiquidityPool",
    "MAINNET",
    "NetworkConfig",
    "NetworkError",
    "RpcError",
    "RpcSubmitter",
    "SimulationError",
    "SubmissionUnknownError",
    "Submitter",
    "TokenMetadataResolver",
    "TxOutcome",
    "get_ref_pool",
    "load_network_config",
]
