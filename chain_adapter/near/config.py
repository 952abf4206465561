"""Read-only network configuration injected at construction."""

import os
from dataclasses import dataclass, replace
from typing import Dict, Optional

from dotenv import load_dotenv


class ConfigError(ValueError):
    """Raised when environment configuration cannot be resolved."""


@dataclass(frozen=True)
class NetworkConfig:
    network_id: str
    rpc_url: str
    lockup_factory: str
    ref_exchange: str
    burrow: str
    request_timeout: float = 30.0


MAINNET = NetworkConfig(
    network_id="mainnet",
    rpc_url="https://beta.rpc.mainnet.near.org",
    lockup_factory="lockup.near",
    ref_exchange="v2.ref-finance.near",
    burrow="contract.main.burrow.near",
)

NETWORKS: Dict[str, NetworkConfig] = {MAINNET.network_id: MAINNET}


def load_network_config(env_file: Optional[str] = None) -> NetworkConfig:
    """Resolve configuration from ``MULTISIG_*`` variables and a ``.env`` file.

    - MULTISIG_NETWORK: preset name (default: mainnet)
    - MULTISIG_RPC_URL: overrides the preset RPC endpoint
    - MULTISIG_RPC_TIMEOUT: request timeout in seconds
    """

    load_dotenv(env_file)
    network_id = (os.getenv("MULTISIG_NETWORK") or MAINNET.network_id).strip().lower()
    if network_id not in NETWORKS:
        raise ConfigError(f"Unknown network: {network_id}")
    config = NETWORKS[network_id]

    rpc_url = (os.getenv("MULTISIG_RPC_URL") or "").strip()
    if rpc_url:
        config = replace(config, rpc_url=rpc_url)

    timeout = (os.getenv("MULTISIG_RPC_TIMEOUT") or "").strip()
    if timeout:
        try:
            seconds = float(timeout)
        except ValueError as exc:
            raise ConfigError(f"Invalid MULTISIG_RPC_TIMEOUT: {timeout}") from exc
        if seconds <= 0:
            raise ConfigError("MULTISIG_RPC_TIMEOUT must be positive.")
        config = replace(config, request_timeout=seconds)
    return config
