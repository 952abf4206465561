"""Configuration, dry-run submission and token metadata lookups."""

import os
import tempfile
import unittest

from chain_adapter.near.config import MAINNET, ConfigError, load_network_config
from chain_adapter.near.models import FungibleTokenMetadata, NetworkError
from chain_adapter.near.rpc import RpcError
from chain_adapter.near.simulator import DryRunSubmitter, SimulationError, transaction_digest
from chain_adapter.near.tokens import TokenMetadataResolver, get_ref_pool
from multisig_engine.builder import build_delete_request
from multisig_engine.models import SignableTransaction

_ENV_KEYS = ("MULTISIG_NETWORK", "MULTISIG_RPC_URL", "MULTISIG_RPC_TIMEOUT")


class NetworkConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self._saved = {key: os.environ.pop(key, None) for key in _ENV_KEYS}
        self._tmp = tempfile.TemporaryDirectory()
        self.env_file = os.path.join(self._tmp.name, ".env")

    def tearDown(self) -> None:
        for key in _ENV_KEYS:
            os.environ.pop(key, None)
            if self._saved[key] is not None:
                os.environ[key] = self._saved[key]
        self._tmp.cleanup()

    def _write_env(self, text: str) -> None:
        with open(self.env_file, "w", encoding="utf-8") as handle:
            handle.write(text)

    def test_defaults_to_mainnet(self) -> None:
        self._write_env("")
        self.assertEqual(load_network_config(self.env_file), MAINNET)
        self.assertEqual(load_network_config(self.env_file).lockup_factory, "lockup.near")

    def test_env_file_overrides(self) -> None:
        self._write_env("MULTISIG_RPC_URL=https://rpc.example.org\nMULTISIG_RPC_TIMEOUT=5\n")
        config = load_network_config(self.env_file)
        self.assertEqual(config.rpc_url, "https://rpc.example.org")
        self.assertEqual(config.request_timeout, 5.0)
        self.assertEqual(config.ref_exchange, MAINNET.ref_exchange)

    def test_invalid_values(self) -> None:
        self._write_env("MULTISIG_NETWORK=moonnet\n")
        with self.assertRaises(ConfigError):
            load_network_config(self.env_file)

        os.environ.pop("MULTISIG_NETWORK", None)
        os.environ["MULTISIG_RPC_TIMEOUT"] = "soon"
        self._write_env("")
        with self.assertRaises(ConfigError):
            load_network_config(self.env_file)


class DryRunSubmitterTests(unittest.TestCase):
    def test_records_and_succeeds(self) -> None:
        submitter = DryRunSubmitter()
        transaction = build_delete_request("team.near", 3)
        outcome = submitter.submit(transaction)

        self.assertTrue(outcome.success)
        self.assertEqual(outcome.transaction_hash, transaction_digest(transaction))
        self.assertEqual(submitter.submitted, (transaction,))
        self.assertTrue(outcome.notes)

    def test_injected_failures(self) -> None:
        error = NetworkError("congested")
        submitter = DryRunSubmitter(failures={0: error, 1: "panicked"})
        transaction = build_delete_request("team.near", 3)

        with self.assertRaises(NetworkError):
            submitter.submit(transaction)
        outcome = submitter.submit(transaction)
        self.assertFalse(outcome.success)
        self.assertEqual(outcome.failure, "panicked")
        self.assertEqual(len(submitter.submitted), 2)

    def test_rejects_empty_transaction(self) -> None:
        with self.assertRaises(SimulationError):
            DryRunSubmitter().submit(SignableTransaction("team.near", "team.near", ()))


class FakeTokenChain:
    def __init__(self) -> None:
        self.metadata = {
            "usdc.near": {"symbol": "USDC", "decimals": 6},
            "wrap.near": {"symbol": "wNEAR", "decimals": 24},
            "odd.near": {"symbol": "ODD", "decimals": 99},
        }

    def query_state(self, account_id):
        raise NetworkError("unused")

    def query_view(self, account_id, method, args):
        if method == "get_pool":
            return {
                "pool_kind": "SIMPLE_POOL",
                "token_account_ids": ["wrap.near", "usdc.near", "down.near"],
                "amounts": [str(3 * 10**24), "2500000", "7"],
                "shares_total_supply": "1000",
            }
        if account_id == "down.near":
            raise NetworkError("unreachable")
        if account_id == "pool.near":
            raise RpcError("CONTRACT_EXECUTION_ERROR: MethodNotFound")
        return self.metadata[account_id]


class TokenMetadataTests(unittest.TestCase):
    def test_fetch_many_skips_failures(self) -> None:
        resolver = TokenMetadataResolver(FakeTokenChain())
        with self.assertLogs("chain_adapter.near.tokens", level="WARNING"):
            result = resolver.fetch_many(["usdc.near", "down.near", "odd.near", "usdc.near"])
        self.assertEqual(result, {"usdc.near": FungibleTokenMetadata("usdc.near", "USDC", 6)})

    def test_fetch_many_skips_contracts_without_metadata(self) -> None:
        resolver = TokenMetadataResolver(FakeTokenChain())
        with self.assertLogs("chain_adapter.near.tokens", level="WARNING"):
            result = resolver.fetch_many(["pool.near", "wrap.near"])
        self.assertEqual(list(result), ["wrap.near"])

    def test_null_decimals_are_rejected(self) -> None:
        chain = FakeTokenChain()
        chain.metadata["usdc.near"] = {"symbol": "USDC", "decimals": None}
        with self.assertRaises(ValueError):
            TokenMetadataResolver(chain).fetch("usdc.near")

    def test_ref_pool_renders_live_decimals(self) -> None:
        with self.assertLogs("chain_adapter.near.tokens", level="WARNING"):
            pool = get_ref_pool(FakeTokenChain(), MAINNET.ref_exchange, 79)
        self.assertEqual(pool.display_amounts, ("3", "2.5", "7"))
        self.assertEqual(pool.token_symbols, ("wNEAR", "USDC", "down.near"))
        self.assertEqual(pool.describe(), "wNEAR-USDC-down.near (3 wNEAR | 2.5 USDC | 7 down.near) ID: 79")


if __name__ == "__main__":
    unittest.main()
