"""JSON-RPC client behavior against a scripted transport."""

import base64
import io
import json
import socket
import unittest
import urllib.error

from chain_adapter.near.config import MAINNET
from chain_adapter.near.models import NetworkError, SubmissionUnknownError
from chain_adapter.near.rpc import STATE_KEY_BASE64, JsonRpcClient, RpcError, RpcSubmitter
from multisig_engine.builder import build_delete_request


class ScriptedOpener:
    def __init__(self, payload=None, error=None) -> None:
        self.payload = payload
        self.error = error
        self.requests = []

    def __call__(self, request, timeout):
        self.requests.append((json.loads(request.data.decode("utf-8")), timeout))
        if self.error is not None:
            raise self.error
        return io.BytesIO(json.dumps(self.payload).encode("utf-8"))


class ResettingResponse(io.BytesIO):
    def read(self, *args):
        raise ConnectionResetError("connection reset by peer")


class JsonRpcClientTests(unittest.TestCase):
    def _client(self, **kwargs):
        opener = ScriptedOpener(**kwargs)
        return JsonRpcClient(MAINNET, opener=opener), opener

    def test_query_view_decodes_result_bytes(self) -> None:
        client, opener = self._client(
            payload={"jsonrpc": "2.0", "id": 1, "result": {"result": list(b'{"decimals":6}')}}
        )
        self.assertEqual(client.query_view("usdc.near", "ft_metadata", {}), {"decimals": 6})

        body, timeout = opener.requests[0]
        self.assertEqual(body["method"], "query")
        self.assertEqual(body["params"]["request_type"], "call_function")
        self.assertEqual(body["params"]["method_name"], "ft_metadata")
        self.assertEqual(base64.b64decode(body["params"]["args_base64"]), b"{}")
        self.assertEqual(timeout, MAINNET.request_timeout)

    def test_query_state_reads_state_key(self) -> None:
        value = base64.b64encode(b"\x01\x02").decode("ascii")
        client, _ = self._client(
            payload={"result": {"values": [{"key": STATE_KEY_BASE64, "value": value}]}}
        )
        self.assertEqual(client.query_state("abc.lockup.near"), b"\x01\x02")

    def test_query_state_without_state(self) -> None:
        client, _ = self._client(payload={"result": {"values": []}})
        with self.assertRaises(RpcError):
            client.query_state("abc.lockup.near")

    def test_read_timeout_is_network_error(self) -> None:
        client, _ = self._client(error=socket.timeout("timed out"))
        with self.assertRaises(NetworkError) as raised:
            client.query_view("usdc.near", "ft_metadata", {})
        self.assertNotIsInstance(raised.exception, SubmissionUnknownError)

    def test_broadcast_timeout_is_unknown_outcome(self) -> None:
        client, _ = self._client(error=socket.timeout("timed out"))
        with self.assertRaises(SubmissionUnknownError):
            client.broadcast_signed("c2lnbmVk")

    def test_refused_connection_is_not_unknown(self) -> None:
        client, _ = self._client(error=urllib.error.URLError(ConnectionRefusedError()))
        with self.assertRaises(NetworkError) as raised:
            client.broadcast_signed("c2lnbmVk")
        self.assertNotIsInstance(raised.exception, SubmissionUnknownError)

    def test_node_errors_are_classified(self) -> None:
        timeout = {"error": {"name": "HANDLER_ERROR", "cause": {"name": "TIMEOUT_ERROR"}}}
        client, _ = self._client(payload=timeout)
        with self.assertRaises(SubmissionUnknownError):
            client.broadcast_signed("c2lnbmVk")

        unknown_account = {"error": {"name": "HANDLER_ERROR", "cause": {"name": "UNKNOWN_ACCOUNT"}}}
        client, _ = self._client(payload=unknown_account)
        with self.assertRaises(RpcError):
            client.query_view("ghost.near", "ft_metadata", {})

    def test_broadcast_reports_failure_status(self) -> None:
        client, _ = self._client(
            payload={
                "result": {
                    "status": {"Failure": {"ActionError": {"index": 0}}},
                    "transaction": {"hash": "abc"},
                }
            }
        )
        outcome = client.broadcast_signed("c2lnbmVk")
        self.assertFalse(outcome.success)
        self.assertEqual(outcome.transaction_hash, "abc")
        self.assertIn("ActionError", outcome.failure)

    def test_dropped_connection_while_reading(self) -> None:
        def opener(request, timeout):
            return ResettingResponse()

        client = JsonRpcClient(MAINNET, opener=opener)
        with self.assertRaises(SubmissionUnknownError):
            client.broadcast_signed("c2lnbmVk")
        with self.assertRaises(NetworkError) as raised:
            client.query_view("usdc.near", "ft_metadata", {})
        self.assertNotIsInstance(raised.exception, SubmissionUnknownError)

    def test_invalid_json(self) -> None:
        client = JsonRpcClient(MAINNET, opener=lambda request, timeout: io.BytesIO(b"<html>"))
        with self.assertRaises(NetworkError):
            client.query_view("usdc.near", "ft_metadata", {})


class RpcSubmitterTests(unittest.TestCase):
    def test_signs_then_broadcasts(self) -> None:
        opener = ScriptedOpener(
            payload={"result": {"status": {"SuccessValue": ""}, "transaction": {"hash": "h1"}}}
        )
        signed = []

        def sign(transaction):
            signed.append(transaction)
            return "c2lnbmVk"

        submitter = RpcSubmitter(JsonRpcClient(MAINNET, opener=opener), sign)
        transaction = build_delete_request("team.near", 1)
        outcome = submitter.submit(transaction)

        self.assertTrue(outcome.success)
        self.assertEqual(signed, [transaction])
        body, _ = opener.requests[0]
        self.assertEqual(body["method"], "broadcast_tx_commit")
        self.assertEqual(body["params"], ["c2lnbmVk"])


if __name__ == "__main__":
    unittest.main()
