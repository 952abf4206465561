"""JSON-RPC transport implementing the chain query and submit capabilities."""

import base64
import http.client
import itertools
import json
import logging
import socket
import urllib.error
import urllib.request
from typing import Any, Callable, Dict, Optional

from multisig_engine.models import SignableTransaction

from .config import NetworkConfig
from .models import ChainError, NetworkError, SubmissionUnknownError, TxOutcome

logger = logging.getLogger(__name__)

STATE_KEY_BASE64 = base64.b64encode(b"STATE").decode("ascii")


class RpcError(ChainError):
    """Raised when the node answers with an error that retrying will not fix."""


class JsonRpcClient:
    """Minimal NEAR JSON-RPC client over ``urllib``."""

    def __init__(
        self,
        config: NetworkConfig,
        opener: Optional[Callable[..., Any]] = None,
    ) -> None:
        self._config = config
        self._opener = opener or urllib.request.urlopen
        self._ids = itertools.count(1)

    @property
    def config(self) -> NetworkConfig:
        return self._config

    def query_state(self, account_id: str) -> bytes:
        result = self._call(
            "query",
            {
                "request_type": "view_state",
                "finality": "final",
                "account_id": account_id,
                "prefix_base64": STATE_KEY_BASE64,
            },
        )
        for item in result.get("values", []):
            if item.get("key") == STATE_KEY_BASE64:
                return base64.b64decode(item["value"])
        raise RpcError(f"No contract state stored for {account_id}.")

    def query_view(self, account_id: str, method: str, args: Dict[str, Any]) -> Any:
        args_base64 = base64.b64encode(json.dumps(args).encode("utf-8")).decode("ascii")
        result = self._call(
            "query",
            {
                "request_type": "call_function",
                "finality": "final",
                "account_id": account_id,
                "method_name": method,
                "args_base64": args_base64,
            },
        )
        try:
            return json.loads(bytes(result["result"]).decode("utf-8"))
        except (KeyError, TypeError, ValueError) as exc:
            raise RpcError(f"{account_id}.{method} returned an unreadable result.") from exc

    def broadcast_signed(self, signed_transaction: str) -> TxOutcome:
        """Send a signed transaction and wait until it is final."""

        result = self._call("broadcast_tx_commit", [signed_transaction], broadcast=True)
        status = result.get("status", {})
        tx_hash = str(result.get("transaction", {}).get("hash", ""))
        if "Failure" in status:
            return TxOutcome(
                success=False,
                transaction_hash=tx_hash,
                failure=json.dumps(status["Failure"], sort_keys=True),
            )
        return TxOutcome(success=True, transaction_hash=tx_hash)

    def _call(self, method: str, params: Any, broadcast: bool = False) -> Dict[str, Any]:
        body = json.dumps(
            {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        ).encode("utf-8")
        request = urllib.request.Request(
            self._config.rpc_url,
            data=body,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        logger.debug("RPC %s -> %s", method, self._config.rpc_url)

        try:
            with self._opener(request, timeout=self._config.request_timeout) as response:
                raw = response.read()
        except (socket.timeout, TimeoutError) as exc:
            if broadcast:
                raise SubmissionUnknownError("Timed out waiting for the transaction.") from exc
            raise NetworkError(f"RPC {method} timed out.") from exc
        except urllib.error.URLError as exc:
            if broadcast and not isinstance(exc.reason, ConnectionRefusedError):
                raise SubmissionUnknownError(f"Lost contact while broadcasting: {exc}") from exc
            raise NetworkError(f"RPC {method} failed: {exc}") from exc
        except (OSError, http.client.HTTPException) as exc:
            if broadcast:
                raise SubmissionUnknownError(f"Connection dropped while broadcasting: {exc}") from exc
            raise NetworkError(f"RPC {method} transport error: {exc}") from exc

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise NetworkError("RPC returned invalid JSON.") from exc
        if not isinstance(payload, dict):
            raise NetworkError("RPC returned a non-object response.")

        error = payload.get("error")
        if error is not None:
            raise _classify_error(error, broadcast)
        return payload.get("result", {})


def _classify_error(error: Dict[str, Any], broadcast: bool) -> Exception:
    cause = (error.get("cause") or {}).get("name", "")
    message = f"{error.get('name', 'RPC_ERROR')}: {cause or error.get('message', '')}"
    if cause == "TIMEOUT_ERROR":
        if broadcast:
            return SubmissionUnknownError(message)
        return NetworkError(message)
    if cause in ("NO_SYNCED_BLOCKS", "UNAVAILABLE_SHARD", "INTERNAL_ERROR"):
        return NetworkError(message)
    return RpcError(message)


class RpcSubmitter:
    """Submits through an external signer; this core never holds keys."""

    def __init__(
        self,
        client: JsonRpcClient,
        sign: Callable[[SignableTransaction], str],
    ) -> None:
        self._client = client
        self._sign = sign

    def submit(self, transaction: SignableTransaction) -> TxOutcome:
        signed = self._sign(transaction)
        logger.info(
            "Submitting %s action(s) from %s", len(transaction.actions), transaction.signer_id
        )
        return self._client.broadcast_signed(signed)
