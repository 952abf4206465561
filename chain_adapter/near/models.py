"""Capabilities the core consumes from the network, and their results."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional, Protocol, Tuple

if TYPE_CHECKING:
    from multisig_engine.models import SignableTransaction


class ChainError(RuntimeError):
    """Base class for failures reported by the chain adapter."""


class NetworkError(ChainError):
    """Transient transport or node failure; retriable per step by the caller."""


class SubmissionUnknownError(NetworkError):
    """The transaction was handed to the network but its outcome is unknown."""


class ChainQuery(Protocol):
    def query_state(self, account_id: str) -> bytes:
        ...

    def query_view(self, account_id: str, method: str, args: Dict[str, Any]) -> Any:
        ...


class Submitter(Protocol):
    def submit(self, transaction: "SignableTransaction") -> "TxOutcome":
        ...


@dataclass(frozen=True)
class TxOutcome:
    """Final (not merely broadcast) result of one submitted transaction."""

    success: bool
    transaction_hash: str
    failure: Optional[str] = None
    notes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FungibleTokenMetadata:
    account_id: str
    symbol: str
    decimals: int
    name: str = ""

    @staticmethod
    def from_view(account_id: str, data: Dict[str, Any]) -> "FungibleTokenMetadata":
        try:
            decimals = int(data["decimals"])
        except TypeError as exc:
            raise ValueError(f"Token {account_id} reports non-numeric decimals.") from exc
        if not 0 <= decimals <= 36:
            raise ValueError(f"Token {account_id} reports invalid decimals {decimals}.")
        return FungibleTokenMetadata(
            account_id=account_id,
            symbol=str(data.get("symbol", "")),
            decimals=decimals,
            name=str(data.get("name", "")),
        )
