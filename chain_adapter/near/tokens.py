"""Fungible token metadata and pool composition lookups."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from multisig_engine.amounts import format_amount

from .models import ChainError, ChainQuery, FungibleTokenMetadata

logger = logging.getLogger(__name__)

_MAX_WORKERS = 8


class TokenMetadataResolver:
    """Fetches ``ft_metadata`` through the injected chain query capability."""

    def __init__(self, chain: ChainQuery, max_workers: int = _MAX_WORKERS) -> None:
        self._chain = chain
        self._max_workers = max_workers

    def fetch(self, token_account_id: str) -> FungibleTokenMetadata:
        data = self._chain.query_view(token_account_id, "ft_metadata", {})
        if not isinstance(data, dict):
            raise ValueError(f"Token {token_account_id} returned malformed metadata.")
        return FungibleTokenMetadata.from_view(token_account_id, data)

    def fetch_many(self, token_account_ids: Iterable[str]) -> Dict[str, FungibleTokenMetadata]:
        """Fetch metadata concurrently; tokens that fail are left out.

        The result is keyed by account id, so completion order has no effect.
        """

        unique = sorted(set(token_account_ids))
        if not unique:
            return {}
        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(unique))) as pool:
            results = list(pool.map(self._fetch_or_none, unique))
        return {
            token: metadata
            for token, metadata in zip(unique, results)
            if metadata is not None
        }

    def _fetch_or_none(self, token_account_id: str) -> Optional[FungibleTokenMetadata]:
        try:
            return self.fetch(token_account_id)
        except (ChainError, ValueError, KeyError) as exc:
            logger.warning("Metadata unavailable for %s: %s", token_account_id, exc)
            return None


@dataclass(frozen=True)
class LiquidityPool:
    pool_id: int
    pool_kind: str
    token_account_ids: Tuple[str, ...]
    amounts: Tuple[int, ...]
    display_amounts: Tuple[str, ...]
    token_symbols: Tuple[str, ...]
    shares_total_supply: int

    def describe(self) -> str:
        balances = " | ".join(
            f"{amount} {symbol}"
            for amount, symbol in zip(self.display_amounts, self.token_symbols)
        )
        return f"{'-'.join(self.token_symbols)} ({balances}) ID: {self.pool_id}"


def get_ref_pool(
    chain: ChainQuery,
    ref_account: str,
    pool_id: int,
    resolver: Optional[TokenMetadataResolver] = None,
) -> LiquidityPool:
    """Pool composition with amounts rendered through live token decimals."""

    data = chain.query_view(ref_account, "get_pool", {"pool_id": pool_id})
    tokens = tuple(str(token) for token in data["token_account_ids"])
    amounts = tuple(int(amount) for amount in data["amounts"])
    metadata = (resolver or TokenMetadataResolver(chain)).fetch_many(tokens)

    display_amounts = []
    symbols = []
    for token, amount in zip(tokens, amounts):
        token_metadata = metadata.get(token)
        if token_metadata is None:
            display_amounts.append(str(amount))
            symbols.append(token)
            continue
        display_amounts.append(format_amount(amount, token_metadata.decimals))
        symbols.append(token_metadata.symbol)

    return LiquidityPool(
        pool_id=pool_id,
        pool_kind=str(data.get("pool_kind", "")),
        token_account_ids=tokens,
        amounts=amounts,
        display_amounts=tuple(display_amounts),
        token_symbols=tuple(symbols),
        shares_total_supply=int(data.get("shares_total_supply", 0)),
    )
