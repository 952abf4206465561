"""Read-only views of a multisig contract's queue and membership."""

from concurrent.futures import ThreadPoolExecutor
from typing import Tuple

from chain_adapter.near.models import ChainQuery

from .models import MultisigMember, MultisigRequest, PendingRequest


class MultisigViewer:
    def __init__(self, chain: ChainQuery, contract_id: str) -> None:
        self._chain = chain
        self._contract_id = contract_id

    def list_request_ids(self) -> Tuple[int, ...]:
        ids = self._view("list_request_ids")
        return tuple(sorted(int(request_id) for request_id in ids))

    def get_request(self, request_id: int) -> MultisigRequest:
        return MultisigRequest.from_dict(self._view("get_request", request_id=request_id))

    def get_confirmations(self, request_id: int) -> Tuple[str, ...]:
        return tuple(self._view("get_confirmations", request_id=request_id))

    def get_num_confirmations(self) -> int:
        return int(self._view("get_num_confirmations"))

    def get_members(self) -> Tuple[MultisigMember, ...]:
        return tuple(MultisigMember.from_dict(item) for item in self._view("get_members"))

    def list_pending_requests(self) -> Tuple[PendingRequest, ...]:
        request_ids = self.list_request_ids()
        if not request_ids:
            return ()
        threshold = self.get_num_confirmations()
        with ThreadPoolExecutor(max_workers=min(8, len(request_ids))) as pool:
            return tuple(
                pool.map(lambda request_id: self._pending(request_id, threshold), request_ids)
            )

    def _pending(self, request_id: int, threshold: int) -> PendingRequest:
        return PendingRequest(
            request_id=request_id,
            request=self.get_request(request_id),
            confirmations=self.get_confirmations(request_id),
            num_confirmations=threshold,
        )

    def _view(self, method: str, **args):
        return self._chain.query_view(self._contract_id, method, args)
