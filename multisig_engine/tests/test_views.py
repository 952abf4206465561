"""Multisig queue views over an in-memory chain."""

import threading
import unittest

from multisig_engine.models import MultisigMember, RequestStatus, TransferAction
from multisig_engine.views import MultisigViewer


class FakeMultisig:
    def __init__(self) -> None:
        self.requests = {
            4: {"receiver_id": "bob.near", "actions": [{"type": "Transfer", "amount": "10"}]},
            2: {"receiver_id": "carol.near", "actions": [{"type": "Transfer", "amount": "20"}]},
        }
        self.confirmations = {4: ["ed25519:a", "ed25519:b"], 2: ["ed25519:a"]}
        self.calls = []
        self._lock = threading.Lock()

    def query_state(self, account_id):
        raise NotImplementedError

    def query_view(self, account_id, method, args):
        with self._lock:
            self.calls.append((account_id, method))
        if method == "list_request_ids":
            return list(self.requests)
        if method == "get_request":
            return self.requests[args["request_id"]]
        if method == "get_confirmations":
            return self.confirmations[args["request_id"]]
        if method == "get_num_confirmations":
            return 2
        if method == "get_members":
            return [{"public_key": "ed25519:a"}, {"account_id": "dave.near"}]
        raise KeyError(method)


class MultisigViewerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.chain = FakeMultisig()
        self.viewer = MultisigViewer(self.chain, "team.near")

    def test_request_ids_are_sorted(self) -> None:
        self.assertEqual(self.viewer.list_request_ids(), (2, 4))

    def test_members(self) -> None:
        self.assertEqual(
            self.viewer.get_members(),
            (MultisigMember(public_key="ed25519:a"), MultisigMember(account_id="dave.near")),
        )

    def test_pending_requests_keep_id_order(self) -> None:
        pending = self.viewer.list_pending_requests()

        self.assertEqual([item.request_id for item in pending], [2, 4])
        self.assertEqual(pending[0].status, RequestStatus.PENDING)
        self.assertEqual(pending[1].status, RequestStatus.CONFIRMED)
        self.assertEqual(pending[1].request.actions, (TransferAction(amount=10),))
        self.assertTrue(all(account == "team.near" for account, _ in self.chain.calls))

    def test_empty_queue(self) -> None:
        self.chain.requests.clear()
        self.assertEqual(self.viewer.list_pending_requests(), ())


if __name__ == "__main__":
    unittest.main()
