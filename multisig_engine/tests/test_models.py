"""Parsing of multisig actions and requests from contract JSON."""

import unittest

from multisig_engine.models import (
    ActionFormatError,
    AddMemberAction,
    CreateAccountAction,
    FtEscrowTransferAction,
    FunctionCallAction,
    MultisigMember,
    MultisigRequest,
    PendingRequest,
    RequestStatus,
    SetActiveRequestsLimitAction,
    TransferAction,
    UnknownAction,
    action_from_dict,
)


class ActionParsingTests(unittest.TestCase):
    def test_known_variants(self) -> None:
        self.assertEqual(action_from_dict({"type": "CreateAccount"}), CreateAccountAction())
        self.assertEqual(
            action_from_dict({"type": "Transfer", "amount": "1000"}), TransferAction(amount=1000)
        )
        self.assertEqual(
            action_from_dict({"type": "AddMember", "member": {"public_key": "ed25519:abc"}}),
            AddMemberAction(member=MultisigMember(public_key="ed25519:abc")),
        )
        self.assertEqual(
            action_from_dict({"type": "SetActiveRequestsLimit", "active_requests_limit": 12}),
            SetActiveRequestsLimitAction(active_requests_limit=12),
        )

    def test_function_call(self) -> None:
        action = action_from_dict(
            {
                "type": "FunctionCall",
                "method_name": "unstake_all",
                "args": "e30=",
                "deposit": "0",
                "gas": "125000000000000",
            }
        )
        self.assertIsInstance(action, FunctionCallAction)
        self.assertEqual(action.gas, 125 * 10**12)
        self.assertEqual(action.args_bytes, b"{}")

    def test_ft_escrow_transfer(self) -> None:
        action = action_from_dict(
            {
                "type": "FTEscrowTransfer",
                "receiver_id": "bob.near",
                "token_id": "usdc.near",
                "amount": "5",
                "label": "pay",
                "is_cancellable": True,
            }
        )
        self.assertEqual(action, FtEscrowTransferAction("bob.near", "usdc.near", 5, "pay", True))

    def test_unknown_type_is_preserved(self) -> None:
        action = action_from_dict({"type": "Stake", "amount": "1", "public_key": "ed25519:x"})
        self.assertEqual(
            action,
            UnknownAction(type_name="Stake", payload=(("amount", "1"), ("public_key", "ed25519:x"))),
        )
        self.assertEqual(action.to_dict()["type"], "Stake")

    def test_malformed_known_type_raises(self) -> None:
        for data in (
            {"type": "Transfer"},
            {"type": "Transfer", "amount": "-5"},
            {"type": "SetNumConfirmations", "num_confirmations": True},
            {"type": "AddKey"},
        ):
            with self.subTest(data=data):
                with self.assertRaises(ActionFormatError):
                    action_from_dict(data)

    def test_round_trip_through_dict(self) -> None:
        original = action_from_dict(
            {
                "type": "NearEscrowTransfer",
                "receiver_id": "bob.near",
                "amount": "7",
                "label": "grant",
                "is_cancellable": False,
            }
        )
        self.assertEqual(action_from_dict(original.to_dict()), original)


class RequestTests(unittest.TestCase):
    def test_request_from_dict(self) -> None:
        request = MultisigRequest.from_dict(
            {
                "receiver_id": "bob.near",
                "actions": [{"type": "Transfer", "amount": "1"}, {"type": "Mystery"}],
            }
        )
        self.assertEqual(request.receiver_id, "bob.near")
        self.assertEqual(request.actions[1], UnknownAction(type_name="Mystery"))

    def test_pending_status(self) -> None:
        request = MultisigRequest(receiver_id="bob.near", actions=())
        pending = PendingRequest(1, request, confirmations=("ed25519:a",), num_confirmations=2)
        confirmed = PendingRequest(1, request, confirmations=("ed25519:a", "ed25519:b"), num_confirmations=2)
        self.assertEqual(pending.status, RequestStatus.PENDING)
        self.assertEqual(confirmed.status, RequestStatus.CONFIRMED)
        self.assertEqual({status.value for status in RequestStatus}, {"PENDING", "CONFIRMED"})


if __name__ == "__main__":
    unittest.main()
