"""Request construction and gas budgeting."""

import base64
import json
import unittest

from multisig_engine.builder import (
    ADD_REQUEST_METHOD,
    PreconditionError,
    build_confirm_request,
    build_delete_request,
    build_function_call_action,
    build_request,
    encode_args,
    request_targets,
    validate_account_id,
    wrap_as_multisig_request,
)
from multisig_engine.gas import (
    ADD_REQUEST_GAS,
    DEFI_CALL_GAS,
    DEFI_REQUEST_GAS,
    DELETE_REQUEST_GAS,
    MAX_TRANSACTION_GAS,
    TGAS,
)
from multisig_engine.models import TransferAction, UnknownAction


def decode(action):
    return json.loads(base64.b64decode(action.args).decode("utf-8"))


class FunctionCallBuilderTests(unittest.TestCase):
    def test_encodes_arguments_as_base64_json(self) -> None:
        action = build_function_call_action("ft_transfer", {"receiver_id": "bob.near"}, 1, 50 * TGAS)
        self.assertEqual(action.args, base64.b64encode(b'{"receiver_id":"bob.near"}').decode("ascii"))
        self.assertEqual(action.args_bytes, b'{"receiver_id":"bob.near"}')
        self.assertEqual(action.deposit, 1)
        self.assertEqual(action.gas, 50 * TGAS)

    def test_gas_above_ceiling_is_reported(self) -> None:
        with self.assertRaises(PreconditionError):
            build_function_call_action("heavy", {}, 0, MAX_TRANSACTION_GAS + 1)

    def test_rejects_invalid_budgets(self) -> None:
        for method, deposit, gas in (("", 0, TGAS), ("m", -1, TGAS), ("m", 0, 0)):
            with self.subTest(method=method, deposit=deposit, gas=gas):
                with self.assertRaises(PreconditionError):
                    build_function_call_action(method, {}, deposit, gas)

    def test_encode_args_is_compact(self) -> None:
        self.assertEqual(base64.b64decode(encode_args({"a": 1, "b": [1, 2]})), b'{"a":1,"b":[1,2]}')


class MultisigRequestTests(unittest.TestCase):
    def test_wrap_creates_single_add_request(self) -> None:
        inner = build_function_call_action("unstake_all", {}, 0, DEFI_CALL_GAS)
        outer = wrap_as_multisig_request("abc.lockup.near", [inner])

        self.assertEqual(outer.method_name, ADD_REQUEST_METHOD)
        self.assertEqual(outer.deposit, 0)
        self.assertEqual(outer.gas, ADD_REQUEST_GAS)
        self.assertEqual(
            decode(outer),
            {"request": {"receiver_id": "abc.lockup.near", "actions": [inner.to_dict()]}},
        )

    def test_outer_gas_must_cover_inner_gas(self) -> None:
        inner = build_function_call_action("m", {}, 0, DEFI_REQUEST_GAS)
        with self.assertRaises(PreconditionError):
            wrap_as_multisig_request("contract.near", [inner], gas=DEFI_REQUEST_GAS)

    def test_rejects_empty_and_unknown_actions(self) -> None:
        with self.assertRaises(PreconditionError):
            wrap_as_multisig_request("contract.near", [])
        with self.assertRaises(PreconditionError):
            wrap_as_multisig_request("contract.near", [UnknownAction(type_name="Stake")])

    def test_build_request_signs_as_multisig(self) -> None:
        transaction = build_request("team.near", "bob.near", [TransferAction(amount=5)])
        self.assertEqual(transaction.signer_id, "team.near")
        self.assertEqual(transaction.receiver_id, "team.near")
        self.assertEqual(len(transaction.actions), 1)
        self.assertEqual(
            decode(transaction.actions[0])["request"]["actions"],
            [{"type": "Transfer", "amount": "5"}],
        )

    def test_direct_calls(self) -> None:
        delete = build_delete_request("team.near", 7)
        self.assertEqual(delete.actions[0].method_name, "delete_request")
        self.assertEqual(delete.actions[0].gas, DELETE_REQUEST_GAS)
        self.assertEqual(decode(delete.actions[0]), {"request_id": 7})

        confirm = build_confirm_request("team.near", 7)
        self.assertEqual(confirm.actions[0].method_name, "confirm")
        with self.assertRaises(PreconditionError):
            build_confirm_request("team.near", -1)

    def test_request_targets(self) -> None:
        transactions = [
            build_request("team.near", "bob.near", [TransferAction(amount=1)]),
            build_delete_request("team.near", 3),
        ]
        self.assertEqual(request_targets(transactions), ("bob.near", "team.near"))


class AccountIdTests(unittest.TestCase):
    def test_valid_ids(self) -> None:
        for account_id in ("bob.near", "a-b_c.near", "0123456789abcdef" * 4, "near"):
            with self.subTest(account_id=account_id):
                self.assertEqual(validate_account_id(account_id), account_id)

    def test_invalid_ids(self) -> None:
        for account_id in ("", "Bob.near", "bob..near", "-bob.near", "a" * 65, "bob.near."):
            with self.subTest(account_id=account_id):
                with self.assertRaises(PreconditionError):
                    validate_account_id(account_id)


if __name__ == "__main__":
    unittest.main()
