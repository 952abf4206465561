"""Smoke tests for the multisig operator CLI."""

import base64
import json
import unittest
from contextlib import redirect_stderr, redirect_stdout
from io import StringIO

from lockup_state.decoder import encode_account_state
from lockup_state.models import LockupState, TransfersEnabledViaPoll, VestingSchedule
from multisig_engine.gas import ONE_NEAR
from operator_cli.cli import main


class FakeChain:
    def query_state(self, account_id):
        return b""

    def query_view(self, account_id, method, args):
        if method == "get_request":
            return {"receiver_id": "bob.near", "actions": [{"type": "Transfer", "amount": str(ONE_NEAR)}]}
        if method == "list_request_ids":
            return [5]
        if method == "get_confirmations":
            return []
        if method == "get_num_confirmations":
            return 2
        raise KeyError(method)


def _state_base64() -> str:
    state = LockupState(
        owner_account_id="team.near",
        lockup_amount=ONE_NEAR,
        termination_withdrawn_tokens=0,
        lockup_duration=0,
        release_duration=None,
        lockup_timestamp=None,
        transfer=TransfersEnabledViaPoll(poll_account_id="transfer-vote.near"),
        vesting=VestingSchedule(start=1, cliff=2, end=3),
        staking_pool_whitelist_account_id="whitelist.near",
        staking=None,
        foundation_account_id="foundation.near",
    )
    return base64.b64encode(encode_account_state(state)).decode("ascii")


class OperatorCliTests(unittest.TestCase):
    def _run(self, args, chain=None):
        out = StringIO()
        err = StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(args, chain=chain or FakeChain())
        return code, out.getvalue(), err.getvalue()

    def test_state_decode(self) -> None:
        code, output, _ = self._run(["state", "decode", "--state-base64", _state_base64()])
        self.assertEqual(code, 0)
        payload = json.loads(output)
        self.assertEqual(payload["state"]["vesting"]["type"], "VestingSchedule")
        self.assertEqual(payload["state"]["staking"], None)
        self.assertEqual(payload["state"]["foundation_account_id"], "foundation.near")

    def test_state_decode_rejects_garbage(self) -> None:
        code, _, error = self._run(["state", "decode", "--state-base64", "AQI="])
        self.assertEqual(code, 2)
        self.assertTrue(error.startswith("ERROR:"))

    def test_explain_action(self) -> None:
        action = json.dumps({"type": "Transfer", "amount": str(ONE_NEAR)})
        code, output, _ = self._run(
            ["explain", "--action", action, "--to", "bob.near", "--from", "alice.near"]
        )
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(output)["short_description"], "Transfer 1Ⓝ to bob.near")

    def test_explain_pending_request(self) -> None:
        code, output, _ = self._run(["explain", "--request-id", "5", "--from", "team.near"])
        self.assertEqual(code, 0)
        payload = json.loads(output)
        self.assertEqual(payload["receiver_id"], "bob.near")
        self.assertEqual(
            payload["explanations"][0]["full_description"], "Transfers 1Ⓝ from team.near to bob.near."
        )

    def test_request_list(self) -> None:
        code, output, _ = self._run(["request", "list", "--multisig", "team.near"])
        self.assertEqual(code, 0)
        self.assertEqual(output.strip(), "#5 PENDING 0/2 bob.near: Transfer 1Ⓝ to bob.near")

    def test_request_build(self) -> None:
        code, output, _ = self._run(
            [
                "request",
                "build",
                "--multisig",
                "team.near",
                "--receiver",
                "bob.near",
                "--action",
                '{"type": "Transfer", "amount": "5"}',
            ]
        )
        self.assertEqual(code, 0)
        payload = json.loads(output)
        self.assertEqual(payload["receiver_id"], "team.near")
        self.assertEqual(payload["actions"][0]["method_name"], "add_request")
        self.assertEqual(payload["actions"][0]["gas"], str(300 * 10**12))

    def test_request_build_rejects_malformed_action(self) -> None:
        code, output, error = self._run(
            [
                "request",
                "build",
                "--multisig",
                "team.near",
                "--receiver",
                "bob.near",
                "--action",
                '{"type": "Transfer"}',
            ]
        )
        self.assertEqual(code, 2)
        self.assertEqual(output, "")
        self.assertIn("Malformed Transfer action", error)

    def test_ref_deposit_dry_run(self) -> None:
        code, output, _ = self._run(
            [
                "flow",
                "ref-deposit",
                "--multisig",
                "team.near",
                "--pool-id",
                "3",
                "--leg",
                "usdc.near=1000000",
                "--leg",
                "wrap.near=2000000000000000000000000",
                "--min-amount",
                "990000",
                "--min-amount",
                "1",
                "--dry-run",
            ]
        )
        self.assertEqual(code, 0)
        payload = json.loads(output)
        self.assertEqual(len(payload["steps"]), 4)
        self.assertEqual(payload["steps"][3]["label"], "add liquidity to pool 3")
        self.assertEqual(payload["dry_run"]["status"], "completed")

    def test_ref_deposit_requires_minimums(self) -> None:
        code, output, error = self._run(
            [
                "flow",
                "ref-deposit",
                "--multisig",
                "team.near",
                "--pool-id",
                "3",
                "--leg",
                "usdc.near=1000000",
                "--leg",
                "wrap.near=1",
            ]
        )
        self.assertEqual(code, 2)
        self.assertEqual(output, "")
        self.assertIn("min_amounts", error)

    def test_lockup_withdraw_targets_lockup(self) -> None:
        code, output, _ = self._run(
            ["flow", "lockup-withdraw", "--multisig", "team.near", "--lockup", "abc.lockup.near"]
        )
        self.assertEqual(code, 0)
        payload = json.loads(output)
        self.assertEqual(payload["steps"][0]["label"], "termination_withdraw on abc.lockup.near")
        self.assertNotIn("dry_run", payload)


if __name__ == "__main__":
    unittest.main()
