"""Operator CLI for multisig treasury requests."""

from __future__ import annotations

import argparse
import base64
import binascii
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from chain_adapter.near.config import ConfigError, NetworkConfig, load_network_config
from chain_adapter.near.models import ChainError, ChainQuery
from chain_adapter.near.rpc import JsonRpcClient
from chain_adapter.near.simulator import DryRunSubmitter, SimulationError
from explainer.engine import ExplanationEngine
from lockup_state.decoder import decode_account_state
from lockup_state.models import LockupLayout
from lockup_state.reader import DecodeError
from lockup_state.schedule import format_vesting_schedule
from multisig_engine.amounts import parse_amount
from multisig_engine.builder import (
    PreconditionError,
    build_confirm_request,
    build_delete_request,
    build_request,
)
from multisig_engine.gas import ADD_REQUEST_GAS, TGAS
from multisig_engine.models import ActionFormatError, action_from_dict
from multisig_engine.views import MultisigViewer
from request_sequencer.flows import (
    PlannedStep,
    burrow_supply_steps,
    create_lockup_steps,
    lockup_account_id,
    ref_deposit_steps,
    ref_stable_deposit_steps,
    ref_withdraw_steps,
    run_flow,
    terminate_vesting_steps,
    termination_prepare_to_withdraw_steps,
    termination_withdraw_steps,
)


def main(argv: Optional[List[str]] = None, chain: Optional[ChainQuery] = None) -> int:
    parser = argparse.ArgumentParser(prog="multisig-ops")
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--env-file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    state_parser = subparsers.add_parser("state")
    state_sub = state_parser.add_subparsers(dest="state_command", required=True)
    state_decode = state_sub.add_parser("decode")
    source = state_decode.add_mutually_exclusive_group(required=True)
    source.add_argument("--account")
    source.add_argument("--state-base64")
    source.add_argument("--state-file")
    state_decode.add_argument("--pool-id-as-string", action="store_true")
    state_decode.add_argument("--hash-length-prefixed", action="store_true")
    state_decode.set_defaults(func=_state_decode)

    explain_parser = subparsers.add_parser("explain")
    target = explain_parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--action", help="Action JSON as stored by the multisig contract.")
    target.add_argument("--request-id", type=int)
    explain_parser.add_argument("--to")
    explain_parser.add_argument("--from", dest="from_account", required=True)
    explain_parser.set_defaults(func=_explain)

    request_parser = subparsers.add_parser("request")
    request_sub = request_parser.add_subparsers(dest="request_command", required=True)

    request_build = request_sub.add_parser("build")
    request_build.add_argument("--multisig", required=True)
    request_build.add_argument("--receiver", required=True)
    request_build.add_argument("--action", action="append", required=True)
    request_build.add_argument("--gas-tgas", type=int, default=ADD_REQUEST_GAS // TGAS)
    request_build.set_defaults(func=_request_build)

    request_confirm = request_sub.add_parser("confirm")
    request_confirm.add_argument("--multisig", required=True)
    request_confirm.add_argument("--request-id", type=int, required=True)
    request_confirm.set_defaults(func=_request_confirm)

    request_delete = request_sub.add_parser("delete")
    request_delete.add_argument("--multisig", required=True)
    request_delete.add_argument("--request-id", type=int, required=True)
    request_delete.set_defaults(func=_request_delete)

    request_list = request_sub.add_parser("list")
    request_list.add_argument("--multisig", required=True)
    request_list.set_defaults(func=_request_list)

    flow_parser = subparsers.add_parser("flow")
    flow_sub = flow_parser.add_subparsers(dest="flow_command", required=True)

    ref_deposit = flow_sub.add_parser("ref-deposit")
    _add_flow_args(ref_deposit)
    ref_deposit.add_argument("--pool-id", type=int, required=True)
    ref_deposit.add_argument("--leg", action="append", required=True, help="TOKEN=AMOUNT in indivisible units")
    ref_deposit.add_argument("--min-amount", action="append", type=int)
    ref_deposit.set_defaults(func=_flow_ref_deposit)

    ref_stable = flow_sub.add_parser("ref-stable-deposit")
    _add_flow_args(ref_stable)
    ref_stable.add_argument("--pool-id", type=int, required=True)
    ref_stable.add_argument("--leg", action="append", required=True, help="TOKEN=AMOUNT in indivisible units")
    ref_stable.add_argument("--min-shares", type=int)
    ref_stable.set_defaults(func=_flow_ref_stable_deposit)

    ref_withdraw = flow_sub.add_parser("ref-withdraw")
    _add_flow_args(ref_withdraw)
    ref_withdraw.add_argument("--pool-id", type=int, required=True)
    ref_withdraw.add_argument("--token", action="append", required=True)
    ref_withdraw.add_argument("--shares", type=int, required=True)
    ref_withdraw.add_argument("--min-amount", action="append", type=int)
    ref_withdraw.set_defaults(func=_flow_ref_withdraw)

    burrow_supply = flow_sub.add_parser("burrow-supply")
    _add_flow_args(burrow_supply)
    burrow_supply.add_argument("--token", required=True)
    burrow_supply.add_argument("--amount", required=True, help="Human amount, e.g. 12.5")
    burrow_supply.set_defaults(func=_flow_burrow_supply)

    lockup_create = flow_sub.add_parser("lockup-create")
    _add_flow_args(lockup_create)
    lockup_create.add_argument("--owner", required=True)
    lockup_create.add_argument("--amount", required=True, help="NEAR amount, e.g. 100")
    lockup_create.add_argument("--start", type=int, required=True, help="Nanoseconds since epoch")
    lockup_create.add_argument("--end", type=int, required=True, help="Nanoseconds since epoch")
    lockup_create.add_argument("--cliff", type=int)
    lockup_create.add_argument("--no-staking", action="store_true")
    lockup_create.set_defaults(func=_flow_lockup_create)

    for name, func in (
        ("lockup-terminate", _flow_lockup_terminate),
        ("lockup-prepare-withdraw", _flow_lockup_prepare_withdraw),
        ("lockup-withdraw", _flow_lockup_withdraw),
    ):
        lockup_parser = flow_sub.add_parser(name)
        _add_flow_args(lockup_parser)
        lockup_target = lockup_parser.add_mutually_exclusive_group(required=True)
        lockup_target.add_argument("--owner")
        lockup_target.add_argument("--lockup")
        lockup_parser.set_defaults(func=func)

    args = parser.parse_args(argv)
    args.chain = chain
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except (
        ChainError,
        ValueError,
        ActionFormatError,
        ConfigError,
        DecodeError,
        PreconditionError,
        SimulationError,
    ) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2


def _state_decode(args: argparse.Namespace) -> int:
    if args.state_base64 is not None:
        try:
            data = base64.b64decode(args.state_base64, validate=True)
        except binascii.Error as exc:
            raise ValueError("--state-base64 is not valid base64.") from exc
    elif args.state_file is not None:
        data = Path(args.state_file).read_bytes()
    else:
        data = _chain(args).query_state(args.account)

    layout = LockupLayout(
        staking_pool_id_as_u128=not args.pool_id_as_string,
        vesting_hash_length_prefixed=args.hash_length_prefixed,
    )
    state = decode_account_state(data, layout)
    output = {"state": state.to_dict(), "vesting_schedule": format_vesting_schedule(state.vesting)}
    print(json.dumps(output, indent=2))
    return 0


def _explain(args: argparse.Namespace) -> int:
    chain = _chain(args)
    engine = ExplanationEngine(chain)
    if args.action is not None:
        if not args.to:
            raise ValueError("--to is required with --action.")
        explanation = engine.explain(_load_action(args.action), args.to, args.from_account)
        print(json.dumps(explanation.to_dict(), indent=2))
        return 0

    viewer = MultisigViewer(chain, args.from_account)
    request = viewer.get_request(args.request_id)
    explanations = engine.explain_request(request, args.from_account)
    output = {
        "request_id": args.request_id,
        "receiver_id": request.receiver_id,
        "explanations": [item.to_dict() for item in explanations],
    }
    print(json.dumps(output, indent=2))
    return 0


def _request_build(args: argparse.Namespace) -> int:
    actions = [_load_action(value) for value in args.action]
    transaction = build_request(args.multisig, args.receiver, actions, args.gas_tgas * TGAS)
    print(json.dumps(transaction.to_dict(), indent=2))
    return 0


def _request_confirm(args: argparse.Namespace) -> int:
    print(json.dumps(build_confirm_request(args.multisig, args.request_id).to_dict(), indent=2))
    return 0


def _request_delete(args: argparse.Namespace) -> int:
    print(json.dumps(build_delete_request(args.multisig, args.request_id).to_dict(), indent=2))
    return 0


def _request_list(args: argparse.Namespace) -> int:
    chain = _chain(args)
    engine = ExplanationEngine(chain)
    for pending in MultisigViewer(chain, args.multisig).list_pending_requests():
        explanations = engine.explain_request(pending.request, args.multisig)
        summary = "; ".join(item.short_description for item in explanations)
        print(
            f"#{pending.request_id} {pending.status.value} "
            f"{len(pending.confirmations)}/{pending.num_confirmations} "
            f"{pending.request.receiver_id}: {summary}"
        )
    return 0


def _flow_ref_deposit(args: argparse.Namespace) -> int:
    tokens, amounts = _parse_legs(args.leg)
    planned = ref_deposit_steps(
        _config(args), args.multisig, args.pool_id, tokens, amounts, args.min_amount
    )
    return _emit_flow(planned, args.dry_run)


def _flow_ref_stable_deposit(args: argparse.Namespace) -> int:
    tokens, amounts = _parse_legs(args.leg)
    planned = ref_stable_deposit_steps(
        _config(args), args.multisig, args.pool_id, tokens, amounts, args.min_shares
    )
    return _emit_flow(planned, args.dry_run)


def _flow_ref_withdraw(args: argparse.Namespace) -> int:
    planned = ref_withdraw_steps(
        _config(args), args.multisig, args.pool_id, args.token, args.shares, args.min_amount
    )
    return _emit_flow(planned, args.dry_run)


def _flow_burrow_supply(args: argparse.Namespace) -> int:
    planned = burrow_supply_steps(
        _chain(args), _config(args), args.multisig, args.token, args.amount
    )
    return _emit_flow(planned, args.dry_run)


def _flow_lockup_create(args: argparse.Namespace) -> int:
    planned = create_lockup_steps(
        _config(args),
        args.multisig,
        args.owner,
        parse_amount(args.amount),
        args.start,
        args.end,
        cliff_timestamp=args.cliff,
        allow_staking=not args.no_staking,
    )
    return _emit_flow(planned, args.dry_run)


def _flow_lockup_terminate(args: argparse.Namespace) -> int:
    planned = terminate_vesting_steps(args.multisig, _lockup_account(args))
    return _emit_flow(planned, args.dry_run)


def _flow_lockup_prepare_withdraw(args: argparse.Namespace) -> int:
    planned = termination_prepare_to_withdraw_steps(args.multisig, _lockup_account(args))
    return _emit_flow(planned, args.dry_run)


def _flow_lockup_withdraw(args: argparse.Namespace) -> int:
    planned = termination_withdraw_steps(args.multisig, _lockup_account(args))
    return _emit_flow(planned, args.dry_run)


def _emit_flow(planned: Tuple[PlannedStep, ...], dry_run: bool) -> int:
    output = {
        "steps": [
            {"label": step.label, "transaction": step.transaction.to_dict()} for step in planned
        ]
    }
    code = 0
    if dry_run:
        result = run_flow(planned, DryRunSubmitter())
        output["dry_run"] = result.to_dict()
        code = 0 if result.succeeded else 1
    print(json.dumps(output, indent=2))
    return code


def _add_flow_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--multisig", required=True)
    parser.add_argument("--dry-run", action="store_true")


def _parse_legs(values: List[str]) -> Tuple[List[str], List[int]]:
    tokens = []
    amounts = []
    for value in values:
        if "=" not in value:
            raise ValueError("Legs must be TOKEN=AMOUNT.")
        token, amount = value.split("=", 1)
        tokens.append(token.strip())
        amounts.append(int(amount))
    return tokens, amounts


def _load_action(value: str):
    try:
        data = json.loads(value)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Action is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("Action JSON must be an object.")
    return action_from_dict(data)


def _lockup_account(args: argparse.Namespace) -> str:
    if args.lockup:
        return args.lockup
    return lockup_account_id(args.owner, _config(args).lockup_factory)


def _config(args: argparse.Namespace) -> NetworkConfig:
    return load_network_config(args.env_file)


def _chain(args: argparse.Namespace) -> ChainQuery:
    if args.chain is not None:
        return args.chain
    return JsonRpcClient(_config(args))


if __name__ == "__main__":
    raise SystemExit(main())
