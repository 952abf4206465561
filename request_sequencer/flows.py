"""Multi-step treasury flows expressed as ordered governed requests.

Every flow builds all of its transactions before anything is submitted, so
precondition failures surface without touching the network.
"""

import hashlib
import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from chain_adapter.near.config import NetworkConfig
from chain_adapter.near.models import ChainQuery, Submitter
from chain_adapter.near.tokens import TokenMetadataResolver
from multisig_engine.amounts import parse_amount
from multisig_engine.builder import (
    PreconditionError,
    build_function_call_action,
    build_request,
    validate_account_id,
)
from multisig_engine.gas import (
    ADD_REQUEST_GAS,
    BURROW_STORAGE_DEPOSIT,
    DEFI_CALL_GAS,
    DEFI_REQUEST_GAS,
    LOCKUP_CALL_GAS,
    ONE_YOCTO,
    REF_ADD_LIQUIDITY_DEPOSIT,
    REF_STORAGE_DEPOSIT,
    REF_WITHDRAW_STORAGE_DEPOSIT,
    STABLE_LIQUIDITY_CALL_GAS,
    STABLE_LIQUIDITY_REQUEST_GAS,
    WITHDRAW_CALL_GAS,
)
from multisig_engine.models import SignableTransaction

from .results import SequenceResult
from .sequencer import SequenceStep, run_sequence

LOCKUP_HASH_LENGTH = 40


@dataclass(frozen=True)
class PlannedStep:
    label: str
    transaction: SignableTransaction


def run_flow(
    planned: Sequence[PlannedStep],
    submitter: Submitter,
    should_continue: Optional[Callable[[int, SequenceStep], bool]] = None,
) -> SequenceResult:
    return run_sequence(
        [step.transaction for step in planned],
        submitter,
        labels=[step.label for step in planned],
        should_continue=should_continue,
    )


def _single_call(
    multisig_account: str,
    target: str,
    method: str,
    args: Dict[str, Any],
    deposit: int,
    gas: int,
    request_gas: int,
) -> SignableTransaction:
    action = build_function_call_action(method, args, deposit, gas)
    return build_request(multisig_account, target, [action], request_gas)


def _storage_step(multisig_account: str, contract: str, deposit: int) -> PlannedStep:
    return PlannedStep(
        label=f"storage registration on {contract}",
        transaction=_single_call(
            multisig_account,
            contract,
            "storage_deposit",
            {"account_id": multisig_account, "registration_only": False},
            deposit,
            DEFI_CALL_GAS,
            DEFI_REQUEST_GAS,
        ),
    )


def _transfer_in_step(
    multisig_account: str, token_id: str, receiver_id: str, amount: int, msg: str = ""
) -> PlannedStep:
    return PlannedStep(
        label=f"transfer {token_id} to {receiver_id}",
        transaction=_single_call(
            multisig_account,
            token_id,
            "ft_transfer_call",
            {"receiver_id": receiver_id, "amount": str(amount), "msg": msg},
            ONE_YOCTO,
            DEFI_CALL_GAS,
            DEFI_REQUEST_GAS,
        ),
    )


def _check_legs(token_ids: Sequence[str], amounts: Sequence[int]) -> None:
    if len(token_ids) != len(amounts):
        raise PreconditionError("Each token needs exactly one amount.")
    for token_id in token_ids:
        validate_account_id(token_id)
    if any(amount < 0 for amount in amounts):
        raise PreconditionError("Amounts must be non-negative.")


def ref_deposit_steps(
    config: NetworkConfig,
    multisig_account: str,
    pool_id: int,
    token_ids: Sequence[str],
    amounts: Sequence[int],
    min_amounts: Optional[Sequence[int]],
) -> Tuple[PlannedStep, ...]:
    """Storage, one transfer-in per leg, then ``add_liquidity``."""

    if min_amounts is None:
        raise PreconditionError("add_liquidity requires explicit min_amounts.")
    if len(token_ids) != 2:
        raise PreconditionError("Simple pools take exactly two tokens.")
    _check_legs(token_ids, amounts)
    if len(min_amounts) != len(token_ids) or any(value < 0 for value in min_amounts):
        raise PreconditionError("min_amounts must give one non-negative value per token.")
    if any(amount == 0 for amount in amounts):
        raise PreconditionError("Both legs of a simple pool deposit must be positive.")

    ref = config.ref_exchange
    steps = [_storage_step(multisig_account, ref, REF_STORAGE_DEPOSIT)]
    steps.extend(
        _transfer_in_step(multisig_account, token_id, ref, amount)
        for token_id, amount in zip(token_ids, amounts)
    )
    steps.append(
        PlannedStep(
            label=f"add liquidity to pool {pool_id}",
            transaction=_single_call(
                multisig_account,
                ref,
                "add_liquidity",
                {
                    "pool_id": pool_id,
                    "amounts": [str(amount) for amount in amounts],
                    "min_amounts": [str(value) for value in min_amounts],
                },
                REF_ADD_LIQUIDITY_DEPOSIT,
                DEFI_CALL_GAS,
                DEFI_REQUEST_GAS,
            ),
        )
    )
    return tuple(steps)


def ref_stable_deposit_steps(
    config: NetworkConfig,
    multisig_account: str,
    pool_id: int,
    token_ids: Sequence[str],
    amounts: Sequence[int],
    min_shares: Optional[int],
) -> Tuple[PlannedStep, ...]:
    """Storage, a transfer-in per non-zero leg, then ``add_stable_liquidity``."""

    if min_shares is None:
        raise PreconditionError("add_stable_liquidity requires explicit min_shares.")
    if min_shares < 0:
        raise PreconditionError("min_shares must be non-negative.")
    _check_legs(token_ids, amounts)
    if not any(amounts):
        raise PreconditionError("At least one stable pool leg must be positive.")

    ref = config.ref_exchange
    steps = [_storage_step(multisig_account, ref, REF_STORAGE_DEPOSIT)]
    steps.extend(
        _transfer_in_step(multisig_account, token_id, ref, amount)
        for token_id, amount in zip(token_ids, amounts)
        if amount > 0
    )
    steps.append(
        PlannedStep(
            label=f"add stable liquidity to pool {pool_id}",
            transaction=_single_call(
                multisig_account,
                ref,
                "add_stable_liquidity",
                {
                    "pool_id": pool_id,
                    "amounts": [str(amount) for amount in amounts],
                    "min_shares": str(min_shares),
                },
                REF_ADD_LIQUIDITY_DEPOSIT,
                STABLE_LIQUIDITY_CALL_GAS,
                STABLE_LIQUIDITY_REQUEST_GAS,
            ),
        )
    )
    return tuple(steps)


def ref_withdraw_steps(
    config: NetworkConfig,
    multisig_account: str,
    pool_id: int,
    token_ids: Sequence[str],
    shares: int,
    min_amounts: Optional[Sequence[int]],
) -> Tuple[PlannedStep, ...]:
    """Storage, ``remove_liquidity``, then one full ``withdraw`` per token."""

    if min_amounts is None:
        raise PreconditionError("remove_liquidity requires explicit min_amounts.")
    _check_legs(token_ids, min_amounts)
    if shares <= 0:
        raise PreconditionError("Shares to remove must be positive.")

    ref = config.ref_exchange
    steps = [_storage_step(multisig_account, ref, REF_WITHDRAW_STORAGE_DEPOSIT)]
    steps.append(
        PlannedStep(
            label=f"remove liquidity from pool {pool_id}",
            transaction=_single_call(
                multisig_account,
                ref,
                "remove_liquidity",
                {
                    "pool_id": pool_id,
                    "shares": str(shares),
                    "min_amounts": [str(value) for value in min_amounts],
                },
                ONE_YOCTO,
                DEFI_CALL_GAS,
                DEFI_REQUEST_GAS,
            ),
        )
    )
    # amount "0" withdraws the whole deposited balance of the token.
    steps.extend(
        PlannedStep(
            label=f"withdraw {token_id} from {ref}",
            transaction=_single_call(
                multisig_account,
                ref,
                "withdraw",
                {"token_id": token_id, "amount": "0", "unregister": False},
                ONE_YOCTO,
                WITHDRAW_CALL_GAS,
                ADD_REQUEST_GAS,
            ),
        )
        for token_id in token_ids
    )
    return tuple(steps)


def burrow_supply_steps(
    chain: ChainQuery,
    config: NetworkConfig,
    multisig_account: str,
    token_id: str,
    amount: str,
    resolver: Optional[TokenMetadataResolver] = None,
) -> Tuple[PlannedStep, ...]:
    """Storage on Burrow, then a transfer-in that increases collateral.

    ``amount`` is a human decimal string; it is scaled by the token's live
    decimals, and the collateral figure further by Burrow's ``extra_decimals``.
    """

    validate_account_id(token_id)
    metadata = (resolver or TokenMetadataResolver(chain)).fetch(token_id)
    asset = chain.query_view(config.burrow, "get_asset", {"token_id": token_id})
    try:
        extra_decimals = int(asset["config"]["extra_decimals"])
    except (KeyError, TypeError, ValueError) as exc:
        raise PreconditionError(f"Burrow does not list {token_id} as an asset.") from exc

    indivisible = parse_amount(amount, metadata.decimals)
    if indivisible <= 0:
        raise PreconditionError("Supply amount must be positive.")

    message = {
        "Execute": {
            "actions": [
                {
                    "IncreaseCollateral": {
                        "token_id": token_id,
                        "max_amount": str(indivisible * 10**extra_decimals),
                    }
                }
            ]
        }
    }
    return (
        _storage_step(multisig_account, config.burrow, BURROW_STORAGE_DEPOSIT),
        _transfer_in_step(
            multisig_account,
            token_id,
            config.burrow,
            indivisible,
            msg=json.dumps(message, separators=(",", ":")),
        ),
    )


def lockup_account_id(owner_account_id: str, lockup_factory: str) -> str:
    """Deterministic lockup account the factory creates for ``owner_account_id``."""

    digest = hashlib.sha256(owner_account_id.encode("utf-8")).hexdigest()
    return f"{digest[:LOCKUP_HASH_LENGTH]}.{lockup_factory}"


def create_lockup_steps(
    config: NetworkConfig,
    multisig_account: str,
    owner_account_id: str,
    amount: int,
    start_timestamp: int,
    end_timestamp: int,
    cliff_timestamp: Optional[int] = None,
    allow_staking: bool = True,
) -> Tuple[PlannedStep, ...]:
    """Fund a new lockup with a linear vesting schedule (nanosecond timestamps)."""

    validate_account_id(owner_account_id)
    if amount <= 0:
        raise PreconditionError("Lockup amount must be positive.")
    cliff = start_timestamp if cliff_timestamp is None else cliff_timestamp
    if not 0 <= start_timestamp <= cliff <= end_timestamp:
        raise PreconditionError("Vesting requires start <= cliff <= end.")

    args: Dict[str, Any] = {
        "owner_account_id": owner_account_id,
        "lockup_duration": "0",
        "vesting_schedule": {
            "VestingSchedule": {
                "start_timestamp": str(start_timestamp),
                "cliff_timestamp": str(cliff),
                "end_timestamp": str(end_timestamp),
            }
        },
    }
    if not allow_staking:
        args["whitelist_account_id"] = "system"

    return (
        PlannedStep(
            label=f"create lockup for {owner_account_id}",
            transaction=_single_call(
                multisig_account,
                config.lockup_factory,
                "create",
                args,
                amount,
                LOCKUP_CALL_GAS,
                ADD_REQUEST_GAS,
            ),
        ),
    )


def _lockup_call(
    multisig_account: str, lockup_account: str, method: str, args: Dict[str, Any]
) -> PlannedStep:
    return PlannedStep(
        label=f"{method} on {lockup_account}",
        transaction=_single_call(
            multisig_account,
            lockup_account,
            method,
            args,
            0,
            LOCKUP_CALL_GAS,
            ADD_REQUEST_GAS,
        ),
    )


def terminate_vesting_steps(
    multisig_account: str,
    lockup_account: str,
    vesting_schedule_with_salt: Optional[Dict[str, Any]] = None,
) -> Tuple[PlannedStep, ...]:
    args: Dict[str, Any] = {}
    if vesting_schedule_with_salt is not None:
        args["vesting_schedule_with_salt"] = vesting_schedule_with_salt
    return (_lockup_call(multisig_account, lockup_account, "terminate_vesting", args),)


def termination_prepare_to_withdraw_steps(
    multisig_account: str, lockup_account: str
) -> Tuple[PlannedStep, ...]:
    return (
        _lockup_call(multisig_account, lockup_account, "termination_prepare_to_withdraw", {}),
    )


def termination_withdraw_steps(
    multisig_account: str, lockup_account: str
) -> Tuple[PlannedStep, ...]:
    return (
        _lockup_call(
            multisig_account,
            lockup_account,
            "termination_withdraw",
            {"receiver_id": multisig_account},
        ),
    )
