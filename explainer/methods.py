"""Catalogue of function-call methods the explainer understands.

Each known method pairs a pydantic schema for its JSON arguments with a
function rendering the validated arguments as text. Anything outside the
catalogue resolves to ``UnrecognizedMethod`` and is never interpreted.
"""

import base64
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field

from chain_adapter.near.models import FungibleTokenMetadata
from multisig_engine.amounts import format_amount, format_near


class ArgumentDecodeError(ValueError):
    """Raised when function-call arguments do not match the method schema."""


class KnownMethod(Enum):
    ADD_FULL_ACCESS_KEY = "add_full_access_key"
    TRANSFER = "transfer"
    UNSTAKE = "unstake"
    WITHDRAW_FROM_STAKING_POOL = "withdraw_from_staking_pool"
    DEPOSIT_AND_STAKE = "deposit_and_stake"
    DEPOSIT_TO_STAKING_POOL = "deposit_to_staking_pool"
    SELECT_STAKING_POOL = "select_staking_pool"
    UNSELECT_STAKING_POOL = "unselect_staking_pool"
    REFRESH_STAKING_POOL_BALANCE = "refresh_staking_pool_balance"
    WITHDRAW_ALL_FROM_STAKING_POOL = "withdraw_all_from_staking_pool"
    UNSTAKE_ALL = "unstake_all"
    CHECK_TRANSFERS_VOTE = "check_transfers_vote"
    TERMINATE_VESTING = "terminate_vesting"
    TERMINATION_PREPARE_TO_WITHDRAW = "termination_prepare_to_withdraw"
    TERMINATION_WITHDRAW = "termination_withdraw"
    FT_TRANSFER = "ft_transfer"
    FT_TRANSFER_CALL = "ft_transfer_call"
    STORAGE_DEPOSIT = "storage_deposit"


@dataclass(frozen=True)
class UnrecognizedMethod:
    name: str


MethodRef = Union[KnownMethod, UnrecognizedMethod]

TOKEN_METHODS = frozenset({KnownMethod.FT_TRANSFER, KnownMethod.FT_TRANSFER_CALL})


def resolve_method(name: str) -> MethodRef:
    try:
        return KnownMethod(name)
    except ValueError:
        return UnrecognizedMethod(name=name)


@dataclass(frozen=True)
class MethodContext:
    """Accounts involved in a call plus a token metadata lookup."""

    contract_id: str
    from_account: str
    token_metadata: Callable[[str], FungibleTokenMetadata]


class _Args(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class NoArgs(_Args):
    pass


class AddFullAccessKeyArgs(_Args):
    new_public_key: str


class AmountArgs(_Args):
    amount: int = Field(ge=0)


class LockupTransferArgs(AmountArgs):
    receiver_id: str


class SelectStakingPoolArgs(_Args):
    staking_pool_account_id: str


class TerminateVestingArgs(_Args):
    vesting_schedule_with_salt: Optional[Dict[str, Any]] = None


class TerminationWithdrawArgs(_Args):
    receiver_id: str


class FtTransferArgs(_Args):
    receiver_id: str
    amount: int = Field(ge=0)
    memo: Optional[str] = None


class FtTransferCallArgs(FtTransferArgs):
    msg: str


class StorageDepositArgs(_Args):
    account_id: Optional[str] = None
    registration_only: Optional[bool] = None


def _add_full_access_key(args: AddFullAccessKeyArgs, context: MethodContext) -> str:
    return f"Adds a new full access key: {args.new_public_key}."


def _transfer(args: LockupTransferArgs, context: MethodContext) -> str:
    return (
        f"Transfers {format_near(args.amount)} from {context.contract_id} "
        f"to {args.receiver_id}."
    )


def _unstake(args: AmountArgs, context: MethodContext) -> str:
    return f"Unstakes {format_near(args.amount)}."


def _withdraw_from_staking_pool(args: AmountArgs, context: MethodContext) -> str:
    return f"Withdraws {format_near(args.amount)} from the staking pool."


def _deposit_and_stake(args: AmountArgs, context: MethodContext) -> str:
    return f"Deposits and stakes {format_near(args.amount)}."


def _deposit_to_staking_pool(args: AmountArgs, context: MethodContext) -> str:
    return f"Deposits {format_near(args.amount)} to the staking pool without staking."


def _select_staking_pool(args: SelectStakingPoolArgs, context: MethodContext) -> str:
    return f"Selects staking pool with account ID: {args.staking_pool_account_id}."


def _unselect_staking_pool(args: NoArgs, context: MethodContext) -> str:
    return "Unselects the currently selected staking pool."


def _refresh_staking_pool_balance(args: NoArgs, context: MethodContext) -> str:
    return "Refreshes the balance of the selected staking pool."


def _withdraw_all_from_staking_pool(args: NoArgs, context: MethodContext) -> str:
    return "Withdraws all funds from the selected staking pool."


def _unstake_all(args: NoArgs, context: MethodContext) -> str:
    return "Unstakes all tokens."


def _check_transfers_vote(args: NoArgs, context: MethodContext) -> str:
    return (
        'Checks the vote on transfers. If the voting contract returns "yes", '
        'transfers will be enabled. If the vote is "no", transfers will remain disabled.'
    )


def _terminate_vesting(args: TerminateVestingArgs, context: MethodContext) -> str:
    text = f"Terminates the vesting schedule of the lockup {context.contract_id}."
    if args.vesting_schedule_with_salt is not None:
        text += " The hashed schedule is revealed with its salt."
    return text


def _termination_prepare_to_withdraw(args: NoArgs, context: MethodContext) -> str:
    return (
        f"Prepares the terminated lockup {context.contract_id} for withdrawal "
        "by unstaking and withdrawing its funds from the staking pool."
    )


def _termination_withdraw(args: TerminationWithdrawArgs, context: MethodContext) -> str:
    return (
        f"Withdraws the unvested funds of the terminated lockup {context.contract_id} "
        f"to {args.receiver_id}."
    )


def _token_amount(amount: int, context: MethodContext) -> str:
    metadata = context.token_metadata(context.contract_id)
    return f"{format_amount(amount, metadata.decimals)} {metadata.symbol}"


def _ft_transfer(args: FtTransferArgs, context: MethodContext) -> str:
    return (
        f"Transfers {_token_amount(args.amount, context)} to {args.receiver_id}. "
        f"Memo: {args.memo or 'None'}."
    )


def _ft_transfer_call(args: FtTransferCallArgs, context: MethodContext) -> str:
    return (
        f"Transfers {_token_amount(args.amount, context)} from {context.from_account} "
        f"to {args.receiver_id}, and makes a contract call. "
        f"Memo: {args.memo or 'None'}, Message: {args.msg}"
    )


def _storage_deposit(args: StorageDepositArgs, context: MethodContext) -> str:
    account = args.account_id or context.from_account
    text = f"Registers storage for {account} on {context.contract_id}."
    if args.registration_only:
        text += " Any deposit beyond the minimum is refunded."
    return text


CATALOGUE: Dict[KnownMethod, Tuple[Type[_Args], Callable[[Any, MethodContext], str]]] = {
    KnownMethod.ADD_FULL_ACCESS_KEY: (AddFullAccessKeyArgs, _add_full_access_key),
    KnownMethod.TRANSFER: (LockupTransferArgs, _transfer),
    KnownMethod.UNSTAKE: (AmountArgs, _unstake),
    KnownMethod.WITHDRAW_FROM_STAKING_POOL: (AmountArgs, _withdraw_from_staking_pool),
    KnownMethod.DEPOSIT_AND_STAKE: (AmountArgs, _deposit_and_stake),
    KnownMethod.DEPOSIT_TO_STAKING_POOL: (AmountArgs, _deposit_to_staking_pool),
    KnownMethod.SELECT_STAKING_POOL: (SelectStakingPoolArgs, _select_staking_pool),
    KnownMethod.UNSELECT_STAKING_POOL: (NoArgs, _unselect_staking_pool),
    KnownMethod.REFRESH_STAKING_POOL_BALANCE: (NoArgs, _refresh_staking_pool_balance),
    KnownMethod.WITHDRAW_ALL_FROM_STAKING_POOL: (NoArgs, _withdraw_all_from_staking_pool),
    KnownMethod.UNSTAKE_ALL: (NoArgs, _unstake_all),
    KnownMethod.CHECK_TRANSFERS_VOTE: (NoArgs, _check_transfers_vote),
    KnownMethod.TERMINATE_VESTING: (TerminateVestingArgs, _terminate_vesting),
    KnownMethod.TERMINATION_PREPARE_TO_WITHDRAW: (NoArgs, _termination_prepare_to_withdraw),
    KnownMethod.TERMINATION_WITHDRAW: (TerminationWithdrawArgs, _termination_withdraw),
    KnownMethod.FT_TRANSFER: (FtTransferArgs, _ft_transfer),
    KnownMethod.FT_TRANSFER_CALL: (FtTransferCallArgs, _ft_transfer_call),
    KnownMethod.STORAGE_DEPOSIT: (StorageDepositArgs, _storage_deposit),
}


def decode_method_args(method: KnownMethod, encoded_args: str) -> _Args:
    """Decode base64 JSON arguments and validate them against the method schema."""

    schema = CATALOGUE[method][0]
    if not encoded_args:
        document: Any = {}
    else:
        try:
            raw = base64.b64decode(encoded_args.encode("ascii"), validate=True)
            document = json.loads(raw.decode("utf-8"))
        except ValueError as exc:
            raise ArgumentDecodeError(f"Arguments of {method.value} are not base64 JSON.") from exc
    if not isinstance(document, dict):
        raise ArgumentDecodeError(f"Arguments of {method.value} must be a JSON object.")
    try:
        return schema.model_validate(document)
    except ValueError as exc:
        raise ArgumentDecodeError(f"Arguments of {method.value} are invalid: {exc}") from exc


def describe_method(method: KnownMethod, args: _Args, context: MethodContext) -> str:
    return CATALOGUE[method][1](args, context)
