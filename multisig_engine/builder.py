"""Build function-call actions and wrap them as governed multisig requests."""

import base64
import json
import re
from typing import Dict, Iterable, Sequence, Tuple

from .gas import ADD_REQUEST_GAS, CONFIRM_GAS, DELETE_REQUEST_GAS, MAX_TRANSACTION_GAS
from .models import Action, FunctionCallAction, SignableTransaction, UnknownAction


class PreconditionError(ValueError):
    """Raised when a request would be invalid before reaching the network."""


ADD_REQUEST_METHOD = "add_request"

_ACCOUNT_ID_PATTERN = re.compile(r"^(([a-z\d]+[-_])*[a-z\d]+\.)*([a-z\d]+[-_])*[a-z\d]+$")


def validate_account_id(account_id: str) -> str:
    if not account_id:
        raise PreconditionError("Account id must be non-empty.")
    if len(account_id) > 64 or not _ACCOUNT_ID_PATTERN.match(account_id):
        raise PreconditionError(f"Invalid account id: {account_id}")
    return account_id


def encode_args(args: Dict[str, object]) -> str:
    document = json.dumps(args, separators=(",", ":"))
    return base64.b64encode(document.encode("utf-8")).decode("ascii")


def build_function_call_action(
    method: str, args: Dict[str, object], deposit: int, gas: int
) -> FunctionCallAction:
    if not method:
        raise PreconditionError("Method name must be non-empty.")
    if deposit < 0:
        raise PreconditionError("Deposit must be non-negative.")
    if gas <= 0:
        raise PreconditionError("Gas must be positive.")
    if gas > MAX_TRANSACTION_GAS:
        raise PreconditionError(
            f"Gas {gas} for {method} exceeds the transaction ceiling {MAX_TRANSACTION_GAS}."
        )
    return FunctionCallAction(
        method_name=method,
        args=encode_args(args),
        deposit=deposit,
        gas=gas,
    )


def wrap_as_multisig_request(
    target_account: str,
    inner_actions: Sequence[Action],
    gas: int = ADD_REQUEST_GAS,
) -> FunctionCallAction:
    """Wrap inner actions as exactly one ``add_request`` call."""

    validate_account_id(target_account)
    actions = tuple(inner_actions)
    if not actions:
        raise PreconditionError("A request must carry at least one action.")
    if any(isinstance(action, UnknownAction) for action in actions):
        raise PreconditionError("Unrecognised actions cannot be proposed.")

    inner_gas = _inner_gas(actions)
    if inner_gas >= gas:
        raise PreconditionError(
            f"Request gas {gas} does not cover inner actions needing {inner_gas}."
        )

    request = {
        "request": {
            "receiver_id": target_account,
            "actions": [action.to_dict() for action in actions],
        }
    }
    return build_function_call_action(ADD_REQUEST_METHOD, request, 0, gas)


def build_request(
    multisig_account: str,
    target_account: str,
    inner_actions: Sequence[Action],
    gas: int = ADD_REQUEST_GAS,
) -> SignableTransaction:
    validate_account_id(multisig_account)
    outer = wrap_as_multisig_request(target_account, inner_actions, gas)
    return SignableTransaction(
        signer_id=multisig_account,
        receiver_id=multisig_account,
        actions=(outer,),
    )


def build_confirm_request(multisig_account: str, request_id: int) -> SignableTransaction:
    return _direct_call(multisig_account, "confirm", request_id, CONFIRM_GAS)


def build_delete_request(multisig_account: str, request_id: int) -> SignableTransaction:
    return _direct_call(multisig_account, "delete_request", request_id, DELETE_REQUEST_GAS)


def _direct_call(
    multisig_account: str, method: str, request_id: int, gas: int
) -> SignableTransaction:
    validate_account_id(multisig_account)
    if request_id < 0:
        raise PreconditionError("Request id must be non-negative.")
    action = build_function_call_action(method, {"request_id": request_id}, 0, gas)
    return SignableTransaction(
        signer_id=multisig_account,
        receiver_id=multisig_account,
        actions=(action,),
    )


def _inner_gas(actions: Iterable[Action]) -> int:
    return sum(action.gas for action in actions if isinstance(action, FunctionCallAction))


def request_targets(transactions: Iterable[SignableTransaction]) -> Tuple[str, ...]:
    """Receiver of the governed request inside each transaction."""

    targets = []
    for transaction in transactions:
        outer = transaction.actions[0]
        if outer.method_name != ADD_REQUEST_METHOD:
            targets.append(transaction.receiver_id)
            continue
        document = json.loads(outer.args_bytes.decode("utf-8"))
        targets.append(document["request"]["receiver_id"])
    return tuple(targets)
