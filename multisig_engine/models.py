"""Domain models for governed multisig actions and requests."""

import base64
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union


class ActionFormatError(ValueError):
    """Raised when a recognised action is missing or mistypes a field."""


class ActionType(Enum):
    CREATE_ACCOUNT = "CreateAccount"
    DEPLOY_CONTRACT = "DeployContract"
    ADD_MEMBER = "AddMember"
    DELETE_MEMBER = "DeleteMember"
    ADD_KEY = "AddKey"
    DELETE_KEY = "DeleteKey"
    SET_NUM_CONFIRMATIONS = "SetNumConfirmations"
    SET_ACTIVE_REQUESTS_LIMIT = "SetActiveRequestsLimit"
    TRANSFER = "Transfer"
    NEAR_ESCROW_TRANSFER = "NearEscrowTransfer"
    FT_ESCROW_TRANSFER = "FTEscrowTransfer"
    FUNCTION_CALL = "FunctionCall"


class RequestStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"


@dataclass(frozen=True)
class MultisigMember:
    public_key: Optional[str] = None
    account_id: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        if self.public_key is not None:
            return {"public_key": self.public_key}
        return {"account_id": self.account_id or ""}

    @property
    def display(self) -> str:
        return self.public_key if self.public_key is not None else (self.account_id or "")

    @staticmethod
    def from_dict(data: Dict[str, str]) -> "MultisigMember":
        return MultisigMember(
            public_key=data.get("public_key"),
            account_id=data.get("account_id"),
        )


@dataclass(frozen=True)
class CreateAccountAction:
    action_type = ActionType.CREATE_ACCOUNT

    def to_dict(self) -> Dict[str, object]:
        return {"type": self.action_type.value}


@dataclass(frozen=True)
class DeployContractAction:
    code: str
    action_type = ActionType.DEPLOY_CONTRACT

    def to_dict(self) -> Dict[str, object]:
        return {"type": self.action_type.value, "code": self.code}


@dataclass(frozen=True)
class AddMemberAction:
    member: MultisigMember
    action_type = ActionType.ADD_MEMBER

    def to_dict(self) -> Dict[str, object]:
        return {"type": self.action_type.value, "member": self.member.to_dict()}


@dataclass(frozen=True)
class DeleteMemberAction:
    member: MultisigMember
    action_type = ActionType.DELETE_MEMBER

    def to_dict(self) -> Dict[str, object]:
        return {"type": self.action_type.value, "member": self.member.to_dict()}


@dataclass(frozen=True)
class AddKeyAction:
    public_key: str
    permission: Optional[Dict[str, object]] = None
    action_type = ActionType.ADD_KEY

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "type": self.action_type.value,
            "public_key": self.public_key,
        }
        if self.permission is not None:
            payload["permission"] = self.permission
        return payload


@dataclass(frozen=True)
class DeleteKeyAction:
    public_key: str
    action_type = ActionType.DELETE_KEY

    def to_dict(self) -> Dict[str, object]:
        return {"type": self.action_type.value, "public_key": self.public_key}


@dataclass(frozen=True)
class SetNumConfirmationsAction:
    num_confirmations: int
    action_type = ActionType.SET_NUM_CONFIRMATIONS

    def to_dict(self) -> Dict[str, object]:
        return {
            "type": self.action_type.value,
            "num_confirmations": self.num_confirmations,
        }


@dataclass(frozen=True)
class SetActiveRequestsLimitAction:
    active_requests_limit: int
    action_type = ActionType.SET_ACTIVE_REQUESTS_LIMIT

    def to_dict(self) -> Dict[str, object]:
        return {
            "type": self.action_type.value,
            "active_requests_limit": self.active_requests_limit,
        }


@dataclass(frozen=True)
class TransferAction:
    amount: int
    action_type = ActionType.TRANSFER

    def to_dict(self) -> Dict[str, object]:
        return {"type": self.action_type.value, "amount": str(self.amount)}


@dataclass(frozen=True)
class NearEscrowTransferAction:
    receiver_id: str
    amount: int
    label: str
    is_cancellable: bool
    action_type = ActionType.NEAR_ESCROW_TRANSFER

    def to_dict(self) -> Dict[str, object]:
        return {
            "type": self.action_type.value,
            "receiver_id": self.receiver_id,
            "amount": str(self.amount),
            "label": self.label,
            "is_cancellable": self.is_cancellable,
        }


@dataclass(frozen=True)
class FtEscrowTransferAction:
    receiver_id: str
    token_id: str
    amount: int
    label: str
    is_cancellable: bool
    action_type = ActionType.FT_ESCROW_TRANSFER

    def to_dict(self) -> Dict[str, object]:
        return {
            "type": self.action_type.value,
            "receiver_id": self.receiver_id,
            "token_id": self.token_id,
            "amount": str(self.amount),
            "label": self.label,
            "is_cancellable": self.is_cancellable,
        }


@dataclass(frozen=True)
class FunctionCallAction:
    """``args`` holds the base64 encoding of the JSON argument document."""

    method_name: str
    args: str
    deposit: int
    gas: int
    action_type = ActionType.FUNCTION_CALL

    @property
    def args_bytes(self) -> bytes:
        return base64.b64decode(self.args.encode("ascii"), validate=True)

    def to_dict(self) -> Dict[str, object]:
        return {
            "type": self.action_type.value,
            "method_name": self.method_name,
            "args": self.args,
            "deposit": str(self.deposit),
            "gas": str(self.gas),
        }


@dataclass(frozen=True)
class UnknownAction:
    """An action whose wire ``type`` is outside the known set."""

    type_name: str
    payload: Tuple[Tuple[str, str], ...] = ()

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = dict(self.payload)
        data["type"] = self.type_name
        return data


Action = Union[
    CreateAccountAction,
    DeployContractAction,
    AddMemberAction,
    DeleteMemberAction,
    AddKeyAction,
    DeleteKeyAction,
    SetNumConfirmationsAction,
    SetActiveRequestsLimitAction,
    TransferAction,
    NearEscrowTransferAction,
    FtEscrowTransferAction,
    FunctionCallAction,
    UnknownAction,
]


def action_from_dict(data: Dict[str, object]) -> Action:
    """Parse one action from the multisig contract's JSON representation."""

    type_name = str(data.get("type", ""))
    try:
        action_type = ActionType(type_name)
    except ValueError:
        payload = tuple(
            sorted((str(key), str(value)) for key, value in data.items() if key != "type")
        )
        return UnknownAction(type_name=type_name, payload=payload)

    try:
        return _parse_known(action_type, data)
    except (KeyError, TypeError, ValueError) as exc:
        raise ActionFormatError(f"Malformed {type_name} action: {exc}") from exc


def _parse_known(action_type: ActionType, data: Dict[str, object]) -> Action:
    if action_type == ActionType.CREATE_ACCOUNT:
        return CreateAccountAction()
    if action_type == ActionType.DEPLOY_CONTRACT:
        return DeployContractAction(code=str(data["code"]))
    if action_type == ActionType.ADD_MEMBER:
        return AddMemberAction(member=MultisigMember.from_dict(data["member"]))
    if action_type == ActionType.DELETE_MEMBER:
        return DeleteMemberAction(member=MultisigMember.from_dict(data["member"]))
    if action_type == ActionType.ADD_KEY:
        return AddKeyAction(
            public_key=str(data["public_key"]),
            permission=data.get("permission"),
        )
    if action_type == ActionType.DELETE_KEY:
        return DeleteKeyAction(public_key=str(data["public_key"]))
    if action_type == ActionType.SET_NUM_CONFIRMATIONS:
        return SetNumConfirmationsAction(
            num_confirmations=_non_negative(data["num_confirmations"])
        )
    if action_type == ActionType.SET_ACTIVE_REQUESTS_LIMIT:
        return SetActiveRequestsLimitAction(
            active_requests_limit=_non_negative(data["active_requests_limit"])
        )
    if action_type == ActionType.TRANSFER:
        return TransferAction(amount=_non_negative(data["amount"]))
    if action_type == ActionType.NEAR_ESCROW_TRANSFER:
        return NearEscrowTransferAction(
            receiver_id=str(data["receiver_id"]),
            amount=_non_negative(data["amount"]),
            label=str(data.get("label", "")),
            is_cancellable=bool(data.get("is_cancellable", False)),
        )
    if action_type == ActionType.FT_ESCROW_TRANSFER:
        return FtEscrowTransferAction(
            receiver_id=str(data["receiver_id"]),
            token_id=str(data["token_id"]),
            amount=_non_negative(data["amount"]),
            label=str(data.get("label", "")),
            is_cancellable=bool(data.get("is_cancellable", False)),
        )
    return FunctionCallAction(
        method_name=str(data["method_name"]),
        args=str(data.get("args", "")),
        deposit=_non_negative(data.get("deposit", 0)),
        gas=_non_negative(data.get("gas", 0)),
    )


def _non_negative(value: object) -> int:
    if isinstance(value, bool):
        raise ValueError("expected an integer, got a boolean")
    number = int(value)
    if number < 0:
        raise ValueError(f"{value} is negative")
    return number


@dataclass(frozen=True)
class MultisigRequest:
    receiver_id: str
    actions: Tuple[Action, ...]

    def to_dict(self) -> Dict[str, object]:
        return {
            "receiver_id": self.receiver_id,
            "actions": [action.to_dict() for action in self.actions],
        }

    @staticmethod
    def from_dict(data: Dict[str, object]) -> "MultisigRequest":
        return MultisigRequest(
            receiver_id=str(data["receiver_id"]),
            actions=tuple(action_from_dict(item) for item in data.get("actions", [])),
        )


@dataclass(frozen=True)
class PendingRequest:
    request_id: int
    request: MultisigRequest
    confirmations: Tuple[str, ...]
    num_confirmations: int

    @property
    def status(self) -> RequestStatus:
        if len(self.confirmations) >= self.num_confirmations:
            return RequestStatus.CONFIRMED
        return RequestStatus.PENDING


@dataclass(frozen=True)
class SignableTransaction:
    """Outer transaction handed to an external signer."""

    signer_id: str
    receiver_id: str
    actions: Tuple[FunctionCallAction, ...]

    def to_dict(self) -> Dict[str, object]:
        return {
            "signer_id": self.signer_id,
            "receiver_id": self.receiver_id,
            "actions": [action.to_dict() for action in self.actions],
        }
