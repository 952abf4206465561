"""Turn multisig actions into human-readable explanations."""

import logging
from typing import Callable, Dict, Iterable, Mapping, Optional, Set, Tuple

from chain_adapter.near.models import ChainError, ChainQuery, FungibleTokenMetadata
from chain_adapter.near.tokens import TokenMetadataResolver
from multisig_engine.amounts import format_amount, format_gas, format_near
from multisig_engine.models import (
    Action,
    ActionType,
    AddKeyAction,
    AddMemberAction,
    CreateAccountAction,
    DeleteKeyAction,
    DeleteMemberAction,
    DeployContractAction,
    FtEscrowTransferAction,
    FunctionCallAction,
    MultisigMember,
    MultisigRequest,
    NearEscrowTransferAction,
    SetActiveRequestsLimitAction,
    SetNumConfirmationsAction,
    TransferAction,
    UnknownAction,
)

from .methods import (
    TOKEN_METHODS,
    KnownMethod,
    MethodContext,
    UnrecognizedMethod,
    decode_method_args,
    describe_method,
    resolve_method,
)
from .models import Explanation

logger = logging.getLogger(__name__)

TokenLookup = Mapping[str, FungibleTokenMetadata]


def generic_function_call_description(action: FunctionCallAction) -> str:
    return (
        f"The deposit for this function call is: {format_near(action.deposit)} "
        f"and the gas limit is: {format_gas(action.gas)} TGas."
    )


def _member_text(member: MultisigMember) -> str:
    if member.public_key is not None:
        return f"the public key: {member.public_key}"
    return f"the account ID: {member.account_id or ''}"


def _cancellable_text(is_cancellable: bool) -> str:
    return "Transaction is cancellable." if is_cancellable else "Transaction is not cancellable."


class ExplanationEngine:
    """Explains actions using only the injected chain query capability.

    ``explain`` never raises for well-formed actions: unknown action types,
    unknown methods and failed metadata lookups all produce a generic but
    truthful description.
    """

    def __init__(
        self,
        chain: ChainQuery,
        resolver: Optional[TokenMetadataResolver] = None,
    ) -> None:
        self._chain = chain
        self._resolver = resolver or TokenMetadataResolver(chain)
        self._handlers: Dict[ActionType, Callable[..., Explanation]] = {
            ActionType.CREATE_ACCOUNT: self._create_account,
            ActionType.DEPLOY_CONTRACT: self._deploy_contract,
            ActionType.ADD_MEMBER: self._add_member,
            ActionType.DELETE_MEMBER: self._delete_member,
            ActionType.ADD_KEY: self._add_key,
            ActionType.DELETE_KEY: self._delete_key,
            ActionType.SET_NUM_CONFIRMATIONS: self._set_num_confirmations,
            ActionType.SET_ACTIVE_REQUESTS_LIMIT: self._set_active_requests_limit,
            ActionType.TRANSFER: self._transfer,
            ActionType.NEAR_ESCROW_TRANSFER: self._near_escrow_transfer,
            ActionType.FT_ESCROW_TRANSFER: self._ft_escrow_transfer,
            ActionType.FUNCTION_CALL: self._function_call,
        }

    def explain(self, action: Action, to: str, from_: str) -> Explanation:
        return self._explain(action, to, from_, {})

    def explain_request(self, request: MultisigRequest, from_: str) -> Tuple[Explanation, ...]:
        """Explain every action of a request, prefetching token metadata concurrently."""

        tokens = self._tokens_needed(request.receiver_id, request.actions)
        known = self._resolver.fetch_many(tokens)
        return tuple(
            self._explain(action, request.receiver_id, from_, known)
            for action in request.actions
        )

    def _explain(self, action: Action, to: str, from_: str, known: TokenLookup) -> Explanation:
        if isinstance(action, UnknownAction):
            type_name = action.type_name or "(missing)"
            return Explanation(
                full_description=(
                    f"Unrecognized action of type: {type_name}. "
                    "Review the raw request before confirming."
                ),
                short_description="Unrecognized Action",
            )
        return self._handlers[action.action_type](action, to, from_, known)

    def _tokens_needed(self, receiver_id: str, actions: Iterable[Action]) -> Set[str]:
        tokens = set()
        for action in actions:
            if isinstance(action, FtEscrowTransferAction):
                tokens.add(action.token_id)
            elif isinstance(action, FunctionCallAction):
                if resolve_method(action.method_name) in TOKEN_METHODS:
                    tokens.add(receiver_id)
        return tokens

    def _token_metadata(self, token_id: str, known: TokenLookup) -> FungibleTokenMetadata:
        metadata = known.get(token_id)
        if metadata is not None:
            return metadata
        return self._resolver.fetch(token_id)

    def _create_account(
        self, action: CreateAccountAction, to: str, from_: str, known: TokenLookup
    ) -> Explanation:
        return Explanation(
            "Creates a new account on behalf of the multisig contract.",
            "Create Account",
        )

    def _deploy_contract(
        self, action: DeployContractAction, to: str, from_: str, known: TokenLookup
    ) -> Explanation:
        return Explanation(
            f"Deploys a contract to {from_} with the provided code.",
            "Deploy Contract",
        )

    def _add_member(
        self, action: AddMemberAction, to: str, from_: str, known: TokenLookup
    ) -> Explanation:
        return Explanation(
            f"Adds a new member with {_member_text(action.member)} to {from_} multisig contract.",
            "Add Member",
        )

    def _delete_member(
        self, action: DeleteMemberAction, to: str, from_: str, known: TokenLookup
    ) -> Explanation:
        return Explanation(
            f"Removes a member with {_member_text(action.member)} from {from_}.",
            "Delete Member",
        )

    def _add_key(
        self, action: AddKeyAction, to: str, from_: str, known: TokenLookup
    ) -> Explanation:
        return Explanation(
            f"Adds a new key with the public key: {action.public_key} to {from_} multisig contract.",
            "Add Key",
        )

    def _delete_key(
        self, action: DeleteKeyAction, to: str, from_: str, known: TokenLookup
    ) -> Explanation:
        return Explanation(
            f"Deletes a key with the public key: {action.public_key} from {from_} multisig contract.",
            "Delete Key",
        )

    def _set_num_confirmations(
        self, action: SetNumConfirmationsAction, to: str, from_: str, known: TokenLookup
    ) -> Explanation:
        return Explanation(
            "Sets the number of confirmations required for a multisig request to: "
            f"{action.num_confirmations}.",
            "Set Confirmations",
        )

    def _set_active_requests_limit(
        self, action: SetActiveRequestsLimitAction, to: str, from_: str, known: TokenLookup
    ) -> Explanation:
        return Explanation(
            "Sets the limit for active (unconfirmed) requests to: "
            f"{action.active_requests_limit}.",
            "Set Request Limit",
        )

    def _transfer(
        self, action: TransferAction, to: str, from_: str, known: TokenLookup
    ) -> Explanation:
        amount = format_near(action.amount)
        return Explanation(
            f"Transfers {amount} from {from_} to {to}.",
            f"Transfer {amount} to {to}",
        )

    def _near_escrow_transfer(
        self, action: NearEscrowTransferAction, to: str, from_: str, known: TokenLookup
    ) -> Explanation:
        amount = format_near(action.amount)
        return Explanation(
            f"Transfers {amount} from {from_} to the receiver: {action.receiver_id} "
            f"with the label: {action.label}. {_cancellable_text(action.is_cancellable)}",
            f"Escrow Transfer {amount} to {action.receiver_id}",
        )

    def _ft_escrow_transfer(
        self, action: FtEscrowTransferAction, to: str, from_: str, known: TokenLookup
    ) -> Explanation:
        try:
            metadata = self._token_metadata(action.token_id, known)
            amount = f"{format_amount(action.amount, metadata.decimals)} {metadata.symbol}"
        except (ChainError, ValueError, KeyError) as exc:
            logger.warning("Metadata for %s unavailable, showing raw units: %s", action.token_id, exc)
            amount = f"{action.amount} indivisible units"
        return Explanation(
            f"Transfers {amount} of the token: {action.token_id} from {from_} "
            f"to the receiver: {action.receiver_id} with the label: {action.label}. "
            f"{_cancellable_text(action.is_cancellable)}",
            f"FT Escrow Transfer {amount} to {action.receiver_id}",
        )

    def _function_call(
        self, action: FunctionCallAction, to: str, from_: str, known: TokenLookup
    ) -> Explanation:
        generic = generic_function_call_description(action)
        method = resolve_method(action.method_name)
        if isinstance(method, UnrecognizedMethod):
            logger.debug("No explainer for method %s on %s", method.name, to)
            return Explanation(generic, generic)

        context = MethodContext(
            contract_id=to,
            from_account=from_,
            token_metadata=lambda token_id: self._token_metadata(token_id, known),
        )
        try:
            detail = self._describe(method, action, context)
        except (ChainError, ValueError, KeyError) as exc:
            logger.warning(
                "Explaining %s on %s fell back to the generic description: %s",
                action.method_name,
                to,
                exc,
            )
            return Explanation(generic, generic)
        description = f"{detail} {generic}"
        return Explanation(description, description)

    def _describe(
        self, method: KnownMethod, action: FunctionCallAction, context: MethodContext
    ) -> str:
        args = decode_method_args(method, action.args)
        return describe_method(method, args, context)
