"""Local-first FastAPI shell over the multisig treasury core."""

from __future__ import annotations

import base64
import binascii
from typing import Any, Dict, List, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from chain_adapter.near.config import ConfigError, NetworkConfig, load_network_config
from chain_adapter.near.models import ChainError, ChainQuery
from chain_adapter.near.rpc import JsonRpcClient
from chain_adapter.near.simulator import DryRunSubmitter
from explainer.engine import ExplanationEngine
from lockup_state.decoder import decode_account_state
from lockup_state.models import LockupLayout
from lockup_state.reader import DecodeError, EncodeError
from lockup_state.schedule import format_vesting_schedule
from multisig_engine.builder import PreconditionError, build_delete_request, build_request
from multisig_engine.models import ActionFormatError, MultisigRequest, action_from_dict
from multisig_engine.views import MultisigViewer
from request_sequencer.flows import PlannedStep, burrow_supply_steps, ref_deposit_steps, run_flow

app = FastAPI(title="Multisig Treasury", description="Local-first multisig shell")

_STATE: Dict[str, Any] = {"config": None, "chain": None}


class DecodeStateRequest(BaseModel):
    account_id: Optional[str] = None
    state_base64: Optional[str] = None
    staking_pool_id_as_u128: bool = True
    vesting_hash_length_prefixed: bool = False


class ExplainActionRequest(BaseModel):
    action: dict
    to: str
    from_account: str


class ExplainRequestRequest(BaseModel):
    request: dict
    from_account: str


class BuildRequestRequest(BaseModel):
    multisig_account: str
    receiver_id: str
    actions: List[dict]
    gas: Optional[int] = None


class DeleteRequestRequest(BaseModel):
    multisig_account: str
    request_id: int


class RefDepositRequest(BaseModel):
    multisig_account: str
    pool_id: int
    token_ids: List[str]
    amounts: List[int]
    min_amounts: Optional[List[int]] = None
    dry_run: bool = False


class BurrowSupplyRequest(BaseModel):
    multisig_account: str
    token_id: str
    amount: str
    dry_run: bool = False


@app.middleware("http")
async def _local_only(request: Request, call_next):
    client = request.client
    if client is not None:
        host = client.host
        if host not in {"127.0.0.1", "::1", "testclient"}:
            return JSONResponse({"error": "Remote access disabled."}, status_code=403)
    return await call_next(request)


async def _handle_errors(request: Request, exc: Exception):
    return JSONResponse({"error": str(exc)}, status_code=400)


async def _handle_chain_errors(request: Request, exc: Exception):
    return JSONResponse({"error": str(exc)}, status_code=502)


for _exc_class in (
    ActionFormatError,
    ConfigError,
    DecodeError,
    EncodeError,
    PreconditionError,
    ValueError,
    KeyError,
):
    app.add_exception_handler(_exc_class, _handle_errors)
app.add_exception_handler(ChainError, _handle_chain_errors)


@app.get("/api/status")
async def status():
    config = _get_config()
    return {"network_id": config.network_id, "rpc_url": config.rpc_url}


@app.post("/api/state/decode")
def decode_state(payload: DecodeStateRequest):
    if payload.state_base64 is not None:
        try:
            data = base64.b64decode(payload.state_base64, validate=True)
        except binascii.Error as exc:
            raise ValueError("state_base64 is not valid base64.") from exc
    elif payload.account_id:
        data = _get_chain().query_state(payload.account_id)
    else:
        raise ValueError("Provide account_id or state_base64.")

    layout = LockupLayout(
        staking_pool_id_as_u128=payload.staking_pool_id_as_u128,
        vesting_hash_length_prefixed=payload.vesting_hash_length_prefixed,
    )
    state = decode_account_state(data, layout)
    return {
        "state": state.to_dict(),
        "vesting_schedule": format_vesting_schedule(state.vesting),
    }


@app.post("/api/explain")
def explain_action(payload: ExplainActionRequest):
    action = action_from_dict(payload.action)
    explanation = ExplanationEngine(_get_chain()).explain(action, payload.to, payload.from_account)
    return explanation.to_dict()


@app.post("/api/explain/request")
def explain_request(payload: ExplainRequestRequest):
    request = MultisigRequest.from_dict(payload.request)
    explanations = ExplanationEngine(_get_chain()).explain_request(request, payload.from_account)
    return {"explanations": [item.to_dict() for item in explanations]}


@app.get("/api/multisig/{account_id}/requests")
def pending_requests(account_id: str):
    chain = _get_chain()
    engine = ExplanationEngine(chain)
    items = []
    for pending in MultisigViewer(chain, account_id).list_pending_requests():
        explanations = engine.explain_request(pending.request, account_id)
        items.append(
            {
                "request_id": pending.request_id,
                "status": pending.status.value,
                "receiver_id": pending.request.receiver_id,
                "confirmations": list(pending.confirmations),
                "num_confirmations": pending.num_confirmations,
                "explanations": [item.to_dict() for item in explanations],
            }
        )
    return {"requests": items}


@app.post("/api/requests/build")
async def build_multisig_request(payload: BuildRequestRequest):
    actions = [action_from_dict(item) for item in payload.actions]
    if payload.gas is None:
        transaction = build_request(payload.multisig_account, payload.receiver_id, actions)
    else:
        transaction = build_request(
            payload.multisig_account, payload.receiver_id, actions, payload.gas
        )
    return transaction.to_dict()


@app.post("/api/requests/delete")
async def delete_multisig_request(payload: DeleteRequestRequest):
    return build_delete_request(payload.multisig_account, payload.request_id).to_dict()


@app.post("/api/flows/ref-deposit")
async def plan_ref_deposit(payload: RefDepositRequest):
    planned = ref_deposit_steps(
        _get_config(),
        payload.multisig_account,
        payload.pool_id,
        payload.token_ids,
        payload.amounts,
        payload.min_amounts,
    )
    return _flow_response(planned, payload.dry_run)


@app.post("/api/flows/burrow-supply")
def plan_burrow_supply(payload: BurrowSupplyRequest):
    planned = burrow_supply_steps(
        _get_chain(),
        _get_config(),
        payload.multisig_account,
        payload.token_id,
        payload.amount,
    )
    return _flow_response(planned, payload.dry_run)


def _flow_response(planned: Tuple[PlannedStep, ...], dry_run: bool) -> dict:
    response: Dict[str, Any] = {
        "steps": [
            {"label": step.label, "transaction": step.transaction.to_dict()} for step in planned
        ]
    }
    if dry_run:
        response["dry_run"] = run_flow(planned, DryRunSubmitter()).to_dict()
    return response


def _get_config() -> NetworkConfig:
    if _STATE["config"] is None:
        _STATE["config"] = load_network_config()
    return _STATE["config"]


def _get_chain() -> ChainQuery:
    if _STATE["chain"] is None:
        _STATE["chain"] = JsonRpcClient(_get_config())
    return _STATE["chain"]


def _set_chain(chain: ChainQuery, config: NetworkConfig) -> None:
    _STATE["chain"] = chain
    _STATE["config"] = config


def _reset_state() -> None:
    _STATE["chain"] = None
    _STATE["config"] = None
