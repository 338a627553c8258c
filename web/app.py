"""Local-only FastAPI shell that previews consolidation plans."""

from __future__ import annotations

from typing import Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from consolidation_engine.validation import PlanValidationError
from execution_adapter.ethereum.adapter import LedgerQueryError, Web3LedgerAdapter
from execution_adapter.ethereum.simulator import SimulationError
from execution_controller.controller import ExecutionBlockedError
from operator_cli.report import report_to_dict
from operator_cli.runner import build_pipeline, load_ledger
from operator_cli.settings import ConsolidationSettings
from wallet_core.keys import KeyDerivationError

app = FastAPI(title="Wallet Consolidator", description="Local-only plan preview")

_ADAPTER_FACTORY: Callable[[str, str], Web3LedgerAdapter] = Web3LedgerAdapter.connect


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


for _exc_class in (
    ExecutionBlockedError,
    KeyDerivationError,
    LedgerQueryError,
    PlanValidationError,
    SimulationError,
    ValidationError,
    ValueError,
):
    app.add_exception_handler(_exc_class, _handle_errors)


@app.get("/api/status")
async def status():
    return {"status": "ok", "mode": "SIMULATE"}


@app.post("/api/plan")
def preview_plan(payload: ConsolidationSettings):
    settings = payload.model_copy(update={"simulate": True})
    adapter = _ADAPTER_FACTORY(settings.node_url, settings.destination_address)
    ledger, gas_price = load_ledger(settings, adapter)
    report = build_pipeline(settings, adapter).run(ledger, gas_price)
    return report_to_dict(report)


def _set_adapter_factory(factory: Callable[[str, str], Web3LedgerAdapter]) -> None:
    global _ADAPTER_FACTORY
    _ADAPTER_FACTORY = factory


def _reset_state() -> None:
    _set_adapter_factory(Web3LedgerAdapter.connect)
