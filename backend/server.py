"""
server.py — The FastAPI Router (Workflow Engine Backend)
==========================================================
Ties together: workflow_store, workflow_engine, workflow_scheduler and the
concrete capability providers (Algorand, Gemini, Resend, The Graph).

Endpoints (owner = X-Wallet-Address header, default "anonymous"):
  GET    /health
  GET    /workflows                 — list the owner's workflows
  POST   /workflows                 — create / update a workflow
  GET    /workflows/{id}            — fetch one
  DELETE /workflows/{id}            — delete (and unschedule)
  POST   /workflows/validate        — pre-flight structural check
  POST   /workflows/{id}/run        — execute now, record history
  POST   /workflows/{id}/schedule   — interval re-runs from the cronjob block
  DELETE /workflows/{id}/schedule   — stop re-runs
  GET    /schedules                 — the owner's scheduled workflows
  GET    /workflows/{id}/previews/{block_id} — last result of a block for the builder UI
  WS     /ws                        — live run feed
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Header, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

import workflow_store
from ai_explainer import GeminiExplainer
from algorand_wallet import AlgorandWalletProvider
from capability_registry import Capabilities, ChainRegistry
from email_relay import ResendEmailRelay
from graph_indexer import GraphIndexer
from preview_cache import PreviewCache
from workflow_engine import WorkflowEngine
from workflow_errors import ConfigurationError, WorkflowAlreadyRunningError
from workflow_models import RunWorkflowRequest, ScheduleWorkflowRequest, Workflow
from workflow_scheduler import (
    cancel_scheduled_workflow,
    list_scheduled,
    schedule_workflow,
    shutdown_scheduler,
    start_scheduler,
)
from workflow_validator import validate_workflow

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
)
logger = logging.getLogger("server")


class WatchOnlyWallet:
    """Wallet handle built from an address alone. It cannot sign."""

    def __init__(self, address: str):
        self.address = address

    def __repr__(self):
        return f"WatchOnlyWallet({self.address[:8]}…)"


def build_default_engine(preview_cache: Optional[PreviewCache] = None) -> WorkflowEngine:
    chains = ChainRegistry()
    chains.register("Algorand", AlgorandWalletProvider())
    capabilities = Capabilities(
        chains=chains,
        ai=GeminiExplainer(),
        email=ResendEmailRelay(),
        indexer=GraphIndexer(),
    )
    return WorkflowEngine(capabilities, preview_cache=preview_cache)


class ConnectionManager:
    """Manages active WebSocket connections for the live run feed."""

    def __init__(self):
        self.active: list[WebSocket] = []

    async def connect(self, ws: WebSocket):
        await ws.accept()
        self.active.append(ws)
        logger.info("🔌 WebSocket connected  (total: %d)", len(self.active))

    def disconnect(self, ws: WebSocket):
        if ws in self.active:
            self.active.remove(ws)
        logger.info("🔌 WebSocket disconnected  (total: %d)", len(self.active))

    async def broadcast(self, message: dict):
        dead: list[WebSocket] = []
        for ws in self.active:
            try:
                await ws.send_json(message)
            except Exception as e:
                logger.warning("Dropping WebSocket after send failure: %s", e)
                dead.append(ws)
        for ws in dead:
            self.active.remove(ws)


manager = ConnectionManager()
preview_cache = PreviewCache()
engine = build_default_engine(preview_cache)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("=" * 60)
    logger.info("  Workflow Engine Backend — Starting up")
    logger.info("=" * 60)
    await workflow_store.init_store()
    start_scheduler()
    yield
    shutdown_scheduler()
    logger.info("Workflow Engine Backend — Shutting down.")


app = FastAPI(
    title="DeFi Workflow Engine",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def _load_or_404(owner: Optional[str], workflow_id: str) -> dict:
    workflow = await workflow_store.get_workflow(owner, workflow_id)
    if workflow is None:
        raise HTTPException(status_code=404, detail=f"Workflow {workflow_id} not found")
    return workflow


def _wallet_handles(addresses: dict[str, str]) -> dict[str, WatchOnlyWallet]:
    return {chain: WatchOnlyWallet(address) for chain, address in addresses.items() if address}


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "service": "DeFi Workflow Engine",
        "version": "1.0.0",
        "chains": engine.capabilities.chains.chains,
        "running": engine.is_running,
    }


@app.get("/workflows", response_model=list)
async def list_workflows(x_wallet_address: Optional[str] = Header(default=None)):
    workflows = await workflow_store.list_workflows(x_wallet_address)
    logger.info("📥 GET /workflows — %d for %s", len(workflows),
                workflow_store.normalize_owner(x_wallet_address))
    return workflows


@app.post("/workflows", response_model=dict)
async def save_workflow(workflow: Workflow, x_wallet_address: Optional[str] = Header(default=None)):
    logger.info("📥 POST /workflows — '%s' (%d blocks)", workflow.name, len(workflow.blocks))
    return await workflow_store.upsert_workflow(x_wallet_address, workflow.model_dump(exclude_unset=True))


@app.post("/workflows/validate", response_model=dict)
async def validate(workflow: dict[str, Any]):
    return validate_workflow(workflow)


@app.get("/workflows/{workflow_id}", response_model=dict)
async def get_workflow(workflow_id: str, x_wallet_address: Optional[str] = Header(default=None)):
    return await _load_or_404(x_wallet_address, workflow_id)


@app.delete("/workflows/{workflow_id}", response_model=dict)
async def delete_workflow(workflow_id: str, x_wallet_address: Optional[str] = Header(default=None)):
    deleted = await workflow_store.delete_workflow(x_wallet_address, workflow_id)
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Workflow {workflow_id} not found")
    cancel_scheduled_workflow(x_wallet_address, workflow_id)
    preview_cache.clear(workflow_store.normalize_owner(x_wallet_address), workflow_id)
    return {"status": "deleted", "id": workflow_id}


@app.post("/workflows/{workflow_id}/run", response_model=dict)
async def run_workflow(workflow_id: str, req: Optional[RunWorkflowRequest] = None,
                       x_wallet_address: Optional[str] = Header(default=None)):
    """Validate, execute and record one run of a stored workflow."""
    req = req or RunWorkflowRequest()
    workflow = await _load_or_404(x_wallet_address, workflow_id)

    validation = validate_workflow(workflow)
    if not validation["isValid"]:
        raise HTTPException(status_code=422, detail=validation)

    logger.info("📥 POST /workflows/%s/run — %d blocks", workflow_id, len(workflow.get("blocks", [])))
    await manager.broadcast({"event": "run_started", "workflowId": workflow_id})
    try:
        summary = await engine.execute_workflow(
            workflow, _wallet_handles(req.userWallets),
            owner=workflow_store.normalize_owner(x_wallet_address),
        )
    except WorkflowAlreadyRunningError as e:
        raise HTTPException(status_code=409, detail=str(e))

    updated = await workflow_store.record_execution(x_wallet_address, workflow_id, summary)
    await manager.broadcast({
        "event": "run_finished",
        "workflowId": workflow_id,
        "status": summary["status"],
        "successfulBlocks": summary["successfulBlocks"],
        "failedBlocks": summary["failedBlocks"],
    })
    return {"summary": summary, "workflow": updated}


@app.post("/workflows/{workflow_id}/schedule", response_model=dict)
async def schedule(workflow_id: str, req: Optional[ScheduleWorkflowRequest] = None,
                   x_wallet_address: Optional[str] = Header(default=None)):
    req = req or ScheduleWorkflowRequest()
    workflow = await _load_or_404(x_wallet_address, workflow_id)
    try:
        entry = schedule_workflow(
            engine, x_wallet_address, workflow,
            user_wallets=_wallet_handles(req.userWallets),
            interval=req.interval, max_runs=req.maxRuns,
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "scheduled", "schedule": entry}


@app.delete("/workflows/{workflow_id}/schedule", response_model=dict)
async def unschedule(workflow_id: str, x_wallet_address: Optional[str] = Header(default=None)):
    return {"cancelled": cancel_scheduled_workflow(x_wallet_address, workflow_id)}


@app.get("/schedules", response_model=list)
async def schedules(x_wallet_address: Optional[str] = Header(default=None)):
    return list_scheduled(workflow_store.normalize_owner(x_wallet_address))


@app.get("/workflows/{workflow_id}/previews/{block_id}", response_model=dict)
async def block_preview(workflow_id: str, block_id: str,
                        x_wallet_address: Optional[str] = Header(default=None)):
    await _load_or_404(x_wallet_address, workflow_id)
    preview = preview_cache.get(workflow_store.normalize_owner(x_wallet_address), workflow_id, block_id)
    if preview is None:
        raise HTTPException(status_code=404, detail=f"No preview for block {block_id}")
    return preview


@app.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await manager.connect(ws)
    try:
        await ws.send_json({"event": "connected"})
        while True:
            data = await ws.receive_text()
            logger.info("WS received from client: %s", data[:100])
    except WebSocketDisconnect:
        manager.disconnect(ws)
    except Exception as e:
        logger.error("WebSocket error: %s", e)
        manager.disconnect(ws)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "server:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
