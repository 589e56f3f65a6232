"""
workflow_store.py — SQLite Persistence for Workflows + Run History
====================================================================
Workflows are partitioned by owner: the lower-cased connected wallet
address, or "anonymous". The full workflow document is stored as JSON;
name/status/timestamps are duplicated into columns for listing.

record_execution() turns an engine ExecutionSummary into a condensed
history entry and refreshes the run statistics on the workflow.
"""

import json
import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Optional

import aiosqlite
from dotenv import load_dotenv

from workflow_models import ExecutionHistoryEntry, Workflow

load_dotenv()
logger = logging.getLogger("workflow_store")

DB_PATH = os.getenv("WORKFLOWS_DB_PATH", "workflows.db")
HISTORY_LIMIT = int(os.getenv("HISTORY_LIMIT", "50"))
ANONYMOUS = "anonymous"
RUN_STATS = ("executionHistory", "totalRuns", "successRate", "lastRun", "lastAIAnalysis")


def normalize_owner(owner: Optional[str]) -> str:
    owner = (owner or "").strip().lower()
    return owner or ANONYMOUS


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ═══════════════════════════════════════════════════════════════════
#  DATABASE SCHEMA
# ═══════════════════════════════════════════════════════════════════

async def init_store():
    """Create the workflows table if it doesn't exist."""
    async with aiosqlite.connect(DB_PATH) as db:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS workflows (
                owner       TEXT NOT NULL,
                id          TEXT NOT NULL,
                name        TEXT NOT NULL,
                status      TEXT DEFAULT 'draft',
                data        TEXT NOT NULL DEFAULT '{}',
                created_at  TEXT,
                updated_at  TEXT,
                PRIMARY KEY (owner, id)
            )
        """)
        await db.commit()
    logger.info("✅ Workflow store initialized (%s)", DB_PATH)


# ═══════════════════════════════════════════════════════════════════
#  WORKFLOW CRUD
# ═══════════════════════════════════════════════════════════════════

async def _write(db, owner: str, workflow: dict):
    await db.execute(
        """INSERT INTO workflows (owner, id, name, status, data, created_at, updated_at)
           VALUES (?, ?, ?, ?, ?, ?, ?)
           ON CONFLICT(owner, id) DO UPDATE SET
             name = excluded.name, status = excluded.status,
             data = excluded.data, updated_at = excluded.updated_at""",
        (owner, workflow["id"], workflow["name"], workflow["status"],
         json.dumps(workflow, default=str), workflow["createdAt"], workflow["updatedAt"]),
    )


async def upsert_workflow(owner: Optional[str], workflow: dict) -> dict:
    """Insert or replace a workflow. Missing fields get their defaults."""
    owner = normalize_owner(owner)
    parsed = Workflow.model_validate(workflow)
    doc = parsed.model_dump()
    doc["id"] = doc.get("id") or f"wf_{uuid.uuid4().hex[:10]}"

    existing = await get_workflow(owner, doc["id"])
    # The builder saves without run statistics; keep the stored ones
    for key in RUN_STATS:
        if existing and key not in parsed.model_fields_set:
            doc[key] = existing.get(key, doc[key])
    now = _now()
    doc["createdAt"] = (existing or {}).get("createdAt") or doc.get("createdAt") or now
    doc["updatedAt"] = now

    async with aiosqlite.connect(DB_PATH) as db:
        await _write(db, owner, doc)
        await db.commit()

    logger.info("💾 Workflow %s %s (%s) for %s",
                doc["id"], "updated" if existing else "created", doc["name"], owner)
    return doc


async def get_workflow(owner: Optional[str], workflow_id: str) -> Optional[dict]:
    async with aiosqlite.connect(DB_PATH) as db:
        db.row_factory = aiosqlite.Row
        cursor = await db.execute(
            "SELECT data FROM workflows WHERE owner = ? AND id = ?",
            (normalize_owner(owner), workflow_id),
        )
        row = await cursor.fetchone()
    return json.loads(row["data"]) if row else None


async def list_workflows(owner: Optional[str]) -> list:
    """All workflows for an owner, most recently updated first."""
    async with aiosqlite.connect(DB_PATH) as db:
        db.row_factory = aiosqlite.Row
        cursor = await db.execute(
            "SELECT data FROM workflows WHERE owner = ? ORDER BY updated_at DESC",
            (normalize_owner(owner),),
        )
        rows = await cursor.fetchall()
    return [json.loads(r["data"]) for r in rows]


async def delete_workflow(owner: Optional[str], workflow_id: str) -> bool:
    async with aiosqlite.connect(DB_PATH) as db:
        cursor = await db.execute(
            "DELETE FROM workflows WHERE owner = ? AND id = ?",
            (normalize_owner(owner), workflow_id),
        )
        await db.commit()
        return cursor.rowcount > 0


# ═══════════════════════════════════════════════════════════════════
#  EXECUTION HISTORY
# ═══════════════════════════════════════════════════════════════════

def condense_summary(summary: dict) -> dict:
    entry = ExecutionHistoryEntry(
        timestamp=summary.get("timestamp") or _now(),
        status=summary.get("status", "success"),
        duration=summary.get("totalExecutionTime", 0),
        successfulBlocks=summary.get("successfulBlocks", 0),
        failedBlocks=summary.get("failedBlocks", 0),
        result=summary,
    )
    return entry.model_dump()


def latest_ai_analysis(summary: dict) -> Optional[dict]:
    for outcome in reversed(summary.get("results") or []):
        result = outcome.get("result") or {}
        if outcome.get("status") == "success" and result.get("type") == "ai_explanation":
            return result.get("response")
    return None


async def record_execution(owner: Optional[str], workflow_id: str, summary: dict) -> Optional[dict]:
    """Append a run to the workflow's history and refresh its statistics."""
    owner = normalize_owner(owner)
    workflow = await get_workflow(owner, workflow_id)
    if workflow is None:
        logger.warning("Cannot record run for unknown workflow %s (%s)", workflow_id, owner)
        return None

    history = [condense_summary(summary)] + list(workflow.get("executionHistory") or [])
    history = history[:HISTORY_LIMIT]
    succeeded = sum(1 for h in history if h.get("status") == "success")

    workflow["executionHistory"] = history
    workflow["totalRuns"] = int(workflow.get("totalRuns") or 0) + 1
    workflow["successRate"] = round(succeeded / len(history) * 100, 1)
    workflow["lastRun"] = history[0]["timestamp"]
    analysis = latest_ai_analysis(summary)
    if analysis is not None:
        workflow["lastAIAnalysis"] = analysis
    workflow["updatedAt"] = _now()

    async with aiosqlite.connect(DB_PATH) as db:
        await _write(db, owner, workflow)
        await db.commit()

    logger.info("📝 Run recorded for %s: %s (%d total runs, %.1f%% success)",
                workflow_id, history[0]["status"], workflow["totalRuns"], workflow["successRate"])
    return workflow
