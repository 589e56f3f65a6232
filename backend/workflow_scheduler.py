"""
workflow_scheduler.py — Interval Re-runs of Stored Workflows (APScheduler)
============================================================================
The cronjob block only describes a schedule; this module owns it.

  schedule_workflow(engine, owner, workflow)  → interval job every N seconds
  cancel_scheduled_workflow(owner, id)        → drop the job
  list_scheduled(owner=None)                  → registry view for the UI

Each tick reloads the workflow from the store, runs it on the shared engine
and records the execution. A tick that finds the engine busy is skipped.
After `maxRuns` recorded runs the job removes itself.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler

import workflow_store
from block_executors import cron_settings, get_executor
from workflow_engine import WorkflowEngine
from workflow_errors import ConfigurationError, WorkflowAlreadyRunningError

logger = logging.getLogger("workflow_scheduler")

scheduler = AsyncIOScheduler(
    jobstores={"default": MemoryJobStore()},
    job_defaults={"coalesce": True, "max_instances": 1},
)

# job id → schedule metadata (used by the frontend schedule view)
schedule_registry: dict[str, dict] = {}


def job_id_for(owner: Optional[str], workflow_id: str) -> str:
    return f"{workflow_store.normalize_owner(owner)}:{workflow_id}"


def schedule_settings(workflow: dict, interval: Optional[int] = None,
                      max_runs: Optional[int] = None) -> dict:
    """Settings from the first cronjob block, with explicit overrides on top."""
    config = {}
    for block in workflow.get("blocks") or []:
        if isinstance(block, dict) and block.get("type") == "cronjob":
            config = dict(block.get("config") or {})
            break
    if interval is not None:
        config.pop("interval", None)
    if max_runs is not None:
        config.pop("maxRuns", None)
    errors = get_executor("cronjob").validation_errors(config)
    if errors:
        raise ConfigurationError(errors[0], field="interval")

    if interval is not None:
        config["interval"] = interval
    if max_runs is not None:
        config["maxRuns"] = max_runs
    return cron_settings(config)


async def _scheduled_run(job_id: str, engine: WorkflowEngine, owner: str,
                         workflow_id: str, user_wallets: dict):
    entry = schedule_registry.get(job_id)
    if entry is None:
        return

    workflow = await workflow_store.get_workflow(owner, workflow_id)
    if workflow is None:
        logger.warning("Scheduled workflow %s no longer exists — cancelling", workflow_id)
        cancel_scheduled_workflow(owner, workflow_id)
        return

    logger.info("⏰ Scheduled run fired  job=%s  run=%d", job_id, entry["runs"] + 1)
    try:
        summary = await engine.execute_workflow(workflow, user_wallets, owner=owner)
    except WorkflowAlreadyRunningError:
        entry["skipped"] += 1
        logger.info("⏭️ Engine busy, skipping tick for %s", job_id)
        return

    await workflow_store.record_execution(owner, workflow_id, summary)
    entry["runs"] += 1
    entry["lastRun"] = summary["timestamp"]
    entry["lastStatus"] = summary["status"]

    if entry["maxRuns"] and entry["runs"] >= entry["maxRuns"]:
        logger.info("🏁 %s reached maxRuns=%d — unscheduling", job_id, entry["maxRuns"])
        cancel_scheduled_workflow(owner, workflow_id)


def schedule_workflow(engine: WorkflowEngine, owner: Optional[str], workflow: dict,
                      user_wallets: Optional[dict] = None,
                      interval: Optional[int] = None,
                      max_runs: Optional[int] = None) -> dict:
    """Register (or replace) the interval job for a stored workflow."""
    settings = schedule_settings(workflow, interval, max_runs)
    if not settings["enabled"]:
        raise ConfigurationError("Cronjob is disabled for this workflow", field="enabled")

    owner = workflow_store.normalize_owner(owner)
    job_id = job_id_for(owner, workflow["id"])
    entry = {
        "jobId": job_id,
        "owner": owner,
        "workflowId": workflow["id"],
        "workflowName": workflow.get("name", ""),
        "interval": settings["interval"],
        "maxRuns": settings["maxRuns"],
        "runs": 0,
        "skipped": 0,
        "lastRun": None,
        "lastStatus": None,
        "scheduledAt": datetime.now(timezone.utc).isoformat(),
    }
    schedule_registry[job_id] = entry

    # Jobs added before start() sit in a pending list that replace_existing does not dedupe
    if scheduler.get_job(job_id) is not None:
        scheduler.remove_job(job_id)
    scheduler.add_job(
        _scheduled_run,
        trigger="interval",
        seconds=settings["interval"],
        id=job_id,
        kwargs={
            "job_id": job_id,
            "engine": engine,
            "owner": owner,
            "workflow_id": workflow["id"],
            "user_wallets": dict(user_wallets or {}),
        },
        replace_existing=True,
    )

    logger.info("📅 Workflow scheduled  job=%s  every %ds  maxRuns=%s",
                job_id, settings["interval"], settings["maxRuns"] or "∞")
    return entry


def cancel_scheduled_workflow(owner: Optional[str], workflow_id: str) -> bool:
    job_id = job_id_for(owner, workflow_id)
    entry = schedule_registry.pop(job_id, None)
    if scheduler.get_job(job_id) is not None:
        scheduler.remove_job(job_id)
    if entry is not None:
        logger.info("🗑️ Schedule cancelled  job=%s", job_id)
    return entry is not None


def list_scheduled(owner: Optional[str] = None) -> list[dict]:
    if owner is None:
        return list(schedule_registry.values())
    owner = workflow_store.normalize_owner(owner)
    return [e for e in schedule_registry.values() if e["owner"] == owner]


def start_scheduler():
    """Start the APScheduler if not already running."""
    if not scheduler.running:
        scheduler.start()
        logger.info("🚀 APScheduler started.")
    else:
        logger.info("APScheduler already running.")


def shutdown_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("APScheduler stopped.")
