"""
Unit tests for interval scheduling of stored workflows
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

import workflow_scheduler
import workflow_store
from workflow_errors import ConfigurationError, WorkflowAlreadyRunningError
from workflow_scheduler import (
    cancel_scheduled_workflow,
    job_id_for,
    list_scheduled,
    schedule_registry,
    schedule_settings,
    schedule_workflow,
    scheduler,
)


def cron_workflow(workflow_id="wf_1", **cron):
    return {
        "id": workflow_id,
        "name": "Every minute",
        "blocks": [
            {"id": "cron", "type": "cronjob", "config": cron},
            {"id": "b1", "type": "walletBalance", "config": {"walletAddress": "0xabc", "chain": "Sui"}},
        ],
    }


@pytest.fixture(autouse=True)
def clean_registry():
    yield
    for entry in list(schedule_registry.values()):
        cancel_scheduled_workflow(entry["owner"], entry["workflowId"])


@pytest_asyncio.fixture
async def store(tmp_path, monkeypatch):
    monkeypatch.setattr(workflow_store, "DB_PATH", str(tmp_path / "workflows.db"))
    await workflow_store.init_store()
    return workflow_store


def fake_engine(summary=None, error=None):
    engine = MagicMock()
    engine.execute_workflow = AsyncMock(return_value=summary, side_effect=error)
    return engine


RUN_SUMMARY = {
    "workflowId": "wf_1", "workflowName": "Every minute", "status": "success",
    "totalBlocks": 2, "successfulBlocks": 2, "failedBlocks": 0, "totalExecutionTime": 5,
    "results": [], "errors": [], "haltedAt": None, "timestamp": "2026-01-01T00:00:00+00:00",
}


def test_schedule_settings_from_cronjob_block():
    assert schedule_settings(cron_workflow(interval=60, maxRuns=3)) == {
        "interval": 60, "enabled": True, "maxRuns": 3,
    }


def test_schedule_settings_overrides_and_defaults():
    settings = schedule_settings({"blocks": []}, interval=1, max_runs=2)
    assert settings == {"interval": 5, "enabled": True, "maxRuns": 2}


def test_schedule_registers_interval_job():
    entry = schedule_workflow(fake_engine(), "0xABC", cron_workflow(interval=30))

    job_id = job_id_for("0xabc", "wf_1")
    assert entry["jobId"] == job_id == "0xabc:wf_1"
    assert entry["interval"] == 30
    assert entry["runs"] == 0
    job = scheduler.get_job(job_id)
    assert job is not None
    assert job.trigger.interval.total_seconds() == 30
    assert list_scheduled("0xabc") == [entry]
    assert list_scheduled("0xdef") == []


def test_rescheduling_replaces_the_job():
    schedule_workflow(fake_engine(), None, cron_workflow(interval=30))
    schedule_workflow(fake_engine(), None, cron_workflow(interval=90))
    assert len(list_scheduled()) == 1
    assert scheduler.get_job("anonymous:wf_1").trigger.interval.total_seconds() == 90


def test_overflowing_interval_cannot_be_scheduled():
    with pytest.raises(ConfigurationError, match="finite"):
        schedule_workflow(fake_engine(), None, cron_workflow(interval="1e400"))
    assert list_scheduled() == []


def test_explicit_interval_overrides_the_block():
    settings = schedule_settings(cron_workflow(interval="1e400"), interval=45)
    assert settings["interval"] == 45


def test_disabled_cronjob_cannot_be_scheduled():
    with pytest.raises(ConfigurationError, match="disabled"):
        schedule_workflow(fake_engine(), None, cron_workflow(enabled=False))
    assert list_scheduled() == []


def test_cancel():
    schedule_workflow(fake_engine(), None, cron_workflow())
    assert cancel_scheduled_workflow(None, "wf_1") is True
    assert scheduler.get_job("anonymous:wf_1") is None
    assert cancel_scheduled_workflow(None, "wf_1") is False


@pytest.mark.asyncio
async def test_tick_runs_and_records(store):
    await store.upsert_workflow(None, cron_workflow(maxRuns=2))
    engine = fake_engine(RUN_SUMMARY)
    schedule_workflow(engine, None, cron_workflow(maxRuns=2), user_wallets={"Sui": "handle"})
    job_id = job_id_for(None, "wf_1")

    await workflow_scheduler._scheduled_run(job_id, engine, "anonymous", "wf_1", {"Sui": "handle"})

    assert engine.execute_workflow.await_args.args[1] == {"Sui": "handle"}
    assert schedule_registry[job_id]["runs"] == 1
    assert schedule_registry[job_id]["lastStatus"] == "success"
    assert (await store.get_workflow(None, "wf_1"))["totalRuns"] == 1

    await workflow_scheduler._scheduled_run(job_id, engine, "anonymous", "wf_1", {})
    assert job_id not in schedule_registry
    assert scheduler.get_job(job_id) is None


@pytest.mark.asyncio
async def test_busy_engine_skips_tick(store):
    await store.upsert_workflow(None, cron_workflow())
    engine = fake_engine(error=WorkflowAlreadyRunningError())
    schedule_workflow(engine, None, cron_workflow())
    job_id = job_id_for(None, "wf_1")

    await workflow_scheduler._scheduled_run(job_id, engine, "anonymous", "wf_1", {})

    assert schedule_registry[job_id]["skipped"] == 1
    assert schedule_registry[job_id]["runs"] == 0


@pytest.mark.asyncio
async def test_deleted_workflow_cancels_schedule(store):
    engine = fake_engine(RUN_SUMMARY)
    schedule_workflow(engine, None, cron_workflow())
    job_id = job_id_for(None, "wf_1")

    await workflow_scheduler._scheduled_run(job_id, engine, "anonymous", "wf_1", {})

    engine.execute_workflow.assert_not_awaited()
    assert job_id not in schedule_registry
