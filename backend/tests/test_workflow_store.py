"""
Unit tests for SQLite workflow persistence and run history
"""

import asyncio

import pytest
import pytest_asyncio

import workflow_store


@pytest_asyncio.fixture
async def store(tmp_path, monkeypatch):
    monkeypatch.setattr(workflow_store, "DB_PATH", str(tmp_path / "workflows.db"))
    await workflow_store.init_store()
    return workflow_store


WORKFLOW = {
    "name": "Daily Digest",
    "blocks": [{"id": "b1", "type": "walletBalance", "config": {"walletAddress": "0xabc", "chain": "Sui"}}],
}


def summary(status="success", results=None, timestamp="2026-01-01T00:00:00+00:00"):
    return {
        "workflowId": "wf_1", "workflowName": "Daily Digest", "status": status,
        "totalBlocks": 1, "successfulBlocks": 1 if status == "success" else 0,
        "failedBlocks": 0 if status == "success" else 1, "totalExecutionTime": 12,
        "results": results or [], "errors": [], "haltedAt": None, "timestamp": timestamp,
    }


def test_normalize_owner():
    assert workflow_store.normalize_owner("  0xABC ") == "0xabc"
    assert workflow_store.normalize_owner(None) == "anonymous"
    assert workflow_store.normalize_owner("") == "anonymous"


@pytest.mark.asyncio
async def test_create_assigns_id_and_defaults(store):
    doc = await store.upsert_workflow("0xABC", WORKFLOW)

    assert doc["id"].startswith("wf_")
    assert doc["status"] == "draft"
    assert doc["totalRuns"] == 0
    assert doc["createdAt"] == doc["updatedAt"]
    assert await store.get_workflow("0xabc", doc["id"]) == doc


@pytest.mark.asyncio
async def test_update_keeps_created_at_and_run_stats(store):
    created = await store.upsert_workflow(None, {**WORKFLOW, "id": "wf_1"})
    await store.record_execution(None, "wf_1", summary())

    updated = await store.upsert_workflow(None, {**WORKFLOW, "id": "wf_1", "name": "Renamed"})

    assert updated["name"] == "Renamed"
    assert updated["createdAt"] == created["createdAt"]
    assert updated["totalRuns"] == 1
    assert len(updated["executionHistory"]) == 1


@pytest.mark.asyncio
async def test_workflows_are_partitioned_by_owner(store):
    await store.upsert_workflow("0xaaa", {**WORKFLOW, "id": "wf_1"})
    assert await store.get_workflow("0xbbb", "wf_1") is None
    assert await store.list_workflows("0xbbb") == []
    assert [w["id"] for w in await store.list_workflows("0xAAA")] == ["wf_1"]


@pytest.mark.asyncio
async def test_list_is_most_recent_first(store):
    await store.upsert_workflow(None, {**WORKFLOW, "id": "wf_old"})
    await asyncio.sleep(0.01)
    await store.upsert_workflow(None, {**WORKFLOW, "id": "wf_new"})
    assert [w["id"] for w in await store.list_workflows(None)] == ["wf_new", "wf_old"]


@pytest.mark.asyncio
async def test_delete(store):
    await store.upsert_workflow(None, {**WORKFLOW, "id": "wf_1"})
    assert await store.delete_workflow(None, "wf_1") is True
    assert await store.delete_workflow(None, "wf_1") is False
    assert await store.get_workflow(None, "wf_1") is None


@pytest.mark.asyncio
async def test_record_execution_updates_statistics(store):
    await store.upsert_workflow(None, {**WORKFLOW, "id": "wf_1"})
    await store.record_execution(None, "wf_1", summary("success", timestamp="2026-01-01T00:00:00+00:00"))
    workflow = await store.record_execution(
        None, "wf_1", summary("partial_success", timestamp="2026-01-02T00:00:00+00:00"))

    assert workflow["totalRuns"] == 2
    assert workflow["successRate"] == 50.0
    assert workflow["lastRun"] == "2026-01-02T00:00:00+00:00"
    newest = workflow["executionHistory"][0]
    assert newest["status"] == "partial_success"
    assert newest["duration"] == 12
    assert newest["failedBlocks"] == 1


@pytest.mark.asyncio
async def test_history_is_capped(store, monkeypatch):
    monkeypatch.setattr(workflow_store, "HISTORY_LIMIT", 3)
    await store.upsert_workflow(None, {**WORKFLOW, "id": "wf_1"})
    for day in range(1, 6):
        workflow = await store.record_execution(
            None, "wf_1", summary(timestamp=f"2026-01-0{day}T00:00:00+00:00"))

    assert workflow["totalRuns"] == 5
    assert [h["timestamp"][:10] for h in workflow["executionHistory"]] == [
        "2026-01-05", "2026-01-04", "2026-01-03",
    ]


@pytest.mark.asyncio
async def test_latest_ai_analysis_is_kept(store):
    await store.upsert_workflow(None, {**WORKFLOW, "id": "wf_1"})
    ai_outcome = {"blockId": "ai", "status": "success",
                  "result": {"type": "ai_explanation", "response": {"explanation": "All good"}}}
    workflow = await store.record_execution(None, "wf_1", summary(results=[ai_outcome]))
    assert workflow["lastAIAnalysis"] == {"explanation": "All good"}


@pytest.mark.asyncio
async def test_record_execution_for_unknown_workflow(store):
    assert await store.record_execution(None, "wf_missing", summary()) is None
