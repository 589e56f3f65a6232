"""
workflow_engine.py — Sequential Workflow Interpreter
======================================================
Runs a workflow's blocks strictly in array order against injected
capability providers and returns an execution summary.

Per block:
  executor raises            → error outcome, run stops (fail-fast)
  result reports a failure   → error outcome, result NOT stored;
                               stops only if the executor says so
                               (conditional always stops)
  otherwise                  → success outcome, result stored under block id
  conditional with result≠true → run stops, recorded as a halt, not an error

The engine is single-flight: a second execute_workflow() while one is in
flight raises WorkflowAlreadyRunningError instead of interleaving.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from block_executors import get_executor, run_block
from capability_registry import Capabilities
from execution_context import ExecutionContext
from preview_cache import PreviewCache
from workflow_errors import WorkflowAlreadyRunningError
from workflow_validator import validate_workflow

logger = logging.getLogger("workflow_engine")


def is_reported_failure(result: Any) -> bool:
    if not isinstance(result, dict):
        return False
    return (
        result.get("success") is False
        or result.get("status") == "failed"
        or bool(result.get("error"))
    )


def _reported_message(result: dict) -> str:
    error = result.get("error")
    if error:
        return str(error)
    return f"{result.get('type', 'Block')} reported a failure"


class WorkflowEngine:
    """
    One engine instance = one run at a time.

    Capabilities (chains, AI, email, indexer) and the optional preview
    side-channel are injected; the engine owns no global state.
    """

    def __init__(self, capabilities: Optional[Capabilities] = None,
                 preview_cache: Optional[PreviewCache] = None):
        self.capabilities = capabilities or Capabilities()
        self.preview_cache = preview_cache
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def validate_workflow(self, workflow: dict) -> dict:
        return validate_workflow(workflow)

    async def execute_workflow(self, workflow: dict, user_wallets: Optional[dict] = None,
                               owner: Optional[str] = None) -> dict:
        if self._running:
            raise WorkflowAlreadyRunningError()
        self._running = True
        context = None
        try:
            context = ExecutionContext(
                workflow_id=str(workflow.get("id") or ""),
                workflow_name=str(workflow.get("name") or ""),
                user_wallets=user_wallets,
                owner=owner,
            )
            return await self._run(workflow, context)
        finally:
            self._running = False
            del context

    # ─── Internals ──────────────────────────────────────────────────

    def _publish_preview(self, context: ExecutionContext, block_id: str, payload: dict) -> None:
        if self.preview_cache is not None:
            self.preview_cache.publish(context.owner, context.workflow_id, block_id, payload)

    async def _run(self, workflow: dict, context: ExecutionContext) -> dict:
        blocks = workflow.get("blocks") or []
        outcomes: list[dict] = []
        halted_at = None

        logger.info("🚀 Workflow %s (%s) started — %d blocks",
                    context.workflow_id, context.workflow_name, len(blocks))

        for index, block in enumerate(blocks):
            if not isinstance(block, dict):
                block = {}
            block_id = str(block.get("id") or f"block_{index + 1}")
            block_type = block.get("type")
            outcome = {
                "blockId": block_id,
                "blockName": block.get("name") or block_type,
                "blockType": block_type,
            }

            logger.info("▶️ Workflow %s block %d: %s (%s)",
                        context.workflow_id, index + 1, outcome["blockName"], block_type)

            try:
                executor = get_executor(block_type)
                result = await run_block(block, context, self.capabilities)
            except Exception as e:
                message = str(e) or e.__class__.__name__
                outcomes.append({**outcome, "status": "error", "error": message,
                                 "executionTime": context.elapsed_ms()})
                context.record_error(block_id, message)
                self._publish_preview(context, block_id, {"status": "error", "error": message})
                logger.error("⛔ Workflow %s halted at block %d (%s): %s",
                             context.workflow_id, index + 1, block_id, message)
                break

            if is_reported_failure(result):
                message = _reported_message(result)
                outcomes.append({**outcome, "status": "error", "error": message,
                                 "executionTime": context.elapsed_ms()})
                context.record_error(block_id, message)
                self._publish_preview(context, block_id, {"status": "error", "error": message, "result": result})
                if executor.halts_on_reported_failure or block_type == "conditional":
                    logger.warning("⛔ Workflow %s halted at block %d (%s) — reported failure: %s",
                                   context.workflow_id, index + 1, block_id, message)
                    break
                logger.warning("⚠️ Block %s reported a failure, continuing: %s", block_id, message)
                continue

            context.record_result(block_id, result)
            outcomes.append({**outcome, "status": "success", "result": result,
                             "executionTime": context.elapsed_ms()})
            self._publish_preview(context, block_id, {"status": "success", "result": result})

            if block_type == "conditional" and result.get("result") is not True:
                halted_at = block_id
                logger.info("⏭️ Condition failed at block %d (%s), skipping remaining blocks",
                            index + 1, block_id)
                break

        successful = sum(1 for o in outcomes if o["status"] == "success")
        failed = len(outcomes) - successful
        status = "partial_success" if context.errors else "success"
        summary = {
            "workflowId": context.workflow_id,
            "workflowName": context.workflow_name,
            "status": status,
            "totalBlocks": len(blocks),
            "successfulBlocks": successful,
            "failedBlocks": failed,
            "totalExecutionTime": context.elapsed_ms(),
            "results": outcomes,
            "errors": list(context.errors),
            "haltedAt": halted_at,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        logger.info("🏁 Workflow %s finished: %s (%d ok / %d failed of %d) in %d ms",
                    context.workflow_id, status, successful, failed,
                    len(blocks), summary["totalExecutionTime"])
        return summary
