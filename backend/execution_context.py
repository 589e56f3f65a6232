"""
execution_context.py — Per-Run Execution State
================================================
One ExecutionContext lives for exactly one executeWorkflow call. It
accumulates block results (in execution order), errors, and holds the
connected-wallet handles for the run. It is never persisted.
"""

import time
from datetime import datetime, timezone
from typing import Any, Optional


class ExecutionContext:
    """
    Accumulated state of a single workflow run.

    Tracks:
    - results keyed by block id, in insertion (= execution) order
    - errors as {blockId, error} dicts
    - user wallet handles keyed by chain name (read-only)
    - the owner the run belongs to, if any (scopes previews)
    - WORKFLOW constants exposed to templates
    """

    def __init__(self, workflow_id: str, workflow_name: str = "",
                 user_wallets: Optional[dict] = None, owner: Optional[str] = None):
        self.workflow_id = workflow_id
        self.owner = owner
        self.workflow_name = workflow_name
        self.started_at = datetime.now(timezone.utc).isoformat()
        self._t0 = time.monotonic()
        self.results: dict[str, dict] = {}
        self.errors: list[dict] = []
        self.user_wallets: dict[str, Any] = dict(user_wallets or {})

    @property
    def workflow_constants(self) -> dict:
        return {"id": self.workflow_id, "name": self.workflow_name}

    def elapsed_ms(self) -> int:
        """Milliseconds since the run started."""
        return int((time.monotonic() - self._t0) * 1000)

    def record_result(self, block_id: str, result: dict) -> None:
        # Re-inserting must move the key to the end so "previous" stays correct
        self.results.pop(block_id, None)
        self.results[block_id] = result

    def record_error(self, block_id: str, message: str) -> None:
        self.errors.append({"blockId": block_id, "error": message})

    def last_result(self) -> Optional[dict]:
        if not self.results:
            return None
        return self.results[next(reversed(self.results))]

    def results_of_type(self, result_type: str) -> list[dict]:
        return [r for r in self.results.values()
                if isinstance(r, dict) and r.get("type") == result_type]
