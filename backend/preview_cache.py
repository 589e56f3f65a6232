"""
preview_cache.py — Last-Result Side-Channel for the Builder UI
================================================================
The builder shows each block's most recent output next to it. That
preview lives here, keyed by (owner, workflow id, block id), instead of
being written back into the workflow's Block dicts. Advisory only:
nothing in the engine reads it.
"""

from datetime import datetime, timezone
from typing import Optional

PreviewKey = tuple[str, str, str]


class PreviewCache:
    def __init__(self, max_entries: int = 500):
        self.max_entries = max_entries
        self._entries: dict[PreviewKey, dict] = {}

    @staticmethod
    def key(owner: Optional[str], workflow_id: str, block_id: str) -> PreviewKey:
        return (owner or "", workflow_id or "", block_id)

    def publish(self, owner: Optional[str], workflow_id: str, block_id: str, payload: dict) -> None:
        key = self.key(owner, workflow_id, block_id)
        self._entries.pop(key, None)
        self._entries[key] = {
            **payload,
            "updatedAt": datetime.now(timezone.utc).isoformat(),
        }
        # Oldest entries go first
        while len(self._entries) > self.max_entries:
            self._entries.pop(next(iter(self._entries)))

    def get(self, owner: Optional[str], workflow_id: str, block_id: str) -> Optional[dict]:
        return self._entries.get(self.key(owner, workflow_id, block_id))

    def clear(self, owner: Optional[str] = None, workflow_id: Optional[str] = None) -> None:
        """Drop every preview, or only those of one owner's workflow."""
        if workflow_id is None:
            self._entries.clear()
            return
        prefix = (owner or "", workflow_id)
        for key in [k for k in self._entries if k[:2] == prefix]:
            del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)
