# medscan/infra/repo/memory_repo.py
from __future__ import annotations

import asyncio
import uuid
from typing import List

from medscan.domain.models import ScanHistoryEntry
from medscan.domain.ports import ScanHistoryPort


class InMemoryScanHistoryRepo(ScanHistoryPort):
    """Process-local append-only log. Dev/test backend (HISTORY_BACKEND=memory)."""

    def __init__(self) -> None:
        self._entries: List[ScanHistoryEntry] = []
        self._lock = asyncio.Lock()

    async def create_scan_history_entry(self, entry: ScanHistoryEntry) -> str:
        entry_id = entry.id or uuid.uuid4().hex
        async with self._lock:
            self._entries.append(entry.model_copy(update={"id": entry_id}))
        return entry_id

    async def list_by_user(self, user_id: str, limit: int = 50) -> List[ScanHistoryEntry]:
        async with self._lock:
            mine = [(i, e) for i, e in enumerate(self._entries) if e.user_id == user_id]
        # newest first; equal timestamps fall back to insertion order
        mine.sort(key=lambda p: (p[1].created_at, p[0]), reverse=True)
        return [e for _, e in mine[:limit]]

    def __len__(self) -> int:
        return len(self._entries)
