# medscan/application/history.py
from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from medscan.domain.models import ScanHistoryEntry
from medscan.domain.ports import RecentScansPort, ScanHistoryPort

log = logging.getLogger("medscan.history")

DEFAULT_RECENT_CAP = 50


class ScanHistoryRecorder:
    """
    Append-only scan history, keyed by user.

    record() is best-effort: it never raises. Identification has already
    succeeded by the time it runs, so a store outage only costs a history row.
    Callers ignore its return value.
    """

    def __init__(
        self,
        store: ScanHistoryPort,
        *,
        recent: Optional[RecentScansPort] = None,
        timeout_ms: int = 2000,
        recent_cap: int = DEFAULT_RECENT_CAP,
    ) -> None:
        self.store = store
        self.recent = recent
        self.timeout_s = timeout_ms / 1000.0
        self.recent_cap = recent_cap

    async def record(self, entry: ScanHistoryEntry) -> None:
        try:
            entry_id = await asyncio.wait_for(self.store.create_scan_history_entry(entry), self.timeout_s)
            entry = entry.model_copy(update={"id": entry_id})
        except asyncio.TimeoutError:
            log.warning("scan history write timed out user=%s", entry.user_id)
            return
        except Exception:
            log.exception("failed to save scan history user=%s", entry.user_id)
            return

        if self.recent is None:
            return
        try:
            await asyncio.wait_for(self.recent.push(entry.user_id, entry, cap=self.recent_cap), self.timeout_s)
        except asyncio.TimeoutError:
            log.warning("recent scans push timed out user=%s", entry.user_id)
        except Exception:
            log.exception("failed to push recent scan user=%s", entry.user_id)

    async def list_recent(self, user_id: str, limit: int = DEFAULT_RECENT_CAP) -> List[ScanHistoryEntry]:
        """Newest first. Served from the capped cache when it has anything."""
        limit = max(1, limit)
        if self.recent is not None and limit <= self.recent_cap:
            try:
                cached = await self.recent.latest(user_id, limit)
                if cached:
                    return cached
            except Exception as e:
                log.warning("recent scans cache read failed user=%s: %s", user_id, e)
        return await self.store.list_by_user(user_id, limit=limit)
