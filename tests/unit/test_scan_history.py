import asyncio
import datetime as dt

from medscan.application.history import ScanHistoryRecorder
from medscan.domain.confidence import Status
from medscan.domain.models import ScanHistoryEntry
from medscan.domain.ports import ScanHistoryPort
from medscan.infra.repo.memory_repo import InMemoryScanHistoryRepo

T0 = dt.datetime(2026, 1, 1, tzinfo=dt.timezone.utc)


def _entry(user="u1", minute=0, conf=75.0, text=""):
    return ScanHistoryEntry(
        image_ref="blob:1", ocr_text=text, confidence=conf, status=Status.WARNING,
        user_id=user, created_at=T0 + dt.timedelta(minutes=minute),
    )


class SlowStore(ScanHistoryPort):
    def __init__(self):
        self.rows = []

    async def create_scan_history_entry(self, entry):
        await asyncio.sleep(1.0)
        self.rows.append(entry)
        return "late"

    async def list_by_user(self, user_id, limit=50):
        return list(self.rows)


def test_newest_first_and_per_user():
    async def go():
        repo = InMemoryScanHistoryRepo()
        rec = ScanHistoryRecorder(repo)
        await rec.record(_entry(minute=1, text="a"))
        await rec.record(_entry(minute=3, text="c"))
        await rec.record(_entry(minute=2, text="b"))
        await rec.record(_entry(user="u2", minute=9, text="other"))
        return await rec.list_recent("u1")

    assert [e.ocr_text for e in asyncio.run(go())] == ["c", "b", "a"]


def test_duplicate_timestamps_are_kept():
    async def go():
        repo = InMemoryScanHistoryRepo()
        rec = ScanHistoryRecorder(repo)
        await rec.record(_entry(text="first"))
        await rec.record(_entry(text="second"))
        return await rec.list_recent("u1")

    out = asyncio.run(go())
    assert [e.ocr_text for e in out] == ["second", "first"]
    assert out[0].id and out[1].id and out[0].id != out[1].id


def test_list_recent_respects_limit():
    async def go():
        rec = ScanHistoryRecorder(InMemoryScanHistoryRepo())
        for i in range(60):
            await rec.record(_entry(minute=i))
        return await rec.list_recent("u1"), await rec.list_recent("u1", limit=5)

    default, five = asyncio.run(go())
    assert len(default) == 50
    assert len(five) == 5


def test_concurrent_appends_are_all_stored():
    async def go():
        repo = InMemoryScanHistoryRepo()
        rec = ScanHistoryRecorder(repo)
        await asyncio.gather(*(rec.record(_entry(minute=i)) for i in range(25)))
        return repo

    assert len(asyncio.run(go())) == 25


def test_slow_store_times_out_without_raising():
    store = SlowStore()
    rec = ScanHistoryRecorder(store, timeout_ms=20)
    assert asyncio.run(rec.record(_entry())) is None
    assert store.rows == []
