# medscan/infra/repo/mongo_repo.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ASCENDING, DESCENDING

from medscan.domain.models import ScanHistoryEntry
from medscan.domain.ports import ScanHistoryPort

COLL_NAME = "scan_history"


class MongoScanHistoryRepo(ScanHistoryPort):
    """
    Async repository for the `scan_history` collection.

    One insert_one per identification; documents are never updated, so
    concurrent writers cannot clobber each other. No unique index on the
    timestamp: two scans in the same millisecond are both kept.
    """

    def __init__(
        self,
        uri: str = "mongodb://localhost:27017",
        db_name: str = "medscan",
        *,
        client: Optional[AsyncIOMotorClient] = None,
    ) -> None:
        self.client = client or AsyncIOMotorClient(uri)
        self.db = self.client[db_name]
        self.coll: AsyncIOMotorCollection = self.db[COLL_NAME]

    # ──────────────────────────────────────────────────────────────
    #  Indexing
    # ──────────────────────────────────────────────────────────────
    async def ensure_indexes(self) -> None:
        await self.coll.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])

    async def ping(self) -> bool:
        res = await self.db.command("ping")
        return bool(res.get("ok"))

    # ──────────────────────────────────────────────────────────────
    #  Writes / reads
    # ──────────────────────────────────────────────────────────────
    async def create_scan_history_entry(self, entry: ScanHistoryEntry) -> str:
        doc = entry.model_dump(exclude={"id"}, mode="python")
        doc["status"] = entry.status.value
        res = await self.coll.insert_one(doc)
        return str(res.inserted_id)

    async def list_by_user(self, user_id: str, limit: int = 50) -> List[ScanHistoryEntry]:
        cursor = (
            self.coll.find({"user_id": user_id})
            .sort([("created_at", DESCENDING), ("_id", DESCENDING)])
            .limit(limit)
        )
        return [self._to_entry(doc) async for doc in cursor]

    @staticmethod
    def _to_entry(doc: Dict[str, Any]) -> ScanHistoryEntry:
        doc = dict(doc)
        doc["id"] = str(doc.pop("_id"))
        return ScanHistoryEntry.model_validate(doc)
