# medscan/infra/cache/redis_cache.py
import json
import logging
from typing import Any, List

import redis.asyncio as aioredis

from medscan.domain.models import ScanHistoryEntry
from medscan.domain.ports import RecentScansPort

log = logging.getLogger("medscan.cache")

DEFAULT_TTL = 2592000  # 30 days


class RedisCache:
    """
    Thin JSON layer over redis.asyncio.

        lpush_cap/lrange_json, ping
        from_url(url) → construct from REDIS_URL
    """
    def __init__(self, client: aioredis.Redis):
        self.r = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCache":
        return cls(aioredis.from_url(url, encoding="utf-8", decode_responses=True))

    async def ping(self) -> bool:
        return bool(await self.r.ping())

    # ------- List helpers -------
    async def lpush_cap(self, key: str, item: Any, cap: int = 50, ttl: int = DEFAULT_TTL):
        await self.r.lpush(key, json.dumps(item, ensure_ascii=False, default=str))
        # keep newest N entries (0..cap-1)
        await self.r.ltrim(key, 0, cap - 1)
        await self.r.expire(key, ttl)

    async def lrange_json(self, key: str, start: int = 0, end: int = 49) -> List[Any]:
        raw_items = await self.r.lrange(key, start, end)
        out: List[Any] = []
        for it in raw_items:
            try:
                out.append(json.loads(it))
            except ValueError:
                log.warning("skipping non-JSON entry in %s", key)
        return out


class RedisRecentScans(RecentScansPort):
    """Per-user `scans:{user_id}` list, newest at the head, capped."""

    def __init__(self, cache: RedisCache, ttl: int = DEFAULT_TTL):
        self.cache = cache
        self.ttl = ttl

    @staticmethod
    def key(user_id: str) -> str:
        return f"scans:{user_id}"

    async def ping(self) -> bool:
        return await self.cache.ping()

    async def push(self, user_id: str, entry: ScanHistoryEntry, cap: int) -> None:
        await self.cache.lpush_cap(self.key(user_id), entry.model_dump(mode="json"), cap=cap, ttl=self.ttl)

    async def latest(self, user_id: str, limit: int) -> List[ScanHistoryEntry]:
        items = await self.cache.lrange_json(self.key(user_id), 0, limit - 1)
        return [ScanHistoryEntry.model_validate(it) for it in items if isinstance(it, dict)]
