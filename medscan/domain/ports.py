# medscan/domain/ports.py
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from medscan.domain.models import ScanHistoryEntry


class OcrPort(ABC):
    @abstractmethod
    async def extract(self, img: bytes) -> str: ...


class ProviderPort(ABC):
    """Remote identification service. Returns the provider body: {medication, confidence?}."""
    @abstractmethod
    async def identify(self, image_data: str, ocr_text: Optional[str]) -> Dict[str, Any]: ...

    def missing_settings(self) -> List[str]:
        """Names of required settings that are unset; empty when usable."""
        return []


class ScanHistoryPort(ABC):
    @abstractmethod
    async def create_scan_history_entry(self, entry: ScanHistoryEntry) -> str: ...

    @abstractmethod
    async def list_by_user(self, user_id: str, limit: int = 50) -> List[ScanHistoryEntry]: ...

    async def ping(self) -> bool:
        return True


class RecentScansPort(ABC):
    """Capped per-user list of the latest scans for the UI."""
    @abstractmethod
    async def push(self, user_id: str, entry: ScanHistoryEntry, cap: int) -> None: ...

    @abstractmethod
    async def latest(self, user_id: str, limit: int) -> List[ScanHistoryEntry]: ...

    async def ping(self) -> bool:
        return True
