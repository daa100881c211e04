# medscan/container.py
import logging
from functools import lru_cache
from typing import Optional

from medscan.application.history import ScanHistoryRecorder
from medscan.application.identify_use_case import IdentifyMedicationUseCase
from medscan.config import Settings
from medscan.domain.catalog import Catalog
from medscan.domain.ports import OcrPort, ProviderPort, RecentScansPort, ScanHistoryPort

log = logging.getLogger("medscan.container")


@lru_cache
def get_settings() -> Settings: return Settings.from_env()

@lru_cache
def get_catalog() -> Catalog: return Catalog.load(get_settings().catalog_path)

@lru_cache
def _history_store() -> ScanHistoryPort:
    s = get_settings()
    if s.history_backend == "mongo":
        from medscan.infra.repo.mongo_repo import MongoScanHistoryRepo
        return MongoScanHistoryRepo(s.mongo_uri, s.mongo_db)
    from medscan.infra.repo.memory_repo import InMemoryScanHistoryRepo
    return InMemoryScanHistoryRepo()

@lru_cache
def _recent_scans() -> Optional[RecentScansPort]:
    s = get_settings()
    if not s.redis_url:
        return None
    from medscan.infra.cache.redis_cache import RedisCache, RedisRecentScans
    return RedisRecentScans(RedisCache.from_url(s.redis_url), ttl=s.recent_scans_ttl_s)

@lru_cache
def _ocr() -> Optional[OcrPort]:
    s = get_settings()
    if s.ocr_engine != "tesseract":
        return None
    from medscan.infra.ocr.tesseract_adapter import TesseractAdapter
    return TesseractAdapter(timeout_s=s.ocr_timeout_ms / 1000.0)

@lru_cache
def _provider() -> Optional[ProviderPort]:
    s = get_settings()
    if not s.provider_mode:
        return None
    from medscan.infra.provider.http_provider import HttpIdentificationProvider
    return HttpIdentificationProvider(s.provider_url, s.provider_key, timeout_ms=s.provider_timeout_ms)

@lru_cache
def get_history_recorder() -> ScanHistoryRecorder:
    s = get_settings()
    return ScanHistoryRecorder(
        _history_store(),
        recent=_recent_scans(),
        timeout_ms=s.history_timeout_ms,
        recent_cap=s.recent_scans_cap,
    )

@lru_cache
def get_identify_use_case() -> IdentifyMedicationUseCase:
    s = get_settings()
    log.info("identify use case: provider_mode=%s ocr=%s history=%s",
             s.provider_mode, s.ocr_engine, s.history_backend)
    return IdentifyMedicationUseCase(
        get_catalog(),
        provider_mode=s.provider_mode,
        provider=_provider(),
        ocr=_ocr(),
        history=get_history_recorder(),
        ocr_timeout_ms=s.ocr_timeout_ms,
        provider_timeout_ms=s.provider_timeout_ms,
    )
