# medscan/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

MOCK_PROVIDER = "mock"


def _ms(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _origins(raw: str) -> List[str]:
    return [o.strip().rstrip("/") for o in raw.split(",") if o.strip()]


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration, read from the process environment.
    main.py calls load_dotenv() first, so a local .env works too.
    """
    id_provider: str = MOCK_PROVIDER
    provider_url: str = ""
    provider_key: str = ""
    provider_timeout_ms: int = 10000

    ocr_engine: str = "tesseract"
    ocr_timeout_ms: int = 15000

    history_backend: str = "memory"
    history_timeout_ms: int = 2000
    recent_scans_cap: int = 50
    recent_scans_ttl_s: int = 2592000
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "medscan"
    redis_url: str = ""

    catalog_path: str = "config/catalog.yaml"
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    app_version: str = "0.1.0"

    @property
    def provider_mode(self) -> bool:
        return self.id_provider.strip().lower() != MOCK_PROVIDER

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            id_provider=os.getenv("ID_PROVIDER", MOCK_PROVIDER),
            provider_url=os.getenv("DRUG_ID_API_URL", ""),
            provider_key=os.getenv("DRUG_ID_API_KEY", ""),
            provider_timeout_ms=_ms("PROVIDER_TIMEOUT_MS", 10000),
            ocr_engine=os.getenv("OCR_ENGINE", "tesseract").lower(),
            ocr_timeout_ms=_ms("OCR_TIMEOUT_MS", 15000),
            history_backend=os.getenv("HISTORY_BACKEND", "memory").lower(),
            history_timeout_ms=_ms("HISTORY_TIMEOUT_MS", 2000),
            recent_scans_cap=int(os.getenv("RECENT_SCANS_CAP", "50")),
            recent_scans_ttl_s=int(os.getenv("RECENT_SCANS_TTL_SECONDS", "2592000")),
            mongo_uri=os.getenv("MONGO_URI", "mongodb://localhost:27017"),
            mongo_db=os.getenv("MONGO_DB", "medscan"),
            redis_url=os.getenv("REDIS_URL", ""),
            catalog_path=os.getenv("CATALOG_PATH", "config/catalog.yaml"),
            cors_allow_origins=_origins(os.getenv("CORS_ALLOW_ORIGINS", "*")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            app_version=os.getenv("APP_VERSION", "0.1.0"),
        )
