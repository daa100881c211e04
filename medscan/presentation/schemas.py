# medscan/presentation/schemas.py
from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# ── IDENTIFY ─────────────────────────────────────────────────────
class IdentifyResponse(BaseModel):
    medication: Dict[str, Any]
    confidence: float = Field(..., ge=0, le=100)
    status: Literal["success", "warning", "error"]
    source: Literal["local", "qr", "provider"]

class QrIdentifyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    payload: str = Field(..., min_length=1, description="Decoded QR/barcode text")
    user_id: Optional[str] = Field(None, alias="userId")

# ── CATALOG ──────────────────────────────────────────────────────
class CatalogResponse(BaseModel):
    items: List[Dict[str, Any]]

# ── HISTORY ──────────────────────────────────────────────────────
class ScanHistoryItem(BaseModel):
    id: Optional[str] = None
    imageUrl: str
    ocrText: str
    confidence: float
    status: Literal["success", "warning", "error"]
    source: Optional[str] = None
    medicationId: Optional[str] = None
    medicationName: Optional[str] = None
    timestamp: datetime

class ScanHistoryResponse(BaseModel):
    user_id: str
    items: List[ScanHistoryItem]

# ── ERRORS ───────────────────────────────────────────────────────
class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Any = None
    suggestions: List[Dict[str, Any]] = []
