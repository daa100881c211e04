# medscan/presentation/routers.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile

from medscan.application.commands import parse_identify_request, to_data_url
from medscan.application.history import ScanHistoryRecorder
from medscan.application.identify_use_case import IdentifyMedicationUseCase
from medscan.container import get_history_recorder, get_identify_use_case
from medscan.domain.errors import ValidationError
from medscan.domain.models import IdentificationResult, ScanHistoryEntry
from medscan.presentation.schemas import (
    CatalogResponse,
    IdentifyResponse,
    QrIdentifyRequest,
    ScanHistoryItem,
    ScanHistoryResponse,
)

logger = logging.getLogger(__name__)

ALLOWED_CT = {"image/jpeg", "image/png", "image/webp"}

router = APIRouter(prefix="/v1")


def _to_response(result: IdentificationResult) -> IdentifyResponse:
    return IdentifyResponse(
        medication=result.medication_payload(),
        confidence=result.confidence,
        status=result.status.value,
        source=result.source,
    )


def _to_history_item(e: ScanHistoryEntry) -> ScanHistoryItem:
    return ScanHistoryItem(
        id=e.id,
        imageUrl=e.image_ref,
        ocrText=e.ocr_text,
        confidence=e.confidence,
        status=e.status.value,
        source=e.source,
        medicationId=e.medication_id,
        medicationName=e.medication_name,
        timestamp=e.created_at,
    )


# ── IDENTIFY: JSON ────────────────────────────────────────────────
@router.post("/identify", response_model=IdentifyResponse)
async def identify(
    body: dict = Body(...),
    uc: IdentifyMedicationUseCase = Depends(get_identify_use_case),
):
    query = parse_identify_request(body)
    result = await uc.identify(query)
    return _to_response(result)

# ── IDENTIFY: MULTIPART (photo) ───────────────────────────────────
@router.post("/identify/photo", response_model=IdentifyResponse)
async def identify_photo(
    img: UploadFile = File(...),
    ocr_text: Optional[str] = Form(None, alias="ocrText"),
    user_id: Optional[str] = Form(None, alias="userId"),
    uc: IdentifyMedicationUseCase = Depends(get_identify_use_case),
):
    if img.content_type not in ALLOWED_CT:
        raise ValidationError(f"Unsupported image type: {img.content_type}")
    data = await img.read()
    if not data:
        raise ValidationError("Image data is required")
    query = parse_identify_request({
        "imageData": to_data_url(data, img.content_type),
        "ocrText": ocr_text,
        "userId": user_id,
    })
    result = await uc.identify(query)
    return _to_response(result)

# ── IDENTIFY: QR ──────────────────────────────────────────────────
@router.post("/identify/qr", response_model=IdentifyResponse)
async def identify_qr(
    req: QrIdentifyRequest,
    uc: IdentifyMedicationUseCase = Depends(get_identify_use_case),
):
    result = await uc.identify_qr(req.payload, user_id=req.user_id)
    return _to_response(result)

# ── CATALOG ───────────────────────────────────────────────────────
@router.get("/catalog/search", response_model=CatalogResponse)
async def search_catalog(
    q: str = Query("", description="Name, generic name or dosage fragment"),
    uc: IdentifyMedicationUseCase = Depends(get_identify_use_case),
):
    return CatalogResponse(items=[r.to_public() for r in uc.search_catalog(q)])

@router.get("/catalog/suggestions", response_model=CatalogResponse)
async def catalog_suggestions(uc: IdentifyMedicationUseCase = Depends(get_identify_use_case)):
    return CatalogResponse(items=[r.to_public() for r in uc.suggestions()])

# ── HISTORY ───────────────────────────────────────────────────────
@router.get("/history/{user_id}", response_model=ScanHistoryResponse)
async def scan_history(
    user_id: str,
    limit: int = Query(50, ge=1, le=200),
    recorder: ScanHistoryRecorder = Depends(get_history_recorder),
):
    entries = await recorder.list_recent(user_id, limit=limit)
    logger.info("[history] user=%s limit=%d returned=%d", user_id, limit, len(entries))
    return ScanHistoryResponse(user_id=user_id, items=[_to_history_item(e) for e in entries])
