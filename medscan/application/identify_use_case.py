# medscan/application/identify_use_case.py
from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from medscan.application.commands import decode_data_url
from medscan.application.history import ScanHistoryRecorder
from medscan.domain.catalog import Catalog
from medscan.domain.confidence import (
    QR_FALLBACK_CONFIDENCE,
    QR_MATCH_CONFIDENCE,
    classify_score,
    coerce_provider_confidence,
    status_for,
)
from medscan.domain.errors import (
    ConfigurationError,
    IdentificationError,
    InternalError,
    ProviderError,
    ValidationError,
)
from medscan.domain.matcher import match_by_tokens, match_qr_payload, search_by_query
from medscan.domain.models import (
    IdentificationQuery,
    IdentificationResult,
    MedicationRecord,
    ScanHistoryEntry,
)
from medscan.domain.normalizer import normalize_text
from medscan.domain.ports import OcrPort, ProviderPort

log = logging.getLogger("medscan.identify")

SUGGESTION_COUNT = 5


def _preview(s: Optional[str], n: int = 120) -> str:
    s = (s or "").strip().replace("\n", " ")
    return s if len(s) <= n else s[:n] + "…"


class IdentifyMedicationUseCase:
    """
    Photo / OCR text / QR payload → best-guess medication with confidence.

    Modes:
      - local (ID_PROVIDER=mock): OCR text is scored against the catalog
      - provider (anything else): the payload is forwarded to the remote
        identification service; no local fallback in this mode

    A QR payload always takes the QR path: it is already text, so neither OCR
    nor the provider is involved.
    """

    def __init__(
        self,
        catalog: Catalog,
        *,
        provider_mode: bool = False,
        provider: Optional[ProviderPort] = None,
        ocr: Optional[OcrPort] = None,
        history: Optional[ScanHistoryRecorder] = None,
        ocr_timeout_ms: int = 15000,
        provider_timeout_ms: int = 10000,
    ) -> None:
        self.catalog = catalog
        self.provider_mode = provider_mode
        self.provider = provider
        self.ocr = ocr
        self.history = history
        self.ocr_timeout_s = ocr_timeout_ms / 1000.0
        self.provider_timeout_s = provider_timeout_ms / 1000.0

    # ──────────────────────────────────────────────────────────────
    #  Entry points
    # ──────────────────────────────────────────────────────────────
    async def identify(self, query: IdentificationQuery) -> IdentificationResult:
        if not query.image_data or not query.image_data.strip():
            raise ValidationError("Image data is required")
        image_bytes = decode_data_url(query.image_data)

        if query.qr_payload and query.qr_payload.strip():
            return await self.identify_qr(query.qr_payload, user_id=query.user_id, image_ref=query.image_data)

        ocr_text = query.ocr_text
        if self.provider_mode:
            result = await self._identify_remote(query)
        else:
            if ocr_text is None and image_bytes is not None and self.ocr is not None:
                ocr_text = await self._run_ocr(image_bytes)
            result = self._identify_local(ocr_text)

        if query.user_id:
            await self._record(query.user_id, query.image_data, ocr_text, result)
        return result

    async def identify_qr(
        self,
        payload: str,
        *,
        user_id: Optional[str] = None,
        image_ref: str = "",
    ) -> IdentificationResult:
        if not payload or not payload.strip():
            raise ValidationError("QR payload is required")
        if self.catalog.is_empty():
            raise InternalError("identification failed")

        rec, matched = match_qr_payload(payload, self.catalog)
        confidence = QR_MATCH_CONFIDENCE if matched else QR_FALLBACK_CONFIDENCE
        result = IdentificationResult(
            medication=rec,
            confidence=confidence,
            status=status_for(confidence),
            source="qr",
        )
        log.info("[identify] source=qr matched=%s top=%s conf=%s payload='%s'",
                 matched, rec.name, confidence, _preview(payload))

        if user_id:
            await self._record(user_id, image_ref, payload, result)
        return result

    def search_catalog(self, query: Optional[str]) -> List[MedicationRecord]:
        return search_by_query(query, self.catalog)

    def suggestions(self) -> List[MedicationRecord]:
        return self.catalog.suggestions(SUGGESTION_COUNT)

    # ──────────────────────────────────────────────────────────────
    #  Local matching
    # ──────────────────────────────────────────────────────────────
    def _identify_local(self, ocr_text: Optional[str]) -> IdentificationResult:
        if self.catalog.is_empty():
            raise InternalError("identification failed")
        try:
            norm = normalize_text(ocr_text)
            ranked = match_by_tokens(norm, self.catalog)
            top = ranked[0]
            confidence = classify_score(top.score)
            result = IdentificationResult(
                medication=top.record,
                confidence=confidence,
                status=status_for(confidence),
                source="local",
                score=top.score,
            )
        except Exception:
            log.exception("local identification failed")
            raise InternalError("identification failed") from None

        log.info("[identify] source=local top=%s score=%d conf=%s status=%s ocr='%s'",
                 result.medication.name, top.score, confidence, result.status.value, _preview(ocr_text))
        return result

    async def _run_ocr(self, image_bytes: bytes) -> str:
        try:
            text = await asyncio.wait_for(self.ocr.extract(image_bytes), self.ocr_timeout_s)
        except asyncio.TimeoutError:
            log.warning("OCR timed out after %.1fs", self.ocr_timeout_s)
            raise InternalError("OCR timed out") from None
        except IdentificationError:
            raise
        except Exception:
            log.exception("OCR failed")
            raise InternalError("OCR failed") from None
        return text or ""

    # ──────────────────────────────────────────────────────────────
    #  Remote provider
    # ──────────────────────────────────────────────────────────────
    async def _identify_remote(self, query: IdentificationQuery) -> IdentificationResult:
        if self.provider is None:
            raise ConfigurationError("Provider not configured")
        missing = self.provider.missing_settings()
        if missing:
            raise ConfigurationError(f"Provider not configured: missing {', '.join(missing)}")

        try:
            body = await asyncio.wait_for(
                self.provider.identify(query.image_data, query.ocr_text),
                self.provider_timeout_s,
            )
        except asyncio.TimeoutError:
            log.warning("provider timed out after %.1fs", self.provider_timeout_s)
            raise ProviderError("Provider timed out") from None
        except IdentificationError:
            raise
        except Exception as e:
            log.exception("provider call failed")
            raise ProviderError("External provider failed", detail=str(e)) from None

        medication = body.get("medication") if isinstance(body, dict) else None
        if not isinstance(medication, dict):
            raise ProviderError("Provider response has no medication", detail=body)

        confidence = coerce_provider_confidence(body.get("confidence"))
        result = IdentificationResult(
            medication=medication,
            confidence=confidence,
            status=status_for(confidence),
            source="provider",
        )
        log.info("[identify] source=provider name=%s conf=%s status=%s",
                 medication.get("name"), confidence, result.status.value)
        return result

    # ──────────────────────────────────────────────────────────────
    #  History (best-effort)
    # ──────────────────────────────────────────────────────────────
    async def _record(self, user_id: str, image_ref: str, ocr_text: Optional[str],
                      result: IdentificationResult) -> None:
        if self.history is None:
            return
        # provider payloads are untrusted: coerce, and never let a bad row fail the call
        try:
            med = result.medication_payload()
            med_id, med_name = med.get("id"), med.get("name")
            entry = ScanHistoryEntry(
                image_ref=image_ref or "",
                ocr_text=ocr_text or "",
                confidence=result.confidence,
                status=result.status,
                user_id=user_id,
                source=result.source,
                medication_id=str(med_id) if med_id is not None else None,
                medication_name=str(med_name) if med_name is not None else None,
            )
        except Exception:
            log.exception("could not build scan history entry user=%s", user_id)
            return
        # result intentionally discarded; record() never raises
        await self.history.record(entry)
