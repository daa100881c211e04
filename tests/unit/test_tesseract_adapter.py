# tests/unit/test_tesseract_adapter.py
import asyncio
import io

import pytest
from PIL import Image

from medscan.application.commands import to_data_url
from medscan.application.identify_use_case import IdentifyMedicationUseCase
from medscan.domain.catalog import Catalog
from medscan.domain.errors import InternalError, ValidationError
from medscan.domain.models import IdentificationQuery
from medscan.infra.ocr import tesseract_adapter
from medscan.infra.ocr.tesseract_adapter import TesseractAdapter


def _png() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), "white").save(buf, format="PNG")
    return buf.getvalue()


def test_non_image_bytes_are_validation_error(monkeypatch):
    def boom(*a, **kw):
        raise AssertionError("tesseract must not run")

    monkeypatch.setattr(tesseract_adapter.pytesseract, "image_to_string", boom)
    with pytest.raises(ValidationError):
        asyncio.run(TesseractAdapter().extract(b"not an image"))


def test_timeout_and_lang_are_handed_to_tesseract(monkeypatch):
    seen = {}

    def fake(img, lang=None, timeout=0):
        seen.update(lang=lang, timeout=timeout, size=img.size)
        return "metformin 500mg"

    monkeypatch.setattr(tesseract_adapter.pytesseract, "image_to_string", fake)
    text = asyncio.run(TesseractAdapter(lang="ind", timeout_s=2.5).extract(_png()))
    assert text == "metformin 500mg"
    assert seen == {"lang": "ind", "timeout": 2.5, "size": (8, 8)}


def test_tesseract_timeout_surfaces_as_internal_error(monkeypatch):
    def timed_out(img, lang=None, timeout=0):
        raise RuntimeError("Tesseract process timeout")

    monkeypatch.setattr(tesseract_adapter.pytesseract, "image_to_string", timed_out)
    uc = IdentifyMedicationUseCase(Catalog.sample(), ocr=TesseractAdapter(timeout_s=0.1))
    query = IdentificationQuery(image_data=to_data_url(_png(), "image/png"))
    with pytest.raises(InternalError):
        asyncio.run(uc.identify(query))
