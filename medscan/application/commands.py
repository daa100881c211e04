# medscan/application/commands.py
from __future__ import annotations

import base64
import binascii
import re
from typing import Any, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from medscan.domain.errors import ValidationError
from medscan.domain.models import IdentificationQuery

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^,;]+)*);base64,(?P<payload>.*)$", re.S)


def decode_data_url(image_data: str) -> Optional[bytes]:
    """
    Bytes of a base64 data URL, None for any other reference (http URL, blob id).
    Raises ValidationError when it looks like a data URL but does not decode.
    """
    if not image_data.startswith("data:"):
        return None
    m = _DATA_URL.match(image_data)
    if not m:
        raise ValidationError("imageData is not a base64 data URL")
    try:
        raw = base64.b64decode(m.group("payload"), validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("imageData carries invalid base64") from None
    if not raw:
        raise ValidationError("imageData is empty")
    return raw


def to_data_url(data: bytes, content_type: Optional[str]) -> str:
    mime = content_type or "application/octet-stream"
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


class IdentifyCommand(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    image_data: str = Field(..., alias="imageData", min_length=1)
    ocr_text: Optional[str] = Field(None, alias="ocrText")
    qr_payload: Optional[str] = Field(None, alias="qrPayload")
    user_id: Optional[str] = Field(None, alias="userId")

    @field_validator("image_data")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Image data is required")
        return v

    @field_validator("user_id")
    @classmethod
    def _blank_user_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    def to_query(self) -> IdentificationQuery:
        return IdentificationQuery(
            image_data=self.image_data,
            ocr_text=self.ocr_text,
            qr_payload=self.qr_payload,
            user_id=self.user_id,
        )


def parse_identify_request(body: Any) -> IdentificationQuery:
    """
    Boundary check for /identify bodies. Either a valid IdentificationQuery or
    a domain ValidationError; the core never sees an unchecked dict.
    """
    if not isinstance(body, dict):
        raise ValidationError("Invalid request data", detail=[{"msg": "body must be a JSON object"}])
    try:
        cmd = IdentifyCommand.model_validate(body)
    except pydantic.ValidationError as e:
        details = [{"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in e.errors()]
        raise ValidationError("Invalid request data", detail=details) from None
    decode_data_url(cmd.image_data)
    return cmd.to_query()
