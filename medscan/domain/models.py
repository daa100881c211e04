# medscan/domain/models.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from medscan.domain.confidence import Status


class MedicationRecord(BaseModel):
    """Catalog entry. Reference data, never mutated after the catalog is built."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    generic_name: str = Field("", alias="genericName")
    dosage: str = ""
    manufacturer: str = ""
    description: str = ""
    side_effects: List[str] = Field(default_factory=list, alias="sideEffects")
    interactions: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    def to_public(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


@dataclass
class IdentificationQuery:
    image_data: str
    ocr_text: Optional[str] = None
    qr_payload: Optional[str] = None
    user_id: Optional[str] = None


@dataclass
class ScoredCandidate:
    record: MedicationRecord
    score: int
    position: int          # catalog index, tie-break


@dataclass
class IdentificationResult:
    medication: Union[MedicationRecord, Dict[str, Any]]
    confidence: float      # 0..100
    status: Status
    source: str            # "local" | "qr" | "provider"
    score: Optional[int] = None

    def medication_payload(self) -> Dict[str, Any]:
        if isinstance(self.medication, MedicationRecord):
            return self.medication.to_public()
        return dict(self.medication)


class ScanHistoryEntry(BaseModel):
    id: Optional[str] = None
    image_ref: str
    ocr_text: str = ""
    confidence: float
    status: Status
    user_id: str
    source: Optional[str] = None
    medication_id: Optional[str] = None
    medication_name: Optional[str] = None
    created_at: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.timezone.utc))
