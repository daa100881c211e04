# medscan/domain/catalog.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

import yaml

from medscan.domain.models import MedicationRecord
from medscan.domain.normalizer import NormalizedText, normalize_text

log = logging.getLogger("medscan.catalog")

SAMPLE_MEDICATIONS: List[dict] = [
    {
        "id": "1",
        "name": "Metformin",
        "genericName": "Metformin Hydrochloride",
        "dosage": "500mg",
        "manufacturer": "Generic",
        "description": "Metformin is used to treat type 2 diabetes. It helps control blood sugar levels.",
        "sideEffects": ["Nausea", "Diarrhea", "Stomach upset", "Metallic taste"],
        "interactions": ["Alcohol", "Contrast dyes", "Cimetidine"],
        "warnings": ["Kidney problems", "Liver disease", "Heart failure"],
    },
    {
        "id": "2",
        "name": "Lisinopril",
        "genericName": "Lisinopril",
        "dosage": "10mg",
        "manufacturer": "Generic",
        "description": "Lisinopril is an ACE inhibitor used to treat high blood pressure and heart failure.",
        "sideEffects": ["Dry cough", "Dizziness", "Fatigue", "Headache"],
        "interactions": ["Potassium supplements", "NSAIDs", "Lithium"],
        "warnings": ["Pregnancy", "Kidney disease", "High potassium"],
    },
    {
        "id": "3",
        "name": "Atorvastatin",
        "genericName": "Atorvastatin Calcium",
        "dosage": "20mg",
        "manufacturer": "Generic",
        "description": "Atorvastatin is a statin used to lower cholesterol and reduce cardiovascular risk.",
        "sideEffects": ["Muscle pain", "Liver problems", "Memory issues", "Digestive problems"],
        "interactions": ["Grapefruit juice", "Warfarin", "Digoxin"],
        "warnings": ["Liver disease", "Pregnancy", "Muscle disorders"],
    },
]


class Catalog:
    """
    Ordered, read-only set of known medications.

    Built once per process and shared by every request. The order of `records`
    is the tie-break order for equal match scores, so it must stay stable.
    """

    def __init__(self, records: Iterable[MedicationRecord]):
        self._records: Tuple[MedicationRecord, ...] = tuple(records)
        self._searchable: Tuple[NormalizedText, ...] = tuple(
            normalize_text(self._join_fields(r)) for r in self._records
        )
        self._by_id: Dict[str, MedicationRecord] = {r.id: r for r in self._records}

    # ──────────────────────────────────────────────────────────────
    #  Construction
    # ──────────────────────────────────────────────────────────────
    @classmethod
    def from_dicts(cls, items: Iterable[dict]) -> "Catalog":
        return cls(MedicationRecord.model_validate(d) for d in items)

    @classmethod
    def sample(cls) -> "Catalog":
        return cls.from_dicts(SAMPLE_MEDICATIONS)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "Catalog":
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        items = data.get("medications") if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise ValueError(f"{path}: expected a 'medications' list")
        return cls.from_dicts(items)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]]) -> "Catalog":
        """YAML file if readable, else the built-in sample catalog."""
        if path:
            try:
                cat = cls.from_yaml(path)
                log.info("catalog loaded from %s (%d records)", path, len(cat))
                return cat
            except Exception as e:
                log.warning("catalog load from %s failed: %s; using sample catalog", path, e)
        return cls.sample()

    # ──────────────────────────────────────────────────────────────
    #  Access
    # ──────────────────────────────────────────────────────────────
    @staticmethod
    def _join_fields(r: MedicationRecord) -> str:
        parts = [r.name, r.generic_name, r.dosage, r.manufacturer]
        return " ".join(p for p in parts if p)

    @property
    def records(self) -> Tuple[MedicationRecord, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MedicationRecord]:
        return iter(self._records)

    def is_empty(self) -> bool:
        return not self._records

    def first(self) -> Optional[MedicationRecord]:
        return self._records[0] if self._records else None

    def get(self, med_id: str) -> Optional[MedicationRecord]:
        return self._by_id.get(med_id)

    def searchable_text(self, index: int) -> str:
        return self._searchable[index].text

    def searchable_tokens(self, index: int) -> Tuple[str, ...]:
        return self._searchable[index].tokens

    def suggestions(self, limit: int = 5) -> List[MedicationRecord]:
        """Records offered for a manual pick when identification fails."""
        return list(self._records[:limit])
