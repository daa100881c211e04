# medscan/domain/matcher.py
"""
Two ways of finding a medication from text.

- match_by_tokens: OCR path. Ranks the whole catalog by how many of each record's
  searchable tokens appear anywhere in the OCR text.
- search_by_query: manual search box. Plain case-insensitive substring filter,
  catalog order, capped.

They stay separate on purpose: OCR text is long and noisy, a typed query is short
and precise.
"""
from __future__ import annotations

from typing import List, Optional, Tuple

from medscan.domain.catalog import Catalog
from medscan.domain.models import MedicationRecord, ScoredCandidate
from medscan.domain.normalizer import NormalizedText

SEARCH_LIMIT = 10


def score_record(tokens, text: str) -> int:
    # duplicates count: "metformin metformin hydrochloride" scores metformin twice
    return sum(1 for t in tokens if t in text)


def match_by_tokens(query: NormalizedText, catalog: Catalog) -> List[ScoredCandidate]:
    """Every catalog record, by descending score then catalog order."""
    scored = [
        ScoredCandidate(record=rec, score=score_record(catalog.searchable_tokens(i), query.text), position=i)
        for i, rec in enumerate(catalog)
    ]
    return sorted(scored, key=lambda c: (-c.score, c.position))


def search_by_query(query: Optional[str], catalog: Catalog, limit: int = SEARCH_LIMIT) -> List[MedicationRecord]:
    if not query or not query.strip():
        return []
    q = query.lower()  # not stripped: the typed text is matched as-is
    out: List[MedicationRecord] = []
    for rec in catalog:
        if q in rec.name.lower() or q in rec.generic_name.lower() or q in rec.dosage.lower():
            out.append(rec)
            if len(out) >= limit:
                break
    return out


def match_qr_payload(payload: Optional[str], catalog: Catalog) -> Tuple[Optional[MedicationRecord], bool]:
    """
    QR/barcode payload → (record, matched).
    A record matches when the payload contains its name or generic name.
    No match → (first catalog record, False).
    """
    text = (payload or "").lower()
    if text:
        for rec in catalog:
            name = rec.name.lower()
            generic = rec.generic_name.lower()
            if (name and name in text) or (generic and generic in text):
                return rec, True
    return catalog.first(), False
