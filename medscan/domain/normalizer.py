# medscan/domain/normalizer.py
import re
from dataclasses import dataclass
from typing import Optional, Tuple

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class NormalizedText:
    text: str
    tokens: Tuple[str, ...]


def normalize_text(raw: Optional[str]) -> NormalizedText:
    """
    Lowercase + trim, then split on any run of non-alphanumerics.
    - None/"" → empty text, no tokens
    - idempotent: normalize_text(n.text) == n
    """
    text = "" if raw is None else str(raw).strip().lower()
    tokens = tuple(t for t in _NON_ALNUM.split(text) if t)
    return NormalizedText(text=text, tokens=tokens)
