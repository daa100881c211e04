# medscan/domain/confidence.py
from enum import Enum
from typing import Any, Optional

# Local OCR matching: each catalog token found in the text is worth 15 points,
# floored at 50 and capped at 99 so a local guess never claims certainty.
POINTS_PER_TOKEN = 15
LOCAL_FLOOR = 50
LOCAL_CEILING = 99
NO_MATCH_CONFIDENCE = 75

QR_MATCH_CONFIDENCE = 98
QR_FALLBACK_CONFIDENCE = 80
PROVIDER_DEFAULT_CONFIDENCE = 80

SUCCESS_THRESHOLD = 90
WARNING_THRESHOLD = 70


class Status(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


def clamp(x: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, x))


def classify_score(score: Optional[int]) -> int:
    """Map a raw token-overlap score to a confidence percentage."""
    if not score:
        return NO_MATCH_CONFIDENCE
    return int(clamp(score * POINTS_PER_TOKEN, LOCAL_FLOOR, LOCAL_CEILING))


def status_for(confidence: float) -> Status:
    if confidence >= SUCCESS_THRESHOLD:
        return Status.SUCCESS
    if confidence >= WARNING_THRESHOLD:
        return Status.WARNING
    return Status.ERROR


def coerce_provider_confidence(raw: Any) -> float:
    """Provider confidence is optional and untrusted: default it, then bound it to 0..100."""
    if raw is None:
        return float(PROVIDER_DEFAULT_CONFIDENCE)
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return float(PROVIDER_DEFAULT_CONFIDENCE)
    if value != value:  # NaN
        return float(PROVIDER_DEFAULT_CONFIDENCE)
    return clamp(value)
