# medscan/domain/errors.py
from typing import Any, Optional


class IdentificationError(Exception):
    code = "identification_error"
    http_status = 500

    def __init__(self, message: str, *, detail: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(IdentificationError):
    """Malformed or missing input. Raised before any matching work."""
    code = "validation_error"
    http_status = 400


class ConfigurationError(IdentificationError):
    """Remote provider mode selected but not usable."""
    code = "configuration_error"
    http_status = 400


class ProviderError(IdentificationError):
    """Remote provider call failed, timed out or answered non-2xx."""
    code = "provider_error"
    http_status = 502


class InternalError(IdentificationError):
    code = "internal_error"
    http_status = 500
