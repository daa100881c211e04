# medscan/infra/provider/http_provider.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from medscan.domain.errors import ConfigurationError, ProviderError
from medscan.domain.ports import ProviderPort

log = logging.getLogger("medscan.provider")


class HttpIdentificationProvider(ProviderPort):
    """
    Remote drug identification API.

    POST {url}  Authorization: Bearer {key}
      body  {"imageData": "...", "ocrText": "..."}
      200 → {"medication": {...}, "confidence": 0..100?}
    Anything else (non-2xx, transport error, non-JSON) → ProviderError.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        *,
        timeout_ms: int = 10000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = (url or "").strip()
        self.api_key = (api_key or "").strip()
        self.timeout = httpx.Timeout(timeout_ms / 1000.0)
        self._transport = transport

    def missing_settings(self) -> List[str]:
        missing = []
        if not self.url:
            missing.append("DRUG_ID_API_URL")
        if not self.api_key:
            missing.append("DRUG_ID_API_KEY")
        return missing

    async def identify(self, image_data: str, ocr_text: Optional[str]) -> Dict[str, Any]:
        if self.missing_settings():
            raise ConfigurationError("Provider not configured")

        payload = {"imageData": image_data, "ocrText": ocr_text}
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as c:
                res = await c.post(self.url, json=payload, headers=headers)
        except httpx.TimeoutException:
            raise ProviderError("Provider timed out") from None
        except httpx.HTTPError as e:
            log.warning("provider transport error: %s", e)
            raise ProviderError(f"External provider failed: {e}") from None

        if not res.is_success:
            text = res.text[:500]
            log.warning("provider answered %d: %s", res.status_code, text)
            raise ProviderError(f"Provider error: {text}", detail={"status_code": res.status_code})

        try:
            body = res.json()
        except ValueError:
            raise ProviderError("Provider returned invalid JSON") from None
        if not isinstance(body, dict):
            raise ProviderError("Provider returned unexpected body")
        return body
