import mimetypes
from typing import Any, Dict, Optional

import requests


class MedScanClient:
    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")
        self.headers = {"Content-Type": "application/json"}

    def identify(self, *, image_data: str, ocr_text: Optional[str]=None, user_id: Optional[str]=None, timeout:int=30) -> Dict[str,Any]:
        payload: Dict[str, Any] = {"imageData": image_data}
        if ocr_text is not None: payload["ocrText"] = ocr_text
        if user_id: payload["userId"] = user_id
        r = requests.post(f"{self.base_url}/v1/identify", json=payload, headers=self.headers, timeout=timeout)
        r.raise_for_status(); return r.json()

    def identify_photo(self, *, filepath: str, ocr_text: Optional[str]=None, user_id: Optional[str]=None, timeout:int=60) -> Dict[str,Any]:
        ct = mimetypes.guess_type(filepath)[0] or "image/jpeg"
        data = {}
        if ocr_text is not None: data["ocrText"] = ocr_text
        if user_id: data["userId"] = user_id
        with open(filepath, "rb") as fh:
            files = {"img": (filepath, fh, ct)}
            r = requests.post(f"{self.base_url}/v1/identify/photo", files=files, data=data, timeout=timeout)
        r.raise_for_status(); return r.json()

    def identify_qr(self, *, payload: str, user_id: Optional[str]=None, timeout:int=30) -> Dict[str,Any]:
        body: Dict[str, Any] = {"payload": payload}
        if user_id: body["userId"] = user_id
        r = requests.post(f"{self.base_url}/v1/identify/qr", json=body, headers=self.headers, timeout=timeout)
        r.raise_for_status(); return r.json()

    def search(self, query: str, *, timeout:int=15) -> Dict[str,Any]:
        r = requests.get(f"{self.base_url}/v1/catalog/search", params={"q": query}, timeout=timeout)
        r.raise_for_status(); return r.json()

    def history(self, user_id: str, *, limit:int=50, timeout:int=15) -> Dict[str,Any]:
        r = requests.get(f"{self.base_url}/v1/history/{user_id}", params={"limit": limit}, timeout=timeout)
        r.raise_for_status(); return r.json()
