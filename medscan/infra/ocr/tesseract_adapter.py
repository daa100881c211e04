# medscan/infra/ocr/tesseract_adapter.py
import asyncio
import io
from typing import Union

import pytesseract
from PIL import Image, UnidentifiedImageError

from medscan.domain.errors import ValidationError
from medscan.domain.ports import OcrPort


class TesseractAdapter(OcrPort):
    """
    pytesseract behind the OcrPort.

    timeout_s is handed to tesseract itself: on expiry pytesseract kills the
    subprocess and raises RuntimeError, so an abandoned request does not leave
    a worker thread busy. 0 disables the limit.
    """

    def __init__(self, lang: str = "eng", timeout_s: float = 0):
        self.lang = lang
        self.timeout_s = timeout_s

    def _recognize(self, img: Image.Image) -> str:
        return pytesseract.image_to_string(img, lang=self.lang, timeout=self.timeout_s)

    async def extract(self, img: Union[bytes, bytearray, Image.Image]) -> str:
        """Label photo → raw text. Runs tesseract in the default executor."""
        if isinstance(img, (bytes, bytearray)):
            try:
                pil = Image.open(io.BytesIO(bytes(img)))
                pil.load()
            except (UnidentifiedImageError, OSError):
                raise ValidationError("imageData is not a readable image") from None
            pil = pil.convert("RGB")
        elif isinstance(img, Image.Image):
            pil = img
        else:
            raise TypeError(f"Unsupported image type: {type(img)}")

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._recognize, pil)
