from __future__ import annotations

import logging
from io import BytesIO

import pytesseract
from PIL import Image

logger = logging.getLogger(__name__)


def read_text(png: bytes) -> str:
    """OCR an encoded image; any engine failure reads as no text."""
    try:
        with Image.open(BytesIO(png)) as im:
            text = pytesseract.image_to_string(im)
    except Exception as exc:
        logger.debug("[ocr] tesseract failed: %s", exc)
        return ""
    return (text or "").strip()
