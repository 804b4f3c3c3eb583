from __future__ import annotations

from typing import Optional

import cv2
import numpy as np

from .errors import FormatError, GeometryError
from .models import Rect
from .ocr import read_text

_NA_PREFIXES = ("NA", "#", "-")


def is_not_applicable(annotation: Optional[str]) -> bool:
    """True when a ROI column marks the field as absent from the chart."""
    text = (annotation or "").strip().upper()
    return not text or text.startswith(_NA_PREFIXES)


def parse_rect(annotation: str) -> Rect:
    parts = [p.strip() for p in annotation.strip().split(",")]
    if len(parts) != 4:
        raise FormatError(f"wrong bounding-box format for x,y,width,height: {annotation!r}")
    try:
        x, y, w, h = (int(p) for p in parts)
    except ValueError as exc:
        raise FormatError(f"x,y,width,height must be integers: {annotation!r}") from exc
    if min(x, y) < 0 or w <= 0 or h <= 0:
        raise FormatError(f"invalid rectangle {annotation!r}")
    return Rect(x, y, w, h)


def extract(img: np.ndarray, rect: Rect) -> bytes:
    """
    Crop ``rect`` out of a BGR/gray image and return it PNG-encoded. A rect
    running past the right or bottom edge is clipped to the image.
    """
    h, w = img.shape[:2]
    if rect.x >= w or rect.y >= h:
        raise GeometryError(f"rect {rect} outside image {w}x{h}")
    x1 = min(rect.x + rect.width, w)
    y1 = min(rect.y + rect.height, h)
    crop = img[rect.y:y1, rect.x:x1]
    ok, buf = cv2.imencode(".png", crop)
    if not ok:
        raise GeometryError(f"could not encode crop {rect}")
    return buf.tobytes()


def text_from_roi(img: np.ndarray, annotation: Optional[str]) -> str:
    if is_not_applicable(annotation):
        return ""
    return read_text(extract(img, parse_rect(annotation)))
