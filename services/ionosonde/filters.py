from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)

# brightness/contrast used for the black-and-white variants, in percent
BW_BRIGHTNESS = -40.0
BW_CONTRAST = 80.0


def invert(img: np.ndarray) -> np.ndarray:
    return 255 - img


def grayscale(img: np.ndarray) -> np.ndarray:
    if img.ndim == 2:
        return img
    gray = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
    return cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)


def brightness(img: np.ndarray, percent: float) -> np.ndarray:
    shifted = img.astype(np.float32) + 255.0 * percent / 100.0
    return np.clip(shifted, 0, 255).astype(np.uint8)


def contrast(img: np.ndarray, percent: float) -> np.ndarray:
    f = img.astype(np.float32) / 255.0
    f = (f - 0.5) * (1.0 + percent / 100.0) + 0.5
    return np.clip(f * 255.0, 0, 255).astype(np.uint8)


def _black_and_white(img: np.ndarray) -> np.ndarray:
    return contrast(brightness(img, BW_BRIGHTNESS), BW_CONTRAST)


class ImageFilter(str, Enum):
    NONE = "none"
    INVERT = "invert"
    GRAYSCALE = "grayscale"
    BLACK_AND_WHITE = "blackandwhite"
    INVERT_GRAYSCALE = "invertandgrayscale"
    INVERT_BLACK_AND_WHITE = "invertandblackandwhite"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def parse(cls, name: Optional[str]) -> "ImageFilter":
        key = re.sub(r"[\s_\-]", "", (name or "").replace("+", "and")).lower()
        if key in ("", "none", "na", "n/a", "nil"):
            return cls.NONE
        for member in cls:
            if member is not cls.UNRECOGNIZED and member.value == key:
                return member
        return cls.UNRECOGNIZED

    @property
    def operations(self) -> Tuple[Callable[[np.ndarray], np.ndarray], ...]:
        return _OPERATIONS.get(self, ())


_OPERATIONS: Dict[ImageFilter, Tuple[Callable[[np.ndarray], np.ndarray], ...]] = {
    ImageFilter.INVERT: (invert,),
    ImageFilter.GRAYSCALE: (grayscale,),
    ImageFilter.BLACK_AND_WHITE: (grayscale, _black_and_white),
    ImageFilter.INVERT_GRAYSCALE: (invert, grayscale),
    ImageFilter.INVERT_BLACK_AND_WHITE: (invert, grayscale, _black_and_white),
}


def apply_filter(img: np.ndarray, name: Optional[str], code: str = "") -> np.ndarray:
    """Run the named transform chain; an unknown name leaves the image as is."""
    kind = ImageFilter.parse(name)
    if kind is ImageFilter.UNRECOGNIZED:
        logger.warning("[filter] unknown filter %r, skipping filter for %s ionogram", name, code)
        return img
    if kind is ImageFilter.NONE:
        return img
    logger.info("[filter] applying %s to %s ionogram", kind.value, code)
    for op in kind.operations:
        img = op(img)
    return img
