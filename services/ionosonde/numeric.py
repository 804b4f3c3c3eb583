from __future__ import annotations

import logging
import math
import re
from typing import Optional

from .errors import FormatError, RangeError
from .models import FieldClass

logger = logging.getLogger(__name__)

_NON_NUMERIC = re.compile(r"[^0-9.]+")

# inclusive plausibility windows: MHz for frequencies, km for heights
VALID_RANGES = {
    FieldClass.FREQUENCY: (0.5, 19.0),
    FieldClass.HEIGHT: (60.0, 999.0),
}


def strip_numeric(text: str) -> str:
    return _NON_NUMERIC.sub("", text or "")


def to_float(text: str) -> float:
    stripped = strip_numeric(text)
    if not stripped:
        raise FormatError(f"not a number: {text!r}")
    try:
        value = float(stripped)
    except ValueError as exc:
        raise FormatError(f"not a number: {text!r} -> {stripped!r}") from exc
    if math.isnan(value) or math.isinf(value):
        raise FormatError(f"not a finite number: {text!r}")
    return value


def check_range(value: float, field_class: FieldClass, field: str = "") -> float:
    low, high = VALID_RANGES[field_class]
    if not low <= value <= high:
        raise RangeError(field or field_class.value, value, low, high)
    return value


def parse_numeric(
    text: str,
    field_class: FieldClass,
    *,
    field: str = "",
    code: str = "",
) -> Optional[float]:
    """OCR text -> plausible float, or None (logged) when unusable."""
    try:
        return check_range(to_float(text), field_class, field)
    except RangeError as exc:
        logger.warning("[numeric] invalid %s on %s ionogram, skipping: %s", field_class.value, code, exc)
    except FormatError as exc:
        logger.info("[numeric] %s on %s ionogram unreadable: %s", field or field_class.value, code, exc)
    return None
