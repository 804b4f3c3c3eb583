from __future__ import annotations


class IonosondeError(Exception):
    """Base class for per-station failures; never fatal to a run."""


class AcquisitionError(IonosondeError):
    """No configured image source yielded a decodable ionogram."""


class GeometryError(IonosondeError):
    """Region of interest falls outside the image."""


class FormatError(IonosondeError):
    """OCR text could not be parsed as a date, number or rectangle."""


class RangeError(IonosondeError):
    """Parsed value lies outside the plausible window for its field."""

    def __init__(self, field: str, value: float, low: float, high: float) -> None:
        super().__init__(f"{field}={value:g} outside [{low:g}, {high:g}]")
        self.field = field
        self.value = value
        self.low = low
        self.high = high


class DuplicateError(IonosondeError):
    """A reading already exists for this station and timestamp."""
