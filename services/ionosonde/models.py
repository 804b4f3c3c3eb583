from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class FieldClass(str, Enum):
    FREQUENCY = "frequency"
    HEIGHT = "height"


# (field, roi column, class); order matches the chart layout
FIELDS = (
    ("fof2", "fof2Crop", FieldClass.FREQUENCY),
    ("fof1", "fof1Crop", FieldClass.FREQUENCY),
    ("foe", "foeCrop", FieldClass.FREQUENCY),
    ("fxi", "fxiCrop", FieldClass.FREQUENCY),
    ("foes", "foesCrop", FieldClass.FREQUENCY),
    ("fmin", "fminCrop", FieldClass.FREQUENCY),
    ("hmf2", "hmf2Crop", FieldClass.HEIGHT),
    ("hme", "hmeCrop", FieldClass.HEIGHT),
)

FIELD_NAMES = tuple(name for name, _col, _cls in FIELDS)

# display names as printed on the chart
FIELD_LABELS = {
    "fof2": "foF2",
    "fof1": "foF1",
    "foe": "foE",
    "fxi": "fxI",
    "foes": "foEs",
    "fmin": "fmin",
    "hmf2": "hmF2",
    "hme": "hmE",
}


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int


@dataclass
class StationProfile:
    station_id: int
    code: str
    name: str
    image_urls: List[str]
    date_format: str
    date_roi: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    filter_name: Optional[str] = None
    rois: Dict[str, Optional[str]] = field(default_factory=dict)
    scrape: bool = True
    enabled: bool = False

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "StationProfile":
        urls = [u.strip() for u in str(row.get("imageurl") or "").split(",") if u.strip()]
        return cls(
            station_id=int(row["ionosondeid"]),
            code=str(row["ursicode"]),
            name=str(row["name"]),
            image_urls=urls,
            date_format=str(row["dateformat"]),
            date_roi=str(row.get("datecrop") or ""),
            latitude=_opt_float(row.get("latitude")),
            longitude=_opt_float(row.get("longitude")),
            filter_name=row.get("filter"),
            rois={name: row.get(col.lower()) for name, col, _cls in FIELDS},
            scrape=bool(row.get("scrape", True)),
            enabled=bool(row.get("enabled", False)),
        )


@dataclass
class Reading:
    station_id: int
    timestamp: datetime
    fof2: Optional[float] = None
    fof1: Optional[float] = None
    foe: Optional[float] = None
    fxi: Optional[float] = None
    foes: Optional[float] = None
    fmin: Optional[float] = None
    hmf2: Optional[float] = None
    hme: Optional[float] = None

    def values(self) -> Dict[str, Optional[float]]:
        return {name: getattr(self, name) for name in FIELD_NAMES}


def _opt_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)
