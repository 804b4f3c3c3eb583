"""
24h ionosonde report: hourly averages of the stored readings per station,
annotated with sunrise/noon/sunset, the NVIS window and usable HF ham bands.

    24H JR055 (Juliusruh) DTG 190500ZOct26
    +=sunrise=0521 *=noon=1049 -=sunset=1617
    NVIS range is fmin or foE to foF2*0.85
    HH fmin  foF2  NVIS range  hmF2 HamBands
    05+1.60 5.00  1.60-4.25   254  160,80
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Sequence

from services.time.sun import sun_times

from .models import FIELD_NAMES, Reading, StationProfile
from .store import IonosondeStore

logger = logging.getLogger(__name__)

NA = "NA"
QSOQRG_FACTOR = 0.85
NOON_OFFSET = timedelta(minutes=30)
WINDOW = timedelta(hours=24)

DTG_FORMAT = "%d%H%MZ%b%y"
REPORT_HEADER = "HH fmin  foF2  NVIS range  hmF2 HamBands\n"
NVIS_CAPTION = "NVIS range is fmin or foE to foF2*0.85\n"

TAG_NONE = " "
TAG_SUNRISE = "+"
TAG_SUNSET = "-"
TAG_BOTH = "±"
TAG_NOON = "*"

# (label, lower MHz, upper MHz), evaluated and listed in this order
AMATEUR_BANDS = (
    ("160", 1.8, 2.0),
    ("80", 3.5, 3.8),
    ("60", 5.3515, 5.3665),
    ("40", 7.0, 7.2),
    ("30", 10.1, 10.15),
)


@dataclass
class HourBucket:
    hour: int
    means: Dict[str, Optional[float]] = field(default_factory=dict)
    samples: int = 0

    def get(self, name: str) -> Optional[float]:
        return self.means.get(name)


@dataclass
class SolarHours:
    sunrise: Optional[datetime]
    noon: datetime
    sunset: Optional[datetime]

    @property
    def sunrise_hour(self) -> Optional[int]:
        return None if self.sunrise is None else self.sunrise.astimezone(timezone.utc).hour

    @property
    def noon_hour(self) -> int:
        return (self.noon + NOON_OFFSET).astimezone(timezone.utc).hour

    @property
    def sunset_hour(self) -> Optional[int]:
        return None if self.sunset is None else self.sunset.astimezone(timezone.utc).hour


def hourly_buckets(readings: Sequence[Reading]) -> List[HourBucket]:
    """Group by UTC hour in chronological order and average present values."""
    ordered = sorted(readings, key=lambda r: r.timestamp)
    grouped: Dict[int, List[Reading]] = {}
    for r in ordered:
        grouped.setdefault(r.timestamp.astimezone(timezone.utc).hour, []).append(r)

    buckets: List[HourBucket] = []
    for hour, rows in grouped.items():
        means: Dict[str, Optional[float]] = {}
        for name in FIELD_NAMES:
            present = [v for v in (getattr(r, name) for r in rows) if v is not None]
            means[name] = sum(present) / len(present) if present else None
        buckets.append(HourBucket(hour=hour, means=means, samples=len(rows)))
    return buckets


def solar_hours(lat: float, lon: float, now: datetime, sun_fn: Callable = sun_times) -> SolarHours:
    times = sun_fn(now, lat, lon)
    return SolarHours(sunrise=times["sunrise"], noon=times["solar_noon"], sunset=times["sunset"])


def solar_tag(hour: int, sun: Optional[SolarHours]) -> str:
    if sun is None:
        return TAG_NONE
    if hour == sun.noon_hour:
        return TAG_NOON
    is_rise = hour == sun.sunrise_hour
    is_set = hour == sun.sunset_hour
    if is_rise and is_set:
        return TAG_BOTH
    if is_rise:
        return TAG_SUNRISE
    if is_set:
        return TAG_SUNSET
    return TAG_NONE


def qsoqrg(fof2: Optional[float]) -> Optional[float]:
    return None if fof2 is None else fof2 * QSOQRG_FACTOR


def lowest_frequency(fmin: Optional[float], foe: Optional[float], qrg: Optional[float]) -> Optional[float]:
    if fmin is not None:
        return fmin
    if foe is not None:
        return foe
    return qrg


def nvis_range(foe: Optional[float], fmin: Optional[float], qrg: Optional[float]) -> str:
    if qrg is None:
        return NA
    if foe is not None and foe < qrg:
        return f"{foe:.2f}-{qrg:.2f}"
    if fmin is not None and fmin < qrg:
        return f"{fmin:.2f}-{qrg:.2f}"
    return f"?-{qrg:.2f}"


def usable_bands(qrg: Optional[float], low: Optional[float]) -> str:
    if qrg is None or low is None:
        return NA
    bands = [label for label, lower, upper in AMATEUR_BANDS if qrg >= lower and low <= upper]
    return ",".join(bands) if bands else NA


def _fmt(value: Optional[float], spec: str, width: int) -> str:
    text = NA if value is None else format(value, spec)
    return f"{text:<{width}}"


def render_row(bucket: HourBucket, sun: Optional[SolarHours]) -> str:
    fof2, foe, fmin = bucket.get("fof2"), bucket.get("foe"), bucket.get("fmin")
    qrg = qsoqrg(fof2)
    low = lowest_frequency(fmin, foe, qrg)
    return "%02d%s%s%s %s %s %s\n" % (
        bucket.hour,
        solar_tag(bucket.hour, sun),
        _fmt(fmin, ".2f", 5),
        _fmt(fof2, ".2f", 5),
        f"{nvis_range(foe, fmin, qrg):<11}",
        _fmt(bucket.get("hmf2"), ".0f", 4),
        usable_bands(qrg, low),
    )


def render_report(
    station: StationProfile,
    buckets: Sequence[HourBucket],
    now: datetime,
    sun: Optional[SolarHours] = None,
) -> str:
    out = f"24H {station.code} ({station.name}) DTG {now.astimezone(timezone.utc).strftime(DTG_FORMAT)}\n"
    if sun is not None:
        out += "+=sunrise=%s *=noon=%s -=sunset=%s\n" % (
            _hhmm(sun.sunrise),
            _hhmm(sun.noon),
            _hhmm(sun.sunset),
        )
    else:
        out += "WARNING: No coordinates available!\n"
    out += NVIS_CAPTION
    out += REPORT_HEADER
    for bucket in buckets:
        out += render_row(bucket, sun)
    return out


def _hhmm(dt: Optional[datetime]) -> str:
    return NA if dt is None else dt.astimezone(timezone.utc).strftime("%H%M")


def station_report(
    station: StationProfile,
    store: IonosondeStore,
    now: datetime,
    sun_fn: Callable = sun_times,
) -> str:
    sun = None
    if station.has_coordinates:
        sun = solar_hours(station.latitude, station.longitude, now, sun_fn)
    readings = store.readings_between(station.station_id, now - WINDOW, now)
    return render_report(station, hourly_buckets(readings), now, sun)


def build_daily_reports(
    store: IonosondeStore,
    now: Optional[datetime] = None,
    sun_fn: Callable = sun_times,
) -> List[str]:
    """One report per report-enabled station; a failing station is left out."""
    now = now or datetime.now(timezone.utc)
    logger.info("[report] producing 24h reports")
    reports: List[str] = []
    with store.run_lock():
        stations = store.list_stations(enabled=True)
        for station in stations:
            try:
                reports.append(station_report(station, store, now, sun_fn))
            except Exception as exc:
                logger.exception("[report] cannot produce report for %s ionosonde: %s", station.code, exc)
    logger.info("[report] stations=%d reports=%d", len(stations), len(reports))
    return reports
