"""
Per-station ionogram scrape: acquire -> filter -> date -> fields -> dedup -> insert.

Every station ends either ``persisted`` or ``skipped``; nothing raised while
handling one station escapes to the batch, so a broken chart or a dead
observatory host never stops the remaining stations in the cycle.
"""
from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, ContextManager, List, Optional, Sequence, Tuple

import numpy as np

from .date_fix import normalize_date, parse_station_date
from .errors import AcquisitionError, DuplicateError, FormatError, GeometryError, IonosondeError
from .fetch import acquired_ionogram
from .filters import apply_filter
from .models import FIELD_LABELS, FIELDS, Reading, StationProfile
from .numeric import parse_numeric
from .roi import is_not_applicable, text_from_roi
from .store import IonosondeStore

logger = logging.getLogger(__name__)

PERSISTED = "persisted"
SKIPPED = "skipped"

Fetcher = Callable[[Sequence[str], float], ContextManager[Tuple[str, np.ndarray]]]


@dataclass
class ScrapeResult:
    code: str
    outcome: str
    reason: str = ""
    reading: Optional[Reading] = None
    url: Optional[str] = None


def read_date(station: StationProfile, img: np.ndarray):
    raw = text_from_roi(img, station.date_roi)
    fixed = normalize_date(raw)
    if fixed != raw:
        logger.info("[scrape] %s date text corrected %r -> %r", station.code, raw, fixed)
    try:
        return parse_station_date(fixed, station.date_format)
    except FormatError:
        logger.error(
            "[scrape] %s cannot parse date raw=%r normalized=%r format=%r",
            station.code,
            raw,
            fixed,
            station.date_format,
        )
        raise


def read_fields(station: StationProfile, img: np.ndarray) -> dict:
    """Each field is independent; a bad one is left None and the rest carry on."""
    values: dict = {}
    for name, _col, field_class in FIELDS:
        annotation = station.rois.get(name)
        if is_not_applicable(annotation):
            continue
        label = FIELD_LABELS[name]
        try:
            text = text_from_roi(img, annotation)
        except (FormatError, GeometryError) as exc:
            logger.warning("[scrape] %s %s roi %r unusable: %s", station.code, label, annotation, exc)
            continue
        values[name] = parse_numeric(text, field_class, field=label, code=station.code)
    return values


def extract_reading(station: StationProfile, img: np.ndarray) -> Reading:
    timestamp = read_date(station, img)
    return Reading(station_id=station.station_id, timestamp=timestamp, **read_fields(station, img))


def scrape_station(
    station: StationProfile,
    store: IonosondeStore,
    *,
    timeout: float,
    fetcher: Fetcher = acquired_ionogram,
) -> ScrapeResult:
    logger.info("[scrape] scraping %s (%s)", station.code, station.name)
    skip = f"skipping scrape of ionosonde {station.code} ({station.name})"
    try:
        with fetcher(station.image_urls, timeout) as (url, img):
            if station.filter_name:
                img = apply_filter(img, station.filter_name, station.code)
            reading = extract_reading(station, img)

        if store.reading_exists(station.station_id, reading.timestamp):
            raise DuplicateError(f"{station.code} reading at {reading.timestamp.isoformat()} already stored")
        store.insert_reading(reading)
    except DuplicateError as exc:
        logger.warning("[scrape] %s, already in database: %s", skip, exc)
        return ScrapeResult(station.code, SKIPPED, "duplicate")
    except AcquisitionError as exc:
        logger.error("[scrape] error downloading %s: %s", station.image_urls, exc)
        logger.warning("[scrape] %s", skip)
        return ScrapeResult(station.code, SKIPPED, "download failure")
    except IonosondeError as exc:
        logger.error("[scrape] %s: %s", station.code, exc)
        logger.warning("[scrape] %s", skip)
        return ScrapeResult(station.code, SKIPPED, type(exc).__name__)
    except Exception as exc:
        logger.exception("[scrape] %s unexpected failure: %s", station.code, exc)
        logger.warning("[scrape] %s", skip)
        return ScrapeResult(station.code, SKIPPED, "error")

    logger.info(
        "[scrape] scraped %s (%s) ionogram %s from %s",
        station.code,
        station.name,
        reading.timestamp.isoformat(),
        url,
    )
    return ScrapeResult(station.code, PERSISTED, reading=reading, url=url)


def scrape_all(
    store: IonosondeStore,
    *,
    timeout: float,
    max_delay: int = 30,
    fetcher: Fetcher = acquired_ionogram,
    sleep: Callable[[float], None] = time.sleep,
) -> List[ScrapeResult]:
    """One scrape cycle over every scrape-enabled station."""
    delay = random.randint(0, max_delay) if max_delay > 0 else 0
    logger.info("[scrape] scraping ionograms in %ds", delay)
    sleep(delay)

    with store.run_lock():
        stations = store.list_stations(scrape=True)
        results = [scrape_station(s, store, timeout=timeout, fetcher=fetcher) for s in stations]

    persisted = sum(1 for r in results if r.outcome == PERSISTED)
    logger.info("[scrape] done stations=%d persisted=%d skipped=%d", len(results), persisted, len(results) - persisted)
    return results
