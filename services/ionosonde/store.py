from __future__ import annotations

import logging
from datetime import datetime
from typing import ContextManager, List, Optional

from services.db import PgClient, pg

from .models import FIELD_NAMES, FIELDS, Reading, StationProfile

logger = logging.getLogger(__name__)

# shared by the scrape and report jobs so they never overlap on the store
RUN_LOCK_KEY = 0x10_0E_05_0D

_STATION_COLUMNS = (
    "ionosondeId, ursiCode, name, latitude, longitude, imageUrl, filter, "
    "dateFormat, dateCrop, "
    + ", ".join(col for _name, col, _cls in FIELDS)
    + ", scrape, enabled"
)


class IonosondeStore:
    def __init__(self, client: Optional[PgClient] = None) -> None:
        self._pg = client or pg

    def run_lock(self) -> ContextManager[None]:
        return self._pg.advisory_lock(RUN_LOCK_KEY)

    def list_stations(
        self,
        *,
        scrape: Optional[bool] = None,
        enabled: Optional[bool] = None,
    ) -> List[StationProfile]:
        """All matching station profiles, fully read before any write happens."""
        where: List[str] = []
        params: List[object] = []
        if scrape is not None:
            where.append("scrape = %s")
            params.append(scrape)
        if enabled is not None:
            where.append("enabled = %s")
            params.append(enabled)
        where_sql = f"where {' and '.join(where)}" if where else ""
        rows = self._pg.fetch(
            f"""
            select {_STATION_COLUMNS}
              from ionosondes
             {where_sql}
             order by ionosondeId
            """,
            *params,
        )
        return [StationProfile.from_row(r) for r in rows]

    def readings_between(self, station_id: int, start: datetime, end: datetime) -> List[Reading]:
        rows = self._pg.fetch(
            f"""
            select ionosondeId, dt, {", ".join(FIELD_NAMES)}
              from parameters
             where ionosondeId = %s
               and dt >= %s
               and dt < %s
             order by dt
            """,
            station_id,
            start,
            end,
        )
        return [
            Reading(
                station_id=int(r["ionosondeid"]),
                timestamp=r["dt"],
                **{name: _opt_float(r.get(name)) for name in FIELD_NAMES},
            )
            for r in rows
        ]

    def reading_exists(self, station_id: int, timestamp: datetime) -> bool:
        row = self._pg.fetchrow(
            "select 1 as hit from parameters where ionosondeId = %s and dt = %s limit 1",
            station_id,
            timestamp,
        )
        return bool(row)

    def insert_reading(self, reading: Reading) -> None:
        values = reading.values()
        self._pg.execute(
            f"""
            insert into parameters (ionosondeId, dt, {", ".join(FIELD_NAMES)})
            values (%s, %s, {", ".join(["%s"] * len(FIELD_NAMES))})
            """,
            reading.station_id,
            reading.timestamp,
            *[values[name] for name in FIELD_NAMES],
        )


def _opt_float(value: object) -> Optional[float]:
    return None if value is None else float(value)  # numeric columns come back as Decimal
