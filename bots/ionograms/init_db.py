#!/usr/bin/env python3
"""
Create the ionosonde tables and seed the known stations.

ROI columns (dateCrop, fof2Crop, ...) hold "x,y,width,height" in image
pixels, the Position and Size shown by a rectangle select in Gimp. A value
of NA, or one starting with "#" or "-", marks a field the chart lacks.
dateFormat is a strptime pattern for the OCR'd chart date (UTC).
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from services.db import PgClient, pg
from services.ionosonde.models import FIELDS


LOG_LEVEL = os.getenv("IONO_LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

SCHEMA_SQL = """
create table if not exists ionosondes (
  ionosondeId serial primary key,
  ursiCode varchar(16) not null unique,
  name varchar(64) not null,
  latitude double precision null,
  longitude double precision null,
  imageUrl varchar(1024) not null,
  filter varchar(64) null,
  dateFormat varchar(64) not null,
  dateCrop varchar(20) not null,
  fof2Crop varchar(20) null,
  fof1Crop varchar(20) null,
  foeCrop varchar(20) null,
  fxiCrop varchar(20) null,
  foesCrop varchar(20) null,
  fminCrop varchar(20) null,
  hmf2Crop varchar(20) null,
  hmeCrop varchar(20) null,
  scrape boolean not null default true,
  enabled boolean not null default false
);

create table if not exists parameters (
  parameterId bigserial primary key,
  ionosondeId integer not null references ionosondes (ionosondeId),
  dt timestamptz not null,
  fof2 double precision null,
  fof1 double precision null,
  foe double precision null,
  fxi double precision null,
  foes double precision null,
  fmin double precision null,
  hme double precision null,
  hmf2 double precision null,
  unique (ionosondeId, dt)
);
"""

_ROI_KEYS = [col for _name, col, _cls in FIELDS]

SEED_STATIONS: List[Dict[str, Any]] = [
    {
        "ursiCode": "JR055",
        "name": "Juliusruh",
        "latitude": 54.6,
        "longitude": 13.4,
        "imageUrl": (
            "https://www.ionosonde.iap-kborn.de/LATEST.PNG,"
            "https://www.iap-kborn.de/fileadmin/user_upload/MAIN-abteilung/radar/Radars/Ionosonde/Plots/LATEST.PNG"
        ),
        "filter": None,
        "dateFormat": "%Y %b%d %j %H%M%S",
        "dateCrop": "222,29,195,17",
        "rois": ["36,50,90,15", "36,65,90,17", "27,98,101,16", "27,129,98,17",
                 "36,145,90,17", "36,162,90,17", "37,313,91,17", "27,345,100,17"],
        "scrape": True,
        "enabled": True,
    },
    {
        "ursiCode": "TR169",
        "name": "Tromso",
        "latitude": 69.6,
        "longitude": 19.2,
        "imageUrl": "http://www.tgo.uit.no/ionosonde/latest.gif",
        "filter": None,
        "dateFormat": "%Y %b%d %j %H%M",
        "dateCrop": "291,25,157,15",
        "rois": ["37,52,73,15", "37,67,73,15", "37,97,73,15", "37,127,73,15",
                 "37,142,73,15", "37,157,73,15", "37,298,73,15", "37,328,73,15"],
        "scrape": True,
        "enabled": True,
    },
    {
        "ursiCode": "WP937",
        "name": "Wallops Is",
        "latitude": 37.9,
        "longitude": -75.5,
        "imageUrl": "https://www.ngdc.noaa.gov/stp/IONO/rt-iono/latest/WP937.png",
        "filter": None,
        "dateFormat": "%Y %b%d %j %H%M%S",
        "dateCrop": "270,30,177,17",
        "rois": ["41,52,70,15", "41,68,70,15", "41,98,70,15", "41,128,70,15",
                 "41,143,70,15", "41,158,70,15", "41,299,70,15", "41,329,70,15"],
        "scrape": True,
        "enabled": False,
    },
    {
        "ursiCode": "DB049",
        "name": "Dourbes",
        "latitude": 50.1,
        "longitude": 4.6,
        "imageUrl": "http://digisonde.oma.be/IonoGIF.secure/LATEST.PNG",
        "filter": None,
        "dateFormat": "%Y %b%d %j %H%M%S",
        "dateCrop": "227,30,196,16",
        "rois": ["45,50,82,15", "45,66,82,15", "45,98,82,15", "45,130,82,15",
                 "45,146,82,15", "45,162,82,15", "45,314,82,15", "45,346,82,15"],
        "scrape": True,
        "enabled": False,
    },
    {
        # white-on-black chart: invert and threshold so tesseract can read it
        "ursiCode": "RA041",
        "name": "Rome",
        "latitude": 41.9,
        "longitude": 12.5,
        "imageUrl": "http://ionos.ingv.it/Roma/LATEST.GIF",
        "filter": "invertAndBlackAndWhite",
        "dateFormat": "%Y %m %d - TIME (UT): %H:%M",
        "dateCrop": "309,0,185,16",
        "rois": ["695,66,75,24", "695,189,75,24", "633,658,78,13", "695,158,75,24",
                 "NA", "NA", "644,592,67,14", "644,671,67,14"],
        "scrape": True,
        "enabled": False,
    },
]


def seed_row(station: Dict[str, Any]) -> Dict[str, Any]:
    row = {k: v for k, v in station.items() if k != "rois"}
    row.update(dict(zip(_ROI_KEYS, station["rois"])))
    return row


def init_db(client: Optional[PgClient] = None, seed: bool = True) -> int:
    """Create tables if missing; returns the number of seed rows offered."""
    client = client or pg
    for statement in SCHEMA_SQL.split(";"):
        if statement.strip():
            client.execute(statement)
    if not seed:
        return 0
    for station in SEED_STATIONS:
        row = seed_row(station)
        cols = list(row.keys())
        client.execute(
            f"insert into ionosondes ({', '.join(cols)}) "
            f"values ({', '.join(['%s'] * len(cols))}) "
            "on conflict (ursiCode) do nothing",
            *[row[c] for c in cols],
        )
    return len(SEED_STATIONS)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Create ionoreporter tables and seed stations.")
    parser.add_argument("--no-seed", action="store_true", help="Only create tables.")
    args = parser.parse_args(argv)
    try:
        n = init_db(seed=not args.no_seed)
    except Exception as exc:
        logger.exception("[init-db] failed: %s", exc)
        return 1
    logger.info("[init-db] schema ready, seed stations offered=%d", n)
    return 0


if __name__ == "__main__":
    sys.exit(main())
