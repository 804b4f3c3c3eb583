#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from services.ionosonde.pipeline import PERSISTED, scrape_all
from services.ionosonde.store import IonosondeStore
from services.settings import get_settings


LOG_LEVEL = os.getenv("IONO_LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Scrape ionograms of all scrape-enabled ionosondes once.")
    parser.add_argument("--timeout", type=float, default=settings.SCRAPE_TIMEOUT, help="HTTP timeout in seconds.")
    parser.add_argument(
        "--max-delay",
        type=int,
        default=settings.SCRAPE_MAX_DELAY,
        help="Upper bound of the random start delay in seconds (0 disables).",
    )
    args = parser.parse_args(argv)

    store = IonosondeStore()
    try:
        results = scrape_all(store, timeout=args.timeout, max_delay=args.max_delay)
    except Exception as exc:
        logger.exception("[scrape] cycle failed: %s", exc)
        return 1

    for r in results:
        if r.outcome == PERSISTED:
            logger.info("[scrape] %s persisted %s", r.code, r.reading.timestamp.isoformat())
        else:
            logger.info("[scrape] %s skipped (%s)", r.code, r.reason)
    return 0


if __name__ == "__main__":
    sys.exit(main())
