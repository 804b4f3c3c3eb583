#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from typing import Callable, List, Optional

from services.ionosonde.report import build_daily_reports
from services.ionosonde.store import IonosondeStore
from services.notify.webhooks import WebhookError, code_block, send_discord, send_slack
from services.settings import Settings, get_settings


LOG_LEVEL = os.getenv("IONO_LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def _targets(settings: Settings) -> str:
    names = [n for n, on in (("Slack", settings.SLACK), ("Discord", settings.DISCORD)) if on]
    return " and ".join(names)


def push_reports(
    reports: List[str],
    settings: Settings,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Post every report to each enabled target; returns the number of failed posts."""
    failed = 0
    targets = _targets(settings)
    if targets:
        logger.info("[report] posting %d daily report(s) to %s", len(reports), targets)
    for idx, report in enumerate(reports):
        body = code_block(report)
        if settings.DISCORD:
            try:
                send_discord(settings.DAILY_DISCORDURL or "", body)
            except WebhookError as exc:
                failed += 1
                logger.error("[report] unable to post message to Discord: %s", exc)
        if settings.SLACK:
            try:
                send_slack(settings.DAILY_SLACKURL or "", "24H report", body)
            except WebhookError as exc:
                failed += 1
                logger.error("[report] unable to post message to Slack: %s", exc)
        if idx < len(reports) - 1:
            sleep(settings.POST_PAUSE_SECONDS)
    return failed


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Build 24h ionosonde reports and push them to Slack/Discord.")
    parser.add_argument("--print", dest="print_only", action="store_true", help="Print reports to stdout, do not post.")
    args = parser.parse_args(argv)

    settings = get_settings()
    if not args.print_only:
        if not settings.DAILY:
            logger.warning("[report] DAILY is false, will not push daily reports")
            return 0
        missing = settings.missing_webhooks()
        if missing:
            logger.error("[report] webhook URL not configured, set %s", ", ".join(missing))
            return 2

    try:
        reports = build_daily_reports(IonosondeStore())
    except Exception as exc:
        logger.exception("[report] unable to build daily reports: %s", exc)
        return 1

    if args.print_only:
        for report in reports:
            print(report)
        return 0

    push_reports(reports, settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
