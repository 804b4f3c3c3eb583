from .date_fix import normalize_date, parse_station_date
from .numeric import parse_numeric
from .pipeline import scrape_all, scrape_station
from .report import build_daily_reports
from .store import IonosondeStore

__all__ = [
    "normalize_date",
    "parse_station_date",
    "parse_numeric",
    "scrape_all",
    "scrape_station",
    "build_daily_reports",
    "IonosondeStore",
]
