from __future__ import annotations

from datetime import datetime, timezone

from .errors import FormatError


# Known tesseract misreads of "MonDD " date strings. Each rule fires at most
# once, on its first occurrence, in this order; later rules rely on the
# earlier ones having run, so do not reorder or switch to global replace.
DATE_FIXES: tuple[tuple[str, str], ...] = (
    ("oOct", "Oct"),
    ("Hov", "Nov"),
    ("NovO01l ", "Nov01 "),
    ("NovO0l1 ", "Nov01 "),
    ("NovO1l ", "Nov01 "),
    ("NovO01 ", "Nov01 "),
    ("NovO1 ", "Nov01 "),
    ("Nov@l ", "Nov01 "),
    ("NovOl ", "Nov01 "),
    ("NovO0", "Nov0"),
    ("Nov@", "Nov0"),
    ("NovO", "Nov0"),
    ("O1 ", "01 "),
    ("O2 ", "02 "),
    ("O3 ", "03 "),
    ("O4 ", "04 "),
    ("O5 ", "05 "),
    ("O6 ", "06 "),
    ("O7 ", "07 "),
    ("O8 ", "08 "),
    ("O9 ", "09 "),
)


def normalize_date(raw: str) -> str:
    text = raw
    for pattern, replacement in DATE_FIXES:
        text = text.replace(pattern, replacement, 1)
    return text


def parse_station_date(text: str, fmt: str) -> datetime:
    """Parse a normalized chart date; naive results are taken as UTC."""
    try:
        dt = datetime.strptime(text, fmt)
    except ValueError as exc:
        raise FormatError(f"cannot parse {text!r} with format {fmt!r}: {exc}") from exc
    _check_day_of_year(text, fmt, dt)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _check_day_of_year(text: str, fmt: str, dt: datetime) -> None:
    """
    strptime lets %j override the month and day silently. When a layout
    carries both, pin the day of year and parse again so a misread day is
    rejected instead of stored under another date.
    """
    has_month = any(d in fmt for d in ("%b", "%B", "%m"))
    if "%j" not in fmt or "%d" not in fmt or not has_month:
        return
    pinned = fmt.replace("%j", f"{dt.timetuple().tm_yday:03d}")
    try:
        by_month = datetime.strptime(text, pinned)
    except ValueError as exc:
        raise FormatError(f"day of year in {text!r} does not match format {fmt!r}") from exc
    if by_month.date() != dt.date():
        raise FormatError(
            f"day of year {dt.timetuple().tm_yday} in {text!r} disagrees with {by_month:%b %d}"
        )
