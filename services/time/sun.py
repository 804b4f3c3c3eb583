from math import acos, asin, pi, sin, cos
from datetime import datetime, timedelta, timezone

RAD = pi / 180.0
DAY_SECONDS = 86400.0
J1970 = 2440588.0
J2000 = 2451545.0
J0 = 0.0009
OBLIQUITY = RAD * 23.4397
# apparent sunrise/sunset: refraction plus solar disc radius
HORIZON = RAD * -0.833

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _to_days(dt: datetime) -> float:
    julian = (dt - _EPOCH).total_seconds() / DAY_SECONDS - 0.5 + J1970
    return julian - J2000


def _from_julian(j: float) -> datetime:
    return _EPOCH + timedelta(seconds=(j + 0.5 - J1970) * DAY_SECONDS)


def _transit(ds: float, m: float, lon_ecl: float) -> float:
    return J2000 + ds + 0.0053 * sin(m) - 0.0069 * sin(2 * lon_ecl)


def sun_times(dt: datetime, lat: float, lon: float) -> dict:
    """
    Sunrise, solar noon and sunset (UTC) for the solar day nearest ``dt``.

    Low-precision almanac algorithm, good to a minute or so. Sunrise and
    sunset are None when the sun stays above or below the horizon all day.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    lw = RAD * -lon
    phi = RAD * lat
    d = _to_days(dt)
    n = round(d - J0 - lw / (2 * pi))
    ds = J0 + lw / (2 * pi) + n

    m = RAD * (357.5291 + 0.98560028 * ds)
    center = RAD * (1.9148 * sin(m) + 0.02 * sin(2 * m) + 0.0003 * sin(3 * m))
    lon_ecl = m + center + RAD * 102.9372 + pi
    dec = asin(sin(OBLIQUITY) * sin(lon_ecl))

    j_noon = _transit(ds, m, lon_ecl)
    out = {"sunrise": None, "solar_noon": _from_julian(j_noon), "sunset": None}

    cos_w = (sin(HORIZON) - sin(phi) * sin(dec)) / (cos(phi) * cos(dec))
    if -1.0 <= cos_w <= 1.0:
        w = acos(cos_w)
        j_set = _transit(J0 + (w + lw) / (2 * pi) + n, m, lon_ecl)
        j_rise = j_noon - (j_set - j_noon)
        out["sunrise"] = _from_julian(j_rise)
        out["sunset"] = _from_julian(j_set)
    return out
