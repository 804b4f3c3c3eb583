import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from services.ionosonde.models import Reading, StationProfile
from services.ionosonde.store import RUN_LOCK_KEY, IonosondeStore
from services.settings import Settings

UTC = timezone.utc

STATION_ROW = {
    "ionosondeid": 3,
    "ursicode": "RA041",
    "name": "Rome",
    "latitude": Decimal("41.9"),
    "longitude": None,
    "imageurl": "http://a/LATEST.GIF, http://b/LATEST.GIF,",
    "filter": "invertAndBlackAndWhite",
    "dateformat": "%Y %m %d",
    "datecrop": "309,0,185,16",
    "fof2crop": "695,66,75,24",
    "fof1crop": "NA",
    "foecrop": None,
    "fxicrop": "1,1,1,1",
    "foescrop": "NA",
    "fmincrop": "NA",
    "hmf2crop": "2,2,2,2",
    "hmecrop": "3,3,3,3",
    "scrape": True,
    "enabled": False,
}


class RecordingPg:
    def __init__(self, rows=None, row=None):
        self.rows = rows or []
        self.row = row
        self.calls = []
        self.locks = []

    def fetch(self, query, *params):
        self.calls.append(("fetch", query, params))
        return self.rows

    def fetchrow(self, query, *params):
        self.calls.append(("fetchrow", query, params))
        return self.row

    def execute(self, query, *params):
        self.calls.append(("execute", query, params))

    @contextmanager
    def advisory_lock(self, key):
        self.locks.append(key)
        yield


def test_station_profile_from_row():
    s = StationProfile.from_row(STATION_ROW)
    assert s.station_id == 3
    assert s.code == "RA041"
    assert s.image_urls == ["http://a/LATEST.GIF", "http://b/LATEST.GIF"]
    assert s.latitude == 41.9
    assert not s.has_coordinates
    assert s.rois["fof2"] == "695,66,75,24"
    assert s.rois["foe"] is None
    assert s.filter_name == "invertAndBlackAndWhite"


def test_list_stations_filters():
    client = RecordingPg(rows=[STATION_ROW])
    stations = IonosondeStore(client).list_stations(scrape=True)
    _kind, query, params = client.calls[0]
    assert "scrape = %s" in query and "enabled" not in query.split("where")[1]
    assert params == (True,)
    assert [s.code for s in stations] == ["RA041"]


def test_readings_between_converts_decimals():
    start = datetime(2026, 10, 18, 5, tzinfo=UTC)
    end = datetime(2026, 10, 19, 5, tzinfo=UTC)
    client = RecordingPg(
        rows=[{"ionosondeid": 1, "dt": start, "fof2": Decimal("5.5"), "fof1": None, "foe": None,
               "fxi": None, "foes": None, "fmin": None, "hmf2": Decimal("250"), "hme": None}]
    )
    (r,) = IonosondeStore(client).readings_between(1, start, end)
    assert r.fof2 == 5.5 and isinstance(r.fof2, float)
    assert r.hmf2 == 250.0
    assert client.calls[0][2] == (1, start, end)


def test_insert_and_exists():
    ts = datetime(2026, 10, 19, 5, tzinfo=UTC)
    client = RecordingPg(row={"hit": 1})
    store = IonosondeStore(client)
    assert store.reading_exists(1, ts)
    store.insert_reading(Reading(1, ts, fof2=5.0, hme=110.0))
    _kind, query, params = client.calls[-1]
    assert query.count("%s") == len(params) == 10
    assert params[:3] == (1, ts, 5.0)
    assert params[-1] == 110.0


def test_run_lock_uses_shared_key():
    client = RecordingPg()
    with IonosondeStore(client).run_lock():
        pass
    assert client.locks == [RUN_LOCK_KEY]


def test_missing_webhooks():
    s = Settings(_env_file=None, DAILY=True, DISCORD=True, SLACK=True, DAILY_SLACKURL="https://s")
    assert s.missing_webhooks() == ["DAILY_DISCORDURL"]
    assert Settings(_env_file=None, DAILY=False, DISCORD=True).missing_webhooks() == []


def test_settings_fields_are_all_consumed():
    # log level is read by each job from the environment directly
    assert "IONO_LOG_LEVEL" not in Settings.model_fields
    assert "DATABASE_URL" in Settings.model_fields
