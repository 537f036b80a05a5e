from datetime import date, datetime
from zoneinfo import ZoneInfo

from evswap.timeparse import parse_timestamp, resolve_tz, to_local_date

PRAGUE = ZoneInfo("Europe/Prague")


def test_parse_blank_and_garbage():
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None
    assert parse_timestamp("  NaN ") is None
    assert parse_timestamp("definitely-not-a-date") is None

def test_date_only_and_naive_stay_local():
    assert to_local_date("2024-06-01", PRAGUE) == date(2024, 6, 1)
    assert to_local_date("2024-06-01T23:59:00", PRAGUE) == date(2024, 6, 1)
    assert to_local_date(date(2024, 6, 1), PRAGUE) == date(2024, 6, 1)

def test_aware_timestamp_converted_to_zone():
    assert to_local_date("2024-06-01T23:30:00Z", PRAGUE) == date(2024, 6, 2)
    assert to_local_date("2024-06-01T08:00:00Z", PRAGUE) == date(2024, 6, 1)
    assert to_local_date(datetime(2024, 1, 1, 0, 30, tzinfo=PRAGUE), ZoneInfo("UTC")) == date(2023, 12, 31)

def test_unknown_zone_falls_back_to_prague():
    assert resolve_tz("Mars/Olympus_Mons") == PRAGUE
    assert resolve_tz(None) == PRAGUE
