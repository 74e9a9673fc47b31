from datetime import date, datetime, timedelta, timezone

from app import config
from app.core import days_touched, local_day, local_hour_utc, overlaps, to_utc


def test_overlaps_is_half_open():
    a = datetime(2024, 6, 10, 10, 0)
    b = datetime(2024, 6, 10, 10, 30)
    c = datetime(2024, 6, 10, 11, 0)

    assert overlaps(a, b, a, b)
    assert not overlaps(a, b, b, c)
    assert not overlaps(b, c, a, b)
    assert overlaps(a, c, b, c)


def test_to_utc_keeps_naive_and_converts_aware():
    naive = datetime(2024, 6, 10, 9, 0)
    aware = datetime(2024, 6, 10, 12, 0, tzinfo=timezone(timedelta(hours=3)))

    assert to_utc(naive) == naive
    assert to_utc(aware) == datetime(2024, 6, 10, 9, 0)
    assert to_utc(aware).tzinfo is None


def test_local_day_uses_business_timezone(monkeypatch):
    monkeypatch.setattr(config, "BUSINESS_TIMEZONE", "Asia/Jerusalem")

    # 22:30 UTC is already the next day in Jerusalem (UTC+3 in June)
    assert local_day(datetime(2024, 6, 10, 22, 30)) == date(2024, 6, 11)
    assert local_day(date(2024, 6, 10)) == date(2024, 6, 10)
    assert local_hour_utc(date(2024, 6, 10), 9) == datetime(2024, 6, 10, 6, 0)


def test_days_touched_spans_midnight():
    start = datetime(2024, 6, 10, 23, 30)

    assert days_touched(start, start + timedelta(minutes=30)) == [date(2024, 6, 10)]
    assert days_touched(start, start + timedelta(minutes=60)) == [date(2024, 6, 10), date(2024, 6, 11)]
