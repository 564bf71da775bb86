from datetime import datetime, timedelta, timezone

from src.utils.dates import ensure_utc, utc_now


def test_utc_now_is_timezone_aware():
    assert utc_now().tzinfo == timezone.utc


def test_ensure_utc_attaches_utc_to_naive_datetimes():
    naive = datetime(2026, 1, 2, 3, 4, 5)

    assert ensure_utc(naive) == datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def test_ensure_utc_converts_other_offsets():
    plus_two = datetime(2026, 1, 2, 12, 0, tzinfo=timezone(timedelta(hours=2)))

    converted = ensure_utc(plus_two)

    assert converted.tzinfo == timezone.utc
    assert converted.hour == 10
