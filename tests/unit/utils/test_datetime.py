"""Unit tests for datetime helpers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

from keyward.utils.datetime import end_of_day, start_of_day, to_naive_utc, utcnow


class TestUtcnow:
    def test_naive(self):
        assert utcnow().tzinfo is None

    def test_close_to_aware_now(self):
        delta = datetime.now(UTC).replace(tzinfo=None) - utcnow()
        assert abs(delta) < timedelta(seconds=5)


class TestDayBoundaries:
    def test_start_of_day(self):
        assert start_of_day(datetime(2024, 3, 5, 14, 22)) == datetime(2024, 3, 5, 0, 0, 0)

    def test_end_of_day(self):
        assert end_of_day(datetime(2024, 3, 10, 9, 0)) == datetime(
            2024, 3, 10, 23, 59, 59, 999000
        )

    def test_idempotent(self):
        value = datetime(2024, 3, 5, 14, 22, 7, 123)
        assert start_of_day(start_of_day(value)) == start_of_day(value)
        assert end_of_day(end_of_day(value)) == end_of_day(value)

    def test_aware_input_converted_to_utc_first(self):
        """01:00 at UTC+7 is still the previous day in UTC."""
        value = datetime(2024, 3, 5, 1, 0, tzinfo=timezone(timedelta(hours=7)))

        assert start_of_day(value) == datetime(2024, 3, 4, 0, 0, 0)
        assert start_of_day(value).tzinfo is None


class TestToNaiveUtc:
    def test_naive_passthrough(self):
        value = datetime(2024, 1, 1, 12, 0)
        assert to_naive_utc(value) is value

    def test_aware_converted(self):
        value = datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=-5)))
        assert to_naive_utc(value) == datetime(2024, 1, 1, 17, 0)
