"""Tests for season and ESPN date helpers."""
from datetime import date, datetime, timezone, timedelta

from court_vision.utils.timezone import (
    current_season_year,
    day_bounds,
    espn_date_range,
    is_in_season,
    is_offseason,
    to_espn_date,
    week_bounds,
)


class TestSeason:

    def test_midseason_is_in_season(self):
        assert is_in_season(datetime(2025, 1, 15))
        assert is_in_season(date(2025, 12, 25))

    def test_summer_is_offseason(self):
        assert is_offseason(datetime(2025, 8, 15))
        assert is_offseason(date(2025, 7, 1))

    def test_season_boundaries(self):
        assert is_in_season(datetime(2025, 10, 15))
        assert not is_in_season(datetime(2025, 10, 14))
        assert is_in_season(datetime(2025, 6, 20, 23, 0))
        assert not is_in_season(datetime(2025, 6, 21))

    def test_aware_datetime_is_converted_to_utc(self):
        # 2025-10-15 01:00 UTC is still Oct 14 in UTC-5, but the check runs on UTC
        eastern = timezone(timedelta(hours=-5))
        assert is_in_season(datetime(2025, 10, 14, 20, 0, tzinfo=eastern))

    def test_current_season_year(self):
        assert current_season_year(date(2025, 10, 21)) == 2026
        assert current_season_year(date(2026, 3, 1)) == 2026
        assert current_season_year(date(2026, 9, 1)) == 2026


class TestEspnDates:

    def test_to_espn_date(self):
        assert to_espn_date(date(2025, 1, 5)) == "20250105"

    def test_espn_date_range(self):
        assert espn_date_range(date(2025, 1, 6), date(2025, 1, 12)) == "20250106-20250112"

    def test_week_bounds_monday_to_sunday(self):
        monday, sunday = week_bounds(date(2025, 1, 15))  # a Wednesday
        assert monday == date(2025, 1, 13)
        assert sunday == date(2025, 1, 19)

    def test_day_bounds(self):
        start, end = day_bounds(datetime(2025, 1, 15, 18, 30))
        assert start == datetime(2025, 1, 15)
        assert end == datetime(2025, 1, 16)
