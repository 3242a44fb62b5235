"""Tests for business hours resolution across stored layouts."""
import json
import pytest
from datetime import date

from services.business_hours import (
    DEFAULT_HOURS,
    BusinessHoursResolver,
    parse_weekly_segments,
    to_positive_int,
)


MONDAY = date(2030, 1, 7)
SUNDAY = date(2030, 1, 6)


@pytest.fixture
def resolver(fake_store):
    return BusinessHoursResolver(fake_store)


@pytest.mark.unit
class TestParseWeeklySegments:
    """Test weekday matching and segment extraction."""

    @pytest.mark.parametrize("key", ["mon", "Monday", "MON", "1", "一", "週一", "星期一"])
    def test_weekday_aliases(self, key):
        segments = parse_weekly_segments({key: {"open": "11:30", "close": "21:00"}}, 1)

        assert [(s.start, s.end) for s in segments] == [("11:30", "21:00")]

    def test_sunday_is_zero(self):
        hours = {"sun": {"start": "10:00", "end": "15:00"}, "mon": {"start": "17:00", "end": "22:00"}}

        assert parse_weekly_segments(hours, 0)[0].start == "10:00"

    def test_weekly_container(self):
        hours = {"weekly": {"tue": {"opening_time": "12:00", "closing_time": "20:00"}}}

        assert parse_weekly_segments(hours, 2)[0].end == "20:00"

    def test_array_of_day_entries(self):
        hours = [
            {"day": "monday", "from": "11:00", "to": "14:00"},
            {"weekday": 2, "openTime": "17:00", "closeTime": "22:00"},
        ]

        assert parse_weekly_segments(hours, 2)[0].start == "17:00"
        assert parse_weekly_segments(hours, 1)[0].end == "14:00"

    def test_days_array_with_segments(self):
        hours = {"days": [{"dow": "3", "segments": [
            {"start": "17:30", "end": "21:30"},
            {"start": "11:30", "end": "14:30"},
        ]}]}

        segments = parse_weekly_segments(hours, 3)

        assert [(s.start, s.end) for s in segments] == [("11:30", "14:30"), ("17:30", "21:30")]

    def test_lunch_and_dinner(self):
        hours = {"fri": {
            "lunch": {"open_at": "11:00", "close_at": "14:00"},
            "dinner": {"open_at": "17:00", "close_at": "22:00"},
        }}

        assert len(parse_weekly_segments(hours, 5)) == 2

    def test_list_of_segments(self):
        hours = {"sat": [{"start": "9:00", "end": "13:00"}, {"start": "18:00", "end": "23:00"}]}

        segments = parse_weekly_segments(hours, 6)

        assert segments[0].start == "09:00"
        assert segments[1].end == "23:00"

    def test_invalid_segment_dropped(self):
        hours = {"mon": [{"start": "21:00", "end": "17:00"}, {"start": "11:00", "end": "bogus"}]}

        assert parse_weekly_segments(hours, 1) == []

    def test_flat_object_applies_to_every_day(self):
        hours = {"open_time": "12:00", "close_time": "20:00"}

        assert parse_weekly_segments(hours, 4)[0].start == "12:00"

    def test_no_match(self):
        assert parse_weekly_segments({"tue": {"start": "12:00", "end": "20:00"}}, 1) == []
        assert parse_weekly_segments(None, 1) == []


@pytest.mark.unit
def test_to_positive_int():
    assert to_positive_int("45") == 45
    assert to_positive_int(30.0) == 30
    assert to_positive_int(0) is None
    assert to_positive_int(-15) is None
    assert to_positive_int("abc") is None
    assert to_positive_int(True) is None
    assert to_positive_int(22.5) is None


@pytest.mark.unit
class TestBusinessHoursResolver:
    """Test the resolution chain and field-by-field merging."""

    @pytest.mark.asyncio
    async def test_default_when_nothing_stored(self, resolver):
        config, sources = await resolver.resolve_with_sources(MONDAY)

        assert config == DEFAULT_HOURS
        assert sources == ["default"]

    @pytest.mark.asyncio
    async def test_weekly_hours_for_weekday(self, resolver, fake_store):
        fake_store.restaurant_row = {
            "business_hours": {"mon": {"open_time": "11:00", "close_time": "22:00"}},
            "settings": None,
        }

        config = await resolver.resolve(MONDAY)

        assert config.open_time == "11:00"
        assert config.close_time == "22:00"
        assert config.slot_interval_minutes == 30
        assert config.dining_duration_minutes == 90

    @pytest.mark.asyncio
    async def test_weekly_wins_over_settings(self, resolver, fake_store):
        fake_store.restaurant_row = {
            "business_hours": {"mon": {"open": "17:00", "close": "22:00"}},
            "settings": {"close_time": "23:00", "slot_interval_min": 15},
        }

        config, sources = await resolver.resolve_with_sources(MONDAY)

        assert config.close_time == "22:00"
        assert config.slot_interval_minutes == 15
        assert sources == ["restaurants.business_hours", "restaurants.settings", "default"]

    @pytest.mark.asyncio
    async def test_settings_win_over_default(self, resolver, fake_store):
        fake_store.restaurant_row = {
            "business_hours": {"tue": {"open": "17:00", "close": "22:00"}},
            "settings": {"closing_time": "20:30", "interval": "15", "diningDurationMin": 60},
        }

        config = await resolver.resolve(MONDAY)

        assert config.open_time == "17:00"
        assert config.close_time == "20:30"
        assert config.slot_interval_minutes == 15
        assert config.dining_duration_minutes == 60

    @pytest.mark.asyncio
    async def test_json_text_columns(self, resolver, fake_store):
        fake_store.restaurant_row = {
            "business_hours": json.dumps({"weekdays": {"1": {"start": "18:00", "end": "23:00"}}}),
            "settings": json.dumps({"slot_interval": 60}),
        }

        config = await resolver.resolve(MONDAY)

        assert (config.open_time, config.close_time) == ("18:00", "23:00")
        assert config.slot_interval_minutes == 60

    @pytest.mark.asyncio
    async def test_segments_kept_with_outer_bounds(self, resolver, fake_store):
        fake_store.restaurant_row = {
            "business_hours": {"sun": {"lunch": {"start": "11:00", "end": "14:00"},
                                       "dinner": {"start": "17:00", "end": "21:00"}}},
            "settings": {},
        }

        config = await resolver.resolve(SUNDAY)

        assert len(config.segments) == 2
        assert config.open_time == "11:00"
        assert config.close_time == "21:00"

    @pytest.mark.asyncio
    async def test_non_positive_numbers_fall_through(self, resolver, fake_store):
        fake_store.restaurant_row = {
            "business_hours": None,
            "settings": {"slot_interval_min": 0, "dining_duration_min": -30},
        }

        config = await resolver.resolve(MONDAY)

        assert config.slot_interval_minutes == 30
        assert config.dining_duration_minutes == 90

    @pytest.mark.asyncio
    async def test_legacy_table_fills_missing_fields(self, resolver, fake_store):
        fake_store.legacy_rows["business_hours"] = {
            "open_time": "16:00:00",
            "close_time": "22:00:00",
            "duration_min": 120,
            "interval_min": 20,
        }

        config, sources = await resolver.resolve_with_sources(MONDAY)

        assert config.open_time == "16:00"
        assert config.dining_duration_minutes == 120
        assert config.slot_interval_minutes == 20
        assert sources == ["business_hours"]

    @pytest.mark.asyncio
    async def test_first_legacy_row_wins(self, resolver, fake_store):
        fake_store.legacy_rows["restaurant_settings"] = {"open_time": "12:00", "close_time": None}
        fake_store.legacy_rows["settings"] = {"opening_time": "09:00", "closing_time": "23:00"}

        config = await resolver.resolve(MONDAY)

        assert config.open_time == "12:00"
        assert config.close_time == "21:00"

    @pytest.mark.asyncio
    async def test_legacy_not_queried_when_complete(self, resolver, fake_store):
        fake_store.restaurant_row = {
            "business_hours": {"mon": {"start": "17:00", "end": "22:00"}},
            "settings": {"slot_interval_min": 30, "dining_duration_min": 90},
        }

        await resolver.resolve(MONDAY)

        assert "fetch_first_row" not in fake_store.calls

    @pytest.mark.asyncio
    async def test_store_failure_never_raises(self, resolver, fake_store):
        fake_store.failing.add("restaurants")
        fake_store.legacy_rows["settings"] = {"opening_time": "18:00", "closing_time": "23:00"}

        config = await resolver.resolve(MONDAY)

        assert config.open_time == "18:00"
        assert config.close_time == "23:00"

    @pytest.mark.asyncio
    async def test_inverted_open_close_falls_back_to_default(self, resolver, fake_store):
        fake_store.restaurant_row = {
            "business_hours": None,
            "settings": {"open_time": "22:00", "close_time": "10:00"},
        }

        config, sources = await resolver.resolve_with_sources(MONDAY)

        assert config == DEFAULT_HOURS
        assert sources == ["default"]
