"""
Business hours resolution.

Hours for a date are assembled from an ordered chain of sources, each
producing a partial configuration. Fields are merged one by one: the first
source that supplies a usable value for a field wins it, later sources only
fill what is still unset, and the hard default fills whatever remains.
"""
import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from core.settings import settings
from core.utils_datetime import normalize_hhmm, parse_hhmm, sunday_based_weekday
from db.store import RestaurantStore, StoreError
from domain.enums import DayOfWeek
from domain.models import BusinessHoursConfig, TimeSegment


logger = logging.getLogger(__name__)


DEFAULT_HOURS = BusinessHoursConfig(
    open_time="17:00",
    close_time="21:00",
    slot_interval_minutes=30,
    dining_duration_minutes=90,
)

SCALAR_FIELDS = (
    "open_time",
    "close_time",
    "slot_interval_minutes",
    "dining_duration_minutes",
)

# Keys are compared lower-cased
WEEKDAY_ALIASES: Dict[DayOfWeek, Tuple[str, ...]] = {
    DayOfWeek.SUNDAY: ("sun", "sunday", "0", "日", "週日", "周日", "星期日"),
    DayOfWeek.MONDAY: ("mon", "monday", "1", "一", "週一", "周一", "星期一"),
    DayOfWeek.TUESDAY: ("tue", "tuesday", "2", "二", "週二", "周二", "星期二"),
    DayOfWeek.WEDNESDAY: ("wed", "wednesday", "3", "三", "週三", "周三", "星期三"),
    DayOfWeek.THURSDAY: ("thu", "thursday", "4", "四", "週四", "周四", "星期四"),
    DayOfWeek.FRIDAY: ("fri", "friday", "5", "五", "週五", "周五", "星期五"),
    DayOfWeek.SATURDAY: ("sat", "saturday", "6", "六", "週六", "周六", "星期六"),
}

OPEN_KEYS = ("open_time", "opening_time", "open", "open_at", "start", "from", "openTime")
CLOSE_KEYS = ("close_time", "closing_time", "close", "close_at", "end", "to", "closeTime")
DAY_KEYS = ("day", "weekday", "wday", "dow")
WEEKLY_CONTAINER_KEYS = ("weekly", "weekdays", "days")
SERVICE_PERIOD_KEYS = ("lunch", "dinner")

INTERVAL_KEYS = ("slot_interval_min", "slot_interval", "interval")
DURATION_KEYS = ("dining_duration_min", "dining_duration", "diningDurationMin")


# ============================================================================
# Value coercion
# ============================================================================

def _pick(mapping: Dict[str, Any], keys: Iterable[str]) -> Any:
    """First non-null value among the given keys."""
    for key in keys:
        value = mapping.get(key)
        if value is not None:
            return value
    return None


def _load_json(value: Any) -> Any:
    """JSON columns may arrive decoded or as text."""
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            logger.warning("Ignoring hours column that is not valid JSON")
            return None
    return value


def to_positive_int(value: Any) -> Optional[int]:
    """Coerce a stored number to a positive int, or None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number <= 0 or not number.is_integer():
        return None
    return int(number)


def _segment_from(entry: Any) -> Optional[TimeSegment]:
    if not isinstance(entry, dict):
        return None
    start = normalize_hhmm(_pick(entry, OPEN_KEYS))
    end = normalize_hhmm(_pick(entry, CLOSE_KEYS))
    if start is None or end is None:
        return None
    if parse_hhmm(start) >= parse_hhmm(end):
        logger.warning(f"Ignoring hours segment {start}-{end}: start is not before end")
        return None
    return TimeSegment(start=start, end=end)


def _segments_from_entry(entry: Any) -> List[TimeSegment]:
    """Segments of one weekday entry, whatever shape it was stored in."""
    if isinstance(entry, list):
        candidates = entry
    elif isinstance(entry, dict):
        if isinstance(entry.get("segments"), list):
            candidates = entry["segments"]
        elif any(isinstance(entry.get(key), dict) for key in SERVICE_PERIOD_KEYS):
            candidates = [entry.get(key) for key in SERVICE_PERIOD_KEYS]
        else:
            candidates = [entry]
    else:
        return []

    segments = [seg for seg in (_segment_from(c) for c in candidates) if seg is not None]
    return sorted(segments, key=lambda seg: seg.start_minutes)


def _find_weekday_entry(container: Any, weekday: int) -> Any:
    aliases = WEEKDAY_ALIASES[DayOfWeek(weekday)]

    if isinstance(container, dict):
        lowered = {str(key).strip().lower(): value for key, value in container.items()}
        for alias in aliases:
            if alias in lowered:
                return lowered[alias]

    if isinstance(container, list):
        for item in container:
            if not isinstance(item, dict):
                continue
            day = _pick(item, DAY_KEYS)
            if day is not None and str(day).strip().lower() in aliases:
                return item

    return None


def parse_weekly_segments(business_hours: Any, weekday: int) -> List[TimeSegment]:
    """
    Extract the open segments for a weekday from a business_hours structure.

    Args:
        business_hours: Decoded business_hours JSON (mapping or list)
        weekday: Sunday-based weekday (0-6)

    Returns:
        Valid segments ordered by start time; empty when nothing matches
    """
    if isinstance(business_hours, list):
        container = business_hours
    elif isinstance(business_hours, dict):
        container = _pick(business_hours, WEEKLY_CONTAINER_KEYS) or business_hours
    else:
        return []

    entry = _find_weekday_entry(container, weekday)
    if entry is not None:
        return _segments_from_entry(entry)

    # A flat {open_time, close_time} object applies to every day
    if isinstance(business_hours, dict):
        single = _segment_from(business_hours)
        if single is not None:
            return [single]
    return []


# ============================================================================
# Sources
# ============================================================================

@dataclass
class ResolutionContext:
    """Per-call state shared by the sources of one resolution."""

    store: RestaurantStore
    day: date
    restaurant_id: Optional[str]
    _restaurant_row: Optional[Dict[str, Any]] = None
    _restaurant_row_loaded: bool = False

    @property
    def weekday(self) -> int:
        return sunday_based_weekday(self.day)

    async def restaurant_row(self) -> Optional[Dict[str, Any]]:
        """The restaurants row, fetched at most once per resolution."""
        if not self._restaurant_row_loaded:
            self._restaurant_row_loaded = True
            try:
                self._restaurant_row = await self.store.fetch_restaurant_hours_row(self.restaurant_id)
            except StoreError as e:
                logger.warning(f"Restaurant hours unavailable: {e}")
                self._restaurant_row = None
        return self._restaurant_row


class HoursSource:
    """One link of the resolution chain."""

    name = "source"

    async def partial(self, ctx: ResolutionContext) -> Dict[str, Any]:
        """Return the fields this source can supply; missing keys mean unset."""
        raise NotImplementedError


class WeeklyHoursSource(HoursSource):
    """Per-weekday hours stored in restaurants.business_hours."""

    name = "restaurants.business_hours"

    async def partial(self, ctx: ResolutionContext) -> Dict[str, Any]:
        row = await ctx.restaurant_row()
        if not row:
            return {}

        segments = parse_weekly_segments(_load_json(row.get("business_hours")), ctx.weekday)
        if not segments:
            return {}

        return {
            "segments": segments,
            "open_time": segments[0].start,
            "close_time": segments[-1].end,
        }


class SettingsSource(HoursSource):
    """Flat open/close and slot overrides stored in restaurants.settings."""

    name = "restaurants.settings"

    async def partial(self, ctx: ResolutionContext) -> Dict[str, Any]:
        row = await ctx.restaurant_row()
        if not row:
            return {}

        data = _load_json(row.get("settings"))
        if not isinstance(data, dict):
            return {}

        return {
            "open_time": normalize_hhmm(_pick(data, ("open_time", "opening_time"))),
            "close_time": normalize_hhmm(_pick(data, ("close_time", "closing_time"))),
            "slot_interval_minutes": to_positive_int(_pick(data, INTERVAL_KEYS)),
            "dining_duration_minutes": to_positive_int(_pick(data, DURATION_KEYS)),
        }


@dataclass(frozen=True)
class LegacyLayout:
    """Column names of one older hours table."""

    table: str
    open_column: str
    close_column: str
    duration_column: str
    interval_column: str

    @property
    def columns(self) -> Sequence[str]:
        return (self.open_column, self.close_column, self.duration_column, self.interval_column)

    def to_partial(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "open_time": normalize_hhmm(row.get(self.open_column)),
            "close_time": normalize_hhmm(row.get(self.close_column)),
            "dining_duration_minutes": to_positive_int(row.get(self.duration_column)),
            "slot_interval_minutes": to_positive_int(row.get(self.interval_column)),
        }


LEGACY_LAYOUTS: Tuple[LegacyLayout, ...] = (
    LegacyLayout("restaurant_settings", "open_time", "close_time", "dining_duration_min", "slot_interval_min"),
    LegacyLayout("business_hours", "open_time", "close_time", "duration_min", "interval_min"),
    LegacyLayout("settings", "opening_time", "closing_time", "dining_duration", "slot_interval"),
)


class LegacyTablesSource(HoursSource):
    """Older single-row hours tables; the first table returning a row wins."""

    name = "legacy"

    def __init__(self, layouts: Sequence[LegacyLayout] = LEGACY_LAYOUTS):
        self.layouts = layouts
        self.matched: Optional[str] = None

    async def partial(self, ctx: ResolutionContext) -> Dict[str, Any]:
        for layout in self.layouts:
            try:
                row = await ctx.store.fetch_first_row(layout.table, layout.columns)
            except StoreError as e:
                logger.debug(f"Skipping hours table {layout.table}: {e}")
                continue
            if row:
                self.matched = layout.table
                return layout.to_partial(row)
        return {}


# ============================================================================
# Resolver
# ============================================================================

class BusinessHoursResolver:
    """Resolve the hours and slot parameters that apply on a date."""

    def __init__(
        self,
        store: RestaurantStore,
        default_restaurant_id: Optional[str] = None,
        default_hours: BusinessHoursConfig = DEFAULT_HOURS,
    ):
        """
        Initialize the resolver.

        Args:
            store: Query boundary to the reservation database
            default_restaurant_id: Restaurant used when a call names none
            default_hours: Values for fields no source supplies
        """
        self.store = store
        self.default_restaurant_id = default_restaurant_id or settings.restaurant_id
        self.default_hours = default_hours

    def _sources(self) -> List[HoursSource]:
        return [WeeklyHoursSource(), SettingsSource(), LegacyTablesSource()]

    async def resolve(self, day: date, restaurant_id: Optional[str] = None) -> BusinessHoursConfig:
        """
        Resolve hours for a date. Never raises.

        Args:
            day: Calendar date
            restaurant_id: Restaurant to resolve for (defaults to the configured one)

        Returns:
            Resolved configuration, or the default when nothing usable is stored
        """
        config, _ = await self.resolve_with_sources(day, restaurant_id)
        return config

    async def resolve_with_sources(
        self,
        day: date,
        restaurant_id: Optional[str] = None
    ) -> Tuple[BusinessHoursConfig, List[str]]:
        """Resolve hours and report which sources contributed."""
        try:
            return await self._resolve(day, restaurant_id or self.default_restaurant_id)
        except Exception as e:
            logger.error(f"Business hours resolution failed for {day}, using defaults: {e}", exc_info=True)
            return self.default_hours, ["default"]

    async def _resolve(
        self,
        day: date,
        restaurant_id: Optional[str]
    ) -> Tuple[BusinessHoursConfig, List[str]]:
        ctx = ResolutionContext(store=self.store, day=day, restaurant_id=restaurant_id)
        merged: Dict[str, Any] = {}
        contributors: List[str] = []

        for source in self._sources():
            if all(name in merged for name in SCALAR_FIELDS):
                break

            partial = await source.partial(ctx)
            filled = [
                name for name, value in partial.items()
                if value is not None and name not in merged
            ]
            for name in filled:
                merged[name] = partial[name]

            if filled:
                label = source.name
                if isinstance(source, LegacyTablesSource) and source.matched:
                    label = source.matched
                contributors.append(label)

        if not all(name in merged for name in SCALAR_FIELDS):
            contributors.append("default")

        values = {
            name: merged.get(name, getattr(self.default_hours, name))
            for name in SCALAR_FIELDS
        }
        values["segments"] = merged.get("segments", [])

        try:
            config = BusinessHoursConfig(**values)
        except ValidationError as e:
            logger.warning(f"Resolved hours for {day} are invalid, using defaults: {e}")
            return self.default_hours, ["default"]

        logger.debug(f"Resolved hours for {day} from {contributors}: {config}")
        return config, contributors
