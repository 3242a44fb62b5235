"""
Slot generation from resolved business hours.

A slot is a start time a party may be seated at. The last slot of a service
window is the latest interval boundary that still leaves a full dining
duration before closing.
"""
from typing import List, Optional, Set, Tuple

from core.utils_datetime import format_hhmm
from domain.models import BusinessHoursConfig


def _floor_to_interval(minutes: int, interval: int) -> int:
    return (minutes // interval) * interval


def _window_slots(start: int, end: int, interval: int, duration: int) -> List[int]:
    last_floored = _floor_to_interval(end - duration, interval)
    if last_floored <= start:
        return []
    return list(range(start, last_floored + 1, interval))


def generate_time_slots(config: BusinessHoursConfig) -> List[str]:
    """
    Generate bookable start times for a resolved configuration.

    Args:
        config: Business hours with interval and dining duration

    Returns:
        Unique HH:MM strings in ascending order
    """
    interval = config.slot_interval_minutes
    duration = config.dining_duration_minutes

    minutes: Set[int] = set()
    for start, end in config.service_windows():
        minutes.update(_window_slots(start, end, interval, duration))

    return [format_hhmm(m) for m in sorted(minutes)]


def last_seating_time(config: BusinessHoursConfig) -> Optional[str]:
    """Latest start time of the final service window, or None if it has no slots."""
    windows: List[Tuple[int, int]] = config.service_windows()
    if not windows:
        return None

    start, end = max(windows, key=lambda window: window[1])
    slots = _window_slots(start, end, config.slot_interval_minutes, config.dining_duration_minutes)
    return format_hhmm(slots[-1]) if slots else None
