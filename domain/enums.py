"""Domain enums for the restaurant availability service."""

from enum import Enum


class ReservationStatus(str, Enum):
    """Reservation status enumeration."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    SEATED = "seated"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


# Only these statuses hold a table for conflict and capacity purposes
ACTIVE_STATUSES = frozenset({
    ReservationStatus.PENDING.value,
    ReservationStatus.CONFIRMED.value,
})


class TableStatus(str, Enum):
    """Table states that take a table out of service."""

    MAINTENANCE = "maintenance"
    CLEANING = "cleaning"
    INACTIVE = "inactive"
    OUT_OF_ORDER = "out_of_order"


class DayOfWeek(int, Enum):
    """Days of the week, Sunday-based as stored in business hours."""

    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6


class SlotReason(str, Enum):
    """Human-readable outcome attached to each evaluated slot."""

    AVAILABLE = "Time slot available"
    CONFLICT = "Another reservation is within 30 minutes of this time"
    CAPACITY = "Not enough seating capacity at this time"
    NO_TABLE = "No suitable table is free at this time"
    NOT_A_SLOT = "Time is not a bookable slot for this day"
    CLOSED = "Restaurant is closed on this date"
