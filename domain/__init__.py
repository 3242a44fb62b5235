"""Domain layer for the restaurant availability service."""

from .enums import (
    ReservationStatus,
    ACTIVE_STATUSES,
    TableStatus,
    DayOfWeek,
    SlotReason,
)
from .exceptions import (
    AvailabilityError,
    InvalidRequestError,
    PastDateError,
    ReservationLookupError,
)
from .models import (
    TimeSegment,
    BusinessHoursConfig,
    SlotStatus,
    ReservationRecord,
    Table,
    Recommendation,
    PreferredTimeStatus,
    AvailabilityReport,
    SlotCheckResult,
    DailySummary,
    BusinessHoursReport,
)

__all__ = [
    # Enums
    "ReservationStatus",
    "ACTIVE_STATUSES",
    "TableStatus",
    "DayOfWeek",
    "SlotReason",
    # Exceptions
    "AvailabilityError",
    "InvalidRequestError",
    "PastDateError",
    "ReservationLookupError",
    # Models
    "TimeSegment",
    "BusinessHoursConfig",
    "SlotStatus",
    "ReservationRecord",
    "Table",
    "Recommendation",
    "PreferredTimeStatus",
    "AvailabilityReport",
    "SlotCheckResult",
    "DailySummary",
    "BusinessHoursReport",
]
