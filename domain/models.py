"""Domain models using Pydantic v2 for the restaurant availability service."""

from datetime import date, datetime
from typing import Optional, Dict, List, Tuple, Union, Any

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from core.utils_datetime import ensure_aware, normalize_hhmm, parse_hhmm
from .enums import ACTIVE_STATUSES


class TimeSegment(BaseModel):
    """A contiguous open-to-close range within a day (e.g. lunch service)."""

    start: str = Field(..., description="Segment start (HH:MM)")
    end: str = Field(..., description="Segment end (HH:MM)")

    model_config = ConfigDict(frozen=True)

    @field_validator("start", "end", mode="before")
    @classmethod
    def normalize_time(cls, v: Any) -> str:
        """Normalize to zero-padded HH:MM."""
        normalized = normalize_hhmm(v)
        if normalized is None:
            raise ValueError(f"invalid time of day: {v!r}")
        return normalized

    @model_validator(mode="after")
    def check_order(self) -> "TimeSegment":
        """Every segment must start before it ends."""
        if parse_hhmm(self.start) >= parse_hhmm(self.end):
            raise ValueError(f"segment start {self.start} must be before end {self.end}")
        return self

    @property
    def start_minutes(self) -> int:
        return parse_hhmm(self.start)

    @property
    def end_minutes(self) -> int:
        return parse_hhmm(self.end)


class BusinessHoursConfig(BaseModel):
    """Opening hours and slot parameters resolved for one date."""

    open_time: str = Field(..., description="Opening time (HH:MM)")
    close_time: str = Field(..., description="Closing time (HH:MM)")
    slot_interval_minutes: int = Field(..., gt=0, description="Minutes between bookable start times")
    dining_duration_minutes: int = Field(..., gt=0, description="Minimum seating time before closing")
    segments: List[TimeSegment] = Field(default_factory=list, description="Separate service periods")

    model_config = ConfigDict(frozen=True)

    @field_validator("open_time", "close_time", mode="before")
    @classmethod
    def normalize_time(cls, v: Any) -> str:
        """Normalize to zero-padded HH:MM."""
        normalized = normalize_hhmm(v)
        if normalized is None:
            raise ValueError(f"invalid time of day: {v!r}")
        return normalized

    @model_validator(mode="after")
    def check_order(self) -> "BusinessHoursConfig":
        """Opening must come before closing."""
        if parse_hhmm(self.open_time) >= parse_hhmm(self.close_time):
            raise ValueError(f"open_time {self.open_time} must be before close_time {self.close_time}")
        return self

    def service_windows(self) -> List[Tuple[int, int]]:
        """
        Open windows in minutes since midnight.

        Segments take precedence over the single open/close pair.
        """
        if self.segments:
            return [(seg.start_minutes, seg.end_minutes) for seg in self.segments]
        return [(parse_hhmm(self.open_time), parse_hhmm(self.close_time))]


class SlotStatus(BaseModel):
    """A bookable start time with its availability on the requested date."""

    time: str
    available: bool
    reason: str

    model_config = ConfigDict(from_attributes=True)


class ReservationRecord(BaseModel):
    """Read-only view of an existing reservation."""

    id: Optional[str] = None
    reservation_time: datetime
    party_size: int = Field(default=0, ge=0)
    status: str = "pending"
    table_id: Optional[str] = None
    duration_minutes: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("id", "table_id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> Optional[str]:
        """Ids may be integers or UUIDs depending on the schema."""
        if v is None or v == "":
            return None
        return str(v)

    @field_validator("reservation_time")
    @classmethod
    def make_aware(cls, v: datetime) -> datetime:
        """Naive timestamps are taken as restaurant-local."""
        return ensure_aware(v)

    @field_validator("party_size", mode="before")
    @classmethod
    def default_party_size(cls, v: Any) -> int:
        """Missing party sizes count as zero guests."""
        return v or 0

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> str:
        """Statuses compare lower-cased."""
        return str(v or "").strip().lower()

    @property
    def is_active(self) -> bool:
        """Only pending and confirmed reservations hold a table."""
        return self.status in ACTIVE_STATUSES


class Table(BaseModel):
    """A table normalized from any of the supported table layouts."""

    id: Union[int, str]
    name: str
    capacity: int = Field(..., ge=0)
    type: str

    model_config = ConfigDict(from_attributes=True)


class Recommendation(BaseModel):
    """An available slot suggested to the guest."""

    time: str
    display_time: str
    reason: str


class PreferredTimeStatus(BaseModel):
    """Status of the time the guest originally asked for."""

    time: str
    available: bool
    reason: str


class AvailabilityReport(BaseModel):
    """Slots for a date and party size, plus up to three recommendations."""

    date: date
    party_size: int
    preferred_time: Optional[PreferredTimeStatus] = None
    slots: List[SlotStatus] = Field(default_factory=list)
    available_slots: List[SlotStatus] = Field(default_factory=list)
    unavailable_slots: List[SlotStatus] = Field(default_factory=list)
    recommendations: List[Recommendation] = Field(default_factory=list)
    total_available: int = 0
    business_hours: Optional[BusinessHoursConfig] = None
    closed: bool = False
    message: str = ""


class SlotCheckResult(BaseModel):
    """Whether one exact date, time and party size can be booked."""

    date: date
    time: str
    party_size: int
    available: bool
    reason: str
    conflict: bool = False
    booked_guests: int = 0
    total_capacity: int = 0
    remaining_capacity: int = 0
    suitable_tables: List[Table] = Field(default_factory=list)
    assigned_table: Optional[Table] = None
    additional_table: Optional[Table] = None
    table_source: str = ""


class DailySummary(BaseModel):
    """Active reservation counts for one date, keyed by HH:MM start."""

    date: date
    total: int
    by_time: Dict[str, int] = Field(default_factory=dict)


class BusinessHoursReport(BaseModel):
    """Resolved hours for a date with the slot grid they produce."""

    date: date
    config: BusinessHoursConfig
    sources: List[str] = Field(default_factory=list)
    slots: List[str] = Field(default_factory=list)
    last_seating: Optional[str] = None
