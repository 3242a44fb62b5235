"""
Validation and normalization of availability request parameters.
Rejects malformed input before any database query is made.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from core.utils_datetime import get_current_date, normalize_hhmm, parse_iso_date
from domain.exceptions import InvalidRequestError, PastDateError


logger = logging.getLogger(__name__)


MIN_PARTY_SIZE = 1
MAX_PARTY_SIZE = 50
MAX_RESERVATION_ID_LENGTH = 36


class ValidationSeverity(Enum):
    """Validation error severity levels."""
    ERROR = "error"  # Blocks the request
    WARNING = "warning"  # Allowed but flagged


class ValidationCategory(Enum):
    """Validation error categories."""
    DATE = "date"
    TIME = "time"
    PARTY_SIZE = "party_size"
    RESERVATION_ID = "reservation_id"


@dataclass
class ValidationError:
    """Represents a validation error or warning."""
    category: ValidationCategory
    severity: ValidationSeverity
    message: str
    field: Optional[str] = None
    code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


@dataclass
class ValidationResult:
    """Result of validation with all errors, warnings and normalized values."""
    is_valid: bool = True
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationError] = field(default_factory=list)
    normalized_data: Dict[str, Any] = field(default_factory=dict)

    def add_error(self, error: ValidationError):
        """Add an error or warning; errors mark the result invalid."""
        if error.severity == ValidationSeverity.ERROR:
            self.errors.append(error)
            self.is_valid = False
        else:
            self.warnings.append(error)

    def get_error_messages(self) -> List[str]:
        return [e.message for e in self.errors]

    def has_code(self, code: str) -> bool:
        return any(e.code == code for e in self.errors)

    def raise_for_errors(self) -> None:
        """
        Raise the matching domain exception if validation failed.

        Raises:
            PastDateError: When the only blocking problem is a past date
            InvalidRequestError: For any other validation error
        """
        if self.is_valid:
            return
        messages = self.get_error_messages()
        if self.has_code("past_date") and len(self.errors) == 1:
            raise PastDateError(messages[0], messages)
        raise InvalidRequestError("; ".join(messages), messages)


# ============================================================================
# Field validators
# ============================================================================

def validate_date(value: Union[str, date, None], allow_past: bool = False) -> ValidationResult:
    """
    Validate a reservation date.

    Args:
        value: ISO date string (YYYY-MM-DD) or date
        allow_past: Skip the not-before-today rule

    Returns:
        ValidationResult with normalized_data['date']
    """
    result = ValidationResult()

    if value is None or value == "":
        result.add_error(ValidationError(
            category=ValidationCategory.DATE,
            severity=ValidationSeverity.ERROR,
            message="Date is required",
            field="date",
            code="date_required",
        ))
        return result

    parsed = value if isinstance(value, date) else parse_iso_date(str(value))
    if parsed is None:
        result.add_error(ValidationError(
            category=ValidationCategory.DATE,
            severity=ValidationSeverity.ERROR,
            message=f"Invalid date format: {value} (expected YYYY-MM-DD)",
            field="date",
            code="invalid_date",
        ))
        return result

    today = get_current_date()
    if not allow_past and parsed < today:
        result.add_error(ValidationError(
            category=ValidationCategory.DATE,
            severity=ValidationSeverity.ERROR,
            message="Cannot check availability for a past date",
            field="date",
            code="past_date",
            details={"date": parsed.isoformat(), "today": today.isoformat()},
        ))
        return result

    result.normalized_data["date"] = parsed
    return result


def validate_party_size(value: Any) -> ValidationResult:
    """Validate party size is a whole number within the accepted range."""
    result = ValidationResult()

    if isinstance(value, bool):
        value = None
    try:
        size = int(value)
    except (TypeError, ValueError):
        result.add_error(ValidationError(
            category=ValidationCategory.PARTY_SIZE,
            severity=ValidationSeverity.ERROR,
            message=f"Party size must be a whole number (got {value!r})",
            field="party_size",
            code="invalid_party_size",
        ))
        return result

    if size < MIN_PARTY_SIZE:
        result.add_error(ValidationError(
            category=ValidationCategory.PARTY_SIZE,
            severity=ValidationSeverity.ERROR,
            message=f"Party size must be at least {MIN_PARTY_SIZE}",
            field="party_size",
            code="party_size_too_small",
        ))
        return result

    if size > MAX_PARTY_SIZE:
        result.add_error(ValidationError(
            category=ValidationCategory.PARTY_SIZE,
            severity=ValidationSeverity.ERROR,
            message=f"Party size cannot exceed {MAX_PARTY_SIZE}",
            field="party_size",
            code="party_size_too_large",
        ))
        return result

    result.normalized_data["party_size"] = size
    return result


def validate_time_of_day(value: Optional[str], required: bool = False) -> ValidationResult:
    """Validate an HH:MM time; an absent optional time is valid and normalizes to None."""
    result = ValidationResult()

    if value is None or str(value).strip() == "":
        if required:
            result.add_error(ValidationError(
                category=ValidationCategory.TIME,
                severity=ValidationSeverity.ERROR,
                message="Time is required",
                field="time",
                code="time_required",
            ))
        result.normalized_data["time"] = None
        return result

    normalized = normalize_hhmm(str(value))
    if normalized is None or normalized == "24:00":
        result.add_error(ValidationError(
            category=ValidationCategory.TIME,
            severity=ValidationSeverity.ERROR,
            message=f"Invalid time: {value} (expected HH:MM)",
            field="time",
            code="invalid_time",
        ))
        return result

    result.normalized_data["time"] = normalized
    return result


def validate_reservation_id(value: Optional[str]) -> ValidationResult:
    """
    Validate the id of a reservation being rescheduled.

    A blank id is ignored with a warning; an id longer than the stored
    column can never match and is rejected.
    """
    result = ValidationResult()
    result.normalized_data["exclude_reservation_id"] = None

    if value is None:
        return result

    reservation_id = str(value).strip()
    if not reservation_id:
        result.add_error(ValidationError(
            category=ValidationCategory.RESERVATION_ID,
            severity=ValidationSeverity.WARNING,
            message="Blank reservation id ignored",
            field="exclude_reservation_id",
            code="blank_reservation_id",
        ))
        return result

    if len(reservation_id) > MAX_RESERVATION_ID_LENGTH:
        result.add_error(ValidationError(
            category=ValidationCategory.RESERVATION_ID,
            severity=ValidationSeverity.ERROR,
            message=f"Reservation id cannot exceed {MAX_RESERVATION_ID_LENGTH} characters",
            field="exclude_reservation_id",
            code="invalid_reservation_id",
        ))
        return result

    result.normalized_data["exclude_reservation_id"] = reservation_id
    return result


# ============================================================================
# Request validators
# ============================================================================

def _merge(target: ValidationResult, source: ValidationResult) -> None:
    for error in source.errors + source.warnings:
        target.add_error(error)
    target.normalized_data.update(source.normalized_data)


def validate_availability_request(
    day: Union[str, date, None],
    party_size: Any,
    preferred_time: Optional[str] = None,
    time_required: bool = False,
    exclude_reservation_id: Optional[str] = None,
) -> ValidationResult:
    """
    Validate a full availability request.

    Args:
        day: Requested date
        party_size: Number of guests
        preferred_time: Optional HH:MM the guest asked for
        time_required: Whether the time must be given (exact slot checks)
        exclude_reservation_id: Reservation being rescheduled, if any

    Returns:
        Combined ValidationResult with normalized 'date', 'party_size', 'time'
        and 'exclude_reservation_id'
    """
    result = ValidationResult()
    _merge(result, validate_party_size(party_size))
    _merge(result, validate_time_of_day(preferred_time, required=time_required))
    _merge(result, validate_date(day))
    _merge(result, validate_reservation_id(exclude_reservation_id))

    if not result.is_valid:
        logger.info(f"Rejected availability request: {result.get_error_messages()}")
    elif result.warnings:
        logger.info(f"Availability request warnings: {[w.message for w in result.warnings]}")
    return result


def validate_summary_request(day: Union[str, date, None]) -> ValidationResult:
    """Daily summaries may look at past dates."""
    return validate_date(day, allow_past=True)
