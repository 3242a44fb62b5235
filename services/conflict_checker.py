"""
Conflict and capacity checks for a candidate reservation time.

A candidate conflicts with any active reservation whose start lies within
30 minutes of it on either side, boundaries included. Reservation reads are
the caller's job; every function here is pure.
"""
import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from domain.models import ReservationRecord, Table


logger = logging.getLogger(__name__)


CONFLICT_WINDOW_MINUTES = 30

# Parties of this size or larger may be split across two tables
COMBINATION_MIN_PARTY = 7
COMBINATION_PRIMARY_MIN_CAPACITY = 6
COMBINATION_SECONDARY_MIN_CAPACITY = 2


def conflict_window(candidate: datetime) -> Tuple[datetime, datetime]:
    """Inclusive bounds of the window around a candidate time."""
    delta = timedelta(minutes=CONFLICT_WINDOW_MINUTES)
    return candidate - delta, candidate + delta


def reservations_in_window(
    candidate: datetime,
    reservations: Iterable[ReservationRecord]
) -> List[ReservationRecord]:
    """Active reservations whose start falls inside the candidate's window."""
    window_start, window_end = conflict_window(candidate)
    return [
        r for r in reservations
        if r.is_active and window_start <= r.reservation_time <= window_end
    ]


def has_conflict(candidate: datetime, reservations: Iterable[ReservationRecord]) -> bool:
    """
    Check whether a candidate time clashes with an existing reservation.

    Args:
        candidate: Timezone-aware start time being considered
        reservations: Reservations of the day (inactive ones are ignored)

    Returns:
        True if any active reservation lies within the window
    """
    return bool(reservations_in_window(candidate, reservations))


def booked_guests(candidate: datetime, reservations: Iterable[ReservationRecord]) -> int:
    """Guests of active reservations inside the candidate's window."""
    return sum(r.party_size for r in reservations_in_window(candidate, reservations))


def total_capacity(tables: Iterable[Table]) -> int:
    return sum(t.capacity for t in tables)


def remaining_capacity(
    candidate: datetime,
    reservations: Iterable[ReservationRecord],
    tables: Iterable[Table]
) -> int:
    """
    Seats left at a candidate time.

    Returns:
        Total table capacity minus booked guests in the window; may be negative
    """
    return total_capacity(tables) - booked_guests(candidate, reservations)


def available_tables(
    candidate: datetime,
    party_size: int,
    reservations: Iterable[ReservationRecord],
    tables: Iterable[Table]
) -> List[Table]:
    """
    Tables free at a candidate time that can seat the party.

    A table is taken when an active reservation in the window is assigned to it.

    Returns:
        Suitable tables, smallest first
    """
    taken = {
        r.table_id for r in reservations_in_window(candidate, reservations)
        if r.table_id is not None
    }
    free = [
        t for t in tables
        if str(t.id) not in taken and t.capacity >= party_size
    ]
    return sorted(free, key=lambda t: (t.capacity, t.name))


def pick_best_table(party_size: int, tables: Iterable[Table]) -> Optional[Table]:
    """Smallest table that seats the party, or None."""
    suitable = sorted(
        (t for t in tables if t.capacity >= party_size),
        key=lambda t: (t.capacity, t.name),
    )
    return suitable[0] if suitable else None


def pick_combination(party_size: int, tables: Iterable[Table]) -> Optional[Tuple[Table, Table]]:
    """
    Seat a large party across a main table and a second smaller one.

    Args:
        party_size: Number of guests (only parties of 7 or more qualify)
        tables: Free tables to choose from

    Returns:
        (primary, secondary) tables, or None when no pair fits
    """
    if party_size < COMBINATION_MIN_PARTY:
        return None

    candidates = sorted(tables, key=lambda t: (t.capacity, t.name))
    for primary in candidates:
        if primary.capacity < COMBINATION_PRIMARY_MIN_CAPACITY:
            continue
        for secondary in candidates:
            if str(secondary.id) == str(primary.id):
                continue
            if secondary.capacity < COMBINATION_SECONDARY_MIN_CAPACITY:
                continue
            if primary.capacity + secondary.capacity >= party_size:
                logger.debug(
                    f"Party of {party_size} split across {primary.name} and {secondary.name}"
                )
                return primary, secondary
    return None
