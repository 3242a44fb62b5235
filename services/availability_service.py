"""
Availability service.

Combines resolved business hours, the slot grid, existing reservations and
the active tables into per-slot availability for a date and party size.
Reads only; nothing here reserves a slot, so two requests may both see the
same slot as free until one of them is written.
"""
import logging
from collections import Counter
from datetime import date, datetime
from typing import Dict, List, Optional, Union

from core.logging import request_log_context
from core.settings import settings
from core.utils_datetime import combine_local, day_bounds, format_hhmm
from db.store import RestaurantStore, StoreError
from domain.enums import SlotReason
from domain.exceptions import ReservationLookupError
from domain.models import (
    AvailabilityReport,
    BusinessHoursReport,
    DailySummary,
    PreferredTimeStatus,
    Recommendation,
    ReservationRecord,
    SlotCheckResult,
    SlotStatus,
    Table,
)
from services.business_hours import BusinessHoursResolver
from services.conflict_checker import (
    available_tables,
    booked_guests,
    conflict_window,
    has_conflict,
    pick_best_table,
    pick_combination,
    remaining_capacity,
    total_capacity,
)
from services.request_validation import (
    validate_availability_request,
    validate_summary_request,
)
from services.slot_generator import generate_time_slots, last_seating_time
from services.table_service import TableLookup


logger = logging.getLogger(__name__)


MAX_RECOMMENDATIONS = 3


class AvailabilityService:
    """Answer availability questions for one restaurant."""

    def __init__(
        self,
        store: RestaurantStore,
        hours_resolver: Optional[BusinessHoursResolver] = None,
        table_lookup: Optional[TableLookup] = None,
        restaurant_id: Optional[str] = None,
    ):
        """
        Initialize AvailabilityService.

        Args:
            store: Query boundary to the reservation database
            hours_resolver: Business hours resolver (built from the store if omitted)
            table_lookup: Table loader (built from the store if omitted)
            restaurant_id: Restaurant scope; defaults to the configured one
        """
        self.store = store
        self.restaurant_id = restaurant_id or settings.restaurant_id
        self.hours_resolver = hours_resolver or BusinessHoursResolver(store, self.restaurant_id)
        self.table_lookup = table_lookup or TableLookup(store)

    # ------------------------------------------------------------------
    # Store access
    # ------------------------------------------------------------------

    async def _is_closed(self, day: date) -> bool:
        """Closure lookups are optional; a failed lookup counts as open."""
        try:
            closure = await self.store.fetch_closure(day)
        except StoreError as e:
            logger.warning(f"Closure lookup failed for {day}, treating as open: {e}")
            return False
        if closure:
            logger.info(f"Restaurant closed on {day}: {closure.get('reason') or 'no reason given'}")
            return True
        return False

    async def _fetch_reservations(
        self,
        start: datetime,
        end: datetime,
        exclude_id: Optional[str] = None
    ) -> List[ReservationRecord]:
        try:
            return await self.store.fetch_active_reservations(
                start,
                end,
                restaurant_id=self.restaurant_id,
                exclude_id=exclude_id,
            )
        except StoreError as e:
            logger.error(f"Failed to read reservations between {start} and {end}: {e}")
            raise ReservationLookupError("Failed to read existing reservations", str(e)) from e

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    @staticmethod
    def _evaluate_slot(
        candidate: datetime,
        party_size: int,
        reservations: List[ReservationRecord],
        tables: List[Table],
    ) -> SlotReason:
        if has_conflict(candidate, reservations):
            return SlotReason.CONFLICT
        if remaining_capacity(candidate, reservations, tables) < party_size:
            return SlotReason.CAPACITY
        return SlotReason.AVAILABLE

    async def recommend(
        self,
        day: Union[str, date],
        party_size: Union[int, str],
        preferred_time: Optional[str] = None,
        exclude_reservation_id: Optional[str] = None,
    ) -> AvailabilityReport:
        """
        Evaluate every slot of a date for a party and recommend the earliest free ones.

        Args:
            day: Requested date (YYYY-MM-DD or date)
            party_size: Number of guests
            preferred_time: Time the guest asked for (HH:MM)
            exclude_reservation_id: Reservation being rescheduled, ignored in checks

        Returns:
            AvailabilityReport with slot statuses and up to three recommendations

        Raises:
            InvalidRequestError: Malformed input
            PastDateError: Date before today
            ReservationLookupError: Existing reservations could not be read
        """
        validation = validate_availability_request(
            day, party_size, preferred_time, exclude_reservation_id=exclude_reservation_id
        )
        validation.raise_for_errors()

        target: date = validation.normalized_data["date"]
        party_size = validation.normalized_data["party_size"]
        preferred = validation.normalized_data["time"]
        exclude_reservation_id = validation.normalized_data.get("exclude_reservation_id")

        with request_log_context(request_date=target.isoformat(), party_size=party_size):
            return await self._recommend(target, party_size, preferred, exclude_reservation_id)

    async def _recommend(
        self,
        target: date,
        party_size: int,
        preferred: Optional[str],
        exclude_reservation_id: Optional[str],
    ) -> AvailabilityReport:
        if await self._is_closed(target):
            return AvailabilityReport(
                date=target,
                party_size=party_size,
                preferred_time=(
                    PreferredTimeStatus(time=preferred, available=False, reason=SlotReason.CLOSED.value)
                    if preferred else None
                ),
                closed=True,
                message=SlotReason.CLOSED.value,
            )

        hours = await self.hours_resolver.resolve(target)
        grid = generate_time_slots(hours)

        start, end = day_bounds(target)
        reservations = await self._fetch_reservations(start, end, exclude_reservation_id)
        table_set = await self.table_lookup.load_active_tables()

        slots: List[SlotStatus] = []
        for hhmm in grid:
            reason = self._evaluate_slot(
                combine_local(target, hhmm), party_size, reservations, table_set.tables
            )
            slots.append(SlotStatus(
                time=hhmm,
                available=reason is SlotReason.AVAILABLE,
                reason=reason.value,
            ))

        available = [s for s in slots if s.available]
        recommendations = [
            Recommendation(time=s.time, display_time=s.time, reason="This time can be booked")
            for s in available[:MAX_RECOMMENDATIONS]
        ]

        preferred_status = None
        if preferred:
            preferred_status = self._preferred_status(target, preferred, slots, reservations)

        logger.info(
            f"Availability for {target}, party of {party_size}: "
            f"{len(available)}/{len(slots)} slots free, {len(reservations)} active reservations"
        )

        return AvailabilityReport(
            date=target,
            party_size=party_size,
            preferred_time=preferred_status,
            slots=slots,
            available_slots=available,
            unavailable_slots=[s for s in slots if not s.available],
            recommendations=recommendations,
            total_available=len(available),
            business_hours=hours,
            message=(
                f"Found {len(recommendations)} recommended time slots"
                if recommendations
                else "Sorry, every time slot on this date is already booked"
            ),
        )

    @staticmethod
    def _preferred_status(
        day: date,
        preferred: str,
        slots: List[SlotStatus],
        reservations: List[ReservationRecord],
    ) -> PreferredTimeStatus:
        on_grid = next((s for s in slots if s.time == preferred), None)
        if on_grid is not None:
            return PreferredTimeStatus(time=preferred, available=on_grid.available, reason=on_grid.reason)

        # Off-grid times are never bookable, but a clash is the more useful answer
        if has_conflict(combine_local(day, preferred), reservations):
            reason = SlotReason.CONFLICT
        else:
            reason = SlotReason.NOT_A_SLOT
        return PreferredTimeStatus(time=preferred, available=False, reason=reason.value)

    async def check_slot(
        self,
        day: Union[str, date],
        time: str,
        party_size: Union[int, str],
    ) -> SlotCheckResult:
        """
        Check whether one exact date, time and party size can be booked now.

        Only reservations within the conflict window of the time are read.

        Returns:
            SlotCheckResult with capacity figures and a suggested table assignment
        """
        validation = validate_availability_request(day, party_size, time, time_required=True)
        validation.raise_for_errors()

        target: date = validation.normalized_data["date"]
        party_size = validation.normalized_data["party_size"]
        hhmm = validation.normalized_data["time"]

        with request_log_context(request_date=target.isoformat(), party_size=party_size, time=hhmm):
            return await self._check_slot(target, hhmm, party_size)

    async def _check_slot(self, target: date, hhmm: str, party_size: int) -> SlotCheckResult:
        if await self._is_closed(target):
            return SlotCheckResult(
                date=target,
                time=hhmm,
                party_size=party_size,
                available=False,
                reason=SlotReason.CLOSED.value,
            )

        hours = await self.hours_resolver.resolve(target)
        on_grid = hhmm in generate_time_slots(hours)

        candidate = combine_local(target, hhmm)
        window_start, window_end = conflict_window(candidate)
        reservations = await self._fetch_reservations(window_start, window_end)
        table_set = await self.table_lookup.load_active_tables()

        conflict = has_conflict(candidate, reservations)
        booked = booked_guests(candidate, reservations)
        capacity = total_capacity(table_set.tables)
        remaining = capacity - booked
        free_tables = available_tables(candidate, 0, reservations, table_set.tables)
        suitable = [t for t in free_tables if t.capacity >= party_size]

        # A split across two tables is only offered when no single table fits
        additional: Optional[Table] = None
        assigned: Optional[Table] = pick_best_table(party_size, suitable)
        if assigned is None:
            combination = pick_combination(party_size, free_tables)
            if combination is not None:
                assigned, additional = combination

        if not on_grid:
            reason = SlotReason.NOT_A_SLOT
        elif conflict:
            reason = SlotReason.CONFLICT
        elif remaining < party_size:
            reason = SlotReason.CAPACITY
        elif assigned is None:
            reason = SlotReason.NO_TABLE
        else:
            reason = SlotReason.AVAILABLE

        available = reason is SlotReason.AVAILABLE
        logger.info(f"Slot check {target} {hhmm} party of {party_size}: {reason.name}")

        return SlotCheckResult(
            date=target,
            time=hhmm,
            party_size=party_size,
            available=available,
            reason=reason.value,
            conflict=conflict,
            booked_guests=booked,
            total_capacity=capacity,
            remaining_capacity=max(remaining, 0),
            suitable_tables=suitable,
            assigned_table=assigned if available else None,
            additional_table=additional if available else None,
            table_source=table_set.source,
        )

    async def daily_summary(self, day: Union[str, date]) -> DailySummary:
        """Count active reservations of a date, in total and per start time."""
        validation = validate_summary_request(day)
        validation.raise_for_errors()
        target: date = validation.normalized_data["date"]

        start, end = day_bounds(target)
        reservations = await self._fetch_reservations(start, end)

        counts: Dict[str, int] = Counter(
            format_hhmm(r.reservation_time.hour * 60 + r.reservation_time.minute)
            for r in reservations
        )
        return DailySummary(
            date=target,
            total=len(reservations),
            by_time=dict(sorted(counts.items())),
        )

    async def business_hours_report(self, day: Union[str, date]) -> BusinessHoursReport:
        """Resolved hours for a date with their slot grid and contributing sources."""
        validation = validate_summary_request(day)
        validation.raise_for_errors()
        target: date = validation.normalized_data["date"]

        config, sources = await self.hours_resolver.resolve_with_sources(target)
        return BusinessHoursReport(
            date=target,
            config=config,
            sources=sources,
            slots=generate_time_slots(config),
            last_seating=last_seating_time(config),
        )
