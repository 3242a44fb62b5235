"""Pytest configuration and fixtures for availability tests."""
import pytest
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from core.utils_datetime import combine_local
from db.store import StoreError
from domain.enums import ACTIVE_STATUSES
from domain.models import ReservationRecord
from services.availability_service import AvailabilityService


# Monday; far enough ahead that it is never a past date
BOOKING_DATE = date(2030, 1, 7)


class FakeStore:
    """In-memory stand-in for RestaurantStore with the same query semantics."""

    def __init__(self):
        self.restaurant_row: Optional[Dict[str, Any]] = None
        self.legacy_rows: Dict[str, Optional[Dict[str, Any]]] = {}
        self.table_rows: Dict[str, List[Dict[str, Any]]] = {}
        self.reservations: List[ReservationRecord] = []
        self.closures: Dict[date, Dict[str, Any]] = {}
        self.failing: Set[str] = set()
        self.calls: List[str] = []

    def _record(self, operation: str, table_name: str) -> None:
        self.calls.append(operation)
        if operation in self.failing or table_name in self.failing:
            raise StoreError(operation, table_name, RuntimeError("simulated failure"))

    async def fetch_restaurant_hours_row(self, restaurant_id: Optional[str] = None):
        self._record("fetch_restaurant_hours_row", "restaurants")
        return self.restaurant_row

    async def fetch_first_row(self, table_name: str, columns: Sequence[str]):
        self._record("fetch_first_row", table_name)
        if table_name not in self.legacy_rows:
            raise StoreError("fetch first row", table_name, RuntimeError("relation does not exist"))
        row = self.legacy_rows[table_name]
        return {name: row.get(name) for name in columns} if row else None

    async def fetch_table_rows(self, table_name: str):
        self._record("fetch_table_rows", table_name)
        if table_name not in self.table_rows:
            raise StoreError("fetch rows", table_name, RuntimeError("relation does not exist"))
        return list(self.table_rows[table_name])

    async def fetch_active_reservations(
        self,
        start: datetime,
        end: datetime,
        restaurant_id: Optional[str] = None,
        exclude_id: Optional[str] = None,
        statuses: Iterable[str] = ACTIVE_STATUSES,
    ):
        self._record("fetch_active_reservations", "table_reservations")
        statuses = set(statuses)
        matching = [
            r for r in self.reservations
            if start <= r.reservation_time <= end
            and r.status in statuses
            and (exclude_id is None or r.id != exclude_id)
        ]
        return sorted(matching, key=lambda r: r.reservation_time)

    async def fetch_closure(self, day: date):
        self._record("fetch_closure", "restaurant_closures")
        return self.closures.get(day)


@pytest.fixture(scope="function")
def fake_store():
    """Empty store: no hours, no tables, no reservations."""
    return FakeStore()


@pytest.fixture(scope="function")
def availability_service(fake_store):
    """Availability service reading from the fake store."""
    return AvailabilityService(fake_store)


@pytest.fixture(scope="function")
def booking_date():
    """A future Monday used as the requested date."""
    return BOOKING_DATE


@pytest.fixture(scope="function")
def make_reservation():
    """Factory fixture building reservations at a local wall-clock time."""
    counter = {"next": 1}

    def _make(
        hhmm: str,
        party_size: int = 2,
        status: str = "confirmed",
        day: date = BOOKING_DATE,
        table_id: Optional[str] = None,
        reservation_id: Optional[str] = None,
        seconds: int = 0,
    ) -> ReservationRecord:
        reservation_id = reservation_id or f"res-{counter['next']}"
        counter["next"] += 1
        when = combine_local(day, hhmm).replace(second=seconds)
        return ReservationRecord(
            id=reservation_id,
            reservation_time=when,
            party_size=party_size,
            status=status,
            table_id=table_id,
        )
    return _make


@pytest.fixture(scope="function")
def add_reservation(fake_store, make_reservation):
    """Factory fixture storing a reservation in the fake store."""
    def _add(hhmm: str, **kwargs) -> ReservationRecord:
        reservation = make_reservation(hhmm, **kwargs)
        fake_store.reservations.append(reservation)
        return reservation
    return _add
