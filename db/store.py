"""
Read-only query boundary over the hosted reservation database.

Every query runs on its own connection: optional lookups against tables
that may not exist must not abort the transaction of the queries that follow.
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pydantic import ValidationError
from sqlalchemy import column, literal_column, select, table
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.sql import Select

from domain.enums import ACTIVE_STATUSES
from domain.models import ReservationRecord
from .models_sqlalchemy import Restaurant, RestaurantClosure, TableReservation


logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A query against the reservation database failed."""

    def __init__(self, operation: str, table_name: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.table_name = table_name
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{operation} on '{table_name}' failed{detail}")


class RestaurantStore:
    """Query rows from named tables, filtered, ordered and limited."""

    def __init__(self, engine: AsyncEngine):
        """
        Initialize the store.

        Args:
            engine: Async engine used to open one connection per query
        """
        self._engine = engine

    async def _fetch_all(self, stmt: Select, operation: str, table_name: str) -> List[Dict[str, Any]]:
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(stmt)
                return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as e:
            raise StoreError(operation, table_name, e) from e

    async def fetch_restaurant_hours_row(
        self,
        restaurant_id: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Fetch business_hours and settings of one restaurant.

        Falls back to the first restaurant row when the id is missing,
        matches nothing, or the filtered query fails.

        Returns:
            Dict with 'business_hours' and 'settings' keys, or None
        """
        restaurants = Restaurant.__table__
        stmt = select(restaurants.c.business_hours, restaurants.c.settings).limit(1)

        if restaurant_id:
            try:
                rows = await self._fetch_all(
                    stmt.where(restaurants.c.id == restaurant_id),
                    "fetch hours",
                    "restaurants",
                )
                if rows:
                    return rows[0]
                logger.info(f"Restaurant {restaurant_id} not found, using first restaurant row")
            except StoreError as e:
                logger.warning(f"Filtered restaurant lookup failed, using first row: {e}")

        rows = await self._fetch_all(stmt, "fetch hours", "restaurants")
        return rows[0] if rows else None

    async def fetch_first_row(
        self,
        table_name: str,
        columns: Sequence[str]
    ) -> Optional[Dict[str, Any]]:
        """
        Fetch the first row of an arbitrary table, selecting named columns.

        Used for layouts with no mapped model; the table may not exist.
        """
        target = table(table_name, *[column(name) for name in columns])
        stmt = select(*[target.c[name] for name in columns]).limit(1)
        rows = await self._fetch_all(stmt, "fetch first row", table_name)
        return rows[0] if rows else None

    async def fetch_table_rows(self, table_name: str) -> List[Dict[str, Any]]:
        """Fetch every row and column of an arbitrary table."""
        stmt = select(literal_column("*")).select_from(table(table_name))
        return await self._fetch_all(stmt, "fetch rows", table_name)

    async def fetch_active_reservations(
        self,
        start: datetime,
        end: datetime,
        restaurant_id: Optional[str] = None,
        exclude_id: Optional[str] = None,
        statuses: Iterable[str] = ACTIVE_STATUSES,
    ) -> List[ReservationRecord]:
        """
        Fetch reservations whose time lies in [start, end], both inclusive.

        Args:
            start: First instant of the range
            end: Last instant of the range
            restaurant_id: Optional restaurant scope
            exclude_id: Reservation to leave out (being rescheduled)
            statuses: Statuses to include

        Returns:
            Reservations ordered by time
        """
        reservations = TableReservation.__table__
        stmt = (
            select(
                reservations.c.id,
                reservations.c.reservation_time,
                reservations.c.party_size,
                reservations.c.status,
                reservations.c.table_id,
                reservations.c.duration_minutes,
            )
            .where(reservations.c.reservation_time >= start)
            .where(reservations.c.reservation_time <= end)
            .where(reservations.c.status.in_(sorted(statuses)))
            .order_by(reservations.c.reservation_time)
        )
        if restaurant_id:
            stmt = stmt.where(reservations.c.restaurant_id == restaurant_id)
        if exclude_id:
            stmt = stmt.where(reservations.c.id != exclude_id)

        rows = await self._fetch_all(stmt, "fetch reservations", "table_reservations")
        try:
            return [ReservationRecord.model_validate(row) for row in rows]
        except ValidationError as e:
            raise StoreError("parse reservations", "table_reservations", e) from e

    async def fetch_closure(self, day: date) -> Optional[Dict[str, Any]]:
        """Fetch the closure record for an exact date, if any."""
        stmt = (
            select(
                RestaurantClosure.closure_date.label("date"),
                RestaurantClosure.reason,
            )
            .where(RestaurantClosure.closure_date == day)
            .limit(1)
        )
        rows = await self._fetch_all(stmt, "fetch closure", "restaurant_closures")
        return rows[0] if rows else None
