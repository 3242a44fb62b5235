"""SQLAlchemy models for the restaurant reservation tables."""

from datetime import datetime, date as date_type
from typing import Any, Dict, Optional
from uuid import uuid4

from sqlalchemy import String, Integer, Boolean, Date, Text, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin
from domain.enums import ReservationStatus


def _uuid_str() -> str:
    return str(uuid4())


class Restaurant(Base, TimestampMixin):
    """Restaurant profile with weekly hours and booking settings as JSON."""

    __tablename__ = "restaurants"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=_uuid_str,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    phone: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
    )

    address: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    business_hours: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSON,
        nullable=True,
    )

    settings: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSON,
        nullable=True,
    )

    def __repr__(self) -> str:
        """String representation of Restaurant."""
        return f"<Restaurant(id={self.id}, name='{self.name}')>"


class TableReservation(Base, TimestampMixin):
    """Table reservation; owned by the booking flow, read by availability."""

    __tablename__ = "table_reservations"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=_uuid_str,
    )

    restaurant_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
        index=True,
    )

    table_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
    )

    customer_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    customer_phone: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True,
    )

    party_size: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    reservation_time: Mapped[datetime] = mapped_column(
        nullable=False,
        index=True,
    )

    duration_minutes: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=120,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ReservationStatus.CONFIRMED.value,
        index=True,
    )

    special_requests: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    __table_args__ = (
        Index("ix_table_reservations_status_time", "status", "reservation_time"),
        Index("ix_table_reservations_restaurant_time", "restaurant_id", "reservation_time"),
    )

    def __repr__(self) -> str:
        """String representation of TableReservation."""
        return (
            f"<TableReservation(id={self.id}, time={self.reservation_time}, "
            f"party_size={self.party_size}, status='{self.status}')>"
        )


class RestaurantClosure(Base):
    """A date on which no reservations are accepted."""

    __tablename__ = "restaurant_closures"

    closure_date: Mapped[date_type] = mapped_column(
        "date",
        Date,
        primary_key=True,
    )

    reason: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    def __repr__(self) -> str:
        """String representation of RestaurantClosure."""
        return f"<RestaurantClosure(date={self.closure_date}, reason='{self.reason}')>"


class DiningTable(Base):
    """Physical table in the dining room."""

    __tablename__ = "tables"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    capacity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="available",
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    def __repr__(self) -> str:
        """String representation of DiningTable."""
        return f"<DiningTable(id={self.id}, name='{self.name}', capacity={self.capacity})>"


class RestaurantSettings(Base):
    """Single-row flat hours configuration kept for older deployments."""

    __tablename__ = "restaurant_settings"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
    )

    open_time: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    close_time: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    slot_interval_min: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    dining_duration_min: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
