"""Database layer for the restaurant availability service."""

from .base import Base, TimestampMixin
from .models_sqlalchemy import (
    Restaurant,
    TableReservation,
    RestaurantClosure,
    DiningTable,
    RestaurantSettings,
)
from .session import (
    create_engine,
    get_engine,
    init_db,
    close_db,
    DatabaseConfig,
)
from .store import RestaurantStore, StoreError

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Models
    "Restaurant",
    "TableReservation",
    "RestaurantClosure",
    "DiningTable",
    "RestaurantSettings",
    # Session
    "create_engine",
    "get_engine",
    "init_db",
    "close_db",
    "DatabaseConfig",
    # Store
    "RestaurantStore",
    "StoreError",
]
