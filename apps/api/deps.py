"""FastAPI dependencies for the availability endpoints."""

from fastapi import Depends

from db.session import get_engine
from db.store import RestaurantStore
from services.availability_service import AvailabilityService


def get_store() -> RestaurantStore:
    """Store bound to the process-wide engine."""
    return RestaurantStore(get_engine())


def get_availability_service(store: RestaurantStore = Depends(get_store)) -> AvailabilityService:
    return AvailabilityService(store)
