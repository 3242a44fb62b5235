"""Integration tests for RestaurantStore against a SQLite database."""
import pytest
import pytest_asyncio
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

import db
from core.utils_datetime import combine_local, day_bounds
from db import session as db_session
from db.models_sqlalchemy import (
    DiningTable,
    Restaurant,
    RestaurantClosure,
    RestaurantSettings,
    TableReservation,
)
from db.session import close_db, create_engine, get_engine, init_db
from db.store import RestaurantStore, StoreError


DAY = date(2030, 1, 7)


def reservation(res_id, hhmm, status="confirmed", party_size=2, restaurant_id="r1", day=DAY):
    return TableReservation(
        id=res_id,
        restaurant_id=restaurant_id,
        customer_name=f"Guest {res_id}",
        customer_phone="+886912345678",
        party_size=party_size,
        reservation_time=combine_local(day, hhmm),
        status=status,
    )


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed SQLite engine with the full schema."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def store(engine):
    async with AsyncSession(engine, expire_on_commit=False) as session:
        session.add_all([
            Restaurant(
                id="r1",
                name="Tana",
                business_hours={"mon": {"open_time": "17:00", "close_time": "22:00"}},
                settings={"slot_interval_min": 30},
            ),
            Restaurant(id="r2", name="Second"),
            reservation("a", "00:00"),
            reservation("b", "19:00", status="pending"),
            reservation("c", "19:00", status="cancelled"),
            reservation("d", "18:00", status="completed"),
            reservation("e", "20:00", restaurant_id="r2"),
            reservation("f", "12:00", day=date(2030, 1, 8)),
            RestaurantClosure(closure_date=date(2030, 1, 1), reason="New Year"),
            DiningTable(name="T1", capacity=2),
            DiningTable(name="T2", capacity=4, status="maintenance"),
            RestaurantSettings(id=1, open_time="11:00", close_time="22:00", slot_interval_min=15),
        ])
        await session.commit()
    return RestaurantStore(engine)


@pytest.mark.integration
class TestRestaurantStore:
    """Test the query boundary on a real engine."""

    @pytest.mark.asyncio
    async def test_active_reservations_in_day(self, store):
        start, end = day_bounds(DAY)

        rows = await store.fetch_active_reservations(start, end)

        assert [r.id for r in rows] == ["a", "b", "e"]
        assert rows[0].reservation_time == combine_local(DAY, "00:00")
        assert all(r.is_active for r in rows)

    @pytest.mark.asyncio
    async def test_reservation_filters(self, store):
        start, end = day_bounds(DAY)

        rows = await store.fetch_active_reservations(start, end, restaurant_id="r1", exclude_id="b")

        assert [r.id for r in rows] == ["a"]

    @pytest.mark.asyncio
    async def test_range_is_inclusive(self, store):
        at_seven = combine_local(DAY, "19:00")

        rows = await store.fetch_active_reservations(at_seven, at_seven)

        assert [r.id for r in rows] == ["b"]

    @pytest.mark.asyncio
    async def test_restaurant_hours_row(self, store):
        row = await store.fetch_restaurant_hours_row("r1")

        assert row["business_hours"]["mon"]["close_time"] == "22:00"
        assert row["settings"] == {"slot_interval_min": 30}

    @pytest.mark.asyncio
    async def test_unknown_restaurant_falls_back_to_first_row(self, store):
        row = await store.fetch_restaurant_hours_row("missing")

        assert row is not None
        assert set(row) == {"business_hours", "settings"}

    @pytest.mark.asyncio
    async def test_first_row_of_named_table(self, store):
        row = await store.fetch_first_row(
            "restaurant_settings",
            ["open_time", "close_time", "dining_duration_min", "slot_interval_min"],
        )

        assert row == {
            "open_time": "11:00",
            "close_time": "22:00",
            "dining_duration_min": None,
            "slot_interval_min": 15,
        }

    @pytest.mark.asyncio
    async def test_missing_table_raises_store_error(self, store):
        with pytest.raises(StoreError) as exc_info:
            await store.fetch_first_row("business_hours", ["open_time"])

        assert exc_info.value.table_name == "business_hours"

    @pytest.mark.asyncio
    async def test_failed_query_does_not_affect_next_one(self, store):
        with pytest.raises(StoreError):
            await store.fetch_table_rows("dining_tables")

        rows = await store.fetch_table_rows("tables")

        assert {row["name"] for row in rows} == {"T1", "T2"}
        assert {"id", "capacity", "status", "is_active"} <= set(rows[0])

    @pytest.mark.asyncio
    async def test_closure(self, store):
        closure = await store.fetch_closure(date(2030, 1, 1))

        assert closure["reason"] == "New Year"
        assert await store.fetch_closure(DAY) is None


@pytest.mark.integration
class TestEngineLifecycle:
    """Test the process-wide engine the store runs on."""

    def test_package_exports_engine_helpers_only(self):
        assert "get_engine" in db.__all__
        assert not [name for name in db.__all__ if "session" in name]

    @pytest.mark.asyncio
    async def test_engine_is_cached_until_closed(self, monkeypatch, tmp_path):
        monkeypatch.setattr(db_session, "_engine", None)
        monkeypatch.setattr(
            db_session.settings, "database_url", f"sqlite+aiosqlite:///{tmp_path / 'app.db'}"
        )

        engine = get_engine()
        assert get_engine() is engine

        await close_db()

        assert db_session._engine is None
        replacement = get_engine()
        assert replacement is not engine
        await close_db()
