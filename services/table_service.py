"""
Table lookup across the table layouts found in deployed databases.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from db.store import RestaurantStore, StoreError
from domain.enums import TableStatus
from domain.models import Table


logger = logging.getLogger(__name__)


TABLE_SOURCES = ("tables", "restaurant_tables", "dining_tables", "tables_v2")
FALLBACK_SOURCE = "fallback"

OUT_OF_SERVICE_STATUSES = frozenset(status.value for status in TableStatus)
TRUTHY_STRINGS = frozenset({"1", "true", "t", "y", "yes", "on", "enabled"})

CAPACITY_KEYS = ("capacity", "seats", "seat_count")
NAME_KEYS = ("name", "table_number", "label", "code", "no")


def _make_table(table_id: int, capacity: int) -> Table:
    return Table(id=table_id, name=f"Table {table_id}", capacity=capacity, type=f"{capacity}-seat")


# Used when no table layout exists in the database yet
FALLBACK_TABLES: List[Table] = [
    _make_table(table_id, capacity)
    for table_id, capacity in enumerate((2, 2, 4, 4, 4, 6, 6, 8), start=1)
]


def truthy(value: Any, default: bool = True) -> bool:
    """Interpret a stored flag; missing or unrecognized types take the default."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_STRINGS
    return default


def _to_capacity(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        return max(int(float(value)), 0)
    except (TypeError, ValueError):
        return 0


def is_table_active(row: Dict[str, Any]) -> bool:
    """A table counts unless disabled or in an out-of-service status."""
    status = row.get("status")
    status = status.strip().lower() if isinstance(status, str) else "available"
    return truthy(row.get("is_active"), True) and status not in OUT_OF_SERVICE_STATUSES


def normalize_table(row: Dict[str, Any]) -> Table:
    """
    Map a row from any supported layout to a Table.

    Args:
        row: Raw row with at least an id column

    Returns:
        Table with capacity, display name and seat type
    """
    capacity = 0
    for key in CAPACITY_KEYS:
        if row.get(key) is not None:
            capacity = _to_capacity(row[key])
            break

    name = next((row[key] for key in NAME_KEYS if row.get(key)), None)
    table_id = row.get("id")
    return Table(
        id=table_id if isinstance(table_id, int) else str(table_id),
        name=str(name) if name is not None else f"Table {table_id}",
        capacity=capacity,
        type=f"{capacity}-seat",
    )


@dataclass
class TableSet:
    """Active tables and the layout they were read from."""

    tables: List[Table] = field(default_factory=list)
    source: str = FALLBACK_SOURCE

    @property
    def total_capacity(self) -> int:
        return sum(t.capacity for t in self.tables)


class TableLookup:
    """Load the restaurant's active tables from the first layout that has rows."""

    def __init__(self, store: RestaurantStore, sources: Sequence[str] = TABLE_SOURCES):
        self.store = store
        self.sources = sources

    async def load_active_tables(self) -> TableSet:
        """
        Load active tables.

        Returns:
            TableSet from the first table layout returning rows, otherwise
            the fallback set
        """
        for source in self.sources:
            try:
                rows = await self.store.fetch_table_rows(source)
            except StoreError as e:
                logger.debug(f"Table layout {source} unavailable: {e}")
                continue

            if rows:
                tables = [normalize_table(row) for row in rows if is_table_active(row)]
                logger.info(f"Loaded {len(tables)} active tables from {source}")
                return TableSet(tables=tables, source=source)

        logger.warning("No table layout found, using fallback tables")
        return TableSet(tables=list(FALLBACK_TABLES), source=FALLBACK_SOURCE)
