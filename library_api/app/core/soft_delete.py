"""
Soft-delete filter shared by every read path.

Books and readers are never removed from storage; deleting one sets its
``delete_time`` column.  Queries build their WHERE clauses with
``not_deleted`` and rows loaded through joins are passed through
``exclude_deleted`` so a deleted record cannot leak into any response.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Mapping, Optional, Sequence, TypeVar

Record = TypeVar("Record", bound=Mapping)

DELETE_TIME_COLUMN = "delete_time"


def not_deleted(alias: Optional[str] = None) -> str:
    """Return the SQL predicate selecting active rows of ``alias``."""
    column = f"{alias}.{DELETE_TIME_COLUMN}" if alias else DELETE_TIME_COLUMN
    return f"{column} IS NULL"


def where_active(alias: Optional[str] = None, clauses: Sequence[str] = ()) -> str:
    """Build a WHERE clause that always includes the active-only predicate."""
    return " WHERE " + " AND ".join([not_deleted(alias), *clauses])


def exclude_deleted(records: Iterable[Record]) -> List[Record]:
    """Drop every record whose deletion timestamp is set."""
    return [record for record in records if record[DELETE_TIME_COLUMN] is None]


def deletion_timestamp() -> str:
    """Timestamp stored in ``delete_time`` when a record is deleted."""
    return datetime.now(timezone.utc).isoformat()
