"""
Module: asset_kernel.db.types
Responsibility: Portable column types shared by every model.
Architecture position: Kernel > DB.  May be imported by models/.  MUST NOT
    import from models/, services/, selectors/ or domain/.

Invariants enforced:
    - Every datetime read back from the database is timezone-aware UTC,
      regardless of whether the backend stores the offset (PostgreSQL
      timestamptz) or drops it (SQLite).
"""

from datetime import timezone

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime that always round-trips as UTC.

    Guarantees:
        - process_bind_param: aware values are normalized to UTC; naive values
          are rejected so local wall-clock times never reach the database.
        - process_result_value: naive values (SQLite) are tagged as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"Naive datetime not allowed: {value!r}")
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

