"""Column types and defaults shared by every model."""

import uuid
from datetime import datetime, timezone
from typing import Tuple

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


def new_id() -> str:
    """UUID4 as a 36-character string (portable across SQLite and PostgreSQL)."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamps on every backend.

    SQLite has no timezone support and hands back naive values; they are
    stored in UTC, so reading them back attaches UTC again.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


def one_of(column: str, values: Tuple[str, ...]) -> str:
    """SQL for a CHECK constraint limiting a string column to `values`."""
    allowed = ", ".join(f"'{value}'" for value in values)
    return f"{column} IN ({allowed})"
