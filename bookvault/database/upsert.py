"""Insert-if-absent helper for rows guarded by a unique constraint."""

from __future__ import annotations

from typing import Any, Mapping, Sequence, Type

from sqlalchemy import insert
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..logging_manager import get_logger
from .base import Base

logger = get_logger().getChild("database.upsert")

_ON_CONFLICT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}


def insert_if_absent(
    session: Session,
    model: Type[Base],
    values: Mapping[str, Any],
    *,
    conflict_columns: Sequence[str],
) -> None:
    """Insert ``values`` unless a row already holds the same ``conflict_columns``.

    The caller reads the row back afterwards; concurrent writers racing on the
    same key both end up observing the single surviving row.
    """

    dialect_name = session.get_bind().dialect.name
    dialect_insert = _ON_CONFLICT_INSERTS.get(dialect_name)
    if dialect_insert is not None:
        statement = (
            dialect_insert(model)
            .values(**values)
            .on_conflict_do_nothing(index_elements=list(conflict_columns))
        )
        session.execute(statement)
        return

    try:
        with session.begin_nested():
            session.execute(insert(model).values(**values))
    except IntegrityError:
        logger.debug(
            "Row already present",
            extra={
                "event": "database.insert_if_absent.conflict",
                "attributes": {"table": model.__tablename__},
            },
        )


__all__ = ["insert_if_absent"]
