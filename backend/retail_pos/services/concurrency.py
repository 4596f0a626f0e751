# Overview: Atomic conditional writes; the only place stock is allowed to move.

from __future__ import annotations

from sqlalchemy.exc import OperationalError

from ..extensions import db
from ..errors import PersistenceError


def execute_conditional_update(stmt) -> int:
    """
    Execute a single UPDATE ... WHERE <precondition> and return affected rows.

    The precondition and the write happen in one statement, so two concurrent
    callers cannot both observe the old value. A lock timeout or other
    operational failure rolls back and raises PersistenceError; nothing is
    retried here.

    NOTE: SQLite serializes writers; the busy timeout comes from the engine's
    connect_args. Other DBs take a row lock for the duration of the statement.
    """
    try:
        result = db.session.execute(stmt.execution_options(synchronize_session=False))
    except OperationalError as exc:
        db.session.rollback()
        raise PersistenceError("Database is busy, try again") from exc
    return result.rowcount
