# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from contextlib import asynccontextmanager
from contextvars import ContextVar
from functools import wraps
from typing import Any, AsyncIterator, Callable, Coroutine, TypeVar

from edgy import Registry
from sqlalchemy import event

from fastresource.config import get_settings
from fastresource.dependencies import get_service

T = TypeVar("T")


_transaction_depth: ContextVar[int] = ContextVar("transaction_depth", default=0)


def in_transaction() -> bool:
    return _transaction_depth.get() > 0


def _begin_sqlite_transaction(connection: Any) -> None:
    if connection.connection.dbapi_connection.isolation_level is not None:
        connection.exec_driver_sql("BEGIN")


def enable_sqlite_transactions(database: Any) -> None:
    """
    Emit an explicit BEGIN when a transaction starts on a SQLite engine.

    The sqlite3 driver only opens a transaction before a data modification
    statement, so a savepoint taken first starts the transaction itself and
    its release commits the writes: the outer rollback then has nothing left
    to undo. Autocommit connections are left untouched.
    """
    engine = database.engine

    if engine is None or engine.dialect.name != "sqlite":
        return

    if not event.contains(engine.sync_engine, "begin", _begin_sqlite_transaction):
        event.listen(engine.sync_engine, "begin", _begin_sqlite_transaction)


@asynccontextmanager
async def atomic() -> AsyncIterator[None]:
    """
    Run the block inside one database transaction.

    The transaction will:
    - COMMIT if the block completes successfully
    - ROLLBACK if an exception is raised

    Nested blocks join the outermost transaction, so an error raised in a
    nested block rolls back everything done since the outermost one opened.
    """
    if in_transaction():
        yield
        return

    database = get_service(Registry).database
    enable_sqlite_transactions(database)
    isolation_level = get_settings().database_isolation_level
    options = {"isolation_level": isolation_level} if isolation_level else {}
    token = _transaction_depth.set(_transaction_depth.get() + 1)

    try:
        async with database.transaction(**options):
            yield
    finally:
        _transaction_depth.reset(token)


def transaction(
    func: Callable[..., Coroutine[Any, Any, T]],
) -> Callable[..., Coroutine[Any, Any, T]]:
    """
    Decorator to wrap an async function in a database transaction.

    Example:
        from fastresource.orm import transaction

        @transaction
        async def archive_post(post):
            post.status = "archived"
            await post.save()

            # If error here, everything rolls back
            await detach_all_tags(post)
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        async with atomic():
            return await func(*args, **kwargs)

    return wrapper


__all__ = [
    "atomic",
    "enable_sqlite_transactions",
    "in_transaction",
    "transaction",
]
