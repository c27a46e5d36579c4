"""Engine and session factory construction."""

from __future__ import annotations

import typing as typ

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

type SessionFactory = async_sessionmaker[AsyncSession]


def _enable_sqlite_foreign_keys(
    dbapi_connection: typ.Any,  # noqa: ANN401
    connection_record: object,
) -> None:
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on
    # for every connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_storage_engine(
    database_url: str, *, isolation_level: str | None = None
) -> AsyncEngine:
    """Create an async engine for ``database_url``.

    Parameters
    ----------
    database_url : str
        Any SQLAlchemy async URL, for example ``sqlite+aiosqlite:///dumont.db``
        or ``postgresql+asyncpg://user@host/dumont``.
    isolation_level : str | None, optional
        Transaction isolation level passed through to the dialect, such as
        ``SERIALIZABLE``. ``None`` keeps the driver default.

    Returns
    -------
    AsyncEngine
        Engine with foreign key enforcement enabled on SQLite.

    """
    kwargs: dict[str, typ.Any] = {}
    if isolation_level is not None:
        kwargs["isolation_level"] = isolation_level
    engine = create_async_engine(database_url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def create_session_factory(engine: AsyncEngine) -> SessionFactory:
    """Return a session factory that keeps attributes loaded after commit."""
    return async_sessionmaker(engine, expire_on_commit=False)


__all__ = ["SessionFactory", "create_session_factory", "create_storage_engine"]
