"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import pytest
import pytest_asyncio

from dumont.policy import PolicyCatalog
from dumont.storage import (
    SqlMetadataStore,
    create_session_factory,
    create_storage_engine,
    init_storage,
)
from tests.helpers import example_policies

if typ.TYPE_CHECKING:
    from pathlib import Path

    from dumont.storage import SessionFactory


@pytest.fixture
def example_catalog() -> PolicyCatalog:
    """Return a compiled catalog of the example policies."""
    return PolicyCatalog.compile(example_policies())


@pytest_asyncio.fixture
async def session_factory(tmp_path: Path) -> typ.AsyncIterator[SessionFactory]:
    """Yield a fresh async session factory backed by sqlite."""
    engine = create_storage_engine(f"sqlite+aiosqlite:///{tmp_path / 'dumont.db'}")
    await init_storage(engine)
    try:
        yield create_session_factory(engine)
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def sql_store(session_factory: SessionFactory) -> SqlMetadataStore:
    """Return a SQL metadata store over the temporary database."""
    return SqlMetadataStore(session_factory)
