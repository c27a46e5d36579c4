"""Relational persistence for the registry.

The registry service talks to a :class:`MetadataStore`; the only
implementation, :class:`SqlMetadataStore`, runs on any SQLAlchemy async
dialect (``sqlite+aiosqlite`` in tests, ``postgresql+asyncpg`` in
production).

Quick example::

    >>> from dumont.storage import (
    ...     SqlMetadataStore,
    ...     create_session_factory,
    ...     create_storage_engine,
    ...     init_storage,
    ... )
    >>> engine = create_storage_engine("sqlite+aiosqlite:///dumont.db")
    >>> await init_storage(engine)
    >>> store = SqlMetadataStore(create_session_factory(engine))
"""

from __future__ import annotations

from .engine import SessionFactory, create_session_factory, create_storage_engine
from .labels import LabelStore
from .models import init_storage
from .protocol import (
    LabelOwner,
    MetadataStore,
    OrganizationRecord,
    OwnerKind,
    RepositoryRecord,
    RevisionRecord,
)
from .sql import SqlMetadataStore

__all__ = [
    "LabelOwner",
    "LabelStore",
    "MetadataStore",
    "OrganizationRecord",
    "OwnerKind",
    "RepositoryRecord",
    "RevisionRecord",
    "SessionFactory",
    "SqlMetadataStore",
    "create_session_factory",
    "create_storage_engine",
    "init_storage",
]
