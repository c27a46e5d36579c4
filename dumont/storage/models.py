"""Relational tables for organizations, repositories, revisions and labels.

Models keep to portable SQLAlchemy types so the same code works with SQLite
in tests and PostgreSQL in production. Child rows reference their parent
with ``ON DELETE CASCADE`` so deleting an organization removes everything
beneath it in one statement.
"""

from __future__ import annotations

import datetime as dt
import typing as typ

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

if typ.TYPE_CHECKING:
    from sqlalchemy.engine import Dialect
    from sqlalchemy.ext.asyncio import AsyncEngine

NAME_LENGTH = 255
LABEL_LENGTH = 255


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp suitable for column defaults."""
    return dt.datetime.now(dt.UTC)


class NaiveDatetimeError(ValueError):
    """Raised when a naive datetime is bound to a UTC column."""

    def __init__(self) -> None:
        """Initialise with a fixed message."""
        super().__init__("timestamps must be timezone aware")


class UTCDateTime(TypeDecorator[dt.datetime]):
    """DateTime wrapper that round-trips UTC tzinfo even on SQLite."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(
        self, value: dt.datetime | None, dialect: Dialect
    ) -> dt.datetime | None:
        """Force bound datetime values to UTC with tzinfo."""
        if value is None:
            return None
        if value.tzinfo is None:
            raise NaiveDatetimeError
        return value.astimezone(dt.UTC)

    def process_result_value(
        self, value: dt.datetime | None, dialect: Dialect
    ) -> dt.datetime | None:
        """Ensure result datetimes are UTC and timezone aware."""
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=dt.UTC)
        return value.astimezone(dt.UTC)


class Base(DeclarativeBase):
    """Base declarative class for registry tables."""


class OrganizationRow(Base):
    """Top-level owner of repositories."""

    __tablename__ = "organization"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    org_name: Mapped[str] = mapped_column(String(NAME_LENGTH), unique=True)
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime(), default=utcnow)


class RepositoryRow(Base):
    """Repository owned by an organization."""

    __tablename__ = "repository"
    __table_args__ = (
        UniqueConstraint("org_id", "repo_name", name="uq_repository_name_per_org"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    org_id: Mapped[int] = mapped_column(
        ForeignKey("organization.id", ondelete="CASCADE"), index=True
    )
    repo_name: Mapped[str] = mapped_column(String(NAME_LENGTH))
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime(), default=utcnow)


class RepositoryLabelRow(Base):
    """One label on a repository."""

    __tablename__ = "repository_label"
    __table_args__ = (
        UniqueConstraint(
            "repository_id", "label_name", name="uq_repository_label_name"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    repository_id: Mapped[int] = mapped_column(
        ForeignKey("repository.id", ondelete="CASCADE"), index=True
    )
    label_name: Mapped[str] = mapped_column(String(LABEL_LENGTH))
    label_value: Mapped[str] = mapped_column(Text())


class RevisionRow(Base):
    """Named revision of a repository."""

    __tablename__ = "repository_revision"
    __table_args__ = (
        UniqueConstraint(
            "repository_id", "revision_name", name="uq_revision_name_per_repository"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    repository_id: Mapped[int] = mapped_column(
        ForeignKey("repository.id", ondelete="CASCADE"), index=True
    )
    revision_name: Mapped[str] = mapped_column(String(NAME_LENGTH))
    artifact_url: Mapped[str | None] = mapped_column(Text(), default=None)
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime(), default=utcnow)


class RevisionLabelRow(Base):
    """One label on a revision."""

    __tablename__ = "repository_revision_label"
    __table_args__ = (
        UniqueConstraint("revision_id", "label_name", name="uq_revision_label_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    revision_id: Mapped[int] = mapped_column(
        ForeignKey("repository_revision.id", ondelete="CASCADE"), index=True
    )
    label_name: Mapped[str] = mapped_column(String(LABEL_LENGTH))
    label_value: Mapped[str] = mapped_column(Text())


async def init_storage(engine: AsyncEngine) -> None:
    """Create registry tables if they do not already exist.

    Examples
    --------
    >>> from dumont.storage import create_storage_engine
    >>> engine = create_storage_engine("sqlite+aiosqlite:///dumont.db")
    >>> await init_storage(engine)

    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


__all__ = [
    "Base",
    "NaiveDatetimeError",
    "OrganizationRow",
    "RepositoryLabelRow",
    "RepositoryRow",
    "RevisionLabelRow",
    "RevisionRow",
    "UTCDateTime",
    "init_storage",
    "utcnow",
]
