"""Persistence capability consumed by the registry service.

The registry service only depends on :class:`MetadataStore`. The SQL
implementation in :mod:`dumont.storage.sql` is the only backend; tests
substitute ``AsyncMock`` spies that satisfy the same protocol.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from dumont.pagination import PaginationOptions


class OwnerKind(enum.StrEnum):
    """Kinds of entity that can own labels."""

    REPOSITORY = "repository"
    REVISION = "revision"


@dataclasses.dataclass(frozen=True, slots=True)
class LabelOwner:
    """Identifies the single entity a label set belongs to."""

    kind: OwnerKind
    id: int

    @classmethod
    def repository(cls, repository_id: int) -> LabelOwner:
        """Return the owner key for a repository row."""
        return cls(OwnerKind.REPOSITORY, repository_id)

    @classmethod
    def revision(cls, revision_id: int) -> LabelOwner:
        """Return the owner key for a revision row."""
        return cls(OwnerKind.REVISION, revision_id)


@dataclasses.dataclass(frozen=True, slots=True)
class OrganizationRecord:
    """Stored organization."""

    id: int
    name: str
    created_at: dt.datetime


@dataclasses.dataclass(frozen=True, slots=True)
class RepositoryRecord:
    """Stored repository with its current label set."""

    id: int
    org_name: str
    name: str
    created_at: dt.datetime
    labels: dict[str, str] = dataclasses.field(default_factory=dict)

    @property
    def owner(self) -> LabelOwner:
        """Label owner key for this repository."""
        return LabelOwner.repository(self.id)


@dataclasses.dataclass(frozen=True, slots=True)
class RevisionRecord:
    """Stored revision with its current label set."""

    id: int
    org_name: str
    repo_name: str
    name: str
    created_at: dt.datetime
    artifact_url: str | None = None
    labels: dict[str, str] = dataclasses.field(default_factory=dict)

    @property
    def owner(self) -> LabelOwner:
        """Label owner key for this revision."""
        return LabelOwner.revision(self.id)


@typ.runtime_checkable
class MetadataStore(typ.Protocol):
    """Storage operations for organizations, repositories and revisions.

    ``create_*`` raise ``NotFoundError`` when the parent is missing and
    ``AlreadyExistsError`` when a sibling already has the name. ``delete_*``
    return ``False`` when nothing was deleted. ``list_*`` return one page of
    records ordered by id together with the total count. Any other backend
    failure surfaces as ``BackendError``.
    """

    async def find_organization(self, org: str) -> OrganizationRecord | None:
        """Return the organization called ``org``, if it exists."""
        ...

    async def create_organization(self, org: str) -> OrganizationRecord:
        """Insert a new organization."""
        ...

    async def delete_organization(self, org: str) -> bool:
        """Delete an organization and everything it owns."""
        ...

    async def list_organizations(
        self, pagination: PaginationOptions
    ) -> tuple[list[OrganizationRecord], int]:
        """Return one page of organizations and the total count."""
        ...

    async def find_repository(self, org: str, repo: str) -> RepositoryRecord | None:
        """Return the repository ``org/repo`` with its labels, if it exists."""
        ...

    async def create_repository(self, org: str, repo: str) -> RepositoryRecord:
        """Insert a new, unlabelled repository under ``org``."""
        ...

    async def delete_repository(self, org: str, repo: str) -> bool:
        """Delete a repository with its revisions and labels."""
        ...

    async def list_repositories(
        self, org: str, pagination: PaginationOptions
    ) -> tuple[list[RepositoryRecord], int]:
        """Return one page of repositories under ``org`` and the total count."""
        ...

    async def find_revision(
        self, org: str, repo: str, revision: str
    ) -> RevisionRecord | None:
        """Return the revision with its labels, if it exists."""
        ...

    async def create_revision(
        self, org: str, repo: str, revision: str, artifact_url: str | None = None
    ) -> RevisionRecord:
        """Insert a new, unlabelled revision under ``org/repo``."""
        ...

    async def delete_revision(self, org: str, repo: str, revision: str) -> bool:
        """Delete a revision and its labels."""
        ...

    async def list_revisions(
        self, org: str, repo: str, pagination: PaginationOptions
    ) -> tuple[list[RevisionRecord], int]:
        """Return one page of revisions under ``org/repo`` and the total count."""
        ...

    async def get_labels(self, owner: LabelOwner) -> dict[str, str]:
        """Return the current label set of ``owner``."""
        ...

    async def replace_labels(
        self, owner: LabelOwner, labels: cabc.Mapping[str, str]
    ) -> None:
        """Atomically replace the whole label set of ``owner``."""
        ...


__all__ = [
    "LabelOwner",
    "MetadataStore",
    "OrganizationRecord",
    "OwnerKind",
    "RepositoryRecord",
    "RevisionRecord",
]
