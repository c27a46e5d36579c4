"""SQLAlchemy implementation of :class:`~dumont.storage.protocol.MetadataStore`.

Every public method opens its own session. Creates run their parent lookup,
sibling check and insert inside one transaction; a concurrent insert that
slips past the sibling check is caught from the unique constraint and
reported as ``AlreadyExistsError``. Deletes are single ``DELETE`` statements
and rely on ``ON DELETE CASCADE`` for children.
"""

from __future__ import annotations

import typing as typ

from sqlalchemy import Select, delete, func, select
from sqlalchemy.exc import IntegrityError

from dumont.errors import AlreadyExistsError, EntityKind, NotFoundError

from .errors import backend_errors
from .labels import LabelStore, load_labels, load_labels_for_owners
from .models import OrganizationRow, RepositoryRow, RevisionRow
from .protocol import (
    LabelOwner,
    OrganizationRecord,
    OwnerKind,
    RepositoryRecord,
    RevisionRecord,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from sqlalchemy.ext.asyncio import AsyncSession

    from dumont.pagination import PaginationOptions

    from .engine import SessionFactory


def _organization_id_query(org: str) -> Select[tuple[int]]:
    return select(OrganizationRow.id).where(OrganizationRow.org_name == org)


def _repository_id_query(org: str, repo: str) -> Select[tuple[int]]:
    return (
        select(RepositoryRow.id)
        .join(OrganizationRow, RepositoryRow.org_id == OrganizationRow.id)
        .where(OrganizationRow.org_name == org, RepositoryRow.repo_name == repo)
    )


def _organization_record(row: OrganizationRow) -> OrganizationRecord:
    return OrganizationRecord(id=row.id, name=row.org_name, created_at=row.created_at)


def _repository_record(
    row: RepositoryRow, org: str, labels: dict[str, str]
) -> RepositoryRecord:
    return RepositoryRecord(
        id=row.id,
        org_name=org,
        name=row.repo_name,
        created_at=row.created_at,
        labels=labels,
    )


def _revision_record(
    row: RevisionRow, org: str, repo: str, labels: dict[str, str]
) -> RevisionRecord:
    return RevisionRecord(
        id=row.id,
        org_name=org,
        repo_name=repo,
        name=row.revision_name,
        created_at=row.created_at,
        artifact_url=row.artifact_url,
        labels=labels,
    )


async def _count(session: AsyncSession, query: Select[typ.Any]) -> int:
    total = await session.scalar(select(func.count()).select_from(query.subquery()))
    return int(total or 0)


class SqlMetadataStore:
    """Registry storage backed by an SQLAlchemy async engine.

    Parameters
    ----------
    session_factory:
        Async session factory, typically built by
        :func:`dumont.storage.engine.create_session_factory`.

    """

    def __init__(self, session_factory: SessionFactory) -> None:
        """Configure the store and its label store over one session factory."""
        self._session_factory = session_factory
        self._labels = LabelStore(session_factory)

    # Organizations

    async def find_organization(self, org: str) -> OrganizationRecord | None:
        """Return the organization called ``org``, if it exists."""
        with backend_errors("find_organization"):
            async with self._session_factory() as session:
                row = await session.scalar(
                    select(OrganizationRow).where(OrganizationRow.org_name == org)
                )
        return None if row is None else _organization_record(row)

    async def create_organization(self, org: str) -> OrganizationRecord:
        """Insert a new organization.

        Raises
        ------
        AlreadyExistsError
            If an organization with the same name exists.

        """
        with backend_errors("create_organization"):
            async with self._session_factory() as session, session.begin():
                if await session.scalar(_organization_id_query(org)) is not None:
                    raise AlreadyExistsError(EntityKind.ORGANIZATION, org)

                row = OrganizationRow(org_name=org)
                session.add(row)
                try:
                    await session.flush()
                except IntegrityError as exc:
                    raise AlreadyExistsError(EntityKind.ORGANIZATION, org) from exc
        return _organization_record(row)

    async def delete_organization(self, org: str) -> bool:
        """Delete an organization; repositories and revisions cascade."""
        with backend_errors("delete_organization"):
            async with self._session_factory() as session, session.begin():
                result = await session.execute(
                    delete(OrganizationRow).where(OrganizationRow.org_name == org)
                )
        return result.rowcount > 0

    async def list_organizations(
        self, pagination: PaginationOptions
    ) -> tuple[list[OrganizationRecord], int]:
        """Return one page of organizations ordered by id."""
        query = select(OrganizationRow)
        with backend_errors("list_organizations"):
            async with self._session_factory() as session:
                total = await _count(session, query)
                rows = await session.scalars(
                    query.order_by(OrganizationRow.id)
                    .offset(pagination.offset)
                    .limit(pagination.limit)
                )
                records = [_organization_record(row) for row in rows]
        return records, total

    # Repositories

    async def find_repository(self, org: str, repo: str) -> RepositoryRecord | None:
        """Return the repository ``org/repo`` with its labels, if it exists."""
        with backend_errors("find_repository"):
            async with self._session_factory() as session:
                row = await session.scalar(
                    select(RepositoryRow)
                    .join(OrganizationRow, RepositoryRow.org_id == OrganizationRow.id)
                    .where(
                        OrganizationRow.org_name == org, RepositoryRow.repo_name == repo
                    )
                )
                if row is None:
                    return None
                labels = await load_labels(session, LabelOwner.repository(row.id))
        return _repository_record(row, org, labels)

    async def create_repository(self, org: str, repo: str) -> RepositoryRecord:
        """Insert a new, unlabelled repository under ``org``.

        Raises
        ------
        NotFoundError
            If the organization does not exist.
        AlreadyExistsError
            If ``org`` already has a repository called ``repo``.

        """
        with backend_errors("create_repository"):
            async with self._session_factory() as session, session.begin():
                org_id = await session.scalar(_organization_id_query(org))
                if org_id is None:
                    raise NotFoundError(EntityKind.ORGANIZATION, org)

                sibling = await session.scalar(_repository_id_query(org, repo))
                if sibling is not None:
                    raise AlreadyExistsError(EntityKind.REPOSITORY, org, repo)

                row = RepositoryRow(org_id=org_id, repo_name=repo)
                session.add(row)
                try:
                    await session.flush()
                except IntegrityError as exc:
                    raise AlreadyExistsError(EntityKind.REPOSITORY, org, repo) from exc
        return _repository_record(row, org, {})

    async def delete_repository(self, org: str, repo: str) -> bool:
        """Delete a repository; revisions and labels cascade."""
        with backend_errors("delete_repository"):
            async with self._session_factory() as session, session.begin():
                result = await session.execute(
                    delete(RepositoryRow).where(
                        RepositoryRow.repo_name == repo,
                        RepositoryRow.org_id
                        == _organization_id_query(org).scalar_subquery(),
                    )
                )
        return result.rowcount > 0

    async def list_repositories(
        self, org: str, pagination: PaginationOptions
    ) -> tuple[list[RepositoryRecord], int]:
        """Return one page of repositories under ``org`` ordered by id.

        Raises
        ------
        NotFoundError
            If the organization does not exist.

        """
        with backend_errors("list_repositories"):
            async with self._session_factory() as session:
                org_id = await session.scalar(_organization_id_query(org))
                if org_id is None:
                    raise NotFoundError(EntityKind.ORGANIZATION, org)

                query = select(RepositoryRow).where(RepositoryRow.org_id == org_id)
                total = await _count(session, query)
                rows = list(
                    await session.scalars(
                        query.order_by(RepositoryRow.id)
                        .offset(pagination.offset)
                        .limit(pagination.limit)
                    )
                )
                labels = await load_labels_for_owners(
                    session, OwnerKind.REPOSITORY, [row.id for row in rows]
                )
        records = [_repository_record(row, org, labels[row.id]) for row in rows]
        return records, total

    # Revisions

    async def find_revision(
        self, org: str, repo: str, revision: str
    ) -> RevisionRecord | None:
        """Return the revision with its labels, if it exists."""
        with backend_errors("find_revision"):
            async with self._session_factory() as session:
                row = await session.scalar(
                    select(RevisionRow).where(
                        RevisionRow.revision_name == revision,
                        RevisionRow.repository_id
                        == _repository_id_query(org, repo).scalar_subquery(),
                    )
                )
                if row is None:
                    return None
                labels = await load_labels(session, LabelOwner.revision(row.id))
        return _revision_record(row, org, repo, labels)

    async def create_revision(
        self, org: str, repo: str, revision: str, artifact_url: str | None = None
    ) -> RevisionRecord:
        """Insert a new, unlabelled revision under ``org/repo``.

        Raises
        ------
        NotFoundError
            If the repository does not exist.
        AlreadyExistsError
            If the repository already has a revision called ``revision``.

        """
        with backend_errors("create_revision"):
            async with self._session_factory() as session, session.begin():
                repository_id = await session.scalar(_repository_id_query(org, repo))
                if repository_id is None:
                    raise NotFoundError(EntityKind.REPOSITORY, org, repo)

                sibling = await session.scalar(
                    select(RevisionRow.id).where(
                        RevisionRow.repository_id == repository_id,
                        RevisionRow.revision_name == revision,
                    )
                )
                if sibling is not None:
                    raise AlreadyExistsError(EntityKind.REVISION, org, repo, revision)

                row = RevisionRow(
                    repository_id=repository_id,
                    revision_name=revision,
                    artifact_url=artifact_url,
                )
                session.add(row)
                try:
                    await session.flush()
                except IntegrityError as exc:
                    raise AlreadyExistsError(
                        EntityKind.REVISION, org, repo, revision
                    ) from exc
        return _revision_record(row, org, repo, {})

    async def delete_revision(self, org: str, repo: str, revision: str) -> bool:
        """Delete a revision; its labels cascade."""
        with backend_errors("delete_revision"):
            async with self._session_factory() as session, session.begin():
                result = await session.execute(
                    delete(RevisionRow).where(
                        RevisionRow.revision_name == revision,
                        RevisionRow.repository_id
                        == _repository_id_query(org, repo).scalar_subquery(),
                    )
                )
        return result.rowcount > 0

    async def list_revisions(
        self, org: str, repo: str, pagination: PaginationOptions
    ) -> tuple[list[RevisionRecord], int]:
        """Return one page of revisions under ``org/repo`` ordered by id.

        Raises
        ------
        NotFoundError
            If the repository does not exist.

        """
        with backend_errors("list_revisions"):
            async with self._session_factory() as session:
                repository_id = await session.scalar(_repository_id_query(org, repo))
                if repository_id is None:
                    raise NotFoundError(EntityKind.REPOSITORY, org, repo)

                query = select(RevisionRow).where(
                    RevisionRow.repository_id == repository_id
                )
                total = await _count(session, query)
                rows = list(
                    await session.scalars(
                        query.order_by(RevisionRow.id)
                        .offset(pagination.offset)
                        .limit(pagination.limit)
                    )
                )
                labels = await load_labels_for_owners(
                    session, OwnerKind.REVISION, [row.id for row in rows]
                )
        records = [_revision_record(row, org, repo, labels[row.id]) for row in rows]
        return records, total

    # Labels

    async def get_labels(self, owner: LabelOwner) -> dict[str, str]:
        """Return the current label set of ``owner``."""
        return await self._labels.get_labels(owner)

    async def replace_labels(
        self, owner: LabelOwner, labels: cabc.Mapping[str, str]
    ) -> None:
        """Atomically replace the whole label set of ``owner``."""
        await self._labels.replace_labels(owner, labels)


__all__ = ["SqlMetadataStore"]
