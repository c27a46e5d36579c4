"""Entity lifecycle for organizations, repositories and revisions.

The registry service is the only place where policy enforcement meets
persistence. Label mappings are copied, validated and defaulted against the
policy governing ``org/repo`` before any storage call, so a policy violation
never leaves partial state behind.

Creating a labelled entity takes two storage calls: insert the entity, then
replace its (initially empty) label set. They are separate transactions; a
failure between them leaves the entity with no labels.
"""

from __future__ import annotations

import dataclasses
import typing as typ

from dumont.errors import (
    MAX_VERSION_LENGTH,
    EntityKind,
    NotFoundError,
    VersionTooLongError,
)
from dumont.logging import get_logger, log_info
from dumont.pagination import Page, PaginationOptions

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from dumont.policy.catalog import PolicyCatalog
    from dumont.storage.protocol import (
        MetadataStore,
        OrganizationRecord,
        RepositoryRecord,
        RevisionRecord,
    )

logger = get_logger(__name__)


def _copy_labels(labels: cabc.Mapping[str, str] | None) -> dict[str, str]:
    return {} if labels is None else dict(labels)


def ensure_version_length(version: str) -> None:
    """Reject revision names longer than ``MAX_VERSION_LENGTH`` characters.

    Raises
    ------
    VersionTooLongError
        If ``version`` is too long.

    """
    if len(version) > MAX_VERSION_LENGTH:
        raise VersionTooLongError(version)


class RegistryService:
    """Create, read, relabel and delete registry entities.

    Parameters
    ----------
    store:
        Persistence backend.
    catalog:
        Compiled policies, built once at startup.

    """

    def __init__(self, store: MetadataStore, catalog: PolicyCatalog) -> None:
        """Bind the service to its store and policy catalog."""
        self._store = store
        self._catalog = catalog

    @property
    def catalog(self) -> PolicyCatalog:
        """Policy catalog used for every label validation."""
        return self._catalog

    # Organizations

    async def create_organization(self, org: str) -> OrganizationRecord:
        """Create an organization.

        Raises
        ------
        AlreadyExistsError
            If the name is taken.

        """
        record = await self._store.create_organization(org)
        log_info(logger, "Created organization %s", org)
        return record

    async def get_organization(self, org: str) -> OrganizationRecord:
        """Return an organization or raise ``NotFoundError``."""
        record = await self._store.find_organization(org)
        if record is None:
            raise NotFoundError(EntityKind.ORGANIZATION, org)
        return record

    async def list_organizations(
        self, pagination: PaginationOptions | None = None
    ) -> Page[OrganizationRecord]:
        """Return one page of organizations."""
        options = pagination or PaginationOptions()
        records, total = await self._store.list_organizations(options)
        return Page.build(records, total, options)

    async def delete_organization(self, org: str) -> bool:
        """Delete an organization with all its repositories and revisions.

        Raises
        ------
        NotFoundError
            If no organization was deleted.

        """
        if not await self._store.delete_organization(org):
            raise NotFoundError(EntityKind.ORGANIZATION, org)
        log_info(logger, "Deleted organization %s", org)
        return True

    # Repositories

    async def create_repository(
        self, org: str, repo: str, labels: cabc.Mapping[str, str] | None = None
    ) -> RepositoryRecord:
        """Create a repository carrying ``labels`` after policy enforcement.

        The caller's mapping is not modified. Defaults injected by the
        governing policy are persisted and returned.

        Raises
        ------
        PolicyViolationError
            If the labels break the governing policy; nothing is stored.
        NotFoundError
            If the organization does not exist.
        AlreadyExistsError
            If the organization already has a repository called ``repo``.

        """
        validated = _copy_labels(labels)
        self._catalog.enforce_repository_labels(org, repo, validated)

        record = await self._store.create_repository(org, repo)
        await self._store.replace_labels(record.owner, validated)
        log_info(logger, "Created repository %s/%s", org, repo)
        return dataclasses.replace(record, labels=validated)

    async def get_repository(self, org: str, repo: str) -> RepositoryRecord:
        """Return a repository with its labels or raise ``NotFoundError``."""
        record = await self._store.find_repository(org, repo)
        if record is None:
            raise NotFoundError(EntityKind.REPOSITORY, org, repo)
        return record

    async def list_repositories(
        self, org: str, pagination: PaginationOptions | None = None
    ) -> Page[RepositoryRecord]:
        """Return one page of repositories under ``org``."""
        options = pagination or PaginationOptions()
        records, total = await self._store.list_repositories(org, options)
        return Page.build(records, total, options)

    async def update_repository_labels(
        self, org: str, repo: str, labels: cabc.Mapping[str, str]
    ) -> RepositoryRecord:
        """Replace a repository's whole label set.

        The new mapping is validated on its own; existing labels are not
        merged in, so omitted keys are removed unless the policy supplies a
        default for them.
        """
        validated = _copy_labels(labels)
        self._catalog.enforce_repository_labels(org, repo, validated)

        record = await self.get_repository(org, repo)
        await self._store.replace_labels(record.owner, validated)
        return await self.get_repository(org, repo)

    async def delete_repository(self, org: str, repo: str) -> bool:
        """Delete a repository with its revisions and labels."""
        if not await self._store.delete_repository(org, repo):
            raise NotFoundError(EntityKind.REPOSITORY, org, repo)
        log_info(logger, "Deleted repository %s/%s", org, repo)
        return True

    # Revisions

    async def create_revision(
        self,
        org: str,
        repo: str,
        version: str,
        labels: cabc.Mapping[str, str] | None = None,
        *,
        artifact_url: str | None = None,
    ) -> RevisionRecord:
        """Create a revision of ``org/repo`` after policy enforcement.

        The version length is checked before anything else, so an overlong
        name never reaches the policy catalog or the store.

        Raises
        ------
        VersionTooLongError
            If ``version`` exceeds the length limit.
        PolicyViolationError
            If the labels break the governing policy's revision rules.
        NotFoundError
            If the repository does not exist.
        AlreadyExistsError
            If the repository already has this revision.

        """
        ensure_version_length(version)
        validated = _copy_labels(labels)
        self._catalog.enforce_revision_labels(org, repo, validated)

        record = await self._store.create_revision(
            org, repo, version, artifact_url=artifact_url
        )
        await self._store.replace_labels(record.owner, validated)
        log_info(logger, "Created revision %s/%s/%s", org, repo, version)
        return dataclasses.replace(record, labels=validated)

    async def get_revision(self, org: str, repo: str, version: str) -> RevisionRecord:
        """Return a revision with its labels or raise ``NotFoundError``."""
        record = await self._store.find_revision(org, repo, version)
        if record is None:
            raise NotFoundError(EntityKind.REVISION, org, repo, version)
        return record

    async def list_revisions(
        self, org: str, repo: str, pagination: PaginationOptions | None = None
    ) -> Page[RevisionRecord]:
        """Return one page of revisions under ``org/repo``."""
        options = pagination or PaginationOptions()
        records, total = await self._store.list_revisions(org, repo, options)
        return Page.build(records, total, options)

    async def update_revision_labels(
        self, org: str, repo: str, version: str, labels: cabc.Mapping[str, str]
    ) -> RevisionRecord:
        """Replace a revision's whole label set after policy enforcement."""
        validated = _copy_labels(labels)
        self._catalog.enforce_revision_labels(org, repo, validated)

        record = await self.get_revision(org, repo, version)
        await self._store.replace_labels(record.owner, validated)
        return await self.get_revision(org, repo, version)

    async def delete_revision(self, org: str, repo: str, version: str) -> bool:
        """Delete a revision and its labels."""
        if not await self._store.delete_revision(org, repo, version):
            raise NotFoundError(EntityKind.REVISION, org, repo, version)
        log_info(logger, "Deleted revision %s/%s/%s", org, repo, version)
        return True


__all__ = ["RegistryService", "ensure_version_length"]
