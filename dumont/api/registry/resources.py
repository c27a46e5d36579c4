"""Falcon resources for organizations, repositories and versions.

Resources are thin: they parse the request, call the registry service and
render its result in the JSON envelope. Registry errors propagate to the
handlers registered in :mod:`dumont.api.errors`.

Routes
------
- ``/api/org``: list (GET) and create (POST) organizations
- ``/api/org/{org}``: fetch (GET) and delete (DELETE) one organization
- ``/api/org/{org}/repo``: list and create repositories
- ``/api/org/{org}/repo/{repo}``: fetch, relabel (PUT) and delete
- ``/api/org/{org}/repo/{repo}/version``: list and create versions
- ``/api/org/{org}/repo/{repo}/version/{version}``: fetch, relabel and delete

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

from dumont.api.requests import (
    CreateOrganization,
    CreateRepository,
    CreateRevision,
    UpdateLabels,
    decode_body,
    parse_pagination,
)
from dumont.api.responses import (
    deleted_envelope,
    envelope,
    page_envelope,
    serialize_organization,
    serialize_repository,
    serialize_revision,
)

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from dumont.registry.service import RegistryService

__all__ = [
    "OrganizationCollectionResource",
    "OrganizationResource",
    "RepositoryCollectionResource",
    "RepositoryResource",
    "RevisionCollectionResource",
    "RevisionResource",
]


class _RegistryResource:
    def __init__(self, service: RegistryService) -> None:
        self._service = service


class OrganizationCollectionResource(_RegistryResource):
    """``/api/org``."""

    async def on_get(self, req: Request, resp: Response) -> None:
        """List organizations, one page at a time."""
        page = await self._service.list_organizations(parse_pagination(req))
        resp.media = page_envelope(page, serialize_organization)
        resp.status = HTTPStatus.OK

    async def on_post(self, req: Request, resp: Response) -> None:
        """Create an organization from ``{"org": name}``."""
        body = await decode_body(req, CreateOrganization)
        record = await self._service.create_organization(body.org)
        resp.media = envelope(serialize_organization(record))
        resp.status = HTTPStatus.OK


class OrganizationResource(_RegistryResource):
    """``/api/org/{org}``."""

    async def on_get(self, _req: Request, resp: Response, *, org: str) -> None:
        """Fetch one organization."""
        record = await self._service.get_organization(org)
        resp.media = envelope(serialize_organization(record))
        resp.status = HTTPStatus.OK

    async def on_delete(self, _req: Request, resp: Response, *, org: str) -> None:
        """Delete an organization and everything beneath it."""
        await self._service.delete_organization(org)
        resp.media = deleted_envelope()
        resp.status = HTTPStatus.OK


class RepositoryCollectionResource(_RegistryResource):
    """``/api/org/{org}/repo``."""

    async def on_get(self, req: Request, resp: Response, *, org: str) -> None:
        """List repositories of ``org``."""
        page = await self._service.list_repositories(org, parse_pagination(req))
        resp.media = page_envelope(page, serialize_repository)
        resp.status = HTTPStatus.OK

    async def on_post(self, req: Request, resp: Response, *, org: str) -> None:
        """Create a repository, applying the governing policy to its labels."""
        body = await decode_body(req, CreateRepository)
        record = await self._service.create_repository(org, body.repo, body.labels)
        resp.media = envelope(serialize_repository(record))
        resp.status = HTTPStatus.OK


class RepositoryResource(_RegistryResource):
    """``/api/org/{org}/repo/{repo}``."""

    async def on_get(
        self, _req: Request, resp: Response, *, org: str, repo: str
    ) -> None:
        """Fetch one repository with its labels."""
        record = await self._service.get_repository(org, repo)
        resp.media = envelope(serialize_repository(record))
        resp.status = HTTPStatus.OK

    async def on_put(
        self, req: Request, resp: Response, *, org: str, repo: str
    ) -> None:
        """Replace the repository's whole label set."""
        body = await decode_body(req, UpdateLabels)
        record = await self._service.update_repository_labels(org, repo, body.labels)
        resp.media = envelope(serialize_repository(record))
        resp.status = HTTPStatus.OK

    async def on_delete(
        self, _req: Request, resp: Response, *, org: str, repo: str
    ) -> None:
        """Delete a repository with its versions."""
        await self._service.delete_repository(org, repo)
        resp.media = deleted_envelope()
        resp.status = HTTPStatus.OK


class RevisionCollectionResource(_RegistryResource):
    """``/api/org/{org}/repo/{repo}/version``."""

    async def on_get(
        self, req: Request, resp: Response, *, org: str, repo: str
    ) -> None:
        """List versions of ``org/repo``."""
        page = await self._service.list_revisions(org, repo, parse_pagination(req))
        resp.media = page_envelope(page, serialize_revision)
        resp.status = HTTPStatus.OK

    async def on_post(
        self, req: Request, resp: Response, *, org: str, repo: str
    ) -> None:
        """Create a version, applying the governing policy to its labels."""
        body = await decode_body(req, CreateRevision)
        record = await self._service.create_revision(
            org, repo, body.version, body.labels, artifact_url=body.artifact_url
        )
        resp.media = envelope(serialize_revision(record))
        resp.status = HTTPStatus.OK


class RevisionResource(_RegistryResource):
    """``/api/org/{org}/repo/{repo}/version/{version}``."""

    async def on_get(
        self, _req: Request, resp: Response, *, org: str, repo: str, version: str
    ) -> None:
        """Fetch one version with its labels."""
        record = await self._service.get_revision(org, repo, version)
        resp.media = envelope(serialize_revision(record))
        resp.status = HTTPStatus.OK

    async def on_put(
        self, req: Request, resp: Response, *, org: str, repo: str, version: str
    ) -> None:
        """Replace the version's whole label set."""
        body = await decode_body(req, UpdateLabels)
        record = await self._service.update_revision_labels(
            org, repo, version, body.labels
        )
        resp.media = envelope(serialize_revision(record))
        resp.status = HTTPStatus.OK

    async def on_delete(
        self, _req: Request, resp: Response, *, org: str, repo: str, version: str
    ) -> None:
        """Delete a version and its labels."""
        await self._service.delete_revision(org, repo, version)
        resp.media = deleted_envelope()
        resp.status = HTTPStatus.OK
