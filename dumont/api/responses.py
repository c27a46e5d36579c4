"""JSON envelope shared by every registry endpoint.

Every response body has the same shape::

    {
        "status": {"code": 200},
        "data": {...},
        "page": {"more": false, "total": 3}
    }

Error responses carry ``"error": [message, ...]`` inside ``status`` and no
``data``. ``page`` is only present on list responses.
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from dumont.pagination import Page
    from dumont.storage.protocol import (
        OrganizationRecord,
        RepositoryRecord,
        RevisionRecord,
    )

__all__ = [
    "deleted_envelope",
    "envelope",
    "error_envelope",
    "page_envelope",
    "serialize_organization",
    "serialize_repository",
    "serialize_revision",
]


def envelope(data: object, *, code: int = 200) -> dict[str, typ.Any]:
    """Wrap a single payload in a success envelope."""
    return {"status": {"code": code}, "data": data}


def page_envelope[T](
    page: Page[T], serialize: cabc.Callable[[T], dict[str, typ.Any]]
) -> dict[str, typ.Any]:
    """Wrap one page of records, adding the ``page`` block."""
    body = envelope([serialize(item) for item in page.items])
    body["page"] = {"more": page.has_more, "total": page.total_count}
    return body


def deleted_envelope(*, deleted: bool = True) -> dict[str, typ.Any]:
    """Return the body sent after a successful delete."""
    return envelope({"deleted": deleted})


def error_envelope(code: int, *messages: str) -> dict[str, typ.Any]:
    """Return an error envelope carrying ``messages``."""
    return {"status": {"code": code, "error": list(messages)}}


def serialize_organization(record: OrganizationRecord) -> dict[str, typ.Any]:
    """Render an organization for the API."""
    return {"org": record.name, "created_at": record.created_at.isoformat()}


def serialize_repository(record: RepositoryRecord) -> dict[str, typ.Any]:
    """Render a repository and its labels for the API."""
    return {
        "org": record.org_name,
        "repo": record.name,
        "labels": dict(record.labels),
        "created_at": record.created_at.isoformat(),
    }


def serialize_revision(record: RevisionRecord) -> dict[str, typ.Any]:
    """Render a revision and its labels for the API."""
    return {
        "org": record.org_name,
        "repo": record.repo_name,
        "version": record.name,
        "artifact_url": record.artifact_url,
        "labels": dict(record.labels),
        "created_at": record.created_at.isoformat(),
    }
