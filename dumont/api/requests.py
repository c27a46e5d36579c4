"""Request body structs and query-string parsing for registry endpoints."""

from __future__ import annotations

import typing as typ

import msgspec

from dumont.api.errors import InvalidInputError
from dumont.pagination import (
    DEFAULT_PAGE_NUMBER,
    DEFAULT_PAGE_SIZE,
    InvalidPaginationError,
    PaginationOptions,
)

if typ.TYPE_CHECKING:
    from falcon.asgi import Request

__all__ = [
    "MAX_BODY_BYTES",
    "MAX_OFFSET",
    "MAX_QUERY_INT",
    "CreateOrganization",
    "CreateRepository",
    "CreateRevision",
    "UpdateLabels",
    "decode_body",
    "parse_pagination",
]

MAX_BODY_BYTES = 16 * 1024

# Query integers are unsigned 32-bit; the row offset must fit a signed
# 64-bit SQL integer.
MAX_QUERY_INT = 2**32 - 1
MAX_OFFSET = 2**63 - 1


class CreateOrganization(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """Body of ``POST /api/org``."""

    org: str


class CreateRepository(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """Body of ``POST /api/org/{org}/repo``."""

    repo: str
    labels: dict[str, str] = msgspec.field(default_factory=dict)


class CreateRevision(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """Body of ``POST /api/org/{org}/repo/{repo}/version``."""

    version: str
    artifact_url: str | None = None
    labels: dict[str, str] = msgspec.field(default_factory=dict)


class UpdateLabels(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """Body of the label-replacing ``PUT`` endpoints."""

    labels: dict[str, str] = msgspec.field(default_factory=dict)


async def decode_body[T](req: Request, body_type: type[T]) -> T:
    """Decode the JSON request body into ``body_type``.

    Raises
    ------
    InvalidInputError
        If the body is too large, not JSON, or does not match the struct.
        Bodies sent without ``Content-Length`` are read up to the limit and
        rejected when they run past it.

    """
    if req.content_length is not None and req.content_length > MAX_BODY_BYTES:
        msg = f"request body exceeds {MAX_BODY_BYTES} bytes"
        raise InvalidInputError(msg)

    raw = await req.stream.read(MAX_BODY_BYTES + 1)
    if len(raw) > MAX_BODY_BYTES:
        msg = f"request body exceeds {MAX_BODY_BYTES} bytes"
        raise InvalidInputError(msg)
    try:
        return msgspec.json.decode(raw, type=body_type)
    except msgspec.ValidationError as exc:
        raise InvalidInputError(str(exc)) from exc
    except msgspec.DecodeError as exc:
        msg = f"malformed JSON body: {exc}"
        raise InvalidInputError(msg) from exc


def _int_param(req: Request, name: str, default: int) -> int:
    raw = req.get_param(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        msg = f"must be an integer, got {raw!r}"
        raise InvalidInputError(msg, field=name) from exc
    if value > MAX_QUERY_INT:
        msg = f"must be at most {MAX_QUERY_INT}, got {raw!r}"
        raise InvalidInputError(msg, field=name)
    return value


def parse_pagination(req: Request) -> PaginationOptions:
    """Read ``?page=`` and ``?size=`` into validated pagination options.

    Missing parameters fall back to page 0 and size 50. Values above
    ``MAX_QUERY_INT``, and windows starting past ``MAX_OFFSET``, are
    rejected before any query is built.
    """
    page_number = _int_param(req, "page", DEFAULT_PAGE_NUMBER)
    page_size = _int_param(req, "size", DEFAULT_PAGE_SIZE)
    try:
        options = PaginationOptions(page_number=page_number, page_size=page_size)
    except InvalidPaginationError as exc:
        raise InvalidInputError(str(exc)) from exc
    if options.offset > MAX_OFFSET:
        msg = f"page {page_number} of size {page_size} is out of range"
        raise InvalidInputError(msg, field="page")
    return options
