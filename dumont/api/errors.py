"""API-layer exceptions and Falcon error handlers.

Handlers translate the registry error taxonomy into the JSON envelope:

- ``NotFoundError``: 404
- ``AlreadyExistsError``: 409
- ``ConstraintViolationError``, ``PolicyViolationError`` and
  ``InvalidInputError``: 400
- ``BackendError``: 500

Usage
-----
Register every handler on the Falcon app::

    from dumont.api.errors import register_error_handlers

    register_error_handlers(app)

"""

from __future__ import annotations

import typing as typ

import falcon

from dumont.api.responses import error_envelope
from dumont.errors import (
    AlreadyExistsError,
    BackendError,
    ConstraintViolationError,
    NotFoundError,
)
from dumont.policy.errors import PolicyViolationError

if typ.TYPE_CHECKING:
    import falcon.asgi
    from falcon.asgi import Request, Response

__all__ = [
    "InvalidInputError",
    "handle_already_exists",
    "handle_backend_error",
    "handle_http_error",
    "handle_invalid_input",
    "handle_not_found",
    "handle_rejected_request",
    "register_error_handlers",
]


class InvalidInputError(Exception):
    """Raised for client validation errors that should map to HTTP 400.

    Use this instead of ``ValueError`` so that only *intentional*
    validation failures are surfaced to the caller, while genuine
    programmer mistakes still propagate as unhandled 500s.

    Attributes
    ----------
    reason
        Human-readable description of the validation failure.
    field
        Optional name of the input field that failed validation.

    """

    def __init__(self, reason: str, *, field: str | None = None) -> None:
        """Initialize with a validation reason and optional field name."""
        self.reason = reason
        self.field = field
        message = f"{field}: {reason}" if field is not None else reason
        super().__init__(message)


def _render(resp: Response, status: int, message: str) -> None:
    resp.status = status
    resp.media = error_envelope(status, message)


async def handle_not_found(
    _req: Request,
    resp: Response,
    ex: NotFoundError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``NotFoundError`` to an HTTP 404 envelope."""
    _render(resp, 404, str(ex))


async def handle_already_exists(
    _req: Request,
    resp: Response,
    ex: AlreadyExistsError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``AlreadyExistsError`` to an HTTP 409 envelope."""
    _render(resp, 409, str(ex))


async def handle_rejected_request(
    _req: Request,
    resp: Response,
    ex: ConstraintViolationError | PolicyViolationError,
    _params: dict[str, typ.Any],
) -> None:
    """Map constraint and policy violations to an HTTP 400 envelope.

    The message is returned verbatim so callers can see which policy and
    label were at fault.
    """
    _render(resp, 400, str(ex))


async def handle_invalid_input(
    _req: Request,
    resp: Response,
    ex: InvalidInputError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InvalidInputError`` to an HTTP 400 envelope."""
    _render(resp, 400, str(ex))


async def handle_backend_error(
    _req: Request,
    resp: Response,
    ex: BackendError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``BackendError`` to an HTTP 500 envelope.

    The driver error was already logged with its traceback by the storage
    layer; only the operation name reaches the client.
    """
    _render(resp, 500, str(ex))


async def handle_http_error(
    _req: Request,
    resp: Response,
    ex: falcon.HTTPError,
    _params: dict[str, typ.Any],
) -> None:
    """Render Falcon's own errors (unknown route, bad method) as envelopes."""
    resp.status = ex.status
    if ex.headers:
        resp.set_headers(ex.headers)
    resp.media = error_envelope(ex.status_code, ex.title or str(ex.status))


def register_error_handlers(app: falcon.asgi.App) -> None:
    """Attach every handler to ``app``."""
    app.add_error_handler(falcon.HTTPError, handle_http_error)
    app.add_error_handler(NotFoundError, handle_not_found)
    app.add_error_handler(AlreadyExistsError, handle_already_exists)
    app.add_error_handler(ConstraintViolationError, handle_rejected_request)
    app.add_error_handler(PolicyViolationError, handle_rejected_request)
    app.add_error_handler(InvalidInputError, handle_invalid_input)
    app.add_error_handler(BackendError, handle_backend_error)
