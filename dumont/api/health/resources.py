"""Liveness and readiness probe resources.

The liveness probe never touches the database. The readiness probe runs an
optional check supplied by the runtime (a ``SELECT 1`` against the registry
database) and reports 503 while that check fails.

Usage
-----
Register health endpoints on the Falcon app::

    from dumont.api.health.resources import HealthResource, ReadyResource

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(check=ping_database))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

from dumont.logging import get_logger, log_warning

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from falcon.asgi import Request, Response

__all__ = ["HealthResource", "ReadinessCheck", "ReadyResource"]

type ReadinessCheck = cabc.Callable[[], cabc.Awaitable[bool]]

logger = get_logger(__name__)


class HealthResource:
    """Liveness probe resource returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe resource.

    Responds ``{"status": "ready"}`` with HTTP 200 when no check is
    configured or the check returns ``True``; otherwise responds
    ``{"status": "unavailable"}`` with HTTP 503.

    """

    def __init__(self, check: ReadinessCheck | None = None) -> None:
        """Configure the resource with an optional readiness check."""
        self._check = check

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests."""
        if self._check is None or await self._check():
            resp.media = {"status": "ready"}
            resp.status = HTTPStatus.OK
            return

        log_warning(logger, "Readiness check failed")
        resp.media = {"status": "unavailable"}
        resp.status = HTTPStatus.SERVICE_UNAVAILABLE
