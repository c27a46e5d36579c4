"""Application factory for the Dumont Falcon ASGI application.

This module provides ``create_app()`` which builds the Falcon ASGI
application with health endpoints and, when a registry service is supplied,
the ``/api/org`` resource tree.

Usage
-----
Create a health-only app (no database)::

    app = create_app()

Create a full app::

    from dumont.api.app import AppDependencies, create_app

    app = create_app(AppDependencies(registry=service))

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from dumont.api.errors import register_error_handlers
from dumont.api.health.resources import HealthResource, ReadyResource
from dumont.api.registry.resources import (
    OrganizationCollectionResource,
    OrganizationResource,
    RepositoryCollectionResource,
    RepositoryResource,
    RevisionCollectionResource,
    RevisionResource,
)

if typ.TYPE_CHECKING:
    from dumont.api.health.resources import ReadinessCheck
    from dumont.registry.service import RegistryService

__all__ = ["AppDependencies", "create_app"]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    registry
        Registry service backing the ``/api`` routes. When ``None`` only the
        health endpoints are registered.
    readiness_check
        Optional coroutine function consulted by ``/ready``.

    """

    registry: RegistryService | None = None
    readiness_check: ReadinessCheck | None = None


def _add_registry_routes(app: falcon.asgi.App, service: RegistryService) -> None:
    app.add_route("/api/org", OrganizationCollectionResource(service))
    app.add_route("/api/org/{org}", OrganizationResource(service))
    app.add_route("/api/org/{org}/repo", RepositoryCollectionResource(service))
    app.add_route("/api/org/{org}/repo/{repo}", RepositoryResource(service))
    app.add_route(
        "/api/org/{org}/repo/{repo}/version", RevisionCollectionResource(service)
    )
    app.add_route(
        "/api/org/{org}/repo/{repo}/version/{version}", RevisionResource(service)
    )


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies. When ``None``, only health
        endpoints are available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    deps = dependencies or AppDependencies()
    app = falcon.asgi.App()

    # Health endpoints are always available
    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(check=deps.readiness_check))

    if deps.registry is not None:
        _add_registry_routes(app, deps.registry)

    register_error_handlers(app)
    return app
