"""Dumont runtime entrypoint.

This module provides the ASGI application factory used by Granian. The
``dumont.runtime:create_app`` import path is the stable entrypoint for
container deployments.

When ``DUMONT_DATABASE_URL`` is set, the runtime loads the policy catalog,
builds the SQL store and registry service, and mounts the ``/api`` routes.
Otherwise it starts in health-only mode.

Configuration is driven by environment variables (see
:class:`dumont.config.ServiceConfig`):

- ``DUMONT_HOST``: Bind address (default ``0.0.0.0``)
- ``DUMONT_PORT``: Listen port (default ``8080``)
- ``DUMONT_LOG_LEVEL``: Log level (default ``INFO``)
- ``DUMONT_DATABASE_URL``: Database connection URL
- ``DUMONT_POLICY_PATH``: YAML or TOML policy document
- ``DUMONT_DATABASE_ISOLATION_LEVEL``: Transaction isolation level

Run the service directly with ``python -m dumont.runtime``.
"""

from __future__ import annotations

import typing as typ

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from dumont.config import ConfigError, ServiceConfig
from dumont.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_exception,
    log_info,
    log_warning,
)
from dumont.policy import PolicyCatalog, PolicyDefinitionError, load_policy_catalog

if typ.TYPE_CHECKING:
    import falcon.asgi
    from sqlalchemy.ext.asyncio import AsyncEngine

    from dumont.api.app import AppDependencies
    from dumont.api.health.resources import ReadinessCheck

__all__ = ["build_dependencies", "create_app", "load_catalog", "main"]

logger = get_logger(__name__)


def load_catalog(config: ServiceConfig) -> PolicyCatalog:
    """Load the configured policy catalog and log what it contains.

    Raises
    ------
    PolicyDefinitionError
        If the policy document is unreadable or defines an invalid policy.

    """
    if config.policy_path is None:
        log_warning(
            logger, "DUMONT_POLICY_PATH is not set; no repository is constrained"
        )
        return PolicyCatalog.empty()

    catalog = load_policy_catalog(config.policy_path)
    log_info(
        logger,
        "Loaded %d policies from %s:\n%s",
        len(catalog),
        config.policy_path,
        catalog.describe(),
    )
    return catalog


def _database_ping(engine: AsyncEngine) -> ReadinessCheck:
    async def ping() -> bool:
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            log_exception(logger, "Database readiness check failed", exc)
            return False
        return True

    return ping


def build_dependencies(config: ServiceConfig) -> AppDependencies:
    """Wire the catalog, SQL store and registry service for ``config``.

    ``config.database_url`` must be set.
    """
    from dumont.api.app import AppDependencies
    from dumont.registry import RegistryService
    from dumont.storage import (
        SqlMetadataStore,
        create_session_factory,
        create_storage_engine,
    )

    if config.database_url is None:
        msg = "database_url is required to build registry dependencies"
        raise ValueError(msg)

    catalog = load_catalog(config)
    engine = create_storage_engine(
        config.database_url, isolation_level=config.isolation_level
    )
    store = SqlMetadataStore(create_session_factory(engine))
    return AppDependencies(
        registry=RegistryService(store, catalog),
        readiness_check=_database_ping(engine),
    )


def create_app() -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    When ``DUMONT_DATABASE_URL`` is set the registry endpoints are mounted;
    otherwise only ``/health`` and ``/ready`` are available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    from dumont.api.app import create_app as _create_api_app

    config = ServiceConfig.from_env()
    configure_logging(config.log_level)

    if config.database_url is None:
        return _create_api_app()
    return _create_api_app(build_dependencies(config))


def main() -> None:
    """Start the Dumont runtime server using Granian.

    Configuration and the policy document are validated here, before any
    worker starts, so a bad deployment fails fast with a single log line.
    """
    from granian import Granian
    from granian.constants import Interfaces

    try:
        config = ServiceConfig.from_env()
    except ConfigError as exc:
        # Use error() not exception() - validation failures need no traceback
        log_error(logger, "Invalid configuration: %s", exc)
        raise SystemExit(1) from exc

    normalized_level, invalid_level = configure_logging(config.log_level)
    if invalid_level:
        log_warning(
            logger,
            "Invalid DUMONT_LOG_LEVEL %r, falling back to %s",
            config.log_level,
            normalized_level,
        )

    try:
        load_catalog(config)
    except PolicyDefinitionError as exc:
        log_error(logger, "Refusing to start: %s", exc)
        raise SystemExit(1) from exc

    if config.database_url is None:
        log_warning(logger, "DUMONT_DATABASE_URL is not set; serving health only")

    log_info(
        logger,
        "Starting Dumont runtime on %s:%d (log_level=%s)",
        config.host,
        config.port,
        normalized_level,
    )

    server = Granian(
        "dumont.runtime:create_app",
        address=config.host,
        port=config.port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
