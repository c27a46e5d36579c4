"""Service configuration read from the environment.

Usage
-----
>>> import os
>>> os.environ["DUMONT_PORT"] = "9000"
>>> ServiceConfig.from_env().port
9000

"""

from __future__ import annotations

import dataclasses as dc
import os
import typing as typ
from pathlib import Path

if typ.TYPE_CHECKING:
    import collections.abc as cabc

DEFAULT_HOST = "0.0.0.0"  # noqa: S104 - bind all interfaces for container
DEFAULT_PORT = 8080
DEFAULT_LOG_LEVEL = "INFO"

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535

ISOLATION_LEVELS = frozenset({
    "AUTOCOMMIT",
    "READ COMMITTED",
    "READ UNCOMMITTED",
    "REPEATABLE READ",
    "SERIALIZABLE",
})


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""

    def __init__(self, env_var: str, raw: str, reason: str) -> None:
        """Record the variable, its raw value and why it was rejected."""
        self.env_var = env_var
        self.raw = raw
        super().__init__(f"{env_var} {reason}, got: {raw!r}")


def parse_port(raw: str, env_var: str = "DUMONT_PORT") -> int:
    """Parse a TCP port number in the range 1-65535."""
    try:
        port = int(raw)
    except ValueError as exc:
        raise ConfigError(env_var, raw, "must be an integer") from exc
    if not (_MIN_PORT <= port <= _MAX_PORT):
        raise ConfigError(env_var, raw, f"must be within {_MIN_PORT}-{_MAX_PORT}")
    return port


def parse_isolation_level(
    raw: str, env_var: str = "DUMONT_DATABASE_ISOLATION_LEVEL"
) -> str:
    """Normalise an isolation level name such as ``repeatable_read``."""
    normalized = " ".join(raw.replace("_", " ").upper().split())
    if normalized not in ISOLATION_LEVELS:
        allowed = ", ".join(sorted(ISOLATION_LEVELS))
        raise ConfigError(env_var, raw, f"must be one of {allowed}")
    return normalized


def _optional(environ: cabc.Mapping[str, str], env_var: str) -> str | None:
    raw = environ.get(env_var, "").strip()
    return raw or None


@dc.dataclass(frozen=True, slots=True)
class ServiceConfig:
    """Runtime configuration for the registry service.

    Attributes
    ----------
    database_url
        SQLAlchemy async URL. When ``None`` the service starts with only the
        health endpoints mounted.
    policy_path
        Optional YAML or TOML policy document. When ``None`` no repository
        is constrained.
    host
        Bind address for the HTTP server.
    port
        Listen port for the HTTP server.
    log_level
        Raw log level string; normalised by ``configure_logging``.
    isolation_level
        Optional transaction isolation level for the database engine.

    """

    database_url: str | None = None
    policy_path: Path | None = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL
    isolation_level: str | None = None

    @classmethod
    def from_env(cls, environ: cabc.Mapping[str, str] | None = None) -> ServiceConfig:
        """Create configuration from ``DUMONT_*`` environment variables.

        Reads ``DUMONT_DATABASE_URL``, ``DUMONT_POLICY_PATH``, ``DUMONT_HOST``,
        ``DUMONT_PORT``, ``DUMONT_LOG_LEVEL`` and
        ``DUMONT_DATABASE_ISOLATION_LEVEL``. Blank values count as unset.

        Raises
        ------
        ConfigError
            If the port or isolation level is invalid.

        """
        env = os.environ if environ is None else environ

        raw_policy = _optional(env, "DUMONT_POLICY_PATH")
        raw_port = _optional(env, "DUMONT_PORT")
        raw_isolation = _optional(env, "DUMONT_DATABASE_ISOLATION_LEVEL")

        return cls(
            database_url=_optional(env, "DUMONT_DATABASE_URL"),
            policy_path=None if raw_policy is None else Path(raw_policy),
            host=_optional(env, "DUMONT_HOST") or DEFAULT_HOST,
            port=DEFAULT_PORT if raw_port is None else parse_port(raw_port),
            log_level=_optional(env, "DUMONT_LOG_LEVEL") or DEFAULT_LOG_LEVEL,
            isolation_level=(
                None if raw_isolation is None else parse_isolation_level(raw_isolation)
            ),
        )


__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_PORT",
    "ISOLATION_LEVELS",
    "ConfigError",
    "ServiceConfig",
    "parse_isolation_level",
    "parse_port",
]
