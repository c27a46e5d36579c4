"""Error taxonomy shared by the registry service, storage, and API layers.

Every error carries enough structure (entity kind plus identifiers) for the
transport layer to render a stable message without parsing strings.
"""

from __future__ import annotations

import enum

MAX_VERSION_LENGTH = 30


class EntityKind(enum.StrEnum):
    """Kinds of entity tracked by the registry."""

    ORGANIZATION = "organization"
    REPOSITORY = "repository"
    REVISION = "revision"

    @property
    def label(self) -> str:
        """Return the short noun used in user-facing messages."""
        return _KIND_LABELS[self]


_KIND_LABELS = {
    EntityKind.ORGANIZATION: "Org",
    EntityKind.REPOSITORY: "Repo",
    EntityKind.REVISION: "Revision",
}


class DumontError(Exception):
    """Base class for all registry errors."""


class NotFoundError(DumontError):
    """Raised when an entity required by an operation does not exist.

    Attributes
    ----------
    kind
        Kind of the missing entity.
    identifiers
        Names identifying the entity, outermost first
        (``("org",)``, ``("org", "repo")`` or ``("org", "repo", "1.0")``).

    """

    def __init__(self, kind: EntityKind, *identifiers: str) -> None:
        """Record the missing entity's kind and identifying names."""
        self.kind = kind
        self.identifiers = identifiers
        super().__init__(f"{kind.label} {'/'.join(identifiers)} not found")


class AlreadyExistsError(DumontError):
    """Raised when a create collides with an existing sibling name."""

    def __init__(self, kind: EntityKind, *identifiers: str) -> None:
        """Record the colliding entity's kind and identifying names."""
        self.kind = kind
        self.identifiers = identifiers
        super().__init__(f"{kind.label} {'/'.join(identifiers)} exists")


class ConstraintViolationError(DumontError):
    """Raised when input breaks a data-shape constraint independent of policy."""

    def __init__(self, reason: str) -> None:
        """Initialise with a human-readable reason."""
        self.reason = reason
        super().__init__(f"Requested action was not allowed because: {reason}")


class VersionTooLongError(ConstraintViolationError):
    """Raised when a revision name exceeds ``MAX_VERSION_LENGTH`` characters."""

    def __init__(self, version: str, limit: int = MAX_VERSION_LENGTH) -> None:
        """Initialise with the rejected version string."""
        self.version = version
        self.limit = limit
        super().__init__(
            f"Version string '{version}' was more than the {limit} character limit"
        )


class BackendError(DumontError):
    """Opaque wrapper around a failure raised by the storage backend."""

    def __init__(self, operation: str) -> None:
        """Initialise with the name of the storage operation that failed."""
        self.operation = operation
        super().__init__(f"Storage backend failed during {operation}")


__all__ = [
    "MAX_VERSION_LENGTH",
    "AlreadyExistsError",
    "BackendError",
    "ConstraintViolationError",
    "DumontError",
    "EntityKind",
    "NotFoundError",
    "VersionTooLongError",
]
