"""Registry service for organizations, repositories and revisions."""

from __future__ import annotations

from .service import RegistryService, ensure_version_length

__all__ = ["RegistryService", "ensure_version_length"]
