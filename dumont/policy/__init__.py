"""Label policies: document models, loading, and enforcement.

A policy binds a repository path pattern to the labels repositories and
revisions under that path must carry. Policies are loaded once at startup
into an immutable :class:`PolicyCatalog`; the first policy whose pattern
matches ``org/repo`` governs that repository.

Quick examples
--------------

Load and query a catalog::

    >>> from dumont.policy import load_policy_catalog
    >>> catalog = load_policy_catalog("policies.yaml")
    >>> policy = catalog.find_matching_policy("example", "repo-1")

Validate labels in place, injecting defaults::

    >>> labels = {"owners": "team-a"}
    >>> catalog.enforce_repository_labels("example", "repo-1", labels)
"""

from __future__ import annotations

from .catalog import CompiledPolicy, PolicyCatalog
from .errors import (
    DuplicateLabelError,
    LabelNotDefinedError,
    LabelNotInSetError,
    PatternError,
    PolicyDefinitionError,
    PolicyDocumentError,
    PolicyError,
    PolicyViolationError,
)
from .loader import load_policy_catalog, load_policy_document
from .models import PolicyDefinition, PolicyDocument, RequiredLabel
from .schema import build_policy_schema, write_policy_schema
from .validator import apply_required_label, apply_required_labels

__all__ = [
    "CompiledPolicy",
    "DuplicateLabelError",
    "LabelNotDefinedError",
    "LabelNotInSetError",
    "PatternError",
    "PolicyCatalog",
    "PolicyDefinition",
    "PolicyDefinitionError",
    "PolicyDocument",
    "PolicyDocumentError",
    "PolicyError",
    "PolicyViolationError",
    "RequiredLabel",
    "apply_required_label",
    "apply_required_labels",
    "build_policy_schema",
    "load_policy_catalog",
    "load_policy_document",
    "write_policy_schema",
]
