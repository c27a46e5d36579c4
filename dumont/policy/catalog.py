"""Compiled policy catalog and first-match-wins policy selection.

The catalog is built once at startup from the policy document and handed to
the registry service. It is immutable afterwards, so concurrent requests can
read it without locking.

Example:
>>> from dumont.policy.models import PolicyDefinition, RequiredLabel
>>> catalog = PolicyCatalog.compile([
...     PolicyDefinition(
...         name="service",
...         repository_pattern="example/.*-service",
...         required_repo_labels=[RequiredLabel(name="owners")],
...     )
... ])
>>> catalog.find_matching_policy("example", "billing-service").name
'service'
>>> catalog.find_matching_policy("other", "billing-service") is None
True

"""

from __future__ import annotations

import dataclasses
import re
import typing as typ

from .errors import DuplicateLabelError, PatternError
from .validator import apply_required_labels

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import PolicyDefinition, RequiredLabel


def repository_path(org: str, repo: str) -> str:
    """Return the ``org/repo`` path that policy patterns are matched against."""
    return f"{org}/{repo}"


def anchor_pattern(pattern: str) -> str:
    """Anchor ``pattern`` so it must match the whole repository path.

    The pattern is grouped before anchoring so that alternations such as
    ``a/x|b/y`` are anchored as a whole. This departs from plain
    ``^pattern$`` anchoring, where ``^a|b/c$`` binds each anchor to one
    branch and so matches any path that merely starts with ``a``. Patterns
    without a top-level ``|`` behave identically under both forms.

    >>> anchor_pattern("a|b/c")
    '^(?:a|b/c)$'
    """
    return f"^(?:{pattern})$"


def _ensure_unique_labels(
    policy_name: str, required_labels: cabc.Iterable[RequiredLabel]
) -> None:
    seen: set[str] = set()
    for required in required_labels:
        if required.name in seen:
            raise DuplicateLabelError(policy_name, required.name)
        seen.add(required.name)


@dataclasses.dataclass(frozen=True, slots=True)
class CompiledPolicy:
    """A policy whose pattern has been anchored and compiled.

    Attributes
    ----------
    name
        Policy name reported in violations.
    pattern
        Compiled anchored expression over ``org/repo``.
    required_repo_labels
        Repository rules in declaration order.
    required_version_labels
        Revision rules in declaration order.

    """

    name: str
    pattern: re.Pattern[str]
    required_repo_labels: tuple[RequiredLabel, ...]
    required_version_labels: tuple[RequiredLabel, ...]

    @classmethod
    def from_definition(cls, definition: PolicyDefinition) -> CompiledPolicy:
        """Compile one policy definition.

        Raises
        ------
        DuplicateLabelError
            If either required-label list names a label twice.
        PatternError
            If the repository pattern does not compile.

        """
        _ensure_unique_labels(definition.name, definition.required_repo_labels)
        _ensure_unique_labels(definition.name, definition.required_version_labels)

        try:
            pattern = re.compile(anchor_pattern(definition.repository_pattern))
        except re.error as exc:
            raise PatternError(
                definition.name, definition.repository_pattern, str(exc)
            ) from exc

        return cls(
            name=definition.name,
            pattern=pattern,
            required_repo_labels=tuple(definition.required_repo_labels),
            required_version_labels=tuple(definition.required_version_labels),
        )

    def matches(self, path: str) -> bool:
        """Return whether this policy governs the repository at ``path``."""
        return self.pattern.fullmatch(path) is not None

    def apply_repository_labels(self, labels: cabc.MutableMapping[str, str]) -> None:
        """Validate and default a repository label mapping in place."""
        apply_required_labels(self.name, self.required_repo_labels, labels)

    def apply_revision_labels(self, labels: cabc.MutableMapping[str, str]) -> None:
        """Validate and default a revision label mapping in place."""
        apply_required_labels(self.name, self.required_version_labels, labels)


@dataclasses.dataclass(frozen=True, slots=True)
class PolicyCatalog:
    """Ordered, immutable collection of compiled policies."""

    policies: tuple[CompiledPolicy, ...] = ()

    @classmethod
    def compile(cls, definitions: cabc.Iterable[PolicyDefinition]) -> PolicyCatalog:
        """Compile definitions, preserving declaration order exactly.

        Raises
        ------
        PolicyDefinitionError
            Either a ``DuplicateLabelError`` or a ``PatternError`` for the
            first offending definition.

        """
        return cls(
            policies=tuple(
                CompiledPolicy.from_definition(definition)
                for definition in definitions
            )
        )

    @classmethod
    def empty(cls) -> PolicyCatalog:
        """Return a catalog that leaves every repository unconstrained."""
        return cls()

    def __len__(self) -> int:
        """Return the number of compiled policies."""
        return len(self.policies)

    def find_matching_policy(self, org: str, repo: str) -> CompiledPolicy | None:
        """Return the earliest-declared policy matching ``org/repo``, if any."""
        path = repository_path(org, repo)
        for policy in self.policies:
            if policy.matches(path):
                return policy
        return None

    def enforce_repository_labels(
        self, org: str, repo: str, labels: cabc.MutableMapping[str, str]
    ) -> CompiledPolicy | None:
        """Apply the matching policy's repository rules to ``labels``.

        Returns the policy that was applied, or ``None`` when the repository
        is unconstrained and ``labels`` was left untouched.
        """
        policy = self.find_matching_policy(org, repo)
        if policy is not None:
            policy.apply_repository_labels(labels)
        return policy

    def enforce_revision_labels(
        self, org: str, repo: str, labels: cabc.MutableMapping[str, str]
    ) -> CompiledPolicy | None:
        """Apply the matching policy's revision rules to ``labels``."""
        policy = self.find_matching_policy(org, repo)
        if policy is not None:
            policy.apply_revision_labels(labels)
        return policy

    def describe(self) -> str:
        """Render a human-readable summary for startup logging."""
        if not self.policies:
            return "no policies configured"

        lines = []
        for index, policy in enumerate(self.policies):
            repo_labels = ", ".join(r.name for r in policy.required_repo_labels)
            version_labels = ", ".join(r.name for r in policy.required_version_labels)
            lines.append(
                f"{index}: {policy.name} matches {policy.pattern.pattern} "
                f"(repo labels: [{repo_labels}]; version labels: [{version_labels}])"
            )
        return "\n".join(lines)


__all__ = [
    "CompiledPolicy",
    "PolicyCatalog",
    "anchor_pattern",
    "repository_path",
]
