"""Typed policy document structures.

Policy documents are decoded straight into these structs. Every struct
forbids unknown fields so that a misspelt key (``default`` instead of
``default_value``) fails at startup instead of silently disabling a rule.
"""

from __future__ import annotations

import msgspec


class RequiredLabel(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """A label a policy mandates.

    Attributes
    ----------
    name : str
        Label key that must be present.
    one_of : list[str]
        Allowed values. An empty list allows any value.
    default_value : str, optional
        Value injected when the caller omits the label. Nothing checks that
        it belongs to ``one_of``; a default outside the set fails on every
        validation that relies on it.

    """

    name: str
    one_of: list[str] = msgspec.field(default_factory=list)
    default_value: str | None = None


class PolicyDefinition(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """Declarative policy as written in the policy document.

    Attributes
    ----------
    name : str
        Policy name reported in violations.
    repository_pattern : str
        Regular expression matched against the whole ``org/repo`` path.
    required_repo_labels : list[RequiredLabel]
        Rules applied to repository label sets, in order. Optional; an
        omitted list constrains nothing.
    required_version_labels : list[RequiredLabel]
        Rules applied to revision label sets, in order. Optional, like
        ``required_repo_labels``, so a policy may govern only one kind.

    """

    name: str
    repository_pattern: str
    required_repo_labels: list[RequiredLabel] = msgspec.field(default_factory=list)
    required_version_labels: list[RequiredLabel] = msgspec.field(
        default_factory=list
    )


class PolicyDocument(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """Top-level policy document.

    The document key is ``policy`` so that TOML documents read naturally as a
    sequence of ``[[policy]]`` tables. Declaration order is significant.
    """

    policies: list[PolicyDefinition] = msgspec.field(
        default_factory=list, name="policy"
    )


__all__ = ["PolicyDefinition", "PolicyDocument", "RequiredLabel"]
