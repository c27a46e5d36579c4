"""Required-label enforcement.

Validation is fail-fast in declared order: the first violated rule is
reported and later rules are not examined.
"""

from __future__ import annotations

import typing as typ

from .errors import LabelNotDefinedError, LabelNotInSetError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import RequiredLabel


def apply_required_label(
    policy_name: str,
    required: RequiredLabel,
    labels: cabc.MutableMapping[str, str],
) -> None:
    """Enforce a single rule, injecting its default when the label is absent.

    Raises
    ------
    LabelNotDefinedError
        If the label is absent and the rule has no default.
    LabelNotInSetError
        If the resulting value is outside the rule's ``one_of`` set.

    """
    value = labels.get(required.name)
    if value is None:
        if required.default_value is None:
            raise LabelNotDefinedError(policy_name, required.name)
        value = required.default_value
        labels[required.name] = value

    if required.one_of and value not in required.one_of:
        raise LabelNotInSetError(policy_name, required.name, value)


def apply_required_labels(
    policy_name: str,
    required_labels: cabc.Iterable[RequiredLabel],
    labels: cabc.MutableMapping[str, str],
) -> None:
    """Validate ``labels`` against ``required_labels``, mutating it in place.

    Defaults are written into ``labels`` as rules are processed, so callers
    must persist the mutated mapping rather than their original input. On
    failure the mapping may already hold defaults for earlier rules; callers
    discard it in that case.

    Parameters
    ----------
    policy_name
        Name reported in any violation.
    required_labels
        Rules in declaration order.
    labels
        Caller-supplied labels. Not shared across concurrent validations.

    """
    for required in required_labels:
        apply_required_label(policy_name, required, labels)


__all__ = ["apply_required_label", "apply_required_labels"]
