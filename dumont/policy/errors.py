"""Errors raised while loading policies and enforcing required labels."""

from __future__ import annotations

from dumont.errors import DumontError


class PolicyError(DumontError):
    """Base class for policy errors, both load-time and enforcement-time."""


class PolicyDefinitionError(PolicyError):
    """Raised when policy definitions cannot be turned into a catalog.

    These errors only occur at startup. The service refuses to start rather
    than run with an ambiguous or unreadable policy set.
    """


class PolicyDocumentError(PolicyDefinitionError):
    """Raised when a policy document cannot be read or fails schema checks."""

    def __init__(self, source: str, reason: str) -> None:
        """Capture the document location and the parse failure."""
        self.source = source
        self.reason = reason
        super().__init__(f"Policy document {source} is invalid: {reason}")


class DuplicateLabelError(PolicyDefinitionError):
    """Raised when one required-label list names the same label twice."""

    def __init__(self, policy_name: str, label_name: str) -> None:
        """Record the offending policy and label names."""
        self.policy_name = policy_name
        self.label_name = label_name
        super().__init__(
            f"Policy `{policy_name}` defined the label `{label_name}` twice."
        )


class PatternError(PolicyDefinitionError):
    """Raised when a policy's repository pattern is not a valid expression."""

    def __init__(self, policy_name: str, pattern: str, reason: str) -> None:
        """Record the offending policy, its pattern and the compiler message."""
        self.policy_name = policy_name
        self.pattern = pattern
        self.reason = reason
        super().__init__(
            f"Policy `{policy_name}` has an invalid repository pattern "
            f"`{pattern}`: {reason}"
        )


class PolicyViolationError(PolicyError):
    """Raised when a label mapping does not satisfy the matching policy."""

    def __init__(self, policy_name: str, label_name: str, message: str) -> None:
        """Record the policy and label that were violated."""
        self.policy_name = policy_name
        self.label_name = label_name
        super().__init__(message)


class LabelNotDefinedError(PolicyViolationError):
    """Raised when a required label is missing and has no default."""

    def __init__(self, policy_name: str, label_name: str) -> None:
        """Build the message naming the policy and missing label."""
        super().__init__(
            policy_name,
            label_name,
            f"Policy `{policy_name}` required that label `{label_name}` be set, "
            "however it was not and no default was specified.",
        )


class LabelNotInSetError(PolicyViolationError):
    """Raised when a label's value is outside the policy's allowed set."""

    def __init__(self, policy_name: str, label_name: str, value: str) -> None:
        """Build the message naming the policy, label and rejected value."""
        self.value = value
        super().__init__(
            policy_name,
            label_name,
            f"Policy `{policy_name}` required that label `{label_name}` be one of "
            f"a set values, however `{value}` was not in that set.",
        )


__all__ = [
    "DuplicateLabelError",
    "LabelNotDefinedError",
    "LabelNotInSetError",
    "PatternError",
    "PolicyDefinitionError",
    "PolicyDocumentError",
    "PolicyError",
    "PolicyViolationError",
]
