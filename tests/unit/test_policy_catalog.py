"""Unit tests for policy compilation and first-match selection."""

from __future__ import annotations

import pytest

from dumont.policy import (
    DuplicateLabelError,
    PatternError,
    PolicyCatalog,
    PolicyDefinition,
    RequiredLabel,
)
from dumont.policy.catalog import anchor_pattern


def _policy(name: str, pattern: str, **kwargs: list[RequiredLabel]) -> PolicyDefinition:
    return PolicyDefinition(name=name, repository_pattern=pattern, **kwargs)


def test_earliest_declared_policy_wins(example_catalog: PolicyCatalog) -> None:
    """When two patterns match, the earlier declaration governs."""
    policy = example_catalog.find_matching_policy("example", "repo-1")
    assert policy is not None
    assert policy.name == "repo-1-policy"


def test_broader_policy_governs_other_repositories(
    example_catalog: PolicyCatalog,
) -> None:
    """Repositories only the broad pattern matches use the broad policy."""
    policy = example_catalog.find_matching_policy("example", "repo-2")
    assert policy is not None
    assert policy.name == "example-policy"


def test_unmatched_repository_is_unconstrained(example_catalog: PolicyCatalog) -> None:
    """No match returns None rather than raising."""
    assert example_catalog.find_matching_policy("other", "repo-1") is None


@pytest.mark.parametrize(
    ("org", "repo", "matches"),
    [
        ("example", "repo-1", True),
        ("example", "repo-10", False),
        ("my-example", "repo-1", False),
        ("example", "repo-1/extra", False),
    ],
)
def test_patterns_match_the_whole_path(org: str, repo: str, matches: bool) -> None:
    """Patterns are anchored at both ends of ``org/repo``."""
    catalog = PolicyCatalog.compile([_policy("exact", "example/repo-1")])
    found = catalog.find_matching_policy(org, repo) is not None
    assert found is matches


def test_alternation_is_anchored_as_a_whole() -> None:
    """Anchoring wraps alternations instead of binding to one branch."""
    catalog = PolicyCatalog.compile([_policy("either", "a/x|b/y")])
    assert catalog.find_matching_policy("b", "y") is not None
    assert catalog.find_matching_policy("b", "yz") is None
    assert catalog.find_matching_policy("za", "x") is None


def test_top_level_alternation_does_not_match_prefixes() -> None:
    """``a|b/c`` governs exactly ``a`` and ``b/c``, not paths starting with a."""
    assert anchor_pattern("a|b/c") == "^(?:a|b/c)$"
    catalog = PolicyCatalog.compile([_policy("either", "a|b/c")])
    assert catalog.find_matching_policy("b", "c") is not None
    assert catalog.find_matching_policy("abc", "repo") is None
    assert catalog.find_matching_policy("a", "repo") is None


def test_duplicate_repository_label_fails_compilation() -> None:
    """Naming a label twice in one list is a definition error."""
    definition = _policy(
        "dupes",
        ".*",
        required_repo_labels=[RequiredLabel(name="owner"), RequiredLabel(name="owner")],
    )
    with pytest.raises(DuplicateLabelError) as excinfo:
        PolicyCatalog.compile([definition])

    assert str(excinfo.value) == "Policy `dupes` defined the label `owner` twice."


def test_same_label_in_both_lists_is_allowed() -> None:
    """Repository and version lists are checked independently."""
    definition = _policy(
        "split",
        ".*",
        required_repo_labels=[RequiredLabel(name="owner")],
        required_version_labels=[RequiredLabel(name="owner")],
    )
    assert len(PolicyCatalog.compile([definition])) == 1


def test_duplicate_version_label_fails_compilation() -> None:
    """Duplicates in the version list are rejected too."""
    definition = _policy(
        "dupes",
        ".*",
        required_version_labels=[RequiredLabel(name="r"), RequiredLabel(name="r")],
    )
    with pytest.raises(DuplicateLabelError):
        PolicyCatalog.compile([definition])


def test_invalid_pattern_names_the_policy() -> None:
    """A pattern that does not compile reports the policy it came from."""
    with pytest.raises(PatternError) as excinfo:
        PolicyCatalog.compile([_policy("broken", "example/(")])

    assert excinfo.value.policy_name == "broken"
    assert excinfo.value.pattern == "example/("


def test_enforce_repository_labels_applies_matching_rules(
    example_catalog: PolicyCatalog,
) -> None:
    """Enforcement uses the matched policy's repository rules."""
    labels = {"team": "search"}
    policy = example_catalog.enforce_repository_labels("example", "repo-2", labels)
    assert policy is not None
    assert labels == {"team": "search", "tier": "silver"}


def test_enforce_revision_labels_leaves_unconstrained_labels(
    example_catalog: PolicyCatalog,
) -> None:
    """Without a matching policy the mapping is left untouched."""
    labels = {"anything": "goes"}
    assert example_catalog.enforce_revision_labels("other", "x", labels) is None
    assert labels == {"anything": "goes"}


def test_empty_catalog_describes_itself() -> None:
    """An empty catalog has no policies and says so."""
    catalog = PolicyCatalog.empty()
    assert len(catalog) == 0
    assert catalog.describe() == "no policies configured"


def test_describe_lists_policies_in_order(example_catalog: PolicyCatalog) -> None:
    """describe() renders one line per policy in declaration order."""
    lines = example_catalog.describe().splitlines()
    assert lines[0].startswith("0: repo-1-policy")
    assert lines[1].startswith("1: example-policy")
    assert "team, tier" in lines[1]
