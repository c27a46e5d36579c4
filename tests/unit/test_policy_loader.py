"""Policy document loading from YAML and TOML."""

from __future__ import annotations

import json
from pathlib import Path  # noqa: TC003

import pytest

from dumont.policy import (
    DuplicateLabelError,
    PolicyDocumentError,
    load_policy_catalog,
    load_policy_document,
)
from dumont.policy.schema import SCHEMA_ID, build_policy_schema, write_policy_schema

YAML_POLICY = """
policy:
  - name: services
    repository_pattern: "example/.*-service"
    required_repo_labels:
      - name: owner
      - name: tier
        one_of: [gold, silver]
        default_value: silver
    required_version_labels:
      - name: release
        one_of: [alpha, ga]
  - name: everything
    repository_pattern: ".*"
"""

TOML_POLICY = """
[[policy]]
name = "services"
repository_pattern = "example/.*-service"

[[policy.required_repo_labels]]
name = "owner"

[[policy.required_repo_labels]]
name = "tier"
one_of = ["gold", "silver"]
default_value = "silver"
"""


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_loads_yaml_document_in_order(tmp_path: Path) -> None:
    """YAML policies decode into typed structs in declaration order."""
    document = load_policy_document(_write(tmp_path, "p.yaml", YAML_POLICY))

    assert [p.name for p in document.policies] == ["services", "everything"]
    services = document.policies[0]
    assert [r.name for r in services.required_repo_labels] == ["owner", "tier"]
    assert services.required_repo_labels[1].default_value == "silver"
    assert services.required_version_labels[0].one_of == ["alpha", "ga"]
    assert document.policies[1].required_repo_labels == []


def test_label_lists_may_be_omitted(tmp_path: Path) -> None:
    """A policy naming neither label list loads and constrains nothing."""
    catalog = load_policy_catalog(_write(tmp_path, "p.yaml", YAML_POLICY))

    everything = catalog.policies[1]
    assert everything.required_repo_labels == ()
    assert everything.required_version_labels == ()
    labels = {"free": "form"}
    assert catalog.enforce_repository_labels("any", "repo", labels) is everything
    assert labels == {"free": "form"}


def test_loads_toml_document(tmp_path: Path) -> None:
    """Files ending in .toml are decoded as TOML."""
    document = load_policy_document(_write(tmp_path, "p.toml", TOML_POLICY))

    assert len(document.policies) == 1
    assert document.policies[0].required_repo_labels[1].one_of == ["gold", "silver"]


def test_empty_yaml_document_has_no_policies(tmp_path: Path) -> None:
    """An empty file yields an empty catalog."""
    catalog = load_policy_catalog(_write(tmp_path, "p.yaml", ""))
    assert len(catalog) == 0


def test_unknown_label_field_is_rejected(tmp_path: Path) -> None:
    """A misspelt key fails instead of silently disabling a rule."""
    content = """
policy:
  - name: typo
    repository_pattern: ".*"
    required_repo_labels:
      - name: owner
        default: nobody
"""
    with pytest.raises(PolicyDocumentError, match="schema validation failed"):
        load_policy_document(_write(tmp_path, "p.yaml", content))


def test_duplicate_yaml_keys_are_rejected(tmp_path: Path) -> None:
    """Duplicate mapping keys are a parse error under YAML 1.2."""
    content = """
policy:
  - name: one
    name: two
    repository_pattern: ".*"
"""
    with pytest.raises(PolicyDocumentError, match="failed to parse YAML"):
        load_policy_document(_write(tmp_path, "p.yaml", content))


def test_malformed_toml_is_rejected(tmp_path: Path) -> None:
    """TOML syntax errors surface as document errors."""
    with pytest.raises(PolicyDocumentError, match="failed to parse TOML"):
        load_policy_document(_write(tmp_path, "p.toml", "[[policy]\nname ="))


def test_missing_file_is_rejected(tmp_path: Path) -> None:
    """A missing document is reported with its path."""
    with pytest.raises(PolicyDocumentError) as excinfo:
        load_policy_document(tmp_path / "absent.yaml")
    assert excinfo.value.source == str(tmp_path / "absent.yaml")


def test_catalog_load_surfaces_definition_errors(tmp_path: Path) -> None:
    """Duplicate labels found while compiling stop the load."""
    content = """
policy:
  - name: dupes
    repository_pattern: ".*"
    required_repo_labels:
      - name: owner
      - name: owner
"""
    with pytest.raises(DuplicateLabelError):
        load_policy_catalog(_write(tmp_path, "p.yaml", content))


def test_schema_describes_policy_key(tmp_path: Path) -> None:
    """The generated schema carries its id and is written to disk."""
    schema = build_policy_schema()
    assert schema["$id"] == SCHEMA_ID

    out = write_policy_schema(tmp_path / "nested" / "policy.json")
    written = json.loads(out.read_text(encoding="utf-8"))
    assert "policy" in json.dumps(written)
