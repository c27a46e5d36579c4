"""Policy lint CLI behaviour tests."""
# ruff: noqa: D103

from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest

from dumont.policy.cli import main

POLICY = """
policy:
  - name: services
    repository_pattern: "example/.*-service"
    required_repo_labels:
      - name: owner
  - name: defaults
    repository_pattern: "example/.*"
    required_repo_labels:
      - name: tier
        default_value: silver
"""


def _policy_file(tmp_path: Path, content: str = POLICY) -> Path:
    path = tmp_path / "policy.yaml"
    path.write_text(content, encoding="utf-8")
    return path


def test_lint_valid_document(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = main(["lint", str(_policy_file(tmp_path))])

    assert code == 0
    assert "is valid (2 policies)" in capsys.readouterr().out


def test_lint_reports_matching_policy(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = main(
        [
            "lint",
            str(_policy_file(tmp_path)),
            "--check",
            "example/billing-service",
            "--check",
            "example/docs",
            "--check",
            "other/docs",
        ]
    )

    out = capsys.readouterr().out
    assert code == 0
    assert "example/billing-service: governed by services" in out
    assert "label `owner` be set" in out
    assert "example/docs: governed by defaults" in out
    assert "other/docs: unconstrained" in out


def test_lint_writes_schema(tmp_path: Path) -> None:
    schema_out = tmp_path / "schema.json"
    code = main(["lint", str(_policy_file(tmp_path)), "--schema-out", str(schema_out)])

    assert code == 0
    assert schema_out.exists()


def test_lint_invalid_document_fails(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    content = """
policy:
  - name: broken
    repository_pattern: "example/("
"""
    code = main(["lint", str(_policy_file(tmp_path, content))])

    assert code == 1
    out = capsys.readouterr().out
    assert "Policy validation failed" in out
    assert "`broken`" in out


def test_check_requires_org_and_repo(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        main(["lint", str(_policy_file(tmp_path)), "--check", "no-slash"])
