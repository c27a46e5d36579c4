"""JSON Schema generation for policy documents."""

from __future__ import annotations

import json
import typing as typ
from pathlib import Path  # noqa: TC003

import msgspec

from .models import PolicyDocument

SCHEMA_ID = "https://dumont.example/schemas/policy.json"


def build_policy_schema() -> dict[str, typ.Any]:
    """Build the JSON Schema describing policy documents.

    Editors can point at this schema to get completion and early warnings
    for misspelt keys in YAML policy files.
    """
    schema = msgspec.json.schema(PolicyDocument)
    schema["$id"] = SCHEMA_ID
    return schema


def write_policy_schema(path: Path) -> Path:
    """Write the generated schema to ``path``, creating parent directories."""
    schema = build_policy_schema()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(schema, indent=2), encoding="utf-8")
    return path


__all__ = ["SCHEMA_ID", "build_policy_schema", "write_policy_schema"]
