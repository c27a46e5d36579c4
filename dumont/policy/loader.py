"""Policy document loaders for YAML and TOML files."""

from __future__ import annotations

from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .catalog import PolicyCatalog
from .errors import PolicyDocumentError
from .models import PolicyDocument

YAML_VERSION = (1, 2)
TOML_SUFFIXES = frozenset({".toml"})


def load_policy_document(path: Path | str) -> PolicyDocument:
    """Parse a policy document, choosing the format from the file suffix.

    Files ending in ``.toml`` are decoded as TOML; anything else is read as
    YAML 1.2 with duplicate keys rejected. An empty YAML document yields an
    empty policy list.

    Raises
    ------
    PolicyDocumentError
        If the file cannot be read, does not parse, or contains fields the
        policy schema does not define.

    """
    path_obj = Path(path)
    if path_obj.suffix.lower() in TOML_SUFFIXES:
        return _load_toml(path_obj)
    return _load_yaml(path_obj)


def load_policy_catalog(path: Path | str) -> PolicyCatalog:
    """Load a policy document and compile it into a catalog in one step."""
    return PolicyCatalog.compile(load_policy_document(path).policies)


def _load_toml(path: Path) -> PolicyDocument:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise PolicyDocumentError(str(path), f"failed to read file: {exc}") from exc

    try:
        return msgspec.toml.decode(raw, type=PolicyDocument)
    except msgspec.ValidationError as exc:
        raise PolicyDocumentError(
            str(path), f"schema validation failed: {exc}"
        ) from exc
    except msgspec.DecodeError as exc:
        raise PolicyDocumentError(str(path), f"failed to parse TOML: {exc}") from exc


def _load_yaml(path: Path) -> PolicyDocument:
    try:
        loaded = _yaml().load(path.read_text(encoding="utf-8"))
    except (OSError, YAMLError) as exc:
        raise PolicyDocumentError(str(path), f"failed to parse YAML: {exc}") from exc

    if loaded is None:
        return PolicyDocument()

    try:
        return msgspec.convert(loaded, type=PolicyDocument)
    except msgspec.ValidationError as exc:
        raise PolicyDocumentError(
            str(path), f"schema validation failed: {exc}"
        ) from exc


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml


__all__ = ["load_policy_catalog", "load_policy_document"]
