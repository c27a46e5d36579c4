"""Command-line helpers for policy document linting and schema export."""

from __future__ import annotations

import argparse
from pathlib import Path

from .errors import PolicyDefinitionError, PolicyViolationError
from .loader import load_policy_catalog
from .schema import write_policy_schema


def _parse_repository_path(value: str) -> tuple[str, str]:
    org, sep, repo = value.partition("/")
    if not sep or not org or not repo:
        msg = f"expected ORG/REPO, got {value!r}"
        raise argparse.ArgumentTypeError(msg)
    return (org, repo)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dumont-policy", description="Policy document tooling."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    lint = subparsers.add_parser("lint", help="Validate a policy document")
    lint.add_argument("policy", type=Path, help="YAML or TOML policy document")
    lint.add_argument(
        "--check",
        type=_parse_repository_path,
        action="append",
        default=[],
        metavar="ORG/REPO",
        help="Report which policy governs ORG/REPO (repeatable)",
    )
    lint.add_argument(
        "--schema-out",
        type=Path,
        default=None,
        help="Optional path to write the generated JSON Schema",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Lint a policy document and optionally report matches or export a schema.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when the document is invalid.

    """
    args = _build_parser().parse_args(argv)

    policy_path: Path = args.policy
    try:
        catalog = load_policy_catalog(policy_path)
    except PolicyDefinitionError as exc:
        print(f"Policy validation failed for {policy_path}:")
        print(f"  - {exc}")
        return 1

    if args.schema_out:
        write_policy_schema(args.schema_out)

    print(f"policy document {policy_path} is valid ({len(catalog)} policies)")

    for org, repo in args.check:
        policy = catalog.find_matching_policy(org, repo)
        if policy is None:
            print(f"{org}/{repo}: unconstrained")
            continue
        print(f"{org}/{repo}: governed by {policy.name}")
        # Report which repository labels a bare create would be missing.
        try:
            policy.apply_repository_labels({})
        except PolicyViolationError as exc:
            print(f"  {exc}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
