"""Shared test utilities."""

from __future__ import annotations

import asyncio
import typing as typ

from dumont.policy import PolicyDefinition, RequiredLabel


def run_async[T](coro_func: typ.Callable[[], typ.Coroutine[typ.Any, typ.Any, T]]) -> T:
    """Execute an async callable within the test context."""
    return asyncio.run(coro_func())


def example_policies() -> list[PolicyDefinition]:
    """Return two overlapping policies; the narrower one is declared first."""
    return [
        PolicyDefinition(
            name="repo-1-policy",
            repository_pattern="example/repo-1",
            required_repo_labels=[
                RequiredLabel(name="owner", default_value="platform"),
            ],
            required_version_labels=[
                RequiredLabel(name="release", one_of=["alpha", "beta", "ga"]),
            ],
        ),
        PolicyDefinition(
            name="example-policy",
            repository_pattern="example/.*",
            required_repo_labels=[
                RequiredLabel(name="team"),
                RequiredLabel(
                    name="tier", one_of=["gold", "silver"], default_value="silver"
                ),
            ],
        ),
    ]
