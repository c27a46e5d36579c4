"""Unit tests for atomic full-set label replacement."""

from __future__ import annotations

import asyncio
import typing as typ
from unittest import mock

import pytest
from sqlalchemy import Insert, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dumont.errors import BackendError
from dumont.storage import LabelOwner, LabelStore
from dumont.storage.models import RepositoryLabelRow

if typ.TYPE_CHECKING:
    from dumont.storage import SessionFactory, SqlMetadataStore


@pytest.fixture
def label_store(session_factory: SessionFactory) -> LabelStore:
    """Return a label store over the temporary database."""
    return LabelStore(session_factory)


async def _repository_owner(sql_store: SqlMetadataStore) -> LabelOwner:
    await sql_store.create_organization("example")
    record = await sql_store.create_repository("example", "repo-1")
    return record.owner


@pytest.mark.asyncio
async def test_replace_swaps_the_whole_set(
    sql_store: SqlMetadataStore, label_store: LabelStore
) -> None:
    """Keys absent from the new mapping are removed."""
    owner = await _repository_owner(sql_store)

    await label_store.replace_labels(owner, {"a": "1", "b": "2"})
    await label_store.replace_labels(owner, {"b": "3", "c": "4"})

    assert await label_store.get_labels(owner) == {"b": "3", "c": "4"}


@pytest.mark.asyncio
async def test_empty_mapping_clears_labels(
    sql_store: SqlMetadataStore, label_store: LabelStore
) -> None:
    """Replacing with an empty mapping leaves no rows behind."""
    owner = await _repository_owner(sql_store)
    await label_store.replace_labels(owner, {"a": "1"})

    await label_store.replace_labels(owner, {})

    assert await label_store.get_labels(owner) == {}


@pytest.mark.asyncio
async def test_repository_and_revision_labels_are_separate(
    sql_store: SqlMetadataStore, label_store: LabelStore
) -> None:
    """Owners of different kinds never see each other's labels."""
    repo_owner = await _repository_owner(sql_store)
    revision = await sql_store.create_revision("example", "repo-1", "1.0")

    await label_store.replace_labels(repo_owner, {"scope": "repo"})
    await label_store.replace_labels(revision.owner, {"scope": "revision"})

    assert await label_store.get_labels(repo_owner) == {"scope": "repo"}
    assert await label_store.get_labels(revision.owner) == {"scope": "revision"}


@pytest.mark.asyncio
async def test_replace_logs_row_counts(
    sql_store: SqlMetadataStore, label_store: LabelStore
) -> None:
    """Each replacement logs how many rows were deleted and inserted."""
    owner = await _repository_owner(sql_store)
    await label_store.replace_labels(owner, {"a": "1", "b": "2"})

    with mock.patch("dumont.storage.labels.log_debug") as log_debug:
        await label_store.replace_labels(owner, {"c": "3"})

    log_debug.assert_called_once()
    template, deleted, inserted = log_debug.call_args.args[1:4]
    assert template.startswith("Deleted %d rows, Inserted %d rows")
    assert (deleted, inserted) == (2, 1)


@pytest.mark.asyncio
async def test_concurrent_replacements_never_mix_sets(
    sql_store: SqlMetadataStore,
    label_store: LabelStore,
    session_factory: SessionFactory,
) -> None:
    """After racing writers finish, exactly one complete set remains."""
    owner = await _repository_owner(sql_store)
    first = {"k1": "a", "k2": "a", "k3": "a"}
    second = {"k1": "b", "k4": "b"}

    await asyncio.gather(
        label_store.replace_labels(owner, first),
        label_store.replace_labels(owner, second),
    )

    assert await label_store.get_labels(owner) in (first, second)
    async with session_factory() as session:
        count = await session.scalar(
            select(func.count()).select_from(RepositoryLabelRow)
        )
    assert count in (len(first), len(second))


@pytest.mark.asyncio
async def test_readers_see_only_complete_sets_during_replacement(
    sql_store: SqlMetadataStore, label_store: LabelStore
) -> None:
    """Reads overlapping a run of replacements return the old or new set."""
    owner = await _repository_owner(sql_store)
    old = {"k1": "a", "k2": "a", "k3": "a"}
    new = {"k1": "b", "k4": "b"}
    await label_store.replace_labels(owner, old)
    writes_done = asyncio.Event()
    observed: list[dict[str, str]] = []

    async def writer() -> None:
        try:
            for index in range(20):
                await label_store.replace_labels(owner, new if index % 2 else old)
        finally:
            writes_done.set()

    async def reader() -> None:
        while not writes_done.is_set():
            observed.append(await label_store.get_labels(owner))

    await asyncio.gather(writer(), reader(), reader())

    assert observed, "readers should have overlapped the writer"
    torn = [labels for labels in observed if labels not in (old, new)]
    assert torn == [], f"readers saw partial label sets: {torn}"


@pytest.mark.asyncio
async def test_failed_insert_keeps_previous_set(
    sql_store: SqlMetadataStore, label_store: LabelStore
) -> None:
    """A failing insert rolls back the delete that preceded it."""
    owner = await _repository_owner(sql_store)
    await label_store.replace_labels(owner, {"a": "1", "b": "2"})
    execute = AsyncSession.execute

    async def failing_insert(
        self: AsyncSession, statement: typ.Any, *args: typ.Any, **kwargs: typ.Any
    ) -> typ.Any:
        if isinstance(statement, Insert):
            msg = "insert failed"
            raise SQLAlchemyError(msg)
        return await execute(self, statement, *args, **kwargs)

    with (
        mock.patch.object(AsyncSession, "execute", failing_insert),
        mock.patch("dumont.storage.errors.log_exception"),
        pytest.raises(BackendError),
    ):
        await label_store.replace_labels(owner, {"c": "3"})

    assert await label_store.get_labels(owner) == {"a": "1", "b": "2"}
