"""Atomic full-set label replacement.

A label set is always written whole: every existing row for the owner is
deleted and the new rows inserted inside one transaction, so concurrent
readers observe either the complete old set or the complete new set.
"""

from __future__ import annotations

import dataclasses
import typing as typ

from sqlalchemy import delete, insert, select

from dumont.logging import get_logger, log_debug

from .errors import backend_errors
from .models import RepositoryLabelRow, RevisionLabelRow
from .protocol import LabelOwner, OwnerKind

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from sqlalchemy.ext.asyncio import AsyncSession

    from .engine import SessionFactory

logger = get_logger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class _LabelTable:
    model: type[RepositoryLabelRow] | type[RevisionLabelRow]
    owner_field: str

    @property
    def owner_column(self) -> typ.Any:  # noqa: ANN401
        return getattr(self.model, self.owner_field)


_LABEL_TABLES = {
    OwnerKind.REPOSITORY: _LabelTable(RepositoryLabelRow, "repository_id"),
    OwnerKind.REVISION: _LabelTable(RevisionLabelRow, "revision_id"),
}


async def load_labels(session: AsyncSession, owner: LabelOwner) -> dict[str, str]:
    """Read the label set of ``owner`` using an open session."""
    table = _LABEL_TABLES[owner.kind]
    result = await session.execute(
        select(table.model.label_name, table.model.label_value)
        .where(table.owner_column == owner.id)
        .order_by(table.model.label_name)
    )
    return {name: value for name, value in result.all()}


async def load_labels_for_owners(
    session: AsyncSession, kind: OwnerKind, owner_ids: cabc.Collection[int]
) -> dict[int, dict[str, str]]:
    """Read the label sets of several owners of one kind in a single query.

    Owners without labels map to an empty dict.
    """
    labels: dict[int, dict[str, str]] = {owner_id: {} for owner_id in owner_ids}
    if not owner_ids:
        return labels

    table = _LABEL_TABLES[kind]
    result = await session.execute(
        select(table.owner_column, table.model.label_name, table.model.label_value)
        .where(table.owner_column.in_(owner_ids))
        .order_by(table.owner_column, table.model.label_name)
    )
    for owner_id, name, value in result.all():
        labels[owner_id][name] = value
    return labels


class LabelStore:
    """Reads and atomically replaces label sets.

    Parameters
    ----------
    session_factory:
        Async session factory bound to the registry database.

    """

    def __init__(self, session_factory: SessionFactory) -> None:
        """Store the session factory used for every operation."""
        self._session_factory = session_factory

    async def get_labels(self, owner: LabelOwner) -> dict[str, str]:
        """Return the current label set of ``owner``."""
        with backend_errors("get_labels"):
            async with self._session_factory() as session:
                return await load_labels(session, owner)

    async def replace_labels(
        self, owner: LabelOwner, labels: cabc.Mapping[str, str]
    ) -> None:
        """Replace the whole label set of ``owner`` in one transaction.

        Keys absent from ``labels`` are removed. An empty mapping clears the
        set. The owner itself is not checked; callers resolve it first.
        """
        table = _LABEL_TABLES[owner.kind]
        rows = [
            {table.owner_field: owner.id, "label_name": name, "label_value": value}
            for name, value in labels.items()
        ]

        with backend_errors("replace_labels"):
            async with self._session_factory() as session, session.begin():
                result = await session.execute(
                    delete(table.model).where(table.owner_column == owner.id)
                )
                if rows:
                    await session.execute(insert(table.model), rows)

        log_debug(
            logger,
            "Deleted %d rows, Inserted %d rows for %s %d",
            result.rowcount,
            len(rows),
            owner.kind,
            owner.id,
        )


__all__ = ["LabelStore", "load_labels", "load_labels_for_owners"]
