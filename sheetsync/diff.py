"""Diff between the local catalog and the remote worksheet.

``diff_catalog`` is a pure function of the local records, the remote grid and
the resolved column layout.  It returns the mutation operations needed to make
the worksheet match the catalog:

* ``AppendOp`` for identities only present locally,
* ``UpdateOp`` for identities present on both sides whose values differ in at
  least one configured language (the whole row is rewritten),
* ``DeleteOp`` for worksheet rows whose identity no longer exists locally.

Appends and updates follow the local catalog order.  Deletes come last, sorted
by descending row offset: removing a row shifts every row below it up by one,
so deleting bottom-up keeps the offsets of the remaining targets valid.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple, Union

from sheetsync.grid import ColumnLayout, SheetGrid, cell, iter_keyed_rows
from sheetsync.records import RowKey, TranslationRecord, index_records

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppendOp:
    category: str
    key: str
    values: Tuple[str, ...]


@dataclass(frozen=True)
class UpdateOp:
    row_offset: int
    category: str
    key: str
    values: Tuple[str, ...]


@dataclass(frozen=True)
class DeleteOp:
    row_offset: int
    category: str = ""
    key: str = ""


MutationOp = Union[AppendOp, UpdateOp, DeleteOp]


def _remote_values(row: Sequence[str], layout: ColumnLayout) -> Tuple[str, ...]:
    return tuple(cell(row, offset) for _, offset in layout.langs)


def diff_catalog(
    local: Sequence[TranslationRecord],
    remote: SheetGrid,
    layout: ColumnLayout,
) -> List[MutationOp]:
    """Return the ordered operations that bring ``remote`` in line with ``local``."""

    langs = [lang for lang, _ in layout.langs]
    local_by_key = index_records(local)

    remote_by_key: Dict[RowKey, int] = {}
    for offset, identity in iter_keyed_rows(remote, layout):
        remote_by_key[identity] = offset

    ops: List[MutationOp] = []
    for identity, record in local_by_key.items():
        values = record.ordered_values(langs)
        offset = remote_by_key.get(identity)
        if offset is None:
            ops.append(AppendOp(category=record.category, key=record.key, values=values))
            logger.info("append %s", identity)
            continue
        if values != _remote_values(remote.rows[offset], layout):
            ops.append(UpdateOp(row_offset=offset, category=record.category, key=record.key, values=values))
            logger.info("update %s (row %d)", identity, offset)

    deletes = [
        DeleteOp(row_offset=offset, category=identity.category, key=identity.key)
        for offset, identity in iter_keyed_rows(remote, layout)
        if identity not in local_by_key
    ]
    deletes.sort(key=lambda op: op.row_offset, reverse=True)
    for op in deletes:
        logger.info("delete row %d (%s|%s)", op.row_offset, op.category, op.key)
    ops.extend(deletes)
    return ops


def summarise(ops: Sequence[MutationOp]) -> Dict[str, int]:
    """Count operations per kind."""

    counts = {"appended": 0, "updated": 0, "deleted": 0}
    for op in ops:
        if isinstance(op, AppendOp):
            counts["appended"] += 1
        elif isinstance(op, UpdateOp):
            counts["updated"] += 1
        else:
            counts["deleted"] += 1
    return counts


def describe(op: MutationOp) -> str:
    if isinstance(op, AppendOp):
        return f"+ {op.category}|{op.key}"
    if isinstance(op, UpdateOp):
        return f"~ {op.category}|{op.key} (row {op.row_offset})"
    return f"- {op.category}|{op.key} (row {op.row_offset})"


__all__ = [
    "AppendOp",
    "DeleteOp",
    "MutationOp",
    "UpdateOp",
    "describe",
    "diff_catalog",
    "summarise",
]
