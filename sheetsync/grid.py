"""Sheet grids and header-label resolution.

A worksheet is read as a rectangular block of strings: the first row holds the
column labels and the remaining rows hold the translations.  Column meaning is
never inferred from position.  The header is scanned once per read and turned
into a :class:`ColumnLayout` in which every configured language either has an
offset or the ``None`` sentinel, so a missing language column simply reads as
blank cells.

Deployments disagree on the labels of the identity columns (``分類``/``Key``,
``ResourceType``/``ResourceKey``, ``cate``/``key``), so the accepted labels are
carried by :class:`HeaderLabels` rather than hard-coded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from sheetsync.errors import MissingKeyColumns
from sheetsync.records import RowKey, TranslationRecord

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_LABELS: Tuple[str, ...] = ("cate", "分類", "ResourceType")
DEFAULT_KEY_LABELS: Tuple[str, ...] = ("key", "Key", "ResourceKey")


@dataclass(frozen=True)
class HeaderLabels:
    """Accepted header labels for the category and key columns.

    The first entry of each tuple is used when a fresh header row has to be
    written to an empty worksheet.
    """

    category: Tuple[str, ...] = DEFAULT_CATEGORY_LABELS
    key: Tuple[str, ...] = DEFAULT_KEY_LABELS

    def header_row(self, langs: Sequence[str]) -> List[str]:
        return [self.category[0], self.key[0], *langs]


@dataclass(slots=True)
class SheetGrid:
    """Raw worksheet values split into the header and the data rows."""

    header: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)

    @classmethod
    def from_values(cls, values: Sequence[Sequence[object]]) -> "SheetGrid":
        matrix = [["" if cell is None else str(cell) for cell in row] for row in values]
        if not matrix:
            return cls()
        return cls(header=matrix[0], rows=matrix[1:])

    @property
    def is_empty(self) -> bool:
        return not self.header and not self.rows


def _find_label(header: Sequence[str], labels: Sequence[str]) -> Optional[int]:
    for label in labels:
        try:
            return list(header).index(label)
        except ValueError:
            continue
    return None


def cell(row: Sequence[str], index: Optional[int]) -> str:
    """Return the cell at ``index`` or ``""`` when the column is absent or short."""

    if index is None or index >= len(row):
        return ""
    return row[index] or ""


@dataclass(frozen=True)
class ColumnLayout:
    category: int
    key: int
    langs: Tuple[Tuple[str, Optional[int]], ...]

    @classmethod
    def canonical(cls, langs: Sequence[str]) -> "ColumnLayout":
        """Layout of a header written by :meth:`HeaderLabels.header_row`."""

        return cls(
            category=0,
            key=1,
            langs=tuple((lang, offset) for offset, lang in enumerate(langs, start=2)),
        )

    def lang_offsets(self) -> Dict[str, Optional[int]]:
        return dict(self.langs)

    def missing_langs(self) -> List[str]:
        return [lang for lang, offset in self.langs if offset is None]

    def extended(self, start: int) -> "ColumnLayout":
        """Return a copy placing languages without a column at ``start``, ``start + 1`` and so on."""

        langs: List[Tuple[str, Optional[int]]] = []
        next_offset = start
        for lang, offset in self.langs:
            if offset is None:
                offset = next_offset
                next_offset += 1
            langs.append((lang, offset))
        return replace(self, langs=tuple(langs))

    @property
    def width(self) -> int:
        offsets = [self.category, self.key]
        offsets.extend(offset for _, offset in self.langs if offset is not None)
        return max(offsets) + 1

    def identity(self, row: Sequence[str]) -> RowKey:
        return RowKey(cell(row, self.category), cell(row, self.key))

    def record(self, row: Sequence[str]) -> TranslationRecord:
        values = {lang: cell(row, offset) for lang, offset in self.langs}
        return TranslationRecord(
            category=cell(row, self.category),
            key=cell(row, self.key),
            values=values,
        )

    def render(
        self,
        category: str,
        key: str,
        values: Sequence[str],
        base: Sequence[str] = (),
    ) -> List[str]:
        """Lay out a record as a full sheet row.

        ``values`` follow the configured language order.  Cells of ``base``
        that belong to none of the resolved columns are kept as they are.
        """

        width = max(self.width, len(base))
        row = [str(value) for value in base] + [""] * (width - len(base))
        row[self.category] = category
        row[self.key] = key
        for (lang, offset), value in zip(self.langs, values):
            if offset is not None:
                row[offset] = value
        return row


def resolve_layout(
    header: Sequence[str],
    langs: Sequence[str],
    labels: HeaderLabels = HeaderLabels(),
) -> ColumnLayout:
    """Resolve column offsets for ``header``.

    An empty header resolves to the canonical layout.  A non-empty header
    without a category or key column raises :class:`MissingKeyColumns`.
    """

    if not header:
        return ColumnLayout.canonical(langs)

    category = _find_label(header, labels.category)
    key = _find_label(header, labels.key)
    if category is None or key is None:
        raise MissingKeyColumns(header, labels.category, labels.key)

    lang_offsets: List[Tuple[str, Optional[int]]] = []
    for lang in langs:
        offset = _find_label(header, (lang,))
        if offset is None:
            logger.warning("Language column %r not found in sheet header; treating it as blank", lang)
        lang_offsets.append((lang, offset))
    return ColumnLayout(category=category, key=key, langs=tuple(lang_offsets))


def grid_layout(grid: SheetGrid, langs: Sequence[str], labels: HeaderLabels = HeaderLabels()) -> ColumnLayout:
    """Resolve the layout of a fetched grid.

    Only a worksheet without any values gets the canonical layout; a blank
    first row above data rows raises :class:`MissingKeyColumns`.
    """

    if not grid.header and grid.rows:
        raise MissingKeyColumns(grid.header, labels.category, labels.key)
    return resolve_layout(grid.header, langs, labels)


def iter_keyed_rows(grid: SheetGrid, layout: ColumnLayout) -> Iterator[Tuple[int, RowKey]]:
    """Yield ``(row_offset, identity)`` for every data row with a non-empty key."""

    for offset, row in enumerate(grid.rows):
        identity = layout.identity(row)
        if not identity.key:
            continue
        yield offset, identity


def grid_records(grid: SheetGrid, layout: ColumnLayout) -> List[TranslationRecord]:
    """Return the catalog held by ``grid``; rows with an empty key are dropped."""

    return [layout.record(grid.rows[offset]) for offset, _ in iter_keyed_rows(grid, layout)]


__all__ = [
    "DEFAULT_CATEGORY_LABELS",
    "DEFAULT_KEY_LABELS",
    "ColumnLayout",
    "HeaderLabels",
    "SheetGrid",
    "cell",
    "grid_layout",
    "grid_records",
    "iter_keyed_rows",
    "resolve_layout",
]
