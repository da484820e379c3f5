"""Translate diff operations into a Sheets ``batchUpdate`` request body.

Operations produced by :mod:`sheetsync.diff` address data rows by 0-based
offset below the header.  The Sheets API addresses grid rows by 0-based index
*including* the header, so data row ``n`` lives at grid index ``n + 1``
(spreadsheet row ``n + 2`` in the 1-based A1 notation users see).  Appends need
no index at all: ``appendCells`` writes after the last row holding data.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sheetsync.diff import AppendOp, DeleteOp, MutationOp, UpdateOp
from sheetsync.errors import SheetNotFound
from sheetsync.grid import ColumnLayout, HeaderLabels, SheetGrid

logger = logging.getLogger(__name__)


def sheet_titles(metadata: Mapping[str, Any]) -> List[str]:
    titles: List[str] = []
    for sheet in metadata.get("sheets", []) or []:
        properties = sheet.get("properties", {}) if isinstance(sheet, Mapping) else {}
        title = properties.get("title")
        if isinstance(title, str):
            titles.append(title)
    return titles


def resolve_sheet_id(metadata: Mapping[str, Any], sheet_name: str) -> int:
    """Return the numeric ``sheetId`` of the worksheet titled ``sheet_name``.

    Titles are compared exactly.  ``0`` is a valid id (the first worksheet).
    """

    for sheet in metadata.get("sheets", []) or []:
        if not isinstance(sheet, Mapping):
            continue
        properties = sheet.get("properties", {})
        if properties.get("title") == sheet_name and isinstance(properties.get("sheetId"), int):
            return properties["sheetId"]
    raise SheetNotFound(sheet_name, sheet_titles(metadata))


def _row_data(cells: Sequence[str]) -> Dict[str, Any]:
    return {"values": [{"userEnteredValue": {"stringValue": str(value)}} for value in cells]}


def _append_request(sheet_id: int, cells: Sequence[str]) -> Dict[str, Any]:
    return {
        "appendCells": {
            "sheetId": sheet_id,
            "rows": [_row_data(cells)],
            "fields": "userEnteredValue",
        }
    }


def _cells_request(sheet_id: int, grid_row: int, start_column: int, cells: Sequence[str]) -> Dict[str, Any]:
    return {
        "updateCells": {
            "range": {
                "sheetId": sheet_id,
                "startRowIndex": grid_row,
                "endRowIndex": grid_row + 1,
                "startColumnIndex": start_column,
                "endColumnIndex": start_column + len(cells),
            },
            "rows": [_row_data(cells)],
            "fields": "userEnteredValue",
        }
    }


def _update_request(sheet_id: int, row_offset: int, cells: Sequence[str]) -> Dict[str, Any]:
    return _cells_request(sheet_id, row_offset + 1, 0, cells)


def _delete_request(sheet_id: int, row_offset: int) -> Dict[str, Any]:
    grid_row = row_offset + 1
    return {
        "deleteDimension": {
            "range": {
                "sheetId": sheet_id,
                "dimension": "ROWS",
                "startIndex": grid_row,
                "endIndex": grid_row + 1,
            }
        }
    }


def _carries_missing_values(ops: Sequence[MutationOp], layout: ColumnLayout) -> bool:
    positions = [index for index, (_, offset) in enumerate(layout.langs) if offset is None]
    for op in ops:
        if isinstance(op, (AppendOp, UpdateOp)) and any(op.values[index] for index in positions):
            return True
    return False


def build_requests(
    ops: Sequence[MutationOp],
    *,
    sheet_id: int,
    grid: SheetGrid,
    layout: ColumnLayout,
    labels: HeaderLabels = HeaderLabels(),
    max_columns: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Render ``ops`` as ``batchUpdate`` requests in application order.

    When the worksheet has no header yet a header row is appended first.  When
    an op carries a value for a language without a column, the missing labels
    are written after the last header cell and the values land there.  Columns
    beyond ``max_columns`` would not be read back, so they are not added.
    """

    requests: List[Dict[str, Any]] = []
    if not ops:
        return requests

    missing = layout.missing_langs()
    if missing and grid.header and _carries_missing_values(ops, layout):
        start = len(grid.header)
        if max_columns is not None and start + len(missing) > max_columns:
            logger.warning(
                "Sheet has no column for %s and no room within %d columns; those values are not written",
                ", ".join(missing),
                max_columns,
            )
        else:
            logger.info("Adding header columns for %s", ", ".join(missing))
            requests.append(_cells_request(sheet_id, 0, start, missing))
            layout = layout.extended(start)

    if not grid.header:
        langs = [lang for lang, _ in layout.langs]
        requests.append(_append_request(sheet_id, labels.header_row(langs)))

    for op in ops:
        if isinstance(op, AppendOp):
            requests.append(_append_request(sheet_id, layout.render(op.category, op.key, op.values)))
        elif isinstance(op, UpdateOp):
            base = grid.rows[op.row_offset] if op.row_offset < len(grid.rows) else ()
            cells = layout.render(op.category, op.key, op.values, base=base)
            requests.append(_update_request(sheet_id, op.row_offset, cells))
        elif isinstance(op, DeleteOp):
            requests.append(_delete_request(sheet_id, op.row_offset))
        else:  # pragma: no cover - exhaustive over MutationOp
            raise TypeError(f"Unsupported mutation: {op!r}")
    return requests


__all__ = ["build_requests", "resolve_sheet_id", "sheet_titles"]
