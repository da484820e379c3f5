from __future__ import annotations

from typing import List

from sheetsync.diff import AppendOp, DeleteOp, UpdateOp, describe, diff_catalog, summarise
from sheetsync.grid import SheetGrid, resolve_layout
from sheetsync.records import TranslationRecord


def _record(category: str, key: str, **values: str) -> TranslationRecord:
    return TranslationRecord(category=category, key=key, values=dict(values))


def _diff(local, header, rows, langs):
    grid = SheetGrid(header=list(header), rows=[list(row) for row in rows])
    return diff_catalog(local, grid, resolve_layout(grid.header, langs))


def test_new_key_produces_single_append_in_language_order() -> None:
    local = [_record("ui", "ok", en="OK", fr="OK")]

    ops = _diff(local, ["cate", "key", "en", "fr"], [], ["en", "fr"])

    assert ops == [AppendOp(category="ui", key="ok", values=("OK", "OK"))]


def test_changed_value_produces_full_row_update() -> None:
    local = [_record("ui", "ok", en="OK")]

    ops = _diff(local, ["cate", "key", "en"], [["ui", "ok", "Yes"]], ["en"])

    assert len(ops) == 1
    op = ops[0]
    assert isinstance(op, UpdateOp)
    assert op.row_offset == 0
    assert op.values == ("OK",)


def test_single_language_change_rewrites_whole_row() -> None:
    header = ["cate", "key", "en", "fr", "de"]
    rows = [
        ["ui", "ok", "OK", "D'accord", "Okay"],
        ["ui", "cancel", "Cancel", "Annuler", "Abbrechen"],
    ]
    local = [
        _record("ui", "ok", en="OK", fr="Oui", de="Okay"),
        _record("ui", "cancel", en="Cancel", fr="Annuler", de="Abbrechen"),
    ]

    ops = _diff(local, header, rows, ["en", "fr", "de"])

    assert ops == [UpdateOp(row_offset=0, category="ui", key="ok", values=("OK", "Oui", "Okay"))]


def test_identical_catalogs_produce_no_ops() -> None:
    header = ["cate", "key", "en"]
    rows = [["ui", "ok", "OK"], ["menu", "file", "File"]]
    local = [_record("menu", "file", en="File"), _record("ui", "ok", en="OK")]

    assert _diff(local, header, rows, ["en"]) == []


def test_removed_keys_are_deleted_bottom_up() -> None:
    header = ["cate", "key", "en"]
    rows = [["c", f"k{index}", "v"] for index in range(9)]
    keep = {0, 1, 3, 4, 6, 8}
    local = [_record("c", f"k{index}", en="v") for index in sorted(keep)]

    ops = _diff(local, header, rows, ["en"])

    assert [op.row_offset for op in ops] == [7, 5, 2]
    assert all(isinstance(op, DeleteOp) for op in ops)

    remaining: List[List[str]] = [list(row) for row in rows]
    for op in ops:
        del remaining[op.row_offset]
    assert [row[1] for row in remaining] == [f"k{index}" for index in sorted(keep)]


def test_ascending_deletion_would_remove_wrong_rows() -> None:
    rows = [f"k{index}" for index in range(9)]
    for offset in (2, 5, 7):
        del rows[offset]
    assert rows != ["k0", "k1", "k3", "k4", "k6", "k8"]


def test_deletes_follow_appends_and_updates() -> None:
    header = ["cate", "key", "en"]
    rows = [["a", "gone", "x"], ["a", "kept", "old"]]
    local = [_record("a", "new", en="n"), _record("a", "kept", en="new")]

    ops = _diff(local, header, rows, ["en"])

    assert [type(op) for op in ops] == [AppendOp, UpdateOp, DeleteOp]
    assert summarise(ops) == {"appended": 1, "updated": 1, "deleted": 1}
    assert describe(ops[2]) == "- a|gone (row 0)"


def test_missing_language_column_compares_as_blank() -> None:
    header = ["cate", "key", "en"]
    rows = [["ui", "ok", "OK"]]

    assert _diff([_record("ui", "ok", en="OK", fr="")], header, rows, ["en", "fr"]) == []

    ops = _diff([_record("ui", "ok", en="OK", fr="Oui")], header, rows, ["en", "fr"])
    assert ops == [UpdateOp(row_offset=0, category="ui", key="ok", values=("OK", "Oui"))]


def test_missing_local_value_compares_as_blank() -> None:
    header = ["cate", "key", "en", "fr"]
    rows = [["ui", "ok", "OK"]]

    assert _diff([_record("ui", "ok", en="OK")], header, rows, ["en", "fr"]) == []


def test_header_label_variants_resolve_identity_columns() -> None:
    local = [_record("ui", "ok", en="OK")]

    for header in (["分類", "Key", "en"], ["ResourceType", "ResourceKey", "en"]):
        assert _diff(local, header, [["ui", "ok", "OK"]], ["en"]) == []


def test_columns_are_matched_by_label_not_position() -> None:
    header = ["en", "ResourceKey", "notes", "ResourceType"]
    rows = [["OK", "ok", "shown on dialogs", "ui"]]

    assert _diff([_record("ui", "ok", en="OK")], header, rows, ["en"]) == []


def test_remote_rows_without_key_are_ignored() -> None:
    header = ["cate", "key", "en"]
    rows = [["ui", "", "orphan"], [], ["ui", "ok", "OK"]]

    assert _diff([_record("ui", "ok", en="OK")], header, rows, ["en"]) == []


def test_remote_duplicates_of_removed_key_are_all_deleted() -> None:
    header = ["cate", "key", "en"]
    rows = [["ui", "old", "a"], ["ui", "ok", "OK"], ["ui", "old", "b"]]

    ops = _diff([_record("ui", "ok", en="OK")], header, rows, ["en"])

    assert [op.row_offset for op in ops] == [2, 0]


def test_local_duplicates_keep_last_value() -> None:
    header = ["cate", "key", "en"]
    local = [_record("ui", "ok", en="first"), _record("ui", "ok", en="second")]

    ops = _diff(local, header, [["ui", "ok", "first"]], ["en"])

    assert ops == [UpdateOp(row_offset=0, category="ui", key="ok", values=("second",))]


def test_same_key_in_different_categories_is_distinct() -> None:
    header = ["cate", "key", "en"]
    rows = [["ui", "title", "Title"]]
    local = [_record("ui", "title", en="Title"), _record("page", "title", en="Page")]

    ops = _diff(local, header, rows, ["en"])

    assert ops == [AppendOp(category="page", key="title", values=("Page",))]
