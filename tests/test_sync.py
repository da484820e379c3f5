from __future__ import annotations

import json
from pathlib import Path

import pytest

from sheet_fakes import FakeSheetsService, http_error
from sheetsync import sync
from sheetsync.errors import MissingKeyColumns
from sheetsync.sheets_client import SheetsClient

HEADER = ["cate", "key", "en", "fr"]


def _client(rows=None, **kwargs) -> tuple[SheetsClient, FakeSheetsService]:
    service = FakeSheetsService(rows, **kwargs)
    return SheetsClient("sheet-123", service=service), service


def test_upload_appends_updates_and_deletes(config, write_catalog) -> None:
    client, service = _client(
        [HEADER, ["ui", "ok", "OK", "D'accord"], ["ui", "gone", "Gone", "Parti"], ["ui", "cancel", "Cancel", "Annuler"]],
        sheet_id=321,
    )
    path = write_catalog(
        [
            {"cate": "ui", "key": "ok", "en": "OK", "fr": "Oui"},
            {"cate": "ui", "key": "cancel", "en": "Cancel", "fr": "Annuler"},
            {"cate": "ui", "key": "save", "en": "Save", "fr": "Enregistrer"},
        ]
    )

    result = sync.upload(config, path, client=client)

    assert result.success
    assert (result.appended, result.updated, result.deleted) == (1, 1, 1)
    assert result.message == "Uploaded 3 changes: 1 added, 1 updated, 1 deleted."
    assert len(service.batch_requests) == 1
    assert service.rows == [
        HEADER,
        ["ui", "ok", "OK", "Oui"],
        ["ui", "cancel", "Cancel", "Annuler"],
        ["ui", "save", "Save", "Enregistrer"],
    ]


def test_second_upload_is_a_no_op(config, write_catalog) -> None:
    client, service = _client([HEADER, ["ui", "old", "Old", "Vieux"]])
    path = write_catalog([{"cate": "ui", "key": "ok", "en": "OK", "fr": "Oui"}])

    assert sync.upload(config, path, client=client).success
    second = sync.upload(config, path, client=client)

    assert second.success
    assert second.message == "Sheet is already synchronized; nothing to update."
    assert len(service.batch_requests) == 1


def test_upload_to_empty_sheet_writes_header_first(config, write_catalog) -> None:
    client, service = _client([])
    path = write_catalog([{"cate": "ui", "key": "ok", "en": "OK", "fr": "Oui"}])

    result = sync.upload(config, path, client=client)

    assert result.success
    assert service.rows == [HEADER, ["ui", "ok", "OK", "Oui"]]


def test_upload_leaves_foreign_columns_alone(config, write_catalog) -> None:
    client, service = _client(
        [["ResourceType", "ResourceKey", "comment", "fr", "en"], ["ui", "ok", "keep", "Oui", "Okay"]]
    )
    path = write_catalog([{"cate": "ui", "key": "ok", "en": "OK", "fr": "Oui"}])

    assert sync.upload(config, path, client=client).success

    assert service.rows[1] == ["ui", "ok", "keep", "Oui", "OK"]


def test_rejected_batch_is_reported_and_sheet_untouched(config, write_catalog) -> None:
    rows = [HEADER, ["ui", "ok", "OK", "Oui"]]
    client, service = _client(rows)
    service.fail_batch = http_error(400, "Invalid requests[0].appendCells: bad sheet")
    path = write_catalog([{"cate": "ui", "key": "new", "en": "New", "fr": "Nouveau"}])

    result = sync.upload(config, path, client=client)

    assert not result.success
    assert "Invalid requests[0].appendCells: bad sheet" in result.message
    assert service.rows == rows


def test_upload_of_malformed_catalog_reads_nothing_remote(config, tmp_path: Path) -> None:
    client, service = _client([HEADER])
    path = tmp_path / "entire.json"
    path.write_text("{}", encoding="utf-8")

    result = sync.upload(config, path, client=client)

    assert not result.success
    assert service.get_ranges == []


def test_header_without_key_column_fails(config, write_catalog) -> None:
    client, service = _client([["name", "en"], ["ok", "OK"]])
    path = write_catalog([{"cate": "ui", "key": "ok", "en": "OK"}])

    with pytest.raises(MissingKeyColumns):
        sync.push(config, path, client=client)
    assert service.batch_requests == []


def test_unknown_worksheet_is_reported(config, write_catalog) -> None:
    client, _ = _client([HEADER], title="Sheet1")
    path = write_catalog([{"cate": "ui", "key": "ok", "en": "OK"}])

    result = sync.upload(config, path, client=client)

    assert not result.success
    assert "Translations" in result.message
    assert "Sheet1" in result.message


def test_download_writes_catalog_and_locale_files(config, tmp_path: Path) -> None:
    client, _ = _client(
        [["分類", "Key", "en", "fr"], ["ui", "ok", "OK", "Oui"], ["", "", "stray"], ["menu", "file", "File"]]
    )
    out_path = tmp_path / "entire.json"

    result = sync.download(config, out_path, client=client)

    assert result.success
    assert result.message == "Downloaded 2 entries and generated locale files."
    assert json.loads(out_path.read_text(encoding="utf-8")) == [
        {"cate": "ui", "key": "ok", "en": "OK", "fr": "Oui"},
        {"cate": "menu", "key": "file", "en": "File", "fr": ""},
    ]
    locales = Path(config.locales_dir)
    assert json.loads((locales / "en.json").read_text(encoding="utf-8")) == {"ui.ok": "OK", "menu.file": "File"}
    assert json.loads((locales / "fr.json").read_text(encoding="utf-8")) == {"ui.ok": "Oui", "menu.file": ""}


def test_download_of_sheet_without_data_leaves_files_alone(config, write_catalog) -> None:
    client, _ = _client([HEADER])
    path = write_catalog([{"cate": "ui", "key": "ok", "en": "OK"}])
    before = path.read_text(encoding="utf-8")

    result = sync.download(config, path, client=client)

    assert result.success
    assert result.message == 'Sheet "Translations" has no data.'
    assert path.read_text(encoding="utf-8") == before
    assert not Path(config.locales_dir).exists()


def test_upload_then_download_round_trips(config, write_catalog, tmp_path: Path) -> None:
    entries = [
        {"cate": "ui", "key": "ok", "en": "OK", "fr": "D'accord"},
        {"cate": "page", "key": "ok", "en": "Fine", "fr": ""},
    ]
    client, _ = _client([])
    path = write_catalog(entries)

    assert sync.upload(config, path, client=client).success
    out_path = tmp_path / "downloaded.json"
    assert sync.download(config, out_path, client=client).success

    assert json.loads(out_path.read_text(encoding="utf-8")) == entries


def test_plan_upload_does_not_write(config, write_catalog) -> None:
    client, service = _client([HEADER, ["ui", "gone", "Gone", ""]])
    path = write_catalog([{"cate": "ui", "key": "ok", "en": "OK", "fr": "Oui"}])

    plan = sync.plan_upload(config, path, client=client)

    assert plan.counts == {"appended": 1, "updated": 0, "deleted": 1}
    assert service.batch_requests == []


def test_download_then_upload_without_edits_is_a_no_op(config, tmp_path: Path) -> None:
    client, service = _client(
        [HEADER, ["ui", "ok", "OK", "Oui"], ["ui", "", "orphan"], ["menu", "file", "File"]]
    )
    out_path = tmp_path / "entire.json"

    assert sync.download(config, out_path, client=client).success
    plan = sync.plan_upload(config, out_path, client=client)

    assert plan.ops == []
    assert service.batch_requests == []


def test_blank_first_row_above_data_is_rejected(config, write_catalog, tmp_path: Path) -> None:
    rows = [[], ["ui", "old", "x"]]
    client, service = _client(rows)
    path = write_catalog([{"cate": "ui", "key": "ok", "en": "OK", "fr": "Oui"}])

    uploaded = sync.upload(config, path, client=client)
    downloaded = sync.download(config, tmp_path / "out.json", client=client)

    assert not uploaded.success
    assert "category column" in uploaded.message
    assert not downloaded.success
    assert service.batch_requests == []
    assert service.rows == rows
    assert not (tmp_path / "out.json").exists()


def test_missing_language_column_is_added_once(config, write_catalog) -> None:
    client, service = _client([["cate", "key", "en"], ["ui", "ok", "OK"]])
    path = write_catalog([{"cate": "ui", "key": "ok", "en": "OK", "fr": "Oui"}])

    first = sync.upload(config, path, client=client)
    second = sync.upload(config, path, client=client)

    assert first.success and first.updated == 1
    assert second.message == "Sheet is already synchronized; nothing to update."
    assert service.rows == [["cate", "key", "en", "fr"], ["ui", "ok", "OK", "Oui"]]
    assert len(service.batch_requests) == 1


def test_download_to_unwritable_locales_dir_is_reported(config, tmp_path: Path) -> None:
    client, _ = _client([HEADER, ["ui", "ok", "OK", "Oui"]])
    blocker = tmp_path / "locales-file"
    blocker.write_text("not a directory", encoding="utf-8")

    result = sync.download(config, tmp_path / "entire.json", locales_dir=blocker / "nested", client=client)

    assert not result.success
    assert "Could not write" in result.message
