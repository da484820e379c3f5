"""Catalog edits performed on behalf of the HTTP control surface.

Each operation validates its input before touching the sheet: missing fields,
an empty base-language value or a duplicate ``(cate, key)`` pair are rejected
here, so the sync engine only ever sees well-formed catalogs.  Successful edits
are written locally, uploaded, and then downloaded again so the local file
reflects exactly what the worksheet holds.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from settings import SyncConfig
from sheetsync import sync
from sheetsync.catalog import load_entries, write_entries
from sheetsync.errors import EntryRejected
from sheetsync.records import RowKey, coerce_text
from sheetsync.sheets_client import SheetsClient

logger = logging.getLogger(__name__)


def lang_field_names(lang: str) -> List[str]:
    """Request fields accepted for ``lang``: ``zh-TW`` and ``zhTW``."""

    compact = lang.replace("-", "")
    return [lang] if compact == lang else [lang, compact]


def _lang_value(payload: Mapping[str, Any], lang: str) -> str:
    for name in lang_field_names(lang):
        value = coerce_text(payload.get(name)).strip()
        if value:
            return value
    return ""


def _identity(entry: Mapping[str, Any]) -> RowKey:
    return RowKey(coerce_text(entry.get("cate")), coerce_text(entry.get("key")))


def list_entries(path: Path) -> List[Dict[str, Any]]:
    entries = load_entries(Path(path))
    if not entries:
        raise EntryRejected("The local catalog has no data.")
    return entries


def build_entry(config: SyncConfig, payload: Mapping[str, Any]) -> Dict[str, str]:
    category = coerce_text(payload.get("cate")).strip()
    key = coerce_text(payload.get("key")).strip()
    if not category or not key:
        raise EntryRejected("Missing required field (cate or key).")

    entry: Dict[str, str] = {"cate": category, "key": key}
    for lang in config.langs:
        entry[lang] = _lang_value(payload, lang)
    if not entry.get(config.base_lang):
        raise EntryRejected(f"The base language ({config.base_lang}) value must not be empty.")
    return entry


def _refresh(config: SyncConfig, path: Path, client: Optional[SheetsClient]) -> None:
    client = client or sync.client_for(config)
    sync.push(config, path, client=client)
    sync.pull(config, path, client=client)


def add_entry(
    config: SyncConfig,
    path: Path,
    payload: Mapping[str, Any],
    *,
    client: Optional[SheetsClient] = None,
) -> sync.SyncResult:
    """Append a new entry, upload it and re-download the catalog."""

    entry = build_entry(config, payload)
    identity = _identity(entry)
    entries = load_entries(Path(path))
    if any(_identity(existing) == identity for existing in entries):
        raise EntryRejected(f'Category "{identity.category}" + key "{identity.key}" already exists.')

    entries.append(entry)
    write_entries(Path(path), entries)
    logger.info("Added %s to %s", identity, path)
    _refresh(config, Path(path), client)
    return sync.SyncResult(True, "Entry added, uploaded to the sheet and local data refreshed.")


def delete_entry(
    config: SyncConfig,
    path: Path,
    category: str,
    key: str,
    *,
    client: Optional[SheetsClient] = None,
) -> sync.SyncResult:
    """Remove an entry locally and from the sheet, then re-download."""

    category = coerce_text(category).strip()
    key = coerce_text(key).strip()
    if not category or not key:
        raise EntryRejected("Missing required field (cate or key).")

    identity = RowKey(category, key)
    entries = load_entries(Path(path))
    remaining = [entry for entry in entries if _identity(entry) != identity]
    if len(remaining) == len(entries):
        raise EntryRejected(f'No entry found for category "{category}" + key "{key}".')

    write_entries(Path(path), remaining)
    logger.info("Deleted %s from %s", identity, path)
    _refresh(config, Path(path), client)
    return sync.SyncResult(True, "Entry deleted from the sheet and local data refreshed.")


def reset_local(path: Path) -> sync.SyncResult:
    write_entries(Path(path), [])
    logger.info("Reset local catalog %s", path)
    return sync.SyncResult(True, "Local data has been reset.")


def download_catalog(
    config: SyncConfig,
    path: Path,
    *,
    sheet_name: Optional[str] = None,
    client: Optional[SheetsClient] = None,
) -> sync.SyncResult:
    return sync.pull(config.with_sheet_name(sheet_name), Path(path), client=client)


__all__ = [
    "add_entry",
    "build_entry",
    "delete_entry",
    "download_catalog",
    "lang_field_names",
    "list_entries",
    "reset_local",
]
