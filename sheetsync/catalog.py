"""Reading and writing the local translation catalog.

The catalog is a JSON array of objects carrying ``cate``, ``key`` and one
property per language tag.  Besides the consolidated file every download also
produces one flattened ``"{category}.{key}" -> value`` document per language,
which is what applications load at runtime.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from sheetsync.errors import LocalWriteFailed, MalformedLocalData
from sheetsync.records import TranslationRecord, record_from_mapping

logger = logging.getLogger(__name__)


def _read_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8-sig") as handle:
            raw = handle.read()
    except OSError as exc:
        raise MalformedLocalData(f"Catalog file could not be read: {exc}") from exc

    if not raw.strip():
        raise MalformedLocalData(f"Catalog file is empty: {path}")

    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedLocalData(f"Catalog file is not valid JSON ({path}): {exc.msg}") from exc


def load_entries(path: Path) -> List[Dict[str, Any]]:
    """Return the raw catalog objects stored at ``path``."""

    payload = _read_json(Path(path))
    if not isinstance(payload, list):
        raise MalformedLocalData(f"Catalog must be a JSON array, got {type(payload).__name__}")

    entries: List[Dict[str, Any]] = []
    for position, item in enumerate(payload):
        if not isinstance(item, Mapping) or not all(isinstance(name, str) for name in item):
            raise MalformedLocalData(f"Catalog entry #{position} is not an object")
        entries.append(dict(item))
    return entries


def load_catalog(path: Path, langs: Sequence[str]) -> List[TranslationRecord]:
    """Parse ``path`` into translation records, dropping entries without a key."""

    records: List[TranslationRecord] = []
    for entry in load_entries(path):
        record = record_from_mapping(entry, langs)
        if not record.key:
            logger.debug("Skipping catalog entry without key: %r", entry)
            continue
        records.append(record)
    return records


def _write_json(path: Path, payload: Any) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, ensure_ascii=False)
            handle.write("\n")
    except OSError as exc:
        raise LocalWriteFailed(f"Could not write {path}: {exc}") from exc


def write_entries(path: Path, entries: Sequence[Mapping[str, Any]]) -> None:
    _write_json(Path(path), [dict(entry) for entry in entries])


def write_catalog(path: Path, records: Sequence[TranslationRecord], langs: Sequence[str]) -> None:
    """Write ``records`` as the consolidated catalog, ``cate``/``key`` first."""

    _write_json(Path(path), [record.to_json(langs) for record in records])


def flatten_locale(records: Sequence[TranslationRecord], lang: str) -> Dict[str, str]:
    flattened: Dict[str, str] = {}
    for record in records:
        if not record.category or not record.key:
            continue
        flattened[f"{record.category}.{record.key}"] = record.value(lang)
    return flattened


def write_locale_files(
    records: Sequence[TranslationRecord],
    langs: Sequence[str],
    locales_dir: Path,
) -> List[Path]:
    """Write one ``<lang>.json`` per language into ``locales_dir``."""

    directory = Path(locales_dir)
    written: List[Path] = []
    for lang in langs:
        target = directory / f"{lang}.json"
        _write_json(target, flatten_locale(records, lang))
        logger.info("Wrote %s", target)
        written.append(target)
    return written


__all__ = [
    "flatten_locale",
    "load_catalog",
    "load_entries",
    "write_catalog",
    "write_entries",
    "write_locale_files",
]
