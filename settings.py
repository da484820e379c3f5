"""Configuration helpers for the translation sheet synchroniser."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple

from sheetsync.grid import DEFAULT_CATEGORY_LABELS, DEFAULT_KEY_LABELS, HeaderLabels
from sheetsync.sheets_client import DEFAULT_COLUMNS

logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = os.getenv("SHEET_I18N_CONFIG", "i18n.config.json")
DEFAULT_SHEET_NAME = "Translations"
DEFAULT_BASE_LANG = "en"
DEFAULT_CATALOG_PATH = "entire.json"
DEFAULT_LOCALES_DIR = "locales"


class SettingsError(ValueError):
    """Raised when the configuration is missing a required value."""


def parse_spreadsheet_id(value: str) -> str:
    """Normalise a spreadsheet identifier from raw input or URL."""

    if not value:
        return ""
    value = value.strip()
    if "/spreadsheets/d/" in value:
        value = value.split("/spreadsheets/d/", 1)[1]
        value = value.split("/", 1)[0]
    if "?" in value:
        value = value.split("?", 1)[0]
    if "#" in value:
        value = value.split("#", 1)[0]
    return value


@dataclass
class SyncConfig:
    sheet_id: str
    auth: str
    langs: List[str]
    sheet_name: str = DEFAULT_SHEET_NAME
    base_lang: str = DEFAULT_BASE_LANG
    category_labels: Tuple[str, ...] = DEFAULT_CATEGORY_LABELS
    key_labels: Tuple[str, ...] = DEFAULT_KEY_LABELS
    columns: int = DEFAULT_COLUMNS
    catalog_path: str = DEFAULT_CATALOG_PATH
    locales_dir: str = DEFAULT_LOCALES_DIR

    @property
    def labels(self) -> HeaderLabels:
        return HeaderLabels(category=tuple(self.category_labels), key=tuple(self.key_labels))

    def with_sheet_name(self, sheet_name: Optional[str]) -> "SyncConfig":
        if not sheet_name or sheet_name == self.sheet_name:
            return self
        return replace(self, sheet_name=sheet_name)

    def validate(self) -> "SyncConfig":
        missing = []
        if not self.sheet_id:
            missing.append("sheetId")
        if not self.auth:
            missing.append("auth")
        if not self.langs:
            missing.append("langs")
        if missing:
            raise SettingsError(f"Configuration is missing: {', '.join(missing)}")
        if not self.category_labels or not self.key_labels:
            raise SettingsError("categoryLabels and keyLabels must not be empty")
        if self.base_lang not in self.langs:
            logger.warning("Base language %r is not one of the configured languages %s", self.base_lang, self.langs)
        return self


def split_langs(value: object) -> List[str]:
    if isinstance(value, str):
        items: Sequence[object] = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        return []
    return [str(item).strip() for item in items if str(item).strip()]


def _labels(value: object, default: Tuple[str, ...]) -> Tuple[str, ...]:
    labels = tuple(split_langs(value))
    return labels or default


def _resolve_path(value: str, base_dir: Optional[Path]) -> str:
    if not value:
        return value
    path = Path(value).expanduser()
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    return str(path)


def _columns(value: object) -> int:
    try:
        return max(1, int(value))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return DEFAULT_COLUMNS


def config_from_mapping(data: Mapping[str, object], *, base_dir: Optional[Path] = None) -> SyncConfig:
    """Build a :class:`SyncConfig` from camelCase keys as found in the config file.

    Relative paths are resolved against ``base_dir`` when given.
    """

    config = SyncConfig(
        sheet_id=parse_spreadsheet_id(str(data.get("sheetId") or "")),
        auth=_resolve_path(str(data.get("auth") or ""), base_dir),
        langs=split_langs(data.get("langs")),
        sheet_name=str(data.get("sheetName") or DEFAULT_SHEET_NAME),
        base_lang=str(data.get("baseLang") or DEFAULT_BASE_LANG),
        category_labels=_labels(data.get("categoryLabels"), DEFAULT_CATEGORY_LABELS),
        key_labels=_labels(data.get("keyLabels"), DEFAULT_KEY_LABELS),
        columns=_columns(data.get("columns", DEFAULT_COLUMNS)),
        catalog_path=_resolve_path(str(data.get("catalogPath") or DEFAULT_CATALOG_PATH), base_dir),
        locales_dir=_resolve_path(str(data.get("localesDir") or DEFAULT_LOCALES_DIR), base_dir),
    )
    return config.validate()


def load_sync_config(path: str = DEFAULT_CONFIG_PATH) -> SyncConfig:
    config_path = Path(path).expanduser().resolve()
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except OSError as exc:
        raise SettingsError(f"Configuration file could not be read: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SettingsError(f"Configuration file is not valid JSON: {exc.msg}") from exc
    if not isinstance(data, Mapping):
        raise SettingsError("Configuration file must contain a JSON object")
    logger.debug("Loaded configuration from %s", config_path)
    return config_from_mapping(data, base_dir=config_path.parent)


__all__ = [
    "DEFAULT_BASE_LANG",
    "DEFAULT_CATALOG_PATH",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_LOCALES_DIR",
    "DEFAULT_SHEET_NAME",
    "SettingsError",
    "SyncConfig",
    "config_from_mapping",
    "load_sync_config",
    "parse_spreadsheet_id",
    "split_langs",
]
