import json
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from settings import SyncConfig


@pytest.fixture
def config(tmp_path: Path) -> SyncConfig:
    return SyncConfig(
        sheet_id="sheet-123",
        auth=str(tmp_path / "service_account.json"),
        langs=["en", "fr"],
        locales_dir=str(tmp_path / "locales"),
        catalog_path=str(tmp_path / "entire.json"),
    )


@pytest.fixture
def write_catalog(tmp_path: Path):
    def _write(entries, name: str = "entire.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(entries, ensure_ascii=False), encoding="utf-8")
        return path

    return _write
