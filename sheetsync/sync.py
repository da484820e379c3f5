"""Upload and download between the local catalog and the translation sheet.

``push`` and ``pull`` run the pipelines and raise
:class:`~sheetsync.errors.SheetSyncError` subclasses on failure.  ``upload``
and ``download`` wrap them for front ends and always return a
:class:`SyncResult`; failures are logged and reported, never retried.

Nothing coordinates concurrent runs: an upload reads the sheet, diffs and then
writes row offsets computed from that read, so at most one sync against a given
worksheet may run at a time.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from settings import SyncConfig
from sheetsync.catalog import load_catalog, write_catalog, write_locale_files
from sheetsync.diff import MutationOp, diff_catalog, summarise
from sheetsync.errors import SheetSyncError
from sheetsync.grid import ColumnLayout, SheetGrid, grid_layout, grid_records
from sheetsync.mutations import build_requests, resolve_sheet_id
from sheetsync.sheets_client import SheetsClient, build_client

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    success: bool
    message: str
    appended: int = 0
    updated: int = 0
    deleted: int = 0
    rows: int = 0


@dataclass
class UploadPlan:
    """Everything an upload needs to apply, computed without writing."""

    grid: SheetGrid
    layout: ColumnLayout
    ops: List[MutationOp] = field(default_factory=list)

    @property
    def counts(self) -> Dict[str, int]:
        return summarise(self.ops)


def client_for(config: SyncConfig) -> SheetsClient:
    return build_client(config.sheet_id, Path(config.auth))


def read_remote(client: SheetsClient, config: SyncConfig) -> Tuple[SheetGrid, ColumnLayout]:
    grid = client.fetch_grid(config.sheet_name, columns=config.columns)
    layout = grid_layout(grid, config.langs, config.labels)
    return grid, layout


def plan_upload(config: SyncConfig, catalog_path: Path, *, client: SheetsClient) -> UploadPlan:
    local = load_catalog(Path(catalog_path), config.langs)
    grid, layout = read_remote(client, config)
    ops = diff_catalog(local, grid, layout)
    return UploadPlan(grid=grid, layout=layout, ops=ops)


def push(
    config: SyncConfig,
    catalog_path: Path,
    *,
    client: Optional[SheetsClient] = None,
) -> SyncResult:
    """Make the worksheet match the catalog at ``catalog_path``."""

    client = client or client_for(config)
    plan = plan_upload(config, catalog_path, client=client)
    if not plan.ops:
        logger.info("Sheet %r is already synchronized", config.sheet_name)
        return SyncResult(True, "Sheet is already synchronized; nothing to update.")

    sheet_id = resolve_sheet_id(client.metadata(), config.sheet_name)
    requests = build_requests(
        plan.ops,
        sheet_id=sheet_id,
        grid=plan.grid,
        layout=plan.layout,
        labels=config.labels,
        max_columns=config.columns,
    )
    client.batch_update(requests)

    counts = plan.counts
    logger.info("Applied batch update with %d requests to %r", len(requests), config.sheet_name)
    return SyncResult(
        True,
        f"Uploaded {len(plan.ops)} changes: {counts['appended']} added, "
        f"{counts['updated']} updated, {counts['deleted']} deleted.",
        rows=len(plan.ops),
        **counts,
    )


def pull(
    config: SyncConfig,
    out_path: Path,
    *,
    locales_dir: Optional[Path] = None,
    client: Optional[SheetsClient] = None,
) -> SyncResult:
    """Write the worksheet to ``out_path`` and the per-language files."""

    client = client or client_for(config)
    grid = client.fetch_grid(config.sheet_name, columns=config.columns)
    if not grid.rows:
        logger.warning("Sheet %r has no data; local files left untouched", config.sheet_name)
        return SyncResult(True, f'Sheet "{config.sheet_name}" has no data.')

    layout = grid_layout(grid, config.langs, config.labels)
    records = grid_records(grid, layout)
    write_catalog(Path(out_path), records, config.langs)
    logger.info("Downloaded %d entries to %s", len(records), out_path)
    write_locale_files(records, config.langs, Path(locales_dir or config.locales_dir))
    return SyncResult(
        True,
        f"Downloaded {len(records)} entries and generated locale files.",
        rows=len(records),
    )


def upload(
    config: SyncConfig,
    catalog_path: Path,
    *,
    client: Optional[SheetsClient] = None,
) -> SyncResult:
    try:
        return push(config, catalog_path, client=client)
    except SheetSyncError as exc:
        logger.error("Upload failed: %s", exc)
        return SyncResult(False, str(exc))


def download(
    config: SyncConfig,
    out_path: Path,
    *,
    locales_dir: Optional[Path] = None,
    client: Optional[SheetsClient] = None,
) -> SyncResult:
    try:
        return pull(config, out_path, locales_dir=locales_dir, client=client)
    except SheetSyncError as exc:
        logger.error("Download failed: %s", exc)
        return SyncResult(False, str(exc))


__all__ = [
    "SyncResult",
    "UploadPlan",
    "client_for",
    "download",
    "plan_upload",
    "pull",
    "push",
    "read_remote",
    "upload",
]
