"""HTTP routes for editing the translation catalog.

Every endpoint answers with ``{"success": bool, "message": str}``; failures of
the sync pipeline are reported in that shape rather than as HTTP errors.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Request
from pydantic import BaseModel

from sheetsync import catalog_service
from sheetsync.errors import SheetSyncError

logger = logging.getLogger(__name__)

router = APIRouter()


class ActionResponse(BaseModel):
    success: bool
    message: str


class DataResponse(BaseModel):
    success: bool
    message: str = ""
    data: List[Dict[str, Any]] = []


class DownloadRequest(BaseModel):
    sheetName: Optional[str] = None  # noqa: N815 - wire format


class EntryKeyRequest(BaseModel):
    cate: str = ""
    key: str = ""


def _context(request: Request):
    state = request.app.state
    return state.config, Path(state.catalog_path), getattr(state, "sheets_client", None)


def _failure(action: str, exc: Exception) -> ActionResponse:
    logger.error("%s failed: %s", action, exc)
    return ActionResponse(success=False, message=str(exc))


@router.post("/download")
def download(request: Request, body: Optional[DownloadRequest] = None) -> ActionResponse:
    """Download the worksheet into the catalog and regenerate locale files."""
    config, path, client = _context(request)
    sheet_name = body.sheetName if body else None
    try:
        result = catalog_service.download_catalog(config, path, sheet_name=sheet_name, client=client)
    except SheetSyncError as exc:
        return _failure("Download", exc)
    return ActionResponse(success=result.success, message=result.message)


@router.get("/data")
def data(request: Request) -> DataResponse:
    """Return the raw local catalog."""
    _, path, _ = _context(request)
    try:
        entries = catalog_service.list_entries(path)
    except SheetSyncError as exc:
        return DataResponse(success=False, message=str(exc))
    return DataResponse(success=True, data=entries)


@router.post("/add")
def add(request: Request, payload: Dict[str, Any] = Body(...)) -> ActionResponse:
    """Add an entry; body holds ``cate``, ``key`` and one field per language."""
    config, path, client = _context(request)
    try:
        result = catalog_service.add_entry(config, path, payload, client=client)
    except SheetSyncError as exc:
        return _failure("Add", exc)
    return ActionResponse(success=result.success, message=result.message)


@router.post("/delete")
def delete(request: Request, body: EntryKeyRequest) -> ActionResponse:
    """Delete the entry identified by ``cate`` and ``key``."""
    config, path, client = _context(request)
    try:
        result = catalog_service.delete_entry(config, path, body.cate, body.key, client=client)
    except SheetSyncError as exc:
        return _failure("Delete", exc)
    return ActionResponse(success=result.success, message=result.message)


@router.post("/resetLocal")
def reset_local(request: Request) -> ActionResponse:
    """Empty the local catalog file."""
    _, path, _ = _context(request)
    try:
        result = catalog_service.reset_local(path)
    except SheetSyncError as exc:
        return _failure("Reset", exc)
    return ActionResponse(success=result.success, message=result.message)
