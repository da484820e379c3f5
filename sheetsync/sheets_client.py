"""Google Sheets client helpers for the translation worksheet.

This module centralises every direct interaction with the Google Sheets API.
The rest of the package hands it plain lists and request dictionaries and gets
:class:`~sheetsync.grid.SheetGrid` values back, so the diff and translation
logic can be tested against an in-memory fake service.  The implementation
focuses on three goals:

* Normalising worksheet titles and A1 ranges.  Titles are always quoted
  according to the Sheets rules and column letters are computed by a helper,
  which avoids "Unable to parse range" errors for titles with spaces, quotes or
  non-ASCII characters.
* Sending all mutations of a sync in a single ``spreadsheets.batchUpdate``
  call, which the service applies atomically.
* Providing a clean failure surface.  Transport and credential problems raise
  :class:`~sheetsync.errors.RemoteUnavailable`, an unknown worksheet raises
  :class:`~sheetsync.errors.SheetNotFound` and a rejected batch raises
  :class:`~sheetsync.errors.RemoteRejected` with the service's own message.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, MutableSequence, Optional, Sequence, Tuple

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from sheetsync.errors import RemoteRejected, RemoteUnavailable, SheetNotFound
from sheetsync.grid import SheetGrid
from sheetsync.mutations import sheet_titles

logger = logging.getLogger(__name__)

SCOPES: Sequence[str] = ("https://www.googleapis.com/auth/spreadsheets",)
DEFAULT_COLUMNS = 26

_TRANSPORT_ERRORS: Tuple[type, ...] = (GoogleAuthError, httplib2.HttpLib2Error, OSError)


def _normalise_title(title: str) -> str:
    """Return a worksheet title quoted according to A1 notation rules."""

    safe = (title or "").strip()
    if len(safe) >= 2 and safe[0] == safe[-1] and safe[0] in {"'", '"'}:
        safe = safe[1:-1].strip()
    if not safe:
        raise ValueError("Worksheet title must not be empty")
    safe = safe.replace("'", "''")
    return f"'{safe}'"


def column_letter(index: int) -> str:
    """Return the column letter for a 1-based column index."""

    if index < 1:
        raise ValueError("Column index must be >= 1")
    letters: MutableSequence[str] = []
    while index:
        index, remainder = divmod(index - 1, 26)
        letters.append(chr(65 + remainder))
    return "".join(reversed(letters))


def a1_grid_range(title: str, *, columns: int = DEFAULT_COLUMNS) -> str:
    """Return an A1 range spanning every row of the first ``columns`` columns."""

    last_column = column_letter(max(1, columns))
    return f"{_normalise_title(title)}!A1:{last_column}"


def http_status(exc: HttpError) -> Optional[int]:
    status = getattr(exc, "status_code", None)
    if status is None:
        status = getattr(getattr(exc, "resp", None), "status", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def error_detail(exc: HttpError) -> str:
    """Extract the service's error message from ``exc`` when it sent one."""

    content = getattr(exc, "content", b"") or b""
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    try:
        payload = json.loads(content)
    except (TypeError, ValueError):
        payload = None
    if isinstance(payload, Mapping):
        error = payload.get("error")
        if isinstance(error, Mapping) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    reason = getattr(exc, "reason", None)
    if reason:
        return str(reason)
    return str(exc)


def build_service(credential_path: Path):
    """Construct an authorised Sheets v4 service from a service account file."""

    path = Path(credential_path).expanduser()
    try:
        credentials = service_account.Credentials.from_service_account_file(str(path), scopes=SCOPES)
    except OSError as exc:
        raise RemoteUnavailable(f"Service account file could not be read: {exc}") from exc
    except (ValueError, GoogleAuthError) as exc:
        raise RemoteUnavailable(f"Service account file {path} rejected: {exc}") from exc

    try:
        return build("sheets", "v4", credentials=credentials, cache_discovery=False)
    except _TRANSPORT_ERRORS as exc:
        raise RemoteUnavailable(f"Sheets service could not be created: {exc}") from exc


class SheetsClient:
    """Thin wrapper around one spreadsheet of the Sheets REST API."""

    def __init__(self, spreadsheet_id: str, *, service) -> None:
        self._spreadsheet_id = spreadsheet_id
        self._service = service

    @property
    def spreadsheet_id(self) -> str:
        return self._spreadsheet_id

    def _execute(self, request, description: str) -> Dict[str, Any]:
        try:
            result = request.execute()
        except _TRANSPORT_ERRORS as exc:
            raise RemoteUnavailable(f"Sheets {description} failed: {exc}") from exc
        return result if isinstance(result, dict) else {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def metadata(self) -> Dict[str, Any]:
        """Return spreadsheet metadata (worksheet titles and ids only)."""

        request = self._service.spreadsheets().get(
            spreadsheetId=self._spreadsheet_id,
            includeGridData=False,
        )
        try:
            return self._execute(request, "spreadsheets.get")
        except HttpError as exc:
            raise RemoteUnavailable(f"Spreadsheet metadata could not be read: {error_detail(exc)}") from exc

    def fetch_grid(self, sheet_name: str, *, columns: int = DEFAULT_COLUMNS) -> SheetGrid:
        """Return the values of ``sheet_name`` as a :class:`SheetGrid`.

        An empty worksheet yields an empty grid.
        """

        try:
            range_spec = a1_grid_range(sheet_name, columns=columns)
        except ValueError as exc:
            raise SheetNotFound(sheet_name, sheet_titles(self.metadata())) from exc
        request = (
            self._service.spreadsheets()
            .values()
            .get(
                spreadsheetId=self._spreadsheet_id,
                range=range_spec,
                majorDimension="ROWS",
            )
        )
        try:
            response = self._execute(request, "values.get")
        except HttpError as exc:
            detail = error_detail(exc)
            if http_status(exc) == 400 and "Unable to parse range" in detail:
                raise SheetNotFound(sheet_name, sheet_titles(self.metadata())) from exc
            raise RemoteUnavailable(f"Sheets read failed: {detail}") from exc

        values: List[List[Any]] = response.get("values", [])  # type: ignore[assignment]
        grid = SheetGrid.from_values(values)
        logger.debug("Fetched %d data rows from %r", len(grid.rows), sheet_name)
        return grid

    def batch_update(self, requests: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
        """Send ``requests`` as one atomic ``spreadsheets.batchUpdate`` call."""

        if not requests:
            return {}
        request = self._service.spreadsheets().batchUpdate(
            spreadsheetId=self._spreadsheet_id,
            body={"requests": [dict(entry) for entry in requests]},
        )
        try:
            return self._execute(request, "spreadsheets.batchUpdate")
        except HttpError as exc:
            detail = error_detail(exc)
            logger.error("Batch update rejected: %s", detail)
            raise RemoteRejected(detail, status=http_status(exc)) from exc


def build_client(spreadsheet_id: str, credential_path: Path) -> SheetsClient:
    """Factory helper used by higher level modules to construct a client."""

    return SheetsClient(spreadsheet_id, service=build_service(credential_path))


__all__ = [
    "DEFAULT_COLUMNS",
    "SCOPES",
    "SheetsClient",
    "a1_grid_range",
    "build_client",
    "build_service",
    "column_letter",
    "error_detail",
    "http_status",
]
