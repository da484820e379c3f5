"""Exception hierarchy shared by the sheet synchronisation modules.

Every failure the sync pipeline reports derives from :class:`SheetSyncError`
so the command line and HTTP front ends can turn it into a
``{success: false, message}`` result with a single ``except`` clause.
"""

from __future__ import annotations

from typing import Optional, Sequence

__all__ = [
    "EntryRejected",
    "LocalWriteFailed",
    "MalformedLocalData",
    "MissingKeyColumns",
    "RemoteRejected",
    "RemoteUnavailable",
    "SheetNotFound",
    "SheetSyncError",
]


class SheetSyncError(RuntimeError):
    """Base error raised by the synchronisation pipeline."""


class RemoteUnavailable(SheetSyncError):
    """Raised when the spreadsheet service cannot be reached or authenticated."""


class SheetNotFound(SheetSyncError):
    """Raised when the configured worksheet is missing from the spreadsheet."""

    def __init__(self, sheet_name: str, available: Sequence[str] = ()) -> None:
        self.sheet_name = sheet_name
        self.available = list(available)
        listing = ", ".join(self.available) if self.available else "none"
        super().__init__(
            f'Worksheet "{sheet_name}" was not found. Available worksheets: {listing}. '
            "Check the name and its capitalisation."
        )


class MissingKeyColumns(SheetSyncError):
    """Raised when the header row has no resolvable category or key column."""

    def __init__(
        self,
        header: Sequence[str],
        category_labels: Sequence[str],
        key_labels: Sequence[str],
    ) -> None:
        self.header = list(header)
        found = ", ".join(repr(label) for label in self.header) or "nothing"
        super().__init__(
            "Worksheet header must contain a category column "
            f"({' / '.join(category_labels)}) and a key column "
            f"({' / '.join(key_labels)}); found {found}."
        )


class MalformedLocalData(SheetSyncError):
    """Raised when the local catalog file is not a list of string-keyed objects."""


class LocalWriteFailed(SheetSyncError):
    """Raised when the catalog or a locale file cannot be written."""


class RemoteRejected(SheetSyncError):
    """Raised when the spreadsheet service rejects a batch mutation."""

    def __init__(self, detail: str, status: Optional[int] = None) -> None:
        self.detail = detail
        self.status = status
        prefix = f"Sheets batch update rejected (HTTP {status})" if status else "Sheets batch update rejected"
        super().__init__(f"{prefix}: {detail}")


class EntryRejected(SheetSyncError):
    """Raised when a catalog edit fails the boundary checks."""
