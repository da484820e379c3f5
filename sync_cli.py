"""Command line helper for syncing the translation catalog with Google Sheets."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from settings import (
    DEFAULT_BASE_LANG,
    DEFAULT_CATALOG_PATH,
    DEFAULT_SHEET_NAME,
    SettingsError,
    SyncConfig,
    config_from_mapping,
    load_sync_config,
)
from sheetsync import sync
from sheetsync.diff import describe
from sheetsync.errors import SheetSyncError
from sheetsync.logging_config import configure_logging


def _config_from_args(args: argparse.Namespace) -> SyncConfig:
    if args.config:
        config = load_sync_config(args.config)
    else:
        config = config_from_mapping(
            {
                "sheetId": args.sheet_id,
                "auth": args.auth,
                "langs": args.langs,
                "sheetName": args.sheet_name or DEFAULT_SHEET_NAME,
                "baseLang": args.base_lang or DEFAULT_BASE_LANG,
            },
            base_dir=Path.cwd(),
        )
    return config.with_sheet_name(args.sheet_name)


def _report(result: sync.SyncResult) -> int:
    if result.success:
        print(result.message)
        return 0
    print(f"Error: {result.message}", file=sys.stderr)
    return 1


def command_upload(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    return _report(sync.upload(config, Path(args.json)))


def command_download(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    if not args.out:
        print(f"No --out given; writing to {config.catalog_path}")
    out_path = Path(args.out or config.catalog_path)
    locales = Path(args.locales) if args.locales else None
    return _report(sync.download(config, out_path, locales_dir=locales))


def command_diff(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    try:
        plan = sync.plan_upload(config, Path(args.json), client=sync.client_for(config))
    except SheetSyncError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if not plan.ops:
        print("Sheet is already synchronized; nothing to update.")
        return 0
    for op in plan.ops:
        print(describe(op))
    counts = plan.counts
    print(f"{counts['appended']} to add, {counts['updated']} to update, {counts['deleted']} to delete.")
    return 0


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to the JSON configuration file")
    parser.add_argument("--sheet-id", help="Google Sheet ID or URL")
    parser.add_argument("--auth", help="Path to the service account JSON")
    parser.add_argument("--langs", help="Comma-separated list of language tags")
    parser.add_argument("--sheet-name", help=f"Worksheet name (default: {DEFAULT_SHEET_NAME})")
    parser.add_argument("--base-lang", help=f"Base language (default: {DEFAULT_BASE_LANG})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Synchronise a JSON translation catalog with Google Sheets.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    upload_parser = subparsers.add_parser("upload", help="Push the local catalog to the sheet")
    _add_common_options(upload_parser)
    upload_parser.add_argument("--json", default=DEFAULT_CATALOG_PATH, help="Local catalog file")
    upload_parser.set_defaults(func=command_upload)

    download_parser = subparsers.add_parser("download", help="Pull the sheet into the local catalog")
    _add_common_options(download_parser)
    download_parser.add_argument("--out", help="Output catalog path")
    download_parser.add_argument("--locales", help="Directory for per-language files")
    download_parser.set_defaults(func=command_download)

    diff_parser = subparsers.add_parser("diff", help="Show the changes an upload would make")
    _add_common_options(diff_parser)
    diff_parser.add_argument("--json", default=DEFAULT_CATALOG_PATH, help="Local catalog file")
    diff_parser.set_defaults(func=command_diff)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    try:
        return args.func(args)
    except SettingsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
