"""HTTP control surface for the translation catalog.

Run a single instance per worksheet: uploads are not coordinated between
processes.
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from settings import DEFAULT_CONFIG_PATH, SettingsError, SyncConfig, load_sync_config
from sheetsync.logging_config import configure_logging
from sheetsync.routes import router
from sheetsync.sheets_client import SheetsClient

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3005


def create_app(
    config: SyncConfig,
    catalog_path: Optional[Path] = None,
    *,
    sheets_client: Optional[SheetsClient] = None,
) -> FastAPI:
    """Build the application around ``config``.

    ``sheets_client`` replaces the client built from the configured
    credentials; it is built lazily per request otherwise.
    """

    app = FastAPI(title="Translation sheet sync")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.config = config
    app.state.catalog_path = Path(catalog_path or config.catalog_path)
    app.state.sheets_client = sheets_client
    app.include_router(router)
    return app


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Serve the translation catalog editor API.")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to the JSON configuration file")
    parser.add_argument("--json", dest="catalog", help="Local catalog file (defaults to catalogPath)")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--log-file", help="Also write logs to this file")
    args = parser.parse_args(argv)

    configure_logging(log_path=Path(args.log_file) if args.log_file else None)
    try:
        config = load_sync_config(args.config)
    except SettingsError as exc:
        logger.error("%s", exc)
        return 1

    app = create_app(config, Path(args.catalog) if args.catalog else None)
    logger.info("Serving on http://%s:%d", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
