#!/usr/bin/env python3
"""
beadtree: interactive tree dashboard over a beads issue database.

Thin facade: resolve settings and the database, build the initial graph, then
hand over to the TUI (or dump the export as JSON).
"""

import argparse
import json
import logging
import shutil
import sys
from importlib.metadata import PackageNotFoundError, version as pkg_version
from pathlib import Path
from typing import List, Optional

from config import (
    KEY_AUTO_REFRESH_SECONDS,
    KEY_DATABASE_PATH,
    KEY_LANG,
    KEY_THEME,
    load_settings,
)
from core import BeadtreeError, GraphBuilder
from core.desktop.devtools.interface.i18n import translate
from infrastructure.bd_cli import BdCliWriter
from infrastructure.db_locator import find_beads_db, latest_mod_time
from infrastructure.jsonl_source import JsonlIssueSource
from infrastructure.sqlite_source import SQLiteIssueSource
from util.debug_log import configure_logging, debug_requested

from .tui_app import BeadTreeTUI, cmd_tui
from .tui_themes import DEFAULT_THEME, THEMES

logger = logging.getLogger("beadtree.app")

EXIT_OK = 0
EXIT_STARTUP = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="beadtree",
        description="beadtree: browse beads issues as a live tree",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--db-path", help="path to beads.db or issues.jsonl (default: discover .beads/beads.db)")
    parser.add_argument(
        "--auto-refresh-seconds",
        type=float,
        default=None,
        help="poll interval for database changes, 0 disables",
    )
    parser.add_argument("--no-auto-refresh", action="store_true", help="disable polling for database changes")
    parser.add_argument("--theme", choices=list(THEMES.keys()), default=None, help="interface palette")
    parser.add_argument("--lang", choices=["en", "ru"], default=None, help="interface language")
    parser.add_argument("--json", action="store_true", help="print the exported issues as JSON and exit")
    parser.add_argument("--debug", action="store_true", help="write debug log to ~/.beadtree/debug.log")
    parser.add_argument("--version", action="store_true", help="print version and exit")
    return parser


def open_source(db_path: Path):
    if db_path.suffix == ".jsonl":
        return JsonlIssueSource(db_path)
    return SQLiteIssueSource(db_path)


def _error(message: str) -> None:
    print(message, file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return EXIT_OK if exc.code in (0, None) else EXIT_USAGE
    if args.version:
        try:
            print(pkg_version("beadtree"))
        except PackageNotFoundError:
            print("0.0.0")
        return EXIT_OK

    configure_logging(debug_requested(args.debug))

    overrides = {
        KEY_DATABASE_PATH: args.db_path,
        KEY_AUTO_REFRESH_SECONDS: 0 if args.no_auto_refresh else args.auto_refresh_seconds,
        KEY_THEME: args.theme,
        KEY_LANG: args.lang,
    }
    try:
        settings = load_settings(overrides)
    except BeadtreeError as exc:
        _error(f"beadtree: {exc.message}")
        return EXIT_USAGE

    lang = settings.lang or None
    db_path = Path(settings.db_path).expanduser() if settings.db_path else find_beads_db()
    if db_path is None or not db_path.exists():
        _error(translate("ERR_NO_DATABASE", lang=lang))
        return EXIT_STARTUP

    source = open_source(db_path)
    try:
        mod_time = latest_mod_time(db_path)
        issues = source.export()
        roots = GraphBuilder(strict=settings.strict_edges).build(issues)
    except (BeadtreeError, OSError) as exc:
        logger.error("startup failed: %s", exc)
        _error(translate("ERR_STARTUP", lang=lang, error=getattr(exc, "message", "") or exc))
        return EXIT_STARTUP

    if args.json:
        payload = [issue.to_dict() for issue in issues]
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return EXIT_OK

    writer = BdCliWriter(db_path=db_path) if shutil.which("bd") else None
    logger.debug("loaded %d issues from %s", len(issues), db_path)
    return cmd_tui(roots, source, writer, settings, db_path=str(db_path), mod_time=mod_time)


__all__ = ["build_parser", "open_source", "main", "BeadTreeTUI", "THEMES", "DEFAULT_THEME", "EXIT_OK", "EXIT_STARTUP", "EXIT_USAGE"]


if __name__ == "__main__":
    sys.exit(main())
