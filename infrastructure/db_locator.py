"""Locate the beads database and read its change signal."""

import os
from pathlib import Path
from typing import Optional

BEADS_DIR = ".beads"
PROJECT_DB = "beads.db"
DEFAULT_DB = "default.db"
COMPANION_SUFFIXES = ("-wal", "-shm")


def find_beads_db(start_dir: Optional[Path] = None, home: Optional[Path] = None) -> Optional[Path]:
    """Walk up from `start_dir` looking for .beads/beads.db, else ~/.beads/default.db."""
    current = Path(start_dir or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / BEADS_DIR / PROJECT_DB
        if candidate.is_file():
            return candidate
    fallback = Path(home or Path.home()) / BEADS_DIR / DEFAULT_DB
    if fallback.is_file():
        return fallback
    return None


def _optional_mtime(path: str) -> float:
    try:
        return os.stat(path).st_mtime
    except FileNotFoundError:
        return 0.0


def latest_mod_time(db_path) -> float:
    """Newest mtime of the database and its WAL/SHM companions.

    Raises OSError when the database itself cannot be stat'ed; missing
    companions are ignored.
    """
    db_path = os.fspath(db_path)
    if not db_path.strip():
        raise FileNotFoundError("database path is empty")
    latest = os.stat(db_path).st_mtime
    for suffix in COMPANION_SUFFIXES:
        latest = max(latest, _optional_mtime(db_path + suffix))
    return latest


__all__ = ["find_beads_db", "latest_mod_time"]
