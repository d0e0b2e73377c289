import os

import pytest

from infrastructure.db_locator import find_beads_db, latest_mod_time


def test_find_walks_up_to_project_db(tmp_path):
    db = tmp_path / ".beads" / "beads.db"
    db.parent.mkdir()
    db.write_text("")
    nested = tmp_path / "src" / "pkg"
    nested.mkdir(parents=True)
    assert find_beads_db(nested, home=tmp_path / "home") == db.resolve()


def test_find_falls_back_to_home_default(tmp_path):
    home = tmp_path / "home"
    default = home / ".beads" / "default.db"
    default.parent.mkdir(parents=True)
    default.write_text("")
    work = tmp_path / "work"
    work.mkdir()
    assert find_beads_db(work, home=home) == default


def test_find_returns_none_without_database(tmp_path):
    work = tmp_path / "work"
    work.mkdir()
    assert find_beads_db(work, home=tmp_path / "home") is None


def test_latest_mod_time_includes_companions(tmp_path):
    db = tmp_path / "beads.db"
    db.write_text("")
    os.utime(db, (10, 10))
    assert latest_mod_time(db) == 10
    shm = tmp_path / "beads.db-shm"
    shm.write_text("")
    os.utime(shm, (30, 30))
    assert latest_mod_time(str(db)) == 30


def test_latest_mod_time_missing_database(tmp_path):
    with pytest.raises(OSError):
        latest_mod_time(tmp_path / "missing.db")
