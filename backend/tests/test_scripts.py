import json
import os
import runpy
import sys

import backup_db
import restore_db


def write_db(path, pets):
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"pets": pets}, f)


def test_backup_restore_scripts(tmp_path):
    db_file = str(tmp_path / "db.json")
    backup_dir = str(tmp_path / "snapshots")
    write_db(db_file, [{"id": "p1"}])

    b_path = backup_db.backup_database(db_file, backup_dir)
    assert b_path is not None
    assert os.path.basename(b_path).startswith("db_backup_")

    write_db(db_file, [])

    res = restore_db.restore_database(os.path.basename(b_path), db_file, backup_dir)
    assert res is True
    with open(db_file, encoding="utf-8") as f:
        assert json.load(f)["pets"] == [{"id": "p1"}]

    safety = [name for name in os.listdir(backup_dir) if name.startswith("pre_restore_safety_")]
    assert len(safety) == 1


def test_backup_missing_database(tmp_path):
    assert backup_db.backup_database(str(tmp_path / "nope.json"), str(tmp_path / "b")) is None
    assert not os.path.exists(tmp_path / "b")


def test_restore_missing_backup(tmp_path):
    db_file = str(tmp_path / "db.json")
    write_db(db_file, [{"id": "keep"}])

    assert restore_db.restore_database("ghost.json", db_file, str(tmp_path)) is False
    with open(db_file, encoding="utf-8") as f:
        assert json.load(f)["pets"] == [{"id": "keep"}]


def test_restore_script_entrypoint(mock_db_file, monkeypatch):
    import core.config as config

    write_db(mock_db_file, [{"id": "p1"}])
    b_path = backup_db.backup_database()
    write_db(mock_db_file, [])

    # A full path is reduced to the snapshot's filename
    monkeypatch.setattr(sys, "argv", ["restore_db.py", b_path])
    runpy.run_path(os.path.join(os.path.dirname(__file__), "..", "restore_db.py"), run_name="__main__")

    with open(config.DB_FILE, encoding="utf-8") as f:
        assert json.load(f)["pets"] == [{"id": "p1"}]
