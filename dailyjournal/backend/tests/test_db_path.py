from pathlib import Path

from dailyjournal.backend.app import main

REPO_ROOT = Path(main.__file__).resolve().parents[3]


def test_default_db_path_ignores_cwd(monkeypatch, tmp_path):
    monkeypatch.delenv("DAILYJOURNAL_DB_PATH", raising=False)
    monkeypatch.delenv("DB_PATH", raising=False)
    monkeypatch.chdir(tmp_path)
    assert Path(main.resolve_db_path()) == REPO_ROOT / "dailyjournal.db"


def test_relative_db_path_resolves_against_repo_root(monkeypatch, tmp_path):
    monkeypatch.delenv("DAILYJOURNAL_DB_PATH", raising=False)
    monkeypatch.setenv("DB_PATH", "data/journal.db")
    monkeypatch.chdir(tmp_path)
    assert Path(main.resolve_db_path()) == REPO_ROOT / "data" / "journal.db"


def test_project_variable_wins_over_generic(monkeypatch, tmp_path):
    absolute = tmp_path / "entries.db"
    monkeypatch.setenv("DAILYJOURNAL_DB_PATH", str(absolute))
    monkeypatch.setenv("DB_PATH", "ignored.db")
    assert Path(main.resolve_db_path()) == absolute
