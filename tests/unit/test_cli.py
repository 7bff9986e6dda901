from __future__ import annotations

import time
from pathlib import Path

import pytest

from ailibrary.cli.main import main
from ailibrary.core.config import DB_PATH_ENV, SUPABASE_KEY_ENV, SUPABASE_URL_ENV
from ailibrary.domain.models.resource import Resource
from ailibrary.infrastructure.db.repos.resource_repo import ResourceRepo
from ailibrary.infrastructure.db.sqlite import initialize_schema


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (SUPABASE_URL_ENV, SUPABASE_KEY_ENV, DB_PATH_ENV, "AILIB_IMPORT_DELAY_SECONDS"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_import_into_local_database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, write_workbook, legacy_rows) -> None:
    db_path = tmp_path / "library.db"
    monkeypatch.setenv(DB_PATH_ENV, str(db_path))
    source = write_workbook(legacy_rows)

    code = main(["--project-root", str(tmp_path), "import", str(source), "--delay", "0", "--batch-size", "2"])

    assert code == 0
    assert [r.title for r in ResourceRepo(db_path).list_all()] == [
        "Intro to LLMs",
        "Cursor Tutorial for Teams",
        "Agents deep dive",
    ]


def test_import_by_position_dry_run_writes_nothing(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys, write_workbook, legacy_rows
) -> None:
    db_path = tmp_path / "library.db"
    monkeypatch.setenv(DB_PATH_ENV, str(db_path))
    source = write_workbook(legacy_rows)

    code = main(["--project-root", str(tmp_path), "import-by-position", str(source), "--dry-run"])

    assert code == 0
    assert "Dry run" in capsys.readouterr().out
    assert not db_path.exists()


def test_import_without_credentials_fails(tmp_path: Path, write_workbook, legacy_rows) -> None:
    source = write_workbook(legacy_rows)
    assert main(["--project-root", str(tmp_path), "import", str(source)]) == 1


def test_ctrl_c_during_countdown_cancels(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, write_workbook, legacy_rows
) -> None:
    db_path = tmp_path / "library.db"
    monkeypatch.setenv(DB_PATH_ENV, str(db_path))

    def interrupted(_seconds: float) -> None:
        raise KeyboardInterrupt

    monkeypatch.setattr(time, "sleep", interrupted)

    code = main(["--project-root", str(tmp_path), "import", str(write_workbook(legacy_rows))])

    assert code == 130
    assert ResourceRepo(db_path).list_all() == []


def test_missing_workbook_fails(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(DB_PATH_ENV, str(tmp_path / "library.db"))
    assert main(["--project-root", str(tmp_path), "import", str(tmp_path / "nope.xlsx")]) == 1


def test_check_columns_lists_headers(tmp_path: Path, capsys, write_workbook, legacy_rows) -> None:
    source = write_workbook(legacy_rows)

    code = main(["--project-root", str(tmp_path), "check-columns", str(source), "--skip-rows", "1"])

    assert code == 0
    out = capsys.readouterr().out
    assert "Course creation - Stage" in out
    assert "Intro to LLMs" in out


def test_resources_export_and_template(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys, write_workbook, legacy_rows
) -> None:
    monkeypatch.setenv(DB_PATH_ENV, str(tmp_path / "library.db"))
    root = ["--project-root", str(tmp_path)]
    assert main([*root, "import", str(write_workbook(legacy_rows)), "--delay", "0"]) == 0
    capsys.readouterr()

    assert main([*root, "resources", "--week", "Week 2", "--stats"]) == 0
    out = capsys.readouterr().out
    assert "Resources (1 of 1)" in out
    assert "Library stats" in out

    export_path = tmp_path / "out.csv"
    assert main([*root, "export", "--out", str(export_path)]) == 0
    assert export_path.read_text(encoding="utf-8").count("\n") == 4

    template_path = tmp_path / "template.csv"
    assert main([*root, "template", "--out", str(template_path)]) == 0
    assert "Example: AI Fundamentals Guide" in template_path.read_text(encoding="utf-8")


def test_resources_prints_bracketed_titles_literally(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    db_path = tmp_path / "library.db"
    monkeypatch.setenv(DB_PATH_ENV, str(db_path))
    initialize_schema(db_path)
    ResourceRepo(db_path).insert_many([Resource(title="[/b] notes", link="https://example.com")])

    assert main(["--project-root", str(tmp_path), "resources"]) == 0
    assert "[/b] notes" in capsys.readouterr().out
