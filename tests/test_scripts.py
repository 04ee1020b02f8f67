"""Tests for the command line scripts."""
from __future__ import annotations

import importlib.util
from pathlib import Path
from types import ModuleType

import pytest

from hourly_stats.schema import TEST_TABLE_DDL

SCRIPTS = Path(__file__).resolve().parents[1] / "scripts"


def _load(name: str) -> ModuleType:
    spec = importlib.util.spec_from_file_location(f"scripts_{name}", SCRIPTS / f"{name}.py")
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture(scope="module")
def check_schema() -> ModuleType:
    return _load("check_schema")


@pytest.fixture(scope="module")
def create_table() -> ModuleType:
    return _load("create_table")


def test_check_schema_accepts_canonical_ddl(check_schema, tmp_path, capsys) -> None:
    ddl = tmp_path / "test_table.sql"
    ddl.write_text(TEST_TABLE_DDL, encoding="utf-8")

    assert check_schema.main(["--ddl", str(ddl)]) == 0
    assert "OK" in capsys.readouterr().err


def test_check_schema_reports_mismatch(check_schema, tmp_path, capsys) -> None:
    good = tmp_path / "good.sql"
    good.write_text(TEST_TABLE_DDL, encoding="utf-8")
    bad = tmp_path / "bad.sql"
    bad.write_text(
        TEST_TABLE_DDL.replace("`sales` double,", "`sales` double NOT NULL,"), encoding="utf-8"
    )

    assert check_schema.main(["--ddl", str(good), "--ddl", str(bad)]) == 1
    err = capsys.readouterr().err
    assert "MISMATCH" in err
    assert "[NULLABILITY_MISMATCH]" in err


def test_check_schema_unreadable_ddl(check_schema, tmp_path) -> None:
    assert check_schema.main(["--ddl", str(tmp_path / "missing.sql")]) == 1

    broken = tmp_path / "broken.sql"
    broken.write_text("DROP TABLE test_table", encoding="utf-8")
    assert check_schema.main(["--ddl", str(broken)]) == 1


def test_create_table_prints_ddl(create_table, capsys) -> None:
    assert create_table.main(["--dialect", "sqlite"]) == 0

    out = capsys.readouterr().out
    assert out.startswith("CREATE TABLE test_table (")
    assert "sales REAL" in out


def test_create_table_explain(create_table, capsys) -> None:
    assert create_table.main(["--explain"]) == 0

    out = capsys.readouterr().out
    assert "CreateTable { schema_id: 0, name: test_table" in out
    assert "BIGINT(20) NOT NULL" in out


def test_apply_then_check_database(create_table, check_schema, tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'stats.db'}"

    assert create_table.main(["--apply", "--url", url]) == 0
    assert create_table.main(["--apply", "--url", url]) == 0
    assert check_schema.main(["--url", url]) == 0
    assert check_schema.main(["--url", url, "--table", "other"]) == 1


def test_db_smoketest_reports_table(tmp_path, capsys) -> None:
    smoketest = _load("db_smoketest")
    url = f"sqlite:///{tmp_path / 'smoke.db'}"

    assert smoketest.main(url) == 0
    assert "Table test_table:" in capsys.readouterr().err
