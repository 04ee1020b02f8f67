"""Schema validation against DDL text and live SQLite databases."""
from __future__ import annotations

import pytest
from sqlalchemy import text
from sqlalchemy import types as sqltypes
from sqlalchemy.dialects import mysql

from hourly_stats.catalog import ColumnCatalog, ColumnDesc, DataType, DataTypeKind, TableCatalog
from hourly_stats.core.errors import BindError, CatalogError, ParseError, SchemaMismatchError
from hourly_stats.db import create_stats_table, drop_stats_table, table_exists
from hourly_stats.models import Base
from hourly_stats.schema import (
    TEST_TABLE_DDL,
    IssueCode,
    compare_tables,
    expected_table,
    kind_for_type,
    reflect_table,
    validate_database,
    validate_ddl,
)

SQLITE_COLUMNS = [
    "id BIGINT NOT NULL",
    "dt INTEGER NOT NULL",
    "hour INTEGER NOT NULL",
    "user_id BIGINT NOT NULL",
    "action_id BIGINT NOT NULL",
    "sales REAL",
    "volume REAL",
    "pieces BIGINT",
    "add_time TIMESTAMP NOT NULL",
    "update_time TIMESTAMP NOT NULL",
]


def _create(engine, columns: list[str], name: str = "test_table") -> None:
    with engine.begin() as connection:
        connection.execute(text(f"CREATE TABLE {name} ({', '.join(columns)})"))


def _mysql_ddl(*replacements: tuple[str, str]) -> str:
    ddl = TEST_TABLE_DDL
    for old, new in replacements:
        assert old in ddl
        ddl = ddl.replace(old, new)
    return ddl


# DDL ----------------------------------------------------------------------


def test_canonical_ddl_matches() -> None:
    report = validate_ddl(TEST_TABLE_DDL)

    assert report.ok
    assert report.table == "test_table"
    report.raise_for_issues()


def test_unquoted_ddl_with_table_options_matches() -> None:
    ddl = """
    CREATE TABLE IF NOT EXISTS test_table (
      id BIGINT(20) NOT NULL, dt INT NOT NULL, hour INT NOT NULL,
      user_id BIGINT NOT NULL, action_id BIGINT NOT NULL,
      sales DOUBLE NULL, volume DOUBLE PRECISION, pieces BIGINT,
      add_time TIMESTAMP NOT NULL, update_time DATETIME NOT NULL
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
    """

    assert validate_ddl(ddl).ok


def test_missing_column_in_ddl() -> None:
    report = validate_ddl(_mysql_ddl(("  `pieces` bigint(20),\n", "")))

    assert report.codes() == [IssueCode.MISSING_COLUMN]
    assert report.issues[0].column == "pieces"


def test_wrong_type_in_ddl() -> None:
    report = validate_ddl(_mysql_ddl(("`hour` int(11)", "`hour` varchar(2)")))

    assert report.codes() == [IssueCode.TYPE_MISMATCH]
    assert "VARCHAR" in report.issues[0].message


def test_display_width_is_ignored() -> None:
    assert validate_ddl(_mysql_ddl(("`dt` int(11)", "`dt` int(8) unsigned"))).ok


def test_nullable_metric_declared_not_null() -> None:
    report = validate_ddl(_mysql_ddl(("`sales` double,", "`sales` double NOT NULL,")))

    assert report.codes() == [IssueCode.NULLABILITY_MISMATCH]
    assert str(report.issues_for("sales")[0]) == (
        "[NULLABILITY_MISMATCH] column 'sales' is NOT NULL, expected NULL"
    )


def test_primary_key_is_reported() -> None:
    ddl = _mysql_ddl(
        ("`update_time` timestamp NOT NULL\n", "`update_time` timestamp NOT NULL,\n  PRIMARY KEY (`id`)\n")
    )
    report = validate_ddl(ddl)

    assert report.codes() == [IssueCode.PRIMARY_KEY_MISMATCH]


def test_other_table_name_is_reported_first() -> None:
    report = validate_ddl(_mysql_ddl(("CREATE TABLE `test_table`", "CREATE TABLE `stats`")))

    assert report.codes() == [IssueCode.MISSING_TABLE]
    assert report.table == "stats"


def test_invalid_ddl_raises() -> None:
    with pytest.raises(ParseError):
        validate_ddl("CREATE TABLE test_table (id bigint")
    with pytest.raises(BindError):
        validate_ddl("CREATE TABLE test_table (id bigint, ID int)")


def test_raise_for_issues_lists_every_issue() -> None:
    report = validate_ddl(
        _mysql_ddl(("  `volume` double,\n", ""), ("`pieces` bigint(20)", "`pieces` int(11)"))
    )

    with pytest.raises(SchemaMismatchError) as excinfo:
        report.raise_for_issues()

    assert len(excinfo.value.issues) == 2
    assert "[MISSING_COLUMN] column 'volume' is missing" in str(excinfo.value)


# live database --------------------------------------------------------------


def test_table_created_from_model_matches(engine) -> None:
    Base.metadata.create_all(engine)

    report = validate_database(engine, table="test_table")

    assert report.ok, report.issues


def test_create_and_drop_stats_table(engine) -> None:
    assert create_stats_table(engine) is True
    assert create_stats_table(engine) is False
    assert table_exists(engine)
    assert validate_database(engine).ok

    assert drop_stats_table(engine) is True
    assert drop_stats_table(engine) is False
    assert not table_exists(engine)


def test_hand_written_table_matches(engine) -> None:
    _create(engine, SQLITE_COLUMNS)

    assert validate_database(engine).ok


def test_missing_table(engine) -> None:
    report = validate_database(engine)

    assert report.codes() == [IssueCode.MISSING_TABLE]
    assert reflect_table(engine, "test_table") is None


def test_configured_table_name(engine, monkeypatch) -> None:
    Base.metadata.create_all(engine)
    monkeypatch.setenv("STATS_TABLE", "Hourly_Stats")

    report = validate_database(engine)

    assert report.table == "hourly_stats"
    assert report.codes() == [IssueCode.MISSING_TABLE]
    assert report.issues[0].message == "table 'hourly_stats' does not exist"


def test_missing_and_unexpected_columns(engine) -> None:
    columns = [column for column in SQLITE_COLUMNS if not column.startswith("volume")]
    _create(engine, columns + ["note VARCHAR(20)"])

    report = validate_database(engine)

    assert report.codes() == [IssueCode.MISSING_COLUMN, IssueCode.UNEXPECTED_COLUMN]
    assert [issue.column for issue in report.issues] == ["volume", "note"]


def test_column_order(engine) -> None:
    columns = list(SQLITE_COLUMNS)
    columns[1], columns[2] = columns[2], columns[1]
    _create(engine, columns)

    report = validate_database(engine)

    assert report.codes() == [IssueCode.COLUMN_ORDER]
    assert "expected (id, dt, hour," in report.issues[0].message


def test_type_and_nullability(engine) -> None:
    columns = list(SQLITE_COLUMNS)
    columns[3] = "user_id INTEGER NOT NULL"
    columns[8] = "add_time TIMESTAMP"
    _create(engine, columns)

    report = validate_database(engine)

    assert report.codes() == [IssueCode.TYPE_MISMATCH, IssueCode.NULLABILITY_MISMATCH]
    assert report.issues_for("user_id")[0].message == (
        "column 'user_id' has type INT, expected BIGINT"
    )
    assert report.issues_for("add_time")[0].code is IssueCode.NULLABILITY_MISMATCH


def test_primary_key_on_live_table(engine) -> None:
    columns = list(SQLITE_COLUMNS)
    columns[0] = "id BIGINT NOT NULL PRIMARY KEY"
    _create(engine, columns)

    report = validate_database(engine)

    assert report.codes() == [IssueCode.PRIMARY_KEY_MISMATCH]
    assert report.issues[0].message == "primary key is (id), expected ()"


def test_unmappable_column_type(engine) -> None:
    _create(engine, SQLITE_COLUMNS + ["payload BLOB"])

    with pytest.raises(SchemaMismatchError, match="payload"):
        validate_database(engine)


def test_compare_against_custom_expectation() -> None:
    wanted = expected_table()
    actual = expected_table()
    actual.columns[5].set_nullable(False)

    report = compare_tables(wanted, actual)

    assert report.codes() == [IssueCode.NULLABILITY_MISMATCH]


# type mapping ---------------------------------------------------------------


@pytest.mark.parametrize(
    ("sa_type", "kind"),
    [
        (sqltypes.BigInteger(), DataTypeKind.BIGINT),
        (mysql.BIGINT(display_width=20), DataTypeKind.BIGINT),
        (sqltypes.Integer(), DataTypeKind.INT),
        (mysql.INTEGER(display_width=11), DataTypeKind.INT),
        (mysql.TINYINT(), DataTypeKind.SMALLINT),
        (sqltypes.SmallInteger(), DataTypeKind.SMALLINT),
        (mysql.DOUBLE(), DataTypeKind.DOUBLE),
        (sqltypes.REAL(), DataTypeKind.DOUBLE),
        (sqltypes.Float(), DataTypeKind.FLOAT),
        (sqltypes.Float(precision=53), DataTypeKind.DOUBLE),
        (sqltypes.Numeric(10, 2), DataTypeKind.DECIMAL),
        (mysql.TIMESTAMP(), DataTypeKind.TIMESTAMP),
        (sqltypes.DateTime(), DataTypeKind.TIMESTAMP),
        (sqltypes.Date(), DataTypeKind.DATE),
        (sqltypes.CHAR(4), DataTypeKind.CHAR),
        (sqltypes.String(20), DataTypeKind.VARCHAR),
        (sqltypes.Boolean(), DataTypeKind.BOOLEAN),
        (sqltypes.LargeBinary(), None),
    ],
)
def test_kind_for_type(sa_type, kind) -> None:
    assert kind_for_type(sa_type) is kind


def test_compare_tables_rejects_columns_it_cannot_look_up() -> None:
    def table(name: str) -> TableCatalog:
        return TableCatalog(
            id=0, name=name, columns=[ColumnCatalog(0, ColumnDesc(DataType(DataTypeKind.DOUBLE), "Sales"))]
        )

    with pytest.raises(CatalogError, match="cannot be looked up"):
        compare_tables(table("wanted"), table("actual"))
