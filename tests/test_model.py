import pytest

from ddlsync.model import (
    AddIndex,
    Column,
    ColumnKeyOption,
    CreateTable,
    GeneratorError,
    Index,
    IndexColumn,
    Table,
    Trigger,
    TypeDef,
)


@pytest.mark.parametrize(
    "option,expected",
    [
        (ColumnKeyOption.UNIQUE, True),
        (ColumnKeyOption.UNIQUE_KEY, True),
        (ColumnKeyOption.PRIMARY, False),
        (ColumnKeyOption.NONE, False),
        (ColumnKeyOption.KEY, False),
    ],
)
def test_is_unique(option, expected):
    assert option.is_unique() == expected


def test_primary_key_from_index():
    pk = Index(name="pk_users", primary=True, columns=[IndexColumn("id")])
    table = Table(
        name="users",
        columns=[Column("id", key_option=ColumnKeyOption.PRIMARY)],
        indexes=[Index(name="idx_name", columns=[IndexColumn("name")]), pk],
    )
    assert table.primary_key() is pk


def test_primary_key_from_columns():
    table = Table(
        name="users",
        columns=[
            Column("a", key_option=ColumnKeyOption.PRIMARY),
            Column("b"),
            Column("c", key_option=ColumnKeyOption.PRIMARY),
        ],
    )
    pk = table.primary_key()
    assert pk.name == "PRIMARY"
    assert pk.index_type == "primary key"
    assert [c.column for c in pk.columns] == ["a", "c"]
    assert pk.primary and pk.unique and pk.clustered


def test_primary_key_absent():
    table = Table(name="t", columns=[Column("a", key_option=ColumnKeyOption.UNIQUE)])
    assert table.primary_key() is None


def test_ddl_statements_kept():
    table = Table(name="t")
    create = CreateTable(statement="CREATE TABLE t (a int)", table=table)
    add = AddIndex(statement="ALTER TABLE t ADD INDEX i (a)", table_name="t", index=Index("i"))
    type_def = TypeDef(statement="CREATE TYPE mood", name="mood")
    assert create.statement == "CREATE TABLE t (a int)"
    assert add.constraint is False
    assert type_def.name == "mood"


def test_trigger_lists_not_shared():
    first = Trigger(statement="s", name="a", table_name="t", time="before")
    second = Trigger(statement="s", name="b", table_name="t", time="before")
    first.event.append("insert")
    assert second.event == []


def test_generator_error_carries_message():
    error = GeneratorError("boom")
    assert str(error) == "boom"
    assert error.args == ("boom",)
    with pytest.raises(Exception) as excinfo:
        raise error
    assert excinfo.value is error