from ddlsync.compare import (
    are_same_check_definition,
    are_same_default_value,
    are_same_foreign_keys,
    are_same_identity_definition,
    are_same_indexes,
    are_same_policies,
    are_same_primary_keys,
    are_same_trigger_definition,
    are_same_value,
    have_same_column_definition,
    have_same_data_type,
    is_null_value,
    is_primary_key,
    normalize_data_type,
    normalize_referential_action,
    not_null,
)
from ddlsync.model import (
    CheckDefinition,
    Column,
    ColumnKeyOption,
    ConstraintOptions,
    DefaultDefinition,
    ForeignKey,
    GeneratorMode,
    Identity,
    Index,
    IndexColumn,
    IndexOption,
    Policy,
    Table,
    Trigger,
    Value,
    ValueType,
)

MYSQL = GeneratorMode.MYSQL
PG = GeneratorMode.POSTGRES


def int_value(raw):
    return Value(ValueType.INT, raw, int_val=int(raw))


def test_normalize_data_type():
    assert normalize_data_type(PG, "varchar") == "character varying"
    assert normalize_data_type(PG, "bool") == "boolean"
    assert normalize_data_type(MYSQL, "bool") == "tinyint"
    assert normalize_data_type(MYSQL, "text") == "text"


def test_same_data_type_alias_and_length():
    a = Column("x", type_name="int")
    b = Column("x", type_name="integer", length=int_value("11"))
    assert have_same_data_type(PG, a, b)
    c = Column("x", type_name="integer", length=int_value("4"))
    assert not have_same_data_type(PG, b, c)
    assert not have_same_data_type(PG, a, Column("x", type_name="int", array=True))


def test_same_column_definition_primary_implies_not_null():
    current = Column("id", type_name="int", not_null=True)
    desired = Column("id", type_name="int", key_option=ColumnKeyOption.PRIMARY)
    assert have_same_column_definition(MYSQL, current, desired)
    assert not have_same_column_definition(MYSQL, Column("id", type_name="int"), desired)


def test_same_column_definition_charset_only_when_explicit():
    current = Column("n", type_name="text", charset="utf8mb4")
    assert have_same_column_definition(MYSQL, current, Column("n", type_name="text"))
    assert not have_same_column_definition(
        MYSQL, current, Column("n", type_name="text", charset="latin1")
    )


def test_same_column_definition_check_identity():
    check = CheckDefinition(definition="x > 0")
    assert have_same_column_definition(
        MYSQL, Column("x", check=check), Column("x", check=check)
    )
    assert not have_same_column_definition(
        MYSQL, Column("x", check=check), Column("x", check=CheckDefinition(definition="x > 0"))
    )


def test_check_and_identity_definitions():
    assert are_same_check_definition(None, None)
    assert not are_same_check_definition(CheckDefinition("a"), None)
    assert are_same_check_definition(CheckDefinition("a"), CheckDefinition("a"))
    assert not are_same_check_definition(
        CheckDefinition("a"), CheckDefinition("a", no_inherit=True)
    )
    assert are_same_identity_definition(Identity("ALWAYS"), Identity("ALWAYS"))
    assert not are_same_identity_definition(Identity("ALWAYS"), Identity("BY DEFAULT"))
    assert not are_same_identity_definition(None, Identity("ALWAYS"))


def test_null_value_and_defaults():
    null = Value(ValueType.VAL_ARG, "null")
    assert is_null_value(null)
    assert not is_null_value(Value(ValueType.STR, "null"))
    assert are_same_default_value(DefaultDefinition(null), None)
    assert not are_same_default_value(DefaultDefinition(int_value("1")), None)


def test_are_same_value_float_rounding():
    current = Value(ValueType.STR, "0.00")
    desired = Value(ValueType.FLOAT, "0.0", float_val=0.0)
    assert are_same_value(current, desired)
    assert not are_same_value(Value(ValueType.STR, "0.00"), Value(ValueType.STR, "0.0"))
    assert are_same_value(Value(ValueType.STR, "-1"), int_value("-1"))


def test_trigger_body_ignores_case_and_spaces():
    a = Trigger("s", "tr", "t", "before", ["insert"], ["SET NEW.a = 1"])
    b = Trigger("s", "tr", "t", "before", ["insert"], ["set new.a=1"])
    assert are_same_trigger_definition(a, b)
    c = Trigger("s", "tr", "t", "after", ["insert"], ["set new.a=1"])
    assert not are_same_trigger_definition(a, c)


def test_indexes_default_direction():
    a = Index("i", columns=[IndexColumn("x")])
    b = Index("i", columns=[IndexColumn("x", direction="asc")])
    assert are_same_indexes(a, b)
    assert b.columns[0].direction == "asc"
    assert a.columns[0].direction == ""
    assert not are_same_indexes(a, Index("i", columns=[IndexColumn("x", direction="desc")]))


def test_indexes_options_and_constraints():
    opt = IndexOption("fillfactor", int_value("70"))
    a = Index("i", options=[opt])
    assert are_same_indexes(a, Index("i"))
    assert not are_same_indexes(Index("i"), a)
    c1 = Index("i", constraint_options=ConstraintOptions(deferrable=True))
    c2 = Index("i", constraint_options=ConstraintOptions(deferrable=False))
    assert not are_same_indexes(c1, c2)
    assert not are_same_indexes(Index("i", where="a > 1"), Index("i"))


def test_primary_keys():
    assert are_same_primary_keys(None, None)
    assert not are_same_primary_keys(Index("p", primary=True), None)


def test_foreign_keys_and_actions():
    assert normalize_referential_action(PG, "") == "NO ACTION"
    assert normalize_referential_action(MYSQL, "") == ""
    assert are_same_foreign_keys(PG, ForeignKey(on_delete="NO ACTION"), ForeignKey())
    assert not are_same_foreign_keys(MYSQL, ForeignKey(on_delete="NO ACTION"), ForeignKey())


def test_is_primary_key_and_not_null():
    table = Table("t", indexes=[Index("pk", primary=True, columns=[IndexColumn("id")])])
    assert is_primary_key(Column("id"), table)
    assert not is_primary_key(Column("x"), table)
    assert not_null(PG, Column("id", type_name="serial"))
    assert not not_null(MYSQL, Column("id", type_name="serial"))
    assert not not_null(PG, Column("id", type_name="serial", not_null=False))