"""Equality rules used to decide whether schema objects need altering."""

from __future__ import annotations

from typing import Optional

from .model import (
    ASC,
    CheckDefinition,
    Column,
    ColumnKeyOption,
    DefaultDefinition,
    ForeignKey,
    GeneratorMode,
    Identity,
    Index,
    IndexOption,
    Policy,
    Table,
    Trigger,
    Value,
    ValueType,
)

_DATA_TYPE_ALIASES = {
    "bool": "boolean",
    "int": "integer",
    "char": "character",
    "varchar": "character varying",
}

_MYSQL_DATA_TYPE_ALIASES = {
    "boolean": "tinyint",
}


def normalize_data_type(mode: GeneratorMode, data_type: str) -> str:
    """Resolve type aliases so equivalent spellings compare equal."""
    data_type = _DATA_TYPE_ALIASES.get(data_type, data_type)
    if mode == GeneratorMode.MYSQL:
        data_type = _MYSQL_DATA_TYPE_ALIASES.get(data_type, data_type)
    return data_type


def have_same_data_type(mode: GeneratorMode, current: Column, desired: Column) -> bool:
    # A length is compared only when both sides set it explicitly; scale is not compared.
    return (
        normalize_data_type(mode, current.type_name) == normalize_data_type(mode, desired.type_name)
        and current.enum_values == desired.enum_values
        and (
            current.length is None
            or desired.length is None
            or current.length.int_val == desired.length.int_val
        )
        and current.array == desired.array
    )


def have_same_column_definition(mode: GeneratorMode, current: Column, desired: Column) -> bool:
    """Compare column definitions, ignoring AUTO_INCREMENT and UNIQUE KEY."""
    current_not_null = current.not_null is True
    desired_not_null = desired.not_null is True or desired.key_option == ColumnKeyOption.PRIMARY
    return (
        have_same_data_type(mode, current, desired)
        and current.unsigned == desired.unsigned
        and current_not_null == desired_not_null
        and current.timezone == desired.timezone
        and current.check is desired.check
        and (desired.charset == "" or current.charset == desired.charset)
        and (desired.collate == "" or current.collate == desired.collate)
        and current.on_update == desired.on_update
        and current.comment == desired.comment
    )


def are_same_check_definition(
    check_a: Optional[CheckDefinition], check_b: Optional[CheckDefinition]
) -> bool:
    if check_a is None or check_b is None:
        return check_a is None and check_b is None
    return (
        check_a.definition == check_b.definition
        and check_a.not_for_replication == check_b.not_for_replication
        and check_a.no_inherit == check_b.no_inherit
    )


def are_same_identity_definition(
    identity_a: Optional[Identity], identity_b: Optional[Identity]
) -> bool:
    if identity_a is None or identity_b is None:
        return identity_a is None and identity_b is None
    return (
        identity_a.behavior == identity_b.behavior
        and identity_a.not_for_replication == identity_b.not_for_replication
    )


def is_null_value(value: Optional[Value]) -> bool:
    return value is not None and value.value_type == ValueType.VAL_ARG and value.raw == "null"


def are_same_value(current: Optional[Value], desired: Optional[Value]) -> bool:
    if current is None or desired is None:
        return current is None and desired is None
    # The reported type is unreliable (-1 may come back as '-1'), so compare raw text.
    current_raw = current.raw
    desired_raw = desired.raw
    if desired.value_type == ValueType.FLOAT and len(current_raw) > len(desired_raw):
        # Round "0.00" to "0.0" for comparison with the desired value.
        current_raw = current_raw[: len(desired_raw)]
    return current_raw == desired_raw


def are_same_default_value(
    current_default: Optional[DefaultDefinition],
    desired_default: Optional[DefaultDefinition],
) -> bool:
    current = None
    desired = None
    if current_default is not None and not is_null_value(current_default.value):
        current = current_default.value
    if desired_default is not None and not is_null_value(desired_default.value):
        desired = desired_default.value
    return are_same_value(current, desired)


def _squash(text: str) -> str:
    return text.replace(" ", "").lower()


def are_same_trigger_definition(trigger_a: Trigger, trigger_b: Trigger) -> bool:
    if trigger_a.time != trigger_b.time:
        return False
    if list(trigger_a.event) != list(trigger_b.event):
        return False
    if trigger_a.table_name != trigger_b.table_name:
        return False
    if len(trigger_a.body) != len(trigger_b.body):
        return False
    return all(_squash(a) == _squash(b) for a, b in zip(trigger_a.body, trigger_b.body))


def _find_option(options: list, name: str) -> Optional[IndexOption]:
    return next((option for option in options if option.option_name == name), None)


def are_same_indexes(index_a: Index, index_b: Index) -> bool:
    if index_a.unique != index_b.unique or index_a.primary != index_b.primary:
        return False
    if len(index_a.columns) != len(index_b.columns):
        return False
    for column_a, column_b in zip(index_a.columns, index_b.columns):
        direction_a = column_a.direction or ASC
        direction_b = column_b.direction or ASC
        if column_a.column != column_b.column or direction_a != direction_b:
            return False
    if index_a.where != index_b.where:
        return False
    if list(index_a.included) != list(index_b.included):
        return False

    for option_b in index_b.options:
        option_a = _find_option(index_a.options, option_b.option_name)
        if option_a is None or not are_same_value(option_a.value, option_b.value):
            return False

    if index_a.constraint != index_b.constraint:
        return False
    options_a, options_b = index_a.constraint_options, index_b.constraint_options
    if options_a is not None and options_b is not None:
        if options_a.deferrable != options_b.deferrable:
            return False
        if options_a.initially_deferred != options_b.initially_deferred:
            return False
    return True


def are_same_primary_keys(primary_key_a: Optional[Index], primary_key_b: Optional[Index]) -> bool:
    if primary_key_a is not None and primary_key_b is not None:
        return are_same_indexes(primary_key_a, primary_key_b)
    return primary_key_a is None and primary_key_b is None


def normalize_referential_action(mode: GeneratorMode, action: str) -> str:
    """Fill in the implicit ON UPDATE / ON DELETE action of the dialect."""
    if mode in (GeneratorMode.POSTGRES, GeneratorMode.MSSQL) and action == "":
        return "NO ACTION"
    return action


def are_same_foreign_keys(
    mode: GeneratorMode, foreign_key_a: ForeignKey, foreign_key_b: ForeignKey
) -> bool:
    # Index and reference columns are not compared.
    return (
        normalize_referential_action(mode, foreign_key_a.on_update)
        == normalize_referential_action(mode, foreign_key_b.on_update)
        and normalize_referential_action(mode, foreign_key_a.on_delete)
        == normalize_referential_action(mode, foreign_key_b.on_delete)
        and foreign_key_a.not_for_replication == foreign_key_b.not_for_replication
    )


def are_same_policies(policy_a: Policy, policy_b: Policy) -> bool:
    if policy_a.scope.lower() != policy_b.scope.lower():
        return False
    if policy_a.permissive.lower() != policy_b.permissive.lower():
        return False
    if policy_a.using.lower() != policy_b.using.lower():
        return f"({policy_a.using})" == policy_b.using
    if policy_a.with_check.lower() != policy_b.with_check.lower():
        return f"({policy_a.with_check})" == policy_b.with_check
    if len(policy_a.roles) != len(policy_b.roles):
        return False
    return all(
        a.lower() == b.lower() for a, b in zip(sorted(policy_a.roles), sorted(policy_b.roles))
    )


def is_primary_key(column: Column, table: Table) -> bool:
    if column.key_option == ColumnKeyOption.PRIMARY:
        return True
    return any(
        index_column.column == column.name
        for index in table.indexes
        if index.primary
        for index_column in index.columns
    )


def not_null(mode: GeneratorMode, column: Column) -> bool:
    """Whether the column is NOT NULL, counting Postgres serial types as such."""
    if column.not_null is None:
        if mode == GeneratorMode.POSTGRES:
            return column.type_name in ("serial", "bigserial")
        return False
    return column.not_null