"""Statements that turn an existing table into its desired definition."""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional

from .compare import (
    are_same_check_definition,
    are_same_default_value,
    are_same_foreign_keys,
    are_same_identity_definition,
    are_same_indexes,
    are_same_primary_keys,
    have_same_column_definition,
    have_same_data_type,
    is_primary_key,
    not_null,
)
from .model import (
    CheckDefinition,
    Column,
    ForeignKey,
    GeneratorError,
    GeneratorMode,
    Index,
    Table,
)
from .render import SqlWriter, data_type, default_definition, sequence_clause


def _find_column(columns: List[Column], name: str) -> Optional[Column]:
    return next((column for column in columns if column.name == name), None)


def _find_index(indexes: List[Index], name: str) -> Optional[Index]:
    return next((index for index in indexes if index.name == name), None)


def _find_check(checks: List[CheckDefinition], name: str) -> Optional[CheckDefinition]:
    return next((check for check in checks if check.constraint_name == name), None)


def _find_foreign_key(foreign_keys: List[ForeignKey], name: str) -> Optional[ForeignKey]:
    return next((fk for fk in foreign_keys if fk.constraint_name == name), None)


def _unqualified(name: str) -> str:
    """The table name without its schema qualifier."""
    _, sep, table = name.partition(".")
    return table if sep else name


def _position_clause(writer: SqlWriter, columns: List[Column], position: int) -> str:
    if position == 0:
        return " FIRST"
    return " AFTER " + writer.escape_sql_name(columns[position - 1].name)


def _diff_mysql_column(
    writer: SqlWriter,
    current: Table,
    desired: Table,
    position: int,
    current_column: Column,
    desired_column: Column,
) -> List[str]:
    ddls: List[str] = []
    table = writer.escape_table_name(desired.name)
    current_pos = current_column.position
    desired_pos = desired_column.position
    change_order = (
        current_pos > desired_pos
        and current_pos - desired_pos > len(current.columns) - len(desired.columns)
    )

    # Type and order changes; AUTO_INCREMENT and UNIQUE KEY are handled separately.
    if (
        not have_same_column_definition(writer.mode, current_column, desired_column)
        or not are_same_default_value(current_column.default_def, desired_column.default_def)
        or change_order
    ):
        definition = writer.column_definition(desired_column, False)
        ddl = (
            f"ALTER TABLE {table} CHANGE COLUMN "
            f"{writer.escape_sql_name(current_column.name)} {definition}"
        )
        if change_order:
            ddl += _position_clause(writer, desired.columns, position)
        ddls.append(ddl)

    current_index = _find_index(current.indexes, desired_column.name)
    if (
        desired_column.key_option.is_unique()
        and not current_column.key_option.is_unique()
        and current_index is None
    ):
        name = writer.escape_sql_name(desired_column.name)
        ddls.append(f"ALTER TABLE {table} ADD UNIQUE KEY {name}({name})")
    return ddls


def _diff_postgres_column(
    writer: SqlWriter,
    current: Table,
    desired: Table,
    current_column: Column,
    desired_column: Column,
) -> List[str]:
    ddls: List[str] = []
    mode = writer.mode
    table = writer.escape_table_name(desired.name)
    current_table = writer.escape_table_name(current.name)
    current_name = writer.escape_sql_name(current_column.name)
    desired_name = writer.escape_sql_name(desired_column.name)

    if not have_same_data_type(mode, current_column, desired_column):
        ddls.append(
            f"ALTER TABLE {table} ALTER COLUMN {current_name} TYPE {data_type(desired_column)}"
        )

    # A primary key implies NOT NULL.
    if not is_primary_key(current_column, current):
        current_not_null = not_null(mode, current_column)
        desired_not_null = not_null(mode, desired_column)
        if current_not_null and not desired_not_null:
            ddls.append(f"ALTER TABLE {table} ALTER COLUMN {current_name} DROP NOT NULL")
        elif not current_not_null and desired_not_null:
            ddls.append(f"ALTER TABLE {table} ALTER COLUMN {current_name} SET NOT NULL")

    if not are_same_identity_definition(current_column.identity, desired_column.identity):
        if current_column.identity is None:
            alter = (
                f"ALTER TABLE {table} ALTER COLUMN {desired_name} "
                f"ADD GENERATED {desired_column.identity.behavior} AS IDENTITY"
            )
            if desired_column.sequence is not None:
                alter += f" ({sequence_clause(desired_column.sequence)})"
            ddls.append(alter)
        elif desired_column.identity is None:
            ddls.append(
                f"ALTER TABLE {current_table} ALTER COLUMN {current_name} "
                "DROP IDENTITY IF EXISTS"
            )
        else:
            # Changing the sequence is not supported.
            ddls.append(
                f"ALTER TABLE {table} ALTER COLUMN {desired_name} "
                f"SET GENERATED {desired_column.identity.behavior}"
            )

    if not are_same_default_value(current_column.default_def, desired_column.default_def):
        desired_default = desired_column.default_def
        if desired_default is None or desired_default.value is None:
            ddls.append(f"ALTER TABLE {current_table} ALTER COLUMN {current_name} DROP DEFAULT")
        else:
            definition = default_definition(desired_default.value)
            ddls.append(f"ALTER TABLE {current_table} ALTER COLUMN {current_name} SET {definition}")

    constraint_name = f"{_unqualified(desired.name)}_{desired_column.name}_check"
    current_check = _find_check(current.checks, constraint_name)
    if not are_same_check_definition(current_check, desired_column.check):
        if current_check is not None:
            ddls.append(f"ALTER TABLE {table} DROP CONSTRAINT {constraint_name}")
        if desired_column.check is not None:
            ddl = (
                f"ALTER TABLE {table} ADD CONSTRAINT {constraint_name} "
                f"CHECK ({desired_column.check.definition})"
            )
            if desired_column.check.no_inherit:
                ddl += " NO INHERIT"
            ddls.append(ddl)
    return ddls


def _diff_mssql_column(
    writer: SqlWriter,
    current: Table,
    desired: Table,
    current_column: Column,
    desired_column: Column,
) -> List[str]:
    ddls: List[str] = []
    table = writer.escape_table_name(desired.name)
    current_table = writer.escape_table_name(current.name)
    current_name = writer.escape_sql_name(current_column.name)

    if not are_same_check_definition(current_column.check, desired_column.check):
        default_name = f"{desired.name.replace('dbo.', '', 1)}_{desired_column.name}_check"
        if current_column.check is not None:
            ddls.append(
                f"ALTER TABLE {table} DROP CONSTRAINT {current_column.check.constraint_name}"
            )
        if desired_column.check is not None:
            name = desired_column.check.constraint_name or default_name
            replication = " NOT FOR REPLICATION" if desired_column.check.not_for_replication else ""
            ddls.append(
                f"ALTER TABLE {table} ADD CONSTRAINT {name} "
                f"CHECK{replication} ({desired_column.check.definition})"
            )

    if not are_same_identity_definition(current_column.identity, desired_column.identity):
        if current_column.identity is not None:
            ddls.append(f"ALTER TABLE {current_table} DROP COLUMN {current_name}")
        if desired_column.identity is not None:
            definition = writer.column_definition(desired_column, True)
            ddls.append(f"ALTER TABLE {table} ADD {definition}")

    if not are_same_default_value(current_column.default_def, desired_column.default_def):
        if current_column.default_def is not None:
            ddls.append(
                f"ALTER TABLE {current_table} DROP CONSTRAINT "
                f"{writer.escape_sql_name(current_column.default_def.constraint_name)}"
            )
        desired_default = desired_column.default_def
        if desired_default is not None and desired_default.value is not None:
            definition = default_definition(desired_default.value)
            if desired_default.constraint_name:
                ddls.append(
                    f"ALTER TABLE {current_table} ADD CONSTRAINT "
                    f"{writer.escape_sql_name(desired_default.constraint_name)} "
                    f"{definition} FOR {current_name}"
                )
            else:
                ddls.append(f"ALTER TABLE {current_table} ADD {definition} FOR {current_name}")
    return ddls


def _diff_columns(writer: SqlWriter, current: Table, desired: Table) -> List[str]:
    ddls: List[str] = []
    mode = writer.mode
    table = writer.escape_table_name(desired.name)
    for position, original in enumerate(desired.columns):
        current_column = _find_column(current.columns, original.name)
        desired_column = original
        if current_column is None or not current_column.auto_increment:
            # AUTO_INCREMENT may need a key first; it is added after the keys.
            desired_column = replace(original, auto_increment=False)

        if current_column is None:
            definition = writer.column_definition(desired_column, True)
            if mode == GeneratorMode.MSSQL:
                ddl = f"ALTER TABLE {table} ADD {definition}"
            else:
                ddl = f"ALTER TABLE {table} ADD COLUMN {definition}"
            if mode == GeneratorMode.MYSQL:
                ddl += _position_clause(writer, desired.columns, position)
            ddls.append(ddl)
        elif mode == GeneratorMode.MYSQL:
            ddls.extend(
                _diff_mysql_column(writer, current, desired, position, current_column, desired_column)
            )
        elif mode == GeneratorMode.POSTGRES:
            ddls.extend(_diff_postgres_column(writer, current, desired, current_column, desired_column))
        elif mode == GeneratorMode.MSSQL:
            ddls.extend(_diff_mssql_column(writer, current, desired, current_column, desired_column))
    return ddls


def _drop_old_auto_increments(writer: SqlWriter, current: Table, desired: Table) -> List[str]:
    ddls: List[str] = []
    for current_column in current.columns:
        desired_column = _find_column(desired.columns, current_column.name)
        if current_column.auto_increment and (
            desired_column is None or not desired_column.auto_increment
        ):
            definition = writer.column_definition(
                replace(current_column, auto_increment=False), False
            )
            ddls.append(
                f"ALTER TABLE {writer.escape_table_name(current.name)} CHANGE COLUMN "
                f"{writer.escape_sql_name(current_column.name)} {definition}"
            )
    return ddls


def _diff_primary_key(writer: SqlWriter, current: Table, desired: Table) -> List[str]:
    ddls: List[str] = []
    current_key = current.primary_key()
    desired_key = desired.primary_key()
    if are_same_primary_keys(current_key, desired_key):
        return ddls
    table = writer.escape_table_name(desired.name)
    if current_key is not None:
        if writer.mode == GeneratorMode.MYSQL:
            ddls.append(f"ALTER TABLE {table} DROP PRIMARY KEY")
        elif writer.mode == GeneratorMode.POSTGRES:
            constraint = writer.escape_sql_name(_unqualified(desired.name) + "_pkey")
            ddls.append(f"ALTER TABLE {table} DROP CONSTRAINT {constraint}")
    if desired_key is not None:
        ddls.append(writer.add_index(desired.name, desired_key))
    return ddls


def _diff_indexes(writer: SqlWriter, current: Table, desired: Table) -> List[str]:
    ddls: List[str] = []
    for desired_index in desired.indexes:
        if desired_index.primary:
            continue
        current_index = _find_index(current.indexes, desired_index.name)
        if current_index is None:
            ddls.append(writer.add_index(desired.name, desired_index))
        elif not are_same_indexes(current_index, desired_index):
            ddls.append(
                writer.drop_index(desired.name, desired_index.name, desired_index.constraint)
            )
            ddls.append(writer.add_index(desired.name, desired_index))
    return ddls


def _add_new_auto_increments(writer: SqlWriter, current: Table, desired: Table) -> List[str]:
    ddls: List[str] = []
    for desired_column in desired.columns:
        current_column = _find_column(current.columns, desired_column.name)
        if desired_column.auto_increment and (
            current_column is None or not current_column.auto_increment
        ):
            definition = writer.column_definition(desired_column, False)
            ddls.append(
                f"ALTER TABLE {writer.escape_table_name(current.name)} CHANGE COLUMN "
                f"{writer.escape_sql_name(desired_column.name)} {definition}"
            )
    return ddls


def _diff_foreign_keys(writer: SqlWriter, current: Table, desired: Table) -> List[str]:
    ddls: List[str] = []
    table = writer.escape_table_name(desired.name)
    for desired_key in desired.foreign_keys:
        if not desired_key.constraint_name:
            columns = "[" + " ".join(desired_key.index_columns) + "]"
            raise GeneratorError(
                f"Foreign key without constraint symbol was found in table '{desired.name}' "
                f"(index name: '{desired_key.index_name}', columns: {columns}). "
                "Specify the constraint symbol to identify the foreign key."
            )
        current_key = _find_foreign_key(current.foreign_keys, desired_key.constraint_name)
        if current_key is None:
            ddls.append(f"ALTER TABLE {table} ADD {writer.foreign_key_definition(desired_key)}")
        elif not are_same_foreign_keys(writer.mode, current_key, desired_key):
            name = writer.escape_sql_name(current_key.constraint_name)
            if writer.mode == GeneratorMode.MYSQL:
                ddls.append(f"ALTER TABLE {table} DROP FOREIGN KEY {name}")
            elif writer.mode in (GeneratorMode.POSTGRES, GeneratorMode.MSSQL):
                ddls.append(f"ALTER TABLE {table} DROP CONSTRAINT {name}")
            ddls.append(f"ALTER TABLE {table} ADD {writer.foreign_key_definition(desired_key)}")
    return ddls


def diff_table(writer: SqlWriter, current: Table, desired: Table) -> List[str]:
    """DDLs that alter the existing ``current`` table into ``desired``.

    Neither table is modified. Raises GeneratorError when a definition
    cannot be rendered or a foreign key has no constraint name.
    """
    is_mysql = writer.mode == GeneratorMode.MYSQL
    ddls = _diff_columns(writer, current, desired)
    if is_mysql:
        # Old AUTO_INCREMENT must go before its key is dropped.
        ddls.extend(_drop_old_auto_increments(writer, current, desired))
    ddls.extend(_diff_primary_key(writer, current, desired))
    ddls.extend(_diff_indexes(writer, current, desired))
    if is_mysql:
        ddls.extend(_add_new_auto_increments(writer, current, desired))
    ddls.extend(_diff_foreign_keys(writer, current, desired))
    return ddls