"""Rendering of schema objects back into SQL text for each dialect."""

from __future__ import annotations

from typing import Iterable, List, Optional

from .model import (
    DESC,
    Column,
    ColumnKeyOption,
    ForeignKey,
    GeneratorError,
    GeneratorMode,
    Index,
    IndexOption,
    Sequence,
    Value,
    ValueType,
)


def data_type(column: Column) -> str:
    """The column's type as written in a column definition."""
    suffix = "[]" if column.array else ""
    if column.length is not None:
        if column.scale is not None:
            return f"{column.type_name}({column.length.raw}, {column.scale.raw}){suffix}"
        return f"{column.type_name}({column.length.raw}){suffix}"
    if column.type_name == "enum":
        return f"{column.type_name}({', '.join(column.enum_values)}){suffix}"
    return f"{column.type_name}{suffix}"


def sequence_clause(sequence: Sequence) -> str:
    """The options of an identity sequence, space separated."""
    parts: List[str] = []
    if sequence.name:
        parts.append(f"SEQUENCE NAME {sequence.name}")
    if sequence.start_with is not None:
        parts.append(f"START WITH {sequence.start_with}")
    if sequence.increment_by is not None:
        parts.append(f"INCREMENT BY {sequence.increment_by}")
    if sequence.min_value is not None:
        parts.append(f"MINVALUE {sequence.min_value}")
    if sequence.no_min_value:
        parts.append("NO MINVALUE")
    if sequence.max_value is not None:
        parts.append(f"MAXVALUE {sequence.max_value}")
    if sequence.no_max_value:
        parts.append("NO MAXVALUE")
    if sequence.cache is not None:
        parts.append(f"CACHE {sequence.cache}")
    if sequence.cycle:
        parts.append("CYCLE")
    if sequence.no_cycle:
        parts.append("NO CYCLE")
    return " ".join(parts)


def default_definition(value: Value) -> str:
    """A DEFAULT clause for the given literal."""
    kind = value.value_type
    if kind == ValueType.STR:
        return f"DEFAULT '{value.str_val}'"
    if kind == ValueType.BOOL:
        return f"DEFAULT {value.str_val}"
    if kind == ValueType.INT:
        return f"DEFAULT {value.int_val:d}"
    if kind == ValueType.FLOAT:
        return f"DEFAULT {value.float_val:f}"
    if kind == ValueType.BIT:
        return "DEFAULT b'1'" if value.bit_val else "DEFAULT b'0'"
    if kind == ValueType.VAL_ARG:  # NULL, CURRENT_TIMESTAMP, ...
        return f"DEFAULT {value.raw}"
    raise GeneratorError(f"unsupported default value type (valueType: '{int(kind)}')")


class SqlWriter:
    """Writes names, definitions and index statements in one dialect."""

    def __init__(self, mode: GeneratorMode) -> None:
        self.mode = mode

    def escape_sql_name(self, name: str) -> str:
        if self.mode == GeneratorMode.POSTGRES:
            return f'"{name}"'
        if self.mode == GeneratorMode.MSSQL:
            return f"[{name}]"
        return f"`{name}`"

    def escape_table_name(self, name: str) -> str:
        """Quote a table name, qualifying it with the default schema where needed."""
        if self.mode not in (GeneratorMode.POSTGRES, GeneratorMode.MSSQL):
            return self.escape_sql_name(name)
        schema_name, sep, table_name = name.partition(".")
        if not sep:
            table_name = schema_name
            schema_name = "public" if self.mode == GeneratorMode.POSTGRES else "dbo"
        return f"{self.escape_sql_name(schema_name)}.{self.escape_sql_name(table_name)}"

    def column_definition(self, column: Column, enable_unique: bool) -> str:
        """The full definition of a column, as used by ADD and CHANGE COLUMN."""
        parts = [self.escape_sql_name(column.name), data_type(column)]

        if column.unsigned:
            parts.append("UNSIGNED")
        if column.timezone:
            parts.append("WITH TIME ZONE")

        # MySQL wants CHARACTER SET and COLLATE before NULL / NOT NULL.
        if column.charset:
            parts.append(f"CHARACTER SET {column.charset}")
        if column.collate:
            parts.append(f"COLLATE {column.collate}")

        if column.identity is None and (
            column.not_null is True or column.key_option == ColumnKeyOption.PRIMARY
        ):
            parts.append("NOT NULL")
        elif column.not_null is False:
            parts.append("NULL")

        if column.default_def is not None and column.default_def.value is not None:
            try:
                parts.append(default_definition(column.default_def.value))
            except GeneratorError as err:
                raise GeneratorError(f"{err} in column: {column!r}") from err

        if column.auto_increment:
            parts.append("AUTO_INCREMENT")
        if column.on_update is not None:
            parts.append(f"ON UPDATE {column.on_update.raw}")
        if column.comment is not None:
            parts.append(f"COMMENT '{column.comment.raw}'")

        if column.check is not None:
            parts.append("CHECK")
            if column.check.not_for_replication:
                parts.append("NOT FOR REPLICATION")
            parts.append(f"({column.check.definition})")
            if column.check.no_inherit:
                parts.append("NO INHERIT")

        key = column.key_option
        if key == ColumnKeyOption.UNIQUE:
            if enable_unique:
                parts.append("UNIQUE")
        elif key == ColumnKeyOption.UNIQUE_KEY:
            if enable_unique:
                parts.append("UNIQUE KEY")
        elif key not in (ColumnKeyOption.NONE, ColumnKeyOption.PRIMARY):
            raise GeneratorError(
                f"unsupported column key (keyOption: '{int(key)}') in column: {column!r}"
            )

        if column.identity is not None and column.identity.behavior:
            parts.append(f"GENERATED {column.identity.behavior} AS IDENTITY")
            if column.sequence is not None:
                parts.append(f"({sequence_clause(column.sequence)})")
        elif self.mode == GeneratorMode.MSSQL and column.sequence is not None:
            identity = f"IDENTITY({column.sequence.start_with},{column.sequence.increment_by})"
            if column.identity is not None and column.identity.not_for_replication:
                identity += " NOT FOR REPLICATION"
            parts.append(identity)

        return " ".join(parts)

    def index_option_definition(self, options: List[IndexOption]) -> str:
        """Index options with a leading space, or an empty string."""
        if not options:
            return ""
        if self.mode == GeneratorMode.MYSQL:
            option = options[0]
            name = option.option_name
            if name == "parser":
                name = "WITH " + name
            raw = option.value.raw if option.value is not None else ""
            return f" {name} {raw}"
        if self.mode == GeneratorMode.MSSQL:
            rendered = ", ".join(
                f"{option.option_name} = {self._mssql_option_value(option.value)}"
                for option in options
            )
            return f" WITH ({rendered})"
        return ""

    @staticmethod
    def _mssql_option_value(value: Optional[Value]) -> str:
        if value is None:
            return ""
        if value.value_type == ValueType.BOOL:
            return "ON" if value.raw == "true" else "OFF"
        return value.raw

    def _index_columns(self, index: Index) -> Iterable[str]:
        for index_column in index.columns:
            column = self.escape_sql_name(index_column.column)
            if index_column.length is not None:
                column += f"({index_column.length:d})"
            if index_column.direction == DESC:
                column += f" {index_column.direction}"
            yield column

    def add_index(self, table: str, index: Index) -> str:
        """A statement that adds the index (or primary key) to the table."""
        unique_option = " UNIQUE" if index.unique else ""
        clustered_option = " CLUSTERED" if index.clustered else " NONCLUSTERED"
        columns = ", ".join(self._index_columns(index))
        option_definition = self.index_option_definition(index.options)

        if self.mode == GeneratorMode.MSSQL:
            partition = ""
            if not index.primary:
                ddl = (
                    f"CREATE{unique_option}{clustered_option} INDEX "
                    f"{self.escape_sql_name(index.name)} ON {self.escape_table_name(table)}"
                )
                # A partition is only valid with CREATE INDEX.
                if index.partition.partition_name:
                    partition += f" ON {self.escape_sql_name(index.partition.partition_name)}"
                    if index.partition.column:
                        partition += f" ({self.escape_sql_name(index.partition.column)})"
            else:
                ddl = f"ALTER TABLE {self.escape_table_name(table)} ADD"
                if index.name != "PRIMARY":
                    ddl += f" CONSTRAINT {self.escape_sql_name(index.name)}"
                ddl += f" {index.index_type}{clustered_option}"
            return f"{ddl} ({columns}){option_definition}{partition}"

        ddl = f"ALTER TABLE {self.escape_table_name(table)} ADD {index.index_type}"
        if not index.primary:
            ddl += f" {self.escape_sql_name(index.name)}"
        return f"{ddl} ({columns}){option_definition}"

    def foreign_key_definition(self, foreign_key: ForeignKey) -> str:
        """A CONSTRAINT ... FOREIGN KEY clause for ALTER TABLE ... ADD."""
        parts = [f"CONSTRAINT {self.escape_sql_name(foreign_key.constraint_name)} FOREIGN KEY"]
        if foreign_key.index_name:
            parts.append(self.escape_sql_name(foreign_key.index_name))
        index_columns = ",".join(self.escape_sql_name(c) for c in foreign_key.index_columns)
        reference_columns = ",".join(
            self.escape_sql_name(c) for c in foreign_key.reference_columns
        )
        parts.append(
            f"({index_columns}) REFERENCES "
            f"{self.escape_table_name(foreign_key.reference_name)} ({reference_columns})"
        )
        if foreign_key.on_delete:
            parts.append(f"ON DELETE {foreign_key.on_delete}")
        if foreign_key.on_update:
            parts.append(f"ON UPDATE {foreign_key.on_update}")
        if foreign_key.not_for_replication:
            parts.append("NOT FOR REPLICATION")
        return " ".join(parts)

    def drop_index(self, table_name: str, index_name: str, constraint: bool) -> str:
        """A statement dropping the index; empty for dialects without one."""
        if self.mode == GeneratorMode.MYSQL:
            return (
                f"ALTER TABLE {self.escape_table_name(table_name)} "
                f"DROP INDEX {self.escape_sql_name(index_name)}"
            )
        if self.mode == GeneratorMode.POSTGRES:
            if constraint:
                return (
                    f"ALTER TABLE {self.escape_table_name(table_name)} "
                    f"DROP CONSTRAINT {self.escape_sql_name(index_name)}"
                )
            return f"DROP INDEX {self.escape_sql_name(index_name)}"
        if self.mode == GeneratorMode.MSSQL:
            return (
                f"DROP INDEX {self.escape_sql_name(index_name)} "
                f"ON {self.escape_table_name(table_name)}"
            )
        return ""