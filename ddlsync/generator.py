"""Generation of DDLs that move a current schema to a desired one."""

from __future__ import annotations

import copy
from dataclasses import replace
from typing import Iterable, List, Optional

from .compare import (
    are_same_indexes,
    are_same_policies,
    are_same_trigger_definition,
)
from .model import (
    DDL,
    AddForeignKey,
    AddIndex,
    AddPolicy,
    AddPrimaryKey,
    Column,
    ColumnKeyOption,
    CreateIndex,
    CreateTable,
    ForeignKey,
    GeneratorError,
    GeneratorMode,
    Index,
    Policy,
    Table,
    Trigger,
    TypeDef,
    View,
)
from .render import SqlWriter
from .table_diff import diff_table


def _find_table(tables: List[Table], name: str) -> Optional[Table]:
    return next((table for table in tables if table.name == name), None)


def _find_index(indexes: List[Index], name: str) -> Optional[Index]:
    return next((index for index in indexes if index.name == name), None)


def _find_policy(policies: List[Policy], name: str) -> Optional[Policy]:
    return next((policy for policy in policies if policy.name == name), None)


def _find_named(items: Iterable, name: str):
    return next((item for item in items if item.name == name), None)


def _foreign_key_index_names(foreign_keys: List[ForeignKey]) -> List[str]:
    names = []
    for foreign_key in foreign_keys:
        if foreign_key.index_name:
            names.append(foreign_key.index_name)
        elif foreign_key.constraint_name:
            names.append(foreign_key.constraint_name)
    return names


def convert_ddls_to_tables(ddls: Iterable[DDL]) -> List[Table]:
    """Build the tables that a sequence of DDLs describes.

    Tables are copied, so the DDLs themselves are left untouched.
    """
    tables: List[Table] = []
    for ddl in ddls:
        if isinstance(ddl, CreateTable):
            tables.append(copy.deepcopy(ddl.table))
        elif isinstance(ddl, (CreateIndex, AddIndex)):
            table = _find_table(tables, ddl.table_name)
            if table is None:
                kind = "CREATE INDEX" if isinstance(ddl, CreateIndex) else "ADD INDEX"
                raise GeneratorError(
                    f"{kind} is performed before CREATE TABLE: {ddl.statement}"
                )
            table.indexes.append(copy.deepcopy(ddl.index))
        elif isinstance(ddl, AddPrimaryKey):
            table = _find_table(tables, ddl.table_name)
            if table is None:
                raise GeneratorError(
                    f"ADD PRIMARY KEY is performed before CREATE TABLE: {ddl.statement}"
                )
            primary_column = ddl.index.columns[0].column
            table.columns = [
                replace(column, key_option=ColumnKeyOption.PRIMARY)
                if column.name == primary_column
                else column
                for column in table.columns
            ]
        elif isinstance(ddl, AddForeignKey):
            table = _find_table(tables, ddl.table_name)
            if table is None:
                raise GeneratorError(
                    f"ADD FOREIGN KEY is performed before CREATE TABLE: {ddl.statement}"
                )
            table.foreign_keys.append(copy.deepcopy(ddl.foreign_key))
        elif isinstance(ddl, AddPolicy):
            table = _find_table(tables, ddl.table_name)
            if table is None:
                raise GeneratorError(
                    f"ADD POLICY performed before CREATE TABLE: {ddl.statement}"
                )
            table.policies.append(copy.deepcopy(ddl.policy))
        elif isinstance(ddl, (View, Trigger, TypeDef)):
            continue
        else:
            raise GeneratorError(f"unexpected ddl type in convert_ddls_to_tables: {ddl!r}")
    return tables


def merge_table(table1: Table, table2: Table) -> None:
    """Append to ``table1`` the columns and indexes of ``table2`` whose names it already has."""
    for column in table2.columns:
        if column.name in {c.name for c in table1.columns}:
            table1.columns.append(column)
    for index in table2.indexes:
        if index.name in {i.name for i in table1.indexes}:
            table1.indexes.append(index)


class Generator:
    """Simulates schema state while turning desired DDLs into migration DDLs."""

    def __init__(self, mode: GeneratorMode, current_ddls: Iterable[DDL]) -> None:
        current_ddls = list(current_ddls)
        self.mode = mode
        self.writer = SqlWriter(mode)
        self.current_tables: List[Table] = convert_ddls_to_tables(current_ddls)
        self.current_views: List[View] = [d for d in current_ddls if isinstance(d, View)]
        self.current_triggers: List[Trigger] = [
            d for d in current_ddls if isinstance(d, Trigger)
        ]
        self.current_types: List[TypeDef] = [d for d in current_ddls if isinstance(d, TypeDef)]
        self.desired_tables: List[Table] = []
        self.desired_views: List[View] = []
        self.desired_triggers: List[Trigger] = []
        self.desired_types: List[TypeDef] = []

    def generate(self, desired_ddls: Iterable[DDL]) -> List[str]:
        """DDLs that bring the current schema to ``desired_ddls``.

        The generator's simulated state is updated along the way.
        """
        ddls: List[str] = []
        for ddl in desired_ddls:
            ddls.extend(self._generate_for(ddl))
        ddls.extend(self._cleanup_tables())
        ddls.extend(self._cleanup_views())
        return ddls

    def _generate_for(self, ddl: DDL) -> List[str]:
        if isinstance(ddl, CreateTable):
            return self._create_table(ddl)
        if isinstance(ddl, CreateIndex):
            return self._create_index(ddl.table_name, ddl.index, "CREATE INDEX", ddl.statement)
        if isinstance(ddl, AddIndex):
            return self._create_index(ddl.table_name, ddl.index, "ALTER TABLE", ddl.statement)
        if isinstance(ddl, AddForeignKey):
            return self._add_foreign_key(
                ddl.table_name, ddl.foreign_key, "ALTER TABLE", ddl.statement
            )
        if isinstance(ddl, AddPolicy):
            return self._create_policy(ddl.table_name, ddl.policy, "CREATE POLICY", ddl.statement)
        if isinstance(ddl, View):
            return self._create_view(ddl)
        if isinstance(ddl, Trigger):
            return self._create_trigger(ddl)
        if isinstance(ddl, TypeDef):
            return self._create_type(ddl)
        raise GeneratorError(f"unexpected ddl type in generate: {ddl!r}")

    def _create_table(self, desired: CreateTable) -> List[str]:
        ddls: List[str] = []
        current_table = _find_table(self.current_tables, desired.table.name)
        if current_table is not None:
            ddls.extend(diff_table(self.writer, current_table, desired.table))
            merge_table(current_table, copy.deepcopy(desired.table))
        else:
            ddls.append(desired.statement)
            self.current_tables.append(copy.deepcopy(desired.table))
        self.desired_tables.append(copy.deepcopy(desired.table))
        return ddls

    def _create_index(
        self, table_name: str, desired_index: Index, action: str, statement: str
    ) -> List[str]:
        ddls: List[str] = []
        current_table = _find_table(self.current_tables, table_name)
        if current_table is None:
            raise GeneratorError(
                f"{action} is performed for inexistent table '{table_name}': '{statement}'"
            )

        current_index = _find_index(current_table.indexes, desired_index.name)
        if current_index is None:
            ddls.append(statement)
            current_table.indexes.append(copy.deepcopy(desired_index))
        elif not are_same_indexes(current_index, desired_index):
            ddls.append(
                self.writer.drop_index(
                    current_table.name, current_index.name, current_index.constraint
                )
            )
            ddls.append(statement)
            current_table.indexes = [
                copy.deepcopy(desired_index) if index.name == desired_index.name else index
                for index in current_table.indexes
            ]

        desired_table = _find_table(self.desired_tables, table_name)
        if desired_table is None:
            raise GeneratorError(
                f"{action} is performed before create table '{table_name}': '{statement}'"
            )
        if desired_index.name in {index.name for index in desired_table.indexes}:
            raise GeneratorError(
                f"index '{desired_index.name}' is doubly created against table "
                f"'{table_name}': '{statement}'"
            )
        desired_table.indexes.append(copy.deepcopy(desired_index))
        return ddls

    def _add_foreign_key(
        self, table_name: str, desired_key: ForeignKey, action: str, statement: str
    ) -> List[str]:
        desired_table = _find_table(self.desired_tables, table_name)
        if desired_table is None:
            raise GeneratorError(
                f"{action} is performed before create table '{table_name}': '{statement}'"
            )
        names = {fk.constraint_name for fk in desired_table.foreign_keys}
        if desired_key.constraint_name in names:
            raise GeneratorError(
                f"index '{desired_key.constraint_name}' is doubly created against table "
                f"'{table_name}': '{statement}'"
            )
        desired_table.foreign_keys.append(copy.deepcopy(desired_key))
        return []

    def _create_policy(
        self, table_name: str, desired_policy: Policy, action: str, statement: str
    ) -> List[str]:
        ddls: List[str] = []
        current_table = _find_table(self.current_tables, table_name)
        if current_table is None:
            raise GeneratorError(
                f"{action} is performed for inexistent table '{table_name}': '{statement}'"
            )

        current_policy = _find_policy(current_table.policies, desired_policy.name)
        if current_policy is None:
            ddls.append(statement)
            current_table.policies.append(copy.deepcopy(desired_policy))
        elif not are_same_policies(current_policy, desired_policy):
            ddls.append(
                f"DROP POLICY {self.writer.escape_sql_name(current_policy.name)} "
                f"ON {self.writer.escape_table_name(current_table.name)}"
            )
            ddls.append(statement)

        desired_table = _find_table(self.desired_tables, table_name)
        if desired_table is None:
            raise GeneratorError(
                f"{action} is performed before create table '{table_name}': '{statement}'"
            )
        if desired_policy.name in {policy.name for policy in desired_table.policies}:
            raise GeneratorError(
                f"policy '{desired_policy.name}' is doubly created against table "
                f"'{table_name}': '{statement}'"
            )
        desired_table.policies.append(copy.deepcopy(desired_policy))
        return ddls

    def _create_view(self, desired_view: View) -> List[str]:
        ddls: List[str] = []
        name = desired_view.name
        current_view = _find_named(self.current_views, name)
        if current_view is None:
            ddls.append(desired_view.statement)
        elif current_view.definition.lower() != desired_view.definition.lower():
            escaped = self.writer.escape_table_name(name)
            if self.mode in (GeneratorMode.SQLITE3, GeneratorMode.MSSQL):
                ddls.append(f"DROP VIEW {escaped}")
                ddls.append(f"CREATE VIEW {escaped} AS {desired_view.definition}")
            else:
                ddls.append(f"CREATE OR REPLACE VIEW {escaped} AS {desired_view.definition}")

        if name in {view.name for view in self.desired_views}:
            raise GeneratorError(
                f"view '{name}' is doubly created: '{desired_view.statement}'"
            )
        self.desired_views.append(desired_view)
        return ddls

    def _create_trigger(self, desired: Trigger) -> List[str]:
        writer = self.writer
        events = ", ".join(desired.event)
        body = "\n".join(desired.body)
        if self.mode == GeneratorMode.MSSQL:
            definition = (
                f"TRIGGER {writer.escape_sql_name(desired.name)} ON "
                f"{writer.escape_table_name(desired.table_name)} {desired.time} {events} AS\n"
                f"{body}"
            )
        elif self.mode == GeneratorMode.MYSQL:
            definition = (
                f"TRIGGER {writer.escape_sql_name(desired.name)} {desired.time} {events} ON "
                f"{writer.escape_table_name(desired.table_name)} FOR EACH ROW {body}"
            )
        else:
            return []

        ddls: List[str] = []
        current = _find_named(self.current_triggers, desired.name)
        if current is None:
            ddls.append(f"CREATE {definition}")
        elif not are_same_trigger_definition(current, desired):
            prefix = "CREATE "
            if self.mode == GeneratorMode.MSSQL:
                prefix += "OR ALTER "
            else:
                ddls.append(f"DROP TRIGGER {writer.escape_sql_name(desired.name)}")
            ddls.append(prefix + definition)

        self.desired_triggers.append(desired)
        return ddls

    def _create_type(self, desired: TypeDef) -> List[str]:
        ddls: List[str] = []
        if _find_named(self.current_types, desired.name) is None:
            ddls.append(desired.statement)
        self.desired_types.append(desired)
        return ddls

    def _cleanup_tables(self) -> List[str]:
        ddls: List[str] = []
        writer = self.writer
        for current_table in list(self.current_tables):
            desired_table = _find_table(self.desired_tables, current_table.name)
            if desired_table is None:
                ddls.append(f"DROP TABLE {writer.escape_table_name(current_table.name)}")
                self._remove_table(current_table.name)
                continue

            # Foreign keys go before the indexes they may rely on.
            desired_constraints = {fk.constraint_name for fk in desired_table.foreign_keys}
            for foreign_key in current_table.foreign_keys:
                if foreign_key.constraint_name in desired_constraints:
                    continue
                ddls.extend(self._absent_foreign_key(foreign_key, current_table, desired_table))

            kept_indexes = {index.name for index in desired_table.indexes}
            kept_indexes.update(_foreign_key_index_names(desired_table.foreign_keys))
            for index in current_table.indexes:
                if index.name in kept_indexes:
                    continue
                ddls.extend(self._absent_index(index, current_table, desired_table))

            desired_columns = {column.name for column in desired_table.columns}
            for column in current_table.columns:
                if column.name in desired_columns:
                    continue
                ddls.extend(self._absent_column(current_table, column.name))

            desired_policies = {policy.name for policy in desired_table.policies}
            for policy in current_table.policies:
                if policy.name in desired_policies:
                    continue
                ddls.append(
                    f"DROP POLICY {writer.escape_sql_name(policy.name)} "
                    f"ON {writer.escape_table_name(current_table.name)}"
                )
        return ddls

    def _cleanup_views(self) -> List[str]:
        desired_names = {view.name for view in self.desired_views}
        return [
            f"DROP VIEW {self.writer.escape_table_name(view.name)}"
            for view in self.current_views
            if view.name not in desired_names
        ]

    def _remove_table(self, name: str) -> None:
        remaining = [table for table in self.current_tables if table.name != name]
        if len(remaining) == len(self.current_tables):
            raise GeneratorError(f"failed to remove table `{name}`: not found")
        self.current_tables = remaining

    def _absent_column(self, current_table: Table, column_name: str) -> List[str]:
        writer = self.writer
        table = writer.escape_table_name(current_table.name)
        ddls: List[str] = []
        # Only MSSQL has column default constraints; they must go before the column.
        if self.mode == GeneratorMode.MSSQL:
            for column in current_table.columns:
                if (
                    column.name == column_name
                    and column.default_def is not None
                    and column.default_def.constraint_name
                ):
                    ddls.append(
                        f"ALTER TABLE {table} DROP CONSTRAINT "
                        f"{writer.escape_sql_name(column.default_def.constraint_name)}"
                    )
        ddls.append(f"ALTER TABLE {table} DROP COLUMN {writer.escape_sql_name(column_name)}")
        return ddls

    def _absent_foreign_key(
        self, foreign_key: ForeignKey, current_table: Table, desired_table: Table
    ) -> List[str]:
        writer = self.writer
        table = writer.escape_table_name(current_table.name)
        name = writer.escape_sql_name(foreign_key.constraint_name)
        if self.mode == GeneratorMode.MYSQL:
            return [f"ALTER TABLE {table} DROP FOREIGN KEY {name}"]
        if self.mode in (GeneratorMode.POSTGRES, GeneratorMode.MSSQL):
            # A column-level REFERENCES may still keep the constraint.
            if any(c.references == foreign_key.reference_name for c in desired_table.columns):
                return []
            return [f"ALTER TABLE {table} DROP CONSTRAINT {name}"]
        return []

    def _absent_index(
        self, current_index: Index, current_table: Table, desired_table: Table
    ) -> List[str]:
        writer = self.writer
        if current_index.primary:
            primary_column: Optional[Column] = next(
                (c for c in desired_table.columns if c.key_option == ColumnKeyOption.PRIMARY),
                None,
            )
            if primary_column is None:
                # The column is dropped later; MSSQL needs the constraint dropped first.
                if self.mode == GeneratorMode.MSSQL:
                    return [
                        f"ALTER TABLE {writer.escape_table_name(current_table.name)} "
                        f"DROP CONSTRAINT {writer.escape_sql_name(current_index.name)}"
                    ]
                return []
            current_column = current_index.columns[0].column
            if primary_column.name != current_column:
                raise GeneratorError(
                    f"primary key column name of '{current_table.name}' should be "
                    f"'{primary_column.name}' but currently '{current_column}'. "
                    "This is not handled yet."
                )
            return []
        if current_index.unique:
            first = current_index.columns[0].column
            if any(c.name == first and c.key_option.is_unique() for c in desired_table.columns):
                return []
        return [
            writer.drop_index(current_table.name, current_index.name, current_index.constraint)
        ]


def generate_idempotent_ddls(
    mode: GeneratorMode, desired_ddls: Iterable[DDL], current_ddls: Iterable[DDL]
) -> List[str]:
    """DDLs that turn the schema of ``current_ddls`` into that of ``desired_ddls``."""
    return Generator(mode, current_ddls).generate(desired_ddls)