"""Schema model: tables, columns, indexes and the DDL statements that carry them."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional


class GeneratorError(Exception):
    """Raised when DDLs cannot be parsed, compared or generated."""


class GeneratorMode(enum.Enum):
    """The SQL dialect that DDLs are generated for."""

    MYSQL = "mysql"
    POSTGRES = "postgres"
    SQLITE3 = "sqlite3"
    MSSQL = "mssql"


class ValueType(enum.IntEnum):
    """Kind of a literal value in a schema definition."""

    STR = 0
    INT = 1
    FLOAT = 2
    HEX_NUM = 3
    HEX = 4
    VAL_ARG = 5
    BIT = 6
    BOOL = 7


class ColumnKeyOption(enum.IntEnum):
    """Key declared inline on a column."""

    NONE = 0
    PRIMARY = 1
    SPATIAL_KEY = 2
    UNIQUE = 3
    UNIQUE_KEY = 4
    KEY = 5

    def is_unique(self) -> bool:
        """Whether the option declares a unique key."""
        return self in (ColumnKeyOption.UNIQUE, ColumnKeyOption.UNIQUE_KEY)


ASC = "asc"
DESC = "desc"


@dataclass
class Value:
    """A literal as written in SQL, with its parsed form."""

    value_type: ValueType
    raw: str
    str_val: str = ""
    int_val: int = 0
    float_val: float = 0.0
    bit_val: bool = False


@dataclass
class DefaultDefinition:
    value: Optional[Value] = None
    constraint_name: str = ""  # only for MSSQL


@dataclass
class CheckDefinition:
    definition: str = ""
    constraint_name: str = ""
    not_for_replication: bool = False
    no_inherit: bool = False


@dataclass
class Identity:
    behavior: str = ""
    not_for_replication: bool = False


@dataclass
class Sequence:
    name: str = ""
    if_not_exists: bool = False
    type: str = ""
    increment_by: Optional[int] = None
    min_value: Optional[int] = None
    no_min_value: bool = False
    max_value: Optional[int] = None
    no_max_value: bool = False
    start_with: Optional[int] = None
    cache: Optional[int] = None
    cycle: bool = False
    no_cycle: bool = False
    owned_by: str = ""


@dataclass
class Column:
    name: str
    position: int = 0
    type_name: str = ""
    unsigned: bool = False
    not_null: Optional[bool] = None
    auto_increment: bool = False
    array: bool = False
    default_def: Optional[DefaultDefinition] = None
    length: Optional[Value] = None
    scale: Optional[Value] = None
    check: Optional[CheckDefinition] = None
    charset: str = ""
    collate: str = ""
    timezone: bool = False  # Postgres `with time zone`
    key_option: ColumnKeyOption = ColumnKeyOption.NONE
    on_update: Optional[Value] = None
    comment: Optional[Value] = None
    enum_values: List[str] = field(default_factory=list)
    references: str = ""
    identity: Optional[Identity] = None
    sequence: Optional[Sequence] = None


@dataclass
class IndexColumn:
    column: str
    length: Optional[int] = None
    direction: str = ""


@dataclass
class IndexOption:
    option_name: str
    value: Optional[Value] = None


@dataclass
class IndexPartition:
    partition_name: str = ""
    column: str = ""


@dataclass
class ConstraintOptions:
    deferrable: bool = False
    initially_deferred: bool = False


@dataclass
class Index:
    name: str
    index_type: str = ""
    columns: List[IndexColumn] = field(default_factory=list)
    primary: bool = False
    unique: bool = False
    constraint: bool = False  # Postgres `ADD CONSTRAINT UNIQUE`
    constraint_options: Optional[ConstraintOptions] = None
    where: str = ""  # Postgres partial index
    included: List[str] = field(default_factory=list)  # MSSQL
    clustered: bool = False  # MSSQL
    partition: IndexPartition = field(default_factory=IndexPartition)  # MSSQL
    options: List[IndexOption] = field(default_factory=list)


@dataclass
class ForeignKey:
    constraint_name: str = ""
    index_name: str = ""
    index_columns: List[str] = field(default_factory=list)
    reference_name: str = ""
    reference_columns: List[str] = field(default_factory=list)
    on_delete: str = ""
    on_update: str = ""
    not_for_replication: bool = False


@dataclass
class Policy:
    name: str
    reference_name: str = ""
    permissive: str = ""
    scope: str = ""
    roles: List[str] = field(default_factory=list)
    using: str = ""
    with_check: str = ""


@dataclass
class Table:
    name: str
    columns: List[Column] = field(default_factory=list)
    indexes: List[Index] = field(default_factory=list)
    checks: List[CheckDefinition] = field(default_factory=list)
    foreign_keys: List[ForeignKey] = field(default_factory=list)
    policies: List[Policy] = field(default_factory=list)

    def primary_key(self) -> Optional[Index]:
        """The table's primary key, from an index or from inline column keys."""
        for index in self.indexes:
            if index.primary:
                return index
        primary_columns = [
            IndexColumn(column=column.name)
            for column in self.columns
            if column.key_option == ColumnKeyOption.PRIMARY
        ]
        if not primary_columns:
            return None
        return Index(
            name="PRIMARY",
            index_type="primary key",
            columns=primary_columns,
            primary=True,
            unique=True,
            clustered=True,
        )


@dataclass
class DDL:
    """A parsed DDL statement together with its source text."""

    statement: str


@dataclass
class CreateTable(DDL):
    table: Table


@dataclass
class CreateIndex(DDL):
    table_name: str
    index: Index


@dataclass
class AddIndex(DDL):
    table_name: str
    index: Index
    constraint: bool = False


@dataclass
class AddPrimaryKey(DDL):
    table_name: str
    index: Index


@dataclass
class AddForeignKey(DDL):
    table_name: str
    foreign_key: ForeignKey


@dataclass
class AddPolicy(DDL):
    table_name: str
    policy: Policy


@dataclass
class View(DDL):
    name: str
    definition: str


@dataclass
class Trigger(DDL):
    name: str
    table_name: str
    time: str
    event: List[str] = field(default_factory=list)
    body: List[str] = field(default_factory=list)


@dataclass
class TypeDef(DDL):
    name: str