# ddlsync

`ddlsync` works out which DDL statements take a database schema from the
state it is in now to the state you want it to be in. Both schemas are given
as lists of DDL objects (tables, indexes, foreign keys, policies, views,
triggers and types), and the result is the list of `ALTER`, `CREATE` and
`DROP` statements, as strings, needed to get from one to the other. When the
two schemas already match, the result is empty.

Four SQL dialects are supported, chosen with `ddlsync.model.GeneratorMode`:
`MYSQL`, `POSTGRES`, `SQLITE3` and `MSSQL`. The dialect decides how names are
quoted, how table names are qualified (`public.` on PostgreSQL, `dbo.` on SQL
Server), which statements change columns, indexes, defaults, identity columns
and constraints, and which implicit defaults count when comparing schemas.

## What it handles

- tables that are new (their own `CREATE TABLE` statement is returned) or no
  longer wanted (`DROP TABLE`);
- added, removed and changed columns: type, nullability, defaults, checks,
  `AUTO_INCREMENT` and identity columns, and column order on MySQL;
- primary keys, unique keys and secondary indexes, with their directions,
  partial-index conditions, included columns and index options;
- foreign keys, which must carry a constraint name so they can be matched;
- row-level security policies and views; views that are no longer wanted are
  dropped;
- triggers, on MySQL and SQL Server only;
- user-defined types, created when missing.

## Using it

The schema objects live in `ddlsync.model`: `CreateTable` wraps a `Table` of
`Column`, `Index`, `ForeignKey`, `CheckDefinition` and `Policy` entries;
alongside it are `CreateIndex`, `AddIndex`, `AddPrimaryKey`, `AddForeignKey`,
`AddPolicy`, `View`, `Trigger` and `TypeDef`. Each carries the `statement`
text that is returned when the object has to be created as it stands.

```python
from ddlsync.generator import generate_idempotent_ddls
from ddlsync.model import Column, CreateTable, GeneratorMode, Table

current = [
    CreateTable(
        statement="CREATE TABLE users (id int)",
        table=Table(name="users", columns=[Column(name="id", type_name="int")]),
    )
]
desired = [
    CreateTable(
        statement="CREATE TABLE users (id int, name text)",
        table=Table(
            name="users",
            columns=[
                Column(name="id", type_name="int"),
                Column(name="name", position=1, type_name="text"),
            ],
        ),
    )
]

generate_idempotent_ddls(GeneratorMode.MYSQL, desired, current)
# ["ALTER TABLE `users` ADD COLUMN `name` text AFTER `id`"]
```

`generate_idempotent_ddls(mode, desired_ddls, current_ddls)` returns the
statements in the order they must be run. It is shorthand for
`Generator(mode, current_ddls).generate(desired_ddls)`; a `Generator` keeps a
simulated schema that it updates while generating. Problems that cannot be
resolved, such as a foreign key without a constraint name, an index, policy
or view created twice, or an index added to a table that does not exist,
raise `ddlsync.model.GeneratorError`.

The lower-level pieces are usable on their own:

- `ddlsync.table_diff.diff_table(writer, current, desired)` returns the
  statements that alter one existing table into another;
- `ddlsync.render.SqlWriter(mode)` quotes names and renders column
  definitions, index and foreign-key clauses and `DROP INDEX` statements;
- `ddlsync.compare` holds the equality rules used to decide whether columns,
  indexes, defaults, foreign keys, policies and triggers have changed.

`ddlsync.runner` holds helpers for a command-line front end:

- `Options` collects the desired file, the current file, and the dry-run,
  export and skip-drop switches;
- `parse_files(files)` turns one or two file arguments into
  `(desired_file, current_file)`; with two, the first is the current schema.
  No files, or more than two, raise `ValueError`;
- `read_file(path)` reads a schema file, or standard input when the path is
  `-` (raising `GeneratorError` if standard input is a terminal);
- `format_dry_run(ddls, skip_drop)` renders statements for review, marking
  the ones containing `DROP` as skipped when `skip_drop` is set, and
  `show_ddls(ddls, skip_drop)` prints that text.

## What it does not do

- It does not parse SQL text: schemas must be built from the `ddlsync.model`
  classes.
- It does not connect to a database, read a live schema or run the generated
  statements.
- It has no command-line program; `ddlsync.runner` only supplies helpers for
  one.

## Requirements

Python 3.10 or later. There are no runtime dependencies.