[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ddlsync"
version = "0.1.0"
description = "Compute the DDL statements that turn a current database schema into a desired one"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "ddl",
    "schema",
    "migration",
    "mysql",
    "postgresql",
    "sqlite",
    "mssql",
    "idempotent",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Programming Language :: SQL",
    "Topic :: Database :: Front-Ends",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ddlsync"]

[tool.pytest.ini_options]
addopts = "-ra"
