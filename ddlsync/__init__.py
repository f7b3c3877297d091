"""Compute the DDL statements that bring a database schema to a desired state."""

__version__ = "0.1.0"