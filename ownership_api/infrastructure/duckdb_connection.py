from __future__ import annotations

import duckdb

from .config import get_settings

_connection: duckdb.DuckDBPyConnection | None = None


def get_connection() -> duckdb.DuckDBPyConnection:
    global _connection  # noqa: PLW0603
    if _connection is None:
        # read-write: ownership recompute writes parent_id, level and percentages back
        _connection = duckdb.connect(get_settings().duckdb_path)
    return _connection


def set_connection(conn: duckdb.DuckDBPyConnection) -> None:
    """Used in tests to inject an in-memory DuckDB."""
    global _connection  # noqa: PLW0603
    _connection = conn
