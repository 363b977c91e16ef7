# tests/integration/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path

import duckdb
import pytest
from fastapi.testclient import TestClient

SCHEMA_PATH = Path(__file__).parent.parent.parent / "registry_pipeline" / "output" / "schema.sql"

# rate limit off for every test except test_rate_limit.py
os.environ["API_RATE_LIMIT_PER_MINUTE"] = "0"

def _seed(conn: duckdb.DuckDBPyConnection) -> None:
    """Root -> Folder1 -> Folder2, plus a standalone company and an inactive one."""
    conn.execute(SCHEMA_PATH.read_text(encoding="utf-8"))
    conn.execute("""
        INSERT INTO companies
            (id, name, code, paid_up_capital, authorized_capital, is_active, parent_id, level)
        VALUES
        ('root',    'Root Holding', 'RH', 2000000000.00, 5000000000.00, TRUE,  NULL,      0),
        ('folder1', 'Folder One',   'F1', 1000000000.00, 1000000000.00, TRUE,  'root',    1),
        ('folder2', 'Folder Two',   'F2',  500000000.00,  500000000.00, TRUE,  'folder1', 2),
        ('solo',    'Solo Trading', 'ST', 9000000000.00, 9000000000.00, TRUE,  NULL,      0),
        ('retired', 'Retired Co',   'RC',       1000.00,       1000.00, FALSE, NULL,      0)
    """)
    conn.execute("""
        INSERT INTO shareholders
            (id, company_id, position, kind, shareholder_company_id, name,
             identity_number, type_label, authorized_capital, paid_up_capital,
             is_main_parent_override)
        VALUES
        ('sh1', 'folder1', 0, 'corporate',  'root',    'Root Holding', NULL,   NULL,       NULL,   NULL,   FALSE),
        ('sh2', 'folder2', 0, 'corporate',  'folder1', 'Folder One',   NULL,   NULL,       NULL,   NULL,   FALSE),
        ('sh3', 'folder2', 1, 'individual', NULL,      'Dana Reyes',   'ID-9', 'founder', 200.00, 100.00, FALSE)
    """)


def _client_for(conn: duckdb.DuckDBPyConnection) -> Generator[TestClient, None, None]:
    from ownership_api.infrastructure import duckdb_connection
    duckdb_connection.set_connection(conn)

    # pick up API_RATE_LIMIT_PER_MINUTE=0
    from ownership_api.infrastructure.config import get_settings
    get_settings.cache_clear()

    from ownership_api.interfaces.api.main import app
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="session")
def test_db() -> Generator[duckdb.DuckDBPyConnection, None, None]:
    """In-memory DuckDB with schema and deterministic data. Read-only tests only."""
    conn = duckdb.connect(":memory:")
    _seed(conn)
    yield conn
    conn.close()


@pytest.fixture()
def client(test_db: duckdb.DuckDBPyConnection) -> Generator[TestClient, None, None]:
    yield from _client_for(test_db)


@pytest.fixture()
def fresh_db() -> Generator[duckdb.DuckDBPyConnection, None, None]:
    """Per-test database for tests that recompute and write back."""
    conn = duckdb.connect(":memory:")
    _seed(conn)
    yield conn
    conn.close()


@pytest.fixture()
def writable_client(fresh_db: duckdb.DuckDBPyConnection) -> Generator[TestClient, None, None]:
    yield from _client_for(fresh_db)
