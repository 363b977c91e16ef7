from __future__ import annotations

import os
import time
from collections.abc import Generator

import duckdb
import pytest
from fastapi.testclient import TestClient

from ownership_api.interfaces.api.middleware.rate_limit import RateLimitMiddleware

GLOBAL = {"X-Role-Scope": "global"}


@pytest.fixture()
def rate_limited_client(test_db: duckdb.DuckDBPyConnection) -> Generator[TestClient, None, None]:
    """Client with a 3 requests/minute limit."""
    from ownership_api.infrastructure import duckdb_connection
    duckdb_connection.set_connection(test_db)

    from ownership_api.infrastructure.config import get_settings

    old_val = os.environ.get("API_RATE_LIMIT_PER_MINUTE", "0")
    os.environ["API_RATE_LIMIT_PER_MINUTE"] = "3"
    get_settings.cache_clear()

    from ownership_api.interfaces.api.main import app
    with TestClient(app) as c:
        yield c

    os.environ["API_RATE_LIMIT_PER_MINUTE"] = old_val
    get_settings.cache_clear()


def test_rate_limit_allows_within_limit(rate_limited_client: TestClient) -> None:
    for _ in range(3):
        response = rate_limited_client.get("/api/scope", headers=GLOBAL)
        assert response.status_code == 200


def test_rate_limit_blocks_after_limit(rate_limited_client: TestClient) -> None:
    for _ in range(3):
        rate_limited_client.get("/api/scope", headers=GLOBAL)
    response = rate_limited_client.get("/api/scope", headers=GLOBAL)
    assert response.status_code == 429
    assert "Rate limit" in response.json()["detail"]
    assert "Retry-After" in response.headers


def test_rate_limit_bypass_with_api_key(rate_limited_client: TestClient) -> None:
    for _ in range(3):
        rate_limited_client.get("/api/scope", headers=GLOBAL)
    response = rate_limited_client.get("/api/scope", headers={**GLOBAL, "X-API-Key": "test-key"})
    assert response.status_code == 200


def test_window_reopens_after_a_minute() -> None:
    middleware = RateLimitMiddleware(app=None)
    start = time.monotonic()
    for offset in (1, 2, 3):
        assert middleware.register_hit("10.0.0.1", 3, start + offset) is None

    retry_after = middleware.register_hit("10.0.0.1", 3, start + 4)
    assert retry_after is not None
    assert 0 < retry_after <= 60
    assert middleware.register_hit("10.0.0.1", 3, start + 61.5) is None


def test_idle_clients_are_forgotten() -> None:
    middleware = RateLimitMiddleware(app=None)
    start = time.monotonic()
    middleware.register_hit("10.0.0.1", 3, start + 1)
    middleware.register_hit("10.0.0.2", 3, start + 2)
    assert middleware.tracked_clients == 2

    middleware.register_hit("10.0.0.3", 3, start + 200)
    assert middleware.tracked_clients == 1
