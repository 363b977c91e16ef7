from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    duckdb_path: str
    rate_limit_per_minute: int
    debug: bool
    hierarchy_cache_enabled: bool
    log_level: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        duckdb_path=os.environ.get("DUCKDB_PATH", ":memory:"),
        rate_limit_per_minute=int(os.environ.get("API_RATE_LIMIT_PER_MINUTE", "60")),
        debug=os.environ.get("API_DEBUG", "false").lower() == "true",
        hierarchy_cache_enabled=os.environ.get("HIERARCHY_CACHE_ENABLED", "true").lower() == "true",
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )
