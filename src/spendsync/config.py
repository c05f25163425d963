"""Environment-driven settings."""

import os
from functools import lru_cache
from typing import Optional

_TRUTHY = {"1", "true", "yes", "on"}


class Settings:
    def __init__(
        self,
        database_path: Optional[str],
        debug: bool,
        range_cache_ttl: float,
        monthly_cache_ttl: float,
        log_level: str,
    ) -> None:
        self.database_path = database_path
        self.debug = debug
        self.range_cache_ttl = range_cache_ttl
        self.monthly_cache_ttl = monthly_cache_ttl
        self.log_level = log_level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        database_path=os.getenv("SPENDSYNC_DB_PATH"),
        debug=os.getenv("SPENDSYNC_DEBUG", "").strip().lower() in _TRUTHY,
        range_cache_ttl=float(os.getenv("SPENDSYNC_RANGE_CACHE_TTL", "300")),
        monthly_cache_ttl=float(os.getenv("SPENDSYNC_MONTHLY_CACHE_TTL", "600")),
        log_level=os.getenv("SPENDSYNC_LOG_LEVEL", "WARNING").upper(),
    )
