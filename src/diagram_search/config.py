"""
Settings loaded from environment variables.

Environment Variables:
    DIAGRAM_SEARCH_API_KEYS: Comma-separated provider keys
    DIAGRAM_SEARCH_ENGINE_ID: Programmable Search Engine id ('cx')
    DIAGRAM_SEARCH_PAGE_SIZE: Items per upstream page (1-10, default: 10)
    DIAGRAM_SEARCH_MAX_PAGES: Page ceiling per session (default: 5)
    DIAGRAM_SEARCH_MAX_RESULTS: Result ceiling per session (default: 30)
    DIAGRAM_SEARCH_COOLDOWN: Credential cooldown in seconds (default: 86400)
    DIAGRAM_SEARCH_CACHE_TTL: Cache freshness in seconds (default: 1800)
    DIAGRAM_SEARCH_CACHE_RETENTION: Sweep retention in seconds (default: 3600)
    DIAGRAM_SEARCH_CACHE_CAPACITY: Maximum cached pages (default: 100)
    DIAGRAM_SEARCH_SWEEP_INTERVAL: Seconds between cache sweeps (default: 300)
    DIAGRAM_SEARCH_RETRY_DELAY: Same-credential retry delay (default: 0.5)
    DIAGRAM_SEARCH_TIMEOUT: HTTP timeout in seconds (default: 15)
    DIAGRAM_SEARCH_RATE_LIMIT: Provider requests per second (default: 5)
    DIAGRAM_SEARCH_LOG_LEVEL: Logging level for the CLI (default: WARNING)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields
from typing import Any

from diagram_search.core.exceptions import ConfigurationError

ENV_PREFIX = "DIAGRAM_SEARCH_"

_ENV_NAMES = {
    "page_size": "PAGE_SIZE",
    "max_pages": "MAX_PAGES",
    "max_results": "MAX_RESULTS",
    "cooldown": "COOLDOWN",
    "cache_ttl": "CACHE_TTL",
    "cache_retention": "CACHE_RETENTION",
    "cache_capacity": "CACHE_CAPACITY",
    "sweep_interval": "SWEEP_INTERVAL",
    "retry_delay": "RETRY_DELAY",
    "timeout": "TIMEOUT",
    "rate_limit": "RATE_LIMIT",
    "log_level": "LOG_LEVEL",
}


@dataclass(frozen=True)
class SearchSettings:
    """All tunables of the search stack."""

    api_keys: tuple[str, ...] = ()
    search_engine_id: str = ""
    page_size: int = 10
    max_pages: int = 5
    max_results: int = 30
    cooldown: float = 24 * 60 * 60.0
    cache_ttl: float = 30 * 60.0
    cache_retention: float = 60 * 60.0
    cache_capacity: int = 100
    sweep_interval: float = 5 * 60.0
    retry_delay: float = 0.5
    timeout: float = 15.0
    rate_limit: float = 5.0
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SearchSettings:
        """Build settings from ``environ`` (default: os.environ)."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        keys = env.get(f"{ENV_PREFIX}API_KEYS", "")
        values["api_keys"] = tuple(k.strip() for k in keys.split(",") if k.strip())
        values["search_engine_id"] = env.get(f"{ENV_PREFIX}ENGINE_ID", "").strip()

        types = {f.name: type(f.default) for f in fields(cls)}
        for name, suffix in _ENV_NAMES.items():
            raw = env.get(f"{ENV_PREFIX}{suffix}")
            if raw is None or not raw.strip():
                continue
            try:
                values[name] = types[name](raw.strip())
            except ValueError as e:
                raise ConfigurationError(f"{ENV_PREFIX}{suffix} must be {types[name].__name__}, got {raw!r}") from e

        return cls(**values)

    def validate(self, require_credentials: bool = False) -> SearchSettings:
        """
        Check ranges; returns self so calls can be chained.

        Raises:
            ConfigurationError: on the first invalid value
        """
        if not 1 <= self.page_size <= 10:
            raise ConfigurationError(f"page_size must be 1-10, got {self.page_size}")
        if self.max_pages < 1 or self.max_results < 1:
            raise ConfigurationError("max_pages and max_results must be positive")
        if self.cache_capacity < 1:
            raise ConfigurationError(f"cache_capacity must be positive, got {self.cache_capacity}")
        for name in ("cooldown", "cache_ttl", "cache_retention", "sweep_interval", "timeout", "rate_limit"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive")
        if self.retry_delay < 0:
            raise ConfigurationError("retry_delay cannot be negative")
        if require_credentials and not (self.api_keys and self.search_engine_id):
            raise ConfigurationError(
                f"Set {ENV_PREFIX}API_KEYS and {ENV_PREFIX}ENGINE_ID for live search"
            )
        return self

    @property
    def live_search_enabled(self) -> bool:
        return bool(self.api_keys and self.search_engine_id)

    def to_container_config(self) -> dict[str, Any]:
        """Plain dict for ``ApplicationContainer.config.from_dict``."""
        data = asdict(self)
        data["api_keys"] = list(self.api_keys)
        return data
