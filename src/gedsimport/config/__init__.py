"""Application configuration helpers."""

from __future__ import annotations

from .errors import ConfigurationError
from .geds import (
    GEDS_ALLOWED_DOMAINS,
    GEDS_MAX_BYTES,
    GEDS_TIMEOUT_SECONDS,
    GedsConfig,
    default_geds_resilience,
    get_geds_config,
)
from .http_resilience import RateLimit, ResilienceConfig
from .logging import configure_logging
from .storage import StorageConfig, get_storage_config

__all__ = [
    "GEDS_ALLOWED_DOMAINS",
    "GEDS_MAX_BYTES",
    "GEDS_TIMEOUT_SECONDS",
    "ConfigurationError",
    "GedsConfig",
    "RateLimit",
    "ResilienceConfig",
    "StorageConfig",
    "configure_logging",
    "default_geds_resilience",
    "get_geds_config",
    "get_storage_config",
]
