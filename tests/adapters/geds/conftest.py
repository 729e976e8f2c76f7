"""Shared fixtures for GEDS adapter tests."""

from __future__ import annotations

import pytest

from gedsimport.config.geds import GedsConfig
from gedsimport.config.http_resilience import ResilienceConfig


@pytest.fixture
def geds_config() -> GedsConfig:
    return GedsConfig(
        resilience=ResilienceConfig(name="geds", timeout_seconds=5.0),
        max_bytes=1024,
    )
