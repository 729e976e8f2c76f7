"""GEDS download configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import optional_env_var, optional_positive_float, optional_positive_int
from .http_resilience import ResilienceConfig

GEDS_ALLOWED_DOMAINS: Final[tuple[str, ...]] = (".gc.ca", "canada.ca", ".canada.ca")
GEDS_TIMEOUT_SECONDS: Final[float] = 30.0
GEDS_MAX_BYTES: Final[int] = 50 * 1024 * 1024
GEDS_USER_AGENT: Final[str] = "gedsimport/1.0 (Organizational Directory Import)"


@dataclass(frozen=True, slots=True)
class GedsConfig:
    """Limits applied to every GEDS export download."""

    resilience: ResilienceConfig
    max_bytes: int = GEDS_MAX_BYTES
    allowed_domains: tuple[str, ...] = GEDS_ALLOWED_DOMAINS

    @property
    def timeout_seconds(self) -> float:
        return self.resilience.timeout_seconds


def default_geds_resilience(
    *,
    timeout_seconds: float = GEDS_TIMEOUT_SECONDS,
    user_agent: str = GEDS_USER_AGENT,
) -> ResilienceConfig:
    return ResilienceConfig(
        name="geds",
        timeout_seconds=timeout_seconds,
        default_headers={
            "User-Agent": user_agent,
            "Accept": "application/xml,text/xml;q=0.9,*/*;q=0.8",
        },
    )


def get_geds_config(*, resilience: ResilienceConfig | None = None) -> GedsConfig:
    """Build the download configuration, honouring environment overrides."""

    timeout_seconds = optional_positive_float("GEDS_TIMEOUT_SECONDS", GEDS_TIMEOUT_SECONDS)
    max_bytes = optional_positive_int("GEDS_MAX_BYTES", GEDS_MAX_BYTES)
    user_agent = optional_env_var("GEDS_USER_AGENT") or GEDS_USER_AGENT
    return GedsConfig(
        resilience=resilience
        or default_geds_resilience(timeout_seconds=timeout_seconds, user_agent=user_agent),
        max_bytes=max_bytes,
    )
