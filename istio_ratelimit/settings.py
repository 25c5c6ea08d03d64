"""Operator settings read from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_RATE_LIMIT_SERVICE_IMAGE = "envoyproxy/ratelimit:5e1be594"
DEFAULT_STATSD_EXPORTER_IMAGE = "prom/statsd-exporter:v0.23.1"


@dataclass(frozen=True)
class Settings:
    """Container images used for managed rate limit services."""

    rate_limit_service_image: str = DEFAULT_RATE_LIMIT_SERVICE_IMAGE
    statsd_exporter_image: str = DEFAULT_STATSD_EXPORTER_IMAGE


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Read settings from the environment; a variable set to any value, even empty, wins over the default."""
    env = os.environ if environ is None else environ
    return Settings(
        rate_limit_service_image=env.get(
            "RATE_LIMIT_SERVICE_IMAGE", DEFAULT_RATE_LIMIT_SERVICE_IMAGE
        ),
        statsd_exporter_image=env.get(
            "STATSD_EXPORTER_IMAGE", DEFAULT_STATSD_EXPORTER_IMAGE
        ),
    )