"""Builders for the environment, Service, autoscaler and statsd mapping of an Istio rate limit service."""

__version__ = "0.1.0"

__all__ = [
    "env_builder",
    "hpa_builder",
    "models",
    "service_builder",
    "settings",
    "statsd_builder",
    "types",
]