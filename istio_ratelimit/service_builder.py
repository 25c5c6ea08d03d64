"""Kubernetes Service for a rate limit service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from istio_ratelimit.models import RateLimitService

MANAGED_BY = "istio-rateltimit-operator"

_PORTS = (
    ("http", 8080, "TCP", "http"),
    ("grpc", 8081, "TCP", "grpc"),
    ("http-admin", 6070, "TCP", "http"),
    ("http-statsd-exporter", 9102, "TCP", "http"),
    ("tcp-statsd-exporter", 9125, "TCP", "tcp"),
    ("udp-statsd-exporter", 9125, "UDP", "udp"),
)


@dataclass
class ServiceBuilder:
    """Builds the Service exposing the rate limit and statsd exporter ports."""

    rate_limit_service: RateLimitService = field(default_factory=RateLimitService)

    def build(self) -> dict[str, Any]:
        """Return the Service manifest."""
        return {
            "metadata": {
                "name": self.rate_limit_service.name,
                "namespace": self.rate_limit_service.namespace,
                "labels": self.build_labels(),
            },
            "spec": {
                "selector": self.build_labels(),
                "ports": [
                    {
                        "name": name,
                        "port": port,
                        "targetPort": port,
                        "protocol": protocol,
                        "appProtocol": app_protocol,
                    }
                    for name, port, protocol, app_protocol in _PORTS
                ],
            },
        }

    def build_labels(self) -> dict[str, str]:
        """Return the labels put on the Service and used as its selector."""
        name = self.rate_limit_service.name
        return {
            "app.kubernetes.io/name": name,
            "app.kubernetes.io/managed-by": MANAGED_BY,
            "app.kubernetes.io/created-by": name,
        }