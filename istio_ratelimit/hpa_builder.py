"""HorizontalPodAutoscaler for a rate limit service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from istio_ratelimit.models import AutoScaling, RateLimitService

DEFAULT_CPU_AVERAGE_UTILIZATION = 80
MANAGED_BY = "istio-rateltimit-operator"


@dataclass
class HorizontalPodAutoscalerBuilder:
    """Builds an autoscaler that scales the service's Deployment on CPU."""

    rate_limit_service: RateLimitService = field(default_factory=RateLimitService)

    def _auto_scaling(self) -> AutoScaling:
        kubernetes = self.rate_limit_service.spec.kubernetes
        if kubernetes is None or kubernetes.auto_scaling is None:
            raise ValueError("rate limit service has no autoscaling settings")
        if kubernetes.auto_scaling.max_replica is None:
            raise ValueError("autoscaling needs a maximum replica count")
        return kubernetes.auto_scaling

    def build(self) -> dict[str, Any]:
        """Return the HorizontalPodAutoscaler manifest."""
        auto_scaling = self._auto_scaling()
        name = self.rate_limit_service.name

        spec: dict[str, Any] = {}
        if auto_scaling.min_replica is not None:
            spec["minReplicas"] = auto_scaling.min_replica
        spec["maxReplicas"] = auto_scaling.max_replica
        spec["scaleTargetRef"] = {
            "apiVersion": "apps/v1",
            "kind": "Deployment",
            "name": name,
        }
        spec["metrics"] = [
            {
                "type": "Resource",
                "resource": {
                    "name": "cpu",
                    "target": {
                        "type": "Utilization",
                        "averageUtilization": DEFAULT_CPU_AVERAGE_UTILIZATION,
                    },
                },
            }
        ]

        return {
            "metadata": {
                "name": name,
                "namespace": self.rate_limit_service.namespace,
                "labels": self.build_labels(),
            },
            "spec": spec,
        }

    def build_labels(self) -> dict[str, str]:
        """Return the labels put on the autoscaler."""
        name = self.rate_limit_service.name
        return {
            "app.kubernetes.io/name": name,
            "app.kubernetes.io/managed-by": MANAGED_BY,
            "app.kubernetes.io/created-by": name,
        }