"""Statsd exporter mapping ConfigMap for a rate limit service."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from istio_ratelimit.models import Action, GlobalRateLimit, RateLimitService
from istio_ratelimit.types import MetricMapper, MetricMapping, MetricType, ObserverType

MANAGED_BY = "istio-rateltimit-operator"

_PER_LIMIT_METRICS = (
    "near_limit",
    "over_limit",
    "over_limit_with_local_cache",
    "total_hits",
    "within_limit",
    "shadow_mode",
)


@dataclass
class StatsdConfigBuilder:
    """Builds the ConfigMap holding the statsd exporter mapping document."""

    rate_limit_service: RateLimitService = field(default_factory=RateLimitService)
    config: str = ""

    @property
    def _config_name(self) -> str:
        return self.rate_limit_service.name + "-statsd-config"

    def build(self) -> dict[str, Any]:
        """Return the ConfigMap manifest."""
        return {
            "metadata": {
                "name": self._config_name,
                "namespace": self.rate_limit_service.namespace,
                "labels": self.build_labels(),
            },
            "data": {"statsd.mappingConf": self.config},
        }

    def build_labels(self) -> dict[str, str]:
        """Return the labels put on the ConfigMap."""
        return {
            "app.kubernetes.io/name": self._config_name,
            "app.kubernetes.io/managed-by": MANAGED_BY,
            "app.kubernetes.io/created-by": self.rate_limit_service.name,
        }


def new_statsd_config(
    rate_limit_service_name: str,
    domain: str,
    global_rate_limits: Iterable[GlobalRateLimit],
) -> MetricMapper:
    """Return mappings for every identified global rate limit, then the defaults."""
    mappings: list[MetricMapping] = []
    for global_rate_limit in global_rate_limits:
        if global_rate_limit.spec.identifier is not None:
            mappings.extend(
                metric_mappings_for(rate_limit_service_name, domain, global_rate_limit)
            )
    mappings.extend(default_metric_mappings())
    return MetricMapper(mappings=mappings)


def metric_mappings_for(
    rate_limit_service_name: str,
    domain: str,
    global_rate_limit: GlobalRateLimit,
) -> list[MetricMapping]:
    """Return the six per-limit mappings labelled with the limit's identifier."""
    identifier = global_rate_limit.spec.identifier
    if identifier is None:
        raise ValueError(
            f"global rate limit {global_rate_limit.name!r} has no identifier"
        )

    matcher = statsd_matcher(global_rate_limit.spec.matcher)
    prefix = f"ratelimit.service.rate_limit.{domain}.{matcher}."
    return [
        MetricMapping(
            name=f"ratelimit_service_rate_limit_{metric}",
            match=prefix + metric,
            timer_type=ObserverType.HISTOGRAM,
            labels={
                "identifier": identifier,
                "rate_limit_service_name": rate_limit_service_name,
                "global_rate_limit_name": global_rate_limit.name,
            },
        )
        for metric in _PER_LIMIT_METRICS
    ]


def _action_segment(action: Action) -> str:
    parts: list[str] = []
    if action.request_headers is not None:
        parts.append(action.request_headers.descriptor_key)
    if action.remote_address is not None:
        parts.append("remote_address")
    if action.generic_key is not None:
        key = action.generic_key.descriptor_key
        if key is None:
            key = "generic_key"
        parts.append(f"{key}_{action.generic_key.descriptor_value}")
    if action.header_value_match is not None:
        parts.append(f"header_match_{action.header_value_match.descriptor_value}")
    return "".join(parts)


def statsd_matcher(matchers: Sequence[Action]) -> str:
    """Return the dotted descriptor path statsd uses for a list of actions."""
    return ".".join(_action_segment(action) for action in matchers)


def default_metric_mappings() -> list[MetricMapping]:
    """Return the mappings for service-wide metrics."""
    return [
        MetricMapping(
            name="ratelimit_service_should_rate_limit_error",
            match="ratelimit.service.call.should_rate_limit.*",
            match_metric_type=MetricType.COUNTER,
            labels={"err_type": "$1"},
        ),
        MetricMapping(
            name="ratelimit_service_total_requests",
            match="ratelimit_server.*.total_requests",
            match_metric_type=MetricType.COUNTER,
            labels={"grpc_method": "$1"},
        ),
        MetricMapping(
            name="ratelimit_service_response_time_seconds",
            match="ratelimit_server.*.response_time",
            timer_type=ObserverType.HISTOGRAM,
            labels={"grpc_method": "$1"},
        ),
        MetricMapping(
            name="ratelimit_service_config_load_success",
            match="ratelimit.service.config_load_success",
        ),
        MetricMapping(
            name="ratelimit_service_config_load_error",
            match="ratelimit.service.config_load_error",
        ),
        MetricMapping(
            name="ratelimit_service_global_shadow_mode",
            match="ratelimit.service.global_shadow_mode",
        ),
    ]