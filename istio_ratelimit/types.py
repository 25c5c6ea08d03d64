"""Rate limit service configuration and statsd exporter mapping documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import yaml

from istio_ratelimit.models import RateLimitLimit

_YAML_WIDTH = 4096


def _dump(data: Any) -> str:
    return yaml.safe_dump(
        data, sort_keys=False, default_flow_style=False, width=_YAML_WIDTH
    )


@dataclass
class RateLimitDescriptor:
    """One node of the descriptor tree in a rate limit service config."""

    key: str = ""
    value: str = ""
    shadow_mode: bool = False
    detailed_metric: bool = False
    rate_limit: RateLimitLimit = field(default_factory=RateLimitLimit)
    descriptors: list[RateLimitDescriptor] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the descriptor as a mapping, leaving out empty fields."""
        data: dict[str, Any] = {}
        if self.key:
            data["key"] = self.key
        if self.value:
            data["value"] = self.value
        if self.shadow_mode:
            data["shadow_mode"] = True
        if self.detailed_metric:
            data["detailed_metric"] = True
        limit = self.rate_limit.to_dict()
        if limit:
            data["rate_limit"] = limit
        if self.descriptors:
            data["descriptors"] = [d.to_dict() for d in self.descriptors]
        return data


@dataclass
class RateLimitServiceConfig:
    """A domain with its descriptor tree."""

    domain: str = ""
    descriptors: list[RateLimitDescriptor] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the config as a mapping, leaving out empty fields."""
        data: dict[str, Any] = {}
        if self.domain:
            data["domain"] = self.domain
        if self.descriptors:
            data["descriptors"] = [d.to_dict() for d in self.descriptors]
        return data

    def to_yaml(self) -> str:
        """Render the config as YAML."""
        return _dump(self.to_dict())


class ObserverType(str, Enum):
    """How the exporter observes timer values."""

    HISTOGRAM = "histogram"
    SUMMARY = "summary"
    DEFAULT = ""


class MetricType(str, Enum):
    """Kind of statsd metric a mapping matches."""

    COUNTER = "counter"
    GAUGE = "gauge"
    OBSERVER = "observer"
    TIMER = "timer"  # deprecated


@dataclass
class MetricMapping:
    """One statsd-to-Prometheus mapping rule."""

    match: str = ""
    name: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    observer_type: ObserverType = ObserverType.DEFAULT
    timer_type: ObserverType = ObserverType.DEFAULT
    match_metric_type: MetricType | None = None

    def __post_init__(self) -> None:
        self.observer_type = ObserverType(self.observer_type)
        self.timer_type = ObserverType(self.timer_type)
        if self.match_metric_type is not None and self.match_metric_type != "":
            self.match_metric_type = MetricType(self.match_metric_type)
        else:
            self.match_metric_type = None

    def to_dict(self) -> dict[str, Any]:
        """Return the mapping rule, with labels sorted and empty fields left out."""
        data: dict[str, Any] = {"match": self.match, "name": self.name}
        if self.labels:
            data["labels"] = dict(sorted(self.labels.items()))
        if self.observer_type is not ObserverType.DEFAULT:
            data["observer_type"] = self.observer_type.value
        if self.timer_type is not ObserverType.DEFAULT:
            data["timer_type"] = self.timer_type.value
        if self.match_metric_type is not None:
            data["match_metric_type"] = self.match_metric_type.value
        return data


@dataclass
class MetricMapper:
    """A statsd exporter mapping document."""

    mappings: list[MetricMapping] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the document as a mapping."""
        return {"mappings": [m.to_dict() for m in self.mappings]}

    def to_yaml(self) -> str:
        """Render the document as YAML."""
        return _dump(self.to_dict())