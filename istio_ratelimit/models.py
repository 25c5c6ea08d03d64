"""Resource models for rate limit services and global rate limits."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ObjectMeta:
    """Name, namespace and labels of a resource."""

    name: str = ""
    namespace: str = ""
    labels: dict[str, str] = field(default_factory=dict)


@dataclass
class RedisConfig:
    """Redis pipelining options."""

    pipeline_limit: int | None = None
    pipeline_window: str | None = None


@dataclass
class RedisTLS:
    """TLS options for a Redis connection."""

    enabled: bool = False
    secret_ref: str = ""
    skip_hostname_verification: bool = False


@dataclass
class RedisPool:
    """Connection pool options for Redis."""

    size: int = 0
    on_empty_behavior: str = ""
    on_empty_wait_duration: str = ""


@dataclass
class RedisPerSecond:
    """A separate Redis used for per-second limits."""

    enabled: bool = False
    url: str = ""
    tls: RedisTLS | None = None
    pool: RedisPool | None = None


@dataclass
class Redis:
    """Redis backend settings."""

    type: str = ""
    url: str = ""
    auth: str = ""
    config: RedisConfig | None = None
    tls: RedisTLS | None = None
    pool: RedisPool | None = None
    timeout: str | None = None
    health_check_active_connection: bool = False
    per_second: RedisPerSecond | None = None


@dataclass
class Backend:
    """Storage backend of the rate limit service."""

    redis: Redis | None = None
    cache_key_prefix: str = ""
    stop_cache_key_increment_when_overlimit: bool = False


@dataclass
class Prometheus:
    """Prometheus exposition settings."""

    addr: str = ""
    path: str = ""


@dataclass
class Tracing:
    """Tracing exporter settings."""

    enabled: bool = False
    exporter_protocol: str = ""
    service_name: str = ""
    service_namespace: str = ""
    sampling_rate: str = ""


@dataclass
class Monitoring:
    """Metrics and tracing settings."""

    enabled: bool = False
    type: str = ""
    prometheus: Prometheus | None = None
    near_limit_ratio: str | None = None
    stats_flush_interval: str | None = None
    tracing: Tracing | None = None


@dataclass
class ResponseHeaders:
    """Whether rate limit headers are added to responses."""

    enabled: bool = False


@dataclass
class Logging:
    """Log level and format."""

    level: str = ""
    format: str = ""


@dataclass
class GRPCTLS:
    """Server-side TLS for the gRPC listener."""

    enabled: bool = False
    secret_ref: str = ""


@dataclass
class GRPCClientTLS:
    """Client certificate verification for the gRPC listener."""

    ca_cert_secret_ref: str = ""
    san: str = ""


@dataclass
class GRPCServer:
    """gRPC listener settings."""

    port: int | None = None
    tls: GRPCTLS | None = None
    client_tls: GRPCClientTLS | None = None
    max_connection_age: str | None = None
    max_connection_age_grace: str | None = None


@dataclass
class DebugServer:
    """Debug listener settings."""

    port: int | None = None


@dataclass
class Server:
    """Listener settings of the rate limit service."""

    grpc: GRPCServer | None = None
    debug: DebugServer | None = None


@dataclass
class AutoScaling:
    """Replica bounds for horizontal autoscaling."""

    min_replica: int | None = None
    max_replica: int | None = None


@dataclass
class KubernetesSpec:
    """Kubernetes-specific deployment settings."""

    auto_scaling: AutoScaling | None = None


@dataclass
class RateLimitServiceSpec:
    """Desired state of a rate limit service."""

    kubernetes: KubernetesSpec | None = None
    backend: Backend | None = None
    monitoring: Monitoring | None = None
    environment: dict[str, str] | None = None
    response_headers: ResponseHeaders | None = None
    logging: Logging | None = None
    shadow_mode: bool = False
    server: Server | None = None


@dataclass
class RateLimitService:
    """A rate limit service resource."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: RateLimitServiceSpec = field(default_factory=RateLimitServiceSpec)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace


@dataclass
class RequestHeaders:
    """Descriptor taken from a request header."""

    header_name: str = ""
    descriptor_key: str = ""
    skip_if_absent: bool = False


@dataclass
class RemoteAddress:
    """Descriptor taken from the client address."""


@dataclass
class GenericKey:
    """A fixed descriptor entry."""

    descriptor_value: str = ""
    descriptor_key: str | None = None


@dataclass
class HeaderMatcher:
    """Condition on one request header."""

    name: str = ""
    exact_match: str = ""
    prefix_match: str = ""
    suffix_match: str = ""
    regex_match: str = ""
    present_match: bool | None = None
    invert_match: bool = False


@dataclass
class HeaderValueMatch:
    """Descriptor emitted when request headers match."""

    descriptor_value: str = ""
    expect_match: bool | None = None
    headers: list[HeaderMatcher] = field(default_factory=list)


@dataclass
class Action:
    """One descriptor-producing action of a global rate limit."""

    request_headers: RequestHeaders | None = None
    remote_address: RemoteAddress | None = None
    generic_key: GenericKey | None = None
    header_value_match: HeaderValueMatch | None = None


@dataclass
class RateLimitLimit:
    """A request budget per time unit."""

    unit: str = ""
    requests_per_unit: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Return the limit as a mapping, leaving out unset fields."""
        data: dict[str, Any] = {}
        if self.unit:
            data["unit"] = self.unit
        if self.requests_per_unit:
            data["requests_per_unit"] = self.requests_per_unit
        return data


@dataclass
class GlobalRateLimitSpec:
    """Desired state of a global rate limit."""

    identifier: str | None = None
    matcher: list[Action] = field(default_factory=list)


@dataclass
class GlobalRateLimit:
    """A global rate limit resource."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: GlobalRateLimitSpec = field(default_factory=GlobalRateLimitSpec)

    @property
    def name(self) -> str:
        return self.metadata.name