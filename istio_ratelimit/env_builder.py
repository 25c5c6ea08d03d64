"""Environment ConfigMap for a rate limit service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from istio_ratelimit.models import Redis, RateLimitService, RateLimitServiceSpec

MANAGED_BY = "istio-rateltimit-operator"


@dataclass
class EnvBuilder:
    """Builds the ConfigMap holding the rate limit service's environment."""

    rate_limit_service: RateLimitService = field(default_factory=RateLimitService)

    @property
    def _spec(self) -> RateLimitServiceSpec:
        return self.rate_limit_service.spec

    @property
    def _config_name(self) -> str:
        return self.rate_limit_service.name + "-config-env"

    def build(self) -> dict[str, Any]:
        """Return the ConfigMap manifest."""
        return {
            "metadata": {
                "name": self._config_name,
                "namespace": self.rate_limit_service.namespace,
                "labels": self.build_labels(),
            },
            "data": self.build_env(),
        }

    def build_labels(self) -> dict[str, str]:
        """Return the labels put on the ConfigMap."""
        return {
            "app.kubernetes.io/name": self._config_name,
            "app.kubernetes.io/managed-by": MANAGED_BY,
            "app.kubernetes.io/created-by": self.rate_limit_service.name,
        }

    def build_env(self) -> dict[str, str]:
        """Merge every section; later sections override user-provided variables."""
        spec = self._spec
        env = self.build_default_env()

        if spec.environment is not None:
            env.update(spec.environment)

        backend = spec.backend
        if backend is not None and backend.redis is not None:
            env.update(self.build_redis_env())

        monitoring = spec.monitoring
        if monitoring is not None:
            if monitoring.type:
                env.update(self.build_monitoring_env())
            elif monitoring.enabled:
                env.update(self.build_statsd_env())

        if spec.response_headers is not None:
            env.update(self.build_response_headers_env())
        if spec.logging is not None:
            env.update(self.build_logging_env())
        if spec.shadow_mode:
            env.update(self.build_shadow_mode_env())
        if spec.server is not None:
            env.update(self.build_server_env())
        if backend is not None:
            env.update(self.build_backend_env())

        return env

    def build_default_env(self) -> dict[str, str]:
        """Return variables set for every service."""
        return {"USE_STATSD": "false"}

    def _redis(self) -> Redis:
        backend = self._spec.backend
        if backend is None or backend.redis is None:
            raise ValueError("rate limit service has no redis backend")
        return backend.redis

    def build_redis_env(self) -> dict[str, str]:
        """Return the Redis connection variables."""
        redis = self._redis()
        data = {
            "REDIS_SOCKET_TYPE": "tcp",
            "REDIS_TYPE": redis.type,
            "REDIS_URL": redis.url,
        }

        if redis.auth:
            data["REDIS_AUTH"] = redis.auth

        if redis.config is not None:
            if redis.config.pipeline_limit is not None:
                data["REDIS_PIPELINE_LIMIT"] = str(redis.config.pipeline_limit)
            if redis.config.pipeline_window is not None:
                data["REDIS_PIPELINE_WINDOW"] = redis.config.pipeline_window

        if redis.tls is not None:
            if redis.tls.enabled:
                data["REDIS_TLS"] = "true"
            if redis.tls.secret_ref:
                data["REDIS_TLS_CACERT"] = "/tls/redis/ca.crt"
                data["REDIS_TLS_CLIENT_CERT"] = "/tls/redis/tls.crt"
                data["REDIS_TLS_CLIENT_KEY"] = "/tls/redis/tls.key"
            if redis.tls.skip_hostname_verification:
                data["REDIS_TLS_SKIP_HOSTNAME_VERIFICATION"] = "true"

        if redis.pool is not None:
            if redis.pool.size > 0:
                data["REDIS_POOL_SIZE"] = str(redis.pool.size)
            if redis.pool.on_empty_behavior:
                data["REDIS_POOL_ON_EMPTY_BEHAVIOR"] = redis.pool.on_empty_behavior
            if redis.pool.on_empty_wait_duration:
                data["REDIS_POOL_ON_EMPTY_WAIT_DURATION"] = redis.pool.on_empty_wait_duration

        if redis.timeout is not None:
            data["REDIS_TIMEOUT"] = redis.timeout

        if redis.health_check_active_connection:
            data["REDIS_HEALTH_CHECK_ACTIVE_CONNECTION"] = "true"

        per_second = redis.per_second
        if per_second is not None and per_second.enabled:
            data["REDIS_PERSECOND"] = "true"
            data["REDIS_PERSECOND_SOCKET_TYPE"] = "tcp"
            if per_second.url:
                data["REDIS_PERSECOND_URL"] = per_second.url
            if per_second.tls is not None and per_second.tls.enabled:
                data["REDIS_PERSECOND_TLS"] = "true"
                if per_second.tls.secret_ref:
                    data["REDIS_PERSECOND_TLS_CACERT"] = "/tls/redis-persecond/ca.crt"
                    data["REDIS_PERSECOND_TLS_CLIENT_CERT"] = "/tls/redis-persecond/tls.crt"
                    data["REDIS_PERSECOND_TLS_CLIENT_KEY"] = "/tls/redis-persecond/tls.key"
            if per_second.pool is not None and per_second.pool.size > 0:
                data["REDIS_PERSECOND_POOL_SIZE"] = str(per_second.pool.size)

        return data

    def build_backend_env(self) -> dict[str, str]:
        """Return cache key variables of the backend."""
        data: dict[str, str] = {}
        backend = self._spec.backend
        if backend is None:
            return data
        if backend.cache_key_prefix:
            data["CACHE_KEY_PREFIX"] = backend.cache_key_prefix
        if backend.stop_cache_key_increment_when_overlimit:
            data["STOP_CACHE_KEY_INCREMENT_WHEN_OVERLIMIT"] = "true"
        return data

    def build_statsd_env(self) -> dict[str, str]:
        """Return variables pointing stats at the statsd exporter sidecar."""
        return {
            "USE_STATSD": "true",
            "STATSD_HOST": "localhost",
            "STATSD_PORT": "9125",
        }

    def build_monitoring_env(self) -> dict[str, str]:
        """Return metrics and tracing variables."""
        data: dict[str, str] = {}
        monitoring = self._spec.monitoring
        if monitoring is None:
            return data

        data["USE_STATSD"] = "false"
        if monitoring.type == "prometheus":
            data["USE_PROMETHEUS"] = "true"
            if monitoring.prometheus is not None:
                if monitoring.prometheus.addr:
                    data["PROMETHEUS_ADDR"] = monitoring.prometheus.addr
                if monitoring.prometheus.path:
                    data["PROMETHEUS_PATH"] = monitoring.prometheus.path

        if monitoring.near_limit_ratio is not None:
            data["NEAR_LIMIT_RATIO"] = monitoring.near_limit_ratio
        if monitoring.stats_flush_interval is not None:
            data["STATS_FLUSH_INTERVAL"] = monitoring.stats_flush_interval

        tracing = monitoring.tracing
        if tracing is not None and tracing.enabled:
            data["TRACING_ENABLED"] = "true"
            if tracing.exporter_protocol:
                data["TRACING_EXPORTER_PROTOCOL"] = tracing.exporter_protocol
            if tracing.service_name:
                data["TRACING_SERVICE_NAME"] = tracing.service_name
            if tracing.service_namespace:
                data["TRACING_SERVICE_NAMESPACE"] = tracing.service_namespace
            if tracing.sampling_rate:
                data["TRACING_SAMPLING_RATE"] = tracing.sampling_rate

        return data

    def build_response_headers_env(self) -> dict[str, str]:
        """Return the response header switch."""
        headers = self._spec.response_headers
        if headers is not None and headers.enabled:
            return {"RESPONSE_HEADERS_ENABLED": "true"}
        return {}

    def build_logging_env(self) -> dict[str, str]:
        """Return log level and format variables."""
        data: dict[str, str] = {}
        logging = self._spec.logging
        if logging is None:
            return data
        if logging.level:
            data["LOG_LEVEL"] = logging.level
        if logging.format:
            data["LOG_FORMAT"] = logging.format
        return data

    def build_shadow_mode_env(self) -> dict[str, str]:
        """Return the global shadow mode switch."""
        return {"SHADOW_MODE": "true"} if self._spec.shadow_mode else {}

    def build_server_env(self) -> dict[str, str]:
        """Return gRPC and debug listener variables."""
        data: dict[str, str] = {}
        server = self._spec.server
        if server is None:
            return data

        grpc = server.grpc
        if grpc is not None:
            if grpc.port is not None:
                data["GRPC_PORT"] = str(int(grpc.port))
            if grpc.tls is not None and grpc.tls.enabled and grpc.tls.secret_ref:
                data["GRPC_SERVER_TLS_CERT"] = "/tls/grpc/tls.crt"
                data["GRPC_SERVER_TLS_KEY"] = "/tls/grpc/tls.key"
            if grpc.client_tls is not None:
                if grpc.client_tls.ca_cert_secret_ref:
                    data["GRPC_SERVER_TLS_CLIENT_CACERT"] = "/tls/grpc-client/ca.crt"
                if grpc.client_tls.san:
                    data["GRPC_CLIENT_TLS_SAN"] = grpc.client_tls.san
            if grpc.max_connection_age is not None:
                data["GRPC_MAX_CONNECTION_AGE"] = grpc.max_connection_age
            if grpc.max_connection_age_grace is not None:
                data["GRPC_MAX_CONNECTION_AGE_GRACE"] = grpc.max_connection_age_grace

        if server.debug is not None and server.debug.port is not None:
            data["DEBUG_PORT"] = str(int(server.debug.port))

        return data