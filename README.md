# istio-ratelimit

Builders that turn a description of an Envoy rate limit service into the
pieces needed to run it next to Istio: the environment ConfigMap, the
Service, a CPU-based HorizontalPodAutoscaler, the statsd exporter mapping
ConfigMap, and the YAML documents those ConfigMaps carry.

Every builder returns a plain Python dictionary holding the object's
`metadata` and its `spec` or `data`. The `apiVersion` and `kind` fields
are not included; add them, then dump the result to YAML or JSON or hand
it to the Kubernetes client of your choice.

## Installation

```
pip install istio-ratelimit
```

The only runtime dependency is PyYAML.

## Modules

### `istio_ratelimit.models`

Dataclasses describing the input:

- `RateLimitService` (`metadata: ObjectMeta`, `spec: RateLimitServiceSpec`),
  with `name` and `namespace` properties.
- `RateLimitServiceSpec` with `kubernetes` (`KubernetesSpec` holding
  `AutoScaling`), `backend` (`Backend` holding `Redis`), `monitoring`
  (`Monitoring` with `Prometheus` and `Tracing`), `environment`,
  `response_headers` (`ResponseHeaders`), `logging` (`Logging`),
  `shadow_mode` and `server` (`Server` with `GRPCServer` and `DebugServer`).
- Redis details: `RedisConfig`, `RedisTLS`, `RedisPool`, `RedisPerSecond`.
- gRPC listener TLS: `GRPCTLS`, `GRPCClientTLS`.
- `GlobalRateLimit` (`metadata`, `spec: GlobalRateLimitSpec` with an
  optional `identifier` and a `matcher` list of `Action`s). An `Action`
  may carry `RequestHeaders`, `RemoteAddress`, `GenericKey` or
  `HeaderValueMatch` (with `HeaderMatcher`s).
- `RateLimitLimit` (`unit`, `requests_per_unit`); `to_dict()` leaves out
  unset fields.

### `istio_ratelimit.env_builder.EnvBuilder`

`EnvBuilder(rate_limit_service).build()` returns the ConfigMap named
`<name>-config-env` whose `data` is `build_env()`. The variables are
merged in this order, later ones overriding earlier ones:

1. `build_default_env()`: `USE_STATSD=false`.
2. The user's `spec.environment`.
3. `build_redis_env()` when a Redis backend is set (socket type, type,
   URL, auth, pipelining, TLS certificate paths under `/tls/redis/`, pool,
   timeout, health check, and the per-second Redis under
   `/tls/redis-persecond/`). Called directly without a Redis backend it
   raises `ValueError`.
4. Monitoring: `build_monitoring_env()` when `monitoring.type` is set
   (Prometheus address and path, near-limit ratio, stats flush interval,
   tracing); otherwise `build_statsd_env()` when `monitoring.enabled` is
   true (`USE_STATSD=true`, `STATSD_HOST=localhost`, `STATSD_PORT=9125`).
5. `build_response_headers_env()`, `build_logging_env()`,
   `build_shadow_mode_env()`, `build_server_env()` (gRPC port, TLS paths
   under `/tls/grpc/` and `/tls/grpc-client/`, connection age, debug port)
   and `build_backend_env()` (cache key prefix, stop increment when over
   limit).

Because the Redis section comes after the user's environment, a
user-supplied `REDIS_TYPE` is replaced by the one from the backend, while
a user-supplied `USE_STATSD` survives unless monitoring sets it.

`build_labels()` returns the `app.kubernetes.io/name`, `managed-by` and
`created-by` labels.

### `istio_ratelimit.service_builder.ServiceBuilder`

`build()` returns a Service named after the rate limit service, selecting
its own labels, with these ports:

| name                   | port | protocol | appProtocol |
|------------------------|------|----------|-------------|
| `http`                 | 8080 | TCP      | http        |
| `grpc`                 | 8081 | TCP      | grpc        |
| `http-admin`           | 6070 | TCP      | http        |
| `http-statsd-exporter` | 9102 | TCP      | http        |
| `tcp-statsd-exporter`  | 9125 | TCP      | tcp         |
| `udp-statsd-exporter`  | 9125 | UDP      | udp         |

### `istio_ratelimit.hpa_builder.HorizontalPodAutoscalerBuilder`

`build()` returns an autoscaler targeting the `apps/v1` Deployment of the
same name, with `minReplicas` / `maxReplicas` from
`spec.kubernetes.auto_scaling` and a CPU utilization target of
`DEFAULT_CPU_AVERAGE_UTILIZATION` (80). It raises `ValueError` when
autoscaling or its maximum replica count is missing.

### `istio_ratelimit.statsd_builder`

- `statsd_matcher(matchers)` turns a list of `Action`s into the dotted
  descriptor path statsd reports, e.g. `user-agent.remote_address` or
  `generic_key_my-value`.
- `metric_mappings_for(service_name, domain, global_rate_limit)` returns
  six histogram mappings (`near_limit`, `over_limit`,
  `over_limit_with_local_cache`, `total_hits`, `within_limit`,
  `shadow_mode`) labelled with the limit's identifier, the service name
  and the limit's name. It raises `ValueError` if the limit has no
  identifier.
- `default_metric_mappings()` returns the six service-wide mappings.
- `new_statsd_config(service_name, domain, global_rate_limits)` returns a
  `MetricMapper` with the mappings of every limit that has an identifier,
  followed by the defaults.
- `StatsdConfigBuilder(rate_limit_service, config).build()` returns the
  ConfigMap `<name>-statsd-config` holding `config` under
  `statsd.mappingConf`.

### `istio_ratelimit.types`

- `RateLimitServiceConfig` and `RateLimitDescriptor`: the rate limit
  service's domain and descriptor tree. `to_dict()` leaves out empty
  fields; `RateLimitServiceConfig.to_yaml()` renders it (an empty config
  renders as `{}`).
- `MetricMapper` and `MetricMapping`, with the `ObserverType` and
  `MetricType` enums: the statsd exporter mapping document. Labels are
  written sorted; `MetricMapper.to_yaml()` renders it (no mappings renders
  as `mappings: []`).

### `istio_ratelimit.settings`

`load_settings(environ=None)` returns a frozen `Settings` with
`rate_limit_service_image` and `statsd_exporter_image`, read from
`RATE_LIMIT_SERVICE_IMAGE` and `STATSD_EXPORTER_IMAGE` in `environ` (the
process environment by default). A variable that is set, even to an empty
string, wins; unset ones fall back to `envoyproxy/ratelimit:5e1be594` and
`prom/statsd-exporter:v0.23.1`.

## Example

```python
from istio_ratelimit.env_builder import EnvBuilder
from istio_ratelimit.models import Backend, ObjectMeta, Redis, RateLimitService, RateLimitServiceSpec

service = RateLimitService(
    metadata=ObjectMeta(name="foo", namespace="bar"),
    spec=RateLimitServiceSpec(
        backend=Backend(redis=Redis(type="single", url="127.0.0.1:6379")),
    ),
)

config_map = EnvBuilder(service).build()
print(config_map["data"])
# {'USE_STATSD': 'false', 'REDIS_SOCKET_TYPE': 'tcp', 'REDIS_TYPE': 'single', 'REDIS_URL': '127.0.0.1:6379'}
```

Rendering a rate limit configuration:

```python
from istio_ratelimit.models import RateLimitLimit
from istio_ratelimit.types import RateLimitDescriptor, RateLimitServiceConfig

config = RateLimitServiceConfig(
    domain="foo",
    descriptors=[
        RateLimitDescriptor(
            key="bar",
            value="baz",
            rate_limit=RateLimitLimit(unit="hour", requests_per_unit=1),
        )
    ],
)
print(config.to_yaml())
# domain: foo
# descriptors:
# - key: bar
#   value: baz
#   rate_limit:
#     unit: hour
#     requests_per_unit: 1
```

## What this package does not do

- It does not build the Deployment that runs the rate limit service and
  the statsd exporter sidecar, nor the ConfigMap of rate limit rules that
  such a Deployment would mount.
- It does not talk to a cluster: there is no controller, no watch or
  reconcile loop, and no command to run. It only builds dictionaries and
  YAML text; applying them is up to you.

## Running the tests

```
pip install -e ".[test]"
pytest
```