import pytest

from istio_ratelimit.models import (
    Action,
    GenericKey,
    GlobalRateLimit,
    GlobalRateLimitSpec,
    HeaderMatcher,
    HeaderValueMatch,
    ObjectMeta,
    RateLimitService,
    RemoteAddress,
    RequestHeaders,
)
from istio_ratelimit.statsd_builder import (
    StatsdConfigBuilder,
    default_metric_mappings,
    metric_mappings_for,
    new_statsd_config,
    statsd_matcher,
)
from istio_ratelimit.types import MetricType, ObserverType


def _service(name, namespace):
    return RateLimitService(metadata=ObjectMeta(name=name, namespace=namespace))


def _global_rate_limit(identifier, descriptor_key="api_key", name="test-rate-limit"):
    return GlobalRateLimit(
        metadata=ObjectMeta(name=name),
        spec=GlobalRateLimitSpec(
            identifier=identifier,
            matcher=[
                Action(
                    request_headers=RequestHeaders(
                        header_name="x-api-key", descriptor_key=descriptor_key
                    )
                )
            ],
        ),
    )


@pytest.mark.parametrize(
    "matchers, expected",
    [
        (
            [
                Action(
                    request_headers=RequestHeaders(
                        header_name="User-Agent", descriptor_key="user-agent"
                    )
                ),
                Action(remote_address=RemoteAddress()),
            ],
            "user-agent.remote_address",
        ),
        (
            [
                Action(
                    request_headers=RequestHeaders(
                        header_name="Authorization",
                        descriptor_key="authorization",
                        skip_if_absent=True,
                    )
                ),
                Action(
                    header_value_match=HeaderValueMatch(
                        descriptor_value="content-type",
                        expect_match=False,
                        headers=[
                            HeaderMatcher(
                                name="Content-Type", exact_match="application/json"
                            )
                        ],
                    )
                ),
            ],
            "authorization.header_match_content-type",
        ),
        ([], ""),
    ],
)
def test_statsd_matcher(matchers, expected):
    assert statsd_matcher(matchers) == expected


def test_statsd_matcher_generic_key_with_descriptor_key():
    matchers = [
        Action(generic_key=GenericKey(descriptor_key="my-key", descriptor_value="my-value"))
    ]
    assert statsd_matcher(matchers) == "my-key_my-value"


def test_statsd_matcher_generic_key_without_descriptor_key():
    matchers = [Action(generic_key=GenericKey(descriptor_value="my-value"))]
    assert statsd_matcher(matchers) == "generic_key_my-value"


def test_new_builder_is_empty():
    builder = StatsdConfigBuilder()
    assert builder.config == ""
    assert builder.rate_limit_service == RateLimitService()


def test_builder_holds_service_and_config():
    service = _service("test-statsd", "test-namespace")
    builder = StatsdConfigBuilder(rate_limit_service=service, config="mappings:\n  - name: test")
    assert builder.rate_limit_service == service
    assert builder.config == "mappings:\n  - name: test"


@pytest.mark.parametrize(
    "name, namespace",
    [("my-ratelimit", "default"), ("prod-statsd", "production")],
)
def test_build_labels(name, namespace):
    builder = StatsdConfigBuilder(rate_limit_service=_service(name, namespace))
    assert builder.build_labels() == {
        "app.kubernetes.io/name": f"{name}-statsd-config",
        "app.kubernetes.io/managed-by": "istio-rateltimit-operator",
        "app.kubernetes.io/created-by": name,
    }


@pytest.mark.parametrize(
    "name, namespace, config",
    [
        ("statsd-cfg", "default", "mappings:\n  - name: test_metric"),
        ("prod-statsd", "production", "mappings:\n  - name: prod_metric"),
    ],
)
def test_build(name, namespace, config):
    builder = StatsdConfigBuilder(rate_limit_service=_service(name, namespace), config=config)
    assert builder.build() == {
        "metadata": {
            "name": f"{name}-statsd-config",
            "namespace": namespace,
            "labels": {
                "app.kubernetes.io/name": f"{name}-statsd-config",
                "app.kubernetes.io/managed-by": "istio-rateltimit-operator",
                "app.kubernetes.io/created-by": name,
            },
        },
        "data": {"statsd.mappingConf": config},
    }


@pytest.mark.parametrize(
    "limits, expected_count",
    [
        ([_global_rate_limit("test-identifier")], 12),
        ([_global_rate_limit(None)], 6),
        ([], 6),
    ],
)
def test_new_statsd_config_counts(limits, expected_count):
    mapper = new_statsd_config("my-ratelimit-service", "my-domain", limits)
    assert len(mapper.mappings) == expected_count


def test_new_statsd_config_defaults_come_last():
    mapper = new_statsd_config(
        "my-ratelimit-service", "my-domain", [_global_rate_limit("test-identifier")]
    )
    assert mapper.mappings[6:] == default_metric_mappings()
    assert mapper.mappings[0].name == "ratelimit_service_rate_limit_near_limit"


def test_metric_mappings_for_labels():
    limit = _global_rate_limit("test-identifier")
    mappings = metric_mappings_for("my-ratelimit-service", "my-domain", limit)
    assert len(mappings) == 6
    for mapping in mappings:
        assert mapping.labels["identifier"] == "test-identifier"
        assert mapping.labels["rate_limit_service_name"] == "my-ratelimit-service"
        assert mapping.labels["global_rate_limit_name"] == "test-rate-limit"


def test_metric_mapping_structure():
    limit = _global_rate_limit("test-id", descriptor_key="test_key")
    mappings = metric_mappings_for("test-service", "test-domain", limit)
    assert len(mappings) == 6
    near = mappings[0]
    assert near.name == "ratelimit_service_rate_limit_near_limit"
    assert near.match == "ratelimit.service.rate_limit.test-domain.test_key.near_limit"
    assert near.timer_type is ObserverType.HISTOGRAM
    assert near.labels == {
        "identifier": "test-id",
        "rate_limit_service_name": "test-service",
        "global_rate_limit_name": "test-rate-limit",
    }
    assert [m.match.rsplit(".", 1)[-1] for m in mappings] == [
        "near_limit",
        "over_limit",
        "over_limit_with_local_cache",
        "total_hits",
        "within_limit",
        "shadow_mode",
    ]


def test_metric_mappings_for_without_identifier_raises():
    with pytest.raises(ValueError):
        metric_mappings_for("svc", "domain", _global_rate_limit(None))


def test_default_metric_mappings():
    mappings = default_metric_mappings()
    assert [m.name for m in mappings] == [
        "ratelimit_service_should_rate_limit_error",
        "ratelimit_service_total_requests",
        "ratelimit_service_response_time_seconds",
        "ratelimit_service_config_load_success",
        "ratelimit_service_config_load_error",
        "ratelimit_service_global_shadow_mode",
    ]
    assert mappings[0].match_metric_type is MetricType.COUNTER
    assert mappings[0].labels == {"err_type": "$1"}
    assert mappings[2].timer_type is ObserverType.HISTOGRAM


def test_new_statsd_config_yaml_contains_defaults():
    text = new_statsd_config("svc", "domain", []).to_yaml()
    assert text.startswith("mappings:\n- match: ratelimit.service.call.should_rate_limit.*\n")
    assert "match_metric_type: counter" in text