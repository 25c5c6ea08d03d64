import pytest

from istio_ratelimit.hpa_builder import HorizontalPodAutoscalerBuilder
from istio_ratelimit.models import (
    AutoScaling,
    KubernetesSpec,
    ObjectMeta,
    RateLimitService,
    RateLimitServiceSpec,
)


def _service(name, namespace, min_replica=2, max_replica=10):
    return RateLimitService(
        metadata=ObjectMeta(name=name, namespace=namespace),
        spec=RateLimitServiceSpec(
            kubernetes=KubernetesSpec(
                auto_scaling=AutoScaling(min_replica=min_replica, max_replica=max_replica)
            )
        ),
    )


def _labels(name):
    return {
        "app.kubernetes.io/name": name,
        "app.kubernetes.io/managed-by": "istio-rateltimit-operator",
        "app.kubernetes.io/created-by": name,
    }


def test_new_builder_has_empty_service():
    assert HorizontalPodAutoscalerBuilder().rate_limit_service == RateLimitService()


def test_builder_keeps_service():
    service = RateLimitService(metadata=ObjectMeta(name="test-hpa", namespace="test-namespace"))
    assert HorizontalPodAutoscalerBuilder(service).rate_limit_service == service


@pytest.mark.parametrize(
    "name, namespace",
    [("my-ratelimit", "default"), ("production-hpa", "production")],
)
def test_build_labels(name, namespace):
    builder = HorizontalPodAutoscalerBuilder(
        RateLimitService(metadata=ObjectMeta(name=name, namespace=namespace))
    )
    assert builder.build_labels() == _labels(name)


@pytest.mark.parametrize(
    "name, namespace",
    [("ratelimit-hpa", "default"), ("prod-ratelimit", "production")],
)
def test_build(name, namespace):
    hpa = HorizontalPodAutoscalerBuilder(_service(name, namespace)).build()
    assert hpa == {
        "metadata": {"name": name, "namespace": namespace, "labels": _labels(name)},
        "spec": {
            "minReplicas": 2,
            "maxReplicas": 10,
            "scaleTargetRef": {"apiVersion": "apps/v1", "kind": "Deployment", "name": name},
            "metrics": [
                {
                    "type": "Resource",
                    "resource": {
                        "name": "cpu",
                        "target": {"type": "Utilization", "averageUtilization": 80},
                    },
                }
            ],
        },
    }


def test_build_scale_target_ref():
    hpa = HorizontalPodAutoscalerBuilder(_service("scale-target-test", "default", 1, 5)).build()
    ref = hpa["spec"]["scaleTargetRef"]
    assert ref["apiVersion"] == "apps/v1"
    assert ref["kind"] == "Deployment"
    assert ref["name"] == "scale-target-test"


def test_build_metrics():
    hpa = HorizontalPodAutoscalerBuilder(_service("metrics-test", "default", 1, 5)).build()
    metrics = hpa["spec"]["metrics"]
    assert len(metrics) == 1
    metric = metrics[0]
    assert metric["type"] == "Resource"
    assert metric["resource"]["name"] == "cpu"
    assert metric["resource"]["target"]["type"] == "Utilization"
    assert metric["resource"]["target"]["averageUtilization"] == 80


@pytest.mark.parametrize(
    "min_replica, max_replica",
    [(1, 3), (2, 10), (5, 100)],
    ids=["small", "medium", "large"],
)
def test_build_replicas(min_replica, max_replica):
    hpa = HorizontalPodAutoscalerBuilder(
        _service("replica-test", "default", min_replica, max_replica)
    ).build()
    assert hpa["spec"]["minReplicas"] == min_replica
    assert hpa["spec"]["maxReplicas"] == max_replica


def test_build_metadata():
    hpa = HorizontalPodAutoscalerBuilder(_service("metadata-test", "test-ns", 1, 5)).build()
    metadata = hpa["metadata"]
    assert metadata["name"] == "metadata-test"
    assert metadata["namespace"] == "test-ns"
    assert metadata["labels"]["app.kubernetes.io/name"] == "metadata-test"
    assert metadata["labels"]["app.kubernetes.io/managed-by"] == "istio-rateltimit-operator"
    assert metadata["labels"]["app.kubernetes.io/created-by"] == "metadata-test"


def test_build_without_min_replica_omits_it():
    hpa = HorizontalPodAutoscalerBuilder(
        _service("no-min", "default", min_replica=None, max_replica=4)
    ).build()
    assert "minReplicas" not in hpa["spec"]
    assert hpa["spec"]["maxReplicas"] == 4


def test_build_without_autoscaling_raises():
    service = RateLimitService(metadata=ObjectMeta(name="x", namespace="y"))
    with pytest.raises(ValueError):
        HorizontalPodAutoscalerBuilder(service).build()


def test_build_without_max_replica_raises():
    with pytest.raises(ValueError):
        HorizontalPodAutoscalerBuilder(_service("x", "y", 1, None)).build()