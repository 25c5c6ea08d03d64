[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "istio-ratelimit"
version = "0.1.0"
description = "Builders for the Kubernetes objects and configuration documents of an Envoy rate limit service run alongside Istio"
requires-python = ">=3.10"
keywords = ["istio", "envoy", "ratelimit", "kubernetes", "statsd", "configmap"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["istio_ratelimit"]

[tool.pytest.ini_options]
addopts = "-ra"
