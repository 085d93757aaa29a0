[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "burrowhttp"
version = "0.1.0"
description = "HTTP API and Prometheus metrics endpoint for monitoring Kafka consumer lag"
requires-python = ">=3.10"
keywords = ["kafka", "consumer-lag", "monitoring", "http-api", "prometheus", "wsgi"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
    "Topic :: System :: Monitoring",
]
dependencies = [
    "werkzeug",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["burrowhttp"]

[tool.hatch.build.targets.sdist]
include = ["burrowhttp", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
