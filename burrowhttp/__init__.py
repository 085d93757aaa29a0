"""HTTP API, configuration views and Prometheus metrics for monitoring Kafka consumer lag."""

__version__ = "0.1.0"

__all__ = [
    "backend",
    "config_views",
    "coordinator",
    "kafka_views",
    "metrics",
    "responses",
    "settings",
]