"""Gauges describing consumer lag and topic offsets, in the Prometheus text format."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any, Iterable

from burrowhttp.backend import Backend, Status

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


def _escape_label(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def _format_value(value: float) -> str:
    if value != value:
        return "NaN"
    if value in (float("inf"), float("-inf")):
        return "+Inf" if value > 0 else "-Inf"
    if float(value).is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(float(value))


class GaugeVec:
    """A family of gauges sharing a name and a fixed set of label names."""

    def __init__(self, name: str, help_text: str, label_names: Iterable[str]) -> None:
        self.name = name
        self.help = help_text
        self.label_names = tuple(label_names)
        self._values: dict[tuple[str, ...], float] = {}
        self._lock = threading.Lock()

    def _key(self, labels: Mapping[str, str]) -> tuple[str, ...]:
        if set(labels) != set(self.label_names):
            raise ValueError(
                f"{self.name}: expected labels {sorted(self.label_names)}, got {sorted(labels)}"
            )
        return tuple(str(labels[name]) for name in self.label_names)

    def set(self, labels: Mapping[str, str], value: float) -> None:
        key = self._key(labels)
        with self._lock:
            self._values[key] = float(value)

    def get(self, labels: Mapping[str, str]) -> float | None:
        key = self._key(labels)
        with self._lock:
            return self._values.get(key)

    def delete(self, labels: Mapping[str, str]) -> bool:
        """Remove the gauge with exactly these labels; True if one was removed."""
        if set(labels) != set(self.label_names):
            return False
        key = tuple(str(labels[name]) for name in self.label_names)
        with self._lock:
            return self._values.pop(key, None) is not None

    def delete_partial_match(self, labels: Mapping[str, str]) -> int:
        """Remove every gauge whose labels include all of these; return how many."""
        if not set(labels) <= set(self.label_names):
            return 0
        wanted = [(self.label_names.index(name), str(value)) for name, value in labels.items()]
        with self._lock:
            doomed = [key for key in self._values if all(key[i] == v for i, v in wanted)]
            for key in doomed:
                del self._values[key]
        return len(doomed)

    def render(self) -> str:
        with self._lock:
            items = list(self._values.items())
        if not items:
            return ""
        order = sorted(range(len(self.label_names)), key=lambda i: self.label_names[i])
        rows = []
        for key, value in items:
            pairs = [(self.label_names[i], key[i]) for i in order]
            rows.append((pairs, value))
        rows.sort(key=lambda row: [v for _, v in row[0]])
        lines = [f"# HELP {self.name} {self.help}", f"# TYPE {self.name} gauge"]
        for pairs, value in rows:
            text = ",".join(f'{name}="{_escape_label(val)}"' for name, val in pairs)
            lines.append(f"{self.name}{{{text}}} {_format_value(value)}")
        return "\n".join(lines) + "\n"


def _get(obj: Any, name: str, default: Any = None) -> Any:
    if obj is None:
        return default
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _status_number(value: Any) -> int:
    if isinstance(value, str):
        return int(Status[value.upper()])
    return int(value or 0)


class MetricsRegistry:
    """The gauges exported on the metrics endpoint."""

    def __init__(self) -> None:
        self.consumer_total_lag = GaugeVec(
            "burrow_kafka_consumer_lag_total",
            "The sum of all partition current lag values for the group",
            ["cluster", "consumer_group"],
        )
        self.consumer_status = GaugeVec(
            "burrow_kafka_consumer_status",
            "The status of the consumer group. It is calculated from the highest status for "
            "the individual partitions. Statuses are an index list from NOTFOUND, OK, WARN, or ERR",
            ["cluster", "consumer_group"],
        )
        self.partition_status = GaugeVec(
            "burrow_kafka_topic_partition_status",
            "The status of topic partition. It is calculated from the highest status for the "
            "individual partitions. Statuses are an index list from OK, WARN, STOP, STALL, REWIND",
            ["cluster", "consumer_group", "topic", "partition"],
        )
        self.consumer_current_offset = GaugeVec(
            "burrow_kafka_consumer_current_offset",
            "Latest offset that Burrow is storing for this partition",
            ["cluster", "consumer_group", "topic", "partition"],
        )
        self.consumer_partition_lag = GaugeVec(
            "burrow_kafka_consumer_partition_lag",
            "Number of messages the consumer group is behind by for a partition as reported by Burrow",
            ["cluster", "consumer_group", "topic", "partition"],
        )
        self.topic_partition_offset = GaugeVec(
            "burrow_kafka_topic_partition_offset",
            "Latest offset the topic that Burrow is storing for this partition",
            ["cluster", "topic", "partition"],
        )

    @property
    def gauges(self) -> list[GaugeVec]:
        return [
            self.consumer_total_lag,
            self.consumer_status,
            self.partition_status,
            self.consumer_current_offset,
            self.consumer_partition_lag,
            self.topic_partition_offset,
        ]

    def delete_consumer_metrics(self, cluster: str, consumer: str) -> None:
        labels = {"cluster": cluster, "consumer_group": consumer}
        self.consumer_total_lag.delete(labels)
        self.consumer_status.delete(labels)
        self.consumer_partition_lag.delete_partial_match(labels)
        self.consumer_current_offset.delete_partial_match(labels)
        self.partition_status.delete_partial_match(labels)

    def delete_topic_metrics(self, cluster: str, topic: str) -> None:
        labels = {"cluster": cluster, "topic": topic}
        self.topic_partition_offset.delete_partial_match(labels)
        self.consumer_partition_lag.delete_partial_match(labels)
        self.consumer_current_offset.delete_partial_match(labels)
        self.consumer_total_lag.delete_partial_match(labels)
        self.consumer_status.delete_partial_match(labels)

    def delete_consumer_topic_metrics(self, cluster: str, consumer: str, topic: str) -> None:
        labels = {"cluster": cluster, "consumer_group": consumer, "topic": topic}
        self.partition_status.delete_partial_match(labels)
        self.consumer_current_offset.delete_partial_match(labels)
        self.consumer_partition_lag.delete_partial_match(labels)

    def collect(self, backend: Backend) -> None:
        """Refresh every gauge from storage and the evaluator."""
        for cluster in backend.list_clusters():
            for consumer in backend.list_consumers(cluster):
                status = backend.get_full_consumer_status(cluster, consumer)
                if status is None or _status_number(_get(status, "status")) == Status.NOTFOUND:
                    continue
                group_labels = {"cluster": cluster, "consumer_group": consumer}
                self.consumer_total_lag.set(group_labels, _get(status, "total_lag", 0) or 0)
                self.consumer_status.set(group_labels, _status_number(_get(status, "status")))
                for partition in _get(status, "partitions", None) or []:
                    labels = {
                        **group_labels,
                        "topic": str(_get(partition, "topic", "")),
                        "partition": str(int(_get(partition, "partition", 0) or 0)),
                    }
                    self.consumer_partition_lag.set(labels, _get(partition, "current_lag", 0) or 0)
                    if _get(partition, "complete", 0) == 1.0:
                        end = _get(partition, "end")
                        self.consumer_current_offset.set(labels, _get(end, "offset", 0) or 0)
                        self.partition_status.set(
                            labels, _status_number(_get(partition, "status"))
                        )
            for topic in backend.list_topics(cluster):
                for number, offset in enumerate(backend.get_topic_detail(cluster, topic)):
                    self.topic_partition_offset.set(
                        {"cluster": cluster, "topic": topic, "partition": str(number)}, offset
                    )

    def render(self) -> str:
        return "".join(gauge.render() for gauge in self.gauges)