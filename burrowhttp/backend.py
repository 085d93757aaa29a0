"""Requests to the storage and evaluator subsystems, and the replies they give."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import Any, Callable, Optional


class StorageRequestType(Enum):
    FETCH_CLUSTERS = auto()
    FETCH_CONSUMERS = auto()
    FETCH_TOPICS = auto()
    FETCH_TOPIC = auto()
    FETCH_CONSUMER = auto()
    FETCH_CONSUMERS_FOR_TOPIC = auto()
    SET_DELETE_GROUP = auto()


class Status(IntEnum):
    """Consumer and partition status, in order of increasing severity."""

    NOTFOUND = 0
    OK = 1
    WARN = 2
    ERR = 3
    STOP = 4
    STALL = 5
    REWIND = 6


@dataclass(frozen=True)
class StorageRequest:
    request_type: StorageRequestType
    cluster: str = ""
    group: str = ""
    topic: str = ""


@dataclass(frozen=True)
class EvaluatorRequest:
    cluster: str
    group: str
    show_all: bool = False


def _no_reply(_request: Any) -> None:
    return None


class Backend:
    """Routes requests to a storage handler and an evaluator handler."""

    def __init__(
        self,
        storage: Optional[Callable[[StorageRequest], Any]] = None,
        evaluator: Optional[Callable[[EvaluatorRequest], Any]] = None,
    ) -> None:
        self.storage = storage or _no_reply
        self.evaluator = evaluator or _no_reply

    def request_storage(self, request: StorageRequest) -> Any:
        """Send a request to storage; None means the item was not found."""
        return self.storage(request)

    def request_evaluator(self, request: EvaluatorRequest) -> Any:
        return self.evaluator(request)

    def _fetch_list(self, request: StorageRequest) -> list:
        response = self.request_storage(request)
        return [] if response is None else list(response)

    def list_clusters(self) -> list[str]:
        return self._fetch_list(StorageRequest(StorageRequestType.FETCH_CLUSTERS))

    def list_consumers(self, cluster: str) -> list[str]:
        return self._fetch_list(StorageRequest(StorageRequestType.FETCH_CONSUMERS, cluster=cluster))

    def list_topics(self, cluster: str) -> list[str]:
        return self._fetch_list(StorageRequest(StorageRequestType.FETCH_TOPICS, cluster=cluster))

    def get_topic_detail(self, cluster: str, topic: str) -> list[int]:
        return self._fetch_list(
            StorageRequest(StorageRequestType.FETCH_TOPIC, cluster=cluster, topic=topic)
        )

    def get_full_consumer_status(self, cluster: str, consumer: str) -> Any:
        return self.request_evaluator(EvaluatorRequest(cluster=cluster, group=consumer, show_all=True))