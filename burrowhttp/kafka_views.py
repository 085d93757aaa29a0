"""Views that report clusters, topics and consumers held by storage and the evaluator."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from burrowhttp.backend import Backend, EvaluatorRequest, Status, StorageRequest, StorageRequestType
from burrowhttp.responses import ApiReply, error_reply, json_reply


def _storage(backend: Backend, kind: StorageRequestType, **fields: str) -> Any:
    return backend.request_storage(StorageRequest(kind, **fields))


def cluster_list(backend: Backend, path: str) -> ApiReply:
    response = _storage(backend, StorageRequestType.FETCH_CLUSTERS)
    return json_reply(200, "cluster list returned", path, clusters=list(response or []))


def topic_list(backend: Backend, cluster: str, path: str) -> ApiReply:
    response = _storage(backend, StorageRequestType.FETCH_TOPICS, cluster=cluster)
    if response is None:
        return error_reply(404, "cluster not found", path)
    return json_reply(200, "topic list returned", path, topics=list(response))


def topic_detail(backend: Backend, cluster: str, topic: str, path: str) -> ApiReply:
    response = _storage(backend, StorageRequestType.FETCH_TOPIC, cluster=cluster, topic=topic)
    if response is None:
        return error_reply(404, "cluster or topic not found", path)
    return json_reply(200, "topic offsets returned", path, offsets=list(response))


def topic_consumers(backend: Backend, cluster: str, topic: str, path: str) -> ApiReply:
    response = _storage(
        backend, StorageRequestType.FETCH_CONSUMERS_FOR_TOPIC, cluster=cluster, topic=topic
    )
    if response is None:
        return error_reply(404, "cluster not found", path)
    return json_reply(200, "consumers of topic returned", path, consumers=list(response))


def consumer_list(backend: Backend, cluster: str, path: str) -> ApiReply:
    response = _storage(backend, StorageRequestType.FETCH_CONSUMERS, cluster=cluster)
    if response is None:
        return error_reply(404, "cluster not found", path)
    return json_reply(200, "consumer list returned", path, consumers=list(response))


def consumer_detail(backend: Backend, cluster: str, group: str, path: str) -> ApiReply:
    response = _storage(backend, StorageRequestType.FETCH_CONSUMER, cluster=cluster, group=group)
    if response is None:
        return error_reply(404, "cluster or consumer not found", path)
    return json_reply(200, "consumer detail returned", path, topics=response)


def _status_of(response: Any) -> Any:
    if isinstance(response, Mapping):
        return response.get("status")
    return getattr(response, "status", None)


def consumer_status(
    backend: Backend, cluster: str, group: str, path: str, show_all: bool
) -> ApiReply:
    """Evaluated status of a group; show_all includes every partition."""
    response = backend.request_evaluator(
        EvaluatorRequest(cluster=cluster, group=group, show_all=show_all)
    )
    status = _status_of(response)
    not_found = response is None or status == Status.NOTFOUND or status == Status.NOTFOUND.name
    return json_reply(404 if not_found else 200, "consumer status returned", path, status=response)


def consumer_delete(backend: Backend, cluster: str, group: str, topic: str, path: str) -> ApiReply:
    """Ask storage to forget a group, or only its offsets for one topic."""
    _storage(
        backend,
        StorageRequestType.SET_DELETE_GROUP,
        cluster=cluster,
        group=group,
        topic=topic or "",
    )
    return json_reply(200, "consumer group removed", path)