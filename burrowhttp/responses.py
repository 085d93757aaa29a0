"""JSON response bodies returned by the HTTP interface."""

from __future__ import annotations

import dataclasses
import json
import socket
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

_ENCODE_FAILURE = {"error": True, "message": "could not encode JSON", "result": {}}


def _f(json_name: str, default: Any = dataclasses.MISSING, factory: Any = dataclasses.MISSING):
    return field(default=default, default_factory=factory, metadata={"json": json_name})


@dataclass(frozen=True)
class RequestInfo:
    url: str = _f("url", "")
    host: str = _f("host", "")


@dataclass(frozen=True)
class ApiReply:
    """An HTTP status together with the JSON payload to send."""

    status: int
    payload: dict

    @property
    def body(self) -> bytes:
        return json.dumps(self.payload).encode("utf-8")


@dataclass
class TLSProfile:
    name: str = _f("name", "")
    no_verify: bool = _f("noverify", False)
    cert_file: str = _f("certfile", "")
    key_file: str = _f("keyfile", "")
    ca_file: str = _f("cafile", "")


@dataclass
class SASLProfile:
    name: str = _f("name", "")
    handshake_first: bool = _f("handshake-first", False)
    username: str = _f("username", "")


@dataclass
class ClientProfile:
    name: str = _f("name", "")
    client_id: str = _f("client-id", "")
    kafka_version: str = _f("kafka-version", "")
    tls: Optional[TLSProfile] = _f("tls", None)
    sasl: Optional[SASLProfile] = _f("sasl", None)


@dataclass
class StorageModule:
    class_name: str = _f("class-name", "")
    intervals: int = _f("intervals", 0)
    min_distance: int = _f("min-distance", 0)
    group_allowlist: str = _f("group-allowlist", "")
    expire_group: int = _f("expire-group", 0)


@dataclass
class ClusterModule:
    class_name: str = _f("class-name", "")
    servers: list = _f("servers", factory=list)
    client_profile: ClientProfile = _f("client-profile", factory=ClientProfile)
    topic_refresh: int = _f("topic-refresh", 0)
    offset_refresh: int = _f("offset-refresh", 0)


@dataclass
class ConsumerModule:
    class_name: str = _f("class-name", "")
    cluster: str = _f("cluster", "")
    servers: list = _f("servers", factory=list)
    group_allowlist: str = _f("group-allowlist", "")
    zookeeper_path: str = _f("zookeeper-path", "")
    zookeeper_timeout: int = _f("zookeeper-timeout", 0)
    client_profile: ClientProfile = _f("client-profile", factory=ClientProfile)
    offsets_topic: str = _f("offsets-topic", "")
    start_latest: bool = _f("start-latest", False)


@dataclass
class EvaluatorModule:
    class_name: str = _f("class-name", "")
    expire_cache: int = _f("expire-cache", 0)


@dataclass
class NotifierHTTPModule:
    class_name: str = _f("class-name", "")
    group_allowlist: str = _f("group-allowlist", "")
    interval: int = _f("interval", 0)
    threshold: int = _f("threshold", 0)
    timeout: int = _f("timeout", 0)
    keepalive: int = _f("keepalive", 0)
    url_open: str = _f("url-open", "")
    url_close: str = _f("url-close", "")
    method_open: str = _f("method-open", "")
    method_close: str = _f("method-close", "")
    template_open: str = _f("template-open", "")
    template_close: str = _f("template-close", "")
    extras: dict = _f("extra", factory=dict)
    send_close: bool = _f("send-close", False)
    extra_ca: str = _f("extra-ca", "")
    no_verify: str = _f("noverify", "")


@dataclass
class NotifierSlackModule:
    class_name: str = _f("class-name", "")
    group_allowlist: str = _f("group-allowlist", "")
    interval: int = _f("interval", 0)
    threshold: int = _f("threshold", 0)
    timeout: int = _f("timeout", 0)
    keepalive: int = _f("keepalive", 0)
    template_open: str = _f("template-open", "")
    template_close: str = _f("template-close", "")
    extras: dict = _f("extra", factory=dict)
    send_close: bool = _f("send-close", False)
    channel: str = _f("channel", "")
    username: str = _f("username", "")
    icon_url: str = _f("icon-url", "")
    icon_emoji: str = _f("icon-emoji", "")


@dataclass
class NotifierEmailModule:
    class_name: str = _f("class-name", "")
    group_allowlist: str = _f("group-allowlist", "")
    interval: int = _f("interval", 0)
    threshold: int = _f("threshold", 0)
    template_open: str = _f("template-open", "")
    template_close: str = _f("template-close", "")
    extras: dict = _f("extra", factory=dict)
    send_close: bool = _f("send-close", False)
    server: str = _f("server", "")
    port: int = _f("port", 0)
    auth_type: str = _f("auth-type", "")
    username: str = _f("username", "")
    sender: str = _f("from", "")
    to: str = _f("to", "")
    extra_ca: str = _f("extra-ca", "")
    no_verify: str = _f("noverify", "")


@dataclass
class NotifierNullModule:
    class_name: str = _f("class-name", "")
    group_allowlist: str = _f("group-allowlist", "")
    interval: int = _f("interval", 0)
    threshold: int = _f("threshold", 0)
    template_open: str = _f("template-open", "")
    template_close: str = _f("template-close", "")
    extras: dict = _f("extra", factory=dict)
    send_close: bool = _f("send-close", False)


def make_request_info(path: str) -> RequestInfo:
    """Describe the request path and the host answering it."""
    return RequestInfo(url=path, host=socket.gethostname())


def to_json_dict(obj: Any) -> Any:
    """Convert an object tree into values that json can encode."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.metadata.get("json", f.name): to_json_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, Enum):
        return obj.name
    if obj is None or isinstance(obj, (str, bool, int, float)):
        return obj
    if isinstance(obj, Mapping):
        return {str(key): to_json_dict(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_json_dict(item) for item in obj]
    if hasattr(obj, "__dict__"):
        return {
            key: to_json_dict(value)
            for key, value in vars(obj).items()
            if not key.startswith("_")
        }
    raise TypeError(f"cannot encode {type(obj).__name__} as JSON")


def json_reply(status: int, message: str, path: str, **kwargs: Any) -> ApiReply:
    """Build a successful reply; falls back to a 500 reply if it cannot be encoded."""
    try:
        payload = {"error": False, "message": message}
        payload.update({name: to_json_dict(value) for name, value in kwargs.items()})
        payload["request"] = to_json_dict(make_request_info(path))
        json.dumps(payload, allow_nan=False)
    except (TypeError, ValueError):
        return ApiReply(500, dict(_ENCODE_FAILURE))
    return ApiReply(status, payload)


def error_reply(status: int, message: str, path: str) -> ApiReply:
    return ApiReply(
        status,
        {"error": True, "message": message, "request": to_json_dict(make_request_info(path))},
    )