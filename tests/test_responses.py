import json
import socket
from enum import Enum

import pytest

from burrowhttp.responses import (
    ApiReply,
    ClientProfile,
    ClusterModule,
    NotifierEmailModule,
    NotifierNullModule,
    StorageModule,
    TLSProfile,
    error_reply,
    json_reply,
    make_request_info,
    to_json_dict,
)


def test_make_request_info():
    info = make_request_info("/v3/config")
    assert info.url == "/v3/config"
    assert info.host == socket.gethostname()


def test_storage_module_json_names():
    data = to_json_dict(StorageModule(class_name="inmemory"))
    assert set(data) == {"class-name", "intervals", "min-distance", "group-allowlist", "expire-group"}
    assert data["class-name"] == "inmemory"


def test_client_profile_nested():
    module = ClusterModule(
        class_name="kafka",
        client_profile=ClientProfile(name="test", client_id="testid", tls=TLSProfile(name="t", no_verify=True)),
    )
    data = to_json_dict(module)
    assert data["client-profile"]["client-id"] == "testid"
    assert data["client-profile"]["tls"]["noverify"] is True
    assert data["client-profile"]["sasl"] is None


def test_notifier_extras_and_from_keys():
    data = to_json_dict(NotifierEmailModule(sender="burrow@example.com", extras={"k": "v"}))
    assert data["from"] == "burrow@example.com"
    assert data["extra"] == {"k": "v"}
    assert to_json_dict(NotifierNullModule(class_name="null"))["class-name"] == "null"


def test_enum_becomes_name():
    class Color(Enum):
        RED = 1

    assert to_json_dict({"c": Color.RED, "l": (1, 2)}) == {"c": "RED", "l": [1, 2]}


def test_plain_object_becomes_dict():
    class Thing:
        def __init__(self):
            self.owner = "somehost"
            self._hidden = 1

    assert to_json_dict(Thing()) == {"owner": "somehost"}


def test_unencodable_raises():
    with pytest.raises(TypeError):
        to_json_dict(object())


def test_json_reply_round_trip():
    reply = json_reply(200, "cluster list returned", "/v3/kafka", clusters=["testcluster"])
    assert reply.status == 200
    assert json.loads(reply.body) == {
        "error": False,
        "message": "cluster list returned",
        "clusters": ["testcluster"],
        "request": {"url": "/v3/kafka", "host": socket.gethostname()},
    }


def test_json_reply_encode_failure():
    reply = json_reply(200, "x", "/p", value=float("nan"))
    assert reply.status == 500
    assert reply.payload["message"] == "could not encode JSON"
    assert json_reply(200, "x", "/p", value=object()).status == 500


def test_error_reply():
    reply = error_reply(404, "cluster not found", "/v3/kafka/nocluster/topic")
    assert reply.status == 404
    data = json.loads(reply.body)
    assert data["error"] is True
    assert data["message"] == "cluster not found"
    assert data["request"]["url"] == "/v3/kafka/nocluster/topic"


def test_api_reply_body_is_json_of_payload():
    reply = ApiReply(201, {"a": [1, 2]})
    assert json.loads(reply.body.decode("utf-8")) == reply.payload