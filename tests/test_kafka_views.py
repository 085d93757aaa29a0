from dataclasses import dataclass, field
from typing import Optional

from burrowhttp import kafka_views
from burrowhttp.backend import Backend, Status, StorageRequestType


class Recorder:
    def __init__(self, replies):
        self.replies = list(replies)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        return self.replies.pop(0) if self.replies else None


@dataclass
class Offset:
    offset: int
    timestamp: int
    lag: Optional[dict] = None


@dataclass
class PartitionStatus:
    topic: str
    partition: int
    status: Status
    start: Optional[Offset] = None
    end: Optional[Offset] = None


@dataclass
class GroupStatus:
    cluster: str
    group: str
    status: Status
    complete: float = 1.0
    partitions: list = field(default_factory=list)
    partition_count: int = 0
    maxlag: Optional[PartitionStatus] = None
    totallag: int = 0


def test_cluster_list():
    storage = Recorder([["testcluster"]])
    reply = kafka_views.cluster_list(Backend(storage=storage), "/v3/kafka")
    assert storage.requests[0].request_type is StorageRequestType.FETCH_CLUSTERS
    assert reply.status == 200
    assert reply.payload["error"] is False
    assert reply.payload["clusters"] == ["testcluster"]


def test_topic_list():
    storage = Recorder([["testtopic"], None])
    backend = Backend(storage=storage)
    reply = kafka_views.topic_list(backend, "testcluster", "/p")
    assert reply.status == 200
    assert reply.payload["topics"] == ["testtopic"]
    missing = kafka_views.topic_list(backend, "nocluster", "/p")
    assert missing.status == 404
    assert [r.cluster for r in storage.requests] == ["testcluster", "nocluster"]
    assert all(r.request_type is StorageRequestType.FETCH_TOPICS for r in storage.requests)


def test_consumer_list():
    storage = Recorder([["testgroup"], None])
    backend = Backend(storage=storage)
    reply = kafka_views.consumer_list(backend, "testcluster", "/p")
    assert reply.status == 200
    assert reply.payload["consumers"] == ["testgroup"]
    assert kafka_views.consumer_list(backend, "nocluster", "/p").status == 404
    assert storage.requests[1].request_type is StorageRequestType.FETCH_CONSUMERS


def test_topic_detail():
    storage = Recorder([[345, 921], None, None])
    backend = Backend(storage=storage)
    reply = kafka_views.topic_detail(backend, "testcluster", "testtopic", "/p")
    assert reply.status == 200
    assert reply.payload["offsets"] == [345, 921]
    assert kafka_views.topic_detail(backend, "nocluster", "testtopic", "/p").status == 404
    assert kafka_views.topic_detail(backend, "testcluster", "notopic", "/p").status == 404
    assert [(r.cluster, r.topic) for r in storage.requests] == [
        ("testcluster", "testtopic"),
        ("nocluster", "testtopic"),
        ("testcluster", "notopic"),
    ]


def test_topic_consumers():
    storage = Recorder([["testgroup"], None])
    backend = Backend(storage=storage)
    reply = kafka_views.topic_consumers(backend, "testcluster", "testtopic", "/p")
    assert reply.payload["consumers"] == ["testgroup"]
    assert storage.requests[0].request_type is StorageRequestType.FETCH_CONSUMERS_FOR_TOPIC
    assert kafka_views.topic_consumers(backend, "nocluster", "testtopic", "/p").status == 404


def test_consumer_detail():
    topics = {
        "testtopic": [
            {
                "offsets": [{"offset": 9837458, "timestamp": 12837487, "lag": {"value": 2355}}],
                "owner": "somehost",
                "current-lag": 2345,
            }
        ]
    }
    storage = Recorder([topics, None, None])
    backend = Backend(storage=storage)
    reply = kafka_views.consumer_detail(backend, "testcluster", "testgroup", "/p")
    assert reply.status == 200
    assert reply.payload["error"] is False
    partitions = reply.payload["topics"]["testtopic"]
    assert len(partitions) == 1
    assert partitions[0]["owner"] == "somehost"
    assert partitions[0]["current-lag"] == 2345
    assert partitions[0]["offsets"][0]["offset"] == 9837458
    assert partitions[0]["offsets"][0]["timestamp"] == 12837487
    assert partitions[0]["offsets"][0]["lag"] == {"value": 2355}
    assert kafka_views.consumer_detail(backend, "nocluster", "testgroup", "/p").status == 404
    assert kafka_views.consumer_detail(backend, "testcluster", "nogroup", "/p").status == 404
    assert storage.requests[2].group == "nogroup"


def _evaluator(seen):
    maxlag = PartitionStatus(
        topic="testtopic",
        partition=0,
        status=Status.OK,
        start=Offset(9836458, 12836487, {"value": 3254}),
        end=Offset(9837458, 12837487, {"value": 2355}),
    )

    def handle(request):
        seen.append(request)
        if request.cluster == "testcluster" and request.group == "testgroup":
            return GroupStatus(
                cluster=request.cluster,
                group=request.group,
                status=Status.OK,
                partitions=[maxlag] if request.show_all else [],
                partition_count=2134,
                maxlag=maxlag,
                totallag=2345,
            )
        return GroupStatus(cluster=request.cluster, group=request.group, status=Status.NOTFOUND)

    return handle


def test_consumer_status():
    seen = []
    backend = Backend(evaluator=_evaluator(seen))
    reply = kafka_views.consumer_status(backend, "testcluster", "testgroup", "/p", False)
    assert reply.status == 200
    status = reply.payload["status"]
    assert status["status"] == "OK"
    assert status["complete"] == 1.0
    assert status["partitions"] == []
    assert status["partition_count"] == 2134
    assert status["maxlag"]["topic"] == "testtopic"
    assert kafka_views.consumer_status(backend, "nocluster", "testgroup", "/p", False).status == 404
    assert kafka_views.consumer_status(backend, "testcluster", "nogroup", "/p", False).status == 404
    assert [r.show_all for r in seen] == [False, False, False]


def test_consumer_status_complete():
    seen = []
    backend = Backend(evaluator=_evaluator(seen))
    reply = kafka_views.consumer_status(backend, "testcluster", "testgroup", "/p", True)
    assert reply.status == 200
    assert len(reply.payload["status"]["partitions"]) == 1
    assert reply.payload["status"]["partition_count"] == 2134
    assert kafka_views.consumer_status(backend, "nocluster", "testgroup", "/p", True).status == 404
    assert kafka_views.consumer_status(backend, "testcluster", "nogroup", "/p", True).status == 404
    assert all(r.show_all for r in seen)


def test_consumer_delete():
    storage = Recorder([])
    reply = kafka_views.consumer_delete(Backend(storage=storage), "testcluster", "testgroup", "", "/p")
    assert reply.status == 200
    assert reply.payload["error"] is False
    assert reply.payload["message"] == "consumer group removed"
    request = storage.requests[0]
    assert request.request_type is StorageRequestType.SET_DELETE_GROUP
    assert (request.cluster, request.group, request.topic) == ("testcluster", "testgroup", "")


def test_consumer_delete_with_topic():
    storage = Recorder([])
    kafka_views.consumer_delete(Backend(storage=storage), "c", "g", "t", "/p")
    assert storage.requests[0].topic == "t"