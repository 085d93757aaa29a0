import pytest

from burrowhttp.backend import Backend, Status, StorageRequestType
from burrowhttp.metrics import GaugeVec, MetricsRegistry


def _partition(topic, number, lag, complete, offset):
    return {
        "topic": topic,
        "partition": number,
        "status": Status.OK,
        "current_lag": lag,
        "complete": complete,
        "end": {"offset": offset},
    }


def _backend():
    def storage(request):
        kind = request.request_type
        if kind is StorageRequestType.FETCH_CLUSTERS:
            return ["testcluster"]
        if kind is StorageRequestType.FETCH_CONSUMERS:
            assert request.cluster == "testcluster"
            return ["testgroup", "testgroup2"]
        if kind is StorageRequestType.FETCH_TOPICS:
            return ["testtopic", "testtopic1"]
        if kind is StorageRequestType.FETCH_TOPIC:
            return {"testtopic": [6556, 5566], "testtopic1": [54]}[request.topic]
        return None

    def evaluator(request):
        assert request.show_all
        if request.group == "testgroup2":
            return {"cluster": request.cluster, "group": request.group, "status": Status.NOTFOUND}
        return {
            "cluster": request.cluster,
            "group": request.group,
            "status": Status.OK,
            "complete": 1.0,
            "partitions": [
                _partition("testtopic", 0, 100, 1.0, 22663),
                _partition("testtopic", 1, 10, 1.0, 2488),
                _partition("testtopic1", 0, 50, 1.0, 99888),
                _partition("incomplete", 0, 0, 0.2, 5335),
                _partition("incomplete", 1, 10, 1.0, 99888),
            ],
            "total_lag": 2345,
        }

    return Backend(storage=storage, evaluator=evaluator)


def test_collect_matches_source_expectations():
    registry = MetricsRegistry()
    registry.collect(_backend())
    text = registry.render()
    assert 'burrow_kafka_consumer_status{cluster="testcluster",consumer_group="testgroup"} 1' in text
    assert 'burrow_kafka_consumer_lag_total{cluster="testcluster",consumer_group="testgroup"} 2345' in text
    prefix = 'burrow_kafka_consumer_partition_lag{cluster="testcluster",consumer_group="testgroup",'
    assert prefix + 'partition="0",topic="testtopic"} 100' in text
    assert prefix + 'partition="1",topic="testtopic"} 10' in text
    assert prefix + 'partition="0",topic="testtopic1"} 50' in text
    assert prefix + 'partition="0",topic="incomplete"} 0' in text
    assert prefix + 'partition="1",topic="incomplete"} 10' in text
    off = 'burrow_kafka_consumer_current_offset{cluster="testcluster",consumer_group="testgroup",'
    assert off + 'partition="0",topic="testtopic"} 22663' in text
    assert off + 'partition="1",topic="testtopic"} 2488' in text
    assert off + 'partition="0",topic="testtopic1"} 99888' in text
    assert off + 'partition="0",topic="incomplete"} 5335' not in text
    assert off + 'partition="1",topic="incomplete"} 99888' in text
    topic = 'burrow_kafka_topic_partition_offset{cluster="testcluster",'
    assert topic + 'partition="0",topic="testtopic"} 6556' in text
    assert topic + 'partition="1",topic="testtopic"} 5566' in text
    assert topic + 'partition="0",topic="testtopic1"} 54' in text
    assert "testgroup2" not in text


def test_gauge_set_requires_all_labels():
    gauge = GaugeVec("g", "help", ["a", "b"])
    with pytest.raises(ValueError):
        gauge.set({"a": "1"}, 3)


def test_gauge_render_header_and_escaping():
    gauge = GaugeVec("g", "a gauge", ["b", "a"])
    gauge.set({"a": 'x"y', "b": "z"}, 1.5)
    assert gauge.render() == '# HELP g a gauge\n# TYPE g gauge\ng{a="x\\"y",b="z"} 1.5\n'


def test_empty_gauge_renders_nothing():
    assert GaugeVec("g", "h", ["a"]).render() == ""


def test_delete_exact_and_partial():
    gauge = GaugeVec("g", "h", ["cluster", "topic"])
    gauge.set({"cluster": "c", "topic": "t1"}, 1)
    gauge.set({"cluster": "c", "topic": "t2"}, 2)
    gauge.set({"cluster": "d", "topic": "t1"}, 3)
    assert gauge.delete({"cluster": "c"}) is False
    assert gauge.delete({"cluster": "c", "topic": "t1"}) is True
    assert gauge.delete_partial_match({"cluster": "c"}) == 1
    assert gauge.delete_partial_match({"other": "x"}) == 0
    assert gauge.get({"cluster": "d", "topic": "t1"}) == 3.0
    assert gauge.get({"cluster": "c", "topic": "t2"}) is None


def test_delete_consumer_metrics_removes_group():
    registry = MetricsRegistry()
    registry.collect(_backend())
    registry.delete_consumer_metrics("testcluster", "testgroup")
    text = registry.render()
    assert "testgroup" not in text
    assert "burrow_kafka_topic_partition_offset" in text


def test_delete_topic_metrics_removes_topic():
    registry = MetricsRegistry()
    registry.collect(_backend())
    registry.delete_topic_metrics("testcluster", "testtopic")
    text = registry.render()
    assert 'topic="testtopic"' not in text
    assert 'topic="testtopic1"' in text


def test_delete_consumer_topic_metrics():
    registry = MetricsRegistry()
    registry.collect(_backend())
    registry.delete_consumer_topic_metrics("testcluster", "testgroup", "incomplete")
    text = registry.render()
    assert 'topic="incomplete"' not in text
    assert 'burrow_kafka_consumer_lag_total{cluster="testcluster",consumer_group="testgroup"} 2345' in text