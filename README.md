# burrowhttp

`burrowhttp` is the HTTP side of a Kafka consumer-lag monitor. It serves a
JSON API describing the clusters, topics and consumer groups being watched,
reports the service's own configuration, answers health and readiness probes,
and publishes consumer and topic state in the Prometheus text format.

Cluster, topic and consumer data come from a `Backend`, which hands
`StorageRequest` and `EvaluatorRequest` objects to the storage and evaluator
callables the application supplies.

## Modules

- `burrowhttp.settings` – `Settings`, a hierarchical, case-insensitive store
  addressed by dotted keys: `set`, `set_default`, `is_set`, `get`,
  `get_string`, `get_int`, `get_bool`, `get_string_list`, `get_string_map`,
  `children` (sorted names directly below a key) and `reset`.
- `burrowhttp.backend` – `StorageRequestType`, `Status` (`NOTFOUND`, `OK`,
  `WARN`, `ERR`, `STOP`, `STALL`, `REWIND`), `StorageRequest`,
  `EvaluatorRequest` and `Backend`. `Backend(storage=..., evaluator=...)`
  takes two callables; a missing one answers `None` to every request. Its
  helpers `list_clusters`, `list_consumers`, `list_topics` and
  `get_topic_detail` return an empty list when storage answers `None`.
- `burrowhttp.responses` – the reply records (`RequestInfo`, `TLSProfile`,
  `SASLProfile`, `ClientProfile`, `StorageModule`, `ClusterModule`,
  `ConsumerModule`, `EvaluatorModule` and the four notifier modules),
  `ApiReply` (a status plus a JSON payload), `to_json_dict`, `json_reply`,
  `error_reply` and `make_request_info`.
- `burrowhttp.config_views` and `burrowhttp.kafka_views` – functions that
  turn settings or backend answers into an `ApiReply`.
- `burrowhttp.metrics` – `GaugeVec` and `MetricsRegistry`, which collect
  gauges from a backend and render them for Prometheus.
- `burrowhttp.coordinator` – `AppContext` and `Coordinator`, which validate
  the listener configuration, route requests and run the listeners.

## Usage

```python
from burrowhttp.backend import Backend, StorageRequestType
from burrowhttp.coordinator import AppContext, Coordinator

def storage(request):
    if request.request_type is StorageRequestType.FETCH_CLUSTERS:
        return ["local"]
    return None

app = AppContext(backend=Backend(storage=storage))
app.settings.set("httpserver.main.address", ":8000")
app.settings.set("general.access-control-allow-origin", "*")

coordinator = Coordinator(app)
coordinator.configure()
coordinator.start()
app.app_ready = True
# ...
coordinator.stop()
```

`AppContext` holds the `backend`, the `settings`, the current `log_level`
(a `logging` level number), the `app_ready` flag and an optional `logger`.

`Coordinator.wsgi_app` is a plain WSGI application, so the API can also be
mounted in any WSGI server instead of using `start()`.

## Listeners

Listeners are configured under `httpserver.<name>`. If none is configured,
`configure()` adds one named `default` at `:0`, a port chosen by the system;
`Coordinator.addresses` gives the bound addresses once started. Each
listener's `timeout` defaults to 300 seconds. A listener may name a TLS
profile with `tls`; `tls.<profile>.certfile` and `keyfile` must be set and
readable, and `cafile` is loaded when given. An invalid address or a bad TLS
profile makes `configure()` raise `ValueError`.

`start()` binds every listener and serves each in a background thread; if
one cannot bind, those already bound are closed and the `OSError` is raised.
`stop()` shuts all of them down and raises `RuntimeError` if any failed to
close.

## Endpoints

| Method | Path | Result |
| --- | --- | --- |
| GET | `/burrow/admin` | `GOOD` |
| GET | `/burrow/admin/ready` | `READY` (200) or `STARTING` (503) |
| GET | `/metrics` | Prometheus metrics |
| GET | `/v3/kafka` | cluster list |
| GET | `/v3/kafka/<cluster>` | cluster module configuration |
| GET | `/v3/kafka/<cluster>/topic` | topic list |
| GET | `/v3/kafka/<cluster>/topic/<topic>` | partition offsets |
| GET | `/v3/kafka/<cluster>/topic/<topic>/consumers` | consumers of a topic |
| GET | `/v3/kafka/<cluster>/consumer` | consumer group list |
| GET | `/v3/kafka/<cluster>/consumer/<consumer>` | committed offsets |
| GET | `/v3/kafka/<cluster>/consumer/<consumer>/status` | group status |
| GET | `/v3/kafka/<cluster>/consumer/<consumer>/lag` | status with every partition |
| DELETE | `/v3/kafka/<cluster>/consumer/<consumer>` | forget a group |
| DELETE | `/v3/kafka/<cluster>/consumer/<consumer>/topic/<topic>` | forget a group's topic |
| GET | `/v3/config` | main configuration |
| GET | `/v3/config/{storage,evaluator,cluster,consumer,notifier}` | module names |
| GET | `/v3/config/{storage,evaluator,consumer,notifier}/<name>` | module detail |
| GET | `/v3/config/cluster/<cluster>` | cluster module detail |
| GET | `/v3/admin/loglevel` | current log level |
| POST | `/v3/admin/loglevel` | set the level from `{"level": "debug"}` |

Every JSON reply carries `error`, `message` and a `request` object with the
requested `url` and the serving `host`. Missing items give 404 with
`"error": true`; a consumer status of `NOTFOUND` is returned with status 404.
Unknown paths return 404 with
`{"error":true,"message":"invalid request type","result":{}}`, and a known
path with the wrong method returns 405. A notifier whose `class-name` is not
`http`, `email`, `slack` or `null` gets an empty 200 reply.

The log level accepts `debug`, `trace`, `info`, `warning`, `warn`, `error`
and `fatal` (any case); anything else gives 404, and a body that is not a
JSON object gives 400. When `AppContext.logger` is set, its level is changed
too. If `general.access-control-allow-origin` is set, JSON and admin replies
carry it as an `Access-Control-Allow-Origin` header.

## Metrics

`/metrics` refreshes these gauges from the backend on each scrape:

- `burrow_kafka_consumer_lag_total{cluster,consumer_group}`
- `burrow_kafka_consumer_status{cluster,consumer_group}`
- `burrow_kafka_consumer_partition_lag{cluster,consumer_group,topic,partition}`
- `burrow_kafka_consumer_current_offset{cluster,consumer_group,topic,partition}`
- `burrow_kafka_topic_partition_status{cluster,consumer_group,topic,partition}`
- `burrow_kafka_topic_partition_offset{cluster,topic,partition}`

Groups with no status or a `NOTFOUND` status are skipped; partition offsets
and statuses are published only for partitions whose `complete` is 1.0.
Stale series can be removed with `MetricsRegistry.delete_consumer_metrics`,
`delete_topic_metrics` and `delete_consumer_topic_metrics`.

## What this package does not do

It has no command-line program and does not read configuration files; the
application fills `Settings` itself. It does not connect to Kafka or
ZooKeeper, store offsets or evaluate consumer status: those answers must
come from the callables given to `Backend`.

## Tests

The test suite uses pytest; install the `test` extra to get it.