"""The HTTP interface: routing, listeners and the admin endpoints."""

from __future__ import annotations

import ipaddress
import json
import logging
import re
import ssl
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from werkzeug.exceptions import HTTPException, NotFound
from werkzeug.routing import Map, Rule
from werkzeug.serving import BaseWSGIServer, make_server
from werkzeug.wrappers import Request, Response

from burrowhttp import config_views, kafka_views
from burrowhttp.backend import Backend
from burrowhttp.metrics import CONTENT_TYPE, MetricsRegistry
from burrowhttp.responses import ApiReply, error_reply, json_reply
from burrowhttp.settings import Settings

_NOT_FOUND_BODY = '{"error":true,"message":"invalid request type","result":{}}\n'
_HOSTNAME = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9\-_.]*[A-Za-z0-9])?$")

_LEVEL_NAMES = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warn",
    logging.ERROR: "error",
    logging.CRITICAL: "fatal",
}
_LEVELS_BY_WORD = {
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
}


@dataclass
class AppContext:
    """State shared with the HTTP interface by the rest of the application."""

    backend: Backend = field(default_factory=Backend)
    settings: Settings = field(default_factory=Settings)
    log_level: int = logging.INFO
    app_ready: bool = False
    logger: Optional[logging.Logger] = None


def _valid_host_port(address: str) -> bool:
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit() or int(port) > 65535:
        return False
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
        try:
            return ipaddress.ip_address(host).version == 6
        except ValueError:
            return False
    if host == "":
        return True
    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        return bool(_HOSTNAME.match(host))


def _split_address(address: str) -> tuple[str, int]:
    host, _, port = address.rpartition(":")
    return host.strip("[]"), int(port)


@dataclass
class _Listener:
    address: str
    timeout: int
    ssl_context: Optional[ssl.SSLContext]


class Coordinator:
    """Runs the HTTP interface over every configured listener."""

    def __init__(self, app: AppContext, log: Optional[logging.Logger] = None) -> None:
        self.app = app
        self.log = log or logging.getLogger("burrowhttp")
        self.metrics = MetricsRegistry()
        self._listeners: dict[str, _Listener] = {}
        self._servers: dict[str, BaseWSGIServer] = {}
        self._threads: list[threading.Thread] = []
        self._url_map = Map()

    @property
    def settings(self) -> Settings:
        return self.app.settings

    @property
    def addresses(self) -> dict[str, tuple]:
        """Bound addresses of the running listeners."""
        return {name: server.server_address for name, server in self._servers.items()}

    def configure(self) -> None:
        """Validate listener configuration and set up routing; raises ValueError on bad config."""
        self.log.info("configuring")
        settings = self.settings
        if not settings.children("httpserver"):
            settings.set("httpserver.default.address", ":0")

        self._listeners = {}
        for name in settings.children("httpserver"):
            root = f"httpserver.{name}"
            address = settings.get_string(f"{root}.address")
            if not _valid_host_port(address):
                raise ValueError("invalid HTTP server listener address")
            settings.set_default(f"{root}.timeout", 300)
            timeout = settings.get_int(f"{root}.timeout")
            context = None
            if settings.is_set(f"{root}.tls"):
                context = self._tls_context(settings.get_string(f"{root}.tls"))
            self._listeners[name] = _Listener(address, timeout, context)

        def get(path: str, endpoint: str) -> Rule:
            return Rule(path, endpoint=endpoint, methods=["GET"])

        self._url_map = Map(
            [
                get("/burrow/admin", "admin"),
                get("/burrow/admin/ready", "ready"),
                get("/metrics", "metrics"),
                get("/v3/kafka", "cluster_list"),
                get("/v3/kafka/<cluster>", "cluster_detail"),
                get("/v3/kafka/<cluster>/topic", "topic_list"),
                get("/v3/kafka/<cluster>/topic/<topic>", "topic_detail"),
                get("/v3/kafka/<cluster>/topic/<topic>/consumers", "topic_consumers"),
                get("/v3/kafka/<cluster>/consumer", "consumer_list"),
                get("/v3/kafka/<cluster>/consumer/<consumer>", "consumer_detail"),
                get("/v3/kafka/<cluster>/consumer/<consumer>/status", "consumer_status"),
                get("/v3/kafka/<cluster>/consumer/<consumer>/lag", "consumer_lag"),
                get("/v3/config", "config_main"),
                get("/v3/config/storage", "storage_list"),
                get("/v3/config/storage/<name>", "storage_detail"),
                get("/v3/config/evaluator", "evaluator_list"),
                get("/v3/config/evaluator/<name>", "evaluator_detail"),
                get("/v3/config/cluster", "config_cluster_list"),
                get("/v3/config/cluster/<cluster>", "cluster_detail"),
                get("/v3/config/consumer", "consumer_config_list"),
                get("/v3/config/consumer/<name>", "consumer_config_detail"),
                get("/v3/config/notifier", "notifier_list"),
                get("/v3/config/notifier/<name>", "notifier_detail"),
                Rule("/v3/kafka/<cluster>/consumer/<consumer>", endpoint="consumer_delete",
                     methods=["DELETE"]),
                Rule("/v3/kafka/<cluster>/consumer/<consumer>/topic/<topic>",
                     endpoint="consumer_delete", methods=["DELETE"]),
                get("/v3/admin/loglevel", "get_log_level"),
                Rule("/v3/admin/loglevel", endpoint="set_log_level", methods=["POST"]),
            ]
        )

    def _tls_context(self, tls_name: str) -> ssl.SSLContext:
        settings = self.settings
        cert_file = settings.get_string(f"tls.{tls_name}.certfile")
        key_file = settings.get_string(f"tls.{tls_name}.keyfile")
        ca_file = settings.get_string(f"tls.{tls_name}.cafile")
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        if ca_file:
            try:
                with open(ca_file, "rb") as handle:
                    ca_data = handle.read()
                context.load_verify_locations(cadata=ca_data.decode("ascii", "replace"))
            except (OSError, ssl.SSLError) as exc:
                raise ValueError(f"cannot read TLS CA file: {exc}") from exc
        if not cert_file or not key_file:
            raise ValueError("TLS HTTP server specified with missing certificate or key")
        try:
            context.load_cert_chain(cert_file, key_file)
        except (OSError, ssl.SSLError) as exc:
            raise ValueError(f"cannot read TLS certificate or key file: {exc}") from exc
        return context

    def start(self) -> None:
        """Bind every listener, then serve each in a background thread."""
        self.log.info("starting")
        servers: dict[str, BaseWSGIServer] = {}
        for name, listener in self._listeners.items():
            host, port = _split_address(listener.address)
            try:
                server = make_server(
                    host, port, self.wsgi_app, threaded=True, ssl_context=listener.ssl_context
                )
            except OSError:
                self.log.exception("failed to listen on %s", listener.address)
                for started in servers.values():
                    try:
                        started.server_close()
                    except OSError:
                        self.log.exception("could not close listener")
                raise
            if listener.timeout > 0:
                server.timeout = listener.timeout
            self.log.info("started listener %s", server.server_address)
            servers[name] = server
        self._servers = servers
        for server in servers.values():
            thread = threading.Thread(target=server.serve_forever, daemon=True)
            thread.start()
            self._threads.append(thread)

    def stop(self) -> None:
        """Close every listener; raises RuntimeError if any failed to close."""
        self.log.info("shutdown")
        failures = []
        for server in self._servers.values():
            try:
                server.shutdown()
                server.server_close()
            except OSError as exc:
                failures.append(exc)
        for thread in self._threads:
            thread.join(timeout=5)
        self._servers = {}
        self._threads = []
        if failures:
            self.log.error("errors shutting down: %s", failures)
            raise RuntimeError("error shutting down HTTP servers")

    def wsgi_app(self, environ: dict, start_response: Callable) -> Any:
        request = Request(environ)
        adapter = self._url_map.bind_to_environ(environ)
        try:
            endpoint, values = adapter.match()
        except NotFound:
            response = Response(_NOT_FOUND_BODY, status=404,
                                content_type="text/plain; charset=utf-8")
            response.headers["X-Content-Type-Options"] = "nosniff"
            return response(environ, start_response)
        except HTTPException as exc:
            return exc.get_response(environ)(environ, start_response)
        handler = getattr(self, f"_handle_{endpoint}")
        return handler(request, **values)(environ, start_response)

    def _cors(self, response: Response) -> Response:
        origin = self.settings.get_string("general.access-control-allow-origin")
        if origin:
            response.headers["Access-Control-Allow-Origin"] = origin
        return response

    def _reply(self, reply: Optional[ApiReply]) -> Response:
        if reply is None:
            return Response(b"", status=200)
        response = Response(reply.body, status=reply.status, content_type="application/json")
        return self._cors(response)

    def _handle_admin(self, request: Request) -> Response:
        return self._cors(Response("GOOD", status=200))

    def _handle_ready(self, request: Request) -> Response:
        if self.app.app_ready:
            return self._cors(Response("READY", status=200))
        return self._cors(Response("STARTING", status=503))

    def _handle_metrics(self, request: Request) -> Response:
        self.metrics.collect(self.app.backend)
        return Response(self.metrics.render(), status=200, content_type=CONTENT_TYPE)

    def _handle_cluster_list(self, request: Request) -> Response:
        return self._reply(kafka_views.cluster_list(self.app.backend, request.path))

    def _handle_cluster_detail(self, request: Request, cluster: str) -> Response:
        return self._reply(config_views.cluster_detail(self.settings, cluster, request.path))

    def _handle_topic_list(self, request: Request, cluster: str) -> Response:
        return self._reply(kafka_views.topic_list(self.app.backend, cluster, request.path))

    def _handle_topic_detail(self, request: Request, cluster: str, topic: str) -> Response:
        return self._reply(kafka_views.topic_detail(self.app.backend, cluster, topic, request.path))

    def _handle_topic_consumers(self, request: Request, cluster: str, topic: str) -> Response:
        return self._reply(
            kafka_views.topic_consumers(self.app.backend, cluster, topic, request.path)
        )

    def _handle_consumer_list(self, request: Request, cluster: str) -> Response:
        return self._reply(kafka_views.consumer_list(self.app.backend, cluster, request.path))

    def _handle_consumer_detail(self, request: Request, cluster: str, consumer: str) -> Response:
        return self._reply(
            kafka_views.consumer_detail(self.app.backend, cluster, consumer, request.path)
        )

    def _handle_consumer_status(self, request: Request, cluster: str, consumer: str) -> Response:
        return self._reply(
            kafka_views.consumer_status(self.app.backend, cluster, consumer, request.path, False)
        )

    def _handle_consumer_lag(self, request: Request, cluster: str, consumer: str) -> Response:
        return self._reply(
            kafka_views.consumer_status(self.app.backend, cluster, consumer, request.path, True)
        )

    def _handle_consumer_delete(
        self, request: Request, cluster: str, consumer: str, topic: str = ""
    ) -> Response:
        return self._reply(
            kafka_views.consumer_delete(self.app.backend, cluster, consumer, topic, request.path)
        )

    def _handle_config_main(self, request: Request) -> Response:
        return self._reply(config_views.config_main(self.settings, request.path))

    def _list(self, request: Request, coordinator: str) -> Response:
        return self._reply(config_views.module_list(self.settings, coordinator, request.path))

    def _handle_storage_list(self, request: Request) -> Response:
        return self._list(request, "storage")

    def _handle_evaluator_list(self, request: Request) -> Response:
        return self._list(request, "evaluator")

    def _handle_config_cluster_list(self, request: Request) -> Response:
        return self._list(request, "cluster")

    def _handle_consumer_config_list(self, request: Request) -> Response:
        return self._list(request, "consumer")

    def _handle_notifier_list(self, request: Request) -> Response:
        return self._list(request, "notifier")

    def _handle_storage_detail(self, request: Request, name: str) -> Response:
        return self._reply(config_views.storage_detail(self.settings, name, request.path))

    def _handle_evaluator_detail(self, request: Request, name: str) -> Response:
        return self._reply(config_views.evaluator_detail(self.settings, name, request.path))

    def _handle_consumer_config_detail(self, request: Request, name: str) -> Response:
        return self._reply(config_views.consumer_detail(self.settings, name, request.path))

    def _handle_notifier_detail(self, request: Request, name: str) -> Response:
        return self._reply(config_views.notifier_detail(self.settings, name, request.path))

    def _handle_get_log_level(self, request: Request) -> Response:
        level = _LEVEL_NAMES.get(self.app.log_level, logging.getLevelName(self.app.log_level).lower())
        return self._reply(json_reply(200, "log level returned", request.path, level=level))

    def _handle_set_log_level(self, request: Request) -> Response:
        try:
            body = json.loads(request.get_data(as_text=True))
        except ValueError:
            body = None
        if not isinstance(body, dict) or not isinstance(body.get("level", ""), str):
            return self._reply(error_reply(400, "could not decode message body", request.path))
        level = _LEVELS_BY_WORD.get(body.get("level", "").lower())
        if level is None:
            return self._reply(error_reply(404, "unknown log level", request.path))
        self.app.log_level = level
        if self.app.logger is not None:
            self.app.logger.setLevel(level)
        return self._reply(json_reply(200, "set log level", request.path))