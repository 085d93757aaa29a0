"""Views that report the configuration of the running modules."""

from __future__ import annotations

from typing import Optional

from burrowhttp.responses import (
    ApiReply,
    ClientProfile,
    ClusterModule,
    ConsumerModule,
    EvaluatorModule,
    NotifierEmailModule,
    NotifierHTTPModule,
    NotifierNullModule,
    NotifierSlackModule,
    SASLProfile,
    StorageModule,
    TLSProfile,
    error_reply,
    json_reply,
)
from burrowhttp.settings import Settings

_DETAIL_MESSAGE = "{} module detail returned"


def _to_int32(value: int) -> int:
    return ((value + 2**31) % 2**32) - 2**31


def _string_map(settings: Settings, key: str) -> dict[str, str]:
    def text(value: object) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        return "" if value is None else str(value)

    return {name: text(value) for name, value in settings.get_string_map(key).items()}


def get_tls_profile(settings: Settings, name: str) -> Optional[TLSProfile]:
    """The named TLS profile, or None when it is not configured."""
    root = f"tls.{name}"
    if not settings.is_set(root):
        return None
    return TLSProfile(
        name=name,
        cert_file=settings.get_string(f"{root}.certfile"),
        key_file=settings.get_string(f"{root}.keyfile"),
        ca_file=settings.get_string(f"{root}.cafile"),
        no_verify=settings.get_bool(f"{root}.noverify"),
    )


def get_sasl_profile(settings: Settings, name: str) -> Optional[SASLProfile]:
    """The named SASL profile, or None when it is not configured."""
    root = f"sasl.{name}"
    if not settings.is_set(root):
        return None
    return SASLProfile(
        name=name,
        handshake_first=settings.get_bool(f"{root}.handshake-first"),
        username=settings.get_string(f"{root}.username"),
    )


def get_client_profile(settings: Settings, name: str) -> ClientProfile:
    root = f"client-profile.{name}"
    return ClientProfile(
        name=name,
        client_id=settings.get_string(f"{root}.client-id"),
        kafka_version=settings.get_string(f"{root}.kafka-version"),
        tls=get_tls_profile(settings, settings.get_string(f"{root}.tls")),
        sasl=get_sasl_profile(settings, settings.get_string(f"{root}.sasl")),
    )


def config_main(settings: Settings, path: str) -> ApiReply:
    general = {
        "pidfile": settings.get_string("general.pidfile"),
        "stdout-logfile": settings.get_string("general.stdout-logfile"),
        "access-control-allow-origin": settings.get_string("general.access-control-allow-origin"),
    }
    logging_config = {
        "filename": settings.get_string("logging.filename"),
        "max-size": settings.get_int("logging.maxsize"),
        "max-backups": settings.get_int("logging.maxbackups"),
        "max-age": settings.get_int("logging.maxage"),
        "use-local-time": settings.get_bool("logging.use-localtime"),
        "use-compression": settings.get_bool("logging.use-compression"),
        "level": settings.get_string("logging.level"),
    }
    zookeeper = {
        "servers": settings.get_string_list("zookeeper.servers"),
        "timeout": settings.get_int("zookeeper.timeout"),
        "root-path": settings.get_string("zookeeper.root-path"),
    }
    servers = {
        name: {
            "address": settings.get_string(f"httpserver.{name}.address"),
            "tls": settings.get_string(f"httpserver.{name}.tls"),
            "timeout": settings.get_int(f"httpserver.{name}.timeout"),
        }
        for name in settings.children("httpserver")
    }
    return json_reply(
        200,
        "main config returned",
        path,
        general=general,
        logging=logging_config,
        zookeeper=zookeeper,
        httpserver=servers,
    )


def module_list(settings: Settings, coordinator: str, path: str) -> ApiReply:
    """List the names of the modules configured for a coordinator."""
    return json_reply(
        200,
        "module list returned",
        path,
        coordinator=coordinator,
        modules=settings.children(coordinator),
    )


def storage_detail(settings: Settings, name: str, path: str) -> ApiReply:
    root = f"storage.{name}"
    if not settings.is_set(root):
        return error_reply(404, "storage module not found", path)
    module = StorageModule(
        class_name=settings.get_string(f"{root}.class-name"),
        intervals=settings.get_int(f"{root}.intervals"),
        min_distance=settings.get_int(f"{root}.min-distance"),
        group_allowlist=settings.get_string(f"{root}.group-allowlist"),
        expire_group=settings.get_int(f"{root}.expire-group"),
    )
    return json_reply(200, _DETAIL_MESSAGE.format("storage"), path, module=module)


def consumer_detail(settings: Settings, name: str, path: str) -> ApiReply:
    root = f"consumer.{name}"
    if not settings.is_set(root):
        return error_reply(404, "consumer module not found", path)
    module = ConsumerModule(
        class_name=settings.get_string(f"{root}.class-name"),
        cluster=settings.get_string(f"{root}.cluster"),
        servers=settings.get_string_list(f"{root}.servers"),
        group_allowlist=settings.get_string(f"{root}.group-allowlist"),
        zookeeper_path=settings.get_string(f"{root}.zookeeper-path"),
        zookeeper_timeout=_to_int32(settings.get_int(f"{root}.zookeeper-timeout")),
        client_profile=get_client_profile(settings, settings.get_string(f"{root}.client-profile")),
        offsets_topic=settings.get_string(f"{root}.offsets-topic"),
        start_latest=settings.get_bool(f"{root}.start-latest"),
    )
    return json_reply(200, _DETAIL_MESSAGE.format("consumer"), path, module=module)


def evaluator_detail(settings: Settings, name: str, path: str) -> ApiReply:
    root = f"evaluator.{name}"
    if not settings.is_set(root):
        return error_reply(404, "evaluator module not found", path)
    module = EvaluatorModule(
        class_name=settings.get_string(f"{root}.class-name"),
        expire_cache=settings.get_int(f"{root}.expire-cache"),
    )
    return json_reply(200, _DETAIL_MESSAGE.format("evaluator"), path, module=module)


def _notifier_common(settings: Settings, root: str) -> dict:
    return {
        "class_name": settings.get_string(f"{root}.class-name"),
        "group_allowlist": settings.get_string(f"{root}.group-allowlist"),
        "interval": settings.get_int(f"{root}.interval"),
        "threshold": settings.get_int(f"{root}.threshold"),
        "template_open": settings.get_string(f"{root}.template-open"),
        "template_close": settings.get_string(f"{root}.template-close"),
        "extras": _string_map(settings, f"{root}.extras"),
        "send_close": settings.get_bool(f"{root}.send-close"),
    }


def _notifier_http(settings: Settings, root: str) -> NotifierHTTPModule:
    return NotifierHTTPModule(
        **_notifier_common(settings, root),
        timeout=settings.get_int(f"{root}.timeout"),
        keepalive=settings.get_int(f"{root}.keepalive"),
        url_open=settings.get_string(f"{root}.url-open"),
        url_close=settings.get_string(f"{root}.url-close"),
        method_open=settings.get_string(f"{root}.method-open"),
        method_close=settings.get_string(f"{root}.method-close"),
        extra_ca=settings.get_string(f"{root}.extra-ca"),
        no_verify=settings.get_string(f"{root}.noverify"),
    )


def _notifier_slack(settings: Settings, root: str) -> NotifierSlackModule:
    return NotifierSlackModule(
        **_notifier_common(settings, root),
        timeout=settings.get_int(f"{root}.timeout"),
        keepalive=settings.get_int(f"{root}.keepalive"),
        channel=settings.get_string(f"{root}.channel"),
        username=settings.get_string(f"{root}.username"),
        icon_url=settings.get_string(f"{root}.icon-url"),
        icon_emoji=settings.get_string(f"{root}.icon-emoji"),
    )


def _notifier_email(settings: Settings, root: str) -> NotifierEmailModule:
    return NotifierEmailModule(
        **_notifier_common(settings, root),
        server=settings.get_string(f"{root}.server"),
        port=settings.get_int(f"{root}.port"),
        auth_type=settings.get_string(f"{root}.auth-type"),
        username=settings.get_string(f"{root}.username"),
        sender=settings.get_string(f"{root}.from"),
        to=settings.get_string(f"{root}.to"),
        extra_ca=settings.get_string(f"{root}.extra-ca"),
        no_verify=settings.get_string(f"{root}.noverify"),
    )


def _notifier_null(settings: Settings, root: str) -> NotifierNullModule:
    return NotifierNullModule(**_notifier_common(settings, root))


_NOTIFIER_BUILDERS = {
    "http": _notifier_http,
    "email": _notifier_email,
    "slack": _notifier_slack,
    "null": _notifier_null,
}


def notifier_detail(settings: Settings, name: str, path: str) -> Optional[ApiReply]:
    """Detail of a notifier module; None when its class name is not a known one."""
    root = f"notifier.{name}"
    if not settings.is_set(root):
        return error_reply(404, "notifier module not found", path)
    builder = _NOTIFIER_BUILDERS.get(settings.get_string(f"{root}.class-name"))
    if builder is None:
        return None
    return json_reply(200, _DETAIL_MESSAGE.format("notifier"), path, module=builder(settings, root))


def cluster_detail(settings: Settings, name: str, path: str) -> ApiReply:
    root = f"cluster.{name}"
    if not settings.is_set(root):
        return error_reply(404, "cluster module not found", path)
    module = ClusterModule(
        class_name=settings.get_string(f"{root}.class-name"),
        servers=settings.get_string_list(f"{root}.servers"),
        topic_refresh=settings.get_int(f"{root}.topic-refresh"),
        offset_refresh=settings.get_int(f"{root}.offset-refresh"),
        client_profile=get_client_profile(settings, settings.get_string(f"{root}.client-profile")),
    )
    return json_reply(200, _DETAIL_MESSAGE.format("cluster"), path, module=module)