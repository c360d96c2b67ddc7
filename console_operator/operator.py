"""
Console Operator: kopf entrypoint

Architecture:
  Filtered event sources → Controller.queue() → single sync daemon:
    1. Fetch operator, console, infrastructure, proxy and oauth configs
    2. Dispatch on spec.managementState
         Managed   → reconcile, write back status
         Unmanaged → leave everything alone
         Removed   → fail-open teardown of owned resources
    3. On error → retry with exponential backoff

  Event sources are grouped and name-filtered so only the well-known
  singletons and operand objects can schedule a sync.

Run with:
  kopf run -m console_operator.operator \
      --namespace openshift-console --namespace openshift-config-managed
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import kopf
from prometheus_client import start_http_server

from .config import (
    API_VERSION,
    CONFIG_GROUP,
    CONSOLE_CONFIG_MAP_NAME,
    CONSOLE_PUBLIC_CONFIG_MAP_NAME,
    CONTROLLER_NAME,
    CUSTOM_LOGO_CONFIG_MAP_NAME,
    OAUTH_CONFIG_SECRET_NAME,
    OAUTH_GROUP,
    OPENSHIFT_CONSOLE_NAME,
    OPERATOR_GROUP,
    ROUTE_GROUP,
    SERVICE_CA_CONFIG_MAP_NAME,
    TRUSTED_CA_CONFIG_MAP_NAME,
    Settings,
    settings as operator_settings,
)
from .controller import Controller
from .filters import as_when, names_filter
from .services.kubernetes_service import ClusterService
from .sync import ConsoleOperator

logger = logging.getLogger("console-operator")

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


# ---------------------------------------------------------------------------
# Event sources
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EventSource:
    """A group of watched resources sharing one name filter."""
    purpose: str
    names: Tuple[str, ...]
    resources: Tuple[Tuple[str, ...], ...]
    namespace: Optional[str] = None


def event_sources(cfg: Settings) -> Tuple[EventSource, ...]:
    return (
        EventSource(
            "configs",
            (cfg.CONFIG_RESOURCE_NAME,),
            (
                (CONFIG_GROUP, API_VERSION, "consoles"),
                (OPERATOR_GROUP, API_VERSION, "consoles"),
                (CONFIG_GROUP, API_VERSION, "infrastructures"),
                (CONFIG_GROUP, API_VERSION, "proxies"),
                (CONFIG_GROUP, API_VERSION, "oauths"),
            ),
        ),
        EventSource(
            "console resources",
            (OPENSHIFT_CONSOLE_NAME,),
            (
                ("apps", API_VERSION, "deployments"),
                (ROUTE_GROUP, API_VERSION, "routes"),
                (API_VERSION, "services"),
                (OAUTH_GROUP, API_VERSION, "oauthclients"),
            ),
            namespace=cfg.TARGET_NAMESPACE,
        ),
        EventSource(
            "console config maps",
            (CONSOLE_CONFIG_MAP_NAME, SERVICE_CA_CONFIG_MAP_NAME,
             CUSTOM_LOGO_CONFIG_MAP_NAME, TRUSTED_CA_CONFIG_MAP_NAME),
            ((API_VERSION, "configmaps"),),
            namespace=cfg.TARGET_NAMESPACE,
        ),
        EventSource(
            "managed config maps",
            (CONSOLE_CONFIG_MAP_NAME, CONSOLE_PUBLIC_CONFIG_MAP_NAME),
            ((API_VERSION, "configmaps"),),
            namespace=cfg.CONFIG_MANAGED_NAMESPACE,
        ),
        EventSource(
            "oauth secret",
            (OAUTH_CONFIG_SECRET_NAME,),
            ((API_VERSION, "secrets"),),
            namespace=cfg.TARGET_NAMESPACE,
        ),
    )


_controller: Optional[Controller] = None


def _enqueue(type, body, **kwargs):
    if _controller is None:
        return
    meta = body.get("metadata", {})
    _controller.queue(f"{body.get('kind', '')} {meta.get('namespace') or ''}/{meta.get('name')} {type}")


def register_event_sources(cfg: Settings, registry: Optional[kopf.OperatorRegistry] = None):
    """Register one kopf event handler per watched resource."""
    for source in event_sources(cfg):
        when = as_when(names_filter(*source.names), namespace=source.namespace)
        for resource in source.resources:
            handler_id = f"enqueue/{source.purpose}/{'/'.join(resource)}".replace(" ", "-")
            kwargs = {"id": handler_id, "when": when}
            if registry is not None:
                kwargs["registry"] = registry
            kopf.on.event(*resource, **kwargs)(_enqueue)


def setup_logging(cfg: Settings):
    logging.basicConfig(
        level=cfg.LOG_LEVEL,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("console-operator").setLevel(cfg.LOG_LEVEL)


# ---------------------------------------------------------------------------
# Kopf operator settings
# ---------------------------------------------------------------------------

@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **kwargs):
    global _controller
    cfg = operator_settings
    setup_logging(cfg)
    settings.posting.level = logging.WARNING

    try:
        start_http_server(cfg.METRICS_PORT)
        logger.info(f"Prometheus metrics server started on port {cfg.METRICS_PORT}")
    except OSError as e:
        logger.warning(f"Failed to start metrics server on port {cfg.METRICS_PORT}: {e}")

    operator = ConsoleOperator(ClusterService.from_settings(cfg))
    _controller = Controller(operator.sync, cfg)
    logger.info(
        f"{CONTROLLER_NAME} operator started (target={cfg.TARGET_NAMESPACE}, "
        f"resync={cfg.RESYNC_INTERVAL}s)"
    )


register_event_sources(operator_settings)


# ---------------------------------------------------------------------------
# DAEMON: the single worker that runs sync cycles
# ---------------------------------------------------------------------------

@kopf.daemon(OPERATOR_GROUP, API_VERSION, "consoles",
             when=as_when(names_filter(operator_settings.CONFIG_RESOURCE_NAME)),
             cancellation_timeout=operator_settings.REQUEST_TIMEOUT)
def run_controller(stopped, body, **kwargs):
    """
    Drive the Console controller for as long as the operator config exists.

    Only one operator config carries the singleton name, so only one worker
    loop ever runs.
    """
    if _controller is None:
        raise kopf.TemporaryError("controller not initialised yet", delay=5)

    def record(reason: str, message: str):
        kopf.info(body, reason=reason, message=message)

    _controller.run(stopped, recorder=record)
