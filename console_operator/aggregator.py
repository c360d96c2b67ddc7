"""
Builds the config snapshot a cycle runs against.
"""
import logging

from kubernetes.client import ApiException
from pydantic import ValidationError

from .context import SyncContext
from .models import (
    ConfigSnapshot,
    ConsoleConfig,
    InfrastructureConfig,
    OAuthConfig,
    OperatorConfig,
    ProxyConfig,
)
from .errors import ConfigFetchError, CycleCancelledError
from .services.kubernetes_service import ClusterService

logger = logging.getLogger("console-operator.aggregator")


def _fetch(kind: str, name: str, getter, parser):
    try:
        return parser(getter())
    except CycleCancelledError:
        raise
    except (ApiException, ValidationError) as e:
        logger.error(f"{kind} config error: {e}")
        raise ConfigFetchError(kind, name, e) from e
    except Exception as e:
        # transport failures (urllib3 retries, read timeouts) and malformed bodies
        logger.error(f"{kind} config error: {type(e).__name__}: {e}")
        raise ConfigFetchError(kind, name, e) from e


def fetch_configs(cluster: ClusterService, ctx: SyncContext) -> ConfigSnapshot:
    """
    Fetch the operator config and the four cluster configs, in that order.

    Stops at the first failure; nothing after it is requested. Any failure
    to get or parse an object comes back as ConfigFetchError naming the kind,
    except cancellation, which propagates as is.
    """
    name = cluster.settings.CONFIG_RESOURCE_NAME

    operator = _fetch("operator", name,
                      lambda: cluster.get_operator_config(ctx, name), OperatorConfig.from_object)
    # top level console config
    console = _fetch("console", name,
                     lambda: cluster.get_config(ctx, "consoles", name), ConsoleConfig.from_object)
    # infrastructure config carries the apiServerURL
    infrastructure = _fetch("infrastructure", name,
                            lambda: cluster.get_config(ctx, "infrastructures", name),
                            InfrastructureConfig.from_object)
    proxy = _fetch("proxy", name,
                   lambda: cluster.get_config(ctx, "proxies", name), ProxyConfig.from_object)
    oauth = _fetch("oauth", name,
                   lambda: cluster.get_config(ctx, "oauths", name), OAuthConfig.from_object)

    return ConfigSnapshot(
        operator=operator,
        console=console,
        infrastructure=infrastructure,
        proxy=proxy,
        oauth=oauth,
    )
