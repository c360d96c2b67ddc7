"""
Identities of the resources the operator creates or modifies, plus the
small transforms the teardown path applies to them.
"""
import copy
from dataclasses import dataclass
from typing import Optional

from kubernetes import client

from .config import (
    CONSOLE_CONFIG_MAP_NAME,
    CONSOLE_PUBLIC_CONFIG_MAP_NAME,
    CONSOLE_URL_KEY,
    OAUTH_CONFIG_SECRET_NAME,
    OPENSHIFT_CONSOLE_NAME,
    SERVICE_CA_CONFIG_MAP_NAME,
    Settings,
)


@dataclass(frozen=True)
class OwnedResource:
    kind: str
    name: str
    namespace: Optional[str] = None

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.kind} {self.namespace}/{self.name}"
        return f"{self.kind} {self.name}"


def config_map_stub(settings: Settings) -> OwnedResource:
    return OwnedResource("ConfigMap", CONSOLE_CONFIG_MAP_NAME, settings.TARGET_NAMESPACE)


def service_ca_stub(settings: Settings) -> OwnedResource:
    return OwnedResource("ConfigMap", SERVICE_CA_CONFIG_MAP_NAME, settings.TARGET_NAMESPACE)


def secret_stub(settings: Settings) -> OwnedResource:
    return OwnedResource("Secret", OAUTH_CONFIG_SECRET_NAME, settings.TARGET_NAMESPACE)


def oauth_client_stub() -> OwnedResource:
    # cluster-scoped and shared with the authentication stack
    return OwnedResource("OAuthClient", OPENSHIFT_CONSOLE_NAME)


def deployment_stub(settings: Settings) -> OwnedResource:
    return OwnedResource("Deployment", OPENSHIFT_CONSOLE_NAME, settings.TARGET_NAMESPACE)


def public_config_stub(settings: Settings) -> OwnedResource:
    return OwnedResource("ConfigMap", CONSOLE_PUBLIC_CONFIG_MAP_NAME, settings.CONFIG_MANAGED_NAMESPACE)


def empty_public_config(settings: Settings) -> client.V1ConfigMap:
    """The public config map with the console URL cleared."""
    ref = public_config_stub(settings)
    return client.V1ConfigMap(
        metadata=client.V1ObjectMeta(name=ref.name, namespace=ref.namespace),
        data={CONSOLE_URL_KEY: ""},
    )


def deregister_console_from_oauth_client(oauth_client: dict) -> dict:
    """Return a copy of the OAuth client with the console's redirect URIs removed."""
    updated = copy.deepcopy(oauth_client)
    updated["redirectURIs"] = []
    return updated
