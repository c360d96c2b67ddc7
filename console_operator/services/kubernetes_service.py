"""
Kubernetes service layer: every API call a sync cycle makes goes through here.

Design principles:
  - One ClusterService is built at startup and passed into the cycle
  - Every call checks the cycle context first and carries its timeout
  - Raw ApiExceptions propagate; callers decide what counts as a failure
"""

import logging
from typing import Tuple

from kubernetes import client, config
from kubernetes.client import ApiException

from ..config import (
    API_VERSION,
    CONFIG_GROUP,
    OAUTH_GROUP,
    OPERATOR_GROUP,
    Settings,
    settings as default_settings,
)
from ..context import SyncContext

logger = logging.getLogger("kubernetes_service")

_k8s_loaded = False


def _ensure_k8s(settings: Settings):
    """Load Kubernetes config exactly once."""
    global _k8s_loaded
    if _k8s_loaded:
        return
    if settings.IN_CLUSTER:
        config.load_incluster_config()
    else:
        config.load_kube_config(config_file=settings.KUBECONFIG or None)
    _k8s_loaded = True


class ClusterService:
    """Thin typed accessors over the API objects the operator reads and writes."""

    def __init__(self, core: client.CoreV1Api, apps: client.AppsV1Api,
                 custom: client.CustomObjectsApi, settings: Settings = default_settings):
        self.core = core
        self.apps = apps
        self.custom = custom
        self.settings = settings

    @classmethod
    def from_settings(cls, settings: Settings = default_settings) -> "ClusterService":
        _ensure_k8s(settings)
        return cls(client.CoreV1Api(), client.AppsV1Api(), client.CustomObjectsApi(), settings)

    def _call_opts(self, ctx: SyncContext) -> dict:
        ctx.check()
        return {"_request_timeout": ctx.request_timeout(self.settings.REQUEST_TIMEOUT)}

    # -----------------------------------------------------------------------
    # Singleton configs
    # -----------------------------------------------------------------------

    def get_operator_config(self, ctx: SyncContext, name: str) -> dict:
        return self.custom.get_cluster_custom_object(
            OPERATOR_GROUP, API_VERSION, "consoles", name, **self._call_opts(ctx)
        )

    def get_config(self, ctx: SyncContext, plural: str, name: str) -> dict:
        """Fetch a config.openshift.io/v1 singleton (consoles, proxies, ...)."""
        return self.custom.get_cluster_custom_object(
            CONFIG_GROUP, API_VERSION, plural, name, **self._call_opts(ctx)
        )

    def update_operator_status(self, ctx: SyncContext, name: str, status: dict) -> dict:
        """Merge-patch the status subresource; a None value removes that field."""
        return self.custom.patch_cluster_custom_object_status(
            OPERATOR_GROUP, API_VERSION, "consoles", name, {"status": status},
            **self._call_opts(ctx)
        )

    # -----------------------------------------------------------------------
    # Operand resources
    # -----------------------------------------------------------------------

    def delete_config_map(self, ctx: SyncContext, name: str, namespace: str):
        self.core.delete_namespaced_config_map(name, namespace, **self._call_opts(ctx))
        logger.info(f"ConfigMap {namespace}/{name} deleted")

    def delete_secret(self, ctx: SyncContext, name: str, namespace: str):
        self.core.delete_namespaced_secret(name, namespace, **self._call_opts(ctx))
        logger.info(f"Secret {namespace}/{name} deleted")

    def delete_deployment(self, ctx: SyncContext, name: str, namespace: str):
        self.apps.delete_namespaced_deployment(name, namespace, **self._call_opts(ctx))
        logger.info(f"Deployment {namespace}/{name} deleted")

    def get_oauth_client(self, ctx: SyncContext, name: str) -> dict:
        return self.custom.get_cluster_custom_object(
            OAUTH_GROUP, API_VERSION, "oauthclients", name, **self._call_opts(ctx)
        )

    def update_oauth_client(self, ctx: SyncContext, body: dict) -> dict:
        name = body["metadata"]["name"]
        updated = self.custom.replace_cluster_custom_object(
            OAUTH_GROUP, API_VERSION, "oauthclients", name, body, **self._call_opts(ctx)
        )
        logger.info(f"OAuthClient {name} updated")
        return updated

    def apply_config_map(self, ctx: SyncContext,
                         required: client.V1ConfigMap) -> Tuple[client.V1ConfigMap, bool]:
        """
        Create-or-update a config map. Returns (config_map, modified).

        The required data replaces the existing data; required labels are
        merged in. Nothing is written when the object already matches.
        """
        name = required.metadata.name
        namespace = required.metadata.namespace
        try:
            existing = self.core.read_namespaced_config_map(name, namespace, **self._call_opts(ctx))
        except ApiException as e:
            if e.status != 404:
                raise
            created = self.core.create_namespaced_config_map(namespace, required, **self._call_opts(ctx))
            logger.info(f"ConfigMap {namespace}/{name} created")
            ctx.record("ConfigMapCreated", f"Created ConfigMap/{name} -n {namespace}")
            return created, True

        required_labels = required.metadata.labels or {}
        labels = dict(existing.metadata.labels or {})
        labels_match = all(labels.get(k) == v for k, v in required_labels.items())
        if (existing.data or {}) == (required.data or {}) and labels_match:
            logger.debug(f"ConfigMap {namespace}/{name} already up to date")
            return existing, False

        labels.update(required_labels)
        existing.metadata.labels = labels or None
        existing.data = dict(required.data or {})
        updated = self.core.replace_namespaced_config_map(name, namespace, existing, **self._call_opts(ctx))
        logger.info(f"ConfigMap {namespace}/{name} updated")
        ctx.record("ConfigMapUpdated", f"Updated ConfigMap/{name} -n {namespace}")
        return updated, True
