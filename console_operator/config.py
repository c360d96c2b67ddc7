"""
Operator settings, read from the environment at import time.
"""
import os
from dataclasses import dataclass

CONTROLLER_NAME = "Console"

# Singleton config + operand names
CONFIG_RESOURCE_NAME = "cluster"
OPENSHIFT_CONSOLE_NAME = "console"
CONSOLE_CONFIG_MAP_NAME = "console-config"
CONSOLE_PUBLIC_CONFIG_MAP_NAME = "console-public"
SERVICE_CA_CONFIG_MAP_NAME = "service-ca"
CUSTOM_LOGO_CONFIG_MAP_NAME = "custom-logo"
TRUSTED_CA_CONFIG_MAP_NAME = "trusted-ca-bundle"
OAUTH_CONFIG_SECRET_NAME = "console-oauth-config"
CONSOLE_URL_KEY = "consoleURL"

# API groups
CONFIG_GROUP = "config.openshift.io"
OPERATOR_GROUP = "operator.openshift.io"
OAUTH_GROUP = "oauth.openshift.io"
ROUTE_GROUP = "route.openshift.io"
API_VERSION = "v1"


@dataclass(frozen=True)
class Settings:
    # Kubernetes
    KUBECONFIG: str = os.environ.get("KUBECONFIG", "")
    IN_CLUSTER: bool = os.environ.get("IN_CLUSTER", "false").lower() == "true"
    REQUEST_TIMEOUT: float = float(os.environ.get("REQUEST_TIMEOUT", "30"))

    # Targets
    CONFIG_RESOURCE_NAME: str = os.environ.get("CONFIG_RESOURCE_NAME", CONFIG_RESOURCE_NAME)
    TARGET_NAMESPACE: str = os.environ.get("TARGET_NAMESPACE", "openshift-console")
    CONFIG_MANAGED_NAMESPACE: str = os.environ.get("CONFIG_MANAGED_NAMESPACE", "openshift-config-managed")

    # Scheduling
    RESYNC_INTERVAL: float = float(os.environ.get("RESYNC_INTERVAL", "600"))
    RETRY_BASE_DELAY: float = float(os.environ.get("RETRY_BASE_DELAY", "5"))
    RETRY_MAX_DELAY: float = float(os.environ.get("RETRY_MAX_DELAY", "300"))

    # Observability
    METRICS_PORT: int = int(os.environ.get("METRICS_PORT", "8080"))
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")


settings = Settings()
