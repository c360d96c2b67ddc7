"""
Pydantic models for the configuration objects a sync cycle reads.

Each config kind is a cluster-scoped singleton fetched as a raw custom object
dict and parsed into a frozen model, so a snapshot can be shared by reference
for the whole cycle without anyone mutating it.

The properties on the config kinds (console_url, api_server_url, trusted_ca,
identity_providers) are the typed surface a Reconciler reads from the
snapshot. They tolerate absent and null fields.
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ManagementState(str, Enum):
    MANAGED = "Managed"
    UNMANAGED = "Unmanaged"
    REMOVED = "Removed"


class OperatorStatus(BaseModel):
    """Status sub-object of the operator config; unknown fields are kept."""
    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    observedGeneration: Optional[int] = None
    conditions: List[Dict[str, Any]] = []


class ClusterConfig(BaseModel):
    """Common shape of the singleton config objects."""
    model_config = ConfigDict(frozen=True)

    name: str
    generation: int = 0
    resourceVersion: Optional[str] = None
    spec: Dict[str, Any] = {}
    status: Dict[str, Any] = {}

    @classmethod
    def from_object(cls, obj: dict):
        meta = obj.get("metadata") or {}
        return cls(
            name=meta.get("name", ""),
            generation=meta.get("generation", 0),
            resourceVersion=meta.get("resourceVersion"),
            spec=obj.get("spec") or {},
            status=obj.get("status") or {},
        )


class OperatorConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    generation: int = 0
    resourceVersion: Optional[str] = None
    # raw value from spec; anything but the three known strings is classified
    # as unknown by the sync cycle, including null and non-strings
    managementState: Any = ""
    spec: Dict[str, Any] = {}
    status: OperatorStatus = Field(default_factory=OperatorStatus)

    @classmethod
    def from_object(cls, obj: dict) -> "OperatorConfig":
        meta = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        return cls(
            name=meta.get("name", ""),
            generation=meta.get("generation", 0),
            resourceVersion=meta.get("resourceVersion"),
            managementState=spec.get("managementState", ""),
            spec=spec,
            status=OperatorStatus(**(obj.get("status") or {})),
        )


class ConsoleConfig(ClusterConfig):
    """Top-level console config (config.openshift.io/v1 Console)."""

    @property
    def console_url(self) -> str:
        return self.status.get("consoleURL") or ""


class InfrastructureConfig(ClusterConfig):

    @property
    def api_server_url(self) -> str:
        return self.status.get("apiServerURL") or ""


class ProxyConfig(ClusterConfig):

    @property
    def trusted_ca(self) -> str:
        return (self.spec.get("trustedCA") or {}).get("name") or ""


class OAuthConfig(ClusterConfig):

    @property
    def identity_providers(self) -> List[Dict[str, Any]]:
        return list(self.spec.get("identityProviders") or [])


class ConfigSnapshot(BaseModel):
    """Every config object one cycle needs, fetched fresh at cycle start."""
    model_config = ConfigDict(frozen=True)

    operator: OperatorConfig
    console: ConsoleConfig
    infrastructure: InfrastructureConfig
    proxy: ProxyConfig
    oauth: OAuthConfig
