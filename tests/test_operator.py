"""Tests for the kopf wiring: event sources and enqueueing."""

from __future__ import annotations

import kopf
import pytest

from console_operator import operator as operator_module
from console_operator.config import Settings
from console_operator.controller import Controller
from console_operator.models import ConfigSnapshot, ManagementState, OperatorConfig


@pytest.fixture
def sources():
    return {s.purpose: s for s in operator_module.event_sources(Settings())}


class TestEventSources:
    """Tests for the filtered event source groups."""

    def test_config_singletons(self, sources) -> None:
        configs = sources["configs"]
        assert configs.names == ("cluster",)
        assert configs.namespace is None
        assert ("operator.openshift.io", "v1", "consoles") in configs.resources
        assert len(configs.resources) == 5

    def test_console_resources_scoped_to_target_namespace(self, sources) -> None:
        resources = sources["console resources"]
        assert resources.names == ("console",)
        assert resources.namespace == "openshift-console"
        assert ("oauth.openshift.io", "v1", "oauthclients") in resources.resources

    def test_config_map_groups(self, sources) -> None:
        assert set(sources["console config maps"].names) == {
            "console-config", "service-ca", "custom-logo", "trusted-ca-bundle",
        }
        managed = sources["managed config maps"]
        assert set(managed.names) == {"console-config", "console-public"}
        assert managed.namespace == "openshift-config-managed"

    def test_oauth_secret(self, sources) -> None:
        assert sources["oauth secret"].names == ("console-oauth-config",)

    def test_registers_into_given_registry(self) -> None:
        operator_module.register_event_sources(Settings(), registry=kopf.OperatorRegistry())


class TestEnqueue:
    """Tests for the event handler that queues a sync."""

    def test_queues_controller(self, monkeypatch) -> None:
        controller = Controller(lambda ctx: None, Settings())
        monkeypatch.setattr(operator_module, "_controller", controller)

        body = {"kind": "ConfigMap", "metadata": {"name": "service-ca", "namespace": "openshift-console"}}
        operator_module._enqueue(type="MODIFIED", body=body)

        assert controller.pending is True

    def test_ignored_before_startup(self, monkeypatch) -> None:
        monkeypatch.setattr(operator_module, "_controller", None)
        operator_module._enqueue(type="ADDED", body={"metadata": {"name": "cluster"}})


class TestModels:
    """Tests for parsing the operator config."""

    def test_parses_management_state_and_status(self) -> None:
        config = OperatorConfig.from_object({
            "metadata": {"name": "cluster", "generation": 3, "resourceVersion": "100"},
            "spec": {"managementState": "Removed"},
            "status": {"observedGeneration": 2, "version": "4.16.0"},
        })

        assert config.managementState == ManagementState.REMOVED
        assert config.status.observedGeneration == 2
        assert config.status.model_dump()["version"] == "4.16.0"

    def test_missing_spec_is_unknown_state(self) -> None:
        config = OperatorConfig.from_object({"metadata": {"name": "cluster"}})
        assert config.managementState == ""
        assert config.managementState not in {s.value for s in ManagementState}

    def test_snapshot_requires_all_configs(self) -> None:
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            ConfigSnapshot(operator=OperatorConfig(name="cluster"))
