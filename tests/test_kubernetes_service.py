"""Tests for the cluster service layer and the cycle context."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from kubernetes import client
from kubernetes.client import ApiException

from console_operator.config import Settings
from console_operator.context import SyncContext
from console_operator.errors import CycleCancelledError
from console_operator.services.kubernetes_service import ClusterService
from console_operator.subresources import empty_public_config


@pytest.fixture
def mocked_service() -> ClusterService:
    return ClusterService(MagicMock(), MagicMock(), MagicMock(), Settings(REQUEST_TIMEOUT=12))


class TestCallOptions:
    """Tests for context handling on every call."""

    def test_request_timeout_is_passed(self, mocked_service) -> None:
        mocked_service.get_config(SyncContext(), "proxies", "cluster")

        mocked_service.custom.get_cluster_custom_object.assert_called_once_with(
            "config.openshift.io", "v1", "proxies", "cluster", _request_timeout=12,
        )

    def test_deadline_bounds_request_timeout(self, mocked_service) -> None:
        mocked_service.delete_secret(SyncContext.with_timeout(5), "console-oauth-config", "openshift-console")

        timeout = mocked_service.core.delete_namespaced_secret.call_args.kwargs["_request_timeout"]
        assert 0 < timeout <= 5

    def test_cancelled_context_skips_call(self, mocked_service) -> None:
        with pytest.raises(CycleCancelledError):
            mocked_service.delete_deployment(SyncContext(cancelled=lambda: True), "console", "openshift-console")

        mocked_service.apps.delete_namespaced_deployment.assert_not_called()

    def test_operator_status_patch_targets_status_subresource(self, mocked_service) -> None:
        mocked_service.update_operator_status(SyncContext(), "cluster", {"observedGeneration": 2})

        mocked_service.custom.patch_cluster_custom_object_status.assert_called_once_with(
            "operator.openshift.io", "v1", "consoles", "cluster",
            {"status": {"observedGeneration": 2}}, _request_timeout=12,
        )


class TestApplyConfigMap:
    """Tests for ClusterService.apply_config_map()."""

    def test_creates_when_missing(self, mock_cluster) -> None:
        """Test a missing config map is created and an event is recorded."""
        events = []
        ctx = SyncContext(recorder=lambda reason, message: events.append(reason))

        _, modified = mock_cluster.service.apply_config_map(ctx, empty_public_config(mock_cluster.settings))

        assert modified is True
        assert mock_cluster.public_config().data == {"consoleURL": ""}
        assert events == ["ConfigMapCreated"]

    def test_noop_when_equal(self, mock_cluster, ctx) -> None:
        """Test nothing is written when the data already matches."""
        mock_cluster.seed_operands(console_url="")

        _, modified = mock_cluster.service.apply_config_map(ctx, empty_public_config(mock_cluster.settings))

        assert modified is False
        assert mock_cluster.state.mutations() == []

    def test_replaces_data_wholesale(self, mock_cluster, ctx) -> None:
        """Test the required data replaces every existing key."""
        managed = mock_cluster.settings.CONFIG_MANAGED_NAMESPACE
        mock_cluster.state.config_maps[(managed, "console-public")] = client.V1ConfigMap(
            metadata=client.V1ObjectMeta(name="console-public", namespace=managed, labels={"owner": "cvo"}),
            data={"consoleURL": "https://console.apps.example.com", "stale": "x"},
        )

        _, modified = mock_cluster.service.apply_config_map(ctx, empty_public_config(mock_cluster.settings))

        assert modified is True
        stored = mock_cluster.public_config()
        assert stored.data == {"consoleURL": ""}
        assert stored.metadata.labels == {"owner": "cvo"}

    def test_merges_required_labels(self, mock_cluster, ctx) -> None:
        mock_cluster.seed_operands(console_url="")
        required = empty_public_config(mock_cluster.settings)
        required.metadata.labels = {"app": "console"}

        _, modified = mock_cluster.service.apply_config_map(ctx, required)

        assert modified is True
        assert mock_cluster.public_config().metadata.labels == {"app": "console"}

    def test_read_error_propagates(self, mock_cluster, ctx) -> None:
        boom = ApiException(status=500)
        mock_cluster.state.fail("read_namespaced_config_map", "console-public", boom)

        with pytest.raises(ApiException) as exc_info:
            mock_cluster.service.apply_config_map(ctx, empty_public_config(mock_cluster.settings))

        assert exc_info.value is boom
        assert mock_cluster.state.mutations() == []


class TestSyncContext:
    """Tests for SyncContext."""

    def test_defaults_never_cancel(self) -> None:
        ctx = SyncContext()
        ctx.check()
        assert ctx.request_timeout(30) == 30

    def test_record_without_recorder_is_noop(self) -> None:
        SyncContext().record("Reason", "message")

    def test_expired_deadline(self) -> None:
        ctx = SyncContext.with_timeout(-1)
        assert ctx.request_timeout(30) == 0.0
        with pytest.raises(CycleCancelledError, match="deadline"):
            ctx.check()
