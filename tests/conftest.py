"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add repo root and tests to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from kube_mock import MockCluster  # noqa: E402

from console_operator.context import SyncContext  # noqa: E402


@pytest.fixture
def mock_cluster() -> MockCluster:
    return MockCluster()


@pytest.fixture
def ctx() -> SyncContext:
    return SyncContext()
