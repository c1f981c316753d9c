"""
Pytest configuration and fixtures for Lakestack tests.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from lakestack.domain.models import CommandResult, StackConfig, StackMode


@pytest.fixture
def compose_config(tmp_path):
    """Compose-mode config writing under tmp_path, with no waits."""
    return StackConfig(
        mode=StackMode.COMPOSE,
        work_dir=str(tmp_path / "trino"),
        settle_seconds=0,
        warmup_grace_seconds=0,
        health_timeout_seconds=1,
        health_interval_seconds=1,
    )


@pytest.fixture
def kustomize_config(tmp_path):
    """Kustomize-mode config for the trino-production namespace."""
    return StackConfig(
        mode=StackMode.KUSTOMIZE,
        namespace="trino-production",
        work_dir=str(tmp_path / "trino-k8s-argocd"),
    )


@pytest.fixture
def ok_result():
    """A successful CommandResult."""
    return CommandResult.from_exit(0, "done")


@pytest.fixture
def mock_docker_client():
    """Mock Docker SDK client with no containers and no volumes."""
    client = MagicMock()
    client.ping.return_value = True
    client.containers.list.return_value = []
    client.volumes.list.return_value = []
    return client


@pytest.fixture
def mock_compose(ok_result):
    """Mock ComposeProvider whose every command succeeds."""
    compose = MagicMock()
    compose.down.return_value = ok_result
    compose.up.return_value = ok_result
    compose.ps.return_value = ok_result
    compose.logs.return_value = CommandResult.from_exit(0, "trino log line")
    compose.exec.return_value = ok_result
    return compose


@pytest.fixture
def mock_kubectl(ok_result):
    """Mock KubectlProvider whose every command succeeds."""
    kubectl = MagicMock()
    kubectl.apply_kustomize.return_value = ok_result
    kubectl.apply_file.return_value = ok_result
    kubectl.get_pods.return_value = CommandResult.from_exit(0, "minio-abc 1/1 Running")
    kubectl.get_services.return_value = CommandResult.from_exit(0, "minio ClusterIP")
    kubectl.exec_in_pod.return_value = ok_result
    return kubectl
