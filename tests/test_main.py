# =============================================================================
# LAKESTACK ENTRY POINT TESTS
# =============================================================================
# Tests for the console-script functions and their exit codes.
# =============================================================================

from unittest.mock import MagicMock, patch

from lakestack import main
from lakestack.core.settings import ConfigError
from lakestack.domain.models import CommandResult, LifecycleState, StackConfig
from lakestack.infra.kubectl_client import KubectlError


class TestComposeMain:
    """Test lakestack-compose."""

    def test_ready_exits_zero(self, compose_config):
        """A ready report should exit 0."""
        report = MagicMock(exit_code=0, state=LifecycleState.READY)
        report.render.return_value = "ready"

        with patch("lakestack.main.load_config", return_value=compose_config), patch(
            "lakestack.main.EnvironmentController"
        ) as mock_controller:
            mock_controller.return_value.run.return_value = report
            assert main.compose_main() == 0

        mock_controller.assert_called_once_with(compose_config)

    def test_failed_exits_one(self, compose_config):
        """A failed report should exit 1."""
        report = MagicMock(exit_code=1)
        report.render.return_value = "failed"

        with patch("lakestack.main.load_config", return_value=compose_config), patch(
            "lakestack.main.EnvironmentController"
        ) as mock_controller:
            mock_controller.return_value.run.return_value = report
            assert main.compose_main() == 1

    def test_bad_config_halts(self):
        """An invalid configuration should halt with exit 1."""
        with patch("lakestack.main.load_config", side_effect=ConfigError("bad heap")):
            assert main.compose_main() == 1


class TestKustomizeMain:
    """Test lakestack-kustomize."""

    def test_generates_tree(self, kustomize_config):
        """The GitOps tree should be written to the work dir."""
        with patch("lakestack.main.load_config", return_value=kustomize_config):
            assert main.kustomize_main() == 0

        root = kustomize_config.resolved_work_dir
        assert (root / "base" / "kustomization.yaml").is_file()
        assert (root / "overlays" / "production" / "argocd-app.yaml").is_file()

    def test_invalid_namespace_halts(self, tmp_path):
        """An undeclared namespace should halt with exit 1 and write nothing."""
        config = StackConfig(mode="kustomize", namespace="staging", work_dir=str(tmp_path / "out"))

        with patch("lakestack.main.load_config", return_value=config):
            assert main.kustomize_main() == 1
        assert not (tmp_path / "out").exists()


class TestClusterMains:
    """Test the kubectl-backed entry points."""

    def test_apply_argocd_flag(self, kustomize_config, monkeypatch):
        """LAKESTACK_VIA_ARGOCD should select the Argo CD path."""
        monkeypatch.setenv("LAKESTACK_VIA_ARGOCD", "true")

        with patch("lakestack.main.load_config", return_value=kustomize_config), patch(
            "lakestack.main.apply_stack", return_value=CommandResult.from_exit(0)
        ) as mock_apply:
            assert main.k8s_apply_main() == 0

        mock_apply.assert_called_once_with(kustomize_config, via_argocd=True)

    def test_apply_missing_tree(self, kustomize_config):
        """Applying a tree that was never generated halts."""
        with patch("lakestack.main.load_config", return_value=kustomize_config), patch(
            "lakestack.main.apply_stack", side_effect=FileNotFoundError("missing")
        ):
            assert main.k8s_apply_main() == 1

    def test_setup_buckets_failure(self, kustomize_config):
        """A failed bucket setup exits 1."""
        with patch("lakestack.main.load_config", return_value=kustomize_config), patch(
            "lakestack.main.setup_buckets", return_value=CommandResult.from_exit(1, "No pod")
        ):
            assert main.setup_buckets_main() == 1

    def test_verify_without_kubectl(self, kustomize_config):
        """A missing kubectl binary halts."""
        with patch("lakestack.main.load_config", return_value=kustomize_config), patch(
            "lakestack.main.verify_installation", side_effect=KubectlError("not found")
        ):
            assert main.verify_main() == 1

    def test_verify_ok(self, kustomize_config):
        """A passing check exits 0."""
        with patch("lakestack.main.load_config", return_value=kustomize_config), patch(
            "lakestack.main.verify_installation", return_value=MagicMock(ok=True)
        ):
            assert main.verify_main() == 0
