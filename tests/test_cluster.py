# =============================================================================
# LAKESTACK CLUSTER HELPER TESTS
# =============================================================================
# Tests for apply_stack, setup_buckets and verify_installation.
# kubectl is always mocked.
# =============================================================================

import pytest

from lakestack.core.cluster import apply_stack, setup_buckets, verify_installation
from lakestack.core.materializer import materialize
from lakestack.core.planner import UndeclaredNamespace, plan
from lakestack.core.templates import MissingRequiredField
from lakestack.domain.models import CommandResult, StackConfig, StackMode


@pytest.fixture
def generated_tree(kustomize_config):
    """A materialized Kustomize tree for kustomize_config."""
    return materialize(
        plan(StackMode.KUSTOMIZE, kustomize_config), kustomize_config.resolved_work_dir
    ).root


class TestApplyStack:
    """Test apply_stack()."""

    def test_applies_primary_overlay(self, kustomize_config, generated_tree, mock_kubectl):
        """The overlay of the configured namespace should be applied with -k."""
        result = apply_stack(kustomize_config, generated_tree, kubectl=mock_kubectl)

        assert result.ok is True
        mock_kubectl.apply_kustomize.assert_called_once_with(
            generated_tree / "overlays" / "production"
        )

    def test_via_argocd(self, kustomize_config, generated_tree, mock_kubectl):
        """via_argocd should apply the overlay's Application descriptor."""
        apply_stack(kustomize_config, generated_tree, via_argocd=True, kubectl=mock_kubectl)

        mock_kubectl.apply_file.assert_called_once_with(
            generated_tree / "overlays" / "production" / "argocd-app.yaml"
        )
        mock_kubectl.apply_kustomize.assert_not_called()

    def test_defaults_to_work_dir(self, kustomize_config, generated_tree, mock_kubectl):
        """Without a root, the configured work dir is used."""
        apply_stack(kustomize_config, kubectl=mock_kubectl)

        mock_kubectl.apply_kustomize.assert_called_once_with(
            generated_tree / "overlays" / "production"
        )

    def test_tree_missing(self, kustomize_config, tmp_path, mock_kubectl):
        """Applying before generating should raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            apply_stack(kustomize_config, tmp_path / "nothing", kubectl=mock_kubectl)

    def test_undeclared_namespace(self, tmp_path, mock_kubectl):
        """A namespace without an overlay cannot be applied."""
        config = StackConfig(mode="kustomize", namespace="staging")

        with pytest.raises(UndeclaredNamespace) as exc:
            apply_stack(config, tmp_path, kubectl=mock_kubectl)
        assert exc.value.namespace == "staging"
        mock_kubectl.apply_kustomize.assert_not_called()

    def test_failure_returned(self, kustomize_config, generated_tree, mock_kubectl):
        """A failed apply comes back as a failed CommandResult."""
        mock_kubectl.apply_kustomize.return_value = CommandResult.from_exit(1, "forbidden")

        assert apply_stack(kustomize_config, generated_tree, kubectl=mock_kubectl).ok is False


class TestSetupBuckets:
    """Test setup_buckets()."""

    def test_alias_then_bucket(self, kustomize_config, mock_kubectl):
        """The MinIO client alias is set before the bucket is created."""
        result = setup_buckets(kustomize_config, kubectl=mock_kubectl)

        assert result.ok is True
        calls = mock_kubectl.exec_in_pod.call_args_list
        assert calls[0][0][:2] == ("minio", "trino-production")
        assert calls[0][0][2][:5] == ["mc", "alias", "set", "minio", "http://minio:9000"]
        assert calls[1][0][2] == ["mc", "mb", "--ignore-existing", "minio/warehouse"]

    def test_alias_failure_stops(self, kustomize_config, mock_kubectl):
        """If the alias cannot be set, no bucket is attempted."""
        mock_kubectl.exec_in_pod.return_value = CommandResult.from_exit(1, "No pod")

        result = setup_buckets(kustomize_config, kubectl=mock_kubectl)

        assert result.ok is False
        assert mock_kubectl.exec_in_pod.call_count == 1

    def test_requires_namespace(self, mock_kubectl):
        """No namespace means nothing to target."""
        with pytest.raises(MissingRequiredField):
            setup_buckets(StackConfig(mode="kustomize"), kubectl=mock_kubectl)


class TestVerifyInstallation:
    """Test verify_installation()."""

    def test_all_steps_pass(self, kustomize_config, mock_kubectl):
        """Pods, services and the trial query all succeed."""
        check = verify_installation(kustomize_config, kubectl=mock_kubectl)

        assert check.ok is True
        assert list(check.steps) == ["pods", "services", "query"]
        mock_kubectl.exec_in_pod.assert_called_once_with(
            "trino", "trino-production", ["trino", "--execute", "SELECT 1"]
        )

    def test_query_failure(self, kustomize_config, mock_kubectl):
        """A failed trial query is reported by name."""
        mock_kubectl.exec_in_pod.return_value = CommandResult.from_exit(1, "SERVER_STARTING_UP")

        check = verify_installation(kustomize_config, kubectl=mock_kubectl)

        assert check.ok is False
        assert check.failed_steps() == ["query"]
