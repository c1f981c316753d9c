# =============================================================================
# LAKESTACK SETTINGS TESTS
# =============================================================================
# Tests for load_config(): YAML file, environment overrides, validation.
# =============================================================================

import pytest

from lakestack.core.settings import ConfigError, load_config
from lakestack.domain.models import StackMode


class TestLoadConfig:
    """Test load_config()."""

    def test_missing_file_means_defaults(self, tmp_path):
        """No config file should give the default StackConfig."""
        config = load_config("compose", tmp_path / "absent.yaml", environ={})

        assert config.mode == StackMode.COMPOSE
        assert config.credentials.access_key == "minioadmin"

    def test_yaml_file(self, tmp_path):
        """Values from the YAML file should be applied."""
        path = tmp_path / "lakestack.yaml"
        path.write_text(
            "namespace: trino-development\n"
            "credentials:\n"
            "  access_key: lake\n"
            "  secret_key: lakepass\n"
            "memory:\n"
            "  coordinator_heap: 4G\n"
        )

        config = load_config("kustomize", path, environ={})

        assert config.namespace == "trino-development"
        assert config.credentials.access_key == "lake"
        assert config.credentials.region == "us-east-1"
        assert config.memory.coordinator_heap == "4G"

    def test_mode_argument_wins(self, tmp_path):
        """The entry point's mode overrides the file."""
        path = tmp_path / "lakestack.yaml"
        path.write_text("mode: kustomize\n")

        assert load_config("compose", path, environ={}).mode == StackMode.COMPOSE

    def test_env_overrides_file(self, tmp_path):
        """LAKESTACK_* variables take precedence over the file."""
        path = tmp_path / "lakestack.yaml"
        path.write_text("credentials:\n  access_key: fromfile\n")
        environ = {
            "LAKESTACK_ACCESS_KEY": "fromenv",
            "LAKESTACK_HEALTH_TIMEOUT": "300",
            "LAKESTACK_REPO_URL": "https://git.example.com/lake.git",
        }

        config = load_config("compose", path, environ=environ)

        assert config.credentials.access_key == "fromenv"
        assert config.health_timeout_seconds == 300
        assert config.gitops.repo_url == "https://git.example.com/lake.git"

    def test_config_path_from_env(self, tmp_path):
        """LAKESTACK_CONFIG should select the file."""
        path = tmp_path / "custom.yaml"
        path.write_text("warehouse_bucket: lake\n")

        config = load_config("compose", environ={"LAKESTACK_CONFIG": str(path)})

        assert config.warehouse_bucket == "lake"

    def test_kustomize_namespace_default(self, tmp_path):
        """Kustomize mode without a namespace uses the first overlay's."""
        config = load_config("kustomize", tmp_path / "absent.yaml", environ={})

        assert config.namespace == "trino-production"

    def test_invalid_value(self, tmp_path):
        """Values pydantic rejects raise ConfigError."""
        with pytest.raises(ConfigError):
            load_config(
                "compose",
                tmp_path / "absent.yaml",
                environ={"LAKESTACK_COORDINATOR_HEAP": "huge"},
            )

    def test_malformed_yaml(self, tmp_path):
        """Unparseable YAML raises ConfigError."""
        path = tmp_path / "lakestack.yaml"
        path.write_text("credentials: [unclosed\n")

        with pytest.raises(ConfigError):
            load_config("compose", path, environ={})

    def test_non_mapping(self, tmp_path):
        """A YAML list at the top level is rejected."""
        path = tmp_path / "lakestack.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError):
            load_config("compose", path, environ={})
