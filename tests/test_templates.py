# =============================================================================
# LAKESTACK TEMPLATE CATALOG TESTS
# =============================================================================
# Tests for render(): registry coverage, errors, and generated content.
# =============================================================================

import pytest
import yaml

from lakestack.core.templates import (
    MissingRequiredField,
    UnknownArtifactKind,
    application_name,
    available_templates,
    category_for,
    container_name,
    render,
)
from lakestack.domain.models import (
    ArtifactCategory,
    ArtifactKind,
    OverlaySpec,
    StackConfig,
    StackMode,
)

PRODUCTION = OverlaySpec(name="production", namespace="trino-production")


def _properties(body: str) -> dict[str, str]:
    return dict(line.split("=", 1) for line in body.splitlines() if line)


class TestRegistry:
    """Test the (kind, mode) registry."""

    def test_every_kind_has_a_template(self):
        """Every ArtifactKind should be renderable in at least one mode."""
        registered = {kind for kind, _ in available_templates()}

        assert registered == set(ArtifactKind)

    def test_unknown_pair_raises(self, compose_config):
        """Kubernetes-only kinds have no Compose template."""
        with pytest.raises(UnknownArtifactKind):
            render(ArtifactKind.MINIO_DEPLOYMENT, StackMode.COMPOSE, compose_config)

    def test_unknown_kind_string_raises(self, compose_config):
        """A kind that is not an ArtifactKind should raise UnknownArtifactKind."""
        with pytest.raises(UnknownArtifactKind):
            render("grafana-dashboard", StackMode.COMPOSE, compose_config)

    def test_kustomize_requires_namespace(self):
        """Kustomize templates need a namespace."""
        config = StackConfig(mode="kustomize")

        with pytest.raises(MissingRequiredField) as exc:
            render(ArtifactKind.MINIO_SERVICE, StackMode.KUSTOMIZE, config)
        assert exc.value.field == "namespace"

    def test_overlay_kinds_require_overlay(self, kustomize_config):
        """Overlay-scoped kinds need an overlay."""
        with pytest.raises(MissingRequiredField) as exc:
            render(ArtifactKind.ARGOCD_APPLICATION, StackMode.KUSTOMIZE, kustomize_config)
        assert exc.value.field == "overlay"

    def test_categories(self):
        """Trino files are properties in Compose and manifests in Kustomize."""
        assert category_for(ArtifactKind.TRINO_NODE_CONFIG, "compose") == ArtifactCategory.PROPERTIES_FILE
        assert category_for(ArtifactKind.TRINO_SERVER_CONFIG, "kustomize") == ArtifactCategory.MANIFEST
        assert category_for(ArtifactKind.COMPOSE_FILE, "compose") == ArtifactCategory.COMPOSE_SERVICE
        assert category_for(ArtifactKind.VERIFY_SCRIPT, "kustomize") == ArtifactCategory.SCRIPT

    def test_render_is_pure(self, kustomize_config):
        """Rendering twice should give identical output."""
        first = render(ArtifactKind.TRINO_DEPLOYMENT, StackMode.KUSTOMIZE, kustomize_config)
        second = render(ArtifactKind.TRINO_DEPLOYMENT, StackMode.KUSTOMIZE, kustomize_config)

        assert first == second


class TestComposeFile:
    """Test the generated docker-compose.yml."""

    def test_three_services(self, compose_config):
        """Exactly minio, nessie and trino should be declared."""
        doc = yaml.safe_load(render(ArtifactKind.COMPOSE_FILE, "compose", compose_config))

        assert set(doc["services"]) == {"minio", "nessie", "trino"}
        assert doc["volumes"] == {"minio_data": None}

    def test_trino_waits_for_healthy_dependencies(self, compose_config):
        """Trino should depend on minio and nessie being healthy."""
        doc = yaml.safe_load(render(ArtifactKind.COMPOSE_FILE, "compose", compose_config))

        assert doc["services"]["trino"]["depends_on"] == {
            "minio": {"condition": "service_healthy"},
            "nessie": {"condition": "service_healthy"},
        }

    def test_healthchecks(self, compose_config):
        """Every service should declare a healthcheck with retries."""
        services = yaml.safe_load(
            render(ArtifactKind.COMPOSE_FILE, "compose", compose_config)
        )["services"]

        assert services["minio"]["healthcheck"]["retries"] == 3
        assert services["nessie"]["healthcheck"]["interval"] == "30s"
        assert services["trino"]["healthcheck"]["retries"] == 5
        assert services["trino"]["healthcheck"]["start_period"] == "60s"

    def test_credentials_substituted(self):
        """The store's root credentials should come from the config."""
        config = StackConfig(credentials={"access_key": "admin", "secret_key": "s3cret!"})
        env = yaml.safe_load(render(ArtifactKind.COMPOSE_FILE, "compose", config))["services"][
            "minio"
        ]["environment"]

        assert env == {"MINIO_ROOT_USER": "admin", "MINIO_ROOT_PASSWORD": "s3cret!"}

    def test_container_names(self, compose_config):
        """Container names should be prefixed with the project name."""
        assert container_name(compose_config, "minio") == "trino-minio"
        assert container_name(compose_config, "trino") == "trino-coordinator"


class TestTrinoConfigFiles:
    """Test the query engine's configuration files."""

    def test_connector_file(self, compose_config):
        """The connector should use path-style access on http://minio:9000."""
        props = _properties(render(ArtifactKind.TRINO_CATALOG_CONFIG, "compose", compose_config))

        assert props["connector.name"] == "iceberg"
        assert props["s3.path-style-access"] == "true"
        assert props["s3.endpoint"] == "http://minio:9000"
        assert props["iceberg.nessie-catalog.uri"] == "http://nessie:19120/api/v1"
        assert props["s3.aws-access-key"] == "minioadmin"

    def test_jvm_heap(self):
        """The heap flag should follow the configured coordinator heap."""
        config = StackConfig(memory={"coordinator_heap": "4G"})
        body = render(ArtifactKind.TRINO_JVM_CONFIG, "compose", config)

        assert body.splitlines()[1] == "-Xmx4G"

    def test_main_configmap_bundles_node_and_log(self, kustomize_config):
        """The Kubernetes server ConfigMap should carry all three property files."""
        doc = yaml.safe_load(
            render(ArtifactKind.TRINO_SERVER_CONFIG, "kustomize", kustomize_config)
        )

        assert doc["metadata"]["name"] == "trino-config"
        assert set(doc["data"]) == {"config.properties", "node.properties", "log.properties"}


class TestEndpointConsistency:
    """The connector must point at the services that are actually generated."""

    def test_kustomize_connector_matches_services(self, kustomize_config):
        """Connector hosts and ports should equal the generated Service names and ports."""
        props = _properties(
            yaml.safe_load(
                render(ArtifactKind.TRINO_CATALOG_CONFIG, "kustomize", kustomize_config)
            )["data"]["iceberg.properties"]
        )
        minio = yaml.safe_load(render(ArtifactKind.MINIO_SERVICE, "kustomize", kustomize_config))
        nessie = yaml.safe_load(render(ArtifactKind.NESSIE_SERVICE, "kustomize", kustomize_config))

        minio_api = next(p for p in minio["spec"]["ports"] if p["name"] == "api")["port"]
        nessie_port = nessie["spec"]["ports"][0]["port"]
        assert props["s3.endpoint"] == f"http://{minio['metadata']['name']}:{minio_api}"
        assert props["iceberg.nessie-catalog.uri"].startswith(
            f"http://{nessie['metadata']['name']}:{nessie_port}/"
        )

    def test_compose_connector_matches_services(self, compose_config):
        """Connector hosts should be Compose service keys with published ports."""
        props = _properties(render(ArtifactKind.TRINO_CATALOG_CONFIG, "compose", compose_config))
        services = yaml.safe_load(
            render(ArtifactKind.COMPOSE_FILE, "compose", compose_config)
        )["services"]

        assert "9000:9000" in services["minio"]["ports"]
        assert "19120:19120" in services["nessie"]["ports"]
        assert props["s3.endpoint"] == "http://minio:9000"


class TestKubernetesManifests:
    """Test workloads, kustomizations and the Argo CD Application."""

    def test_minio_deployment(self, kustomize_config):
        """MinIO should mount the PVC and probe the ready endpoint."""
        doc = yaml.safe_load(render(ArtifactKind.MINIO_DEPLOYMENT, "kustomize", kustomize_config))
        pod = doc["spec"]["template"]["spec"]

        assert doc["kind"] == "Deployment"
        assert pod["volumes"][0]["persistentVolumeClaim"]["claimName"] == "minio-pvc"
        assert pod["containers"][0]["readinessProbe"]["httpGet"]["path"] == "/minio/health/ready"

    def test_pvc_size(self):
        """The PVC should request the configured volume size."""
        config = StackConfig(
            mode="kustomize",
            namespace="trino-production",
            memory={"object_store_volume_size": "50Gi"},
        )
        doc = yaml.safe_load(render(ArtifactKind.MINIO_VOLUME_CLAIM, "kustomize", config))

        assert doc["spec"]["resources"]["requests"]["storage"] == "50Gi"

    def test_trino_deployment_mounts_configmaps(self, kustomize_config):
        """Trino should mount each config file through a subPath."""
        doc = yaml.safe_load(render(ArtifactKind.TRINO_DEPLOYMENT, "kustomize", kustomize_config))
        container = doc["spec"]["template"]["spec"]["containers"][0]

        mount_paths = {m["mountPath"] for m in container["volumeMounts"]}
        assert "/etc/trino/catalog/iceberg.properties" in mount_paths
        assert container["readinessProbe"]["initialDelaySeconds"] == 60

    def test_base_kustomization_lists_resources(self, kustomize_config):
        """The base should list every base resource."""
        doc = yaml.safe_load(render(ArtifactKind.KUSTOMIZE_BASE, "kustomize", kustomize_config))

        assert doc["kind"] == "Kustomization"
        assert "minio/deployment.yaml" in doc["resources"]
        assert len(doc["resources"]) == 10

    def test_overlay_kustomization(self, kustomize_config):
        """Overlays should reference the base and set their namespace."""
        doc = yaml.safe_load(
            render(ArtifactKind.KUSTOMIZE_OVERLAY, "kustomize", kustomize_config, PRODUCTION)
        )

        assert doc["resources"] == ["../../base"]
        assert doc["namespace"] == "trino-production"

    def test_argocd_application(self, kustomize_config):
        """The Application should sync the overlay with prune and selfHeal."""
        doc = yaml.safe_load(
            render(ArtifactKind.ARGOCD_APPLICATION, "kustomize", kustomize_config, PRODUCTION)
        )

        assert doc["kind"] == "Application"
        assert doc["metadata"]["name"] == application_name(kustomize_config, PRODUCTION)
        assert doc["spec"]["source"]["path"] == "overlays/production"
        assert doc["spec"]["destination"]["namespace"] == "trino-production"
        assert doc["spec"]["syncPolicy"]["automated"] == {"prune": True, "selfHeal": True}
        assert "CreateNamespace=true" in doc["spec"]["syncPolicy"]["syncOptions"]

    def test_argocd_repo_url_configurable(self):
        """The Application should pull from the configured repository."""
        config = StackConfig(
            mode="kustomize",
            namespace="trino-production",
            gitops={"repo_url": "https://git.example.com/lake.git"},
        )
        doc = yaml.safe_load(render(ArtifactKind.ARGOCD_APPLICATION, "kustomize", config, PRODUCTION))

        assert doc["spec"]["source"]["repoURL"] == "https://git.example.com/lake.git"


class TestHelperScripts:
    """Test the generated helper scripts and README."""

    def test_bucket_script_targets_namespace(self, kustomize_config):
        """The bucket script should exec into the MinIO pod of the namespace."""
        body = render(ArtifactKind.BUCKET_SETUP_SCRIPT, "kustomize", kustomize_config)

        assert "NAMESPACE=trino-production" in body
        assert "mc mb --ignore-existing minio/warehouse" in body

    def test_verify_script_runs_trial_query(self, kustomize_config):
        """The verify script should run SELECT 1 in the Trino pod."""
        body = render(ArtifactKind.VERIFY_SCRIPT, "kustomize", kustomize_config)

        assert 'trino --execute "SELECT 1"' in body
        assert "kubectl get svc" in body

    def test_readme_mentions_overlays(self, kustomize_config):
        """The README should document the primary overlay commands."""
        body = render(ArtifactKind.README, "kustomize", kustomize_config)

        assert "kubectl apply -k overlays/production" in body
        assert "trino-development" in body
