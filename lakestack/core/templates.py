# Copyright 2026 Pramod Kumar Voola
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# -----------------------------------------------------------------------------
# THE TEMPLATE CATALOG
# -----------------------------------------------------------------------------
# Responsibility: Turn a StackConfig into the body of one generated file.
# render() is pure: no I/O, same input -> same bytes.
#
# Every (ArtifactKind, StackMode) pair has at most one template. Templates
# build mappings or typed records and serialize them through core.formats.
# Credentials are read from config.credentials only, and every in-stack URI
# is derived from ServiceEndpoints, so Compose and Kustomize output cannot
# drift apart.
# -----------------------------------------------------------------------------

import shlex
from collections.abc import Callable

from rich.console import Console

from lakestack.core.formats import (
    format_jvm_options,
    format_properties,
    format_shell_script,
    format_yaml,
)
from lakestack.domain.models import (
    CATALOG_HEALTH_PATH,
    CATALOG_SERVICE,
    OBJECT_STORE_LIVE_PATH,
    OBJECT_STORE_READY_PATH,
    OBJECT_STORE_SERVICE,
    QUERY_ENGINE_HEALTH_CHECK,
    QUERY_ENGINE_SERVICE,
    ArtifactCategory,
    ArtifactKind,
    OverlaySpec,
    ServiceEndpoints,
    StackConfig,
    StackMode,
)
from lakestack.domain.trino import (
    IcebergCatalogProperties,
    JvmConfig,
    LogProperties,
    NodeProperties,
    server_properties,
)

console = Console()

TemplateFn = Callable[[StackConfig, OverlaySpec | None], str]

KUSTOMIZE_API_VERSION = "kustomize.config.k8s.io/v1beta1"
ARGOCD_API_VERSION = "argoproj.io/v1alpha1"
COMPOSE_FILE_VERSION = "3.8"

OBJECT_STORE_VOLUME_CLAIM = "minio-pvc"
OBJECT_STORE_DATA_DIR = "/data"
MC_ALIAS = "minio"

# Kubernetes ConfigMap names for the query engine
TRINO_CONFIGMAP = "trino-config"
TRINO_JVM_CONFIGMAP = "trino-jvm-config"
TRINO_CATALOG_CONFIGMAP = "trino-catalog-config"
CATALOG_FILE = "iceberg.properties"

# Base resources, relative to base/, in kustomization order
BASE_RESOURCES: tuple[tuple[str, ArtifactKind], ...] = (
    ("minio/deployment.yaml", ArtifactKind.MINIO_DEPLOYMENT),
    ("minio/service.yaml", ArtifactKind.MINIO_SERVICE),
    ("minio/pvc.yaml", ArtifactKind.MINIO_VOLUME_CLAIM),
    ("nessie/deployment.yaml", ArtifactKind.NESSIE_DEPLOYMENT),
    ("nessie/service.yaml", ArtifactKind.NESSIE_SERVICE),
    ("trino/configmap-jvm.yaml", ArtifactKind.TRINO_JVM_CONFIG),
    ("trino/configmap-main.yaml", ArtifactKind.TRINO_SERVER_CONFIG),
    ("trino/configmap-catalog.yaml", ArtifactKind.TRINO_CATALOG_CONFIG),
    ("trino/deployment.yaml", ArtifactKind.TRINO_DEPLOYMENT),
    ("trino/service.yaml", ArtifactKind.TRINO_SERVICE),
)

OVERLAY_KINDS = {ArtifactKind.KUSTOMIZE_OVERLAY, ArtifactKind.ARGOCD_APPLICATION}

_PROPERTY_KINDS = {
    ArtifactKind.TRINO_JVM_CONFIG,
    ArtifactKind.TRINO_SERVER_CONFIG,
    ArtifactKind.TRINO_NODE_CONFIG,
    ArtifactKind.TRINO_LOG_CONFIG,
    ArtifactKind.TRINO_CATALOG_CONFIG,
}


class UnknownArtifactKind(Exception):
    """Raised when no template exists for the requested kind in the given mode."""

    def __init__(self, kind: object, mode: object) -> None:
        super().__init__(f"No template for artifact kind '{kind}' in mode '{mode}'")
        self.kind = kind
        self.mode = mode


class MissingRequiredField(Exception):
    """Raised when a config field the template needs is absent."""

    def __init__(self, field: str, kind: object = None) -> None:
        message = f"Missing required field '{field}'"
        if kind is not None:
            message += f" for artifact kind '{kind}'"
        super().__init__(message)
        self.field = field
        self.kind = kind


_TEMPLATES: dict[tuple[ArtifactKind, StackMode], TemplateFn] = {}


def template(kind: ArtifactKind, *modes: StackMode) -> Callable[[TemplateFn], TemplateFn]:
    """Register a template function for `kind` in each of `modes`."""

    def register(fn: TemplateFn) -> TemplateFn:
        for mode in modes:
            _TEMPLATES[(kind, mode)] = fn
        return fn

    return register


def available_templates() -> list[tuple[ArtifactKind, StackMode]]:
    return list(_TEMPLATES)


def category_for(kind: ArtifactKind, mode: StackMode) -> ArtifactCategory:
    """The ArtifactCategory of a rendered kind; depends on mode for Trino files."""
    kind = ArtifactKind(kind)
    mode = StackMode(mode)
    if kind in (ArtifactKind.BUCKET_SETUP_SCRIPT, ArtifactKind.VERIFY_SCRIPT):
        return ArtifactCategory.SCRIPT
    if kind == ArtifactKind.README:
        return ArtifactCategory.DOCUMENT
    if kind == ArtifactKind.COMPOSE_FILE:
        return ArtifactCategory.COMPOSE_SERVICE
    if kind in _PROPERTY_KINDS and mode == StackMode.COMPOSE:
        return ArtifactCategory.PROPERTIES_FILE
    return ArtifactCategory.MANIFEST


def render(
    kind: ArtifactKind,
    mode: StackMode,
    config: StackConfig,
    overlay: OverlaySpec | None = None,
) -> str:
    """
    Render the body of one artifact.

    Args:
        kind: Which template to use.
        mode: compose or kustomize.
        config: Values substituted into the template.
        overlay: The overlay, for overlay-scoped kinds (overlay kustomization,
            Argo CD Application).

    Returns:
        The complete file content.

    Raises:
        UnknownArtifactKind: No template for (kind, mode).
        MissingRequiredField: namespace (kustomize) or overlay is absent.
    """
    try:
        key = (ArtifactKind(kind), StackMode(mode))
    except ValueError:
        raise UnknownArtifactKind(kind, mode)

    fn = _TEMPLATES.get(key)
    if fn is None:
        raise UnknownArtifactKind(key[0].value, key[1].value)

    if key[1] == StackMode.KUSTOMIZE and not config.namespace:
        raise MissingRequiredField("namespace", key[0].value)
    if key[0] in OVERLAY_KINDS and overlay is None:
        raise MissingRequiredField("overlay", key[0].value)

    return fn(config, overlay)


# --- Shared builders ---------------------------------------------------------


def _endpoints(mode: StackMode) -> ServiceEndpoints:
    return ServiceEndpoints.for_mode(mode)


def _labels(app: str) -> dict:
    return {"app": app}


def _deployment(name: str, container: dict, volumes: list[dict] | None = None) -> dict:
    pod_spec: dict = {"containers": [container]}
    if volumes:
        pod_spec["volumes"] = volumes
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {"name": name},
        "spec": {
            "replicas": 1,
            "selector": {"matchLabels": _labels(name)},
            "template": {"metadata": {"labels": _labels(name)}, "spec": pod_spec},
        },
    }


def _service(name: str, ports: list[dict]) -> dict:
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {"name": name},
        "spec": {"selector": _labels(name), "ports": ports},
    }


def _configmap(name: str, data: dict[str, str]) -> dict:
    return {"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": name}, "data": data}


def _object_store_env(config: StackConfig) -> dict[str, str]:
    return {
        "MINIO_ROOT_USER": config.credentials.access_key,
        "MINIO_ROOT_PASSWORD": config.credentials.secret_key,
    }


def _object_store_args() -> list[str]:
    console_port = _endpoints(StackMode.COMPOSE).object_store_console.port
    return ["server", OBJECT_STORE_DATA_DIR, "--console-address", f":{console_port}"]


# --- Query engine configuration files ----------------------------------------


def _jvm_config(config: StackConfig) -> str:
    return format_jvm_options(JvmConfig(heap=config.memory.coordinator_heap))


def _server_config(config: StackConfig) -> str:
    return format_properties(server_properties(config))


def _node_config(config: StackConfig) -> str:
    return format_properties(NodeProperties())


def _log_config(config: StackConfig) -> str:
    return format_properties(LogProperties())


def _catalog_config(config: StackConfig, mode: StackMode) -> str:
    return format_properties(IcebergCatalogProperties.for_stack(config, mode))


@template(ArtifactKind.TRINO_JVM_CONFIG, StackMode.COMPOSE)
def _compose_jvm(config: StackConfig, overlay: OverlaySpec | None) -> str:
    return _jvm_config(config)


@template(ArtifactKind.TRINO_SERVER_CONFIG, StackMode.COMPOSE)
def _compose_server(config: StackConfig, overlay: OverlaySpec | None) -> str:
    return _server_config(config)


@template(ArtifactKind.TRINO_NODE_CONFIG, StackMode.COMPOSE)
def _compose_node(config: StackConfig, overlay: OverlaySpec | None) -> str:
    return _node_config(config)


@template(ArtifactKind.TRINO_LOG_CONFIG, StackMode.COMPOSE)
def _compose_log(config: StackConfig, overlay: OverlaySpec | None) -> str:
    return _log_config(config)


@template(ArtifactKind.TRINO_CATALOG_CONFIG, StackMode.COMPOSE)
def _compose_catalog(config: StackConfig, overlay: OverlaySpec | None) -> str:
    return _catalog_config(config, StackMode.COMPOSE)


@template(ArtifactKind.TRINO_JVM_CONFIG, StackMode.KUSTOMIZE)
def _k8s_jvm_configmap(config: StackConfig, overlay: OverlaySpec | None) -> str:
    return format_yaml(_configmap(TRINO_JVM_CONFIGMAP, {"jvm.config": _jvm_config(config)}))


@template(ArtifactKind.TRINO_SERVER_CONFIG, StackMode.KUSTOMIZE)
def _k8s_main_configmap(config: StackConfig, overlay: OverlaySpec | None) -> str:
    # node and log properties share the server ConfigMap
    return format_yaml(
        _configmap(
            TRINO_CONFIGMAP,
            {
                "config.properties": _server_config(config),
                "node.properties": _node_config(config),
                "log.properties": _log_config(config),
            },
        )
    )


@template(ArtifactKind.TRINO_CATALOG_CONFIG, StackMode.KUSTOMIZE)
def _k8s_catalog_configmap(config: StackConfig, overlay: OverlaySpec | None) -> str:
    return format_yaml(
        _configmap(
            TRINO_CATALOG_CONFIGMAP,
            {CATALOG_FILE: _catalog_config(config, StackMode.KUSTOMIZE)},
        )
    )


# --- Kubernetes workloads ----------------------------------------------------


@template(ArtifactKind.MINIO_DEPLOYMENT, StackMode.KUSTOMIZE)
def _minio_deployment(config: StackConfig, overlay: OverlaySpec | None) -> str:
    endpoints = _endpoints(StackMode.KUSTOMIZE)
    container = {
        "name": OBJECT_STORE_SERVICE,
        "image": config.images.object_store,
        "args": _object_store_args(),
        "env": [{"name": k, "value": v} for k, v in _object_store_env(config).items()],
        "ports": [
            {"containerPort": endpoints.object_store.port},
            {"containerPort": endpoints.object_store_console.port},
        ],
        "volumeMounts": [{"name": "minio-data", "mountPath": OBJECT_STORE_DATA_DIR}],
        "readinessProbe": {
            "httpGet": {"path": OBJECT_STORE_READY_PATH, "port": endpoints.object_store.port},
            "initialDelaySeconds": 5,
            "periodSeconds": 10,
        },
    }
    volumes = [
        {"name": "minio-data", "persistentVolumeClaim": {"claimName": OBJECT_STORE_VOLUME_CLAIM}}
    ]
    return format_yaml(_deployment(OBJECT_STORE_SERVICE, container, volumes))


@template(ArtifactKind.MINIO_SERVICE, StackMode.KUSTOMIZE)
def _minio_service(config: StackConfig, overlay: OverlaySpec | None) -> str:
    endpoints = _endpoints(StackMode.KUSTOMIZE)
    api, console_port = endpoints.object_store.port, endpoints.object_store_console.port
    return format_yaml(
        _service(
            OBJECT_STORE_SERVICE,
            [
                {"name": "api", "port": api, "targetPort": api},
                {"name": "console", "port": console_port, "targetPort": console_port},
            ],
        )
    )


@template(ArtifactKind.MINIO_VOLUME_CLAIM, StackMode.KUSTOMIZE)
def _minio_pvc(config: StackConfig, overlay: OverlaySpec | None) -> str:
    return format_yaml(
        {
            "apiVersion": "v1",
            "kind": "PersistentVolumeClaim",
            "metadata": {"name": OBJECT_STORE_VOLUME_CLAIM},
            "spec": {
                "accessModes": ["ReadWriteOnce"],
                "resources": {"requests": {"storage": config.memory.object_store_volume_size}},
            },
        }
    )


@template(ArtifactKind.NESSIE_DEPLOYMENT, StackMode.KUSTOMIZE)
def _nessie_deployment(config: StackConfig, overlay: OverlaySpec | None) -> str:
    port = _endpoints(StackMode.KUSTOMIZE).catalog.port
    container = {
        "name": CATALOG_SERVICE,
        "image": config.images.catalog,
        "ports": [{"containerPort": port}],
        "env": [{"name": "NESSIE_VERSION_STORE_TYPE", "value": "IN_MEMORY"}],
        "readinessProbe": {
            "httpGet": {"path": CATALOG_HEALTH_PATH, "port": port},
            "initialDelaySeconds": 5,
            "periodSeconds": 10,
        },
    }
    return format_yaml(_deployment(CATALOG_SERVICE, container))


@template(ArtifactKind.NESSIE_SERVICE, StackMode.KUSTOMIZE)
def _nessie_service(config: StackConfig, overlay: OverlaySpec | None) -> str:
    port = _endpoints(StackMode.KUSTOMIZE).catalog.port
    return format_yaml(_service(CATALOG_SERVICE, [{"port": port, "targetPort": port}]))


@template(ArtifactKind.TRINO_DEPLOYMENT, StackMode.KUSTOMIZE)
def _trino_deployment(config: StackConfig, overlay: OverlaySpec | None) -> str:
    port = _endpoints(StackMode.KUSTOMIZE).query_engine.port
    mounts = [
        ("trino-config", "config.properties", "/etc/trino/config.properties"),
        ("trino-config", "node.properties", "/etc/trino/node.properties"),
        ("trino-config", "log.properties", "/etc/trino/log.properties"),
        ("trino-jvm", "jvm.config", "/etc/trino/jvm.config"),
        ("trino-catalog", CATALOG_FILE, f"/etc/trino/catalog/{CATALOG_FILE}"),
    ]
    container = {
        "name": QUERY_ENGINE_SERVICE,
        "image": config.images.query_engine,
        "ports": [{"containerPort": port}],
        "volumeMounts": [
            {"name": volume, "mountPath": path, "subPath": sub_path}
            for volume, sub_path, path in mounts
        ],
        "readinessProbe": {
            "exec": {"command": [QUERY_ENGINE_HEALTH_CHECK]},
            "initialDelaySeconds": 60,
            "periodSeconds": 30,
        },
    }
    volumes = [
        {"name": "trino-config", "configMap": {"name": TRINO_CONFIGMAP}},
        {"name": "trino-jvm", "configMap": {"name": TRINO_JVM_CONFIGMAP}},
        {"name": "trino-catalog", "configMap": {"name": TRINO_CATALOG_CONFIGMAP}},
    ]
    return format_yaml(_deployment(QUERY_ENGINE_SERVICE, container, volumes))


@template(ArtifactKind.TRINO_SERVICE, StackMode.KUSTOMIZE)
def _trino_service(config: StackConfig, overlay: OverlaySpec | None) -> str:
    port = _endpoints(StackMode.KUSTOMIZE).query_engine.port
    return format_yaml(_service(QUERY_ENGINE_SERVICE, [{"port": port, "targetPort": port}]))


# --- Kustomize & Argo CD -----------------------------------------------------


@template(ArtifactKind.KUSTOMIZE_BASE, StackMode.KUSTOMIZE)
def _kustomize_base(config: StackConfig, overlay: OverlaySpec | None) -> str:
    return format_yaml(
        {
            "apiVersion": KUSTOMIZE_API_VERSION,
            "kind": "Kustomization",
            "resources": [path for path, _ in BASE_RESOURCES],
        }
    )


@template(ArtifactKind.KUSTOMIZE_OVERLAY, StackMode.KUSTOMIZE)
def _kustomize_overlay(config: StackConfig, overlay: OverlaySpec | None) -> str:
    return format_yaml(
        {
            "apiVersion": KUSTOMIZE_API_VERSION,
            "kind": "Kustomization",
            "resources": ["../../base"],
            "namespace": overlay.namespace,
        }
    )


def application_name(config: StackConfig, overlay: OverlaySpec) -> str:
    return f"{config.project_name}-{overlay.name}"


@template(ArtifactKind.ARGOCD_APPLICATION, StackMode.KUSTOMIZE)
def _argocd_application(config: StackConfig, overlay: OverlaySpec | None) -> str:
    gitops = config.gitops
    return format_yaml(
        {
            "apiVersion": ARGOCD_API_VERSION,
            "kind": "Application",
            "metadata": {"name": application_name(config, overlay)},
            "spec": {
                "project": gitops.project,
                "source": {
                    "repoURL": gitops.repo_url,
                    "targetRevision": gitops.target_revision,
                    "path": f"overlays/{overlay.name}",
                },
                "destination": {
                    "server": gitops.destination_server,
                    "namespace": overlay.namespace,
                },
                "syncPolicy": {
                    "automated": {"prune": True, "selfHeal": True},
                    "syncOptions": ["CreateNamespace=true"],
                },
            },
        }
    )


# --- Post-deploy helper scripts ----------------------------------------------


def _pod_lookup(label: str) -> str:
    jsonpath = "'{.items[0].metadata.name}'"
    return f'kubectl get pods -n "${{NAMESPACE}}" -l app={label} -o jsonpath={jsonpath}'


@template(ArtifactKind.BUCKET_SETUP_SCRIPT, StackMode.KUSTOMIZE)
def _bucket_setup_script(config: StackConfig, overlay: OverlaySpec | None) -> str:
    creds = config.credentials
    store = _endpoints(StackMode.KUSTOMIZE).object_store
    alias_cmd = shlex.join(["mc", "alias", "set", MC_ALIAS, store.url, creds.access_key, creds.secret_key])
    bucket_cmd = shlex.join(["mc", "mb", "--ignore-existing", f"{MC_ALIAS}/{config.warehouse_bucket}"])
    return format_shell_script(
        [
            f"NAMESPACE={shlex.quote(config.namespace)}",
            f'POD="$({_pod_lookup(OBJECT_STORE_SERVICE)})"',
            "",
            f'kubectl exec -n "${{NAMESPACE}}" "${{POD}}" -- {alias_cmd}',
            f'kubectl exec -n "${{NAMESPACE}}" "${{POD}}" -- {bucket_cmd}',
        ]
    )


@template(ArtifactKind.VERIFY_SCRIPT, StackMode.KUSTOMIZE)
def _verify_script(config: StackConfig, overlay: OverlaySpec | None) -> str:
    return format_shell_script(
        [
            f"NAMESPACE={shlex.quote(config.namespace)}",
            "",
            'echo "Checking pods..."',
            'kubectl get pods -n "${NAMESPACE}"',
            "",
            'echo "Checking services..."',
            'kubectl get svc -n "${NAMESPACE}"',
            "",
            'echo "Testing Trino connectivity..."',
            f'POD="$({_pod_lookup(QUERY_ENGINE_SERVICE)})"',
            'kubectl exec -n "${NAMESPACE}" "${POD}" -- trino --execute "SELECT 1"',
        ]
    )


@template(ArtifactKind.README, StackMode.KUSTOMIZE)
def _readme(config: StackConfig, overlay: OverlaySpec | None) -> str:
    endpoints = _endpoints(StackMode.KUSTOMIZE)
    ns = config.namespace
    primary = config.primary_overlay()
    overlay_name = primary.name if primary else config.overlays[0].name
    overlays = "\n".join(f"- `{o.name}` -> namespace `{o.namespace}`" for o in config.overlays)
    forwards = [
        ("Trino UI", QUERY_ENGINE_SERVICE, endpoints.query_engine.port),
        ("MinIO UI", OBJECT_STORE_SERVICE, endpoints.object_store_console.port),
        ("Nessie API", CATALOG_SERVICE, endpoints.catalog.port),
    ]
    access = "\n".join(
        f"- {label}: `kubectl port-forward svc/{svc} -n {ns} {port}:{port}`"
        for label, svc, port in forwards
    )
    return (
        "# Trino with Iceberg, Nessie, and MinIO on Kubernetes with Argo CD\n"
        "\n"
        "## Prerequisites\n"
        "- Kubernetes (K3s) cluster\n"
        "- Argo CD installed\n"
        "- kubectl configured\n"
        "\n"
        "## Overlays\n"
        f"{overlays}\n"
        "\n"
        "## Deployment\n"
        "\n"
        "1. Direct deployment:\n"
        "```bash\n"
        f"kubectl apply -k overlays/{overlay_name}\n"
        "```\n"
        "\n"
        "2. Argo CD deployment:\n"
        "```bash\n"
        f"kubectl apply -f overlays/{overlay_name}/argocd-app.yaml\n"
        "```\n"
        "\n"
        "3. Initialize MinIO buckets:\n"
        "```bash\n"
        "./scripts/setup-minio-buckets.sh\n"
        "```\n"
        "\n"
        "## Accessing Services\n"
        "\n"
        f"{access}\n"
        "\n"
        "## Verification\n"
        "```bash\n"
        "./scripts/verify-installation.sh\n"
        "```\n"
    )


# --- Docker Compose ----------------------------------------------------------


def container_name(config: StackConfig, service: str) -> str:
    """Compose container names: <project>-minio, <project>-nessie, <project>-coordinator."""
    suffix = "coordinator" if service == QUERY_ENGINE_SERVICE else service
    return f"{config.project_name}-{suffix}"


def _healthcheck(test: list[str], interval: str, timeout: str, retries: int, **extra: str) -> dict:
    check: dict = {"test": test, "interval": interval, "timeout": timeout, "retries": retries}
    check.update(extra)
    return check


@template(ArtifactKind.COMPOSE_FILE, StackMode.COMPOSE)
def _compose_file(config: StackConfig, overlay: OverlaySpec | None) -> str:
    endpoints = _endpoints(StackMode.COMPOSE)
    api = endpoints.object_store.port
    console_port = endpoints.object_store_console.port
    catalog = endpoints.catalog.port
    query = endpoints.query_engine.port

    services = {
        OBJECT_STORE_SERVICE: {
            "image": config.images.object_store,
            "container_name": container_name(config, OBJECT_STORE_SERVICE),
            "ports": [f"{api}:{api}", f"{console_port}:{console_port}"],
            "environment": _object_store_env(config),
            "command": shlex.join(_object_store_args()),
            "volumes": [f"minio_data:{OBJECT_STORE_DATA_DIR}"],
            "healthcheck": _healthcheck(
                ["CMD", "curl", "-f", f"http://localhost:{api}{OBJECT_STORE_LIVE_PATH}"],
                "30s",
                "20s",
                3,
            ),
        },
        CATALOG_SERVICE: {
            "image": config.images.catalog,
            "container_name": container_name(config, CATALOG_SERVICE),
            "ports": [f"{catalog}:{catalog}"],
            "environment": {"NESSIE_VERSION_STORE_TYPE": "IN_MEMORY"},
            "healthcheck": _healthcheck(
                ["CMD", "curl", "-f", f"http://localhost:{catalog}{CATALOG_HEALTH_PATH}"],
                "30s",
                "10s",
                3,
            ),
        },
        QUERY_ENGINE_SERVICE: {
            "image": config.images.query_engine,
            "container_name": container_name(config, QUERY_ENGINE_SERVICE),
            "ports": [f"{query}:{query}"],
            "volumes": ["./trino/etc:/etc/trino:ro"],
            "depends_on": {
                OBJECT_STORE_SERVICE: {"condition": "service_healthy"},
                CATALOG_SERVICE: {"condition": "service_healthy"},
            },
            "healthcheck": _healthcheck(
                ["CMD-SHELL", QUERY_ENGINE_HEALTH_CHECK],
                "30s",
                "10s",
                5,
                start_period="60s",
            ),
        },
    }
    return format_yaml(
        {
            "version": COMPOSE_FILE_VERSION,
            "services": services,
            "volumes": {"minio_data": None},
        }
    )
