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
# DOMAIN MODELS - STACK CONFIGURATION & ARTIFACTS
# -----------------------------------------------------------------------------
# These Pydantic models describe the data-lake stack (MinIO object store,
# Nessie catalog, Trino query engine) and the files generated for it.
#
# StackConfig drives generation. The Template Catalog turns it into Artifacts,
# the Layout Planner groups them into a LayoutPlan, and the Materializer
# writes the plan to disk.
# -----------------------------------------------------------------------------

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# Service names shared by Compose service keys, Kubernetes Services and
# every URI that points at them.
OBJECT_STORE_SERVICE = "minio"
CATALOG_SERVICE = "nessie"
QUERY_ENGINE_SERVICE = "trino"

OBJECT_STORE_API_PORT = 9000
OBJECT_STORE_CONSOLE_PORT = 9001
CATALOG_PORT = 19120
QUERY_ENGINE_PORT = 8080

CATALOG_API_PATH = "/api/v1"

# Readiness contracts of the three services
OBJECT_STORE_LIVE_PATH = "/minio/health/live"
OBJECT_STORE_READY_PATH = "/minio/health/ready"
CATALOG_HEALTH_PATH = "/api/v1/config"
QUERY_ENGINE_HEALTH_CHECK = "/usr/lib/trino/bin/health-check"

DEFAULT_WORK_DIRS = {
    "compose": "trino",
    "kustomize": "trino-k8s-argocd",
}


class StackMode(str, Enum):
    """Target layout: a flat Compose tree or a Kustomize base+overlay tree."""

    COMPOSE = "compose"
    KUSTOMIZE = "kustomize"


class CredentialSource(BaseModel):
    """
    The single source of object-store credentials.

    Every template that needs an access key, secret key or region reads it
    from here, so rotating credentials touches one place.
    """

    access_key: str = Field("minioadmin", min_length=1)
    secret_key: str = Field("minioadmin", min_length=1)
    region: str = Field("us-east-1", min_length=1)


class MemoryLimits(BaseModel):
    """JVM heap, per-query memory caps and the object-store volume size."""

    coordinator_heap: str = Field("2G", pattern=r"^\d+[KMG]$")
    query_max_memory: str = Field("1GB", pattern=r"^\d+(B|kB|MB|GB|TB)$")
    query_max_memory_per_node: str = Field("512MB", pattern=r"^\d+(B|kB|MB|GB|TB)$")
    object_store_volume_size: str = Field("10Gi", pattern=r"^\d+(Ki|Mi|Gi|Ti)$")


class ImageSet(BaseModel):
    """Container images for the three services."""

    object_store: str = "minio/minio:latest"
    catalog: str = "projectnessie/nessie:latest"
    query_engine: str = "trinodb/trino:latest"

    def all(self) -> list[str]:
        return [self.object_store, self.catalog, self.query_engine]


class OverlaySpec(BaseModel):
    """A named Kustomize overlay and the namespace it deploys into."""

    name: str
    namespace: str


class GitOpsSource(BaseModel):
    """Where Argo CD pulls the generated tree from and where it deploys it."""

    repo_url: str = "https://github.com/your-repo/trino-k8s-argocd.git"
    target_revision: str = "HEAD"
    project: str = "default"
    destination_server: str = "https://kubernetes.default.svc"


class ServiceEndpoint(BaseModel):
    """A host:port (plus optional path) reachable from inside the stack."""

    model_config = ConfigDict(frozen=True)

    host: str
    port: int
    path: str = ""

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}{self.path}"


class ServiceEndpoints(BaseModel):
    """
    In-stack endpoints of the object store, catalog and query engine.

    Under Kubernetes the hosts are Service DNS names, resolved inside the
    overlay's namespace. Under Compose they are the service names on the
    project network. Both the connector config and the service definitions
    are generated from these values.
    """

    model_config = ConfigDict(frozen=True)

    mode: StackMode
    object_store: ServiceEndpoint
    object_store_console: ServiceEndpoint
    catalog: ServiceEndpoint
    query_engine: ServiceEndpoint

    @classmethod
    def for_mode(cls, mode: StackMode) -> "ServiceEndpoints":
        mode = StackMode(mode)
        return cls(
            mode=mode,
            object_store=ServiceEndpoint(host=OBJECT_STORE_SERVICE, port=OBJECT_STORE_API_PORT),
            object_store_console=ServiceEndpoint(
                host=OBJECT_STORE_SERVICE, port=OBJECT_STORE_CONSOLE_PORT
            ),
            catalog=ServiceEndpoint(host=CATALOG_SERVICE, port=CATALOG_PORT, path=CATALOG_API_PATH),
            query_engine=ServiceEndpoint(host=QUERY_ENGINE_SERVICE, port=QUERY_ENGINE_PORT),
        )


def _default_overlays() -> list[OverlaySpec]:
    return [
        OverlaySpec(name="production", namespace="trino-production"),
        OverlaySpec(name="development", namespace="trino-development"),
    ]


class StackConfig(BaseModel):
    """
    The single configuration object driving generation and startup.

    Fields:
    - mode: compose or kustomize
    - namespace: primary namespace (required for kustomize, must match an overlay)
    - credentials / memory / images: values substituted into templates
    - overlays / gitops: Kustomize overlays and their Argo CD source
    - warehouse_bucket: bucket created in the object store after startup
    - project_name / work_dir / host: Compose project, output dir, published host
    - settle_seconds ... warmup_grace_seconds: startup timing
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    mode: StackMode = StackMode.COMPOSE
    namespace: str | None = None
    credentials: CredentialSource = Field(default_factory=CredentialSource)
    memory: MemoryLimits = Field(default_factory=MemoryLimits)
    images: ImageSet = Field(default_factory=ImageSet)
    overlays: list[OverlaySpec] = Field(default_factory=_default_overlays)
    gitops: GitOpsSource = Field(default_factory=GitOpsSource)
    warehouse_bucket: str = Field("warehouse", pattern=r"^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$")
    project_name: str = Field("trino", pattern=r"^[a-z0-9][a-z0-9_-]*$")
    work_dir: str | None = None
    host: str = "localhost"
    settle_seconds: float = Field(5.0, ge=0)
    health_timeout_seconds: float = Field(120.0, gt=0)
    health_interval_seconds: float = Field(5.0, gt=0)
    warmup_grace_seconds: float = Field(30.0, ge=0)

    @property
    def service_endpoints(self) -> ServiceEndpoints:
        return ServiceEndpoints.for_mode(self.mode)

    @property
    def resolved_work_dir(self) -> Path:
        return Path(self.work_dir or DEFAULT_WORK_DIRS[StackMode(self.mode).value])

    def primary_overlay(self) -> OverlaySpec | None:
        """The overlay whose namespace is the configured primary namespace."""
        for overlay in self.overlays:
            if overlay.namespace == self.namespace:
                return overlay
        return None


class ArtifactCategory(str, Enum):
    """What sort of file an Artifact is."""

    MANIFEST = "manifest"
    COMPOSE_SERVICE = "compose-service"
    PROPERTIES_FILE = "properties-file"
    SCRIPT = "script"
    DOCUMENT = "document"


class ArtifactKind(str, Enum):
    """One value per template in the Template Catalog."""

    MINIO_DEPLOYMENT = "minio-deployment"
    MINIO_SERVICE = "minio-service"
    MINIO_VOLUME_CLAIM = "minio-volume-claim"
    NESSIE_DEPLOYMENT = "nessie-deployment"
    NESSIE_SERVICE = "nessie-service"
    TRINO_JVM_CONFIG = "trino-jvm-config"
    TRINO_SERVER_CONFIG = "trino-server-config"
    TRINO_NODE_CONFIG = "trino-node-config"
    TRINO_LOG_CONFIG = "trino-log-config"
    TRINO_CATALOG_CONFIG = "trino-catalog-config"
    TRINO_DEPLOYMENT = "trino-deployment"
    TRINO_SERVICE = "trino-service"
    COMPOSE_FILE = "compose-file"
    KUSTOMIZE_BASE = "kustomize-base"
    KUSTOMIZE_OVERLAY = "kustomize-overlay"
    ARGOCD_APPLICATION = "argocd-application"
    BUCKET_SETUP_SCRIPT = "bucket-setup-script"
    VERIFY_SCRIPT = "verify-script"
    README = "readme"


class Artifact(BaseModel):
    """A generated file: where it goes, what it contains, what it is."""

    model_config = ConfigDict(frozen=True)

    relative_path: str = Field(..., min_length=1)
    content: str
    kind: ArtifactCategory
    template: ArtifactKind


class LayoutPlan(BaseModel):
    """
    Ordered Artifacts plus the directories that must exist before writing.

    Order only matters for readable logs; no artifact depends on another
    beyond its parent directory.
    """

    model_config = ConfigDict(frozen=True)

    mode: StackMode
    artifacts: tuple[Artifact, ...]
    directories: tuple[str, ...]

    def paths(self) -> list[str]:
        return [artifact.relative_path for artifact in self.artifacts]

    def get(self, relative_path: str) -> Artifact:
        for artifact in self.artifacts:
            if artifact.relative_path == relative_path:
                return artifact
        raise KeyError(relative_path)


class LifecycleState(str, Enum):
    """States of one Compose environment run. Never persisted."""

    ABSENT = "absent"
    CLEANING = "cleaning"
    MATERIALIZING = "materializing"
    STARTING = "starting"
    VERIFYING = "verifying"
    READY = "ready"
    FAILED = "failed"


class Outcome(str, Enum):
    """How the result of an external command is treated."""

    OK = "ok"
    EXPECTED_ABSENT = "expected_absent"
    ADVISORY = "advisory"
    FATAL = "fatal"


class CommandResult(BaseModel):
    """Typed result of one external CLI invocation."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    output: str = ""
    exit_code: int

    @classmethod
    def from_exit(cls, exit_code: int, output: str = "") -> "CommandResult":
        return cls(ok=exit_code == 0, output=output, exit_code=exit_code)

    def tail(self, lines: int = 50) -> str:
        return "\n".join(self.output.splitlines()[-lines:])


class HealthStatus(BaseModel):
    """Healthy, or Unhealthy with a detail string."""

    service: str
    healthy: bool
    detail: str = ""

    @classmethod
    def ok(cls, service: str, detail: str = "") -> "HealthStatus":
        return cls(service=service, healthy=True, detail=detail)

    @classmethod
    def failed(cls, service: str, detail: str) -> "HealthStatus":
        return cls(service=service, healthy=False, detail=detail)
