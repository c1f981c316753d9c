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
# THE LAYOUT PLANNER
# -----------------------------------------------------------------------------
# Responsibility: Decide which files a mode produces and where they go.
# plan() has no side effects; it returns a LayoutPlan for the Materializer.
#
# compose:   docker-compose.yml + trino/etc/{*.properties, jvm.config, catalog/}
# kustomize: base/ (one subtree per service) + overlays/<name>/ + scripts/ + README
# -----------------------------------------------------------------------------

import re
from pathlib import PurePosixPath

from rich.console import Console

from lakestack.core.templates import (
    BASE_RESOURCES,
    MissingRequiredField,
    category_for,
    render,
)
from lakestack.domain.models import (
    Artifact,
    ArtifactKind,
    LayoutPlan,
    OverlaySpec,
    StackConfig,
    StackMode,
)

console = Console()

# RFC 1123 label: what Kubernetes accepts for namespaces
IDENTIFIER_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
IDENTIFIER_MAX_LENGTH = 63

COMPOSE_LAYOUT: tuple[tuple[str, ArtifactKind], ...] = (
    ("docker-compose.yml", ArtifactKind.COMPOSE_FILE),
    ("trino/etc/jvm.config", ArtifactKind.TRINO_JVM_CONFIG),
    ("trino/etc/config.properties", ArtifactKind.TRINO_SERVER_CONFIG),
    ("trino/etc/node.properties", ArtifactKind.TRINO_NODE_CONFIG),
    ("trino/etc/log.properties", ArtifactKind.TRINO_LOG_CONFIG),
    ("trino/etc/catalog/iceberg.properties", ArtifactKind.TRINO_CATALOG_CONFIG),
)

KUSTOMIZE_SCRIPTS: tuple[tuple[str, ArtifactKind], ...] = (
    ("scripts/setup-minio-buckets.sh", ArtifactKind.BUCKET_SETUP_SCRIPT),
    ("scripts/verify-installation.sh", ArtifactKind.VERIFY_SCRIPT),
)


class InvalidIdentifier(Exception):
    """Raised when an overlay name or namespace is not a valid DNS-1123 label."""

    def __init__(self, message: str, value: str) -> None:
        super().__init__(message)
        self.value = value


class UndeclaredNamespace(Exception):
    """Raised when the primary namespace is not declared by any overlay."""

    def __init__(self, namespace: str) -> None:
        super().__init__(f"Namespace '{namespace}' is not declared by any overlay")
        self.namespace = namespace


class LayoutConflict(Exception):
    """Raised when two artifacts in one plan resolve to the same path."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Two artifacts share the path '{path}'")
        self.path = path


def validate_identifier(value: str, what: str) -> str:
    """
    Check a namespace or overlay name against the DNS-1123 label rules.

    Raises:
        InvalidIdentifier: If the value is empty, too long, or malformed.
    """
    if not value or len(value) > IDENTIFIER_MAX_LENGTH or not IDENTIFIER_PATTERN.match(value):
        raise InvalidIdentifier(
            f"Invalid {what} '{value}': must be lowercase alphanumerics or '-', "
            f"start and end alphanumeric, at most {IDENTIFIER_MAX_LENGTH} characters",
            value=value,
        )
    return value


def _normalize(path: str) -> str:
    pure = PurePosixPath(path)
    if pure.is_absolute() or ".." in pure.parts:
        raise InvalidIdentifier(f"Artifact path escapes the output root: '{path}'", value=path)
    return pure.as_posix()


def _artifact(
    relative_path: str,
    kind: ArtifactKind,
    mode: StackMode,
    config: StackConfig,
    overlay: OverlaySpec | None = None,
) -> Artifact:
    return Artifact(
        relative_path=_normalize(relative_path),
        content=render(kind, mode, config, overlay),
        kind=category_for(kind, mode),
        template=kind,
    )


def _directories(artifacts: list[Artifact]) -> tuple[str, ...]:
    """Every ancestor directory of every artifact, parents first."""
    found: set[str] = set()
    for artifact in artifacts:
        for parent in PurePosixPath(artifact.relative_path).parents:
            if parent.as_posix() != ".":
                found.add(parent.as_posix())
    return tuple(sorted(found, key=lambda p: (p.count("/"), p)))


def _compose_artifacts(config: StackConfig) -> list[Artifact]:
    return [_artifact(path, kind, StackMode.COMPOSE, config) for path, kind in COMPOSE_LAYOUT]


def _check_overlays(config: StackConfig) -> None:
    if not config.namespace:
        raise MissingRequiredField("namespace")
    validate_identifier(config.namespace, "namespace")

    seen: set[str] = set()
    for overlay in config.overlays:
        validate_identifier(overlay.name, "overlay name")
        validate_identifier(overlay.namespace, "overlay namespace")
        if overlay.name in seen:
            raise LayoutConflict(f"overlays/{overlay.name}")
        seen.add(overlay.name)

    if config.primary_overlay() is None:
        raise UndeclaredNamespace(config.namespace)


def _kustomize_artifacts(config: StackConfig) -> list[Artifact]:
    _check_overlays(config)
    mode = StackMode.KUSTOMIZE

    artifacts = [_artifact("base/kustomization.yaml", ArtifactKind.KUSTOMIZE_BASE, mode, config)]
    artifacts += [_artifact(f"base/{path}", kind, mode, config) for path, kind in BASE_RESOURCES]

    for overlay in config.overlays:
        root = f"overlays/{overlay.name}"
        artifacts.append(
            _artifact(f"{root}/kustomization.yaml", ArtifactKind.KUSTOMIZE_OVERLAY, mode, config, overlay)
        )
        artifacts.append(
            _artifact(f"{root}/argocd-app.yaml", ArtifactKind.ARGOCD_APPLICATION, mode, config, overlay)
        )

    artifacts += [_artifact(path, kind, mode, config) for path, kind in KUSTOMIZE_SCRIPTS]
    artifacts.append(_artifact("README.md", ArtifactKind.README, mode, config))
    return artifacts


def plan(mode: StackMode, config: StackConfig) -> LayoutPlan:
    """
    Compute the file layout for a mode.

    Args:
        mode: compose or kustomize.
        config: The stack configuration rendered into each artifact.

    Returns:
        LayoutPlan with artifacts in a readable order and the directories
        they need.

    Raises:
        InvalidIdentifier: Bad overlay name or namespace.
        UndeclaredNamespace: No overlay declares the primary namespace.
        LayoutConflict: Two artifacts on one path.
        MissingRequiredField / UnknownArtifactKind: From the Template Catalog.
    """
    mode = StackMode(mode)
    if mode == StackMode.COMPOSE:
        artifacts = _compose_artifacts(config)
    else:
        artifacts = _kustomize_artifacts(config)

    seen: set[str] = set()
    for artifact in artifacts:
        if artifact.relative_path in seen:
            raise LayoutConflict(artifact.relative_path)
        seen.add(artifact.relative_path)

    layout = LayoutPlan(mode=mode, artifacts=tuple(artifacts), directories=_directories(artifacts))
    console.print(
        f"[cyan][PLANNER] {mode.value}: {len(layout.artifacts)} artifacts "
        f"in {len(layout.directories)} directories[/cyan]"
    )
    return layout
