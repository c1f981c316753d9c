# -----------------------------------------------------------------------------
# CORE LAYER
# -----------------------------------------------------------------------------
# The generation and orchestration logic:
# - Templates: (kind, mode) -> file body
# - Planner: mode -> LayoutPlan
# - Materializer: LayoutPlan -> files on disk
# - Lifecycle / Health: run and verify a Compose stack
# - Cluster: apply and check a Kubernetes deployment
# -----------------------------------------------------------------------------

from .health import HealthVerifier, verify
from .lifecycle import EnvironmentController, LifecycleReport, StackStartError
from .materializer import (
    ArtifactWriteFailed,
    MaterializeResult,
    StructureCreationFailed,
    WorkspaceLocked,
    materialize,
)
from .planner import InvalidIdentifier, LayoutConflict, UndeclaredNamespace, plan
from .settings import ConfigError, load_config
from .templates import MissingRequiredField, UnknownArtifactKind, render

__all__ = [
    "ArtifactWriteFailed", "ConfigError", "EnvironmentController",
    "HealthVerifier", "InvalidIdentifier", "LayoutConflict",
    "LifecycleReport", "MaterializeResult", "MissingRequiredField",
    "StackStartError", "StructureCreationFailed", "UndeclaredNamespace",
    "UnknownArtifactKind", "WorkspaceLocked", "load_config", "materialize", "plan", "render", "verify",
]
