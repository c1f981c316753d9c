# -----------------------------------------------------------------------------
# DOMAIN LAYER
# -----------------------------------------------------------------------------
# Pydantic models for the stack configuration, the generated artifacts and
# the typed Trino configuration records.
# -----------------------------------------------------------------------------

from .models import (
    Artifact,
    ArtifactCategory,
    ArtifactKind,
    CommandResult,
    CredentialSource,
    HealthStatus,
    LayoutPlan,
    LifecycleState,
    MemoryLimits,
    Outcome,
    OverlaySpec,
    ServiceEndpoints,
    StackConfig,
    StackMode,
)

__all__ = [
    "Artifact", "ArtifactCategory", "ArtifactKind",
    "CommandResult", "CredentialSource", "HealthStatus",
    "LayoutPlan", "LifecycleState", "MemoryLimits", "Outcome",
    "OverlaySpec", "ServiceEndpoints", "StackConfig", "StackMode",
]
