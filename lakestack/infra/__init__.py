# -----------------------------------------------------------------------------
# INFRASTRUCTURE LAYER
# -----------------------------------------------------------------------------
# Contains low-level infrastructure wrappers:
# - ComposeProvider: Docker Compose CLI for one project
# - DockerProvider: Docker SDK sweep of leftover containers and volumes
# - KubectlProvider: kubectl apply / get / exec
# -----------------------------------------------------------------------------

from .compose_client import ComposeCommandError, ComposeProvider
from .docker_client import DockerProvider, DockerProviderError
from .kubectl_client import KubectlError, KubectlProvider

__all__ = [
    "ComposeCommandError", "ComposeProvider",
    "DockerProvider", "DockerProviderError",
    "KubectlError", "KubectlProvider",
]
