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
# CLUSTER HELPERS - KUBERNETES PATH
# -----------------------------------------------------------------------------
# Responsibility: The in-process equivalents of the generated helper scripts,
# plus applying a generated tree to a cluster.
#
# - apply_stack():         kubectl apply -k overlays/<primary>  (or the Argo CD app)
# - setup_buckets():       mc alias + mc mb inside the MinIO pod
# - verify_installation(): pods, services, then SELECT 1 inside the Trino pod
# -----------------------------------------------------------------------------

from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from lakestack.core.health import TRIAL_QUERY
from lakestack.core.planner import UndeclaredNamespace
from lakestack.core.templates import MC_ALIAS, MissingRequiredField
from lakestack.domain.models import (
    DEFAULT_WORK_DIRS,
    OBJECT_STORE_SERVICE,
    QUERY_ENGINE_SERVICE,
    CommandResult,
    OverlaySpec,
    ServiceEndpoints,
    StackConfig,
    StackMode,
)
from lakestack.infra.kubectl_client import KubectlProvider

console = Console()

ARGOCD_APP_FILE = "argocd-app.yaml"


@dataclass
class ClusterCheck:
    """Result of verify_installation(): one CommandResult per step."""

    namespace: str
    steps: dict[str, CommandResult] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return bool(self.steps) and all(result.ok for result in self.steps.values())

    def failed_steps(self) -> list[str]:
        return [name for name, result in self.steps.items() if not result.ok]


def _namespace(config: StackConfig) -> str:
    if not config.namespace:
        raise MissingRequiredField("namespace")
    return config.namespace


def _primary_overlay(config: StackConfig) -> OverlaySpec:
    overlay = config.primary_overlay()
    if overlay is None:
        raise UndeclaredNamespace(config.namespace or "")
    return overlay


def apply_stack(
    config: StackConfig,
    root: Path | str | None = None,
    via_argocd: bool = False,
    kubectl: KubectlProvider | None = None,
) -> CommandResult:
    """
    Apply the primary overlay of a generated Kustomize tree.

    Args:
        config: Selects the primary overlay through its namespace.
        root: Generated tree (defaults to the configured work dir).
        via_argocd: Apply the overlay's Argo CD Application instead of the
            Kustomize build, letting Argo CD sync the cluster.
        kubectl: Injected provider (tests).

    Raises:
        MissingRequiredField / UndeclaredNamespace: No usable namespace.
        FileNotFoundError: The tree has not been generated.
    """
    _namespace(config)
    overlay = _primary_overlay(config)
    if root is None:
        root = config.work_dir or DEFAULT_WORK_DIRS[StackMode.KUSTOMIZE.value]
    root = Path(root)
    overlay_dir = root / "overlays" / overlay.name

    target = overlay_dir / ARGOCD_APP_FILE if via_argocd else overlay_dir
    if not target.exists():
        raise FileNotFoundError(f"{target} does not exist; generate the Kustomize tree first")

    kubectl = kubectl or KubectlProvider()
    if via_argocd:
        console.print(f"[cyan][CLUSTER] Applying Argo CD Application {target}[/cyan]")
        result = kubectl.apply_file(target)
    else:
        console.print(f"[cyan][CLUSTER] Applying overlay {overlay_dir}[/cyan]")
        result = kubectl.apply_kustomize(overlay_dir)

    if result.ok:
        console.print(f"[green][CLUSTER] Applied {overlay.name} -> {overlay.namespace}[/green]")
    else:
        console.print(f"[red][CLUSTER] Apply failed (exit {result.exit_code})[/red]")
        console.print(f"[dim]{result.tail(20)}[/dim]")
    return result


def setup_buckets(config: StackConfig, kubectl: KubectlProvider | None = None) -> CommandResult:
    """Create the warehouse bucket inside the MinIO pod of config.namespace."""
    namespace = _namespace(config)
    kubectl = kubectl or KubectlProvider()
    creds = config.credentials
    store = ServiceEndpoints.for_mode(StackMode.KUSTOMIZE).object_store

    console.print(f"[cyan][CLUSTER] Configuring MinIO in {namespace}...[/cyan]")
    alias = kubectl.exec_in_pod(
        OBJECT_STORE_SERVICE,
        namespace,
        ["mc", "alias", "set", MC_ALIAS, store.url, creds.access_key, creds.secret_key],
    )
    if not alias.ok:
        console.print(f"[red][CLUSTER] mc alias failed: {alias.tail(3)}[/red]")
        return alias

    bucket = f"{MC_ALIAS}/{config.warehouse_bucket}"
    result = kubectl.exec_in_pod(
        OBJECT_STORE_SERVICE, namespace, ["mc", "mb", "--ignore-existing", bucket]
    )
    if result.ok:
        console.print(f"[green][CLUSTER] Bucket ready: {config.warehouse_bucket}[/green]")
    else:
        console.print(f"[red][CLUSTER] Bucket creation failed: {result.tail(3)}[/red]")
    return result


def verify_installation(
    config: StackConfig, kubectl: KubectlProvider | None = None
) -> ClusterCheck:
    """List pods and services, then run a trial query in the Trino pod."""
    namespace = _namespace(config)
    kubectl = kubectl or KubectlProvider()
    check = ClusterCheck(namespace=namespace)

    console.print(f"[cyan][CLUSTER] Checking pods in {namespace}...[/cyan]")
    check.steps["pods"] = kubectl.get_pods(namespace)
    console.print(f"[dim]{check.steps['pods'].output}[/dim]")

    console.print(f"[cyan][CLUSTER] Checking services in {namespace}...[/cyan]")
    check.steps["services"] = kubectl.get_services(namespace)
    console.print(f"[dim]{check.steps['services'].output}[/dim]")

    console.print("[cyan][CLUSTER] Testing Trino connectivity...[/cyan]")
    check.steps["query"] = kubectl.exec_in_pod(
        QUERY_ENGINE_SERVICE, namespace, ["trino", "--execute", TRIAL_QUERY]
    )

    if check.ok:
        console.print("[green][CLUSTER] Installation verified[/green]")
    else:
        console.print(f"[yellow][CLUSTER] Failed checks: {', '.join(check.failed_steps())}[/yellow]")
    return check
