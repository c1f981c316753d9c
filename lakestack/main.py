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
# LAKESTACK ENTRY POINTS
# -----------------------------------------------------------------------------
# Responsibility: Flagless commands wiring settings -> core -> report.
#
# Commands (console scripts):
# - lakestack-compose:       clean, generate, start and verify a local stack
# - lakestack-kustomize:     generate the Kustomize + Argo CD tree
# - lakestack-k8s-apply:     kubectl apply the primary overlay
# - lakestack-setup-buckets: create the warehouse bucket in the cluster
# - lakestack-verify:        check pods, services and a trial query
#
# Every command returns 0 on success and 1 on a fatal error.
# -----------------------------------------------------------------------------

import os
import sys

from rich.console import Console
from rich.panel import Panel

from lakestack import __version__
from lakestack.core.cluster import apply_stack, setup_buckets, verify_installation
from lakestack.core.lifecycle import FATAL_ERRORS, EnvironmentController
from lakestack.core.materializer import materialize
from lakestack.core.planner import plan
from lakestack.core.settings import ConfigError, load_config
from lakestack.domain.models import StackMode
from lakestack.infra.kubectl_client import KubectlError

console = Console()

SYSTEM_NAME = "LAKESTACK"

HALT_ERRORS = (*FATAL_ERRORS, ConfigError, KubectlError, FileNotFoundError)


def halt(error: Exception) -> int:
    """Print the SYSTEM HALT panel for a fatal error and return the exit code."""
    console.print(
        Panel(
            f"[bold red]{type(error).__name__}[/bold red]\n\n{error}",
            title="SYSTEM HALT",
            border_style="red",
        )
    )
    return 1


def print_banner(command: str) -> None:
    console.rule(f"[bold cyan]{SYSTEM_NAME} v{__version__}: {command}[/bold cyan]")


def compose_main() -> int:
    """Full Compose lifecycle: clean -> generate -> start -> verify."""
    print_banner("compose")
    try:
        config = load_config(StackMode.COMPOSE)
    except ConfigError as e:
        return halt(e)

    report = EnvironmentController(config).run()
    console.print(report.render())
    return report.exit_code


def kustomize_main() -> int:
    """Generate the Kustomize base, overlays, Argo CD apps and helper scripts."""
    print_banner("kustomize")
    try:
        config = load_config(StackMode.KUSTOMIZE)
        layout = plan(StackMode.KUSTOMIZE, config)
        result = materialize(layout, config.resolved_work_dir)
    except HALT_ERRORS as e:
        return halt(e)

    overlay = config.primary_overlay()
    root = result.root
    console.print(
        Panel(
            f"[bold green]Generated {len(result.written)} files in {root}[/bold green]\n\n"
            f"Direct deploy:  kubectl apply -k {root}/overlays/{overlay.name}\n"
            f"Argo CD deploy: kubectl apply -f {root}/overlays/{overlay.name}/argocd-app.yaml\n"
            f"Then:           {root}/scripts/setup-minio-buckets.sh",
            title="GITOPS TREE READY",
            border_style="green",
        )
    )
    return 0


def k8s_apply_main() -> int:
    """Apply the primary overlay; LAKESTACK_VIA_ARGOCD=1 applies the Argo CD app instead."""
    print_banner("k8s-apply")
    via_argocd = os.getenv("LAKESTACK_VIA_ARGOCD", "").lower() in ("1", "true", "yes")
    try:
        config = load_config(StackMode.KUSTOMIZE)
        result = apply_stack(config, via_argocd=via_argocd)
    except HALT_ERRORS as e:
        return halt(e)
    return 0 if result.ok else 1


def setup_buckets_main() -> int:
    """Create the warehouse bucket inside the cluster's MinIO pod."""
    print_banner("setup-buckets")
    try:
        config = load_config(StackMode.KUSTOMIZE)
        result = setup_buckets(config)
    except HALT_ERRORS as e:
        return halt(e)
    return 0 if result.ok else 1


def verify_main() -> int:
    """Check pods, services and a trial query in the cluster."""
    print_banner("verify")
    try:
        config = load_config(StackMode.KUSTOMIZE)
        check = verify_installation(config)
    except HALT_ERRORS as e:
        return halt(e)
    return 0 if check.ok else 1


if __name__ == "__main__":
    sys.exit(compose_main())
