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
# KUBECTL INFRASTRUCTURE - Cluster CLI
# -----------------------------------------------------------------------------
# Responsibility: The handful of kubectl calls the Kubernetes path needs:
# apply a Kustomize overlay or an Argo CD Application, list pods/services,
# and exec into the first pod matching a label.
# -----------------------------------------------------------------------------

import shutil
import subprocess
from pathlib import Path

from rich.console import Console

from lakestack.domain.models import CommandResult

console = Console()

KUBECTL_TIMEOUT_SECONDS = 120
POD_NAME_JSONPATH = "{.items[0].metadata.name}"


class KubectlError(Exception):
    """Raised when kubectl cannot be found or executed."""

    pass


class KubectlProvider:
    """Thin kubectl wrapper returning CommandResults."""

    def __init__(self, command: str = "kubectl", context: str | None = None) -> None:
        """
        Args:
            command: kubectl binary name or path.
            context: kube context to pin every call to (optional).

        Raises:
            KubectlError: If the binary is not on PATH.
        """
        if shutil.which(command) is None:
            raise KubectlError(f"'{command}' not found on PATH")
        self._command = command
        self._context = context

    def _run(self, args: list[str], timeout: int = KUBECTL_TIMEOUT_SECONDS) -> CommandResult:
        cmd = [self._command]
        if self._context:
            cmd += ["--context", self._context]
        cmd += args

        try:
            completed = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
        except subprocess.TimeoutExpired:
            console.print(f"[red][KUBECTL] Timed out after {timeout}s: {' '.join(args)}[/red]")
            return CommandResult.from_exit(124, f"timed out after {timeout}s")
        except OSError as e:
            raise KubectlError(f"Cannot execute {self._command}: {e}")

        return CommandResult.from_exit(
            completed.returncode, (completed.stdout or "") + (completed.stderr or "")
        )

    def apply_kustomize(self, path: Path | str) -> CommandResult:
        return self._run(["apply", "-k", str(path)])

    def apply_file(self, path: Path | str) -> CommandResult:
        return self._run(["apply", "-f", str(path)])

    def get_pods(self, namespace: str) -> CommandResult:
        return self._run(["get", "pods", "-n", namespace])

    def get_services(self, namespace: str) -> CommandResult:
        return self._run(["get", "svc", "-n", namespace])

    def first_pod(self, label: str, namespace: str) -> str | None:
        """Name of the first pod with app=<label>, or None if there is none."""
        result = self._run(
            ["get", "pods", "-n", namespace, "-l", f"app={label}", "-o", f"jsonpath={POD_NAME_JSONPATH}"]
        )
        name = result.output.strip()
        if not result.ok or not name:
            return None
        return name

    def exec_in_pod(self, label: str, namespace: str, command: list[str]) -> CommandResult:
        """Run `command` in the first pod labelled app=<label>."""
        pod = self.first_pod(label, namespace)
        if pod is None:
            return CommandResult.from_exit(1, f"No pod with label app={label} in {namespace}")
        return self._run(["exec", "-n", namespace, pod, "--", *command])
