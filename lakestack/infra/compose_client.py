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
# COMPOSE INFRASTRUCTURE - Docker Compose CLI
# -----------------------------------------------------------------------------
# Responsibility: Run Docker Compose commands for one project and return a
# typed CommandResult. Callers classify results; nothing here suppresses a
# failure.
#
# Uses `docker-compose` when installed, otherwise the `docker compose` plugin.
# -----------------------------------------------------------------------------

import shutil
import subprocess
import tempfile
from pathlib import Path

from rich.console import Console

from lakestack.domain.models import CommandResult

console = Console()

COMPOSE_FILE = "docker-compose.yml"
DEFAULT_TIMEOUT_SECONDS = 300
TIMEOUT_EXIT_CODE = 124


class ComposeCommandError(Exception):
    """Raised when no Compose binary can be found or executed."""

    pass


def detect_compose_command() -> list[str]:
    """
    Find the Compose CLI.

    Returns:
        ["docker-compose"] or ["docker", "compose"].

    Raises:
        ComposeCommandError: If neither is on PATH.
    """
    if shutil.which("docker-compose"):
        return ["docker-compose"]
    if shutil.which("docker"):
        return ["docker", "compose"]
    raise ComposeCommandError("Neither 'docker-compose' nor 'docker' found on PATH")


class ComposeProvider:
    """
    Compose operations for one project directory.

    Every call is pinned to the project name, so teardown works even when the
    compose file from a previous run is already gone.
    """

    def __init__(
        self,
        work_dir: Path | str,
        project_name: str,
        command: list[str] | None = None,
    ) -> None:
        """
        Args:
            work_dir: Directory holding docker-compose.yml.
            project_name: Compose project name (-p).
            command: Compose CLI prefix; detected when omitted.
        """
        self._work_dir = Path(work_dir).absolute()
        self._project = project_name
        self._command = command or detect_compose_command()

    @property
    def compose_file(self) -> Path:
        return self._work_dir / COMPOSE_FILE

    def _base_args(self) -> list[str]:
        args = [*self._command, "-p", self._project]
        if self.compose_file.is_file():
            args += ["-f", str(self.compose_file)]
        return args

    def _run(self, args: list[str], timeout: int = DEFAULT_TIMEOUT_SECONDS) -> CommandResult:
        """
        Run one compose sub-command.

        Args:
            args: Sub-command and its arguments (e.g. ["up", "-d"]).
            timeout: Seconds before the command is abandoned.

        Returns:
            CommandResult with stdout and stderr combined.

        Raises:
            ComposeCommandError: If the compose binary cannot be executed.
        """
        cmd = self._base_args() + args
        if self._work_dir.is_dir():
            return self._execute(cmd, self._work_dir, timeout)

        # No project directory yet: an empty cwd keeps stray compose files out
        with tempfile.TemporaryDirectory(prefix="lakestack-") as neutral:
            return self._execute(cmd, Path(neutral), timeout)

    def _execute(self, cmd: list[str], cwd: Path, timeout: int) -> CommandResult:
        try:
            completed = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            console.print(f"[red][COMPOSE] Timed out after {timeout}s: {' '.join(cmd)}[/red]")
            return CommandResult.from_exit(TIMEOUT_EXIT_CODE, f"timed out after {timeout}s")
        except OSError as e:
            raise ComposeCommandError(f"Cannot execute {self._command[0]}: {e}")

        output = (completed.stdout or "") + (completed.stderr or "")
        return CommandResult.from_exit(completed.returncode, output)

    def down(self) -> CommandResult:
        """Stop and remove containers, networks, named volumes and orphans."""
        return self._run(["down", "-v", "--remove-orphans"])

    def up(self) -> CommandResult:
        """Bring the stack up in the background."""
        return self._run(["up", "-d"])

    def ps(self) -> CommandResult:
        return self._run(["ps"], timeout=60)

    def logs(self, service: str | None = None, tail: int | None = None) -> CommandResult:
        args = ["logs", "--no-color"]
        if tail is not None:
            args += ["--tail", str(tail)]
        if service:
            args.append(service)
        return self._run(args, timeout=60)

    def exec(self, service: str, command: list[str], timeout: int = 60) -> CommandResult:
        """Run a one-off command inside a running service container (no TTY)."""
        return self._run(["exec", "-T", service, *command], timeout=timeout)
