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
# THE LIFECYCLE CONTROLLER - COMPOSE ENVIRONMENT
# -----------------------------------------------------------------------------
# Responsibility: Bring a Compose data-lake stack from nothing to ready.
#
#   absent -> cleaning -> materializing -> starting -> verifying -> ready
#                                                                \-> failed
#
# Error taxonomy for every external call:
# - expected-absent (nothing to tear down)  -> success
# - advisory (bucket setup, slow health)    -> warning, keep going
# - fatal (write failure, `up` failure)     -> stop, report, exit non-zero
# -----------------------------------------------------------------------------

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from lakestack.core.health import HealthVerifier
from lakestack.core.materializer import (
    ArtifactWriteFailed,
    MaterializeResult,
    StructureCreationFailed,
    WorkspaceLocked,
    materialize,
    remove_work_dir,
)
from lakestack.core.planner import InvalidIdentifier, LayoutConflict, UndeclaredNamespace, plan
from lakestack.core.templates import (
    MC_ALIAS,
    OBJECT_STORE_DATA_DIR,
    MissingRequiredField,
    UnknownArtifactKind,
    container_name,
)
from lakestack.domain.models import (
    CATALOG_SERVICE,
    OBJECT_STORE_SERVICE,
    QUERY_ENGINE_SERVICE,
    CommandResult,
    HealthStatus,
    LifecycleState,
    Outcome,
    StackConfig,
    StackMode,
)
from lakestack.infra.compose_client import COMPOSE_FILE, ComposeCommandError, ComposeProvider
from lakestack.infra.docker_client import DockerProvider, DockerProviderError

console = Console()

LOG_TAIL_LINES = 50

# Output fragments meaning "there was nothing to tear down"
ABSENT_MARKERS = (
    "no such",
    "not found",
    "no configuration file",
    "can't find a suitable configuration file",
    "no resource found",
)


class StackStartError(Exception):
    """Raised when the orchestrator fails to bring the stack up."""

    def __init__(self, message: str, exit_code: int, output: str) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.output = output


FATAL_ERRORS = (
    StackStartError,
    ComposeCommandError,
    ArtifactWriteFailed,
    StructureCreationFailed,
    WorkspaceLocked,
    UnknownArtifactKind,
    MissingRequiredField,
    InvalidIdentifier,
    LayoutConflict,
    UndeclaredNamespace,
)


def classify_teardown(result: CommandResult) -> Outcome:
    """A teardown that found nothing is success; any other failure is advisory."""
    if result.ok:
        return Outcome.OK
    output = result.output.lower()
    if not output.strip() or any(marker in output for marker in ABSENT_MARKERS):
        return Outcome.EXPECTED_ABSENT
    return Outcome.ADVISORY


def classify_start(result: CommandResult) -> Outcome:
    return Outcome.OK if result.ok else Outcome.FATAL


def classify_setup(result: CommandResult) -> Outcome:
    return Outcome.OK if result.ok else Outcome.ADVISORY


@dataclass
class LifecycleReport:
    """Outcome of one controller run, printable as a rich Panel."""

    config: StackConfig
    state: LifecycleState = LifecycleState.ABSENT
    failed_step: LifecycleState | None = None
    error: str | None = None
    health: list[HealthStatus] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    logs: str = ""
    materialized: MaterializeResult | None = None

    @property
    def exit_code(self) -> int:
        return 0 if self.state == LifecycleState.READY else 1

    def endpoints(self) -> dict[str, str]:
        host = self.config.host
        endpoints = self.config.service_endpoints
        creds = self.config.credentials
        return {
            "Trino UI": f"http://{host}:{endpoints.query_engine.port}",
            "MinIO UI": (
                f"http://{host}:{endpoints.object_store_console.port} "
                f"({creds.access_key}/{creds.secret_key})"
            ),
            "Nessie API": f"http://{host}:{endpoints.catalog.port}{endpoints.catalog.path}",
        }

    def example_commands(self) -> list[str]:
        bucket = self.config.warehouse_bucket
        return [
            f"docker exec -it {container_name(self.config, QUERY_ENGINE_SERVICE)} trino",
            f"CREATE SCHEMA iceberg.nessie WITH (location = 's3://{bucket}/')",
            "CREATE TABLE iceberg.nessie.demo (id int, name varchar)",
        ]

    def cleanup_command(self) -> str:
        work_dir = self.config.resolved_work_dir
        return (
            f"docker compose -p {self.config.project_name} -f {work_dir / COMPOSE_FILE} down -v"
            f" && rm -rf {work_dir}"
        )

    def render(self) -> Panel:
        if self.state == LifecycleState.READY:
            lines = [Text("Setup complete!", style="bold green"), Text("")]
            lines += [Text(f"{name}: {url}") for name, url in self.endpoints().items()]
            lines += [Text(""), Text("Example commands:", style="bold")]
            lines += [Text(f"  {cmd}") for cmd in self.example_commands()]
            for status in self.health:
                style = "green" if status.healthy else "yellow"
                verdict = "healthy" if status.healthy else f"not healthy: {status.detail}"
                lines.append(Text(f"[{status.service}] {verdict}", style=style))
            for warning in self.warnings:
                lines.append(Text(f"warning: {warning}", style="yellow"))
            lines += [Text(""), Text(f"Cleanup: {self.cleanup_command()}", style="dim")]
            return Panel(Group(*lines), title="LAKESTACK READY", border_style="green")

        step = self.failed_step.value if self.failed_step else "unknown"
        lines = [
            Text(f"Failed during: {step}", style="bold red"),
            Text(self.error or "", style="red"),
        ]
        if self.logs:
            lines += [Text(""), Text("Captured logs:", style="bold"), Text(self.logs, style="dim")]
        return Panel(Group(*lines), title="SYSTEM HALT", border_style="red")


class EnvironmentController:
    """
    Runs the Compose lifecycle for one StackConfig.

    Flow:
    1. cleaning: compose down, sweep leftover containers/volumes, remove work dir
    2. materializing: plan + materialize the Compose tree
    3. starting: compose up -d (failure is fatal; logs are captured)
    4. verifying: poll health, create the warehouse bucket (best effort)
    """

    def __init__(
        self,
        config: StackConfig,
        compose: ComposeProvider | None = None,
        docker_factory: Callable[[], DockerProvider] = DockerProvider,
        verifier: HealthVerifier | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._config = config
        self._compose = compose
        self._docker_factory = docker_factory
        self._verifier = verifier
        self._sleep = sleep
        self._state = LifecycleState.ABSENT

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def compose(self) -> ComposeProvider:
        if self._compose is None:
            self._compose = ComposeProvider(
                self._config.resolved_work_dir, self._config.project_name
            )
        return self._compose

    @property
    def verifier(self) -> HealthVerifier:
        if self._verifier is None:
            self._verifier = HealthVerifier(self._config, self.compose)
        return self._verifier

    def _transition(self, state: LifecycleState) -> None:
        console.print(f"[cyan][LIFECYCLE] {self._state.value} -> {state.value}[/cyan]")
        self._state = state

    # --- cleaning ------------------------------------------------------------

    def cleanup(self) -> list[str]:
        """
        Remove everything a previous run may have left behind.

        Returns:
            Advisory warnings. "Nothing to remove" produces none.
        """
        warnings: list[str] = []
        console.print("[cyan][LIFECYCLE] Cleaning up previous containers and data...[/cyan]")

        result = self.compose.down()
        outcome = classify_teardown(result)
        if outcome == Outcome.OK:
            console.print("[green][LIFECYCLE] Previous stack torn down[/green]")
        elif outcome == Outcome.EXPECTED_ABSENT:
            console.print("[dim][LIFECYCLE] No existing compose stack found[/dim]")
        else:
            warnings.append(f"compose down failed (exit {result.exit_code}): {result.tail(3)}")
            console.print(f"[yellow][LIFECYCLE] {warnings[-1]}[/yellow]")

        warnings += self._sweep_leftovers()

        if remove_work_dir(self._config.resolved_work_dir):
            console.print("[green][LIFECYCLE] Previous work directory removed[/green]")
        return warnings

    def _sweep_leftovers(self) -> list[str]:
        try:
            provider = self._docker_factory()
        except DockerProviderError as e:
            return [f"Docker sweep skipped: {e}"]

        warnings: list[str] = []
        for image in self._config.images.all():
            try:
                removed = provider.remove_containers_by_image(image)
            except DockerProviderError as e:
                warnings.append(str(e))
                continue
            if removed:
                console.print(f"[green][LIFECYCLE] Removed {removed} {image} container(s)[/green]")
            else:
                console.print(f"[dim][LIFECYCLE] No {image} containers to remove[/dim]")

        try:
            volumes = provider.remove_dangling_volumes()
        except DockerProviderError as e:
            warnings.append(str(e))
        else:
            if volumes:
                console.print(f"[green][LIFECYCLE] Removed {volumes} dangling volume(s)[/green]")
            else:
                console.print("[dim][LIFECYCLE] No dangling volumes to remove[/dim]")

        for warning in warnings:
            console.print(f"[yellow][LIFECYCLE] {warning}[/yellow]")
        return warnings

    # --- materializing -------------------------------------------------------

    def materialize(self) -> MaterializeResult:
        layout = plan(StackMode.COMPOSE, self._config)
        return materialize(layout, self._config.resolved_work_dir)

    # --- starting ------------------------------------------------------------

    def start(self) -> None:
        """
        compose up -d, then the settle interval.

        Raises:
            StackStartError: If the stack does not come up (logs attached).
        """
        console.print("[cyan][LIFECYCLE] Bringing up containers...[/cyan]")
        result = self.compose.up()
        if classify_start(result) == Outcome.FATAL:
            logs = self.compose.logs()
            console.print(f"[red][LIFECYCLE] compose up failed (exit {result.exit_code})[/red]")
            raise StackStartError(
                f"Failed to start containers (exit {result.exit_code})",
                exit_code=result.exit_code,
                output="\n".join(part for part in (result.output, logs.output) if part),
            )

        settle = self._config.settle_seconds
        if settle > 0:
            with console.status(f"[cyan]Letting services settle ({settle:.0f}s)...[/cyan]"):
                self._sleep(settle)

    # --- verifying -----------------------------------------------------------

    def setup_object_store(self) -> list[str]:
        """
        Point the MinIO client at the store and create the warehouse bucket.

        Falls back to creating the bucket directory in the data path. Both
        failing is a warning, never fatal.
        """
        warnings: list[str] = []
        creds = self._config.credentials
        store = self._config.service_endpoints.object_store
        bucket = self._config.warehouse_bucket
        console.print("[cyan][LIFECYCLE] Configuring MinIO...[/cyan]")

        alias = self.compose.exec(
            OBJECT_STORE_SERVICE,
            ["mc", "alias", "set", MC_ALIAS, store.url, creds.access_key, creds.secret_key],
        )
        if classify_setup(alias) == Outcome.ADVISORY:
            warnings.append(f"Failed to set MinIO alias: {alias.tail(3)}")
            console.print(f"[yellow][LIFECYCLE] {warnings[-1]}[/yellow]")

        created = self.compose.exec(
            OBJECT_STORE_SERVICE, ["mc", "mb", "--ignore-existing", f"{MC_ALIAS}/{bucket}"]
        )
        if created.ok:
            console.print(f"[green][LIFECYCLE] Bucket ready: {bucket}[/green]")
            return warnings

        console.print("[yellow][LIFECYCLE] Bucket creation failed, trying fallback...[/yellow]")
        fallback = self.compose.exec(
            OBJECT_STORE_SERVICE, ["mkdir", "-p", f"{OBJECT_STORE_DATA_DIR}/{bucket}"]
        )
        if classify_setup(fallback) == Outcome.ADVISORY:
            warnings.append(f"Could not create {bucket} bucket or directory: {fallback.tail(3)}")
            console.print(f"[yellow][LIFECYCLE] {warnings[-1]}[/yellow]")
        else:
            console.print(f"[green][LIFECYCLE] Created {bucket} directory in data path[/green]")
        return warnings

    def verify(self, report: LifecycleReport) -> list[HealthStatus]:
        """
        Poll each service; a slow query engine gets a log tail and a grace wait.

        Unhealthy services are recorded, never fatal.
        """
        statuses: list[HealthStatus] = []

        store = self.verifier.wait_until_healthy(OBJECT_STORE_SERVICE)
        statuses.append(store)
        report.warnings += self.setup_object_store()

        statuses.append(self.verifier.wait_until_healthy(CATALOG_SERVICE))

        engine = self.verifier.wait_until_healthy(QUERY_ENGINE_SERVICE)
        if not engine.healthy:
            console.print("[yellow][LIFECYCLE] Trino may not be healthy. Checking logs...[/yellow]")
            tail = self.compose.logs(QUERY_ENGINE_SERVICE, tail=LOG_TAIL_LINES)
            report.logs = tail.tail(LOG_TAIL_LINES)
            console.print(f"[dim]{report.logs}[/dim]")
            grace = self._config.warmup_grace_seconds
            if grace > 0:
                with console.status(f"[yellow]Allowing JVM warmup ({grace:.0f}s)...[/yellow]"):
                    self._sleep(grace)
            engine = self.verifier.check(QUERY_ENGINE_SERVICE)
        statuses.append(engine)

        for status in statuses:
            if not status.healthy:
                report.warnings.append(f"{status.service} not healthy: {status.detail}")
        return statuses

    # --- whole run -----------------------------------------------------------

    def run(self) -> LifecycleReport:
        """
        Execute cleanup -> materialize -> start -> verify.

        Returns:
            LifecycleReport in state ready or failed. Fatal errors are
            captured in the report rather than raised.
        """
        report = LifecycleReport(config=self._config)
        try:
            self._transition(LifecycleState.CLEANING)
            report.warnings += self.cleanup()

            self._transition(LifecycleState.MATERIALIZING)
            report.materialized = self.materialize()

            self._transition(LifecycleState.STARTING)
            self.start()

            self._transition(LifecycleState.VERIFYING)
            report.health = self.verify(report)

            self._transition(LifecycleState.READY)
        except FATAL_ERRORS as e:
            report.failed_step = self._state
            report.error = str(e)
            if isinstance(e, StackStartError):
                report.logs = e.output
            console.print(f"[red][LIFECYCLE] Fatal error during {self._state.value}: {e}[/red]")
            self._transition(LifecycleState.FAILED)

        report.state = self._state
        return report
