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
# THE HEALTH VERIFIER
# -----------------------------------------------------------------------------
# Responsibility: Ask each service whether it is ready.
#
# - minio:  HTTP GET /minio/health/live on the published API port
# - nessie: HTTP GET /api/v1/config on the published port
# - trino:  vendor health-check inside the container, then a trial query
#
# check() is a single probe. wait_until_healthy() polls until healthy or the
# configured timeout, and says which of the two happened. Neither raises for
# an unhealthy service.
# -----------------------------------------------------------------------------

import time
from collections.abc import Callable

import requests
from rich.console import Console

from lakestack.domain.models import (
    CATALOG_HEALTH_PATH,
    CATALOG_PORT,
    CATALOG_SERVICE,
    OBJECT_STORE_API_PORT,
    OBJECT_STORE_LIVE_PATH,
    OBJECT_STORE_SERVICE,
    QUERY_ENGINE_HEALTH_CHECK,
    QUERY_ENGINE_SERVICE,
    HealthStatus,
    StackConfig,
)
from lakestack.infra.compose_client import ComposeProvider

console = Console()

HTTP_TIMEOUT_SECONDS = 5
TRIAL_QUERY = "SELECT 1"

HTTP_HEALTH_PATHS = {
    OBJECT_STORE_SERVICE: (OBJECT_STORE_API_PORT, OBJECT_STORE_LIVE_PATH),
    CATALOG_SERVICE: (CATALOG_PORT, CATALOG_HEALTH_PATH),
}

SERVICES = (OBJECT_STORE_SERVICE, CATALOG_SERVICE, QUERY_ENGINE_SERVICE)


class HealthVerifier:
    """Readiness probes for the three services of a Compose stack."""

    def __init__(
        self,
        config: StackConfig,
        compose: ComposeProvider | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Args:
            config: Published host plus timeout/interval settings.
            compose: Needed for the query-engine probe (runs inside the container).
            clock / sleep: Injected for tests.
        """
        self._config = config
        self._compose = compose
        self._clock = clock
        self._sleep = sleep

    def health_url(self, service: str) -> str:
        port, path = HTTP_HEALTH_PATHS[service]
        return f"http://{self._config.host}:{port}{path}"

    def _check_http(self, service: str) -> HealthStatus:
        url = self.health_url(service)
        try:
            response = requests.get(url, timeout=HTTP_TIMEOUT_SECONDS)
        except requests.RequestException as e:
            return HealthStatus.failed(service, f"{url} unreachable: {e}")

        if 200 <= response.status_code < 300:
            return HealthStatus.ok(service, f"{url} -> {response.status_code}")
        return HealthStatus.failed(service, f"{url} -> HTTP {response.status_code}")

    def _check_query_engine(self) -> HealthStatus:
        if self._compose is None:
            return HealthStatus.failed(QUERY_ENGINE_SERVICE, "no compose project to exec into")

        probe = self._compose.exec(QUERY_ENGINE_SERVICE, [QUERY_ENGINE_HEALTH_CHECK])
        if probe.ok:
            return HealthStatus.ok(QUERY_ENGINE_SERVICE, "health-check passed")

        trial = self._compose.exec(QUERY_ENGINE_SERVICE, ["trino", "--execute", TRIAL_QUERY])
        if trial.ok:
            return HealthStatus.ok(QUERY_ENGINE_SERVICE, f"trial query '{TRIAL_QUERY}' succeeded")

        detail = trial.tail(5) or probe.tail(5) or f"exit code {trial.exit_code}"
        return HealthStatus.failed(QUERY_ENGINE_SERVICE, detail)

    def check(self, service: str) -> HealthStatus:
        """
        Probe one service once.

        Raises:
            ValueError: If `service` is not one of the stack's services.
        """
        if service in HTTP_HEALTH_PATHS:
            return self._check_http(service)
        if service == QUERY_ENGINE_SERVICE:
            return self._check_query_engine()
        raise ValueError(f"Unknown service '{service}' (expected one of {SERVICES})")

    def wait_until_healthy(self, service: str, timeout: float | None = None) -> HealthStatus:
        """
        Poll `service` until healthy or `timeout` seconds pass.

        Returns:
            The healthy status, or an Unhealthy status whose detail starts
            with "timed out" and carries the last probe's detail.
        """
        timeout = self._config.health_timeout_seconds if timeout is None else timeout
        interval = self._config.health_interval_seconds
        deadline = self._clock() + timeout
        attempt = 0

        with console.status(f"[cyan]Waiting for {service} (up to {timeout:.0f}s)...[/cyan]"):
            while True:
                attempt += 1
                status = self.check(service)
                if status.healthy:
                    console.print(f"[green][HEALTH] {service} healthy ({status.detail})[/green]")
                    return status

                remaining = deadline - self._clock()
                if remaining <= 0:
                    console.print(f"[yellow][HEALTH] {service} not healthy after {attempt} probes[/yellow]")
                    return HealthStatus.failed(
                        service, f"timed out after {timeout:.0f}s: {status.detail}"
                    )
                self._sleep(min(interval, remaining))


def verify(
    service: str, config: StackConfig, compose: ComposeProvider | None = None
) -> HealthStatus:
    """Single readiness probe of `service`: Healthy or Unhealthy{detail}."""
    return HealthVerifier(config, compose).check(service)
