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
# DOCKER PROVIDER
# -----------------------------------------------------------------------------
# Responsibility: A wrapper around the Docker SDK for the cleanup sweep:
# leftover containers of the stack images and dangling volumes.
#
# "Nothing to remove" is a normal result (count 0), never an error.
# -----------------------------------------------------------------------------

import os

import docker
from docker import DockerClient
from docker.errors import DockerException, NotFound
from rich.console import Console

console = Console()


class DockerProviderError(Exception):
    """Raised when the Docker Engine is unreachable or rejects a request."""

    pass


class DockerProvider:
    """Docker SDK access for sweeping stack leftovers."""

    def __init__(self, client: DockerClient | None = None) -> None:
        """
        Initialize the Docker provider.

        Args:
            client: Existing client; otherwise connects via DOCKER_HOST or the
                local socket.

        Raises:
            DockerProviderError: If the engine does not answer a ping.
        """
        self._client = client or self._connect()

    def _connect(self) -> DockerClient:
        docker_host = os.getenv("DOCKER_HOST")
        try:
            if docker_host:
                client = docker.DockerClient(base_url=docker_host)
            else:
                client = docker.from_env()
            client.ping()
        except DockerException as e:
            console.print(f"[red][DOCKER] Engine unavailable: {e}[/red]")
            raise DockerProviderError(f"Docker Engine is not available: {e}")

        console.print("[green][DOCKER] Connected to Docker Engine[/green]")
        return client

    def is_connected(self) -> bool:
        try:
            self._client.ping()
            return True
        except DockerException:
            return False

    def remove_containers_by_image(self, image: str) -> int:
        """
        Force-remove every container (running or not) created from `image`.

        Returns:
            Number of containers removed.

        Raises:
            DockerProviderError: If listing or removal fails.
        """
        try:
            containers = self._client.containers.list(all=True, filters={"ancestor": image})
        except DockerException as e:
            raise DockerProviderError(f"Cannot list containers for {image}: {e}")

        removed = 0
        for container in containers:
            try:
                container.remove(force=True)
                removed += 1
            except NotFound:
                continue
            except DockerException as e:
                raise DockerProviderError(f"Cannot remove container {container.short_id}: {e}")
        return removed

    def remove_dangling_volumes(self) -> int:
        """
        Remove volumes not referenced by any container.

        Returns:
            Number of volumes removed.

        Raises:
            DockerProviderError: If listing or removal fails.
        """
        try:
            volumes = self._client.volumes.list(filters={"dangling": True})
        except DockerException as e:
            raise DockerProviderError(f"Cannot list dangling volumes: {e}")

        removed = 0
        for volume in volumes:
            try:
                volume.remove()
                removed += 1
            except NotFound:
                continue
            except DockerException as e:
                raise DockerProviderError(f"Cannot remove volume {volume.name}: {e}")
        return removed
