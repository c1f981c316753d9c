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
# SETTINGS - STACK CONFIGURATION LOADING
# -----------------------------------------------------------------------------
# Responsibility: Build the StackConfig for one invocation.
#
# Precedence (lowest to highest):
# 1. StackConfig defaults
# 2. lakestack.yaml (path overridable with LAKESTACK_CONFIG)
# 3. LAKESTACK_* environment variables (.env is loaded first)
# 4. The mode chosen by the entry point
#
# Kustomize mode without a namespace falls back to the first overlay's.
# -----------------------------------------------------------------------------

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console

from lakestack.domain.models import StackConfig, StackMode

console = Console()

CONFIG_PATH = Path("lakestack.yaml")

# env var -> (section, field); section None means a top-level field
ENV_OVERRIDES: dict[str, tuple[str | None, str]] = {
    "LAKESTACK_NAMESPACE": (None, "namespace"),
    "LAKESTACK_WORK_DIR": (None, "work_dir"),
    "LAKESTACK_ACCESS_KEY": ("credentials", "access_key"),
    "LAKESTACK_SECRET_KEY": ("credentials", "secret_key"),
    "LAKESTACK_REGION": ("credentials", "region"),
    "LAKESTACK_COORDINATOR_HEAP": ("memory", "coordinator_heap"),
    "LAKESTACK_HEALTH_TIMEOUT": (None, "health_timeout_seconds"),
    "LAKESTACK_SETTLE_SECONDS": (None, "settle_seconds"),
    "LAKESTACK_REPO_URL": ("gitops", "repo_url"),
}


class ConfigError(Exception):
    """Raised when the configuration file or environment is invalid."""

    def __init__(self, message: str, source: str = "") -> None:
        super().__init__(message)
        self.source = source


def _read_file(path: Path) -> dict:
    if not path.exists():
        console.print(f"[dim][SETTINGS] {path} not found, using defaults[/dim]")
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read {path}: {e}", source=str(path))

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level", source=str(path))
    console.print(f"[green][SETTINGS] Loaded {path}[/green]")
    return data


def _apply_env(data: dict, environ: dict[str, str]) -> dict:
    for var, (section, name) in ENV_OVERRIDES.items():
        value = environ.get(var)
        if value is None or value == "":
            continue
        if section is None:
            data[name] = value
            continue
        nested = data.get(section) or {}
        if not isinstance(nested, dict):
            raise ConfigError(f"'{section}' must be a mapping", source=var)
        data[section] = {**nested, name: value}
    return data


def load_config(
    mode: StackMode | str,
    path: Path | str | None = None,
    environ: dict[str, str] | None = None,
) -> StackConfig:
    """
    Load the StackConfig for `mode`.

    Args:
        mode: compose or kustomize; always overrides the file's mode.
        path: YAML file (defaults to LAKESTACK_CONFIG, then lakestack.yaml).
        environ: Environment mapping (defaults to os.environ, after .env).

    Returns:
        Validated StackConfig.

    Raises:
        ConfigError: Unreadable file or values pydantic rejects.
    """
    if environ is None:
        load_dotenv()
        environ = dict(os.environ)

    if path is None:
        path = environ.get("LAKESTACK_CONFIG") or CONFIG_PATH
    source = Path(path)

    data = _apply_env(_read_file(source), environ)
    data["mode"] = StackMode(mode).value

    try:
        config = StackConfig(**data)
    except (ValidationError, TypeError) as e:
        raise ConfigError(f"Invalid configuration: {e}", source=str(source))

    if config.mode == StackMode.KUSTOMIZE and not config.namespace and config.overlays:
        namespace = config.overlays[0].namespace
        console.print(f"[yellow][SETTINGS] No namespace configured, using {namespace}[/yellow]")
        config = config.model_copy(update={"namespace": namespace})
    return config
