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
# CANONICAL FORMATTERS
# -----------------------------------------------------------------------------
# Responsibility: One serializer per target format. Templates build typed
# records or plain mappings and hand them here; nothing else assembles file
# text by string interpolation.
#
# - Java properties  (config.properties, node.properties, iceberg.properties)
# - JVM options      (jvm.config)
# - YAML             (Kubernetes manifests, Compose file, Argo CD app)
# - Shell scripts    (post-deploy helpers)
# -----------------------------------------------------------------------------

from collections.abc import Iterable, Mapping

import yaml

from lakestack.domain.trino import JvmConfig, PropertiesRecord


class _BlockDumper(yaml.SafeDumper):
    """SafeDumper that writes multi-line strings as literal blocks."""


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_BlockDumper.add_representer(str, _represent_str)


def _format_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def format_properties(record: PropertiesRecord | Mapping[str, object]) -> str:
    """
    Serialize a properties record as `key=value` lines.

    Args:
        record: A PropertiesRecord (aliases become keys) or a plain mapping.

    Returns:
        The file body, newline terminated, keys in declaration order.
    """
    items = record.to_properties() if isinstance(record, PropertiesRecord) else dict(record)
    return "".join(f"{key}={_format_value(value)}\n" for key, value in items.items())


def format_jvm_options(record: JvmConfig) -> str:
    return "".join(f"{line}\n" for line in record.to_lines())


def format_yaml(*documents: Mapping) -> str:
    """Dump one or more YAML documents, keeping key order, `---` between them."""
    bodies = [
        yaml.dump(
            dict(document),
            Dumper=_BlockDumper,
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
        )
        for document in documents
    ]
    return "---\n".join(bodies)


def format_shell_script(lines: Iterable[str]) -> str:
    """A bash script that stops on the first failing command."""
    body = "".join(f"{line}\n" for line in lines)
    return f"#!/usr/bin/env bash\nset -euo pipefail\n\n{body}"
