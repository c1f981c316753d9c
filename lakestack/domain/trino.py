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
# TRINO CONFIGURATION RECORDS
# -----------------------------------------------------------------------------
# Typed records for the query engine's configuration files. Field aliases are
# the dotted keys Trino reads; formats.format_properties() serializes them.
#
# Files covered:
# - jvm.config           -> JvmConfig
# - config.properties    -> ServerProperties
# - node.properties      -> NodeProperties
# - log.properties       -> LogProperties
# - catalog/iceberg.properties -> IcebergCatalogProperties
# -----------------------------------------------------------------------------

from pydantic import BaseModel, ConfigDict, Field

from lakestack.domain.models import ServiceEndpoints, StackConfig, StackMode

JVM_BASE_OPTIONS = (
    "-XX:+UseG1GC",
    "-XX:G1HeapRegionSize=32M",
    "-XX:+ExplicitGCInvokesConcurrent",
    "-XX:+ExitOnOutOfMemoryError",
    "-XX:+HeapDumpOnOutOfMemoryError",
    "-XX:-OmitStackTraceInFastThrow",
    "-XX:ReservedCodeCacheSize=512M",
    "-XX:PerMethodRecompilationCutoff=10000",
    "-XX:PerBytecodeRecompilationCutoff=10000",
    "-Djdk.attach.allowAttachSelf=true",
    "-Djdk.nio.maxCachedBufferSize=2000000",
    "-XX:+UnlockDiagnosticVMOptions",
    "-XX:+UseAESCTRIntrinsics",
)


class PropertiesRecord(BaseModel):
    """Base for records serialized as Java properties files."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_properties(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)


class JvmConfig(BaseModel):
    """jvm.config: server mode, heap size, then the fixed GC/diagnostic flags."""

    model_config = ConfigDict(frozen=True)

    heap: str
    options: tuple[str, ...] = JVM_BASE_OPTIONS

    def to_lines(self) -> list[str]:
        return ["-server", f"-Xmx{self.heap}", *self.options]


class ServerProperties(PropertiesRecord):
    coordinator: bool = True
    include_coordinator: bool = Field(True, alias="node-scheduler.include-coordinator")
    http_port: int = Field(8080, alias="http-server.http.port")
    query_max_memory: str = Field(..., alias="query.max-memory")
    query_max_memory_per_node: str = Field(..., alias="query.max-memory-per-node")
    discovery_uri: str = Field(..., alias="discovery.uri")


class NodeProperties(PropertiesRecord):
    environment: str = Field("demo", alias="node.environment")
    node_id: str = Field("trino-demo", alias="node.id")
    data_dir: str = Field("/data/trino", alias="node.data-dir")


class LogProperties(PropertiesRecord):
    trino_level: str = Field("INFO", alias="io.trino")


class IcebergCatalogProperties(PropertiesRecord):
    """
    Iceberg connector bound to the Nessie catalog and the MinIO object store.

    catalog_uri and s3_endpoint must come from the same ServiceEndpoints as
    the generated services; see for_stack().
    """

    connector_name: str = Field("iceberg", alias="connector.name")
    catalog_type: str = Field("nessie", alias="iceberg.catalog.type")
    catalog_uri: str = Field(..., alias="iceberg.nessie-catalog.uri")
    warehouse_dir: str = Field(..., alias="iceberg.nessie-catalog.default-warehouse-dir")
    hadoop_fs_enabled: bool = Field(False, alias="fs.hadoop.enabled")
    native_s3_enabled: bool = Field(True, alias="fs.native-s3.enabled")
    s3_endpoint: str = Field(..., alias="s3.endpoint")
    s3_access_key: str = Field(..., alias="s3.aws-access-key")
    s3_secret_key: str = Field(..., alias="s3.aws-secret-key")
    s3_path_style_access: bool = Field(True, alias="s3.path-style-access")
    s3_region: str = Field(..., alias="s3.region")

    @classmethod
    def for_stack(cls, config: StackConfig, mode: StackMode) -> "IcebergCatalogProperties":
        endpoints = ServiceEndpoints.for_mode(mode)
        return cls(
            catalog_uri=endpoints.catalog.url,
            warehouse_dir=f"s3://{config.warehouse_bucket}/",
            s3_endpoint=endpoints.object_store.url,
            s3_access_key=config.credentials.access_key,
            s3_secret_key=config.credentials.secret_key,
            s3_region=config.credentials.region,
        )


def server_properties(config: StackConfig) -> ServerProperties:
    port = config.service_endpoints.query_engine.port
    return ServerProperties(
        http_port=port,
        query_max_memory=config.memory.query_max_memory,
        query_max_memory_per_node=config.memory.query_max_memory_per_node,
        discovery_uri=f"http://localhost:{port}",
    )
