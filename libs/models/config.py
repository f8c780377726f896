# =============================================================================
# Configuration Models Module
# =============================================================================
# Provides Pydantic Settings models for all service configurations:
# - MinIOSettings: S3-compatible object storage configuration
# - MongoSettings: MongoDB resource catalog configuration
# - PostGISSettings: PostGIS feature store configuration
# - ServiceBusSettings: Job and status queue configuration
# - WorkerSettings: Ingest worker process configuration
# - GDALSettings: GDAL/PROJ data paths
# =============================================================================

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

__all__ = [
    "MinIOSettings",
    "MongoSettings",
    "PostGISSettings",
    "ServiceBusSettings",
    "WorkerSettings",
    "GDALSettings",
]


_ENV_CONFIG = SettingsConfigDict(
    env_file=".env",
    case_sensitive=False,
    extra="ignore",  # Ignore unrelated env vars from shared .env files
)


# =============================================================================
# MinIO Settings (S3-Compatible Object Storage)
# =============================================================================

class MinIOSettings(BaseSettings):
    """
    Configuration for MinIO (S3-compatible object storage).

    Maps environment variables with prefix "MINIO_":
    - MINIO_ENDPOINT → endpoint
    - MINIO_ROOT_USER → access_key
    - MINIO_ROOT_PASSWORD → secret_key
    - MINIO_USE_SSL → use_ssl
    - MINIO_LANDING_BUCKET → landing_bucket
    - MINIO_LAKE_BUCKET → lake_bucket

    Attributes:
        endpoint: MinIO server endpoint (host:port)
        access_key: Access key (maps from MINIO_ROOT_USER)
        secret_key: Secret key (maps from MINIO_ROOT_PASSWORD)
        use_ssl: Whether to use SSL/TLS (default: False)
        landing_bucket: Bucket submitters upload into (default: "landing-zone")
        lake_bucket: Bucket hosted rasters are copied into (default: "data-lake")
    """

    endpoint: str = Field(..., validation_alias="MINIO_ENDPOINT", description="MinIO server endpoint (host:port)")
    access_key: str = Field(..., validation_alias="MINIO_ROOT_USER", description="Access key (maps from MINIO_ROOT_USER)")
    secret_key: str = Field(..., validation_alias="MINIO_ROOT_PASSWORD", description="Secret key (maps from MINIO_ROOT_PASSWORD)")
    use_ssl: bool = Field(False, validation_alias="MINIO_USE_SSL", description="Whether to use SSL/TLS")
    landing_bucket: str = Field("landing-zone", validation_alias="MINIO_LANDING_BUCKET", description="Landing zone bucket name")
    lake_bucket: str = Field("data-lake", validation_alias="MINIO_LAKE_BUCKET", description="Data lake bucket name")

    model_config = _ENV_CONFIG

    @property
    def endpoint_url(self) -> str:
        """Endpoint with scheme, as GDAL's /vsis3/ configuration expects it."""
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{self.endpoint}"


# =============================================================================
# MongoDB Settings (Resource Catalog)
# =============================================================================

class MongoSettings(BaseSettings):
    """
    Configuration for MongoDB (resource catalog).

    Maps environment variables with prefix "MONGO_":
    - MONGO_HOST → host
    - MONGO_PORT → port
    - MONGO_INITDB_ROOT_USERNAME → username
    - MONGO_INITDB_ROOT_PASSWORD → password
    - MONGO_DATABASE → database
    - MONGO_AUTH_SOURCE → auth_source
    """

    host: str = Field("mongodb", validation_alias="MONGO_HOST", description="MongoDB host")
    port: int = Field(27017, validation_alias="MONGO_PORT", description="MongoDB port")
    username: str = Field(..., validation_alias="MONGO_INITDB_ROOT_USERNAME", description="MongoDB username")
    password: str = Field(..., validation_alias="MONGO_INITDB_ROOT_PASSWORD", description="MongoDB password")
    database: str = Field("ingest", validation_alias="MONGO_DATABASE", description="Database name")
    auth_source: str = Field("admin", validation_alias="MONGO_AUTH_SOURCE", description="Authentication source")

    model_config = _ENV_CONFIG

    @property
    def connection_string(self) -> str:
        """
        Build MongoDB connection URI.

        Format: mongodb://[username]:[password]@[host]:[port]/[database]?authSource=[auth_source]
        """
        return (
            f"mongodb://{self.username}:{self.password}@"
            f"{self.host}:{self.port}/{self.database}?authSource={self.auth_source}"
        )


# =============================================================================
# PostGIS Settings (Feature Store)
# =============================================================================

class PostGISSettings(BaseSettings):
    """
    Configuration for PostGIS (durable feature store).

    Hosted vector data is written to one table per Data Resource inside
    ``schema``.

    Maps environment variables with prefix "POSTGRES_":
    - POSTGRES_HOST → host
    - POSTGRES_PORT → port
    - POSTGRES_USER → user
    - POSTGRES_PASSWORD → password
    - POSTGRES_DB → database
    - POSTGRES_SCHEMA → schema_name
    """

    host: str = Field("postgis", validation_alias="POSTGRES_HOST", description="PostGIS host")
    port: int = Field(5432, validation_alias="POSTGRES_PORT", description="PostGIS port")
    user: str = Field(..., validation_alias="POSTGRES_USER", description="PostgreSQL user")
    password: str = Field(..., validation_alias="POSTGRES_PASSWORD", description="PostgreSQL password")
    database: str = Field("features", validation_alias="POSTGRES_DB", description="Database name")
    schema_name: str = Field("public", validation_alias="POSTGRES_SCHEMA", description="Schema holding feature tables")

    model_config = _ENV_CONFIG


# =============================================================================
# Service Bus Settings (Job and Status Queues)
# =============================================================================

class ServiceBusSettings(BaseSettings):
    """
    Configuration for the Azure Service Bus queues.

    Maps environment variables with prefix "SERVICE_BUS_":
    - SERVICE_BUS_CONNECTION → connection_string
    - SERVICE_BUS_INGEST_QUEUE → ingest_queue
    - SERVICE_BUS_STATUS_QUEUE → status_queue
    - SERVICE_BUS_MAX_WAIT_TIME → max_wait_time
    - SERVICE_BUS_LOCK_RENEWAL_SECONDS → lock_renewal_seconds
    """

    connection_string: str = Field(..., validation_alias="SERVICE_BUS_CONNECTION", description="Service Bus connection string")
    ingest_queue: str = Field("ingest-jobs", validation_alias="SERVICE_BUS_INGEST_QUEUE", description="Queue carrying ingest jobs")
    status_queue: str = Field("job-status", validation_alias="SERVICE_BUS_STATUS_QUEUE", description="Queue receiving status updates")
    max_wait_time: int = Field(5, ge=1, validation_alias="SERVICE_BUS_MAX_WAIT_TIME", description="Seconds to wait for messages per receive")
    lock_renewal_seconds: int = Field(3600, ge=0, validation_alias="SERVICE_BUS_LOCK_RENEWAL_SECONDS", description="Max message lock renewal (0 disables)")

    model_config = _ENV_CONFIG


# =============================================================================
# Worker Settings
# =============================================================================

class WorkerSettings(BaseSettings):
    """
    Configuration for the ingest worker process.

    Maps environment variables with prefix "INGEST_":
    - INGEST_MAX_CONCURRENT_JOBS → max_concurrent_jobs
    - INGEST_TEMP_PATH → temp_path
    - INGEST_GDAL_TIMEOUT_SECONDS → gdal_timeout_seconds
    - INGEST_LOG_LEVEL → log_level
    - INGEST_CATALOG_ENABLED → catalog_enabled
    """

    max_concurrent_jobs: int = Field(4, ge=1, validation_alias="INGEST_MAX_CONCURRENT_JOBS", description="Jobs processed in parallel")
    temp_path: str = Field("/tmp/ingest", validation_alias="INGEST_TEMP_PATH", description="Directory for worker-local temporary files")
    gdal_timeout_seconds: int = Field(0, ge=0, validation_alias="INGEST_GDAL_TIMEOUT_SECONDS", description="GDAL command timeout (0 = none)")
    log_level: str = Field("INFO", validation_alias="INGEST_LOG_LEVEL", description="Root log level")
    catalog_enabled: bool = Field(True, validation_alias="INGEST_CATALOG_ENABLED", description="Register inspected resources in MongoDB")

    model_config = _ENV_CONFIG


# =============================================================================
# GDAL Settings
# =============================================================================

class GDALSettings(BaseSettings):
    """
    Optional GDAL/PROJ data paths (typically already set in the container).

    Maps environment variables:
    - GDAL_DATA → gdal_data_path
    - PROJ_LIB → proj_lib_path
    """

    gdal_data_path: str = Field("", validation_alias="GDAL_DATA", description="Path to GDAL data files")
    proj_lib_path: str = Field("", validation_alias="PROJ_LIB", description="Path to PROJ data files")

    model_config = _ENV_CONFIG
