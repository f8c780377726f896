# =============================================================================
# Data Models Library
# =============================================================================
# Pydantic models and schemas for the Geospatial Ingest Worker.
# =============================================================================

"""
Data models for the ingest pipeline.

This library provides:
- Spatial types: Bounds, SpatialMetadata
- Data Resource: DataResource, data type descriptors, file locations
- Jobs: JobMessage, IngestJob
- Status: StatusUpdate, JobStatus, JobProgress, results
- Configuration models
"""

__version__ = "0.1.0"

# Spatial types
from .spatial import (
    Bounds,
    SpatialMetadata,
    DEFAULT_EPSG_CODE,
    CANONICAL_EPSG_CODE,
)

# Data Resource models
from .data import (
    IngestMode,
    S3FileStore,
    FolderShare,
    FileLocation,
    DataType,
    GeoJsonDataType,
    RasterDataType,
    ShapefileDataType,
    DATA_TYPES,
    DataResource,
)

# Job models
from .job import (
    JobMessage,
    IngestJob,
    decode_job,
    recover_job_id,
)

# Status models
from .status import (
    JobStatus,
    JobProgress,
    DataResult,
    ErrorResult,
    StatusUpdate,
)

# Configuration models
from .config import (
    MinIOSettings,
    MongoSettings,
    PostGISSettings,
    ServiceBusSettings,
    WorkerSettings,
    GDALSettings,
)

__all__ = [
    # Spatial types
    "Bounds",
    "SpatialMetadata",
    "DEFAULT_EPSG_CODE",
    "CANONICAL_EPSG_CODE",
    # Data Resource models
    "IngestMode",
    "S3FileStore",
    "FolderShare",
    "FileLocation",
    "DataType",
    "GeoJsonDataType",
    "RasterDataType",
    "ShapefileDataType",
    "DATA_TYPES",
    "DataResource",
    # Job models
    "JobMessage",
    "IngestJob",
    "decode_job",
    "recover_job_id",
    # Status models
    "JobStatus",
    "JobProgress",
    "DataResult",
    "ErrorResult",
    "StatusUpdate",
    # Configuration models
    "MinIOSettings",
    "MongoSettings",
    "PostGISSettings",
    "ServiceBusSettings",
    "WorkerSettings",
    "GDALSettings",
]
