# =============================================================================
# Data Resource Models Module
# =============================================================================
# Defines the subject of an ingest job:
# - IngestMode: Metadata-only or metadata-and-persist processing
# - FileLocation: Where the source bytes live (S3 bucket or folder share)
# - DataType: Tagged descriptor of the resource format and payload
# - DataResource: Identity, type descriptor and spatial metadata
# =============================================================================

import logging
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Protocol, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    SerializeAsAny,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .spatial import SpatialMetadata

__all__ = [
    "IngestMode",
    "S3FileStore",
    "FolderShare",
    "FileLocation",
    "DataType",
    "GeoJsonDataType",
    "RasterDataType",
    "ShapefileDataType",
    "DATA_TYPES",
    "parse_data_type",
    "IdFactory",
    "DataResource",
]

logger = logging.getLogger(__name__)


_CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Ingest Mode
# =============================================================================

class IngestMode(str, Enum):
    """
    How far an ingest job goes with its resource.

    METADATA_ONLY extracts spatial metadata; METADATA_AND_PERSIST additionally
    writes the content to the durable stores.
    """
    METADATA_ONLY = "metadata_only"
    METADATA_AND_PERSIST = "metadata_and_persist"

    @classmethod
    def from_host(cls, host: bool) -> "IngestMode":
        """Translate the wire-level ``host`` flag into an IngestMode."""
        return cls.METADATA_AND_PERSIST if host else cls.METADATA_ONLY

    @property
    def persist(self) -> bool:
        return self is IngestMode.METADATA_AND_PERSIST


# =============================================================================
# File Locations
# =============================================================================

class S3FileStore(BaseModel):
    """
    Object in an S3-compatible bucket.

    Attributes:
        bucket_name: Bucket holding the object
        file_name: Object key
        file_size: Size in bytes, when known
        domain_name: Endpoint the bucket lives on, when not the default one
    """

    model_config = _CAMEL_CONFIG

    type: Literal["s3"] = "s3"
    bucket_name: str = Field(..., min_length=1)
    file_name: str = Field(..., min_length=1)
    file_size: Optional[int] = Field(None, ge=0)
    domain_name: Optional[str] = None

    @property
    def s3_path(self) -> str:
        """Location as an ``s3://bucket/key`` path."""
        return f"s3://{self.bucket_name}/{self.file_name}"


class FolderShare(BaseModel):
    """File on a filesystem mounted by the worker."""

    model_config = _CAMEL_CONFIG

    type: Literal["folder_share"] = "folder_share"
    file_path: str = Field(..., min_length=1)


FileLocation = Annotated[Union[S3FileStore, FolderShare], Field(discriminator="type")]
"""External location of a resource's content, tagged by ``type``."""


# =============================================================================
# Data Types (Tagged Format Descriptors)
# =============================================================================

class DataType(BaseModel):
    """
    Base format descriptor.

    ``type`` is the tag used by the inspection dispatcher. Unknown tags decode
    to this class with their extra fields preserved so that they can be
    rejected by dispatch rather than by message decoding.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    type: str = Field(..., min_length=1, description="Format tag")


class GeoJsonDataType(DataType):
    """
    GeoJSON payload: inline content, an external location, or a handle to a
    table already in the feature store.
    """

    model_config = ConfigDict(extra="ignore")

    type: Literal["geojson"] = "geojson"
    geo_json_content: Optional[str] = None
    location: Optional[FileLocation] = None
    database_table_name: Optional[str] = None

    @model_validator(mode="after")
    def validate_source(self) -> "GeoJsonDataType":
        if self.geo_json_content is None and self.location is None and self.database_table_name is None:
            raise ValueError(
                "GeoJSON data requires geoJsonContent, location or databaseTableName"
            )
        return self


class RasterDataType(DataType):
    """GeoTIFF raster stored at an external location."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["raster"] = "raster"
    location: FileLocation


class ShapefileDataType(DataType):
    """Zipped ESRI Shapefile stored at an external location."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["shapefile"] = "shapefile"
    location: FileLocation
    database_table_name: Optional[str] = None


DATA_TYPES: dict[str, type[DataType]] = {
    "geojson": GeoJsonDataType,
    "raster": RasterDataType,
    "shapefile": ShapefileDataType,
}


def parse_data_type(value: Any) -> Any:
    """
    Decode a raw data type descriptor into its tagged model.

    Known tags are validated against their specific model (so a malformed
    GeoJSON descriptor is a decoding error); unknown tags fall back to the
    generic DataType.
    """
    if isinstance(value, DataType) or not isinstance(value, dict):
        return value
    model = DATA_TYPES.get(value.get("type"), DataType)
    return model.model_validate(value)


# =============================================================================
# Data Resource
# =============================================================================

class IdFactory(Protocol):
    def new_id(self) -> str: ...


class DataResource(BaseModel):
    """
    The subject of an ingest job.

    Attributes:
        data_id: Opaque identifier, assigned by the pipeline when absent
        data_type: Tagged format descriptor and payload
        spatial_metadata: Populated by a successful inspection
        metadata: Free-form resource metadata carried through untouched
    """

    model_config = _CAMEL_CONFIG

    data_id: Optional[str] = None
    data_type: Annotated[SerializeAsAny[DataType], BeforeValidator(parse_data_type)]
    spatial_metadata: Optional[SpatialMetadata] = None
    metadata: Optional[dict[str, Any]] = None

    def assign_id(self, factory: IdFactory) -> str:
        """
        Assign an identifier if the resource has none (or an empty one).

        An identifier that is already set is never replaced, so repeated
        calls return the same value and call the factory at most once.

        Args:
            factory: Identity collaborator exposing new_id()

        Returns:
            The resource identifier
        """
        if not self.data_id:
            self.data_id = factory.new_id()
            logger.debug(f"Assigned data id {self.data_id}")
        return self.data_id
