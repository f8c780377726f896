"""Ingest Worker Resources - External Service Connections."""

from .gdal_resource import GDALResource, GDALResult
from .minio_resource import MinIOResource
from .mongodb_resource import MongoDBResource
from .postgis_resource import PostGISResource

__all__ = [
    "GDALResource",
    "GDALResult",
    "MinIOResource",
    "MongoDBResource",
    "PostGISResource",
]
