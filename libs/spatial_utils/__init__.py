# =============================================================================
# Spatial Utils Library
# =============================================================================
# Helpers around GDAL output, CRS projection and feature table naming.
# =============================================================================

"""
Spatial utilities for the ingest pipeline.

This library provides:
- GDAL JSON parsing: ogrinfo / gdalinfo output to SpatialMetadata
- Projection: EPSG:4326 copy of a metadata bounding box (pyproj)
- DataIdTableMapping: data id → PostGIS feature table name
"""

from .gdal_json import (
    epsg_from_wkt,
    first_layer_name,
    vector_metadata_from_ogrinfo,
    raster_metadata_from_gdalinfo,
)
from .projection import project_spatial_metadata, transform_bounds
from .table_mapper import DataIdTableMapping, sanitize_identifier

__version__ = "0.1.0"

__all__ = [
    "epsg_from_wkt",
    "first_layer_name",
    "vector_metadata_from_ogrinfo",
    "raster_metadata_from_gdalinfo",
    "project_spatial_metadata",
    "transform_bounds",
    "DataIdTableMapping",
    "sanitize_identifier",
]
