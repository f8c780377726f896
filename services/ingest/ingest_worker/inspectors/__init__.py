"""Ingest Worker Inspectors - Format-specific inspection strategies."""

from .geojson_inspector import GeoJsonInspector
from .geotiff_inspector import GeoTiffInspector
from .shapefile_inspector import ShapefileInspector

__all__ = [
    "GeoJsonInspector",
    "GeoTiffInspector",
    "ShapefileInspector",
]
