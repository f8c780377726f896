# =============================================================================
# S3 Path Utilities
# =============================================================================
# Helpers for S3 paths and GDAL virtual file system paths.
# Used by the inspection strategies to hand sources to GDAL without
# downloading them.
# =============================================================================

"""
S3 path utilities for the ingest pipeline.

This module provides functions for:
- Parsing S3 paths into bucket and key components
- Building S3 paths and data-lake keys
- Converting S3 paths to GDAL's /vsis3/ format
- Wrapping archives in GDAL's /vsizip/ format
"""

from typing import Tuple

__all__ = [
    "parse_s3_path",
    "build_s3_path",
    "lake_key",
    "s3_to_vsis3",
    "to_vsizip",
]


def parse_s3_path(s3_path: str) -> Tuple[str, str]:
    """
    Parse S3 path into bucket and key components.

    Args:
        s3_path: Full S3 path (e.g., "s3://landing-zone/uploads/roads.zip")

    Returns:
        Tuple of (bucket, key) e.g., ("landing-zone", "uploads/roads.zip")

    Raises:
        ValueError: If path is not valid s3:// format or missing key

    Examples:
        >>> parse_s3_path("s3://landing-zone/uploads/roads.zip")
        ('landing-zone', 'uploads/roads.zip')
    """
    if not s3_path.startswith("s3://"):
        raise ValueError(
            f"Invalid S3 path format: '{s3_path}'. Must start with 's3://'"
        )

    path_without_prefix = s3_path[5:]  # Remove "s3://"
    parts = path_without_prefix.split("/", 1)

    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ValueError(
            f"Invalid S3 path format: '{s3_path}'. Expected 's3://bucket/key'"
        )

    return parts[0], parts[1]


def build_s3_path(bucket: str, key: str) -> str:
    """
    Build an ``s3://bucket/key`` path.

    Examples:
        >>> build_s3_path("data-lake", "/abc/dem.tif")
        's3://data-lake/abc/dem.tif'
    """
    return f"s3://{bucket}/{key.lstrip('/')}"


def lake_key(data_id: str, file_name: str) -> str:
    """
    Data-lake object key of a hosted file: ``<data_id>/<basename>``.

    Examples:
        >>> lake_key("abc", "uploads/2024/dem.tif")
        'abc/dem.tif'
    """
    basename = file_name.rstrip("/").rsplit("/", 1)[-1]
    return f"{data_id}/{basename}"


def s3_to_vsis3(s3_path: str) -> str:
    """
    Convert S3 path to GDAL's vsis3 virtual file system format.

    For paths that are already in vsis3 format or other formats,
    returns them unchanged.

    Examples:
        >>> s3_to_vsis3("s3://landing-zone/uploads/roads.geojson")
        '/vsis3/landing-zone/uploads/roads.geojson'
        >>> s3_to_vsis3("/data/roads.geojson")
        '/data/roads.geojson'
    """
    if s3_path.startswith("s3://"):
        return s3_path.replace("s3://", "/vsis3/", 1)
    return s3_path


def to_vsizip(path: str) -> str:
    """
    Wrap an archive path (local, s3:// or /vsis3/) in GDAL's /vsizip/ prefix.

    Examples:
        >>> to_vsizip("s3://landing-zone/roads.zip")
        '/vsizip//vsis3/landing-zone/roads.zip'
        >>> to_vsizip("/data/roads.zip")
        '/vsizip//data/roads.zip'
    """
    path = s3_to_vsis3(path)
    if path.startswith("/vsizip/"):
        return path
    return f"/vsizip/{path}"
