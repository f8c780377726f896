# =============================================================================
# Inspector Helpers
# =============================================================================
# GDAL invocation and source path helpers shared by the inspection
# strategies.
# =============================================================================

import logging
from typing import Optional

from libs.errors import ExtractionError
from libs.models.data import FolderShare, S3FileStore
from libs.s3_utils import s3_to_vsis3

from ..resources.gdal_resource import GDALResource, GDALResult

__all__ = ["gdal_source_path", "read_ogrinfo", "read_gdalinfo"]

logger = logging.getLogger(__name__)


def gdal_source_path(location) -> str:
    """
    GDAL-readable path of a file location.

    S3 objects are read in place through /vsis3/; folder shares are local paths.

    Raises:
        ExtractionError: For an unknown location type
    """
    if isinstance(location, S3FileStore):
        return s3_to_vsis3(location.s3_path)
    if isinstance(location, FolderShare):
        return location.file_path
    raise ExtractionError(f"Unsupported file location: {type(location).__name__}")


def _check(result: GDALResult, source: str) -> str:
    if result.success:
        return result.stdout
    tool = result.command[0] if result.command else "gdal"
    if result.timed_out:
        raise ExtractionError(f"{tool} timed out reading {source}")
    raise ExtractionError(f"{tool} could not read {source}: {result.stderr.strip()}")


def read_ogrinfo(gdal: GDALResource, source: str, layer: Optional[str] = None) -> str:
    """
    Run ``ogrinfo -json`` on a vector source.

    Raises:
        ExtractionError: If GDAL cannot open the source
    """
    logger.debug(f"ogrinfo {source}")
    return _check(gdal.ogrinfo(source, layer=layer), source)


def read_gdalinfo(gdal: GDALResource, source: str) -> str:
    """
    Run ``gdalinfo -json`` on a raster source.

    Raises:
        ExtractionError: If GDAL cannot open the source
    """
    logger.debug(f"gdalinfo {source}")
    return _check(gdal.gdalinfo(source), source)
