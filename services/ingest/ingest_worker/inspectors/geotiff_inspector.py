# =============================================================================
# GeoTIFF Inspector
# =============================================================================
# Extracts the bounding box and reference system of raster resources and,
# for hosted jobs, places the raster in the data lake bucket.
# =============================================================================

import logging

from libs.inspection import InspectorStrategy
from libs.models.data import DataResource, FolderShare, IngestMode, RasterDataType, S3FileStore
from libs.s3_utils import lake_key
from libs.spatial_utils import raster_metadata_from_gdalinfo

from ..resources import GDALResource, MinIOResource
from .common import gdal_source_path, read_gdalinfo

__all__ = ["GeoTiffInspector"]

logger = logging.getLogger(__name__)


class GeoTiffInspector(InspectorStrategy):
    """
    Inspection strategy for ``raster`` (GeoTIFF) resources.

    The raster is read in place. When hosted, a raster outside the data lake
    is copied (MinIO source) or uploaded (folder share source) to
    ``<lake bucket>/<data id>/<file name>`` and the location updated.
    """

    data_type = "raster"

    def __init__(self, gdal: GDALResource, minio: MinIOResource):
        self.gdal = gdal
        self.minio = minio

    def inspect(self, resource: DataResource, mode: IngestMode) -> DataResource:
        data_type: RasterDataType = resource.data_type
        source = gdal_source_path(data_type.location)

        metadata = raster_metadata_from_gdalinfo(read_gdalinfo(self.gdal, source))
        self.resolve_epsg(metadata, resource)
        self.attach_projection(metadata, resource)

        if mode.persist:
            data_type.location = self._host(resource, data_type.location)

        resource.spatial_metadata = metadata
        return resource

    def _host(self, resource: DataResource, location):
        if isinstance(location, S3FileStore):
            if self.minio.in_lake(location):
                logger.info(f"Raster {location.s3_path} already in the data lake")
                return location
            return self.minio.copy_to_lake(location, lake_key(resource.data_id, location.file_name))

        if isinstance(location, FolderShare):
            return self.minio.upload_to_lake(
                location.file_path, lake_key(resource.data_id, location.file_path)
            )

        return location
