# =============================================================================
# Shapefile Inspector
# =============================================================================
# Inspects zipped ESRI Shapefiles through GDAL's /vsizip/ file system and
# loads hosted ones into the feature store.
# =============================================================================

import logging

from libs.errors import ExtractionError
from libs.inspection import InspectorStrategy
from libs.models.data import DataResource, IngestMode, ShapefileDataType
from libs.s3_utils import to_vsizip
from libs.spatial_utils import DataIdTableMapping, first_layer_name, vector_metadata_from_ogrinfo
from libs.spatial_utils.gdal_json import load_gdal_json

from ..resources import GDALResource, PostGISResource
from .common import gdal_source_path, read_ogrinfo

__all__ = ["ShapefileInspector"]

logger = logging.getLogger(__name__)

SHAPEFILE_DRIVER = "ESRI Shapefile"


class ShapefileInspector(InspectorStrategy):
    """
    Inspection strategy for ``shapefile`` resources (zip archives).

    Only the first layer of the archive is inspected and loaded; its table
    is ``<layer>_<data id>``.
    """

    data_type = "shapefile"

    def __init__(self, gdal: GDALResource, postgis: PostGISResource):
        self.gdal = gdal
        self.postgis = postgis

    def inspect(self, resource: DataResource, mode: IngestMode) -> DataResource:
        data_type: ShapefileDataType = resource.data_type
        source = to_vsizip(gdal_source_path(data_type.location))

        info = load_gdal_json(read_ogrinfo(self.gdal, source), "ogrinfo")
        driver = info.get("driverShortName")
        if driver and driver != SHAPEFILE_DRIVER:
            raise ExtractionError(f"Archive holds {driver} data, not a shapefile")

        layer = first_layer_name(info)
        metadata = vector_metadata_from_ogrinfo(info, layer_name=layer)
        self.resolve_epsg(metadata, resource)
        self.attach_projection(metadata, resource)

        if mode.persist:
            table = DataIdTableMapping.from_data_id(resource.data_id, layer_name=layer).table_name
            self.postgis.persist_features(self.gdal, source, table, source_layer=layer)
            data_type.database_table_name = table

        resource.spatial_metadata = metadata
        return resource
