# =============================================================================
# GeoJSON Inspector
# =============================================================================
# Inspects GeoJSON Data Resources and loads them into the feature store.
# GeoJSON is only processed when the job asks for the data to be hosted;
# a metadata-only job leaves the resource untouched.
# =============================================================================

import json
import logging
import tempfile
from pathlib import Path
from typing import Optional

from libs.errors import ExtractionError
from libs.inspection import InspectorStrategy
from libs.models.data import DataResource, GeoJsonDataType, IngestMode
from libs.models.spatial import SpatialMetadata
from libs.spatial_utils import DataIdTableMapping, vector_metadata_from_ogrinfo

from ..resources import GDALResource, PostGISResource
from .common import gdal_source_path, read_ogrinfo

__all__ = ["GeoJsonInspector"]

logger = logging.getLogger(__name__)

CONTENT_FILE_NAME = "content.geojson"


class GeoJsonInspector(InspectorStrategy):
    """
    Inspection strategy for ``geojson`` resources.

    Sources, in order of precedence:
    - inline ``geoJsonContent`` (written to a temporary file for GDAL)
    - an external ``location`` (read in place)
    - ``databaseTableName`` referencing a table already in the feature store

    Content is loaded into the table named after the data id, and
    ``databaseTableName`` is set to it.
    """

    data_type = "geojson"

    def __init__(
        self,
        gdal: GDALResource,
        postgis: PostGISResource,
        temp_path: Optional[str] = None,
    ):
        self.gdal = gdal
        self.postgis = postgis
        self.temp_path = temp_path

    def inspect(self, resource: DataResource, mode: IngestMode) -> DataResource:
        if not mode.persist:
            logger.info(f"GeoJSON data {resource.data_id} not hosted; skipping inspection")
            return resource

        data_type: GeoJsonDataType = resource.data_type

        if data_type.geo_json_content is not None:
            with tempfile.TemporaryDirectory(prefix="geojson_", dir=self._temp_dir()) as tmp:
                source = self._write_content(data_type.geo_json_content, Path(tmp))
                metadata, table = self._load(resource, source)
        elif data_type.location is not None:
            metadata, table = self._load(resource, gdal_source_path(data_type.location))
        else:
            table = data_type.database_table_name
            metadata = self._describe_table(table)

        self.resolve_epsg(metadata, resource)
        self.attach_projection(metadata, resource)

        data_type.database_table_name = table
        resource.spatial_metadata = metadata
        return resource

    def _temp_dir(self) -> Optional[str]:
        if not self.temp_path:
            return None
        Path(self.temp_path).mkdir(parents=True, exist_ok=True)
        return self.temp_path

    @staticmethod
    def _write_content(content: str, directory: Path) -> str:
        try:
            document = json.loads(content)
        except ValueError as exc:
            raise ExtractionError(f"GeoJSON content is not valid JSON: {exc}") from exc
        if not isinstance(document, dict) or "type" not in document:
            raise ExtractionError("GeoJSON content must be a JSON object with a 'type' member")

        # Fixed name: the data id comes from the message and is not a safe path
        path = directory / CONTENT_FILE_NAME
        path.write_text(content, encoding="utf-8")
        return str(path)

    def _load(self, resource: DataResource, source: str) -> tuple[SpatialMetadata, str]:
        metadata = vector_metadata_from_ogrinfo(read_ogrinfo(self.gdal, source))
        table = DataIdTableMapping.from_data_id(resource.data_id).table_name
        self.postgis.persist_features(self.gdal, source, table)
        return metadata, table

    def _describe_table(self, table: str) -> SpatialMetadata:
        if not self.postgis.table_exists(table):
            raise ExtractionError(
                f"Feature table {self.postgis.qualified_table(table)} does not exist"
            )
        return vector_metadata_from_ogrinfo(
            read_ogrinfo(
                self.gdal,
                self.postgis.ogr_connection_string(),
                layer=self.postgis.qualified_table(table),
            )
        )
