"""
Shared pytest fixtures for the ingest worker tests.

Provides job payloads, GDAL JSON documents and in-memory collaborators
(status publisher, completion callback, id factory) so that tests never
need Service Bus, GDAL or a database.
"""

import json
from typing import Optional

import pytest

from libs.models import JobMessage, StatusUpdate


# =============================================================================
# In-Memory Collaborators
# =============================================================================

class RecordingPublisher:
    """Status publisher that keeps every update in memory."""

    def __init__(self, fail_on: Optional[set] = None):
        self.updates: list[StatusUpdate] = []
        self.fail_on = fail_on or set()

    def publish(self, update: StatusUpdate) -> None:
        if update.status.value in self.fail_on:
            raise ConnectionError(f"status queue unavailable for {update.status.value}")
        self.updates.append(update)

    @property
    def messages(self) -> list[dict]:
        return [update.to_message() for update in self.updates]

    @property
    def statuses(self) -> list[str]:
        return [update.status.value for update in self.updates]


class RecordingCallback:
    """Completion callback that records job keys."""

    def __init__(self):
        self.completed: list[Optional[str]] = []

    def on_complete(self, job_key: Optional[str]) -> None:
        self.completed.append(job_key)


class SequenceIdFactory:
    """Id factory issuing predictable ids."""

    def __init__(self, prefix: str = "data"):
        self.prefix = prefix
        self.calls = 0

    def new_id(self) -> str:
        self.calls += 1
        return f"{self.prefix}-{self.calls}"


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def publisher_factory():
    """Build publishers that raise for the given statuses."""
    return RecordingPublisher


@pytest.fixture
def callback():
    return RecordingCallback()


@pytest.fixture
def id_factory():
    return SequenceIdFactory()


# =============================================================================
# Job Payload Fixtures
# =============================================================================

GEOJSON_CONTENT = json.dumps({
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [10.0, 20.0]},
            "properties": {"name": "a"},
        },
        {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [12.5, 22.5]},
            "properties": {"name": "b"},
        },
    ],
})


@pytest.fixture
def geojson_content():
    return GEOJSON_CONTENT


@pytest.fixture
def geojson_job_dict():
    """Ingest job for inline GeoJSON without a data id."""
    return {
        "jobId": "job-geojson-1",
        "jobType": "ingest",
        "host": False,
        "data": {
            "dataType": {"type": "geojson", "geoJsonContent": GEOJSON_CONTENT},
            "metadata": {"name": "Points"},
        },
    }


@pytest.fixture
def raster_job_dict():
    """Hosted ingest job for a GeoTIFF on MinIO."""
    return {
        "jobId": "job-raster-1",
        "jobType": "ingest",
        "host": True,
        "data": {
            "dataId": "raster-1",
            "dataType": {
                "type": "raster",
                "location": {
                    "type": "s3",
                    "bucketName": "landing-zone",
                    "fileName": "uploads/dem.tif",
                    "fileSize": 2048,
                },
            },
        },
    }


@pytest.fixture
def shapefile_job_dict():
    """Hosted ingest job for a zipped shapefile on a folder share."""
    return {
        "jobId": "job-shp-1",
        "jobType": "ingest",
        "host": True,
        "data": {
            "dataId": "shp-1",
            "dataType": {
                "type": "shapefile",
                "location": {"type": "folder_share", "filePath": "/mnt/share/roads.zip"},
            },
        },
    }


def make_message(body, key: Optional[str] = None) -> JobMessage:
    """Build a JobMessage from a dict (serialized) or raw text."""
    value = body if isinstance(body, str) else json.dumps(body)
    return JobMessage(key=key, value=value, source="ingest-jobs")


@pytest.fixture
def message_factory():
    return make_message


# =============================================================================
# GDAL JSON Fixtures
# =============================================================================

WGS84_WKT = (
    'GEOGCRS["WGS 84",ENSEMBLE["World Geodetic System 1984 ensemble",'
    'ELLIPSOID["WGS 84",6378137,298.257223563,LENGTHUNIT["metre",1]]],'
    'CS[ellipsoidal,2],ANGLEUNIT["degree",0.0174532925199433],ID["EPSG",4326]]'
)

UTM33N_WKT1 = (
    'PROJCS["WGS 84 / UTM zone 33N",GEOGCS["WGS 84",DATUM["WGS_1984",'
    'SPHEROID["WGS 84",6378137,298.257223563,AUTHORITY["EPSG","7030"]],'
    'AUTHORITY["EPSG","6326"]],AUTHORITY["EPSG","4326"]],'
    'UNIT["metre",1,AUTHORITY["EPSG","9001"]],AUTHORITY["EPSG","32633"]]'
)


@pytest.fixture
def wgs84_wkt():
    return WGS84_WKT


@pytest.fixture
def utm33n_wkt():
    return UTM33N_WKT1


@pytest.fixture
def ogrinfo_points():
    """ogrinfo -json document for a two-point GeoJSON layer."""
    return {
        "description": "points.geojson",
        "driverShortName": "GeoJSON",
        "layers": [
            {
                "name": "points",
                "featureCount": 2,
                "geometryFields": [
                    {
                        "name": "",
                        "type": "Point",
                        "extent": [10.0, 20.0, 12.5, 22.5],
                        "coordinateSystem": {
                            "wkt": WGS84_WKT,
                            "projjson": {"id": {"authority": "EPSG", "code": 4326}},
                        },
                    }
                ],
            }
        ],
    }


@pytest.fixture
def ogrinfo_shapefile():
    """ogrinfo -json document for a shapefile archive in UTM 33N."""
    return {
        "description": "/vsizip//mnt/share/roads.zip",
        "driverShortName": "ESRI Shapefile",
        "layers": [
            {
                "name": "Roads",
                "featureCount": 42,
                "geometryFields": [
                    {
                        "name": "",
                        "type": "LineString",
                        "extent": [500000.0, 4649776.0, 501000.0, 4650776.0],
                        "coordinateSystem": {"wkt": UTM33N_WKT1},
                    }
                ],
            }
        ],
    }


@pytest.fixture
def gdalinfo_utm():
    """gdalinfo -json document for a UTM 33N raster."""
    return {
        "description": "/vsis3/landing-zone/uploads/dem.tif",
        "driverShortName": "GTiff",
        "coordinateSystem": {"wkt": UTM33N_WKT1},
        "cornerCoordinates": {
            "upperLeft": [500000.0, 4650776.0],
            "lowerLeft": [500000.0, 4649776.0],
            "lowerRight": [501000.0, 4649776.0],
            "upperRight": [501000.0, 4650776.0],
            "center": [500500.0, 4650276.0],
        },
        "stac": {"proj:epsg": 32633},
    }
