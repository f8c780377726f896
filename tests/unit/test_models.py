"""
Unit tests for data models.

Tests validation logic, wire names and behavior of the spatial, Data
Resource, job and status models.
"""

import json

import pytest
from pydantic import ValidationError

from libs.errors import MalformedMessageError, UnsupportedTypeError
from libs.models import (
    Bounds,
    DataResource,
    DataType,
    FolderShare,
    GeoJsonDataType,
    IngestJob,
    IngestMode,
    JobMessage,
    JobStatus,
    RasterDataType,
    S3FileStore,
    ShapefileDataType,
    SpatialMetadata,
    StatusUpdate,
    decode_job,
    recover_job_id,
)
from libs.models.status import JobProgress


# =============================================================================
# Bounds Tests
# =============================================================================


class TestBounds:
    """Test Bounds validation and helpers."""

    def test_minx_greater_than_maxx_raises_error(self):
        """Test that minx > maxx raises ValueError."""
        with pytest.raises(ValueError, match="minx.*must be less than or equal to maxx"):
            Bounds(minx=180.0, miny=-90.0, maxx=-180.0, maxy=90.0)

    def test_point_bounds_allowed(self):
        """Test that equal min/max values are allowed."""
        point = Bounds(minx=1.0, miny=2.0, maxx=1.0, maxy=2.0)
        assert point.minx == point.maxx
        assert point.miny == point.maxy

    def test_union_encloses_all_boxes(self):
        """Test that union returns the smallest enclosing box."""
        union = Bounds.union([
            Bounds(minx=0.0, miny=0.0, maxx=1.0, maxy=1.0),
            Bounds(minx=-2.0, miny=0.5, maxx=0.5, maxy=3.0),
        ])
        assert union == Bounds(minx=-2.0, miny=0.0, maxx=1.0, maxy=3.0)

    def test_union_of_nothing_is_none(self):
        assert Bounds.union([]) is None


# =============================================================================
# Spatial Metadata Tests
# =============================================================================


class TestSpatialMetadata:
    """Test SpatialMetadata validation and serialization."""

    def test_empty_metadata_is_valid(self):
        """Test that metadata without a box is valid."""
        metadata = SpatialMetadata()
        assert metadata.bounds is None

    def test_partial_box_rejected(self):
        """Test that setting only part of the box raises."""
        with pytest.raises(ValidationError, match="all of min_x"):
            SpatialMetadata(min_x=0.0, min_y=0.0)

    def test_inverted_box_rejected(self):
        """Test that min > max raises."""
        with pytest.raises(ValueError, match="must be less than or equal"):
            SpatialMetadata(min_x=5.0, min_y=0.0, max_x=1.0, max_y=1.0)

    def test_negative_feature_count_rejected(self):
        with pytest.raises(ValidationError):
            SpatialMetadata(num_features=-1)

    def test_from_bounds_round_trip(self):
        """Test that from_bounds and bounds agree."""
        bounds = Bounds(minx=1.0, miny=2.0, maxx=3.0, maxy=4.0)
        metadata = SpatialMetadata.from_bounds(bounds, epsg_code=4326, num_features=3)
        assert metadata.bounds == bounds
        assert metadata.epsg_code == 4326
        assert metadata.num_features == 3

    def test_wire_names_are_camel_case(self):
        """Test that serialization uses camelCase aliases and accepts them."""
        metadata = SpatialMetadata(
            min_x=1.0, min_y=2.0, max_x=3.0, max_y=4.0,
            epsg_code=32633,
            projected_spatial_metadata=SpatialMetadata(
                min_x=10.0, min_y=20.0, max_x=30.0, max_y=40.0, epsg_code=4326
            ),
        )
        dumped = metadata.model_dump(by_alias=True, exclude_none=True)
        assert dumped["minX"] == 1.0
        assert dumped["epsgCode"] == 32633
        assert dumped["projectedSpatialMetadata"]["epsgCode"] == 4326

        assert SpatialMetadata.model_validate(dumped) == metadata


# =============================================================================
# Data Resource Tests
# =============================================================================


class TestDataResource:
    """Test Data Resource decoding and identity assignment."""

    def test_geojson_type_decoded(self, geojson_content):
        """Test that the geojson tag decodes to GeoJsonDataType."""
        resource = DataResource.model_validate(
            {"dataType": {"type": "geojson", "geoJsonContent": geojson_content}}
        )
        assert isinstance(resource.data_type, GeoJsonDataType)
        assert resource.data_type.geo_json_content == geojson_content
        assert resource.data_id is None

    def test_raster_location_discriminated(self):
        """Test that file locations decode by their type tag."""
        resource = DataResource.model_validate({
            "dataType": {
                "type": "raster",
                "location": {"type": "folder_share", "filePath": "/mnt/share/dem.tif"},
            }
        })
        assert isinstance(resource.data_type, RasterDataType)
        assert isinstance(resource.data_type.location, FolderShare)

    def test_shapefile_s3_location(self):
        resource = DataResource.model_validate({
            "dataType": {
                "type": "shapefile",
                "location": {"type": "s3", "bucketName": "landing-zone", "fileName": "roads.zip"},
            }
        })
        assert isinstance(resource.data_type, ShapefileDataType)
        assert resource.data_type.location.s3_path == "s3://landing-zone/roads.zip"

    def test_unknown_type_decodes_to_generic_descriptor(self):
        """Test that an unknown tag is kept for the dispatcher to reject."""
        resource = DataResource.model_validate(
            {"dataType": {"type": "UnknownFormat", "someField": 1}}
        )
        assert type(resource.data_type) is DataType
        assert resource.data_type.type == "UnknownFormat"

    def test_geojson_without_source_rejected(self):
        """Test that GeoJSON needs content, a location or a table."""
        with pytest.raises(ValidationError, match="geoJsonContent"):
            DataResource.model_validate({"dataType": {"type": "geojson"}})

    def test_raster_without_location_rejected(self):
        with pytest.raises(ValidationError):
            DataResource.model_validate({"dataType": {"type": "raster"}})

    def test_dump_keeps_type_specific_fields(self, geojson_content):
        """Test that serialization includes the subclass fields."""
        resource = DataResource(
            data_id="abc",
            data_type=GeoJsonDataType(geo_json_content=geojson_content),
        )
        dumped = resource.model_dump(mode="json", by_alias=True, exclude_none=True)
        assert dumped["dataId"] == "abc"
        assert dumped["dataType"]["type"] == "geojson"
        assert dumped["dataType"]["geoJsonContent"] == geojson_content

    def test_assign_id_when_absent(self, id_factory):
        """Test that a missing id is assigned from the factory."""
        resource = DataResource(data_type=DataType(type="geojson-ish"))
        assert resource.assign_id(id_factory) == "data-1"
        assert resource.data_id == "data-1"

    def test_assign_id_is_idempotent(self, id_factory):
        """Test that repeated assignment keeps the first id."""
        resource = DataResource(data_type=DataType(type="x"))
        first = resource.assign_id(id_factory)
        second = resource.assign_id(id_factory)
        assert first == second
        assert id_factory.calls == 1

    def test_assign_id_never_overwrites(self, id_factory):
        """Test that an existing id is kept and the factory not called."""
        resource = DataResource(data_id="existing", data_type=DataType(type="x"))
        assert resource.assign_id(id_factory) == "existing"
        assert id_factory.calls == 0

    def test_assign_id_replaces_empty_id(self, id_factory):
        """Test that an empty id is treated as absent."""
        resource = DataResource(data_id="", data_type=DataType(type="x"))
        assert resource.assign_id(id_factory) == "data-1"
        assert id_factory.calls == 1


class TestIngestMode:
    def test_from_host(self):
        assert IngestMode.from_host(True) is IngestMode.METADATA_AND_PERSIST
        assert IngestMode.from_host(False) is IngestMode.METADATA_ONLY

    def test_persist_flag(self):
        assert IngestMode.METADATA_AND_PERSIST.persist is True
        assert IngestMode.METADATA_ONLY.persist is False


class TestS3FileStore:
    def test_empty_bucket_rejected(self):
        with pytest.raises(ValidationError):
            S3FileStore(bucket_name="", file_name="a.tif")


# =============================================================================
# Job Decoding Tests
# =============================================================================


class TestDecodeJob:
    """Test decode_job and recover_job_id."""

    def test_decode_valid_job(self, geojson_job_dict, message_factory):
        job = decode_job(message_factory(geojson_job_dict))
        assert isinstance(job, IngestJob)
        assert job.job_id == "job-geojson-1"
        assert job.mode is IngestMode.METADATA_ONLY
        assert job.data.metadata == {"name": "Points"}

    def test_decode_hosted_job(self, raster_job_dict, message_factory):
        job = decode_job(message_factory(raster_job_dict))
        assert job.mode is IngestMode.METADATA_AND_PERSIST
        assert isinstance(job.data.data_type.location, S3FileStore)

    def test_decode_bytes_body(self, geojson_job_dict):
        message = JobMessage(key=None, value=json.dumps(geojson_job_dict).encode("utf-8"))
        assert decode_job(message).job_id == "job-geojson-1"

    def test_invalid_json_raises_malformed(self, message_factory):
        with pytest.raises(MalformedMessageError):
            decode_job(message_factory("{not valid"))

    def test_missing_job_id_raises_malformed(self, geojson_job_dict, message_factory):
        del geojson_job_dict["jobId"]
        with pytest.raises(MalformedMessageError, match="validation error"):
            decode_job(message_factory(geojson_job_dict))

    def test_wrong_job_type_raises_malformed(self, geojson_job_dict, message_factory):
        geojson_job_dict["jobType"] = "delete"
        with pytest.raises(MalformedMessageError):
            decode_job(message_factory(geojson_job_dict))

    def test_unknown_data_type_still_decodes(self, geojson_job_dict, message_factory):
        """Test that an unsupported tag is not a decoding error."""
        geojson_job_dict["data"]["dataType"] = {"type": "UnknownFormat"}
        job = decode_job(message_factory(geojson_job_dict))
        assert job.data.data_type.type == "UnknownFormat"

    def test_recover_prefers_message_key(self, message_factory):
        message = message_factory('{"jobId": "from-body"', key="from-key")
        assert recover_job_id(message) == "from-key"

    def test_recover_from_body(self, message_factory):
        message = message_factory({"jobId": "from-body", "data": "garbage"})
        assert recover_job_id(message) == "from-body"

    def test_recover_nothing_from_invalid_json(self, message_factory):
        assert recover_job_id(message_factory("{not valid")) is None

    def test_recover_nothing_from_non_object(self, message_factory):
        assert recover_job_id(message_factory("[1, 2]")) is None


# =============================================================================
# Status Model Tests
# =============================================================================


class TestStatusUpdate:
    """Test status update wire shapes."""

    def test_running_message(self):
        assert StatusUpdate.running("job-1").to_message() == {
            "jobId": "job-1",
            "status": "Running",
            "progress": {"percentComplete": 0},
        }

    def test_success_message(self):
        assert StatusUpdate.success("job-1", "data-1").to_message() == {
            "jobId": "job-1",
            "status": "Success",
            "progress": {"percentComplete": 100},
            "result": {"type": "data", "dataId": "data-1"},
        }

    def test_error_message(self):
        error = UnsupportedTypeError("UnknownFormat", ["geojson", "raster"])
        message = StatusUpdate.error("job-1", error).to_message()
        assert message["status"] == "Error"
        assert "progress" not in message
        assert message["result"]["type"] == "error"
        assert message["result"]["message"] == "The Data type is not supported for Ingest."
        assert message["result"]["errorType"] == "UnsupportedTypeError"
        assert "UnknownFormat" in message["result"]["details"]

    def test_progress_bounds(self):
        with pytest.raises(ValidationError):
            JobProgress(percent_complete=101)
        with pytest.raises(ValidationError):
            JobProgress(percent_complete=-1)

    def test_terminal_statuses(self):
        assert not JobStatus.RUNNING.is_terminal
        assert JobStatus.SUCCESS.is_terminal
        assert JobStatus.ERROR.is_terminal

    def test_result_discriminated_on_input(self):
        update = StatusUpdate.model_validate({
            "jobId": "job-1",
            "status": "Success",
            "result": {"type": "data", "dataId": "d"},
        })
        assert update.result.data_id == "d"
