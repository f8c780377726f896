# =============================================================================
# MinIO Resource - S3-Compatible Object Storage Operations
# =============================================================================
# Hosts raster sources in the data lake bucket: copies objects already on
# MinIO and uploads files read from a folder share.
# =============================================================================

from typing import Optional
import logging
from pathlib import Path

from dagster import ConfigurableResource
from minio import Minio
from minio.commonconfig import CopySource
from minio.error import S3Error
from pydantic import Field

from libs.errors import ExtractionError, PersistenceError
from libs.models.data import S3FileStore
from libs.s3_utils import build_s3_path

__all__ = ["MinIOResource"]

logger = logging.getLogger(__name__)

# S3 error code meaning the source object cannot be read
_MISSING_SOURCE_CODE = "NoSuchKey"


class MinIOResource(ConfigurableResource):
    """
    Resource for MinIO (S3-compatible object storage) operations.

    Configuration matches MinIOSettings from libs.models.config.

    Attributes:
        endpoint: MinIO server endpoint (host:port)
        access_key: Access key for authentication
        secret_key: Secret key for authentication
        use_ssl: Whether to use SSL/TLS (default: False)
        landing_bucket: Landing zone bucket name (default: "landing-zone")
        lake_bucket: Data lake bucket name (default: "data-lake")
    """

    endpoint: str = Field(..., description="MinIO server endpoint (host:port)")
    access_key: str = Field(..., description="Access key for authentication")
    secret_key: str = Field(..., description="Secret key for authentication")
    use_ssl: bool = Field(False, description="Whether to use SSL/TLS")
    landing_bucket: str = Field("landing-zone", description="Landing zone bucket name")
    lake_bucket: str = Field("data-lake", description="Data lake bucket name")

    def get_client(self) -> Minio:
        """
        Create a MinIO client instance.

        Returns:
            Configured Minio client
        """
        return Minio(
            self.endpoint,
            access_key=self.access_key,
            secret_key=self.secret_key,
            secure=self.use_ssl,
        )

    def in_lake(self, location: S3FileStore) -> bool:
        """Whether the location already points into the data lake bucket."""
        return location.bucket_name == self.lake_bucket

    def copy_to_lake(self, source: S3FileStore, s3_key: str) -> S3FileStore:
        """
        Copy an object into the data lake (server-side copy).

        Args:
            source: Object to copy
            s3_key: Destination key in the lake bucket

        Returns:
            Location of the copy

        Raises:
            ExtractionError: If the source object does not exist
            PersistenceError: If the copy fails for any other reason
        """
        client = self.get_client()
        logger.info(f"Copying {source.s3_path} to {build_s3_path(self.lake_bucket, s3_key)}")

        try:
            client.copy_object(
                self.lake_bucket,
                s3_key,
                CopySource(source.bucket_name, source.file_name),
            )
        except S3Error as exc:
            if exc.code == _MISSING_SOURCE_CODE:
                raise ExtractionError(
                    f"Source object {source.s3_path} not readable: {exc.code}"
                ) from exc
            raise PersistenceError(
                f"Failed to copy {source.s3_path} to lake bucket '{self.lake_bucket}': {exc}"
            ) from exc

        return S3FileStore(
            bucket_name=self.lake_bucket,
            file_name=s3_key,
            file_size=source.file_size,
            domain_name=source.domain_name,
        )

    def upload_to_lake(
        self,
        local_path: str,
        s3_key: str,
        content_type: Optional[str] = None,
    ) -> S3FileStore:
        """
        Upload a local file to the data lake.

        Args:
            local_path: Path to local file to upload
            s3_key: Destination object key in data lake bucket
            content_type: MIME type (default: inferred from extension)

        Returns:
            Location of the uploaded object

        Raises:
            ExtractionError: If local_path doesn't exist
            PersistenceError: If upload fails
        """
        client = self.get_client()

        path = Path(local_path)
        if not path.is_file():
            raise ExtractionError(f"Local file not found: {local_path}")

        if content_type is None:
            content_type = self._infer_content_type(path.suffix)

        file_size = path.stat().st_size
        logger.info(f"Uploading {local_path} ({file_size} bytes) to {build_s3_path(self.lake_bucket, s3_key)}")

        try:
            with open(path, "rb") as file_data:
                client.put_object(
                    self.lake_bucket,
                    s3_key,
                    file_data,
                    length=file_size,
                    content_type=content_type,
                )
        except S3Error as exc:
            raise PersistenceError(
                f"Failed to upload {local_path} to lake bucket '{self.lake_bucket}': {exc}"
            ) from exc

        return S3FileStore(
            bucket_name=self.lake_bucket,
            file_name=s3_key,
            file_size=file_size,
        )

    @staticmethod
    def _infer_content_type(suffix: str) -> str:
        """
        Infer MIME type from file extension.

        Args:
            suffix: File extension (e.g., ".tif", ".zip")

        Returns:
            MIME type string
        """
        content_types = {
            ".tif": "image/tiff",
            ".tiff": "image/tiff",
            ".json": "application/json",
            ".geojson": "application/geo+json",
            ".zip": "application/zip",
        }

        return content_types.get(suffix.lower(), "application/octet-stream")
