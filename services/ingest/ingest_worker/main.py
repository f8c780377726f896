"""Ingest Worker - Process Entry Point.

Wires settings, resources, inspection strategies, the worker pool and the
Service Bus listener together, then runs until SIGINT/SIGTERM.
"""

import argparse
import logging
from functools import partial
from typing import Optional, Sequence

from azure.servicebus import ServiceBusClient

from libs.inspection import InspectorRegistry
from libs.models.config import (
    GDALSettings,
    MinIOSettings,
    MongoSettings,
    PostGISSettings,
    ServiceBusSettings,
    WorkerSettings,
)
from libs.models.job import JobMessage

from .identity import UUIDFactory
from .inspectors import GeoJsonInspector, GeoTiffInspector, ShapefileInspector
from .listener import IngestListener
from .messaging import ServiceBusStatusPublisher, StatusPublisher
from .pool import WorkerPool
from .resources import GDALResource, MinIOResource, MongoDBResource, PostGISResource
from .worker import CompletionCallback, IngestWorker, ResourceCatalog

__all__ = ["configure_logging", "build_registry", "build_worker", "main"]

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # Azure SDK logs every AMQP frame at INFO
    logging.getLogger("azure").setLevel(logging.WARNING)


# =============================================================================
# Resource Wiring
# =============================================================================

def build_gdal(minio: MinIOSettings, gdal: GDALSettings, worker: WorkerSettings) -> GDALResource:
    return GDALResource(
        aws_access_key_id=minio.access_key,
        aws_secret_access_key=minio.secret_key,
        aws_s3_endpoint=minio.endpoint_url,
        gdal_data_path=gdal.gdal_data_path,
        proj_lib_path=gdal.proj_lib_path,
        timeout_seconds=worker.gdal_timeout_seconds,
    )


def build_minio(settings: MinIOSettings) -> MinIOResource:
    return MinIOResource(
        endpoint=settings.endpoint,
        access_key=settings.access_key,
        secret_key=settings.secret_key,
        use_ssl=settings.use_ssl,
        landing_bucket=settings.landing_bucket,
        lake_bucket=settings.lake_bucket,
    )


def build_postgis(settings: PostGISSettings) -> PostGISResource:
    return PostGISResource(
        host=settings.host,
        port=settings.port,
        user=settings.user,
        password=settings.password,
        database=settings.database,
        schema_name=settings.schema_name,
    )


def build_catalog(settings: MongoSettings) -> MongoDBResource:
    catalog = MongoDBResource(
        connection_string=settings.connection_string,
        database=settings.database,
    )
    catalog.ensure_indexes()
    return catalog


def build_registry(
    gdal: GDALResource,
    minio: MinIOResource,
    postgis: PostGISResource,
    temp_path: Optional[str] = None,
) -> InspectorRegistry:
    """Registry with the GeoJSON, GeoTIFF and Shapefile strategies."""
    return InspectorRegistry([
        GeoJsonInspector(gdal, postgis, temp_path=temp_path),
        GeoTiffInspector(gdal, minio),
        ShapefileInspector(gdal, postgis),
    ])


def build_worker(
    message: JobMessage,
    callback: CompletionCallback,
    *,
    registry: InspectorRegistry,
    publisher: StatusPublisher,
    catalog: Optional[ResourceCatalog] = None,
) -> IngestWorker:
    return IngestWorker(
        message,
        registry,
        publisher,
        callback,
        id_factory=UUIDFactory(),
        catalog=catalog,
    )


# =============================================================================
# Entry Point
# =============================================================================

def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ingest-worker",
        description="Consume geospatial ingest jobs from Service Bus.",
    )
    parser.add_argument("--log-level", default=None, help="Overrides INGEST_LOG_LEVEL")
    parser.add_argument(
        "--max-workers", type=int, default=None, help="Overrides INGEST_MAX_CONCURRENT_JOBS"
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    worker_settings = WorkerSettings()
    configure_logging(args.log_level or worker_settings.log_level)

    minio_settings = MinIOSettings()
    bus_settings = ServiceBusSettings()

    gdal = build_gdal(minio_settings, GDALSettings(), worker_settings)
    version = gdal.version()
    if not version.success:
        raise SystemExit(f"GDAL is not available: {version.stderr.strip()}")
    logger.info(version.stdout.strip())

    registry = build_registry(
        gdal,
        build_minio(minio_settings),
        build_postgis(PostGISSettings()),
        temp_path=worker_settings.temp_path,
    )
    logger.info(f"Supported data types: {', '.join(registry.supported_types())}")

    catalog = build_catalog(MongoSettings()) if worker_settings.catalog_enabled else None
    if catalog is None:
        logger.warning("Resource catalog disabled (INGEST_CATALOG_ENABLED=false)")

    client = ServiceBusClient.from_connection_string(bus_settings.connection_string)
    publisher = ServiceBusStatusPublisher(client, bus_settings.status_queue)

    pool = WorkerPool(
        max_workers=args.max_workers or worker_settings.max_concurrent_jobs,
        worker_factory=partial(
            build_worker, registry=registry, publisher=publisher, catalog=catalog
        ),
    )
    listener = IngestListener(client, bus_settings, pool)
    listener.install_signal_handlers()

    with client:
        try:
            listener.run()
        finally:
            publisher.close()


if __name__ == "__main__":
    main()
