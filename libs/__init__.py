# =============================================================================
# Geospatial Ingest Shared Libraries
# =============================================================================
# This package contains shared libraries for the Geospatial Ingest Worker.
# See individual sub-packages for detailed documentation.
# =============================================================================

"""
Geospatial ingest shared libraries.

Sub-packages:
- models: Pydantic data models, job/status messages and settings
- inspection: Inspection strategy contract and dispatcher
- spatial_utils: GDAL output parsing, projection and table naming

Modules:
- errors: Ingest error taxonomy
- s3_utils: S3 and GDAL virtual file system path helpers
"""

__version__ = "0.1.0"
