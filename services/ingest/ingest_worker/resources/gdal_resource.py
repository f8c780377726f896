# =============================================================================
# GDAL Resource - CLI wrapper for spatial data inspection and loading
# =============================================================================
# Provides a thin, stateless wrapper around the GDAL command line tools used
# by the inspection strategies (ogrinfo, gdalinfo, ogr2ogr).
# =============================================================================

from dataclasses import dataclass
import os
import subprocess
from typing import Dict, Optional
from urllib.parse import urlparse
import logging

from dagster import ConfigurableResource
from pydantic import Field

__all__ = ["GDALResource", "GDALResult"]

logger = logging.getLogger(__name__)

TIMEOUT_RETURN_CODE = -1


@dataclass
class GDALResult:
    """
    Result of a GDAL command.

    A command that could not be started or that exceeded the configured
    timeout is reported as a failed result rather than raised.
    """
    success: bool
    command: list[str]
    stdout: str
    stderr: str
    return_code: int
    output_path: Optional[str] = None
    timed_out: bool = False


class GDALResource(ConfigurableResource):
    """
    Resource for GDAL CLI operations.

    Sources on MinIO are read in place through GDAL's /vsis3/ virtual file
    system, so credentials and endpoint are passed to every subprocess.

    Configuration:
        aws_access_key_id: MinIO access key for /vsis3/ access
        aws_secret_access_key: MinIO secret key
        aws_s3_endpoint: MinIO endpoint (host:port or URL)
        gdal_data_path: Path to GDAL data files (optional)
        proj_lib_path: Path to PROJ data files (optional)
        timeout_seconds: Per-command timeout, 0 disables it

    Example:
        >>> gdal = GDALResource(aws_s3_endpoint="http://minio:9000", timeout_seconds=600)
        >>> result = gdal.ogrinfo("/vsis3/landing-zone/roads.geojson")
        >>> if not result.success:
        ...     logger.error(f"ogrinfo failed: {result.stderr}")
    """

    aws_access_key_id: str = Field("", description="MinIO access key for /vsis3/ S3 access")
    aws_secret_access_key: str = Field("", description="MinIO secret key for /vsis3/ S3 access")
    aws_s3_endpoint: str = Field(
        "",
        description="MinIO endpoint for GDAL /vsis3/ access (host:port, or URL like http://minio:9000)",
    )
    gdal_data_path: str = Field("", description="Path to GDAL data files (optional)")
    proj_lib_path: str = Field("", description="Path to PROJ data files (optional)")
    timeout_seconds: int = Field(0, ge=0, description="Per-command timeout in seconds (0 = none)")

    def _get_env(self) -> Dict[str, str]:
        """Build environment variables for GDAL subprocess calls.

        GDAL expects AWS_S3_ENDPOINT as host[:port], so a URL is reduced to
        its netloc and its scheme sets AWS_HTTPS. Path-style addressing is
        used for MinIO unless the environment overrides it.
        """
        env = os.environ.copy()

        if self.aws_access_key_id:
            env["AWS_ACCESS_KEY_ID"] = self.aws_access_key_id
        if self.aws_secret_access_key:
            env["AWS_SECRET_ACCESS_KEY"] = self.aws_secret_access_key

        if self.aws_s3_endpoint:
            raw_endpoint = self.aws_s3_endpoint.strip()
            endpoint_host = raw_endpoint
            https_hint: Optional[bool] = None

            parsed = urlparse(raw_endpoint)
            if parsed.scheme in {"http", "https"}:
                endpoint_host = parsed.netloc
                https_hint = parsed.scheme == "https"
            elif "://" in raw_endpoint:
                endpoint_host = raw_endpoint.split("://", 1)[1]

            env["AWS_S3_ENDPOINT"] = endpoint_host.strip().rstrip("/").split("/", 1)[0]
            env.setdefault("AWS_VIRTUAL_HOSTING", "FALSE")
            if "AWS_HTTPS" not in env:
                env["AWS_HTTPS"] = "YES" if https_hint else "NO"

        if self.gdal_data_path:
            env["GDAL_DATA"] = self.gdal_data_path
        if self.proj_lib_path:
            env["PROJ_LIB"] = self.proj_lib_path

        return env

    def ogr2ogr(
        self,
        input_path: str,
        output_path: str,
        output_format: str = "PostgreSQL",
        target_crs: Optional[str] = None,
        layer_name: Optional[str] = None,
        source_layer: Optional[str] = None,
        options: Optional[Dict[str, str]] = None,
    ) -> GDALResult:
        """
        Convert vector data using ogr2ogr.

        Args:
            input_path: Source path (local, /vsis3/, /vsizip/, ...)
            output_path: Destination (file path or PG: connection string)
            output_format: GDAL driver name (default: PostgreSQL)
            target_crs: Target CRS (e.g. "EPSG:4326"), default keeps the source CRS
            layer_name: Output layer/table name (-nln)
            source_layer: Only copy this layer of the source
            options: Additional options as flag → value ("" for bare flags)

        Returns:
            GDALResult with command execution details and success status
        """
        cmd = ["ogr2ogr", "-f", output_format]

        if target_crs:
            cmd.extend(["-t_srs", target_crs])
        if layer_name:
            cmd.extend(["-nln", layer_name])

        if options:
            for key, value in options.items():
                cmd.append(key)
                if value:
                    cmd.append(value)

        cmd.extend([output_path, input_path])
        if source_layer:
            cmd.append(source_layer)

        # A PostgreSQL destination is a connection string, not an output file
        track_output = None if output_format == "PostgreSQL" else output_path

        return self._run_command(cmd, track_output)

    def ogrinfo(self, input_path: str, layer: Optional[str] = None) -> GDALResult:
        """
        Describe a vector dataset as JSON (layers, extents, CRS, feature counts).

        Args:
            input_path: Path or connection string of the dataset
            layer: Restrict output to this layer

        Returns:
            GDALResult with the ``ogrinfo -json`` document in stdout
        """
        cmd = ["ogrinfo", "-json", "-ro", "-so", input_path]
        if layer:
            cmd.append(layer)
        return self._run_command(cmd)

    def gdalinfo(self, input_path: str) -> GDALResult:
        """
        Describe a raster dataset as JSON (corners, CRS, bands).

        Returns:
            GDALResult with the ``gdalinfo -json`` document in stdout
        """
        cmd = ["gdalinfo", "-json", input_path]
        return self._run_command(cmd)

    def version(self) -> GDALResult:
        """Report the installed GDAL version (``gdalinfo --version``)."""
        return self._run_command(["gdalinfo", "--version"])

    def _run_command(
        self,
        cmd: list[str],
        output_path: Optional[str] = None,
    ) -> GDALResult:
        """
        Execute a GDAL command via subprocess.

        Args:
            cmd: Command and arguments as list
            output_path: Optional path to track as output (for success verification)

        Returns:
            GDALResult with execution details, stdout, stderr, and return code
        """
        timeout = self.timeout_seconds or None
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                env=self._get_env(),
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as exc:
            logger.error(f"{cmd[0]} timed out after {timeout}s")
            return GDALResult(
                success=False,
                command=cmd,
                stdout=exc.stdout if isinstance(exc.stdout, str) else "",
                stderr=f"{cmd[0]} timed out after {timeout} seconds",
                return_code=TIMEOUT_RETURN_CODE,
                timed_out=True,
            )
        except FileNotFoundError as exc:
            logger.error(f"GDAL binary not found: {cmd[0]}")
            return GDALResult(
                success=False,
                command=cmd,
                stdout="",
                stderr=str(exc),
                return_code=TIMEOUT_RETURN_CODE,
            )

        if result.returncode != 0:
            logger.debug(f"{cmd[0]} exited with {result.returncode}: {result.stderr.strip()}")

        return GDALResult(
            success=result.returncode == 0,
            command=cmd,
            stdout=result.stdout,
            stderr=result.stderr,
            return_code=result.returncode,
            output_path=output_path if result.returncode == 0 else None,
        )
