# =============================================================================
# Spatial Metadata Projection
# =============================================================================
# Computes the EPSG:4326 copy of a SpatialMetadata bounding box using pyproj.
# =============================================================================

import logging
import math
from typing import Optional, Union

from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

from libs.errors import MetadataProjectionError
from libs.models.spatial import CANONICAL_EPSG_CODE, Bounds, SpatialMetadata

__all__ = ["source_crs", "transform_bounds", "project_spatial_metadata"]

logger = logging.getLogger(__name__)

# Edge densification for transform_bounds; keeps curved edges inside the box
DENSIFY_POINTS = 21


def source_crs(metadata: SpatialMetadata) -> CRS:
    """
    Resolve the source CRS of a metadata record.

    The EPSG code wins over the WKT; the WKT is only used when no code is set.

    Raises:
        MetadataProjectionError: If neither identifies a valid CRS
    """
    try:
        if metadata.epsg_code is not None:
            return CRS.from_epsg(metadata.epsg_code)
        if metadata.coordinate_reference_system:
            return CRS.from_wkt(metadata.coordinate_reference_system)
    except CRSError as exc:
        raise MetadataProjectionError(f"Unknown source CRS: {exc}") from exc
    raise MetadataProjectionError("Spatial metadata declares no CRS")


def transform_bounds(
    bounds: Bounds,
    src: Union[str, int, CRS],
    dst: Union[str, int, CRS] = CANONICAL_EPSG_CODE,
) -> Bounds:
    """
    Transform a bounding box between reference systems.

    Args:
        bounds: Box in the source CRS
        src: Source CRS (anything pyproj accepts)
        dst: Destination CRS (default: EPSG:4326)

    Returns:
        Enclosing box in the destination CRS

    Raises:
        MetadataProjectionError: If the transformation fails or yields non-finite values
    """
    try:
        transformer = Transformer.from_crs(
            CRS.from_user_input(src), CRS.from_user_input(dst), always_xy=True
        )
        minx, miny, maxx, maxy = transformer.transform_bounds(
            bounds.minx, bounds.miny, bounds.maxx, bounds.maxy,
            densify_pts=DENSIFY_POINTS,
        )
    except (CRSError, ProjError) as exc:
        raise MetadataProjectionError(f"Bounding box transformation failed: {exc}") from exc

    if not all(math.isfinite(value) for value in (minx, miny, maxx, maxy)):
        raise MetadataProjectionError(
            f"Bounding box transformation produced non-finite values: "
            f"({minx}, {miny}, {maxx}, {maxy})"
        )

    try:
        return Bounds(minx=minx, miny=miny, maxx=maxx, maxy=maxy)
    except ValueError as exc:
        raise MetadataProjectionError(str(exc)) from exc


def project_spatial_metadata(metadata: SpatialMetadata) -> Optional[SpatialMetadata]:
    """
    Compute the EPSG:4326 copy of a metadata record.

    Args:
        metadata: Metadata with a populated box and a source EPSG code or WKT

    Returns:
        Projected SpatialMetadata (box, EPSG 4326, same feature count), or
        None when the record has no box to project

    Raises:
        MetadataProjectionError: If the source CRS is unknown or the
            transformation fails
    """
    bounds = metadata.bounds
    if bounds is None:
        return None

    if metadata.epsg_code == CANONICAL_EPSG_CODE:
        projected = bounds
    else:
        projected = transform_bounds(bounds, source_crs(metadata), CANONICAL_EPSG_CODE)
        logger.debug(f"Projected {bounds} from EPSG:{metadata.epsg_code} to {projected}")

    return SpatialMetadata.from_bounds(
        projected,
        epsg_code=CANONICAL_EPSG_CODE,
        num_features=metadata.num_features,
    )
