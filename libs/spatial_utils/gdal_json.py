# =============================================================================
# GDAL JSON Parsing - ogrinfo / gdalinfo output to Spatial Metadata
# =============================================================================
# Turns the JSON documents produced by `ogrinfo -json` and `gdalinfo -json`
# into SpatialMetadata values. No GDAL binaries are invoked here.
# =============================================================================

import json
import logging
import re
from typing import Any, Optional, Union

from libs.errors import ExtractionError
from libs.models.spatial import Bounds, SpatialMetadata

__all__ = [
    "load_gdal_json",
    "epsg_from_wkt",
    "epsg_from_coordinate_system",
    "first_layer_name",
    "vector_metadata_from_ogrinfo",
    "raster_metadata_from_gdalinfo",
]

logger = logging.getLogger(__name__)

# WKT2: ID["EPSG",4326]   WKT1: AUTHORITY["EPSG","4326"]
_AUTHORITY_ID_PATTERN = re.compile(
    r'\b(?:ID|AUTHORITY)\[\s*"([A-Za-z]+)"\s*,\s*"?([A-Za-z0-9]+)"?\s*\]',
    re.IGNORECASE,
)

# Non-EPSG identifiers equivalent to an EPSG code for bounding box purposes
_EQUIVALENT_EPSG = {
    ("OGC", "CRS84"): 4326,
}


def _epsg_from_identifier(authority: str, code: str) -> Optional[int]:
    authority = authority.upper()
    if authority == "EPSG":
        try:
            return int(code)
        except (TypeError, ValueError):
            return None
    return _EQUIVALENT_EPSG.get((authority, str(code).upper()))


def load_gdal_json(output: Union[str, dict], tool: str = "gdal") -> dict:
    """
    Parse the stdout of a GDAL ``-json`` invocation.

    Args:
        output: Raw stdout, or an already parsed document
        tool: Tool name used in error messages

    Returns:
        Parsed JSON document

    Raises:
        ExtractionError: If the output is not a JSON object
    """
    if isinstance(output, dict):
        return output
    try:
        document = json.loads(output)
    except (TypeError, ValueError) as exc:
        raise ExtractionError(f"{tool} returned invalid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise ExtractionError(f"{tool} returned unexpected JSON ({type(document).__name__})")
    return document


def epsg_from_wkt(wkt: Optional[str]) -> Optional[int]:
    """
    Extract the EPSG code of a CRS from its WKT.

    The CRS's own identifier is the last id in the text (ids of the datum,
    ellipsoid and units come earlier). A CRS whose own id is not an EPSG one
    has no EPSG code, even if its components do.

    Examples:
        >>> epsg_from_wkt('GEOGCS["WGS 84",...,AUTHORITY["EPSG","4326"]]')
        4326
        >>> epsg_from_wkt('PROJCRS["WGS 84 / UTM zone 33N",...,ID["EPSG",32633]]')
        32633
        >>> epsg_from_wkt('LOCAL_CS["site grid",UNIT["metre",1,AUTHORITY["EPSG","9001"]],AUTHORITY["ACME","7"]]')
    """
    if not wkt:
        return None
    matches = _AUTHORITY_ID_PATTERN.findall(wkt)
    if not matches:
        return None
    authority, code = matches[-1]
    return _epsg_from_identifier(authority, code)


def epsg_from_coordinate_system(coordinate_system: Optional[dict]) -> Optional[int]:
    """EPSG code from a GDAL ``coordinateSystem`` block (PROJJSON id, then WKT)."""
    if not coordinate_system:
        return None

    projjson = coordinate_system.get("projjson") or {}
    identifier = projjson.get("id") or {}
    if identifier.get("authority") and identifier.get("code") is not None:
        epsg = _epsg_from_identifier(str(identifier["authority"]), str(identifier["code"]))
        if epsg is not None:
            return epsg

    return epsg_from_wkt(coordinate_system.get("wkt"))


def first_layer_name(ogrinfo_json: Union[str, dict]) -> str:
    """
    Name of the first layer reported by ``ogrinfo -json``.

    Raises:
        ExtractionError: If the dataset has no layers
    """
    document = load_gdal_json(ogrinfo_json, "ogrinfo")
    layers = document.get("layers") or []
    if not layers or not layers[0].get("name"):
        raise ExtractionError("Dataset contains no vector layers")
    return layers[0]["name"]


def vector_metadata_from_ogrinfo(
    ogrinfo_json: Union[str, dict],
    layer_name: Optional[str] = None,
) -> SpatialMetadata:
    """
    Build SpatialMetadata from ``ogrinfo -json`` output.

    The bounding box is the union of every geometry field extent of the
    selected layers; the feature count is summed over them. CRS and EPSG
    come from the first geometry field that declares a coordinate system.

    Args:
        ogrinfo_json: ogrinfo stdout or parsed document
        layer_name: Restrict to a single layer (default: all layers)

    Returns:
        SpatialMetadata with box, CRS WKT, EPSG (may be None) and feature count

    Raises:
        ExtractionError: If the dataset has no layers, or the named layer is missing
    """
    document = load_gdal_json(ogrinfo_json, "ogrinfo")
    layers = document.get("layers") or []
    if layer_name is not None:
        layers = [layer for layer in layers if layer.get("name") == layer_name]
        if not layers:
            raise ExtractionError(f"Layer '{layer_name}' not found in dataset")
    if not layers:
        raise ExtractionError("Dataset contains no vector layers")

    boxes: list[Bounds] = []
    feature_count = 0
    wkt: Optional[str] = None
    epsg: Optional[int] = None

    for layer in layers:
        count = layer.get("featureCount")
        if isinstance(count, int) and count > 0:
            feature_count += count

        for geometry_field in layer.get("geometryFields") or []:
            extent = geometry_field.get("extent")
            if extent and len(extent) == 4:
                try:
                    boxes.append(
                        Bounds(minx=extent[0], miny=extent[1], maxx=extent[2], maxy=extent[3])
                    )
                except ValueError as exc:
                    raise ExtractionError(
                        f"Invalid extent for layer '{layer.get('name')}': {extent}"
                    ) from exc

            coordinate_system = geometry_field.get("coordinateSystem")
            if wkt is None and coordinate_system and coordinate_system.get("wkt"):
                wkt = coordinate_system["wkt"]
                epsg = epsg_from_coordinate_system(coordinate_system)

    logger.debug(
        f"ogrinfo: {len(layers)} layer(s), {feature_count} feature(s), "
        f"{len(boxes)} extent(s), epsg={epsg}"
    )

    return SpatialMetadata.from_bounds(
        Bounds.union(boxes),
        coordinate_reference_system=wkt,
        epsg_code=epsg,
        num_features=feature_count,
    )


def raster_metadata_from_gdalinfo(gdalinfo_json: Union[str, dict]) -> SpatialMetadata:
    """
    Build SpatialMetadata from ``gdalinfo -json`` output.

    The box encloses all four corner coordinates, so rotated or south-up
    rasters still produce an ordered box. EPSG is read from the STAC
    ``proj:epsg`` entry, then from the coordinate system.

    Raises:
        ExtractionError: If the raster reports no corner coordinates
    """
    document = load_gdal_json(gdalinfo_json, "gdalinfo")
    corners = document.get("cornerCoordinates") or {}
    points = [
        corners.get(name)
        for name in ("upperLeft", "lowerLeft", "upperRight", "lowerRight")
    ]
    points = [point for point in points if point and len(point) >= 2]
    if not points:
        raise ExtractionError("Raster has no corner coordinates")

    xs = [float(point[0]) for point in points]
    ys = [float(point[1]) for point in points]
    bounds = Bounds(minx=min(xs), miny=min(ys), maxx=max(xs), maxy=max(ys))

    coordinate_system = document.get("coordinateSystem") or {}
    wkt = coordinate_system.get("wkt") or None

    epsg = _stac_epsg(document.get("stac"))
    if epsg is None:
        epsg = epsg_from_coordinate_system(coordinate_system)

    return SpatialMetadata.from_bounds(
        bounds,
        coordinate_reference_system=wkt,
        epsg_code=epsg,
    )


def _stac_epsg(stac: Optional[dict[str, Any]]) -> Optional[int]:
    if not stac:
        return None
    value = stac.get("proj:epsg")
    if value is None:
        # GDAL >= 3.10 reports proj:code ("EPSG:32633")
        code = stac.get("proj:code")
        if isinstance(code, str) and code.upper().startswith("EPSG:"):
            value = code.split(":", 1)[1]
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None
