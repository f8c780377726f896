# =============================================================================
# Spatial Types Module
# =============================================================================
# Provides reusable spatial data types with validation:
# - Bounds: Geographic bounding box
# - SpatialMetadata: Bounding box, CRS, EPSG code and feature count of a
#   Data Resource, plus its copy projected into EPSG:4326
# =============================================================================

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

__all__ = ["Bounds", "SpatialMetadata", "DEFAULT_EPSG_CODE", "CANONICAL_EPSG_CODE"]


DEFAULT_EPSG_CODE = 4326
"""EPSG code applied when a source does not declare its reference system."""

CANONICAL_EPSG_CODE = 4326
"""Reference frame of the projected copy of the spatial metadata."""


# =============================================================================
# Bounds (Geographic Bounding Box)
# =============================================================================

class Bounds(BaseModel):
    """
    Geographic bounding box defining a rectangular area.

    Represents a bounding box with minimum and maximum X/Y coordinates.
    Validates that minx <= maxx and miny <= maxy (allows point bounds).

    Attributes:
        minx: Minimum X coordinate (west)
        miny: Minimum Y coordinate (south)
        maxx: Maximum X coordinate (east)
        maxy: Maximum Y coordinate (north)
    """

    minx: float = Field(..., description="Minimum X coordinate (west)")
    miny: float = Field(..., description="Minimum Y coordinate (south)")
    maxx: float = Field(..., description="Maximum X coordinate (east)")
    maxy: float = Field(..., description="Maximum Y coordinate (north)")

    @model_validator(mode='after')
    def validate_bounds(self) -> 'Bounds':
        """
        Validate that minx <= maxx and miny <= maxy.

        Raises:
            ValueError: If bounds are invalid (min > max)
        """
        if self.minx > self.maxx:
            raise ValueError(
                f"Invalid bounds: minx ({self.minx}) must be less than or equal to maxx ({self.maxx})"
            )
        if self.miny > self.maxy:
            raise ValueError(
                f"Invalid bounds: miny ({self.miny}) must be less than or equal to maxy ({self.maxy})"
            )
        return self

    @classmethod
    def union(cls, boxes: list["Bounds"]) -> Optional["Bounds"]:
        """Smallest box enclosing every box in the list, or None if empty."""
        if not boxes:
            return None
        return cls(
            minx=min(b.minx for b in boxes),
            miny=min(b.miny for b in boxes),
            maxx=max(b.maxx for b in boxes),
            maxy=max(b.maxy for b in boxes),
        )


# =============================================================================
# Spatial Metadata
# =============================================================================

class SpatialMetadata(BaseModel):
    """
    Spatial metadata discovered for a Data Resource during inspection.

    The bounding box is expressed in the source reference system. The
    projected copy holds the same box reprojected into EPSG:4326; it is left
    empty when the projection could not be computed.

    Attributes:
        min_x: Minimum X of the bounding box (source CRS)
        min_y: Minimum Y of the bounding box (source CRS)
        max_x: Maximum X of the bounding box (source CRS)
        max_y: Maximum Y of the bounding box (source CRS)
        coordinate_reference_system: WKT of the source CRS, when known
        epsg_code: EPSG identifier of the source CRS
        num_features: Number of vector features (vector formats only)
        projected_spatial_metadata: Copy of the box in EPSG:4326
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    min_x: Optional[float] = None
    min_y: Optional[float] = None
    max_x: Optional[float] = None
    max_y: Optional[float] = None
    coordinate_reference_system: Optional[str] = None
    epsg_code: Optional[int] = None
    num_features: Optional[int] = Field(None, ge=0)
    projected_spatial_metadata: Optional["SpatialMetadata"] = None

    @model_validator(mode="after")
    def validate_box(self) -> "SpatialMetadata":
        """
        Validate that the bounding box is either fully unset or well formed.

        Raises:
            ValueError: If only part of the box is set, or min > max
        """
        corners = (self.min_x, self.min_y, self.max_x, self.max_y)
        populated = [value is not None for value in corners]
        if any(populated) and not all(populated):
            raise ValueError(
                "Bounding box must set all of min_x, min_y, max_x, max_y or none of them"
            )
        if all(populated):
            # Reuses the Bounds ordering rules
            Bounds(minx=self.min_x, miny=self.min_y, maxx=self.max_x, maxy=self.max_y)
        return self

    @classmethod
    def from_bounds(cls, bounds: Optional[Bounds], **kwargs) -> "SpatialMetadata":
        """Build metadata from an optional Bounds plus any other fields."""
        if bounds is None:
            return cls(**kwargs)
        return cls(
            min_x=bounds.minx,
            min_y=bounds.miny,
            max_x=bounds.maxx,
            max_y=bounds.maxy,
            **kwargs,
        )

    @property
    def bounds(self) -> Optional[Bounds]:
        """The bounding box as Bounds, or None when not populated."""
        if self.min_x is None:
            return None
        return Bounds(minx=self.min_x, miny=self.min_y, maxx=self.max_x, maxy=self.max_y)
