# =============================================================================
# Table Name Mapper - Data ID to PostGIS Feature Table Mapping
# =============================================================================
# Derives the feature-store table name of a hosted vector Data Resource from
# its data id (and, for shapefiles, the source layer name).
# =============================================================================

import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator

__all__ = ["DataIdTableMapping", "sanitize_identifier", "MAX_IDENTIFIER_LENGTH"]

# PostgreSQL NAMEDATALEN - 1
MAX_IDENTIFIER_LENGTH = 63

_INVALID_CHARS = re.compile(r"[^a-z0-9_]+")


def sanitize_identifier(value: str) -> str:
    """
    Lowercase a name and replace every run of characters outside
    ``[a-z0-9_]`` with a single underscore.

    Examples:
        >>> sanitize_identifier("Roads-2024 (final)")
        'roads_2024_final_'
    """
    return _INVALID_CHARS.sub("_", value.lower())


class DataIdTableMapping(BaseModel):
    """
    Mapping between a Data Resource id and its PostGIS feature table.

    GeoJSON resources are stored in a table named after the data id;
    shapefiles in ``<layer>_<data id>``. Names are sanitized and fit the
    PostgreSQL identifier limit; when a layer prefix would overflow it is
    shortened so that the data id part is kept whole.

    Attributes:
        data_id: Data Resource id the table belongs to
        table_name: PostgreSQL table name (safe identifier)

    Example:
        >>> DataIdTableMapping.from_data_id("0b5c4a43-7b8e-4f5e-9c1a-3d2f6e8b9a10").table_name
        '0b5c4a43_7b8e_4f5e_9c1a_3d2f6e8b9a10'
        >>> DataIdTableMapping.from_data_id("abc-1", layer_name="Roads").table_name
        'roads_abc_1'
    """

    data_id: str = Field(..., min_length=1, description="Data Resource id")
    table_name: str = Field(..., description="PostgreSQL table name (safe identifier)")

    @field_validator("table_name")
    @classmethod
    def validate_table_name(cls, v: str) -> str:
        """
        Validate that table_name is a safe PostgreSQL identifier.

        Raises:
            ValueError: If empty, too long, or containing invalid characters
        """
        if not v:
            raise ValueError("table_name cannot be empty")
        if len(v) > MAX_IDENTIFIER_LENGTH:
            raise ValueError(
                f"table_name exceeds {MAX_IDENTIFIER_LENGTH} characters: {v}"
            )
        if _INVALID_CHARS.search(v):
            raise ValueError(f"table_name contains invalid characters: {v}")
        return v

    @classmethod
    def from_data_id(
        cls,
        data_id: str,
        layer_name: Optional[str] = None,
    ) -> "DataIdTableMapping":
        """
        Create the mapping for a data id.

        Args:
            data_id: Data Resource id
            layer_name: Source layer name to prefix the table with (shapefiles)

        Returns:
            DataIdTableMapping instance

        Raises:
            ValueError: If the data id sanitizes to a name longer than the limit
        """
        suffix = sanitize_identifier(data_id)
        if not layer_name:
            return cls(data_id=data_id, table_name=suffix)

        room = MAX_IDENTIFIER_LENGTH - len(suffix) - 1
        prefix = sanitize_identifier(layer_name)[:max(room, 0)].rstrip("_")
        table_name = f"{prefix}_{suffix}" if prefix else suffix
        return cls(data_id=data_id, table_name=table_name)

    def qualified(self, schema: str) -> str:
        """Schema-qualified table name (``schema.table``)."""
        return f"{schema}.{self.table_name}"
