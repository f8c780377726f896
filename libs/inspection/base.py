# =============================================================================
# Base Class for Inspection Strategies
# =============================================================================
# Abstract base class for all format-specific inspection strategies.
# =============================================================================

import logging
from abc import ABC, abstractmethod

from libs.errors import MetadataProjectionError
from libs.models.data import DataResource, IngestMode
from libs.models.spatial import DEFAULT_EPSG_CODE, SpatialMetadata
from libs.spatial_utils.projection import project_spatial_metadata

__all__ = ["InspectorStrategy"]

logger = logging.getLogger(__name__)


class InspectorStrategy(ABC):
    """
    Base class for all inspection strategies.

    A strategy handles exactly one data type tag. ``inspect`` populates the
    resource's spatial metadata (and, when the mode asks for it, persists the
    content) and returns the same resource instance.

    Strategies raise ExtractionError when the source is unreadable or
    invalid, and PersistenceError when a durable write fails.
    """

    data_type: str = ""

    @abstractmethod
    def inspect(self, resource: DataResource, mode: IngestMode) -> DataResource:
        """
        Inspect a Data Resource.

        Args:
            resource: Resource whose data_type.type equals this strategy's tag
            mode: METADATA_ONLY or METADATA_AND_PERSIST

        Returns:
            The mutated resource
        """
        pass

    def resolve_epsg(self, metadata: SpatialMetadata, resource: DataResource) -> SpatialMetadata:
        """
        Apply the EPSG fallback when the source declares no usable code.

        Logs a warning naming the fallback; the metadata is updated in place.
        """
        if metadata.epsg_code is None:
            logger.warning(
                f"No EPSG code found for data {resource.data_id} ({self.data_type}); "
                f"applying policy default EPSG:{DEFAULT_EPSG_CODE}"
            )
            metadata.epsg_code = DEFAULT_EPSG_CODE
        return metadata

    def attach_projection(self, metadata: SpatialMetadata, resource: DataResource) -> SpatialMetadata:
        """
        Populate the EPSG:4326 copy of the metadata.

        A failed projection leaves ``projected_spatial_metadata`` empty and is
        logged; it never fails the inspection.
        """
        try:
            metadata.projected_spatial_metadata = project_spatial_metadata(metadata)
        except MetadataProjectionError as exc:
            logger.warning(
                f"Could not project spatial metadata for data {resource.data_id}: {exc}"
            )
            metadata.projected_spatial_metadata = None
        return metadata
