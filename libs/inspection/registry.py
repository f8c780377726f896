# =============================================================================
# Inspector Registry
# =============================================================================
# Data-type lookup for inspection strategies.
# =============================================================================

import logging
from typing import Iterable, Optional

from libs.errors import UnsupportedTypeError
from libs.models.data import DataResource, IngestMode

from .base import InspectorStrategy

__all__ = ["InspectorRegistry"]

logger = logging.getLogger(__name__)


class InspectorRegistry:
    """
    Registry of inspection strategies keyed by data type tag.

    Dispatch is a pure lookup; supporting a new format means registering a
    strategy, not changing dispatch.
    """

    def __init__(self, strategies: Optional[Iterable[InspectorStrategy]] = None):
        self._strategies: dict[str, InspectorStrategy] = {}
        for strategy in strategies or []:
            self.register(strategy)

    def register(self, strategy: InspectorStrategy) -> None:
        """
        Register a strategy under its data type tag.

        Raises:
            ValueError: If the strategy has no tag or the tag is already registered
        """
        tag = strategy.data_type
        if not tag:
            raise ValueError(f"{type(strategy).__name__} declares no data_type")
        if tag in self._strategies:
            raise ValueError(
                f"Data type '{tag}' already registered to "
                f"{type(self._strategies[tag]).__name__}"
            )
        self._strategies[tag] = strategy
        logger.debug(f"Registered {type(strategy).__name__} for '{tag}'")

    def get(self, data_type: str) -> InspectorStrategy:
        """
        Strategy registered for a tag.

        Raises:
            UnsupportedTypeError: If no strategy handles the tag
        """
        try:
            return self._strategies[data_type]
        except KeyError:
            raise UnsupportedTypeError(data_type, self.supported_types()) from None

    def supported_types(self) -> list[str]:
        return sorted(self._strategies)

    def dispatch(self, resource: DataResource, mode: IngestMode) -> DataResource:
        """
        Route a resource to the strategy for its data type.

        Args:
            resource: Resource to inspect
            mode: Ingest mode passed through to the strategy

        Returns:
            The resource returned by the strategy

        Raises:
            UnsupportedTypeError: If the data type is not registered
            IngestError: Whatever the selected strategy raises
        """
        strategy = self.get(resource.data_type.type)
        logger.info(
            f"Inspecting data {resource.data_id} as '{resource.data_type.type}' "
            f"with {type(strategy).__name__} ({mode.value})"
        )
        return strategy.inspect(resource, mode)

    def __contains__(self, data_type: str) -> bool:
        return data_type in self._strategies

    def __len__(self) -> int:
        return len(self._strategies)
