# =============================================================================
# Unit Tests: Inspector Registry
# =============================================================================

from unittest.mock import Mock

import pytest

from libs.errors import UnsupportedTypeError
from libs.inspection import InspectorRegistry, InspectorStrategy
from libs.models import DataResource, DataType, IngestMode


class _StubInspector(InspectorStrategy):
    """Strategy that records its calls."""

    def __init__(self, data_type: str):
        self.data_type = data_type
        self.calls = []

    def inspect(self, resource, mode):
        self.calls.append((resource, mode))
        return resource


def _resource(tag: str) -> DataResource:
    return DataResource(data_id="d-1", data_type=DataType(type=tag))


# =============================================================================
# Test: register / get
# =============================================================================

def test_registry_starts_with_given_strategies():
    """Test that strategies passed to the constructor are registered."""
    registry = InspectorRegistry([_StubInspector("geojson"), _StubInspector("raster")])

    assert len(registry) == 2
    assert "geojson" in registry
    assert registry.supported_types() == ["geojson", "raster"]


def test_registry_get_returns_registered_strategy():
    strategy = _StubInspector("shapefile")
    registry = InspectorRegistry([strategy])

    assert registry.get("shapefile") is strategy


def test_registry_rejects_duplicate_tag():
    """Test that a tag can only be registered once."""
    registry = InspectorRegistry([_StubInspector("geojson")])

    with pytest.raises(ValueError, match="already registered"):
        registry.register(_StubInspector("geojson"))


def test_registry_rejects_strategy_without_tag():
    with pytest.raises(ValueError, match="declares no data_type"):
        InspectorRegistry([_StubInspector("")])


def test_registry_get_unknown_raises_unsupported():
    """Test that unknown tags raise UnsupportedTypeError listing supported tags."""
    registry = InspectorRegistry([_StubInspector("raster"), _StubInspector("geojson")])

    with pytest.raises(UnsupportedTypeError) as exc_info:
        registry.get("UnknownFormat")

    assert exc_info.value.data_type == "UnknownFormat"
    assert exc_info.value.supported == ["geojson", "raster"]


# =============================================================================
# Test: dispatch
# =============================================================================

def test_dispatch_routes_by_data_type():
    """Test that dispatch calls only the strategy for the resource's tag."""
    geojson = _StubInspector("geojson")
    raster = _StubInspector("raster")
    registry = InspectorRegistry([geojson, raster])
    resource = _resource("raster")

    result = registry.dispatch(resource, IngestMode.METADATA_AND_PERSIST)

    assert result is resource
    assert raster.calls == [(resource, IngestMode.METADATA_AND_PERSIST)]
    assert geojson.calls == []


def test_dispatch_unknown_type_raises_before_any_strategy():
    strategy = Mock(spec=InspectorStrategy)
    strategy.data_type = "geojson"
    registry = InspectorRegistry([strategy])

    with pytest.raises(UnsupportedTypeError):
        registry.dispatch(_resource("UnknownFormat"), IngestMode.METADATA_ONLY)

    strategy.inspect.assert_not_called()


def test_dispatch_propagates_strategy_errors():
    strategy = Mock(spec=InspectorStrategy)
    strategy.data_type = "raster"
    strategy.inspect.side_effect = RuntimeError("boom")
    registry = InspectorRegistry([strategy])

    with pytest.raises(RuntimeError, match="boom"):
        registry.dispatch(_resource("raster"), IngestMode.METADATA_ONLY)
