# =============================================================================
# Inspection Library
# =============================================================================
# Strategy-based metadata extraction for ingested Data Resources.
# =============================================================================

"""
Inspection library for the ingest pipeline.

This library provides:
- InspectorStrategy: Base class for format-specific inspection strategies
- InspectorRegistry: Data-type lookup and dispatch
"""

from .base import InspectorStrategy
from .registry import InspectorRegistry

__all__ = [
    "InspectorStrategy",
    "InspectorRegistry",
]
