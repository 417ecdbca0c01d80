"""Price extraction and tracking engine.

This package provides:
- Extraction strategies for Amazon, Flipkart and arbitrary shops
- A registry that picks the strategy for a URL
- The per-item tracking pipeline and the periodic tracking scheduler
"""

from .base import ExtractionStrategy, Snapshot
from .registry import StrategyRegistry, classify, get_strategy_registry

__all__ = [
    # Base classes
    "ExtractionStrategy",
    "Snapshot",
    # Registry
    "StrategyRegistry",
    "classify",
    "get_strategy_registry",
]
