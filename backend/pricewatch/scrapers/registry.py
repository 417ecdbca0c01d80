"""Strategy selection and platform classification."""

from typing import List, Optional

import structlog

from pricewatch.models.enums import Platform
from pricewatch.scrapers.base import ExtractionStrategy
from pricewatch.scrapers.adapters import AmazonStrategy, FlipkartStrategy, GenericStrategy


logger = structlog.get_logger(__name__)


# Checked in order; the first matching domain wins.
PLATFORM_DOMAINS = [
    ("amazon.com", Platform.AMAZON),
    ("amazon.in", Platform.AMAZON),
    ("flipkart.com", Platform.FLIPKART),
    ("walmart.com", Platform.WALMART),
    ("aliexpress.com", Platform.ALIEXPRESS),
]


def classify(url: str) -> Platform:
    """Map a URL to its platform by domain substring, defaulting to OTHER."""
    for domain, platform in PLATFORM_DOMAINS:
        if domain in url:
            return platform
    return Platform.OTHER


class StrategyRegistry:
    """Ordered collection of extraction strategies.

    Strategies are tried in registration order. The generic strategy
    accepts every URL, so it must be registered last.
    """

    def __init__(self, strategies: Optional[List[ExtractionStrategy]] = None):
        self._strategies: List[ExtractionStrategy] = list(strategies or [])

    def register(self, strategy: ExtractionStrategy) -> None:
        self._strategies.append(strategy)
        logger.info("strategy_registered", platform=strategy.platform)

    @property
    def strategies(self) -> List[ExtractionStrategy]:
        return list(self._strategies)

    def select(self, url: str) -> ExtractionStrategy:
        """Return the first strategy that can handle ``url``.

        Raises:
            LookupError: If no registered strategy accepts the URL, which
                only happens when the generic fallback is missing
        """
        for strategy in self._strategies:
            if strategy.can_handle(url):
                return strategy
        raise LookupError(f"No extraction strategy registered for {url}")


def build_default_registry() -> StrategyRegistry:
    return StrategyRegistry([AmazonStrategy(), FlipkartStrategy(), GenericStrategy()])


# Singleton instance
_registry: Optional[StrategyRegistry] = None


def get_strategy_registry() -> StrategyRegistry:
    """Get the global StrategyRegistry, built on first use."""
    global _registry
    if _registry is None:
        _registry = build_default_registry()
    return _registry
