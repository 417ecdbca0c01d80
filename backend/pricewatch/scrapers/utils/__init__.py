"""Scraper utilities for browser sessions, user agents and price parsing."""

from .user_agents import get_random_user_agent, USER_AGENTS
from .normalizer import (
    PriceNormalizer,
    CURRENCY_SYMBOLS,
    KNOWN_CURRENCY_CODES,
    MAX_PLAUSIBLE_PRICE,
)


__all__ = [
    # User agents
    "get_random_user_agent",
    "USER_AGENTS",
    # Normalization
    "PriceNormalizer",
    "CURRENCY_SYMBOLS",
    "KNOWN_CURRENCY_CODES",
    "MAX_PLAUSIBLE_PRICE",
]
