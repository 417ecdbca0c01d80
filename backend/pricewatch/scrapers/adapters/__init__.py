"""Platform-specific extraction strategies.

Each strategy inherits from ExtractionStrategy and implements
``can_handle`` and ``parse``.
"""

from .amazon import AmazonStrategy
from .flipkart import FlipkartStrategy
from .generic import GenericStrategy

__all__ = [
    "AmazonStrategy",
    "FlipkartStrategy",
    "GenericStrategy",
]
