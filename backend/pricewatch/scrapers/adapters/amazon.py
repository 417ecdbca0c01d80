"""Amazon product page strategy (amazon.com, amazon.in)."""

import re
from typing import Optional

from pricewatch.core.exceptions import ExtractionError
from pricewatch.models.enums import Platform
from pricewatch.scrapers.base import ExtractionStrategy, Snapshot


_ASIN_PATTERNS = [
    re.compile(r"/dp/([A-Z0-9]{10})", re.IGNORECASE),
    re.compile(r"/gp/product/([A-Z0-9]{10})", re.IGNORECASE),
]

TITLE_SELECTORS = ["#productTitle", "#title"]

# Deal/offscreen price first, whole-number price last
PRICE_SELECTORS = [
    ".a-price .a-offscreen",
    "#priceblock_ourprice",
    "#priceblock_dealprice",
    ".a-price-whole",
]

IMAGE_SELECTORS = ["#landingImage", "#imgBlkFront"]

AVAILABILITY_SELECTOR = "#availability span"

_UNAVAILABLE_PHRASES = ("unavailable", "out of stock")


class AmazonStrategy(ExtractionStrategy):
    """Reads title, price, image and stock state from Amazon product pages."""

    platform = Platform.AMAZON.value
    locale = "en-US"

    DOMAINS = ("amazon.com", "amazon.in")

    def can_handle(self, url: str) -> bool:
        return any(domain in url for domain in self.DOMAINS)

    def extract_external_id(self, url: str) -> Optional[str]:
        return self._match_id(url, _ASIN_PATTERNS)

    def parse(self, html: str, url: str) -> Snapshot:
        soup = self._soup(html)

        title = self._first_text(soup, TITLE_SELECTORS)
        if not title:
            raise ExtractionError(url, "could not extract product title")

        price, currency = self._first_price(soup, PRICE_SELECTORS)

        image_url = self._first_attr(soup, IMAGE_SELECTORS, "src")

        availability = (self._first_text(soup, [AVAILABILITY_SELECTOR]) or "In Stock").lower()
        is_available = not any(phrase in availability for phrase in _UNAVAILABLE_PHRASES)

        return Snapshot(
            title=title,
            price=price,
            currency=currency or self._default_currency(url),
            image_url=image_url,
            is_available=is_available,
            external_id=self.extract_external_id(url) or url,
        )

    @staticmethod
    def _default_currency(url: str) -> str:
        return "INR" if "amazon.in" in url else "USD"
