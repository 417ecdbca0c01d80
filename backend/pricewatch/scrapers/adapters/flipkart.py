"""Flipkart product page strategy."""

import re
from typing import Optional

from pricewatch.core.exceptions import ExtractionError
from pricewatch.models.enums import Platform
from pricewatch.scrapers.base import ExtractionStrategy, Snapshot


_PID_PATTERNS = [re.compile(r"pid=([A-Z0-9]+)", re.IGNORECASE)]

# Flipkart ships generated class names; newest layout first.
TITLE_SELECTORS = ["span.VU-ZEz", "h1.yhB1nd", "h1"]

PRICE_SELECTORS = [
    "div.Nx9bqj.CxhGGd",
    "div._30jeq3._16Jk6d",
    "div._25b18c div._30jeq3",
]

IMAGE_SELECTORS = ["img.DByuf4", "img._396cs4"]

CART_BUTTON_SELECTORS = ["button._2KpZ6l._2U9uOA", "button.QqFHMw"]

_AVAILABLE_PHRASES = ("add to cart", "buy now")


class FlipkartStrategy(ExtractionStrategy):
    """Reads title, price, image and stock state from Flipkart product pages."""

    platform = Platform.FLIPKART.value
    locale = "en-IN"

    def can_handle(self, url: str) -> bool:
        return "flipkart.com" in url

    def extract_external_id(self, url: str) -> Optional[str]:
        return self._match_id(url, _PID_PATTERNS)

    def parse(self, html: str, url: str) -> Snapshot:
        soup = self._soup(html)

        title = self._first_text(soup, TITLE_SELECTORS)
        if not title:
            raise ExtractionError(url, "could not extract product title")

        price, currency = self._first_price(soup, PRICE_SELECTORS)

        image_url = self._first_attr(soup, IMAGE_SELECTORS, "src")

        # A page without a cart button renders the default "add to cart" state
        button_text = (self._first_text(soup, CART_BUTTON_SELECTORS) or "add to cart").lower()
        is_available = any(phrase in button_text for phrase in _AVAILABLE_PHRASES)

        return Snapshot(
            title=title,
            price=price,
            currency=currency or "INR",
            image_url=image_url,
            is_available=is_available,
            external_id=self.extract_external_id(url) or url,
        )
