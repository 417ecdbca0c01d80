"""Fallback strategy for any product page without a dedicated strategy."""

from decimal import Decimal
from typing import List, Optional

from pricewatch.config import settings
from pricewatch.core.exceptions import ExtractionError
from pricewatch.models.enums import Platform
from pricewatch.scrapers.base import ExtractionStrategy, Snapshot
from pricewatch.scrapers.utils.normalizer import PriceNormalizer


PRICE_SELECTORS = [
    ".price",
    'meta[property="product:price:amount"]',
    '[class*="price"]',
    '[id*="price"]',
    "[data-price]",
    'meta[property="og:price:amount"]',
    'meta[itemprop="price"]',
]

CURRENCY_META_SELECTORS = [
    'meta[property="product:price:currency"]',
    'meta[itemprop="priceCurrency"]',
]

IMAGE_META_SELECTORS = [
    'meta[property="og:image"]',
    'meta[name="twitter:image"]',
]

IMAGE_SELECTORS = ['[class*="product"] img', 'img[itemprop="image"]']


class GenericStrategy(ExtractionStrategy):
    """Best-effort reader for arbitrary shops.

    Walks a broad set of price selectors and meta tags, reading the first
    match of each, until a price and a currency are found, then reports
    the lowest value seen. Stock state is not detected; pages are assumed
    available.
    """

    platform = Platform.OTHER.value
    locale = None

    def can_handle(self, url: str) -> bool:
        return True

    def parse(self, html: str, url: str) -> Snapshot:
        soup = self._soup(html)

        title = (
            self._first_text(soup, ["title"])
            or self._first_attr(soup, ['meta[property="og:title"]'], "content")
            or self._first_text(soup, ["h1"])
        )
        if not title:
            raise ExtractionError(url, "could not extract page title")

        candidates: List[Decimal] = []
        detected_currency: Optional[str] = None

        # First match per selector only; a page also lists related products.
        for selector in PRICE_SELECTORS:
            el = soup.select_one(selector)
            if el is None:
                continue
            if el.name == "meta":
                text = el.get("content") or ""
            else:
                text = el.get("data-price") or el.get_text(" ", strip=True)
            if not text:
                continue
            candidates.extend(PriceNormalizer.extract_candidate_prices(text))
            detected_currency = PriceNormalizer.parse_currency(text) or detected_currency
            if candidates and detected_currency:
                break

        unique_prices = sorted(set(candidates))
        price = unique_prices[0] if unique_prices else None

        currency = (
            detected_currency
            or self._meta_currency(soup)
            or settings.DEFAULT_CURRENCY
        )

        image_url = (
            self._first_attr(soup, IMAGE_META_SELECTORS, "content")
            or self._first_attr(soup, IMAGE_SELECTORS, "src")
        )

        if price is None:
            self.logger.info("no_price_found", url=url)

        return Snapshot(
            title=title,
            price=price,
            currency=currency,
            image_url=image_url,
            is_available=True,
            external_id=url,
        )

    def _meta_currency(self, soup) -> Optional[str]:
        value = self._first_attr(soup, CURRENCY_META_SELECTORS, "content")
        return value.upper() if value else None
