"""Price and currency parsing shared by every extraction strategy."""

import re
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional


# Symbol -> ISO code. Checked before ISO codes, in this order.
CURRENCY_SYMBOLS: Dict[str, str] = {
    "₹": "INR",
    "€": "EUR",
    "$": "USD",
    "£": "GBP",
    "¥": "JPY",
}

KNOWN_CURRENCY_CODES = (
    "USD", "EUR", "INR", "GBP", "JPY", "CNY", "AED", "SAR",
    "CAD", "AUD", "SGD", "CHF", "KRW", "BRL", "MXN",
)

# Prices outside (0, MAX_PLAUSIBLE_PRICE) are footnotes, SKUs or review counts.
MAX_PLAUSIBLE_PRICE = Decimal("10000000")

_SYMBOL_PATTERN = re.compile("|".join(re.escape(s) for s in CURRENCY_SYMBOLS))
_CODE_PATTERN = re.compile(
    r"\b(" + "|".join(KNOWN_CURRENCY_CODES) + r")\b", re.IGNORECASE
)
_PRICE_CHARS = re.compile(r"[^\d.,]")
_CANDIDATE_PATTERN = re.compile(
    r"(?P<symbol>[₹$€£¥])?\s?(?P<amount>\d[\d,]*(?:\.\d+)?)"
)


class PriceNormalizer:
    """Parsing helpers for price text scraped from product pages.

    All methods are tolerant: malformed input yields None or an empty
    list, never an exception.
    """

    @staticmethod
    def parse_price(text: Optional[str]) -> Optional[Decimal]:
        """Parse a price string into a Decimal.

        Handles various formats:
        - "₹1,23,456.50" -> 123456.50
        - "$1,299.00" -> 1299.00
        - "Rs. 499" -> 499

        Args:
            text: Raw price text

        Returns:
            Decimal price value, or None if parsing fails
        """
        if not text:
            return None

        cleaned = _PRICE_CHARS.sub("", text)
        cleaned = cleaned.replace(",", "").strip(".")

        if not cleaned:
            return None

        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            return None

        if not value.is_finite():
            return None
        return value

    @staticmethod
    def parse_currency(text: Optional[str]) -> Optional[str]:
        """Detect the currency of a price string.

        Currency symbols win over three-letter codes.

        Args:
            text: Raw price text

        Returns:
            ISO currency code, or None if nothing recognizable is present
        """
        if not text:
            return None

        symbol_match = _SYMBOL_PATTERN.search(text)
        if symbol_match:
            return CURRENCY_SYMBOLS[symbol_match.group(0)]

        code_match = _CODE_PATTERN.search(text)
        if code_match:
            return code_match.group(1).upper()

        return None

    @staticmethod
    def extract_candidate_prices(text: Optional[str]) -> List[Decimal]:
        """Find every plausible price in a block of text.

        When at least one number carries a currency symbol only the
        symbol-prefixed numbers are returned, so "20% off" next to
        "$79.99" does not produce a candidate of 20.

        Args:
            text: Text that may contain several prices

        Returns:
            Parsed prices in order of appearance
        """
        if not text:
            return []

        prefixed: List[Decimal] = []
        bare: List[Decimal] = []

        for match in _CANDIDATE_PATTERN.finditer(text):
            price = PriceNormalizer.parse_price(match.group("amount"))
            if price is None or not (0 < price < MAX_PLAUSIBLE_PRICE):
                continue
            if match.group("symbol"):
                prefixed.append(price)
            else:
                bare.append(price)

        return prefixed if prefixed else bare
