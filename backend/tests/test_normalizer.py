"""Tests for price and currency parsing."""

from decimal import Decimal

import pytest

from pricewatch.scrapers.utils.normalizer import PriceNormalizer
from pricewatch.scrapers.utils.user_agents import USER_AGENTS, get_random_user_agent


class TestParsePrice:
    """Tests for PriceNormalizer.parse_price."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("₹1,23,456.50", Decimal("123456.50")),
            ("$1,299.00", Decimal("1299.00")),
            ("Rs. 499", Decimal("499")),
            ("EUR 15.5", Decimal("15.5")),
            ("  2,999  ", Decimal("2999")),
            ("1299.", Decimal("1299")),
        ],
    )
    def test_parses_common_formats(self, text, expected):
        assert PriceNormalizer.parse_price(text) == expected

    @pytest.mark.parametrize("text", [None, "", "Free", "...", "1.2.3"])
    def test_returns_none_for_unparseable(self, text):
        assert PriceNormalizer.parse_price(text) is None


class TestParseCurrency:
    """Tests for PriceNormalizer.parse_currency."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("₹1,23,456.50", "INR"),
            ("€19,99", "EUR"),
            ("$5", "USD"),
            ("£12.00", "GBP"),
            ("¥3000", "JPY"),
            ("Price: 1299 usd", "USD"),
            ("AED 250", "AED"),
        ],
    )
    def test_detects_currency(self, text, expected):
        assert PriceNormalizer.parse_currency(text) == expected

    def test_symbol_wins_over_code(self):
        assert PriceNormalizer.parse_currency("USD equivalent ₹8,300") == "INR"

    def test_code_must_be_a_whole_word(self):
        assert PriceNormalizer.parse_currency("EURO-CUP 2024") is None

    def test_returns_none_without_marker(self):
        assert PriceNormalizer.parse_currency("1,299") is None
        assert PriceNormalizer.parse_currency(None) is None


class TestExtractCandidatePrices:
    """Tests for PriceNormalizer.extract_candidate_prices."""

    def test_prefers_symbol_prefixed_numbers(self):
        text = "Save 20% today: was $99.99 now $79.99 (2 left)"
        assert PriceNormalizer.extract_candidate_prices(text) == [
            Decimal("99.99"),
            Decimal("79.99"),
        ]

    def test_falls_back_to_bare_numbers(self):
        assert PriceNormalizer.extract_candidate_prices("34.50") == [Decimal("34.50")]

    def test_filters_implausible_values(self):
        text = "₹0 ₹12,000,000 ₹450"
        assert PriceNormalizer.extract_candidate_prices(text) == [Decimal("450")]

    def test_empty_input(self):
        assert PriceNormalizer.extract_candidate_prices("") == []
        assert PriceNormalizer.extract_candidate_prices("no numbers here") == []


class TestUserAgents:
    """Tests for user agent selection."""

    def test_default_pool(self):
        assert get_random_user_agent() in USER_AGENTS

    def test_custom_pool(self):
        pool = ["agent-a", "agent-b"]
        for _ in range(10):
            assert get_random_user_agent(pool) in pool

    def test_empty_pool_falls_back_to_default(self):
        assert get_random_user_agent([]) in USER_AGENTS
