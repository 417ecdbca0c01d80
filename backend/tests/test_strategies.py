"""Tests for extraction strategies and strategy selection.

Parsing runs against static HTML fixtures. The browser is replaced by a
fake session, so no Chromium is launched.
"""

from contextlib import asynccontextmanager
from decimal import Decimal
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from pricewatch.core.exceptions import ExtractionError
from pricewatch.models.enums import Platform
from pricewatch.scrapers.adapters import AmazonStrategy, FlipkartStrategy, GenericStrategy
from pricewatch.scrapers.base import Snapshot
from pricewatch.scrapers.registry import StrategyRegistry, build_default_registry, classify
from pricewatch.scrapers.utils.browser_manager import BrowserManager


FIXTURES = Path(__file__).parent / "fixtures"

AMAZON_IN_URL = "https://www.amazon.in/Sony-WH-1000XM5/dp/B09XS7JWHH/ref=sr_1_1"
AMAZON_COM_URL = "https://www.amazon.com/gp/product/B08KTZ8249"
FLIPKART_URL = "https://www.flipkart.com/apple-iphone-15/p/itm6ac6485515ae4?pid=MOBGTAGPTB3VS24W&lid=LST"
SHOP_URL = "https://brewsupply.example/products/ceramic-dripper"


def load_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


def fake_browser(html: str = "", status: int = 200, goto_error: Exception = None):
    """Browser manager double whose session yields a mocked page."""
    page = AsyncMock()
    if goto_error:
        page.goto.side_effect = goto_error
    else:
        page.goto.return_value = MagicMock(status=status)
    page.content.return_value = html

    manager = MagicMock()
    manager.closed_sessions = 0
    manager.session_kwargs = []

    @asynccontextmanager
    async def session(**kwargs):
        manager.session_kwargs.append(kwargs)
        try:
            yield page
        finally:
            manager.closed_sessions += 1

    manager.session = session
    return manager, page


# ============================================================================
# PARSING
# ============================================================================

class TestAmazonStrategy:
    """Tests for AmazonStrategy."""

    def test_can_handle(self):
        strategy = AmazonStrategy()
        assert strategy.can_handle(AMAZON_IN_URL)
        assert strategy.can_handle(AMAZON_COM_URL)
        assert not strategy.can_handle(FLIPKART_URL)

    def test_parse_in_stock_page(self):
        snapshot = AmazonStrategy().parse(load_fixture("amazon_in_stock.html"), AMAZON_IN_URL)

        assert snapshot.title == "Sony WH-1000XM5 Wireless Noise Cancelling Headphones"
        assert snapshot.price == Decimal("26990.00")
        assert snapshot.currency == "INR"
        assert snapshot.is_available is True
        assert snapshot.external_id == "B09XS7JWHH"
        assert snapshot.image_url.startswith("https://m.media-amazon.com/")

    def test_parse_unavailable_page_without_price(self):
        snapshot = AmazonStrategy().parse(load_fixture("amazon_out_of_stock.html"), AMAZON_COM_URL)

        assert snapshot.title == "Kindle Paperwhite (16 GB)"
        assert snapshot.price is None
        assert snapshot.currency == "USD"
        assert snapshot.is_available is False
        assert snapshot.external_id == "B08KTZ8249"
        assert snapshot.image_url == "https://m.media-amazon.com/images/I/kindle.jpg"

    def test_falls_back_to_whole_price(self):
        html = """
        <span id="productTitle">USB-C Cable</span>
        <span class="a-price-whole">1,299.</span>
        """
        snapshot = AmazonStrategy().parse(html, AMAZON_IN_URL)
        assert snapshot.price == Decimal("1299")
        assert snapshot.currency == "INR"

    def test_external_id_falls_back_to_url(self):
        url = "https://www.amazon.in/s?k=headphones"
        html = '<span id="productTitle">Search</span>'
        assert AmazonStrategy().parse(html, url).external_id == url

    def test_missing_title_raises(self):
        with pytest.raises(ExtractionError):
            AmazonStrategy().parse(load_fixture("no_title.html"), AMAZON_IN_URL)


class TestFlipkartStrategy:
    """Tests for FlipkartStrategy."""

    def test_can_handle(self):
        strategy = FlipkartStrategy()
        assert strategy.can_handle(FLIPKART_URL)
        assert not strategy.can_handle(AMAZON_IN_URL)

    def test_parse_in_stock_page(self):
        snapshot = FlipkartStrategy().parse(load_fixture("flipkart_in_stock.html"), FLIPKART_URL)

        assert snapshot.title == "Apple iPhone 15 (Black, 128 GB)"
        assert snapshot.price == Decimal("65999")
        assert snapshot.currency == "INR"
        assert snapshot.is_available is True
        assert snapshot.external_id == "MOBGTAGPTB3VS24W"
        assert snapshot.image_url == "https://rukminim2.flixcart.com/image/iphone15.jpeg"

    def test_parse_sold_out_page(self):
        snapshot = FlipkartStrategy().parse(load_fixture("flipkart_sold_out.html"), FLIPKART_URL)

        assert snapshot.title == "boAt Airdopes 141 Bluetooth Headset"
        assert snapshot.price == Decimal("1099")
        assert snapshot.is_available is False


class TestGenericStrategy:
    """Tests for GenericStrategy."""

    def test_accepts_any_url(self):
        assert GenericStrategy().can_handle("https://anything.example/x")

    def test_reads_first_price_match(self):
        snapshot = GenericStrategy().parse(load_fixture("generic_product.html"), SHOP_URL)

        assert snapshot.title == "Ceramic Pour-Over Coffee Dripper | Brew Supply Co."
        assert snapshot.price == Decimal("34.50")
        assert snapshot.currency == "USD"
        assert snapshot.image_url == "https://brewsupply.example/img/dripper.jpg"
        assert snapshot.is_available is True
        assert snapshot.external_id == SHOP_URL

    def test_ignores_related_product_prices(self):
        snapshot = GenericStrategy().parse(load_fixture("generic_related_products.html"), SHOP_URL)

        assert snapshot.price == Decimal("249.00")
        assert snapshot.currency == "USD"

    def test_keeps_looking_until_a_currency_is_found(self):
        html = """
        <html><head><title>Tea Kettle</title>
        </head><body>
        <span class="price">1,500</span>
        <span id="offer-price">&#8377;1,450</span>
        </body></html>
        """
        snapshot = GenericStrategy().parse(html, SHOP_URL)

        assert snapshot.price == Decimal("1450")
        assert snapshot.currency == "INR"

    def test_currency_from_meta_tag(self):
        html = """
        <html><head><title>Wool Scarf</title>
        <meta property="product:price:amount" content="1299">
        <meta property="product:price:currency" content="eur">
        </head></html>
        """
        snapshot = GenericStrategy().parse(html, SHOP_URL)
        assert snapshot.price == Decimal("1299")
        assert snapshot.currency == "EUR"

    def test_page_without_price(self):
        snapshot = GenericStrategy().parse(load_fixture("generic_no_price.html"), SHOP_URL)

        assert snapshot.title == "Handmade Linen Apron"
        assert snapshot.price is None
        assert snapshot.currency == "INR"
        assert snapshot.is_available is True

    def test_missing_title_raises(self):
        with pytest.raises(ExtractionError):
            GenericStrategy().parse(load_fixture("no_title.html"), SHOP_URL)


class TestSnapshot:
    """Tests for Snapshot validation."""

    def test_strips_title(self):
        assert Snapshot(title="  Lamp ", external_id="x").title == "Lamp"

    def test_rejects_blank_title(self):
        with pytest.raises(ValueError):
            Snapshot(title="   ", external_id="x")

    def test_rejects_negative_price(self):
        with pytest.raises(ValueError):
            Snapshot(title="Lamp", external_id="x", price=Decimal("-1"))


# ============================================================================
# EXTRACTION (fake browser)
# ============================================================================

class TestExtract:
    """Tests for ExtractionStrategy.extract with a fake browser session."""

    async def test_success_uses_platform_locale(self):
        manager, page = fake_browser(load_fixture("amazon_in_stock.html"))
        strategy = AmazonStrategy(browser_manager=manager, settle_delay=(0, 0))

        snapshot = await strategy.extract(AMAZON_IN_URL)

        assert snapshot.price == Decimal("26990.00")
        assert manager.session_kwargs[0]["locale"] == "en-US"
        assert manager.session_kwargs[0]["user_agent"]
        page.goto.assert_awaited_once()
        assert page.goto.call_args.kwargs["wait_until"] == "domcontentloaded"
        assert manager.closed_sessions == 1

    async def test_timeout_becomes_extraction_error(self):
        manager, _ = fake_browser(goto_error=PlaywrightTimeoutError("Timeout 30000ms exceeded"))
        strategy = GenericStrategy(browser_manager=manager, settle_delay=(0, 0))

        with pytest.raises(ExtractionError) as exc_info:
            await strategy.extract(SHOP_URL)

        assert exc_info.value.status == "failed"
        assert manager.closed_sessions == 1

    async def test_navigation_error_becomes_extraction_error(self):
        manager, _ = fake_browser(goto_error=PlaywrightError("net::ERR_NAME_NOT_RESOLVED"))
        strategy = GenericStrategy(browser_manager=manager, settle_delay=(0, 0))

        with pytest.raises(ExtractionError):
            await strategy.extract(SHOP_URL)
        assert manager.closed_sessions == 1

    async def test_http_429_is_rate_limited(self):
        manager, page = fake_browser("<title>Too many</title>", status=429)
        strategy = AmazonStrategy(browser_manager=manager, settle_delay=(0, 0))

        with pytest.raises(ExtractionError) as exc_info:
            await strategy.extract(AMAZON_IN_URL)

        assert exc_info.value.status == "rate_limited"
        page.content.assert_not_awaited()

    async def test_http_403_is_blocked(self):
        manager, _ = fake_browser("<title>Forbidden</title>", status=403)
        strategy = FlipkartStrategy(browser_manager=manager, settle_delay=(0, 0))

        with pytest.raises(ExtractionError) as exc_info:
            await strategy.extract(FLIPKART_URL)

        assert exc_info.value.status == "blocked"

    async def test_captcha_page_is_blocked(self):
        manager, _ = fake_browser(load_fixture("amazon_captcha.html"))
        strategy = AmazonStrategy(browser_manager=manager, settle_delay=(0, 0))

        with pytest.raises(ExtractionError) as exc_info:
            await strategy.extract(AMAZON_IN_URL)

        assert exc_info.value.status == "blocked"
        assert manager.closed_sessions == 1

    async def test_session_open_failure_becomes_extraction_error(self):
        manager = MagicMock()

        @asynccontextmanager
        async def session(**kwargs):
            raise PlaywrightError("Target page, context or browser has been closed")
            yield

        manager.session = session
        strategy = GenericStrategy(browser_manager=manager, settle_delay=(0, 0))

        with pytest.raises(ExtractionError) as exc_info:
            await strategy.extract(SHOP_URL)

        assert exc_info.value.status == "failed"
        assert "browser session failed" in str(exc_info.value)

    async def test_generic_has_no_locale(self):
        manager, _ = fake_browser(load_fixture("generic_product.html"))
        strategy = GenericStrategy(browser_manager=manager, settle_delay=(0, 0))

        await strategy.extract(SHOP_URL)

        assert manager.session_kwargs[0]["locale"] is None


# ============================================================================
# REGISTRY
# ============================================================================

class TestStrategyRegistry:
    """Tests for strategy selection and platform classification."""

    @pytest.mark.parametrize(
        "url,expected",
        [
            (AMAZON_IN_URL, AmazonStrategy),
            (AMAZON_COM_URL, AmazonStrategy),
            (FLIPKART_URL, FlipkartStrategy),
            (SHOP_URL, GenericStrategy),
            ("not even a url", GenericStrategy),
        ],
    )
    def test_select(self, url, expected):
        assert isinstance(build_default_registry().select(url), expected)

    def test_empty_registry_raises(self):
        with pytest.raises(LookupError):
            StrategyRegistry().select(SHOP_URL)

    @pytest.mark.parametrize(
        "url,expected",
        [
            (AMAZON_IN_URL, Platform.AMAZON),
            (AMAZON_COM_URL, Platform.AMAZON),
            (FLIPKART_URL, Platform.FLIPKART),
            ("https://www.walmart.com/ip/123", Platform.WALMART),
            ("https://www.aliexpress.com/item/100.html", Platform.ALIEXPRESS),
            (SHOP_URL, Platform.OTHER),
        ],
    )
    def test_classify(self, url, expected):
        assert classify(url) == expected


# ============================================================================
# BROWSER MANAGER
# ============================================================================

def fake_chromium_browser(connected: bool = True):
    page = AsyncMock()
    context = AsyncMock()
    context.new_page.return_value = page
    browser = MagicMock()
    browser.is_connected.return_value = connected
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()
    return browser, context


class TestBrowserManager:
    """Tests for BrowserManager session handling."""

    async def test_relaunches_disconnected_browser(self):
        crashed, _ = fake_chromium_browser(connected=False)
        fresh, context = fake_chromium_browser()
        manager = BrowserManager()
        manager._browser = crashed
        manager._playwright = MagicMock()
        manager._playwright.chromium.launch = AsyncMock(return_value=fresh)

        async with manager.session(user_agent="test-agent", locale="en-IN"):
            pass

        manager._playwright.chromium.launch.assert_awaited_once()
        crashed.new_context.assert_not_awaited()
        assert fresh.new_context.call_args.kwargs["locale"] == "en-IN"
        context.close.assert_awaited_once()
        assert manager.is_started

    async def test_reuses_connected_browser(self):
        browser, context = fake_chromium_browser()
        manager = BrowserManager()
        manager._browser = browser
        manager._playwright = MagicMock()
        manager._playwright.chromium.launch = AsyncMock()

        async with manager.session(user_agent="test-agent"):
            pass

        manager._playwright.chromium.launch.assert_not_awaited()
        assert "locale" not in browser.new_context.call_args.kwargs
        context.close.assert_awaited_once()
