"""Extraction strategy interface.

Every platform strategy implements ``can_handle`` and ``extract``.
``extract`` loads the page in an isolated browser session and hands the
rendered HTML to ``parse``, which is pure and works on any HTML string.
"""

import asyncio
import random
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

import structlog
from bs4 import BeautifulSoup
from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from pricewatch.config import settings
from pricewatch.core.exceptions import ExtractionError
from pricewatch.models.enums import ExtractionStatus
from pricewatch.scrapers.utils.browser_manager import BrowserManager, get_browser_manager
from pricewatch.scrapers.utils.normalizer import PriceNormalizer
from pricewatch.scrapers.utils.user_agents import get_random_user_agent


# Interstitial markers that mean we were served a bot check instead of the page.
# Full phrases only: "robot" alone matches the meta robots tag.
CAPTCHA_MARKERS = (
    "enter the characters you see below",
    "type the characters you see",
    "sorry, we just need to make sure you're not a robot",
    "verify you are human",
    "are you a human",
)


@dataclass
class Snapshot:
    """Structured result of one extraction attempt."""

    title: str
    external_id: str
    price: Optional[Decimal] = None
    currency: Optional[str] = None
    image_url: Optional[str] = None
    is_available: bool = True

    def __post_init__(self):
        """Validate data after initialization."""
        self.title = (self.title or "").strip()
        if not self.title:
            raise ValueError("title is required")
        if not self.external_id:
            raise ValueError("external_id is required")
        if self.price is not None and self.price < 0:
            raise ValueError("price must be a non-negative Decimal")


class ExtractionStrategy(ABC):
    """Abstract base for platform-specific extraction strategies.

    Subclasses declare ``platform`` and ``locale`` and implement
    ``can_handle`` and ``parse``.
    """

    platform: str = ""  # Must be overridden in subclass (e.g., "amazon")
    locale: Optional[str] = None

    def __init__(
        self,
        browser_manager: Optional[BrowserManager] = None,
        settle_delay: Optional[Tuple[float, float]] = None,
        navigation_timeout_ms: Optional[int] = None,
    ):
        """Initialize the strategy.

        Args:
            browser_manager: Session provider; the global manager when None
            settle_delay: (min, max) seconds to wait after navigation
            navigation_timeout_ms: Hard navigation timeout
        """
        self._browser_manager = browser_manager
        self.settle_delay = settle_delay or (
            settings.SETTLE_DELAY_MIN_SECONDS,
            settings.SETTLE_DELAY_MAX_SECONDS,
        )
        self.navigation_timeout_ms = navigation_timeout_ms or settings.NAVIGATION_TIMEOUT_MS
        self.logger = structlog.get_logger(__name__).bind(strategy=self.platform or "generic")

    @property
    def browser_manager(self) -> BrowserManager:
        if self._browser_manager is None:
            self._browser_manager = get_browser_manager()
        return self._browser_manager

    @abstractmethod
    def can_handle(self, url: str) -> bool:
        """Return True if this strategy knows how to read ``url``."""
        pass

    @abstractmethod
    def parse(self, html: str, url: str) -> Snapshot:
        """Build a snapshot from rendered HTML.

        Raises:
            ExtractionError: If no title can be located
        """
        pass

    def extract_external_id(self, url: str) -> Optional[str]:
        """Derive the platform product id from the URL, if the platform has one."""
        return None

    async def extract(self, url: str) -> Snapshot:
        """Load ``url`` in a fresh browser session and parse it.

        Args:
            url: Product page URL

        Returns:
            Snapshot of the page

        Raises:
            ExtractionError: On browser or navigation failure, timeout,
                bot checks, or a page without a title
        """
        started = time.monotonic()
        user_agent = get_random_user_agent(settings.get_user_agents())

        try:
            async with self.browser_manager.session(user_agent=user_agent, locale=self.locale) as page:
                html = await self._load(page, url)
        except PlaywrightError as e:
            # Launch, context setup and teardown failures
            self.logger.warning("browser_session_failed", url=url, error=str(e))
            raise ExtractionError(url, f"browser session failed: {e}") from e

        self._raise_if_challenged(html, url)
        snapshot = self.parse(html, url)

        self.logger.info(
            "extraction_succeeded",
            url=url,
            price=str(snapshot.price) if snapshot.price is not None else None,
            currency=snapshot.currency,
            is_available=snapshot.is_available,
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        return snapshot

    async def _load(self, page, url: str) -> str:
        """Navigate, wait for client-side rendering and return the HTML."""
        self.logger.info("loading_url", url=url)
        try:
            response = await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self.navigation_timeout_ms,
            )
        except PlaywrightTimeoutError as e:
            raise ExtractionError(
                url, f"page did not load within {self.navigation_timeout_ms} ms"
            ) from e
        except PlaywrightError as e:
            raise ExtractionError(url, f"navigation failed: {e}") from e

        if response is not None:
            if response.status == 429:
                raise ExtractionError(url, "HTTP 429", status=ExtractionStatus.RATE_LIMITED.value)
            if response.status == 403:
                raise ExtractionError(url, "HTTP 403", status=ExtractionStatus.BLOCKED.value)

        await asyncio.sleep(random.uniform(*self.settle_delay))

        try:
            return await page.content()
        except PlaywrightError as e:
            raise ExtractionError(url, f"could not read page content: {e}") from e

    def _raise_if_challenged(self, html: str, url: str) -> None:
        html_lower = html.lower()
        marker = next((m for m in CAPTCHA_MARKERS if m in html_lower), None)
        if marker:
            self.logger.warning("captcha_detected", url=url, marker=marker)
            raise ExtractionError(url, "bot check page served", status=ExtractionStatus.BLOCKED.value)

    # -- parsing helpers ---------------------------------------------------

    @staticmethod
    def _soup(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "html.parser")

    @staticmethod
    def _first_text(soup: BeautifulSoup, selectors: Iterable[str]) -> Optional[str]:
        """Text of the first element matched by any selector, in order."""
        for selector in selectors:
            el = soup.select_one(selector)
            if el:
                text = el.get_text(" ", strip=True)
                if text:
                    return text
        return None

    @staticmethod
    def _first_attr(soup: BeautifulSoup, selectors: Iterable[str], attr: str) -> Optional[str]:
        for selector in selectors:
            el = soup.select_one(selector)
            if el and el.get(attr):
                return str(el[attr]).strip()
        return None

    def _first_price(
        self, soup: BeautifulSoup, selectors: Iterable[str]
    ) -> Tuple[Optional[Decimal], Optional[str]]:
        """Probe selectors in order and return the first parseable price.

        Returns:
            (price, currency detected in the same text)
        """
        for selector in selectors:
            el = soup.select_one(selector)
            if not el:
                continue
            text = el.get_text(strip=True)
            price = PriceNormalizer.parse_price(text)
            if price is not None:
                return price, PriceNormalizer.parse_currency(text)
        return None, None

    @staticmethod
    def _match_id(url: str, patterns: List[re.Pattern]) -> Optional[str]:
        for pattern in patterns:
            match = pattern.search(url)
            if match:
                return match.group(1)
        return None
