"""Playwright browser lifecycle manager with anti-detection.

One Chromium process is shared for the lifetime of the application.
Every extraction attempt gets its own browser context, so cookies and
storage never leak between attempts.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from playwright.async_api import async_playwright, Browser, Page, Playwright

from pricewatch.config import settings
from pricewatch.scrapers.utils.retry import playwright_retry

logger = structlog.get_logger(__name__)

DEFAULT_VIEWPORT = {"width": 1920, "height": 1080}

DEFAULT_HEADERS = {
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
}


class BrowserManager:
    """Manages the Playwright browser and hands out isolated sessions.

    Sessions are created per attempt with:
    - A caller-chosen user agent and locale
    - A fixed desktop viewport
    - Stealth JS injection to mask automation flags
    """

    def __init__(self, headless: bool = True):
        self._headless = headless
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

    @property
    def is_started(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def start(self) -> None:
        """Launch the browser. Safe to call repeatedly.

        A browser that has crashed or been disconnected is replaced.
        """
        async with self._lock:
            if self.is_started:
                return
            if self._browser is not None:
                logger.warning("browser_disconnected_relaunching")
                self._browser = None
            if self._playwright is None:
                self._playwright = await async_playwright().start()
            self._browser = await self._launch()
            logger.info("browser_started", headless=self._headless)

    @playwright_retry
    async def _launch(self) -> Browser:
        return await self._playwright.chromium.launch(
            headless=self._headless,
            args=[
                "--disable-blink-features=AutomationControlled",
                "--disable-dev-shm-usage",
                "--no-sandbox",
                "--disable-setuid-sandbox",
            ],
        )

    async def stop(self) -> None:
        """Close the browser and the Playwright driver."""
        async with self._lock:
            if self._browser:
                await self._browser.close()
                self._browser = None
            if self._playwright:
                await self._playwright.stop()
                self._playwright = None
            logger.info("browser_stopped")

    @asynccontextmanager
    async def session(
        self,
        user_agent: str,
        locale: Optional[str] = None,
    ) -> AsyncIterator[Page]:
        """Open an isolated browsing session and yield its page.

        The context is closed on every exit path, including when the
        caller raises.

        Args:
            user_agent: User-Agent header for this session
            locale: Browser locale (e.g. "en-US"), or None for the default
        """
        if not self.is_started:
            await self.start()

        context_kwargs = {
            "user_agent": user_agent,
            "viewport": DEFAULT_VIEWPORT,
            "java_script_enabled": True,
        }
        if locale:
            context_kwargs["locale"] = locale

        context = await self._browser.new_context(**context_kwargs)
        try:
            await context.add_init_script(STEALTH_JS)
            page = await context.new_page()
            await page.set_extra_http_headers(DEFAULT_HEADERS)
            yield page
        finally:
            await context.close()
            logger.debug("browser_session_closed")


# Minimal stealth JS to mask automation signals
STEALTH_JS = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
window.chrome = { runtime: {} };
"""


# Singleton instance
_browser_manager: Optional[BrowserManager] = None


def get_browser_manager() -> BrowserManager:
    """Get the global BrowserManager singleton."""
    global _browser_manager
    if _browser_manager is None:
        _browser_manager = BrowserManager(headless=settings.BROWSER_HEADLESS)
    return _browser_manager
