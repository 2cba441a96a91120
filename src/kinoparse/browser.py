"""
Browser collaborator driving kinopoisk page loads.

The scraper only needs two things from a browser: ``navigate(url)``, which
returns immediately, and a completion notification that fires exactly once
per navigation with the parsed page and its final location, or with
``None`` when no page could be retrieved. Notifications are always
delivered on the event loop the scraper runs on.
"""
import asyncio
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from bs4 import BeautifulSoup

from kinoparse.browser_config import BrowserConfig
from kinoparse.extraction import parse_document

logger = logging.getLogger(__name__)


@dataclass
class PageLoad:
    """Result of a completed navigation."""

    location: str  # Final URL after redirects
    document: BeautifulSoup
    html: str = ""

    @classmethod
    def from_html(cls, location: str, html: str) -> "PageLoad":
        return cls(location=location, document=parse_document(html), html=html)


NavigationListener = Callable[[Optional[PageLoad]], None]


class AbstractBrowser(ABC):
    """Abstract base class defining the browser contract."""

    def __init__(self):
        self._listener: Optional[NavigationListener] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def set_listener(self, listener: NavigationListener) -> None:
        """Register the navigation completion callback."""
        self._listener = listener

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        """Deliver completions on ``loop``."""
        self._loop = loop

    @abstractmethod
    def navigate(self, url: str) -> None:
        """Start loading ``url``; completion is reported to the listener."""
        pass

    def _notify(self, result: Optional[PageLoad]) -> None:
        """Hand a navigation result to the listener on the bound loop."""
        if self._listener is None:
            logger.warning("Navigation completed with no listener registered")
            return
        loop = self._loop or asyncio.get_running_loop()
        loop.call_soon_threadsafe(self._listener, result)


class PlaywrightBrowser(AbstractBrowser):
    """
    Single-page Playwright browser.

    Used as an async context manager that owns the browser lifecycle:

        async with PlaywrightBrowser(config) as browser:
            scraper = KinopoiskScraper(browser)
            await scraper.run(records)

    One page is reused for the whole batch so the site sees one continuous
    session (cookies included). Only one navigation is in flight at a time.
    """

    # Realistic viewport sizes for desktop
    DESKTOP_VIEWPORTS = [
        {"width": 1920, "height": 1080},
        {"width": 1366, "height": 768},
        {"width": 1536, "height": 864},
    ]

    def __init__(self, config: Optional[BrowserConfig] = None):
        """
        Initialize the browser.

        Args:
            config: BrowserConfig instance with browser settings
        """
        super().__init__()
        self._config = config or BrowserConfig()
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None
        self._task: Optional[asyncio.Task] = None

        logger.debug(f"PlaywrightBrowser initialized with config: {self._config}")

    async def __aenter__(self) -> "PlaywrightBrowser":
        """Enter async context manager, launching browser."""
        try:
            from playwright.async_api import async_playwright
        except ImportError:
            raise ImportError(
                "Playwright is required to drive kinopoisk. "
                "Install with: pip install playwright && playwright install chromium"
            )

        logger.info(f"Launching {self._config.browser_type} browser (headless={self._config.headless})")

        self._playwright = await async_playwright().start()
        browser_launcher = getattr(self._playwright, self._config.browser_type)

        launch_options = {"headless": self._config.headless}
        if self._config.launch_args:
            launch_options["args"] = self._config.launch_args

        self._browser = await browser_launcher.launch(**launch_options)
        self._context = await self._create_context()
        self._page = await self._context.new_page()

        if self._config.block_resources:
            await self._page.route(
                "**/*",
                lambda route: (
                    route.abort()
                    if route.request.resource_type in self._config.block_resources
                    else route.continue_()
                )
            )

        if self._config.stealth_mode:
            await self._apply_stealth(self._page)

        self.bind(asyncio.get_running_loop())
        logger.info("Browser launched successfully")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context manager, closing browser."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

        if self._context:
            await self._context.close()
            self._context = None
            self._page = None

        if self._browser:
            logger.info("Closing browser")
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.info("Browser closed successfully")

    @property
    def busy(self) -> bool:
        """Whether a navigation is in flight."""
        return self._task is not None and not self._task.done()

    def navigate(self, url: str) -> None:
        """
        Start loading ``url`` in the shared page.

        Raises:
            RuntimeError: If the browser is not running (not in context manager)
        """
        if self._page is None:
            raise RuntimeError(
                "Browser is not running. Use PlaywrightBrowser as an async context manager: "
                "async with PlaywrightBrowser(config) as browser:"
            )

        if self.busy:
            logger.warning(f"Navigation already in flight, ignoring request for {url}")
            return

        loop = self._loop or asyncio.get_running_loop()
        self._task = loop.create_task(self._load(url))

    async def _load(self, url: str) -> None:
        """Load a page and report the outcome exactly once."""
        logger.debug(f"Loading: {url}")
        try:
            await self._page.goto(
                url,
                wait_until=self._config.wait_until,
                timeout=self._config.timeout
            )
            html = await self._page.content()
            result = PageLoad.from_html(self._page.url, html)
            logger.debug(f"Loaded: {result.location}")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Navigation failed for {url}: {e}")
            result = None

        self._notify(result)

    async def _create_context(self):
        """Create the browser context shared by the whole batch."""
        return await self._browser.new_context(
            viewport=random.choice(self.DESKTOP_VIEWPORTS),
            user_agent=self._config.get_user_agent(),
            locale=self._config.locale,
            timezone_id=self._config.timezone_id,
            java_script_enabled=True,
        )

    async def _apply_stealth(self, page) -> None:
        """Mask the automation markers kinopoisk's scripts are known to probe."""
        stealth_script = """
            // Mask webdriver property
            Object.defineProperty(navigator, 'webdriver', {
                get: () => undefined
            });

            // Add chrome runtime object
            window.chrome = {
                runtime: {}
            };

            // Match the context locale
            Object.defineProperty(navigator, 'languages', {
                get: () => ['ru-RU', 'ru', 'en-US', 'en']
            });
        """

        await page.add_init_script(stealth_script)
        logger.debug("Stealth measures applied")
