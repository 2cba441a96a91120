"""Tests for the Playwright browser collaborator with a mocked page."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError

from kinoparse.browser import PageLoad, PlaywrightBrowser
from kinoparse.browser_config import USER_AGENTS, BrowserConfig, FAST_CONFIG, browser_config_from_env

FILM = "https://www.kinopoisk.ru/film/301/"


@pytest.fixture
def page():
    page = AsyncMock()
    page.url = FILM
    page.content.return_value = '<h1 class="moviename-big">Матрица</h1>'
    return page


@pytest.fixture
def browser(page):
    browser = PlaywrightBrowser(BrowserConfig(timeout=5000))
    browser._page = page
    return browser


class TestPlaywrightBrowser:
    """Tests for PlaywrightBrowser navigation."""

    def test_navigate_requires_running_browser(self):
        with pytest.raises(RuntimeError, match="not running"):
            PlaywrightBrowser().navigate(FILM)

    @pytest.mark.asyncio
    async def test_navigation_delivers_page(self, browser, page):
        results = []
        browser.set_listener(results.append)
        browser.bind(asyncio.get_running_loop())

        browser.navigate(FILM)
        await asyncio.sleep(0.05)

        page.goto.assert_awaited_once_with(FILM, wait_until="load", timeout=5000)
        assert len(results) == 1
        assert isinstance(results[0], PageLoad)
        assert results[0].location == FILM
        assert results[0].document.find(class_="moviename-big").get_text() == "Матрица"
        assert not browser.busy

    @pytest.mark.asyncio
    async def test_failed_navigation_delivers_none(self, browser, page):
        page.goto.side_effect = TimeoutError("Timeout 5000ms exceeded")
        results = []
        browser.set_listener(results.append)
        browser.bind(asyncio.get_running_loop())

        browser.navigate(FILM)
        await asyncio.sleep(0.05)

        assert results == [None]

    @pytest.mark.asyncio
    async def test_second_navigation_ignored_while_busy(self, browser, page):
        gate = asyncio.Event()

        async def slow_goto(*args, **kwargs):
            await gate.wait()

        page.goto.side_effect = slow_goto
        results = []
        browser.set_listener(results.append)
        browser.bind(asyncio.get_running_loop())

        browser.navigate(FILM)
        await asyncio.sleep(0)
        assert browser.busy
        browser.navigate(FILM + "cast/")

        gate.set()
        await asyncio.sleep(0.05)

        assert page.goto.await_count == 1
        assert len(results) == 1

    @pytest.mark.asyncio
    async def test_notify_without_listener(self, browser):
        browser.bind(asyncio.get_running_loop())

        # Logged and dropped
        browser._notify(None)
        await asyncio.sleep(0)

    @pytest.mark.asyncio
    async def test_exit_closes_everything(self, browser):
        context = AsyncMock()
        chromium = AsyncMock()
        playwright = AsyncMock()
        browser._context = context
        browser._browser = chromium
        browser._playwright = playwright

        await browser.__aexit__(None, None, None)

        context.close.assert_awaited_once()
        chromium.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
        assert browser._page is None


class TestBrowserConfig:
    """Tests for BrowserConfig."""

    def test_defaults(self):
        config = BrowserConfig()

        assert config.headless is True
        assert config.locale == "ru-RU"
        assert config.timezone_id == "Europe/Moscow"

    def test_timeout_bounds(self):
        with pytest.raises(ValidationError):
            BrowserConfig(timeout=10)

    def test_validate_assignment(self):
        config = BrowserConfig()
        with pytest.raises(ValidationError):
            config.browser_type = "opera"

    def test_user_agent(self):
        assert BrowserConfig(user_agent="custom").get_user_agent() == "custom"
        assert BrowserConfig(rotate_user_agent=False).get_user_agent() == USER_AGENTS[0]
        assert BrowserConfig().get_user_agent() in USER_AGENTS

    def test_fast_preset_blocks_heavy_resources(self):
        assert "image" in FAST_CONFIG.block_resources
        assert FAST_CONFIG.wait_until == "domcontentloaded"


class TestBrowserConfigFromEnv:
    """Tests for environment overrides."""

    def test_no_overrides_returns_preset(self, monkeypatch):
        for name in ("KINOPARSE_BROWSER", "KINOPARSE_HEADLESS", "KINOPARSE_NAV_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)

        assert browser_config_from_env(FAST_CONFIG) is FAST_CONFIG

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("KINOPARSE_BROWSER", "Firefox")
        monkeypatch.setenv("KINOPARSE_HEADLESS", "false")
        monkeypatch.setenv("KINOPARSE_NAV_TIMEOUT", "90000")

        config = browser_config_from_env(FAST_CONFIG)

        assert config.browser_type == "firefox"
        assert config.headless is False
        assert config.timeout == 90000
        assert config.block_resources == FAST_CONFIG.block_resources

    def test_invalid_override_rejected(self, monkeypatch):
        monkeypatch.setenv("KINOPARSE_NAV_TIMEOUT", "5")

        with pytest.raises(ValidationError):
            browser_config_from_env()
