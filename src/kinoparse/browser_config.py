"""
Browser configuration for the Playwright-driven kinopoisk session.

This module provides a validated Pydantic configuration model for all
browser-related settings and pre-configured instances for common runs.
"""
import os
import random
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


# User agent pool for rotation
USER_AGENTS = [
    # Chrome on Windows
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    # Chrome on Mac
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    # Firefox on Windows
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    # Yandex Browser on Windows
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/118.0.0.0 YaBrowser/23.11.0.0 Safari/537.36",
]


def get_random_user_agent() -> str:
    """Pick a user agent for a new browser context."""
    return random.choice(USER_AGENTS)


class BrowserConfig(BaseModel):
    """
    Configuration for PlaywrightBrowser.

    One browser context and page are created from it for the whole batch.
    """

    headless: bool = Field(
        default=True,
        description="Run without a visible browser window"
    )

    browser_type: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium",
        description="Browser engine to drive"
    )

    timeout: int = Field(
        default=60000,
        description="Navigation timeout in milliseconds; a timed out page is reported as an empty result",
        ge=1000,
        le=300000
    )

    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field(
        default="load",
        description="Load event that ends a navigation before the page is parsed"
    )

    stealth_mode: bool = Field(
        default=True,
        description="Hide the most obvious automation markers from page scripts"
    )

    user_agent: Optional[str] = Field(
        default=None,
        description="Fixed user agent; takes precedence over rotation"
    )

    rotate_user_agent: bool = Field(
        default=True,
        description="Pick a random user agent when the browser context is created"
    )

    locale: str = Field(
        default="ru-RU",
        description="Browser locale; kinopoisk serves Russian titles to ru-RU"
    )

    timezone_id: str = Field(
        default="Europe/Moscow",
        description="Browser timezone"
    )

    block_resources: List[str] = Field(
        default_factory=list,
        description="Resource types to block (e.g., 'image', 'font', 'media')"
    )

    launch_args: List[str] = Field(
        default_factory=list,
        description="Additional browser launch arguments"
    )

    class Config:
        """Pydantic model configuration."""
        frozen = False
        validate_assignment = True

    def get_user_agent(self) -> str:
        """User agent for the batch context."""
        if self.user_agent:
            return self.user_agent
        if self.rotate_user_agent:
            return get_random_user_agent()
        return USER_AGENTS[0]


# --- Pre-configured Instances ---

FAST_CONFIG = BrowserConfig(
    headless=True,
    wait_until="domcontentloaded",
    timeout=30000,
    block_resources=["image", "font", "media"],
)
"""
Fast configuration.

Blocks heavy resources and returns as soon as the DOM is parsed.
kinopoisk renders the fields we read server-side, so this is usually enough.
"""

STEALTH_CONFIG = BrowserConfig(
    headless=True,
    stealth_mode=True,
    wait_until="load",
    timeout=60000,
    rotate_user_agent=True,
    block_resources=["media"],
    launch_args=[
        "--disable-blink-features=AutomationControlled",
        "--no-first-run",
        "--no-default-browser-check",
    ],
)
"""
Stealth configuration used for batch runs.

Full page loads and automation flags disabled, to keep the captcha rate low.
"""

HEADED_CONFIG = BrowserConfig(
    headless=False,
    stealth_mode=True,
    wait_until="load",
    timeout=120000,
    launch_args=[
        "--disable-blink-features=AutomationControlled",
    ],
)
"""
Visible browser for watching a run or debugging page layout changes.
"""


def browser_config_from_env(base: Optional[BrowserConfig] = None) -> BrowserConfig:
    """
    Apply environment overrides to a preset.

    Reads KINOPARSE_BROWSER (chromium/firefox/webkit), KINOPARSE_HEADLESS
    (true/false) and KINOPARSE_NAV_TIMEOUT (milliseconds).
    """
    base = base or STEALTH_CONFIG
    overrides = {}

    browser_type = os.getenv("KINOPARSE_BROWSER")
    if browser_type:
        overrides["browser_type"] = browser_type.lower()

    headless = os.getenv("KINOPARSE_HEADLESS")
    if headless:
        overrides["headless"] = headless.lower() in ("1", "true", "yes")

    timeout = os.getenv("KINOPARSE_NAV_TIMEOUT")
    if timeout:
        overrides["timeout"] = int(timeout)

    if not overrides:
        return base
    # model_copy skips validation, so rebuild from the merged fields
    return BrowserConfig(**{**base.model_dump(), **overrides})
