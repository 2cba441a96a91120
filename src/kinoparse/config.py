from dotenv import load_dotenv
from dataclasses import dataclass
import os

from kinoparse.infrastructure.scheduler import RateLimitConfig
from kinoparse.urls import HOST
from kinoparse.utils.challenge_handler import CAPTCHA_MARKER

load_dotenv()  # Loads variables from .env file


class Settings:
    """
    Manages application settings loaded from environment variables.
    """
    # Checkpoint store configuration
    CHECKPOINT_BACKEND = os.getenv("KINOPARSE_CHECKPOINT_BACKEND", "sqlite")  # 'sqlite' or 'json'
    CHECKPOINT_URL = os.getenv("KINOPARSE_CHECKPOINT_URL", "sqlite:///kinoparse_checkpoints.db")
    CHECKPOINT_DIR = os.getenv("KINOPARSE_CHECKPOINT_DIR", ".kinoparse/checkpoints")

    COUNTRIES_FILE = os.getenv("KINOPARSE_COUNTRIES_FILE")  # Optional JSON {name: id} overrides
    OUTPUT_DIR = os.getenv("KINOPARSE_OUTPUT_DIR", "results")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE")


settings = Settings()


@dataclass
class ScraperConfig:
    """Configuration for the kinopoisk scraper."""
    host: str = HOST
    search_delay: float = 20.0  # Seconds before each record's search page
    page_delay: float = 12.5  # Seconds before film, studio and cast pages
    delay_jitter: float = 0.0
    captcha_marker: str = CAPTCHA_MARKER

    @classmethod
    def from_env(cls) -> "ScraperConfig":
        """Load configuration from environment variables.

        Returns:
            ScraperConfig: Configuration instance with values from environment
        """
        return cls(
            host=os.getenv("KINOPARSE_HOST", HOST),
            search_delay=float(os.getenv("KINOPARSE_SEARCH_DELAY", "20.0")),
            page_delay=float(os.getenv("KINOPARSE_PAGE_DELAY", "12.5")),
            delay_jitter=float(os.getenv("KINOPARSE_DELAY_JITTER", "0.0")),
            captcha_marker=os.getenv("KINOPARSE_CAPTCHA_MARKER", CAPTCHA_MARKER),
        )

    def rate_limit_config(self) -> RateLimitConfig:
        """Navigation delays for the scheduler."""
        return RateLimitConfig(
            search_delay=self.search_delay,
            page_delay=self.page_delay,
            jitter=self.delay_jitter,
        )
