"""Tests for configuration loading."""

from kinoparse.config import ScraperConfig
from kinoparse.urls import HOST
from kinoparse.utils.challenge_handler import CAPTCHA_MARKER


class TestScraperConfig:
    """Tests for ScraperConfig."""

    def test_defaults(self):
        config = ScraperConfig()

        assert config.host == HOST
        assert config.search_delay == 20.0
        assert config.page_delay == 12.5
        assert config.delay_jitter == 0.0
        assert config.captcha_marker == CAPTCHA_MARKER

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("KINOPARSE_HOST", "http://localhost:8000")
        monkeypatch.setenv("KINOPARSE_SEARCH_DELAY", "30")
        monkeypatch.setenv("KINOPARSE_PAGE_DELAY", "15.5")
        monkeypatch.setenv("KINOPARSE_DELAY_JITTER", "2")

        config = ScraperConfig.from_env()

        assert config.host == "http://localhost:8000"
        assert config.search_delay == 30.0
        assert config.page_delay == 15.5
        assert config.delay_jitter == 2.0

    def test_from_env_defaults(self, monkeypatch):
        for name in ("KINOPARSE_HOST", "KINOPARSE_SEARCH_DELAY", "KINOPARSE_PAGE_DELAY"):
            monkeypatch.delenv(name, raising=False)

        config = ScraperConfig.from_env()

        assert config.host == HOST
        assert config.search_delay == 20.0

    def test_rate_limit_config(self):
        config = ScraperConfig(search_delay=1.0, page_delay=0.5, delay_jitter=0.25)
        limits = config.rate_limit_config()

        assert limits.search_delay == 1.0
        assert limits.page_delay == 0.5
        assert limits.jitter == 0.25

    def test_log_settings_are_not_scraper_fields(self):
        # Logging is configured from settings by the CLI
        assert not hasattr(ScraperConfig(), "log_level")
        assert not hasattr(ScraperConfig(), "log_file")
