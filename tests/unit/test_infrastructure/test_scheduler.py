"""Unit tests for NavigationScheduler."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest

from kinoparse.infrastructure.scheduler import NavigationScheduler, RateLimitConfig


class TestRateLimitConfig:
    """Tests for RateLimitConfig."""

    def test_default_config(self):
        """Test default navigation delays."""
        config = RateLimitConfig()

        assert config.search_delay == 20.0
        assert config.page_delay == 12.5
        assert config.jitter == 0.0


class TestNavigationScheduler:
    """Tests for NavigationScheduler."""

    @pytest.fixture
    def scheduler(self):
        """Create a scheduler with short delays for testing."""
        return NavigationScheduler(RateLimitConfig(search_delay=0.02, page_delay=0.01))

    @pytest.mark.asyncio
    async def test_callback_fires_after_delay(self, scheduler):
        """Test scheduled callback runs with its arguments."""
        callback = MagicMock()

        scheduler.schedule(0.01, callback, "https://www.kinopoisk.ru/film/301/")
        assert scheduler.pending
        callback.assert_not_called()

        await asyncio.sleep(0.05)

        callback.assert_called_once_with("https://www.kinopoisk.ru/film/301/")
        assert not scheduler.pending

    @pytest.mark.asyncio
    async def test_new_schedule_cancels_previous(self, scheduler):
        """Test only the latest scheduled call fires."""
        stale = MagicMock()
        fresh = MagicMock()

        scheduler.schedule(0.01, stale)
        scheduler.schedule(0.01, fresh)
        await asyncio.sleep(0.05)

        stale.assert_not_called()
        fresh.assert_called_once_with()

        metrics = scheduler.get_metrics()
        assert metrics.total_scheduled == 2
        assert metrics.total_cancelled == 1
        assert metrics.total_fired == 1

    @pytest.mark.asyncio
    async def test_cancel(self, scheduler):
        """Test cancelling the pending call."""
        callback = MagicMock()
        scheduler.schedule(0.01, callback)

        assert scheduler.cancel() is True
        assert scheduler.cancel() is False
        await asyncio.sleep(0.03)

        callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_search_and_page_delays(self, scheduler):
        """Test the configured delays are used."""
        assert scheduler.schedule_search(MagicMock()) == pytest.approx(0.02)
        assert scheduler.schedule_page(MagicMock()) == pytest.approx(0.01)
        assert scheduler.get_metrics().total_delay == pytest.approx(0.03)
        scheduler.cancel()

    @pytest.mark.asyncio
    async def test_jitter_added(self):
        """Test jitter extends the delay."""
        scheduler = NavigationScheduler(RateLimitConfig(page_delay=0.01, jitter=0.5))

        with patch("kinoparse.infrastructure.scheduler.random.uniform", return_value=0.25):
            delay = scheduler.schedule_page(MagicMock())

        assert delay == pytest.approx(0.26)
        scheduler.cancel()

    @pytest.mark.asyncio
    async def test_bound_loop_is_used(self):
        """Test scheduling on an explicitly bound loop."""
        loop = asyncio.get_running_loop()
        scheduler = NavigationScheduler()
        scheduler.bind(loop)
        callback = MagicMock()

        scheduler.schedule(0, callback)
        await asyncio.sleep(0.01)

        callback.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_reset(self, scheduler):
        """Test reset clears pending call and statistics."""
        callback = MagicMock()
        scheduler.schedule(0.01, callback)

        scheduler.reset()
        await asyncio.sleep(0.03)

        callback.assert_not_called()
        metrics = scheduler.get_metrics()
        assert metrics.total_scheduled == 0
        assert metrics.pending is False
