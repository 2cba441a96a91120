"""kinopoisk metadata enrichment for broadcast schedules."""

__version__ = "0.1.0"

from kinoparse.models import (
    MovieRecord,
    NotFound,
    PageState,
    NavigationState,
    PlayReportEntry,
    ReportRow,
)
from kinoparse.config import settings, ScraperConfig
from kinoparse.countries import CountryLookup
from kinoparse.extraction import ExtractionError
from kinoparse.browser import AbstractBrowser, PageLoad, PlaywrightBrowser
from kinoparse.browser_config import BrowserConfig
from kinoparse.checkpoint import (
    AbstractCheckpointStore,
    SqliteCheckpointStore,
    JsonCheckpointStore,
    get_checkpoint_store,
)
from kinoparse.scraper import KinopoiskScraper, ProgressState
from kinoparse.combiner import combine, normalize_name

# Infrastructure
from kinoparse.infrastructure import (
    NavigationScheduler,
    RateLimitConfig,
    SchedulerMetrics,
)

__all__ = [
    "MovieRecord",
    "NotFound",
    "PageState",
    "NavigationState",
    "PlayReportEntry",
    "ReportRow",
    "settings",
    "ScraperConfig",
    "CountryLookup",
    "ExtractionError",
    "AbstractBrowser",
    "PageLoad",
    "PlaywrightBrowser",
    "BrowserConfig",
    "AbstractCheckpointStore",
    "SqliteCheckpointStore",
    "JsonCheckpointStore",
    "get_checkpoint_store",
    "KinopoiskScraper",
    "ProgressState",
    "combine",
    "normalize_name",
    "NavigationScheduler",
    "RateLimitConfig",
    "SchedulerMetrics",
]
