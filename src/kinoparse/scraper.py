"""
kinopoisk enrichment state machine.

Records are processed strictly one after another. For each record the
scraper walks search -> film -> studio -> cast, scheduling every page load
after a delay and resuming when the browser reports the loaded page. All
state changes happen in callbacks on the event loop that runs ``run()``:
either a fired navigation delay or a browser completion.

Per-record failures are recorded as NotFound flags on the record and never
abort the batch. A captcha abandons the record and keeps whatever was
already extracted.
"""

import asyncio
import logging
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from kinoparse.browser import AbstractBrowser, PageLoad
from kinoparse.checkpoint import AbstractCheckpointStore
from kinoparse.config import ScraperConfig
from kinoparse.countries import CountryLookup
from kinoparse.extraction import (
    ExtractionError,
    extract_best_match_link,
    extract_cast,
    extract_film_details,
    extract_studios,
    extract_title,
    is_film_location,
    title_matches,
)
from kinoparse.infrastructure.scheduler import NavigationScheduler
from kinoparse.models import MovieRecord, NavigationState, NotFound, PageState
from kinoparse.urls import build_search_url, cast_url, film_url, studio_url
from kinoparse.utils.challenge_handler import ChallengeEvent, detect_challenge

logger = logging.getLogger(__name__)


class ProgressState:
    """
    Observable batch progress.

    ``progress`` counts dequeued records; ``completed`` flips once when the
    queue is exhausted. Subscribers are called on the scraper's event loop.
    """

    def __init__(self):
        self._progress = 0
        self._completed = False
        self._progress_listeners: List[Callable[[int], None]] = []
        self._completed_listeners: List[Callable[[], None]] = []

    @property
    def progress(self) -> int:
        return self._progress

    @property
    def completed(self) -> bool:
        return self._completed

    def subscribe_progress(self, callback: Callable[[int], None]) -> None:
        """Call ``callback(count)`` after every dequeued record."""
        self._progress_listeners.append(callback)

    def subscribe_completed(self, callback: Callable[[], None]) -> None:
        """Call ``callback()`` once when the batch is done."""
        self._completed_listeners.append(callback)

    def increment(self) -> None:
        self._progress += 1
        for callback in self._progress_listeners:
            try:
                callback(self._progress)
            except Exception:
                logger.exception("Progress listener failed")

    def complete(self) -> None:
        if self._completed:
            return
        self._completed = True
        for callback in self._completed_listeners:
            try:
                callback()
            except Exception:
                logger.exception("Completion listener failed")

    def reset(self) -> None:
        """Clear counters; subscriptions are kept."""
        self._progress = 0
        self._completed = False


class KinopoiskScraper:
    """
    Enriches MovieRecords from kinopoisk page by page.

    Usage:
        async with PlaywrightBrowser(STEALTH_CONFIG) as browser:
            scraper = KinopoiskScraper(browser, checkpoint_store=store)
            records = await scraper.run(queue, restored=store.load_all())
    """

    def __init__(
        self,
        browser: AbstractBrowser,
        checkpoint_store: Optional[AbstractCheckpointStore] = None,
        countries: Optional[CountryLookup] = None,
        config: Optional[ScraperConfig] = None,
        scheduler: Optional[NavigationScheduler] = None,
    ):
        """
        Initialize the scraper.

        Args:
            browser: Browser collaborator; its completions drive the machine
            checkpoint_store: Receives every record once its processing ends
            countries: Country name -> kinopoisk id lookup for search URLs
            config: Delays, host and captcha marker
            scheduler: Navigation scheduler (default: built from config)
        """
        self.config = config or ScraperConfig()
        self._browser = browser
        self._store = checkpoint_store
        self._countries = countries or CountryLookup()
        self._scheduler = scheduler or NavigationScheduler(self.config.rate_limit_config())

        self.navigation = NavigationState()
        self.progress = ProgressState()
        self.challenges: List[ChallengeEvent] = []
        self.current: Optional[MovieRecord] = None

        self._handlers: Dict[PageState, Callable[[PageLoad], None]] = {
            PageState.SEARCH: self._handle_search,
            PageState.FILM: self._handle_film,
            PageState.STUDIO: self._handle_studio,
            PageState.CAST: self._handle_cast,
        }

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._done: Optional[asyncio.Event] = None
        self._pending: Iterator[MovieRecord] = iter(())
        self._restored: Dict[Tuple, MovieRecord] = {}
        self._running = False

        self._browser.set_listener(self._on_navigation_complete)

    async def run(
        self,
        queue: Iterable[MovieRecord],
        restored: Optional[Iterable[MovieRecord]] = None,
    ) -> List[MovieRecord]:
        """
        Process every record of ``queue`` in order.

        Args:
            queue: Records to enrich; they are mutated in place
            restored: Previously processed records, matched by identity

        Returns:
            The queued records, enriched
        """
        if self._running:
            raise RuntimeError("Scraper is already running")

        records = list(queue)
        self._restored = {}
        for record in restored or []:
            self._restored.setdefault(record.identity, record)
        self._pending = iter(records)
        self.current = None
        self.challenges = []
        self.navigation.reset()
        self.progress.reset()

        self._loop = asyncio.get_running_loop()
        self._done = asyncio.Event()
        self._scheduler.bind(self._loop)
        self._browser.bind(self._loop)
        self._running = True

        logger.info(
            f"Starting batch of {len(records)} records "
            f"({len(self._restored)} restored entries available)"
        )

        try:
            self._advance()
            await self._done.wait()
        finally:
            self._scheduler.cancel()
            self._running = False

        logger.info(
            f"Batch complete: {self.progress.progress} records, "
            f"{len(self.challenges)} abandoned on captcha"
        )
        return records

    def get_summary(self) -> Dict[str, int]:
        """Counts for the run report."""
        return {
            "processed": self.progress.progress,
            "challenges": len(self.challenges),
            "navigations_scheduled": self._scheduler.get_metrics().total_scheduled,
        }

    # =========================================================================
    # Trigger sources
    # =========================================================================

    def _on_navigation_complete(self, page: Optional[PageLoad]) -> None:
        """Browser completion callback."""
        if self.current is None or self.navigation.state is PageState.NEXT:
            logger.warning("Navigation completed with no page pending, ignoring")
            return

        if page is None:
            logger.error(f"No page retrieved for {self.current} ({self.navigation.state.value})")
            self._fail()
            self._advance()
            return

        self._next_step(page)

    def _navigate(self, url: str) -> None:
        """Delayed navigation callback."""
        if self.current is None:
            return
        try:
            self._browser.navigate(url)
        except Exception:
            logger.exception(f"Navigation to {url} could not be started")
            self._fail()
            self._advance()

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _next_step(self, page: Optional[PageLoad]) -> None:
        state = self.navigation.state
        if state is not PageState.NEXT:
            try:
                self._handlers[state](page)
            except ExtractionError as e:
                logger.warning(f"Unexpected {state.value} page layout for {self.current}: {e}")
                self._fail()
            except Exception:
                logger.exception(f"Failed to handle {state.value} page for {self.current}")
                self._fail()

        if self.navigation.state is PageState.NEXT:
            self._advance()

    def _fail(self) -> None:
        self.current.add_not_found(NotFound.ERROR)
        self.navigation.state = PageState.NEXT

    def _advance(self) -> None:
        """Finalize the current record and start the next one."""
        self._scheduler.cancel()

        if self.current is not None:
            self._finalize(self.current)
            self.current = None

        record = next(self._pending, None)
        self.navigation.reset()

        if record is None:
            self.progress.complete()
            if self._done is not None:
                self._done.set()
            return

        self.progress.increment()
        self.current = record
        logger.info(f"Start: {record}")

        restored = self._restored.get(record.identity)
        if restored is not None:
            record.copy_enrichment_from(restored)
            logger.info(f"Restored {record} from checkpoint")
            # Finalize on the next loop iteration so long restored runs don't recurse
            self._loop.call_soon(self._next_step, None)
            return

        self._load_search_page(record)

    def _finalize(self, record: MovieRecord) -> None:
        if self._store is not None:
            try:
                self._store.save(record)
            except Exception:
                logger.exception(f"Checkpoint save failed for {record}")

        flags = ", ".join(sorted(flag.value for flag in record.not_found)) or "none"
        logger.info(f"Finish: {record} (not found: {flags})")

    def _schedule(self, state: PageState, url: str) -> None:
        self.navigation.state = state
        if state is PageState.SEARCH:
            delay = self._scheduler.schedule_search(self._navigate, url)
        else:
            delay = self._scheduler.schedule_page(self._navigate, url)
        logger.info(f"Loading {state.value} page in {delay:.1f}s: {url}")

    def _challenged(self, page: PageLoad) -> bool:
        """Abandon the current record if the page is a captcha."""
        challenge = detect_challenge(page.location, self.config.captcha_marker)
        if challenge is None:
            return False

        logger.warning(
            f"Captcha ({challenge}) on {self.navigation.state.value} page for "
            f"{self.current}, abandoning record"
        )
        self.challenges.append(
            ChallengeEvent(
                location=page.location,
                record=str(self.current),
                stage=self.navigation.state.value,
            )
        )
        self.navigation.state = PageState.NEXT
        return True

    # =========================================================================
    # Page handlers
    # =========================================================================

    def _load_search_page(self, record: MovieRecord) -> None:
        url = build_search_url(
            record.name,
            record.year,
            self._countries.id_of(record.country),
            host=self.config.host,
        )
        self._schedule(PageState.SEARCH, url)

    def _handle_search(self, page: PageLoad) -> None:
        if self._challenged(page):
            return

        # Exact matches redirect straight to the film page
        if is_film_location(page.location):
            self.navigation.state = PageState.FILM
            self._handle_film(page)
            return

        data_url = extract_best_match_link(page.document)
        if data_url is None:
            logger.info(f"No search results for {self.current}")
            self.current.add_not_found(NotFound.MOVIE)
            self.navigation.state = PageState.NEXT
            return

        self._schedule(PageState.FILM, film_url(data_url, self.config.host))

    def _handle_film(self, page: PageLoad) -> None:
        if self._challenged(page):
            return

        record = self.current
        doc = page.document
        if not title_matches(doc, record.name):
            logger.info(f"Title mismatch for {record}: found {extract_title(doc)!r}")
            record.add_not_found(NotFound.MOVIE)
            self.navigation.state = PageState.NEXT
            return

        record.link = page.location
        details = extract_film_details(doc)
        if details.original_name:
            record.original_name = details.original_name
        self.navigation.russian = details.russian

        if details.studio_disabled:
            record.add_not_found(NotFound.STUDIO)
            self._schedule(PageState.CAST, cast_url(record.link))
        else:
            self._schedule(PageState.STUDIO, studio_url(record.link))

    def _handle_studio(self, page: PageLoad) -> None:
        if self._challenged(page):
            return

        self.current.studio = extract_studios(page.document)
        self._schedule(PageState.CAST, cast_url(self.current.link))

    def _handle_cast(self, page: PageLoad) -> None:
        if self._challenged(page):
            return

        record = self.current
        cast = extract_cast(page.document, self.navigation.russian)

        if cast.director is None:
            record.add_not_found(NotFound.DIRECTOR)
        else:
            record.director = cast.director

        if cast.composer is None:
            record.add_not_found(NotFound.COMPOSER)
        else:
            record.composer = cast.composer

        self.navigation.state = PageState.NEXT
