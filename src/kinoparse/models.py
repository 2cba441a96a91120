"""Data models for movie enrichment."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class NotFound(str, Enum):
    """Fields or stages that could not be resolved for a record."""
    MOVIE = "MOVIE"
    STUDIO = "STUDIO"
    DIRECTOR = "DIRECTOR"
    COMPOSER = "COMPOSER"
    ERROR = "ERROR"


class PageState(str, Enum):
    """Which kinopoisk page the scraper is waiting on."""
    NEXT = "next"
    SEARCH = "search"
    FILM = "film"
    STUDIO = "studio"
    CAST = "cast"


ENRICHMENT_FIELDS = ("original_name", "link", "director", "composer", "studio")


@dataclass
class MovieRecord:
    """One query-to-enrichment unit of work."""

    # Identity (fixed once queued)
    name: str
    year: str
    country: Optional[str] = None
    key: Optional[str] = None  # Caller supplied alternate identity
    genre: Optional[str] = None  # Passthrough for the combined report

    # Enrichment (written by the scraper only)
    original_name: Optional[str] = None
    link: Optional[str] = None
    director: Optional[str] = None
    composer: Optional[str] = None
    studio: Optional[str] = None

    not_found: set[NotFound] = field(default_factory=set)

    @property
    def identity(self) -> Tuple[Optional[str], ...]:
        """Key used to match this record against a restore cache."""
        if self.key:
            return ("key", self.key)
        return ("query", self.name, self.year, self.country)

    def matches(self, other: "MovieRecord") -> bool:
        return self.identity == other.identity

    def add_not_found(self, flag: NotFound) -> None:
        self.not_found.add(flag)

    def copy_enrichment_from(self, other: "MovieRecord") -> None:
        """Copy enrichment fields and not-found flags verbatim from another record."""
        for name in ENRICHMENT_FIELDS:
            setattr(self, name, getattr(other, name))
        self.not_found = set(other.not_found)

    @property
    def is_complete(self) -> bool:
        """True when every enrichable field is set and nothing was flagged."""
        return (
            not self.not_found
            and self.link is not None
            and self.director is not None
            and self.composer is not None
            and self.studio is not None
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "year": self.year,
            "country": self.country,
            "key": self.key,
            "genre": self.genre,
            "original_name": self.original_name,
            "link": self.link,
            "director": self.director,
            "composer": self.composer,
            "studio": self.studio,
            "not_found": sorted(flag.value for flag in self.not_found),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MovieRecord":
        """Deserialize from dictionary."""
        year = data.get("year")
        return cls(
            name=data["name"],
            year="" if year is None else str(year),
            country=data.get("country"),
            key=data.get("key"),
            genre=data.get("genre"),
            original_name=data.get("original_name"),
            link=data.get("link"),
            director=data.get("director"),
            composer=data.get("composer"),
            studio=data.get("studio"),
            not_found={NotFound(flag) for flag in data.get("not_found") or []},
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.year}, {self.country or '-'})"


@dataclass
class NavigationState:
    """Transient per-record navigation state, reused across records."""
    state: PageState = PageState.NEXT
    russian: bool = False  # Film countries include Russia/USSR

    def reset(self) -> None:
        self.state = PageState.NEXT
        self.russian = False


@dataclass
class PlayReportEntry:
    """A movie as listed in a broadcast play report."""
    movie_name: str
    date_time: str  # Comma separated airings
    duration: str = ""

    @property
    def airings(self) -> list[str]:
        """Individual airings; an entry without dates still yields one blank airing."""
        dates = [d.strip() for d in self.date_time.split(",") if d.strip()]
        return dates or [""]


@dataclass
class ReportRow:
    """One airing of one movie in the combined report."""
    name: str
    date_time: str
    duration: str = ""
    genre: Optional[str] = None
    country: Optional[str] = None
    year: Optional[str] = None
    director: Optional[str] = None
    composer: Optional[str] = None
    studio: Optional[str] = None
    link: Optional[str] = None
    not_found: list[str] = field(default_factory=list)
    schedule_name: Optional[str] = None  # Name as it appears in the schedule grid
    note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "date_time": self.date_time,
            "duration": self.duration,
            "genre": self.genre,
            "country": self.country,
            "year": self.year,
            "director": self.director,
            "composer": self.composer,
            "studio": self.studio,
            "link": self.link,
            "not_found": self.not_found,
            "schedule_name": self.schedule_name,
            "note": self.note,
        }
