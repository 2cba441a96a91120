"""
Extraction rules for kinopoisk pages.

One group of pure functions per page type (search, film, studio, cast).
Each takes a parsed document and returns the extracted fields, ``None``
for "not on this page", or raises ExtractionError when the page does not
have the structure the rule expects.

kinopoisk offers few semantic anchors, so several rules walk fixed
table/row/column positions. Those indices are coupled to the site's
current layout and will break when it changes; they are kept literal on
purpose instead of being guessed at.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag

logger = logging.getLogger(__name__)


FILM_LOCATION_PATTERN = re.compile(r"film/.+")

# Lower-cased country tokens that mark a Russian or Soviet production
RUSSIAN_ORIGIN_MARKERS = ("россия", "ссср")


class ExtractionError(Exception):
    """Raised when a page does not have the expected structure."""


@dataclass
class FilmDetails:
    """Fields read from a film page."""
    original_name: Optional[str] = None
    countries: List[str] = field(default_factory=list)
    russian: bool = False
    studio_disabled: bool = False


@dataclass
class CastDetails:
    """Crew read from a cast page; None means the role's section is absent."""
    director: Optional[str] = None
    composer: Optional[str] = None


def parse_document(html: str) -> BeautifulSoup:
    """Parse rendered HTML into a document."""
    return BeautifulSoup(html, "html.parser")


def _text(element) -> str:
    """Element text with whitespace collapsed."""
    return " ".join(element.get_text().split())


def _all(element: Tag, tag: str) -> List[Tag]:
    """Elements named ``tag`` in document order, the element itself included."""
    found = element.find_all(tag)
    if element.name == tag:
        return [element] + found
    return found


def _nth(element: Tag, tag: str, index: int) -> Tag:
    matches = _all(element, tag)
    if index >= len(matches):
        raise ExtractionError(
            f"<{tag}>[{index}] not found under <{element.name}> "
            f"({len(matches)} present)"
        )
    return matches[index]


def _by_id(doc: BeautifulSoup, element_id: str) -> Tag:
    element = doc.find(id=element_id)
    if element is None:
        raise ExtractionError(f"#{element_id} not found")
    return element


def _first_child_element(element: Tag) -> Tag:
    for child in element.children:
        if isinstance(child, Tag):
            return child
    raise ExtractionError(f"<{element.name}> has no child elements")


# =============================================================================
# Search results
# =============================================================================

def is_film_location(location: str) -> bool:
    """Whether the search was redirected straight to a film page."""
    return FILM_LOCATION_PATTERN.search(location.lower()) is not None


def extract_best_match_link(doc: BeautifulSoup) -> Optional[str]:
    """
    Relative URL of the search page's "best match" result.

    Returns:
        The result's ``data-url`` path, or None if the search found nothing
    """
    block = doc.select_one(".element.most_wanted")
    if block is None:
        return None

    name = block.find(class_="name")
    if name is None:
        raise ExtractionError("best match block has no .name")
    link = name.find("a")
    if link is None:
        raise ExtractionError("best match block has no link")

    data_url = link.get("data-url")
    if not data_url:
        raise ExtractionError("best match link has no data-url")
    return data_url


# =============================================================================
# Film page
# =============================================================================

def extract_title(doc: BeautifulSoup) -> str:
    """Displayed (localized) film title, without the year/rating spans."""
    header = doc.find(class_="moviename-big")
    if header is None:
        raise ExtractionError(".moviename-big not found")

    # Comments and CDATA are NavigableString subclasses
    texts = [node for node in header.children if type(node) is NavigableString]
    if not texts:
        raise ExtractionError(".moviename-big has no text")
    return " ".join(str(texts[0]).split())


def title_matches(doc: BeautifulSoup, query_name: str) -> bool:
    """Case-insensitive comparison of the displayed title with the query."""
    return extract_title(doc).lower() == query_name.strip().lower()


def is_russian_origin(countries: List[str]) -> bool:
    for country in countries:
        token = country.lower()
        if any(marker in token for marker in RUSSIAN_ORIGIN_MARKERS):
            return True
    return False


def extract_film_details(doc: BeautifulSoup) -> FilmDetails:
    """Original title, origin countries and studio page availability."""
    details = FilmDetails()

    header = _by_id(doc, "headerFilm")
    alternative = header.find(attrs={"itemprop": "alternativeHeadline"})
    if alternative is not None:
        original_name = _text(alternative)
        if original_name:
            details.original_name = original_name

    # Second row of the info table is "country", its links are the countries
    info_table = _by_id(doc, "infoTable")
    countries_row = _nth(info_table, "tr", 1)
    countries_cell = _nth(countries_row, "td", 1)
    details.countries = [_text(a) for a in countries_cell.find_all("a")]
    details.russian = is_russian_origin(details.countries)

    # The studio entry is the 16th child node of the sub-menu, whitespace
    # text nodes included. Disabled entries carry the "off" class.
    menu = _by_id(doc, "newMenuSub")
    if len(menu.contents) <= 15:
        raise ExtractionError("#newMenuSub is shorter than expected")
    studio_entry = menu.contents[15]
    if not isinstance(studio_entry, Tag):
        raise ExtractionError("#newMenuSub studio entry is not an element")
    details.studio_disabled = "off" in (studio_entry.get("class") or [])

    return details


# =============================================================================
# Studio page
# =============================================================================

def extract_studios(doc: BeautifulSoup) -> str:
    """
    Production companies listed on the studio page, joined with ", ".

    The list is a table nested several levels deep in the left column;
    rows 0 and 1 are headers and the last row is a footer.
    """
    element = _first_child_element(_by_id(doc, "block_left"))
    element = _nth(element, "table", 0)
    element = _nth(element, "tr", 0)
    element = _nth(element, "table", 0)
    element = _nth(element, "tr", 3)
    element = _nth(element, "td", 0)
    element = _nth(element, "div", 0)
    element = _nth(element, "table", 0)

    rows = _all(element, "tr")
    studios = []
    for row in rows[2:len(rows) - 1]:
        link = _nth(_nth(row, "td", 1), "a", 0)
        studios.append(_text(link))

    return ", ".join(studios)


# =============================================================================
# Cast page
# =============================================================================

def _crew_name(entry: Tag, russian: bool) -> str:
    info = entry.find(class_="actorInfo")
    if info is None:
        raise ExtractionError("cast entry has no .actorInfo")
    name_block = info.find(class_="name")
    if name_block is None:
        raise ExtractionError("cast entry has no .name")
    link = name_block.find("a")
    if link is None:
        raise ExtractionError("cast entry has no name link")

    name = _text(link)
    span = name_block.find("span")
    second_name = _text(span) if span is not None else ""

    # Russian productions keep the Russian spelling, others prefer the
    # original-language name when the site gives one
    if russian or not second_name:
        return name
    return second_name


def _attr_equals(value: Optional[str], expected: str) -> bool:
    """Trimmed, case-insensitive attribute comparison."""
    return value is not None and value.strip().lower() == expected.lower()


def _is_cast_entry(element: Optional[Tag]) -> bool:
    return (
        element is not None
        and element.name == "div"
        and "dub" in (element.get("class") or [])
    )


def extract_crew(doc: BeautifulSoup, role: str, russian: bool) -> Optional[str]:
    """
    Names listed under one crew role, joined with ", ".

    The role's anchor is followed by a heading element, then by a run of
    ``div.dub`` entries; the run ends at the first element that is not one.

    Returns:
        Joined names, or None when the page has no section for the role
    """
    sentinel = doc.find(attrs={"name": lambda value: _attr_equals(value, role)})
    if sentinel is None:
        return None

    heading = sentinel.find_next_sibling()
    if heading is None:
        raise ExtractionError(f"{role} anchor has no following elements")

    names = []
    entry = heading.find_next_sibling()
    while _is_cast_entry(entry):
        names.append(_crew_name(entry, russian))
        entry = entry.find_next_sibling()

    return ", ".join(names)


def extract_cast(doc: BeautifulSoup, russian: bool) -> CastDetails:
    """Director and composer from the cast page."""
    return CastDetails(
        director=extract_crew(doc, "director", russian),
        composer=extract_crew(doc, "composer", russian),
    )
