"""URL construction for kinopoisk pages."""

from typing import Optional
from urllib.parse import quote_plus

HOST = "https://www.kinopoisk.ru"

# kinopoisk still decodes its search form as windows-1251
SITE_ENCODING = "cp1251"

STUDIO_URL_PART = "studio/"
CAST_URL_PART = "cast/"


def encode(value: str) -> str:
    """Percent-encode a query value the way kinopoisk's own search form does.

    Matches java.net.URLEncoder with cp1251: spaces become ``+``, only
    ``A-Za-z0-9.-*_`` are left as is, and unencodable characters turn
    into ``?``.
    """
    encoded = quote_plus(value, safe="*", encoding=SITE_ENCODING, errors="replace")
    # quote_plus leaves "~" alone, the site form escapes it
    return encoded.replace("~", "%7E")


def build_search_url(
    name: str,
    year: str,
    country_id: Optional[int] = None,
    host: str = HOST,
) -> str:
    """Build the advanced search URL for a movie.

    Args:
        name: Movie name as it appears in the schedule
        year: Release year
        country_id: kinopoisk country id, omitted from the query when None
        host: Site root

    Returns:
        Absolute search URL
    """
    url = (
        f"{host}/index.php?level=7&from=forma&result=adv"
        f"&{encode('m_act[from]')}=forma"
        f"&{encode('m_act[what]')}=content"
        f"&{encode('m_act[find]')}={encode(name)}"
        f"&{encode('m_act[year]')}={encode(year)}"
    )
    if country_id is not None:
        url += f"&{encode('m_act[country]')}={country_id}"
    return url


def film_url(data_url: str, host: str = HOST) -> str:
    """Absolute film URL from a search result's relative ``data-url``."""
    return host + data_url


def _sub_page(link: str, part: str) -> str:
    if not link.endswith("/"):
        link += "/"
    return link + part


def studio_url(link: str) -> str:
    return _sub_page(link, STUDIO_URL_PART)


def cast_url(link: str) -> str:
    return _sub_page(link, CAST_URL_PART)
