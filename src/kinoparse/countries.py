"""Country name to kinopoisk country id lookup.

The ids are the values of kinopoisk's ``m_act[country]`` advanced search
field. Unknown countries are not an error: the search is simply issued
without a country filter.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


DEFAULT_COUNTRY_IDS: Dict[str, int] = {
    "сша": 1,
    "россия": 2,
    "германия": 3,
    "канада": 6,
    "франция": 8,
    "япония": 9,
    "великобритания": 11,
    "ссср": 13,
    "италия": 14,
    "испания": 15,
    "индия": 29,
    "китай": 31,
}

# English aliases for inputs prepared outside the Russian-language schedule
COUNTRY_ALIASES: Dict[str, str] = {
    "usa": "сша",
    "united states": "сша",
    "russia": "россия",
    "germany": "германия",
    "canada": "канада",
    "france": "франция",
    "japan": "япония",
    "uk": "великобритания",
    "united kingdom": "великобритания",
    "great britain": "великобритания",
    "ussr": "ссср",
    "italy": "италия",
    "spain": "испания",
    "india": "индия",
    "china": "китай",
}


def _normalize(name: str) -> str:
    return " ".join(name.split()).lower()


class CountryLookup:
    """Case-insensitive country name lookup."""

    def __init__(self, table: Optional[Dict[str, int]] = None):
        """
        Args:
            table: Extra or overriding name -> id entries
        """
        self._ids = dict(DEFAULT_COUNTRY_IDS)
        for name, country_id in (table or {}).items():
            self._ids[_normalize(name)] = int(country_id)

    @classmethod
    def from_file(cls, path: str) -> "CountryLookup":
        """Load a JSON ``{name: id}`` mapping merged over the default table.

        A missing file yields the default table.
        """
        file_path = Path(path)
        if not file_path.exists():
            logger.warning(f"Countries file not found: {path}, using defaults")
            return cls()

        with open(file_path, "r", encoding="utf-8") as f:
            table = json.load(f)

        logger.debug(f"Loaded {len(table)} countries from {path}")
        return cls(table)

    def id_of(self, name: Optional[str]) -> Optional[int]:
        """Return the kinopoisk id for a country name, or None if unknown."""
        if not name:
            return None

        key = _normalize(name)
        if key in self._ids:
            return self._ids[key]

        alias = COUNTRY_ALIASES.get(key)
        if alias is not None:
            return self._ids.get(alias)

        return None

    def __len__(self) -> int:
        return len(self._ids)
