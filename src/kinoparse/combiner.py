"""Join enrichment results with a broadcast play report.

Play reports list movies by the name used in the broadcast schedule, which
often carries episode numbers or punctuation the enrichment input lacks.
A report entry is matched to the first record whose normalized name is a
prefix of the entry's normalized name.
"""

import logging
import re
from typing import Iterable, List, Optional

from kinoparse.models import MovieRecord, PlayReportEntry, ReportRow

logger = logging.getLogger(__name__)

# Note attached to rows whose movie is missing from the schedule grid
UNMATCHED_NOTE = "Не найден в сетке СТП"

_IGNORED_CHARACTERS = re.compile(r"[ _\-.]")


def normalize_name(name: str) -> str:
    """Drop spaces, underscores, hyphens and dots, then lower-case."""
    return _IGNORED_CHARACTERS.sub("", name).lower()


def find_record(
    entry: PlayReportEntry,
    records: List[MovieRecord],
) -> Optional[MovieRecord]:
    """First record whose normalized name prefixes the entry's name."""
    entry_name = normalize_name(entry.movie_name)
    for record in records:
        record_name = normalize_name(record.name)
        # An empty name would prefix every entry
        if record_name and entry_name.startswith(record_name):
            return record
    return None


def _matched_row(record: MovieRecord, entry: PlayReportEntry, date_time: str) -> ReportRow:
    name = entry.movie_name
    if record.original_name:
        name = f"{name} ({record.original_name})"

    return ReportRow(
        name=name,
        date_time=date_time,
        duration=entry.duration,
        genre=record.genre,
        country=record.country,
        year=record.year,
        director=record.director,
        composer=record.composer,
        studio=record.studio,
        link=record.link,
        not_found=sorted(flag.value for flag in record.not_found),
        schedule_name=record.name,
    )


def combine(
    records: Iterable[MovieRecord],
    entries: Iterable[PlayReportEntry],
) -> List[ReportRow]:
    """
    Build the combined report, one row per airing.

    Args:
        records: Enriched records from the schedule grid
        entries: Play report entries in report order

    Returns:
        Report rows in play report order
    """
    records = list(records)
    rows: List[ReportRow] = []
    unmatched = 0

    for entry in entries:
        record = find_record(entry, records)
        if record is None:
            unmatched += 1
            logger.debug(f"No schedule entry for {entry.movie_name!r}")

        for date_time in entry.airings:
            if record is not None:
                rows.append(_matched_row(record, entry, date_time))
            else:
                rows.append(
                    ReportRow(
                        name=entry.movie_name,
                        date_time=date_time,
                        duration=entry.duration,
                        note=UNMATCHED_NOTE,
                    )
                )

    logger.info(f"Combined report: {len(rows)} rows, {unmatched} movies not in the schedule")
    return rows
