"""Input loading and timestamped output directories for enrichment runs."""

import csv
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from kinoparse.models import MovieRecord, PlayReportEntry, ReportRow
from kinoparse.utils.challenge_handler import ChallengeEvent

logger = logging.getLogger(__name__)


class DateTimeEncoder(json.JSONEncoder):
    """JSON encoder that handles datetime objects."""

    def default(self, obj):
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


class OutputManager:
    """Reads batch inputs and writes run results into timestamped directories."""

    def __init__(self, base_output_dir: str = "results"):
        """Initialize output manager.

        Args:
            base_output_dir: Base directory for all run outputs
        """
        self.base_output_dir = Path(base_output_dir)
        self.base_output_dir.mkdir(parents=True, exist_ok=True)

    def create_run_directory(self, kind: str, timestamp: Optional[datetime] = None) -> Path:
        """Create a timestamped directory for one run.

        Args:
            kind: Run type ("enrich" or "combine")
            timestamp: Optional timestamp (defaults to now)

        Returns:
            Path to the created directory

        Example structure:
            results/
            ├── enrich/
            │   ├── 2025-11-23_143022/
            │   │   ├── results.json
            │   │   ├── challenges.json
            │   │   └── summary.txt
            │   └── latest -> 2025-11-23_143022
            └── combine/
                └── 2025-11-24_090000/
                    └── report.json
        """
        if timestamp is None:
            timestamp = datetime.now()

        timestamp_str = timestamp.strftime("%Y-%m-%d_%H%M%S")
        run_dir = self.base_output_dir / kind / timestamp_str
        run_dir.mkdir(parents=True, exist_ok=True)
        return run_dir

    def save_results(
        self,
        run_dir: Path,
        records: List[MovieRecord],
        challenges: Optional[List[ChallengeEvent]] = None,
        stats: Optional[Dict] = None,
    ) -> None:
        """Save enrichment results to the directory.

        Args:
            run_dir: Directory to save to
            records: Processed records
            challenges: Captchas met during the run
            stats: Optional run statistics
        """
        self._save_json(run_dir / "results.json", [record.to_dict() for record in records])
        self._save_json(
            run_dir / "challenges.json",
            [event.to_dict() for event in challenges or []],
        )
        self._save_summary(run_dir / "summary.txt", records, challenges or [], stats)
        self._create_latest_link(run_dir)
        logger.info(f"Results saved to {run_dir}")

    def save_report(self, run_dir: Path, rows: List[ReportRow]) -> Path:
        """Save combined report rows.

        Returns:
            Path of the written report
        """
        path = run_dir / "report.json"
        self._save_json(path, [row.to_dict() for row in rows])
        self._create_latest_link(run_dir)
        logger.info(f"Combined report saved to {path}")
        return path

    def load_records(self, path: str) -> List[MovieRecord]:
        """Load query records from a JSON list or a CSV file with a header row.

        Both formats use the MovieRecord field names; only ``name`` and
        ``year`` are required.
        """
        rows = self._load_rows(Path(path))
        records = []
        for row in rows:
            data = {k: v for k, v in row.items() if v not in ("", None)}
            records.append(MovieRecord.from_dict(data))
        logger.info(f"Loaded {len(records)} records from {path}")
        return records

    def load_play_report(self, path: str) -> List[PlayReportEntry]:
        """Load play report entries (movie_name, date_time, duration)."""
        entries = [
            PlayReportEntry(
                movie_name=row["movie_name"],
                date_time=str(row.get("date_time") or ""),
                duration=str(row.get("duration") or ""),
            )
            for row in self._load_rows(Path(path))
        ]
        logger.info(f"Loaded {len(entries)} play report entries from {path}")
        return entries

    def _load_rows(self, path: Path) -> List[dict]:
        if path.suffix.lower() == ".csv":
            with open(path, "r", encoding="utf-8-sig", newline="") as f:
                return list(csv.DictReader(f))

        data = self._load_json(path)
        if not isinstance(data, list):
            raise ValueError(f"{path} must contain a JSON list")
        return data

    def _save_json(self, filepath: Path, data) -> None:
        """Save data as formatted JSON.

        Args:
            filepath: Path to save to
            data: Data to save
        """
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, cls=DateTimeEncoder)

    def _load_json(self, filepath: Path):
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)

    def _save_summary(
        self,
        filepath: Path,
        records: List[MovieRecord],
        challenges: List[ChallengeEvent],
        stats: Optional[Dict],
    ) -> None:
        """Save human-readable summary."""
        complete = [record for record in records if record.is_complete]

        with open(filepath, "w", encoding="utf-8") as f:
            f.write("=" * 60 + "\n")
            f.write("KINOPOISK ENRICHMENT SUMMARY\n")
            f.write("=" * 60 + "\n\n")

            f.write(f"Finished at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
            f.write(f"Total records: {len(records)}\n")
            f.write(f"Fully enriched: {len(complete)}\n")
            f.write(f"Abandoned on captcha: {len(challenges)}\n\n")

            if stats:
                f.write("RUN STATISTICS\n")
                f.write("-" * 60 + "\n")
                for key, value in stats.items():
                    f.write(f"{key}: {value}\n")
                f.write("\n")

            f.write("INCOMPLETE RECORDS\n")
            f.write("-" * 60 + "\n")
            for record in records:
                if record.is_complete:
                    continue
                flags = ", ".join(sorted(flag.value for flag in record.not_found)) or "-"
                f.write(f"{record} not found: {flags}\n")

    def _create_latest_link(self, run_dir: Path) -> None:
        """Create/update 'latest' symlink to this run."""
        latest_link = run_dir.parent / "latest"

        if latest_link.exists() or latest_link.is_symlink():
            latest_link.unlink()

        try:
            latest_link.symlink_to(run_dir.name)
        except (OSError, NotImplementedError):
            # Symlinks might not work on all systems (Windows)
            with open(run_dir.parent / "latest.txt", "w") as f:
                f.write(str(run_dir.name))
