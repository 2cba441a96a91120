# src/kinoparse/checkpoint.py
"""Checkpoint stores for resumable enrichment runs.

Every record is saved once its processing ends, keyed by its identity.
On the next run ``load_all()`` provides the restore cache, so records that
were already processed are copied instead of fetched again.
"""

import hashlib
import json
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import List, Optional
import logging

from kinoparse.config import settings
from kinoparse.models import MovieRecord

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS movie_checkpoints (
    identity TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    year TEXT,
    country TEXT,
    record_key TEXT,
    genre TEXT,

    -- Enrichment
    original_name TEXT,
    link TEXT,
    director TEXT,
    composer TEXT,
    studio TEXT,
    not_found TEXT NOT NULL,

    saved_at TIMESTAMP NOT NULL
);
"""


def identity_key(record: MovieRecord) -> str:
    """Stable string form of a record's identity."""
    return json.dumps(list(record.identity), ensure_ascii=False)


class AbstractCheckpointStore(ABC):
    """Abstract base class defining the checkpoint store interface."""

    @abstractmethod
    def connect(self) -> None:
        """Open the underlying storage."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the underlying storage."""
        pass

    @abstractmethod
    def create_schema(self) -> None:
        """Prepare storage for records."""
        pass

    @abstractmethod
    def save(self, record: MovieRecord) -> None:
        """Save a record, replacing any earlier save with the same identity."""
        pass

    @abstractmethod
    def load_all(self) -> List[MovieRecord]:
        """Return every saved record."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Delete every saved record."""
        pass


class SqliteCheckpointStore(AbstractCheckpointStore):
    """SQLite checkpoint store."""

    def __init__(self, db_url: Optional[str] = None):
        """Initialize the SQLite store.

        Args:
            db_url: Database URL (sqlite:///path/to/db.db). Defaults to settings.CHECKPOINT_URL.
        """
        self.db_url = db_url or settings.CHECKPOINT_URL
        self.db_path = self.db_url.replace("sqlite:///", "")
        self.conn: Optional[sqlite3.Connection] = None
        self.connect()
        self.create_schema()

    def connect(self) -> None:
        """Establish SQLite connection."""
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row
        logger.debug(f"Connected to checkpoint database: {self.db_path}")

    def close(self) -> None:
        """Close SQLite connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.debug("Closed checkpoint database")

    def create_schema(self) -> None:
        """Create the checkpoints table if it doesn't exist."""
        with self.conn:
            self.conn.execute(CREATE_TABLE_SQL)
        logger.debug("Checkpoint schema verified/created")

    def save(self, record: MovieRecord) -> None:
        """Upsert a record keyed by its identity."""
        data = record.to_dict()
        values = (
            identity_key(record),
            data["name"],
            data["year"],
            data["country"],
            data["key"],
            data["genre"],
            data["original_name"],
            data["link"],
            data["director"],
            data["composer"],
            data["studio"],
            json.dumps(data["not_found"]),
            datetime.now().isoformat(),
        )
        insert_sql = (
            "INSERT OR REPLACE INTO movie_checkpoints "
            "(identity, name, year, country, record_key, genre, original_name, link, "
            "director, composer, studio, not_found, saved_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)"
        )

        with self.conn:
            self.conn.execute(insert_sql, values)
        logger.debug(f"Checkpoint saved for {record}")

    def load_all(self) -> List[MovieRecord]:
        """Load saved records in save order."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT * FROM movie_checkpoints ORDER BY saved_at ASC")

        records = []
        for row in cursor.fetchall():
            data = dict(row)
            data["key"] = data.pop("record_key")
            data["not_found"] = json.loads(data["not_found"])
            records.append(MovieRecord.from_dict(data))
        return records

    def clear(self) -> None:
        with self.conn:
            self.conn.execute("DELETE FROM movie_checkpoints")
        logger.info("Cleared checkpoint database")


class JsonCheckpointStore(AbstractCheckpointStore):
    """One JSON file per record in a directory."""

    def __init__(self, storage_dir: Optional[Path] = None):
        """
        Initialize the JSON store.

        Args:
            storage_dir: Directory for checkpoint files (default: settings.CHECKPOINT_DIR)
        """
        self.storage_dir = Path(storage_dir or settings.CHECKPOINT_DIR)
        self.connect()

    def connect(self) -> None:
        self.create_schema()

    def close(self) -> None:
        pass

    def create_schema(self) -> None:
        """Create the storage directory."""
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Checkpoint directory ready at {self.storage_dir}")

    def _get_record_path(self, record: MovieRecord) -> Path:
        """Get file path for a record's checkpoint."""
        digest = hashlib.sha1(identity_key(record).encode("utf-8")).hexdigest()
        return self.storage_dir / f"{digest}.json"

    def save(self, record: MovieRecord) -> None:
        data = record.to_dict()
        data["saved_at"] = datetime.now().isoformat()

        path = self._get_record_path(record)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        logger.debug(f"Checkpoint saved for {record} at {path}")

    def load_all(self) -> List[MovieRecord]:
        """Load saved records in save order; unreadable files are skipped."""
        entries = []
        for path in self.storage_dir.glob("*.json"):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                entries.append((data.get("saved_at") or "", MovieRecord.from_dict(data)))
            except (OSError, ValueError, KeyError) as e:
                logger.warning(f"Skipping unreadable checkpoint {path}: {e}")

        entries.sort(key=lambda entry: entry[0])
        return [record for _, record in entries]

    def clear(self) -> None:
        for path in self.storage_dir.glob("*.json"):
            path.unlink()
        logger.info(f"Cleared checkpoints in {self.storage_dir}")


def get_checkpoint_store(
    backend: Optional[str] = None,
    **kwargs,
) -> AbstractCheckpointStore:
    """Factory function to create the configured checkpoint store.

    Args:
        backend: Store backend ('sqlite' or 'json'). Defaults to settings.CHECKPOINT_BACKEND.
        **kwargs: Additional arguments passed to the store constructor.

    Returns:
        An instance of AbstractCheckpointStore.

    Raises:
        ValueError: If an unknown backend is specified.
    """
    backend = backend or settings.CHECKPOINT_BACKEND

    if backend == "sqlite":
        logger.info("Using SQLite checkpoint store")
        return SqliteCheckpointStore(**kwargs)
    elif backend == "json":
        logger.info("Using JSON checkpoint store")
        return JsonCheckpointStore(**kwargs)
    else:
        raise ValueError(
            f"Unknown checkpoint backend: '{backend}'. "
            "Supported backends: 'sqlite', 'json'"
        )
