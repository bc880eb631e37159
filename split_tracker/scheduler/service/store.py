"""Key-value persistence for splits and the access cursor.

Architecture:
- KeyValueStore: async get/set of opaque string blobs (host-supplied)
  - InMemoryKeyValueStore: dict-backed, for tests and embedding
  - SqliteKeyValueStore: single `kv` table in a local SQLite file
- SplitStore: JSON codec over two keys
  - "@workout_splits": the whole collection, replaced on every write
  - "@last_access_date": local-midnight ISO timestamp
- YAML export/import: a human-editable copy of the collection

Collection read failures (backend errors, corrupt JSON) fall back to an
empty collection; invalid members are skipped. Cursor read failures raise
StorageReadError so the caller can leave the cursor alone. Write failures
raise StorageWriteError.
"""
import json
import sqlite3
import time
from datetime import date, datetime
from pathlib import Path
from typing import Any, Protocol

import yaml
from loguru import logger

from ...config import settings
from ..models import Split, validate_split
from ..schedule import to_local_date, to_midnight
from ..types import StorageReadError, StorageWriteError

logger = logger.bind(module="scheduler.store")


# ============== Key-Value Backends ==============

class KeyValueStore(Protocol):
    """Protocol for the host's key-value storage."""

    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        ...


class InMemoryKeyValueStore:
    """Dict-backed key-value store."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value


_INIT_SQL = """
CREATE TABLE IF NOT EXISTS kv (
    key           TEXT PRIMARY KEY,
    value         TEXT NOT NULL,
    updated_at_ms INTEGER NOT NULL
);
"""


class SqliteKeyValueStore:
    """Key-value store in a local SQLite database.

    Single connection, opened by initialize() and released by close().
    """

    def __init__(self, db_path: str | Path | None = None):
        """Initialize store.

        Args:
            db_path: SQLite file path, defaults to settings.db_path
        """
        self.db_path = Path(db_path or settings.db_path).expanduser()
        self._db: sqlite3.Connection | None = None

    # ============== Lifecycle ==============

    async def initialize(self) -> None:
        """Open the database and create the schema."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._db = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self._db.row_factory = sqlite3.Row
        self._db.execute("PRAGMA journal_mode=WAL")
        self._db.execute("PRAGMA synchronous=NORMAL")
        self._db.executescript(_INIT_SQL)

        logger.info(f"Store initialized: {self.db_path}")

    async def close(self) -> None:
        """Close store."""
        if self._db:
            self._db.close()
            self._db = None

    async def __aenter__(self) -> "SqliteKeyValueStore":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ============== Get / Set ==============

    def _conn(self) -> sqlite3.Connection:
        if self._db is None:
            raise RuntimeError("Store is not initialized")
        return self._db

    async def get(self, key: str) -> str | None:
        row = self._conn().execute(
            "SELECT value FROM kv WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    async def set(self, key: str, value: str) -> None:
        db = self._conn()
        db.execute(
            """INSERT INTO kv (key, value, updated_at_ms)
               VALUES (?, ?, ?)
               ON CONFLICT(key) DO UPDATE SET
                value=excluded.value,
                updated_at_ms=excluded.updated_at_ms
            """,
            (key, value, int(time.time() * 1000)),
        )
        db.commit()


# ============== Codec ==============

def splits_to_json(splits: list[Split]) -> str:
    return json.dumps([s.to_dict() for s in splits], ensure_ascii=False)


def splits_from_json(raw: str) -> list[Split]:
    """Decode the stored collection.

    Members that cannot be decoded or fail validate_split are skipped.

    Raises:
        ValueError: if the document is not valid JSON or not a list
    """
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array, got {type(data).__name__}")

    splits: list[Split] = []
    for item in data:
        try:
            split = Split.from_dict(item)
            validate_split(split)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Skipping undecodable split: {e}")
            continue
        splits.append(split)
    return splits


def format_access_date(value: date | datetime) -> str:
    return to_midnight(value).isoformat()


def parse_access_date(raw: str) -> date:
    """Parse a stored cursor (date, naive or aware datetime, 'Z' suffix)."""
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_local_date(datetime.fromisoformat(text))


# ============== Split Store ==============

class SplitStore:
    """Reads and writes the split collection and the access cursor."""

    def __init__(
        self,
        backend: KeyValueStore,
        splits_key: str | None = None,
        last_access_key: str | None = None,
    ):
        self.backend = backend
        self.splits_key = splits_key or settings.splits_key
        self.last_access_key = last_access_key or settings.last_access_key

    async def _write(self, key: str, value: str) -> None:
        try:
            await self.backend.set(key, value)
        except Exception as e:
            logger.error(f"Failed to write {key}: {e}")
            raise StorageWriteError(key, e) from e

    # ============== Splits ==============

    async def load_splits(self) -> list[Split]:
        """Load all splits; unreadable or corrupt data yields []."""
        try:
            raw = await self.backend.get(self.splits_key)
        except Exception as e:
            logger.error(f"Failed to read {self.splits_key}: {e}")
            return []

        if not raw:
            return []

        try:
            splits = splits_from_json(raw)
        except ValueError as e:
            logger.error(f"Corrupt data under {self.splits_key}, using empty collection: {e}")
            return []

        logger.debug(f"Loaded {len(splits)} splits")
        return splits

    async def save_splits(self, splits: list[Split]) -> None:
        """Replace the stored collection.

        Raises:
            StorageWriteError: if the backend rejects the write
        """
        await self._write(self.splits_key, splits_to_json(splits))
        logger.debug(f"Saved {len(splits)} splits")

    # ============== Access Cursor ==============

    async def load_last_access_date(self) -> date | None:
        """Load the access cursor.

        Returns:
            The stored date, or None if the key has never been written

        Raises:
            StorageReadError: if the backend fails or the value is unparsable
        """
        try:
            raw = await self.backend.get(self.last_access_key)
        except Exception as e:
            logger.error(f"Failed to read {self.last_access_key}: {e}")
            raise StorageReadError(self.last_access_key, e) from e

        if not raw:
            return None

        try:
            return parse_access_date(raw)
        except ValueError as e:
            logger.error(f"Corrupt access date {raw!r}: {e}")
            raise StorageReadError(self.last_access_key, e) from e

    async def save_last_access_date(self, value: date | datetime) -> None:
        """Store the access cursor, normalized to local midnight.

        Raises:
            StorageWriteError: if the backend rejects the write
        """
        await self._write(self.last_access_key, format_access_date(value))

    # ============== YAML Export/Import ==============

    async def export_yaml(self, path: str | Path) -> Path:
        """Write the stored collection to a YAML file (atomic)."""
        yaml_path = Path(path).expanduser()
        yaml_path.parent.mkdir(parents=True, exist_ok=True)
        splits = await self.load_splits()

        data = {"splits": [s.to_dict() for s in splits]}

        temp_path = yaml_path.with_suffix(".tmp")
        with open(temp_path, "w", encoding="utf-8") as f:
            f.write("# Workout splits\n")
            f.write("# Edit this file and import it to replace the stored splits.\n\n")
            yaml.dump(
                data,
                f,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
            )
        temp_path.replace(yaml_path)

        logger.info(f"Exported {len(splits)} splits to {yaml_path}")
        return yaml_path

    @staticmethod
    def read_yaml(path: str | Path) -> list[Split]:
        """Parse splits from a YAML file.

        Raises:
            ValueError: if the file is not valid YAML, does not hold a
                `splits` list, or a split cannot be decoded
        """
        try:
            with open(Path(path).expanduser(), "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

        items = data.get("splits") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise ValueError(f"No 'splits' list in {path}")

        splits: list[Split] = []
        for i, item in enumerate(items):
            try:
                splits.append(Split.from_dict(item))
            except (KeyError, TypeError, AttributeError) as e:
                raise ValueError(f"Cannot decode split #{i + 1} in {path}: {e!r}") from e
        return splits
