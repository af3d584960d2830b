"""
Storage for generated partial password hashes.

Every row ties a user to one pattern and the hash of that pattern's
characters. Two stores are provided:

- MemoryPatternStore: keeps rows in a dict, for tests and embedding.
- FilePatternStore: keeps rows in a JSON file.

Store file format (JSON text):
{
  "version": 1,
  "rows": [
    {"user_id": "<id>", "pattern": <int>, "password_hash": "<hash>"},
    ...
  ]
}
"""

from __future__ import annotations

import json
import logging
import os
import random
import secrets
import shutil
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

STORE_VERSION = 1


def _default_store_path() -> Path:
    """
    Choose an OS-specific, user-local path for the store file instead of
    the current working directory.
    """
    if os.name == "nt":
        base = os.getenv("APPDATA")
        base_path = Path(base) if base else Path.home() / "AppData" / "Roaming"
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else Path.home() / ".local" / "share"

    return base_path / "ppgen" / "partial_passwords.json"


@dataclass(frozen=True)
class PartialHashRow:
    user_id: str
    pattern: int
    password_hash: str


class PatternStoreError(Exception):
    """Generic pattern store error."""


class PatternStore(ABC):
    """
    Base class for pattern stores. Subclasses provide the user -> pattern
    -> hash mapping through ``_load`` and ``_commit``.
    """

    @abstractmethod
    def _load(self) -> Dict[str, Dict[int, str]]:
        ...

    @abstractmethod
    def _commit(self, table: Dict[str, Dict[int, str]]) -> None:
        ...

    # ---------- write API ----------

    def insert_many(self, rows: Iterable[PartialHashRow]) -> int:
        """
        Bulk insert rows. A row for an existing (user, pattern) pair
        replaces the older hash. Returns the number of rows written.
        """
        table = self._load()
        written = 0
        for row in rows:
            table.setdefault(str(row.user_id), {})[int(row.pattern)] = row.password_hash
            written += 1
        if written:
            self._commit(table)
        logger.debug("Inserted %d partial hash rows", written)
        return written

    def delete_user(self, user_id: str) -> int:
        """Delete every row of the user. Returns the number of deleted rows."""
        table = self._load()
        removed = table.pop(str(user_id), {})
        if removed:
            self._commit(table)
        logger.debug("Deleted %d partial hash rows for user %s", len(removed), user_id)
        return len(removed)

    # ---------- read API ----------

    def get_hash(self, user_id: str, pattern: int) -> Optional[str]:
        return self._load().get(str(user_id), {}).get(int(pattern))

    def patterns(self, user_id: str) -> List[int]:
        return sorted(self._load().get(str(user_id), {}))

    def random_pattern(
        self, user_id: str, rng: random.Random | None = None
    ) -> Optional[int]:
        """Pick one of the user's patterns at random, None if there are none."""
        patterns = self.patterns(user_id)
        if not patterns:
            return None
        return (rng or secrets.SystemRandom()).choice(patterns)

    def rows(self) -> List[PartialHashRow]:
        return [
            PartialHashRow(user_id, pattern, password_hash)
            for user_id, hashes in self._load().items()
            for pattern, password_hash in sorted(hashes.items())
        ]


class MemoryPatternStore(PatternStore):
    def __init__(self) -> None:
        self._table: Dict[str, Dict[int, str]] = {}

    def _load(self) -> Dict[str, Dict[int, str]]:
        return self._table

    def _commit(self, table: Dict[str, Dict[int, str]]) -> None:
        self._table = table


class FilePatternStore(PatternStore):
    """
    JSON file backed store.

    The whole file is rewritten on every change (through a temporary file
    and an atomic rename) and the previous version is kept as ``.bak``.
    Not meant for concurrent writers.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else _default_store_path()

    def exists(self) -> bool:
        """Return True if a store file already exists on disk."""
        return self.path.exists()

    def _backup_path(self) -> Path:
        return self.path.with_name(self.path.name + ".bak")

    def _load(self) -> Dict[str, Dict[int, str]]:
        if not self.exists():
            return {}

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            raise PatternStoreError(f"Cannot read store file {self.path}.") from exc
        except json.JSONDecodeError as exc:
            raise PatternStoreError("Store file is corrupted.") from exc

        if not isinstance(payload, dict) or payload.get("version") != STORE_VERSION:
            raise PatternStoreError("Unsupported store version.")

        table: Dict[str, Dict[int, str]] = {}
        try:
            for item in payload["rows"]:
                row = PartialHashRow(
                    user_id=str(item["user_id"]),
                    pattern=int(item["pattern"]),
                    password_hash=str(item["password_hash"]),
                )
                table.setdefault(row.user_id, {})[row.pattern] = row.password_hash
        except (KeyError, TypeError, ValueError) as exc:
            raise PatternStoreError("Store file is corrupted.") from exc
        return table

    def _commit(self, table: Dict[str, Dict[int, str]]) -> None:
        rows = [
            asdict(PartialHashRow(user_id, pattern, password_hash))
            for user_id, hashes in table.items()
            for pattern, password_hash in sorted(hashes.items())
        ]
        payload = {"version": STORE_VERSION, "rows": rows}

        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self.exists():
            shutil.copy2(self.path, self._backup_path())

        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp.replace(self.path)
