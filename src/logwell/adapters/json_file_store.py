"""Key-value store persisted to a single JSON file."""

import asyncio
import json
import threading
from dataclasses import dataclass, field
from pathlib import Path

from logwell.services.storage import KeyValueStore


@dataclass
class JsonFileKeyValueStore(KeyValueStore):
    """Keeps every key in one JSON object on disk.

    Writes go to a temporary sibling file which then replaces the target, so
    a crash mid-write leaves the previous contents intact. Reads and
    read-modify-write cycles hold one lock, so overlapping calls from worker
    threads never interleave on the file.
    """

    path: Path
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    @classmethod
    def create(cls, path: str) -> "JsonFileKeyValueStore":
        """Create a store for the given file path."""
        return cls(path=Path(path))

    async def get(self, key: str) -> str | None:
        """Return the stored value, if present."""
        values = await asyncio.to_thread(self._load)
        return values.get(key)

    async def set(self, key: str, value: str) -> None:
        """Store a value under a key."""
        await asyncio.to_thread(self._update, {key: value}, [])

    async def remove(self, key: str) -> None:
        """Remove a key if present."""
        await asyncio.to_thread(self._update, {}, [key])

    async def multi_remove(self, keys: list[str]) -> None:
        """Remove several keys."""
        await asyncio.to_thread(self._update, {}, keys)

    def _load(self) -> dict[str, str]:
        with self._lock:
            return self._read()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        return json.loads(self.path.read_text(encoding="utf-8"))

    def _update(self, updates: dict[str, str], removals: list[str]) -> None:
        with self._lock:
            values = self._read()
            values.update(updates)
            for key in removals:
                values.pop(key, None)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(values), encoding="utf-8")
            tmp_path.replace(self.path)
