"""In-memory key-value store."""

from dataclasses import dataclass, field

from logwell.services.storage import KeyValueStore


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store, used for tests and ephemeral runs."""

    values: dict[str, str] = field(default_factory=dict)

    async def get(self, key: str) -> str | None:
        """Return the stored value, if present."""
        return self.values.get(key)

    async def set(self, key: str, value: str) -> None:
        """Store a value under a key."""
        self.values[key] = value

    async def remove(self, key: str) -> None:
        """Remove a key if present."""
        self.values.pop(key, None)

    async def multi_remove(self, keys: list[str]) -> None:
        """Remove several keys."""
        for key in keys:
            self.values.pop(key, None)
