"""Auxiliary memory for cross-task context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from agentcore.errors import InvalidKeyError


@runtime_checkable
class MemoryProvider(Protocol):
    """Narrow async interface the agent uses to read and write memory.

    Any key/value service implementing these coroutines can stand in for the
    in-process ``MemoryStore``.
    """

    async def set(self, key: str, value: Any, **metadata: Any) -> None: ...

    async def get(self, key: str) -> Any | None: ...

    async def delete(self, key: str) -> bool: ...

    async def has(self, key: str) -> bool: ...


@dataclass
class MemoryEntry:
    """A single entry in memory."""

    key: str
    value: Any
    entry_type: str  # fact, task_result, note
    source: str  # agent name, user_input
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict[str, Any]:
        """Serialize entry to dictionary."""
        return {
            "key": self.key,
            "value": self.value,
            "entry_type": self.entry_type,
            "source": self.source,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MemoryEntry:
        """Deserialize entry from dictionary."""
        return cls(
            key=data["key"],
            value=data["value"],
            entry_type=data["entry_type"],
            source=data["source"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


def _check_key(key: Any) -> None:
    if not isinstance(key, str):
        raise InvalidKeyError(f"Memory key must be a string, got {type(key).__name__}")


class MemoryStore:
    """In-process memory with metadata, recency and search.

    Supports:
    - Async key-value access (``MemoryProvider``)
    - Recency-based retrieval
    - Type-based filtering and text search
    - Snapshot/restore
    """

    def __init__(self, max_entries: int = 1000) -> None:
        self.max_entries = max_entries
        self._entries: dict[str, MemoryEntry] = {}

    async def set(
        self,
        key: str,
        value: Any,
        entry_type: str = "fact",
        source: str = "unknown",
    ) -> None:
        """Store a value in memory."""
        _check_key(key)
        # Re-insert so dict order tracks last write
        self._entries.pop(key, None)
        self._entries[key] = MemoryEntry(
            key=key,
            value=value,
            entry_type=entry_type,
            source=source,
        )
        self._prune_if_needed()

    async def get(self, key: str) -> Any | None:
        """Retrieve a value by key."""
        _check_key(key)
        entry = self._entries.get(key)
        return entry.value if entry else None

    async def delete(self, key: str) -> bool:
        """Remove an entry from memory."""
        _check_key(key)
        if key in self._entries:
            del self._entries[key]
            return True
        return False

    async def has(self, key: str) -> bool:
        _check_key(key)
        return key in self._entries

    async def keys(self) -> list[str]:
        return list(self._entries.keys())

    async def size(self) -> int:
        return len(self._entries)

    async def clear(self) -> None:
        """Clear all memory entries."""
        self._entries.clear()

    def get_entry(self, key: str) -> MemoryEntry | None:
        """Retrieve full entry by key."""
        return self._entries.get(key)

    def get_by_type(self, entry_type: str) -> list[MemoryEntry]:
        """Get all entries of a specific type."""
        return [e for e in self._entries.values() if e.entry_type == entry_type]

    def get_recent(self, n: int = 10) -> list[MemoryEntry]:
        """Get N most recent entries, oldest first."""
        if n <= 0:
            return []
        return list(self._entries.values())[-n:]

    def search(self, query: str, case_sensitive: bool = False) -> list[MemoryEntry]:
        """Search entries by key or value content."""
        needle = query if case_sensitive else query.lower()
        results = []

        for entry in self._entries.values():
            haystacks = (entry.key, str(entry.value))
            if not case_sensitive:
                haystacks = tuple(h.lower() for h in haystacks)
            if any(needle in h for h in haystacks):
                results.append(entry)

        return results

    def to_context_string(self, max_entries: int = 20) -> str:
        """Render recent memory as a short text block."""
        recent = self.get_recent(max_entries)
        if not recent:
            return "Memory is empty."

        lines = ["Current memory:"]
        for entry in recent:
            value_str = str(entry.value)
            if len(value_str) > 200:
                value_str = value_str[:200] + "..."
            lines.append(f"- [{entry.entry_type}] {entry.key}: {value_str}")

        return "\n".join(lines)

    def snapshot(self) -> dict[str, Any]:
        """Create a snapshot of current memory state."""
        return {
            "entries": {k: v.to_dict() for k, v in self._entries.items()},
            "max_entries": self.max_entries,
        }

    def restore(self, snapshot: dict[str, Any]) -> None:
        """Restore memory from a snapshot."""
        self._entries = {
            k: MemoryEntry.from_dict(v) for k, v in snapshot.get("entries", {}).items()
        }
        self._prune_if_needed()

    def _prune_if_needed(self) -> None:
        """Remove oldest entries if exceeding max capacity."""
        while len(self._entries) > self.max_entries:
            oldest_key = next(iter(self._entries))
            del self._entries[oldest_key]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
