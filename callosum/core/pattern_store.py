"""Pattern Store - Bounded statistics about past orchestrations."""

from collections import deque

from callosum.models import PatternEntry

DEFAULT_MAX_ENTRIES = 100


class PatternStore:
    """Append-only pattern statistics keyed by ``"{mode}_{message_type}"``.

    Each key keeps at most ``max_entries`` entries; the oldest entry is
    evicted first.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._patterns: dict[str, deque[PatternEntry]] = {}

    def record(self, mode: str, message_type: str, success: bool) -> PatternEntry:
        entry = PatternEntry(mode=mode, message_type=message_type, success=success)
        self.add(entry)
        return entry

    def add(self, entry: PatternEntry) -> None:
        bucket = self._patterns.get(entry.key)
        if bucket is None:
            bucket = deque(maxlen=self.max_entries)
            self._patterns[entry.key] = bucket
        bucket.append(entry)

    def get(self, mode: str, message_type: str) -> list[PatternEntry]:
        return list(self._patterns.get(f"{mode}_{message_type}", ()))

    def success_rate(self, mode: str, message_type: str) -> float | None:
        """Fraction of successful entries for a key, None when empty."""
        entries = self.get(mode, message_type)
        if not entries:
            return None
        return sum(1 for entry in entries if entry.success) / len(entries)

    def counts(self) -> dict[str, int]:
        return {key: len(entries) for key, entries in self._patterns.items()}

    def keys(self) -> list[str]:
        return list(self._patterns)

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._patterns.values())
