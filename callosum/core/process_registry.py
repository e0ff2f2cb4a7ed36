"""Process Registry - Tracks in-flight orchestration calls.

Each orchestrate() call owns exactly one Process entry for its lifetime.
Entries are removed, not archived, when the call finishes.
"""

from datetime import UTC, datetime
from typing import Any

from callosum.models import Communication, Process


class ProcessRegistry:
    """Registry of in-flight processes and the global communication history.

    Only the owning call touches its own entry, so no locking is needed.
    ``clear()`` is the one operation that removes entries owned by other
    calls; it does not cancel their pending work.
    """

    def __init__(self) -> None:
        self._processes: dict[str, Process] = {}
        self._history: list[Communication] = []

    def create(
        self,
        mode: str,
        user_message: str,
        conversation_id: str,
    ) -> Process:
        """Create and register a new process."""
        process = Process(
            mode=mode,
            user_message=user_message,
            conversation_id=conversation_id,
        )
        self._processes[process.id] = process
        return process

    def get(self, process_id: str) -> Process | None:
        return self._processes.get(process_id)

    def remove(self, process_id: str) -> Process | None:
        """Remove a process; removing an unknown id is a no-op."""
        return self._processes.pop(process_id, None)

    def clear(self) -> int:
        """Remove all processes and return how many were removed."""
        count = len(self._processes)
        self._processes.clear()
        return count

    def record(
        self,
        process_id: str,
        sender: str,
        recipient: str,
        message: str | dict[str, str | None],
        comm_type: str,
        round_number: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Communication | None:
        """Record a communication against a process.

        The entry is timestamped here and appended to both the process and
        the global history. Recording against a missing process is a silent
        no-op and returns None.
        """
        process = self._processes.get(process_id)
        if process is None:
            return None

        communication = Communication(
            sender=sender,
            recipient=recipient,
            message=message,
            type=comm_type,
            round=round_number,
            metadata=metadata or {},
            timestamp=datetime.now(UTC),
        )
        process.communications.append(communication)
        self._history.append(communication)
        return communication

    @property
    def history(self) -> list[Communication]:
        return list(self._history)

    @property
    def total_communications(self) -> int:
        return len(self._history)

    def active_ids(self) -> list[str]:
        return list(self._processes)

    def __len__(self) -> int:
        return len(self._processes)

    def __contains__(self, process_id: object) -> bool:
        return process_id in self._processes
