"""Core components package.

This package contains the orchestrator and the bookkeeping it owns.
"""

from .orchestrator import (
    DEFAULT_MESSAGE_TYPE,
    MESSAGE_RULES,
    CorpusCallosum,
    InvalidModeError,
)
from .pattern_store import (
    DEFAULT_MAX_ENTRIES,
    PatternStore,
)
from .process_registry import ProcessRegistry

__all__ = [
    # Orchestrator
    "CorpusCallosum",
    "InvalidModeError",
    "MESSAGE_RULES",
    "DEFAULT_MESSAGE_TYPE",
    # Bookkeeping
    "PatternStore",
    "DEFAULT_MAX_ENTRIES",
    "ProcessRegistry",
]
