"""Interaction modes for Alpha and Beta.

This module provides the protocols the two agents collaborate under:
- Parallel: both answer independently
- Sequential: one answers with the other's answer as context
- Debate: challenge and refinement until convergence
- Synthesis: both answer, one merges the answers
- Handoff: one answers and may hand the turn over
- RolePlay: in-character replies checked for consistency
"""

from .base import (
    BaseMode,
    ModeError,
    RecordCommunication,
    UnknownModeError,
    create_default_modes,
    create_mode,
    get_mode_class,
)
from .debate import DebateMode, DebateRound, similarity
from .handoff import HandoffMode
from .parallel import ParallelMode
from .prompts import PromptBuilder
from .roleplay import (
    InvalidCharacterError,
    NoCharacterLoadedError,
    RoleplayError,
    RoleplayMode,
)
from .sequential import SequentialMode
from .synthesis import SynthesisMode

__all__ = [
    # Base
    "BaseMode",
    "ModeError",
    "RecordCommunication",
    "UnknownModeError",
    "create_default_modes",
    "create_mode",
    "get_mode_class",
    "PromptBuilder",
    # Modes
    "ParallelMode",
    "SequentialMode",
    "DebateMode",
    "SynthesisMode",
    "HandoffMode",
    "RoleplayMode",
    # Utilities
    "DebateRound",
    "similarity",
    # Role-play errors
    "RoleplayError",
    "NoCharacterLoadedError",
    "InvalidCharacterError",
]
