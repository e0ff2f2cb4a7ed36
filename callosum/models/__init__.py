"""Data models package.

This module defines all data models used by the Callosum orchestration core.
"""

from .character import (
    Character,
    RoleplayMessage,
)
from .process import (
    Communication,
    CommunicationType,
    OrchestrationMode,
    OrchestrationResult,
    PatternEntry,
    Process,
)
from .response import (
    Response,
    content_of,
)

__all__ = [
    # Response models
    "Response",
    "content_of",
    # Process models
    "Communication",
    "CommunicationType",
    "OrchestrationMode",
    "OrchestrationResult",
    "PatternEntry",
    "Process",
    # Role-play models
    "Character",
    "RoleplayMessage",
]
