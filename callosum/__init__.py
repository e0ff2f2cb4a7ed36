"""Callosum - orchestration core for a two-agent (Alpha/Beta) system.

Alpha (analytical) and Beta (creative) answer the same message under one of
six interaction modes; the CorpusCallosum orchestrator returns the combined
result together with the communications the agents exchanged.
"""

from callosum.agents import (
    AgentCallFailedError,
    AgentProtocol,
    AgentTimeoutError,
    BaseAgent,
    FunctionAgent,
)
from callosum.core import CorpusCallosum, InvalidModeError
from callosum.models import (
    Communication,
    OrchestrationMode,
    OrchestrationResult,
    Response,
    content_of,
)
from callosum.modes import (
    InvalidCharacterError,
    NoCharacterLoadedError,
    UnknownModeError,
)
from callosum.utils import CallosumConfig, CallosumError

__version__ = "1.0.0"

__all__ = [
    "AgentCallFailedError",
    "AgentProtocol",
    "AgentTimeoutError",
    "BaseAgent",
    "CallosumConfig",
    "CallosumError",
    "Communication",
    "CorpusCallosum",
    "FunctionAgent",
    "InvalidCharacterError",
    "InvalidModeError",
    "NoCharacterLoadedError",
    "OrchestrationMode",
    "OrchestrationResult",
    "Response",
    "UnknownModeError",
    "content_of",
]
