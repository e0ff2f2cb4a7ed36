"""Base class for interaction modes.

This module defines the abstract base class for all mode executors. A mode
controls how the two agents collaborate on a single user message.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Protocol

from callosum.agents import AgentProtocol, call_agent
from callosum.models import OrchestrationMode, Response
from callosum.utils.config import AGENT_NAMES, CallosumConfig
from callosum.utils.exceptions import CallosumError

from .prompts import PromptBuilder

if TYPE_CHECKING:
    from collections.abc import Mapping


class ModeError(CallosumError):
    """Base exception for mode-related errors."""

    pass


class UnknownModeError(ModeError):
    """Raised when no executor is registered for a mode."""

    def __init__(self, mode: str, available: list[str] | None = None):
        self.mode = mode
        super().__init__(
            f"Unknown mode: {mode}",
            details={"mode": mode, "available_modes": available or []},
        )


class RecordCommunication(Protocol):
    """Callback a mode uses to record one inter-agent exchange."""

    def __call__(
        self,
        sender: str,
        recipient: str,
        message: str | dict[str, str | None],
        comm_type: str,
        round_number: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None: ...


class BaseMode(ABC):
    """Abstract base class for mode executors.

    Modes define how Alpha and Beta collaborate:
    - Parallel: both answer independently
    - Sequential: one answers with the other's answer as context
    - Debate: one challenges, the other refines, until convergence
    - Synthesis: both answer, one merges the answers
    - Handoff: one answers and may pass the turn to the other
    - RolePlay: both collaborate on an in-character reply
    """

    def __init__(
        self,
        agents: Mapping[str, AgentProtocol],
        config: CallosumConfig | None = None,
        prompts: PromptBuilder | None = None,
    ):
        """Initialize the mode.

        Args:
            agents: Mapping with the "alpha" and "beta" agents.
            config: Orchestration configuration.
            prompts: Shared prompt-template builder.
        """
        missing = [name for name in AGENT_NAMES if name not in agents]
        if missing:
            raise ModeError(f"Missing agents: {', '.join(missing)}")
        self.agents = dict(agents)
        self.config = config or CallosumConfig()
        self.prompts = prompts or PromptBuilder()

    @property
    @abstractmethod
    def mode(self) -> OrchestrationMode | str:
        """Return the mode identifier."""
        pass

    @abstractmethod
    async def execute(
        self,
        message: str,
        process_id: str,
        record_communication: RecordCommunication,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Run the protocol for one user message.

        Args:
            message: The user message.
            process_id: Id of the owning process.
            record_communication: Callback recording inter-agent exchanges.
            params: Mode parameters (from set_mode) merged with call options.

        Returns:
            Dictionary with at least alpha_response and beta_response.
        """
        pass

    @property
    def name(self) -> str:
        mode = self.mode
        return mode.value if isinstance(mode, OrchestrationMode) else str(mode)

    async def _call(
        self,
        agent_name: str,
        message: str,
        context: Response | str | None = None,
    ) -> Response:
        """Call one agent with its configured timeout."""
        return await call_agent(
            self.agents[agent_name],
            agent_name,
            message,
            context,
            timeout=self.config.timeout.for_agent(agent_name),
        )

    @staticmethod
    def _other(agent_name: str) -> str:
        return "beta" if agent_name == "alpha" else "alpha"

    @staticmethod
    def _slots(responses: dict[str, Response | None]) -> dict[str, Response | None]:
        return {
            "alpha_response": responses.get("alpha"),
            "beta_response": responses.get("beta"),
        }


def get_mode_class(mode: OrchestrationMode | str) -> type[BaseMode]:
    """Get the executor class for a built-in mode.

    Raises:
        UnknownModeError: If the mode is not a built-in mode.
    """
    from .debate import DebateMode
    from .handoff import HandoffMode
    from .parallel import ParallelMode
    from .roleplay import RoleplayMode
    from .sequential import SequentialMode
    from .synthesis import SynthesisMode

    mode_map: dict[str, type[BaseMode]] = {
        OrchestrationMode.PARALLEL.value: ParallelMode,
        OrchestrationMode.SEQUENTIAL.value: SequentialMode,
        OrchestrationMode.DEBATE.value: DebateMode,
        OrchestrationMode.SYNTHESIS.value: SynthesisMode,
        OrchestrationMode.HANDOFF.value: HandoffMode,
        OrchestrationMode.ROLEPLAY.value: RoleplayMode,
    }

    key = mode.value if isinstance(mode, OrchestrationMode) else str(mode).lower()
    mode_class = mode_map.get(key)
    if mode_class is None:
        raise UnknownModeError(key, list(mode_map))

    return mode_class


def create_mode(
    mode: OrchestrationMode | str,
    agents: Mapping[str, AgentProtocol],
    config: CallosumConfig | None = None,
    prompts: PromptBuilder | None = None,
) -> BaseMode:
    """Create an executor instance for a built-in mode."""
    mode_class = get_mode_class(mode)
    return mode_class(agents, config, prompts)


def create_default_modes(
    agents: Mapping[str, AgentProtocol],
    config: CallosumConfig | None = None,
) -> dict[str, BaseMode]:
    """Create one executor per built-in mode sharing one prompt builder."""
    prompts = PromptBuilder()
    return {
        mode.value: create_mode(mode, agents, config, prompts)
        for mode in OrchestrationMode
    }
