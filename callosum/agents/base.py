"""Agent contract and the guarded agent call used by every mode.

Agents are external collaborators: the orchestration core only knows that an
agent exposes ``process_message(message, context)`` and answers with
something content-bearing. The LLM client behind an agent is not part of
this package.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

from callosum.models import Response
from callosum.utils.exceptions import CallosumError
from callosum.utils.logging import get_agent_logger

AgentContext = Response | str | None


class AgentCallFailedError(CallosumError):
    """Raised when an agent call fails or times out."""

    def __init__(self, agent_name: str, reason: str, cause: Exception | None = None):
        self.agent_name = agent_name
        self.reason = reason
        super().__init__(
            f"Agent {agent_name} call failed: {reason}",
            details={"agent": agent_name, "reason": reason},
            cause=cause,
        )


class AgentTimeoutError(AgentCallFailedError):
    """Raised when an agent does not answer within its timeout."""

    def __init__(self, agent_name: str, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(agent_name, f"timed out after {timeout_seconds}s")
        self.details["timeout_seconds"] = timeout_seconds


@runtime_checkable
class AgentProtocol(Protocol):
    """Protocol every agent handed to the orchestrator satisfies."""

    async def process_message(
        self, message: str, context: AgentContext = None
    ) -> Response | str: ...


class BaseAgent(ABC):
    """Abstract base class for agents.

    Subclasses implement process_message(); the base only carries identity.

    Attributes:
        name: Agent name ("alpha" or "beta").
        role: Agent role description (analytical, creative).
        model: Backing model identifier, informational only.
    """

    def __init__(self, name: str, role: str = "", model: str = "") -> None:
        self.name = name
        self.role = role
        self.model = model

    @abstractmethod
    async def process_message(
        self, message: str, context: AgentContext = None
    ) -> Response | str:
        """Answer a message, optionally using a previous response as context."""
        pass

    async def health_check(self) -> dict[str, Any]:
        return {"agent": self.name, "role": self.role, "model": self.model}


class FunctionAgent(BaseAgent):
    """Agent backed by an async callable.

    Lets a host plug any client coroutine in as an agent without subclassing.
    """

    def __init__(
        self,
        name: str,
        handler: Callable[[str, AgentContext], Awaitable[Response | str]],
        role: str = "",
        model: str = "",
    ) -> None:
        super().__init__(name, role=role, model=model)
        self._handler = handler

    async def process_message(
        self, message: str, context: AgentContext = None
    ) -> Response:
        raw = await self._handler(message, context)
        response = Response.coerce(raw, role=self.role)
        if not response.model and self.model:
            response = response.model_copy(update={"model": self.model})
        return response


async def call_agent(
    agent: AgentProtocol,
    agent_name: str,
    message: str,
    context: AgentContext = None,
    timeout: float | None = None,
) -> Response:
    """Invoke an agent under a timeout and normalize its answer.

    Args:
        agent: The agent to call.
        agent_name: Name used in errors and logs.
        message: Prompt sent to the agent.
        context: Optional previous response or text passed as context.
        timeout: Seconds to wait; None waits indefinitely.

    Returns:
        The agent's answer as a Response.

    Raises:
        AgentTimeoutError: If the agent does not answer in time.
        AgentCallFailedError: If the agent raises.
    """
    logger = get_agent_logger(agent_name)
    logger.debug("agent_call_started", prompt_length=len(message))

    try:
        raw = await asyncio.wait_for(
            agent.process_message(message, context), timeout=timeout
        )
    except TimeoutError as e:
        logger.warning("agent_call_timed_out", timeout=timeout)
        raise AgentTimeoutError(agent_name, timeout or 0) from e
    except AgentCallFailedError:
        raise
    except Exception as e:
        logger.warning("agent_call_failed", error=str(e))
        raise AgentCallFailedError(agent_name, str(e) or type(e).__name__, e) from e

    if raw is None:
        raise AgentCallFailedError(agent_name, "agent returned no response")

    response = Response.coerce(raw)
    logger.debug("agent_call_completed", content_length=len(response.content))
    return response
