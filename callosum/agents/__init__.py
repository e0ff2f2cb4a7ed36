"""Agent module - the agent contract consumed by the orchestrator.

This module provides:
- AgentProtocol: the process_message() contract agents satisfy
- BaseAgent / FunctionAgent: convenience bases for host-supplied agents
- call_agent: timeout-guarded agent invocation used by all modes
"""

from callosum.agents.base import (
    AgentCallFailedError,
    AgentContext,
    AgentProtocol,
    AgentTimeoutError,
    BaseAgent,
    FunctionAgent,
    call_agent,
)

__all__ = [
    "AgentCallFailedError",
    "AgentContext",
    "AgentProtocol",
    "AgentTimeoutError",
    "BaseAgent",
    "FunctionAgent",
    "call_agent",
]
