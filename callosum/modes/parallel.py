"""Parallel mode implementation.

Both agents answer the same message at the same time, without seeing each
other's answer.
"""

from __future__ import annotations

import asyncio
from typing import Any

from callosum.models import OrchestrationMode, Response
from callosum.utils.logging import get_logger

from .base import BaseMode, RecordCommunication

logger = get_logger(__name__)


class ParallelMode(BaseMode):
    """Parallel execution mode.

    Flow:
              ┌─→ [Alpha] ─┐
      [Message]┤            ├─→ [Result]
              └─→ [Beta]  ─┘

    Each agent may fail independently: a failed agent leaves None in its
    slot and the call still returns. This is the one mode that tolerates
    partial failure of its fan-out.
    """

    @property
    def mode(self) -> OrchestrationMode:
        return OrchestrationMode.PARALLEL

    async def execute(
        self,
        message: str,
        process_id: str,
        record_communication: RecordCommunication,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        responses = await self.gather_responses(message, process_id)
        return self._slots(responses)

    async def gather_responses(
        self, message: str, process_id: str = ""
    ) -> dict[str, Response | None]:
        """Call both agents concurrently, mapping failures to None.

        Args:
            message: Prompt sent to both agents.
            process_id: Owning process, for logging.

        Returns:
            Mapping of agent name to Response, or None for a failed agent.
        """
        names = ["alpha", "beta"]
        results = await asyncio.gather(
            *(self._call(name, message) for name in names),
            return_exceptions=True,
        )

        responses: dict[str, Response | None] = {}
        for name, result in zip(names, results, strict=True):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning(
                    "parallel_agent_failed",
                    agent=name,
                    process_id=process_id,
                    error=str(result),
                )
                responses[name] = None
            else:
                responses[name] = result

        return responses
