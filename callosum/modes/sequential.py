"""Sequential mode implementation.

One agent answers first; the second answers with the first agent's answer
as context.
"""

from __future__ import annotations

import asyncio
from typing import Any

from callosum.models import CommunicationType, OrchestrationMode, content_of
from callosum.utils.config import SequentialConfig

from .base import BaseMode, ModeError, RecordCommunication


class SequentialMode(BaseMode):
    """Sequential execution mode.

    Flow:
        [Message] → [First] → (delay) → [Second + first's answer] → [Result]

    The order defaults to the configured order and can be overridden per
    call with ``params["order"]``. Agent failures propagate.
    """

    @property
    def mode(self) -> OrchestrationMode:
        return OrchestrationMode.SEQUENTIAL

    def resolve_order(self, params: dict[str, Any] | None = None) -> list[str]:
        """Return the agent order for a call.

        Raises:
            ModeError: If the requested order is not a permutation of the agents.
        """
        order = (params or {}).get("order")
        if order is None:
            return list(self.config.sequential.order)
        if isinstance(order, str):
            order = [part.strip() for part in order.split(",")]
        try:
            return SequentialConfig(order=list(order)).order
        except ValueError as e:
            raise ModeError(f"Invalid sequential order: {order}", cause=e) from e

    async def execute(
        self,
        message: str,
        process_id: str,
        record_communication: RecordCommunication,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        first, second = self.resolve_order(params)
        delay = (params or {}).get("delay", self.config.sequential.delay)

        first_response = await self._call(first, message)
        if delay:
            await asyncio.sleep(delay)

        first_content = content_of(first_response) or ""
        prompt = self.prompts.sequential_context(message, first, first_content)
        second_response = await self._call(second, prompt, first_response)

        record_communication(
            first,
            second,
            first_content,
            CommunicationType.HANDOFF.value,
        )

        return {
            **self._slots({first: first_response, second: second_response}),
            "order": [first, second],
        }
