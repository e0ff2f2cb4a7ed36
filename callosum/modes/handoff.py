"""Handoff mode implementation.

The agent best suited to the message answers first; when its answer asks
for the other agent, the turn is handed over.
"""

from __future__ import annotations

import re
from typing import Any

from callosum.models import CommunicationType, OrchestrationMode, content_of

from .base import BaseMode, RecordCommunication

_WORD = re.compile(r"[a-z0-9']+")


class HandoffMode(BaseMode):
    """Conditional handoff mode.

    Flow:
        [Message] → [Keyword scoring] → [Start agent]
                                           │ trigger phrase?
                                           ▼
                                     [Other agent] → [Result]

    The start agent is chosen by counting message words found in the
    analytical and creative keyword lists; ties go to Alpha. Agent failures
    propagate.
    """

    @property
    def mode(self) -> OrchestrationMode:
        return OrchestrationMode.HANDOFF

    def score(self, message: str) -> dict[str, int]:
        """Count analytical and creative keyword hits in a message."""
        words = _WORD.findall(message.lower())
        analytical = set(self.config.handoff.analytical_keywords)
        creative = set(self.config.handoff.creative_keywords)
        return {
            "alpha": sum(1 for word in words if word in analytical),
            "beta": sum(1 for word in words if word in creative),
        }

    def select_initial_agent(self, message: str) -> str:
        scores = self.score(message)
        return "beta" if scores["beta"] > scores["alpha"] else "alpha"

    def find_trigger(self, content: str, triggers: list[str] | None = None) -> str | None:
        """Return the first trigger phrase contained in the content, if any."""
        text = content.lower()
        for trigger in triggers if triggers is not None else self.config.handoff.triggers:
            if trigger.lower() in text:
                return trigger
        return None

    async def execute(
        self,
        message: str,
        process_id: str,
        record_communication: RecordCommunication,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        params = params or {}
        initial = params.get("initial_agent") or self.select_initial_agent(message)
        if initial not in self.agents:
            initial = self.select_initial_agent(message)

        first_response = await self._call(initial, message)
        first_content = content_of(first_response) or ""

        trigger = self.find_trigger(first_content, params.get("triggers"))
        if trigger is None:
            return {
                **self._slots({initial: first_response}),
                "primary": initial,
                "initial_agent": initial,
                "handoff_occurred": False,
            }

        other = self._other(initial)
        prompt = self.prompts.handoff_continuation(message, initial, other)
        other_response = await self._call(other, prompt, first_response)

        record_communication(
            initial,
            other,
            first_content,
            CommunicationType.HANDOFF.value,
            metadata={"trigger": trigger},
        )

        return {
            **self._slots({initial: first_response, other: other_response}),
            "primary": other,
            "initial_agent": initial,
            "handoff_occurred": True,
        }
