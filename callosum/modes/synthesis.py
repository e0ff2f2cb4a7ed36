"""Synthesis mode implementation.

Both agents answer in parallel; a designated synthesizer merges the two
answers into one.
"""

from __future__ import annotations

from typing import Any

from callosum.models import CommunicationType, OrchestrationMode, content_of
from callosum.utils.config import SynthesisConfig

from .base import BaseMode, ModeError, RecordCommunication
from .parallel import ParallelMode


class SynthesisMode(BaseMode):
    """Fan-in synthesis mode.

    Flow:
              ┌─→ [Alpha] ─┐
      [Message]┤            ├─→ [Synthesizer] → [Result]
              └─→ [Beta]  ─┘

    The fan-out tolerates a failed agent (its input is rendered as
    unavailable); a failed synthesizer call propagates.
    """

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.parallel = ParallelMode(self.agents, self.config, self.prompts)

    @property
    def mode(self) -> OrchestrationMode:
        return OrchestrationMode.SYNTHESIS

    def _settings(self, params: dict[str, Any]) -> SynthesisConfig:
        data = self.config.synthesis.model_dump()
        for key in ("synthesizer", "show_individual"):
            if key in params:
                data[key] = params[key]
        try:
            return SynthesisConfig(**data)
        except ValueError as e:
            raise ModeError(f"Invalid synthesis parameters: {data}", cause=e) from e

    async def execute(
        self,
        message: str,
        process_id: str,
        record_communication: RecordCommunication,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        settings = self._settings(params or {})

        responses = await self.parallel.gather_responses(message, process_id)
        alpha_content = content_of(responses["alpha"])
        beta_content = content_of(responses["beta"])

        prompt = self.prompts.synthesis(message, alpha_content, beta_content)
        synthesis = await self._call(settings.synthesizer, prompt)

        record_communication(
            "both",
            "synthesis",
            {"alpha": alpha_content, "beta": beta_content},
            CommunicationType.SYNTHESIS.value,
            metadata={"synthesizer": settings.synthesizer},
        )

        if settings.show_individual:
            slots = self._slots(responses)
        else:
            slots = self._slots({})

        return {
            **slots,
            "synthesis": synthesis,
            "synthesizer": settings.synthesizer,
        }
