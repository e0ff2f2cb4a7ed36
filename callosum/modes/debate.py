"""Debate mode implementation.

One agent holds a position, the other challenges it, and the first refines
its position until two successive positions are similar enough or the round
limit is reached.
"""

from __future__ import annotations

from typing import Any

from callosum.models import CommunicationType, OrchestrationMode, content_of
from callosum.utils.logging import get_logger

from .base import BaseMode, RecordCommunication

logger = get_logger(__name__)


def similarity(text1: str, text2: str) -> float:
    """Word-overlap similarity of two texts in [0, 1].

    Counts the whitespace-separated words of ``text1`` that also occur in
    ``text2`` (case-insensitive) and divides by the longer word count.
    """
    words1 = text1.lower().split()
    words2 = text2.lower().split()
    if not words1 and not words2:
        return 1.0
    if not words1 or not words2:
        return 0.0

    vocabulary = set(words2)
    common = sum(1 for word in words1 if word in vocabulary)
    return min(common / max(len(words1), len(words2)), 1.0)


class DebateRound:
    """Represents a single challenge and refinement exchange."""

    def __init__(self, number: int, challenge: str, refinement: str, score: float):
        self.number = number
        self.challenge = challenge
        self.refinement = refinement
        self.similarity = score

    def to_dict(self) -> dict[str, Any]:
        return {
            "round": self.number,
            "challenge": self.challenge,
            "refinement": self.refinement,
            "similarity": self.similarity,
        }


class DebateMode(BaseMode):
    """Iterative debate mode.

    Flow:
        [First answers]
              ↓
        ┌→ [Second challenges] → [First refines] ─┐
        └──────── until converged or max rounds ←─┘

    ``rounds`` in the result is the number of completed challenge and
    refinement pairs. The debate converges when the similarity between the
    previous and the refined position exceeds the threshold. Agent failures
    propagate.
    """

    @property
    def mode(self) -> OrchestrationMode:
        return OrchestrationMode.DEBATE

    async def execute(
        self,
        message: str,
        process_id: str,
        record_communication: RecordCommunication,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        params = params or {}
        max_rounds = int(params.get("max_rounds", self.config.debate.max_rounds))
        threshold = float(
            params.get("convergence_threshold", self.config.debate.convergence_threshold)
        )
        first = self.config.debate.first_agent
        second = self._other(first)

        position = await self._call(first, message)
        challenge = None
        history: list[DebateRound] = []
        converged = False

        for round_number in range(1, max_rounds + 1):
            previous = content_of(position) or ""

            challenge = await self._call(
                second, self.prompts.debate_challenge(message, previous), position
            )
            challenge_text = content_of(challenge) or ""
            record_communication(
                second,
                first,
                challenge_text,
                CommunicationType.CHALLENGE.value,
                round_number=round_number,
            )

            position = await self._call(
                first,
                self.prompts.debate_refine(message, previous, challenge_text),
                challenge,
            )
            refined = content_of(position) or ""
            record_communication(
                first,
                second,
                refined,
                CommunicationType.REFINEMENT.value,
                round_number=round_number,
            )

            score = similarity(previous, refined)
            history.append(DebateRound(round_number, challenge_text, refined, score))
            if score > threshold:
                converged = True
                logger.info(
                    "debate_converged",
                    process_id=process_id,
                    round=round_number,
                    similarity=score,
                )
                break

        if not converged:
            logger.info("debate_exhausted", process_id=process_id, rounds=len(history))

        return {
            **self._slots({first: position, second: challenge}),
            "rounds": len(history),
            "converged": converged,
            "debate_history": [entry.to_dict() for entry in history],
        }
