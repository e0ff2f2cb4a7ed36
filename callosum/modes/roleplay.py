"""Role-play mode implementation.

Alpha keeps the character consistent, Beta writes the character's replies.
The mode owns the loaded character and a sliding window of the role-play
history.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any

from pydantic import ValidationError

from callosum.agents import AgentCallFailedError
from callosum.models import (
    Character,
    CommunicationType,
    OrchestrationMode,
    Response,
    RoleplayMessage,
    content_of,
)
from callosum.utils.logging import get_logger

from .base import BaseMode, ModeError, RecordCommunication

logger = get_logger(__name__)

IC = "ic"
OOC = "ooc"

ANALYST = "alpha"
WRITER = "beta"

# ((text)), [OOC] text, [OOC: text], OOC: text (any case)
_OOC_MARKER = re.compile(
    r"^\s*(?:\(\(|\[ooc\b[:\]]?|ooc:)\s*(?P<text>.*?)\s*(?:\)\)|\])?\s*$",
    re.IGNORECASE | re.DOTALL,
)


class RoleplayError(ModeError):
    """Base exception for role-play errors."""

    pass


class NoCharacterLoadedError(RoleplayError):
    """Raised when role-play is used before a character is loaded."""

    def __init__(self) -> None:
        super().__init__("No character loaded. Call load_character() first.")


class InvalidCharacterError(RoleplayError):
    """Raised when a character card cannot be parsed."""

    pass


class RoleplayMode(BaseMode):
    """Persona role-play mode.

    In-character (IC) flow:
              ┌─→ [Alpha: consistency notes] ─┐
      [Message]┤                               ├─→ [Beta refines] → [Reply]
              └─→ [Beta: draft reply]       ──┘

    The refinement is recorded as Beta -> Alpha: Beta writes the revised
    reply in answer to Alpha's notes.

    Out-of-character (OOC) flow: both agents comment on the scene.

    Both flows tolerate a failed agent: missing content is reported as an
    error string in the result instead of raising.
    """

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._character: Character | None = None
        self._history: list[RoleplayMessage] = []

    @property
    def mode(self) -> OrchestrationMode:
        return OrchestrationMode.ROLEPLAY

    @property
    def character(self) -> Character | None:
        return self._character

    @property
    def history(self) -> list[RoleplayMessage]:
        return list(self._history)

    def load_character(self, card: dict[str, Any]) -> dict[str, str]:
        """Load a character card and seed the history with its greeting.

        Raises:
            InvalidCharacterError: If the card has no usable name.
        """
        if not isinstance(card, dict):
            raise InvalidCharacterError("Character card must be a mapping")
        try:
            character = Character.from_card(card)
        except ValidationError as e:
            raise InvalidCharacterError(f"Invalid character card: {e}", cause=e) from e

        self._character = character
        self._seed_history()
        logger.info("character_loaded", character=character.name)
        return {
            "name": character.name,
            "scenario": character.render(character.scenario),
            "first_mes": character.greeting(),
        }

    def reset_conversation(self) -> str | None:
        """Clear the history and re-seed the greeting.

        Returns:
            The greeting, or None when no character is loaded.
        """
        if self._character is None:
            self._history = []
            return None
        self._seed_history()
        return self._character.greeting()

    def _seed_history(self) -> None:
        self._history = []
        if self._character is not None and self._character.first_mes:
            self._history.append(
                RoleplayMessage(role="character", content=self._character.greeting())
            )

    def _append_history(self, role: str, content: str) -> None:
        self._history.append(RoleplayMessage(role=role, content=content))
        window = self.config.roleplay.history_window
        if len(self._history) > window:
            self._history = self._history[-window:]

    @staticmethod
    def detect_message_type(message: str) -> tuple[str, str]:
        """Classify a message as IC or OOC and strip OOC markers."""
        match = _OOC_MARKER.match(message)
        if match is None:
            return IC, message
        return OOC, match.group("text")

    async def execute(
        self,
        message: str,
        process_id: str,
        record_communication: RecordCommunication,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        character = self._character
        if character is None:
            raise NoCharacterLoadedError()

        params = params or {}
        message_type, text = self.detect_message_type(message)
        requested = params.get("message_type")
        if requested in (IC, OOC):
            message_type = requested

        if message_type == OOC:
            return await self._out_of_character(
                character, text, process_id, record_communication
            )
        return await self._in_character(
            character, text, process_id, record_communication
        )

    async def _gather(
        self, calls: dict[str, tuple[str, Response | str | None]]
    ) -> dict[str, Response | BaseException]:
        names = list(calls)
        results = await asyncio.gather(
            *(
                self._call(name, prompt, context)
                for name, (prompt, context) in calls.items()
            ),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
        return dict(zip(names, results, strict=True))

    async def _in_character(
        self,
        character: Character,
        message: str,
        process_id: str,
        record_communication: RecordCommunication,
    ) -> dict[str, Any]:
        context = self.prompts.character_context(character, self._history)

        results = await self._gather(
            {
                ANALYST: (
                    self.prompts.character_analysis(context, message, character.name),
                    None,
                ),
                WRITER: (
                    self.prompts.character_reply(context, message, character.name),
                    None,
                ),
            }
        )
        analysis = _ok(results[ANALYST])
        reply = _ok(results[WRITER])

        if analysis is not None:
            record_communication(
                ANALYST,
                WRITER,
                analysis.content,
                CommunicationType.CHARACTER_ANALYSIS.value,
            )
        else:
            logger.warning(
                "roleplay_analysis_failed",
                process_id=process_id,
                error=str(results[ANALYST]),
            )

        final = reply
        if analysis is not None and reply is not None:
            try:
                final = await self._call(
                    WRITER,
                    self.prompts.character_refine(
                        reply.content, analysis.content, character.name
                    ),
                    analysis,
                )
                record_communication(
                    WRITER,
                    ANALYST,
                    final.content,
                    CommunicationType.REFINEMENT.value,
                )
            except AgentCallFailedError as e:
                logger.warning(
                    "roleplay_refinement_failed", process_id=process_id, error=str(e)
                )
                final = reply

        if final is not None:
            ic_response = content_of(final) or ""
            self._append_history("user", message)
            self._append_history("character", ic_response)
        else:
            ic_response = f"[{character.name} could not respond: {results[WRITER]}]"
            logger.warning("roleplay_reply_failed", process_id=process_id, error=ic_response)

        return {
            "alpha_response": analysis,
            "beta_response": final,
            "message_type": IC,
            "ic_response": ic_response,
            "character": character.name,
        }

    async def _out_of_character(
        self,
        character: Character,
        message: str,
        process_id: str,
        record_communication: RecordCommunication,
    ) -> dict[str, Any]:
        context = self.prompts.character_context(character, self._history)

        results = await self._gather(
            {
                name: (self.prompts.ooc_comment(context, message, name), None)
                for name in (ANALYST, WRITER)
            }
        )

        comments: dict[str, str | None] = {}
        responses: dict[str, Response | None] = {}
        for name, result in results.items():
            response = _ok(result)
            responses[name] = response
            if response is None:
                logger.warning("roleplay_ooc_failed", process_id=process_id, agent=name)
                comments[name] = f"[{name.capitalize()} unavailable: {result}]"
            else:
                comments[name] = response.content

        record_communication(
            "both",
            "user",
            comments,
            CommunicationType.OOC_DISCUSSION.value,
        )

        return {
            **self._slots(responses),
            "message_type": OOC,
            "character": character.name,
        }


def _ok(result: Response | BaseException) -> Response | None:
    return None if isinstance(result, BaseException) else result
