"""Process, communication and pattern records.

A Process is the bookkeeping for one in-flight orchestration call; the
Communications recorded against it form the trace returned to the caller.
"""

import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from .response import Response


class OrchestrationMode(str, Enum):
    """Built-in interaction protocols."""

    PARALLEL = "parallel"
    SEQUENTIAL = "sequential"
    DEBATE = "debate"
    SYNTHESIS = "synthesis"
    HANDOFF = "handoff"
    ROLEPLAY = "roleplay"


class CommunicationType(str, Enum):
    """Communication types emitted by the built-in modes.

    Communication.type is an open string field; custom modes may record
    types not listed here.
    """

    HANDOFF = "handoff"
    CHALLENGE = "challenge"
    REFINEMENT = "refinement"
    SYNTHESIS = "synthesis"
    CHARACTER_ANALYSIS = "character_analysis"
    OOC_DISCUSSION = "ooc_discussion"


class Communication(BaseModel):
    """One recorded inter-agent exchange."""

    sender: str = Field(..., alias="from", description="Sending agent")
    recipient: str = Field(..., alias="to", description="Receiving agent")
    message: str | dict[str, str | None] = Field(..., description="Exchanged content")
    type: str = Field(..., description="Communication type")
    round: int | None = Field(default=None, description="Debate round, if any")
    metadata: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = {"frozen": True, "populate_by_name": True, "extra": "forbid"}

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the wire names ``from`` and ``to``."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Process(BaseModel):
    """Bookkeeping record for one orchestrate() call."""

    id: str = Field(default_factory=lambda: f"proc_{uuid.uuid4().hex}")
    mode: str = Field(..., description="Mode the call runs under")
    start_time: datetime = Field(default_factory=lambda: datetime.now(UTC))
    user_message: str = Field(..., description="Original user message")
    conversation_id: str = Field(..., description="Caller's conversation id")
    communications: list[Communication] = Field(default_factory=list)

    def duration(self) -> float:
        """Seconds elapsed since the process started."""
        return (datetime.now(UTC) - self.start_time).total_seconds()


class PatternEntry(BaseModel):
    """Observational statistic about one orchestration."""

    mode: str
    message_type: str
    success: bool
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = {"frozen": True}

    @property
    def key(self) -> str:
        return f"{self.mode}_{self.message_type}"


class OrchestrationResult(BaseModel):
    """Combined result of one orchestrate() call.

    Fields after ``duration`` are mode specific and stay None for modes
    that do not produce them.
    """

    mode: str
    alpha_response: Response | None = None
    beta_response: Response | None = None
    communications: list[Communication] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    process_id: str = ""
    conversation_id: str = ""
    duration: float = 0.0

    # sequential
    order: list[str] | None = None
    # debate
    rounds: int | None = None
    converged: bool | None = None
    debate_history: list[dict[str, Any]] | None = None
    # synthesis
    synthesis: Response | None = None
    synthesizer: str | None = None
    # handoff
    primary: str | None = None
    initial_agent: str | None = None
    handoff_occurred: bool | None = None
    # roleplay
    message_type: str | None = None
    ic_response: str | None = None
    character: str | None = None

    # Custom modes may return fields of their own; they are kept as extras.
    model_config = {"extra": "allow"}

    def to_dict(self) -> dict[str, Any]:
        """Render the camelCase payload handed to external routers."""
        data = self.model_dump(mode="json", exclude_none=True, exclude={"communications"})
        payload = {_camel(key): value for key, value in data.items()}
        payload["communications"] = [c.to_dict() for c in self.communications]
        if "alphaResponse" not in payload:
            payload["alphaResponse"] = None
        if "betaResponse" not in payload:
            payload["betaResponse"] = None
        return payload


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)
