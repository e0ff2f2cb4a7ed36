"""Agent response model.

Agents may answer with a plain string or with a structured Response. Every
place in the orchestration core that needs the text of an answer goes
through content_of().
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class Response(BaseModel):
    """Content-bearing value returned by an agent call."""

    content: str = Field(..., description="Response text")
    model: str = Field(default="", description="Model that produced the response")
    role: str = Field(default="", description="Agent role (analytical, creative)")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Creation time"
    )
    metadata: dict[str, Any] = Field(default_factory=dict, description="Extra data")

    model_config = {"extra": "forbid"}

    @classmethod
    def coerce(cls, value: Any, role: str = "") -> "Response":
        """Normalize a raw agent return value into a Response.

        Args:
            value: A Response, a plain string, or a mapping with a content key.
            role: Role to set when the raw value does not carry one.
        """
        if isinstance(value, Response):
            return value
        if isinstance(value, Mapping):
            data = dict(value)
            content = content_of(data) or ""
            known = {"content", "model", "role", "timestamp", "metadata"}
            extras = {k: v for k, v in data.items() if k not in known}
            response = cls(
                content=content,
                model=str(data.get("model", "")),
                role=str(data.get("role") or role),
                metadata={**data.get("metadata", {}), **extras},
            )
            if isinstance(data.get("timestamp"), datetime):
                response.timestamp = data["timestamp"]
            return response
        return cls(content=content_of(value) or "", role=role)


def content_of(value: Any) -> str | None:
    """Extract the textual content from a string-or-Response value.

    Returns None only when the value itself is None.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, Response):
        return value.content
    if isinstance(value, Mapping):
        content = value.get("content")
        return "" if content is None else str(content)
    content = getattr(value, "content", None)
    if content is not None:
        return str(content)
    return str(value)
