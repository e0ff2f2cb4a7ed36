"""Role-play character models.

Characters are loaded from character cards, either the flat layout or the
V2 layout that nests the fields under ``data``.
"""

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

CHARACTER_FIELDS = (
    "name",
    "description",
    "personality",
    "first_mes",
    "mes_example",
    "scenario",
    "system_prompt",
    "alternate_greetings",
    "tags",
)


class Character(BaseModel):
    """Persona definition used by the role-play mode."""

    name: str = Field(..., description="Character name")
    description: str = Field(default="")
    personality: str = Field(default="")
    first_mes: str = Field(default="", description="Opening greeting")
    mes_example: str = Field(default="", description="Example dialogue")
    scenario: str = Field(default="")
    system_prompt: str = Field(default="")
    alternate_greetings: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Character name must not be empty")
        return v.strip()

    @classmethod
    def from_card(cls, card: dict[str, Any]) -> "Character":
        """Build a Character from a flat or V2 character card."""
        data = card.get("data") if isinstance(card.get("data"), dict) else card
        fields = {key: data[key] for key in CHARACTER_FIELDS if data.get(key) is not None}
        return cls(**fields)

    def render(self, text: str, user_name: str = "User") -> str:
        """Substitute the {{char}} and {{user}} placeholders."""
        return (
            text.replace("{{char}}", self.name)
            .replace("{{user}}", user_name)
            .replace("<BOT>", self.name)
            .replace("<USER>", user_name)
        )

    def greeting(self) -> str:
        return self.render(self.first_mes)


class RoleplayMessage(BaseModel):
    """One entry of the role-play history window."""

    role: Literal["user", "character"]
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
