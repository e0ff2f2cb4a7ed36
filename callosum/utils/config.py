"""Orchestration configuration management.

This module provides configuration loading from environment variables and YAML files.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

AGENT_NAMES = ("alpha", "beta")

DEFAULT_HANDOFF_TRIGGERS = [
    "need creative input",
    "need analytical review",
    "handing off",
    "over to you",
    "beyond my expertise",
    "you might be better suited",
]

DEFAULT_ANALYTICAL_KEYWORDS = [
    "analyze",
    "calculate",
    "compare",
    "data",
    "evaluate",
    "explain",
    "logic",
    "measure",
    "prove",
    "statistics",
    "structure",
    "why",
]

DEFAULT_CREATIVE_KEYWORDS = [
    "brainstorm",
    "compose",
    "create",
    "design",
    "dream",
    "idea",
    "imagine",
    "invent",
    "poem",
    "story",
    "write",
]


class LogFormat(str, Enum):
    """Log output format types."""

    JSON = "json"
    CONSOLE = "console"


def _validate_agent_name(v: str) -> str:
    v_lower = v.lower()
    if v_lower not in AGENT_NAMES:
        raise ValueError(f"Agent name must be one of {AGENT_NAMES}")
    return v_lower


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class OrchestratorSettings(BaseModel):
    """Orchestrator-level settings."""

    default_mode: str = Field(default="parallel", description="Default mode")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: LogFormat = Field(default=LogFormat.JSON, description="Log format")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v_upper


class TimeoutConfig(BaseModel):
    """Agent call timeouts in seconds.

    ``agent`` is the global timeout; ``alpha`` and ``beta`` override it for a
    single agent when set.
    """

    agent: float = Field(default=300.0, description="Global agent timeout")
    alpha: float | None = Field(default=None, description="Alpha timeout override")
    beta: float | None = Field(default=None, description="Beta timeout override")

    @field_validator("agent", "alpha", "beta")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("Timeout must be positive")
        return v

    def for_agent(self, agent_name: str) -> float:
        """Return the effective timeout for an agent."""
        override = getattr(self, agent_name, None) if agent_name in AGENT_NAMES else None
        return override if override is not None else self.agent


class SequentialConfig(BaseModel):
    """Sequential mode settings."""

    order: list[str] = Field(
        default_factory=lambda: ["alpha", "beta"], description="Agent order"
    )
    delay: float = Field(default=1.0, description="Delay between steps (seconds)")

    @field_validator("order")
    @classmethod
    def validate_order(cls, v: list[str]) -> list[str]:
        order = [_validate_agent_name(name) for name in v]
        if sorted(order) != sorted(AGENT_NAMES):
            raise ValueError("Sequential order must name alpha and beta exactly once")
        return order

    @field_validator("delay")
    @classmethod
    def validate_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Delay must not be negative")
        return v


class DebateConfig(BaseModel):
    """Debate mode settings."""

    max_rounds: int = Field(default=3, description="Maximum debate rounds")
    convergence_threshold: float = Field(
        default=0.8, description="Similarity above which the debate stops"
    )
    first_agent: str = Field(default="alpha", description="Agent holding the position")

    @field_validator("max_rounds")
    @classmethod
    def validate_max_rounds(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_rounds must be at least 1")
        return v

    @field_validator("convergence_threshold")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("convergence_threshold must be between 0.0 and 1.0")
        return v

    @field_validator("first_agent")
    @classmethod
    def validate_first_agent(cls, v: str) -> str:
        return _validate_agent_name(v)


class SynthesisConfig(BaseModel):
    """Synthesis mode settings."""

    synthesizer: str = Field(default="alpha", description="Agent that synthesizes")
    show_individual: bool = Field(
        default=True, description="Include both original responses in the result"
    )

    @field_validator("synthesizer")
    @classmethod
    def validate_synthesizer(cls, v: str) -> str:
        return _validate_agent_name(v)


class HandoffConfig(BaseModel):
    """Handoff mode settings."""

    triggers: list[str] = Field(default_factory=lambda: list(DEFAULT_HANDOFF_TRIGGERS))
    analytical_keywords: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ANALYTICAL_KEYWORDS)
    )
    creative_keywords: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CREATIVE_KEYWORDS)
    )

    @field_validator("triggers", "analytical_keywords", "creative_keywords")
    @classmethod
    def normalize(cls, v: list[str]) -> list[str]:
        return [item.lower() for item in v if item]


class RoleplayConfig(BaseModel):
    """Role-play mode settings."""

    history_window: int = Field(
        default=20, description="Maximum role-play messages kept in history"
    )

    @field_validator("history_window")
    @classmethod
    def validate_window(cls, v: int) -> int:
        if v < 1:
            raise ValueError("history_window must be positive")
        return v


class CallosumConfig(BaseModel):
    """Main orchestration configuration."""

    orchestrator: OrchestratorSettings = Field(default_factory=OrchestratorSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    timeout: TimeoutConfig = Field(default_factory=TimeoutConfig)
    sequential: SequentialConfig = Field(default_factory=SequentialConfig)
    debate: DebateConfig = Field(default_factory=DebateConfig)
    synthesis: SynthesisConfig = Field(default_factory=SynthesisConfig)
    handoff: HandoffConfig = Field(default_factory=HandoffConfig)
    roleplay: RoleplayConfig = Field(default_factory=RoleplayConfig)

    @model_validator(mode="after")
    def normalize_default_mode(self) -> "CallosumConfig":
        self.orchestrator.default_mode = self.orchestrator.default_mode.lower()
        return self

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "CallosumConfig":
        """Load configuration from environment variables only.

        Args:
            env_file: Optional path to .env file

        Returns:
            CallosumConfig instance populated from environment
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        return cls._apply_env_overrides(cls())

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "CallosumConfig":
        """Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            CallosumConfig instance populated from YAML

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ValueError: If YAML content is invalid
        """
        path = Path(yaml_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError("YAML content must be a dictionary")

        return cls.model_validate(data)

    @classmethod
    def load(
        cls,
        yaml_path: str | Path | None = None,
        env_file: str | Path | None = None,
    ) -> "CallosumConfig":
        """Load configuration with YAML as base and environment overrides.

        Environment variables take precedence over YAML settings.
        """
        if yaml_path:
            config = cls.from_yaml(yaml_path)
        else:
            config = cls()

        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        return cls._apply_env_overrides(config)

    @classmethod
    def _apply_env_overrides(cls, config: "CallosumConfig") -> "CallosumConfig":
        """Apply environment variable overrides to existing config."""
        data: dict[str, Any] = config.model_dump()

        # Orchestrator
        if os.getenv("CALLOSUM_DEFAULT_MODE"):
            data["orchestrator"]["default_mode"] = os.getenv("CALLOSUM_DEFAULT_MODE")

        # Logging
        if os.getenv("LOG_LEVEL"):
            data["logging"]["level"] = os.getenv("LOG_LEVEL", "INFO")
        if os.getenv("LOG_FORMAT"):
            data["logging"]["format"] = os.getenv("LOG_FORMAT", "json")

        # Timeout
        if os.getenv("AGENT_TIMEOUT"):
            data["timeout"]["agent"] = float(os.getenv("AGENT_TIMEOUT", "300"))
        if os.getenv("ALPHA_TIMEOUT"):
            data["timeout"]["alpha"] = float(os.getenv("ALPHA_TIMEOUT", "300"))
        if os.getenv("BETA_TIMEOUT"):
            data["timeout"]["beta"] = float(os.getenv("BETA_TIMEOUT", "300"))

        # Sequential
        if os.getenv("SEQUENTIAL_ORDER"):
            data["sequential"]["order"] = _split_list(os.getenv("SEQUENTIAL_ORDER", ""))
        if os.getenv("SEQUENTIAL_DELAY"):
            data["sequential"]["delay"] = float(os.getenv("SEQUENTIAL_DELAY", "1.0"))

        # Debate
        if os.getenv("DEBATE_MAX_ROUNDS"):
            data["debate"]["max_rounds"] = int(os.getenv("DEBATE_MAX_ROUNDS", "3"))
        if os.getenv("DEBATE_CONVERGENCE_THRESHOLD"):
            data["debate"]["convergence_threshold"] = float(
                os.getenv("DEBATE_CONVERGENCE_THRESHOLD", "0.8")
            )

        # Synthesis
        if os.getenv("SYNTHESIS_SYNTHESIZER"):
            data["synthesis"]["synthesizer"] = os.getenv("SYNTHESIS_SYNTHESIZER")
        if os.getenv("SYNTHESIS_SHOW_INDIVIDUAL"):
            data["synthesis"]["show_individual"] = (
                os.getenv("SYNTHESIS_SHOW_INDIVIDUAL", "").lower() == "true"
            )

        # Handoff
        if os.getenv("HANDOFF_TRIGGERS"):
            data["handoff"]["triggers"] = _split_list(os.getenv("HANDOFF_TRIGGERS", ""))

        # Role-play
        if os.getenv("ROLEPLAY_HISTORY_WINDOW"):
            data["roleplay"]["history_window"] = int(
                os.getenv("ROLEPLAY_HISTORY_WINDOW", "20")
            )

        return cls.model_validate(data)


# Global configuration instance
_config: CallosumConfig | None = None


def get_config() -> CallosumConfig:
    """Get the global configuration instance.

    Raises:
        RuntimeError: If configuration has not been initialized
    """
    global _config
    if _config is None:
        raise RuntimeError("Configuration not initialized. Call init_config() first.")
    return _config


def config_initialized() -> bool:
    return _config is not None


def init_config(
    yaml_path: str | Path | None = None,
    env_file: str | Path | None = None,
) -> CallosumConfig:
    """Initialize the global configuration.

    Args:
        yaml_path: Optional path to YAML configuration file
        env_file: Optional path to .env file

    Returns:
        The initialized CallosumConfig instance
    """
    global _config
    _config = CallosumConfig.load(yaml_path=yaml_path, env_file=env_file)
    return _config


def reset_config() -> None:
    """Reset the global configuration (mainly for testing)."""
    global _config
    _config = None
