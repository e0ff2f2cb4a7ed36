"""Corpus Callosum - Central coordinator between the Alpha and Beta agents.

This module owns the mode registry, the process lifecycle, the pattern
statistics and the public orchestration API.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from callosum.agents import AgentProtocol
from callosum.models import (
    Communication,
    OrchestrationMode,
    OrchestrationResult,
    PatternEntry,
)
from callosum.modes import (
    BaseMode,
    ModeError,
    RoleplayMode,
    UnknownModeError,
    create_default_modes,
)
from callosum.utils.config import (
    CallosumConfig,
    config_initialized,
    get_config,
    init_config,
)
from callosum.utils.exceptions import InvalidConfigurationError
from callosum.utils.logging import (
    get_conversation_logger,
    get_logger,
    process_scope,
    setup_logging_from_config,
)

from .pattern_store import PatternStore
from .process_registry import ProcessRegistry

logger = get_logger(__name__)


class InvalidModeError(ModeError):
    """Raised when set_mode() names a mode that is not registered."""

    def __init__(self, mode: str, available: list[str]):
        self.mode = mode
        super().__init__(
            f"Invalid mode: {mode}",
            details={"mode": mode, "available_modes": available},
        )


# Ordered classification rules; the first match wins.
MESSAGE_RULES: list[tuple[str, re.Pattern[str]]] = [
    (
        "question",
        re.compile(
            r"\?|^\s*(what|why|how|when|where|who|which|is|are|can|could|"
            r"would|should|do|does)\b",
            re.IGNORECASE,
        ),
    ),
    (
        "creation",
        re.compile(
            r"\b(create|write|generate|make|build|design|compose|draft|imagine)\b",
            re.IGNORECASE,
        ),
    ),
    (
        "analysis",
        re.compile(
            r"\b(analy[sz]e|analysis|compare|evaluate|assess|review|examine|explain)\b",
            re.IGNORECASE,
        ),
    ),
    (
        "assistance",
        re.compile(r"\b(help|assist|support|guide|fix|solve)\b", re.IGNORECASE),
    ),
]

DEFAULT_MESSAGE_TYPE = "general"


def _mode_key(mode: OrchestrationMode | str) -> str:
    return mode.value if isinstance(mode, OrchestrationMode) else str(mode).lower()


class CorpusCallosum:
    """Central coordinator for the two-agent system.

    Routes each user message through one mode executor, records the
    communications the agents exchange, and keeps observational statistics.
    All state is scoped to the instance, so several orchestrators can run
    side by side.
    """

    def __init__(
        self,
        alpha: AgentProtocol,
        beta: AgentProtocol,
        config: CallosumConfig | None = None,
        modes: Mapping[str, BaseMode] | None = None,
    ):
        """Initialize the orchestrator.

        Args:
            alpha: The analytical agent.
            beta: The creative agent.
            config: Orchestration configuration. When None, the global
                configuration is used if init_config() ran, else defaults.
            modes: Executors to register instead of the built-in ones.

        Raises:
            InvalidConfigurationError: If the default mode is not registered.
        """
        if config is None:
            config = get_config() if config_initialized() else CallosumConfig()
        self.config = config
        self.agents: dict[str, AgentProtocol] = {"alpha": alpha, "beta": beta}
        self._modes: dict[str, BaseMode] = dict(
            modes if modes is not None else create_default_modes(self.agents, self.config)
        )
        self.processes = ProcessRegistry()
        self.patterns = PatternStore()

        self.current_mode = self.config.orchestrator.default_mode
        if self.current_mode not in self._modes:
            raise InvalidConfigurationError(
                "orchestrator.default_mode",
                self.current_mode,
                f"Default mode {self.current_mode} is not registered",
            )
        self._mode_parameters: dict[str, dict[str, Any]] = {}

    @classmethod
    def from_config(
        cls,
        alpha: AgentProtocol,
        beta: AgentProtocol,
        yaml_path: str | None = None,
        env_file: str | None = None,
    ) -> CorpusCallosum:
        """Initialize the global configuration and logging, then build.

        Loads YAML (when given) with environment overrides, applies its
        logging section and returns an orchestrator using it.
        """
        config = init_config(yaml_path=yaml_path, env_file=env_file)
        setup_logging_from_config(config.logging)
        logger.info("configuration_loaded", default_mode=config.orchestrator.default_mode)
        return cls(alpha, beta, config)

    @property
    def available_modes(self) -> list[str]:
        return list(self._modes)

    @property
    def active_processes(self) -> int:
        return len(self.processes)

    @property
    def communication_history(self) -> list[Communication]:
        return self.processes.history

    def register_mode(self, name: str, executor: BaseMode) -> None:
        """Register or replace the executor for a mode."""
        self._modes[_mode_key(name)] = executor
        logger.info("mode_registered", mode=_mode_key(name))

    def get_mode(self, mode: OrchestrationMode | str) -> BaseMode:
        """Return the executor for a mode.

        Raises:
            UnknownModeError: If no executor is registered for the mode.
        """
        key = _mode_key(mode)
        executor = self._modes.get(key)
        if executor is None:
            raise UnknownModeError(key, self.available_modes)
        return executor

    async def orchestrate(
        self,
        message: str,
        conversation_id: str,
        mode: OrchestrationMode | str | None = None,
        options: dict[str, Any] | None = None,
    ) -> OrchestrationResult:
        """Answer a user message with both agents under one mode.

        Args:
            message: The user message.
            conversation_id: The caller's conversation id.
            mode: Mode to use; the current default mode when None.
            options: Per-call parameters merged over the mode parameters.

        Returns:
            OrchestrationResult with both responses and the communications.

        Raises:
            UnknownModeError: If no executor matches the mode.
            CallosumError: Whatever the executor propagates.
        """
        mode_name = _mode_key(mode) if mode is not None else self.current_mode
        executor = self.get_mode(mode_name)
        message_type = self.classify_message(message)
        params = {**self._mode_parameters.get(mode_name, {}), **(options or {})}

        process = self.processes.create(mode_name, message, conversation_id)
        log = get_conversation_logger(conversation_id).bind(mode=mode_name)

        def record_communication(
            sender: str,
            recipient: str,
            content: str | dict[str, str | None],
            comm_type: str,
            round_number: int | None = None,
            metadata: dict[str, Any] | None = None,
        ) -> None:
            self.processes.record(
                process.id,
                sender,
                recipient,
                content,
                comm_type,
                round_number=round_number,
                metadata=metadata,
            )

        with process_scope(process.id):
            log.info("orchestration_started", message_type=message_type)
            try:
                output = await executor.execute(
                    message, process.id, record_communication, params
                )
                result = OrchestrationResult.model_validate(
                    {
                        **output,
                        "mode": mode_name,
                        "communications": list(process.communications),
                        "timestamp": datetime.now(UTC),
                        "process_id": process.id,
                        "conversation_id": conversation_id,
                        "duration": process.duration(),
                    }
                )
            except Exception as e:
                self.patterns.record(mode_name, message_type, success=False)
                log.warning(
                    "orchestration_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                    duration=process.duration(),
                )
                raise
            finally:
                self.processes.remove(process.id)

            self.patterns.record(mode_name, message_type, success=True)
            log.info(
                "orchestration_completed",
                communications=len(result.communications),
                duration=result.duration,
            )
        return result

    def set_mode(
        self,
        mode: OrchestrationMode | str,
        parameters: dict[str, Any] | None = None,
    ) -> None:
        """Set the default mode and its parameter bag.

        Raises:
            InvalidModeError: If the mode is not registered.
        """
        key = _mode_key(mode)
        if key not in self._modes:
            raise InvalidModeError(key, self.available_modes)
        self.current_mode = key
        self._mode_parameters[key] = dict(parameters or {})
        logger.info("mode_changed", mode=key, parameters=self._mode_parameters[key])

    def interrupt(self) -> None:
        """Discard all in-flight processes.

        Pending agent calls are not cancelled; their results are dropped
        when they arrive.
        """
        removed = self.processes.clear()
        logger.info("orchestration_interrupted", processes=removed)

    def classify_message(self, message: str) -> str:
        """Classify a message for pattern statistics."""
        for category, pattern in MESSAGE_RULES:
            if pattern.search(message):
                return category
        return DEFAULT_MESSAGE_TYPE

    def _roleplay(self) -> RoleplayMode:
        executor = self.get_mode(OrchestrationMode.ROLEPLAY)
        if not isinstance(executor, RoleplayMode):
            raise UnknownModeError(OrchestrationMode.ROLEPLAY.value, self.available_modes)
        return executor

    def load_character(self, card: dict[str, Any]) -> dict[str, str]:
        """Load a role-play character card.

        Returns:
            Dictionary with the character's name, scenario and first_mes.
        """
        return self._roleplay().load_character(card)

    def reset_roleplay(self) -> str | None:
        """Reset the role-play history and return the greeting, if any."""
        return self._roleplay().reset_conversation()

    def get_patterns(self, mode: str, message_type: str) -> list[PatternEntry]:
        return self.patterns.get(_mode_key(mode), message_type)

    def get_communication_history(self, limit: int | None = None) -> list[Communication]:
        """Return the global communication history, most recent last."""
        history = self.processes.history
        if limit is not None:
            return history[-limit:] if limit > 0 else []
        return history

    def get_stats(self) -> dict[str, Any]:
        """Return orchestrator statistics."""
        return {
            "current_mode": self.current_mode,
            "active_processes": self.active_processes,
            "total_communications": self.processes.total_communications,
            "patterns": self.patterns.counts(),
            "available_modes": self.available_modes,
        }
