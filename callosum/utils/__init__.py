"""Utility modules for Callosum.

This package provides utility functions and classes for:
- Configuration management
- Structured logging
- Exception handling
"""

from .config import (
    AGENT_NAMES,
    CallosumConfig,
    DebateConfig,
    HandoffConfig,
    LogFormat,
    LoggingConfig,
    OrchestratorSettings,
    RoleplayConfig,
    SequentialConfig,
    SynthesisConfig,
    TimeoutConfig,
    config_initialized,
    get_config,
    init_config,
    reset_config,
)
from .exceptions import (
    CallosumError,
    ConfigurationError,
    InvalidConfigurationError,
)
from .logging import (
    add_process_id,
    current_process_id,
    get_agent_logger,
    get_conversation_logger,
    get_logger,
    process_scope,
    setup_logging,
    setup_logging_from_config,
)

__all__ = [
    # Config
    "AGENT_NAMES",
    "CallosumConfig",
    "DebateConfig",
    "HandoffConfig",
    "LogFormat",
    "LoggingConfig",
    "OrchestratorSettings",
    "RoleplayConfig",
    "SequentialConfig",
    "SynthesisConfig",
    "TimeoutConfig",
    "config_initialized",
    "get_config",
    "init_config",
    "reset_config",
    # Exceptions
    "CallosumError",
    "ConfigurationError",
    "InvalidConfigurationError",
    # Logging
    "add_process_id",
    "current_process_id",
    "get_agent_logger",
    "get_conversation_logger",
    "get_logger",
    "process_scope",
    "setup_logging",
    "setup_logging_from_config",
]
