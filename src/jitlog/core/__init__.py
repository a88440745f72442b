"""Core module exports."""

from jitlog.core.errors import (
    ConfigError,
    CorrelationError,
    DescriptorError,
    ErrorCode,
    JitLogError,
    LogInputError,
    MalformedDescriptorError,
    ResolutionError,
    TargetNotFoundError,
)
from jitlog.core.logging import (
    clear_session_id,
    configure_logging,
    get_logger,
    get_session_id,
    set_session_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "CorrelationError",
    "DescriptorError",
    "ErrorCode",
    "JitLogError",
    "LogInputError",
    "MalformedDescriptorError",
    "ResolutionError",
    "TargetNotFoundError",
    # Logging
    "clear_session_id",
    "configure_logging",
    "get_logger",
    "get_session_id",
    "set_session_id",
]
