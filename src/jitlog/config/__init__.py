"""Config module exports."""

from jitlog.config.loader import load_config
from jitlog.config.models import (
    JitLogConfig,
    LoggingConfig,
    LogOutputConfig,
    LogsConfig,
    ManifestConfig,
    ResolutionConfig,
)

__all__ = [
    "load_config",
    "JitLogConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "LogsConfig",
    "ManifestConfig",
    "ResolutionConfig",
]
