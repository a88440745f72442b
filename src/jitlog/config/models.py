"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (JITLOG__SECTION__KEY)
3. Project YAML (.jitlog/config.yaml)
4. Global YAML (~/.config/jitlog/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    JITLOG__<SECTION>__<KEY>=<VALUE>

Examples:
    JITLOG__LOGGING__LEVEL=DEBUG
    JITLOG__LOGS__METADATA_FILE=enter3.json
    JITLOG__RESOLUTION__MAX_GENERIC_DEPTH=16
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from jitlog.config.constants import GENERIC_DEPTH_DEFAULT, GENERIC_DEPTH_MAX, MANIFEST_INDENT_MAX

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        JITLOG__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every resolved type argument.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class LogsConfig(BaseModel):
    """File names of the three instrumentation logs inside a log directory.

    Env vars:
        JITLOG__LOGS__JIT_FILE: Compiled-method events
        JITLOG__LOGS__MODULES_FILE: Module records
        JITLOG__LOGS__METADATA_FILE: Method metadata events
    """

    jit_file: str = Field(
        default="jit.json",
        description="Line-delimited JSON of compiled-method events ({FunctionID}).",
    )
    modules_file: str = Field(
        default="modules.json",
        description="Line-delimited JSON of module records.",
    )
    metadata_file: str = Field(
        default="enter3.json",
        description="Line-delimited JSON of method metadata events.",
    )


class ResolutionConfig(BaseModel):
    """Reconstruction engine configuration.

    Env vars:
        JITLOG__RESOLUTION__MAX_GENERIC_DEPTH: Nesting limit for type arguments
        JITLOG__RESOLUTION__INDEX_APP_DIRECTORY: Build the name->path index
    """

    max_generic_depth: int = Field(
        default=GENERIC_DEPTH_DEFAULT,
        description="Maximum nesting of type-argument nodes. The wire format does not "
        "forbid cycles, so deeper nodes are reported as failures.",
    )
    index_app_directory: bool = Field(
        default=True,
        description="Index the profiled application's directory for code units "
        "that cannot be imported by name.",
    )

    @field_validator("max_generic_depth")
    @classmethod
    def validate_depth(cls, v: int) -> int:
        if not (1 <= v <= GENERIC_DEPTH_MAX):
            raise ValueError(f"max_generic_depth must be 1-{GENERIC_DEPTH_MAX}, got {v}")
        return v


class ManifestConfig(BaseModel):
    """Descriptor manifest output.

    Env vars:
        JITLOG__MANIFEST__INDENT: JSON indentation (0 for compact)
    """

    indent: int = Field(default=2, description="JSON indentation of written manifests.")

    @field_validator("indent")
    @classmethod
    def validate_indent(cls, v: int) -> int:
        if not (0 <= v <= MANIFEST_INDENT_MAX):
            raise ValueError(f"indent must be 0-{MANIFEST_INDENT_MAX}, got {v}")
        return v


class JitLogConfig(BaseModel):
    """Root configuration for jitlog.

    All settings can be configured via:
    1. Environment variables: JITLOG__SECTION__KEY
    2. YAML config files (project or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    logs: LogsConfig = Field(default_factory=LogsConfig)
    resolution: ResolutionConfig = Field(default_factory=ResolutionConfig)
    manifest: ManifestConfig = Field(default_factory=ManifestConfig)
