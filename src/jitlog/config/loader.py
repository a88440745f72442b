"""Layered configuration loading.

Layers, lowest to highest precedence:

1. Built-in model defaults
2. Global config (~/.config/jitlog/config.yaml)
3. Project config (<project>/.jitlog/config.yaml)
4. Environment variables (JITLOG__SECTION__KEY)
5. Keyword overrides passed to load_config

Each layer contributes only the keys it sets; layers are deep-merged and the
result is validated once as a JitLogConfig.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from jitlog.config.constants import PROJECT_DIR_NAME
from jitlog.config.models import (
    JitLogConfig,
    LoggingConfig,
    LogsConfig,
    ManifestConfig,
    ResolutionConfig,
)
from jitlog.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/jitlog/config.yaml").expanduser()


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class _EnvSettings(BaseSettings):
    """Environment layer only. Env vars: JITLOG__LOGGING__LEVEL, JITLOG__LOGS__JIT_FILE, etc."""

    model_config = SettingsConfigDict(
        env_prefix="JITLOG__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    logging: LoggingConfig = LoggingConfig()
    logs: LogsConfig = LogsConfig()
    resolution: ResolutionConfig = ResolutionConfig()
    manifest: ManifestConfig = ManifestConfig()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],  # noqa: ARG003
        init_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (env_settings,)


def _env_layer() -> dict[str, Any]:
    return _EnvSettings().model_dump(exclude_unset=True)


def _override_layer(overrides: dict[str, Any]) -> dict[str, Any]:
    return {
        section: value.model_dump() if isinstance(value, BaseModel) else value
        for section, value in overrides.items()
    }


def _invalid(e: ValidationError) -> ConfigError:
    err = e.errors()[0]
    field = ".".join(str(loc) for loc in err["loc"])
    return ConfigError.invalid_value(field, err.get("input"), err["msg"])


def load_config(project_root: Path | None = None, **kwargs: Any) -> JitLogConfig:
    """Load config: defaults < global yaml < project yaml < env vars < kwargs.

    Args:
        project_root: Directory holding .jitlog/config.yaml.
                      Defaults to current working directory.
        **kwargs: Section overrides, as models or plain mappings.

    Raises:
        ConfigError: On invalid YAML syntax or validation errors.
    """
    project_root = project_root or Path.cwd()

    merged = _deep_merge(
        _load_yaml(GLOBAL_CONFIG_PATH),
        _load_yaml(project_root / PROJECT_DIR_NAME / "config.yaml"),
    )
    try:
        merged = _deep_merge(merged, _env_layer())
        merged = _deep_merge(merged, _override_layer(kwargs))
        return JitLogConfig.model_validate(merged)
    except ValidationError as e:
        raise _invalid(e) from e
