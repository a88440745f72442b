"""Structured logging for parse and resolve runs.

structlog renders through stdlib handlers so several outputs (console and
files, each with its own level and format) can share one processor chain.
Every run binds a short session id into the context; it appears on every
event logged during that run, including events from library loggers.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, TextIO
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from jitlog.config.models import LoggingConfig, LogOutputConfig

_SESSION_KEY = "session_id"

_STREAMS: dict[str, TextIO] = {}

# First file destination of the active configuration
_log_file_path: Path | None = None


def get_session_id() -> str | None:
    value = structlog.contextvars.get_contextvars().get(_SESSION_KEY)
    return value if isinstance(value, str) else None


def set_session_id(session_id: str | None = None) -> str:
    """Bind the session id of the current run, generating one if needed."""
    sid = session_id or uuid4().hex[:12]
    structlog.contextvars.bind_contextvars(**{_SESSION_KEY: sid})
    return sid


def clear_session_id() -> None:
    structlog.contextvars.unbind_contextvars(_SESSION_KEY)


def get_log_file_path() -> Path | None:
    """File that receives detailed logs, for pointing users at it on errors."""
    return _log_file_path


def _level_number(name: str | None, fallback: int) -> int:
    if not name:
        return fallback
    value = logging.getLevelNamesMapping().get(name.upper())
    return fallback if value is None else value


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
    ]


def _open_destination(destination: str) -> logging.Handler:
    if destination in ("stderr", "stdout"):
        stream = sys.stderr if destination == "stderr" else sys.stdout
        _STREAMS[destination] = stream
        return logging.StreamHandler(stream)
    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, mode="a", encoding="utf-8")


def _formatter(
    output: LogOutputConfig, shared: list[structlog.types.Processor]
) -> logging.Formatter:
    renderer: structlog.types.Processor
    if output.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        stream = _STREAMS.get(output.destination)
        renderer = structlog.dev.ConsoleRenderer(
            colors=stream is not None and stream.isatty(),
            pad_event_to=0,
            pad_level=False,
        )
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared)


def _reset_root(root: logging.Logger) -> None:
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()


def configure_logging(
    *,
    config: LoggingConfig | None = None,
    json_format: bool = False,
    level: str = "INFO",
) -> None:
    """Configure structlog and the root logger.

    A ``config`` describes every output and wins over ``json_format`` and
    ``level``, which only build a single stderr output.
    """
    global _log_file_path
    from jitlog.config.models import LoggingConfig, LogOutputConfig

    if config is None:
        config = LoggingConfig(
            level=level,  # type: ignore[arg-type]
            outputs=[LogOutputConfig(format="json" if json_format else "console")],
        )

    base_level = _level_number(config.level, logging.INFO)
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(base_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # reconfigure between runs
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    _reset_root(root)
    root.setLevel(base_level)
    _STREAMS.clear()
    _log_file_path = None

    for output in config.outputs:
        handler = _open_destination(output.destination)
        handler.setLevel(_level_number(output.level, base_level))
        handler.setFormatter(_formatter(output, shared))
        root.addHandler(handler)
        if _log_file_path is None and output.destination not in ("stderr", "stdout"):
            _log_file_path = Path(output.destination)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger  # type: ignore[no-any-return]
