"""Parse operations: logs in, reconstructed methods and diagnostics out."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import structlog

from jitlog.config.models import JitLogConfig, LogsConfig
from jitlog.core.errors import JitLogError, ResolutionError
from jitlog.core.logging import set_session_id
from jitlog.logs.correlator import correlate_logs
from jitlog.resolution.engine import ReconstructionEngine
from jitlog.resolution.modules import ResolutionSession
from jitlog.runtime.reflection import MethodHandle

log = structlog.get_logger(__name__)


@dataclass(slots=True)
class ParseResult:
    """Methods reconstructed by one run, in compilation order, plus every
    problem that was skipped over on the way."""

    methods: list[MethodHandle] = field(default_factory=list)
    diagnostics: list[JitLogError] = field(default_factory=list)

    @property
    def errors_text(self) -> str:
        return "\n".join(str(d) for d in self.diagnostics)

    @property
    def ok(self) -> bool:
        return not self.diagnostics


def parse_profiler_logs(
    jit_log: Path,
    modules_log: Path,
    metadata_log: Path,
    app_dir: Path,
    *,
    config: JitLogConfig | None = None,
) -> ParseResult:
    """Reconstruct every compiled method recorded in the three logs.

    Never raises for bad input: missing files, malformed lines, correlation
    gaps and per-method resolution failures all land in ``diagnostics``.
    Code units loaded from ``app_dir`` are released before returning.
    """
    config = config or JitLogConfig()
    session_id = set_session_id()
    result = ParseResult()

    logs = correlate_logs(jit_log, modules_log, metadata_log, result.diagnostics)

    with ResolutionSession(app_dir, config.resolution) as session:
        engine = ReconstructionEngine(
            logs.modules, session, max_depth=config.resolution.max_generic_depth
        )
        for event in logs.requests(result.diagnostics):
            try:
                result.methods.append(engine.resolve(event))
            except ResolutionError as e:
                log.warning(
                    "resolution.item_failed",
                    function_id=event.function_id,
                    token=hex(event.method_token),
                    error=e.message,
                )
                result.diagnostics.append(e)
        result.diagnostics.extend(session.diagnostics)

    log.info(
        "resolution.complete",
        session_id=session_id,
        methods=len(result.methods),
        diagnostics=len(result.diagnostics),
    )
    return result


def log_paths(log_dir: Path, logs: LogsConfig | None = None) -> tuple[Path, Path, Path]:
    """(jit, modules, metadata) paths inside a log directory."""
    logs = logs or LogsConfig()
    return (
        log_dir / logs.jit_file,
        log_dir / logs.modules_file,
        log_dir / logs.metadata_file,
    )


def parse_log_directory(
    log_dir: Path,
    app_dir: Path,
    *,
    config: JitLogConfig | None = None,
) -> ParseResult:
    """parse_profiler_logs with the three logs at their configured names."""
    config = config or JitLogConfig()
    jit_log, modules_log, metadata_log = log_paths(log_dir, config.logs)
    return parse_profiler_logs(jit_log, modules_log, metadata_log, app_dir, config=config)
