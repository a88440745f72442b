"""Join the three instrumentation logs by their numeric identifiers.

- modules log: ModuleID -> ModuleRecord
- metadata log: FunctionID -> MethodMetadataEvent
- JIT log: the set of FunctionIDs that were compiled

Duplicate IDs are last-write-wins, since IDs are unique within one session.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from jitlog.core.errors import CorrelationError, JitLogError
from jitlog.logs.models import CompiledMethodEvent, MethodMetadataEvent, ModuleRecord
from jitlog.logs.reader import read_json_lines

log = structlog.get_logger(__name__)


@dataclass(slots=True)
class CorrelatedLogs:
    """The three logs indexed for per-method resolution."""

    modules: dict[int, ModuleRecord] = field(default_factory=dict)
    functions: dict[int, MethodMetadataEvent] = field(default_factory=dict)
    compiled: list[int] = field(default_factory=list)  # first-seen order, no duplicates

    def requests(self, diagnostics: list[JitLogError]) -> Iterator[MethodMetadataEvent]:
        """Yield the metadata event of every compiled function.

        Compiled functions without metadata are reported and skipped.
        """
        for function_id in self.compiled:
            event = self.functions.get(function_id)
            if event is None:
                diagnostics.append(CorrelationError.metadata_not_found(function_id))
                continue
            yield event


def correlate_logs(
    jit_log: Path,
    modules_log: Path,
    metadata_log: Path,
    diagnostics: list[JitLogError],
) -> CorrelatedLogs:
    """Read all three logs. A missing file contributes nothing but a diagnostic."""
    result = CorrelatedLogs()

    for record in read_json_lines(modules_log, ModuleRecord, "Modules", diagnostics):
        result.modules[record.module_id] = record

    for event in read_json_lines(metadata_log, MethodMetadataEvent, "Metadata", diagnostics):
        result.functions[event.function_id] = event

    compiled = {
        event.function_id: None
        for event in read_json_lines(jit_log, CompiledMethodEvent, "JIT", diagnostics)
    }
    result.compiled = list(compiled)

    log.info(
        "logs.correlated",
        modules=len(result.modules),
        functions=len(result.functions),
        compiled=len(result.compiled),
    )
    return result
