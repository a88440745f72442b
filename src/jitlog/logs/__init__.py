"""Instrumentation log parsing and correlation.

Usage:
    from jitlog.logs import correlate_logs

    diagnostics = []
    logs = correlate_logs(jit, modules, metadata, diagnostics)
    for event in logs.requests(diagnostics):
        ...
"""

from jitlog.logs.correlator import CorrelatedLogs, correlate_logs
from jitlog.logs.models import (
    CompiledMethodEvent,
    MethodMetadataEvent,
    ModuleRecord,
    TypeArgumentNode,
)
from jitlog.logs.reader import read_json_lines

__all__ = [
    "CompiledMethodEvent",
    "CorrelatedLogs",
    "MethodMetadataEvent",
    "ModuleRecord",
    "TypeArgumentNode",
    "correlate_logs",
    "read_json_lines",
]
