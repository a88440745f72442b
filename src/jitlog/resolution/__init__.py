"""Reconstruction of compiled methods from correlated logs.

Usage:
    from jitlog.resolution import parse_profiler_logs

    result = parse_profiler_logs(jit, modules, metadata, app_dir)
    for method in result.methods:
        ...
    print(result.errors_text)
"""

from jitlog.resolution.engine import ReconstructionEngine
from jitlog.resolution.modules import CodeUnitIndex, ResolutionSession
from jitlog.resolution.ops import ParseResult, log_paths, parse_log_directory, parse_profiler_logs

__all__ = [
    "CodeUnitIndex",
    "ParseResult",
    "ReconstructionEngine",
    "ResolutionSession",
    "log_paths",
    "parse_log_directory",
    "parse_profiler_logs",
]
