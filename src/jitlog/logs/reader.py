"""Line-delimited JSON log reader.

Every line is parsed independently. Bad lines and missing files become
diagnostics; the caller always gets whatever records could be read.
"""

import codecs
from collections.abc import Iterator
from pathlib import Path
from typing import TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from jitlog.core.errors import JitLogError, LogInputError

log = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

# Keep diagnostics readable when a whole binary blob ends up on one line
_MAX_ECHOED_LINE = 200


def _first_error(e: ValidationError) -> str:
    err = e.errors()[0]
    loc = ".".join(str(part) for part in err["loc"])
    return f"{loc}: {err['msg']}" if loc else err["msg"]


def _split_lines(content: bytes) -> list[bytes]:
    # Only LF ends a line; other Unicode separators may occur inside JSON strings
    if content.startswith(codecs.BOM_UTF8):
        content = content[len(codecs.BOM_UTF8) :]
    return [line.removesuffix(b"\r") for line in content.split(b"\n")]


def read_json_lines(
    path: Path,
    model: type[RecordT],
    description: str,
    diagnostics: list[JitLogError],
) -> Iterator[RecordT]:
    """Yield one validated record per non-blank line of a log file.

    Args:
        path: Log file to read.
        model: Record model each line is validated against.
        description: Human name of the log used in diagnostics ("JIT", "Modules").
        diagnostics: Receives one error per malformed line, or one for the file.
    """
    if not path.is_file():
        diagnostics.append(LogInputError.file_not_found(description, str(path)))
        log.warning("logs.file_not_found", log_name=description, path=str(path))
        return

    try:
        content = path.read_bytes()
    except OSError as e:
        diagnostics.append(LogInputError.read_failed(description, str(path), str(e)))
        log.warning("logs.read_failed", log_name=description, path=str(path), exc_info=True)
        return

    records = 0
    bad_lines = 0
    for line_number, raw in enumerate(_split_lines(content), start=1):
        if not raw.strip():
            continue
        reason: str | None = None
        try:
            record = model.model_validate_json(raw.decode("utf-8"))
        except UnicodeDecodeError as e:
            reason = f"invalid UTF-8 at byte {e.start}"
        except ValidationError as e:
            reason = _first_error(e)
        if reason is not None:
            bad_lines += 1
            line = raw.decode("utf-8", errors="replace")
            echoed = line if len(line) <= _MAX_ECHOED_LINE else line[:_MAX_ECHOED_LINE] + "..."
            diagnostics.append(
                LogInputError.malformed_line(description, line_number, reason, echoed)
            )
            continue
        records += 1
        yield record

    log.info("logs.read", log_name=description, records=records, bad_lines=bad_lines)
