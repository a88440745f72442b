"""Manifest files: a JSON array of method descriptors.

A manifest is written after a parse run and read back, possibly in another
process, to re-resolve every recorded method by signature.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

import structlog
from pydantic import TypeAdapter, ValidationError

from jitlog.core.errors import DescriptorError, MalformedDescriptorError
from jitlog.descriptors.matcher import node_to_method
from jitlog.descriptors.models import MethodNode
from jitlog.runtime.reflection import MethodHandle

log = structlog.get_logger(__name__)

_MANIFEST = TypeAdapter(list[MethodNode])


def dump_manifest(nodes: Iterable[MethodNode], *, indent: int = 2) -> str:
    """Manifest JSON text. ``indent=0`` writes a single line."""
    data = _MANIFEST.dump_json(
        list(nodes), by_alias=True, exclude_none=True, indent=indent or None
    )
    return data.decode("utf-8")


def load_manifest(text: str | bytes) -> list[MethodNode]:
    try:
        return _MANIFEST.validate_json(text)
    except ValidationError as e:
        err = e.errors()[0]
        loc = ".".join(str(part) for part in err["loc"])
        raise MalformedDescriptorError.invalid(f"{loc}: {err['msg']}" if loc else err["msg"]) from e


def write_manifest(path: Path, nodes: Iterable[MethodNode], *, indent: int = 2) -> int:
    """Write nodes to ``path``, creating parent directories. Returns the entry count."""
    entries = list(nodes)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_manifest(entries, indent=indent) + "\n", encoding="utf-8")
    log.info("manifest.written", path=str(path), entries=len(entries))
    return len(entries)


def read_manifest(path: Path) -> list[MethodNode]:
    """Parse a manifest file.

    Raises:
        MalformedDescriptorError: Not a JSON array of method descriptors.
        OSError: The file cannot be read.
    """
    nodes = load_manifest(path.read_text(encoding="utf-8-sig"))
    log.debug("manifest.read", path=str(path), entries=len(nodes))
    return nodes


@dataclass(frozen=True, slots=True)
class ManifestEntryResult:
    """Outcome of decoding one manifest entry."""

    index: int
    node: MethodNode
    method: MethodHandle | None = None
    error: DescriptorError | None = None

    @property
    def ok(self) -> bool:
        return self.method is not None


def resolve_manifest(nodes: Iterable[MethodNode]) -> list[ManifestEntryResult]:
    """Decode every entry; a failing entry does not stop the others."""
    results: list[ManifestEntryResult] = []
    for index, node in enumerate(nodes):
        try:
            method = node_to_method(node)
        except DescriptorError as e:
            log.debug("manifest.entry_failed", index=index, error=str(e))
            results.append(ManifestEntryResult(index=index, node=node, error=e))
            continue
        results.append(ManifestEntryResult(index=index, node=node, method=method))
    return results
