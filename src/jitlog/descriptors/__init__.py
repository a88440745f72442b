"""Symbolic, version-agnostic descriptors of types and methods."""

from jitlog.descriptors.codec import (
    deserialize_type,
    load_code_unit,
    method_to_node,
    node_to_type,
    parse_method_node,
    parse_type_node,
    serialize_method,
    serialize_type,
    type_to_node,
)
from jitlog.descriptors.manifest import (
    ManifestEntryResult,
    dump_manifest,
    load_manifest,
    read_manifest,
    resolve_manifest,
    write_manifest,
)
from jitlog.descriptors.matcher import deserialize_method, node_to_method
from jitlog.descriptors.models import MethodNode, TypeNode

__all__ = [
    "ManifestEntryResult",
    "MethodNode",
    "TypeNode",
    "deserialize_method",
    "deserialize_type",
    "dump_manifest",
    "load_code_unit",
    "load_manifest",
    "method_to_node",
    "node_to_method",
    "node_to_type",
    "parse_method_node",
    "parse_type_node",
    "read_manifest",
    "resolve_manifest",
    "serialize_method",
    "serialize_type",
    "type_to_node",
    "write_manifest",
]
