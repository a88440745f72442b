"""Re-resolve methods from descriptors alone, by name and signature.

This is the only way back from persisted descriptors: no module ids or
tokens are involved, so it works in a process other than the one that
captured the logs.

When several declared members match structurally, the first one in
declaration order wins. Python classes cannot overload a name, so this only
matters for descriptors produced elsewhere.
"""

from __future__ import annotations

from typing import Any

from jitlog.core.errors import MalformedDescriptorError, TargetNotFoundError
from jitlog.descriptors.codec import node_to_type, parse_method_node
from jitlog.descriptors.models import MethodNode
from jitlog.runtime.reflection import (
    MethodHandle,
    declared_constructors,
    declared_methods,
    make_generic_method,
    same_types,
    type_display_name,
)


def node_to_method(node: MethodNode) -> MethodHandle:
    """Decode a method descriptor in the current environment.

    Raises:
        MalformedDescriptorError: No DeclaringType, or a blank Name.
        TargetNotFoundError: No declared member matches the signature.
    """
    if node.declaring_type is None:
        raise MalformedDescriptorError.missing_field("DeclaringType")
    if not node.name.strip():
        raise MalformedDescriptorError.missing_field("Name")

    declaring = node_to_type(node.declaring_type)
    generic_args = [node_to_type(arg) for arg in node.generic_arguments]
    parameter_types = [node_to_type(param) for param in node.parameter_types]

    if node.is_constructor:
        return _match_constructor(declaring, parameter_types, is_static=node.is_static)
    return _match_method(declaring, node.name, generic_args, parameter_types)


def _match_constructor(
    declaring: Any, parameter_types: list[Any], *, is_static: bool
) -> MethodHandle:
    for ctor in declared_constructors(declaring):
        if ctor.is_static == is_static and same_types(ctor.parameter_types, parameter_types):
            return ctor
    raise TargetNotFoundError.constructor_not_found(type_display_name(declaring))


def _match_method(
    declaring: Any, name: str, generic_args: list[Any], parameter_types: list[Any]
) -> MethodHandle:
    for candidate in declared_methods(declaring):
        if candidate.name != name:
            continue
        if generic_args:
            if not candidate.is_generic_definition:
                continue
            if len(candidate.generic_parameters) != len(generic_args):
                continue
            candidate = make_generic_method(candidate, generic_args)
        if same_types(candidate.parameter_types, parameter_types):
            return candidate
    raise TargetNotFoundError.method_not_found(name, type_display_name(declaring))


def deserialize_method(text: str | bytes) -> MethodHandle:
    """Decode one descriptor JSON document into a method handle."""
    return node_to_method(parse_method_node(text))
