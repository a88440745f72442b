"""Type and method encoding to symbolic descriptors, and type decoding.

Encoding records the defining module's import name and the class's
qualified name, never a file path or version, so descriptors survive
rebuilds and reloads. A closed generic type is recorded as its definition
plus the encoded arguments, recursively.
"""

from __future__ import annotations

import importlib
import typing
from types import ModuleType
from typing import Any, TypeVar

from pydantic import ValidationError

from jitlog.config.constants import DESCRIPTOR_MAX_DEPTH
from jitlog.core.errors import DescriptorError, MalformedDescriptorError, TargetNotFoundError
from jitlog.descriptors.models import MethodNode, TypeNode
from jitlog.runtime.reflection import (
    MethodHandle,
    generic_arguments,
    generic_definition,
    is_constructed,
    is_generic_definition,
    make_generic_type,
)

TYPEVAR_PREFIX = "~"

# Builtin classes that are not reachable as attributes of the builtins module
_BUILTIN_EXTRAS: dict[str, type] = {
    "NoneType": type(None),
    "ellipsis": type(...),
    "NotImplementedType": type(NotImplemented),
}

_MISSING = object()


def _definition_node(tp: Any) -> TypeNode:
    if tp is typing.Union:
        return TypeNode(name="Union", assembly="typing")
    if not isinstance(tp, type):
        raise DescriptorError.unsupported_type(tp)
    return TypeNode(name=tp.__qualname__, assembly=tp.__module__)


def type_to_node(tp: Any, _depth: int = 0) -> TypeNode:
    """Encode a type.

    Raises:
        DescriptorError: If the type has no symbolic form (Literal, Callable
            parameter lists, Annotated) or nests too deeply.
    """
    if _depth > DESCRIPTOR_MAX_DEPTH:
        raise DescriptorError.too_deep(DESCRIPTOR_MAX_DEPTH)
    if tp is None:
        tp = type(None)
    if isinstance(tp, TypeVar):
        return TypeNode(name=f"{TYPEVAR_PREFIX}{tp.__name__}", assembly=tp.__module__)

    head = _definition_node(generic_definition(tp))
    if not is_constructed(tp):
        return head
    return TypeNode(
        name=head.name,
        assembly=head.assembly,
        generic_arguments=tuple(type_to_node(arg, _depth + 1) for arg in generic_arguments(tp)),
    )


def method_to_node(method: MethodHandle) -> MethodNode:
    """Encode a method or constructor.

    Generic arguments are recorded only for a fully closed generic method.
    """
    generic = (
        tuple(type_to_node(arg) for arg in method.generic_arguments)
        if method.is_closed_generic and not method.is_constructor
        else ()
    )
    return MethodNode(
        declaring_type=type_to_node(method.declaring_type),
        name=method.name,
        generic_arguments=generic,
        parameter_types=tuple(type_to_node(p) for p in method.parameter_types),
        is_constructor=method.is_constructor,
        is_static=method.is_static,
    )


def load_code_unit(name: str) -> ModuleType:
    """Import a code unit by its short name; the environment picks the version."""
    try:
        return importlib.import_module(name)
    except (ImportError, TypeError, ValueError) as e:
        raise TargetNotFoundError.code_unit_not_found(name, str(e)) from e


def _lookup(code_unit: ModuleType, name: str) -> Any:
    if name.startswith(TYPEVAR_PREFIX):
        value = getattr(code_unit, name[len(TYPEVAR_PREFIX) :], None)
        if isinstance(value, TypeVar):
            return value
        raise TargetNotFoundError.type_not_found(name, code_unit.__name__)

    if code_unit.__name__ == "builtins" and name in _BUILTIN_EXTRAS:
        return _BUILTIN_EXTRAS[name]

    value: Any = code_unit
    for part in name.split("."):
        value = getattr(value, part, _MISSING)
        if value is _MISSING:
            raise TargetNotFoundError.type_not_found(name, code_unit.__name__)
    if not (isinstance(value, type) or is_generic_definition(value) or is_constructed(value)):
        raise TargetNotFoundError.type_not_found(name, code_unit.__name__)
    return value


def node_to_type(node: TypeNode, _depth: int = 0) -> Any:
    """Decode a type descriptor in the current environment.

    Raises:
        MalformedDescriptorError: Blank name/code unit, or empty GenericArguments.
        TargetNotFoundError: Code unit or type absent, or the definition found
            here cannot take the recorded arguments.
    """
    if _depth > DESCRIPTOR_MAX_DEPTH:
        raise DescriptorError.too_deep(DESCRIPTOR_MAX_DEPTH)
    if not node.name.strip():
        raise MalformedDescriptorError.missing_field("TypeNode.Name")
    if not node.assembly.strip():
        raise MalformedDescriptorError.missing_field("TypeNode.Assembly")

    tp = _lookup(load_code_unit(node.assembly), node.name)

    if node.generic_arguments is None:
        return tp
    if not node.generic_arguments:
        raise MalformedDescriptorError.empty_generic_arguments(node.name)

    if is_constructed(tp):
        # The name resolved to an alias that is already closed; start from its definition
        tp = generic_definition(tp)
    arguments = [node_to_type(arg, _depth + 1) for arg in node.generic_arguments]
    try:
        return make_generic_type(tp, arguments)
    except TypeError as e:
        raise TargetNotFoundError.generic_mismatch(node.name, str(e)) from e


def _first_error(e: ValidationError) -> str:
    err = e.errors()[0]
    loc = ".".join(str(part) for part in err["loc"])
    return f"{loc}: {err['msg']}" if loc else err["msg"]


def parse_type_node(text: str | bytes) -> TypeNode:
    try:
        return TypeNode.model_validate_json(text)
    except ValidationError as e:
        raise MalformedDescriptorError.invalid(_first_error(e)) from e


def parse_method_node(text: str | bytes) -> MethodNode:
    try:
        return MethodNode.model_validate_json(text)
    except ValidationError as e:
        raise MalformedDescriptorError.invalid(_first_error(e)) from e


def serialize_type(tp: Any, *, indent: int | None = 2) -> str:
    return type_to_node(tp).model_dump_json(by_alias=True, exclude_none=True, indent=indent)


def deserialize_type(text: str | bytes) -> Any:
    return node_to_type(parse_type_node(text))


def serialize_method(method: MethodHandle, *, indent: int | None = 2) -> str:
    return method_to_node(method).model_dump_json(by_alias=True, exclude_none=True, indent=indent)
