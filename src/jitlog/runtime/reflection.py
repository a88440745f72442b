"""Type introspection for the Python host runtime.

Generic model:
- Open generic definition: a class with ``__parameters__`` (``typing.Generic``,
  PEP 695 classes), a builtin/collections container with known arity, or one
  of the variadic forms ``tuple`` and ``typing.Union``.
- Closed generic instantiation: a parameterized alias whose arguments contain
  no ``TypeVar`` (``dict[str, list[Box[int]]]``).
- Generic method: a function with PEP 695 ``__type_params__``, or whose
  parameter annotations use ``TypeVar``s the declaring class does not bind.

Methods are represented by ``MethodHandle``. Handles obtained from a closed
generic type report parameter types with the class arguments substituted;
closing a generic method substitutes its own arguments the same way.
"""

from __future__ import annotations

import collections
import collections.abc
import inspect
import sys
import types
import typing
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any, TypeVar, get_args, get_origin

from jitlog.core.errors import DescriptorError
from jitlog.runtime.metadata import MetadataTable, declared_function

CONSTRUCTOR_NAME = "__init__"

# Arity of runtime-subscriptable containers; None marks a variadic form
_KNOWN_ARITY: dict[Any, int | None] = {
    list: 1,
    set: 1,
    frozenset: 1,
    dict: 2,
    type: 1,
    tuple: None,
    typing.Union: None,
    collections.deque: 1,
    collections.defaultdict: 2,
    collections.OrderedDict: 2,
    collections.Counter: 1,
    collections.ChainMap: 2,
    collections.abc.Iterable: 1,
    collections.abc.Iterator: 1,
    collections.abc.Collection: 1,
    collections.abc.Sequence: 1,
    collections.abc.MutableSequence: 1,
    collections.abc.Set: 1,
    collections.abc.MutableSet: 1,
    collections.abc.Mapping: 2,
    collections.abc.MutableMapping: 2,
}


class MemberKind(StrEnum):
    INSTANCE = "instance"
    STATIC = "static"
    CLASS = "class"
    CONSTRUCTOR = "constructor"


def is_union(tp: Any) -> bool:
    return tp is typing.Union or tp is types.UnionType


def _hashable(tp: Any) -> bool:
    try:
        hash(tp)
    except TypeError:
        return False
    return True


def _class_parameters(tp: Any) -> tuple[Any, ...]:
    params = getattr(tp, "__parameters__", ())
    return params if isinstance(params, tuple) else ()


def is_constructed(tp: Any) -> bool:
    """True for any parameterized alias, closed or not."""
    return get_origin(tp) is not None and bool(get_args(tp))


def generic_definition(tp: Any) -> Any:
    """Definition of a parameterized alias; other types are returned as-is."""
    origin = get_origin(tp)
    if origin is None:
        return tp
    return typing.Union if is_union(origin) else origin


def generic_arguments(tp: Any) -> tuple[Any, ...]:
    return get_args(tp) if get_origin(tp) is not None else ()


def is_generic_definition(tp: Any) -> bool:
    if get_origin(tp) is not None:
        return False
    if _hashable(tp) and tp in _KNOWN_ARITY:
        return True
    return isinstance(tp, type) and bool(_class_parameters(tp))


def generic_arity(definition: Any) -> int | None:
    """Number of type parameters of a definition, None when variadic."""
    if _hashable(definition) and definition in _KNOWN_ARITY:
        return _KNOWN_ARITY[definition]
    return len(_class_parameters(definition))


def contains_generic_parameters(tp: Any) -> bool:
    if isinstance(tp, TypeVar):
        return True
    return any(contains_generic_parameters(arg) for arg in generic_arguments(tp))


def is_closed_generic(tp: Any) -> bool:
    return is_constructed(tp) and not contains_generic_parameters(tp)


def make_generic_type(definition: Any, arguments: typing.Sequence[Any]) -> Any:
    """Close a generic definition over concrete arguments.

    Raises:
        TypeError: If ``definition`` is not a generic definition or the
            argument count does not match its arity.
    """
    if not is_generic_definition(definition):
        raise TypeError(f"{type_display_name(definition)} is not a generic type definition")
    arity = generic_arity(definition)
    if arity is not None and arity != len(arguments):
        raise TypeError(
            f"{type_display_name(definition)} takes {arity} type argument(s), "
            f"got {len(arguments)}"
        )
    if not arguments:
        raise TypeError(f"{type_display_name(definition)} needs at least one type argument")
    return definition[tuple(arguments)]


def substitute(tp: Any, mapping: dict[Any, Any]) -> Any:
    """Replace TypeVars in ``tp`` using ``mapping``, recursively."""
    if not mapping:
        return tp
    if isinstance(tp, TypeVar):
        return mapping.get(tp, tp)
    params = getattr(tp, "__parameters__", ())
    if get_origin(tp) is None or not params:
        return tp
    return tp[tuple(mapping.get(param, param) for param in params)]


def type_key(tp: Any) -> Any:
    """Structural identity of a type: ``typing.List[int]`` and ``list[int]`` agree."""
    if tp is None:
        return type(None)
    origin = get_origin(tp)
    if origin is None:
        return tp
    return (generic_definition(tp), tuple(type_key(arg) for arg in get_args(tp)))


def same_types(left: typing.Sequence[Any], right: typing.Sequence[Any]) -> bool:
    """Exact order-and-length comparison of two type sequences."""
    return len(left) == len(right) and all(
        type_key(a) == type_key(b) for a, b in zip(left, right, strict=True)
    )


def type_display_name(tp: Any) -> str:
    if isinstance(tp, type) and get_origin(tp) is None:
        return f"{tp.__module__}.{tp.__qualname__}"
    return repr(tp)


def code_unit_of(tp: Any) -> types.ModuleType:
    """Loaded module defining the (definition of the) given type."""
    definition = generic_definition(tp)
    module_name = getattr(definition, "__module__", None)
    module = sys.modules.get(module_name) if isinstance(module_name, str) else None
    if module is None:
        raise LookupError(f"Code unit of {type_display_name(tp)} is not loaded")
    return module


def _collect_type_vars(tp: Any, found: list[Any]) -> None:
    if isinstance(tp, TypeVar):
        if tp not in found:
            found.append(tp)
        return
    for arg in get_args(tp):
        if isinstance(arg, list):
            for item in arg:
                _collect_type_vars(item, found)
        else:
            _collect_type_vars(arg, found)


@dataclass(frozen=True, slots=True)
class MethodHandle:
    """A resolved, callable method or constructor.

    ``declaring_type`` is the class or closed generic alias the member was
    obtained from; ``generic_arguments`` is set only for a closed generic
    method.
    """

    declaring_type: Any
    name: str
    function: Any
    kind: MemberKind
    generic_arguments: tuple[Any, ...] = ()
    token: int = field(default=0, compare=False)

    @property
    def is_constructor(self) -> bool:
        return self.kind is MemberKind.CONSTRUCTOR

    @property
    def is_static(self) -> bool:
        return self.kind in (MemberKind.STATIC, MemberKind.CLASS)

    @property
    def generic_parameters(self) -> tuple[Any, ...]:
        """The method's own type parameters, in declaration order."""
        if self.is_constructor:
            return ()
        declared = getattr(self.function, "__type_params__", ())
        if declared:
            return tuple(declared)
        bound = set(_class_parameters(generic_definition(self.declaring_type)))
        found: list[Any] = []
        for annotation in self.type_hints().values():
            _collect_type_vars(annotation, found)
        return tuple(tv for tv in found if tv not in bound)

    def type_hints(self) -> dict[str, Any]:
        """Evaluated annotations of the underlying function.

        Raises:
            DescriptorError: An annotation names something that does not exist
                at runtime, such as a type imported only under TYPE_CHECKING.
        """
        try:
            return typing.get_type_hints(self.function)
        except (NameError, AttributeError, TypeError, SyntaxError) as e:
            reason = f"{type(e).__name__}: {e}"
            raise DescriptorError.unresolvable_annotation(str(self), reason) from e

    @property
    def is_generic_method(self) -> bool:
        return bool(self.generic_parameters)

    @property
    def is_generic_definition(self) -> bool:
        return self.is_generic_method and not self.generic_arguments

    @property
    def is_closed_generic(self) -> bool:
        return bool(self.generic_arguments) and not any(
            contains_generic_parameters(arg) for arg in self.generic_arguments
        )

    @property
    def parameter_types(self) -> tuple[Any, ...]:
        """Declared parameter types in order, excluding the receiver."""
        hints = self.type_hints()
        params = list(inspect.signature(self.function).parameters.values())
        if self.kind is not MemberKind.STATIC:
            params = params[1:]
        mapping = self._substitutions()
        return tuple(substitute(hints.get(p.name, object), mapping) for p in params)

    def _substitutions(self) -> dict[Any, Any]:
        mapping: dict[Any, Any] = {}
        class_args = generic_arguments(self.declaring_type)
        if class_args:
            params = _class_parameters(generic_definition(self.declaring_type))
            mapping.update(zip(params, class_args, strict=False))
        if self.generic_arguments:
            mapping.update(zip(self.generic_parameters, self.generic_arguments, strict=True))
        return mapping

    def invoke(self, *args: Any, **kwargs: Any) -> Any:
        """Call the member. Instance methods take the instance as first argument."""
        if self.is_constructor:
            return self.declaring_type(*args, **kwargs)
        if self.kind is MemberKind.CLASS:
            return self.function(generic_definition(self.declaring_type), *args, **kwargs)
        return self.function(*args, **kwargs)

    def __str__(self) -> str:
        return f"{type_display_name(self.declaring_type)}.{self.name}"


def _member_kind(name: str, raw: Any) -> MemberKind:
    if name == CONSTRUCTOR_NAME:
        return MemberKind.CONSTRUCTOR
    if isinstance(raw, staticmethod):
        return MemberKind.STATIC
    if isinstance(raw, classmethod):
        return MemberKind.CLASS
    return MemberKind.INSTANCE


def _declared_members(tp: Any, table: MetadataTable | None) -> list[MethodHandle]:
    definition = generic_definition(tp)
    if not isinstance(definition, type):
        return []
    if table is None:
        table = MetadataTable.build(code_unit_of(definition))
    handles = []
    for name, raw in vars(definition).items():
        func = declared_function(raw)
        if func is None or func.__qualname__ != f"{definition.__qualname__}.{name}":
            continue
        try:
            token = table.member_token(definition, name)
        except LookupError:
            # Classes outside the module namespace (e.g. defined in a function) have no rows
            token = 0
        handles.append(
            MethodHandle(
                declaring_type=tp,
                name=name,
                function=func,
                kind=_member_kind(name, raw),
                token=token,
            )
        )
    return handles


def declared_methods(tp: Any, table: MetadataTable | None = None) -> list[MethodHandle]:
    """Methods declared on a type (not constructors), in declaration order."""
    return [h for h in _declared_members(tp, table) if not h.is_constructor]


def declared_constructors(tp: Any, table: MetadataTable | None = None) -> list[MethodHandle]:
    return [h for h in _declared_members(tp, table) if h.is_constructor]


def resolve_method(table: MetadataTable, token: int) -> MethodHandle:
    """Member named by a MethodDef token, on its open declaring class."""
    owner, name = table.resolve_member(token)
    raw = vars(owner)[name]
    return MethodHandle(
        declaring_type=owner,
        name=name,
        function=declared_function(raw),
        kind=_member_kind(name, raw),
        token=token,
    )


def make_generic_method(handle: MethodHandle, arguments: typing.Sequence[Any]) -> MethodHandle:
    """Close a generic method definition over concrete arguments.

    Raises:
        TypeError: If the handle is not a generic method definition or the
            argument count does not match.
    """
    if not handle.is_generic_definition:
        raise TypeError(f"{handle} is not a generic method definition")
    arity = len(handle.generic_parameters)
    if arity != len(arguments):
        raise TypeError(f"{handle} takes {arity} type argument(s), got {len(arguments)}")
    return replace(handle, generic_arguments=tuple(arguments))


def find_member_by_token(tp: Any, token: int) -> MethodHandle | None:
    """Member of ``tp`` whose token equals ``token``: methods first, then constructors."""
    table = MetadataTable.build(code_unit_of(tp))
    for handle in declared_methods(tp, table):
        if handle.token == token:
            return handle
    for handle in declared_constructors(tp, table):
        if handle.token == token:
            return handle
    return None
