"""Type introspection facility of the Python host runtime.

Looks up types and members by metadata token or by name and signature, and
constructs closed generic types and methods from definitions.
"""

from jitlog.runtime.metadata import MetadataTable, TokenTable, make_token
from jitlog.runtime.reflection import (
    CONSTRUCTOR_NAME,
    MemberKind,
    MethodHandle,
    contains_generic_parameters,
    declared_constructors,
    declared_methods,
    find_member_by_token,
    generic_arguments,
    generic_arity,
    generic_definition,
    is_closed_generic,
    is_generic_definition,
    make_generic_method,
    make_generic_type,
    resolve_method,
    same_types,
    type_display_name,
)

__all__ = [
    "CONSTRUCTOR_NAME",
    "MemberKind",
    "MetadataTable",
    "MethodHandle",
    "TokenTable",
    "contains_generic_parameters",
    "declared_constructors",
    "declared_methods",
    "find_member_by_token",
    "generic_arguments",
    "generic_arity",
    "generic_definition",
    "is_closed_generic",
    "is_generic_definition",
    "make_generic_method",
    "make_generic_type",
    "make_token",
    "resolve_method",
    "same_types",
    "type_display_name",
]
