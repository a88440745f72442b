"""Metadata tokens for Python code units.

A token is a 32-bit value: the table kind in the high byte and a 1-based row
number in the low 24 bits, numbered per module in definition order.

TypeDef rows (0x02): every class defined by the module, depth-first through
nested classes, in namespace order. A class is counted only where its
``__qualname__`` matches the attribute path it is found under, so aliases
and re-exports do not get rows of their own.

MethodDef rows (0x06): for each TypeDef row in order, every function,
``staticmethod`` and ``classmethod`` declared in the class body.
"""

from __future__ import annotations

import inspect
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import IntEnum
from types import ModuleType
from typing import Any

_ROW_MASK = 0x00FFFFFF


class TokenTable(IntEnum):
    TYPE_DEF = 0x02
    METHOD_DEF = 0x06


def make_token(table: TokenTable, row: int) -> int:
    return (int(table) << 24) | row


def token_table(token: int) -> int:
    return token >> 24


def token_row(token: int) -> int:
    return token & _ROW_MASK


def declared_function(value: Any) -> Any | None:
    """Underlying function of a class-body member, or None if it is not a method."""
    if isinstance(value, (staticmethod, classmethod)):
        value = value.__func__
    return value if inspect.isfunction(value) else None


def _walk_types(owner: Any, module_name: str, prefix: str) -> Iterator[type]:
    for name, value in vars(owner).items():
        if (
            isinstance(value, type)
            and value.__module__ == module_name
            and value.__qualname__ == f"{prefix}{name}"
        ):
            yield value
            yield from _walk_types(value, module_name, f"{value.__qualname__}.")


def _walk_members(owner: type) -> Iterator[str]:
    for name, value in vars(owner).items():
        func = declared_function(value)
        if func is not None and func.__qualname__ == f"{owner.__qualname__}.{name}":
            yield name


@dataclass(slots=True)
class MetadataTable:
    """Token tables of one loaded code unit."""

    code_unit: ModuleType
    types: list[type] = field(default_factory=list)
    members: list[tuple[type, str]] = field(default_factory=list)
    _type_rows: dict[type, int] = field(default_factory=dict)
    _member_rows: dict[tuple[type, str], int] = field(default_factory=dict)

    @classmethod
    def build(cls, code_unit: ModuleType) -> MetadataTable:
        table = cls(code_unit=code_unit)
        for tp in _walk_types(code_unit, code_unit.__name__, ""):
            table.types.append(tp)
            table._type_rows[tp] = len(table.types)
        for tp in table.types:
            for name in _walk_members(tp):
                table.members.append((tp, name))
                table._member_rows[(tp, name)] = len(table.members)
        return table

    def resolve_type(self, token: int) -> type:
        """Class named by a TypeDef token. Raises LookupError if out of range."""
        row = self._row(token, TokenTable.TYPE_DEF, len(self.types))
        return self.types[row - 1]

    def resolve_member(self, token: int) -> tuple[type, str]:
        """(owner class, member name) named by a MethodDef token."""
        row = self._row(token, TokenTable.METHOD_DEF, len(self.members))
        return self.members[row - 1]

    def type_token(self, tp: type) -> int:
        try:
            return make_token(TokenTable.TYPE_DEF, self._type_rows[tp])
        except KeyError:
            raise LookupError(f"{tp!r} is not defined in {self.code_unit.__name__}") from None

    def member_token(self, owner: type, name: str) -> int:
        try:
            return make_token(TokenTable.METHOD_DEF, self._member_rows[(owner, name)])
        except KeyError:
            raise LookupError(
                f"{owner.__qualname__}.{name} is not declared in {self.code_unit.__name__}"
            ) from None

    def _row(self, token: int, table: TokenTable, size: int) -> int:
        if token_table(token) != table:
            raise LookupError(f"Token 0x{token:08X} is not a {table.name} token")
        row = token_row(token)
        if not 1 <= row <= size:
            raise LookupError(
                f"Token 0x{token:08X} is out of range for {self.code_unit.__name__} "
                f"({size} {table.name} rows)"
            )
        return row
