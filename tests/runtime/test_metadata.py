"""Tests for metadata tokens of Python code units."""

from __future__ import annotations

import types

import jit_samples
import pytest

from jitlog.runtime.metadata import (
    MetadataTable,
    TokenTable,
    declared_function,
    make_token,
    token_row,
    token_table,
)


@pytest.fixture
def table() -> MetadataTable:
    return MetadataTable.build(jit_samples)


class TestTokens:
    def test_token_layout(self) -> None:
        token = make_token(TokenTable.METHOD_DEF, 5)

        assert token == 0x06000005
        assert token_table(token) == TokenTable.METHOD_DEF
        assert token_row(token) == 5


class TestDeclaredFunction:
    def test_unwraps_static_and_class_methods(self) -> None:
        raw = vars(jit_samples.Plain)

        assert declared_function(raw["create"]) is jit_samples.Plain.create
        assert declared_function(raw["named"]) is raw["named"].__func__
        assert declared_function(raw["add"]) is jit_samples.Plain.add

    def test_non_functions_are_not_methods(self) -> None:
        assert declared_function(42) is None
        assert declared_function(jit_samples.Plain.Nested) is None


class TestMetadataTable:
    """Row numbering and token lookups."""

    def test_types_are_numbered_in_definition_order_with_nested(
        self, table: MetadataTable
    ) -> None:
        names = [tp.__qualname__ for tp in table.types]

        assert names == [
            "Plain",
            "Plain.Nested",
            "Box",
            "Pair",
            "Utils",
            "Derived",
            "Odd",
            "Ledger",
        ]

    def test_imported_names_get_no_rows(self, table: MetadataTable) -> None:
        assert all(tp.__module__ == "jit_samples" for tp in table.types)

    def test_type_token_round_trips(self, table: MetadataTable) -> None:
        token = table.type_token(jit_samples.Box)

        assert token_table(token) == TokenTable.TYPE_DEF
        assert table.resolve_type(token) is jit_samples.Box

    def test_member_token_round_trips(self, table: MetadataTable) -> None:
        token = table.member_token(jit_samples.Pair, "swap")

        assert table.resolve_member(token) == (jit_samples.Pair, "swap")

    def test_members_follow_type_rows(self, table: MetadataTable) -> None:
        first = table.members[0]

        assert first == (jit_samples.Plain, "__init__")
        assert table.member_token(*first) == make_token(TokenTable.METHOD_DEF, 1)

    def test_inherited_members_are_not_redeclared(self, table: MetadataTable) -> None:
        derived = [name for owner, name in table.members if owner is jit_samples.Derived]

        assert derived == ["extra"]

    @pytest.mark.parametrize(
        "token",
        [
            0x02000000,  # row 0
            0x02FFFFFF,  # past the end
            0x06000001,  # wrong table
        ],
    )
    def test_bad_type_tokens_raise_lookup_error(self, table: MetadataTable, token: int) -> None:
        with pytest.raises(LookupError):
            table.resolve_type(token)

    def test_bad_member_token_raises_lookup_error(self, table: MetadataTable) -> None:
        with pytest.raises(LookupError, match="out of range"):
            table.resolve_member(make_token(TokenTable.METHOD_DEF, len(table.members) + 1))

    def test_foreign_type_has_no_token(self, table: MetadataTable) -> None:
        with pytest.raises(LookupError):
            table.type_token(int)

    def test_builtins_have_type_rows(self) -> None:
        builtins_table = MetadataTable.build(__import__("builtins"))

        token = builtins_table.type_token(int)

        assert builtins_table.resolve_type(token) is int

    def test_alias_is_not_counted_twice(self) -> None:
        # Given - a module exposing the same class under two names
        module = types.ModuleType("alias_mod")
        exec(
            "class Real:\n    def go(self): pass\nAlias = Real\n",
            module.__dict__,
        )

        # When
        table = MetadataTable.build(module)

        # Then
        assert [tp.__name__ for tp in table.types] == ["Real"]
        assert table.members == [(module.Real, "go")]
