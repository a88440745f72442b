"""Tests for type descriptor encoding and decoding."""

from __future__ import annotations

import json
import typing

import jit_samples
import pytest
from jit_samples import Box, Pair, Plain

from jitlog.core.errors import DescriptorError, ErrorCode, MalformedDescriptorError
from jitlog.descriptors.codec import (
    deserialize_type,
    node_to_type,
    serialize_type,
    type_to_node,
)
from jitlog.descriptors.models import TypeNode
from jitlog.runtime.reflection import type_key


def _decode_error(text: str) -> DescriptorError:
    with pytest.raises(DescriptorError) as exc_info:
        deserialize_type(text)
    return exc_info.value


class TestEncode:
    """type_to_node / serialize_type."""

    def test_plain_type_has_no_generic_arguments(self) -> None:
        data = json.loads(serialize_type(int))

        assert data == {"Name": "int", "Assembly": "builtins"}

    def test_closed_generic_records_definition_and_arguments(self) -> None:
        data = json.loads(serialize_type(Box[int]))

        assert data == {
            "Name": "Box",
            "Assembly": "jit_samples",
            "GenericArguments": [{"Name": "int", "Assembly": "builtins"}],
        }

    def test_nested_class_uses_qualified_name(self) -> None:
        node = type_to_node(Plain.Nested)

        assert (node.name, node.assembly) == ("Plain.Nested", "jit_samples")

    def test_open_definition_has_no_generic_arguments(self) -> None:
        assert type_to_node(Pair).generic_arguments is None

    def test_typing_alias_encodes_as_builtin_definition(self) -> None:
        assert type_to_node(typing.List[int]) == type_to_node(list[int])

    def test_union_and_none(self) -> None:
        node = type_to_node(int | None)

        assert (node.name, node.assembly) == ("Union", "typing")
        assert node.generic_arguments is not None
        assert [a.name for a in node.generic_arguments] == ["int", "NoneType"]

    def test_type_var(self) -> None:
        node = type_to_node(jit_samples.T)

        assert (node.name, node.assembly) == ("~T", "jit_samples")

    def test_literal_is_unsupported(self) -> None:
        with pytest.raises(DescriptorError) as exc_info:
            type_to_node(typing.Literal["a"])

        assert exc_info.value.code == ErrorCode.UNSUPPORTED_TYPE

    def test_excessive_nesting_is_rejected(self) -> None:
        tp: typing.Any = int
        for _ in range(100):
            tp = list[tp]

        with pytest.raises(DescriptorError) as exc_info:
            type_to_node(tp)

        assert exc_info.value.code == ErrorCode.DESCRIPTOR_TOO_DEEP


class TestRoundTrip:
    """Decoding what was encoded yields the same type."""

    @pytest.mark.parametrize(
        "tp",
        [
            int,
            Plain,
            Plain.Nested,
            Box,
            Box[int],
            dict[str, list[Box[int]]],
            Pair[Box[str], tuple[int, bytes]],
            type(None),
            jit_samples.T,
            dict[str, jit_samples.V],
        ],
    )
    def test_round_trip(self, tp: typing.Any) -> None:
        assert deserialize_type(serialize_type(tp)) == tp

    def test_union_round_trips_structurally(self) -> None:
        decoded = deserialize_type(serialize_type(int | None))

        assert type_key(decoded) == type_key(typing.Optional[int])


class TestDecodeFailures:
    """Malformed input versus targets absent from this environment."""

    def test_unknown_code_unit(self) -> None:
        error = _decode_error('{"Name": "Thing", "Assembly": "jl_no_such_module"}')

        assert error.code == ErrorCode.CODE_UNIT_NOT_FOUND

    def test_unknown_type(self) -> None:
        error = _decode_error('{"Name": "Missing", "Assembly": "jit_samples"}')

        assert error.code == ErrorCode.TYPE_NOT_FOUND

    @pytest.mark.parametrize("name", ["T", "Plain.add", "Plain.Missing"])
    def test_name_that_is_not_a_class(self, name: str) -> None:
        error = _decode_error(json.dumps({"Name": name, "Assembly": "jit_samples"}))

        assert error.code == ErrorCode.TYPE_NOT_FOUND

    def test_arity_mismatch_with_environment(self) -> None:
        int_node = {"Name": "int", "Assembly": "builtins"}
        text = json.dumps(
            {"Name": "Box", "Assembly": "jit_samples", "GenericArguments": [int_node, int_node]}
        )

        assert _decode_error(text).code == ErrorCode.GENERIC_MISMATCH

    def test_arguments_on_non_generic_type(self) -> None:
        text = json.dumps(
            {
                "Name": "Plain",
                "Assembly": "jit_samples",
                "GenericArguments": [{"Name": "int", "Assembly": "builtins"}],
            }
        )

        assert _decode_error(text).code == ErrorCode.GENERIC_MISMATCH

    def test_present_but_empty_generic_arguments(self) -> None:
        error = _decode_error('{"Name": "Box", "Assembly": "jit_samples", "GenericArguments": []}')

        assert isinstance(error, MalformedDescriptorError)
        assert error.code == ErrorCode.EMPTY_GENERIC_ARGUMENTS

    @pytest.mark.parametrize(
        "text",
        [
            "{not json",
            "null",
            "[]",
            '{"Name": 5, "Assembly": "builtins"}',
        ],
    )
    def test_invalid_json_is_malformed(self, text: str) -> None:
        assert isinstance(_decode_error(text), MalformedDescriptorError)

    @pytest.mark.parametrize(
        "node",
        [
            TypeNode(name="", assembly="builtins"),
            TypeNode(name="int", assembly="  "),
        ],
    )
    def test_blank_fields_are_malformed(self, node: TypeNode) -> None:
        with pytest.raises(MalformedDescriptorError, match="is required"):
            node_to_type(node)

    def test_bad_nested_argument_propagates(self) -> None:
        text = json.dumps(
            {
                "Name": "list",
                "Assembly": "builtins",
                "GenericArguments": [{"Name": "Nope", "Assembly": "builtins"}],
            }
        )

        assert _decode_error(text).code == ErrorCode.TYPE_NOT_FOUND
