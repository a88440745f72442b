"""Tests for generic reconstruction from metadata events."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from jit_samples import Box, Pair, Plain, Utils
from log_builders import LogSet

from jitlog.config.constants import GENERIC_DEPTH_DEFAULT
from jitlog.config.models import ResolutionConfig
from jitlog.core.errors import ErrorCode, ResolutionError
from jitlog.logs.models import MethodMetadataEvent, ModuleRecord
from jitlog.resolution.engine import ReconstructionEngine
from jitlog.resolution.modules import ResolutionSession
from jitlog.runtime import MethodHandle


@pytest.fixture
def logs() -> LogSet:
    return LogSet()


@pytest.fixture
def session(tmp_path: Path) -> Iterator[ResolutionSession]:
    with ResolutionSession(tmp_path) as s:
        yield s


def _resolve(
    logs: LogSet, session: ResolutionSession, *, max_depth: int = GENERIC_DEPTH_DEFAULT
) -> MethodHandle:
    """Resolve the most recently added metadata event."""
    modules = {row["ModuleID"]: ModuleRecord.model_validate(row) for row in logs.modules}
    engine = ReconstructionEngine(modules, session, max_depth=max_depth)
    return engine.resolve(MethodMetadataEvent.model_validate(logs.metadata[-1]))


def _fails(logs: LogSet, session: ResolutionSession, **kwargs: int) -> ResolutionError:
    with pytest.raises(ResolutionError) as exc_info:
        _resolve(logs, session, **kwargs)
    return exc_info.value


class TestNonGeneric:
    """Members of ordinary classes."""

    def test_instance_method(self, logs: LogSet, session: ResolutionSession) -> None:
        logs.method(Plain, "add")

        handle = _resolve(logs, session)

        assert handle.declaring_type is Plain
        assert handle.name == "add"
        assert handle.parameter_types == (int, int)

    def test_static_method(self, logs: LogSet, session: ResolutionSession) -> None:
        logs.method(Plain, "create")

        assert _resolve(logs, session).is_static

    def test_constructor(self, logs: LogSet, session: ResolutionSession) -> None:
        logs.method(Plain, "__init__")

        handle = _resolve(logs, session)

        assert handle.is_constructor
        assert not handle.is_static

    def test_nested_class_member(self, logs: LogSet, session: ResolutionSession) -> None:
        logs.method(Plain.Nested, "ping")

        assert _resolve(logs, session).declaring_type is Plain.Nested

    def test_arguments_on_non_generic_type_are_ignored(
        self, logs: LogSet, session: ResolutionSession
    ) -> None:
        logs.method(Plain, "add", type_args=(logs.type_arg(int),))

        assert _resolve(logs, session).declaring_type is Plain


class TestGenericTypes:
    """Closing declaring types over captured arguments."""

    def test_closes_declaring_type(self, logs: LogSet, session: ResolutionSession) -> None:
        # Given - Box[int].get
        logs.method(Box, "get", type_args=(logs.type_arg(int),))

        # When
        handle = _resolve(logs, session)

        # Then
        assert handle.declaring_type == Box[int]
        assert handle.name == "get"

    def test_nested_arguments_close_leaves_first(
        self, logs: LogSet, session: ResolutionSession
    ) -> None:
        # Given - Pair[str, Box[list[int]]].lookup
        box_of_list = logs.type_arg(Box, logs.type_arg(list, logs.type_arg(int)))
        logs.method(Pair, "lookup", type_args=(logs.type_arg(str), box_of_list))

        # When
        handle = _resolve(logs, session)

        # Then
        assert handle.declaring_type == Pair[str, Box[list[int]]]
        assert handle.parameter_types == (dict[str, list[Box[list[int]]]],)

    def test_constructor_of_closed_type(self, logs: LogSet, session: ResolutionSession) -> None:
        logs.method(Box, "__init__", type_args=(logs.type_arg(str),))

        handle = _resolve(logs, session)

        assert handle.is_constructor
        assert handle.declaring_type == Box[str]
        assert handle.parameter_types == (str,)

    def test_open_type_without_arguments_stays_open(
        self, logs: LogSet, session: ResolutionSession
    ) -> None:
        logs.method(Box, "put")

        handle = _resolve(logs, session)

        assert handle.declaring_type is Box

    def test_nested_list_on_non_generic_argument_is_ignored(
        self, logs: LogSet, session: ResolutionSession
    ) -> None:
        logs.method(Box, "get", type_args=(logs.type_arg(int, logs.type_arg(str)),))

        assert _resolve(logs, session).declaring_type == Box[int]


class TestGenericMethods:
    def test_closes_generic_method(self, logs: LogSet, session: ResolutionSession) -> None:
        logs.method(Utils, "pick", method_args=(logs.type_arg(int), logs.type_arg(str)))

        handle = _resolve(logs, session)

        assert handle.generic_arguments == (int, str)
        assert handle.parameter_types == (int, str)

    def test_closes_both_levels(self, logs: LogSet, session: ResolutionSession) -> None:
        # Given - Box[int].convert[bytes]
        logs.method(
            Box,
            "convert",
            type_args=(logs.type_arg(int),),
            method_args=(logs.type_arg(bytes),),
        )

        # When
        handle = _resolve(logs, session)

        # Then
        assert handle.declaring_type == Box[int]
        assert handle.generic_arguments == (bytes,)
        assert handle.parameter_types == (bytes,)

    def test_method_arguments_on_non_generic_method_are_ignored(
        self, logs: LogSet, session: ResolutionSession
    ) -> None:
        logs.method(Plain, "add", method_args=(logs.type_arg(int),))

        assert _resolve(logs, session).generic_arguments == ()


class TestFailures:
    """Each failure is a ResolutionError naming the token involved."""

    def test_unknown_module_id(self, logs: LogSet, session: ResolutionSession) -> None:
        logs.method(Plain, "add")
        logs.metadata[-1]["DeclaringTypeModuleID"] = 0xDEAD

        assert _fails(logs, session).code == ErrorCode.MODULE_NOT_FOUND

    def test_type_token_out_of_range(self, logs: LogSet, session: ResolutionSession) -> None:
        logs.method(Plain, "add")
        logs.metadata[-1]["DeclaringTypeToken"] = 0x02FFFFFF

        error = _fails(logs, session)

        assert error.code == ErrorCode.TYPE_UNRESOLVED
        assert error.details["token"] == 0x02FFFFFF

    def test_method_token_out_of_range(self, logs: LogSet, session: ResolutionSession) -> None:
        logs.method(Plain, "add")
        logs.metadata[-1]["MethodToken"] = 0x06FFFFFF

        assert _fails(logs, session).code == ErrorCode.METHOD_UNRESOLVED

    def test_member_missing_on_closed_type(
        self, logs: LogSet, session: ResolutionSession
    ) -> None:
        # Given - a token of Plain.add used with a closed Box
        logs.method(Plain, "add")
        plain_add = logs.metadata[-1]["MethodToken"]
        logs.method(Box, "get", type_args=(logs.type_arg(int),))
        logs.metadata[-1]["MethodToken"] = plain_add

        assert _fails(logs, session).code == ErrorCode.MEMBER_NOT_ON_CLOSED_TYPE

    def test_argument_count_mismatch(self, logs: LogSet, session: ResolutionSession) -> None:
        logs.method(Box, "get", type_args=(logs.type_arg(int),))
        logs.metadata[-1]["DeclaringTypeArgCount"] = 2

        error = _fails(logs, session)

        assert error.code == ErrorCode.ARGUMENT_COUNT_MISMATCH
        assert error.details["expected"] == 2
        assert error.details["actual"] == 1

    def test_nested_count_mismatch(self, logs: LogSet, session: ResolutionSession) -> None:
        inner = logs.type_arg(list, logs.type_arg(int))
        inner["NestedCount"] = 3
        logs.method(Box, "get", type_args=(inner,))

        assert _fails(logs, session).code == ErrorCode.ARGUMENT_COUNT_MISMATCH

    def test_arity_the_definition_cannot_take(
        self, logs: LogSet, session: ResolutionSession
    ) -> None:
        logs.method(Box, "get", type_args=(logs.type_arg(int), logs.type_arg(str)))

        assert _fails(logs, session).code == ErrorCode.GENERIC_CONSTRUCTION_FAILED

    def test_nesting_deeper_than_limit(self, logs: LogSet, session: ResolutionSession) -> None:
        # Given - Box[list[list[int]]]: int sits at depth 3
        deep = logs.type_arg(list, logs.type_arg(list, logs.type_arg(int)))
        logs.method(Box, "get", type_args=(deep,))

        # Then
        assert _fails(logs, session, max_depth=2).code == ErrorCode.NESTING_TOO_DEEP
        assert _resolve(logs, session, max_depth=3).declaring_type == Box[list[list[int]]]

    def test_default_limit_matches_configured_default(
        self, logs: LogSet, session: ResolutionSession
    ) -> None:
        # Given - int sits one level past the default limit
        deep = logs.type_arg(int)
        for _ in range(GENERIC_DEPTH_DEFAULT):
            deep = logs.type_arg(list, deep)
        logs.method(Box, "get", type_args=(deep,))
        modules = {row["ModuleID"]: ModuleRecord.model_validate(row) for row in logs.modules}
        event = MethodMetadataEvent.model_validate(logs.metadata[-1])

        # When
        engine = ReconstructionEngine(modules, session)

        # Then
        assert ResolutionConfig().max_generic_depth == GENERIC_DEPTH_DEFAULT
        with pytest.raises(ResolutionError) as exc_info:
            engine.resolve(event)
        assert exc_info.value.code == ErrorCode.NESTING_TOO_DEEP

    def test_unexpected_exception_becomes_item_failure(
        self, logs: LogSet, session: ResolutionSession, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        logs.method(Plain, "add")

        def boom(module: object) -> None:
            raise RuntimeError("table exploded")

        monkeypatch.setattr(session, "metadata", boom)

        error = _fails(logs, session)

        assert error.code == ErrorCode.RESOLUTION_FAILED
        assert "RuntimeError: table exploded" in error.message
