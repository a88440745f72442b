"""Generic reconstruction of compiled methods from metadata events.

Resolution Algorithm:
1. Load the declaring type's code unit and resolve its TypeDef token.
2. If it is an open generic definition and the event carries arguments,
   resolve every type-argument node depth-first (leaves first) and close it.
3. Resolve the MethodDef token. For a closed declaring type, the closed
   type's methods, then constructors, are matched by the same token value.
4. If the method is an open generic definition and the event carries method
   type arguments, resolve them as in step 2 and close it.

Every failure surfaces as a ResolutionError tied to the token involved.

Usage::

    engine = ReconstructionEngine(logs.modules, session)
    handle = engine.resolve(event)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import structlog

from jitlog.config.constants import GENERIC_DEPTH_DEFAULT
from jitlog.core.errors import ResolutionError
from jitlog.logs.models import MethodMetadataEvent, ModuleRecord, TypeArgumentNode
from jitlog.resolution.modules import ResolutionSession
from jitlog.runtime import (
    MethodHandle,
    find_member_by_token,
    is_closed_generic,
    is_generic_definition,
    make_generic_method,
    make_generic_type,
    resolve_method,
    type_display_name,
)

log = structlog.get_logger(__name__)


class ReconstructionEngine:
    """Turns MethodMetadataEvents into MethodHandles within one session."""

    def __init__(
        self,
        modules: Mapping[int, ModuleRecord],
        session: ResolutionSession,
        *,
        max_depth: int = GENERIC_DEPTH_DEFAULT,
    ) -> None:
        self._modules = modules
        self._session = session
        self._max_depth = max_depth

    def resolve(self, event: MethodMetadataEvent) -> MethodHandle:
        """Reconstruct one compiled method.

        Raises:
            ResolutionError: On any failure; siblings are unaffected.
        """
        try:
            return self._resolve(event)
        except ResolutionError:
            raise
        except Exception as e:
            raise ResolutionError.item_failed(
                event.function_id, event.method_token, f"{type(e).__name__}: {e}"
            ) from e

    def _resolve(self, event: MethodMetadataEvent) -> MethodHandle:
        declaring = self._resolve_token(event.declaring_type_module_id, event.declaring_type_token)

        if event.has_declaring_type_args and is_generic_definition(declaring):
            arguments = self._resolve_arguments(event.declaring_type_args, depth=1)
            declaring = self._close_type(declaring, arguments, event.declaring_type_arg_count)

        handle = self._resolve_member(declaring, event)

        if event.has_method_type_args and handle.is_generic_definition:
            arguments = self._resolve_arguments(event.method_type_args, depth=1)
            handle = self._close_method(handle, arguments, event.method_type_arg_count)

        log.debug("resolution.resolved", function_id=event.function_id, method=str(handle))
        return handle

    def _record(self, module_id: int, token: int) -> ModuleRecord:
        record = self._modules.get(module_id)
        if record is None:
            raise ResolutionError.module_not_found(module_id, token)
        return record

    def _resolve_token(self, module_id: int, token: int) -> Any:
        record = self._record(module_id, token)
        code_unit = self._session.load(record)
        try:
            return self._session.metadata(code_unit).resolve_type(token)
        except LookupError as e:
            raise ResolutionError.type_unresolved(token, record.module_path, str(e)) from e

    def _resolve_member(self, declaring: Any, event: MethodMetadataEvent) -> MethodHandle:
        token = event.method_token
        if is_closed_generic(declaring):
            handle = find_member_by_token(declaring, token)
            if handle is None:
                raise ResolutionError.member_not_on_closed_type(token, repr(declaring))
            return handle

        code_unit = self._session.load(self._record(event.declaring_type_module_id, token))
        try:
            return resolve_method(self._session.metadata(code_unit), token)
        except LookupError as e:
            raise ResolutionError.method_unresolved(token, str(e)) from e

    def resolve_type_argument(self, node: TypeArgumentNode, depth: int = 1) -> Any:
        """Concrete type for one node, closing it over its nested nodes first."""
        if depth > self._max_depth:
            raise ResolutionError.nesting_too_deep(node.module_id, node.type_token, self._max_depth)

        tp = self._resolve_token(node.module_id, node.type_token)
        if node.nested and is_generic_definition(tp):
            nested = self._resolve_arguments(node.nested, depth=depth + 1)
            tp = self._close_type(tp, nested, node.nested_count)
        elif node.nested:
            log.debug(
                "resolution.nested_ignored",
                type=type_display_name(tp),
                nested=len(node.nested),
            )
        return tp

    def _resolve_arguments(self, nodes: Sequence[TypeArgumentNode], *, depth: int) -> list[Any]:
        return [self.resolve_type_argument(node, depth) for node in nodes]

    def _close_type(self, definition: Any, arguments: list[Any], expected: int) -> Any:
        target = type_display_name(definition)
        if len(arguments) != expected:
            raise ResolutionError.argument_count_mismatch(target, expected, len(arguments))
        try:
            return make_generic_type(definition, arguments)
        except TypeError as e:
            raise ResolutionError.generic_construction_failed(f"type {target}", str(e)) from e

    def _close_method(
        self, handle: MethodHandle, arguments: list[Any], expected: int
    ) -> MethodHandle:
        if len(arguments) != expected:
            raise ResolutionError.argument_count_mismatch(str(handle), expected, len(arguments))
        try:
            return make_generic_method(handle, arguments)
        except TypeError as e:
            raise ResolutionError.generic_construction_failed(f"method {handle}", str(e)) from e
