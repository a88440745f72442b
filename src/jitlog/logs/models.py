"""Wire records of the three instrumentation logs.

Each log is newline-delimited JSON, one record per line. Field names are the
agent's PascalCase names; Python attributes are snake_case aliases of them.
Identifiers are process-local and not stable across runs.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jitlog.config.constants import UINT32_MAX, UINT64_MAX


class _WireRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class CompiledMethodEvent(_WireRecord):
    """A function was JIT-compiled."""

    function_id: int = Field(alias="FunctionID", ge=0, le=UINT64_MAX)


class ModuleRecord(_WireRecord):
    """A module observed by the agent and the code unit it belongs to."""

    module_id: int = Field(alias="ModuleID", ge=0, le=UINT64_MAX)
    module_path: str = Field(alias="ModuleName")
    assembly_id: int = Field(alias="AssemblyID", ge=0, le=UINT64_MAX)
    assembly_name: str = Field(alias="AssemblyName")


class TypeArgumentNode(_WireRecord):
    """A captured type argument, possibly closed over its own nested arguments."""

    module_id: int = Field(alias="ModuleID", ge=0, le=UINT64_MAX)
    type_token: int = Field(alias="TypeDef", ge=0, le=UINT32_MAX)
    nested_count: int = Field(default=0, alias="NestedCount", ge=0)
    nested: tuple[TypeArgumentNode, ...] = Field(default=(), alias="Nested")

    @field_validator("nested", mode="before")
    @classmethod
    def _null_as_empty(cls, v: Any) -> Any:
        return () if v is None else v


class MethodMetadataEvent(_WireRecord):
    """Structural information needed to resolve one compiled function."""

    function_id: int = Field(alias="FunctionID", ge=0, le=UINT64_MAX)
    module_id: int = Field(alias="ModuleID", ge=0, le=UINT64_MAX)
    method_token: int = Field(alias="MethodToken", ge=0, le=UINT32_MAX)
    declaring_type_module_id: int = Field(alias="DeclaringTypeModuleID", ge=0, le=UINT64_MAX)
    declaring_type_token: int = Field(alias="DeclaringTypeToken", ge=0, le=UINT32_MAX)
    declaring_type_arg_count: int = Field(default=0, alias="DeclaringTypeArgCount", ge=0)
    declaring_type_args: tuple[TypeArgumentNode, ...] = Field(
        default=(), alias="DeclaringTypeArgs"
    )
    method_type_arg_count: int = Field(default=0, alias="MethodTypeArgCount", ge=0)
    method_type_args: tuple[TypeArgumentNode, ...] = Field(default=(), alias="MethodTypeArgs")

    @field_validator("declaring_type_args", "method_type_args", mode="before")
    @classmethod
    def _null_as_empty(cls, v: Any) -> Any:
        return () if v is None else v

    @property
    def has_declaring_type_args(self) -> bool:
        return self.declaring_type_arg_count > 0 or bool(self.declaring_type_args)

    @property
    def has_method_type_args(self) -> bool:
        return self.method_type_arg_count > 0 or bool(self.method_type_args)
