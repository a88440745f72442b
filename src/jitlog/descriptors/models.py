"""Persisted, version-agnostic descriptors of types and methods.

Descriptors are immutable value trees with no back-references. ``TypeNode``
omits ``GenericArguments`` unless it describes a closed generic type;
``MethodNode`` always carries both of its type lists.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Descriptor(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class TypeNode(_Descriptor):
    """Type descriptor: qualified name, short code-unit name, closed arguments."""

    name: str = Field(default="", alias="Name")
    assembly: str = Field(default="", alias="Assembly")
    generic_arguments: tuple[TypeNode, ...] | None = Field(default=None, alias="GenericArguments")

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class MethodNode(_Descriptor):
    """Method descriptor, resolvable by name and signature alone."""

    declaring_type: TypeNode | None = Field(default=None, alias="DeclaringType")
    name: str = Field(default="", alias="Name")
    generic_arguments: tuple[TypeNode, ...] = Field(default=(), alias="GenericArguments")
    parameter_types: tuple[TypeNode, ...] = Field(default=(), alias="ParameterTypes")
    is_constructor: bool = Field(default=False, alias="IsConstructor")
    is_static: bool = Field(default=False, alias="IsStatic")

    @field_validator("generic_arguments", "parameter_types", mode="before")
    @classmethod
    def _null_as_empty(cls, v: Any) -> Any:
        return () if v is None else v

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
