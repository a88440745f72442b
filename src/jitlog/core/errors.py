"""jitlog error types with typed error codes.

Error code ranges:
- 1xxx: Log input (missing/unreadable files, malformed lines)
- 2xxx: Config
- 3xxx: Correlation gaps between the three logs
- 4xxx: Resolution (module/type/method reconstruction)
- 5xxx: Descriptor (unsupported or malformed descriptors)
- 6xxx: Descriptor target absent in this environment

Errors in 1xxx-4xxx are accumulated as diagnostics by a parse run and never
abort it. 5xxx and 6xxx are raised from the single decode call that hit them.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Log input (1xxx)
    LOG_FILE_NOT_FOUND = 1001
    LOG_READ_FAILED = 1002
    LOG_LINE_MALFORMED = 1003
    DIRECTORY_ENTRY_UNREADABLE = 1004
    APP_DIRECTORY_NOT_FOUND = 1005

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Correlation (3xxx)
    METADATA_NOT_FOUND = 3001

    # Resolution (4xxx)
    MODULE_NOT_FOUND = 4001
    CODE_UNIT_LOAD_FAILED = 4002
    TYPE_UNRESOLVED = 4003
    METHOD_UNRESOLVED = 4004
    MEMBER_NOT_ON_CLOSED_TYPE = 4005
    ARGUMENT_COUNT_MISMATCH = 4006
    GENERIC_CONSTRUCTION_FAILED = 4007
    NESTING_TOO_DEEP = 4008
    RESOLUTION_FAILED = 4009

    # Descriptor (5xxx)
    UNSUPPORTED_TYPE = 5001
    MALFORMED_DESCRIPTOR = 5002
    EMPTY_GENERIC_ARGUMENTS = 5003
    DESCRIPTOR_TOO_DEEP = 5004
    UNRESOLVABLE_ANNOTATION = 5005

    # Descriptor target not found (6xxx)
    CODE_UNIT_NOT_FOUND = 6001
    TYPE_NOT_FOUND = 6002
    METHOD_NOT_FOUND = 6003
    CONSTRUCTOR_NOT_FOUND = 6004
    GENERIC_MISMATCH = 6005


@dataclass(frozen=True, slots=True)
class JitLogError(Exception):
    """Base error with structured context for diagnostics and CLI output."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'METADATA_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


def _hex(value: int) -> str:
    return f"0x{value:X}"


class LogInputError(JitLogError):
    """Missing or unreadable log files and malformed log lines."""

    @classmethod
    def file_not_found(cls, description: str, path: str) -> "LogInputError":
        return cls(
            code=ErrorCode.LOG_FILE_NOT_FOUND,
            message=f"{description} file not found: {path}",
            details={"log": description, "path": path},
        )

    @classmethod
    def read_failed(cls, description: str, path: str, reason: str) -> "LogInputError":
        return cls(
            code=ErrorCode.LOG_READ_FAILED,
            message=f"Error reading {description} file {path}: {reason}",
            details={"log": description, "path": path, "reason": reason},
        )

    @classmethod
    def malformed_line(
        cls, description: str, line_number: int, reason: str, line: str
    ) -> "LogInputError":
        return cls(
            code=ErrorCode.LOG_LINE_MALFORMED,
            message=f"JSON parse error in {description} file at line {line_number}: "
            f"{reason} | Line: {line}",
            details={"log": description, "line_number": line_number, "reason": reason},
        )

    @classmethod
    def directory_entry_unreadable(cls, path: str, reason: str) -> "LogInputError":
        return cls(
            code=ErrorCode.DIRECTORY_ENTRY_UNREADABLE,
            message=f"{path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def app_directory_not_found(cls, path: str) -> "LogInputError":
        return cls(
            code=ErrorCode.APP_DIRECTORY_NOT_FOUND,
            message=f"Application directory not found: {path}",
            details={"path": path},
        )


class ConfigError(JitLogError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class CorrelationError(JitLogError):
    """A compiled function that cannot be joined to its metadata."""

    @classmethod
    def metadata_not_found(cls, function_id: int) -> "CorrelationError":
        return cls(
            code=ErrorCode.METADATA_NOT_FOUND,
            message=f"FunctionID {_hex(function_id)} from JIT log not found in metadata log",
            details={"function_id": function_id},
        )


class ResolutionError(JitLogError):
    """Failure to reconstruct one compiled method. Drops that item only."""

    @classmethod
    def module_not_found(cls, module_id: int, token: int) -> "ResolutionError":
        return cls(
            code=ErrorCode.MODULE_NOT_FOUND,
            message=f"Module {_hex(module_id)} not found for token {_hex(token)}",
            details={"module_id": module_id, "token": token},
        )

    @classmethod
    def code_unit_load_failed(cls, assembly_name: str, path: str) -> "ResolutionError":
        return cls(
            code=ErrorCode.CODE_UNIT_LOAD_FAILED,
            message=f"Failed to load code unit {assembly_name} (path: {path})",
            details={"assembly": assembly_name, "path": path},
        )

    @classmethod
    def type_unresolved(cls, token: int, module_path: str, reason: str) -> "ResolutionError":
        return cls(
            code=ErrorCode.TYPE_UNRESOLVED,
            message=f"Failed to resolve type {_hex(token)} in module {module_path}: {reason}",
            details={"token": token, "module": module_path, "reason": reason},
        )

    @classmethod
    def method_unresolved(cls, token: int, reason: str) -> "ResolutionError":
        return cls(
            code=ErrorCode.METHOD_UNRESOLVED,
            message=f"Failed to resolve method token {_hex(token)}: {reason}",
            details={"token": token, "reason": reason},
        )

    @classmethod
    def member_not_on_closed_type(cls, token: int, type_name: str) -> "ResolutionError":
        return cls(
            code=ErrorCode.MEMBER_NOT_ON_CLOSED_TYPE,
            message=f"Could not find member with token {_hex(token)} "
            f"on closed generic type {type_name}",
            details={"token": token, "type": type_name},
        )

    @classmethod
    def argument_count_mismatch(
        cls, target: str, expected: int, actual: int
    ) -> "ResolutionError":
        return cls(
            code=ErrorCode.ARGUMENT_COUNT_MISMATCH,
            message=f"Type argument count mismatch for {target}: expected {expected}, got {actual}",
            details={"target": target, "expected": expected, "actual": actual},
        )

    @classmethod
    def generic_construction_failed(cls, target: str, reason: str) -> "ResolutionError":
        return cls(
            code=ErrorCode.GENERIC_CONSTRUCTION_FAILED,
            message=f"Failed to construct generic {target}: {reason}",
            details={"target": target, "reason": reason},
        )

    @classmethod
    def nesting_too_deep(cls, module_id: int, token: int, limit: int) -> "ResolutionError":
        return cls(
            code=ErrorCode.NESTING_TOO_DEEP,
            message=f"Type argument {_hex(token)} in module {_hex(module_id)} "
            f"nests deeper than {limit} levels",
            details={"module_id": module_id, "token": token, "limit": limit},
        )

    @classmethod
    def item_failed(cls, function_id: int, token: int, reason: str) -> "ResolutionError":
        return cls(
            code=ErrorCode.RESOLUTION_FAILED,
            message=f"Failed to resolve method for FunctionID {_hex(function_id)} "
            f"(token {_hex(token)}): {reason}",
            details={"function_id": function_id, "token": token, "reason": reason},
        )


class DescriptorError(JitLogError):
    """A type or method that cannot be expressed as, or read from, a descriptor."""

    @classmethod
    def unsupported_type(cls, tp: Any) -> "DescriptorError":
        return cls(
            code=ErrorCode.UNSUPPORTED_TYPE,
            message=f"Type cannot be described symbolically: {tp!r}",
            details={"type": repr(tp)},
        )

    @classmethod
    def too_deep(cls, limit: int) -> "DescriptorError":
        return cls(
            code=ErrorCode.DESCRIPTOR_TOO_DEEP,
            message=f"Type nesting exceeds {limit} levels",
            details={"limit": limit},
        )

    @classmethod
    def unresolvable_annotation(cls, member: str, reason: str) -> "DescriptorError":
        return cls(
            code=ErrorCode.UNRESOLVABLE_ANNOTATION,
            message=f"Annotations of {member} cannot be evaluated: {reason}",
            details={"member": member, "reason": reason},
        )


class MalformedDescriptorError(DescriptorError):
    """Descriptor input that is not a coherent descriptor."""

    @classmethod
    def missing_field(cls, field: str) -> "MalformedDescriptorError":
        return cls(
            code=ErrorCode.MALFORMED_DESCRIPTOR,
            message=f"{field} is required.",
            details={"field": field},
        )

    @classmethod
    def invalid(cls, reason: str) -> "MalformedDescriptorError":
        return cls(
            code=ErrorCode.MALFORMED_DESCRIPTOR,
            message=f"Invalid descriptor: {reason}",
            details={"reason": reason},
        )

    @classmethod
    def empty_generic_arguments(cls, name: str) -> "MalformedDescriptorError":
        return cls(
            code=ErrorCode.EMPTY_GENERIC_ARGUMENTS,
            message=f"GenericArguments present but empty for '{name}'",
            details={"name": name},
        )


class TargetNotFoundError(DescriptorError):
    """Well-formed descriptor whose target is absent in this environment."""

    @classmethod
    def code_unit_not_found(cls, assembly: str, reason: str) -> "TargetNotFoundError":
        return cls(
            code=ErrorCode.CODE_UNIT_NOT_FOUND,
            message=f"Could not load code unit '{assembly}': {reason}",
            details={"assembly": assembly, "reason": reason},
        )

    @classmethod
    def type_not_found(cls, name: str, assembly: str) -> "TargetNotFoundError":
        return cls(
            code=ErrorCode.TYPE_NOT_FOUND,
            message=f"Could not load type '{name}' from code unit '{assembly}'.",
            details={"name": name, "assembly": assembly},
        )

    @classmethod
    def generic_mismatch(cls, name: str, reason: str) -> "TargetNotFoundError":
        return cls(
            code=ErrorCode.GENERIC_MISMATCH,
            message=f"Could not construct generic type '{name}': {reason}",
            details={"name": name, "reason": reason},
        )

    @classmethod
    def method_not_found(cls, name: str, type_name: str) -> "TargetNotFoundError":
        return cls(
            code=ErrorCode.METHOD_NOT_FOUND,
            message=f"Could not find method '{name}' on '{type_name}' with specified signature.",
            details={"name": name, "type": type_name},
        )

    @classmethod
    def constructor_not_found(cls, type_name: str) -> "TargetNotFoundError":
        return cls(
            code=ErrorCode.CONSTRUCTOR_NOT_FOUND,
            message=f"Could not find constructor on '{type_name}' with specified signature.",
            details={"type": type_name},
        )
