"""
Error types raised while decoding, encoding or dereferencing a glTF document.

Every decode failure carries the dotted field path of the offending value,
e.g. ``meshes[2].primitives[0].attributes.POSITION``.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    SYNTAX_ERROR = "SyntaxError"
    MISSING_REQUIRED_FIELD = "MissingRequiredField"
    TYPE_MISMATCH = "TypeMismatch"
    UNKNOWN_ENUM_VALUE = "UnknownEnumValue"
    INVALID_INDEX = "InvalidIndex"


def join_path(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def item_path(path: str, i: int) -> str:
    return f"{path}[{i}]"


def describe(value: Any) -> str:
    """Short JSON-ish type name used in error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


class GltfError(Exception):
    """Base class for everything this package raises."""


class GltfSyntaxError(GltfError):
    kind = ErrorKind.SYNTAX_ERROR

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        where = f" (line {line}, column {column})" if line is not None else ""
        super().__init__(f"{message}{where}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fieldPath": "",
            "kind": self.kind.value,
            "message": str(self),
        }


class FieldError(GltfError):
    """A structural problem with one field of the document."""

    kind: ErrorKind

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path or '<root>'}: {message}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fieldPath": self.path,
            "kind": self.kind.value,
            "message": self.message,
        }


class MissingRequiredField(FieldError):
    kind = ErrorKind.MISSING_REQUIRED_FIELD

    def __init__(self, path: str):
        super().__init__(path, "required property is missing")


class TypeMismatch(FieldError):
    kind = ErrorKind.TYPE_MISMATCH

    def __init__(self, path: str, expected: str, value: Any):
        self.expected = expected
        self.value = value
        super().__init__(path, f"expected {expected}, got {describe(value)}")


class UnknownEnumValue(FieldError):
    kind = ErrorKind.UNKNOWN_ENUM_VALUE

    def __init__(self, path: str, enum_name: str, value: Any):
        self.enum_name = enum_name
        self.value = value
        super().__init__(path, f"{value!r} is not a valid {enum_name}")


class InvalidIndex(FieldError):
    kind = ErrorKind.INVALID_INDEX

    def __init__(self, path: str, value: int):
        self.value = value
        super().__init__(path, f"index must be non-negative, got {value}")


class IndexOutOfRange(GltfError, IndexError):
    """Raised by Document lookups; independent of the decode error family."""

    def __init__(self, collection: str, index: int, length: int):
        self.collection = collection
        self.index = index
        self.length = length
        super().__init__(f"{collection}[{index}] is out of range (length {length})")
