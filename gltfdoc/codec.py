"""
Conversion between ``Document`` and glTF JSON text.

Decoding is a single pass: bytes -> JSON value tree -> Document. The first
structural error aborts with a ``FieldError`` naming the failing field path.
Encoding mirrors it; whether defaulted properties equal to their default are
written is controlled by ``CodecOptions.policy``.
"""
from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Optional, Union

from .document import COLLECTIONS, Document
from .errors import GltfSyntaxError, TypeMismatch
from .fields import EncodePolicy
from .values import JsonValue

logger = logging.getLogger(__name__)

__all__ = [
    "CodecOptions",
    "EncodePolicy",
    "decode",
    "dumps",
    "encode",
    "loads",
    "parse",
    "serialize",
]


@dataclass(frozen=True)
class CodecOptions:
    policy: EncodePolicy = EncodePolicy.OMIT_DEFAULTS
    indent: Optional[int] = None
    ensure_ascii: bool = False


DEFAULT_OPTIONS = CodecOptions()


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name} is not valid JSON")


def _parse_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number {text} is out of range")
    return value


def parse(data: Union[bytes, bytearray, memoryview, str]) -> JsonValue:
    """Parse glTF JSON text into plain Python values, keeping key order."""
    if isinstance(data, (bytes, bytearray, memoryview)):
        try:
            text = bytes(data).decode("utf-8")
        except UnicodeDecodeError as e:
            raise GltfSyntaxError(f"input is not valid UTF-8: {e.reason} at byte {e.start}") from e
    else:
        text = data
    try:
        return json.loads(text, parse_float=_parse_float, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise GltfSyntaxError(e.msg, e.lineno, e.colno) from e
    except ValueError as e:
        raise GltfSyntaxError(str(e)) from e


def serialize(value: JsonValue, options: CodecOptions = DEFAULT_OPTIONS) -> bytes:
    separators = (",", ":") if options.indent is None else (",", ": ")
    text = json.dumps(
        value,
        indent=options.indent,
        separators=separators,
        ensure_ascii=options.ensure_ascii,
        allow_nan=False,
    )
    return text.encode("utf-8")


def decode(value: JsonValue) -> Document:
    if not isinstance(value, dict):
        raise TypeMismatch("", "object", value)
    document = Document.from_dict(value)
    logger.debug(
        "decoded glTF %s: %s",
        document.asset.version,
        ", ".join(f"{name}={len(document.collection(name))}" for name in COLLECTIONS),
    )
    return document


def encode(document: Document, options: CodecOptions = DEFAULT_OPTIONS) -> JsonValue:
    if not isinstance(document, Document):
        raise TypeMismatch("", "Document", document)
    return document.to_dict(options.policy)


def loads(data: Union[bytes, bytearray, memoryview, str]) -> Document:
    return decode(parse(data))


def dumps(document: Document, options: Optional[CodecOptions] = None) -> bytes:
    options = options or DEFAULT_OPTIONS
    return serialize(encode(document, options), options)
