"""
Structured values: schema-less JSON content held in ``extensions`` and ``extras``.

Python's own JSON types already form the tagged union we need (None, bool,
int, float, str, list, dict with str keys), so values are kept as parsed and
only checked when they are supplied programmatically.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Any, Dict, List, Union

from .errors import TypeMismatch, item_path, join_path

JsonValue = Union[None, bool, int, float, str, List["JsonValue"], Dict[str, "JsonValue"]]


class Unset(Enum):
    """Marks a structured value slot that is absent from the wire.

    ``None`` in an ``extras`` slot is an explicit JSON null and is written back
    out; ``UNSET`` is not written at all.
    """

    UNSET = "UNSET"

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET = Unset.UNSET


def check_json_value(value: Any, path: str) -> None:
    if value is None or isinstance(value, (bool, int, str)):
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise TypeMismatch(path, "finite number", value)
        return
    if isinstance(value, list):
        for i, v in enumerate(value):
            check_json_value(v, item_path(path, i))
        return
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeMismatch(path, "object with string keys", value)
            check_json_value(v, join_path(path, k))
        return
    raise TypeMismatch(path, "JSON value", value)


def copy_json_value(value: JsonValue) -> JsonValue:
    if isinstance(value, list):
        return [copy_json_value(v) for v in value]
    if isinstance(value, dict):
        return {k: copy_json_value(v) for k, v in value.items()}
    return value
