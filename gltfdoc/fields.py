"""
Field descriptor tables.

Each object kind lists its properties as ``Prop`` entries: the Python
attribute, the wire name, a value kind, and whether the property is required,
optional, or optional with a default. Decode and encode are driven entirely by
these tables; nothing is inferred from the data.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, Optional, Tuple, Type

from . import enums
from .errors import FieldError, InvalidIndex, TypeMismatch, item_path, join_path
from .values import UNSET, check_json_value, copy_json_value

# (field path, target collection, index, local)
Reference = Tuple[str, str, int, bool]


class EncodePolicy(Enum):
    OMIT_DEFAULTS = "omit-defaults"
    ALWAYS_EMIT = "always-emit"


class Presence(Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"
    DEFAULTED = "defaulted"


class Kind:
    def decode(self, value: Any, path: str) -> Any:
        raise NotImplementedError

    def encode(self, value: Any, path: str, policy: EncodePolicy) -> Any:
        raise NotImplementedError

    def references(self, value: Any, path: str) -> Iterator[Reference]:
        return iter(())

    def normalize(self, value: Any) -> Any:
        return value


class Integer(Kind):
    def decode(self, value, path):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeMismatch(path, "integer", value)
        return value

    def encode(self, value, path, policy):
        return self.decode(value, path)


class Number(Kind):
    def decode(self, value, path):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeMismatch(path, "number", value)
        try:
            value = float(value)
        except OverflowError:
            raise TypeMismatch(path, "finite number", value) from None
        if not math.isfinite(value):
            raise TypeMismatch(path, "finite number", value)
        return value

    def encode(self, value, path, policy):
        return self.decode(value, path)


class String(Kind):
    def decode(self, value, path):
        if not isinstance(value, str):
            raise TypeMismatch(path, "string", value)
        return value

    def encode(self, value, path, policy):
        return self.decode(value, path)


class Boolean(Kind):
    def decode(self, value, path):
        if not isinstance(value, bool):
            raise TypeMismatch(path, "boolean", value)
        return value

    def encode(self, value, path, policy):
        return self.decode(value, path)


class Index(Kind):
    """Integer reference into ``target``.

    ``local`` marks references into an array owned by the enclosing object
    (animation channel -> animation sampler) rather than a document array.
    """

    def __init__(self, target: str, local: bool = False):
        self.target = target
        self.local = local

    def decode(self, value, path):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeMismatch(path, "integer index", value)
        if value < 0:
            raise InvalidIndex(path, value)
        return value

    def encode(self, value, path, policy):
        return self.decode(value, path)

    def references(self, value, path):
        yield (path, self.target, value, self.local)


class EnumOf(Kind):
    def __init__(self, enum_cls: Type[Enum]):
        self.enum_cls = enum_cls

    def decode(self, value, path):
        return enums.from_wire(self.enum_cls, value, path)

    def encode(self, value, path, policy):
        if not isinstance(value, self.enum_cls):
            value = enums.from_wire(self.enum_cls, value, path)
        return enums.to_wire(value)

    def normalize(self, value):
        if isinstance(value, self.enum_cls):
            return value
        try:
            return enums.from_wire(self.enum_cls, value, "")
        except FieldError:
            return value


class ArrayOf(Kind):
    def __init__(self, item: Kind):
        self.item = item

    def decode(self, value, path):
        if not isinstance(value, list):
            raise TypeMismatch(path, "array", value)
        return [self.item.decode(v, item_path(path, i)) for i, v in enumerate(value)]

    def encode(self, value, path, policy):
        if not isinstance(value, (list, tuple)):
            raise TypeMismatch(path, "array", value)
        return [self.item.encode(v, item_path(path, i), policy) for i, v in enumerate(value)]

    def references(self, value, path):
        for i, v in enumerate(value):
            yield from self.item.references(v, item_path(path, i))

    def normalize(self, value):
        if not isinstance(value, (list, tuple)):
            return value
        return [self.item.normalize(v) for v in value]


class MapOf(Kind):
    def __init__(self, item: Kind):
        self.item = item

    def decode(self, value, path):
        if not isinstance(value, dict):
            raise TypeMismatch(path, "object", value)
        return {k: self.item.decode(v, join_path(path, k)) for k, v in value.items()}

    def encode(self, value, path, policy):
        if not isinstance(value, dict):
            raise TypeMismatch(path, "object", value)
        out = {}
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeMismatch(path, "object with string keys", value)
            out[k] = self.item.encode(v, join_path(path, k), policy)
        return out

    def references(self, value, path):
        for k, v in value.items():
            yield from self.item.references(v, join_path(path, k))

    def normalize(self, value):
        if not isinstance(value, dict):
            return value
        return {k: self.item.normalize(v) for k, v in value.items()}


class Nested(Kind):
    def __init__(self, cls: type):
        self.cls = cls

    def decode(self, value, path):
        return self.cls.from_dict(value, path)

    def encode(self, value, path, policy):
        if not isinstance(value, self.cls):
            raise TypeMismatch(path, self.cls.__name__, value)
        return value.to_dict(policy, path)

    def references(self, value, path):
        return iter_references(value, path)

    def normalize(self, value):
        return normalized(value) if isinstance(value, self.cls) else value


class Json(Kind):
    """Opaque structured value, kept exactly as given."""

    def decode(self, value, path):
        check_json_value(value, path)
        return copy_json_value(value)

    def encode(self, value, path, policy):
        check_json_value(value, path)
        return copy_json_value(value)


@dataclass(frozen=True)
class Prop:
    attr: str
    wire: str
    kind: Kind
    presence: Presence
    default: Any = None
    # optional collections decode to an empty container and are omitted when empty
    empty: Optional[Callable[[], Any]] = None
    # value held by an optional property missing from the wire
    absent: Any = None

    def initial(self) -> Any:
        if self.presence is Presence.DEFAULTED:
            return copy_json_value(self.default)
        if self.empty is not None:
            return self.empty()
        return self.absent

    def is_unset(self, value: Any) -> bool:
        if value is self.absent:
            return True
        if self.empty is not None:
            return value is None or len(value) == 0
        return False


def required(attr: str, wire: str, kind: Kind) -> Prop:
    return Prop(attr, wire, kind, Presence.REQUIRED)


def optional(
    attr: str, wire: str, kind: Kind, empty: Optional[Callable[[], Any]] = None, absent: Any = None
) -> Prop:
    return Prop(attr, wire, kind, Presence.OPTIONAL, empty=empty, absent=absent)


def defaulted(attr: str, wire: str, kind: Kind, default: Any) -> Prop:
    return Prop(attr, wire, kind, Presence.DEFAULTED, default=default)


def extension_props() -> Tuple[Prop, Prop]:
    return (
        optional("extensions", "extensions", MapOf(Json())),
        optional("extras", "extras", Json(), absent=UNSET),
    )


def iter_references(obj: Any, path: str = "") -> Iterator[Reference]:
    """Yield every index stored anywhere beneath ``obj``."""
    for prop in type(obj).PROPERTIES:
        value = getattr(obj, prop.attr)
        if value is None or value is UNSET:
            continue
        yield from prop.kind.references(value, join_path(path, prop.wire))


def normalized(obj: Any) -> Any:
    """Return a copy of ``obj`` in the form decode produces.

    Defaulted properties left as ``None`` take their default, absent optional
    collections become empty, and raw wire values in enum-typed properties are
    mapped to their members. Values that cannot be mapped are kept as given.
    """
    kwargs = {}
    for prop in type(obj).PROPERTIES:
        value = getattr(obj, prop.attr)
        if value is None and (prop.presence is Presence.DEFAULTED or prop.empty is not None):
            value = prop.initial()
        elif value is not None:
            value = prop.kind.normalize(value)
        kwargs[prop.attr] = value
    return type(obj)(**kwargs)
