from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any, Dict, Type, TypeVar, Union

from .errors import TypeMismatch, UnknownEnumValue

E = TypeVar("E", bound=Enum)


class ComponentType(IntEnum):
    BYTE = 5120
    UNSIGNED_BYTE = 5121
    SHORT = 5122
    UNSIGNED_SHORT = 5123
    UNSIGNED_INT = 5125
    FLOAT = 5126


class AccessorType(str, Enum):
    SCALAR = "SCALAR"
    VEC2 = "VEC2"
    VEC3 = "VEC3"
    VEC4 = "VEC4"
    MAT2 = "MAT2"
    MAT3 = "MAT3"
    MAT4 = "MAT4"


class BufferViewTarget(IntEnum):
    ARRAY_BUFFER = 34962
    ELEMENT_ARRAY_BUFFER = 34963


class PrimitiveMode(IntEnum):
    POINTS = 0
    LINES = 1
    LINE_LOOP = 2
    LINE_STRIP = 3
    TRIANGLES = 4
    TRIANGLE_STRIP = 5
    TRIANGLE_FAN = 6


class AlphaMode(str, Enum):
    OPAQUE = "OPAQUE"
    MASK = "MASK"
    BLEND = "BLEND"


class CameraType(str, Enum):
    PERSPECTIVE = "perspective"
    ORTHOGRAPHIC = "orthographic"


class Interpolation(str, Enum):
    LINEAR = "LINEAR"
    STEP = "STEP"
    CUBICSPLINE = "CUBICSPLINE"


class TargetPath(str, Enum):
    TRANSLATION = "translation"
    ROTATION = "rotation"
    SCALE = "scale"
    WEIGHTS = "weights"


class MagFilter(IntEnum):
    NEAREST = 9728
    LINEAR = 9729


class MinFilter(IntEnum):
    NEAREST = 9728
    LINEAR = 9729
    NEAREST_MIPMAP_NEAREST = 9984
    LINEAR_MIPMAP_NEAREST = 9985
    NEAREST_MIPMAP_LINEAR = 9986
    LINEAR_MIPMAP_LINEAR = 9987


class WrapMode(IntEnum):
    CLAMP_TO_EDGE = 33071
    MIRRORED_REPEAT = 33648
    REPEAT = 10497


class MimeType(str, Enum):
    JPEG = "image/jpeg"
    PNG = "image/png"


# bytes per component
COMPONENT_SIZE: Dict[ComponentType, int] = {
    ComponentType.BYTE: 1,
    ComponentType.UNSIGNED_BYTE: 1,
    ComponentType.SHORT: 2,
    ComponentType.UNSIGNED_SHORT: 2,
    ComponentType.UNSIGNED_INT: 4,
    ComponentType.FLOAT: 4,
}

ACCESSOR_TYPE_COMPONENTS: Dict[AccessorType, int] = {
    AccessorType.SCALAR: 1,
    AccessorType.VEC2: 2,
    AccessorType.VEC3: 3,
    AccessorType.VEC4: 4,
    AccessorType.MAT2: 4,
    AccessorType.MAT3: 9,
    AccessorType.MAT4: 16,
}

UNSIGNED_INDEX_TYPES = (
    ComponentType.UNSIGNED_BYTE,
    ComponentType.UNSIGNED_SHORT,
    ComponentType.UNSIGNED_INT,
)


def from_wire(enum_cls: Type[E], value: Any, path: str) -> E:
    """Map a wire value onto a member of ``enum_cls``.

    Integer enums only accept JSON integers and string enums only accept
    strings; anything else of the right type but outside the table is an
    ``UnknownEnumValue``.
    """
    if issubclass(enum_cls, IntEnum):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeMismatch(path, "integer", value)
    elif not isinstance(value, str):
        raise TypeMismatch(path, "string", value)
    try:
        return enum_cls(value)
    except ValueError:
        raise UnknownEnumValue(path, enum_cls.__name__, value) from None


def to_wire(member: Enum) -> Union[int, str]:
    if isinstance(member, IntEnum):
        return int(member)
    return member.value
