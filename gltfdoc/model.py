"""
glTF 2.0 object kinds.

Each class is a plain dataclass plus a ``PROPERTIES`` table describing, per
wire property, whether it is required, optional, or optional with a default.
Objects refer to each other only through integer indices into the document's
top-level arrays.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Tuple, Union

from .enums import (
    AccessorType,
    AlphaMode,
    BufferViewTarget,
    CameraType,
    ComponentType,
    Interpolation,
    MagFilter,
    MimeType,
    MinFilter,
    PrimitiveMode,
    TargetPath,
    WrapMode,
)
from .errors import MissingRequiredField, TypeMismatch, join_path
from .fields import (
    ArrayOf,
    Boolean,
    EncodePolicy,
    EnumOf,
    Index,
    Integer,
    MapOf,
    Nested,
    Number,
    Presence,
    Prop,
    String,
    defaulted,
    extension_props,
    optional,
    required,
)
from .values import UNSET, JsonValue, Unset

logger = logging.getLogger(__name__)

Extensions = Optional[Dict[str, JsonValue]]
# None is an explicit JSON null; UNSET means the property is absent
Extras = Union[JsonValue, Unset]

IDENTITY_MATRIX = [
    1.0, 0.0, 0.0, 0.0,
    0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0,
    0.0, 0.0, 0.0, 1.0,
]


class GltfObject:
    """Shared decode / encode behavior driven by ``PROPERTIES``."""

    PROPERTIES: ClassVar[Tuple[Prop, ...]] = ()

    @classmethod
    def wire_names(cls) -> FrozenSet[str]:
        return frozenset(p.wire for p in cls.PROPERTIES)

    @classmethod
    def from_dict(cls, obj: Any, path: str = ""):
        if not isinstance(obj, dict):
            raise TypeMismatch(path, "object", obj)
        kwargs: Dict[str, Any] = {}
        for prop in cls.PROPERTIES:
            p = join_path(path, prop.wire)
            if prop.wire not in obj:
                if prop.presence is Presence.REQUIRED:
                    raise MissingRequiredField(p)
                kwargs[prop.attr] = prop.initial()
            else:
                kwargs[prop.attr] = prop.kind.decode(obj[prop.wire], p)
        known = cls.wire_names()
        unknown = [k for k in obj if k not in known]
        if unknown:
            logger.debug("%s: ignoring unknown properties %s", path or "<root>", ", ".join(unknown))
        return cls(**kwargs)

    def to_dict(self, policy: EncodePolicy = EncodePolicy.OMIT_DEFAULTS, path: str = "") -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for prop in self.PROPERTIES:
            value = getattr(self, prop.attr)
            p = join_path(path, prop.wire)
            if prop.presence is Presence.REQUIRED:
                if value is None:
                    raise MissingRequiredField(p)
            elif prop.presence is Presence.DEFAULTED:
                if value is None:
                    value = prop.default
                if policy is EncodePolicy.OMIT_DEFAULTS and value == prop.default:
                    continue
            elif prop.is_unset(value):
                continue
            result[prop.wire] = prop.kind.encode(value, p, policy)
        return result


@dataclass
class Asset(GltfObject):
    """Metadata about the glTF asset."""

    version: str
    copyright: Optional[str] = None
    generator: Optional[str] = None
    min_version: Optional[str] = None
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        optional("copyright", "copyright", String()),
        optional("generator", "generator", String()),
        required("version", "version", String()),
        optional("min_version", "minVersion", String()),
        *extension_props(),
    )


@dataclass
class Buffer(GltfObject):
    byte_length: int
    uri: Optional[str] = None
    name: Optional[str] = None
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        optional("uri", "uri", String()),
        required("byte_length", "byteLength", Integer()),
        optional("name", "name", String()),
        *extension_props(),
    )


@dataclass
class BufferView(GltfObject):
    """A contiguous slice of a buffer."""

    buffer: int
    byte_length: int
    byte_offset: int = 0
    byte_stride: Optional[int] = None
    target: Optional[BufferViewTarget] = None
    name: Optional[str] = None
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        required("buffer", "buffer", Index("buffers")),
        defaulted("byte_offset", "byteOffset", Integer(), 0),
        required("byte_length", "byteLength", Integer()),
        optional("byte_stride", "byteStride", Integer()),
        optional("target", "target", EnumOf(BufferViewTarget)),
        optional("name", "name", String()),
        *extension_props(),
    )


@dataclass
class AccessorSparseIndices(GltfObject):
    buffer_view: int
    component_type: ComponentType
    byte_offset: int = 0
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        required("buffer_view", "bufferView", Index("bufferViews")),
        defaulted("byte_offset", "byteOffset", Integer(), 0),
        required("component_type", "componentType", EnumOf(ComponentType)),
        *extension_props(),
    )


@dataclass
class AccessorSparseValues(GltfObject):
    buffer_view: int
    byte_offset: int = 0
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        required("buffer_view", "bufferView", Index("bufferViews")),
        defaulted("byte_offset", "byteOffset", Integer(), 0),
        *extension_props(),
    )


@dataclass
class AccessorSparse(GltfObject):
    """Sparse storage of accessor values that deviate from their initialization value."""

    count: int
    indices: AccessorSparseIndices
    values: AccessorSparseValues
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        required("count", "count", Integer()),
        required("indices", "indices", Nested(AccessorSparseIndices)),
        required("values", "values", Nested(AccessorSparseValues)),
        *extension_props(),
    )


@dataclass
class Accessor(GltfObject):
    """A typed view into a buffer view.

    ``max`` and ``min`` keep the wire numbers as floats; their length must
    match the component count of ``type`` (checked by the validator).
    """

    component_type: ComponentType
    count: int
    type: AccessorType
    buffer_view: Optional[int] = None
    byte_offset: int = 0
    normalized: bool = False
    max: Optional[List[float]] = None
    min: Optional[List[float]] = None
    sparse: Optional[AccessorSparse] = None
    name: Optional[str] = None
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        optional("buffer_view", "bufferView", Index("bufferViews")),
        defaulted("byte_offset", "byteOffset", Integer(), 0),
        required("component_type", "componentType", EnumOf(ComponentType)),
        defaulted("normalized", "normalized", Boolean(), False),
        required("count", "count", Integer()),
        required("type", "type", EnumOf(AccessorType)),
        optional("max", "max", ArrayOf(Number())),
        optional("min", "min", ArrayOf(Number())),
        optional("sparse", "sparse", Nested(AccessorSparse)),
        optional("name", "name", String()),
        *extension_props(),
    )


@dataclass
class Image(GltfObject):
    uri: Optional[str] = None
    mime_type: Optional[MimeType] = None
    buffer_view: Optional[int] = None
    name: Optional[str] = None
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        optional("uri", "uri", String()),
        optional("mime_type", "mimeType", EnumOf(MimeType)),
        optional("buffer_view", "bufferView", Index("bufferViews")),
        optional("name", "name", String()),
        *extension_props(),
    )


@dataclass
class Sampler(GltfObject):
    mag_filter: Optional[MagFilter] = None
    min_filter: Optional[MinFilter] = None
    wrap_s: WrapMode = WrapMode.REPEAT
    wrap_t: WrapMode = WrapMode.REPEAT
    name: Optional[str] = None
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        optional("mag_filter", "magFilter", EnumOf(MagFilter)),
        optional("min_filter", "minFilter", EnumOf(MinFilter)),
        defaulted("wrap_s", "wrapS", EnumOf(WrapMode), WrapMode.REPEAT),
        defaulted("wrap_t", "wrapT", EnumOf(WrapMode), WrapMode.REPEAT),
        optional("name", "name", String()),
        *extension_props(),
    )


@dataclass
class Texture(GltfObject):
    sampler: Optional[int] = None
    source: Optional[int] = None
    name: Optional[str] = None
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        optional("sampler", "sampler", Index("samplers")),
        optional("source", "source", Index("images")),
        optional("name", "name", String()),
        *extension_props(),
    )


@dataclass
class TextureInfo(GltfObject):
    index: int
    tex_coord: int = 0
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        required("index", "index", Index("textures")),
        defaulted("tex_coord", "texCoord", Integer(), 0),
        *extension_props(),
    )


@dataclass
class NormalTextureInfo(GltfObject):
    index: int
    tex_coord: int = 0
    scale: float = 1.0
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        required("index", "index", Index("textures")),
        defaulted("tex_coord", "texCoord", Integer(), 0),
        defaulted("scale", "scale", Number(), 1.0),
        *extension_props(),
    )


@dataclass
class OcclusionTextureInfo(GltfObject):
    index: int
    tex_coord: int = 0
    strength: float = 1.0
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        required("index", "index", Index("textures")),
        defaulted("tex_coord", "texCoord", Integer(), 0),
        defaulted("strength", "strength", Number(), 1.0),
        *extension_props(),
    )


@dataclass
class PbrMetallicRoughness(GltfObject):
    base_color_factor: List[float] = field(default_factory=lambda: [1.0, 1.0, 1.0, 1.0])
    base_color_texture: Optional[TextureInfo] = None
    metallic_factor: float = 1.0
    roughness_factor: float = 1.0
    metallic_roughness_texture: Optional[TextureInfo] = None
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        defaulted("base_color_factor", "baseColorFactor", ArrayOf(Number()), [1.0, 1.0, 1.0, 1.0]),
        optional("base_color_texture", "baseColorTexture", Nested(TextureInfo)),
        defaulted("metallic_factor", "metallicFactor", Number(), 1.0),
        defaulted("roughness_factor", "roughnessFactor", Number(), 1.0),
        optional("metallic_roughness_texture", "metallicRoughnessTexture", Nested(TextureInfo)),
        *extension_props(),
    )


@dataclass
class Material(GltfObject):
    name: Optional[str] = None
    pbr_metallic_roughness: Optional[PbrMetallicRoughness] = None
    normal_texture: Optional[NormalTextureInfo] = None
    occlusion_texture: Optional[OcclusionTextureInfo] = None
    emissive_texture: Optional[TextureInfo] = None
    emissive_factor: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    alpha_mode: AlphaMode = AlphaMode.OPAQUE
    alpha_cutoff: float = 0.5
    double_sided: bool = False
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        optional("name", "name", String()),
        optional("pbr_metallic_roughness", "pbrMetallicRoughness", Nested(PbrMetallicRoughness)),
        optional("normal_texture", "normalTexture", Nested(NormalTextureInfo)),
        optional("occlusion_texture", "occlusionTexture", Nested(OcclusionTextureInfo)),
        optional("emissive_texture", "emissiveTexture", Nested(TextureInfo)),
        defaulted("emissive_factor", "emissiveFactor", ArrayOf(Number()), [0.0, 0.0, 0.0]),
        defaulted("alpha_mode", "alphaMode", EnumOf(AlphaMode), AlphaMode.OPAQUE),
        defaulted("alpha_cutoff", "alphaCutoff", Number(), 0.5),
        defaulted("double_sided", "doubleSided", Boolean(), False),
        *extension_props(),
    )


@dataclass
class MeshPrimitive(GltfObject):
    """Geometry to be rendered with a given material.

    ``attributes`` and each entry of ``targets`` map attribute semantics
    (``POSITION``, ``NORMAL``, ``TEXCOORD_0`` ...) to accessor indices.
    """

    attributes: Dict[str, int]
    indices: Optional[int] = None
    material: Optional[int] = None
    mode: PrimitiveMode = PrimitiveMode.TRIANGLES
    targets: Optional[List[Dict[str, int]]] = None
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        required("attributes", "attributes", MapOf(Index("accessors"))),
        optional("indices", "indices", Index("accessors")),
        optional("material", "material", Index("materials")),
        defaulted("mode", "mode", EnumOf(PrimitiveMode), PrimitiveMode.TRIANGLES),
        optional("targets", "targets", ArrayOf(MapOf(Index("accessors")))),
        *extension_props(),
    )


@dataclass
class Mesh(GltfObject):
    primitives: List[MeshPrimitive]
    weights: Optional[List[float]] = None
    name: Optional[str] = None
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        required("primitives", "primitives", ArrayOf(Nested(MeshPrimitive))),
        optional("weights", "weights", ArrayOf(Number())),
        optional("name", "name", String()),
        *extension_props(),
    )


@dataclass
class Skin(GltfObject):
    joints: List[int]
    inverse_bind_matrices: Optional[int] = None
    skeleton: Optional[int] = None
    name: Optional[str] = None
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        optional("inverse_bind_matrices", "inverseBindMatrices", Index("accessors")),
        optional("skeleton", "skeleton", Index("nodes")),
        required("joints", "joints", ArrayOf(Index("nodes"))),
        optional("name", "name", String()),
        *extension_props(),
    )


@dataclass
class CameraOrthographic(GltfObject):
    xmag: float
    ymag: float
    zfar: float
    znear: float
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        required("xmag", "xmag", Number()),
        required("ymag", "ymag", Number()),
        required("zfar", "zfar", Number()),
        required("znear", "znear", Number()),
        *extension_props(),
    )


@dataclass
class CameraPerspective(GltfObject):
    yfov: float
    znear: float
    aspect_ratio: Optional[float] = None
    zfar: Optional[float] = None
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        optional("aspect_ratio", "aspectRatio", Number()),
        required("yfov", "yfov", Number()),
        optional("zfar", "zfar", Number()),
        required("znear", "znear", Number()),
        *extension_props(),
    )


@dataclass
class Camera(GltfObject):
    type: CameraType
    orthographic: Optional[CameraOrthographic] = None
    perspective: Optional[CameraPerspective] = None
    name: Optional[str] = None
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        optional("orthographic", "orthographic", Nested(CameraOrthographic)),
        optional("perspective", "perspective", Nested(CameraPerspective)),
        required("type", "type", EnumOf(CameraType)),
        optional("name", "name", String()),
        *extension_props(),
    )


@dataclass
class Node(GltfObject):
    """A node in the scene hierarchy.

    The local transform is either ``matrix`` (column-major) or the
    translation / rotation / scale triple, never both.
    """

    camera: Optional[int] = None
    children: Optional[List[int]] = None
    skin: Optional[int] = None
    matrix: List[float] = field(default_factory=lambda: list(IDENTITY_MATRIX))
    mesh: Optional[int] = None
    rotation: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0, 1.0])
    scale: List[float] = field(default_factory=lambda: [1.0, 1.0, 1.0])
    translation: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    weights: Optional[List[float]] = None
    name: Optional[str] = None
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        optional("camera", "camera", Index("cameras")),
        optional("children", "children", ArrayOf(Index("nodes"))),
        optional("skin", "skin", Index("skins")),
        defaulted("matrix", "matrix", ArrayOf(Number()), IDENTITY_MATRIX),
        optional("mesh", "mesh", Index("meshes")),
        defaulted("rotation", "rotation", ArrayOf(Number()), [0.0, 0.0, 0.0, 1.0]),
        defaulted("scale", "scale", ArrayOf(Number()), [1.0, 1.0, 1.0]),
        defaulted("translation", "translation", ArrayOf(Number()), [0.0, 0.0, 0.0]),
        optional("weights", "weights", ArrayOf(Number())),
        optional("name", "name", String()),
        *extension_props(),
    )


@dataclass
class AnimationChannelTarget(GltfObject):
    path: TargetPath
    node: Optional[int] = None
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        optional("node", "node", Index("nodes")),
        required("path", "path", EnumOf(TargetPath)),
        *extension_props(),
    )


@dataclass
class AnimationChannel(GltfObject):
    sampler: int
    target: AnimationChannelTarget
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        required("sampler", "sampler", Index("samplers", local=True)),
        required("target", "target", Nested(AnimationChannelTarget)),
        *extension_props(),
    )


@dataclass
class AnimationSampler(GltfObject):
    input: int
    output: int
    interpolation: Interpolation = Interpolation.LINEAR
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        required("input", "input", Index("accessors")),
        defaulted("interpolation", "interpolation", EnumOf(Interpolation), Interpolation.LINEAR),
        required("output", "output", Index("accessors")),
        *extension_props(),
    )


@dataclass
class Animation(GltfObject):
    channels: List[AnimationChannel]
    samplers: List[AnimationSampler]
    name: Optional[str] = None
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        required("channels", "channels", ArrayOf(Nested(AnimationChannel))),
        required("samplers", "samplers", ArrayOf(Nested(AnimationSampler))),
        optional("name", "name", String()),
        *extension_props(),
    )


@dataclass
class Scene(GltfObject):
    nodes: Optional[List[int]] = None
    name: Optional[str] = None
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        optional("nodes", "nodes", ArrayOf(Index("nodes"))),
        optional("name", "name", String()),
        *extension_props(),
    )
