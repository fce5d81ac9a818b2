"""
gltfdoc
-------

A typed in-memory model of glTF 2.0 JSON documents, a lossless codec between
that model and its wire form, and a validator for cross-object invariants.

    >>> from gltfdoc import loads, validate
    >>> doc = loads(b'{"asset": {"version": "2.0"}}')
    >>> validate(doc)
    []
"""
from .codec import CodecOptions, decode, dumps, encode, loads, parse, serialize
from .document import Document
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
from .errors import (
    ErrorKind,
    FieldError,
    GltfError,
    GltfSyntaxError,
    IndexOutOfRange,
    InvalidIndex,
    MissingRequiredField,
    TypeMismatch,
    UnknownEnumValue,
)
from .fields import EncodePolicy
from .model import (
    Accessor,
    AccessorSparse,
    AccessorSparseIndices,
    AccessorSparseValues,
    Animation,
    AnimationChannel,
    AnimationChannelTarget,
    AnimationSampler,
    Asset,
    Buffer,
    BufferView,
    Camera,
    CameraOrthographic,
    CameraPerspective,
    Image,
    Material,
    Mesh,
    MeshPrimitive,
    Node,
    NormalTextureInfo,
    OcclusionTextureInfo,
    PbrMetallicRoughness,
    Sampler,
    Scene,
    Skin,
    Texture,
    TextureInfo,
)
from .validator import Finding, FindingKind, Severity, has_errors, validate

__version__ = "0.1.0"
