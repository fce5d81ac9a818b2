"""
The document aggregate: the root ``glTF`` object.

The document owns every object in flat arrays; all cross references are
indices into these arrays and are resolved through ``Document.get``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import IndexOutOfRange
from .fields import ArrayOf, Index, Nested, Prop, String, extension_props, optional, required
from .model import (
    Accessor,
    Animation,
    Asset,
    Buffer,
    BufferView,
    Camera,
    Extensions,
    Extras,
    GltfObject,
    Image,
    Material,
    Mesh,
    Node,
    Sampler,
    Scene,
    Skin,
    Texture,
)
from .values import UNSET

# wire name -> object kind, in glTF schema order
COLLECTIONS: Dict[str, type] = {
    "accessors": Accessor,
    "animations": Animation,
    "buffers": Buffer,
    "bufferViews": BufferView,
    "cameras": Camera,
    "images": Image,
    "materials": Material,
    "meshes": Mesh,
    "nodes": Node,
    "samplers": Sampler,
    "scenes": Scene,
    "skins": Skin,
    "textures": Texture,
}

_ATTRS = {
    "accessors": "accessors",
    "animations": "animations",
    "buffers": "buffers",
    "bufferViews": "buffer_views",
    "cameras": "cameras",
    "images": "images",
    "materials": "materials",
    "meshes": "meshes",
    "nodes": "nodes",
    "samplers": "samplers",
    "scenes": "scenes",
    "skins": "skins",
    "textures": "textures",
}


def _collection(wire: str) -> Prop:
    return optional(_ATTRS[wire], wire, ArrayOf(Nested(COLLECTIONS[wire])), empty=list)


@dataclass
class Document(GltfObject):
    """The root object of a glTF asset.

    Absent top-level arrays decode to empty lists and empty lists are not
    written back out.
    """

    asset: Asset
    extensions_used: List[str] = field(default_factory=list)
    extensions_required: List[str] = field(default_factory=list)
    accessors: List[Accessor] = field(default_factory=list)
    animations: List[Animation] = field(default_factory=list)
    buffers: List[Buffer] = field(default_factory=list)
    buffer_views: List[BufferView] = field(default_factory=list)
    cameras: List[Camera] = field(default_factory=list)
    images: List[Image] = field(default_factory=list)
    materials: List[Material] = field(default_factory=list)
    meshes: List[Mesh] = field(default_factory=list)
    nodes: List[Node] = field(default_factory=list)
    samplers: List[Sampler] = field(default_factory=list)
    scene: Optional[int] = None
    scenes: List[Scene] = field(default_factory=list)
    skins: List[Skin] = field(default_factory=list)
    textures: List[Texture] = field(default_factory=list)
    extensions: Extensions = None
    extras: Extras = UNSET

    PROPERTIES = (
        optional("extensions_used", "extensionsUsed", ArrayOf(String()), empty=list),
        optional("extensions_required", "extensionsRequired", ArrayOf(String()), empty=list),
        _collection("accessors"),
        _collection("animations"),
        required("asset", "asset", Nested(Asset)),
        _collection("buffers"),
        _collection("bufferViews"),
        _collection("cameras"),
        _collection("images"),
        _collection("materials"),
        _collection("meshes"),
        _collection("nodes"),
        _collection("samplers"),
        optional("scene", "scene", Index("scenes")),
        _collection("scenes"),
        _collection("skins"),
        _collection("textures"),
        *extension_props(),
    )

    def collection(self, name: str) -> List[Any]:
        """Return the top-level array with wire name ``name`` (e.g. ``"bufferViews"``)."""
        try:
            attr = _ATTRS[name]
        except KeyError:
            raise KeyError(f"unknown collection {name!r}") from None
        return getattr(self, attr)

    def get(self, name: str, index: int) -> Any:
        items = self.collection(name)
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(items):
            raise IndexOutOfRange(name, index, len(items))
        return items[index]

    def accessor(self, index: int) -> Accessor:
        return self.get("accessors", index)

    def animation(self, index: int) -> Animation:
        return self.get("animations", index)

    def buffer(self, index: int) -> Buffer:
        return self.get("buffers", index)

    def buffer_view(self, index: int) -> BufferView:
        return self.get("bufferViews", index)

    def camera(self, index: int) -> Camera:
        return self.get("cameras", index)

    def image(self, index: int) -> Image:
        return self.get("images", index)

    def material(self, index: int) -> Material:
        return self.get("materials", index)

    def mesh(self, index: int) -> Mesh:
        return self.get("meshes", index)

    def node(self, index: int) -> Node:
        return self.get("nodes", index)

    def sampler(self, index: int) -> Sampler:
        return self.get("samplers", index)

    def scene_at(self, index: int) -> Scene:
        return self.get("scenes", index)

    def skin(self, index: int) -> Skin:
        return self.get("skins", index)

    def texture(self, index: int) -> Texture:
        return self.get("textures", index)

    def default_scene(self) -> Optional[Scene]:
        if self.scene is None:
            return None
        return self.scene_at(self.scene)
