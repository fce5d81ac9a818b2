"""
Cross-object checks over a decoded Document.

The codec only checks structure. This pass dereferences indices, compares
declared extension names against their use, and checks the array-length,
range and enum-consistency rules of glTF 2.0. It never raises for document
content and never modifies the document; every problem becomes a Finding.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .document import Document
from .enums import (
    ACCESSOR_TYPE_COMPONENTS,
    COMPONENT_SIZE,
    UNSIGNED_INDEX_TYPES,
    AccessorType,
    AlphaMode,
    BufferViewTarget,
    CameraType,
    ComponentType,
    Interpolation,
    TargetPath,
)
from .errors import IndexOutOfRange, item_path, join_path
from .fields import iter_references, normalized
from .model import (
    IDENTITY_MATRIX,
    Accessor,
    AnimationSampler,
    GltfObject,
    Mesh,
    MeshPrimitive,
    Node,
    TextureInfo,
)

VERSION_PATTERN = re.compile(r"^[0-9]+\.[0-9]+$")
MATRIX_TYPES = (AccessorType.MAT2, AccessorType.MAT3, AccessorType.MAT4)


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class FindingKind(Enum):
    INDEX_OUT_OF_RANGE = "IndexOutOfRange"
    CONSTRAINT_VIOLATION = "ConstraintViolation"
    INCONSISTENT_EXTENSION_DECLARATION = "InconsistentExtensionDeclaration"


@dataclass(frozen=True)
class Finding:
    path: str
    severity: Severity
    kind: FindingKind
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fieldPath": self.path,
            "severity": self.severity.value,
            "kind": self.kind.value,
            "message": self.message,
        }

    def __str__(self) -> str:
        return f"{self.severity.value}: {self.path}: {self.message} [{self.kind.value}]"


def validate(document: Document) -> List[Finding]:
    """Run every check and return all findings in document order."""
    return Validator(document).run()


def has_errors(findings: Sequence[Finding]) -> bool:
    return any(f.severity is Severity.ERROR for f in findings)


def iter_objects(obj: GltfObject, path: str = "") -> Iterator[Tuple[str, GltfObject]]:
    """Yield ``obj`` and every object nested beneath it with its field path."""
    yield path, obj
    for prop in type(obj).PROPERTIES:
        value = getattr(obj, prop.attr)
        p = join_path(path, prop.wire)
        if isinstance(value, GltfObject):
            yield from iter_objects(value, p)
        elif isinstance(value, list):
            for i, v in enumerate(value):
                if isinstance(v, GltfObject):
                    yield from iter_objects(v, item_path(p, i))


def _in_unit_range(values: Sequence[float]) -> bool:
    return all(0.0 <= v <= 1.0 for v in values)


class Validator:
    def __init__(self, document: Document):
        self.document: Document = normalized(document)
        self.findings: List[Finding] = []
        self._parents: Dict[int, int] = {}

    def run(self) -> List[Finding]:
        self._check_references()
        self._check_extension_declarations()
        self._check_asset()
        self._check_buffers()
        self._check_buffer_views()
        self._check_accessors()
        self._check_images()
        self._check_materials()
        self._check_meshes()
        self._check_nodes()
        self._check_scenes()
        self._check_skins()
        self._check_cameras()
        self._check_animations()
        return self.findings

    # helpers

    def _add(self, path: str, kind: FindingKind, message: str, severity: Severity = Severity.ERROR) -> None:
        self.findings.append(Finding(path, severity, kind, message))

    def _violation(self, path: str, message: str, severity: Severity = Severity.ERROR) -> None:
        self._add(path, FindingKind.CONSTRAINT_VIOLATION, message, severity)

    def _resolve(self, collection: str, index: Optional[int]) -> Any:
        """Look up an index already reported by the reference check; None when unusable."""
        if index is None:
            return None
        try:
            return self.document.get(collection, index)
        except IndexOutOfRange:
            return None

    def _check_length(self, path: str, values: Optional[Sequence[Any]], expected: int) -> bool:
        if values is None:
            return True
        if len(values) != expected:
            self._violation(path, f"expected {expected} items, got {len(values)}")
            return False
        return True

    def _check_min_items(self, path: str, values: Optional[Sequence[Any]], minimum: int = 1) -> None:
        if values is not None and len(values) < minimum:
            self._violation(path, f"must contain at least {minimum} item(s)")

    def _check_unique(self, path: str, values: Optional[Sequence[Any]], severity: Severity = Severity.ERROR) -> None:
        seen = set()
        for i, v in enumerate(values or []):
            if v in seen:
                self._violation(item_path(path, i), f"duplicate value {v!r}", severity)
            seen.add(v)

    # index bounds

    def _check_references(self) -> None:
        for path, target, index, local in iter_references(self.document):
            if local:
                continue
            length = len(self.document.collection(target))
            if index >= length:
                self._add(
                    path,
                    FindingKind.INDEX_OUT_OF_RANGE,
                    f"index {index} is out of range for {target} (length {length})",
                )

    # extensions

    def _check_extension_declarations(self) -> None:
        doc = self.document
        used = set(doc.extensions_used)
        self._check_unique("extensionsUsed", doc.extensions_used, Severity.WARNING)
        self._check_unique("extensionsRequired", doc.extensions_required, Severity.WARNING)
        for i, name in enumerate(doc.extensions_required):
            if name not in used:
                self._add(
                    item_path("extensionsRequired", i),
                    FindingKind.INCONSISTENT_EXTENSION_DECLARATION,
                    f"required extension {name!r} is not listed in extensionsUsed",
                )
        for path, obj in iter_objects(doc):
            for name in obj.extensions or {}:
                if name not in used:
                    self._add(
                        join_path(join_path(path, "extensions"), name),
                        FindingKind.INCONSISTENT_EXTENSION_DECLARATION,
                        f"extension {name!r} is used but not listed in extensionsUsed",
                        Severity.WARNING,
                    )

    # per object kind

    def _check_asset(self) -> None:
        asset = self.document.asset
        if not VERSION_PATTERN.match(asset.version):
            self._violation("asset.version", f"{asset.version!r} is not a <major>.<minor> version")
            return
        if asset.min_version is None:
            return
        if not VERSION_PATTERN.match(asset.min_version):
            self._violation("asset.minVersion", f"{asset.min_version!r} is not a <major>.<minor> version")
            return
        version = tuple(int(x) for x in asset.version.split("."))
        min_version = tuple(int(x) for x in asset.min_version.split("."))
        if min_version > version:
            self._violation("asset.minVersion", "minVersion is greater than version")

    def _check_buffers(self) -> None:
        for i, buffer in enumerate(self.document.buffers):
            if buffer.byte_length < 1:
                self._violation(join_path(item_path("buffers", i), "byteLength"), "must be at least 1")

    def _check_buffer_views(self) -> None:
        for i, view in enumerate(self.document.buffer_views):
            path = item_path("bufferViews", i)
            if view.byte_length < 1:
                self._violation(join_path(path, "byteLength"), "must be at least 1")
            if view.byte_offset < 0:
                self._violation(join_path(path, "byteOffset"), "must be non-negative")
            if view.byte_stride is not None and not (4 <= view.byte_stride <= 252 and view.byte_stride % 4 == 0):
                self._violation(join_path(path, "byteStride"), "must be a multiple of 4 between 4 and 252")
            buffer = self._resolve("buffers", view.buffer)
            if buffer is not None and view.byte_offset + view.byte_length > buffer.byte_length:
                self._violation(
                    join_path(path, "byteLength"),
                    f"byteOffset + byteLength exceeds buffers[{view.buffer}].byteLength ({buffer.byte_length})",
                )

    def _check_accessors(self) -> None:
        for i, accessor in enumerate(self.document.accessors):
            path = item_path("accessors", i)
            if accessor.count < 1:
                self._violation(join_path(path, "count"), "must be at least 1")
            components = ACCESSOR_TYPE_COMPONENTS.get(accessor.type)
            size = COMPONENT_SIZE.get(accessor.component_type)
            if components is None or size is None:
                continue
            if accessor.byte_offset < 0:
                self._violation(join_path(path, "byteOffset"), "must be non-negative")
            elif accessor.byte_offset % size:
                self._violation(
                    join_path(path, "byteOffset"),
                    f"must be a multiple of the component size ({size})",
                )
            if accessor.byte_offset and accessor.buffer_view is None:
                self._violation(join_path(path, "byteOffset"), "must not be set without bufferView")
            self._check_length(join_path(path, "min"), accessor.min, components)
            self._check_length(join_path(path, "max"), accessor.max, components)
            if accessor.normalized and accessor.component_type in (ComponentType.FLOAT, ComponentType.UNSIGNED_INT):
                self._violation(
                    join_path(path, "normalized"),
                    f"must not be set for {accessor.component_type.name} accessors",
                )
            self._check_accessor_fits(path, accessor, components, size)
            if accessor.sparse is not None:
                sparse_path = join_path(path, "sparse")
                if not 1 <= accessor.sparse.count <= accessor.count:
                    self._violation(
                        join_path(sparse_path, "count"),
                        f"must be between 1 and the accessor count ({accessor.count})",
                    )
                if accessor.sparse.indices.component_type not in UNSIGNED_INDEX_TYPES:
                    self._violation(
                        join_path(sparse_path, "indices.componentType"),
                        "sparse indices must be an unsigned integer type",
                    )

    def _check_accessor_fits(self, path: str, accessor: Accessor, components: int, size: int) -> None:
        view = self._resolve("bufferViews", accessor.buffer_view)
        if view is None or accessor.count < 1:
            return
        # matrix columns of 1- and 2-byte components are padded; skip those
        if accessor.type in MATRIX_TYPES and size < 4:
            return
        element = components * size
        stride = view.byte_stride or element
        end = accessor.byte_offset + stride * (accessor.count - 1) + element
        if end > view.byte_length:
            self._violation(
                join_path(path, "count"),
                f"accessor data ({end} bytes) does not fit in bufferViews[{accessor.buffer_view}] "
                f"({view.byte_length} bytes)",
            )

    def _check_images(self) -> None:
        for i, image in enumerate(self.document.images):
            path = item_path("images", i)
            if image.uri is not None and image.buffer_view is not None:
                self._violation(path, "uri and bufferView must not both be set")
            elif image.uri is None and image.buffer_view is None:
                self._violation(path, "one of uri or bufferView must be set")
            if image.buffer_view is not None and image.mime_type is None:
                self._violation(join_path(path, "mimeType"), "must be set when bufferView is used")

    def _check_texture_info(self, path: str, info: Optional[TextureInfo]) -> None:
        if info is not None and info.tex_coord < 0:
            self._violation(join_path(path, "texCoord"), "must be non-negative")

    def _check_materials(self) -> None:
        for i, material in enumerate(self.document.materials):
            path = item_path("materials", i)
            pbr = material.pbr_metallic_roughness
            if pbr is not None:
                pbr_path = join_path(path, "pbrMetallicRoughness")
                factor_path = join_path(pbr_path, "baseColorFactor")
                if self._check_length(factor_path, pbr.base_color_factor, 4):
                    if not _in_unit_range(pbr.base_color_factor):
                        self._violation(factor_path, "values must be between 0 and 1")
                if not 0.0 <= pbr.metallic_factor <= 1.0:
                    self._violation(join_path(pbr_path, "metallicFactor"), "must be between 0 and 1")
                if not 0.0 <= pbr.roughness_factor <= 1.0:
                    self._violation(join_path(pbr_path, "roughnessFactor"), "must be between 0 and 1")
                self._check_texture_info(join_path(pbr_path, "baseColorTexture"), pbr.base_color_texture)
                self._check_texture_info(
                    join_path(pbr_path, "metallicRoughnessTexture"), pbr.metallic_roughness_texture
                )
            self._check_texture_info(join_path(path, "normalTexture"), material.normal_texture)
            self._check_texture_info(join_path(path, "occlusionTexture"), material.occlusion_texture)
            self._check_texture_info(join_path(path, "emissiveTexture"), material.emissive_texture)
            occlusion = material.occlusion_texture
            if occlusion is not None and not 0.0 <= occlusion.strength <= 1.0:
                self._violation(join_path(path, "occlusionTexture.strength"), "must be between 0 and 1")
            emissive_path = join_path(path, "emissiveFactor")
            if self._check_length(emissive_path, material.emissive_factor, 3):
                if not _in_unit_range(material.emissive_factor):
                    self._violation(emissive_path, "values must be between 0 and 1")
            if material.alpha_cutoff < 0.0:
                self._violation(join_path(path, "alphaCutoff"), "must be non-negative")
            elif material.alpha_mode != AlphaMode.MASK and material.alpha_cutoff != 0.5:
                self._violation(
                    join_path(path, "alphaCutoff"),
                    "is only used when alphaMode is MASK",
                    Severity.WARNING,
                )

    def _check_meshes(self) -> None:
        for i, mesh in enumerate(self.document.meshes):
            path = item_path("meshes", i)
            self._check_min_items(join_path(path, "primitives"), mesh.primitives)
            target_counts = set()
            for j, primitive in enumerate(mesh.primitives):
                prim_path = item_path(join_path(path, "primitives"), j)
                self._check_primitive(prim_path, primitive)
                target_counts.add(len(primitive.targets or []))
            if len(target_counts) > 1:
                self._violation(join_path(path, "primitives"), "all primitives must have the same number of morph targets")
            if mesh.weights is not None and len(target_counts) == 1:
                (targets,) = target_counts
                if len(mesh.weights) != targets:
                    self._violation(
                        join_path(path, "weights"),
                        f"expected one weight per morph target ({targets}), got {len(mesh.weights)}",
                    )

    def _check_primitive(self, path: str, primitive: MeshPrimitive) -> None:
        attributes_path = join_path(path, "attributes")
        if not primitive.attributes:
            self._violation(attributes_path, "must contain at least one attribute")
        self._check_min_items(join_path(path, "targets"), primitive.targets)

        counts = set()
        for semantic, index in primitive.attributes.items():
            accessor = self._resolve("accessors", index)
            if accessor is None:
                continue
            counts.add(accessor.count)
            attr_path = join_path(attributes_path, semantic)
            view = self._resolve("bufferViews", accessor.buffer_view)
            if view is not None and view.target not in (None, BufferViewTarget.ARRAY_BUFFER):
                self._violation(
                    attr_path,
                    f"vertex attribute bufferViews[{accessor.buffer_view}] must target ARRAY_BUFFER",
                )
            if semantic == "POSITION":
                if accessor.type != AccessorType.VEC3 or accessor.component_type != ComponentType.FLOAT:
                    self._violation(attr_path, "POSITION accessor must be VEC3 FLOAT")
                if accessor.min is None or accessor.max is None:
                    self._violation(attr_path, "POSITION accessor must define min and max")
        if len(counts) > 1:
            self._violation(attributes_path, "all attribute accessors must have the same count")

        accessor = self._resolve("accessors", primitive.indices)
        if accessor is not None:
            indices_path = join_path(path, "indices")
            if accessor.type != AccessorType.SCALAR or accessor.component_type not in UNSIGNED_INDEX_TYPES:
                self._violation(indices_path, "indices accessor must be a SCALAR of an unsigned integer type")
            view = self._resolve("bufferViews", accessor.buffer_view)
            if view is not None:
                if view.target not in (None, BufferViewTarget.ELEMENT_ARRAY_BUFFER):
                    self._violation(
                        indices_path,
                        f"bufferViews[{accessor.buffer_view}] must target ELEMENT_ARRAY_BUFFER",
                    )
                if view.byte_stride is not None:
                    self._violation(
                        indices_path,
                        f"bufferViews[{accessor.buffer_view}] used for indices must not define byteStride",
                    )

    def _has_trs(self, node: Node) -> bool:
        return (
            node.translation != [0.0, 0.0, 0.0]
            or node.rotation != [0.0, 0.0, 0.0, 1.0]
            or node.scale != [1.0, 1.0, 1.0]
        )

    def _check_nodes(self) -> None:
        nodes = self.document.nodes
        parents: Dict[int, int] = {}
        for i, node in enumerate(nodes):
            path = item_path("nodes", i)
            self._check_length(join_path(path, "matrix"), node.matrix, 16)
            self._check_length(join_path(path, "rotation"), node.rotation, 4)
            self._check_length(join_path(path, "scale"), node.scale, 3)
            self._check_length(join_path(path, "translation"), node.translation, 3)
            if node.matrix != IDENTITY_MATRIX and self._has_trs(node):
                self._violation(join_path(path, "matrix"), "must not be combined with translation, rotation or scale")
            if node.weights is not None and node.mesh is None:
                self._violation(join_path(path, "weights"), "requires mesh to be set")
            if node.skin is not None and node.mesh is None:
                self._violation(join_path(path, "skin"), "requires mesh to be set")
            children_path = join_path(path, "children")
            self._check_min_items(children_path, node.children)
            self._check_unique(children_path, node.children)
            for j, child in enumerate(node.children or []):
                if child == i:
                    self._violation(item_path(children_path, j), "node cannot be its own child")
                elif child in parents and parents[child] != i:
                    self._violation(
                        item_path(children_path, j),
                        f"node {child} already has parent {parents[child]}",
                    )
                else:
                    parents[child] = i
        self._check_cycles(parents)
        self._parents = parents

    def _check_cycles(self, parents: Dict[int, int]) -> None:
        reported = set()
        for start in sorted(parents):
            seen = {start}
            current = parents.get(start)
            while current is not None:
                if current in seen:
                    if current not in reported:
                        reported.update(seen)
                        self._violation(item_path("nodes", current), "node hierarchy contains a cycle")
                    break
                seen.add(current)
                current = parents.get(current)

    def _check_scenes(self) -> None:
        parents = self._parents
        for i, scene in enumerate(self.document.scenes):
            path = join_path(item_path("scenes", i), "nodes")
            self._check_min_items(path, scene.nodes)
            self._check_unique(path, scene.nodes)
            for j, index in enumerate(scene.nodes or []):
                if index in parents:
                    self._violation(item_path(path, j), f"scene root node {index} has parent {parents[index]}")

    def _check_skins(self) -> None:
        for i, skin in enumerate(self.document.skins):
            path = item_path("skins", i)
            joints_path = join_path(path, "joints")
            self._check_min_items(joints_path, skin.joints)
            self._check_unique(joints_path, skin.joints)
            accessor = self._resolve("accessors", skin.inverse_bind_matrices)
            if accessor is not None:
                ibm_path = join_path(path, "inverseBindMatrices")
                if accessor.type != AccessorType.MAT4 or accessor.component_type != ComponentType.FLOAT:
                    self._violation(ibm_path, "inverseBindMatrices accessor must be MAT4 FLOAT")
                if accessor.count < len(skin.joints):
                    self._violation(
                        ibm_path,
                        f"accessor count ({accessor.count}) is less than the number of joints ({len(skin.joints)})",
                    )

    def _check_cameras(self) -> None:
        for i, camera in enumerate(self.document.cameras):
            path = item_path("cameras", i)
            if camera.orthographic is not None and camera.perspective is not None:
                self._violation(path, "orthographic and perspective must not both be set")
            if camera.type == CameraType.PERSPECTIVE:
                if camera.perspective is None:
                    self._violation(join_path(path, "perspective"), "required when type is perspective")
            elif camera.orthographic is None:
                self._violation(join_path(path, "orthographic"), "required when type is orthographic")

            p = camera.perspective
            if p is not None:
                p_path = join_path(path, "perspective")
                if p.yfov <= 0.0:
                    self._violation(join_path(p_path, "yfov"), "must be greater than 0")
                if p.znear <= 0.0:
                    self._violation(join_path(p_path, "znear"), "must be greater than 0")
                if p.aspect_ratio is not None and p.aspect_ratio <= 0.0:
                    self._violation(join_path(p_path, "aspectRatio"), "must be greater than 0")
                if p.zfar is not None and p.zfar <= p.znear:
                    self._violation(join_path(p_path, "zfar"), "must be greater than znear")

            o = camera.orthographic
            if o is not None:
                o_path = join_path(path, "orthographic")
                if o.xmag == 0.0:
                    self._violation(join_path(o_path, "xmag"), "must not be zero")
                if o.ymag == 0.0:
                    self._violation(join_path(o_path, "ymag"), "must not be zero")
                if o.znear < 0.0:
                    self._violation(join_path(o_path, "znear"), "must be non-negative")
                if o.zfar <= 0.0 or o.zfar <= o.znear:
                    self._violation(join_path(o_path, "zfar"), "must be greater than 0 and greater than znear")

    def _morph_target_count(self, node_index: Optional[int]) -> Optional[int]:
        node = self._resolve("nodes", node_index)
        if node is None:
            return None
        if node.mesh is None:
            return 0
        mesh: Optional[Mesh] = self._resolve("meshes", node.mesh)
        if mesh is None:
            # dangling mesh index, already reported by the reference check
            return None
        if not mesh.primitives:
            return 0
        return len(mesh.primitives[0].targets or [])

    def _check_animations(self) -> None:
        for i, animation in enumerate(self.document.animations):
            path = item_path("animations", i)
            channels_path = join_path(path, "channels")
            samplers_path = join_path(path, "samplers")
            self._check_min_items(channels_path, animation.channels)
            self._check_min_items(samplers_path, animation.samplers)

            for j, sampler in enumerate(animation.samplers):
                s_path = item_path(samplers_path, j)
                accessor = self._resolve("accessors", sampler.input)
                if accessor is not None and (
                    accessor.type != AccessorType.SCALAR or accessor.component_type != ComponentType.FLOAT
                ):
                    self._violation(join_path(s_path, "input"), "input accessor must be SCALAR FLOAT")

            targets = set()
            for j, channel in enumerate(animation.channels):
                c_path = item_path(channels_path, j)
                key = (channel.target.node, channel.target.path)
                if channel.target.node is not None and key in targets:
                    self._violation(join_path(c_path, "target"), "another channel already targets this node and path")
                targets.add(key)

                if channel.sampler >= len(animation.samplers):
                    self._add(
                        join_path(c_path, "sampler"),
                        FindingKind.INDEX_OUT_OF_RANGE,
                        f"index {channel.sampler} is out of range for {samplers_path} "
                        f"(length {len(animation.samplers)})",
                    )
                    continue
                sampler = animation.samplers[channel.sampler]
                self._check_channel_counts(c_path, channel.target.path, channel.target.node, sampler)

    def _check_channel_counts(
        self, path: str, target_path: TargetPath, node: Optional[int], sampler: AnimationSampler
    ) -> None:
        inputs = self._resolve("accessors", sampler.input)
        outputs = self._resolve("accessors", sampler.output)
        if inputs is None or outputs is None:
            return
        per_key = 1
        if target_path == TargetPath.WEIGHTS:
            morph_targets = self._morph_target_count(node)
            if morph_targets is None:
                return
            if morph_targets == 0:
                self._violation(join_path(path, "target.path"), "weights target requires a mesh with morph targets")
                return
            per_key = morph_targets
        if sampler.interpolation == Interpolation.CUBICSPLINE:
            per_key *= 3
        expected = inputs.count * per_key
        if outputs.count != expected:
            self._violation(
                path,
                f"sampler output count ({outputs.count}) does not match input count "
                f"({inputs.count}) for {sampler.interpolation.value} {target_path.value} (expected {expected})",
            )
