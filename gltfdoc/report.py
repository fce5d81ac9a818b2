"""
Human-readable summaries of a decoded Document.

Prints scenes, nodes, meshes, materials, skins (skeletons) and animations as
plain text, Markdown, or a JSON-serializable dictionary. Vertex and triangle
counts are estimates from accessor counts and primitive modes; animation
durations come from the input accessor's ``max``. Indices that point outside
their array are shown as placeholders instead of failing, so a report can be
produced for documents that do not validate.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .document import Document
from .enums import AlphaMode, PrimitiveMode
from .errors import IndexOutOfRange
from .fields import normalized
from .model import IDENTITY_MATRIX, Accessor, MeshPrimitive, Node, PbrMetallicRoughness


def safe_name(name: Optional[str], fallback: str) -> str:
    return name if (name and name.strip()) else fallback


def lookup(doc: Document, collection: str, idx: Optional[int]) -> Any:
    if idx is None:
        return None
    try:
        return doc.get(collection, idx)
    except IndexOutOfRange:
        return None


def named(doc: Document, collection: str, label: str, idx: Optional[int]) -> str:
    if idx is None:
        return "<none>"
    obj = lookup(doc, collection, idx)
    if obj is None:
        return f"{label}[{idx}] <missing>"
    return safe_name(obj.name, f"{label}[{idx}]")


def accessor_len(doc: Document, idx: Optional[int]) -> Optional[int]:
    acc: Optional[Accessor] = lookup(doc, "accessors", idx)
    return None if acc is None else acc.count


def primitive_vertex_count(doc: Document, prim: MeshPrimitive) -> Optional[int]:
    # POSITION accessor count is the number of vertices in this primitive
    return accessor_len(doc, prim.attributes.get("POSITION"))


def primitive_triangle_count(doc: Document, prim: MeshPrimitive) -> Optional[int]:
    n = accessor_len(doc, prim.indices)
    if n is None:
        n = primitive_vertex_count(doc, prim)
    if n is None:
        return None
    if prim.mode == PrimitiveMode.TRIANGLES:
        return n // 3
    if prim.mode in (PrimitiveMode.TRIANGLE_STRIP, PrimitiveMode.TRIANGLE_FAN):
        return None if n < 3 else n - 2
    return None


def pbr_summary(pbr: Optional[PbrMetallicRoughness]) -> str:
    if pbr is None:
        return ""
    out = [
        f"baseColorFactor={tuple(pbr.base_color_factor)}",
        f"metallic={pbr.metallic_factor}",
        f"roughness={pbr.roughness_factor}",
    ]
    if pbr.base_color_texture is not None:
        out.append(f"baseColorTex=texture[{pbr.base_color_texture.index}]")
    if pbr.metallic_roughness_texture is not None:
        out.append(f"metallicRoughnessTex=texture[{pbr.metallic_roughness_texture.index}]")
    return ", ".join(out)


def indent(s: str, n: int) -> str:
    pad = " " * n
    return "\n".join(pad + line if line else line for line in s.splitlines())


def summarize_scenes(doc: Document) -> str:
    lines = ["Scenes:"]
    if not doc.scenes:
        lines.append("  <none>")
        return "\n".join(lines)
    for si, scene in enumerate(doc.scenes):
        sname = safe_name(scene.name, f"scene[{si}]")
        roots = scene.nodes or []
        default = " (default)" if doc.scene == si else ""
        lines.append(f"  - {sname}{default} (root nodes: {len(roots)})")
        for ni in roots:
            lines.append(indent(f"• {named(doc, 'nodes', 'node', ni)} [node {ni}]", 6))
    return "\n".join(lines)


def node_transform_str(n: Node) -> str:
    parts = []
    if n.matrix != IDENTITY_MATRIX:
        parts.append("matrix=[...] (4x4)")
    if n.translation != [0.0, 0.0, 0.0]:
        parts.append(f"T={tuple(round(x, 6) for x in n.translation)}")
    if n.rotation != [0.0, 0.0, 0.0, 1.0]:
        parts.append(f"R(quat)={tuple(round(x, 6) for x in n.rotation)}")
    if n.scale != [1.0, 1.0, 1.0]:
        parts.append(f"S={tuple(round(x, 6) for x in n.scale)}")
    return ", ".join(parts) if parts else "<identity>"


def summarize_hierarchy(doc: Document, max_depth: int = 3) -> str:
    lines = ["Node Hierarchy (truncated):"]
    root_set = set()
    for scene in doc.scenes:
        root_set.update(scene.nodes or [])
    visited = set()

    def walk(i: int, depth: int):
        prefix = "  " * depth + ("- " if depth else "")
        n = lookup(doc, "nodes", i)
        if n is None or i in visited:
            lines.append(f"{prefix}node[{i}] <missing or repeated>")
            return
        visited.add(i)
        tag = []
        if n.mesh is not None:
            tag.append(f"mesh={named(doc, 'meshes', 'mesh', n.mesh)}")
        if n.skin is not None:
            tag.append(f"skin={named(doc, 'skins', 'skin', n.skin)}")
        if n.camera is not None:
            tag.append(f"camera[{n.camera}]")
        xform = node_transform_str(n)
        lines.append(f"{prefix}{safe_name(n.name, f'node[{i}]')} ({', '.join(tag) if tag else 'node'}) | {xform}")
        children = n.children or []
        if depth + 1 >= max_depth:
            if children:
                lines.append("  " * (depth + 1) + f"… ({len(children)} child nodes)")
            return
        for c in children:
            walk(c, depth + 1)

    for r in sorted(root_set):
        walk(r, 0)
    return "\n".join(lines)


def summarize_meshes(doc: Document) -> str:
    lines = ["Meshes:"]
    if not doc.meshes:
        lines.append("  <none>")
        return "\n".join(lines)
    for mi, m in enumerate(doc.meshes):
        mname = safe_name(m.name, f"mesh[{mi}]")
        lines.append(f"  - {mname} (primitives/material slots: {len(m.primitives)})")
        for pi, prim in enumerate(m.primitives):
            attrs = ", ".join(sorted(prim.attributes)) or "<none>"
            v = primitive_vertex_count(doc, prim)
            t = primitive_triangle_count(doc, prim)
            if prim.material is not None:
                mat_slot = f"slot[{pi}] -> material[{prim.material}] ({named(doc, 'materials', 'material', prim.material)})"
            else:
                mat_slot = f"slot[{pi}] -> <no material>"
            morphs = len(prim.targets or [])
            lines.append(
                indent(
                    f"[{pi}] mode={prim.mode.name}, {mat_slot}, vertices={v if v is not None else '?'}, "
                    f"triangles={t if t is not None else '?'}, attributes=[{attrs}], morphTargets={morphs}",
                    6,
                )
            )
    return "\n".join(lines)


def summarize_material_slots(doc: Document) -> str:
    """Quick reference showing which material slots (primitives) use which materials."""
    lines = ["Material Slot Reference:"]
    if not doc.meshes:
        lines.append("  <none>")
        return "\n".join(lines)

    for mi, m in enumerate(doc.meshes):
        if not m.primitives:
            continue
        lines.append(f"  {safe_name(m.name, f'mesh[{mi}]')}:")
        for pi, prim in enumerate(m.primitives):
            if prim.material is not None:
                mat = named(doc, "materials", "material", prim.material)
                lines.append(indent(f"Surface {pi}: material[{prim.material}] = {mat}", 4))
            else:
                lines.append(indent(f"Surface {pi}: <no material>", 4))
    return "\n".join(lines)


def summarize_materials(doc: Document) -> str:
    lines = ["Materials:"]
    if not doc.materials:
        lines.append("  <none>")
        return "\n".join(lines)
    for i, m in enumerate(doc.materials):
        main = f"  - {safe_name(m.name, f'material[{i}]')} | alpha={m.alpha_mode.value}"
        if m.alpha_mode == AlphaMode.MASK:
            main += f" (cutoff={m.alpha_cutoff})"
        main += f", doubleSided={m.double_sided}"
        if any(e > 0 for e in m.emissive_factor):
            main += f", emissive={tuple(m.emissive_factor)}"
        pbr = pbr_summary(m.pbr_metallic_roughness)
        if pbr:
            main += f", {pbr}"
        lines.append(main)

        details = []
        if m.normal_texture is not None:
            details.append(f"normalMap=texture[{m.normal_texture.index}] (scale={m.normal_texture.scale})")
        if m.occlusion_texture is not None:
            details.append(
                f"occlusionMap=texture[{m.occlusion_texture.index}] (strength={m.occlusion_texture.strength})"
            )
        if m.emissive_texture is not None:
            details.append(f"emissiveMap=texture[{m.emissive_texture.index}]")
        if m.extensions:
            details.append(f"extensions=[{', '.join(m.extensions)}]")
        for detail in details:
            lines.append(indent(f"• {detail}", 4))

    return "\n".join(lines)


def summarize_textures_images(doc: Document) -> str:
    lines = ["Textures & Images:"]
    if not doc.textures and not doc.images:
        lines.append("  <none>")
        return "\n".join(lines)
    if doc.textures:
        lines.append(f"  Textures ({len(doc.textures)}):")
        for ti, t in enumerate(doc.textures):
            imsg = ""
            img = lookup(doc, "images", t.source)
            if img is not None:
                src = f"image[{t.source}]"
                if img.mime_type is not None:
                    src += f" ({img.mime_type.value})"
                imsg = f" -> {src}"
            lines.append(f"    - texture[{ti}] sampler={t.sampler if t.sampler is not None else '<default>'}{imsg}")
    if doc.images:
        lines.append(f"  Images ({len(doc.images)}):")
        for ii, img in enumerate(doc.images):
            if img.uri:
                src = "uri=" + (img.uri if not img.uri.startswith("data:") else img.uri.split(",", 1)[0] + ",…")
            elif img.buffer_view is not None:
                src = f"bufferView={img.buffer_view}"
            else:
                src = "<embedded>"
            mt = f", mime={img.mime_type.value}" if img.mime_type is not None else ""
            lines.append(f"    - image[{ii}] {src}{mt}")
    return "\n".join(lines)


def summarize_skins(doc: Document) -> str:
    lines = ["Skins (Skeletons):"]
    if not doc.skins:
        lines.append("  <none>")
        return "\n".join(lines)
    for si, s in enumerate(doc.skins):
        name = safe_name(s.name, f"skin[{si}]")
        root = named(doc, "nodes", "node", s.skeleton)
        ibm = accessor_len(doc, s.inverse_bind_matrices)
        lines.append(
            f"  - {name} (root: {root}, joints: {len(s.joints)}, "
            f"inverseBindMatrices: {ibm if ibm is not None else 'n/a'})"
        )
        for j in s.joints:
            lines.append(indent(f"• {named(doc, 'nodes', 'node', j)} [node {j}]", 6))
    return "\n".join(lines)


def sampler_input_max_time(doc: Document, accessor_index: Optional[int]) -> Optional[float]:
    acc: Optional[Accessor] = lookup(doc, "accessors", accessor_index)
    if acc is not None and acc.max:
        # For time inputs, max is a scalar [tmax]
        return acc.max[0]
    return None  # Fallback requires decoding buffers


def animation_duration(doc: Document, animation) -> Optional[float]:
    durations = [
        t for t in (sampler_input_max_time(doc, s.input) for s in animation.samplers) if t is not None
    ]
    return max(durations) if durations else None


def summarize_animations(doc: Document) -> str:
    lines = ["Animations:"]
    if not doc.animations:
        lines.append("  <none>")
        return "\n".join(lines)
    for ai, a in enumerate(doc.animations):
        name = safe_name(a.name, f"animation[{ai}]")
        dur = animation_duration(doc, a)
        lines.append(
            f"  - {name} (channels: {len(a.channels)}, samplers: {len(a.samplers)}, "
            f"duration: {dur if dur is not None else '?'}s)"
        )
        for ci, ch in enumerate(a.channels):
            node = named(doc, "nodes", "node", ch.target.node)
            samp = a.samplers[ch.sampler] if ch.sampler < len(a.samplers) else None
            interp = samp.interpolation.value if samp else "?"
            in_len = accessor_len(doc, samp.input) if samp else None
            out_len = accessor_len(doc, samp.output) if samp else None
            lines.append(
                indent(
                    f"[{ci}] target={node}.{ch.target.path.value} | sampler={interp}, "
                    f"keys={in_len if in_len is not None else '?'}, values={out_len if out_len is not None else '?'}",
                    6,
                )
            )
    return "\n".join(lines)


def summarize_extensions(doc: Document) -> str:
    used = ", ".join(doc.extensions_used) if doc.extensions_used else "<none>"
    reqd = ", ".join(doc.extensions_required) if doc.extensions_required else "<none>"
    return f"Extensions: used=[{used}], required=[{reqd}]"


def build_json_data(doc: Document) -> Dict[str, Any]:
    """Build a JSON-serializable dictionary summarizing the document."""
    doc = normalized(doc)
    scenes = [
        {"index": si, "name": scene.name, "root_nodes": scene.nodes or []}
        for si, scene in enumerate(doc.scenes)
    ]

    nodes = []
    for ni, n in enumerate(doc.nodes):
        nodes.append({
            "index": ni,
            "name": n.name,
            "mesh": n.mesh,
            "skin": n.skin,
            "camera": n.camera,
            "children": n.children or [],
            "matrix": list(n.matrix),
            "translation": list(n.translation),
            "rotation": list(n.rotation),
            "scale": list(n.scale),
        })

    meshes = []
    for mi, m in enumerate(doc.meshes):
        primitives = []
        for pi, prim in enumerate(m.primitives):
            primitives.append({
                "index": pi,
                "material_slot": pi,
                "mode": prim.mode.name,
                "attributes": dict(prim.attributes),
                "material": prim.material,
                "indices": prim.indices,
                "vertices": primitive_vertex_count(doc, prim),
                "triangles": primitive_triangle_count(doc, prim),
                "morph_targets": len(prim.targets or []),
            })
        meshes.append({"index": mi, "name": m.name, "primitives": primitives})

    materials = []
    for i, m in enumerate(doc.materials):
        mat_data: Dict[str, Any] = {
            "index": i,
            "name": m.name,
            "alphaMode": m.alpha_mode.value,
            "alphaCutoff": m.alpha_cutoff,
            "doubleSided": m.double_sided,
            "emissiveFactor": list(m.emissive_factor),
        }
        pbr = m.pbr_metallic_roughness
        if pbr is not None:
            pbr_data: Dict[str, Any] = {
                "baseColorFactor": list(pbr.base_color_factor),
                "metallicFactor": pbr.metallic_factor,
                "roughnessFactor": pbr.roughness_factor,
            }
            if pbr.base_color_texture is not None:
                pbr_data["baseColorTexture"] = pbr.base_color_texture.index
            if pbr.metallic_roughness_texture is not None:
                pbr_data["metallicRoughnessTexture"] = pbr.metallic_roughness_texture.index
            mat_data["pbrMetallicRoughness"] = pbr_data
        if m.normal_texture is not None:
            mat_data["normalTexture"] = {"index": m.normal_texture.index, "scale": m.normal_texture.scale}
        if m.occlusion_texture is not None:
            mat_data["occlusionTexture"] = {
                "index": m.occlusion_texture.index,
                "strength": m.occlusion_texture.strength,
            }
        if m.emissive_texture is not None:
            mat_data["emissiveTexture"] = {"index": m.emissive_texture.index}
        if m.extensions:
            mat_data["extensions"] = list(m.extensions)
        materials.append(mat_data)

    textures = [{"index": ti, "source": t.source, "sampler": t.sampler} for ti, t in enumerate(doc.textures)]

    images = [
        {
            "index": ii,
            "uri": img.uri,
            "mimeType": img.mime_type.value if img.mime_type is not None else None,
            "bufferView": img.buffer_view,
        }
        for ii, img in enumerate(doc.images)
    ]

    skins = [
        {
            "index": si,
            "name": s.name,
            "skeleton": s.skeleton,
            "joints": list(s.joints),
            "inverseBindMatrices": s.inverse_bind_matrices,
        }
        for si, s in enumerate(doc.skins)
    ]

    animations = []
    for ai, a in enumerate(doc.animations):
        channels = []
        for ci, ch in enumerate(a.channels):
            samp = a.samplers[ch.sampler] if ch.sampler < len(a.samplers) else None
            channels.append({
                "index": ci,
                "sampler": ch.sampler,
                "interpolation": samp.interpolation.value if samp else None,
                "keys": accessor_len(doc, samp.input) if samp else None,
                "values": accessor_len(doc, samp.output) if samp else None,
                "target": {
                    "node": ch.target.node,
                    "node_name": named(doc, "nodes", "node", ch.target.node),
                    "path": ch.target.path.value,
                },
            })
        samplers = [
            {
                "index": si,
                "input": samp.input,
                "output": samp.output,
                "interpolation": samp.interpolation.value,
                "input_count": accessor_len(doc, samp.input),
                "output_count": accessor_len(doc, samp.output),
            }
            for si, samp in enumerate(a.samplers)
        ]
        animations.append({
            "index": ai,
            "name": a.name,
            "channels": channels,
            "samplers": samplers,
            "duration": animation_duration(doc, a),
        })

    return {
        "file": {"generator": doc.asset.generator, "version": doc.asset.version},
        "extensions": {"used": list(doc.extensions_used), "required": list(doc.extensions_required)},
        "scenes": scenes,
        "nodes": nodes,
        "meshes": meshes,
        "materials": materials,
        "textures": textures,
        "images": images,
        "skins": skins,
        "animations": animations,
    }


def build_report(doc: Document, markdown: bool = False, max_depth: int = 3) -> str:
    doc = normalized(doc)
    sections = [
        ("File", [
            f"generator: {doc.asset.generator or '<unknown>'}",
            f"version:   {doc.asset.version}",
        ]),
        ("Extensions", [summarize_extensions(doc)]),
        ("Scenes", [summarize_scenes(doc)]),
        ("Hierarchy", [summarize_hierarchy(doc, max_depth=max_depth)]),
        ("Meshes", [summarize_meshes(doc)]),
        ("Material Slots", [summarize_material_slots(doc)]),
        ("Materials", [summarize_materials(doc)]),
        ("Textures & Images", [summarize_textures_images(doc)]),
        ("Skins", [summarize_skins(doc)]),
        ("Animations", [summarize_animations(doc)]),
    ]

    if markdown:
        out = ["# glTF Report", ""]
        for title, blocks in sections:
            out.append(f"## {title}")
            for b in blocks:
                out.append("\n" + b + "\n")
        return "\n".join(out)
    out: List[str] = []
    sep = "=" * 72
    for title, blocks in sections:
        out.append(sep)
        out.append(title.upper())
        out.append(sep)
        out.extend(blocks)
        out.append("")
    return "\n".join(out)
