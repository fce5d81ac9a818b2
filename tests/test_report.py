import json

from gltfdoc import codec
from gltfdoc.document import Document
from gltfdoc.enums import PrimitiveMode
from gltfdoc.model import Accessor, Asset, Material, Mesh, MeshPrimitive
from gltfdoc.report import (
    animation_duration,
    build_json_data,
    build_report,
    named,
    primitive_triangle_count,
    primitive_vertex_count,
    summarize_hierarchy,
)


def test_counts(sample):
    doc = codec.decode(sample)
    prim = doc.meshes[0].primitives[0]
    assert primitive_vertex_count(doc, prim) == 3
    assert primitive_triangle_count(doc, prim) == 1
    assert animation_duration(doc, doc.animations[0]) == 1.0


def test_strip_and_unknown_modes(sample):
    sample["meshes"][0]["primitives"][0]["mode"] = 5
    doc = codec.decode(sample)
    assert primitive_triangle_count(doc, doc.meshes[0].primitives[0]) == 1
    doc.meshes[0].primitives[0].mode = PrimitiveMode.LINES
    assert primitive_triangle_count(doc, doc.meshes[0].primitives[0]) is None


def test_named_fallbacks(sample):
    doc = codec.decode(sample)
    assert named(doc, "nodes", "node", 0) == "root"
    assert named(doc, "nodes", "node", 9) == "node[9] <missing>"
    assert named(doc, "nodes", "node", None) == "<none>"
    doc.nodes[1].name = "  "
    assert named(doc, "nodes", "node", 1) == "node[1]"


def test_hierarchy_depth(sample):
    doc = codec.decode(sample)
    full = summarize_hierarchy(doc, max_depth=3)
    assert "root (mesh=triangle) | <identity>" in full
    assert "  - cam (camera[0]) | T=(1.0, 0.0, 0.0)" in full
    shallow = summarize_hierarchy(doc, max_depth=1)
    assert "cam" not in shallow
    assert "(1 child nodes)" in shallow


def test_hierarchy_survives_cycles(sample):
    sample["nodes"][1]["children"] = [0]
    doc = codec.decode(sample)
    out = summarize_hierarchy(doc, max_depth=10)
    assert "node[0] <missing or repeated>" in out


def test_text_report_sections(sample):
    report = build_report(codec.decode(sample))
    for title in ("FILE", "EXTENSIONS", "SCENES", "HIERARCHY", "MESHES", "MATERIALS", "SKINS", "ANIMATIONS"):
        assert "\n" + title + "\n" in "\n" + report
    assert "generator: hand-written" in report
    assert "main (default) (root nodes: 1)" in report
    assert "slot[0] -> material[0] (red)" in report
    assert "extensions=[KHR_materials_emissive_strength]" in report
    assert "spin (channels: 1, samplers: 1, duration: 1.0s)" in report
    assert "target=root.rotation | sampler=LINEAR, keys=2, values=2" in report


def test_markdown_report(sample):
    report = build_report(codec.decode(sample), markdown=True)
    assert report.startswith("# glTF Report")
    assert "## Material Slots" in report


def test_report_tolerates_dangling_indices(sample):
    sample["meshes"][0]["primitives"][0]["material"] = 7
    sample["animations"][0]["channels"][0]["sampler"] = 4
    report = build_report(codec.decode(sample))
    assert "material[7] <missing>" in report
    assert "sampler=?" in report


def test_json_data(sample):
    data = build_json_data(codec.decode(sample))
    json.dumps(data)
    assert data["file"] == {"generator": "hand-written", "version": "2.0"}
    assert data["extensions"]["used"] == ["KHR_materials_emissive_strength"]
    assert data["meshes"][0]["primitives"][0]["triangles"] == 1
    assert data["materials"][0]["pbrMetallicRoughness"]["baseColorTexture"] == 0
    assert data["images"][0]["mimeType"] is None
    assert data["animations"][0]["duration"] == 1.0
    assert data["animations"][0]["channels"][0]["target"]["node_name"] == "root"


def test_report_on_built_document():
    doc = Document(
        asset=Asset(version="2.0"),
        accessors=[Accessor(component_type=5126, count=6, type="VEC3")],
        meshes=[Mesh(primitives=[MeshPrimitive(attributes={"POSITION": 0}, material=0, mode=4)], name="quad")],
        materials=[Material(name="cut", alpha_mode="MASK", alpha_cutoff=None)],
    )
    data = build_json_data(doc)
    assert data["meshes"][0]["primitives"][0]["mode"] == "TRIANGLES"
    assert data["meshes"][0]["primitives"][0]["triangles"] == 2
    assert data["materials"][0]["alphaMode"] == "MASK"
    assert data["materials"][0]["alphaCutoff"] == 0.5
    report = build_report(doc)
    assert "cut | alpha=MASK (cutoff=0.5)" in report
    assert doc.meshes[0].primitives[0].mode == 4
