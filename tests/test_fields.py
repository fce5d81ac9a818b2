import pytest

from gltfdoc.errors import InvalidIndex, TypeMismatch
from gltfdoc.fields import (
    ArrayOf,
    EncodePolicy,
    Index,
    Integer,
    Json,
    MapOf,
    Number,
    iter_references,
    normalized,
)
from gltfdoc.enums import MagFilter, PrimitiveMode, WrapMode
from gltfdoc.model import Animation, Mesh, MeshPrimitive, Node, Sampler
from gltfdoc.values import UNSET


def test_integer_rejects_floats_and_booleans():
    assert Integer().decode(3, "count") == 3
    for value in (3.0, 2.5, True, "3"):
        with pytest.raises(TypeMismatch):
            Integer().decode(value, "count")


def test_number_widens_integers_to_float():
    value = Number().decode(1, "scale")
    assert value == 1.0
    assert isinstance(value, float)
    with pytest.raises(TypeMismatch):
        Number().decode(False, "scale")


def test_index_rejects_negative_values_both_ways():
    with pytest.raises(InvalidIndex) as info:
        Index("nodes").decode(-1, "scene")
    assert info.value.path == "scene"
    with pytest.raises(InvalidIndex):
        Index("nodes").encode(-2, "scene", EncodePolicy.OMIT_DEFAULTS)


def test_array_and_map_paths():
    with pytest.raises(TypeMismatch) as info:
        ArrayOf(Index("nodes")).decode([0, 1, "2"], "nodes[0].children")
    assert info.value.path == "nodes[0].children[2]"
    with pytest.raises(TypeMismatch) as info:
        MapOf(Index("accessors")).decode({"POSITION": 0.5}, "attributes")
    assert info.value.path == "attributes.POSITION"


def test_json_values_are_copied():
    value = {"a": [1]}
    decoded = Json().decode(value, "extras")
    decoded["a"].append(2)
    assert value == {"a": [1]}


def test_iter_references_reports_paths_and_targets():
    primitive = MeshPrimitive(attributes={"POSITION": 0, "NORMAL": 4}, material=2, targets=[{"POSITION": 7}])
    refs = list(iter_references(primitive, "meshes[0].primitives[1]"))
    assert ("meshes[0].primitives[1].attributes.POSITION", "accessors", 0, False) in refs
    assert ("meshes[0].primitives[1].attributes.NORMAL", "accessors", 4, False) in refs
    assert ("meshes[0].primitives[1].material", "materials", 2, False) in refs
    assert ("meshes[0].primitives[1].targets[0].POSITION", "accessors", 7, False) in refs
    assert len(refs) == 4


def test_iter_references_skips_unset_fields():
    assert list(iter_references(Node(), "nodes[0]")) == []
    assert list(iter_references(Node(children=[3, 4]), "nodes[0]")) == [
        ("nodes[0].children[0]", "nodes", 3, False),
        ("nodes[0].children[1]", "nodes", 4, False),
    ]


def test_animation_channel_sampler_is_local():
    animation = Animation.from_dict(
        {
            "channels": [{"sampler": 1, "target": {"path": "scale"}}],
            "samplers": [{"input": 0, "output": 1}],
        },
        "animations[0]",
    )
    refs = list(iter_references(animation, "animations[0]"))
    assert ("animations[0].channels[0].sampler", "samplers", 1, True) in refs
    assert ("animations[0].samplers[0].input", "accessors", 0, False) in refs


def test_normalized_fills_defaults_and_maps_enums():
    sampler = Sampler(mag_filter=9729, wrap_s=None, wrap_t=33071)
    copy = normalized(sampler)
    assert copy.mag_filter is MagFilter.LINEAR
    assert copy.wrap_s is WrapMode.REPEAT
    assert copy.wrap_t is WrapMode.CLAMP_TO_EDGE
    assert copy.extras is UNSET
    assert sampler.mag_filter == 9729 and sampler.wrap_s is None


def test_normalized_recurses_and_keeps_unknown_values():
    mesh = Mesh(primitives=[MeshPrimitive(attributes={"POSITION": 0}, mode=None), MeshPrimitive(attributes={}, mode=42)])
    copy = normalized(mesh)
    assert copy.primitives[0].mode is PrimitiveMode.TRIANGLES
    assert copy.primitives[1].mode == 42
    assert copy.primitives[0] is not mesh.primitives[0]
    assert mesh.primitives[0].mode is None
