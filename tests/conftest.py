import copy
import json

import pytest

SAMPLE = {
    "asset": {"version": "2.0", "generator": "hand-written"},
    "extensionsUsed": ["KHR_materials_emissive_strength"],
    "scene": 0,
    "scenes": [{"nodes": [0], "name": "main"}],
    "nodes": [
        {
            "mesh": 0,
            "children": [1],
            "name": "root",
            "extras": {"tag": {"nested": [1, 2, {"a": None}], "flag": True}},
        },
        {"translation": [1.0, 0.0, 0.0], "camera": 0, "name": "cam"},
    ],
    "meshes": [
        {
            "name": "triangle",
            "primitives": [{"attributes": {"POSITION": 1}, "indices": 0, "material": 0}],
        }
    ],
    "materials": [
        {
            "name": "red",
            "pbrMetallicRoughness": {"baseColorFactor": [1.0, 0.0, 0.0, 1.0], "baseColorTexture": {"index": 0}},
            "extensions": {"KHR_materials_emissive_strength": {"emissiveStrength": 2.5}},
        }
    ],
    "textures": [{"sampler": 0, "source": 0}],
    "images": [{"uri": "tex.png"}],
    "samplers": [{"magFilter": 9729, "minFilter": 9987}],
    "cameras": [{"type": "perspective", "perspective": {"yfov": 0.8, "znear": 0.1, "zfar": 100.0}}],
    "buffers": [{"uri": "data.bin", "byteLength": 44}],
    "bufferViews": [
        {"buffer": 0, "byteOffset": 0, "byteLength": 6, "target": 34963},
        {"buffer": 0, "byteOffset": 8, "byteLength": 36, "target": 34962},
    ],
    "accessors": [
        {"bufferView": 0, "componentType": 5123, "count": 3, "type": "SCALAR", "max": [2], "min": [0]},
        {
            "bufferView": 1,
            "componentType": 5126,
            "count": 3,
            "type": "VEC3",
            "max": [1.0, 1.0, 0.0],
            "min": [0.0, 0.0, 0.0],
        },
        {"componentType": 5126, "count": 2, "type": "SCALAR", "max": [1.0], "min": [0.0]},
        {"componentType": 5126, "count": 2, "type": "VEC4"},
    ],
    "animations": [
        {
            "name": "spin",
            "channels": [{"sampler": 0, "target": {"node": 0, "path": "rotation"}}],
            "samplers": [{"input": 2, "output": 3}],
        }
    ],
}


@pytest.fixture
def sample():
    return copy.deepcopy(SAMPLE)


@pytest.fixture
def sample_bytes(sample):
    return json.dumps(sample).encode("utf-8")


@pytest.fixture
def minimal():
    return {"asset": {"version": "2.0"}}
