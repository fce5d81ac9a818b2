import json
import struct

import pygltflib
import pytest

from gltfdoc.cli import EXIT_DECODE_FAILED, EXIT_INVALID, EXIT_OK, glb_json_chunk, main

GLB_SOURCE = '{"asset":{"version":"2.0","copyright":"x"},"nodes":[{"name":"root"}],"scene":0,"scenes":[{"nodes":[0]}]}'


def pack_glb(text, binary=b"", magic=b"glTF", version=2):
    chunk = text.encode("utf-8")
    chunk += b" " * (-len(chunk) % 4)
    body = struct.pack("<I4s", len(chunk), b"JSON") + chunk
    if binary:
        binary += b"\x00" * (-len(binary) % 4)
        body += struct.pack("<I4s", len(binary), b"BIN\x00") + binary
    return struct.pack("<4sII", magic, version, 12 + len(body)) + body


@pytest.fixture
def sample_file(tmp_path, sample_bytes):
    path = tmp_path / "sample.gltf"
    path.write_bytes(sample_bytes)
    return path


@pytest.fixture
def broken_file(tmp_path, sample):
    sample["meshes"][0]["primitives"][0]["material"] = 5
    path = tmp_path / "broken.gltf"
    path.write_text(json.dumps(sample), encoding="utf-8")
    return path


def test_text_report(sample_file, capsys):
    assert main([str(sample_file)]) == EXIT_OK
    out = capsys.readouterr().out
    assert "MESHES" in out
    assert "triangle (primitives/material slots: 1)" in out


def test_json_report(sample_file, capsys):
    assert main([str(sample_file), "--json"]) == EXIT_OK
    data = json.loads(capsys.readouterr().out)
    assert data["scenes"][0]["name"] == "main"


def test_validate_clean(sample_file, capsys):
    assert main([str(sample_file), "--validate", "--strict"]) == EXIT_OK
    assert capsys.readouterr().out.strip() == "No findings."


def test_validate_reports_findings(broken_file, capsys):
    assert main([str(broken_file), "--validate"]) == EXIT_OK
    out = capsys.readouterr().out
    assert "meshes[0].primitives[0].material" in out
    assert "[IndexOutOfRange]" in out


def test_validate_json_output(broken_file, capsys):
    assert main([str(broken_file), "--validate", "--json"]) == EXIT_OK
    findings = json.loads(capsys.readouterr().out)
    assert findings == [
        {
            "fieldPath": "meshes[0].primitives[0].material",
            "severity": "error",
            "kind": "IndexOutOfRange",
            "message": "index 5 is out of range for materials (length 1)",
        }
    ]


def test_strict_fails_on_errors(broken_file, capsys):
    assert main([str(broken_file), "--validate", "--strict"]) == EXIT_INVALID
    assert main([str(broken_file), "--strict"]) == EXIT_INVALID


def test_decode_failure(tmp_path, capsys):
    path = tmp_path / "bad.gltf"
    path.write_text('{"asset": {"version": "2.0"}, "materials": [{"alphaMode": "GLASS"}]}', encoding="utf-8")
    assert main([str(path)]) == EXIT_DECODE_FAILED
    error = json.loads(capsys.readouterr().err)
    assert error["fieldPath"] == "materials[0].alphaMode"
    assert error["kind"] == "UnknownEnumValue"


def test_syntax_failure(tmp_path, capsys):
    path = tmp_path / "bad.gltf"
    path.write_bytes(b"{not json")
    assert main([str(path)]) == EXIT_DECODE_FAILED
    assert json.loads(capsys.readouterr().err)["kind"] == "SyntaxError"


def test_reencode(sample_file, capsys):
    assert main([str(sample_file), "--reencode"]) == EXIT_OK
    out = capsys.readouterr().out
    assert "wrapS" not in out
    assert json.loads(out)["samplers"] == [{"magFilter": 9729, "minFilter": 9987}]


def test_reencode_always_emit(sample_file, capsys):
    assert main([str(sample_file), "--reencode", "--always-emit", "--indent", "2"]) == EXIT_OK
    out = capsys.readouterr().out
    assert '\n  "asset": {' in out
    assert json.loads(out)["samplers"][0]["wrapS"] == 10497


def test_output_file(sample_file, tmp_path, capsys):
    target = tmp_path / "report.md"
    assert main([str(sample_file), "--markdown", "-o", str(target), "--verbose"]) == EXIT_OK
    assert target.read_text(encoding="utf-8").startswith("# glTF Report")
    err = capsys.readouterr().err
    assert "Loaded" in err
    assert "Wrote" in err


def test_modes_are_exclusive(sample_file):
    with pytest.raises(SystemExit):
        main([str(sample_file), "--validate", "--reencode"])


def test_glb_input(tmp_path, capsys):
    gltf = pygltflib.GLTF2(
        scene=0,
        scenes=[pygltflib.Scene(nodes=[0])],
        nodes=[pygltflib.Node(name="root")],
        buffers=[pygltflib.Buffer(byteLength=4)],
    )
    gltf.set_binary_blob(b"\x00\x00\x00\x00")
    path = tmp_path / "model.glb"
    gltf.save_binary(str(path))
    assert main([str(path), "--json"]) == EXIT_OK
    data = json.loads(capsys.readouterr().out)
    assert data["nodes"][0]["name"] == "root"


def test_glb_json_chunk_is_read_verbatim(tmp_path, capsys):
    path = tmp_path / "model.glb"
    path.write_bytes(pack_glb(GLB_SOURCE, binary=b"\x01\x02\x03"))
    assert main([str(path), "--json"]) == EXIT_OK
    data = json.loads(capsys.readouterr().out)
    assert data["file"]["generator"] is None
    assert main([str(path), "--reencode"]) == EXIT_OK
    assert json.loads(capsys.readouterr().out) == json.loads(GLB_SOURCE)


def test_glb_chunk_padding_is_stripped():
    data = pack_glb('{"asset":{"version":"2.0"}}')
    assert len(data) % 4 == 0
    assert glb_json_chunk(data) == b'{"asset":{"version":"2.0"}}'


@pytest.mark.parametrize(
    "data",
    [
        pack_glb(GLB_SOURCE, magic=b"gltf"),
        pack_glb(GLB_SOURCE, version=1),
        pack_glb(GLB_SOURCE)[:40],
        b"glTF",
    ],
)
def test_glb_bad_container(tmp_path, capsys, data):
    path = tmp_path / "bad.glb"
    path.write_bytes(data)
    assert main([str(path)]) == EXIT_DECODE_FAILED
    assert json.loads(capsys.readouterr().err)["kind"] == "SyntaxError"
