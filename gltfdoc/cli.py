"""
Command line front end.

Usage:
    gltfdoc path/to/model.gltf [-o report.txt] [--markdown | --validate | --reencode] [--json]
                               [--strict] [--always-emit] [--indent N] [--max-depth N] [--verbose]

For ``.glb`` containers only the JSON chunk is read; it is decoded like any
``.gltf`` file and the binary chunk is ignored.
"""
from __future__ import annotations

import argparse
import json
import logging
import struct
import sys
from pathlib import Path
from typing import List, Optional

from . import codec
from .document import Document
from .errors import GltfError, GltfSyntaxError
from .fields import EncodePolicy
from .report import build_json_data, build_report
from .validator import has_errors, validate

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_DECODE_FAILED = 2


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
    )


GLB_MAGIC = b"glTF"
GLB_CHUNK_JSON = b"JSON"


def glb_json_chunk(data: bytes) -> bytes:
    """Return the JSON chunk of a binary glTF container, without its padding."""
    if len(data) < 20 or data[:4] != GLB_MAGIC:
        raise GltfSyntaxError("not a binary glTF file")
    version, total_length = struct.unpack_from("<II", data, 4)
    if version != 2:
        raise GltfSyntaxError(f"unsupported GLB version: {version}")
    if total_length > len(data):
        raise GltfSyntaxError(f"GLB header declares {total_length} bytes, file has {len(data)}")
    chunk_length, chunk_type = struct.unpack_from("<I4s", data, 12)
    if chunk_type != GLB_CHUNK_JSON:
        raise GltfSyntaxError("first GLB chunk is not JSON")
    if 20 + chunk_length > total_length:
        raise GltfSyntaxError("GLB JSON chunk runs past the end of the file")
    # the chunk is padded to 4 bytes with spaces; some writers use NUL
    return data[20:20 + chunk_length].rstrip(b" \x00")


def read_document(path: Path) -> Document:
    data = path.read_bytes()
    if path.suffix.lower() == ".glb":
        data = glb_json_chunk(data)
    return codec.loads(data)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="gltfdoc", description="Decode, validate and summarize a glTF 2.0 file.")
    p.add_argument("input", help="Path to .gltf, .json or .glb")
    p.add_argument("-o", "--output", help="Write output to this file (otherwise prints to stdout)")
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--markdown", action="store_true", help="Emit a Markdown report instead of plain text")
    mode.add_argument("--validate", action="store_true", help="Print validation findings instead of a report")
    mode.add_argument("--reencode", action="store_true", help="Print the document re-encoded as glTF JSON")
    p.add_argument("--json", action="store_true",
                   help="Emit JSON: the report, or the findings with --validate (use with jq: '| jq .animations')")
    p.add_argument("--strict", action="store_true", help="Exit with status 1 when validation reports errors")
    p.add_argument("--always-emit", action="store_true",
                   help="When re-encoding, write defaulted properties even if equal to their default")
    p.add_argument("--indent", type=int, default=None, help="Indentation for JSON output")
    p.add_argument("--max-depth", type=int, default=3, help="Max depth when printing node hierarchy (default: 3)")
    p.add_argument("--verbose", action="store_true", help="Print extra info to stderr")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        doc = read_document(Path(args.input))
    except GltfError as e:
        sys.stderr.write(json.dumps(e.to_dict()) + "\n")
        return EXIT_DECODE_FAILED

    if args.verbose:
        sys.stderr.write(f"Loaded {args.input}: scenes={len(doc.scenes)}, nodes={len(doc.nodes)}, "
                         f"meshes={len(doc.meshes)}, skins={len(doc.skins)}, animations={len(doc.animations)}\n")

    findings = validate(doc) if (args.validate or args.strict) else []
    if args.verbose and findings:
        sys.stderr.write(f"Validation: {len(findings)} finding(s)\n")

    if args.validate:
        if args.json:
            output = json.dumps([f.to_dict() for f in findings], indent=args.indent)
        else:
            output = "\n".join(str(f) for f in findings) if findings else "No findings."
    elif args.reencode:
        policy = EncodePolicy.ALWAYS_EMIT if args.always_emit else EncodePolicy.OMIT_DEFAULTS
        options = codec.CodecOptions(policy=policy, indent=args.indent)
        output = codec.dumps(doc, options).decode("utf-8")
    elif args.json:
        output = json.dumps(build_json_data(doc), indent=2 if args.indent is None else args.indent)
    else:
        output = build_report(doc, markdown=args.markdown, max_depth=args.max_depth)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output)
        if args.verbose:
            sys.stderr.write(f"Wrote {args.output}\n")
    else:
        print(output)

    if args.strict and has_errors(findings):
        return EXIT_INVALID
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
