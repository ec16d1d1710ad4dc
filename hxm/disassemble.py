"""HXM image disassembler.

Decodes a compiled image with the shared opcode table and prints the metadata,
the embedded resources and one row per instruction.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from tabulate import tabulate

from .errors import ImageFormatError
from .image import INSTRUCTION_HEADER, load_image
from .program import Program
from .values import Value, byte_width, decode_value


def decode_operands(schema, arguments: bytes) -> List[Value]:
    values: List[Value] = []
    offset = 0
    for value_type in schema:
        width = byte_width(value_type)
        values.append(decode_value(value_type, arguments[offset:offset + width]))
        offset += width
    return values


def disassemble(program: Program) -> List[Dict[str, Any]]:
    """Return one record per instruction: index, byte offset in EXEC, operands."""

    listing = []
    offset = 0
    for index, instruction in enumerate(program.instructions):
        listing.append(
            {
                "index": index,
                "offset": offset,
                "opcode": instruction.opcode,
                "mnemonic": instruction.mnemonic,
                "operands": decode_operands(instruction.schema, instruction.arguments),
                "raw": instruction.arguments.hex(),
            }
        )
        offset += INSTRUCTION_HEADER.size + len(instruction.arguments)
    return listing


def _format_operand(value: Value) -> str:
    if isinstance(value, str):
        return repr(value)
    return str(value)


def format_listing(program: Program, listing: List[Dict[str, Any]]) -> str:
    lines = [
        f"; title={program.title!r} author={program.author!r} version={program.version!r}",
        f"; description={program.description!r} copyright={program.copyright!r}",
    ]
    if program.resources:
        lines.append("")
        rows = [[index, len(blob), blob.hex()] for index, blob in enumerate(program.resources)]
        lines.append(tabulate(rows, headers=["res", "size", "bytes"], tablefmt="github"))
    lines.append("")
    rows = [
        [
            inst["index"],
            f"0x{inst['offset']:04X}",
            f"0x{inst['opcode']:02X}",
            inst["mnemonic"],
            ", ".join(_format_operand(value) for value in inst["operands"]),
        ]
        for inst in listing
    ]
    lines.append(tabulate(rows, headers=["#", "offset", "op", "mnemonic", "operands"], tablefmt="github"))
    return "\n".join(lines)


def to_json(program: Program, listing: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "metadata": {
            "title": program.title,
            "author": program.author,
            "version": program.version,
            "description": program.description,
            "copyright": program.copyright,
        },
        "resources": [blob.hex() for blob in program.resources],
        "instructions": listing,
    }


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="HXM image disassembler")
    ap.add_argument("image", type=Path, help=".hxm image to disassemble")
    ap.add_argument("--json", action="store_true", help="emit JSON instead of a table")
    ap.add_argument(
        "--fix-version-field",
        action="store_true",
        help="read the version slot as written with --fix-version-field",
    )
    args = ap.parse_args(argv)

    try:
        program = load_image(args.image.read_bytes(), legacy_version_field=not args.fix_version_field)
    except (OSError, ImageFormatError) as exc:
        print(f"error: {exc}")
        return 1
    listing = disassemble(program)
    if args.json:
        print(json.dumps(to_json(program, listing), indent=2))
    else:
        print(format_listing(program, listing))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
