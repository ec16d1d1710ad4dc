"""HXM binary image writer and reader.

Layout (all multi-byte integers little-endian)::

    +---------------------------+--------------------+-----------+
    | Chunk                     | Size (bytes)       | Data type |
    +---------------------------+--------------------+-----------+
    | "HXM"                     | 3                  | char[]    |
    | Title length / title      | 1 / as specified   | u8 / str  |
    | Author length / author    | 1 / as specified   | u8 / str  |
    | Description length / text | 2 / as specified   | u16 / str |
    | Version length / text     | 1 / as specified   | u8 / str  |
    | Copyright length / text   | 1 / as specified   | u8 / str  |
    | "RES" + resource count    | 3 + 2              | u16       |
    |   resource size / data    | 2 / as specified   | u16 / any |
    | "EXEC"                    | 4                  | char[]    |
    |   opcode                  | 1                  | u8        |
    |   schema entry count      | 2                  | u16       |
    |   operand bytes           | schema width       | any       |
    +---------------------------+--------------------+-----------+

Images written by the first HXM compiler store the *author* bytes under the
version length prefix. ``legacy_version_field=True`` (the default) keeps that
behaviour so the output stays byte-compatible with existing loaders.
"""

from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import Union

from .errors import ImageBuildError, ImageFormatError
from .opcodes import OPCODE_NAMES, argument_types, schema_width
from .program import Instruction, Program

_LOGGER = logging.getLogger("hxm.image")

SIGNATURE = b"HXM"
RESOURCE_SIGNATURE = b"RES"
EXEC_SIGNATURE = b"EXEC"

U8 = struct.Struct("<B")
U16 = struct.Struct("<H")
INSTRUCTION_HEADER = struct.Struct("<BH")


def _ascii(name: str, text: str) -> bytes:
    try:
        return text.encode("ascii")
    except UnicodeEncodeError as exc:
        raise ImageBuildError(f"{name} must be ASCII text") from exc


def _pack_length(name: str, field: struct.Struct, length: int) -> bytes:
    try:
        return field.pack(length)
    except struct.error as exc:
        limit = (1 << (field.size * 8)) - 1
        raise ImageBuildError(f"{name} length {length} exceeds the field limit of {limit}") from exc


def build_image(program: Program, *, legacy_version_field: bool = True) -> bytes:
    """Serialise ``program`` into an HXM image.

    Raises :class:`ImageBuildError` when a metadata string is not ASCII or any
    string, resource or count does not fit its length field.
    """

    title = _ascii("title", program.title)
    author = _ascii("author", program.author)
    description = _ascii("description", program.description)
    version = _ascii("version", program.version)
    copyright_text = _ascii("copyright", program.copyright)

    build = bytearray(SIGNATURE)
    build += _pack_length("title", U8, len(title)) + title
    build += _pack_length("author", U8, len(author)) + author
    build += _pack_length("description", U16, len(description)) + description
    build += _pack_length("version", U8, len(version))
    if legacy_version_field:
        if version and version != author:
            _LOGGER.warning("legacy version field: version %r is written as the author bytes", program.version)
        build += author
    else:
        build += version
    build += _pack_length("copyright", U8, len(copyright_text)) + copyright_text

    build += RESOURCE_SIGNATURE
    build += _pack_length("resource count", U16, len(program.resources))
    for index, resource in enumerate(program.resources):
        build += _pack_length(f"resource #{index}", U16, len(resource))
        build += resource

    build += EXEC_SIGNATURE
    for instruction in program.instructions:
        build += INSTRUCTION_HEADER.pack(instruction.opcode, len(instruction.schema))
        build += instruction.arguments

    _LOGGER.debug(
        "built image: %d bytes, %d resources, %d instructions",
        len(build),
        len(program.resources),
        len(program.instructions),
    )
    return bytes(build)


def write_image(out_path: Union[str, Path], program: Program, *, legacy_version_field: bool = True) -> int:
    data = build_image(program, legacy_version_field=legacy_version_field)
    with open(out_path, "wb") as f:
        f.write(data)
    return len(data)


class _ImageReader:
    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)
        self.offset = 0

    def at_end(self) -> bool:
        return self.offset >= len(self.data)

    def take(self, size: int, what: str) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise ImageFormatError(f"{what} at offset {self.offset} exceeds image length {len(self.data)}")
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def unpack(self, field: struct.Struct, what: str) -> int:
        return field.unpack(self.take(field.size, what))[0]

    def expect(self, signature: bytes, what: str) -> None:
        found = self.take(len(signature), what)
        if found != signature:
            raise ImageFormatError(f"Bad {what}: expected {signature!r}, found {found!r}")

    def text(self, field: struct.Struct, what: str) -> str:
        length = self.unpack(field, f"{what} length")
        return self.take(length, what).decode("latin-1")


def load_image(data: bytes, *, legacy_version_field: bool = True) -> Program:
    """Parse an HXM image back into a :class:`Program`.

    Operand blob sizes come from the opcode schema table, and the stored
    schema entry count must agree with it. In legacy mode the version slot
    holds the author bytes, so ``version`` is returned empty.
    """

    reader = _ImageReader(data)
    reader.expect(SIGNATURE, "HXM signature")
    program = Program()
    program.title = reader.text(U8, "title")
    program.author = reader.text(U8, "author")
    program.description = reader.text(U16, "description")
    if legacy_version_field:
        reader.unpack(U8, "version length")
        reader.take(len(program.author), "version")
    else:
        program.version = reader.text(U8, "version")
    program.copyright = reader.text(U8, "copyright")

    reader.expect(RESOURCE_SIGNATURE, "resource signature")
    count = reader.unpack(U16, "resource count")
    for index in range(count):
        size = reader.unpack(U16, f"resource #{index} size")
        program.resources.append(reader.take(size, f"resource #{index}"))

    reader.expect(EXEC_SIGNATURE, "executable signature")
    while not reader.at_end():
        start = reader.offset
        opcode = reader.unpack(U8, "opcode")
        mnemonic = OPCODE_NAMES.get(opcode)
        if mnemonic is None:
            raise ImageFormatError(f"Unknown opcode 0x{opcode:02X} at offset {start}")
        entries = reader.unpack(U16, f"{mnemonic} argument count")
        expected = len(argument_types(mnemonic))
        if entries != expected:
            raise ImageFormatError(
                f"{mnemonic} at offset {start} declares {entries} arguments, schema has {expected}"
            )
        arguments = reader.take(schema_width(mnemonic), f"{mnemonic} arguments")
        program.instructions.append(Instruction(mnemonic, arguments))
    return program


__all__ = [
    "SIGNATURE",
    "RESOURCE_SIGNATURE",
    "EXEC_SIGNATURE",
    "build_image",
    "write_image",
    "load_image",
]
