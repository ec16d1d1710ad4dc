"""
hxm - HydroOS Executable Managed assembler.

Translates HXMASM source into HXM program images:

    values.py       → typed literal codec
    opcodes.py      → mnemonic/code table and operand schemas
    asm.py          → directive parser producing a Program
    image.py        → HXM image writer/reader
    disassemble.py  → image listing tool
    cli.py          → ``hxmasm`` command line driver
"""

from .errors import (  # noqa: F401
    CompilerError,
    ImageBuildError,
    ImageFormatError,
    InvalidMetadataEntry,
    InvalidOpcode,
    InvalidParameterCount,
    InvalidResourceEntry,
    ValueFormatError,
)
from .values import ValueType, byte_width, decode_value, encode_value, parse_binary_byte  # noqa: F401
from .opcodes import OPCODES, OPCODE_NAMES, argument_types  # noqa: F401
from .program import Instruction, Program  # noqa: F401
from .asm import AssemblerConfig, assemble  # noqa: F401
from .image import build_image, load_image, write_image  # noqa: F401

__all__ = [
    "CompilerError",
    "ImageBuildError",
    "ImageFormatError",
    "InvalidMetadataEntry",
    "InvalidOpcode",
    "InvalidParameterCount",
    "InvalidResourceEntry",
    "ValueFormatError",
    "ValueType",
    "byte_width",
    "decode_value",
    "encode_value",
    "parse_binary_byte",
    "OPCODES",
    "OPCODE_NAMES",
    "argument_types",
    "Instruction",
    "Program",
    "AssemblerConfig",
    "assemble",
    "build_image",
    "load_image",
    "write_image",
]

__version__ = "0.1.0"
