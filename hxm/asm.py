"""HXMASM directive parser.

Turns source lines into a :class:`~hxm.program.Program` in a single forward
pass. Each line is one of:

* a metadata entry (``#KEY: value``),
* the start of a ``RESOURCES`` ... ``END`` block of ``TYPE:VALUE`` entries,
* an instruction (``mnemonic arg, arg, ...``).

Operands are encoded through the opcode schema table, so the parser holds no
per-opcode logic of its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from functools import partial
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .errors import (
    CompilerError,
    InvalidMetadataEntry,
    InvalidOpcode,
    InvalidParameterCount,
    InvalidResourceEntry,
)
from .opcodes import OPCODES, argument_types
from .program import Instruction, Program
from .values import ValueType, encode_binary_byte, encode_string, encode_value

_LOGGER = logging.getLogger("hxm.asm")

RESOURCE_BLOCK_START = "RESOURCES"
RESOURCE_BLOCK_END = "END"

_METADATA_FIELDS = {
    "TITLE": "title",
    "AUTHOR": "author",
    "VERSION": "version",
    "DESCRIPTION": "description",
    "COPYRIGHT": "copyright",
}
_IGNORE_ERRORS_KEYS = frozenset({"IGNORE_COMPILER_ERRORS", "IGNORECOMPILERERRORS"})
_ENABLE_ERRORS_KEYS = frozenset({"ENABLE_COMPILER_ERRORS", "ENABLECOMPILERERRORS"})

_RESOURCE_ENCODERS: Dict[str, Callable[[str], bytes]] = {
    "STRING": encode_string,
    "STR": encode_string,
    "INT": partial(encode_value, ValueType.INT),
    "INTEGER": partial(encode_value, ValueType.INT),
    "INT32": partial(encode_value, ValueType.INT),
    "LONG": partial(encode_value, ValueType.LONG),
    "INT64": partial(encode_value, ValueType.LONG),
    "SHORT": partial(encode_value, ValueType.SHORT),
    "INT16": partial(encode_value, ValueType.SHORT),
    "UINT": partial(encode_value, ValueType.UINT),
    "UINTEGER": partial(encode_value, ValueType.UINT),
    "UINT32": partial(encode_value, ValueType.UINT),
    "ULONG": partial(encode_value, ValueType.ULONG),
    "UINT64": partial(encode_value, ValueType.ULONG),
    "USHORT": partial(encode_value, ValueType.USHORT),
    "UINT16": partial(encode_value, ValueType.USHORT),
    # binary digits, e.g. BYTE:0000 0001
    "BYTE": encode_binary_byte,
}


@dataclass
class AssemblerConfig:
    comment_prefix: str = "//"
    metadata_prefix: str = "#"
    ignore_errors: bool = False
    verbose: bool = False

    def __post_init__(self) -> None:
        if not self.comment_prefix:
            raise ValueError("comment_prefix cannot be empty")
        if not self.metadata_prefix:
            raise ValueError("metadata_prefix cannot be empty")


def strip_comment(line: str, prefix: str) -> str:
    """Cut ``line`` at the first ``prefix`` that is not at column 0."""

    index = line.find(prefix)
    if index > 0:
        return line[:index]
    return line


def split_instruction(line: str) -> Tuple[str, List[str]]:
    """Split ``mnemonic a, b, c`` into the mnemonic and its argument literals."""

    parts = line.strip().split(None, 1)
    mnemonic = parts[0]
    rest = parts[1].strip() if len(parts) > 1 else ""
    if not rest:
        return mnemonic, []
    return mnemonic, [arg.strip() for arg in rest.split(",")]


def encode_instruction(mnemonic: str, args: List[str]) -> Instruction:
    if mnemonic not in OPCODES:
        raise InvalidOpcode(f'Op-code "{mnemonic}" not recognized.')
    arg_types = argument_types(mnemonic)
    if len(args) != len(arg_types):
        raise InvalidParameterCount(
            f"The opcode {mnemonic} requires {len(arg_types)} arguments, while {len(args)} were provided"
        )
    blob = b"".join(encode_value(arg_type, arg) for arg_type, arg in zip(arg_types, args))
    return Instruction(mnemonic, blob)


def encode_resource(entry: str) -> bytes:
    """Encode one ``TYPE:VALUE`` line of a resource block."""

    entry = entry.lstrip()
    if ":" not in entry:
        raise InvalidResourceEntry(f"Resource entry '{entry}' must look like TYPE:VALUE")
    kind, *fields = entry.split(":")
    encoder = _RESOURCE_ENCODERS.get(kind.strip().upper())
    if encoder is None:
        raise InvalidResourceEntry(f"Resource type '{kind.strip()}' is invalid.")
    if encoder is encode_string:
        # string fields are glued back together without their colons
        return encoder("".join(fields))
    return encoder(fields[0])


def assemble(
    lines: Iterable[str],
    config: Optional[AssemblerConfig] = None,
    **overrides,
) -> Program:
    """Assemble HXMASM source lines into a :class:`Program`.

    ``overrides`` replace individual :class:`AssemblerConfig` fields. With
    ``ignore_errors`` off the first :class:`CompilerError` is raised with its
    0-based ``line`` set; with it on, the offending line is dropped, the error
    logged and appended to ``Program.diagnostics``. ``#IGNORE_COMPILER_ERRORS``
    and ``#ENABLE_COMPILER_ERRORS`` switch the mode for the rest of the pass.
    """

    config = replace(config or AssemblerConfig(), **overrides)
    source = [raw.rstrip("\r\n") for raw in lines]
    program = Program()
    ignore_errors = config.ignore_errors

    def debug(msg: str, *args) -> None:
        if config.verbose:
            _LOGGER.debug(msg, *args)

    def fail(error: CompilerError, line_no: int) -> None:
        if error.line is None:
            error.line = line_no
        if not ignore_errors:
            raise error
        _LOGGER.warning("Ignoring error: %s", error)
        program.diagnostics.append(error)

    def parse_metadata(line: str) -> None:
        nonlocal ignore_errors
        key, _, value = line[len(config.metadata_prefix):].partition(":")
        key = key.strip().upper()
        attr = _METADATA_FIELDS.get(key)
        if attr is not None:
            setattr(program, attr, value.lstrip())
        elif key in _IGNORE_ERRORS_KEYS:
            _LOGGER.warning("Compiler errors will now be ignored.")
            ignore_errors = True
        elif key in _ENABLE_ERRORS_KEYS:
            _LOGGER.info("Compiler errors are no longer ignored.")
            ignore_errors = False
        else:
            raise InvalidMetadataEntry(f'Metadata entry "{key}" is invalid.')

    def embed_resources(start: int) -> int:
        debug("Embedding resources, block started at line %d", start)
        index = start + 1
        while index < len(source):
            raw = source[index]
            stripped = raw.strip()
            if strip_comment(stripped, config.comment_prefix).strip().upper() == RESOURCE_BLOCK_END:
                debug("Resource block ended at line %d", index)
                return index
            if stripped and not stripped.startswith(config.comment_prefix):
                try:
                    program.resources.append(encode_resource(raw))
                    debug("Resource #%d embedded from line %d", len(program.resources) - 1, index)
                except CompilerError as exc:
                    fail(exc, index)
            index += 1
        fail(InvalidResourceEntry("Resource block is never closed with END"), start)
        return index

    debug("Assembling %d lines", len(source))
    index = 0
    while index < len(source):
        # metadata values keep their trailing whitespace
        text = strip_comment(source[index], config.comment_prefix).lstrip()
        line = text.rstrip()
        if not line or line.startswith(config.comment_prefix):
            index += 1
            continue
        try:
            if line.startswith(config.metadata_prefix):
                debug("Metadata entry on line %d", index)
                parse_metadata(text)
            elif line.upper().startswith(RESOURCE_BLOCK_START):
                index = embed_resources(index)
            else:
                mnemonic, args = split_instruction(line)
                debug("Compiling opcode %s on line %d", mnemonic, index)
                program.instructions.append(encode_instruction(mnemonic, args))
        except CompilerError as exc:
            fail(exc, index)
        index += 1

    debug(
        "Assembled %d instructions, %d resources",
        len(program.instructions),
        len(program.resources),
    )
    return program


__all__ = [
    "AssemblerConfig",
    "RESOURCE_BLOCK_START",
    "RESOURCE_BLOCK_END",
    "assemble",
    "encode_instruction",
    "encode_resource",
    "split_instruction",
    "strip_comment",
]
