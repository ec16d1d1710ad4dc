"""Shared opcode definitions for the HXM toolchain.

The numeric code of every mnemonic is spelled out in ``OPCODE_LIST`` instead of
being derived from declaration order, so editing this file can never silently
renumber an opcode and break images that are already deployed. The assembler,
the image reader and the disassembler all import these tables unchanged.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Tuple

from .values import ValueType, byte_width

Schema = Tuple[ValueType, ...]

# Ordered list so docs and tooling can iterate in a stable order.
OPCODE_LIST: Tuple[Tuple[str, int], ...] = (
    ("syscall", 0x00),
    ("var", 0x01),
    ("subvar", 0x02),
    ("addvar", 0x03),
    ("mulvar", 0x04),
    ("divvar", 0x05),
    ("setvar", 0x06),
    ("setacc", 0x07),
    ("subacc", 0x08),
    ("addacc", 0x09),
    ("mulacc", 0x0A),
    ("divacc", 0x0B),
    ("jmp", 0x0C),
    ("jmpvar", 0x0D),
    ("delvar", 0x0E),
    ("jmpequ", 0x0F),
    ("jmpneq", 0x10),
    ("jmpg", 0x11),
    ("jmpge", 0x12),
    ("jmpl", 0x13),
    ("jmple", 0x14),
    ("jmpequvar", 0x15),
    ("jmpneqvar", 0x16),
    ("jmpgvar", 0x17),
    ("jmpgevar", 0x18),
    ("jmplvar", 0x19),
    ("jmplevar", 0x1A),
    ("inc", 0x1B),
    ("incvar", 0x1C),
    ("dec", 0x1D),
    ("decvar", 0x1E),
    ("varcpy", 0x1F),
    ("noop", 0x20),
    ("andvar", 0x21),
    ("and", 0x22),
    ("andaccvar", 0x23),
    ("orvar", 0x24),
    ("or", 0x25),
    ("oraccvar", 0x26),
    ("xorvar", 0x27),
    ("xor", 0x28),
    ("xoraccvar", 0x29),
    ("lshiftvar", 0x2A),
    ("lshift", 0x2B),
    ("lshiftaccvar", 0x2C),
    ("rshiftvar", 0x2D),
    ("rshift", 0x2E),
    ("rshiftaccvar", 0x2F),
    ("notvar", 0x30),
    ("not", 0x31),
    ("notaccvar", 0x32),
    ("syscallret", 0x33),
    ("syscallacc", 0x34),
    ("wait", 0x35),
    ("waitvar", 0x36),
    ("end", 0x37),
    ("endequ", 0x38),
    ("endneq", 0x39),
    ("endg", 0x3A),
    ("endge", 0x3B),
    ("endl", 0x3C),
    ("endle", 0x3D),
    ("endequvar", 0x3E),
    ("endneqvar", 0x3F),
    ("endgvar", 0x40),
    ("endgevar", 0x41),
    ("endlvar", 0x42),
    ("endlevar", 0x43),
    ("mod", 0x44),
    ("modvar", 0x45),
    ("modacc", 0x46),
    ("modacco", 0x47),
    ("syscallvar", 0x48),
    ("scaappend", 0x49),
    ("scaappendacc", 0x4A),
    ("scaclear", 0x4B),
    ("varappend", 0x4C),
    ("changeacc", 0x4D),
    ("changevar", 0x4E),
    ("varappendb", 0x4F),
    ("appendacc", 0x50),
    ("appendaccvar", 0x51),
    ("varappendacc", 0x52),
    ("popstack", 0x53),
    ("pushstack", 0x54),
    ("popstackvar", 0x55),
    ("pushstackvar", 0x56),
    ("initstack", 0x57),
    ("unloadstack", 0x58),
    ("delayjmp", 0x59),
    ("delayjmpvar", 0x5A),
    ("lipk", 0x5B),
    ("lipkvar", 0x5C),
    ("prev", 0x5D),
    ("back", 0x5E),
    ("backvar", 0x5F),
    ("setaccbyte", 0x60),
    ("setaccbytevar", 0x61),
    ("setvarbyte", 0x62),
    ("setvarbytevar", 0x63),
    ("setbyteconstpos", 0x64),
    ("setbyteconstval", 0x65),
    ("resetacc", 0x66),
    ("trimacc", 0x67),
    ("trimaccvar", 0x68),
    ("skipacc", 0x69),
    ("skipaccvar", 0x6A),
    ("trimvar", 0x6B),
    ("trimvarvar", 0x6C),
    ("skipvar", 0x6D),
    ("skipvarvar", 0x6E),
    ("loadres", 0x6F),
    ("loadresvar", 0x70),
    ("f2xm1", 0x71),
    ("f2xm1var", 0x72),
    ("f2xm1acc", 0x73),
    ("fabs", 0x74),
    ("fabsvar", 0x75),
    ("fabsacc", 0x76),
    ("frndint", 0x77),
    ("frndintvar", 0x78),
    ("frndintacc", 0x79),
    ("fadd", 0x7A),
    ("fsub", 0x7B),
    ("fmul", 0x7C),
    ("fdiv", 0x7D),
    ("fsqrt", 0x7E),
    ("fchs", 0x7F),
    ("fchscpy", 0x80),
    ("ftan", 0x81),
    ("fpatan", 0x82),
    ("fjmpequ", 0x83),
    ("fjmpneq", 0x84),
    ("fjmpg", 0x85),
    ("fjmpge", 0x86),
    ("fjmpl", 0x87),
    ("fjmple", 0x88),
    ("fjmpequvar", 0x89),
    ("fjmpneqvar", 0x8A),
    ("fjmpgvar", 0x8B),
    ("fjmpgevar", 0x8C),
    ("fjmplvar", 0x8D),
    ("fjmplevar", 0x8E),
)

OPCODES: Dict[str, int] = {mnemonic: opcode for mnemonic, opcode in OPCODE_LIST}
OPCODE_NAMES: Dict[int, str] = {opcode: mnemonic for mnemonic, opcode in OPCODE_LIST}

_U = ValueType.UINT
_US = ValueType.USHORT
_B = ValueType.BYTE

NO_ARGS: Schema = ()
ONE_VAR: Schema = (_U,)
TWO_VARS: Schema = (_U, _U)
JMP_PARAMS: Schema = (_U, _U, _U)

# Operand types per mnemonic. Opcodes without operands are not listed.
OPCODE_ARGUMENTS: Mapping[str, Schema] = MappingProxyType({
    "syscall": (_US,),
    "var": ONE_VAR,
    "subvar": ONE_VAR,
    "addvar": ONE_VAR,
    "mulvar": ONE_VAR,
    "divvar": ONE_VAR,
    "setvar": ONE_VAR,
    "setacc": ONE_VAR,
    "subacc": ONE_VAR,
    "addacc": ONE_VAR,
    "mulacc": ONE_VAR,
    "divacc": ONE_VAR,
    "jmpvar": ONE_VAR,
    "delvar": ONE_VAR,

    "jmpequ": TWO_VARS,
    "jmpneq": TWO_VARS,
    "jmpg": TWO_VARS,
    "jmpge": TWO_VARS,
    "jmpl": TWO_VARS,
    "jmple": TWO_VARS,

    "jmpequvar": JMP_PARAMS,
    "jmpneqvar": JMP_PARAMS,
    "jmpgvar": JMP_PARAMS,
    "jmpgevar": JMP_PARAMS,
    "jmplvar": JMP_PARAMS,
    "jmplevar": JMP_PARAMS,

    "incvar": ONE_VAR,
    "decvar": ONE_VAR,
    "varcpy": TWO_VARS,

    "andvar": TWO_VARS,
    "and": ONE_VAR,
    "orvar": TWO_VARS,
    "or": ONE_VAR,
    "xorvar": TWO_VARS,
    "xor": ONE_VAR,

    "lshiftvar": TWO_VARS,
    "lshift": ONE_VAR,
    "lshiftaccvar": ONE_VAR,
    "rshiftvar": TWO_VARS,
    "rshift": ONE_VAR,
    "rshiftaccvar": ONE_VAR,

    "notvar": TWO_VARS,
    "not": ONE_VAR,
    "notaccvar": ONE_VAR,

    "syscallret": (_US, _U),
    "syscallacc": (_US,),

    "waitvar": ONE_VAR,

    "endequ": ONE_VAR,
    "endneq": ONE_VAR,
    "endg": ONE_VAR,
    "endge": ONE_VAR,
    "endl": ONE_VAR,
    "endle": ONE_VAR,

    "endequvar": TWO_VARS,
    "endneqvar": TWO_VARS,
    "endgvar": TWO_VARS,
    "endgevar": TWO_VARS,
    "endlvar": TWO_VARS,
    "endlevar": TWO_VARS,

    "mod": TWO_VARS,
    "modvar": (_U, _U, _U),
    "modacc": TWO_VARS,
    "modacco": ONE_VAR,

    "syscallvar": ONE_VAR,
    "scaappend": ONE_VAR,

    "varappend": ONE_VAR,
    "changeacc": (_B,),
    "changevar": (_B,),
    "varappendb": (_B,),

    "appendacc": ONE_VAR,
    "appendaccvar": ONE_VAR,
    "varappendacc": ONE_VAR,

    "popstackvar": ONE_VAR,
    "pushstackvar": ONE_VAR,

    "delayjmpvar": ONE_VAR,
    "lipkvar": ONE_VAR,
    "backvar": ONE_VAR,

    "setaccbyte": (_US, _B),
    "setaccbytevar": TWO_VARS,
    "setvarbyte": (_US, _B),
    "setvarbytevar": TWO_VARS,
    "setbyteconstval": (_U, _B),
    "setbyteconstpos": (_US, _U),

    "trimacc": (_US,),
    "trimaccvar": ONE_VAR,
    "skipacc": (_US,),
    "skipaccvar": ONE_VAR,
    "trimvar": (_US,),
    "trimvarvar": ONE_VAR,
    "skipvar": (_US,),
    "skipvarvar": ONE_VAR,

    "loadres": (_US,),
    "loadresvar": (_US, _U),

    # floating point
    "f2xm1": ONE_VAR,
    "f2xm1var": TWO_VARS,
    "f2xm1acc": ONE_VAR,
    "fabs": ONE_VAR,
    "fabsvar": TWO_VARS,
    "fabsacc": ONE_VAR,
    "frndint": ONE_VAR,
    "frndintvar": TWO_VARS,
    "frndintacc": ONE_VAR,
    "fadd": ONE_VAR,
    "fsub": ONE_VAR,
    "fmul": ONE_VAR,
    "fdiv": ONE_VAR,
    "fsqrt": ONE_VAR,
    "fchs": ONE_VAR,
    "fchscpy": ONE_VAR,
    "ftan": ONE_VAR,
    "fpatan": ONE_VAR,

    "fjmpequ": JMP_PARAMS,
    "fjmpneq": JMP_PARAMS,
    "fjmpg": JMP_PARAMS,
    "fjmpge": JMP_PARAMS,
    "fjmpl": JMP_PARAMS,
    "fjmple": JMP_PARAMS,
    "fjmpequvar": JMP_PARAMS,
    "fjmpneqvar": JMP_PARAMS,
    "fjmpgvar": JMP_PARAMS,
    "fjmpgevar": JMP_PARAMS,
    "fjmplvar": JMP_PARAMS,
    "fjmplevar": JMP_PARAMS,
})

__all__ = [
    "OPCODE_LIST",
    "OPCODES",
    "OPCODE_NAMES",
    "OPCODE_ARGUMENTS",
    "Schema",
    "argument_types",
    "schema_width",
]


def argument_types(mnemonic: str) -> Schema:
    """Return the operand types of ``mnemonic``; empty when it takes none."""

    return OPCODE_ARGUMENTS.get(mnemonic, NO_ARGS)


def schema_width(mnemonic: str) -> int:
    """Total encoded size of the operands of ``mnemonic``."""

    return sum(byte_width(value_type) for value_type in argument_types(mnemonic))
