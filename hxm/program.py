"""In-memory representation of an assembled HXM program."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .errors import CompilerError, InvalidOpcode, InvalidParameterCount
from .opcodes import OPCODES, Schema, argument_types, schema_width


@dataclass(frozen=True)
class Instruction:
    """One encoded operation: a mnemonic plus its concatenated operand bytes."""

    mnemonic: str
    arguments: bytes = b""

    def __post_init__(self) -> None:
        if self.mnemonic not in OPCODES:
            raise InvalidOpcode(f'Op-code "{self.mnemonic}" not recognized.')
        object.__setattr__(self, "arguments", bytes(self.arguments))
        expected = schema_width(self.mnemonic)
        if len(self.arguments) != expected:
            raise InvalidParameterCount(
                f"The opcode {self.mnemonic} requires {expected} argument bytes, got {len(self.arguments)}"
            )

    @property
    def opcode(self) -> int:
        return OPCODES[self.mnemonic]

    @property
    def schema(self) -> Schema:
        return argument_types(self.mnemonic)


@dataclass
class Program:
    """The translation unit built by :func:`hxm.asm.assemble`.

    ``resources`` are addressed by position, ``instructions`` by program order.
    ``diagnostics`` holds the errors that were reported and skipped while
    error-tolerant mode was active.
    """

    title: str = ""
    author: str = ""
    version: str = ""
    description: str = ""
    copyright: str = ""
    resources: List[bytes] = field(default_factory=list)
    instructions: List[Instruction] = field(default_factory=list)
    diagnostics: List[CompilerError] = field(default_factory=list)


__all__ = ["Instruction", "Program"]
