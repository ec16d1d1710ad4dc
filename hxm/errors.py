"""Exceptions raised by the HXM toolchain.

Every failure the assembler can report derives from :class:`CompilerError`, so
callers that only care about "did it compile" can catch that one class.
"""

from __future__ import annotations

from typing import Optional


class CompilerError(ValueError):
    """Base class for all assembly failures.

    ``line`` is the 0-based source line the error was detected on, or ``None``
    when the failure is not tied to a line (for example while building an
    image).
    """

    def __init__(self, message: str, *, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} (line {self.line})"


class InvalidMetadataEntry(CompilerError):
    """Raised when a metadata line names an unknown key."""


class InvalidOpcode(CompilerError):
    """Raised when a mnemonic is not in the opcode table."""


class InvalidParameterCount(CompilerError):
    """Raised when an instruction supplies the wrong number of arguments."""


class ValueFormatError(CompilerError):
    """Raised when a literal cannot be encoded as the requested value type."""


class InvalidResourceEntry(CompilerError):
    """Raised for malformed lines inside a RESOURCES block."""


class ImageBuildError(CompilerError):
    """Raised when a program does not fit the HXM image layout."""


class ImageFormatError(ValueError):
    """Raised when reading back a malformed HXM image."""


__all__ = [
    "CompilerError",
    "InvalidMetadataEntry",
    "InvalidOpcode",
    "InvalidParameterCount",
    "ValueFormatError",
    "InvalidResourceEntry",
    "ImageBuildError",
    "ImageFormatError",
]
