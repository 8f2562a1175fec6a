"""
Hack SDK Error Hierarchy
========================

This module defines the exception hierarchy shared by the whole toolchain.
All exceptions inherit from HackError, allowing callers to catch every
toolchain error with a single except clause if desired.

Exception Hierarchy
-------------------
HackError (base)
├── JackError (front end, see hack_sdk.jack.errors)
│   └── JackSyntaxError - structural parse errors
│       ├── UnexpectedTokenError - wrong token for the grammar rule
│       └── MissingTokenError - required symbol/keyword absent
├── TranslatorError (back end)
│   └── MalformedInstructionError - IR outside the fixed vocabulary
└── EmulatorError - assembly the reference CPU cannot run

Design Philosophy
-----------------
Each exception captures source location information (filename, line, column)
when applicable. Error messages follow this format:

    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class HackError(Exception):
    """
    Base exception for all Hack SDK errors.

    Callers can catch every toolchain error with a single except clause:

        try:
            compile_jack(source, "Main.jack")
        except HackError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Located Error Base
# =============================================================================

class LocatedError(HackError):
    """
    Error carrying an optional source location, hint and source line.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            Main.jack:4:13: error: expected ';'
                    let x = 1
                            ^
            hint: found '}'
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Translator Exceptions
# =============================================================================

class TranslatorError(LocatedError):
    """
    Base exception for errors raised while lowering IR to assembly.

    Well-formed IR never fails to translate; every subclass describes
    input that falls outside the instruction vocabulary.
    """
    pass


class MalformedInstructionError(TranslatorError):
    """
    An IR line uses an unknown mnemonic, segment, or operand.

    Examples:
        push constnt 3      (unknown segment)
        pop constant 0      (constant cannot be a destination)
        call Main.main      (missing argument count)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(
            message,
            location=location,
            hint=hint,
            source_line=source_line,
        )


# =============================================================================
# Emulator Exceptions
# =============================================================================

class EmulatorError(LocatedError):
    """
    Assembly text the reference CPU cannot load or execute.

    Raised for unknown computations, jumps or destinations, and for memory
    accesses outside RAM.
    """
    pass
