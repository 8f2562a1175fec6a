"""
Jack Compiler Error Hierarchy
=============================

This module defines the exceptions raised by the Jack front end.
All exceptions inherit from JackError, which itself inherits from
HackError for consistent error handling across the SDK.

Exception Hierarchy
-------------------
JackError (base for all Jack errors)
└── JackSyntaxError - structural parse errors
    ├── UnexpectedTokenError - token does not fit the grammar rule
    └── MissingTokenError - required token absent

Lenient Cases
-------------
The lexer never raises. An unterminated block comment swallows the rest of
the input, an unterminated string literal ends at the end of its line, and
characters outside the Jack alphabet are skipped. The symbol table never
raises either: redefining a name silently replaces the earlier entry.

Error Message Format
--------------------
    Main.jack:5:12: error: expected ';'
        let x = 1 }
                  ^
    hint: found '}'
"""

from typing import Optional

from hack_sdk.errors import LocatedError, SourceLocation


# =============================================================================
# Base Jack Exception
# =============================================================================

class JackError(LocatedError):
    """
    Base exception for all Jack compiler errors.

    Provides location tracking, source line context, and hints through
    LocatedError.
    """
    pass


# =============================================================================
# Structural Errors (Parser)
# =============================================================================

class JackSyntaxError(JackError):
    """
    Structural error in Jack source code.

    Raised when the code generator meets a token that cannot continue the
    production it is recognising. The first such error aborts compilation
    of the unit; there is no recovery.
    """
    pass


class UnexpectedTokenError(JackSyntaxError):
    """
    Unexpected token during parsing.

    Raised when a production can start with several tokens and the current
    one is none of them (for example a term starting with ';').
    """

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        hint = None
        if expected:
            hint = f"expected {expected}"

        super().__init__(
            f"unexpected token '{found}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingTokenError(JackSyntaxError):
    """
    Required token is missing.

    Raised when a fixed symbol, keyword or identifier (like ';' or the
    class name) is not found where the grammar requires it.
    """

    def __init__(
        self,
        expected: str,
        found: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        self.found = found
        super().__init__(
            f"expected {expected}",
            location=location,
            hint=f"found {found}" if found else None,
            source_line=source_line,
        )
