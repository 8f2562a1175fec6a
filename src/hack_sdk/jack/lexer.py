"""
Jack Lexer (Tokenizer)
======================

This module implements the lexer for the Jack language. It converts source
text into a finite, randomly addressable sequence of tokens for the code
generator.

Token Categories
----------------
- Keywords: class, method, function, constructor, let, do, if, ...
- Symbols: { } ( ) [ ] . , ; + - * / & | < > = ~  (all single-character)
- Identifiers: letter or underscore, then letters, digits, underscores
- Integer constants: maximal runs of decimal digits
- String constants: "double quoted", never spanning lines

Comments
--------
- Single-line: // comment
- Multi-line: /* comment */ (also /** doc comments */)

Lenient Cases
-------------
None of these raise; they are part of the documented contract:

- A block comment with no closing */ consumes the rest of the input.
- A string literal with no closing quote ends at the end of its line; the
  newline itself is not part of the string.
- Characters outside the Jack alphabet (such as '@' or '#') are skipped.
- Integer constants are not range checked. The value is carried as a
  Python int and passed through to the IR unchanged.

Example Usage
-------------
>>> from hack_sdk.jack.lexer import tokenize
>>> stream = tokenize('class Main { }', "Main.jack")
>>> [str(t) for t in stream]
['class', 'Main', '{', '}']
"""

from dataclasses import dataclass
from enum import Enum, auto
from itertools import islice
from typing import Iterator, Optional, Union
import string

from hack_sdk.errors import SourceLocation


# =============================================================================
# Token Type Enumeration
# =============================================================================

class JackTokenType(Enum):
    """Lexical categories of the Jack language."""

    KEYWORD = auto()
    SYMBOL = auto()
    IDENTIFIER = auto()
    INT_CONST = auto()
    STRING_CONST = auto()
    EOF = auto()


class Keyword(Enum):
    """
    The fixed Jack keyword set.

    The enum value is the keyword's spelling in source text.
    """

    CLASS = "class"
    CONSTRUCTOR = "constructor"
    FUNCTION = "function"
    METHOD = "method"
    FIELD = "field"
    STATIC = "static"
    VAR = "var"
    INT = "int"
    CHAR = "char"
    BOOLEAN = "boolean"
    VOID = "void"
    TRUE = "true"
    FALSE = "false"
    NULL = "null"
    THIS = "this"
    LET = "let"
    DO = "do"
    IF = "if"
    ELSE = "else"
    WHILE = "while"
    RETURN = "return"


# Map keyword strings to their enumerators
KEYWORDS: dict[str, Keyword] = {kw.value: kw for kw in Keyword}

# The complete single-character symbol set
SYMBOLS = frozenset("{}()[].,;+-*/&|<>=~")


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class JackToken:
    """
    A single token from Jack source code.

    Attributes:
        type: The JackTokenType classification
        value: Keyword enumerator, symbol character, identifier text,
               integer value, or string contents
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: JackTokenType
    value: Union[Keyword, str, int, None]
    line: int
    column: int
    filename: str

    def __str__(self) -> str:
        """Source-like spelling, used in error messages."""
        if self.type == JackTokenType.KEYWORD:
            return self.value.value
        if self.type == JackTokenType.STRING_CONST:
            return f'"{self.value}"'
        if self.type == JackTokenType.EOF:
            return "end of input"
        return str(self.value)

    def __repr__(self) -> str:
        if self.value is None:
            return f"Token({self.type.name}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {str(self)!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def is_symbol(self, *chars: str) -> bool:
        """Return True if this is one of the given symbols."""
        return self.type == JackTokenType.SYMBOL and self.value in chars

    def is_keyword(self, *keywords: Keyword) -> bool:
        """Return True if this is one of the given keywords."""
        return self.type == JackTokenType.KEYWORD and self.value in keywords


# =============================================================================
# Lexer Implementation
# =============================================================================

class JackLexer:
    """
    Tokenizes Jack source code.

    The lexer is a pure transformation from text to tokens: it performs no
    I/O and never raises.

    Usage:
        lexer = JackLexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    IDENT_START = string.ascii_letters + "_"
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = 1
        self._column = 1

    def tokenize(self) -> Iterator[JackToken]:
        """
        Generate tokens from the source code.

        Yields:
            JackToken objects, always ending with a single EOF token
        """
        while True:
            self._skip_trivia()
            if self._at_end():
                break

            token = self._scan_token()
            if token is not None:
                yield token

        yield JackToken(JackTokenType.EOF, None, self._line, self._column, self.filename)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """Character at current position + offset, or '' past the end."""
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume the current character, tracking line and column."""
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1

        return char

    def _make_token(
        self,
        token_type: JackTokenType,
        value: Union[Keyword, str, int],
        line: int,
        column: int,
    ) -> JackToken:
        return JackToken(token_type, value, line, column, self.filename)

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_trivia(self) -> None:
        """Skip whitespace and both comment forms."""
        while not self._at_end():
            char = self._peek()

            if char.isspace():
                self._advance()
                continue

            if char == "/" and self._peek(1) == "/":
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
                continue

            if char == "/" and self._peek(1) == "*":
                self._skip_block_comment()
                continue

            break

    def _skip_block_comment(self) -> None:
        """
        Skip a /* ... */ comment.

        With no closing delimiter the rest of the input is consumed.
        """
        self._advance()
        self._advance()

        while not self._at_end():
            if self._peek() == "*" and self._peek(1) == "/":
                self._advance()
                self._advance()
                return
            self._advance()

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Optional[JackToken]:
        """
        Scan the next token from source.

        Returns:
            The next JackToken, or None if an unknown character was skipped
        """
        line, column = self._line, self._column
        char = self._peek()

        if char in SYMBOLS:
            self._advance()
            return self._make_token(JackTokenType.SYMBOL, char, line, column)

        if char == '"':
            return self._scan_string(line, column)

        if char in string.digits:
            return self._scan_integer(line, column)

        if char in self.IDENT_START:
            return self._scan_identifier(line, column)

        self._advance()
        return None

    def _scan_identifier(self, line: int, column: int) -> JackToken:
        """Scan an identifier, classifying it as a keyword when it is one."""
        chars = []
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())

        name = "".join(chars)
        if name in KEYWORDS:
            return self._make_token(JackTokenType.KEYWORD, KEYWORDS[name], line, column)
        return self._make_token(JackTokenType.IDENTIFIER, name, line, column)

    def _scan_integer(self, line: int, column: int) -> JackToken:
        """Scan a maximal run of decimal digits."""
        chars = []
        while self._peek() and self._peek() in string.digits:
            chars.append(self._advance())
        return self._make_token(JackTokenType.INT_CONST, int("".join(chars)), line, column)

    def _scan_string(self, line: int, column: int) -> JackToken:
        """
        Scan a string constant.

        Ends at the closing quote or, when there is none, just before the
        end of the line.
        """
        self._advance()

        chars = []
        while not self._at_end() and self._peek() not in ('"', "\n"):
            chars.append(self._advance())

        if self._peek() == '"':
            self._advance()

        return self._make_token(JackTokenType.STRING_CONST, "".join(chars), line, column)


# =============================================================================
# Token Stream
# =============================================================================

class TokenStream:
    """
    Random-access token sequence with one token of lookahead.

    The stream never yields the trailing EOF token from iteration or len();
    `current` returns it once the real tokens are exhausted so the code
    generator can report "found end of input".

    Attributes:
        filename: Source file the tokens came from
        source_lines: Original source lines for error context
    """

    def __init__(
        self,
        tokens: list[JackToken],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
    ):
        if not tokens or tokens[-1].type != JackTokenType.EOF:
            tokens = list(tokens) + [JackToken(JackTokenType.EOF, None, 0, 0, filename)]
        self._tokens = tokens
        self._pos = 0
        self.filename = filename
        self.source_lines = source_lines or []

    def __len__(self) -> int:
        return len(self._tokens) - 1

    def __getitem__(self, index: int) -> JackToken:
        size = len(self)
        if index < 0:
            index += size
        if not 0 <= index < size:
            raise IndexError("token index out of range")
        return self._tokens[index]

    def __iter__(self) -> Iterator[JackToken]:
        return islice(self._tokens, len(self))

    @property
    def position(self) -> int:
        return self._pos

    def has_more(self) -> bool:
        """Return True while unconsumed tokens remain."""
        return self._pos < len(self._tokens) - 1

    @property
    def current(self) -> JackToken:
        """The token about to be consumed (EOF when exhausted)."""
        return self._tokens[min(self._pos, len(self._tokens) - 1)]

    def peek_next(self) -> JackToken:
        """The token after `current`, without consuming anything."""
        return self._tokens[min(self._pos + 1, len(self._tokens) - 1)]

    def advance(self) -> JackToken:
        """Consume and return the current token."""
        token = self.current
        if self.has_more():
            self._pos += 1
        return token

    def source_line(self, line: int) -> Optional[str]:
        """Source text of a 1-indexed line, for error context."""
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None


def tokenize(source: str, filename: str = "<input>") -> TokenStream:
    """Tokenize a whole compilation unit into a TokenStream."""
    tokens = list(JackLexer(source, filename).tokenize())
    return TokenStream(tokens, filename, source.splitlines())
