"""
Jack Compiler
=============

This package implements the front end of the toolchain: a one-pass
compiler from the Jack language to stack-machine IR.

- A lexer producing a random-access token stream
- A two-scope symbol table
- A syntax-directed code generator that emits IR while it parses

Pipeline
--------
    Jack Source → Lexer → Code Generator (with Symbol Table) → IR text

The IR is then lowered to Hack assembly by hack_sdk.translator.

Usage
-----
>>> from hack_sdk.jack import compile_jack
>>> ir = compile_jack('class Main { function void main() { return; } }')
"""

from hack_sdk.jack.compiler import JackCompiler, CompilerOptions, CompilerResult, compile_jack
from hack_sdk.jack.engine import CompilationEngine, RuntimeRoutines
from hack_sdk.jack.errors import (
    JackError,
    JackSyntaxError,
    UnexpectedTokenError,
    MissingTokenError,
)
from hack_sdk.jack.lexer import JackLexer, JackToken, JackTokenType, Keyword, TokenStream, tokenize
from hack_sdk.jack.symbols import Symbol, SymbolKind, SymbolTable

__all__ = [
    # Main API
    "JackCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_jack",
    # Code generator
    "CompilationEngine",
    "RuntimeRoutines",
    # Errors
    "JackError",
    "JackSyntaxError",
    "UnexpectedTokenError",
    "MissingTokenError",
    # Lexer
    "JackLexer",
    "JackToken",
    "JackTokenType",
    "Keyword",
    "TokenStream",
    "tokenize",
    # Symbol table
    "Symbol",
    "SymbolKind",
    "SymbolTable",
]
