"""
Jack Compiler Main Module
=========================

This module provides the compiler interface for Jack. It runs the
pipeline for one compilation unit at a time:

    Source → Lex → Syntax-directed code generation → IR

Usage
-----
Command line:
    $ jackc Main.jack            # writes Main.vm
    $ jackc src/                 # one .vm per .jack file

Programmatic:
    >>> from hack_sdk.jack import compile_jack
    >>> print(compile_jack('class C { function void f() { return; } }'), end="")
    function C.f 0
    push constant 0
    return

Isolation
---------
Every unit gets a fresh token stream, symbol table and label counter.
Units share nothing but the runtime routine names, so they can be compiled
in any order; `compile_files` keeps the order it was given so output is
reproducible.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from hack_sdk.jack.engine import CompilationEngine, RuntimeRoutines
from hack_sdk.jack.lexer import tokenize
from hack_sdk.vm.instructions import VMInstruction, format_program

logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        runtime: Names of the allocator, multiply/divide and string
                 construction routines the generated code calls
        encoding: Text encoding used when reading source files
    """
    runtime: RuntimeRoutines = field(default_factory=RuntimeRoutines)
    encoding: str = "utf-8"


@dataclass
class CompilerResult:
    """
    Result of compiling one unit.

    Attributes:
        filename: Source filename
        class_name: Name of the compiled class
        instructions: Emitted IR instructions in order
        token_count: Number of tokens in the unit
    """
    filename: str
    class_name: str = ""
    instructions: list[VMInstruction] = field(default_factory=list)
    token_count: int = 0

    @property
    def vm_text(self) -> str:
        """IR text form of the unit."""
        return format_program(self.instructions)


class JackCompiler:
    """
    Jack compiler producing stack-machine IR.

    Example:
        compiler = JackCompiler()
        result = compiler.compile_file("Main.jack")
        Path("Main.vm").write_text(result.vm_text)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile the source text of one unit.

        Args:
            source: Jack source code
            filename: Source filename for error messages

        Returns:
            CompilerResult with the unit's IR

        Raises:
            JackSyntaxError: On the first structural error in the unit
        """
        tokens = tokenize(source, filename)
        engine = CompilationEngine(tokens, runtime=self.options.runtime)
        writer = engine.compile_class()

        logger.debug(
            "compiled %s: class %s, %d tokens, %d instructions",
            filename, engine.class_name, len(tokens), len(writer),
        )

        return CompilerResult(
            filename=filename,
            class_name=engine.class_name,
            instructions=writer.instructions,
            token_count=len(tokens),
        )

    def compile_file(self, filepath) -> CompilerResult:
        """
        Compile a Jack source file.

        Raises:
            JackSyntaxError: If compilation fails
            FileNotFoundError: If the source file does not exist
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding=self.options.encoding)
        return self.compile_source(source, str(path))

    def compile_files(self, filepaths: Iterable) -> list[CompilerResult]:
        """
        Compile several units independently, preserving their order.

        Raises the error of the first unit that fails; callers that must
        keep going past a broken unit call compile_file per unit.
        """
        return [self.compile_file(path) for path in filepaths]


def compile_jack(source: str, filename: str = "<input>") -> str:
    """
    Compile one unit of Jack source to IR text.

    Convenience wrapper around JackCompiler for the common case.
    """
    return JackCompiler().compile_source(source, filename).vm_text
