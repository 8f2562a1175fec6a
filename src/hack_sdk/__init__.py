"""
Hack SDK - Jack Compiler and Stack-Machine Translator
=====================================================

This package provides a two-stage toolchain for the Hack computer:

Main Components
---------------
- **jack**: Jack compiler (jackc)
    Compiles Jack classes (.jack) to stack-machine IR (.vm) in one pass

- **vm**: Stack-machine IR
    Instruction types, the IR text parser and the IR writer

- **translator**: IR translator (vmtrans)
    Lowers IR to Hack assembly (.asm), including the call/return protocol

- **emulator**: Hack CPU
    Executes the generated assembly, used to verify translated programs

Quick Start
-----------
Compile and translate a class:
    >>> from hack_sdk.jack import compile_jack
    >>> from hack_sdk.translator import translate_vm
    >>> ir = compile_jack(open("Main.jack").read(), "Main.jack")
    >>> asm = translate_vm(ir, module="Main")

Or use the command-line tools:
    $ jackc Pong/
    $ vmtrans Pong/

Version History
---------------
1.0.0 - Initial release with compiler, translator and emulator
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from hack_sdk.errors import (
    HackError,
    LocatedError,
    SourceLocation,
    TranslatorError,
    MalformedInstructionError,
    EmulatorError,
)
from hack_sdk.jack import (
    JackCompiler,
    CompilerOptions,
    compile_jack,
    JackError,
    JackSyntaxError,
)
from hack_sdk.translator import VMTranslator, TranslatorOptions, translate_vm
from hack_sdk.emulator import HackCPU, EmulatorConfig

__all__ = [
    "__version__",
    # Errors
    "HackError",
    "LocatedError",
    "SourceLocation",
    "TranslatorError",
    "MalformedInstructionError",
    "EmulatorError",
    "JackError",
    "JackSyntaxError",
    # Compiler
    "JackCompiler",
    "CompilerOptions",
    "compile_jack",
    # Translator
    "VMTranslator",
    "TranslatorOptions",
    "translate_vm",
    # Emulator
    "HackCPU",
    "EmulatorConfig",
]
