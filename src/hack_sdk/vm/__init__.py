"""
Stack-Machine IR
================

The intermediate representation connecting the Jack compiler to the Hack
translator: instruction types, the IR text parser, and the IR writer.

Usage
-----
>>> from hack_sdk.vm import VMWriter, Segment, parse_vm
>>> writer = VMWriter()
>>> writer.write_push(Segment.CONSTANT, 1)
>>> parse_vm(writer.to_text()) == writer.instructions
True
"""

from hack_sdk.vm.instructions import (
    Segment,
    ArithmeticOp,
    VMInstruction,
    Push,
    Pop,
    Arithmetic,
    Label,
    Goto,
    IfGoto,
    Call,
    Function,
    Return,
    format_program,
)
from hack_sdk.vm.parser import parse_vm, parse_line
from hack_sdk.vm.writer import VMWriter

__all__ = [
    "Segment",
    "ArithmeticOp",
    "VMInstruction",
    "Push",
    "Pop",
    "Arithmetic",
    "Label",
    "Goto",
    "IfGoto",
    "Call",
    "Function",
    "Return",
    "format_program",
    "parse_vm",
    "parse_line",
    "VMWriter",
]
