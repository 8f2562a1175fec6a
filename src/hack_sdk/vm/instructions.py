"""
Stack-Machine Instruction Set
=============================

The IR shared by the two compiler stages. The Jack code generator produces
these instructions; the translator lowers them to Hack assembly. The text
form produced by `str()` is the stable interface between the stages:

| Instruction  | Text form                      |
|--------------|--------------------------------|
| Push         | push <segment> <index>         |
| Pop          | pop <segment> <index>          |
| Arithmetic   | add sub neg eq gt lt and or not|
| Label        | label <name>                   |
| Goto         | goto <name>                    |
| IfGoto       | if-goto <name>                 |
| Call         | call <name> <argCount>         |
| Function     | function <name> <localCount>   |
| Return       | return                         |

Segments
--------
constant, argument, local, static, this, that, pointer (0 selects the
this-region base, 1 the that-region base), temp (eight shared slots).
"""

from dataclasses import dataclass
from enum import Enum


class Segment(str, Enum):
    """Abstract memory segments; the value is the IR spelling."""

    CONSTANT = "constant"
    ARGUMENT = "argument"
    LOCAL = "local"
    STATIC = "static"
    THIS = "this"
    THAT = "that"
    POINTER = "pointer"
    TEMP = "temp"


class ArithmeticOp(str, Enum):
    """Arithmetic and logical operations; the value is the IR spelling."""

    ADD = "add"
    SUB = "sub"
    NEG = "neg"
    EQ = "eq"
    GT = "gt"
    LT = "lt"
    AND = "and"
    OR = "or"
    NOT = "not"

    @property
    def is_unary(self) -> bool:
        return self in (ArithmeticOp.NEG, ArithmeticOp.NOT)

    @property
    def is_comparison(self) -> bool:
        return self in (ArithmeticOp.EQ, ArithmeticOp.GT, ArithmeticOp.LT)


# Number of slots in the fixed-size segments
POINTER_SIZE = 2
TEMP_SIZE = 8

# Largest value an A-instruction can load
MAX_CONSTANT = 32767


# =============================================================================
# Instructions
# =============================================================================

class VMInstruction:
    """Base class for IR instructions."""

    __slots__ = ()


@dataclass(frozen=True)
class Push(VMInstruction):
    segment: Segment
    index: int

    def __str__(self) -> str:
        return f"push {self.segment.value} {self.index}"


@dataclass(frozen=True)
class Pop(VMInstruction):
    segment: Segment
    index: int

    def __str__(self) -> str:
        return f"pop {self.segment.value} {self.index}"


@dataclass(frozen=True)
class Arithmetic(VMInstruction):
    op: ArithmeticOp

    def __str__(self) -> str:
        return self.op.value


@dataclass(frozen=True)
class Label(VMInstruction):
    name: str

    def __str__(self) -> str:
        return f"label {self.name}"


@dataclass(frozen=True)
class Goto(VMInstruction):
    name: str

    def __str__(self) -> str:
        return f"goto {self.name}"


@dataclass(frozen=True)
class IfGoto(VMInstruction):
    """Pop the top of stack and jump when it is non-zero."""
    name: str

    def __str__(self) -> str:
        return f"if-goto {self.name}"


@dataclass(frozen=True)
class Call(VMInstruction):
    name: str
    arg_count: int

    def __str__(self) -> str:
        return f"call {self.name} {self.arg_count}"


@dataclass(frozen=True)
class Function(VMInstruction):
    name: str
    local_count: int

    def __str__(self) -> str:
        return f"function {self.name} {self.local_count}"


@dataclass(frozen=True)
class Return(VMInstruction):

    def __str__(self) -> str:
        return "return"


def format_program(instructions) -> str:
    """Render instructions as IR text, one per line, newline terminated."""
    return "".join(f"{instruction}\n" for instruction in instructions)
