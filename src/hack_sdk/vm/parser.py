"""
IR Text Parser
==============

Reads the text form of the stack-machine IR back into instruction objects.
This is the input side of the translator.

Lines are processed independently. A `//` comment runs to the end of the
line; blank lines are ignored. Anything outside the fixed vocabulary raises
MalformedInstructionError naming the line.

Example
-------
>>> from hack_sdk.vm.parser import parse_vm
>>> parse_vm("function Main.main 0\\npush constant 0\\nreturn\\n")
[Function(name='Main.main', local_count=0), Push(segment=<Segment.CONSTANT: 'constant'>, index=0), Return()]
"""

from typing import Optional

from hack_sdk.errors import MalformedInstructionError, SourceLocation
from hack_sdk.vm.instructions import (
    MAX_CONSTANT,
    POINTER_SIZE,
    TEMP_SIZE,
    Arithmetic,
    ArithmeticOp,
    Call,
    Function,
    Goto,
    IfGoto,
    Label,
    Pop,
    Push,
    Return,
    Segment,
    VMInstruction,
)


ARITHMETIC_OPS: dict[str, ArithmeticOp] = {op.value: op for op in ArithmeticOp}
SEGMENTS: dict[str, Segment] = {seg.value: seg for seg in Segment}

# Mnemonic -> number of operands
OPERAND_COUNTS: dict[str, int] = {
    "push": 2,
    "pop": 2,
    "label": 1,
    "goto": 1,
    "if-goto": 1,
    "call": 2,
    "function": 2,
    "return": 0,
}
OPERAND_COUNTS.update({name: 0 for name in ARITHMETIC_OPS})


def parse_line(
    line: str,
    line_number: int = 0,
    filename: str = "<input>",
) -> Optional[VMInstruction]:
    """
    Parse one IR line.

    Args:
        line: Raw text of the line
        line_number: 1-indexed line number for error messages
        filename: Source name for error messages

    Returns:
        The instruction, or None for blank and comment-only lines

    Raises:
        MalformedInstructionError: If the line is not a valid instruction
    """
    text = line.split("//", 1)[0].strip()
    if not text:
        return None

    def fail(message: str, hint: Optional[str] = None) -> MalformedInstructionError:
        return MalformedInstructionError(
            message,
            location=SourceLocation(filename, line_number, 0),
            source_line=line.rstrip("\n"),
            hint=hint,
        )

    parts = text.split()
    mnemonic, operands = parts[0], parts[1:]

    if mnemonic not in OPERAND_COUNTS:
        raise fail(f"unknown instruction '{mnemonic}'")

    expected = OPERAND_COUNTS[mnemonic]
    if len(operands) != expected:
        raise fail(
            f"'{mnemonic}' takes {expected} operand(s), got {len(operands)}"
        )

    if mnemonic in ARITHMETIC_OPS:
        return Arithmetic(ARITHMETIC_OPS[mnemonic])

    if mnemonic == "return":
        return Return()

    if mnemonic in ("label", "goto", "if-goto"):
        name = operands[0]
        if mnemonic == "label":
            return Label(name)
        if mnemonic == "goto":
            return Goto(name)
        return IfGoto(name)

    if not (operands[1].isascii() and operands[1].isdigit()):
        raise fail(f"expected a non-negative integer, got '{operands[1]}'")
    number = int(operands[1])

    if mnemonic == "call":
        return Call(operands[0], number)
    if mnemonic == "function":
        return Function(operands[0], number)

    segment = SEGMENTS.get(operands[0])
    if segment is None:
        raise fail(
            f"unknown segment '{operands[0]}'",
            hint="segments are " + ", ".join(SEGMENTS),
        )
    if segment == Segment.POINTER and number >= POINTER_SIZE:
        raise fail(f"pointer index must be 0 or 1, got {number}")
    if segment == Segment.TEMP and number >= TEMP_SIZE:
        raise fail(f"temp index must be below {TEMP_SIZE}, got {number}")
    if segment == Segment.CONSTANT and number > MAX_CONSTANT:
        raise fail(
            f"constant {number} does not fit in an A-instruction",
            hint=f"constants range from 0 to {MAX_CONSTANT}",
        )

    if mnemonic == "push":
        return Push(segment, number)
    if segment == Segment.CONSTANT:
        raise fail("cannot pop into the constant segment")
    return Pop(segment, number)


def parse_vm(text: str, filename: str = "<input>") -> list[VMInstruction]:
    """Parse a whole IR program, skipping blank and comment lines."""
    instructions = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        instruction = parse_line(line, line_number, filename)
        if instruction is not None:
            instructions.append(instruction)
    return instructions
