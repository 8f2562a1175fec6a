"""
Hack Code Generator for Stack-Machine IR
========================================

This module lowers IR instructions to Hack assembly, one instruction at a
time. The virtual stack lives in RAM and grows upward from address 256.

Register Usage
--------------
| Symbol   | Address | Usage                                    |
|----------|---------|------------------------------------------|
| SP       | 0       | Address of the next free stack slot      |
| LCL      | 1       | Base of the current function's locals    |
| ARG      | 2       | Base of the current function's arguments |
| THIS     | 3       | Base of the this-region (pointer 0)      |
| THAT     | 4       | Base of the that-region (pointer 1)      |
| R5-R12   | 5-12    | temp 0-7                                 |
| R13      | 13      | Scratch: pop address, frame pointer      |
| R14      | 14      | Scratch: return address                  |
| Mod.i    | 16+     | static i of module Mod                   |

Segment Addressing
------------------
- constant: immediate (`@i` then `D=A`)
- local/argument/this/that: base register contents + i
- static: assembler variable `Module.i`
- temp: fixed address 5 + i
- pointer: fixed address 3 + i, i.e. THIS or THAT itself

Stack Frame Layout
------------------
After `call f n` has transferred control the stack looks like:

    ARG  -> argument 0
            ...
            argument n-1
            return address
            saved LCL
            saved ARG
            saved THIS
            saved THAT
    LCL  -> local 0         (zeroed by the function prologue)
            ...
    SP   -> next free slot

`return` reads the frame back from LCL-5 .. LCL-1, stores the return
value at ARG[0], sets SP to ARG+1 and restores THAT, THIS, ARG, LCL in
that order before jumping to the saved return address.
"""

from typing import Optional

from hack_sdk.errors import MalformedInstructionError
from hack_sdk.labels import AsmNames
from hack_sdk.vm.instructions import (
    MAX_CONSTANT,
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


# Base registers of the indirectly addressed segments
BASE_REGISTERS: dict[Segment, str] = {
    Segment.LOCAL: "LCL",
    Segment.ARGUMENT: "ARG",
    Segment.THIS: "THIS",
    Segment.THAT: "THAT",
}

# First RAM address of the fixed segments
TEMP_BASE = 5
POINTER_BASE = 3

# Registers saved by the caller, in push order
SAVED_REGISTERS = ("LCL", "ARG", "THIS", "THAT")

# Number of words in the saved frame (return address + saved registers)
FRAME_SIZE = 1 + len(SAVED_REGISTERS)

BINARY_COMPUTATIONS: dict[ArithmeticOp, str] = {
    ArithmeticOp.ADD: "M=D+M",
    ArithmeticOp.SUB: "M=M-D",
    ArithmeticOp.AND: "M=D&M",
    ArithmeticOp.OR: "M=D|M",
}

UNARY_COMPUTATIONS: dict[ArithmeticOp, str] = {
    ArithmeticOp.NEG: "M=-M",
    ArithmeticOp.NOT: "M=!M",
}

COMPARISON_JUMPS: dict[ArithmeticOp, str] = {
    ArithmeticOp.EQ: "JEQ",
    ArithmeticOp.GT: "JGT",
    ArithmeticOp.LT: "JLT",
}


class HackCodeGenerator:
    """
    Lowers IR instructions to Hack assembly lines.

    One generator produces one assembly output. Modules are lowered one
    after another with `set_module`; the label counters keep running across
    modules so the concatenated output has no duplicate labels.

    Usage:
        gen = HackCodeGenerator()
        gen.set_module("Main")
        for instruction in parse_vm(text):
            gen.write(instruction)
        asm = gen.to_text()

    Attributes:
        names: Label and symbol naming state
        comments: Emit the IR text as a comment before its lowering
    """

    def __init__(self, names: Optional[AsmNames] = None, comments: bool = True):
        self.names = names or AsmNames()
        self.comments = comments
        self._output: list[str] = []

    # =========================================================================
    # Assembly Output Methods
    # =========================================================================

    @property
    def lines(self) -> list[str]:
        return list(self._output)

    def to_text(self) -> str:
        return "".join(f"{line}\n" for line in self._output)

    def _emit(self, *lines: str) -> None:
        self._output.extend(lines)

    def _emit_comment(self, comment: str) -> None:
        if self.comments:
            self._emit(f"// {comment}")

    def _emit_label(self, label: str) -> None:
        self._emit(f"({label})")

    def _emit_push_d(self) -> None:
        """Push the D register onto the stack."""
        self._emit("@SP", "A=M", "M=D", "@SP", "M=M+1")

    def _emit_pop_d(self) -> None:
        """Pop the top of the stack into D."""
        self._emit("@SP", "AM=M-1", "D=M")

    # =========================================================================
    # Module and Program Setup
    # =========================================================================

    def set_module(self, module: str) -> None:
        """Start lowering the unit whose statics are qualified by `module`."""
        self.names.start_module(module)
        self._emit_comment(f"module {module}")

    def write_bootstrap(self, stack_base: int = 256, entry_point: str = "Sys.init") -> None:
        """Initialise SP and call the program entry routine with no arguments."""
        self._emit_comment("bootstrap")
        self._emit(f"@{stack_base}", "D=A", "@SP", "M=D")
        self._write_call(Call(entry_point, 0))

    # =========================================================================
    # Instruction Dispatch
    # =========================================================================

    def write(self, instruction: VMInstruction) -> None:
        """
        Lower one IR instruction.

        Raises:
            MalformedInstructionError: If the instruction is outside the
                fixed vocabulary
        """
        self._emit_comment(str(instruction))

        if isinstance(instruction, Push):
            self._write_push(instruction)
        elif isinstance(instruction, Pop):
            self._write_pop(instruction)
        elif isinstance(instruction, Arithmetic):
            self._write_arithmetic(instruction.op)
        elif isinstance(instruction, Label):
            self._emit_label(self.names.flow_label(instruction.name))
        elif isinstance(instruction, Goto):
            self._emit(f"@{self.names.flow_label(instruction.name)}", "0;JMP")
        elif isinstance(instruction, IfGoto):
            self._emit_pop_d()
            self._emit(f"@{self.names.flow_label(instruction.name)}", "D;JNE")
        elif isinstance(instruction, Function):
            self._write_function(instruction)
        elif isinstance(instruction, Call):
            self._write_call(instruction)
        elif isinstance(instruction, Return):
            self._write_return()
        else:
            raise MalformedInstructionError(f"cannot translate {instruction!r}")

    def write_all(self, instructions) -> None:
        for instruction in instructions:
            self.write(instruction)

    # =========================================================================
    # Memory Access
    # =========================================================================

    def _emit_segment_address(self, segment: Segment, index: int) -> None:
        """Leave the address of segment[index] in D."""
        if segment in BASE_REGISTERS:
            self._emit(f"@{BASE_REGISTERS[segment]}", "D=M", f"@{index}", "D=D+A")
        elif segment == Segment.STATIC:
            self._emit(f"@{self.names.static_symbol(index)}", "D=A")
        elif segment == Segment.TEMP:
            self._emit(f"@{TEMP_BASE + index}", "D=A")
        elif segment == Segment.POINTER:
            self._emit(f"@{POINTER_BASE + index}", "D=A")
        else:
            raise MalformedInstructionError(f"segment '{segment.value}' has no address")

    def _write_push(self, instruction: Push) -> None:
        segment, index = instruction.segment, instruction.index

        if segment == Segment.CONSTANT:
            if index > MAX_CONSTANT:
                raise MalformedInstructionError(
                    f"constant {index} does not fit in an A-instruction (max {MAX_CONSTANT})"
                )
            self._emit(f"@{index}", "D=A")
        elif segment in BASE_REGISTERS:
            self._emit(f"@{BASE_REGISTERS[segment]}", "D=M", f"@{index}", "A=D+A", "D=M")
        elif segment == Segment.STATIC:
            self._emit(f"@{self.names.static_symbol(index)}", "D=M")
        elif segment == Segment.TEMP:
            self._emit(f"@{TEMP_BASE + index}", "D=M")
        elif segment == Segment.POINTER:
            self._emit(f"@{POINTER_BASE + index}", "D=M")
        else:
            raise MalformedInstructionError(f"unknown segment in {instruction}")

        self._emit_push_d()

    def _write_pop(self, instruction: Pop) -> None:
        if instruction.segment == Segment.CONSTANT:
            raise MalformedInstructionError(f"cannot pop into constant: {instruction}")

        self._emit_segment_address(instruction.segment, instruction.index)
        self._emit("@R13", "M=D")
        self._emit_pop_d()
        self._emit("@R13", "A=M", "M=D")

    # =========================================================================
    # Arithmetic and Logic
    # =========================================================================

    def _write_arithmetic(self, op: ArithmeticOp) -> None:
        if op in UNARY_COMPUTATIONS:
            self._emit("@SP", "A=M-1", UNARY_COMPUTATIONS[op])
            return

        # Pop y into D and point A at x
        self._emit_pop_d()
        self._emit("A=A-1")

        if op in BINARY_COMPUTATIONS:
            self._emit(BINARY_COMPUTATIONS[op])
            return

        true_label, end_label = self.names.comparison_labels()
        self._emit(
            "D=M-D",
            f"@{true_label}",
            f"D;{COMPARISON_JUMPS[op]}",
            "@SP", "A=M-1", "M=0",
            f"@{end_label}",
            "0;JMP",
        )
        self._emit_label(true_label)
        self._emit("@SP", "A=M-1", "M=-1")
        self._emit_label(end_label)

    # =========================================================================
    # Function Calling Protocol
    # =========================================================================

    def _write_function(self, instruction: Function) -> None:
        self.names.function = instruction.name
        self._emit_label(instruction.name)
        for _ in range(instruction.local_count):
            self._emit("@SP", "A=M", "M=0", "@SP", "M=M+1")

    def _write_call(self, instruction: Call) -> None:
        return_label = self.names.return_label()

        self._emit(f"@{return_label}", "D=A")
        self._emit_push_d()
        for register in SAVED_REGISTERS:
            self._emit(f"@{register}", "D=M")
            self._emit_push_d()

        # ARG = SP - 5 - n
        self._emit(
            "@SP", "D=M",
            f"@{FRAME_SIZE}", "D=D-A",
            f"@{instruction.arg_count}", "D=D-A",
            "@ARG", "M=D",
        )
        # LCL = SP
        self._emit("@SP", "D=M", "@LCL", "M=D")

        self._emit(f"@{instruction.name}", "0;JMP")
        self._emit_label(return_label)

    def _write_return(self) -> None:
        # R13 = frame (LCL), R14 = return address *(frame - 5)
        self._emit(
            "@LCL", "D=M", "@R13", "M=D",
            f"@{FRAME_SIZE}", "A=D-A", "D=M", "@R14", "M=D",
        )
        # *ARG = return value, SP = ARG + 1
        self._emit_pop_d()
        self._emit("@ARG", "A=M", "M=D", "@ARG", "D=M+1", "@SP", "M=D")
        # Restore THAT, THIS, ARG, LCL walking down from the frame
        for register in reversed(SAVED_REGISTERS):
            self._emit("@R13", "AM=M-1", "D=M", f"@{register}", "M=D")
        self._emit("@R14", "A=M", "0;JMP")
