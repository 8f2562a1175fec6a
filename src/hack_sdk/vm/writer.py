"""
IR Writer
=========

Collects the instructions emitted for one compilation unit. The code
generator calls the `write_*` methods as it recognises each production;
nothing is written to disk here.
"""

from hack_sdk.vm.instructions import (
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
    format_program,
)


class VMWriter:
    """
    In-memory IR sink for one unit.

    Example:
        >>> writer = VMWriter()
        >>> writer.write_push(Segment.CONSTANT, 7)
        >>> writer.to_text()
        'push constant 7\\n'
    """

    def __init__(self) -> None:
        self._instructions: list[VMInstruction] = []

    @property
    def instructions(self) -> list[VMInstruction]:
        return list(self._instructions)

    def __len__(self) -> int:
        return len(self._instructions)

    def emit(self, instruction: VMInstruction) -> None:
        self._instructions.append(instruction)

    def write_push(self, segment: Segment, index: int) -> None:
        self.emit(Push(segment, index))

    def write_pop(self, segment: Segment, index: int) -> None:
        self.emit(Pop(segment, index))

    def write_arithmetic(self, op: ArithmeticOp) -> None:
        self.emit(Arithmetic(op))

    def write_label(self, name: str) -> None:
        self.emit(Label(name))

    def write_goto(self, name: str) -> None:
        self.emit(Goto(name))

    def write_if(self, name: str) -> None:
        self.emit(IfGoto(name))

    def write_call(self, name: str, arg_count: int) -> None:
        self.emit(Call(name, arg_count))

    def write_function(self, name: str, local_count: int) -> None:
        self.emit(Function(name, local_count))

    def write_return(self) -> None:
        self.emit(Return())

    def to_text(self) -> str:
        """IR text, one instruction per line."""
        return format_program(self._instructions)
