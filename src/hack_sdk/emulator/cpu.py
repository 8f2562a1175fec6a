"""
Hack CPU Emulator
=================

Reference implementation of the Hack computer used to run translated
programs. It loads symbolic assembly text directly, so no separate
assembler step is needed.

The Hack CPU has:
- 16-bit registers: A (address/data), D (data), PC (program counter)
- A word-addressed data RAM; M always means RAM[A]
- A-instructions `@value` / `@symbol` and C-instructions `dest=comp;jump`

Symbols
-------
| Symbol       | Value                                  |
|--------------|----------------------------------------|
| SP LCL ARG   | 0 1 2                                  |
| THIS THAT    | 3 4                                    |
| R0 .. R15    | 0 .. 15                                |
| SCREEN KBD   | 16384 24576                            |
| (LABEL)      | address of the next instruction        |
| other names  | variables, allocated from 16 upward    |

All arithmetic wraps to 16 bits. Jump conditions compare the two's
complement value of the computation against zero.

Example
-------
>>> cpu = HackCPU()
>>> cpu.load("@7\\nD=A\\n@R0\\nM=D\\n")
>>> cpu.run()
4
>>> cpu.peek(0)
7
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional

from hack_sdk.errors import EmulatorError, SourceLocation


WORD_MASK = 0xFFFF

PREDEFINED_SYMBOLS: dict[str, int] = {
    "SP": 0,
    "LCL": 1,
    "ARG": 2,
    "THIS": 3,
    "THAT": 4,
    "SCREEN": 16384,
    "KBD": 24576,
}
PREDEFINED_SYMBOLS.update({f"R{i}": i for i in range(16)})

FIRST_VARIABLE_ADDRESS = 16

JUMPS: dict[str, Callable[[int], bool]] = {
    "": lambda v: False,
    "JGT": lambda v: v > 0,
    "JEQ": lambda v: v == 0,
    "JGE": lambda v: v >= 0,
    "JLT": lambda v: v < 0,
    "JNE": lambda v: v != 0,
    "JLE": lambda v: v <= 0,
    "JMP": lambda v: True,
}

# X, !X, -X, X+1, X-1, X op Y with X, Y in {A, D, M}
_COMP_PATTERN = re.compile(r"^(?:(?P<unary>[!-])?(?P<x>[ADM])(?:(?P<op>[-+&|])(?P<y>[ADM1]))?)$")


def to_signed(value: int) -> int:
    """Interpret a 16-bit word as a two's complement integer."""
    value &= WORD_MASK
    return value - 0x10000 if value & 0x8000 else value


@dataclass
class EmulatorConfig:
    """
    Emulator configuration.

    Attributes:
        ram_size: Number of RAM words (32K on the real machine)
        max_cycles: Default instruction budget for run()
    """
    ram_size: int = 32768
    max_cycles: int = 1_000_000


@dataclass(frozen=True)
class Instruction:
    """One loaded instruction with its original source line."""
    text: str
    line: int
    value: Optional[int] = None
    dest: str = ""
    comp: str = ""
    jump: str = ""

    @property
    def is_address(self) -> bool:
        return self.value is not None


class HackCPU:
    """
    Hack CPU with RAM and instruction hooks.

    Instrumentation:
        on_instruction(pc, instruction) -> bool: called before every
        instruction; return False to stop execution.

    Attributes:
        config: Emulator configuration
        a, d, pc: CPU registers
        ram: Data memory
        symbols: Resolved symbol table of the loaded program
        halted: True once the program counter left the program or a
            stop address was reached
    """

    def __init__(self, config: Optional[EmulatorConfig] = None):
        self.config = config or EmulatorConfig()
        self.program: list[Instruction] = []
        self.symbols: dict[str, int] = {}
        self.on_instruction: Optional[Callable[[int, Instruction], bool]] = None
        self.reset()

    # =========================================================================
    # Loading
    # =========================================================================

    def reset(self) -> None:
        """Clear registers and RAM; keep the loaded program."""
        self.a = 0
        self.d = 0
        self.pc = 0
        self.cycles = 0
        self.halted = False
        self.ram = [0] * self.config.ram_size

    def load(self, asm_text: str, filename: str = "<asm>") -> None:
        """
        Load symbolic assembly text.

        Raises:
            EmulatorError: If an instruction cannot be decoded
        """
        lines = []
        labels: dict[str, int] = {}
        for line_number, raw in enumerate(asm_text.splitlines(), start=1):
            text = raw.split("//", 1)[0].replace(" ", "").replace("\t", "")
            if not text:
                continue
            if text.startswith("(") and text.endswith(")"):
                labels[text[1:-1]] = len(lines)
                continue
            lines.append((line_number, text))

        self.symbols = dict(PREDEFINED_SYMBOLS)
        self.symbols.update(labels)
        next_variable = FIRST_VARIABLE_ADDRESS

        program = []
        for line_number, text in lines:
            location = SourceLocation(filename, line_number, 0)
            if text.startswith("@"):
                operand = text[1:]
                if operand.isdigit():
                    value = int(operand)
                else:
                    if operand not in self.symbols:
                        self.symbols[operand] = next_variable
                        next_variable += 1
                    value = self.symbols[operand]
                program.append(Instruction(text, line_number, value=value & WORD_MASK))
            else:
                program.append(self._decode(text, line_number, location))

        self.program = program
        self.reset()

    @staticmethod
    def _decode(text: str, line_number: int, location: SourceLocation) -> Instruction:
        dest, _, rest = text.rpartition("=")
        comp, _, jump = rest.partition(";")

        if any(c not in "ADM" for c in dest) or len(set(dest)) != len(dest):
            raise EmulatorError(f"invalid destination '{dest}'", location, source_line=text)
        if jump not in JUMPS:
            raise EmulatorError(f"invalid jump '{jump}'", location, source_line=text)
        if comp not in ("0", "1", "-1") and not _COMP_PATTERN.match(comp):
            raise EmulatorError(f"invalid computation '{comp}'", location, source_line=text)

        return Instruction(text, line_number, dest=dest, comp=comp, jump=jump)

    # =========================================================================
    # Memory Access
    # =========================================================================

    def peek(self, address: int) -> int:
        """Read RAM as a signed value."""
        return to_signed(self._read(address))

    def poke(self, address: int, value: int) -> None:
        self._write(address, value)

    def _read(self, address: int) -> int:
        if not 0 <= address < len(self.ram):
            raise EmulatorError(f"read outside RAM at {address} (pc={self.pc})")
        return self.ram[address]

    def _write(self, address: int, value: int) -> None:
        if not 0 <= address < len(self.ram):
            raise EmulatorError(f"write outside RAM at {address} (pc={self.pc})")
        self.ram[address] = value & WORD_MASK

    def address_of(self, symbol: str) -> int:
        """Resolved address of a label or variable in the loaded program."""
        return self.symbols[symbol]

    @property
    def sp(self) -> int:
        return self.ram[0]

    # =========================================================================
    # Execution
    # =========================================================================

    def _compute(self, comp: str) -> int:
        if comp == "0":
            return 0
        if comp == "1":
            return 1
        if comp == "-1":
            return WORD_MASK

        match = _COMP_PATTERN.match(comp)
        registers = {"A": self.a, "D": self.d}
        if "M" in comp:
            registers["M"] = self._read(self.a)
        registers["1"] = 1

        x = registers[match.group("x")]
        unary, op = match.group("unary"), match.group("op")
        if unary == "!":
            return ~x & WORD_MASK
        if unary == "-":
            return -x & WORD_MASK
        if op is None:
            return x

        y = registers[match.group("y")]
        if op == "+":
            return (x + y) & WORD_MASK
        if op == "-":
            return (x - y) & WORD_MASK
        if op == "&":
            return x & y
        return x | y

    def step(self) -> None:
        """Execute the instruction at PC."""
        instruction = self.program[self.pc]
        self.cycles += 1

        if instruction.is_address:
            self.a = instruction.value
            self.pc += 1
            return

        result = self._compute(instruction.comp)
        address = self.a
        if "M" in instruction.dest:
            self._write(address, result)
        if "A" in instruction.dest:
            self.a = result
        if "D" in instruction.dest:
            self.d = result

        if JUMPS[instruction.jump](to_signed(result)):
            self.pc = address
        else:
            self.pc += 1

    def run(self, max_cycles: Optional[int] = None, stop_at: Optional[str] = None) -> int:
        """
        Run until the program ends, `stop_at` is reached, or the budget runs out.

        Args:
            max_cycles: Instruction budget (config.max_cycles if None)
            stop_at: Label whose address stops execution before it runs

        Returns:
            Number of instructions executed by this call
        """
        budget = self.config.max_cycles if max_cycles is None else max_cycles
        stop_address = self.symbols[stop_at] if stop_at is not None else None
        start = self.cycles

        while self.cycles - start < budget:
            if not 0 <= self.pc < len(self.program) or self.pc == stop_address:
                self.halted = True
                break
            if self.on_instruction is not None:
                if self.on_instruction(self.pc, self.program[self.pc]) is False:
                    break
            self.step()

        return self.cycles - start
