"""
Hack Emulator
=============

A reference CPU that executes the assembly produced by the translator.

Usage
-----
>>> from hack_sdk.emulator import HackCPU
>>> cpu = HackCPU()
>>> cpu.load(asm_text)
>>> cpu.run(stop_at="Sys.halt")
"""

from hack_sdk.emulator.cpu import HackCPU, EmulatorConfig, Instruction, to_signed

__all__ = [
    "HackCPU",
    "EmulatorConfig",
    "Instruction",
    "to_signed",
]
