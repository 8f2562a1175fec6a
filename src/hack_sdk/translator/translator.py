"""
IR to Hack Assembly Translator
==============================

Drives HackCodeGenerator over one or more IR modules and produces a
single assembly output.

Modules are lowered in the order given, each under its own module tag so
that `static` variables of different modules never alias. When the
bootstrap is enabled it is emitted once, before the first module: SP is
set to the stack base and the entry routine is called with no arguments.

Usage
-----
>>> from hack_sdk.translator import VMTranslator
>>> asm = VMTranslator().translate_units([("Main", "push constant 1\\n")])

Command line:
    $ vmtrans Main.vm            # writes Main.asm, no bootstrap
    $ vmtrans Prog/              # writes Prog/Prog.asm with bootstrap
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

from hack_sdk.labels import AsmNames
from hack_sdk.translator.codegen import HackCodeGenerator
from hack_sdk.vm.instructions import VMInstruction
from hack_sdk.vm.parser import parse_vm

logger = logging.getLogger(__name__)

# A module is IR text or already parsed instructions
ModuleBody = Union[str, list[VMInstruction]]


@dataclass
class TranslatorOptions:
    """
    Translator configuration options.

    Attributes:
        bootstrap: Emit the SP initialisation and entry call first
        stack_base: Initial value of SP
        entry_point: Routine called by the bootstrap
        comments: Emit each IR instruction as a comment before its code
        encoding: Text encoding used when reading IR files
    """
    bootstrap: bool = False
    stack_base: int = 256
    entry_point: str = "Sys.init"
    comments: bool = True
    encoding: str = "utf-8"


def module_tag_for(path) -> str:
    """Module tag of an IR file: its file name without extension."""
    return Path(path).stem


class VMTranslator:
    """
    Translates IR modules into one Hack assembly program.

    Each call to a translate method starts a fresh output with fresh label
    counters, so translating the same input twice gives identical text.

    Attributes:
        options: Translator configuration options
    """

    def __init__(self, options: Optional[TranslatorOptions] = None):
        self.options = options or TranslatorOptions()

    def translate_units(
        self,
        units: Iterable[tuple[str, ModuleBody]],
        bootstrap: Optional[bool] = None,
    ) -> str:
        """
        Translate modules in order into one assembly text.

        Args:
            units: (module tag, IR text or instructions) pairs
            bootstrap: Override options.bootstrap for this output

        Returns:
            Assembly text, one line per instruction or label

        Raises:
            MalformedInstructionError: If any IR line is malformed
        """
        if bootstrap is None:
            bootstrap = self.options.bootstrap

        gen = HackCodeGenerator(AsmNames(), comments=self.options.comments)

        if bootstrap:
            gen.write_bootstrap(self.options.stack_base, self.options.entry_point)
            logger.debug("emitted bootstrap calling %s", self.options.entry_point)

        for module, body in units:
            if isinstance(body, str):
                instructions = parse_vm(body, f"{module}.vm")
            else:
                instructions = body

            gen.set_module(module)
            gen.write_all(instructions)
            logger.debug("translated module %s: %d instructions", module, len(instructions))

        return gen.to_text()

    def translate_file(self, filepath, bootstrap: Optional[bool] = None) -> str:
        """Translate a single .vm file."""
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"IR file not found: {filepath}")
        text = path.read_text(encoding=self.options.encoding)
        return self.translate_units([(module_tag_for(path), text)], bootstrap)

    def translate_files(self, filepaths: Iterable, bootstrap: Optional[bool] = None) -> str:
        """Translate several .vm files, in the given order, into one output."""
        units = []
        for filepath in filepaths:
            path = Path(filepath)
            if not path.exists():
                raise FileNotFoundError(f"IR file not found: {filepath}")
            units.append((module_tag_for(path), path.read_text(encoding=self.options.encoding)))
        return self.translate_units(units, bootstrap)

    def translate_directory(self, directory, bootstrap: bool = True) -> str:
        """Translate every .vm file in a directory, sorted by name."""
        files = sorted(Path(directory).glob("*.vm"))
        if not files:
            raise FileNotFoundError(f"No .vm files in {directory}")
        return self.translate_files(files, bootstrap)


def translate_vm(text: str, module: str = "Main", bootstrap: bool = False) -> str:
    """Translate one module of IR text to assembly."""
    return VMTranslator().translate_units([(module, text)], bootstrap)
