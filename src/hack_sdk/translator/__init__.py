"""
Hack Translator
===============

The back end of the toolchain: lowers stack-machine IR to assembly for the
Hack computer, including the full call/return protocol.

Usage
-----
>>> from hack_sdk.translator import translate_vm
>>> asm = translate_vm("push constant 7\\npush constant 8\\nadd\\n")
"""

from hack_sdk.translator.codegen import HackCodeGenerator
from hack_sdk.translator.translator import (
    VMTranslator,
    TranslatorOptions,
    module_tag_for,
    translate_vm,
)

__all__ = [
    "HackCodeGenerator",
    "VMTranslator",
    "TranslatorOptions",
    "module_tag_for",
    "translate_vm",
]
