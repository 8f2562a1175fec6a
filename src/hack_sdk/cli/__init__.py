"""
Hack SDK Command-Line Interface
===============================

This package provides command-line tools for the Hack SDK:

- **jackc**: Jack compiler (.jack → .vm)
- **vmtrans**: IR translator (.vm → .asm)

Each tool is implemented as a Click-based CLI application with
consistent error reporting and exit codes.
"""

__all__ = ["jackc", "vmtrans"]
