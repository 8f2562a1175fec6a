"""
Two-Scope Symbol Table
======================

Maps Jack names to (declared type, storage kind, index). The class scope
holds statics and fields and lives for a whole compilation unit; the
subroutine scope holds arguments and locals and is cleared at the start of
every subroutine. Lookups try the subroutine scope first, so a local or
argument shadows a field of the same name.

Indices are dense per kind, assigned from 0 in declaration order. The
implicit receiver of a method is defined by the code generator as
argument 0 before the declared parameters.

Redefinition
------------
Defining a name that already exists in the same scope is not an error:
the new entry replaces the old one (last write wins) and still consumes
the next index of its kind.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SymbolKind(Enum):
    """Storage kind of a symbol."""

    STATIC = "static"
    FIELD = "field"
    ARG = "argument"
    VAR = "local"
    NONE = "none"

    @property
    def is_class_scope(self) -> bool:
        return self in (SymbolKind.STATIC, SymbolKind.FIELD)


@dataclass(frozen=True)
class Symbol:
    """
    One symbol table entry.

    Attributes:
        name: Declared name
        type: Declared type name (int, char, boolean, or a class name)
        kind: Storage kind
        index: Zero-based index within its kind
    """
    name: str
    type: str
    kind: SymbolKind
    index: int


class SymbolTable:
    """
    Class and subroutine scopes with per-kind counters.

    Example:
        >>> table = SymbolTable()
        >>> table.define("count", "int", SymbolKind.FIELD)
        >>> table.start_subroutine()
        >>> table.define("count", "int", SymbolKind.VAR)
        >>> table.kind_of("count")
        <SymbolKind.VAR: 'local'>
    """

    def __init__(self) -> None:
        self._class_scope: dict[str, Symbol] = {}
        self._subroutine_scope: dict[str, Symbol] = {}
        self._counts: dict[SymbolKind, int] = {
            SymbolKind.STATIC: 0,
            SymbolKind.FIELD: 0,
            SymbolKind.ARG: 0,
            SymbolKind.VAR: 0,
        }

    def start_class(self) -> None:
        """Clear the class scope and the static/field counters."""
        self._class_scope.clear()
        self._counts[SymbolKind.STATIC] = 0
        self._counts[SymbolKind.FIELD] = 0

    def start_subroutine(self) -> None:
        """Clear the subroutine scope and the argument/local counters."""
        self._subroutine_scope.clear()
        self._counts[SymbolKind.ARG] = 0
        self._counts[SymbolKind.VAR] = 0

    def define(self, name: str, type_name: str, kind: SymbolKind) -> Symbol:
        """
        Define a name at the next free index of its kind.

        Args:
            name: The identifier being declared
            type_name: Its declared type
            kind: Storage kind (not NONE)

        Returns:
            The new Symbol
        """
        if kind == SymbolKind.NONE:
            raise ValueError("cannot define a symbol of kind NONE")

        symbol = Symbol(name, type_name, kind, self._counts[kind])
        self._counts[kind] += 1

        if kind.is_class_scope:
            self._class_scope[name] = symbol
        else:
            self._subroutine_scope[name] = symbol
        return symbol

    def lookup(self, name: str) -> Optional[Symbol]:
        """Resolve a name, subroutine scope first, then class scope."""
        if name in self._subroutine_scope:
            return self._subroutine_scope[name]
        return self._class_scope.get(name)

    def kind_of(self, name: str) -> SymbolKind:
        symbol = self.lookup(name)
        return symbol.kind if symbol else SymbolKind.NONE

    def type_of(self, name: str) -> Optional[str]:
        symbol = self.lookup(name)
        return symbol.type if symbol else None

    def index_of(self, name: str) -> Optional[int]:
        symbol = self.lookup(name)
        return symbol.index if symbol else None

    def var_count(self, kind: SymbolKind) -> int:
        """Number of symbols of `kind` defined in the scope that owns it."""
        return self._counts.get(kind, 0)
