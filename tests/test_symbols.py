"""
Tests for the two-scope symbol table
====================================

Covers index assignment per kind, scope lookup order, scope resets and
the lenient redefinition rule.
"""

import pytest

from hack_sdk.jack.symbols import Symbol, SymbolKind, SymbolTable


class TestDefine:
    """Index assignment."""

    def test_indices_are_dense_per_kind(self):
        """Each kind numbers its symbols from 0 independently."""
        table = SymbolTable()
        table.define("a", "int", SymbolKind.FIELD)
        table.define("b", "int", SymbolKind.STATIC)
        table.define("c", "int", SymbolKind.FIELD)

        assert table.index_of("a") == 0
        assert table.index_of("b") == 0
        assert table.index_of("c") == 1

    def test_define_returns_symbol(self):
        table = SymbolTable()
        symbol = table.define("p", "Point", SymbolKind.ARG)
        assert symbol == Symbol("p", "Point", SymbolKind.ARG, 0)

    def test_var_count(self):
        table = SymbolTable()
        for name in ("x", "y", "z"):
            table.define(name, "int", SymbolKind.VAR)
        table.define("n", "int", SymbolKind.ARG)

        assert table.var_count(SymbolKind.VAR) == 3
        assert table.var_count(SymbolKind.ARG) == 1
        assert table.var_count(SymbolKind.FIELD) == 0

    def test_var_count_none_kind(self):
        assert SymbolTable().var_count(SymbolKind.NONE) == 0

    def test_define_none_kind_rejected(self):
        with pytest.raises(ValueError):
            SymbolTable().define("x", "int", SymbolKind.NONE)

    def test_redefinition_last_write_wins(self):
        """A duplicate name replaces the earlier entry and takes a new index."""
        table = SymbolTable()
        table.define("x", "int", SymbolKind.VAR)
        table.define("x", "boolean", SymbolKind.VAR)

        assert table.type_of("x") == "boolean"
        assert table.index_of("x") == 1
        assert table.var_count(SymbolKind.VAR) == 2


class TestLookup:
    """Scope resolution."""

    def test_unknown_name(self):
        table = SymbolTable()
        assert table.lookup("missing") is None
        assert table.kind_of("missing") == SymbolKind.NONE
        assert table.type_of("missing") is None
        assert table.index_of("missing") is None

    def test_subroutine_scope_shadows_class_scope(self):
        """A local with a field's name hides the field."""
        table = SymbolTable()
        table.define("count", "int", SymbolKind.FIELD)
        table.start_subroutine()
        table.define("count", "char", SymbolKind.VAR)

        assert table.kind_of("count") == SymbolKind.VAR
        assert table.type_of("count") == "char"

    def test_class_scope_visible_in_subroutine(self):
        table = SymbolTable()
        table.define("total", "int", SymbolKind.STATIC)
        table.start_subroutine()
        assert table.kind_of("total") == SymbolKind.STATIC


class TestScopes:
    """Scope resets between subroutines and classes."""

    def test_start_subroutine_clears_args_and_locals(self):
        table = SymbolTable()
        table.define("f", "int", SymbolKind.FIELD)
        table.start_subroutine()
        table.define("a", "int", SymbolKind.ARG)
        table.define("v", "int", SymbolKind.VAR)

        table.start_subroutine()

        assert table.lookup("a") is None
        assert table.lookup("v") is None
        assert table.var_count(SymbolKind.ARG) == 0
        assert table.var_count(SymbolKind.VAR) == 0
        # Class scope survives
        assert table.kind_of("f") == SymbolKind.FIELD
        assert table.var_count(SymbolKind.FIELD) == 1

    def test_indices_restart_after_subroutine_reset(self):
        table = SymbolTable()
        table.start_subroutine()
        table.define("a", "int", SymbolKind.ARG)
        table.start_subroutine()
        assert table.define("b", "int", SymbolKind.ARG).index == 0

    def test_start_class_clears_class_scope(self):
        table = SymbolTable()
        table.define("s", "int", SymbolKind.STATIC)
        table.define("f", "int", SymbolKind.FIELD)

        table.start_class()

        assert table.lookup("s") is None
        assert table.var_count(SymbolKind.STATIC) == 0
        assert table.var_count(SymbolKind.FIELD) == 0

    def test_kind_scope_membership(self):
        assert SymbolKind.STATIC.is_class_scope
        assert SymbolKind.FIELD.is_class_scope
        assert not SymbolKind.ARG.is_class_scope
        assert not SymbolKind.VAR.is_class_scope
