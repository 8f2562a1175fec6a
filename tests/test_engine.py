# =============================================================================
# test_engine.py - Jack Code Generator Tests
# =============================================================================
# Tests for the syntax-directed Jack code generator. Each test compiles a
# small class and checks the exact IR instruction sequence.
#
# Test coverage includes:
#   - Subroutine headers, constructor and method prologues
#   - let (plain and indexed), if/else, while, do, return
#   - Expressions: left-to-right evaluation, multiply/divide calls, unary ops
#   - Constants: strings, true/false/null/this
#   - Call resolution: bare, variable receiver, class-qualified
#   - Label naming from the shared per-unit counter
#   - Structural errors
# =============================================================================

import pytest

from hack_sdk.jack import (
    CompilationEngine,
    CompilerOptions,
    JackCompiler,
    JackSyntaxError,
    MissingTokenError,
    RuntimeRoutines,
    UnexpectedTokenError,
    compile_jack,
    tokenize,
)
from hack_sdk.vm import Function, parse_vm


# =============================================================================
# Helper Functions
# =============================================================================

def compile_lines(source: str) -> list[str]:
    """Compile a whole class and return its IR lines."""
    return compile_jack(source, "Main.jack").splitlines()


def body(statements: str, decls: str = "", class_decls: str = "") -> list[str]:
    """
    Compile statements inside `function void f()` of class Main and return
    the IR after the function header.
    """
    source = f"""
class Main {{
    {class_decls}
    function void f() {{
        {decls}
        {statements}
    }}
}}
"""
    lines = compile_lines(source)
    assert lines[0].startswith("function Main.f ")
    return lines[1:]


# =============================================================================
# Program Structure Tests
# =============================================================================

class TestStructure:
    """Class and subroutine declarations."""

    def test_empty_class(self):
        """A class with no subroutines produces no IR."""
        assert compile_lines("class Empty { }") == []

    def test_function_header_counts_locals(self):
        """The header carries the number of declared locals."""
        lines = compile_lines("""
            class Main {
                function int f(int a, int b) {
                    var int x, y;
                    var boolean done;
                    return a;
                }
            }
        """)
        assert lines == [
            "function Main.f 3",
            "push argument 0",
            "return",
        ]

    def test_function_arguments_start_at_zero(self):
        lines = compile_lines("""
            class Main {
                function int second(int a, int b) { return b; }
            }
        """)
        assert lines[1] == "push argument 1"

    def test_subroutines_in_order(self):
        lines = compile_lines("""
            class Main {
                function void a() { return; }
                function void b() { return; }
            }
        """)
        headers = [line for line in lines if line.startswith("function")]
        assert headers == ["function Main.a 0", "function Main.b 0"]

    def test_class_variables_produce_no_ir(self):
        lines = compile_lines("""
            class Main {
                static int count;
                field int x, y;
                function void f() { return; }
            }
        """)
        assert lines == ["function Main.f 0", "push constant 0", "return"]

    def test_constructor_prologue(self):
        """A constructor allocates one word per field and sets the this-region."""
        lines = compile_lines("""
            class Point {
                field int x, y;
                static int count;
                constructor Point new(int ax, int ay) {
                    let x = ax;
                    let y = ay;
                    return this;
                }
            }
        """)
        assert lines == [
            "function Point.new 0",
            "push constant 2",
            "call Memory.alloc 1",
            "pop pointer 0",
            "push argument 0",
            "pop this 0",
            "push argument 1",
            "pop this 1",
            "push pointer 0",
            "return",
        ]

    def test_constructor_with_no_fields(self):
        lines = compile_lines("""
            class Unit {
                constructor Unit new() { return this; }
            }
        """)
        assert lines[1:3] == ["push constant 0", "call Memory.alloc 1"]

    def test_method_prologue(self):
        """A method installs argument 0 as the this-region base."""
        lines = compile_lines("""
            class Point {
                field int x;
                method int getX() { return x; }
            }
        """)
        assert lines == [
            "function Point.getX 0",
            "push argument 0",
            "pop pointer 0",
            "push this 0",
            "return",
        ]

    def test_method_parameters_start_at_one(self):
        """Declared parameters of a method follow the receiver."""
        lines = compile_lines("""
            class Point {
                field int x;
                method void setX(int v) { let x = v; return; }
            }
        """)
        assert lines[3:5] == ["push argument 1", "pop this 0"]

    def test_locals_and_arguments_reset_per_subroutine(self):
        lines = compile_lines("""
            class Main {
                function int a(int p) { var int t; let t = p; return t; }
                function int b(int q) { var int u; let u = q; return u; }
            }
        """)
        assert lines == [
            "function Main.a 1",
            "push argument 0",
            "pop local 0",
            "push local 0",
            "return",
            "function Main.b 1",
            "push argument 0",
            "pop local 0",
            "push local 0",
            "return",
        ]

    def test_output_parses_as_ir(self):
        """The emitted text is valid input for the IR parser."""
        text = compile_jack("""
            class Main {
                function void main() {
                    var int i;
                    while (i < 10) { let i = i + 1; }
                    return;
                }
            }
        """)
        instructions = parse_vm(text)
        assert instructions[0] == Function("Main.main", 1)


# =============================================================================
# Statement Tests
# =============================================================================

class TestStatements:
    """Lowering of each statement form."""

    def test_let(self):
        assert body("let x = 5; return;", "var int x;") == [
            "push constant 5",
            "pop local 0",
            "push constant 0",
            "return",
        ]

    def test_let_static(self):
        assert body("let n = n + 1; return;", class_decls="static int n;")[:4] == [
            "push static 0",
            "push constant 1",
            "add",
            "pop static 0",
        ]

    def test_let_array_element(self):
        """Indexed assignment uses the fixed temp/pointer/that sequence."""
        lines = body("let a[i] = 7; return;", "var Array a; var int i;")
        assert lines[:8] == [
            "push local 1",
            "push local 0",
            "add",
            "push constant 7",
            "pop temp 0",
            "pop pointer 1",
            "push temp 0",
            "pop that 0",
        ]

    def test_let_array_element_from_array_element(self):
        """The right-hand side may itself index an array."""
        lines = body("let a[1] = a[2]; return;", "var Array a;")
        assert lines[:12] == [
            "push constant 1",
            "push local 0",
            "add",
            "push constant 2",
            "push local 0",
            "add",
            "pop pointer 1",
            "push that 0",
            "pop temp 0",
            "pop pointer 1",
            "push temp 0",
            "pop that 0",
        ]

    def test_if_without_else(self):
        lines = body("if (x) { let x = 1; } return;", "var int x;")
        assert lines[:6] == [
            "push local 0",
            "not",
            "if-goto IF_FALSE_0",
            "push constant 1",
            "pop local 0",
            "label IF_FALSE_0",
        ]

    def test_if_else(self):
        lines = body("if (x) { let x = 1; } else { let x = 2; } return;", "var int x;")
        assert lines[:10] == [
            "push local 0",
            "not",
            "if-goto IF_FALSE_0",
            "push constant 1",
            "pop local 0",
            "goto IF_END_1",
            "label IF_FALSE_0",
            "push constant 2",
            "pop local 0",
            "label IF_END_1",
        ]

    def test_empty_if_blocks(self):
        lines = body("if (true) { } else { } return;")
        assert lines[:6] == [
            "push constant 0",
            "not",
            "not",
            "if-goto IF_FALSE_0",
            "goto IF_END_1",
            "label IF_FALSE_0",
        ]

    def test_while(self):
        lines = body("while (x) { let x = x - 1; } return;", "var int x;")
        assert lines[:10] == [
            "label WHILE_EXP_0",
            "push local 0",
            "not",
            "if-goto WHILE_END_1",
            "push local 0",
            "push constant 1",
            "sub",
            "pop local 0",
            "goto WHILE_EXP_0",
            "label WHILE_END_1",
        ]

    def test_do_discards_result(self):
        assert body("do Output.printInt(1); return;")[:3] == [
            "push constant 1",
            "call Output.printInt 1",
            "pop temp 0",
        ]

    def test_return_void(self):
        """A bare return pushes a dummy 0."""
        assert body("return;") == ["push constant 0", "return"]

    def test_return_expression(self):
        assert body("return 1 + 2;") == [
            "push constant 1",
            "push constant 2",
            "add",
            "return",
        ]

    def test_statements_after_return_still_compiled(self):
        assert body("return; return;") == [
            "push constant 0", "return", "push constant 0", "return",
        ]


# =============================================================================
# Label Numbering Tests
# =============================================================================

class TestLabels:
    """Control-flow labels come from one counter per unit."""

    def test_nested_labels_unique(self):
        lines = body(
            "while (x) { if (x) { let x = 0; } } return;",
            "var int x;",
        )
        labels = [line.split()[1] for line in lines if line.startswith("label")]
        assert labels == ["WHILE_EXP_0", "IF_FALSE_2", "WHILE_END_1"]

    def test_counter_continues_across_subroutines(self):
        """The counter is not reset between subroutines of one class."""
        lines = compile_lines("""
            class Main {
                function void a() { while (true) { } return; }
                function void b() { if (true) { } return; }
            }
        """)
        assert "label WHILE_EXP_0" in lines
        assert "label WHILE_END_1" in lines
        assert "label IF_FALSE_2" in lines

    def test_counter_restarts_per_unit(self):
        source = "class A { function void f() { while (true) { } return; } }"
        assert compile_jack(source) == compile_jack(source)
        assert "label WHILE_EXP_0" in compile_jack(source)

    def test_labels_never_repeat(self):
        lines = body(
            "if (x) { } if (x) { } else { } while (x) { while (x) { } } return;",
            "var int x;",
        )
        labels = [line.split()[1] for line in lines if line.startswith("label")]
        assert len(labels) == len(set(labels))


# =============================================================================
# Expression Tests
# =============================================================================

class TestExpressions:
    """Expression lowering."""

    def test_left_to_right_without_precedence(self):
        """1 + 2 * 3 evaluates as (1 + 2) * 3."""
        assert body("return 1 + 2 * 3;") == [
            "push constant 1",
            "push constant 2",
            "add",
            "push constant 3",
            "call Math.multiply 2",
            "return",
        ]

    def test_parentheses_group(self):
        assert body("return 2 * (3 + 4);") == [
            "push constant 2",
            "push constant 3",
            "push constant 4",
            "add",
            "call Math.multiply 2",
            "return",
        ]

    def test_divide(self):
        assert body("return 8 / 2;")[2] == "call Math.divide 2"

    @pytest.mark.parametrize("op,mnemonic", [
        ("+", "add"),
        ("-", "sub"),
        ("&", "and"),
        ("|", "or"),
        ("<", "lt"),
        (">", "gt"),
        ("=", "eq"),
    ])
    def test_binary_operator(self, op, mnemonic):
        assert body(f"return 1 {op} 2;") == [
            "push constant 1",
            "push constant 2",
            mnemonic,
            "return",
        ]

    def test_unary_minus(self):
        assert body("return -x;", "var int x;") == ["push local 0", "neg", "return"]

    def test_unary_not(self):
        assert body("return ~x;", "var int x;") == ["push local 0", "not", "return"]

    def test_unary_binds_to_term(self):
        """-x + 1 negates x only."""
        assert body("return -x + 1;", "var int x;") == [
            "push local 0",
            "neg",
            "push constant 1",
            "add",
            "return",
        ]

    def test_binary_minus_after_term(self):
        assert body("return x - -1;", "var int x;") == [
            "push local 0",
            "push constant 1",
            "neg",
            "sub",
            "return",
        ]

    def test_array_read(self):
        assert body("return a[3];", "var Array a;") == [
            "push constant 3",
            "push local 0",
            "add",
            "pop pointer 1",
            "push that 0",
            "return",
        ]

    def test_large_integer_passed_through(self):
        assert body("return 40000;")[0] == "push constant 40000"

    def test_unresolved_variable_maps_to_temp(self):
        """An undeclared name reads temp 0 instead of failing."""
        assert body("return ghost;") == ["push temp 0", "return"]


# =============================================================================
# Constant Tests
# =============================================================================

class TestConstants:
    """Keyword and string constants."""

    def test_true(self):
        assert body("return true;") == ["push constant 0", "not", "return"]

    def test_false(self):
        assert body("return false;") == ["push constant 0", "return"]

    def test_null(self):
        assert body("return null;") == ["push constant 0", "return"]

    def test_this(self):
        lines = compile_lines("""
            class Box {
                method Box self() { return this; }
            }
        """)
        assert lines[-2:] == ["push pointer 0", "return"]

    def test_string_literal(self):
        """A string is built with String.new then one appendChar per char."""
        assert body("return \"Hi\";") == [
            "push constant 2",
            "call String.new 1",
            "push constant 72",
            "call String.appendChar 2",
            "push constant 105",
            "call String.appendChar 2",
            "return",
        ]

    def test_empty_string_literal(self):
        assert body('return "";') == ["push constant 0", "call String.new 1", "return"]


# =============================================================================
# Call Resolution Tests
# =============================================================================

class TestCalls:
    """Subroutine call lowering."""

    def test_class_function_call(self):
        """An unknown qualifier is a class name: no receiver."""
        assert body("return Math.max(1, 2);") == [
            "push constant 1",
            "push constant 2",
            "call Math.max 2",
            "return",
        ]

    def test_method_call_on_variable(self):
        """A known variable is pushed as argument 0 and its type names the class."""
        assert body("do p.move(1, 2); return;", "var Point p;")[:5] == [
            "push local 0",
            "push constant 1",
            "push constant 2",
            "call Point.move 3",
            "pop temp 0",
        ]

    def test_method_call_on_field(self):
        lines = compile_lines("""
            class Game {
                field Ball ball;
                method void tick() { do ball.move(); return; }
            }
        """)
        assert lines[3:6] == ["push this 0", "call Ball.move 1", "pop temp 0"]

    def test_method_call_on_static(self):
        lines = body("do screen.clear(); return;", class_decls="static Screen screen;")
        assert lines[:2] == ["push static 0", "call Screen.clear 1"]

    def test_bare_call_targets_current_object(self):
        """name(args) is a method call on this."""
        lines = compile_lines("""
            class Game {
                method void run() { do step(5); return; }
                method void step(int n) { return; }
            }
        """)
        assert lines[3:6] == [
            "push pointer 0",
            "push constant 5",
            "call Game.step 2",
        ]

    def test_bare_call_in_expression(self):
        assert body("return size();") == [
            "push pointer 0",
            "call Main.size 1",
            "return",
        ]

    def test_call_with_no_arguments(self):
        assert body("return Sys.time();") == ["call Sys.time 0", "return"]

    def test_nested_call_arguments(self):
        assert body("return Math.max(Math.abs(x), 1);", "var int x;") == [
            "push local 0",
            "call Math.abs 1",
            "push constant 1",
            "call Math.max 2",
            "return",
        ]


# =============================================================================
# Configuration Tests
# =============================================================================

class TestRuntimeRoutines:
    """Runtime routine names are configurable."""

    def test_custom_routines(self):
        options = CompilerOptions(runtime=RuntimeRoutines(
            allocate="Heap.take",
            multiply="Alu.mul",
            divide="Alu.div",
            string_new="Str.make",
            string_append="Str.push",
        ))
        result = JackCompiler(options).compile_source("""
            class Box {
                field int w;
                constructor Box new() {
                    let w = 2 * 3 / 1;
                    do Out.print("a");
                    return this;
                }
            }
        """)
        text = result.vm_text
        assert "call Heap.take 1" in text
        assert "call Alu.mul 2" in text
        assert "call Alu.div 2" in text
        assert "call Str.make 1" in text
        assert "call Str.push 2" in text
        assert "Memory.alloc" not in text

    def test_engine_direct_use(self):
        engine = CompilationEngine(tokenize("class K { function void f() { return; } }"))
        writer = engine.compile_class()
        assert engine.class_name == "K"
        assert writer.to_text() == "function K.f 0\npush constant 0\nreturn\n"


# =============================================================================
# Structural Error Tests
# =============================================================================

class TestErrors:
    """The first structural error aborts the unit."""

    def test_missing_semicolon(self):
        source = "class Main {\n  function void f() {\n    let x = 1\n  }\n}\n"
        with pytest.raises(MissingTokenError) as exc_info:
            compile_jack(source, "Main.jack")

        error = exc_info.value
        assert error.location.filename == "Main.jack"
        assert error.location.line == 4
        assert error.location.column == 3
        assert error.found == "'}'"
        message = str(error)
        assert message.startswith("Main.jack:4:3: error: expected ';'")
        assert "hint: found '}'" in message
        assert "  }" in message

    def test_missing_class_keyword(self):
        with pytest.raises(MissingTokenError) as exc_info:
            compile_jack("function void f() { }")
        assert "'class'" in exc_info.value.expected

    def test_missing_class_name(self):
        with pytest.raises(MissingTokenError):
            compile_jack("class { }")

    def test_unexpected_term(self):
        """A token that cannot start a term is reported as unexpected."""
        with pytest.raises(UnexpectedTokenError) as exc_info:
            compile_jack("class Main { function void f() { let x = ; } }")
        assert exc_info.value.found == ";"
        assert "expected a term" in str(exc_info.value)

    def test_keyword_as_term(self):
        with pytest.raises(UnexpectedTokenError):
            compile_jack("class Main { function void f() { return while; } }")

    def test_truncated_input(self):
        """Running out of tokens reports end of input."""
        with pytest.raises(MissingTokenError) as exc_info:
            compile_jack("class Main { function void f() { return;")
        assert "end of input" in str(exc_info.value)

    def test_unclosed_argument_list(self):
        with pytest.raises(JackSyntaxError):
            compile_jack("class Main { function void f() { do Out.print(1; } }")

    def test_bad_type(self):
        with pytest.raises(MissingTokenError) as exc_info:
            compile_jack("class Main { field 5 x; }")
        assert "type" in exc_info.value.expected

    def test_void_only_as_return_type(self):
        with pytest.raises(MissingTokenError):
            compile_jack("class Main { field void x; }")

    def test_stray_else(self):
        """else without if ends the statement list and fails the body."""
        with pytest.raises(MissingTokenError):
            compile_jack("class Main { function void f() { else { } } }")

    def test_error_is_hack_error(self):
        from hack_sdk.errors import HackError
        with pytest.raises(HackError):
            compile_jack("class")


# =============================================================================
# Compiler Facade Tests
# =============================================================================

class TestCompilerFacade:
    """JackCompiler file handling."""

    def test_compile_source_result(self):
        result = JackCompiler().compile_source(
            "class Main { function void main() { return; } }", "Main.jack"
        )
        assert result.filename == "Main.jack"
        assert result.class_name == "Main"
        assert result.token_count == 13
        assert result.vm_text == "function Main.main 0\npush constant 0\nreturn\n"

    def test_compile_file(self, tmp_path):
        path = tmp_path / "Main.jack"
        path.write_text("class Main { function void main() { return; } }")
        result = JackCompiler().compile_file(path)
        assert result.filename == str(path)
        assert result.vm_text.startswith("function Main.main 0")

    def test_compile_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            JackCompiler().compile_file(tmp_path / "Nope.jack")

    def test_compile_files_keeps_order(self, tmp_path):
        paths = []
        for name in ("Zeta", "Alpha"):
            path = tmp_path / f"{name}.jack"
            path.write_text(f"class {name} {{ function void f() {{ return; }} }}")
            paths.append(path)

        results = JackCompiler().compile_files(paths)
        assert [r.class_name for r in results] == ["Zeta", "Alpha"]

    def test_units_are_independent(self):
        """Compiling one unit leaves no state behind for the next."""
        compiler = JackCompiler()
        a = "class A { static int s; function void f() { let s = 1; while (s) { } return; } }"
        b = "class B { static int t; function void g() { let t = 2; while (t) { } return; } }"
        first = compiler.compile_source(a).vm_text
        compiler.compile_source(b)
        assert compiler.compile_source(a).vm_text == first
        assert "label WHILE_EXP_0" in compiler.compile_source(b).vm_text

    def test_error_location_names_the_file(self, tmp_path):
        path = tmp_path / "Bad.jack"
        path.write_text("class Bad {\n  function void f() {\n    return\n  }\n}\n")
        with pytest.raises(UnexpectedTokenError) as exc_info:
            JackCompiler().compile_file(path)
        assert exc_info.value.location.filename == str(path)
