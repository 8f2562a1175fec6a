"""
Jack Syntax-Directed Code Generator
===================================

This module compiles one Jack class straight to stack-machine IR in a single
top-down pass. There is no syntax tree: each `_compile_*` method recognises
one production and emits its IR while it consumes the tokens.

Grammar (Simplified EBNF)
-------------------------
class           ::= 'class' NAME '{' classVarDec* subroutineDec* '}'
classVarDec     ::= ('static' | 'field') type NAME (',' NAME)* ';'
subroutineDec   ::= ('constructor' | 'function' | 'method')
                    ('void' | type) NAME '(' parameterList ')' body
parameterList   ::= (type NAME (',' type NAME)*)?
body            ::= '{' varDec* statement* '}'
varDec          ::= 'var' type NAME (',' NAME)* ';'
type            ::= 'int' | 'char' | 'boolean' | NAME

statement       ::= let | if | while | do | return
let             ::= 'let' NAME ('[' expr ']')? '=' expr ';'
if              ::= 'if' '(' expr ')' '{' statement* '}'
                    ('else' '{' statement* '}')?
while           ::= 'while' '(' expr ')' '{' statement* '}'
do              ::= 'do' subroutineCall ';'
return          ::= 'return' expr? ';'

expr            ::= term (op term)*          (strictly left to right)
op              ::= '+' | '-' | '*' | '/' | '&' | '|' | '<' | '>' | '='
term            ::= INT | STRING | 'true' | 'false' | 'null' | 'this'
                  | NAME | NAME '[' expr ']' | subroutineCall
                  | '(' expr ')' | ('-' | '~') term
subroutineCall  ::= NAME '(' exprList ')' | NAME '.' NAME '(' exprList ')'

A term starting with NAME is disambiguated by peeking one token past the
name: '[' means array indexing, '(' or '.' a call, anything else a plain
variable.

Storage Mapping
---------------
| Symbol kind | Segment  |
|-------------|----------|
| static      | static   |
| field       | this     |
| argument    | argument |
| local (var) | local    |
| unresolved  | temp 0   |

Call Resolution
---------------
- `name(args)`: method on the current object. Pushes `pointer 0` as
  argument 0 and calls `ClassName.name`.
- `x.name(args)` with `x` in the symbol table: method on `x`. Pushes `x`
  and calls `TypeOfX.name`.
- `X.name(args)` otherwise: `X` is taken to be a class name and
  `X.name` is called with no receiver. No check is made that the class
  exists.

Every call leaves exactly one value on the stack, so `do` discards it with
`pop temp 0` and a bare `return;` pushes a dummy 0.
"""

from dataclasses import dataclass
from typing import Optional

from hack_sdk.jack.errors import MissingTokenError, UnexpectedTokenError
from hack_sdk.jack.lexer import JackToken, JackTokenType, Keyword, TokenStream
from hack_sdk.jack.symbols import Symbol, SymbolKind, SymbolTable
from hack_sdk.labels import LabelGenerator
from hack_sdk.vm.instructions import ArithmeticOp, Segment
from hack_sdk.vm.writer import VMWriter


# =============================================================================
# Runtime Library Routines
# =============================================================================

@dataclass(frozen=True)
class RuntimeRoutines:
    """
    Names of the runtime library routines referenced by generated code.

    These are referenced by name only; the library itself is linked in
    from elsewhere.
    """
    allocate: str = "Memory.alloc"
    multiply: str = "Math.multiply"
    divide: str = "Math.divide"
    string_new: str = "String.new"
    string_append: str = "String.appendChar"


# Binary operators lowered to a single IR operation
BINARY_OPS: dict[str, ArithmeticOp] = {
    "+": ArithmeticOp.ADD,
    "-": ArithmeticOp.SUB,
    "&": ArithmeticOp.AND,
    "|": ArithmeticOp.OR,
    "<": ArithmeticOp.LT,
    ">": ArithmeticOp.GT,
    "=": ArithmeticOp.EQ,
}

UNARY_OPS: dict[str, ArithmeticOp] = {
    "-": ArithmeticOp.NEG,
    "~": ArithmeticOp.NOT,
}

KIND_SEGMENTS: dict[SymbolKind, Segment] = {
    SymbolKind.STATIC: Segment.STATIC,
    SymbolKind.FIELD: Segment.THIS,
    SymbolKind.ARG: Segment.ARGUMENT,
    SymbolKind.VAR: Segment.LOCAL,
}

PRIMITIVE_TYPES = (Keyword.INT, Keyword.CHAR, Keyword.BOOLEAN)

STATEMENT_KEYWORDS = (Keyword.LET, Keyword.IF, Keyword.WHILE, Keyword.DO, Keyword.RETURN)

SUBROUTINE_KEYWORDS = (Keyword.CONSTRUCTOR, Keyword.FUNCTION, Keyword.METHOD)


class CompilationEngine:
    """
    Recursive-descent compiler for one Jack class.

    The engine owns the per-unit state: the symbol table and the label
    counter. Create a new engine for every compilation unit.

    Usage:
        engine = CompilationEngine(tokenize(source, "Main.jack"))
        engine.compile_class()
        print(engine.writer.to_text())

    Attributes:
        tokens: Token stream of the unit
        writer: IR sink
        symbols: Two-scope symbol table
        class_name: Name of the class being compiled (set by compile_class)
    """

    def __init__(
        self,
        tokens: TokenStream,
        writer: Optional[VMWriter] = None,
        symbols: Optional[SymbolTable] = None,
        runtime: Optional[RuntimeRoutines] = None,
    ):
        self.tokens = tokens
        self.writer = writer if writer is not None else VMWriter()
        self.symbols = symbols if symbols is not None else SymbolTable()
        self.runtime = runtime or RuntimeRoutines()
        self.labels = LabelGenerator()
        self.class_name = ""

    # =========================================================================
    # Token Helpers
    # =========================================================================

    def _error_context(self, token: JackToken) -> dict:
        return {
            "location": token.location,
            "source_line": self.tokens.source_line(token.line),
        }

    def _missing(self, expected: str) -> MissingTokenError:
        token = self.tokens.current
        return MissingTokenError(expected, f"'{token}'", **self._error_context(token))

    def _unexpected(self, expected: str) -> UnexpectedTokenError:
        token = self.tokens.current
        return UnexpectedTokenError(str(token), expected, **self._error_context(token))

    def _at_symbol(self, *chars: str) -> bool:
        return self.tokens.current.is_symbol(*chars)

    def _at_keyword(self, *keywords: Keyword) -> bool:
        return self.tokens.current.is_keyword(*keywords)

    def _expect_symbol(self, char: str, context: str) -> JackToken:
        if not self._at_symbol(char):
            raise self._missing(f"'{char}' {context}")
        return self.tokens.advance()

    def _expect_keyword(self, keyword: Keyword, context: str) -> JackToken:
        if not self._at_keyword(keyword):
            raise self._missing(f"'{keyword.value}' {context}")
        return self.tokens.advance()

    def _expect_identifier(self, context: str) -> str:
        if self.tokens.current.type != JackTokenType.IDENTIFIER:
            raise self._missing(context)
        return self.tokens.advance().value

    def _compile_type(self, allow_void: bool = False) -> str:
        """Consume a type and return its name."""
        token = self.tokens.current
        if token.is_keyword(*PRIMITIVE_TYPES) or (allow_void and token.is_keyword(Keyword.VOID)):
            self.tokens.advance()
            return token.value.value
        return self._expect_identifier("a type (int, char, boolean or a class name)")

    # =========================================================================
    # Program Structure
    # =========================================================================

    def compile_class(self) -> VMWriter:
        """
        Compile the whole unit.

        Returns:
            The writer holding the unit's IR

        Raises:
            JackSyntaxError: On the first structural mismatch
        """
        self.symbols.start_class()
        self._expect_keyword(Keyword.CLASS, "at the start of the unit")
        self.class_name = self._expect_identifier("class name")
        self._expect_symbol("{", "after the class name")

        while self._at_keyword(Keyword.STATIC, Keyword.FIELD):
            self._compile_class_var_dec()

        while self._at_keyword(*SUBROUTINE_KEYWORDS):
            self._compile_subroutine()

        self._expect_symbol("}", "to close the class body")
        return self.writer

    def _compile_class_var_dec(self) -> None:
        kind = SymbolKind.STATIC if self._at_keyword(Keyword.STATIC) else SymbolKind.FIELD
        self.tokens.advance()
        type_name = self._compile_type()

        self.symbols.define(self._expect_identifier("class variable name"), type_name, kind)
        while self._at_symbol(","):
            self.tokens.advance()
            self.symbols.define(self._expect_identifier("class variable name"), type_name, kind)

        self._expect_symbol(";", "after the class variable declaration")

    def _compile_subroutine(self) -> None:
        subroutine_kind = self.tokens.advance().value
        self._compile_type(allow_void=True)
        name = self._expect_identifier("subroutine name")

        self.symbols.start_subroutine()
        if subroutine_kind == Keyword.METHOD:
            self.symbols.define("this", self.class_name, SymbolKind.ARG)

        self._expect_symbol("(", "before the parameter list")
        self._compile_parameter_list()
        self._expect_symbol(")", "after the parameter list")

        self._expect_symbol("{", "to open the subroutine body")
        while self._at_keyword(Keyword.VAR):
            self._compile_var_dec()

        self.writer.write_function(
            f"{self.class_name}.{name}",
            self.symbols.var_count(SymbolKind.VAR),
        )

        if subroutine_kind == Keyword.CONSTRUCTOR:
            # Allocate the object and make it the this-region
            self.writer.write_push(Segment.CONSTANT, self.symbols.var_count(SymbolKind.FIELD))
            self.writer.write_call(self.runtime.allocate, 1)
            self.writer.write_pop(Segment.POINTER, 0)
        elif subroutine_kind == Keyword.METHOD:
            self.writer.write_push(Segment.ARGUMENT, 0)
            self.writer.write_pop(Segment.POINTER, 0)

        self._compile_statements()
        self._expect_symbol("}", "to close the subroutine body")

    def _compile_parameter_list(self) -> None:
        if self._at_symbol(")"):
            return

        while True:
            type_name = self._compile_type()
            self.symbols.define(self._expect_identifier("parameter name"), type_name, SymbolKind.ARG)
            if not self._at_symbol(","):
                break
            self.tokens.advance()

    def _compile_var_dec(self) -> None:
        self.tokens.advance()
        type_name = self._compile_type()

        self.symbols.define(self._expect_identifier("variable name"), type_name, SymbolKind.VAR)
        while self._at_symbol(","):
            self.tokens.advance()
            self.symbols.define(self._expect_identifier("variable name"), type_name, SymbolKind.VAR)

        self._expect_symbol(";", "after the variable declaration")

    # =========================================================================
    # Statements
    # =========================================================================

    def _compile_statements(self) -> None:
        """Compile statements until a token that starts none of them."""
        handlers = {
            Keyword.LET: self._compile_let,
            Keyword.IF: self._compile_if,
            Keyword.WHILE: self._compile_while,
            Keyword.DO: self._compile_do,
            Keyword.RETURN: self._compile_return,
        }
        while self._at_keyword(*STATEMENT_KEYWORDS):
            handlers[self.tokens.current.value]()

    def _compile_let(self) -> None:
        self.tokens.advance()
        name = self._expect_identifier("variable name after 'let'")
        segment, index = self._resolve(name)

        is_array = self._at_symbol("[")
        if is_array:
            self.tokens.advance()
            self._compile_expression()
            self._expect_symbol("]", "after the array index")
            self.writer.write_push(segment, index)
            self.writer.write_arithmetic(ArithmeticOp.ADD)

        self._expect_symbol("=", "in let statement")
        self._compile_expression()
        self._expect_symbol(";", "after let statement")

        if is_array:
            # Value is on top of the element address: park it in temp 0
            # while the address is moved into the that-region base.
            self.writer.write_pop(Segment.TEMP, 0)
            self.writer.write_pop(Segment.POINTER, 1)
            self.writer.write_push(Segment.TEMP, 0)
            self.writer.write_pop(Segment.THAT, 0)
        else:
            self.writer.write_pop(segment, index)

    def _compile_if(self) -> None:
        self.tokens.advance()
        false_label = self.labels.new("IF_FALSE")
        end_label = self.labels.new("IF_END")

        self._expect_symbol("(", "after 'if'")
        self._compile_expression()
        self._expect_symbol(")", "after the if condition")

        self.writer.write_arithmetic(ArithmeticOp.NOT)
        self.writer.write_if(false_label)

        self._compile_block("if")

        if self._at_keyword(Keyword.ELSE):
            self.writer.write_goto(end_label)
            self.writer.write_label(false_label)
            self.tokens.advance()
            self._compile_block("else")
            self.writer.write_label(end_label)
        else:
            self.writer.write_label(false_label)

    def _compile_while(self) -> None:
        self.tokens.advance()
        top_label = self.labels.new("WHILE_EXP")
        end_label = self.labels.new("WHILE_END")

        self.writer.write_label(top_label)
        self._expect_symbol("(", "after 'while'")
        self._compile_expression()
        self._expect_symbol(")", "after the while condition")

        self.writer.write_arithmetic(ArithmeticOp.NOT)
        self.writer.write_if(end_label)

        self._compile_block("while")

        self.writer.write_goto(top_label)
        self.writer.write_label(end_label)

    def _compile_block(self, owner: str) -> None:
        self._expect_symbol("{", f"to open the {owner} block")
        self._compile_statements()
        self._expect_symbol("}", f"to close the {owner} block")

    def _compile_do(self) -> None:
        self.tokens.advance()
        name = self._expect_identifier("subroutine call after 'do'")
        self._compile_subroutine_call(name)
        self._expect_symbol(";", "after do statement")
        self.writer.write_pop(Segment.TEMP, 0)

    def _compile_return(self) -> None:
        self.tokens.advance()
        if self._at_symbol(";"):
            self.writer.write_push(Segment.CONSTANT, 0)
        else:
            self._compile_expression()
        self._expect_symbol(";", "after return statement")
        self.writer.write_return()

    # =========================================================================
    # Expressions
    # =========================================================================

    def _compile_expression(self) -> None:
        """Compile term (op term)*, applying operators left to right."""
        self._compile_term()

        while self._at_symbol(*BINARY_OPS, "*", "/"):
            op = self.tokens.advance().value
            self._compile_term()

            if op == "*":
                self.writer.write_call(self.runtime.multiply, 2)
            elif op == "/":
                self.writer.write_call(self.runtime.divide, 2)
            else:
                self.writer.write_arithmetic(BINARY_OPS[op])

    def _compile_term(self) -> None:
        token = self.tokens.current

        if token.type == JackTokenType.INT_CONST:
            self.tokens.advance()
            self.writer.write_push(Segment.CONSTANT, token.value)

        elif token.type == JackTokenType.STRING_CONST:
            self.tokens.advance()
            self._compile_string(token.value)

        elif token.type == JackTokenType.KEYWORD:
            self._compile_keyword_constant()

        elif token.is_symbol("("):
            self.tokens.advance()
            self._compile_expression()
            self._expect_symbol(")", "to close the parenthesised expression")

        elif token.is_symbol(*UNARY_OPS):
            self.tokens.advance()
            self._compile_term()
            self.writer.write_arithmetic(UNARY_OPS[token.value])

        elif token.type == JackTokenType.IDENTIFIER:
            lookahead = self.tokens.peek_next()
            self.tokens.advance()
            if lookahead.is_symbol("["):
                self._compile_array_read(token.value)
            elif lookahead.is_symbol("(", "."):
                self._compile_subroutine_call(token.value)
            else:
                self.writer.write_push(*self._resolve(token.value))

        else:
            raise self._unexpected("a term")

    def _compile_keyword_constant(self) -> None:
        token = self.tokens.current
        if token.is_keyword(Keyword.TRUE):
            self.writer.write_push(Segment.CONSTANT, 0)
            self.writer.write_arithmetic(ArithmeticOp.NOT)
        elif token.is_keyword(Keyword.FALSE, Keyword.NULL):
            self.writer.write_push(Segment.CONSTANT, 0)
        elif token.is_keyword(Keyword.THIS):
            self.writer.write_push(Segment.POINTER, 0)
        else:
            raise self._unexpected("true, false, null or this")
        self.tokens.advance()

    def _compile_string(self, text: str) -> None:
        self.writer.write_push(Segment.CONSTANT, len(text))
        self.writer.write_call(self.runtime.string_new, 1)
        for char in text:
            self.writer.write_push(Segment.CONSTANT, ord(char))
            self.writer.write_call(self.runtime.string_append, 2)

    def _compile_array_read(self, name: str) -> None:
        self.tokens.advance()
        self._compile_expression()
        self._expect_symbol("]", "after the array index")
        self.writer.write_push(*self._resolve(name))
        self.writer.write_arithmetic(ArithmeticOp.ADD)
        self.writer.write_pop(Segment.POINTER, 1)
        self.writer.write_push(Segment.THAT, 0)

    def _compile_subroutine_call(self, name: str) -> None:
        """Compile a call whose first identifier has been consumed."""
        receivers = 0

        if self._at_symbol("."):
            self.tokens.advance()
            method = self._expect_identifier("subroutine name after '.'")
            symbol = self.symbols.lookup(name)
            if symbol is not None:
                self.writer.write_push(*self._segment_of(symbol))
                target = f"{symbol.type}.{method}"
                receivers = 1
            else:
                target = f"{name}.{method}"
        else:
            self.writer.write_push(Segment.POINTER, 0)
            target = f"{self.class_name}.{name}"
            receivers = 1

        self._expect_symbol("(", "before the argument list")
        arg_count = self._compile_expression_list()
        self._expect_symbol(")", "after the argument list")

        self.writer.write_call(target, receivers + arg_count)

    def _compile_expression_list(self) -> int:
        if self._at_symbol(")"):
            return 0

        self._compile_expression()
        count = 1
        while self._at_symbol(","):
            self.tokens.advance()
            self._compile_expression()
            count += 1
        return count

    # =========================================================================
    # Name Resolution
    # =========================================================================

    @staticmethod
    def _segment_of(symbol: Symbol) -> tuple[Segment, int]:
        return KIND_SEGMENTS[symbol.kind], symbol.index

    def _resolve(self, name: str) -> tuple[Segment, int]:
        """Storage location of a variable; unknown names map to temp 0."""
        symbol = self.symbols.lookup(name)
        if symbol is None:
            return Segment.TEMP, 0
        return self._segment_of(symbol)
