"""Recursive-descent parser for the Lox language.

Grammar, lowest to highest precedence::

    program     -> declaration* EOF
    declaration -> classDecl | funDecl | varDecl | statement
    statement   -> forStmt | ifStmt | printStmt | returnStmt
                 | whileStmt | block | exprStmt
    expression  -> assignment
    assignment  -> ( call "." )? IDENT "=" assignment | logic_or
    logic_or    -> logic_and ( "or" logic_and )*
    logic_and   -> equality ( "and" equality )*
    equality    -> comparison ( ( "!=" | "==" ) comparison )*
    comparison  -> term ( ( ">" | ">=" | "<" | "<=" ) term )*
    term        -> factor ( ( "-" | "+" ) factor )*
    factor      -> unary ( ( "/" | "*" ) unary )*
    unary       -> ( "!" | "-" ) unary | call
    call        -> primary ( "(" arguments? ")" | "." IDENT )*
    primary     -> "true" | "false" | "nil" | NUMBER | STRING | IDENT
                 | "(" expression ")" | "this" | "super" "." IDENT

Syntax errors are collected rather than raised. After an error the
parser discards tokens up to the next statement boundary and carries
on, so one run reports roughly one error per broken statement.
"""

from __future__ import annotations

import sys
from typing import Callable, List, Optional, Sequence

from .ast import (
    Assign, Binary, Block, Call, Class, Expr, Expression, Function, Get,
    Grouping, If, Literal, Logical, Print, Return, Set, Stmt, Super, This,
    Unary, Var, Variable, While,
)
from .errors import CompileError, ParseError
from .scanner import scan_tokens
from .tokens import EOF, IDENT, NUMBER, STRING, Token

MAX_ARGUMENTS = 255

# Each nesting level of a Lox call or expression costs a dozen or so Python
# frames in the recursive parser, resolver and interpreter.
RECURSION_LIMIT = 10000

EQUALITY_TOKENS = ('!=', '==')
COMPARISON_TOKENS = ('>', '>=', '<', '<=')
TERM_TOKENS = ('-', '+')
FACTOR_TOKENS = ('/', '*')
UNARY_TOKENS = ('!', '-')

# Tokens that begin a declaration or statement; synchronize stops before them.
STATEMENT_STARTS = frozenset({'class', 'fun', 'var', 'for', 'if', 'while', 'print', 'return'})


def ensure_recursion_limit(limit: int = RECURSION_LIMIT):
    if sys.getrecursionlimit() < limit:
        sys.setrecursionlimit(limit)


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0
        self.errors: List[ParseError] = []
        ensure_recursion_limit()

    def parse(self) -> List[Stmt]:
        statements: List[Stmt] = []
        while not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    # Token helpers
    def peek(self) -> Token:
        return self.tokens[self.pos]

    def previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def is_at_end(self) -> bool:
        return self.peek().type == EOF

    def advance(self) -> Token:
        if not self.is_at_end():
            self.pos += 1
        return self.previous()

    def check(self, type_: str) -> bool:
        if self.is_at_end():
            return False
        return self.peek().type == type_

    def match(self, *types: str) -> bool:
        for type_ in types:
            if self.check(type_):
                self.advance()
                return True
        return False

    def consume(self, type_: str, message: str) -> Token:
        if self.check(type_):
            return self.advance()
        raise ParseError(self.peek(), message)

    def synchronize(self) -> None:
        self.advance()
        while not self.is_at_end():
            if self.previous().type == ';':
                return
            if self.peek().type in STATEMENT_STARTS:
                return
            self.advance()

    # Declarations
    def declaration(self) -> Optional[Stmt]:
        try:
            if self.match('class'):
                return self.class_declaration()
            if self.match('fun'):
                return self.function('function')
            if self.match('var'):
                return self.var_declaration()
            return self.statement()
        except ParseError as error:
            self.errors.append(error)
            self.synchronize()
            return None
        except RecursionError:
            self.errors.append(ParseError(self.peek(), "Expression nesting too deep."))
            self.synchronize()
            return None

    def class_declaration(self) -> Class:
        name = self.consume(IDENT, 'Expected class name.')
        superclass = None
        if self.match('<'):
            self.consume(IDENT, 'Expected superclass name.')
            superclass = Variable(self.previous())
        self.consume('{', "Expected '{' before class body.")
        methods: List[Function] = []
        while not self.check('}') and not self.is_at_end():
            methods.append(self.function('method'))
        self.consume('}', "Expected '}' after class body.")
        return Class(name, superclass, methods)

    def function(self, kind: str) -> Function:
        name = self.consume(IDENT, f'Expected {kind} name.')
        self.consume('(', f"Expected '(' after {kind} name.")
        params: List[Token] = []
        if not self.check(')'):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    raise ParseError(self.peek(), f"Can't have more than {MAX_ARGUMENTS} parameters.")
                params.append(self.consume(IDENT, 'Expected parameter name.'))
                if not self.match(','):
                    break
        self.consume(')', "Expected ')' after parameters.")
        self.consume('{', f"Expected '{{' before {kind} body.")
        body = self.block()
        return Function(name, params, body)

    def var_declaration(self) -> Var:
        name = self.consume(IDENT, 'Expected variable name.')
        initializer = None
        if self.match('='):
            initializer = self.expression()
        self.consume(';', "Expected ';' after variable declaration.")
        return Var(name, initializer)

    # Statements
    def statement(self) -> Stmt:
        if self.match('for'):
            return self.for_statement()
        if self.match('if'):
            return self.if_statement()
        if self.match('print'):
            return self.print_statement()
        if self.match('return'):
            return self.return_statement()
        if self.match('while'):
            return self.while_statement()
        if self.match('{'):
            return Block(self.block())
        return self.expression_statement()

    def for_statement(self) -> Stmt:
        """Desugar ``for`` into an equivalent ``while`` inside a block."""
        self.consume('(', "Expected '(' after 'for'.")
        if self.match(';'):
            initializer = None
        elif self.match('var'):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(';'):
            condition = self.expression()
        self.consume(';', "Expected ';' after loop condition.")

        increment = None
        if not self.check(')'):
            increment = self.expression()
        self.consume(')', "Expected ')' after for clauses.")

        body = self.statement()
        if increment is not None:
            body = Block([body, Expression(increment)])
        if condition is None:
            condition = Literal(True)
        body = While(condition, body)
        if initializer is not None:
            body = Block([initializer, body])
        return body

    def if_statement(self) -> If:
        self.consume('(', "Expected '(' after 'if'.")
        condition = self.expression()
        self.consume(')', "Expected ')' after if condition.")
        then_branch = self.statement()
        else_branch = None
        if self.match('else'):
            else_branch = self.statement()
        return If(condition, then_branch, else_branch)

    def print_statement(self) -> Print:
        value = self.expression()
        self.consume(';', "Expected ';' after value.")
        return Print(value)

    def return_statement(self) -> Return:
        keyword = self.previous()
        value = None
        if not self.check(';'):
            value = self.expression()
        self.consume(';', "Expected ';' after return value.")
        return Return(keyword, value)

    def while_statement(self) -> While:
        self.consume('(', "Expected '(' after 'while'.")
        condition = self.expression()
        self.consume(')', "Expected ')' after condition.")
        body = self.statement()
        return While(condition, body)

    def block(self) -> List[Stmt]:
        statements: List[Stmt] = []
        while not self.check('}') and not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        self.consume('}', "Expected '}' after block.")
        return statements

    def expression_statement(self) -> Expression:
        expr = self.expression()
        self.consume(';', "Expected ';' after expression.")
        return Expression(expr)

    # Expressions
    def expression(self) -> Expr:
        return self.assignment()

    def assignment(self) -> Expr:
        expr = self.logic_or()
        if self.match('='):
            equals = self.previous()
            value = self.assignment()
            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            if isinstance(expr, Get):
                return Set(expr.object, expr.name, value)
            raise ParseError(equals, 'Invalid assignment target.')
        return expr

    def logic_or(self) -> Expr:
        expr = self.logic_and()
        while self.match('or'):
            operator = self.previous()
            right = self.logic_and()
            expr = Logical(expr, operator, right)
        return expr

    def logic_and(self) -> Expr:
        expr = self.equality()
        while self.match('and'):
            operator = self.previous()
            right = self.equality()
            expr = Logical(expr, operator, right)
        return expr

    def binary_left_assoc(self, operand: Callable[[], Expr], operators: Sequence[str]) -> Expr:
        expr = operand()
        while self.match(*operators):
            operator = self.previous()
            right = operand()
            expr = Binary(expr, operator, right)
        return expr

    def equality(self) -> Expr:
        return self.binary_left_assoc(self.comparison, EQUALITY_TOKENS)

    def comparison(self) -> Expr:
        return self.binary_left_assoc(self.term, COMPARISON_TOKENS)

    def term(self) -> Expr:
        return self.binary_left_assoc(self.factor, TERM_TOKENS)

    def factor(self) -> Expr:
        return self.binary_left_assoc(self.unary, FACTOR_TOKENS)

    def unary(self) -> Expr:
        if self.match(*UNARY_TOKENS):
            operator = self.previous()
            right = self.unary()
            return Unary(operator, right)
        return self.call()

    def call(self) -> Expr:
        expr = self.primary()
        while True:
            if self.match('('):
                expr = self.finish_call(expr)
            elif self.match('.'):
                name = self.consume(IDENT, "Expected property name after '.'.")
                expr = Get(expr, name)
            else:
                break
        return expr

    def finish_call(self, callee: Expr) -> Call:
        arguments: List[Expr] = []
        if not self.check(')'):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    raise ParseError(self.peek(), f"Can't have more than {MAX_ARGUMENTS} arguments.")
                arguments.append(self.expression())
                if not self.match(','):
                    break
        paren = self.consume(')', "Expected ')' after arguments.")
        return Call(callee, paren, arguments)

    def primary(self) -> Expr:
        if self.match('false'):
            return Literal(False)
        if self.match('true'):
            return Literal(True)
        if self.match('nil'):
            return Literal(None)
        if self.match(NUMBER, STRING):
            return Literal(self.previous().literal)
        if self.match('super'):
            keyword = self.previous()
            self.consume('.', "Expected '.' after 'super'.")
            method = self.consume(IDENT, 'Expected superclass method name.')
            return Super(keyword, method)
        if self.match('this'):
            return This(self.previous())
        if self.match(IDENT):
            return Variable(self.previous())
        if self.match('('):
            expr = self.expression()
            self.consume(')', "Expected ')' after expression.")
            return Grouping(expr)
        raise ParseError(self.peek(), 'Expected expression.')


def parse_program(source: str) -> List[Stmt]:
    """Scan and parse ``source``, raising :class:`CompileError` on any error.

    Parsing is skipped entirely when the scanner reported errors.
    """
    tokens, lex_errors = scan_tokens(source)
    if lex_errors:
        raise CompileError(list(lex_errors))
    parser = Parser(tokens)
    statements = parser.parse()
    if parser.errors:
        raise CompileError(list(parser.errors))
    return statements
