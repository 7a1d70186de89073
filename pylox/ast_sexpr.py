"""S-expression form of the Lox AST.

``ast_to_text`` renders expressions and statements as parenthesized
prefix forms, e.g. ``(+ 1 (group (* 2 x)))`` or ``(fun f (a) (return
a))``. ``ast_from_text`` reads that form back into fresh AST nodes with
a Lark parser, so a program can be emitted once and executed later
without the Lox source. Tokens created by the reader take their
line numbers from the s-expression text.

Statement forms::

    (expr e) (print e) (var name e?) (block s...) (if c then else?)
    (while c body) (fun name (params...) s...) (return e?)
    (class Name (< Super)? (fun ...)...)

Expression forms::

    nil true false 1.5 "text" name this (group e) (- e) (! e)
    (op left right) (and a b) (or a b) (= name value)
    (call callee args...) (get obj name) (set obj name value)
    (super method)
"""

from __future__ import annotations

from typing import Any, List, Union

from lark import Lark, Token as LarkToken, Transformer

from .ast import (
    Assign, Binary, Block, Call, Class, Expr, Expression, ExprVisitor, Function,
    Get, Grouping, If, Literal, Logical, Print, Return, Set, Stmt, StmtVisitor,
    Super, This, Unary, Var, Variable, While,
)
from .tokens import IDENT, KEYWORDS, Token
from .types import format_number

BINARY_OPERATORS = frozenset({'+', '-', '*', '/', '==', '!=', '<', '<=', '>', '>='})
UNARY_OPERATORS = frozenset({'-', '!'})

###############################################################################
# Printer
###############################################################################


class AstPrinter(ExprVisitor, StmtVisitor):
    def print(self, node: Union[Expr, Stmt]) -> str:
        return node.accept(self)

    def parenthesize(self, name: str, *parts: Any) -> str:
        pieces = [name]
        for part in parts:
            if isinstance(part, str):
                pieces.append(part)
            else:
                pieces.append(part.accept(self))
        return '(' + ' '.join(pieces) + ')'

    # Expressions
    def visit_assign_expr(self, expr: Assign):
        return self.parenthesize('=', expr.name.lexeme, expr.value)

    def visit_binary_expr(self, expr: Binary):
        return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)

    def visit_call_expr(self, expr: Call):
        return self.parenthesize('call', expr.callee, *expr.arguments)

    def visit_get_expr(self, expr: Get):
        return self.parenthesize('get', expr.object, expr.name.lexeme)

    def visit_grouping_expr(self, expr: Grouping):
        return self.parenthesize('group', expr.expression)

    def visit_literal_expr(self, expr: Literal):
        value = expr.value
        if value is None:
            return 'nil'
        if isinstance(value, bool):
            return 'true' if value else 'false'
        if isinstance(value, float):
            return format_number(value)
        return f'"{value}"'

    def visit_logical_expr(self, expr: Logical):
        return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)

    def visit_set_expr(self, expr: Set):
        return self.parenthesize('set', expr.object, expr.name.lexeme, expr.value)

    def visit_super_expr(self, expr: Super):
        return self.parenthesize('super', expr.method.lexeme)

    def visit_this_expr(self, expr: This):
        return 'this'

    def visit_unary_expr(self, expr: Unary):
        return self.parenthesize(expr.operator.lexeme, expr.right)

    def visit_variable_expr(self, expr: Variable):
        return expr.name.lexeme

    # Statements
    def visit_block_stmt(self, stmt: Block):
        return self.parenthesize('block', *stmt.statements)

    def visit_class_stmt(self, stmt: Class):
        parts: List[Any] = [stmt.name.lexeme]
        if stmt.superclass is not None:
            parts.append(f'(< {stmt.superclass.name.lexeme})')
        parts.extend(stmt.methods)
        return self.parenthesize('class', *parts)

    def visit_expression_stmt(self, stmt: Expression):
        return self.parenthesize('expr', stmt.expression)

    def visit_function_stmt(self, stmt: Function):
        params = '(' + ' '.join(p.lexeme for p in stmt.params) + ')'
        return self.parenthesize('fun', stmt.name.lexeme, params, *stmt.body)

    def visit_if_stmt(self, stmt: If):
        if stmt.else_branch is None:
            return self.parenthesize('if', stmt.condition, stmt.then_branch)
        return self.parenthesize('if', stmt.condition, stmt.then_branch, stmt.else_branch)

    def visit_print_stmt(self, stmt: Print):
        return self.parenthesize('print', stmt.expression)

    def visit_return_stmt(self, stmt: Return):
        if stmt.value is None:
            return '(return)'
        return self.parenthesize('return', stmt.value)

    def visit_var_stmt(self, stmt: Var):
        if stmt.initializer is None:
            return self.parenthesize('var', stmt.name.lexeme)
        return self.parenthesize('var', stmt.name.lexeme, stmt.initializer)

    def visit_while_stmt(self, stmt: While):
        return self.parenthesize('while', stmt.condition, stmt.body)


def ast_to_text(node: Union[Expr, Stmt, List[Stmt]]) -> str:
    """Render a node, or a program one top-level statement per line."""
    printer = AstPrinter()
    if isinstance(node, list):
        return '\n'.join(printer.print(stmt) for stmt in node)
    return printer.print(node)


###############################################################################
# Reader
###############################################################################


SEXPR_GRAMMAR = r"""
    start: sexpr*

    ?sexpr: list_form
          | STRING
          | SYMBOL

    list_form: "(" sexpr* ")"

    STRING: /"[^"]*"/
    SYMBOL: /[^\s()"]+/

    %import common.WS
    %ignore WS
"""


SEXPR_PARSER = Lark(SEXPR_GRAMMAR, parser='lalr')


class SexprTransformer(Transformer):
    """Turns the parse tree into nested lists of atom tokens."""

    def start(self, items):
        return list(items)

    def list_form(self, items):
        return list(items)


Form = Union[LarkToken, list]


class AstBuilder:
    """Builds AST nodes from the nested lists produced by the transformer."""

    def program(self, forms: List[Form]) -> List[Stmt]:
        return [self.stmt(form) for form in forms]

    def _head(self, form: Form, kind: str):
        if not isinstance(form, list) or not form:
            raise ValueError(f"expected a {kind} form, got {form!r}")
        head = form[0]
        if isinstance(head, list) or head.type != 'SYMBOL':
            raise ValueError(f"invalid {kind} form head {head!r}")
        return head, form[1:]

    def _name(self, atom: Form) -> Token:
        if isinstance(atom, list) or atom.type != 'SYMBOL' or str(atom) in KEYWORDS:
            raise ValueError(f"expected a name, got {atom!r}")
        return Token(IDENT, str(atom), None, atom.line)

    @staticmethod
    def _token(type_: str, line: int) -> Token:
        return Token(type_, type_, None, line)

    def stmt(self, form: Form) -> Stmt:
        head, args = self._head(form, 'statement')
        name = str(head)
        line = head.line
        if name == 'expr' and len(args) == 1:
            return Expression(self.expr(args[0]))
        if name == 'print' and len(args) == 1:
            return Print(self.expr(args[0]))
        if name == 'var' and len(args) in (1, 2):
            initializer = self.expr(args[1]) if len(args) == 2 else None
            return Var(self._name(args[0]), initializer)
        if name == 'block':
            return Block([self.stmt(s) for s in args])
        if name == 'if' and len(args) in (2, 3):
            else_branch = self.stmt(args[2]) if len(args) == 3 else None
            return If(self.expr(args[0]), self.stmt(args[1]), else_branch)
        if name == 'while' and len(args) == 2:
            return While(self.expr(args[0]), self.stmt(args[1]))
        if name == 'fun':
            return self.function(form)
        if name == 'return' and len(args) <= 1:
            value = self.expr(args[0]) if args else None
            return Return(self._token('return', line), value)
        if name == 'class' and args:
            class_name = self._name(args[0])
            rest = args[1:]
            superclass = None
            if rest and isinstance(rest[0], list) and rest[0] and str(rest[0][0]) == '<':
                if len(rest[0]) != 2:
                    raise ValueError(f"invalid superclass form {rest[0]!r}")
                superclass = Variable(self._name(rest[0][1]))
                rest = rest[1:]
            return Class(class_name, superclass, [self.function(m) for m in rest])
        raise ValueError(f"unknown statement form {name!r} at line {line}")

    def function(self, form: Form) -> Function:
        head, args = self._head(form, 'function')
        if str(head) != 'fun' or len(args) < 2 or not isinstance(args[1], list):
            raise ValueError(f"invalid function form at line {head.line}")
        params = [self._name(p) for p in args[1]]
        return Function(self._name(args[0]), params, [self.stmt(s) for s in args[2:]])

    def expr(self, form: Form) -> Expr:
        if not isinstance(form, list):
            return self.atom(form)
        head, args = self._head(form, 'expression')
        name = str(head)
        line = head.line
        if name == 'group' and len(args) == 1:
            return Grouping(self.expr(args[0]))
        if name in ('and', 'or') and len(args) == 2:
            return Logical(self.expr(args[0]), self._token(name, line), self.expr(args[1]))
        if name == '=' and len(args) == 2:
            return Assign(self._name(args[0]), self.expr(args[1]))
        if name == 'call' and args:
            arguments = [self.expr(a) for a in args[1:]]
            return Call(self.expr(args[0]), self._token(')', line), arguments)
        if name == 'get' and len(args) == 2:
            return Get(self.expr(args[0]), self._name(args[1]))
        if name == 'set' and len(args) == 3:
            return Set(self.expr(args[0]), self._name(args[1]), self.expr(args[2]))
        if name == 'super' and len(args) == 1:
            return Super(self._token('super', line), self._name(args[0]))
        if name in UNARY_OPERATORS and len(args) == 1:
            return Unary(self._token(name, line), self.expr(args[0]))
        if name in BINARY_OPERATORS and len(args) == 2:
            return Binary(self.expr(args[0]), self._token(name, line), self.expr(args[1]))
        raise ValueError(f"unknown expression form {name!r} at line {line}")

    def atom(self, atom: LarkToken) -> Expr:
        text = str(atom)
        if atom.type == 'STRING':
            return Literal(text[1:-1])
        if text == 'nil':
            return Literal(None)
        if text == 'true':
            return Literal(True)
        if text == 'false':
            return Literal(False)
        if text == 'this':
            return This(self._token('this', atom.line))
        if text[0].isdigit():
            try:
                return Literal(float(text))
            except ValueError:
                raise ValueError(f"invalid number {text!r} at line {atom.line}")
        return Variable(self._name(atom))


def ast_from_text(text: str) -> List[Stmt]:
    """Read a program written by :func:`ast_to_text`."""
    forms = SexprTransformer().transform(SEXPR_PARSER.parse(text))
    return AstBuilder().program(forms)


def expr_from_text(text: str) -> Expr:
    """Read a single expression form."""
    forms = SexprTransformer().transform(SEXPR_PARSER.parse(text))
    if len(forms) != 1:
        raise ValueError(f"expected exactly one expression, got {len(forms)}")
    return AstBuilder().expr(forms[0])
