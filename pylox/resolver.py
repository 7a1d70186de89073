"""Static scope resolution for Lox programs.

The resolver walks the parsed statements once, before anything runs.
For every variable, assignment, ``this`` and ``super`` occurrence that
refers to a local binding it records how many scopes lie between the use
and the declaring scope; the interpreter later walks exactly that many
environment links. Names not found in any local scope are globals and
get no entry.

The resolver also rejects programs with static errors: duplicate local
declarations, reading a local in its own initializer, ``return`` outside
a function or with a value inside an initializer, ``this``/``super``
outside a class, ``super`` in a class without a superclass, and a class
inheriting from itself. Errors are collected and resolution carries on
so that all of them are reported together.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Dict, Iterable, List, Set as SetType

from .ast import (
    Assign, Binary, Block, Call, Class, Expr, Expression, ExprVisitor, Function,
    Get, Grouping, If, Literal, Logical, Print, Return, Set, Stmt, StmtVisitor,
    Super, This, Unary, Var, Variable, While,
)
from .errors import ResolveError
from .tokens import Token


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    METHOD = auto()
    INITIALIZER = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class Resolver(ExprVisitor, StmtVisitor):
    def __init__(self, known_globals: Iterable[str] = ()):
        # each scope maps a name to True once defined, False while only declared
        self.scopes: List[Dict[str, bool]] = []
        # top-level names already bound, by an earlier run or earlier in this one
        self.defined_globals: SetType[str] = set(known_globals)
        # top-level names whose initializer is being resolved
        self.initializing_globals: SetType[str] = set()
        self.locals: Dict[Expr, int] = {}
        self.errors: List[ResolveError] = []
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

    def resolve(self, statements: List[Stmt]) -> Dict[Expr, int]:
        """Resolve ``statements`` and return the occurrence-to-depth table."""
        self.resolve_statements(statements)
        return self.locals

    def resolve_statements(self, statements: List[Stmt]):
        for stmt in statements:
            stmt.accept(self)

    def resolve_expr(self, expr: Expr):
        expr.accept(self)

    def error(self, token: Token, message: str):
        self.errors.append(ResolveError(token, message))

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name: Token):
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.error(name, 'Already a variable with this name in this scope.')
        scope[name.lexeme] = False

    def define(self, name: Token):
        if not self.scopes:
            self.defined_globals.add(name.lexeme)
            return
        self.scopes[-1][name.lexeme] = True

    def resolve_local(self, expr: Expr, name: Token):
        for depth, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.locals[expr] = depth
                return
        # not found: global, looked up by name at runtime

    def resolve_function(self, function: Function, type_: FunctionType):
        enclosing_function = self.current_function
        self.current_function = type_
        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve_statements(function.body)
        self.end_scope()
        self.current_function = enclosing_function

    # Statements
    def visit_block_stmt(self, stmt: Block):
        self.begin_scope()
        self.resolve_statements(stmt.statements)
        self.end_scope()

    def visit_class_stmt(self, stmt: Class):
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS

        self.declare(stmt.name)
        self.define(stmt.name)

        if stmt.superclass is not None:
            if stmt.superclass.name.lexeme == stmt.name.lexeme:
                self.error(stmt.superclass.name, "A class can't inherit from itself.")
            self.current_class = ClassType.SUBCLASS
            self.resolve_expr(stmt.superclass)
            self.begin_scope()
            self.scopes[-1]['super'] = True

        self.begin_scope()
        self.scopes[-1]['this'] = True
        for method in stmt.methods:
            type_ = FunctionType.METHOD
            if method.name.lexeme == 'init':
                type_ = FunctionType.INITIALIZER
            self.resolve_function(method, type_)
        self.end_scope()

        if stmt.superclass is not None:
            self.end_scope()

        self.current_class = enclosing_class

    def visit_expression_stmt(self, stmt: Expression):
        self.resolve_expr(stmt.expression)

    def visit_function_stmt(self, stmt: Function):
        # defined before the body so the function can refer to itself
        self.declare(stmt.name)
        self.define(stmt.name)
        self.resolve_function(stmt, FunctionType.FUNCTION)

    def visit_if_stmt(self, stmt: If):
        self.resolve_expr(stmt.condition)
        stmt.then_branch.accept(self)
        if stmt.else_branch is not None:
            stmt.else_branch.accept(self)

    def visit_print_stmt(self, stmt: Print):
        self.resolve_expr(stmt.expression)

    def visit_return_stmt(self, stmt: Return):
        if self.current_function == FunctionType.NONE:
            self.error(stmt.keyword, "Can't return from top-level code.")
        if stmt.value is not None:
            if self.current_function == FunctionType.INITIALIZER:
                self.error(stmt.keyword, "Can't return a value from an initializer.")
            self.resolve_expr(stmt.value)

    def visit_var_stmt(self, stmt: Var):
        self.declare(stmt.name)
        if stmt.initializer is not None:
            if not self.scopes and stmt.name.lexeme not in self.defined_globals:
                self.initializing_globals.add(stmt.name.lexeme)
            self.resolve_expr(stmt.initializer)
            self.initializing_globals.discard(stmt.name.lexeme)
        self.define(stmt.name)

    def visit_while_stmt(self, stmt: While):
        self.resolve_expr(stmt.condition)
        stmt.body.accept(self)

    # Expressions
    def visit_assign_expr(self, expr: Assign):
        self.resolve_expr(expr.value)
        self.resolve_local(expr, expr.name)

    def visit_binary_expr(self, expr: Binary):
        self.resolve_expr(expr.left)
        self.resolve_expr(expr.right)

    def visit_call_expr(self, expr: Call):
        self.resolve_expr(expr.callee)
        for argument in expr.arguments:
            self.resolve_expr(argument)

    def visit_get_expr(self, expr: Get):
        self.resolve_expr(expr.object)

    def visit_grouping_expr(self, expr: Grouping):
        self.resolve_expr(expr.expression)

    def visit_literal_expr(self, expr: Literal):
        pass

    def visit_logical_expr(self, expr: Logical):
        self.resolve_expr(expr.left)
        self.resolve_expr(expr.right)

    def visit_set_expr(self, expr: Set):
        self.resolve_expr(expr.value)
        self.resolve_expr(expr.object)

    def visit_super_expr(self, expr: Super):
        if self.current_class == ClassType.NONE:
            self.error(expr.keyword, "Can't use 'super' outside of a class.")
        elif self.current_class != ClassType.SUBCLASS:
            self.error(expr.keyword, "Can't use 'super' in a class with no superclass.")
        self.resolve_local(expr, expr.keyword)

    def visit_this_expr(self, expr: This):
        if self.current_class == ClassType.NONE:
            self.error(expr.keyword, "Can't use 'this' outside of a class.")
            return
        self.resolve_local(expr, expr.keyword)

    def visit_unary_expr(self, expr: Unary):
        self.resolve_expr(expr.right)

    def visit_variable_expr(self, expr: Variable):
        name = expr.name.lexeme
        if self.scopes:
            declaring = self.scopes[-1].get(name) is False
        else:
            declaring = name in self.initializing_globals
        if declaring:
            self.error(expr.name, "Can't read local variable in its own initializer.")
        self.resolve_local(expr, expr.name)
