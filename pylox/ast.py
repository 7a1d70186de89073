"""Abstract Syntax Tree (AST) definitions for the Lox language.

Two node families, expressions and statements, are closed sets of
dataclasses. Each node dispatches to the matching ``visit_*`` method of
a visitor through ``accept``; :class:`ExprVisitor` and
:class:`StmtVisitor` declare one abstract method per node so a visitor
missing a case cannot be instantiated.

Nodes are frozen and compare by identity (``eq=False``). Two
structurally identical expressions at different places in the source
are distinct dictionary keys, which is what the resolver's depth table
relies on.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional

from .tokens import Token


class Expr:
    """Base class for expression nodes."""

    def accept(self, visitor: 'ExprVisitor') -> Any:
        raise NotImplementedError


class Stmt:
    """Base class for statement nodes."""

    def accept(self, visitor: 'StmtVisitor') -> Any:
        raise NotImplementedError


###############################################################################
# Expressions
###############################################################################


@dataclass(frozen=True, eq=False)
class Assign(Expr):
    name: Token
    value: Expr

    def accept(self, visitor):
        return visitor.visit_assign_expr(self)


@dataclass(frozen=True, eq=False)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr

    def accept(self, visitor):
        return visitor.visit_binary_expr(self)


@dataclass(frozen=True, eq=False)
class Call(Expr):
    callee: Expr
    paren: Token
    arguments: List[Expr]

    def accept(self, visitor):
        return visitor.visit_call_expr(self)


@dataclass(frozen=True, eq=False)
class Get(Expr):
    object: Expr
    name: Token

    def accept(self, visitor):
        return visitor.visit_get_expr(self)


@dataclass(frozen=True, eq=False)
class Grouping(Expr):
    expression: Expr

    def accept(self, visitor):
        return visitor.visit_grouping_expr(self)


@dataclass(frozen=True, eq=False)
class Literal(Expr):
    value: Any  # float, str, bool or None

    def accept(self, visitor):
        return visitor.visit_literal_expr(self)


@dataclass(frozen=True, eq=False)
class Logical(Expr):
    left: Expr
    operator: Token
    right: Expr

    def accept(self, visitor):
        return visitor.visit_logical_expr(self)


@dataclass(frozen=True, eq=False)
class Set(Expr):
    object: Expr
    name: Token
    value: Expr

    def accept(self, visitor):
        return visitor.visit_set_expr(self)


@dataclass(frozen=True, eq=False)
class Super(Expr):
    keyword: Token
    method: Token

    def accept(self, visitor):
        return visitor.visit_super_expr(self)


@dataclass(frozen=True, eq=False)
class This(Expr):
    keyword: Token

    def accept(self, visitor):
        return visitor.visit_this_expr(self)


@dataclass(frozen=True, eq=False)
class Unary(Expr):
    operator: Token
    right: Expr

    def accept(self, visitor):
        return visitor.visit_unary_expr(self)


@dataclass(frozen=True, eq=False)
class Variable(Expr):
    name: Token

    def accept(self, visitor):
        return visitor.visit_variable_expr(self)


###############################################################################
# Statements
###############################################################################


@dataclass(frozen=True, eq=False)
class Block(Stmt):
    statements: List[Stmt]

    def accept(self, visitor):
        return visitor.visit_block_stmt(self)


@dataclass(frozen=True, eq=False)
class Function(Stmt):
    name: Token
    params: List[Token]
    body: List[Stmt]

    def accept(self, visitor):
        return visitor.visit_function_stmt(self)


@dataclass(frozen=True, eq=False)
class Class(Stmt):
    name: Token
    superclass: Optional[Variable]
    methods: List[Function]

    def accept(self, visitor):
        return visitor.visit_class_stmt(self)


@dataclass(frozen=True, eq=False)
class Expression(Stmt):
    expression: Expr

    def accept(self, visitor):
        return visitor.visit_expression_stmt(self)


@dataclass(frozen=True, eq=False)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]

    def accept(self, visitor):
        return visitor.visit_if_stmt(self)


@dataclass(frozen=True, eq=False)
class Print(Stmt):
    expression: Expr

    def accept(self, visitor):
        return visitor.visit_print_stmt(self)


@dataclass(frozen=True, eq=False)
class Return(Stmt):
    keyword: Token
    value: Optional[Expr]

    def accept(self, visitor):
        return visitor.visit_return_stmt(self)


@dataclass(frozen=True, eq=False)
class Var(Stmt):
    name: Token
    initializer: Optional[Expr]

    def accept(self, visitor):
        return visitor.visit_var_stmt(self)


@dataclass(frozen=True, eq=False)
class While(Stmt):
    condition: Expr
    body: Stmt

    def accept(self, visitor):
        return visitor.visit_while_stmt(self)


###############################################################################
# Visitors
###############################################################################


class ExprVisitor(ABC):
    @abstractmethod
    def visit_assign_expr(self, expr: Assign): ...

    @abstractmethod
    def visit_binary_expr(self, expr: Binary): ...

    @abstractmethod
    def visit_call_expr(self, expr: Call): ...

    @abstractmethod
    def visit_get_expr(self, expr: Get): ...

    @abstractmethod
    def visit_grouping_expr(self, expr: Grouping): ...

    @abstractmethod
    def visit_literal_expr(self, expr: Literal): ...

    @abstractmethod
    def visit_logical_expr(self, expr: Logical): ...

    @abstractmethod
    def visit_set_expr(self, expr: Set): ...

    @abstractmethod
    def visit_super_expr(self, expr: Super): ...

    @abstractmethod
    def visit_this_expr(self, expr: This): ...

    @abstractmethod
    def visit_unary_expr(self, expr: Unary): ...

    @abstractmethod
    def visit_variable_expr(self, expr: Variable): ...


class StmtVisitor(ABC):
    @abstractmethod
    def visit_block_stmt(self, stmt: Block): ...

    @abstractmethod
    def visit_class_stmt(self, stmt: Class): ...

    @abstractmethod
    def visit_expression_stmt(self, stmt: Expression): ...

    @abstractmethod
    def visit_function_stmt(self, stmt: Function): ...

    @abstractmethod
    def visit_if_stmt(self, stmt: If): ...

    @abstractmethod
    def visit_print_stmt(self, stmt: Print): ...

    @abstractmethod
    def visit_return_stmt(self, stmt: Return): ...

    @abstractmethod
    def visit_var_stmt(self, stmt: Var): ...

    @abstractmethod
    def visit_while_stmt(self, stmt: While): ...
