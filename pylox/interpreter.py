"""Tree-walking interpreter for the Lox language.

The interpreter executes the statements produced by
:mod:`pylox.parser` after :mod:`pylox.resolver` has computed the scope
depth of every local variable occurrence. Statement execution returns
``None`` on normal completion or a :class:`ReturnSignal` when a
``return`` is unwinding towards the enclosing call. Type, name, arity
and property violations raise :class:`LoxRuntimeError`, which aborts the
rest of the run.
"""

from __future__ import annotations

import math
import sys
import time
from typing import Any, Dict, List, Optional, TextIO

from .ast import (
    Assign, Binary, Block, Call, Class, Expr, Expression, ExprVisitor, Function,
    Get, Grouping, If, Literal, Logical, Print, Return, Set, Stmt, StmtVisitor,
    Super, This, Unary, Var, Variable, While,
)
from .builtin_function import NativeFunction
from .environment import Environment
from .errors import CompileError, LoxRuntimeError, ReturnSignal
from .parser import ensure_recursion_limit, parse_program
from .resolver import Resolver
from .tokens import Token
from .types import (
    LoxCallable, LoxClass, LoxFunction, LoxInstance, equal_values, is_truthy, to_string,
)


def _divide(a: float, b: float) -> float:
    # IEEE 754 semantics instead of ZeroDivisionError
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


ARITHMETIC = {
    '-': lambda a, b: a - b,
    '*': lambda a, b: a * b,
    '/': _divide,
    '>': lambda a, b: a > b,
    '>=': lambda a, b: a >= b,
    '<': lambda a, b: a < b,
    '<=': lambda a, b: a <= b,
}


class Interpreter(ExprVisitor, StmtVisitor):
    """Core interpreter that executes a resolved Lox program."""
    def __init__(self, out: Optional[TextIO] = None, debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.globals = Environment()
        self.environment = self.globals
        self.locals: Dict[Expr, int] = {}
        self._out = out
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None
        ensure_recursion_limit()
        self.load_standard_module()

    @property
    def out(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    def debug(self, msg: str, level: int = 1):
        if self.debug_level >= level and self.debug_fp:
            self.debug_fp.write(msg + '\n')
            self.debug_fp.flush()

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def load_standard_module(self):
        def std_clock(args: List[Any]) -> Any:
            return time.time() * 1000.0

        self.globals.define('clock', NativeFunction('clock', 0, std_clock))

    # Public API
    def resolve(self, expr: Expr, depth: int):
        self.locals[expr] = depth

    def run(self, statements: List[Stmt]):
        """Resolve and execute ``statements``.

        Raises :class:`CompileError` if resolution finds static errors, in
        which case nothing is executed.
        """
        resolver = Resolver(known_globals=self.globals.values)
        table = resolver.resolve(statements)
        if resolver.errors:
            raise CompileError(list(resolver.errors))
        for expr, depth in table.items():
            self.resolve(expr, depth)
        self.debug(f"resolved {len(table)} local references", 3)
        self.interpret(statements)

    def interpret(self, statements: List[Stmt]):
        self.debug(f"interpret {len(statements)} statements")
        for stmt in statements:
            self.execute(stmt)

    def execute(self, stmt: Stmt) -> Optional[ReturnSignal]:
        return stmt.accept(self)

    def execute_block(self, statements: List[Stmt], env: Environment) -> Optional[ReturnSignal]:
        previous = self.environment
        self.environment = env
        try:
            for stmt in statements:
                result = self.execute(stmt)
                # propagate return signals
                if isinstance(result, ReturnSignal):
                    return result
            return None
        finally:
            self.environment = previous

    def evaluate(self, expr: Expr) -> Any:
        return expr.accept(self)

    def look_up_variable(self, name: Token, expr: Expr) -> Any:
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    # Statements
    def visit_block_stmt(self, stmt: Block):
        return self.execute_block(stmt.statements, Environment(parent=self.environment))

    def visit_class_stmt(self, stmt: Class):
        self.environment.define(stmt.name.lexeme, None)

        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, LoxClass):
                raise LoxRuntimeError(stmt.superclass.name, 'Superclass must be a class.')

        if superclass is not None:
            self.environment = Environment(parent=self.environment)
            self.environment.define('super', superclass)

        methods: Dict[str, LoxFunction] = {}
        for method in stmt.methods:
            is_init = method.name.lexeme == 'init'
            methods[method.name.lexeme] = LoxFunction(method, self.environment, is_init)
        klass = LoxClass(stmt.name.lexeme, superclass, methods)

        if superclass is not None:
            self.environment = self.environment.parent

        self.environment.assign(stmt.name, klass)
        self.debug(f"define class {klass.name} with {len(methods)} methods", 2)
        return None

    def visit_expression_stmt(self, stmt: Expression):
        self.evaluate(stmt.expression)
        return None

    def visit_function_stmt(self, stmt: Function):
        function = LoxFunction(stmt, self.environment)
        self.environment.define(stmt.name.lexeme, function)
        self.debug(f"define function {stmt.name.lexeme}", 2)
        return None

    def visit_if_stmt(self, stmt: If):
        cond = self.evaluate(stmt.condition)
        truthy = is_truthy(cond)
        self.debug(f"if condition {to_string(cond)} -> {truthy}", 3)
        if truthy:
            return self.execute(stmt.then_branch)
        if stmt.else_branch is not None:
            return self.execute(stmt.else_branch)
        return None

    def visit_print_stmt(self, stmt: Print):
        value = self.evaluate(stmt.expression)
        self.out.write(to_string(value) + '\n')
        return None

    def visit_return_stmt(self, stmt: Return):
        value = None
        if stmt.value is not None:
            value = self.evaluate(stmt.value)
        return ReturnSignal(value)

    def visit_var_stmt(self, stmt: Var):
        value = None
        if stmt.initializer is not None:
            value = self.evaluate(stmt.initializer)
        self.environment.define(stmt.name.lexeme, value)
        self.debug(f"declare {stmt.name.lexeme} = {to_string(value)}", 2)
        return None

    def visit_while_stmt(self, stmt: While):
        while is_truthy(self.evaluate(stmt.condition)):
            result = self.execute(stmt.body)
            if isinstance(result, ReturnSignal):
                return result
        return None

    # Expressions
    def visit_assign_expr(self, expr: Assign):
        value = self.evaluate(expr.value)
        distance = self.locals.get(expr)
        if distance is not None:
            self.environment.assign_at(distance, expr.name, value)
        else:
            self.globals.assign(expr.name, value)
        return value

    def visit_binary_expr(self, expr: Binary):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        op = expr.operator.type

        if op == '+':
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise LoxRuntimeError(expr.operator, 'Operands must be two numbers or two strings.')
        if op == '==':
            return equal_values(left, right)
        if op == '!=':
            return not equal_values(left, right)
        if not (isinstance(left, float) and isinstance(right, float)):
            raise LoxRuntimeError(expr.operator, 'Operands must be numbers.')
        return ARITHMETIC[op](left, right)

    def visit_call_expr(self, expr: Call):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(arg) for arg in expr.arguments]
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, 'Can only call functions and classes.')
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(
                expr.paren, f"Expected {callee.arity()} arguments but got {len(arguments)}."
            )
        self.debug(f"call {callee!r} with {len(arguments)} arguments", 3)
        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(expr.paren, 'Stack overflow.') from None

    def visit_get_expr(self, expr: Get):
        obj = self.evaluate(expr.object)
        if isinstance(obj, LoxInstance):
            return obj.get(expr.name)
        raise LoxRuntimeError(expr.name, 'Only instances have properties.')

    def visit_grouping_expr(self, expr: Grouping):
        return self.evaluate(expr.expression)

    def visit_literal_expr(self, expr: Literal):
        return expr.value

    def visit_logical_expr(self, expr: Logical):
        left = self.evaluate(expr.left)
        if expr.operator.type == 'or':
            if is_truthy(left):
                return left
        elif not is_truthy(left):
            return left
        return self.evaluate(expr.right)

    def visit_set_expr(self, expr: Set):
        obj = self.evaluate(expr.object)
        if not isinstance(obj, LoxInstance):
            raise LoxRuntimeError(expr.name, 'Only instances have fields.')
        value = self.evaluate(expr.value)
        obj.set(expr.name, value)
        return value

    def visit_super_expr(self, expr: Super):
        distance = self.locals[expr]
        superclass = self.environment.get_at(distance, 'super')
        # 'this' is bound in the scope just inside the one holding 'super'
        obj = self.environment.get_at(distance - 1, 'this')
        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError(expr.method, f"Undefined property '{expr.method.lexeme}'.")
        return method.bind(obj)

    def visit_this_expr(self, expr: This):
        return self.look_up_variable(expr.keyword, expr)

    def visit_unary_expr(self, expr: Unary):
        right = self.evaluate(expr.right)
        if expr.operator.type == '-':
            if not isinstance(right, float):
                raise LoxRuntimeError(expr.operator, 'Operand must be a number.')
            return -right
        return not is_truthy(right)

    def visit_variable_expr(self, expr: Variable):
        return self.look_up_variable(expr.name, expr)


def run_program(source: str, out: Optional[TextIO] = None, debug_level: int = 0) -> Interpreter:
    """Convenience function to parse, resolve and run a Lox program from source."""
    statements = parse_program(source)
    interpreter = Interpreter(out=out, debug_level=debug_level)
    try:
        interpreter.run(statements)
    finally:
        interpreter.close()
    return interpreter
