# Lox language package
# This package provides a scanner, parser, resolver and tree-walking interpreter for Lox.
from .errors import CompileError, LoxError, LoxRuntimeError
from .interpreter import Interpreter, run_program
from .parser import parse_program
from .runner import Lox, RunStatus

__all__ = [
    'run_program',
    'parse_program',
    'Interpreter',
    'Lox',
    'RunStatus',
    'LoxError',
    'LoxRuntimeError',
    'CompileError',
]
