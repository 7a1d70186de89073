"""Session driver tying the scanner, parser, resolver and interpreter together.

A :class:`Lox` session owns one interpreter, so globals defined by one
``run`` stay visible to the next; the REPL relies on this. Every error is
written to the error sink in the uniform ``[line N] Error...`` form and
the outcome is reported as a :class:`RunStatus`, which the command line
maps to an exit code.
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import Iterable, List, Optional, TextIO

from .ast import Stmt
from .errors import CompileError, LoxError, LoxRuntimeError
from .interpreter import Interpreter
from .parser import Parser
from .scanner import scan_tokens


class RunStatus(Enum):
    OK = 'ok'
    COMPILE_ERROR = 'compile-error'  # lexical, syntactic or static
    RUNTIME_ERROR = 'runtime-error'


class Lox:
    def __init__(self, out: Optional[TextIO] = None, err: Optional[TextIO] = None,
                 debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.interpreter = Interpreter(out=out, debug_level=debug_level, debug_file=debug_file)
        self._err = err

    @property
    def err(self) -> TextIO:
        return self._err if self._err is not None else sys.stderr

    def report(self, errors: Iterable[LoxError]):
        for error in errors:
            self.err.write(str(error) + '\n')

    def run(self, source: str) -> RunStatus:
        tokens, lex_errors = scan_tokens(source)
        self.interpreter.debug(f"scanned {len(tokens)} tokens, {len(lex_errors)} errors")
        if lex_errors:
            self.report(lex_errors)
            return RunStatus.COMPILE_ERROR

        parser = Parser(tokens)
        statements = parser.parse()
        self.interpreter.debug(f"parsed {len(statements)} statements, {len(parser.errors)} errors")
        if parser.errors:
            self.report(parser.errors)
            return RunStatus.COMPILE_ERROR

        return self.run_statements(statements)

    def run_statements(self, statements: List[Stmt]) -> RunStatus:
        try:
            self.interpreter.run(statements)
        except CompileError as error:
            self.report(error.errors)
            return RunStatus.COMPILE_ERROR
        except LoxRuntimeError as error:
            self.report([error])
            return RunStatus.RUNTIME_ERROR
        return RunStatus.OK

    def close(self):
        self.interpreter.close()
