from typing import Any, List, Optional

from pylox.tokens import EOF, Token


class LoxError(Exception):
    """Base exception for every error reported against Lox source.

    Renders as ``[line N] Error<where>: <message>``.
    """
    def __init__(self, line: int, message: str, where: str = ''):
        super().__init__(message)
        self.line = line
        self.message = message
        self.where = where

    def __str__(self) -> str:
        return f"[line {self.line}] Error{self.where}: {self.message}"


def _location(token: Token) -> str:
    if token.type == EOF:
        return ' at end'
    return f' at {token.lexeme}'


class LexicalError(LoxError):
    """Bad character or unterminated string found by the scanner."""


class TokenError(LoxError):
    def __init__(self, token: Token, message: str):
        super().__init__(token.line, message, _location(token))
        self.token = token


class ParseError(TokenError):
    """Syntax error anchored at the offending token."""


class ResolveError(TokenError):
    """Static error found by the resolver before execution."""


class LoxRuntimeError(TokenError):
    """Type, arity, name or property violation during execution."""


class CompileError(Exception):
    """Collected lexical, syntactic or static errors of one pass."""
    def __init__(self, errors: List[LoxError]):
        super().__init__('\n'.join(str(e) for e in errors))
        self.errors = errors


class ReturnSignal:
    """Outcome of executing a ``return`` statement.

    Returned (never raised) from statement execution so that it unwinds
    through blocks and loops up to the enclosing call.
    """
    __slots__ = ('value',)

    def __init__(self, value: Optional[Any]):
        self.value = value

    def __repr__(self) -> str:
        return f"ReturnSignal({self.value!r})"
