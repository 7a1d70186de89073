"""Scanner for the Lox language.

The scanner walks the source text once, left to right, and yields a
stream of tokens. Bad input does not stop the scan: every offending
character or unterminated string is yielded as a :class:`LexicalError`
in place of a token, so the caller can report all lexical problems of a
run at once. A single EOF token terminates the stream.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Tuple, Union

from .errors import LexicalError
from .tokens import (
    EOF, EQUAL_SUFFIXED, IDENT, KEYWORDS, NUMBER, SINGLE_CHAR_TOKENS, STRING, Token,
)


def _is_digit(c: str) -> bool:
    return '0' <= c <= '9'


def _is_alpha(c: str) -> bool:
    return ('a' <= c <= 'z') or ('A' <= c <= 'Z') or c == '_'


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


class Scanner:
    def __init__(self, source: str):
        self.source = source
        self.start = 0
        self.current = 0
        self.line = 1

    def __iter__(self) -> Iterator[Union[Token, LexicalError]]:
        while not self.is_at_end():
            self.start = self.current
            item = self.scan_token()
            if item is not None:
                yield item
        yield Token(EOF, '', None, self.line)

    def is_at_end(self) -> bool:
        return self.current >= len(self.source)

    def advance(self) -> str:
        c = self.source[self.current]
        self.current += 1
        return c

    def peek(self) -> str:
        if self.is_at_end():
            return '\0'
        return self.source[self.current]

    def peek_next(self) -> str:
        if self.current + 1 >= len(self.source):
            return '\0'
        return self.source[self.current + 1]

    def match(self, expected: str) -> bool:
        if self.is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def make_token(self, type_: str, literal=None) -> Token:
        return Token(type_, self.source[self.start:self.current], literal, self.line)

    def scan_token(self) -> Optional[Union[Token, LexicalError]]:
        c = self.advance()
        if c in SINGLE_CHAR_TOKENS:
            return self.make_token(c)
        if c in EQUAL_SUFFIXED:
            if self.match('='):
                return self.make_token(c + '=')
            return self.make_token(c)
        if c == '/':
            if self.match('/'):
                # comment runs to end of line
                while self.peek() != '\n' and not self.is_at_end():
                    self.advance()
                return None
            return self.make_token('/')
        if c in ' \r\t':
            return None
        if c == '\n':
            self.line += 1
            return None
        if c == '"':
            return self.string()
        if _is_digit(c):
            return self.number()
        if _is_alpha(c):
            return self.identifier()
        return LexicalError(self.line, f"Unexpected character '{c}'.")

    def string(self) -> Union[Token, LexicalError]:
        while self.peek() != '"' and not self.is_at_end():
            if self.peek() == '\n':
                self.line += 1
            self.advance()
        if self.is_at_end():
            return LexicalError(self.line, 'Unterminated string.')
        self.advance()  # closing quote
        value = self.source[self.start + 1:self.current - 1]
        return self.make_token(STRING, value)

    def number(self) -> Token:
        while _is_digit(self.peek()):
            self.advance()
        # a trailing '.' without digits belongs to the next token
        if self.peek() == '.' and _is_digit(self.peek_next()):
            self.advance()
            while _is_digit(self.peek()):
                self.advance()
        return self.make_token(NUMBER, float(self.source[self.start:self.current]))

    def identifier(self) -> Token:
        while _is_alnum(self.peek()):
            self.advance()
        text = self.source[self.start:self.current]
        if text in KEYWORDS:
            return self.make_token(text)
        return self.make_token(IDENT)


def scan_tokens(source: str) -> Tuple[List[Token], List[LexicalError]]:
    """Scan ``source`` completely, splitting tokens from lexical errors."""
    tokens: List[Token] = []
    errors: List[LexicalError] = []
    for item in Scanner(source):
        if isinstance(item, LexicalError):
            errors.append(item)
        else:
            tokens.append(item)
    return tokens, errors
