"""Token model for the Lox scanner and parser."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


IDENT = 'IDENT'
STRING = 'STRING'
NUMBER = 'NUMBER'
EOF = 'EOF'

KEYWORDS = frozenset({
    'and', 'class', 'else', 'false', 'for', 'fun', 'if', 'nil', 'or',
    'print', 'return', 'super', 'this', 'true', 'var', 'while',
})

SINGLE_CHAR_TOKENS = frozenset('(){},.-+;*')

# Tokens that may be followed by '=' to form a two character operator.
EQUAL_SUFFIXED = frozenset('!=<>')


@dataclass(frozen=True)
class Token:
    """A lexical token.

    ``type`` is the operator or keyword text itself for punctuation and
    reserved words, otherwise one of IDENT, STRING, NUMBER or EOF.
    ``literal`` carries the decoded string or number value.
    """
    type: str
    lexeme: str
    literal: Any
    line: int

    def __str__(self) -> str:
        return f"{self.type} {self.lexeme} {self.literal}"
