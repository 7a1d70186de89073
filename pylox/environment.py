from typing import Any, Dict, Optional

from pylox.errors import LoxRuntimeError
from pylox.tokens import Token


class Environment:
    """A scope mapping names to values, chained to its enclosing scope.

    Closures and bound methods keep a reference to the environment that
    was current when they were created, so a scope lives for as long as
    anything still refers to it.
    """
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.values: Dict[str, Any] = {}

    def define(self, name: str, value: Any):
        # redefinition in the same scope is allowed (globals, REPL)
        self.values[name] = value

    def get(self, name: Token) -> Any:
        if name.lexeme in self.values:
            return self.values[name.lexeme]
        if self.parent:
            return self.parent.get(name)
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Token, value: Any):
        if name.lexeme in self.values:
            self.values[name.lexeme] = value
            return
        if self.parent:
            self.parent.assign(name, value)
            return
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance: int) -> 'Environment':
        env = self
        for _ in range(distance):
            env = env.parent
        return env

    def get_at(self, distance: int, name: str) -> Any:
        # the resolver guarantees the binding exists at this depth
        return self.ancestor(distance).values[name]

    def assign_at(self, distance: int, name: Token, value: Any):
        self.ancestor(distance).values[name.lexeme] = value

    def __repr__(self) -> str:
        return f"Environment({sorted(self.values)!r}, parent={self.parent is not None})"
