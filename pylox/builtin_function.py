from dataclasses import dataclass
from typing import Any, Callable, List

from pylox.types import LoxCallable


@dataclass
class NativeFunction(LoxCallable):
    name: str
    params: int
    fn: Callable[[List[Any]], Any]

    def arity(self) -> int:
        return self.params

    def call(self, interpreter, arguments: List[Any]) -> Any:
        return self.fn(arguments)

    def __repr__(self) -> str:
        return "<native fn>"
