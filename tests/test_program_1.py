from pathlib import Path

from pylox.interpreter import Interpreter
from pylox.parser import parse_program

EXAMPLE = Path(__file__).resolve().parent.parent / 'examples' / 'program_1.lox'


def test_program_1(capsys):
    with open(EXAMPLE, 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == 'Hello World!!'
