from pathlib import Path

from pylox.interpreter import Interpreter
from pylox.parser import parse_program

EXAMPLE = Path(__file__).resolve().parent.parent / 'examples' / 'program_13.lox'


def test_program_13_arithmetic_and_equality(capsys):
    with open(EXAMPLE, 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['0.5', '12', '7.5', 'concat', '0.30000000000000004', 'true', 'false', 'inf', 'true', 'false']
