import pytest

from pylox.ast import Assign, Binary, Block, Expression, Get, Grouping, Logical, Print, Set, Var, While
from pylox.ast_sexpr import ast_to_text
from pylox.errors import CompileError, LexicalError, ParseError
from pylox.parser import Parser, parse_program
from pylox.scanner import scan_tokens


def parse_errors(source):
    tokens, _ = scan_tokens(source)
    parser = Parser(tokens)
    statements = parser.parse()
    return statements, parser.errors


def test_precedence_and_associativity():
    stmts = parse_program('print 1 + 2 * 3 - 4 / -x;')
    assert ast_to_text(stmts) == '(print (- (+ 1 (* 2 3)) (/ 4 (- x))))'


def test_comparison_and_equality():
    stmts = parse_program('a == b < c != !d;')
    assert ast_to_text(stmts) == '(expr (!= (== a (< b c)) (! d)))'


def test_grouping_is_kept():
    stmts = parse_program('(1 + 2) * 3;')
    expr = stmts[0].expression
    assert isinstance(expr, Binary)
    assert isinstance(expr.left, Grouping)


def test_logical_operators_nest_or_above_and():
    stmts = parse_program('a or b and c;')
    expr = stmts[0].expression
    assert isinstance(expr, Logical)
    assert expr.operator.type == 'or'
    assert isinstance(expr.right, Logical) and expr.right.operator.type == 'and'


def test_assignment_is_right_associative():
    stmts = parse_program('a = b = 1;')
    expr = stmts[0].expression
    assert isinstance(expr, Assign) and isinstance(expr.value, Assign)


def test_property_assignment_becomes_set():
    stmts = parse_program('a.b.c = 3;')
    expr = stmts[0].expression
    assert isinstance(expr, Set)
    assert expr.name.lexeme == 'c'
    assert isinstance(expr.object, Get)


def test_call_and_property_chain():
    stmts = parse_program('a.b(1, 2)(3).c;')
    assert ast_to_text(stmts) == '(expr (get (call (call (get a b) 1 2) 3) c))'


def test_for_loop_desugars_to_while():
    stmts = parse_program('for (var i = 0; i < 3; i = i + 1) print i;')
    outer = stmts[0]
    assert isinstance(outer, Block)
    assert isinstance(outer.statements[0], Var)
    loop = outer.statements[1]
    assert isinstance(loop, While)
    assert isinstance(loop.body, Block)
    assert isinstance(loop.body.statements[0], Print)
    assert isinstance(loop.body.statements[1], Expression)


def test_empty_for_clauses_loop_forever():
    stmts = parse_program('for (;;) print 1;')
    loop = stmts[0]
    assert isinstance(loop, While)
    assert loop.condition.value is True
    assert isinstance(loop.body, Print)


def test_class_and_function_declarations():
    stmts = parse_program('class B < A { init(x) { this.x = x; } get() { return this.x; } }')
    assert ast_to_text(stmts) == (
        '(class B (< A) (fun init (x) (expr (set this x x))) (fun get () (return (get this x))))'
    )


def test_invalid_assignment_target():
    _, errors = parse_errors('a + b = c;')
    assert [str(e) for e in errors] == ['[line 1] Error at =: Invalid assignment target.']


def test_missing_expression_at_end():
    _, errors = parse_errors('print')
    assert [str(e) for e in errors] == ['[line 1] Error at end: Expected expression.']


def test_recovers_and_reports_each_statement():
    source = 'var = 1;\nprint 2;\nprint (3;\nvar ok = 4;'
    statements, errors = parse_errors(source)
    assert [e.line for e in errors] == [1, 3]
    assert errors[0].message == 'Expected variable name.'
    assert errors[1].message == "Expected ')' after expression."
    # the well-formed statements survive
    assert [type(s) for s in statements] == [Print, Var]


def test_too_many_arguments():
    args = ', '.join(['1'] * 256)
    _, errors = parse_errors(f'f({args});')
    assert [e.message for e in errors] == ["Can't have more than 255 arguments."]


def test_too_many_parameters():
    params = ', '.join(f'p{i}' for i in range(256))
    _, errors = parse_errors(f'fun f({params}) {{}}')
    assert errors[0].message == "Can't have more than 255 parameters."


def test_parse_program_raises_on_syntax_error():
    with pytest.raises(CompileError) as info:
        parse_program('print 1')
    assert len(info.value.errors) == 1
    assert isinstance(info.value.errors[0], ParseError)


def test_parse_program_skips_parsing_after_lexical_errors():
    with pytest.raises(CompileError) as info:
        parse_program('print @;')
    assert all(isinstance(e, LexicalError) for e in info.value.errors)


def test_deeply_nested_grouping_parses():
    depth = 300
    stmts = parse_program('print ' + '(' * depth + '1' + ')' * depth + ';')
    expr = stmts[0].expression
    for _ in range(depth):
        assert isinstance(expr, Grouping)
        expr = expr.expression
    assert expr.value == 1.0


def test_excessive_nesting_is_a_syntax_error():
    depth = 5000
    statements, errors = parse_errors('print ' + '(' * depth + '1' + ')' * depth + ';\nprint 2;')
    assert [e.message for e in errors] == ['Expression nesting too deep.']
    assert errors[0].line == 1
    # parsing resumes at the next statement
    assert [type(s) for s in statements] == [Print]
