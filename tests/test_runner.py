import io

from pylox.runner import Lox, RunStatus


def make_lox():
    out, err = io.StringIO(), io.StringIO()
    return Lox(out=out, err=err), out, err


def test_ok_run():
    lox, out, err = make_lox()
    assert lox.run('print "hi";') is RunStatus.OK
    assert out.getvalue() == 'hi\n'
    assert err.getvalue() == ''


def test_lexical_errors_are_all_reported():
    lox, out, err = make_lox()
    assert lox.run('print 1;\n@\n"open') is RunStatus.COMPILE_ERROR
    assert out.getvalue() == ''
    assert err.getvalue().splitlines() == [
        "[line 2] Error: Unexpected character '@'.",
        '[line 3] Error: Unterminated string.',
    ]


def test_parse_errors_are_reported():
    lox, out, err = make_lox()
    assert lox.run('print 1;\nvar 1 = 2;\nprint (;') is RunStatus.COMPILE_ERROR
    assert out.getvalue() == ''
    assert err.getvalue().splitlines() == [
        '[line 2] Error at 1: Expected variable name.',
        '[line 3] Error at ;: Expected expression.',
    ]


def test_static_errors_are_reported():
    lox, out, err = make_lox()
    assert lox.run('print 1;\nfun f() { var a = 1; var a = 2; }') is RunStatus.COMPILE_ERROR
    assert out.getvalue() == ''
    assert err.getvalue() == '[line 2] Error at a: Already a variable with this name in this scope.\n'


def test_runtime_error_keeps_earlier_output():
    lox, out, err = make_lox()
    assert lox.run('print 1;\nprint nil + 1;\nprint 3;') is RunStatus.RUNTIME_ERROR
    assert out.getvalue() == '1\n'
    assert err.getvalue() == '[line 2] Error at +: Operands must be two numbers or two strings.\n'


def test_session_keeps_globals():
    lox, out, _ = make_lox()
    lox.run('var greeting = "hello";')
    lox.run('fun shout() { return greeting + "!"; }')
    lox.run('print shout();')
    assert out.getvalue() == 'hello!\n'


def test_session_survives_errors():
    lox, out, _ = make_lox()
    assert lox.run('var a = 1;') is RunStatus.OK
    assert lox.run('print b;') is RunStatus.RUNTIME_ERROR
    assert lox.run('print a;') is RunStatus.OK
    assert out.getvalue() == '1\n'


def test_global_redeclaration_reads_previous_value():
    lox, out, err = make_lox()
    assert lox.run('var a = 1;') is RunStatus.OK
    assert lox.run('var a = a + 1; print a;') is RunStatus.OK
    assert out.getvalue() == '2\n'
    assert err.getvalue() == ''


def test_deep_recursion_is_not_a_stack_overflow():
    lox, out, err = make_lox()
    source = 'fun count(n) { if (n == 0) return 0; return 1 + count(n - 1); } print count(600);'
    assert lox.run(source) is RunStatus.OK
    assert out.getvalue() == '600\n'
    assert err.getvalue() == ''


def test_nesting_too_deep_is_reported():
    lox, out, err = make_lox()
    depth = 5000
    assert lox.run('print ' + '(' * depth + '1' + ')' * depth + ';') is RunStatus.COMPILE_ERROR
    assert out.getvalue() == ''
    assert err.getvalue().startswith('[line 1] Error at ')
    assert err.getvalue().endswith(': Expression nesting too deep.\n')
