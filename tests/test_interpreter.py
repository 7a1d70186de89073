import io
import math

import pytest

from pylox.errors import CompileError, LoxRuntimeError
from pylox.interpreter import Interpreter, run_program
from pylox.parser import parse_program


def run(source):
    out = io.StringIO()
    run_program(source, out=out)
    return out.getvalue().splitlines()


def runtime_error(source):
    with pytest.raises(LoxRuntimeError) as info:
        run_program(source, out=io.StringIO())
    return str(info.value)


def test_print_formats():
    assert run('print nil; print true; print 3; print -0; print 2.5; print "s";') == [
        'nil', 'true', '3', '-0', '2.5', 's',
    ]


def test_division_by_zero_follows_ieee():
    assert run('print 1 / 0; print -1 / 0; print 0 / 0;') == ['inf', '-inf', 'NaN']


def test_truthiness():
    assert run('if (0) print "zero"; if ("") print "empty"; if (nil) print "nil"; else print "no";') == [
        'zero', 'empty', 'no',
    ]


def test_equality_across_types():
    assert run('print 1 == 1; print "a" == "a"; print nil == false; print true == 1;') == [
        'true', 'true', 'false', 'false',
    ]


def test_callables_print():
    assert run('fun f() {} class C {} print f; print C; print C(); print clock;') == [
        '<fn f>', 'C', 'C instance', '<native fn>',
    ]


def test_clock_returns_milliseconds():
    out = io.StringIO()
    interp = run_program('var t = clock();', out=out)
    t = interp.globals.values['t']
    assert isinstance(t, float)
    assert t > 1e12


def test_recursion_and_closures():
    source = '''
    fun makeAdder(n) {
      fun add(x) { return x + n; }
      return add;
    }
    var add2 = makeAdder(2);
    print add2(40);
    '''
    assert run(source) == ['42']


def test_return_unwinds_loops():
    source = '''
    fun find() {
      for (var i = 0; i < 10; i = i + 1) {
        while (true) {
          if (i == 4) return i;
          i = i + 1;
        }
      }
      return -1;
    }
    print find();
    '''
    assert run(source) == ['4']


def test_static_binding_ignores_later_shadow():
    source = '''
    var a = "global";
    {
      fun show() { print a; }
      show();
      var a = "block";
      show();
    }
    '''
    assert run(source) == ['global', 'global']


def test_inherited_init_and_methods():
    source = '''
    class A { init(n) { this.n = n; } get() { return this.n; } }
    class B < A {}
    print B(5).get();
    '''
    assert run(source) == ['5']


def test_fields_shadow_methods():
    source = '''
    class A { m() { return "method"; } }
    var a = A();
    print a.m();
    a.m = "field";
    print a.m;
    '''
    assert run(source) == ['method', 'field']


@pytest.mark.parametrize('source,message', [
    ('print -"a";', '[line 1] Error at -: Operand must be a number.'),
    ('print 1 < "a";', '[line 1] Error at <: Operands must be numbers.'),
    ('print 1 + "a";', '[line 1] Error at +: Operands must be two numbers or two strings.'),
    ('print missing;', "[line 1] Error at missing: Undefined variable 'missing'."),
    ('missing = 1;', "[line 1] Error at missing: Undefined variable 'missing'."),
    ('"text"();', '[line 1] Error at ): Can only call functions and classes.'),
    ('fun f(a) {} f();', '[line 1] Error at ): Expected 1 arguments but got 0.'),
    ('class A {} A(1);', '[line 1] Error at ): Expected 0 arguments but got 1.'),
    ('var x = 1; print x.y;', '[line 1] Error at y: Only instances have properties.'),
    ('var x = 1; x.y = 2;', '[line 1] Error at y: Only instances have fields.'),
    ('class A {} print A().nope;', "[line 1] Error at nope: Undefined property 'nope'."),
    ('var NotClass = 1; class B < NotClass {}', '[line 1] Error at NotClass: Superclass must be a class.'),
    ('class A {} class B < A { m() { return super.nope; } } B().m();',
     "[line 1] Error at nope: Undefined property 'nope'."),
])
def test_runtime_errors(source, message):
    assert runtime_error(source) == message


def test_runtime_error_line_number():
    assert runtime_error('print 1;\n\nprint nil * 2;').startswith('[line 3]')


def test_unbounded_recursion_is_a_runtime_error():
    message = runtime_error('fun f() { return f(); } f();')
    assert message.endswith('Stack overflow.')


def test_static_errors_prevent_execution():
    out = io.StringIO()
    interp = Interpreter(out=out)
    with pytest.raises(CompileError):
        interp.run(parse_program('print "never";\nreturn 1;'))
    assert out.getvalue() == ''


def test_globals_persist_between_runs():
    out = io.StringIO()
    interp = Interpreter(out=out)
    interp.run(parse_program('var a = 1; fun bump() { a = a + 1; }'))
    interp.run(parse_program('bump(); print a;'))
    assert out.getvalue() == '2\n'


def test_nan_value_is_float():
    out = io.StringIO()
    interp = run_program('var n = 0 / 0;', out=out)
    assert math.isnan(interp.globals.values['n'])


def test_debug_file_records_phases(tmp_path):
    debug_file = tmp_path / 'debug.txt'
    interp = Interpreter(out=io.StringIO(), debug_level=3, debug_file=str(debug_file))
    interp.run(parse_program('fun f() { return 1; } { var x = f(); if (x) print x; }'))
    interp.close()
    text = debug_file.read_text(encoding='utf-8')
    assert 'interpret 2 statements' in text
    assert 'define function f' in text
    assert 'call <fn f> with 0 arguments' in text
    assert 'resolved' in text


def test_deep_recursion_completes():
    source = '''
    fun count(n) {
      if (n == 0) return 0;
      return 1 + count(n - 1);
    }
    print count(500);
    '''
    assert run(source) == ['500']


def test_failed_resolution_leaves_table_untouched():
    out = io.StringIO()
    interp = Interpreter(out=out)
    interp.run(parse_program('fun f(x) { return x; }'))
    before = dict(interp.locals)
    with pytest.raises(CompileError):
        interp.run(parse_program('{ var a = 1; print a; var a = 2; }'))
    assert interp.locals == before
