"""
Tests for the loxpy tree-walking interpreter.
"""

import io
import textwrap

import pytest

from loxpy import (
    tokenize, parse, parse_expression, DiagnosticCollector, Expression,
)
from loxpy.runtime import (
    Interpreter, LoxFunction, BuiltinFunction, get_builtin_registry,
    is_truthy, is_equal, stringify,
)


def run(source, interpreter=None):
    """Parse and run a program; returns (stdout text, diagnostics, ok)."""
    diagnostics = DiagnosticCollector()
    statements = parse(tokenize(textwrap.dedent(source), diagnostics), diagnostics)
    assert not diagnostics.has_errors, diagnostics.format_all()
    if interpreter is None:
        interpreter = Interpreter(out=io.StringIO(), diagnostics=diagnostics)
    else:
        interpreter.diagnostics = diagnostics
    ok = interpreter.interpret(statements)
    return interpreter.out.getvalue(), diagnostics, ok


def output(source):
    out, diagnostics, ok = run(source)
    assert ok, diagnostics.format_all()
    return out.splitlines()


def runtime_error(source):
    """Run a program that must fault; returns the formatted error."""
    _, diagnostics, ok = run(source)
    assert not ok
    assert diagnostics.error_count == 1
    return diagnostics.diagnostics[0].format()


class TestValues:
    """Test truthiness, equality and printing."""

    def test_truthiness(self):
        assert not is_truthy(None)
        assert not is_truthy(False)
        assert is_truthy(0.0)
        assert is_truthy("")
        assert is_truthy(True)

    def test_equality_requires_same_type(self):
        assert is_equal(None, None)
        assert is_equal(1.0, 1.0)
        assert is_equal("a", "a")
        assert not is_equal(None, False)
        assert not is_equal(True, 1.0)
        assert not is_equal(0.0, "0")

    def test_stringify(self):
        assert stringify(None) == "nil"
        assert stringify(True) == "true"
        assert stringify(3.0) == "3"
        assert stringify(2.5) == "2.5"
        assert stringify(-0.5) == "-0.5"
        assert stringify("text") == "text"


class TestArithmetic:
    """Test arithmetic and string operators."""

    def test_precedence(self):
        assert output("print 1 + 2 * 3;") == ["7"]

    def test_division(self):
        assert output("print 7 / 2;") == ["3.5"]

    def test_unary_minus(self):
        assert output("print -(1 + 2);") == ["-3"]

    def test_comma_yields_right_operand(self):
        assert output("print (1, 2, 3);") == ["3"]

    def test_comma_evaluates_left_for_effects(self):
        assert output("var a = 0; var b = (a = 5, a + 1); print a; print b;") == ["5", "6"]

    def test_string_concatenation(self):
        assert output('print "foo" + "bar";') == ["foobar"]

    def test_string_plus_number(self):
        assert output('print "n=" + 1; print 2.5 + "x";') == ["n=1", "2.5x"]

    def test_string_plus_other_values(self):
        assert output('print true + "!"; print nil + "";') == ["true!", "nil"]

    def test_plus_type_error(self):
        assert runtime_error("print true + 1;") == \
            "Operands must be two numbers or two strings.\n[line 1]"

    def test_division_by_zero(self):
        assert runtime_error("print 1 / 0;") == "Division by zero.\n[line 1]"

    def test_negate_non_number(self):
        assert runtime_error('print -"a";') == "Operand must be a number.\n[line 1]"

    def test_compare_non_numbers(self):
        assert runtime_error('print 1 < "a";') == "Operands must be numbers.\n[line 1]"

    def test_error_line(self):
        source = """\
            var a = 1;
            print a * nil;
        """
        assert runtime_error(source) == "Operands must be numbers.\n[line 2]"


class TestComparisonAndLogic:
    """Test comparison, equality, logical and conditional operators."""

    def test_comparisons(self):
        assert output("print 1 < 2; print 2 <= 2; print 1 > 2; print 3 >= 4;") == \
            ["true", "true", "false", "false"]

    def test_equality(self):
        source = 'print 1 == 1; print "a" != "a"; print nil == nil; print true == 1; print nil == false;'
        assert output(source) == ["true", "false", "true", "false", "false"]

    def test_not(self):
        assert output('print !nil; print !0; print !"";') == ["true", "false", "false"]

    def test_logical_returns_operand(self):
        assert output('print nil or "x"; print 1 and 2; print false or false;') == \
            ["x", "2", "false"]

    def test_logical_short_circuit(self):
        """The right operand is never evaluated when the left decides."""
        assert output("print false and undefined; print true or undefined;") == \
            ["false", "true"]

    def test_conditional(self):
        assert output("print true ? 1 : undefined; print nil ? undefined : 2;") == ["1", "2"]

    def test_nested_conditional(self):
        assert output("var x = 5; print x < 0 ? \"neg\" : x == 0 ? \"zero\" : \"pos\";") == ["pos"]


class TestVariables:
    """Test declarations, assignment and scoping."""

    def test_block_shadowing(self):
        assert output("var a = 1; { var a = 2; print a; } print a;") == ["2", "1"]

    def test_assignment_reaches_enclosing_scope(self):
        assert output("var a = 1; { a = 2; } print a;") == ["2"]

    def test_assignment_is_an_expression(self):
        assert output("var a; var b; a = b = 3; print a; print b;") == ["3", "3"]

    def test_nested_scopes(self):
        source = """\
            var a = "global a";
            var b = "global b";
            {
                var a = "outer a";
                {
                    var a = "inner a";
                    print a;
                    print b;
                }
                print a;
            }
            print a;
        """
        assert output(source) == ["inner a", "global b", "outer a", "global a"]

    def test_inner_variable_invisible_after_block(self):
        assert runtime_error("{ var inner = 1; } print inner;") == \
            "Undefined variable 'inner'.\n[line 1]"

    def test_uninitialized_read_faults(self):
        assert runtime_error("var a; print a;") == "Variable 'a' is not initialized.\n[line 1]"

    def test_uninitialized_then_assigned(self):
        assert output("var a; a = 1; print a;") == ["1"]

    def test_nil_initializer_is_initialized(self):
        assert output("var a = nil; print a;") == ["nil"]

    def test_local_cannot_read_itself_in_initializer(self):
        assert runtime_error("var a = 1; { var a = a + 1; }") == \
            "Variable 'a' is not initialized.\n[line 1]"

    def test_global_redeclaration_uses_old_value(self):
        assert output("var a = 1; var a = a + 1; print a;") == ["2"]

    def test_undefined_variable(self):
        assert runtime_error("print nope;") == "Undefined variable 'nope'.\n[line 1]"

    def test_assign_undefined(self):
        assert runtime_error("nope = 1;") == "Undefined variable 'nope'.\n[line 1]"


class TestControlFlow:
    """Test if, while, for and break."""

    def test_if_else(self):
        assert output("if (1 > 2) print 1; else print 2; if (nil) print 3;") == ["2"]

    def test_while(self):
        assert output("var i = 0; while (i < 3) { print i; i = i + 1; }") == ["0", "1", "2"]

    def test_for(self):
        source = """\
            var sum = 0;
            for (var i = 1; i <= 4; i = i + 1) sum = sum + i;
            print sum;
        """
        assert output(source) == ["10"]

    def test_for_variable_is_scoped(self):
        assert runtime_error("for (var i = 0; i < 1; i = i + 1) {} print i;") == \
            "Undefined variable 'i'.\n[line 1]"

    def test_break(self):
        source = """\
            for (var i = 0; ; i = i + 1) {
                if (i == 2) break;
                print i;
            }
            print "done";
        """
        assert output(source) == ["0", "1", "done"]

    def test_break_only_exits_innermost_loop(self):
        source = """\
            var i = 0;
            while (i < 2) {
                while (true) break;
                print i;
                i = i + 1;
            }
        """
        assert output(source) == ["0", "1"]


class TestFunctions:
    """Test function declarations, calls and closures."""

    def test_call(self):
        assert output("fun add(a, b) { return a + b; } print add(1, 2);") == ["3"]

    def test_implicit_nil_return(self):
        assert output("fun f() {} print f(); fun g() { return; } print g();") == ["nil", "nil"]

    def test_function_values_print(self):
        assert output("fun f() {} print f; print clock;") == ["<fn f>", "<native fn>"]

    def test_recursion(self):
        source = """\
            fun fib(n) {
                if (n < 2) return n;
                return fib(n - 1) + fib(n - 2);
            }
            print fib(10);
        """
        assert output(source) == ["55"]

    def test_return_unwinds_loops(self):
        source = """\
            fun first(limit) {
                for (var i = 0; i < limit; i = i + 1) {
                    while (true) {
                        if (i == 3) return i;
                        break;
                    }
                }
                return -1;
            }
            print first(10);
            print first(2);
        """
        assert output(source) == ["3", "-1"]

    def test_closure_counter(self):
        source = """\
            fun makeCounter() {
                var i = 0;
                fun count() {
                    i = i + 1;
                    return i;
                }
                return count;
            }
            var counter = makeCounter();
            print counter();
            print counter();
            var other = makeCounter();
            print other();
        """
        assert output(source) == ["1", "2", "1"]

    def test_parameters_are_local(self):
        assert output("var a = 1; fun f(a) { a = 2; } f(5); print a;") == ["1"]

    def test_arguments_evaluated_in_caller_scope(self):
        assert output("var x = 2; fun sq(n) { return n * n; } { var x = 3; print sq(x); }") == ["9"]

    def test_call_non_callable(self):
        assert runtime_error('"text"();') == "Can only call functions.\n[line 1]"

    def test_arity_mismatch(self):
        assert runtime_error("fun f(a) {} f();") == "Expected 1 arguments but got 0.\n[line 1]"

    def test_native_arity(self):
        assert runtime_error("clock(1);") == "Expected 0 arguments but got 1.\n[line 1]"

    def test_clock(self):
        assert output("print clock() > 0;") == ["true"]

    def test_builtin_registry(self):
        registry = get_builtin_registry()
        assert registry is get_builtin_registry()
        assert "clock" in registry.names()
        clock = registry.get_function("clock")
        assert isinstance(clock, BuiltinFunction)
        assert clock.arity() == 0
        assert registry.get_function("nope") is None

    def test_registered_builtin_is_callable(self):
        get_builtin_registry().register(BuiltinFunction("twice", 1, lambda x: x * 2))
        try:
            interpreter = Interpreter(out=io.StringIO())
            out, _, ok = run("print twice(21);", interpreter)
        finally:
            get_builtin_registry()._functions.pop("twice")
        assert ok
        assert out == "42\n"

    def test_declared_function_is_lox_function(self):
        interpreter = Interpreter(out=io.StringIO())
        run("fun f(a, b) {}", interpreter)
        fn = interpreter.globals.values["f"]
        assert isinstance(fn, LoxFunction)
        assert fn.arity() == 2

    def test_unbounded_recursion_faults(self):
        assert runtime_error("fun f() { f(); } f();") == "Stack overflow.\n[line 1]"


class TestInterpreterState:
    """Test fault handling and persistence across interpret calls."""

    def test_fault_stops_execution(self):
        out, diagnostics, ok = run("print 1; print missing; print 2;")
        assert not ok
        assert out.splitlines() == ["1"]
        assert diagnostics.has_runtime_errors

    def test_environment_restored_after_fault(self):
        interpreter = Interpreter(out=io.StringIO())
        run("{ var a = 1; { print missing; } }", interpreter)
        assert interpreter.environment is interpreter.globals

    def test_globals_persist_between_calls(self):
        interpreter = Interpreter(out=io.StringIO())
        run("var a = 40;", interpreter)
        run("a = a + 2;", interpreter)
        out, _, ok = run("print a;", interpreter)
        assert ok
        assert out.splitlines() == ["42"]

    def test_interpret_expression_echoes_value(self):
        interpreter = Interpreter(out=io.StringIO())
        expr = parse_expression(tokenize("1 + 2"))
        assert interpreter.interpret_expression(expr)
        assert interpreter.out.getvalue() == "3\n"

    def test_interpret_expression_reports_fault(self):
        diagnostics = DiagnosticCollector()
        interpreter = Interpreter(out=io.StringIO(), diagnostics=diagnostics)
        expr = parse_expression(tokenize("1 / 0"))
        assert not interpreter.interpret_expression(expr)
        assert interpreter.out.getvalue() == ""
        assert diagnostics.messages == ["Division by zero."]

    def test_evaluation_is_repeatable(self):
        interpreter = Interpreter(out=io.StringIO())
        expr = parse_expression(tokenize('(1 + 2) * 3 == 9 ? "yes" : "no"'))
        assert interpreter.evaluate(expr) == interpreter.evaluate(expr) == "yes"

    def test_unknown_node_is_internal_error(self):
        class Mystery(Expression):
            pass

        with pytest.raises(RuntimeError, match="Unknown expression type: Mystery"):
            Interpreter(out=io.StringIO()).evaluate(Mystery())

    def test_deep_expression_faults_instead_of_crashing(self):
        source = "print 1;\nprint " + " + ".join(["1"] * 5000) + ";\nprint 2;"
        out, diagnostics, ok = run(source)
        assert not ok
        assert out.splitlines() == ["1"]
        assert diagnostics.diagnostics[0].format() == "Stack overflow.\n[line 2]"

    def test_deep_expression_echo_faults(self):
        diagnostics = DiagnosticCollector()
        interpreter = Interpreter(out=io.StringIO(), diagnostics=diagnostics)
        expr = parse_expression(tokenize(" - ".join(["1"] * 5000)))
        assert not interpreter.interpret_expression(expr)
        assert interpreter.out.getvalue() == ""
        assert diagnostics.messages == ["Stack overflow."]

    def test_usable_after_stack_overflow(self):
        interpreter = Interpreter(out=io.StringIO())
        run("var a = 1; { var a = 2; print " + " + ".join(["a"] * 5000) + "; }", interpreter)
        assert interpreter.environment is interpreter.globals
        out, _, ok = run("print a;", interpreter)
        assert ok
        assert out.splitlines() == ["1"]
