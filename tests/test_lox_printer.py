import math

import pytest

from lox import ScriptRunner
from lox.lox_printer import Printer, AstPrinter, InfixPrinter, RpnPrinter
from lox.lox_datatypes import NativeFunction
from lox.lox_scanner import scan
from lox.lox_parser import parse


@pytest.fixture
def printer():
    return Printer()


def expr_of(src: str):
    [stmt] = parse(scan(src + ";"))
    return stmt.expression


# Test cases: (id, value, expected_string)
FORMAT_TEST_CASES = [
    ("nil", None, "nil"),
    ("true", True, "true"),
    ("false", False, "false"),
    ("integral_float", 3.0, "3"),
    ("negative_integral", -12.0, "-12"),
    ("fraction", 2.5, "2.5"),
    ("host_int", 7, "7"),
    ("nan", math.nan, "NaN"),
    ("inf", math.inf, "Infinity"),
    ("neg_inf", -math.inf, "-Infinity"),
    ("sixteen_digits", 1e16, "10000000000000000"),
    ("below_exponent_range", 1.2345678901234568e20, "123456789012345680000"),
    ("huge", 1e21, "1e+21"),
    ("huge_fraction", 1.5e300, "1.5e+300"),
    ("smallest_positional", 0.000001, "0.000001"),
    ("tiny", 1e-7, "1e-7"),
    ("tiny_negative", -2.5e-8, "-2.5e-8"),
    ("negative_zero", -0.0, "0"),
    ("short_fraction", 0.1, "0.1"),
    ("string", "hi there", "hi there"),
    ("empty_string", "", ""),
    ("native", NativeFunction("clock", 0, lambda: 0), "<native fn clock>"),
]


@pytest.mark.parametrize("name, value, expected", FORMAT_TEST_CASES, ids=[c[0] for c in FORMAT_TEST_CASES])
def test_pformat(printer, name, value, expected):
    assert printer.pformat(value) == expected


AST_CASES = [
    ("(1 + 2) * 3", "(* (group (+ 1 2)) 3)"),
    ("-1 + 2", "(+ (- 1) 2)"),
    ("a ? b : c", "(?: a b c)"),
    ("x = 1", "(= x 1)"),
    ("f(1, g())", "(call f 1 (call g))"),
    ("a and b or c", "(or (and a b) c)"),
]


@pytest.mark.parametrize("src, expected", AST_CASES)
def test_ast_printer_expressions(src, expected):
    assert AstPrinter().print(expr_of(src)) == expected


def test_ast_printer_statements():
    src = "var a; var b = 1; { print b; } if (a) print 1; else print 2; while (a) a = nil; fun f(x, y) { return; } fun g() { return 1; }"
    rendered = AstPrinter().print(parse(scan(src)))
    assert rendered.splitlines() == [
        "(var a)",
        "(var b 1)",
        "(block (print b))",
        "(if-else a (print 1) (print 2))",
        "(while a (; (= a nil)))",
        "(fun f(x y) (return))",
        "(fun g() (return 1))",
    ]


RPN_CASES = [
    ("(1 + 2) * 3", "1 2 + 3 *"),
    ("1 + 2 * 3", "1 2 3 * +"),
    ("1 - (2 - 3)", "1 2 3 - -"),
    ("-1 + 2", "1 ~ 2 +"),
    ("(4 / 2) - x", "4 2 / x -"),
]


@pytest.mark.parametrize("src, expected", RPN_CASES)
def test_rpn_printer(src, expected):
    assert RpnPrinter().print(expr_of(src)) == expected


def test_rpn_printer_rejects_calls():
    with pytest.raises(TypeError):
        RpnPrinter().print(expr_of("f()"))


INFIX_CASES = [
    "1 + 2 * 3",
    "(1 + 2) * 3",
    '"a" + "b"',
    "!true == false",
    "a = b ? f(1, 2) : nil",
    "x or y and z",
    "--1",
    "10000000000000000 + 0.0000001",
    "2.5 * 0.000000025",
]


@pytest.mark.parametrize("src", INFIX_CASES)
def test_infix_printer_reproduces_source(src):
    assert InfixPrinter().print(expr_of(src)) == src


def test_print_statement_uses_positional_form_below_1e21():
    res = ScriptRunner().handle_script("print 10000000000000000; print 0.0000001; print 1000000000000000000000;")
    assert res.output == ["10000000000000000", "1e-7", "1e+21"]
