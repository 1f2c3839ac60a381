"""
Formatting for Lox runtime values and debug renderings of syntax trees.
"""
import math
from decimal import Decimal

from lox.lox_datatypes import LoxFunction, NativeFunction
from lox.lox_ast import (
    Literal, Grouping, Unary, Binary, Logical, Ternary, Variable, Assign, Call,
    Expression, Print, Var, Block, If, While, Function, Return,
)


def positional_number(value) -> str:
    """Shortest round-tripping digits of a finite number, never in exponent form."""
    text = format(Decimal(repr(float(value))), 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    if text in ("-0", ""):
        return "0"
    return text


def format_number(value) -> str:
    """Renders a number the way the JavaScript host's Number#toString does."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"
    magnitude = abs(value)
    if magnitude >= 1e21 or magnitude < 1e-6:
        # repr is always in exponent form in these ranges, e.g. '1e-07'.
        mantissa, exponent = repr(float(value)).split('e')
        exp = int(exponent)
        return f"{mantissa}e{'+' if exp >= 0 else '-'}{abs(exp)}"
    return positional_number(value)


class Printer:
    """Formats Lox values the way `print` shows them."""

    def __init__(self):
        self._handlers = self._create_handlers()

    def pformat(self, obj) -> str:
        """Public entry point to format a value."""
        handler = self._handlers.get(type(obj))
        if handler is None:
            # Host natives may hand back subclasses or other types.
            return repr(obj) if not isinstance(obj, str) else obj
        return handler(obj)

    def _create_handlers(self):
        return {
            type(None): lambda o: "nil",
            bool: lambda o: "true" if o else "false",
            int: format_number,
            float: format_number,
            str: lambda o: o,
            LoxFunction: repr,
            NativeFunction: repr,
        }


# =================================================================
# Syntax tree printers (debugging aids)
# =================================================================

def _literal_text(value) -> str:
    if isinstance(value, str):
        return value
    return Printer().pformat(value)


class AstPrinter:
    """Renders trees as parenthesized prefix forms, e.g. `(* (group (+ 1 2)) 3)`."""

    def print(self, node) -> str:
        if isinstance(node, list):
            return "\n".join(self.print(stmt) for stmt in node)

        match node:
            case Literal(value):
                return _literal_text(value)
            case Grouping(expression):
                return self.parenthesize("group", expression)
            case Unary(operator, right):
                return self.parenthesize(operator.lexeme, right)
            case Binary(left, operator, right) | Logical(left, operator, right):
                return self.parenthesize(operator.lexeme, left, right)
            case Ternary(condition, then_branch, else_branch):
                return self.parenthesize("?:", condition, then_branch, else_branch)
            case Variable(name):
                return name.lexeme
            case Assign(name, value):
                return self.parenthesize(f"= {name.lexeme}", value)
            case Call(callee, _, arguments):
                return self.parenthesize("call", callee, *arguments)

            case Expression(expression):
                return self.parenthesize(";", expression)
            case Print(expression):
                return self.parenthesize("print", expression)
            case Var(name, initializer):
                if initializer is None:
                    return f"(var {name.lexeme})"
                return self.parenthesize(f"var {name.lexeme}", initializer)
            case Block(statements):
                return self.parenthesize("block", *statements)
            case If(condition, then_branch, None):
                return self.parenthesize("if", condition, then_branch)
            case If(condition, then_branch, else_branch):
                return self.parenthesize("if-else", condition, then_branch, else_branch)
            case While(condition, body):
                return self.parenthesize("while", condition, body)
            case Function(name, params, body):
                names = " ".join(p.lexeme for p in params)
                return self.parenthesize(f"fun {name.lexeme}({names})", *body)
            case Return(_, None):
                return "(return)"
            case Return(_, value):
                return self.parenthesize("return", value)
        raise TypeError(f"Cannot print node of type {type(node).__name__}")

    def parenthesize(self, name: str, *parts) -> str:
        inner = " ".join(self.print(p) for p in parts)
        return f"({name} {inner})" if inner else f"({name})"


class InfixPrinter:
    """Renders expressions back to Lox source.

    Parentheses appear only where the tree has a Grouping node, so parsing
    the output yields the same tree again.
    """

    def print(self, expr) -> str:
        match expr:
            case Literal(str() as value):
                return f'"{value}"'
            case Literal(bool() | None as value):
                return Printer().pformat(value)
            case Literal(value):
                # The scanner has no exponent syntax.
                return positional_number(value)
            case Grouping(expression):
                return f"({self.print(expression)})"
            case Unary(operator, right):
                return f"{operator.lexeme}{self.print(right)}"
            case Binary(left, operator, right) | Logical(left, operator, right):
                return f"{self.print(left)} {operator.lexeme} {self.print(right)}"
            case Ternary(condition, then_branch, else_branch):
                return f"{self.print(condition)} ? {self.print(then_branch)} : {self.print(else_branch)}"
            case Variable(name):
                return name.lexeme
            case Assign(name, value):
                return f"{name.lexeme} = {self.print(value)}"
            case Call(callee, _, arguments):
                args = ", ".join(self.print(a) for a in arguments)
                return f"{self.print(callee)}({args})"
        raise TypeError(f"Cannot print node of type {type(expr).__name__}")


class RpnPrinter:
    """Renders arithmetic expressions in reverse Polish notation, e.g. `1 2 + 3 *`."""

    def print(self, expr) -> str:
        match expr:
            case Literal(value):
                return _literal_text(value)
            case Grouping(expression):
                return self.print(expression)
            case Unary(operator, right):
                # Negation gets its own symbol so it can't be read as subtraction.
                op = "~" if operator.lexeme == "-" else operator.lexeme
                return f"{self.print(right)} {op}"
            case Binary(left, operator, right) | Logical(left, operator, right):
                return f"{self.print(left)} {self.print(right)} {operator.lexeme}"
            case Ternary(condition, then_branch, else_branch):
                return f"{self.print(condition)} {self.print(then_branch)} {self.print(else_branch)} ?:"
            case Variable(name):
                return name.lexeme
        raise TypeError(f"Cannot print node of type {type(expr).__name__} in RPN")
