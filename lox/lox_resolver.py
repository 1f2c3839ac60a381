"""
Static scope resolution for Lox programs.

One pass over the parsed statements computes, for every variable read and
assignment, how many scopes out its binding lives. The interpreter uses
those hop counts to go straight to the right environment. References left
unresolved are globals.
"""
from enum import Enum, auto
from typing import Dict, List, Optional, TYPE_CHECKING

from lox.lox_datatypes import Token
from lox.lox_diagnostics import Diagnostics
from lox.lox_ast import (
    Expr, Stmt,
    Literal, Grouping, Unary, Binary, Logical, Ternary, Variable, Assign, Call,
    Expression, Print, Var, Block, If, While, Function, Return,
)

if TYPE_CHECKING:
    from lox.lox_interpreter import Interpreter


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()


class Resolver:
    def __init__(self, interpreter: 'Interpreter', diagnostics: Optional[Diagnostics] = None):
        self.interpreter = interpreter
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        # Innermost scope last. Values record whether the name is ready for use.
        self.scopes: List[Dict[str, bool]] = []
        self.current_function = FunctionType.NONE

    def resolve(self, node):
        if isinstance(node, list):
            for stmt in node:
                self.resolve(stmt)
            return

        match node:
            # Statements
            case Block(statements):
                self.begin_scope()
                self.resolve(statements)
                self.end_scope()
            case Var(name, initializer):
                self.declare(name)
                if initializer is not None:
                    self.resolve(initializer)
                self.define(name)
            case Function(name):
                # Defined before the body so the function can recurse.
                self.declare(name)
                self.define(name)
                self.resolve_function(node, FunctionType.FUNCTION)
            case Expression(expression) | Print(expression):
                self.resolve(expression)
            case If(condition, then_branch, else_branch):
                self.resolve(condition)
                self.resolve(then_branch)
                if else_branch is not None:
                    self.resolve(else_branch)
            case While(condition, body):
                self.resolve(condition)
                self.resolve(body)
            case Return(keyword, value):
                if self.current_function == FunctionType.NONE:
                    self.error(keyword, "Can't return from top-level code.")
                if value is not None:
                    self.resolve(value)

            # Expressions
            case Variable(name):
                if self.scopes and self.scopes[-1].get(name.lexeme) is False:
                    self.error(name, "Can't read local variable in its own initializer.")
                self.resolve_local(node, name)
            case Assign(name, value):
                self.resolve(value)
                self.resolve_local(node, name)
            case Binary(left, _, right) | Logical(left, _, right):
                self.resolve(left)
                self.resolve(right)
            case Ternary(condition, then_branch, else_branch):
                self.resolve(condition)
                self.resolve(then_branch)
                self.resolve(else_branch)
            case Call(callee, _, arguments):
                self.resolve(callee)
                self.resolve(arguments)
            case Grouping(expression):
                self.resolve(expression)
            case Unary(_, right):
                self.resolve(right)
            case Literal():
                pass
            case _:
                raise TypeError(f"Cannot resolve node of type {type(node).__name__}")

    def resolve_function(self, function: Function, type: FunctionType):
        enclosing_function = self.current_function
        self.current_function = type
        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve(function.body)
        self.end_scope()
        self.current_function = enclosing_function

    def resolve_local(self, expr: Expr, name: Token):
        for depth, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.interpreter.resolve(expr, depth)
                return
        # Not found in any local scope: assume it is global.

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name: Token):
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.error(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def define(self, name: Token):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def error(self, token: Token, message: str):
        self.diagnostics.token_error(token, message, kind='resolve')


def resolve(statements: List[Stmt], interpreter: 'Interpreter', diagnostics: Optional[Diagnostics] = None):
    """Records a hop count on `interpreter` for every local variable reference."""
    Resolver(interpreter, diagnostics).resolve(statements)
