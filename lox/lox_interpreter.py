"""
The core Lox interpreter: a tree-walking evaluator over resolved syntax trees.
"""
import math
import os
import sys
import weakref
from typing import Any, Dict, List, Optional

from lox.lox_datatypes import (
    Environment, VariableNotFound, LoxRuntimeError, Returning, is_returning,
    LoxCallable, LoxFunction, NativeFunction, Token, TokenType, clock,
)
from lox.lox_diagnostics import Diagnostics
from lox.lox_printer import Printer
from lox.lox_ast import (
    Expr, Stmt,
    Literal, Grouping, Unary, Binary, Logical, Ternary, Variable, Assign, Call,
    Expression, Print, Var, Block, If, While, Function, Return,
)


# =================================================================
# Value semantics
# =================================================================

def is_number(value) -> bool:
    # bool is a subclass of int, so rule it out explicitly
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_truthy(value) -> bool:
    """Only nil and false are falsy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(a, b) -> bool:
    """Type-then-value equality, except that NaN equals NaN."""
    if is_number(a) and is_number(b):
        if math.isnan(a) and math.isnan(b):
            return True
        return a == b
    if type(a) is not type(b):
        return False
    return a == b


def divide(a, b) -> float:
    """IEEE division: a zero divisor gives an infinity or NaN instead of raising."""
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


class Interpreter:
    """The Lox execution engine."""

    def __init__(self, diagnostics: Optional[Diagnostics] = None, echo: bool = False):
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.echo = echo
        self.printer = Printer()
        self.globals = Environment()
        self.globals.define("clock", NativeFunction("clock", 0, clock))
        self.environment = self.globals
        # Resolver side-table: Variable/Assign node -> hop count. Weak keys, so
        # trees from earlier REPL lines are freed once nothing references them.
        self.locals: "weakref.WeakKeyDictionary[Expr, int]" = weakref.WeakKeyDictionary()
        self.side_effects: List[Dict[str, Any]] = []
        self.call_stack: List[Dict[str, Any]] = []
        self.current_node = None

    def _dbg(self, *parts):
        if os.environ.get("LOX_DEBUG"):
            try:
                print("[DBG]", *parts, file=sys.stderr)
            except Exception:
                pass

    def _push_frame(self, name, callee, args, paren: Token):
        self.call_stack.append({
            'name': name,
            'func': callee,
            'args': args,
            'line': paren.line,
        })

    def _pop_frame(self):
        if self.call_stack:
            self.call_stack.pop()

    def resolve(self, expr: Expr, depth: int):
        """Records the resolver's hop count for one variable reference."""
        self._dbg("resolve", type(expr).__name__, expr.name.lexeme, "->", depth)
        self.locals[expr] = depth

    def define_native(self, native: NativeFunction):
        self.globals.define(native.name, native)

    # -----------------------------------------------------------------
    # Entry point
    # -----------------------------------------------------------------

    def interpret(self, statements: List[Stmt], environment: Optional[Environment] = None) -> Any:
        """Executes `statements` and returns the value of the last expression statement.

        A runtime error stops execution; it is reported to the diagnostics
        sink and `None` is returned.
        """
        self.call_stack.clear()
        previous = self.environment
        if environment is not None:
            self.environment = environment
        result = None
        try:
            for stmt in statements:
                if isinstance(stmt, Expression):
                    self.current_node = stmt
                    result = self.evaluate(stmt.expression)
                else:
                    self.execute(stmt)
            return result
        except LoxRuntimeError as e:
            self.diagnostics.runtime_error(e.token, e.message)
            return None
        finally:
            self.environment = previous

    # -----------------------------------------------------------------
    # Statements
    # -----------------------------------------------------------------

    def execute(self, stmt: Stmt) -> Optional[Returning]:
        """Runs one statement; yields a Returning outcome when a return unwinds."""
        self.current_node = stmt
        match stmt:
            case Expression(expression):
                self.evaluate(expression)
            case Print(expression):
                self.emit(self.printer.pformat(self.evaluate(expression)))
            case Var(name, initializer):
                value = None
                if initializer is not None:
                    value = self.evaluate(initializer)
                self.environment.define(name.lexeme, value)
            case Block(statements):
                return self.execute_block(statements, Environment(self.environment))
            case If(condition, then_branch, else_branch):
                if is_truthy(self.evaluate(condition)):
                    return self.execute(then_branch)
                if else_branch is not None:
                    return self.execute(else_branch)
            case While(condition, body):
                while is_truthy(self.evaluate(condition)):
                    outcome = self.execute(body)
                    if is_returning(outcome):
                        return outcome
            case Function(name):
                # Captures the current environment by reference.
                self.environment.define(name.lexeme, LoxFunction(stmt, self.environment))
            case Return(_, value):
                return Returning(self.evaluate(value) if value is not None else None)
            case _:
                raise TypeError(f"Cannot execute node of type {type(stmt).__name__}")
        return None

    def execute_block(self, statements: List[Stmt], environment: Environment) -> Optional[Returning]:
        previous = self.environment
        self.environment = environment
        try:
            for stmt in statements:
                outcome = self.execute(stmt)
                if is_returning(outcome):
                    return outcome
            return None
        finally:
            self.environment = previous

    def emit(self, message: str):
        self.side_effects.append({'topics': ['stdout'], 'message': message})
        if self.echo:
            print(message)

    # -----------------------------------------------------------------
    # Expressions
    # -----------------------------------------------------------------

    def evaluate(self, expr: Expr) -> Any:
        match expr:
            case Literal(value):
                return value
            case Grouping(expression):
                return self.evaluate(expression)
            case Unary(operator, right):
                return self._unary(operator, self.evaluate(right))
            case Binary(left, operator, right):
                return self._binary(self.evaluate(left), operator, self.evaluate(right))
            case Logical(left, operator, right):
                left_value = self.evaluate(left)
                if operator.type == TokenType.OR:
                    if is_truthy(left_value):
                        return left_value
                elif not is_truthy(left_value):
                    return left_value
                return self.evaluate(right)
            case Ternary(condition, then_branch, else_branch):
                if is_truthy(self.evaluate(condition)):
                    return self.evaluate(then_branch)
                return self.evaluate(else_branch)
            case Variable(name):
                return self.look_up_variable(name, expr)
            case Assign(name, value):
                return self.assign_variable(name, expr, self.evaluate(value))
            case Call(callee, paren, arguments):
                return self._call(self.evaluate(callee), paren, [self.evaluate(a) for a in arguments])
        raise TypeError(f"Cannot evaluate node of type {type(expr).__name__}")

    def look_up_variable(self, name: Token, expr: Expr) -> Any:
        distance = self.locals.get(expr)
        try:
            if distance is not None:
                return self.environment.get_at(distance, name.lexeme)
            return self.globals[name.lexeme]
        except VariableNotFound:
            raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.") from None

    def assign_variable(self, name: Token, expr: Expr, value: Any) -> Any:
        distance = self.locals.get(expr)
        try:
            if distance is not None:
                self.environment.assign_at(distance, name.lexeme, value)
            else:
                self.globals[name.lexeme] = value
        except VariableNotFound:
            raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.") from None
        return value

    def _unary(self, operator: Token, right: Any) -> Any:
        match operator.type:
            case TokenType.BANG:
                return not is_truthy(right)
            case TokenType.MINUS:
                self._check_number_operands(operator, right)
                return -right
        raise LoxRuntimeError(operator, f"Unknown unary operator '{operator.lexeme}'.")

    def _binary(self, left: Any, operator: Token, right: Any) -> Any:
        match operator.type:
            case TokenType.EQUAL_EQUAL:
                return is_equal(left, right)
            case TokenType.BANG_EQUAL:
                return not is_equal(left, right)
            case TokenType.PLUS:
                if is_number(left) and is_number(right):
                    return left + right
                if isinstance(left, str) and isinstance(right, str):
                    return left + right
                raise LoxRuntimeError(operator, "Operands must be two numbers or two strings.")

        self._check_number_operands(operator, left, right)
        match operator.type:
            case TokenType.GREATER:
                return left > right
            case TokenType.GREATER_EQUAL:
                return left >= right
            case TokenType.LESS:
                return left < right
            case TokenType.LESS_EQUAL:
                return left <= right
            case TokenType.MINUS:
                return left - right
            case TokenType.STAR:
                return left * right
            case TokenType.SLASH:
                return divide(left, right)
        raise LoxRuntimeError(operator, f"Unknown binary operator '{operator.lexeme}'.")

    def _check_number_operands(self, operator: Token, *operands):
        if all(is_number(v) for v in operands):
            return
        if len(operands) == 1:
            raise LoxRuntimeError(operator, "Operand must be a number.")
        raise LoxRuntimeError(operator, "Operands must be numbers.")

    def _call(self, callee: Any, paren: Token, arguments: List[Any]) -> Any:
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(paren, "Can only call functions.")
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(
                paren, f"Expected {callee.arity()} arguments but got {len(arguments)}."
            )
        name = getattr(callee, 'name', '<call>')
        self._dbg("call", name, arguments)
        # Frames stay on the stack if the call raises, for error reporting.
        self._push_frame(name, callee, arguments, paren)
        result = callee.call(self, arguments)
        self._pop_frame()
        return result
