"""
Defines the core data types for the Lox language runtime.

This module provides the token model produced by the scanner, the
environment chain used for variable storage, and the callable types
the interpreter dispatches on.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Dict, Any, Optional, Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from lox.lox_ast import Function
    from lox.lox_interpreter import Interpreter


class VariableNotFound(Exception):
    def __init__(self, key: str):
        super().__init__(key)
        self.key = key


# =================================================================
# Tokens
# =================================================================

class TokenType(Enum):
    # Single-character tokens.
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    LEFT_BRACE = auto()
    RIGHT_BRACE = auto()
    COMMA = auto()
    DOT = auto()
    MINUS = auto()
    PLUS = auto()
    SEMICOLON = auto()
    COLON = auto()
    SLASH = auto()
    STAR = auto()
    QMARK = auto()

    # One or two character tokens.
    BANG = auto()
    BANG_EQUAL = auto()
    EQUAL = auto()
    EQUAL_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    LESS = auto()
    LESS_EQUAL = auto()

    # Literals.
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()

    # Keywords.
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FUN = auto()
    FOR = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()

    EOF = auto()


RESERVED_WORDS = (
    "and", "class", "else", "false", "for", "fun", "if", "nil", "or",
    "print", "return", "super", "this", "true", "var", "while",
)

KEYWORDS: Dict[str, TokenType] = {w: TokenType[w.upper()] for w in RESERVED_WORDS}


@dataclass(frozen=True)
class Token:
    """A single lexeme together with its kind, literal value and source line."""
    type: TokenType
    lexeme: str
    literal: Any
    line: int

    def __str__(self) -> str:
        return f"{self.type.name} {self.lexeme} {self.literal}"


# =================================================================
# Environment chain
# =================================================================

class Environment:
    """Maps variable names to values for one lexical scope.

    Each environment links to the one enclosing it; only the global
    environment has no parent. Lookups by name walk the chain, while the
    resolver-guided accessors (`get_at`, `assign_at`) jump straight to the
    environment a fixed number of hops out.
    """
    def __init__(self, parent: Optional['Environment'] = None):
        self.bindings: Dict[str, Any] = {}
        self.parent = parent

    def define(self, key: str, value: Any):
        """Binds `key` in this scope, replacing any previous binding here."""
        self.bindings[key] = value

    def __getitem__(self, key: str) -> Any:
        owner = self.find_owner(key)
        if owner is not None:
            return owner.bindings[key]
        raise VariableNotFound(key)

    def __setitem__(self, key: str, value: Any):
        # Assignment never creates a binding; it updates the nearest owner.
        owner = self.find_owner(key)
        if owner is None:
            raise VariableNotFound(key)
        owner.bindings[key] = value

    def __contains__(self, key: str) -> bool:
        return self.find_owner(key) is not None

    def find_owner(self, key: str) -> Optional['Environment']:
        """Finds the environment in the chain (self → parent → ...) that binds `key`."""
        env = self
        while env is not None:
            if key in env.bindings:
                return env
            env = env.parent
        return None

    def ancestor(self, distance: int) -> 'Environment':
        env = self
        for _ in range(distance):
            env = env.parent
        return env

    def get_at(self, distance: int, key: str) -> Any:
        bindings = self.ancestor(distance).bindings
        if key not in bindings:
            raise VariableNotFound(key)
        return bindings[key]

    def assign_at(self, distance: int, key: str, value: Any):
        bindings = self.ancestor(distance).bindings
        if key not in bindings:
            raise VariableNotFound(key)
        bindings[key] = value

    def keys(self):
        """Returns a view of keys in the current scope only."""
        return self.bindings.keys()

    def __repr__(self) -> str:
        keys = ', '.join(self.bindings.keys())
        parent_id = f", parent=#{id(self.parent)}" if self.parent else ""
        return f"<Environment bindings=[{keys}]{parent_id}>"


# =================================================================
# Errors and control-flow outcomes
# =================================================================

class LoxRuntimeError(Exception):
    """A dynamic error raised while evaluating; carries the offending token."""
    def __init__(self, token: Token, message: str):
        super().__init__(message)
        self.token = token
        self.message = message


class Returning:
    """Outcome of executing a `return` statement.

    Statement execution yields `None` on normal completion and a
    `Returning` instance when a return is unwinding; blocks and loops stop
    and pass it outward until a function call unwraps it.
    """
    __slots__ = ("value",)

    def __init__(self, value: Any = None):
        self.value = value

    def __repr__(self) -> str:
        return f"Returning({self.value!r})"


def is_returning(outcome) -> bool:
    return isinstance(outcome, Returning)


# =================================================================
# Callables
# =================================================================

class LoxCallable(ABC):
    """Abstract base class for all objects callable within Lox."""

    @abstractmethod
    def arity(self) -> int: ...

    @abstractmethod
    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any: ...


class LoxFunction(LoxCallable):
    """Represents a function declared in Lox with `fun`.

    This is a closure, bundling the declaration with the environment that
    was active where it was defined.
    """
    def __init__(self, declaration: 'Function', closure: Environment):
        self.declaration = declaration
        self.closure = closure

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        # Parameters live in a fresh scope chained to the closure, not the caller.
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)
        outcome = interpreter.execute_block(self.declaration.body, environment)
        if is_returning(outcome):
            return outcome.value
        return None

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    def __repr__(self) -> str:
        return f"<fn {self.name}>"


class NativeFunction(LoxCallable):
    """A callable backed by a host Python function with a fixed arity."""
    def __init__(self, name: str, arity: int, fn: Callable[..., Any]):
        self.name = name
        self._arity = arity
        self.fn = fn

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        return self.fn(*arguments)

    def __repr__(self) -> str:
        return f"<native fn {self.name}>"


_clock_origin = time.perf_counter()


def clock() -> float:
    """Seconds elapsed since the runtime was loaded."""
    return time.perf_counter() - _clock_origin
