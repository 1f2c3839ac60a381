"""
The Lox syntax tree: two closed families of node types, expressions and
statements.

Nodes are plain dataclasses consumed by structural pattern matching in the
resolver, interpreter and printers. They compare and hash by identity, so
two references to the same name at different places in the source are
distinct keys in the resolver's side-table.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from lox.lox_datatypes import Token


# =================================================================
# Expressions
# =================================================================

@dataclass(eq=False)
class Literal:
    value: Any


@dataclass(eq=False)
class Grouping:
    expression: 'Expr'


@dataclass(eq=False)
class Unary:
    operator: Token
    right: 'Expr'


@dataclass(eq=False)
class Binary:
    left: 'Expr'
    operator: Token
    right: 'Expr'


@dataclass(eq=False)
class Logical:
    """Short-circuiting `and` / `or`."""
    left: 'Expr'
    operator: Token
    right: 'Expr'


@dataclass(eq=False)
class Ternary:
    condition: 'Expr'
    then_branch: 'Expr'
    else_branch: 'Expr'


@dataclass(eq=False)
class Variable:
    name: Token


@dataclass(eq=False)
class Assign:
    name: Token
    value: 'Expr'


@dataclass(eq=False)
class Call:
    callee: 'Expr'
    # Closing paren, kept for error locations.
    paren: Token
    arguments: List['Expr'] = field(default_factory=list)


Expr = Union[Literal, Grouping, Unary, Binary, Logical, Ternary, Variable, Assign, Call]


# =================================================================
# Statements
# =================================================================

@dataclass(eq=False)
class Expression:
    expression: Expr


@dataclass(eq=False)
class Print:
    expression: Expr


@dataclass(eq=False)
class Var:
    name: Token
    initializer: Optional[Expr] = None


@dataclass(eq=False)
class Block:
    statements: List['Stmt'] = field(default_factory=list)


@dataclass(eq=False)
class If:
    condition: Expr
    then_branch: 'Stmt'
    else_branch: Optional['Stmt'] = None


@dataclass(eq=False)
class While:
    condition: Expr
    body: 'Stmt'


@dataclass(eq=False)
class Function:
    name: Token
    params: List[Token]
    body: List['Stmt']


@dataclass(eq=False)
class Return:
    keyword: Token
    value: Optional[Expr] = None


Stmt = Union[Expression, Print, Var, Block, If, While, Function, Return]
