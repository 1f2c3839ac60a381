"""
Collects errors reported by every stage of the pipeline.

A single `Diagnostics` object is threaded through scanning, parsing,
resolution and interpretation. The driver checks it between stages to
decide whether to continue, and to choose an exit code.
"""

from dataclasses import dataclass, field
from typing import List, Literal, Optional

from lox.lox_datatypes import Token, TokenType

Kind = Literal['scan', 'parse', 'resolve', 'runtime']


@dataclass
class Diagnostic:
    kind: Kind
    line: int
    where: str
    message: str

    def format(self) -> str:
        return f"[line {self.line}] Error{self.where}: {self.message}"


def where_for(token: Optional[Token]) -> str:
    """The location descriptor for an error at `token`."""
    if token is None:
        return ""
    if token.type == TokenType.EOF:
        return " at end"
    return f" at '{token.lexeme}'"


@dataclass
class Diagnostics:
    """The diagnostic sink the core reports into."""
    records: List[Diagnostic] = field(default_factory=list)
    had_error: bool = False
    had_runtime_error: bool = False

    def error(self, line: int, where: str, message: str, kind: Kind = 'parse'):
        self.records.append(Diagnostic(kind, line, where, message))
        if kind == 'runtime':
            self.had_runtime_error = True
        else:
            self.had_error = True

    def token_error(self, token: Token, message: str, kind: Kind = 'parse'):
        self.error(token.line, where_for(token), message, kind)

    def runtime_error(self, token: Token, message: str):
        self.token_error(token, message, kind='runtime')

    def reset(self):
        """Clears the error flags and records (used between REPL lines)."""
        self.records.clear()
        self.had_error = False
        self.had_runtime_error = False

    def of_kind(self, *kinds: Kind) -> List[Diagnostic]:
        return [d for d in self.records if d.kind in kinds]

    def format(self) -> str:
        return "\n".join(d.format() for d in self.records)
