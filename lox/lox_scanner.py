"""
Turns Lox source text into a flat list of tokens.
"""
from typing import Any, List, Optional

from lox.lox_datatypes import Token, TokenType, KEYWORDS
from lox.lox_diagnostics import Diagnostics

# Characters that may be followed by '=' to form a two-character operator.
_WITH_EQUAL = {
    '!': (TokenType.BANG_EQUAL, TokenType.BANG),
    '=': (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
    '>': (TokenType.GREATER_EQUAL, TokenType.GREATER),
    '<': (TokenType.LESS_EQUAL, TokenType.LESS),
}

_SINGLE = {
    '(': TokenType.LEFT_PAREN,
    ')': TokenType.RIGHT_PAREN,
    '{': TokenType.LEFT_BRACE,
    '}': TokenType.RIGHT_BRACE,
    ',': TokenType.COMMA,
    '.': TokenType.DOT,
    '-': TokenType.MINUS,
    '+': TokenType.PLUS,
    ';': TokenType.SEMICOLON,
    ':': TokenType.COLON,
    '*': TokenType.STAR,
    '?': TokenType.QMARK,
}


def _is_digit(c: str) -> bool:
    return '0' <= c <= '9'


def _is_alpha(c: str) -> bool:
    return ('a' <= c <= 'z') or ('A' <= c <= 'Z') or c == '_'


def _is_alphanumeric(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


class Scanner:
    """Single-use scanner over one source string.

    Errors (unexpected characters, unterminated strings) are reported to
    the diagnostics sink and scanning carries on with the next character.
    """
    def __init__(self, source: str, diagnostics: Optional[Diagnostics] = None):
        self.source = source
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.tokens: List[Token] = []
        self.start = 0
        self.current = 0
        self.line = 1

    def scan_tokens(self) -> List[Token]:
        while not self.is_at_end():
            # We are at the beginning of the next lexeme.
            self.start = self.current
            self.scan_token()
        self.tokens.append(Token(TokenType.EOF, "", None, self.line))
        return self.tokens

    def scan_token(self):
        c = self.advance()
        if c in _SINGLE:
            self.add_token(_SINGLE[c])
            return
        if c in _WITH_EQUAL:
            double, single = _WITH_EQUAL[c]
            self.add_token(double if self.match('=') else single)
            return
        match c:
            case '/':
                if self.match('/'):
                    # A comment goes until the end of the line.
                    while self.peek() != '\n' and not self.is_at_end():
                        self.advance()
                else:
                    self.add_token(TokenType.SLASH)
            case ' ' | '\r' | '\t':
                pass
            case '\n':
                self.line += 1
            case '"':
                self.string()
            case _ if _is_digit(c):
                self.number()
            case _ if _is_alpha(c):
                self.identifier()
            case _:
                self.diagnostics.error(self.line, "", f"Unexpected character '{c}'.", kind='scan')

    def string(self):
        while self.peek() != '"' and not self.is_at_end():
            if self.peek() == '\n':
                self.line += 1
            self.advance()

        if self.is_at_end():
            self.diagnostics.error(self.line, "", "Unterminated string.", kind='scan')
            return

        # The closing quote.
        self.advance()
        self.add_token(TokenType.STRING, self.source[self.start + 1:self.current - 1])

    def number(self):
        while _is_digit(self.peek()):
            self.advance()

        # A fractional part needs at least one digit after the '.'.
        if self.peek() == '.' and _is_digit(self.peek_next()):
            self.advance()
            while _is_digit(self.peek()):
                self.advance()

        self.add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self):
        while _is_alphanumeric(self.peek()):
            self.advance()
        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def match(self, expected: str) -> bool:
        if self.is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self) -> str:
        if self.is_at_end():
            return '\0'
        return self.source[self.current]

    def peek_next(self) -> str:
        if self.current + 1 >= len(self.source):
            return '\0'
        return self.source[self.current + 1]

    def is_at_end(self) -> bool:
        return self.current >= len(self.source)

    def advance(self) -> str:
        c = self.source[self.current]
        self.current += 1
        return c

    def add_token(self, type: TokenType, literal: Any = None):
        text = self.source[self.start:self.current]
        self.tokens.append(Token(type, text, literal, self.line))


def scan(source: str, diagnostics: Optional[Diagnostics] = None) -> List[Token]:
    """Scans `source` into tokens, terminated by a single EOF token."""
    return Scanner(source, diagnostics).scan_tokens()
