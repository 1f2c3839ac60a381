import dataclasses

import pytest

from lox.lox_scanner import scan
from lox.lox_datatypes import TokenType as T
from lox.lox_diagnostics import Diagnostics


def types_of(tokens):
    return [t.type for t in tokens]


def test_comment_contributes_no_token_but_advances_line():
    tokens = scan("1 + // comment\n 2")
    assert types_of(tokens) == [T.NUMBER, T.PLUS, T.NUMBER, T.EOF]
    assert tokens[0].line == 1
    assert tokens[2].line == 2
    assert tokens[-1].line == 2


def test_single_token_stream_ends_with_one_eof():
    tokens = scan("")
    assert types_of(tokens) == [T.EOF]
    assert tokens[0].lexeme == ""


# (source, expected token types without EOF)
OPERATOR_CASES = [
    ("!=", [T.BANG_EQUAL]),
    ("! =", [T.BANG, T.EQUAL]),
    ("==", [T.EQUAL_EQUAL]),
    ("===", [T.EQUAL_EQUAL, T.EQUAL]),
    ("<= >= < >", [T.LESS_EQUAL, T.GREATER_EQUAL, T.LESS, T.GREATER]),
    ("(){},.-+;:*?/", [
        T.LEFT_PAREN, T.RIGHT_PAREN, T.LEFT_BRACE, T.RIGHT_BRACE, T.COMMA, T.DOT,
        T.MINUS, T.PLUS, T.SEMICOLON, T.COLON, T.STAR, T.QMARK, T.SLASH,
    ]),
]


@pytest.mark.parametrize("source, expected", OPERATOR_CASES)
def test_operators_maximal_munch(source, expected):
    assert types_of(scan(source))[:-1] == expected


def test_number_literals():
    tokens = scan("123 45.67")
    assert tokens[0].literal == 123.0
    assert isinstance(tokens[0].literal, float)
    assert tokens[1].literal == 45.67
    assert tokens[1].lexeme == "45.67"


def test_trailing_dot_is_not_part_of_number():
    tokens = scan("12.")
    assert types_of(tokens) == [T.NUMBER, T.DOT, T.EOF]
    assert tokens[0].lexeme == "12"


def test_leading_dot_is_not_part_of_number():
    assert types_of(scan(".5")) == [T.DOT, T.NUMBER, T.EOF]


def test_string_literal_strips_quotes_and_spans_lines():
    tokens = scan('"ab\ncd" x')
    assert tokens[0].type == T.STRING
    assert tokens[0].literal == "ab\ncd"
    assert tokens[0].lexeme == '"ab\ncd"'
    assert tokens[1].line == 2


def test_unterminated_string_is_reported():
    diags = Diagnostics()
    tokens = scan('print "oops', diags)
    assert types_of(tokens) == [T.PRINT, T.EOF]
    assert diags.had_error
    [d] = diags.records
    assert d.kind == 'scan'
    assert d.message == "Unterminated string."


def test_unexpected_character_is_reported_and_skipped():
    diags = Diagnostics()
    tokens = scan("1 @ 2\n#", diags)
    assert types_of(tokens) == [T.NUMBER, T.NUMBER, T.EOF]
    assert [(d.line, d.message) for d in diags.records] == [
        (1, "Unexpected character '@'."),
        (2, "Unexpected character '#'."),
    ]


def test_keywords_and_identifiers():
    tokens = scan("var foo_1 orchid or _x class this")
    assert types_of(tokens) == [
        T.VAR, T.IDENTIFIER, T.IDENTIFIER, T.OR, T.IDENTIFIER, T.CLASS, T.THIS, T.EOF,
    ]
    assert tokens[2].lexeme == "orchid"
    assert tokens[1].literal is None


def test_whitespace_is_ignored():
    assert types_of(scan(" \t\r\n 1 \n")) == [T.NUMBER, T.EOF]


def test_tokens_are_immutable():
    token = scan("x")[0]
    with pytest.raises(dataclasses.FrozenInstanceError):
        token.lexeme = "y"
