# tests/test_lexer.py
"""Tests for splitting template source into literal and directive tokens."""

import pytest

from runtpl.core.engine.lexer import Token, TokenKind, tokenize
from runtpl.exceptions import TemplateSyntaxError


def test_literal_only_source_is_one_token():
    tokens = list(tokenize("just text\n"))
    assert tokens == [Token(TokenKind.LITERAL, "just text\n", 0)]


def test_empty_source_has_no_tokens():
    assert list(tokenize("")) == []


def test_directive_contents_are_trimmed():
    tokens = list(tokenize("Hi {{  name }}!"))
    assert [(t.kind, t.text) for t in tokens] == [
        (TokenKind.LITERAL, "Hi "),
        (TokenKind.DIRECTIVE, "name"),
        (TokenKind.LITERAL, "!"),
    ]


def test_offsets_are_in_bytes():
    # "é" is two bytes in utf-8.
    tokens = list(tokenize("é{{a}}b"))
    assert [t.offset for t in tokens] == [0, 2, 7]


def test_directive_ends_at_first_closing_braces():
    tokens = list(tokenize("{{ a }} }}"))
    assert tokens[0].text == "a"
    assert tokens[1] == Token(TokenKind.LITERAL, " }}", 7)


def test_tokenize_is_lazy():
    tokens = tokenize("ok {{a}} then {{broken")
    assert next(tokens).text == "ok "
    assert next(tokens).text == "a"
    assert next(tokens).text == " then "
    with pytest.raises(TemplateSyntaxError):
        next(tokens)


@pytest.mark.parametrize("source, offset", [
    ("{{name", 0),
    ("abc {{ name ", 4),
    ("ü {{x}} {{", 9),
])
def test_unterminated_directive_reports_offset(source, offset):
    with pytest.raises(TemplateSyntaxError) as exc_info:
        list(tokenize(source))
    assert exc_info.value.offset == offset
    assert f"byte {offset}" in str(exc_info.value)
