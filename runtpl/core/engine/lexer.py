# runtpl/core/engine/lexer.py
"""Splits template source into literal text spans and ``{{ }}`` directives."""
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

import structlog

from runtpl.exceptions import TemplateSyntaxError

log = structlog.get_logger(__name__)

DIRECTIVE_OPEN = "{{"
DIRECTIVE_CLOSE = "}}"


class TokenKind(Enum):
    LITERAL = "literal"
    DIRECTIVE = "directive"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    # literal text, or the trimmed directive contents.
    text: str
    # byte offset of the token start (the opening braces for directives).
    offset: int


def _utf8_len(text: str) -> int:
    return len(text.encode("utf-8"))


def tokenize(source: str) -> Iterator[Token]:
    """Lazily yields LITERAL and DIRECTIVE tokens for ``source``.

    Directive contents run up to the first ``}}``; directives do not nest.
    An opening ``{{`` without a closing ``}}`` raises TemplateSyntaxError.
    """
    cursor = 0
    byte_cursor = 0
    while cursor < len(source):
        open_at = source.find(DIRECTIVE_OPEN, cursor)
        if open_at == -1:
            yield Token(TokenKind.LITERAL, source[cursor:], byte_cursor)
            return
        if open_at > cursor:
            literal = source[cursor:open_at]
            yield Token(TokenKind.LITERAL, literal, byte_cursor)
            byte_cursor += _utf8_len(literal)

        body_start = open_at + len(DIRECTIVE_OPEN)
        close_at = source.find(DIRECTIVE_CLOSE, body_start)
        if close_at == -1:
            log.debug("unterminated_directive", offset=byte_cursor)
            raise TemplateSyntaxError("unterminated directive: '{{' has no matching '}}'", byte_cursor)

        raw_directive = source[open_at:close_at + len(DIRECTIVE_CLOSE)]
        yield Token(TokenKind.DIRECTIVE, source[body_start:close_at].strip(), byte_cursor)
        byte_cursor += _utf8_len(raw_directive)
        cursor = close_at + len(DIRECTIVE_CLOSE)
