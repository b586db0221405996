# runtpl/core/engine/parser.py
"""
Turns the token stream from the lexer into a Template AST.

Directive forms:

* ``foreach <item> in <path-or-call>`` ... ``endfor`` -- a Loop node
* ``name(arg: value, ...)``                            -- a BuiltinCall node
* ``a.b.c``                                            -- a VarRef node

Loop nesting is checked here, so an unmatched ``endfor`` or an unclosed
``foreach`` never reaches render time. Function names are not checked
against any registry; unknown functions fail when rendered.
"""
import json
import re
from typing import List, Optional, Tuple, Union

import structlog

from runtpl.exceptions import TemplateSyntaxError
from .lexer import Token, TokenKind, tokenize
from .nodes import BuiltinCall, Expr, Loop, Node, Template, Text, VarRef
from .value import Value

log = structlog.get_logger(__name__)

IDENT = r"[A-Za-z0-9_]+"
RE_IDENT = re.compile(rf"^{IDENT}$")
RE_PATH = re.compile(rf"^{IDENT}(?:\.{IDENT})*$")
RE_FOREACH = re.compile(rf"^foreach\s+({IDENT})\s+in\s+(.+)$", re.DOTALL)
RE_CALL = re.compile(rf"^({IDENT})\s*\((.*)\)$", re.DOTALL)

KEYWORD_FOREACH = "foreach"
KEYWORD_ENDFOR = "endfor"
RESERVED_WORDS = {KEYWORD_FOREACH, KEYWORD_ENDFOR}


def _is_block_directive(token: Token) -> bool:
    if token.kind is not TokenKind.DIRECTIVE:
        return False
    words = token.text.split(None, 1)
    return bool(words) and words[0] in RESERVED_WORDS


def _line_break_length(text: str) -> Optional[int]:
    # length of leading blanks plus one line terminator, or None if text doesn't start that way.
    stripped = text.lstrip(" \t")
    blanks = len(text) - len(stripped)
    if stripped.startswith("\r\n"):
        return blanks + 2
    if stripped.startswith("\n"):
        return blanks + 1
    return None


def _trim_standalone_block_lines(tokens: List[Token]) -> List[Token]:
    """Drops indentation and the line break around block tags that sit alone on a line."""
    head_trim = [0] * len(tokens)
    tail_keep = [len(t.text) for t in tokens]

    for index, token in enumerate(tokens):
        if not _is_block_directive(token):
            continue
        prev_token = tokens[index - 1] if index > 0 else None
        next_token = tokens[index + 1] if index + 1 < len(tokens) else None

        # must start a line: preceded by nothing but indentation since the last newline.
        if prev_token is None:
            line_start = 0
        elif prev_token.kind is TokenKind.LITERAL:
            last_newline = prev_token.text.rfind("\n")
            if last_newline == -1 and index - 1 != 0:
                continue
            line_start = last_newline + 1
            if prev_token.text[line_start:].strip(" \t"):
                continue
        else:
            continue

        # must end the line: followed by blanks and a newline, or blanks and end of input.
        if next_token is None:
            line_end = 0
        elif next_token.kind is TokenKind.LITERAL:
            line_end = _line_break_length(next_token.text)
            if line_end is None:
                if next_token.text.strip(" \t") or index + 2 != len(tokens):
                    continue
                line_end = len(next_token.text)
        else:
            continue

        if prev_token is not None:
            tail_keep[index - 1] = min(tail_keep[index - 1], line_start)
        if next_token is not None:
            head_trim[index + 1] = max(head_trim[index + 1], line_end)

    trimmed: List[Token] = []
    for index, token in enumerate(tokens):
        if token.kind is TokenKind.LITERAL:
            start, end = head_trim[index], tail_keep[index]
            text = token.text[start:end] if start < end else ""
            if not text:
                continue
            token = Token(TokenKind.LITERAL, text, token.offset)
        trimmed.append(token)
    return trimmed


def _split_arguments(args_source: str, offset: int) -> List[str]:
    # splits on commas that are outside quotes and brackets.
    parts: List[str] = []
    current: List[str] = []
    depth = 0
    in_string = False
    escaped = False
    for char in args_source:
        if in_string:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth < 0:
                raise TemplateSyntaxError("unbalanced ']' in function arguments", offset)
        elif char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    if in_string:
        raise TemplateSyntaxError("unterminated string in function arguments", offset)
    if depth:
        raise TemplateSyntaxError("unclosed '[' in function arguments", offset)
    tail = "".join(current).strip()
    if tail or parts:
        parts.append(tail)
    return parts


def _is_quoted(text: str) -> bool:
    return len(text) >= 2 and text[0] == '"' and text[-1] == '"'


def _parse_string_literal(text: str, offset: int) -> str:
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise TemplateSyntaxError(f"invalid string literal {text}: {e.msg}", offset) from e
    return value


def _parse_argument_value(text: str, offset: int) -> Union[Value, VarRef]:
    if _is_quoted(text):
        return _parse_string_literal(text, offset)
    if text.startswith("["):
        inner = text[1:-1].strip() if text.endswith("]") else None
        if inner is None:
            raise TemplateSyntaxError(f"invalid list literal '{text}'", offset)
        items = []
        for item in _split_arguments(inner, offset):
            if not _is_quoted(item):
                raise TemplateSyntaxError(f"list literals may only contain quoted strings, got '{item}'", offset)
            items.append(_parse_string_literal(item, offset))
        return tuple(items)
    if text == "true":
        return True
    if text == "false":
        return False
    if RE_PATH.match(text):
        return VarRef(tuple(text.split(".")), offset)
    raise TemplateSyntaxError(f"invalid argument value '{text}'", offset)


def parse_call(name: str, args_source: str, offset: int) -> BuiltinCall:
    args: List[Tuple[str, Union[Value, VarRef]]] = []
    seen = set()
    for part in _split_arguments(args_source, offset):
        if not part:
            raise TemplateSyntaxError(f"empty argument in call to '{name}'", offset)
        key, sep, raw_value = part.partition(":")
        key, raw_value = key.strip(), raw_value.strip()
        if not sep or not raw_value:
            raise TemplateSyntaxError(f"argument '{part}' in call to '{name}' must look like 'name: value'", offset)
        if not RE_IDENT.match(key):
            raise TemplateSyntaxError(f"invalid argument name '{key}' in call to '{name}'", offset)
        if key in seen:
            raise TemplateSyntaxError(f"duplicate argument '{key}' in call to '{name}'", offset)
        seen.add(key)
        args.append((key, _parse_argument_value(raw_value, offset)))
    return BuiltinCall(name, tuple(args), offset)


def parse_expression(text: str, offset: int) -> Expr:
    call_match = RE_CALL.match(text)
    if call_match:
        return parse_call(call_match.group(1), call_match.group(2), offset)
    if RE_PATH.match(text):
        path = tuple(text.split("."))
        if path[0] in RESERVED_WORDS:
            raise TemplateSyntaxError(f"'{path[0]}' is a reserved word and cannot be used as a variable", offset)
        return VarRef(path, offset)
    raise TemplateSyntaxError(f"invalid directive '{{{{{text}}}}}'", offset)


class _Frame:
    # an open loop (or the template root) collecting body nodes.
    def __init__(self, item_name: Optional[str] = None, source: Optional[Expr] = None, offset: int = 0):
        self.item_name = item_name
        self.source = source
        self.offset = offset
        self.body: List[Node] = []


def parse_template(source: str, source_name: str = "<template>") -> Template:
    """Parses template source text into an immutable Template."""
    tokens = _trim_standalone_block_lines(list(tokenize(source)))
    stack: List[_Frame] = [_Frame()]

    for token in tokens:
        if token.kind is TokenKind.LITERAL:
            stack[-1].body.append(Text(token.text))
            continue

        text = token.text
        if not text:
            raise TemplateSyntaxError("empty directive '{{}}'", token.offset)

        if text == KEYWORD_ENDFOR:
            if len(stack) == 1:
                raise TemplateSyntaxError("unmatched endfor", token.offset)
            frame = stack.pop()
            stack[-1].body.append(Loop(frame.item_name, frame.source, tuple(frame.body), frame.offset))
            continue

        if text.split(None, 1)[0] == KEYWORD_FOREACH:
            foreach_match = RE_FOREACH.match(text)
            if not foreach_match:
                raise TemplateSyntaxError(
                    f"malformed foreach '{text}', expected 'foreach <item> in <source>'", token.offset
                )
            item_name = foreach_match.group(1)
            if item_name in RESERVED_WORDS:
                raise TemplateSyntaxError(f"'{item_name}' cannot be used as a loop variable", token.offset)
            loop_source = parse_expression(foreach_match.group(2).strip(), token.offset)
            stack.append(_Frame(item_name, loop_source, token.offset))
            continue

        stack[-1].body.append(parse_expression(text, token.offset))

    if len(stack) > 1:
        unclosed = stack[-1]
        raise TemplateSyntaxError(f"unclosed foreach '{unclosed.item_name}'", unclosed.offset)

    template = Template(tuple(stack[0].body), source_name)
    log.debug("template_parsed", source=source_name, top_level_nodes=len(template.body))
    return template
