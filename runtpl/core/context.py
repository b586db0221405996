# runtpl/core/context.py
"""
Builds the render context from command-line data arguments.

Argument forms, processed in order (a later key replaces an earlier one):

* ``key=value``   -- a string; a value containing commas becomes a list of
  trimmed strings
* ``key@=path``   -- file contents, parsed as JSON when possible, else text
* ``key@-``       -- stdin, same JSON-or-text rule; allowed once
"""
import json
import sys
from pathlib import Path
from typing import Dict, Optional, Sequence, TextIO

import structlog

from runtpl.core.engine.value import Value, ValueObject, normalize_value
from runtpl.exceptions import ContextError
from runtpl.util import normalize_text

log = structlog.get_logger(__name__)

STDIN_SUFFIX = "@-"
FILE_SEPARATOR = "@="
VALUE_SEPARATOR = "="


def _json_or_text(raw_text: str) -> Value:
    text = normalize_text(raw_text)
    try:
        return normalize_value(json.loads(text))
    except json.JSONDecodeError:
        return text


def _check_key(key: str, arg: str) -> str:
    if not key:
        raise ContextError(f"Argument '{arg}' has an empty key")
    return key


def parse_value_argument(value_str: str) -> Value:
    normalized = normalize_text(value_str)
    if "," in normalized:
        return [item.strip() for item in normalized.split(",")]
    return normalized


def build_context_from_args(args: Sequence[str], stdin: Optional[TextIO] = None) -> ValueObject:
    """Assembles a context object from ``key=value``, ``key@=path`` and ``key@-`` arguments."""
    context: Dict[str, Value] = {}
    stdin_key: Optional[str] = None

    for arg in args:
        if arg.endswith(STDIN_SUFFIX):
            key = _check_key(arg[: -len(STDIN_SUFFIX)], arg)
            if stdin_key is not None:
                raise ContextError(
                    f"Only one argument can read from stdin ('{stdin_key}@-' already did, got '{arg}')"
                )
            stream = stdin if stdin is not None else sys.stdin
            context[key] = _json_or_text(stream.read())
            stdin_key = key
            log.debug("context_value_from_stdin", key=key)
        elif FILE_SEPARATOR in arg:
            key, _, path_str = arg.partition(FILE_SEPARATOR)
            _check_key(key, arg)
            try:
                raw_text = Path(path_str).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise ContextError(f"Could not read data file '{path_str}' for '{key}': {e}") from e
            context[key] = _json_or_text(raw_text)
            log.debug("context_value_from_file", key=key, path=path_str)
        elif VALUE_SEPARATOR in arg:
            key, _, value_str = arg.partition(VALUE_SEPARATOR)
            _check_key(key, arg)
            context[key] = parse_value_argument(value_str)
            log.debug("context_value_from_argument", key=key)
        else:
            raise ContextError(
                f"Argument '{arg}' is not in a valid format (key=value, key@=filepath, or key@-)"
            )

    return context


def context_from_json(json_text: str) -> ValueObject:
    """Parses a JSON document whose root must be an object into a context."""
    try:
        data = json.loads(normalize_text(json_text))
    except json.JSONDecodeError as e:
        raise ContextError(f"Invalid JSON data: {e}") from e
    if not isinstance(data, dict):
        raise ContextError("Root of the data file must be a JSON object.")
    return normalize_value(data)
