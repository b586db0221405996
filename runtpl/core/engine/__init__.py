# runtpl/core/engine/__init__.py
"""
The template engine: lexer, parser, evaluator, built-in functions and
variable extraction.

Typical use::

    template = parse_template("Hi {{name}}")
    render(template, {"name": "Alice"})     # "Hi Alice"
    extract_variables(template)             # {"name": ""}

A parsed Template is immutable and can be rendered any number of times.
"""
from typing import Mapping

from .builtins import BUILTIN_FUNCTIONS, files
from .evaluator import Renderer, render
from .extractor import extract_variables
from .nodes import BuiltinCall, Loop, Template, Text, VarRef
from .parser import parse_template
from .value import Value, normalize_value, stringify


def render_string(source: str, context: Mapping[str, Value]) -> str:
    """Parses and renders ``source`` in one step."""
    return render(parse_template(source), context)


__all__ = [
    "BUILTIN_FUNCTIONS",
    "BuiltinCall",
    "Loop",
    "Renderer",
    "Template",
    "Text",
    "Value",
    "VarRef",
    "extract_variables",
    "files",
    "normalize_value",
    "parse_template",
    "render",
    "render_string",
    "stringify",
]
