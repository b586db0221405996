# runtpl/core/engine/value.py
"""
The value model shared by the whole engine.

Template data is plain JSON-shaped Python data: ``None``, ``bool``, ``int`` /
``float``, ``str``, ``list`` and ``dict`` with string keys. Everything that
reaches the renderer (CLI arguments, JSON files, stdin, built-in results) is
passed through :func:`normalize_value` first, so the rest of the engine only
ever deals with those six shapes.
"""
import json
from typing import Any, Dict, List, Mapping, Union

from runtpl.exceptions import TemplateTypeError

Value = Union[None, bool, int, float, str, List["Value"], Dict[str, "Value"]]
ValueObject = Dict[str, Value]


def normalize_value(raw: Any) -> Value:
    """Converts arbitrary mapping/sequence data into the value model.

    Tuples become lists, mappings become dicts with string keys. Anything that
    has no place in the model raises TemplateTypeError.
    """
    if raw is None or isinstance(raw, (bool, str)):
        return raw
    if isinstance(raw, (int, float)):
        return raw
    if isinstance(raw, Mapping):
        normalized: ValueObject = {}
        for key, item in raw.items():
            if not isinstance(key, str):
                raise TemplateTypeError(f"object keys must be strings, got {type(key).__name__}")
            normalized[key] = normalize_value(item)
        return normalized
    if isinstance(raw, (list, tuple)):
        return [normalize_value(item) for item in raw]
    raise TemplateTypeError(f"unsupported value type: {type(raw).__name__}")


def kind_of(value: Value) -> str:
    # name of the value's variant, used in error messages.
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "list"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def to_json(value: Value, pretty: bool = False) -> str:
    if pretty:
        return json.dumps(value, ensure_ascii=False, indent=2)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def stringify(value: Value) -> str:
    """Text form of a value as substituted into rendered output.

    Strings are emitted verbatim and null as an empty string; numbers,
    booleans, lists and objects use their compact JSON text.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return to_json(value)
