# tests/test_context.py
import io

import pytest

from runtpl.core.context import build_context_from_args, context_from_json, parse_value_argument
from runtpl.exceptions import ContextError


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("World", "World"),
        ("", ""),
        ("a,b,c", ["a", "b", "c"]),
        (" a , b ,c ", ["a", "b", "c"]),
        ("trailing,", ["trailing", ""]),
        ("line1\r\nline2", "line1\nline2"),
    ],
)
def test_parse_value_argument(raw, expected):
    assert parse_value_argument(raw) == expected


def test_key_value_arguments():
    context = build_context_from_args(["name=World", "tags=x, y", "expr=a=b"])
    assert context == {"name": "World", "tags": ["x", "y"], "expr": "a=b"}


def test_later_argument_replaces_earlier():
    assert build_context_from_args(["name=first", "name=second"]) == {"name": "second"}


def test_file_argument_json_and_text(tmp_path):
    json_file = tmp_path / "data.json"
    json_file.write_text("\ufeff" + '{"items": [1, "two"], "ok": true}', encoding="utf-8")
    text_file = tmp_path / "notes.txt"
    text_file.write_bytes(b"not json\r\nsecond line\r\n")
    number_file = tmp_path / "n.txt"
    number_file.write_text("42", encoding="utf-8")

    context = build_context_from_args([f"data@={json_file}", f"notes@={text_file}", f"n@={number_file}"])

    assert context["data"] == {"items": [1, "two"], "ok": True}
    assert context["notes"] == "not json\nsecond line\n"
    assert context["n"] == 42


def test_file_argument_unreadable(tmp_path):
    with pytest.raises(ContextError, match="missing.json"):
        build_context_from_args([f"data@={tmp_path / 'missing.json'}"])


def test_stdin_argument():
    context = build_context_from_args(["payload@-"], stdin=io.StringIO('{"a": {"b": null}}'))
    assert context == {"payload": {"a": {"b": None}}}


def test_stdin_text_is_kept_verbatim():
    context = build_context_from_args(["body@-"], stdin=io.StringIO("plain, with a comma"))
    # the comma splitting rule only applies to key=value.
    assert context == {"body": "plain, with a comma"}


def test_stdin_only_once():
    with pytest.raises(ContextError, match="Only one argument can read from stdin"):
        build_context_from_args(["a@-", "b@-"], stdin=io.StringIO("x"))


@pytest.mark.parametrize("arg", ["novalue", "=value", "@=file.json", "@-"])
def test_invalid_arguments(arg):
    with pytest.raises(ContextError):
        build_context_from_args([arg], stdin=io.StringIO(""))


def test_invalid_format_message():
    with pytest.raises(ContextError, match="not in a valid format"):
        build_context_from_args(["justaword"])


def test_context_from_json():
    assert context_from_json('{"x": [1, 2], "y": "z"}') == {"x": [1, 2], "y": "z"}


@pytest.mark.parametrize("text", ["[1, 2]", '"just a string"', "3"])
def test_context_from_json_requires_object(text):
    with pytest.raises(ContextError, match="must be a JSON object"):
        context_from_json(text)


def test_context_from_json_invalid():
    with pytest.raises(ContextError, match="Invalid JSON data"):
        context_from_json("{broken")
