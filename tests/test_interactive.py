# tests/test_interactive.py
import json
from pathlib import Path
from unittest.mock import patch

import click
import pytest

from runtpl.core.engine import parse_template
from runtpl.core.interactive import COMMENT_KEY, build_scaffold, run_interactive_session
from runtpl.exceptions import ContextError, EditorError, InteractiveAbort

TEMPLATE_SOURCE = "{{title}}\n{{foreach item in items}}{{item.name}}{{endfor}}\n{{author.email}}"


@pytest.fixture
def template():
    return parse_template(TEMPLATE_SOURCE)


def _editing_to(new_text, seen_paths):
    def fake_edit(filename=None, editor=None, **kwargs):
        path = Path(filename)
        seen_paths.append((path, json.loads(path.read_text(encoding="utf-8"))))
        path.write_text(new_text, encoding="utf-8")

    return fake_edit


def test_build_scaffold(template):
    scaffold = build_scaffold(template)
    assert list(scaffold)[0] == COMMENT_KEY
    assert scaffold["title"] == ""
    assert scaffold["items"] == [{"name": ""}]
    assert scaffold["author"] == {"email": ""}


def test_session_returns_edited_context(template):
    seen = []
    edited = json.dumps({COMMENT_KEY: "ignored", "title": "T", "items": [{"name": "a"}], "author": {"email": "e"}})
    with patch("runtpl.core.interactive.click.edit", side_effect=_editing_to(edited, seen)):
        context = run_interactive_session(template)

    assert context == {"title": "T", "items": [{"name": "a"}], "author": {"email": "e"}}
    (path, scaffold), = seen
    assert path.name.startswith("template-vars-")
    assert path.suffix == ".json"
    assert scaffold == build_scaffold(template)
    assert not path.exists()


def test_session_passes_editor_through(template):
    with patch("runtpl.core.interactive.click.edit", side_effect=_editing_to('{"title": "x"}', [])) as edit:
        run_interactive_session(template, editor="nano")
    assert edit.call_args.kwargs["editor"] == "nano"


def test_unchanged_scaffold_aborts(template):
    seen = []
    with patch("runtpl.core.interactive.click.edit", side_effect=lambda filename=None, editor=None: seen.append(filename)):
        with pytest.raises(InteractiveAbort, match="No changes detected"):
            run_interactive_session(template)
    assert not Path(seen[0]).exists()


def test_invalid_json_from_editor(template):
    with patch("runtpl.core.interactive.click.edit", side_effect=_editing_to("{not json", [])):
        with pytest.raises(ContextError, match="Invalid JSON data"):
            run_interactive_session(template)


def test_editor_failure(template):
    with patch("runtpl.core.interactive.click.edit", side_effect=click.ClickException("Editing failed")):
        with pytest.raises(EditorError, match="Editing failed"):
            run_interactive_session(template)


def test_template_without_variables_skips_editor():
    with patch("runtpl.core.interactive.click.edit") as edit:
        assert run_interactive_session(parse_template("static text")) == {}
    edit.assert_not_called()
