# runtpl/core/interactive.py
"""Interactive mode: let the user fill a JSON scaffold of template variables in an editor."""
import os
import tempfile
from pathlib import Path
from typing import Optional

import click
import structlog

from runtpl.core.context import context_from_json
from runtpl.core.engine import Template, extract_variables
from runtpl.core.engine.value import ValueObject, to_json
from runtpl.exceptions import EditorError, InteractiveAbort
from runtpl.util import normalize_newlines

log = structlog.get_logger(__name__)

COMMENT_KEY = "__comment"
COMMENT_TEXT = "Please fill in the values. An example structure is provided for lists of objects."


def build_scaffold(template: Template) -> ValueObject:
    scaffold: ValueObject = {COMMENT_KEY: COMMENT_TEXT}
    scaffold.update(extract_variables(template))
    return scaffold


def open_in_editor(path: Path, editor: Optional[str] = None):
    # blocks until the editor exits.
    try:
        click.edit(filename=str(path), editor=editor)
    except click.ClickException as e:
        raise EditorError(f"Could not open editor for '{path}': {e.format_message()}") from e


def run_interactive_session(template: Template, editor: Optional[str] = None) -> ValueObject:
    """Collects the render context by having the user edit the template's variable scaffold."""
    variables = extract_variables(template)
    if not variables:
        click.echo("No variables found in the template. Nothing to fill.", err=True)
        return {}

    click.echo("Please fill in the following variables in the editor:", err=True)
    for name in variables:
        click.echo(f"- {name}", err=True)

    initial_json = to_json(build_scaffold(template), pretty=True)
    fd, tmp_name = tempfile.mkstemp(prefix="template-vars-", suffix=".json")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f_obj:
            f_obj.write(initial_json)

        click.echo(f"\nOpening editor: {tmp_path}", err=True)
        log.info("interactive_editor_opened", path=str(tmp_path))
        open_in_editor(tmp_path, editor)
        user_data = tmp_path.read_text(encoding="utf-8")
    finally:
        tmp_path.unlink(missing_ok=True)

    if normalize_newlines(initial_json) == normalize_newlines(user_data):
        raise InteractiveAbort("No changes detected. Aborting.")

    click.echo("Editor closed. Reading data...", err=True)
    context = context_from_json(user_data)
    context.pop(COMMENT_KEY, None)
    return context
