# runtpl/cli/interface.py
import functools
import sys
from pathlib import Path
from typing import Any, Callable, Optional, Tuple

import click
from click_option_group import optgroup
from rich.console import Console as RichConsole
from rich.table import Table
import structlog

from runtpl import __version__ as app_version
from runtpl.config.loader import build_config, load_and_merge_configs
from runtpl.config.settings import RuntplConfig
from runtpl.core.context import build_context_from_args
from runtpl.core.engine import extract_variables, parse_template, render
from runtpl.core.engine.value import to_json
from runtpl.core.interactive import open_in_editor, run_interactive_session
from runtpl.core.output import copy_to_clipboard, write_to_stdout
from runtpl.core.template_store import TemplateStore
from runtpl.exceptions import ContextError, InteractiveAbort, RuntplError
from runtpl.logging_setup import configure_logging

log = structlog.get_logger(__name__)


def handle_cli_errors(func: Callable) -> Callable:
    """Turns application errors into a red message on stderr and exit status 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        try:
            return func(*args, **kwargs)
        except click.exceptions.Exit:
            raise
        except InteractiveAbort as e:
            log.info("interactive_session_aborted", message=str(e))
            click.echo(str(e), err=True)
            sys.exit(0)
        except RuntplError as e:
            log.error("handled_application_error_in_cli", error_type=type(e).__name__, message=str(e))
            click.secho(f"Error: {e}", fg="red", err=True)
            sys.exit(1)
        except click.ClickException:
            raise
        except Exception as e:
            log.critical("unexpected_critical_error_in_cli", message=str(e), exc_info=True)
            click.secho(f"Unexpected critical error: {e}. Please report this.", fg="red", err=True)
            sys.exit(1)

    return wrapper


def _store_for(config: RuntplConfig) -> TemplateStore:
    return TemplateStore(config.template_dir, config.template_extension)


def _editor_for(config: RuntplConfig) -> Callable[[Path], None]:
    return lambda path: open_in_editor(path, config.editor)


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option("--verbose", "-v", "verbosity_level", count=True, help="Verbosity: -v info, -vv debug.")
@click.option("--json-logs", "force_json_logs", is_flag=True, default=False, help="Emit logs as JSON.")
@click.option("--template-dir", "template_dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Directory holding named templates. Default: the user config directory.")
@click.version_option(version=app_version, package_name="runtpl", prog_name="runtpl", help="Show version and exit.")
@click.pass_context
@handle_cli_errors
def main_cli_group(ctx: click.Context, verbosity_level: int, force_json_logs: bool, template_dir: Optional[Path]):
    """runtpl: render text templates with variables, loops and file contents."""
    log_level = "warning"
    if verbosity_level == 1:
        log_level = "info"
    elif verbosity_level >= 2:
        log_level = "debug"
    configure_logging(log_level_str=log_level, force_json_logs=force_json_logs)

    ctx.obj = build_config(load_and_merge_configs(), {"template_dir": template_dir})
    log.debug("cli_config_resolved", config=repr(ctx.obj))


@main_cli_group.command("run")
@click.argument("template_name")
@click.argument("data_args", nargs=-1, metavar="[KEY=VALUE | KEY@=FILE | KEY@-]...")
@optgroup.group("Data Input", help="Where template variables come from.")
@optgroup.option("-i", "--interactive", "interactive", is_flag=True, default=False,
                 help="Fill variables in an editor instead of passing data arguments.")
@optgroup.option("--editor", "editor", default=None, help="Editor command for interactive mode. Default: $VISUAL/$EDITOR.")
@optgroup.group("Output", help="Where the rendered text goes.")
@optgroup.option("-n", "--no-copy", "no_copy", is_flag=True, default=False,
                 help="Do not copy the output to the clipboard.")
@click.pass_obj
@handle_cli_errors
def run_command(config: RuntplConfig, template_name: str, data_args: Tuple[str, ...],
                interactive: bool, editor: Optional[str], no_copy: bool):
    """Render TEMPLATE_NAME (a file path or a stored template name) with the given data."""
    store = _store_for(config)
    template_path = store.resolve(template_name)
    template = parse_template(store.read(template_name), source_name=str(template_path))

    if interactive:
        if data_args:
            raise ContextError("Cannot use data arguments with --interactive mode.")
        context = run_interactive_session(template, editor or config.editor)
    else:
        context = build_context_from_args(data_args)

    rendered = render(template, context)
    log.info("template_run_complete", template=str(template_path), length=len(rendered))
    write_to_stdout(rendered)

    if not no_copy and config.copy_to_clipboard:
        copy_to_clipboard(rendered)


@main_cli_group.command("vars")
@click.argument("template_name")
@click.pass_obj
@handle_cli_errors
def vars_command(config: RuntplConfig, template_name: str):
    """Print the JSON skeleton of the data TEMPLATE_NAME expects."""
    store = _store_for(config)
    template = parse_template(store.read(template_name), source_name=str(store.resolve(template_name)))
    write_to_stdout(to_json(extract_variables(template), pretty=True) + "\n")


@main_cli_group.group("template")
def template_group():
    """Manage stored templates."""


@template_group.command("list")
@click.pass_obj
@handle_cli_errors
def template_list_command(config: RuntplConfig):
    """List available templates."""
    store = _store_for(config)
    names = store.list_names()
    console = RichConsole()
    if not names:
        console.print(f"No templates found in {store.root}. Use 'runtpl template new <name>' to create one.")
        return
    table = Table(title=f"Templates in {store.root}")
    table.add_column("Name", style="cyan")
    table.add_column("Path")
    for name in names:
        table.add_row(name, str(store.path_for(name)))
    console.print(table)


@template_group.command("new")
@click.argument("name")
@click.pass_obj
@handle_cli_errors
def template_new_command(config: RuntplConfig, name: str):
    """Create a new template NAME and open it in the editor."""
    store = _store_for(config)
    click.echo(f"Opening editor for new template: {store.path_for(name)}", err=True)
    if store.create(name, _editor_for(config)):
        click.echo(f"Template '{name}' created successfully.")
    else:
        click.echo("Empty template discarded. Creation cancelled.")


@template_group.command("edit")
@click.argument("name")
@click.pass_obj
@handle_cli_errors
def template_edit_command(config: RuntplConfig, name: str):
    """Open the stored template NAME in the editor."""
    store = _store_for(config)
    path = store.edit(name, _editor_for(config))
    click.echo(f"Template '{name}' saved ({path}).")


@template_group.command("remove")
@click.argument("name")
@click.option("-y", "--yes", "assume_yes", is_flag=True, default=False, help="Do not ask for confirmation.")
@click.pass_obj
@handle_cli_errors
def template_remove_command(config: RuntplConfig, name: str, assume_yes: bool):
    """Delete the stored template NAME."""
    store = _store_for(config)
    path = store.path_for(name)
    if not path.exists():
        # let the store produce the not-found error before asking anything.
        store.remove(name)
    if not assume_yes and not click.confirm(
        f"Are you sure you want to delete the template '{name}' from {path}?", default=False
    ):
        click.echo("Removal cancelled.")
        return
    store.remove(name)
    click.echo(f"Template '{name}' removed successfully.")
