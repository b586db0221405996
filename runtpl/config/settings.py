from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import click

APP_NAME = "runtpl"
DEFAULT_TEMPLATE_EXTENSION = "tpl"
DEFAULT_COPY_TO_CLIPBOARD = True


def default_app_dir() -> Path:
    # platform config directory, e.g. ~/.config/runtpl on linux.
    return Path(click.get_app_dir(APP_NAME))


def default_template_dir() -> Path:
    return default_app_dir() / "templates"


@dataclass
class RuntplConfig:
    # holds all configuration parameters for a single run.
    template_dir: Path = field(default_factory=default_template_dir)
    template_extension: str = DEFAULT_TEMPLATE_EXTENSION
    copy_to_clipboard: bool = DEFAULT_COPY_TO_CLIPBOARD
    # None lets click pick $VISUAL / $EDITOR.
    editor: Optional[str] = None

    def __post_init__(self):
        self.template_dir = Path(self.template_dir).expanduser()
        self.template_extension = self.template_extension.lstrip(".")
