# runtpl/core/template_store.py
"""Central store of named template files (``<template_dir>/<name>.<ext>``)."""
from pathlib import Path
from typing import Callable, List

import structlog

from runtpl.config.settings import DEFAULT_TEMPLATE_EXTENSION
from runtpl.exceptions import TemplateStoreError

log = structlog.get_logger(__name__)

EditorFunc = Callable[[Path], None]


class TemplateStore:
    def __init__(self, root: Path, extension: str = DEFAULT_TEMPLATE_EXTENSION):
        self.root = Path(root)
        self.extension = extension.lstrip(".")

    def ensure_root(self) -> Path:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise TemplateStoreError(f"Could not create template directory {self.root}: {e}") from e
        return self.root

    def path_for(self, name: str) -> Path:
        # lookups never create the directory; only create() and list_names() do.
        if not name or Path(name).name != name:
            raise TemplateStoreError(f"Invalid template name '{name}'")
        return self.root / f"{name}.{self.extension}"

    def resolve(self, name: str) -> Path:
        """A local file with the given name wins over a stored template."""
        local_path = Path(name)
        if local_path.is_file():
            log.debug("template_resolved_locally", path=str(local_path))
            return local_path

        if Path(name).name == name:
            stored_path = self.path_for(name)
            if stored_path.is_file():
                log.debug("template_resolved_from_store", path=str(stored_path))
                return stored_path

        raise TemplateStoreError(
            f"Template '{name}' not found locally or in the global template directory ({self.root})."
        )

    def read(self, name: str) -> str:
        path = self.resolve(name)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateStoreError(f"Could not read template {path}: {e}") from e

    def list_names(self) -> List[str]:
        root = self.ensure_root()
        return sorted(p.stem for p in root.iterdir() if p.is_file() and p.suffix == f".{self.extension}")

    def create(self, name: str, editor: EditorFunc) -> bool:
        """Creates a template through the editor; returns False if it was left empty and discarded."""
        path = self.path_for(name)
        if path.exists():
            raise TemplateStoreError(
                f"Template '{name}' already exists. Use 'runtpl template edit {name}' to edit it."
            )
        self.ensure_root()
        path.touch()
        editor(path)

        if path.stat().st_size == 0:
            path.unlink()
            log.info("empty_template_discarded", name=name)
            return False
        log.info("template_created", name=name, path=str(path))
        return True

    def edit(self, name: str, editor: EditorFunc) -> Path:
        path = self.path_for(name)
        if not path.exists():
            raise TemplateStoreError(f"Template '{name}' not found. Use 'runtpl template new {name}' to create it.")
        editor(path)
        log.info("template_edited", name=name, path=str(path))
        return path

    def remove(self, name: str) -> Path:
        path = self.path_for(name)
        if not path.exists():
            raise TemplateStoreError(
                f"Template '{name}' not found. Use 'runtpl template list' to see available templates."
            )
        try:
            path.unlink()
        except OSError as e:
            raise TemplateStoreError(f"Could not remove template {path}: {e}") from e
        log.info("template_removed", name=name, path=str(path))
        return path

    def __repr__(self) -> str:
        return f"TemplateStore(root={str(self.root)!r}, extension={self.extension!r})"
