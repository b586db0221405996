# runtpl/core/engine/builtins.py
"""
Built-in functions callable from templates, e.g.
``{{foreach f in files(source: "./src", exclude_names: ["README.md"])}}``.

Each function takes its named template arguments as keyword arguments
(already evaluated to plain values) and returns a value.
"""
import inspect
import os
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Sequence

import structlog

from runtpl.exceptions import FileReadError, FunctionArgumentError
from runtpl.util import strip_utf8_bom
from .value import Value, ValueObject, kind_of

log = structlog.get_logger(__name__)

BuiltinFunction = Callable[..., Value]


def _string_list(arg_name: str, value: Any) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise FunctionArgumentError(f"'{arg_name}' argument must be a list of strings, got {kind_of(value)}")
    return value


def _source_paths(source: Any) -> List[str]:
    if isinstance(source, str):
        return [part.strip() for part in source.split(",") if part.strip()]
    if isinstance(source, list) and all(isinstance(item, str) for item in source):
        return [item for item in source if item]
    raise FunctionArgumentError(
        "'files' function requires a 'source' argument. It must be a comma-separated string "
        "(e.g. \"./src\") or a list of strings (e.g. [\"./src\", \"./tests\"])"
    )


def _relative_display_path(path: str, cwd: str) -> str:
    # path relative to the working directory, in normalized platform form.
    absolute = os.path.abspath(path)
    try:
        return os.path.relpath(absolute, cwd)
    except ValueError:
        # different drive on windows; nothing to be relative to.
        return os.path.normpath(path)


def _walk_source(source_path: str, recursive: bool) -> Iterator[str]:
    """Yields file paths under ``source_path`` in a deterministic order.

    Per directory: files in lexicographic order, then subdirectories in
    lexicographic order. A source that is itself a file yields just that file.
    """
    if not os.path.exists(source_path):
        raise FileReadError(source_path, "no such file or directory")
    if not os.path.isdir(source_path):
        yield source_path
        return

    def _raise_walk_error(error: OSError):
        raise FileReadError(error.filename or source_path, error.strerror or str(error))

    for root, dirs, files in os.walk(source_path, topdown=True, onerror=_raise_walk_error):
        dirs.sort()
        for file_name in sorted(files):
            yield os.path.join(root, file_name)
        if not recursive:
            # only direct children of the source directory.
            dirs[:] = []


def _read_file_object(file_path: str, display_path: str) -> ValueObject:
    try:
        absolute_path = str(Path(file_path).resolve(strict=True))
        raw = Path(file_path).read_bytes()
    except OSError as e:
        raise FileReadError(display_path, e.strerror or str(e)) from e
    try:
        content = strip_utf8_bom(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise FileReadError(display_path, f"not valid utf-8 text ({e.reason} at byte {e.start})") from e
    return {
        "name": os.path.basename(file_path),
        "path": display_path,
        "absolute_path": absolute_path,
        "content": content,
    }


def files(
    source: Any = None,
    recursive: Any = True,
    exclude_names: Any = None,
    exclude_paths: Any = None,
) -> List[ValueObject]:
    """Lists files as ``{name, path, absolute_path, content}`` objects.

    ``exclude_names`` drops files whose base name matches exactly;
    ``exclude_paths`` drops files whose working-directory-relative path
    contains any of the given substrings. Unreadable or non-text files fail
    the whole call with FileReadError.
    """
    source_paths = _source_paths(source)
    if not isinstance(recursive, bool):
        raise FunctionArgumentError(f"'recursive' argument must be a boolean (true or false), got {kind_of(recursive)}")
    excluded_names = set(_string_list("exclude_names", exclude_names if exclude_names is not None else []))
    excluded_fragments: Sequence[str] = [
        os.path.normpath(fragment.replace("/", os.sep))
        for fragment in _string_list("exclude_paths", exclude_paths if exclude_paths is not None else [])
        if fragment
    ]

    cwd = os.getcwd()
    log.debug("files_builtin_started", sources=source_paths, recursive=recursive)
    result: List[ValueObject] = []
    for source_path in source_paths:
        for file_path in _walk_source(source_path, recursive):
            if not os.path.isfile(file_path):
                log.debug("files_builtin_skipped_non_regular", path=file_path)
                continue
            name = os.path.basename(file_path)
            display_path = _relative_display_path(file_path, cwd)
            if name in excluded_names:
                log.debug("files_builtin_excluded_by_name", path=display_path)
                continue
            if any(fragment in display_path for fragment in excluded_fragments):
                log.debug("files_builtin_excluded_by_path", path=display_path)
                continue
            result.append(_read_file_object(file_path, display_path))

    log.debug("files_builtin_complete", count=len(result))
    return result


BUILTIN_FUNCTIONS: Dict[str, BuiltinFunction] = {
    "files": files,
}


def call_builtin(name: str, function: BuiltinFunction, args: Dict[str, Value]) -> Value:
    # binds template arguments to the function signature so unknown/missing names fail cleanly.
    try:
        inspect.signature(function).bind(**args)
    except TypeError as e:
        raise FunctionArgumentError(f"invalid arguments for '{name}': {e}") from e
    return function(**args)
