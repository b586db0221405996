# runtpl/config/loader.py
"""
Handles loading and merging of configuration from TOML files.

Sources, lowest priority first: the user file ``<app_dir>/config.toml``,
then the first project file found in the working directory, then
command-line overrides.
"""
from dataclasses import fields as dataclass_fields
from pathlib import Path
from typing import Any, Dict, Optional

import toml
import structlog

from runtpl.exceptions import ConfigError

from .settings import RuntplConfig, default_app_dir

log = structlog.get_logger(__name__)

PROJECT_CONFIG_FILENAMES = [".runtpl.toml", "runtpl.toml", "pyproject.toml"]
USER_CONFIG_FILENAME = "config.toml"

CONFIG_KEY_TYPES: Dict[str, type] = {
    "template_dir": str,
    "template_extension": str,
    "copy_to_clipboard": bool,
    "editor": str,
}


def user_config_file() -> Path:
    return default_app_dir() / USER_CONFIG_FILENAME


def _load_toml_file_data(file_path: Path) -> Dict[str, Any]:
    if not file_path.is_file():
        return {}
    log.debug("loading_toml_config_file", path=str(file_path))
    try:
        data = toml.load(file_path)
    except (toml.TomlDecodeError, OSError) as e:
        raise ConfigError(f"Could not load config file {file_path}: {e}") from e
    if file_path.name == "pyproject.toml":
        return data.get("tool", {}).get("runtpl", {})
    return data


def load_and_merge_configs(cwd: Optional[Path] = None, user_file: Optional[Path] = None) -> Dict[str, Any]:
    merged_toml_data: Dict[str, Any] = {}
    user_file = user_file if user_file is not None else user_config_file()
    if user_file.is_file():
        log.info("loading_user_global_config", path=str(user_file))
        merged_toml_data.update(_load_toml_file_data(user_file))

    base_dir = cwd if cwd is not None else Path.cwd()
    for filename in PROJECT_CONFIG_FILENAMES:
        candidate = base_dir / filename
        if candidate.is_file():
            project_settings = _load_toml_file_data(candidate)
            if project_settings:
                log.info("loading_project_local_config", path=str(candidate))
                merged_toml_data.update(project_settings)
                break

    if not merged_toml_data:
        log.debug("no_configuration_files_loaded")
    return merged_toml_data


def build_config(raw_settings: Dict[str, Any], overrides: Optional[Dict[str, Any]] = None) -> RuntplConfig:
    """Validates merged settings plus non-None overrides into a RuntplConfig."""
    settings = dict(raw_settings)
    settings.update({k: v for k, v in (overrides or {}).items() if v is not None})

    valid_keys = {f.name for f in dataclass_fields(RuntplConfig) if f.init}
    kwargs: Dict[str, Any] = {}
    for key, value in settings.items():
        if key not in valid_keys:
            log.warning("unknown_config_key_ignored", key=key)
            continue
        expected_type = CONFIG_KEY_TYPES[key]
        if isinstance(value, Path) and expected_type is str:
            value = str(value)
        if not isinstance(value, expected_type):
            raise ConfigError(
                f"Config key '{key}' must be a {expected_type.__name__}, got {type(value).__name__}"
            )
        kwargs[key] = Path(value) if key == "template_dir" else value

    return RuntplConfig(**kwargs)
