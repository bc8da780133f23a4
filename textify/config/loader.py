# textify/config/loader.py
"""
Handles loading and saving of the project's rule store from/to TOML files.
"""
import toml
from pathlib import Path
from typing import Dict, Any, List
import structlog

from textify.exceptions import ConfigError

from .settings import DirRule, RuleStore, ProjectConfig, DEFAULT_OUTPUT_FILENAME

log = structlog.get_logger(__name__)

# TOML rule key -> DirRule attribute.
RULE_KEY_TO_ATTR_MAP: Dict[str, str] = {
    "enabled": "enabled",
    "extensions": "extensions",
    "exclude_extensions": "exclude_extensions",
    "include": "include",
    "exclude": "exclude",
}
LIST_RULE_KEYS = ("extensions", "exclude_extensions", "include", "exclude")


def _rule_from_toml(dir_key: str, data: Any) -> DirRule:
    if not isinstance(data, dict):
        raise ConfigError(f"rule for directory '{dir_key}' must be a table, got {type(data).__name__}")
    kwargs: Dict[str, Any] = {}
    for toml_key, value in data.items():
        attr = RULE_KEY_TO_ATTR_MAP.get(toml_key)
        if attr is None:
            log.warning("unknown_rule_key_ignored", directory=dir_key, key=toml_key)
            continue
        if toml_key in LIST_RULE_KEYS:
            if not isinstance(value, list):
                raise ConfigError(f"'{toml_key}' for directory '{dir_key}' must be a list")
            kwargs[attr] = tuple(str(v) for v in value)
        elif not isinstance(value, bool):
            raise ConfigError(f"'enabled' for directory '{dir_key}' must be true or false")
        else:
            kwargs[attr] = value
    return DirRule(**kwargs)


def _rule_to_toml(rule: DirRule) -> Dict[str, Any]:
    data: Dict[str, Any] = {"enabled": rule.enabled}
    for toml_key in LIST_RULE_KEYS:
        values: List[str] = list(getattr(rule, RULE_KEY_TO_ATTR_MAP[toml_key]))
        if values:
            data[toml_key] = values
    return data


def project_config_from_dict(data: Dict[str, Any]) -> ProjectConfig:
    output_file = data.get("output_file", DEFAULT_OUTPUT_FILENAME)
    if not isinstance(output_file, str) or not output_file.strip():
        raise ConfigError("'output_file' must be a non-empty string")
    dirs_data = data.get("dirs", {})
    if not isinstance(dirs_data, dict):
        raise ConfigError("'dirs' must be a table keyed by directory path")
    store = RuleStore()
    for dir_key, rule_data in dirs_data.items():
        store.set(dir_key, _rule_from_toml(dir_key, rule_data))
    return ProjectConfig(output_file=output_file, dirs=store)


def project_config_to_dict(config: ProjectConfig) -> Dict[str, Any]:
    return {
        "output_file": config.output_file,
        "dirs": {dir_key: _rule_to_toml(rule) for dir_key, rule in config.dirs.items()},
    }


def load_project_config(config_path: Path) -> ProjectConfig:
    if not config_path.is_file():
        raise ConfigError(f"config file not found: {config_path} (did you run 'textify init'?)")
    log.debug("loading_toml_config_file", path=str(config_path))
    try:
        data = toml.load(config_path)
    except toml.TomlDecodeError as e:
        raise ConfigError(f"could not parse {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"could not read {config_path}: {e}") from e
    config = project_config_from_dict(data)
    log.info("project_config_loaded", path=str(config_path), rules=len(config.dirs))
    return config


def save_project_config(config: ProjectConfig, config_path: Path) -> None:
    log.info("saving_project_config", path=str(config_path), rules=len(config.dirs))
    try:
        with config_path.open("w", encoding="utf-8") as f:
            toml.dump(project_config_to_dict(config), f)
    except OSError as e:
        raise ConfigError(f"error writing config to {config_path}: {e}") from e
