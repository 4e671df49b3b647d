"""
rstxref.config - Configuration loading and defaults.

Configuration lives in a ``.rstxref.toml`` file found in the working
directory or one of its parents. Values are deep-merged over
DEFAULT_CONFIG and can be overridden with ``RSTXREF_<SECTION>_<KEY>``
environment variables.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from rstxref.config.defaults import CONFIG_FILE_NAME, DEFAULT_CONFIG, ENV_PREFIX

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or parsed."""


def parse_toml(content: str) -> dict[str, Any]:
    """Parse TOML text into plain Python dicts and lists."""
    try:
        return parse_toml_document(content).unwrap()
    except TOMLKitError as e:
        raise ConfigError(f"Invalid TOML: {e}") from e


def parse_toml_document(content: str) -> tomlkit.TOMLDocument:
    """Parse TOML text, keeping comments and layout for round-trip writes."""
    return tomlkit.parse(content)


def find_config_file(start: Path) -> Path | None:
    """Find the config file in ``start`` or its parent directories.

    Args:
        start: Directory to start searching from

    Returns:
        Path to the config file, or None if none exists
    """
    current = start.resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def merge_configs(defaults: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge ``overrides`` into a copy of ``defaults``.

    Nested tables are merged key by key; any other value in ``overrides``
    replaces the default.
    """
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _try_parse_env_value(value: str) -> Any:
    """Interpret an environment variable value.

    JSON arrays and objects are decoded, ``true``/``false`` become booleans
    and anything else (including malformed JSON) is returned unchanged.
    """
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if value.startswith(("[", "{")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            logger.debug("Env value %r is not valid JSON, keeping string", value)
            return value
    if value.isdigit():
        return int(value)
    return value


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply ``RSTXREF_<SECTION>_<KEY>`` environment overrides in place.

    The first underscore-separated word after the prefix names the section;
    the rest (lowercased) is the key, so ``RSTXREF_CORPUS_SKIP_DIRS`` sets
    ``corpus.skip_dirs``.
    """
    for name, raw in os.environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        remainder = name[len(ENV_PREFIX):].lower()
        if "_" not in remainder:
            continue
        section, key = remainder.split("_", 1)
        config.setdefault(section, {})[key] = _try_parse_env_value(raw)
        logger.debug("Config override from %s: %s.%s", name, section, key)
    return config


def load_config(config_path: Path) -> dict[str, Any]:
    """Load a config file, merged over the defaults and env overrides.

    Raises:
        ConfigError: If the file cannot be read or is not valid TOML
    """
    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e

    user_config = parse_toml(content)
    config = merge_configs(DEFAULT_CONFIG, user_config)
    config["_config_dir"] = str(config_path.parent)
    return _apply_env_overrides(config)


def default_config() -> dict[str, Any]:
    """Return a fresh copy of the defaults with env overrides applied."""
    return _apply_env_overrides(copy.deepcopy(DEFAULT_CONFIG))


def get_config(config_path: Path | None = None, start: Path | None = None) -> dict[str, Any]:
    """Load the explicit config file, the nearest one found, or the defaults."""
    if config_path is None:
        config_path = find_config_file(start or Path.cwd())
    if config_path is None:
        logger.debug("No %s found, using defaults", CONFIG_FILE_NAME)
        return default_config()
    logger.debug("Loading config from %s", config_path)
    return load_config(config_path)


def get_corpus_root(config: dict[str, Any], override: Path | None = None) -> Path:
    """Resolve the corpus root directory.

    An explicit ``override`` wins. Otherwise ``corpus.root`` is taken
    relative to the directory holding the config file (or the cwd).
    """
    if override is not None:
        return override
    base = Path(config.get("_config_dir", "."))
    return base / config.get("corpus", {}).get("root", "source")


__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "DEFAULT_CONFIG",
    "default_config",
    "find_config_file",
    "get_config",
    "get_corpus_root",
    "load_config",
    "merge_configs",
    "parse_toml",
    "parse_toml_document",
]
