"""
qsheet.config - Configuration loading and defaults

Configuration lives in ``.qsheet.toml`` (found by walking up from the
working directory), is merged over DEFAULT_CONFIG, and can be overridden
per key with ``QSHEET_<SECTION>_<KEY>`` environment variables.
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

CONFIG_FILENAME = ".qsheet.toml"
ENV_PREFIX = "QSHEET_"

DEFAULT_CONFIG: dict[str, Any] = {
    "history": {
        "capacity": 20,
    },
    "storage": {
        "path": ".qsheet/sheet.json",
    },
    "seed": {
        "url": (
            "https://node.codolio.com/api/question-tracker/v1/sheet/public/"
            "get-sheet-by-slug/striver-sde-sheet"
        ),
        "timeout": 5,
        "fetch": True,
    },
    "server": {
        "host": "127.0.0.1",
        "port": 5055,
    },
}

# Expected value types per section/key, used by validate_config.
_CONFIG_TYPES: dict[str, dict[str, tuple[type, ...]]] = {
    "history": {"capacity": (int,)},
    "storage": {"path": (str,)},
    "seed": {"url": (str,), "timeout": (int, float), "fetch": (bool,)},
    "server": {"host": (str,), "port": (int,)},
}


class ConfigError(ValueError):
    """Raised when a configuration file cannot be parsed."""


def parse_toml_document(content: str) -> tomlkit.TOMLDocument:
    """Parse TOML keeping formatting (for round-trip edits)."""
    try:
        return tomlkit.parse(content)
    except TOMLKitError as e:
        raise ConfigError(f"Invalid TOML: {e}") from e


def parse_toml(content: str) -> dict[str, Any]:
    """Parse TOML into plain Python containers."""
    return parse_toml_document(content).unwrap()


def find_config_file(start_dir: Path) -> Path | None:
    """Find .qsheet.toml in start_dir or any parent directory.

    Returns:
        Path to the config file, or None if none exists.
    """
    current = Path(start_dir).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def merge_configs(defaults: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge overrides onto defaults without mutating either."""
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _try_parse_env_value(value: str) -> Any:
    """Parse an environment value into a typed Python value.

    JSON arrays/objects, true/false (any case) and integers are converted;
    anything else, including malformed JSON, is returned as the string.
    """
    stripped = value.strip()
    if stripped[:1] in ("[", "{"):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            return value
    lowered = stripped.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    try:
        return int(stripped)
    except ValueError:
        return value


def apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply QSHEET_<SECTION>_<KEY> environment variables.

    ``QSHEET_HISTORY_CAPACITY=50`` sets ``config["history"]["capacity"]``.
    Missing sections are created.
    """
    for name, raw in os.environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        parts = name[len(ENV_PREFIX) :].lower().split("_", 1)
        if len(parts) != 2 or not all(parts):
            continue
        section, key = parts
        target = config.setdefault(section, {})
        if isinstance(target, dict):
            target[key] = _try_parse_env_value(raw)
    return config


def load_config(config_path: Path) -> dict[str, Any]:
    """Load a config file merged over defaults, with env overrides applied."""
    user = parse_toml(Path(config_path).read_text(encoding="utf-8"))
    return apply_env_overrides(merge_configs(DEFAULT_CONFIG, user))


def get_config(config_path: Path | None = None, start_dir: Path | None = None) -> dict[str, Any]:
    """Resolve the effective configuration.

    Uses config_path when given, otherwise searches upward from start_dir
    (default: cwd). Without any file the defaults (plus env) apply.
    """
    path = config_path or find_config_file(start_dir or Path.cwd())
    if path is not None:
        return load_config(path)
    return apply_env_overrides(copy.deepcopy(DEFAULT_CONFIG))


def validate_config(config: dict[str, Any]) -> list[str]:
    """Return type errors for known keys (empty list when valid)."""
    errors: list[str] = []
    for section, keys in _CONFIG_TYPES.items():
        values = config.get(section)
        if values is None:
            continue
        if not isinstance(values, dict):
            errors.append(f"[{section}] must be a table")
            continue
        for key, types in keys.items():
            if key not in values:
                continue
            value = values[key]
            # bool is an int subclass; only accept it where bool is expected
            if isinstance(value, bool) and bool not in types:
                errors.append(f"{section}.{key} has invalid type bool")
            elif not isinstance(value, types):
                errors.append(f"{section}.{key} has invalid type {type(value).__name__}")
    capacity = config.get("history", {}).get("capacity")
    if isinstance(capacity, int) and not isinstance(capacity, bool) and capacity < 1:
        errors.append("history.capacity must be at least 1")
    return errors


def save_config(config_path: Path, values: dict[str, Any]) -> None:
    """Write values into a config file, preserving existing formatting."""
    path = Path(config_path)
    if path.exists():
        doc = parse_toml_document(path.read_text(encoding="utf-8"))
    else:
        doc = tomlkit.document()
    for section, entries in values.items():
        if isinstance(entries, dict):
            if section not in doc:
                doc.add(section, tomlkit.table())
            for key, value in entries.items():
                doc[section][key] = value
        else:
            doc[section] = entries
    path.write_text(tomlkit.dumps(doc), encoding="utf-8")


def resolve_storage_path(config: dict[str, Any], base_dir: Path | None = None) -> Path:
    """Return the storage file path, relative paths resolved against base_dir."""
    path = Path(config.get("storage", {}).get("path", DEFAULT_CONFIG["storage"]["path"]))
    if path.is_absolute():
        return path
    return (base_dir or Path.cwd()) / path


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_CONFIG",
    "apply_env_overrides",
    "find_config_file",
    "get_config",
    "load_config",
    "merge_configs",
    "parse_toml",
    "parse_toml_document",
    "resolve_storage_path",
    "save_config",
    "validate_config",
]
