"""
qsheet.commands.config_cmd - Inspect and create configuration.

- `qsheet config show`  - Effective configuration (file + defaults + env)
- `qsheet config path`  - Location of the config file in use
- `qsheet config init`  - Write a .qsheet.toml with the defaults
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from qsheet.config import (
    CONFIG_FILENAME,
    DEFAULT_CONFIG,
    find_config_file,
    get_config,
    save_config,
    validate_config,
)


def run(args: argparse.Namespace) -> int:
    """Run the config command."""
    action = getattr(args, "config_action", None)

    if action == "show":
        config = get_config(getattr(args, "config", None))
        print(json.dumps(config, indent=2))
        errors = validate_config(config)
        for error in errors:
            print(f"Warning: {error}", file=sys.stderr)
        return 1 if errors else 0

    if action == "path":
        path = getattr(args, "config", None) or find_config_file(Path.cwd())
        if path is None:
            print(f"No {CONFIG_FILENAME} found (using defaults)")
            return 1
        print(path)
        return 0

    if action == "init":
        target = Path.cwd() / CONFIG_FILENAME
        if target.exists() and not getattr(args, "force", False):
            print(f"Error: {target} already exists (use --force)", file=sys.stderr)
            return 1
        if target.exists():
            target.unlink()
        save_config(target, DEFAULT_CONFIG)
        print(f"Created {target}")
        return 0

    print("Usage: qsheet config <show|path|init>", file=sys.stderr)
    return 1
