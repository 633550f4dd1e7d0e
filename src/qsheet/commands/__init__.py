"""
qsheet.commands - CLI command implementations
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

from qsheet.config import get_config, resolve_storage_path
from qsheet.sheet.store import SheetStore
from qsheet.storage import JsonFileStorage, open_store

__all__ = [
    "config_cmd",
    "edit",
    "open_workspace",
    "seed_cmd",
    "serve",
    "show",
]


def open_workspace(
    args: argparse.Namespace,
) -> tuple[SheetStore, JsonFileStorage, dict[str, Any]]:
    """Load config, storage and store for a command.

    Seeds the store (remote sheet unless --offline, else built-in sheet)
    when storage holds nothing usable.
    """
    config = get_config(getattr(args, "config", None))
    storage_override = getattr(args, "storage", None)
    path = Path(storage_override) if storage_override else resolve_storage_path(config)
    storage = JsonFileStorage(path)
    fetch = False if getattr(args, "offline", False) else None
    store, _ = open_store(storage, config, fetch=fetch)
    return store, storage, config
