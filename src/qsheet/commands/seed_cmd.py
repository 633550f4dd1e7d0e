"""
qsheet.commands.seed_cmd - Replace or clear the stored sheet.

- `qsheet seed`            - Load the remote sheet (built-in sheet on failure)
- `qsheet seed --offline`  - Load the built-in sheet
- `qsheet reset`           - Delete the stored sheet
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from qsheet.config import get_config, resolve_storage_path
from qsheet.seed import seed_store
from qsheet.sheet.store import SheetStore
from qsheet.storage import JsonFileStorage


def _storage_for(args: argparse.Namespace, config: dict) -> JsonFileStorage:
    override = getattr(args, "storage", None)
    return JsonFileStorage(Path(override) if override else resolve_storage_path(config))


def run(args: argparse.Namespace) -> int:
    """Run the seed command."""
    config = get_config(getattr(args, "config", None))
    storage = _storage_for(args, config)
    seed_config = config.get("seed", {})

    store = SheetStore(history_capacity=int(config.get("history", {}).get("capacity", 20)))
    url = None if getattr(args, "offline", False) else (args.url or seed_config.get("url"))
    seeded = seed_store(store, url=url, timeout=float(seed_config.get("timeout", 5)))

    if not seeded.result.success:
        print(f"Error: {seeded.result.error}", file=sys.stderr)
        return 1

    storage.save_store(store)
    if not getattr(args, "quiet", False):
        graph = store.graph
        print(
            f"Loaded {seeded.source} sheet: {graph.topic_count()} topics, "
            f"{graph.sub_topic_count()} sub-topics, {graph.question_count()} questions"
        )
        print(f"Saved to {storage.path}")
    return 0


def run_reset(args: argparse.Namespace) -> int:
    """Run the reset command."""
    config = get_config(getattr(args, "config", None))
    storage = _storage_for(args, config)
    if storage.delete():
        print(f"Removed {storage.path}")
    else:
        print(f"No stored sheet at {storage.path}")
    return 0
