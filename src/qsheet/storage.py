"""Storage - JSON file adapter for the persisted sheet state.

The core only defines what is persisted (qsheet.sheet.state). This
module keeps it in a JSON file and rebuilds a SheetStore from it.

Public API
----------
- ``JsonFileStorage``: read/write the persisted document
- ``open_store``: load a store, falling back to seed data when needed
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

from qsheet.sheet.store import SheetStore

if TYPE_CHECKING:
    from qsheet.seed import SeedResult

logger = logging.getLogger(__name__)


class JsonFileStorage:
    """Persist the sheet as a JSON document on disk.

    Args:
        path: File to read and write. Parent directories are created on save.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Any | None:
        """Read the stored document.

        Returns:
            The decoded JSON value, or None if the file is missing or
            cannot be decoded.
        """
        if not self.path.exists():
            return None
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Could not read sheet state from %s: %s", self.path, e)
            return None

    def save(self, document: dict[str, Any]) -> None:
        """Write the document atomically (temp file + rename)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def save_store(self, store: SheetStore) -> None:
        self.save(store.to_persisted())

    def delete(self) -> bool:
        if self.path.exists():
            self.path.unlink()
            return True
        return False


def open_store(
    storage: JsonFileStorage,
    config: dict[str, Any],
    fetch: bool | None = None,
) -> tuple[SheetStore, SeedResult | None]:
    """Load the store from storage, seeding it when nothing usable is stored.

    Args:
        storage: Where the persisted state lives.
        config: qsheet configuration dict.
        fetch: Override ``seed.fetch`` (whether to try the remote sheet).

    Returns:
        Tuple of (store, seed result or None when no seeding was needed).
    """
    from qsheet.seed import seed_store

    capacity = int(config.get("history", {}).get("capacity", 20))
    store = SheetStore.from_persisted(storage.load(), history_capacity=capacity)
    if not store.needs_seed():
        return store, None

    seed_config = config.get("seed", {})
    use_fetch = seed_config.get("fetch", True) if fetch is None else fetch
    result = seed_store(
        store,
        url=seed_config.get("url") if use_fetch else None,
        timeout=float(seed_config.get("timeout", 5)),
    )
    storage.save_store(store)
    return store, result


__all__ = ["JsonFileStorage", "open_store"]
