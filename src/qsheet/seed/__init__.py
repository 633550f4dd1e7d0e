"""qsheet.seed - Initial sheet data for an empty store.

Tries the remote sheet first and falls back to the built-in sheet, so the
store is never left empty or half-loaded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from qsheet.seed.fallback import fallback_topics
from qsheet.seed.fetch import DEFAULT_SHEET_URL, fetch_sheet
from qsheet.seed.transform import transform_api_response
from qsheet.sheet.store import MutationResult, SheetStore

logger = logging.getLogger(__name__)

SOURCE_REMOTE = "remote"
SOURCE_FALLBACK = "fallback"


@dataclass(frozen=True)
class SeedResult:
    """What a seed run applied.

    Attributes:
        source: "remote" or "fallback".
        result: Outcome of the store replacement.
    """

    source: str
    result: MutationResult


def load_seed_topics(
    url: str | None = DEFAULT_SHEET_URL,
    timeout: float = 5,
    fetcher: Callable[[str, float], Any] = fetch_sheet,
) -> tuple[str, list[dict[str, Any]]]:
    """Resolve the nested hierarchy to seed with.

    Args:
        url: Remote sheet URL; None skips the network entirely.
        timeout: Request timeout in seconds.
        fetcher: Callable returning the decoded payload or None.

    Returns:
        Tuple of (source, nested topics).
    """
    if url:
        try:
            topics = transform_api_response(fetcher(url, timeout))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.info("Could not read remote sheet: %s", e)
            topics = None
        if topics:
            return SOURCE_REMOTE, topics
        logger.info("Remote sheet unavailable or empty; using built-in sheet")
    return SOURCE_FALLBACK, fallback_topics()


def seed_store(
    store: SheetStore,
    url: str | None = DEFAULT_SHEET_URL,
    timeout: float = 5,
    fetcher: Callable[[str, float], Any] = fetch_sheet,
) -> SeedResult:
    """Replace the store's sheet with seed data.

    Only the most recent seed request for a store is applied; an earlier
    one finishing late is dropped by the store.
    """
    generation = store.begin_seed()
    source, topics = load_seed_topics(url, timeout, fetcher)
    result = store.replace_all(topics, generation=generation)
    return SeedResult(source=source, result=result)


__all__ = [
    "SOURCE_FALLBACK",
    "SOURCE_REMOTE",
    "SeedResult",
    "fallback_topics",
    "fetch_sheet",
    "load_seed_topics",
    "seed_store",
    "transform_api_response",
]
