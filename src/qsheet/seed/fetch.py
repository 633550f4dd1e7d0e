"""
qsheet.seed.fetch - Download a remote question-tracker sheet.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_SHEET_URL = (
    "https://node.codolio.com/api/question-tracker/v1/sheet/public/"
    "get-sheet-by-slug/striver-sde-sheet"
)
TIMEOUT_SECONDS = 5


def fetch_sheet(url: str = DEFAULT_SHEET_URL, timeout: float = TIMEOUT_SECONDS) -> Any | None:
    """Fetch and decode the remote sheet payload.

    Returns:
        The decoded JSON payload, or None if the request fails, returns a
        non-2xx status or does not decode.
    """
    try:
        req = urllib.request.Request(url, headers={"Accept": "application/json"})
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return json.loads(resp.read())
    except (urllib.error.URLError, OSError, ValueError) as e:
        # URLError covers HTTPError; ValueError covers JSONDecodeError and bad URLs
        logger.info("Could not fetch sheet from %s: %s", url, e)
        return None


__all__ = ["DEFAULT_SHEET_URL", "TIMEOUT_SECONDS", "fetch_sheet"]
