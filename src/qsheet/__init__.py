"""
qsheet - Hierarchical question sheet editor

Keeps an ordered sheet of topics, sub-topics and questions in a
normalized store with validated edits, cascade deletes, cross-container
moves and snapshot-based undo/redo. Ships a CLI and a REST API.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("qsheet")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed

from qsheet.sheet import Difficulty, MutationResult, SheetGraph, SheetStore

__all__ = [
    "__version__",
    "Difficulty",
    "MutationResult",
    "SheetGraph",
    "SheetStore",
]
