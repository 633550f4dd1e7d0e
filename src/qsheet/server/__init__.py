"""qsheet.server - Flask REST API server for the question sheet.

Provides a thin REST wrapper over SheetStore, exposing the read, edit and
undo/redo operations over HTTP for an interactive front end.
"""

from qsheet.server.app import create_app

__all__ = ["create_app"]
