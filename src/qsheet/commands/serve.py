"""
qsheet.commands.serve - Run the REST API server.
"""

from __future__ import annotations

import argparse

from qsheet.commands import open_workspace
from qsheet.server import create_app


def run(args: argparse.Namespace) -> int:
    """Run the serve command."""
    store, storage, config = open_workspace(args)
    server_config = config.get("server", {})
    host = args.host or server_config.get("host", "127.0.0.1")
    port = args.port or int(server_config.get("port", 5055))

    app = create_app(store, config, storage=storage)
    print(f"Serving {storage.path} on http://{host}:{port}/api/topics")
    app.run(host=host, port=port, debug=False)
    return 0
