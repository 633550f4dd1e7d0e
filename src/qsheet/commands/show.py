"""
qsheet.commands.show - Print the sheet and check its integrity.

- `qsheet show`             - Indented outline of the whole sheet
- `qsheet show --topic ID`  - One topic only
- `qsheet show --json`      - Nested JSON
- `qsheet check`            - Report broken structural invariants
"""

from __future__ import annotations

import argparse
import json
import sys

from qsheet.commands import open_workspace
from qsheet.sheet.view import render_text, tree_to_dicts


def run(args: argparse.Namespace) -> int:
    """Run the show command."""
    store, _, _ = open_workspace(args)

    if getattr(args, "topic", None):
        view = store.get_topic(args.topic)
        if view is None:
            print(f"Error: topic {args.topic} not found", file=sys.stderr)
            return 1
        topics = [view]
    else:
        topics = store.get_topics()

    if getattr(args, "json", False):
        print(json.dumps(tree_to_dicts(topics), indent=2, ensure_ascii=False))
    else:
        text = render_text(topics, show_ids=getattr(args, "ids", False))
        print(text if text else "(empty sheet)")
    return 0


def run_check(args: argparse.Namespace) -> int:
    """Run the check command."""
    store, storage, _ = open_workspace(args)
    problems = store.graph.check_invariants()
    if not problems:
        if not getattr(args, "quiet", False):
            graph = store.graph
            print(
                f"OK: {graph.topic_count()} topics, {graph.sub_topic_count()} sub-topics, "
                f"{graph.question_count()} questions ({storage.path})"
            )
        return 0
    for problem in problems:
        print(f"  - {problem}", file=sys.stderr)
    print(f"{len(problems)} problem(s) found", file=sys.stderr)
    return 1
