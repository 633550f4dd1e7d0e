"""
qsheet.commands.edit - One-shot sheet edits from the command line.

Each invocation loads the stored sheet, applies a single edit through
SheetStore and saves the result. Undo history does not survive between
invocations; use `qsheet serve` for an interactive session.
"""

from __future__ import annotations

import argparse
import sys

from qsheet.commands import open_workspace
from qsheet.sheet.store import MutationResult, SheetStore


def _apply(store: SheetStore, args: argparse.Namespace) -> MutationResult | None:
    """Dispatch the parsed edit to the store. None means unknown edit."""
    command = args.command
    kind = getattr(args, "kind", None)

    if command == "add":
        if kind == "topic":
            return store.add_topic(args.name)
        if kind == "subtopic":
            return store.add_sub_topic(args.parent, args.name)
        if kind == "question":
            return store.add_question(
                args.parent, args.name, difficulty=args.difficulty, link=args.link
            )
    elif command == "rename":
        if kind == "topic":
            return store.rename_topic(args.id, args.name)
        if kind == "subtopic":
            return store.rename_sub_topic(args.id, args.name)
        if kind == "question":
            return store.update_question(args.id, title=args.name)
    elif command == "update":
        return store.update_question(
            args.id, title=args.title, difficulty=args.difficulty, link=args.link
        )
    elif command == "delete":
        if kind == "topic":
            return store.delete_topic(args.id)
        if kind == "subtopic":
            return store.delete_sub_topic(args.id)
        if kind == "question":
            return store.delete_question(args.id)
    elif command == "reorder":
        if kind == "topics":
            return store.reorder_topics(args.source, args.destination)
        if kind == "subtopics":
            return store.reorder_sub_topics(args.container, args.source, args.destination)
        if kind == "questions":
            return store.reorder_questions(args.container, args.source, args.destination)
    elif command == "move":
        if kind == "subtopic":
            destination = store.graph.find_topic(args.destination)
            index = args.index
            if index is None:
                index = len(destination.sub_topic_ids) if destination else 0
            return store.move_sub_topic(args.id, args.source, args.destination, index)
        if kind == "question":
            destination = store.graph.find_sub_topic(args.destination)
            index = args.index
            if index is None:
                index = len(destination.question_ids) if destination else 0
            return store.move_question(args.id, args.source, args.destination, index)
    return None


def run(args: argparse.Namespace) -> int:
    """Run an edit command (add, rename, update, delete, reorder, move)."""
    store, storage, _ = open_workspace(args)

    result = _apply(store, args)
    if result is None:
        print(f"Usage: qsheet {args.command} --help", file=sys.stderr)
        return 1

    if result.noop:
        print("Nothing changed: source does not own the entity", file=sys.stderr)
        return 1
    if not result.success:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1

    storage.save_store(store)
    if not getattr(args, "quiet", False):
        if result.entity_id and args.command == "add":
            print(result.entity_id)
        else:
            print("OK")
    return 0
