"""SheetStore - Edit API over the sheet graph with undo/redo.

SheetStore owns one SheetGraph and one History. Each edit:

1. resolves ids and validates (inside the graph method);
2. records the pre-edit snapshot in history once the edit has committed;
3. returns a MutationResult instead of raising.

Failed edits leave both the graph and the history untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from qsheet.sheet.entities import Difficulty
from qsheet.sheet.graph import (
    MovePreconditionError,
    NotFoundError,
    SheetGraph,
    SheetValidationError,
)
from qsheet.sheet.history import DEFAULT_CAPACITY, History, Snapshot
from qsheet.sheet.state import dump_state, load_state
from qsheet.sheet.view import (
    SubTopicView,
    TopicView,
    build_sub_topic,
    build_topic,
    build_tree,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a store operation.

    Attributes:
        success: True when the edit was committed (or was a harmless no-op).
        error: Human-readable reason for a failure.
        entity_id: Id of the created or edited entity, if any.
        not_found: True when the failure was a missing id.
        noop: True when a move was ignored because its claimed source was
            stale; such results carry no error.
    """

    success: bool
    error: str | None = None
    entity_id: str | None = None
    not_found: bool = False
    noop: bool = False

    @classmethod
    def ok(cls, entity_id: str | None = None) -> MutationResult:
        return cls(success=True, entity_id=entity_id)

    @classmethod
    def fail(cls, error: str, not_found: bool = False) -> MutationResult:
        return cls(success=False, error=error, not_found=not_found)

    @classmethod
    def ignored(cls) -> MutationResult:
        return cls(success=False, noop=True)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success}
        if self.error:
            result["error"] = self.error
        if self.entity_id:
            result["id"] = self.entity_id
        if self.noop:
            result["noop"] = True
        return result


class SheetStore:
    """Owned store instance for one question sheet.

    Args:
        initial: Optional snapshot to start from (copied, not shared).
        history_capacity: Maximum number of undo steps kept.

    Example:
        >>> store = SheetStore()
        >>> store.add_topic("Arrays").success
        True
        >>> store.undo()
        True
    """

    def __init__(
        self,
        initial: Snapshot | None = None,
        history_capacity: int = DEFAULT_CAPACITY,
    ) -> None:
        self._graph = SheetGraph()
        if initial is not None:
            self._graph.restore(initial)
        self._history = History(
            capture=self._graph.snapshot,
            restore=self._graph.restore,
            capacity=history_capacity,
        )
        self._seed_generation = 0

    @classmethod
    def from_persisted(cls, data: Any, history_capacity: int = DEFAULT_CAPACITY) -> SheetStore:
        """Build a store from a stored document.

        Unusable documents are discarded and the store starts empty; check
        ``needs_seed()`` to decide whether to run the seed path.
        """
        snapshot = load_state(data) if data is not None else None
        return cls(initial=snapshot, history_capacity=history_capacity)

    @property
    def graph(self) -> SheetGraph:
        """The underlying graph (read access for views and checks)."""
        return self._graph

    @property
    def history(self) -> History:
        return self._history

    def needs_seed(self) -> bool:
        return self._graph.is_empty()

    def to_persisted(self) -> dict[str, Any]:
        """Return the versioned durable state."""
        return dump_state(self._graph.snapshot())

    # ─────────────────────────────────────────────────────────────────────────
    # Commit plumbing
    # ─────────────────────────────────────────────────────────────────────────

    def _commit(self, operation: str, action: Callable[[], Any]) -> MutationResult:
        """Run a graph edit and record it in history if it changed anything.

        ``action`` returns the edited entity, True/False for reorders (False
        meaning nothing moved), or raises a SheetError.
        """
        before = self._graph.snapshot(operation)
        try:
            outcome = action()
        except NotFoundError as e:
            return MutationResult.fail(str(e), not_found=True)
        except SheetValidationError as e:
            return MutationResult.fail(str(e))
        except MovePreconditionError as e:
            # Stale caller state; not a user-facing error.
            logger.warning("Ignoring %s: %s", operation, e)
            return MutationResult.ignored()
        except IndexError as e:
            return MutationResult.fail(str(e))

        if outcome is False:
            return MutationResult.ok()
        entity_id = getattr(outcome, "id", None)
        if before.same_state(self._graph.snapshot()):
            logger.debug("%s left the sheet unchanged", operation)
            return MutationResult.ok(entity_id)

        self._history.record(before)
        logger.debug("Committed %s", operation)
        return MutationResult.ok(entity_id)

    # ─────────────────────────────────────────────────────────────────────────
    # Read contract
    # ─────────────────────────────────────────────────────────────────────────

    def get_topics(self) -> list[TopicView]:
        return build_tree(self._graph)

    def get_topic(self, topic_id: str) -> TopicView | None:
        return build_topic(self._graph, topic_id)

    def get_sub_topic(self, sub_topic_id: str) -> SubTopicView | None:
        return build_sub_topic(self._graph, sub_topic_id)

    def topic_names(self, exclude_id: str | None = None) -> list[str]:
        return self._graph.topic_names(exclude_id)

    def sub_topic_names(self, topic_id: str, exclude_id: str | None = None) -> list[str]:
        return self._graph.sub_topic_names(topic_id, exclude_id)

    def question_titles(self, sub_topic_id: str, exclude_id: str | None = None) -> list[str]:
        return self._graph.question_titles(sub_topic_id, exclude_id)

    # ─────────────────────────────────────────────────────────────────────────
    # Topics
    # ─────────────────────────────────────────────────────────────────────────

    def add_topic(self, name: str) -> MutationResult:
        return self._commit("add_topic", lambda: self._graph.add_topic(name))

    def rename_topic(self, topic_id: str, name: str) -> MutationResult:
        return self._commit("rename_topic", lambda: self._graph.rename_topic(topic_id, name))

    def delete_topic(self, topic_id: str) -> MutationResult:
        return self._commit("delete_topic", lambda: self._graph.delete_topic(topic_id))

    def reorder_topics(self, source_index: int, destination_index: int) -> MutationResult:
        return self._commit(
            "reorder_topics",
            lambda: self._graph.reorder_topics(source_index, destination_index),
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Sub-topics
    # ─────────────────────────────────────────────────────────────────────────

    def add_sub_topic(self, topic_id: str, name: str) -> MutationResult:
        return self._commit("add_sub_topic", lambda: self._graph.add_sub_topic(topic_id, name))

    def rename_sub_topic(self, sub_topic_id: str, name: str) -> MutationResult:
        return self._commit(
            "rename_sub_topic", lambda: self._graph.rename_sub_topic(sub_topic_id, name)
        )

    def delete_sub_topic(self, sub_topic_id: str) -> MutationResult:
        return self._commit("delete_sub_topic", lambda: self._graph.delete_sub_topic(sub_topic_id))

    def reorder_sub_topics(
        self, topic_id: str, source_index: int, destination_index: int
    ) -> MutationResult:
        return self._commit(
            "reorder_sub_topics",
            lambda: self._graph.reorder_sub_topics(topic_id, source_index, destination_index),
        )

    def move_sub_topic(
        self,
        sub_topic_id: str,
        source_topic_id: str,
        destination_topic_id: str,
        destination_index: int,
    ) -> MutationResult:
        return self._commit(
            "move_sub_topic",
            lambda: self._graph.move_sub_topic(
                sub_topic_id, source_topic_id, destination_topic_id, destination_index
            ),
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Questions
    # ─────────────────────────────────────────────────────────────────────────

    def add_question(
        self,
        sub_topic_id: str,
        title: str,
        difficulty: str | Difficulty | None = None,
        link: str | None = None,
    ) -> MutationResult:
        return self._commit(
            "add_question",
            lambda: self._graph.add_question(sub_topic_id, title, difficulty, link),
        )

    def update_question(
        self,
        question_id: str,
        title: str | None = None,
        difficulty: str | Difficulty | None = None,
        link: str | None = None,
    ) -> MutationResult:
        return self._commit(
            "update_question",
            lambda: self._graph.update_question(question_id, title, difficulty, link),
        )

    def delete_question(self, question_id: str) -> MutationResult:
        return self._commit("delete_question", lambda: self._graph.delete_question(question_id))

    def reorder_questions(
        self, sub_topic_id: str, source_index: int, destination_index: int
    ) -> MutationResult:
        return self._commit(
            "reorder_questions",
            lambda: self._graph.reorder_questions(sub_topic_id, source_index, destination_index),
        )

    def move_question(
        self,
        question_id: str,
        source_sub_topic_id: str,
        destination_sub_topic_id: str,
        destination_index: int,
    ) -> MutationResult:
        return self._commit(
            "move_question",
            lambda: self._graph.move_question(
                question_id, source_sub_topic_id, destination_sub_topic_id, destination_index
            ),
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Undo / redo
    # ─────────────────────────────────────────────────────────────────────────

    def undo(self) -> bool:
        return self._history.undo()

    def redo(self) -> bool:
        return self._history.redo()

    def can_undo(self) -> bool:
        return self._history.can_undo()

    def can_redo(self) -> bool:
        return self._history.can_redo()

    def history_status(self) -> dict[str, Any]:
        return {
            "can_undo": self.can_undo(),
            "can_redo": self.can_redo(),
            "size": len(self._history),
            "capacity": self._history.capacity,
            "cursor": self._history.cursor,
        }

    # ─────────────────────────────────────────────────────────────────────────
    # Expand / collapse (not recorded in history)
    # ─────────────────────────────────────────────────────────────────────────

    def toggle_topic(self, topic_id: str) -> bool:
        return self._graph.toggle_topic(topic_id)

    def toggle_sub_topic(self, sub_topic_id: str) -> bool:
        return self._graph.toggle_sub_topic(sub_topic_id)

    def expand_all(self) -> None:
        self._graph.expand_all()

    def collapse_all(self) -> None:
        self._graph.collapse_all()

    def is_topic_expanded(self, topic_id: str) -> bool:
        return self._graph.is_topic_expanded(topic_id)

    def is_sub_topic_expanded(self, sub_topic_id: str) -> bool:
        return self._graph.is_sub_topic_expanded(sub_topic_id)

    # ─────────────────────────────────────────────────────────────────────────
    # Whole-sheet replacement (seed data)
    # ─────────────────────────────────────────────────────────────────────────

    def begin_seed(self) -> int:
        """Start a seed request and return its generation number.

        A later begin_seed() supersedes every earlier one.
        """
        self._seed_generation += 1
        return self._seed_generation

    def replace_all(
        self, topics: list[dict[str, Any]] | None, generation: int | None = None
    ) -> MutationResult:
        """Replace the whole sheet with a nested hierarchy.

        History is cleared: the previous sheet cannot be undone back to.

        Args:
            topics: Nested hierarchy (see SheetGraph.load_nested).
            generation: Value from begin_seed(); stale generations are dropped.
        """
        if generation is not None and generation != self._seed_generation:
            logger.info("Dropping superseded seed result (generation %d)", generation)
            return MutationResult.ignored()
        try:
            self._graph.load_nested(topics or [])
        except SheetValidationError as e:
            return MutationResult.fail(str(e))
        self._history.clear()
        return MutationResult.ok()

    def reset(self) -> None:
        """Empty the sheet and its history."""
        self._graph.clear()
        self._history.clear()


__all__ = ["MutationResult", "SheetStore"]
