"""Snapshot history for sheet undo/redo.

This module provides the snapshot type captured before each committed
edit and the bounded history that walks back and forth over them.

History holds a list of snapshots and a cursor. While the cursor is
``None`` the live graph is the newest state and nothing can be redone.
Once the cursor points at an index the live graph equals that snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterator

from qsheet.sheet.entities import QuestionEntity, SubTopicEntity, TopicEntity

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 20


@dataclass
class Snapshot:
    """Independent copy of the state an undo can return to.

    Holds the three entity mappings, the topic order and the expand flags.
    Built with explicit per-record clones; nothing is shared with the
    live graph.
    """

    topics: dict[str, TopicEntity]
    sub_topics: dict[str, SubTopicEntity]
    questions: dict[str, QuestionEntity]
    topic_order: list[str]
    expanded_topics: dict[str, bool]
    expanded_sub_topics: dict[str, bool]
    label: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def clone(self) -> Snapshot:
        """Return a copy that shares no containers with this snapshot."""
        return Snapshot(
            topics={k: v.clone() for k, v in self.topics.items()},
            sub_topics={k: v.clone() for k, v in self.sub_topics.items()},
            questions={k: v.clone() for k, v in self.questions.items()},
            topic_order=list(self.topic_order),
            expanded_topics=dict(self.expanded_topics),
            expanded_sub_topics=dict(self.expanded_sub_topics),
            label=self.label,
            timestamp=self.timestamp,
        )

    def entity_count(self) -> int:
        return len(self.topics) + len(self.sub_topics) + len(self.questions)

    def same_state(self, other: Snapshot) -> bool:
        """True when both snapshots hold the same sheet, ignoring label and time."""
        return (
            self.topic_order == other.topic_order
            and self.topics == other.topics
            and self.sub_topics == other.sub_topics
            and self.questions == other.questions
            and self.expanded_topics == other.expanded_topics
            and self.expanded_sub_topics == other.expanded_sub_topics
        )

    def __str__(self) -> str:
        label = self.label or "snapshot"
        return f"[{self.timestamp:%H:%M:%S}] {label} ({self.entity_count()} entities)"


class History:
    """Bounded undo/redo history over full snapshots.

    The owner supplies two callables: ``capture`` returns a snapshot of the
    live state, ``restore`` replaces the live state with a snapshot. The
    owner calls ``record`` with the pre-edit snapshot right before it
    commits an edit.

    Example:
        >>> history = History(capture=graph.snapshot, restore=graph.restore)
        >>> history.record(graph.snapshot("add_topic"))
        >>> graph.add_topic("Graphs")
        >>> history.undo()
        True
    """

    def __init__(
        self,
        capture: Callable[[str], Snapshot],
        restore: Callable[[Snapshot], None],
        capacity: int = DEFAULT_CAPACITY,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self._capture = capture
        self._restore = restore
        self._capacity = capacity
        self._snapshots: list[Snapshot] = []
        self._cursor: int | None = None
        self._restoring = False

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def cursor(self) -> int | None:
        """Index of the restored snapshot, or None when at the present."""
        return self._cursor

    @property
    def is_restoring(self) -> bool:
        return self._restoring

    def __len__(self) -> int:
        return len(self._snapshots)

    def iter_snapshots(self) -> Iterator[Snapshot]:
        """Iterate snapshots oldest first."""
        yield from self._snapshots

    def record(self, snapshot: Snapshot) -> None:
        """Record the pre-edit state of an edit about to be committed.

        Any redo branch is discarded. Ignored while an undo or redo is
        restoring state.
        """
        if self._restoring:
            return

        if self._cursor is not None:
            # The snapshot at the cursor is the live state, i.e. the same
            # state being recorded now; drop it along with the redo branch.
            dropped = len(self._snapshots) - self._cursor
            del self._snapshots[self._cursor :]
            self._cursor = None
            logger.debug("Discarded %d snapshot(s) from the redo branch", dropped)

        self._snapshots.append(snapshot)

        overflow = len(self._snapshots) - self._capacity
        if overflow > 0:
            del self._snapshots[:overflow]

    def can_undo(self) -> bool:
        if self._cursor is None:
            return len(self._snapshots) > 0
        return self._cursor > 0

    def can_redo(self) -> bool:
        return self._cursor is not None and self._cursor < len(self._snapshots) - 1

    def undo(self) -> bool:
        """Step back one edit.

        Returns:
            True if state was restored, False if there was nothing to undo.
        """
        if not self.can_undo():
            return False

        if self._cursor is None:
            # Keep the present state so redo can come back to it.
            self._snapshots.append(self._capture("present"))
            self._cursor = len(self._snapshots) - 2
        else:
            self._cursor -= 1

        self._apply(self._snapshots[self._cursor])
        return True

    def redo(self) -> bool:
        """Step forward one edit.

        Returns:
            True if state was restored, False if there was nothing to redo.
        """
        if not self.can_redo():
            return False

        assert self._cursor is not None
        self._cursor += 1
        self._apply(self._snapshots[self._cursor])

        if self._cursor == len(self._snapshots) - 1:
            # Back at the present: the synthetic snapshot pushed by the
            # first undo is no longer needed.
            self._snapshots.pop()
            self._cursor = None
        return True

    def clear(self) -> None:
        """Forget all snapshots and return to the present."""
        self._snapshots.clear()
        self._cursor = None

    def _apply(self, snapshot: Snapshot) -> None:
        self._restoring = True
        try:
            self._restore(snapshot)
        finally:
            self._restoring = False


__all__ = ["DEFAULT_CAPACITY", "History", "Snapshot"]
