"""Sheet Graph - Normalized topic / sub-topic / question store.

This module holds the entity graph and its raw mutation methods. The
graph keeps three id-keyed mappings plus explicit order arrays:

    topic_order ──> TopicEntity.sub_topic_ids ──> SubTopicEntity.question_ids

Mutation methods validate first and only then touch state, so a raised
error never leaves a partial edit behind. They raise:
- NotFoundError: a referenced id does not exist
- SheetValidationError: a name, title, URL or difficulty check failed
- MovePreconditionError: a move named the wrong source container

SheetStore (qsheet.sheet.store) wraps these methods with history
recording and converts the errors into MutationResult values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from qsheet.sheet.entities import (
    Difficulty,
    QuestionEntity,
    SubTopicEntity,
    TopicEntity,
    new_id,
)
from qsheet.sheet.history import Snapshot
from qsheet.sheet.validation import (
    ValidationResult,
    validate_difficulty,
    validate_name,
    validate_question_title,
    validate_url,
)

TOPIC_LABEL = "Topic name"
SUB_TOPIC_LABEL = "Sub-topic name"

DEFAULT_SUB_TOPIC_NAME = "Questions"


class SheetError(Exception):
    """Base class for graph mutation errors."""


class NotFoundError(SheetError, KeyError):
    """A referenced entity id does not exist."""

    def __init__(self, kind: str, entity_id: str) -> None:
        super().__init__(f"{kind} not found")
        self.kind = kind
        self.entity_id = entity_id

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0])


class SheetValidationError(SheetError, ValueError):
    """A user-supplied value failed validation."""


class MovePreconditionError(SheetError):
    """A move's claimed source does not match the entity's actual owner."""


def _raise_if_invalid(result: ValidationResult) -> None:
    if not result.valid:
        raise SheetValidationError(result.error)


def _move_within(ids: list[str], source_index: int, destination_index: int) -> bool:
    """Move ids[source_index] to destination_index in place.

    Destination is clamped into range.

    Returns:
        False when the move leaves the list unchanged.

    Raises:
        IndexError: If source_index is out of range.
    """
    if not 0 <= source_index < len(ids):
        raise IndexError(f"Source index {source_index} out of range")
    destination_index = max(0, min(destination_index, len(ids) - 1))
    if source_index == destination_index:
        return False
    moved = ids.pop(source_index)
    ids.insert(destination_index, moved)
    return True


def _coerce_difficulty(value: str | Difficulty | None) -> Difficulty | None:
    if value is None or value == "":
        return None
    if isinstance(value, Difficulty):
        return value
    return Difficulty(value)


@dataclass
class SheetGraph:
    """Container for the normalized question sheet.

    Provides O(1) lookup by id for every entity and ordered iteration
    through the explicit order arrays.
    """

    # Internal storage (prefixed) - excluded from constructor
    _topics: dict[str, TopicEntity] = field(default_factory=dict, init=False)
    _sub_topics: dict[str, SubTopicEntity] = field(default_factory=dict, init=False)
    _questions: dict[str, QuestionEntity] = field(default_factory=dict, init=False, repr=False)
    _topic_order: list[str] = field(default_factory=list, init=False)

    # Cosmetic expand/collapse state
    _expanded_topics: dict[str, bool] = field(default_factory=dict, init=False, repr=False)
    _expanded_sub_topics: dict[str, bool] = field(default_factory=dict, init=False, repr=False)

    # ─────────────────────────────────────────────────────────────────────────
    # Lookup API
    # ─────────────────────────────────────────────────────────────────────────

    def find_topic(self, topic_id: str) -> TopicEntity | None:
        return self._topics.get(topic_id)

    def find_sub_topic(self, sub_topic_id: str) -> SubTopicEntity | None:
        return self._sub_topics.get(sub_topic_id)

    def find_question(self, question_id: str) -> QuestionEntity | None:
        return self._questions.get(question_id)

    def require_topic(self, topic_id: str) -> TopicEntity:
        topic = self._topics.get(topic_id)
        if topic is None:
            raise NotFoundError("Topic", topic_id)
        return topic

    def require_sub_topic(self, sub_topic_id: str) -> SubTopicEntity:
        sub_topic = self._sub_topics.get(sub_topic_id)
        if sub_topic is None:
            raise NotFoundError("Sub-topic", sub_topic_id)
        return sub_topic

    def require_question(self, question_id: str) -> QuestionEntity:
        question = self._questions.get(question_id)
        if question is None:
            raise NotFoundError("Question", question_id)
        return question

    def iter_topics(self) -> Iterator[TopicEntity]:
        """Iterate topics in display order."""
        for topic_id in self._topic_order:
            topic = self._topics.get(topic_id)
            if topic is not None:
                yield topic

    def iter_sub_topics(self, topic_id: str) -> Iterator[SubTopicEntity]:
        """Iterate a topic's sub-topics in display order."""
        topic = self._topics.get(topic_id)
        if topic is None:
            return
        for sub_topic_id in topic.sub_topic_ids:
            sub_topic = self._sub_topics.get(sub_topic_id)
            if sub_topic is not None:
                yield sub_topic

    def iter_questions(self, sub_topic_id: str) -> Iterator[QuestionEntity]:
        """Iterate a sub-topic's questions in display order."""
        sub_topic = self._sub_topics.get(sub_topic_id)
        if sub_topic is None:
            return
        for question_id in sub_topic.question_ids:
            question = self._questions.get(question_id)
            if question is not None:
                yield question

    def topic_order(self) -> list[str]:
        """Return a copy of the top-level order."""
        return list(self._topic_order)

    def topic_count(self) -> int:
        return len(self._topics)

    def sub_topic_count(self) -> int:
        return len(self._sub_topics)

    def question_count(self) -> int:
        return len(self._questions)

    def is_empty(self) -> bool:
        return not self._topics

    def question_owner(self, question_id: str) -> SubTopicEntity | None:
        """Return the sub-topic whose order array holds question_id."""
        for sub_topic in self._sub_topics.values():
            if question_id in sub_topic.question_ids:
                return sub_topic
        return None

    # Sibling helpers (the excluded id is the entity being edited)

    def topic_names(self, exclude_id: str | None = None) -> list[str]:
        return [t.name for t in self._topics.values() if t.id != exclude_id]

    def sub_topic_names(self, topic_id: str, exclude_id: str | None = None) -> list[str]:
        return [st.name for st in self.iter_sub_topics(topic_id) if st.id != exclude_id]

    def question_titles(self, sub_topic_id: str, exclude_id: str | None = None) -> list[str]:
        return [q.title for q in self.iter_questions(sub_topic_id) if q.id != exclude_id]

    # ─────────────────────────────────────────────────────────────────────────
    # Topic mutations
    # ─────────────────────────────────────────────────────────────────────────

    def add_topic(self, name: str) -> TopicEntity:
        """Append a new topic to the top-level order.

        Raises:
            SheetValidationError: If the name is invalid or taken.
        """
        _raise_if_invalid(validate_name(name, self.topic_names(), TOPIC_LABEL))

        topic = TopicEntity(id=new_id(), name=name.strip())
        self._topics[topic.id] = topic
        self._topic_order.append(topic.id)
        self._expanded_topics[topic.id] = True
        return topic

    def rename_topic(self, topic_id: str, name: str) -> TopicEntity:
        topic = self.require_topic(topic_id)
        _raise_if_invalid(validate_name(name, self.topic_names(exclude_id=topic_id), TOPIC_LABEL))
        topic.name = name.strip()
        return topic

    def delete_topic(self, topic_id: str) -> TopicEntity:
        """Delete a topic with all its sub-topics and their questions."""
        topic = self.require_topic(topic_id)

        for sub_topic_id in topic.sub_topic_ids:
            self._purge_sub_topic(sub_topic_id)

        del self._topics[topic_id]
        self._topic_order = [t for t in self._topic_order if t != topic_id]
        self._expanded_topics.pop(topic_id, None)
        return topic

    def reorder_topics(self, source_index: int, destination_index: int) -> bool:
        return _move_within(self._topic_order, source_index, destination_index)

    # ─────────────────────────────────────────────────────────────────────────
    # Sub-topic mutations
    # ─────────────────────────────────────────────────────────────────────────

    def add_sub_topic(self, topic_id: str, name: str) -> SubTopicEntity:
        topic = self.require_topic(topic_id)
        _raise_if_invalid(validate_name(name, self.sub_topic_names(topic_id), SUB_TOPIC_LABEL))

        sub_topic = SubTopicEntity(id=new_id(), name=name.strip(), topic_id=topic_id)
        self._sub_topics[sub_topic.id] = sub_topic
        topic.sub_topic_ids.append(sub_topic.id)
        self._expanded_sub_topics[sub_topic.id] = True
        return sub_topic

    def rename_sub_topic(self, sub_topic_id: str, name: str) -> SubTopicEntity:
        sub_topic = self.require_sub_topic(sub_topic_id)
        siblings = self.sub_topic_names(sub_topic.topic_id, exclude_id=sub_topic_id)
        _raise_if_invalid(validate_name(name, siblings, SUB_TOPIC_LABEL))
        sub_topic.name = name.strip()
        return sub_topic

    def delete_sub_topic(self, sub_topic_id: str) -> SubTopicEntity:
        """Delete a sub-topic and its questions."""
        sub_topic = self.require_sub_topic(sub_topic_id)
        owner = self._topics.get(sub_topic.topic_id)
        if owner is not None:
            owner.sub_topic_ids = [i for i in owner.sub_topic_ids if i != sub_topic_id]
        self._purge_sub_topic(sub_topic_id)
        return sub_topic

    def _purge_sub_topic(self, sub_topic_id: str) -> None:
        """Drop a sub-topic record and its questions (order arrays untouched)."""
        sub_topic = self._sub_topics.pop(sub_topic_id, None)
        self._expanded_sub_topics.pop(sub_topic_id, None)
        if sub_topic is None:
            return
        for question_id in sub_topic.question_ids:
            self._questions.pop(question_id, None)

    def reorder_sub_topics(self, topic_id: str, source_index: int, destination_index: int) -> bool:
        topic = self.require_topic(topic_id)
        return _move_within(topic.sub_topic_ids, source_index, destination_index)

    def move_sub_topic(
        self,
        sub_topic_id: str,
        source_topic_id: str,
        destination_topic_id: str,
        destination_index: int,
    ) -> SubTopicEntity:
        """Transfer a sub-topic to another topic.

        Removes the id from the source topic's order, inserts it at the
        (clamped) destination index and repoints ``topic_id``.

        Raises:
            NotFoundError: If the sub-topic or either topic is missing.
            MovePreconditionError: If source and destination are the same,
                or the sub-topic is not owned by the claimed source.
            SheetValidationError: If the destination already has a
                sub-topic with the same name.
        """
        sub_topic = self.require_sub_topic(sub_topic_id)
        source = self.require_topic(source_topic_id)
        destination = self.require_topic(destination_topic_id)

        if source.id == destination.id:
            raise MovePreconditionError("Source and destination topic are the same")
        if sub_topic.topic_id != source.id or sub_topic_id not in source.sub_topic_ids:
            raise MovePreconditionError(
                f"Sub-topic {sub_topic_id} is not owned by topic {source_topic_id}"
            )
        _raise_if_invalid(
            validate_name(sub_topic.name, self.sub_topic_names(destination.id), SUB_TOPIC_LABEL)
        )

        index = max(0, min(destination_index, len(destination.sub_topic_ids)))
        source.sub_topic_ids.remove(sub_topic_id)
        destination.sub_topic_ids.insert(index, sub_topic_id)
        sub_topic.topic_id = destination.id
        return sub_topic

    # ─────────────────────────────────────────────────────────────────────────
    # Question mutations
    # ─────────────────────────────────────────────────────────────────────────

    def add_question(
        self,
        sub_topic_id: str,
        title: str,
        difficulty: str | Difficulty | None = None,
        link: str | None = None,
    ) -> QuestionEntity:
        sub_topic = self.require_sub_topic(sub_topic_id)
        _raise_if_invalid(validate_question_title(title, self.question_titles(sub_topic_id)))
        _raise_if_invalid(validate_url(link))
        _raise_if_invalid(validate_difficulty(difficulty))

        question = QuestionEntity(
            id=new_id(),
            title=title.strip(),
            difficulty=_coerce_difficulty(difficulty),
            link=(link or "").strip() or None,
        )
        self._questions[question.id] = question
        sub_topic.question_ids.append(question.id)
        return question

    def update_question(
        self,
        question_id: str,
        title: str | None = None,
        difficulty: str | Difficulty | None = None,
        link: str | None = None,
    ) -> QuestionEntity:
        """Edit question attributes.

        None leaves a field alone; an empty string clears difficulty or link.
        """
        question = self.require_question(question_id)

        if title is not None:
            owner = self.question_owner(question_id)
            siblings = self.question_titles(owner.id, exclude_id=question_id) if owner else []
            _raise_if_invalid(validate_question_title(title, siblings))
        if link is not None:
            _raise_if_invalid(validate_url(link))
        if difficulty is not None:
            _raise_if_invalid(validate_difficulty(difficulty))

        if title is not None:
            question.title = title.strip()
        if difficulty is not None:
            question.difficulty = _coerce_difficulty(difficulty)
        if link is not None:
            question.link = link.strip() or None
        return question

    def delete_question(self, question_id: str) -> QuestionEntity:
        question = self.require_question(question_id)
        owner = self.question_owner(question_id)
        if owner is not None:
            owner.question_ids = [i for i in owner.question_ids if i != question_id]
        del self._questions[question_id]
        return question

    def reorder_questions(
        self, sub_topic_id: str, source_index: int, destination_index: int
    ) -> bool:
        sub_topic = self.require_sub_topic(sub_topic_id)
        return _move_within(sub_topic.question_ids, source_index, destination_index)

    def move_question(
        self,
        question_id: str,
        source_sub_topic_id: str,
        destination_sub_topic_id: str,
        destination_index: int,
    ) -> QuestionEntity:
        """Transfer a question to another sub-topic.

        Raises:
            NotFoundError: If the question or either sub-topic is missing.
            MovePreconditionError: If source and destination are the same,
                or the question is not in the claimed source.
            SheetValidationError: If the destination already has a question
                with the same title.
        """
        question = self.require_question(question_id)
        source = self.require_sub_topic(source_sub_topic_id)
        destination = self.require_sub_topic(destination_sub_topic_id)

        if source.id == destination.id:
            raise MovePreconditionError("Source and destination sub-topic are the same")
        if question_id not in source.question_ids:
            raise MovePreconditionError(
                f"Question {question_id} is not owned by sub-topic {source_sub_topic_id}"
            )
        _raise_if_invalid(
            validate_question_title(question.title, self.question_titles(destination.id))
        )

        index = max(0, min(destination_index, len(destination.question_ids)))
        source.question_ids.remove(question_id)
        destination.question_ids.insert(index, question_id)
        return question

    # ─────────────────────────────────────────────────────────────────────────
    # Expand / collapse (cosmetic, never validated against the graph)
    # ─────────────────────────────────────────────────────────────────────────

    def toggle_topic(self, topic_id: str) -> bool:
        expanded = not self._expanded_topics.get(topic_id, False)
        self._expanded_topics[topic_id] = expanded
        return expanded

    def toggle_sub_topic(self, sub_topic_id: str) -> bool:
        expanded = not self._expanded_sub_topics.get(sub_topic_id, False)
        self._expanded_sub_topics[sub_topic_id] = expanded
        return expanded

    def expand_all(self) -> None:
        self._expanded_topics = {t: True for t in self._topic_order}
        self._expanded_sub_topics = {
            st_id: True for topic in self.iter_topics() for st_id in topic.sub_topic_ids
        }

    def collapse_all(self) -> None:
        self._expanded_topics = {}
        self._expanded_sub_topics = {}

    def is_topic_expanded(self, topic_id: str) -> bool:
        return self._expanded_topics.get(topic_id, False)

    def is_sub_topic_expanded(self, sub_topic_id: str) -> bool:
        return self._expanded_sub_topics.get(sub_topic_id, False)

    # ─────────────────────────────────────────────────────────────────────────
    # Snapshots and bulk replacement
    # ─────────────────────────────────────────────────────────────────────────

    def snapshot(self, label: str = "") -> Snapshot:
        """Capture an independent copy of the current state."""
        return Snapshot(
            topics={k: v.clone() for k, v in self._topics.items()},
            sub_topics={k: v.clone() for k, v in self._sub_topics.items()},
            questions={k: v.clone() for k, v in self._questions.items()},
            topic_order=list(self._topic_order),
            expanded_topics=dict(self._expanded_topics),
            expanded_sub_topics=dict(self._expanded_sub_topics),
            label=label,
        )

    def restore(self, snapshot: Snapshot) -> None:
        """Replace the current state with a copy of snapshot.

        The snapshot itself stays untouched by later edits.
        """
        copy = snapshot.clone()
        self._topics = copy.topics
        self._sub_topics = copy.sub_topics
        self._questions = copy.questions
        self._topic_order = copy.topic_order
        self._expanded_topics = copy.expanded_topics
        self._expanded_sub_topics = copy.expanded_sub_topics

    def clear(self) -> None:
        self.restore(Snapshot({}, {}, {}, [], {}, {}))

    def load_nested(self, topics: list[dict[str, Any]]) -> None:
        """Replace the whole graph from a nested hierarchy.

        Accepts ``[{id, name, subTopics: [{id, name, questions: [...]}]}]``.
        Missing or repeated ids get fresh ones so ownership stays exclusive.
        Every topic and sub-topic starts expanded.

        Raises:
            SheetValidationError: If the hierarchy is empty.
        """
        if not topics:
            raise SheetValidationError("Sheet data is empty")

        snapshot = Snapshot({}, {}, {}, [], {}, {})
        seen: set[str] = set()

        def fresh(raw_id: Any) -> str:
            candidate = str(raw_id) if raw_id else ""
            if not candidate or candidate in seen:
                candidate = new_id()
            seen.add(candidate)
            return candidate

        for raw_topic in topics:
            topic = TopicEntity(id=fresh(raw_topic.get("id")), name=str(raw_topic.get("name", "")))
            for raw_sub in raw_topic.get("subTopics") or []:
                sub_topic = SubTopicEntity(
                    id=fresh(raw_sub.get("id")),
                    name=str(raw_sub.get("name") or DEFAULT_SUB_TOPIC_NAME),
                    topic_id=topic.id,
                )
                for raw_question in raw_sub.get("questions") or []:
                    difficulty = raw_question.get("difficulty")
                    question = QuestionEntity(
                        id=fresh(raw_question.get("id")),
                        title=str(raw_question.get("title", "")),
                        difficulty=(
                            Difficulty(difficulty) if difficulty in Difficulty.values() else None
                        ),
                        link=raw_question.get("link") or None,
                    )
                    snapshot.questions[question.id] = question
                    sub_topic.question_ids.append(question.id)
                snapshot.sub_topics[sub_topic.id] = sub_topic
                snapshot.expanded_sub_topics[sub_topic.id] = True
                topic.sub_topic_ids.append(sub_topic.id)
            snapshot.topics[topic.id] = topic
            snapshot.topic_order.append(topic.id)
            snapshot.expanded_topics[topic.id] = True

        self.restore(snapshot)

    # ─────────────────────────────────────────────────────────────────────────
    # Integrity
    # ─────────────────────────────────────────────────────────────────────────

    def check_invariants(self) -> list[str]:
        """Return a description of every broken structural invariant.

        An empty list means the graph is consistent.
        """
        problems: list[str] = []

        if len(set(self._topic_order)) != len(self._topic_order):
            problems.append("topic order contains duplicates")
        for topic_id in self._topic_order:
            if topic_id not in self._topics:
                problems.append(f"topic order references missing topic {topic_id}")
        for topic_id in self._topics:
            if topic_id not in self._topic_order:
                problems.append(f"topic {topic_id} is missing from topic order")

        sub_topic_owners: dict[str, list[str]] = {}
        for topic in self._topics.values():
            for sub_topic_id in topic.sub_topic_ids:
                sub_topic_owners.setdefault(sub_topic_id, []).append(topic.id)
                sub_topic = self._sub_topics.get(sub_topic_id)
                if sub_topic is None:
                    problems.append(f"topic {topic.id} references missing sub-topic {sub_topic_id}")
                elif sub_topic.topic_id != topic.id:
                    problems.append(
                        f"sub-topic {sub_topic_id} points at topic {sub_topic.topic_id} "
                        f"but is listed under {topic.id}"
                    )
            problems.extend(_duplicate_names(f"topic {topic.id}", self.sub_topic_names(topic.id)))

        for sub_topic_id in self._sub_topics:
            owners = sub_topic_owners.get(sub_topic_id, [])
            if len(owners) != 1:
                problems.append(f"sub-topic {sub_topic_id} has {len(owners)} owners")

        question_owners: dict[str, list[str]] = {}
        for sub_topic in self._sub_topics.values():
            for question_id in sub_topic.question_ids:
                question_owners.setdefault(question_id, []).append(sub_topic.id)
                if question_id not in self._questions:
                    problems.append(
                        f"sub-topic {sub_topic.id} references missing question {question_id}"
                    )
            problems.extend(
                _duplicate_names(f"sub-topic {sub_topic.id}", self.question_titles(sub_topic.id))
            )

        for question_id in self._questions:
            owners = question_owners.get(question_id, [])
            if len(owners) != 1:
                problems.append(f"question {question_id} has {len(owners)} owners")

        problems.extend(_duplicate_names("top level", self.topic_names()))
        return problems


def _duplicate_names(scope: str, names: list[str]) -> list[str]:
    seen: set[str] = set()
    problems = []
    for name in names:
        folded = name.strip().casefold()
        if folded in seen:
            problems.append(f"duplicate name {name!r} in {scope}")
        seen.add(folded)
    return problems


__all__ = [
    "MovePreconditionError",
    "NotFoundError",
    "SheetError",
    "SheetGraph",
    "SheetValidationError",
]
