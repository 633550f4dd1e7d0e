"""Entities - Normalized records for the question sheet.

This module provides the flat record types held by the entity graph:
- Difficulty: Enum of question difficulty levels
- TopicEntity: Top-level node owning an ordered list of sub-topics
- SubTopicEntity: Middle node owning an ordered list of questions
- QuestionEntity: Leaf node

Records reference each other only by id. Ownership lives in the
``sub_topic_ids`` / ``question_ids`` order arrays; ``SubTopicEntity.topic_id``
is the back-reference to the owning topic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from uuid import uuid4


class Difficulty(Enum):
    """Difficulty levels a question may carry."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def values(cls) -> list[str]:
        """Return the accepted string values in declaration order."""
        return [member.value for member in cls]


def new_id() -> str:
    """Return a fresh, never-reused entity identifier."""
    return uuid4().hex


@dataclass
class TopicEntity:
    """A topic record.

    Attributes:
        id: Immutable identifier.
        name: Display name, unique among topics (case-insensitive).
        sub_topic_ids: Ordered ids of the sub-topics this topic owns.
    """

    id: str
    name: str
    sub_topic_ids: list[str] = field(default_factory=list)

    def clone(self) -> TopicEntity:
        """Return an independent copy (order array included)."""
        return TopicEntity(id=self.id, name=self.name, sub_topic_ids=list(self.sub_topic_ids))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "subTopicIds": list(self.sub_topic_ids)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TopicEntity:
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            sub_topic_ids=[str(i) for i in data.get("subTopicIds", [])],
        )


@dataclass
class SubTopicEntity:
    """A sub-topic record.

    Attributes:
        id: Immutable identifier.
        name: Display name, unique among the owning topic's sub-topics.
        topic_id: Back-reference to the owning topic.
        question_ids: Ordered ids of the questions this sub-topic owns.
    """

    id: str
    name: str
    topic_id: str
    question_ids: list[str] = field(default_factory=list)

    def clone(self) -> SubTopicEntity:
        """Return an independent copy (order array included)."""
        return SubTopicEntity(
            id=self.id,
            name=self.name,
            topic_id=self.topic_id,
            question_ids=list(self.question_ids),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "topicId": self.topic_id,
            "questionIds": list(self.question_ids),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SubTopicEntity:
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            topic_id=str(data["topicId"]),
            question_ids=[str(i) for i in data.get("questionIds", [])],
        )


@dataclass
class QuestionEntity:
    """A question record.

    Attributes:
        id: Immutable identifier.
        title: Question title, unique within its sub-topic.
        difficulty: Optional difficulty level.
        link: Optional external http(s) URL.
    """

    id: str
    title: str
    difficulty: Difficulty | None = None
    link: str | None = None

    def clone(self) -> QuestionEntity:
        """Return an independent copy."""
        return QuestionEntity(
            id=self.id, title=self.title, difficulty=self.difficulty, link=self.link
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"id": self.id, "title": self.title}
        if self.difficulty is not None:
            result["difficulty"] = self.difficulty.value
        if self.link:
            result["link"] = self.link
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QuestionEntity:
        difficulty = data.get("difficulty")
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            difficulty=Difficulty(difficulty) if difficulty else None,
            link=data.get("link") or None,
        )


__all__ = [
    "Difficulty",
    "QuestionEntity",
    "SubTopicEntity",
    "TopicEntity",
    "new_id",
]
