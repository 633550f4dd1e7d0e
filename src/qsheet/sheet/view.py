"""Sheet views - Nested read-only projections of the SheetGraph.

Views are rebuilt on every call from the flat mappings and order arrays.
They are plain values: editing a view never changes the graph.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from qsheet.sheet.graph import SheetGraph


@dataclass
class QuestionView:
    id: str
    title: str
    order: int
    difficulty: str | None = None
    link: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"id": self.id, "title": self.title, "order": self.order}
        if self.difficulty:
            result["difficulty"] = self.difficulty
        if self.link:
            result["link"] = self.link
        return result


@dataclass
class SubTopicView:
    id: str
    name: str
    order: int
    questions: list[QuestionView] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "order": self.order,
            "questions": [q.to_dict() for q in self.questions],
        }


@dataclass
class TopicView:
    id: str
    name: str
    order: int
    sub_topics: list[SubTopicView] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "order": self.order,
            "subTopics": [st.to_dict() for st in self.sub_topics],
        }


def _sub_topic_view(graph: SheetGraph, sub_topic_id: str, order: int) -> SubTopicView | None:
    sub_topic = graph.find_sub_topic(sub_topic_id)
    if sub_topic is None:
        return None
    questions = [
        QuestionView(
            id=q.id,
            title=q.title,
            order=index,
            difficulty=q.difficulty.value if q.difficulty else None,
            link=q.link,
        )
        for index, q in enumerate(graph.iter_questions(sub_topic_id))
    ]
    return SubTopicView(id=sub_topic.id, name=sub_topic.name, order=order, questions=questions)


def _topic_view(graph: SheetGraph, topic_id: str, order: int) -> TopicView | None:
    topic = graph.find_topic(topic_id)
    if topic is None:
        return None
    sub_topics = []
    for sub_topic_id in topic.sub_topic_ids:
        view = _sub_topic_view(graph, sub_topic_id, len(sub_topics))
        if view is not None:
            sub_topics.append(view)
    return TopicView(id=topic.id, name=topic.name, order=order, sub_topics=sub_topics)


def build_tree(graph: SheetGraph) -> list[TopicView]:
    """Build the full ordered hierarchy.

    Ids in an order array without a matching record are skipped.
    """
    topics = []
    for topic_id in graph.topic_order():
        view = _topic_view(graph, topic_id, len(topics))
        if view is not None:
            topics.append(view)
    return topics


def build_topic(graph: SheetGraph, topic_id: str) -> TopicView | None:
    """Build one topic's subtree, or None if the topic does not exist."""
    order = graph.topic_order()
    return _topic_view(graph, topic_id, order.index(topic_id) if topic_id in order else -1)


def build_sub_topic(graph: SheetGraph, sub_topic_id: str) -> SubTopicView | None:
    """Build one sub-topic's subtree, or None if the sub-topic does not exist."""
    sub_topic = graph.find_sub_topic(sub_topic_id)
    if sub_topic is None:
        return None
    owner = graph.find_topic(sub_topic.topic_id)
    order = -1
    if owner is not None and sub_topic_id in owner.sub_topic_ids:
        order = owner.sub_topic_ids.index(sub_topic_id)
    return _sub_topic_view(graph, sub_topic_id, order)


def tree_to_dicts(topics: list[TopicView]) -> list[dict[str, Any]]:
    """Serialize a tree to JSON-compatible dicts (camelCase keys)."""
    return [topic.to_dict() for topic in topics]


def render_text(topics: list[TopicView], show_ids: bool = False) -> str:
    """Render a tree as an indented outline for terminal output."""
    lines: list[str] = []

    def suffix(entity_id: str) -> str:
        return f"  [{entity_id}]" if show_ids else ""

    for topic in topics:
        lines.append(f"{topic.order + 1}. {topic.name}{suffix(topic.id)}")
        for sub_topic in topic.sub_topics:
            lines.append(f"   {sub_topic.order + 1}. {sub_topic.name}{suffix(sub_topic.id)}")
            for question in sub_topic.questions:
                tag = f" ({question.difficulty})" if question.difficulty else ""
                lines.append(
                    f"      {question.order + 1}. {question.title}{tag}{suffix(question.id)}"
                )
    return "\n".join(lines)


__all__ = [
    "QuestionView",
    "SubTopicView",
    "TopicView",
    "build_sub_topic",
    "build_topic",
    "build_tree",
    "render_text",
    "tree_to_dicts",
]
