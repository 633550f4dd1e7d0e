"""Transform a remote question-tracker sheet into the nested hierarchy.

The remote payload is a flat list of question entries, each naming its
topic and (optional) sub-topic, plus optional ordering hints::

    {"data": {"sheet": {"config": {"topicOrder": [...],
                                   "subTopicOrder": {topic: [...]},
                                   "questionOrder": [...]}},
              "questions": [{"_id", "topic", "subTopic", "title",
                             "questionId": {"difficulty", "problemUrl", "name"},
                             "resource"}]}}

Ordering rules:
- topics listed in ``topicOrder`` first (in that order), the rest A-Z;
- sub-topics by ``subTopicOrder[topic]`` the same way, or, without an
  explicit order, the default "Questions" bucket first and the rest A-Z;
- questions by their position in ``questionOrder``, unlisted ones last.
"""

from __future__ import annotations

import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_SUB_TOPIC_NAME = "Questions"
SLUG_MAX_LENGTH = 50

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lowercase, collapse non-alphanumerics to '-', trim, cap at 50 chars."""
    return _SLUG_RE.sub("-", text.lower()).strip("-")[:SLUG_MAX_LENGTH]


def topic_id_for(name: str) -> str:
    return f"topic-{slugify(name)}"


def sub_topic_id_for(topic_name: str, sub_topic_name: str) -> str:
    return f"subtopic-{slugify(topic_name)}-{slugify(sub_topic_name)}"


def fallback_question_id(topic_name: str, sub_topic_name: str, index: int) -> str:
    return f"q-{slugify(topic_name)}-{slugify(sub_topic_name)}-{index}"


def normalize_difficulty(value: Any) -> str | None:
    """Map 'easy' / 'MEDIUM' / 'Hard' to the canonical capitalization."""
    if not isinstance(value, str) or not value:
        return None
    normalized = value[:1].upper() + value[1:].lower()
    if normalized in ("Easy", "Medium", "Hard"):
        return normalized
    return None


def _text(value: Any) -> str | None:
    """Scalar payload values as trimmed text; anything else is None."""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    return str(value).strip() or None


def _list_hint(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _ordered(names: list[str], preferred: list[str]) -> list[str]:
    """Names in ``preferred`` first (in that order), the rest alphabetically."""
    rank = {name: i for i, name in enumerate(preferred) if isinstance(name, str)}
    listed = sorted((n for n in names if n in rank), key=rank.__getitem__)
    unlisted = sorted(n for n in names if n not in rank)
    return listed + unlisted


def is_valid_api_response(response: Any) -> bool:
    """Return True if the payload carries a non-empty questions list."""
    if not isinstance(response, dict):
        return False
    data = response.get("data")
    if not isinstance(data, dict):
        return False
    questions = data.get("questions")
    return isinstance(questions, list) and len(questions) > 0


def transform_api_response(response: Any) -> list[dict[str, Any]] | None:
    """Convert a remote sheet payload to the nested hierarchy.

    Malformed entries (no topic) are skipped and ordering hints of the
    wrong type are ignored.

    Returns:
        The nested topic list, or None if the payload holds nothing usable.
    """
    if not is_valid_api_response(response):
        return None

    data = response["data"]
    sheet = data.get("sheet") if isinstance(data.get("sheet"), dict) else {}
    sheet_config = sheet.get("config") if isinstance(sheet.get("config"), dict) else {}
    topic_order = _list_hint(sheet_config.get("topicOrder"))
    sub_topic_order = sheet_config.get("subTopicOrder")
    if not isinstance(sub_topic_order, dict):
        sub_topic_order = {}
    question_order = _list_hint(sheet_config.get("questionOrder"))
    question_rank = {qid: i for i, qid in enumerate(question_order) if isinstance(qid, str)}

    grouped: dict[str, dict[str, list[dict[str, Any]]]] = {}
    for entry in data["questions"]:
        if not isinstance(entry, dict):
            continue
        topic_name = entry.get("topic")
        if not isinstance(topic_name, str) or not topic_name.strip():
            continue
        raw_sub = entry.get("subTopic")
        sub_name = raw_sub.strip() if isinstance(raw_sub, str) and raw_sub.strip() else ""
        sub_name = sub_name or DEFAULT_SUB_TOPIC_NAME
        grouped.setdefault(topic_name.strip(), {}).setdefault(sub_name, []).append(entry)

    topics: list[dict[str, Any]] = []
    for topic_name in _ordered(list(grouped), topic_order):
        subs = grouped[topic_name]
        explicit = sub_topic_order.get(topic_name)
        if isinstance(explicit, list):
            sub_names = _ordered(list(subs), explicit)
        else:
            sub_names = sorted(subs, key=lambda n: (n != DEFAULT_SUB_TOPIC_NAME, n))

        nested_subs = []
        for sub_name in sub_names:
            entries = sorted(
                subs[sub_name],
                key=lambda e: question_rank.get(_text(e.get("_id")), len(question_rank)),
            )
            questions = []
            for index, entry in enumerate(entries):
                details = entry.get("questionId")
                if not isinstance(details, dict):
                    details = {}
                questions.append(
                    {
                        "id": _text(entry.get("_id"))
                        or fallback_question_id(topic_name, sub_name, index),
                        "title": _text(entry.get("title"))
                        or _text(details.get("name"))
                        or "Untitled Question",
                        "difficulty": normalize_difficulty(details.get("difficulty")),
                        "link": _text(details.get("problemUrl"))
                        or _text(entry.get("resource"))
                        or None,
                    }
                )
            nested_subs.append(
                {
                    "id": sub_topic_id_for(topic_name, sub_name),
                    "name": sub_name,
                    "questions": questions,
                }
            )

        topics.append(
            {"id": topic_id_for(topic_name), "name": topic_name, "subTopics": nested_subs}
        )

    if not topics:
        logger.debug("Remote sheet contained no usable topics")
        return None
    return topics


__all__ = [
    "DEFAULT_SUB_TOPIC_NAME",
    "is_valid_api_response",
    "normalize_difficulty",
    "slugify",
    "transform_api_response",
]
