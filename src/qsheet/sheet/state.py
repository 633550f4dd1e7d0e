"""Persisted state - Durable shape of the sheet and its validity check.

The durable subset is the three entity mappings, the topic order and
the two expand maps. History and transient flags are never persisted.

Shape on disk::

    {
        "version": 1,
        "state": {
            "topicsById": {...},
            "subTopicsById": {...},
            "questionsById": {...},
            "topicOrder": [...],
            "expandedTopics": {...},
            "expandedSubTopics": {...}
        }
    }

Public API
----------
- ``dump_state``: snapshot -> versioned dict
- ``check_persisted_state``: typed pass/fail validity check
- ``load_state``: versioned dict -> snapshot, or None if unusable
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from qsheet.sheet.entities import QuestionEntity, SubTopicEntity, TopicEntity
from qsheet.sheet.history import Snapshot

logger = logging.getLogger(__name__)

STATE_VERSION = 1

# Required keys and the container type each must hold.
REQUIRED_KEYS: dict[str, type] = {
    "topicsById": dict,
    "subTopicsById": dict,
    "questionsById": dict,
    "topicOrder": list,
    "expandedTopics": dict,
    "expandedSubTopics": dict,
}

# Maps a stored version to a function upgrading its state to version + 1.
MIGRATIONS: dict[int, Callable[[dict[str, Any]], dict[str, Any]]] = {}


@dataclass(frozen=True)
class StateCheck:
    """Result of checking a persisted state.

    Attributes:
        ok: True when the state can be loaded.
        reason: Why the state was rejected.
    """

    ok: bool
    reason: str | None = None

    @classmethod
    def passed(cls) -> StateCheck:
        return cls(ok=True)

    @classmethod
    def failed(cls, reason: str) -> StateCheck:
        return cls(ok=False, reason=reason)


def dump_state(snapshot: Snapshot) -> dict[str, Any]:
    """Serialize a snapshot to the versioned persisted shape."""
    return {
        "version": STATE_VERSION,
        "state": {
            "topicsById": {k: v.to_dict() for k, v in snapshot.topics.items()},
            "subTopicsById": {k: v.to_dict() for k, v in snapshot.sub_topics.items()},
            "questionsById": {k: v.to_dict() for k, v in snapshot.questions.items()},
            "topicOrder": list(snapshot.topic_order),
            "expandedTopics": dict(snapshot.expanded_topics),
            "expandedSubTopics": dict(snapshot.expanded_sub_topics),
        },
    }


def _unwrap(data: Any) -> tuple[int, Any]:
    """Split a stored document into (version, state).

    A document without a version tag is taken to be the bare current
    state.
    """
    if isinstance(data, dict) and "state" in data and "version" in data:
        version = data.get("version")
        return (version if isinstance(version, int) else STATE_VERSION), data["state"]
    return STATE_VERSION, data


def migrate_state(version: int, state: dict[str, Any]) -> dict[str, Any]:
    """Upgrade a state from version to STATE_VERSION via MIGRATIONS.

    Versions without a registered migration are treated as current.
    """
    while version < STATE_VERSION and version in MIGRATIONS:
        state = MIGRATIONS[version](state)
        version += 1
    return state


def check_persisted_state(state: Any) -> StateCheck:
    """Check an (unwrapped) persisted state before loading it.

    Passes only if every required key is present with the right container
    type and every id in ``topicOrder`` exists in ``topicsById``.
    """
    if not isinstance(state, dict):
        return StateCheck.failed("state is not a mapping")

    for key, expected in REQUIRED_KEYS.items():
        if key not in state:
            return StateCheck.failed(f"missing key {key!r}")
        if not isinstance(state[key], expected):
            return StateCheck.failed(f"{key!r} must be a {expected.__name__}")

    topics = state["topicsById"]
    for topic_id in state["topicOrder"]:
        if not isinstance(topic_id, str) or topic_id not in topics:
            return StateCheck.failed(f"topicOrder references unknown topic {topic_id!r}")

    return StateCheck.passed()


def load_state(data: Any) -> Snapshot | None:
    """Turn a stored document into a snapshot.

    Returns:
        The snapshot, or None if the document fails the validity check or
        holds malformed records. Callers then start empty and seed.
    """
    version, state = _unwrap(data)
    if isinstance(state, dict):
        state = migrate_state(version, state)

    check = check_persisted_state(state)
    if not check.ok:
        logger.warning("Discarding persisted sheet state: %s", check.reason)
        return None

    try:
        return Snapshot(
            topics={k: TopicEntity.from_dict(v) for k, v in state["topicsById"].items()},
            sub_topics={k: SubTopicEntity.from_dict(v) for k, v in state["subTopicsById"].items()},
            questions={k: QuestionEntity.from_dict(v) for k, v in state["questionsById"].items()},
            topic_order=[str(i) for i in state["topicOrder"]],
            expanded_topics={k: bool(v) for k, v in state["expandedTopics"].items()},
            expanded_sub_topics={k: bool(v) for k, v in state["expandedSubTopics"].items()},
            label="load",
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning("Discarding persisted sheet state: malformed record (%s)", e)
        return None


__all__ = [
    "MIGRATIONS",
    "REQUIRED_KEYS",
    "STATE_VERSION",
    "StateCheck",
    "check_persisted_state",
    "dump_state",
    "load_state",
    "migrate_state",
]
