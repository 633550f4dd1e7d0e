"""Pytest fixtures for qsheet tests."""

import pytest

from qsheet.seed.fallback import fallback_topics
from qsheet.sheet.store import SheetStore


def nested_sheet():
    """Small nested hierarchy with stable ids.

    Arrays
      Basics: Two Sum, Three Sum
      Advanced: Trapping Rain Water
    Graphs
      BFS: Rotting Oranges
    """
    return [
        {
            "id": "t-arrays",
            "name": "Arrays",
            "subTopics": [
                {
                    "id": "s-basics",
                    "name": "Basics",
                    "questions": [
                        {
                            "id": "q-two-sum",
                            "title": "Two Sum",
                            "difficulty": "Easy",
                            "link": "https://leetcode.com/problems/two-sum/",
                        },
                        {"id": "q-three-sum", "title": "Three Sum", "difficulty": "Medium"},
                    ],
                },
                {
                    "id": "s-advanced",
                    "name": "Advanced",
                    "questions": [
                        {"id": "q-trap", "title": "Trapping Rain Water", "difficulty": "Hard"},
                    ],
                },
            ],
        },
        {
            "id": "t-graphs",
            "name": "Graphs",
            "subTopics": [
                {
                    "id": "s-bfs",
                    "name": "BFS",
                    "questions": [{"id": "q-rotting", "title": "Rotting Oranges"}],
                },
            ],
        },
    ]


@pytest.fixture
def store():
    """Empty SheetStore."""
    return SheetStore()


@pytest.fixture
def sample_store():
    """SheetStore loaded with nested_sheet() and an empty history."""
    s = SheetStore()
    assert s.replace_all(nested_sheet()).success
    return s


@pytest.fixture
def fallback_store():
    """SheetStore loaded with the built-in sheet."""
    s = SheetStore()
    assert s.replace_all(fallback_topics()).success
    return s


@pytest.fixture
def offline_config(tmp_path):
    """Config dict that never touches the network and stores under tmp_path."""
    return {
        "history": {"capacity": 20},
        "storage": {"path": str(tmp_path / "sheet.json")},
        "seed": {"url": "", "timeout": 1, "fetch": False},
        "server": {"host": "127.0.0.1", "port": 5055},
    }
