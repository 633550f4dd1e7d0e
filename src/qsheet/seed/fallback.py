"""Built-in fallback sheet used when no remote sheet can be loaded."""

from __future__ import annotations

from typing import Any

LEETCODE = "https://leetcode.com/problems/"

# (topic id, topic name, [(sub-topic id, sub-topic name, [(title, difficulty, slug)])])
_FALLBACK_SHEET: list[tuple[str, str, list[tuple[str, str, list[tuple[str, str, str]]]]]] = [
    (
        "topic-1",
        "Arrays & Hashing",
        [
            (
                "subtopic-1-1",
                "Basic Array Problems",
                [
                    ("Two Sum", "Easy", "two-sum"),
                    ("Contains Duplicate", "Easy", "contains-duplicate"),
                    ("Valid Anagram", "Easy", "valid-anagram"),
                ],
            ),
            (
                "subtopic-1-2",
                "Advanced Array Problems",
                [
                    ("Group Anagrams", "Medium", "group-anagrams"),
                    ("Top K Frequent Elements", "Medium", "top-k-frequent-elements"),
                    ("Product of Array Except Self", "Medium", "product-of-array-except-self"),
                ],
            ),
        ],
    ),
    (
        "topic-2",
        "Two Pointers",
        [
            (
                "subtopic-2-1",
                "Basic Two Pointer",
                [
                    ("Valid Palindrome", "Easy", "valid-palindrome"),
                    (
                        "Two Sum II - Input Array Is Sorted",
                        "Medium",
                        "two-sum-ii-input-array-is-sorted",
                    ),
                ],
            ),
            (
                "subtopic-2-2",
                "Advanced Two Pointer",
                [
                    ("3Sum", "Medium", "3sum"),
                    ("Container With Most Water", "Medium", "container-with-most-water"),
                    ("Trapping Rain Water", "Hard", "trapping-rain-water"),
                ],
            ),
        ],
    ),
    (
        "topic-3",
        "Sliding Window",
        [
            (
                "subtopic-3-1",
                "Fixed Window",
                [
                    ("Best Time to Buy and Sell Stock", "Easy", "best-time-to-buy-and-sell-stock"),
                    (
                        "Longest Substring Without Repeating Characters",
                        "Medium",
                        "longest-substring-without-repeating-characters",
                    ),
                ],
            ),
            (
                "subtopic-3-2",
                "Variable Window",
                [
                    (
                        "Longest Repeating Character Replacement",
                        "Medium",
                        "longest-repeating-character-replacement",
                    ),
                    ("Minimum Window Substring", "Hard", "minimum-window-substring"),
                ],
            ),
        ],
    ),
    (
        "topic-4",
        "Stack",
        [
            (
                "subtopic-4-1",
                "Basic Stack",
                [
                    ("Valid Parentheses", "Easy", "valid-parentheses"),
                    ("Min Stack", "Medium", "min-stack"),
                ],
            ),
            (
                "subtopic-4-2",
                "Monotonic Stack",
                [
                    ("Daily Temperatures", "Medium", "daily-temperatures"),
                    ("Largest Rectangle in Histogram", "Hard", "largest-rectangle-in-histogram"),
                ],
            ),
        ],
    ),
    (
        "topic-5",
        "Binary Search",
        [
            (
                "subtopic-5-1",
                "Basic Binary Search",
                [
                    ("Binary Search", "Easy", "binary-search"),
                    ("Search a 2D Matrix", "Medium", "search-a-2d-matrix"),
                ],
            ),
            (
                "subtopic-5-2",
                "Advanced Binary Search",
                [
                    ("Koko Eating Bananas", "Medium", "koko-eating-bananas"),
                    (
                        "Find Minimum in Rotated Sorted Array",
                        "Medium",
                        "find-minimum-in-rotated-sorted-array",
                    ),
                    ("Median of Two Sorted Arrays", "Hard", "median-of-two-sorted-arrays"),
                ],
            ),
        ],
    ),
]


def fallback_topics() -> list[dict[str, Any]]:
    """Return a fresh nested copy of the built-in sheet.

    Question ids follow ``q-<topic>-<sub-topic>-<n>`` (e.g. ``q-1-1-1``).
    """
    topics = []
    for topic_id, topic_name, sub_topics in _FALLBACK_SHEET:
        nested_subs = []
        for sub_id, sub_name, questions in sub_topics:
            suffix = sub_id.removeprefix("subtopic-")
            nested_subs.append(
                {
                    "id": sub_id,
                    "name": sub_name,
                    "questions": [
                        {
                            "id": f"q-{suffix}-{n}",
                            "title": title,
                            "difficulty": difficulty,
                            "link": f"{LEETCODE}{slug}/",
                        }
                        for n, (title, difficulty, slug) in enumerate(questions, start=1)
                    ],
                }
            )
        topics.append({"id": topic_id, "name": topic_name, "subTopics": nested_subs})
    return topics


__all__ = ["fallback_topics"]
