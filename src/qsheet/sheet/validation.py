"""Input validation for sheet edits.

Every check returns a ValidationResult instead of raising, so callers can
surface the message straight back to the user. Messages take the form
``"<field label> <reason>"``.

Checks run against the trimmed prospective value. Callers pass the
sibling names with the entity being edited already excluded, so a rename
never collides with itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable
from urllib.parse import urlsplit

from qsheet.sheet.entities import Difficulty

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 200

ALLOWED_URL_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a single validation check.

    Attributes:
        valid: True when the candidate passed.
        error: Human-readable reason when the candidate failed.
    """

    valid: bool
    error: str | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(valid=True)

    @classmethod
    def fail(cls, error: str) -> ValidationResult:
        return cls(valid=False, error=error)

    def __bool__(self) -> bool:
        return self.valid


def _check_text(
    candidate: str | None,
    siblings: Iterable[str],
    field_label: str,
    min_length: int,
    max_length: int,
    duplicate_message: str,
) -> ValidationResult:
    if candidate is not None and not isinstance(candidate, str):
        return ValidationResult.fail(f"{field_label} must be text")
    trimmed = (candidate or "").strip()

    if not trimmed:
        return ValidationResult.fail(f"{field_label} is required")
    if len(trimmed) < min_length:
        return ValidationResult.fail(f"{field_label} must be at least {min_length} characters")
    if len(trimmed) > max_length:
        return ValidationResult.fail(f"{field_label} must be less than {max_length} characters")

    folded = trimmed.casefold()
    if any(existing.strip().casefold() == folded for existing in siblings):
        return ValidationResult.fail(duplicate_message)

    return ValidationResult.ok()


def validate_name(
    candidate: str | None,
    sibling_names: Iterable[str],
    field_label: str = "Name",
) -> ValidationResult:
    """Validate a topic or sub-topic name.

    Args:
        candidate: Proposed name (trimmed before checking).
        sibling_names: Names of the other entities at the same level.
        field_label: Label used as the message prefix.

    Returns:
        ValidationResult with an error when the name is empty, shorter than
        2 or longer than 100 characters, or a case-insensitive duplicate.
    """
    return _check_text(
        candidate,
        sibling_names,
        field_label,
        NAME_MIN_LENGTH,
        NAME_MAX_LENGTH,
        f"{field_label} already exists",
    )


def validate_question_title(
    candidate: str | None,
    sibling_titles: Iterable[str],
    field_label: str = "Question title",
) -> ValidationResult:
    """Validate a question title against the titles of its sub-topic.

    Same rules as validate_name with bounds 3-200.
    """
    return _check_text(
        candidate,
        sibling_titles,
        field_label,
        TITLE_MIN_LENGTH,
        TITLE_MAX_LENGTH,
        "Question with this title already exists",
    )


def validate_url(candidate: str | None) -> ValidationResult:
    """Validate an optional external link.

    Empty is valid. Anything else must be an absolute http(s) URL with a
    host, otherwise the result carries "Invalid URL format".
    """
    if candidate is not None and not isinstance(candidate, str):
        return ValidationResult.fail("Invalid URL format")
    trimmed = (candidate or "").strip()
    if not trimmed:
        return ValidationResult.ok()

    try:
        parts = urlsplit(trimmed)
        # Accessing .port validates the port component
        parts.port
    except ValueError:
        return ValidationResult.fail("Invalid URL format")

    if parts.scheme.lower() not in ALLOWED_URL_SCHEMES or not parts.hostname:
        return ValidationResult.fail("Invalid URL format")
    if any(ch.isspace() for ch in trimmed):
        return ValidationResult.fail("Invalid URL format")

    return ValidationResult.ok()


def validate_difficulty(candidate: str | Difficulty | None) -> ValidationResult:
    """Validate an optional difficulty (exactly Easy, Medium or Hard)."""
    if candidate is None or candidate == "":
        return ValidationResult.ok()
    if isinstance(candidate, Difficulty):
        return ValidationResult.ok()
    if candidate in Difficulty.values():
        return ValidationResult.ok()
    return ValidationResult.fail(f"Difficulty must be one of {', '.join(Difficulty.values())}")


__all__ = [
    "ValidationResult",
    "validate_difficulty",
    "validate_name",
    "validate_question_title",
    "validate_url",
]
