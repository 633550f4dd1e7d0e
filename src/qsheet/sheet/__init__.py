"""Sheet module - Normalized question sheet core.

Exports:
- Difficulty: Enum of question difficulty levels
- TopicEntity, SubTopicEntity, QuestionEntity: Flat entity records
- SheetGraph: Normalized entity graph with raw mutations
- SheetStore: Edit API with undo/redo returning MutationResult values
- MutationResult: Outcome of a store operation
- History, Snapshot: Snapshot-based undo/redo
- ValidationResult: Outcome of an input check
- StateCheck: Outcome of the persisted-state validity check

Note: use SheetStore for edits; SheetGraph methods raise instead of
returning outcome values and do not record history.
"""

from qsheet.sheet.entities import Difficulty, QuestionEntity, SubTopicEntity, TopicEntity
from qsheet.sheet.graph import (
    MovePreconditionError,
    NotFoundError,
    SheetError,
    SheetGraph,
    SheetValidationError,
)
from qsheet.sheet.history import History, Snapshot
from qsheet.sheet.state import StateCheck, check_persisted_state, dump_state, load_state
from qsheet.sheet.store import MutationResult, SheetStore
from qsheet.sheet.validation import ValidationResult

__all__ = [
    "Difficulty",
    "History",
    "MovePreconditionError",
    "MutationResult",
    "NotFoundError",
    "QuestionEntity",
    "SheetError",
    "SheetGraph",
    "SheetStore",
    "SheetValidationError",
    "Snapshot",
    "StateCheck",
    "SubTopicEntity",
    "TopicEntity",
    "ValidationResult",
    "check_persisted_state",
    "dump_state",
    "load_state",
]
