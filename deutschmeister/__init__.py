"""
DeutschMeister: spaced repetition for German vocabulary.

A portable CLI that schedules German/Spanish word reviews with SM-2 and
keeps a bounded pool of words in active learning.

Components:
- ProgressRecord: per-word review state
- ReviewScheduler: grading (advance) and session selection
- VocabularyDeck: JSON word loading
- ProgressStore: whole-map JSON persistence
- cli: Rich terminal interface
"""

from .errors import (
    DeutschMeisterError,
    InvalidGrade,
    MalformedProgressRecord,
    ProgressStoreError,
    VocabularyError,
)
from .progress import ProgressMap, ProgressRecord, Status, merge_record
from .progress_store import ProgressStore
from .scheduler import (
    Grade,
    ProgressStats,
    ReviewScheduler,
    SchedulerConfig,
    SessionPlan,
    advance,
    mastered_ids,
    parse_grade,
    plan_session,
    select_session,
    summarize,
)
from .vocabulary import StudyMode, VocabularyDeck, Word, WordType

__version__ = "1.0.0"

__all__ = [
    # Progress model
    "ProgressRecord",
    "ProgressMap",
    "Status",
    "merge_record",
    # Scheduling
    "Grade",
    "ReviewScheduler",
    "SchedulerConfig",
    "SessionPlan",
    "ProgressStats",
    "advance",
    "select_session",
    "plan_session",
    "summarize",
    "mastered_ids",
    "parse_grade",
    # Vocabulary
    "VocabularyDeck",
    "Word",
    "WordType",
    "StudyMode",
    # Persistence
    "ProgressStore",
    # Errors
    "DeutschMeisterError",
    "InvalidGrade",
    "MalformedProgressRecord",
    "VocabularyError",
    "ProgressStoreError",
]
