"""
Review Scheduler: SM-2 grading with an active learning pool.

Implements:
- advance: next ProgressRecord after a graded recall
- plan_session / select_session: which words to show next, bounded by an
  active pool of not-yet-mastered words
- summarize: pool and mastery counts for display

Grade Scale:
0 - Forgot (complete blackout)
3 - Hard (recalled with difficulty)
4 - Good (recalled after hesitation)
5 - Easy (perfect recall)

Only "easy" advances the day-based SM-2 ladder. The other grades keep the
word in a short learning loop measured in minutes.

The scheduler holds configuration and a clock, never progress. All state is
the progress map passed in by the caller.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING

from loguru import logger

from .errors import InvalidGrade
from .progress import ProgressRecord, Status

if TYPE_CHECKING:
    from .config import Settings

MS_PER_MINUTE = 60 * 1000
MS_PER_DAY = 24 * 60 * MS_PER_MINUTE

Clock = Callable[[], int]


def system_clock() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


# =============================================================================
# Grades
# =============================================================================


class Grade(IntEnum):
    """Recall quality reported by the learner."""

    FORGOT = 0
    HARD = 3
    GOOD = 4
    EASY = 5

    @property
    def label(self) -> str:
        return self.name.lower()


def parse_grade(value: object) -> Grade:
    """
    Map a label ("forgot", "hard", "good", "easy") or a number to a Grade.

    Raises:
        InvalidGrade: Anything outside the four accepted grades
    """
    if isinstance(value, str):
        text = value.strip().lower()
        if text.isdigit():
            return _check_grade(int(text))
        try:
            return Grade[text.upper()]
        except KeyError:
            raise InvalidGrade(value) from None
    return _check_grade(value)


def _check_grade(grade: object) -> Grade:
    if isinstance(grade, Grade):
        return grade
    if isinstance(grade, bool) or not isinstance(grade, int):
        raise InvalidGrade(grade)
    try:
        return Grade(grade)
    except ValueError:
        raise InvalidGrade(grade) from None


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class SchedulerConfig:
    """
    Tunables for grading and session selection.

    pool_limit=None disables the active pool ceiling. Combined with
    new_items_per_session this gives the simpler fixed-quota policy
    (no ceiling, N new words per session).
    """

    mastery_threshold: int = 10  # "Easy" count that retires a word from the pool
    pool_limit: int | None = 50  # Max not-yet-mastered words at once
    new_items_per_session: int | None = None  # Extra cap on new words per session

    initial_easiness: float = 2.5
    minimum_easiness: float = 1.3
    first_interval: int = 1  # Days after the first "easy"
    second_interval: int = 6  # Days after the second "easy"

    # Minutes until a word graded below "easy" comes back
    learning_steps_minutes: dict[int, int] = field(
        default_factory=lambda: {Grade.FORGOT: 1, Grade.HARD: 5, Grade.GOOD: 20}
    )

    def __post_init__(self) -> None:
        if self.mastery_threshold < 1:
            raise ValueError("mastery_threshold must be at least 1")
        if self.pool_limit is not None and self.pool_limit < 0:
            raise ValueError("pool_limit must be >= 0 or None")
        if self.new_items_per_session is not None and self.new_items_per_session < 0:
            raise ValueError("new_items_per_session must be >= 0 or None")
        if self.minimum_easiness > self.initial_easiness:
            raise ValueError("minimum_easiness cannot exceed initial_easiness")
        missing = {Grade.FORGOT, Grade.HARD, Grade.GOOD} - set(self.learning_steps_minutes)
        if missing:
            raise ValueError(f"learning_steps_minutes has no step for grades {sorted(missing)}")

    @classmethod
    def from_settings(cls, settings: Settings) -> SchedulerConfig:
        """Build a config from application settings."""
        return cls(
            mastery_threshold=settings.mastery_threshold,
            pool_limit=settings.active_pool_limit,
            new_items_per_session=settings.new_items_per_session,
        )


# =============================================================================
# Session Plan
# =============================================================================


@dataclass
class SessionPlan:
    """Words selected for the next study session, kept in their groups."""

    due_active: list[str] = field(default_factory=list)
    due_mastered: list[str] = field(default_factory=list)
    new: list[str] = field(default_factory=list)
    available_slots: int | None = None  # None when the pool has no ceiling

    @property
    def queue(self) -> list[str]:
        """All selected ids: due active, then due mastered, then new."""
        return [*self.due_active, *self.due_mastered, *self.new]

    @property
    def total(self) -> int:
        return len(self.due_active) + len(self.due_mastered) + len(self.new)

    def group_of(self, item_id: str) -> str | None:
        """Name the group an id was selected into ("due", "mastered", "new")."""
        if item_id in self.due_active:
            return "due"
        if item_id in self.due_mastered:
            return "mastered"
        if item_id in self.new:
            return "new"
        return None


@dataclass
class ProgressStats:
    """Pool and mastery counts for a progress map."""

    total_seen: int
    mastered: int
    active: int
    due: int
    pool_limit: int | None
    available_slots: int | None


# =============================================================================
# Review Scheduler
# =============================================================================

_CONFIGURED = object()


class ReviewScheduler:
    """
    Grades recalls and selects study sessions.

    Each call reads the clock at most once; pass now_ms to pin it.
    """

    def __init__(self, config: SchedulerConfig | None = None, clock: Clock | None = None):
        """
        Initialize the scheduler.

        Args:
            config: Custom configuration (uses defaults if None)
            clock: Zero-argument callable returning epoch milliseconds
        """
        self.config = config or SchedulerConfig()
        self.clock = clock or system_clock

    def _now(self, now_ms: int | None) -> int:
        return self.clock() if now_ms is None else now_ms

    # -------------------------------------------------------------------------
    # Grading
    # -------------------------------------------------------------------------

    def advance(
        self,
        prev: ProgressRecord | None,
        grade: int,
        item_id: str,
        now_ms: int | None = None,
    ) -> ProgressRecord:
        """
        Calculate the next state of a word after a graded recall.

        Args:
            prev: Current record, or None for a word never graded
            grade: 0, 3, 4 or 5
            item_id: Word being graded
            now_ms: Current time in epoch milliseconds (reads the clock if None)

        Returns:
            New ProgressRecord replacing prev

        Raises:
            InvalidGrade: grade is not one of 0, 3, 4, 5
        """
        grade = _check_grade(grade)
        now = self._now(now_ms)
        cfg = self.config

        start = self._starting_state(prev, item_id)
        interval = start.interval
        repetition = start.repetition
        ef = start.easiness_factor
        mastery = start.mastery_count

        if grade == Grade.EASY:
            if repetition == 0:
                interval = cfg.first_interval
            elif repetition == 1:
                interval = cfg.second_interval
            else:
                interval = _round_half_up(interval * ef)
            repetition += 1
            mastery += 1

            # EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
            q = int(grade)
            ef = max(cfg.minimum_easiness, ef + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)))

            due_at = now + interval * MS_PER_DAY
        else:
            repetition = 0
            interval = cfg.first_interval
            if grade == Grade.FORGOT:
                mastery = max(0, mastery - 1)
            due_at = now + cfg.learning_steps_minutes[grade] * MS_PER_MINUTE

        status = Status.GRADUATED if grade == Grade.EASY and repetition > 1 else Status.LEARNING

        record = ProgressRecord(
            item_id=item_id,
            interval=interval,
            repetition=repetition,
            easiness_factor=ef,
            due_at=due_at,
            mastery_count=mastery,
            status=status,
        )

        logger.debug(
            f"Graded {item_id}: grade={int(grade)}, interval={interval}d, "
            f"rep={repetition}, ef={ef:.2f}, mastery={mastery}, due_in={(due_at - now) // 1000}s"
        )

        return record

    def _starting_state(self, prev: ProgressRecord | None, item_id: str) -> ProgressRecord:
        """Return prev, or fresh defaults when prev is missing or unusable."""
        fresh = ProgressRecord(
            item_id=item_id,
            easiness_factor=self.config.initial_easiness,
        )
        if prev is None:
            return fresh

        problems = prev.problems()
        if prev.item_id != item_id:
            problems.append(f"record belongs to {prev.item_id!r}")
        if problems:
            logger.warning(f"Resetting progress for {item_id}: {'; '.join(problems)}")
            return fresh

        return prev

    # -------------------------------------------------------------------------
    # Session selection
    # -------------------------------------------------------------------------

    def plan_session(
        self,
        all_ids: Iterable[str],
        progress: Mapping[str, ProgressRecord],
        pool_limit: int | None = _CONFIGURED,  # type: ignore[assignment]
        now_ms: int | None = None,
    ) -> SessionPlan:
        """
        Select the words for the next study session.

        1. Words with progress are active (below the mastery threshold) or
           mastered. Mastered words take no pool slot.
        2. Free slots = pool_limit - active count.
        3. Never-studied words fill the free slots in enumeration order.
        4. Due active and due mastered words are always included.

        Args:
            all_ids: Every word id in the vocabulary, in its natural order
            progress: Progress map keyed by word id
            pool_limit: Active pool ceiling (config value if omitted, None for no ceiling)
            now_ms: Current time in epoch milliseconds (reads the clock if None)

        Returns:
            SessionPlan with due active, due mastered and new groups
        """
        if pool_limit is _CONFIGURED:
            pool_limit = self.config.pool_limit
        now = self._now(now_ms)
        threshold = self.config.mastery_threshold

        plan = SessionPlan()
        active_count = 0

        for item_id, record in progress.items():
            if not record.is_well_formed:
                # Unusable state: keep it in the pool and due so grading resets it
                active_count += 1
                plan.due_active.append(item_id)
                continue

            if record.mastery_count < threshold:
                active_count += 1
                if record.is_due(now):
                    plan.due_active.append(item_id)
            elif record.is_due(now):
                plan.due_mastered.append(item_id)

        slots = self._admission_slots(pool_limit, active_count)
        plan.available_slots = None if pool_limit is None else max(0, pool_limit - active_count)

        if slots is None or slots > 0:
            for item_id in all_ids:
                if slots is not None and len(plan.new) >= slots:
                    break
                if item_id not in progress:
                    plan.new.append(item_id)

        logger.debug(
            f"Session planned: {len(plan.due_active)} due + {len(plan.due_mastered)} mastered "
            f"+ {len(plan.new)} new ({active_count} active, slots={plan.available_slots})"
        )

        return plan

    def _admission_slots(self, pool_limit: int | None, active_count: int) -> int | None:
        """How many new words may join this session (None means unbounded)."""
        quota = self.config.new_items_per_session
        if pool_limit is None:
            return quota
        slots = max(0, pool_limit - active_count)
        if quota is not None:
            slots = min(slots, quota)
        return slots

    def select_session(
        self,
        all_ids: Iterable[str],
        progress: Mapping[str, ProgressRecord],
        pool_limit: int | None = _CONFIGURED,  # type: ignore[assignment]
        now_ms: int | None = None,
    ) -> list[str]:
        """Ids for the next session; see plan_session."""
        return self.plan_session(all_ids, progress, pool_limit=pool_limit, now_ms=now_ms).queue

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def is_mastered(self, record: ProgressRecord) -> bool:
        return record.is_well_formed and record.mastery_count >= self.config.mastery_threshold

    def mastered_ids(self, progress: Mapping[str, ProgressRecord]) -> list[str]:
        """Ids of mastered words, sorted for display."""
        return sorted(item_id for item_id, record in progress.items() if self.is_mastered(record))

    def summarize(
        self,
        progress: Mapping[str, ProgressRecord],
        now_ms: int | None = None,
    ) -> ProgressStats:
        """Count seen, mastered, active and due words."""
        now = self._now(now_ms)
        mastered = sum(1 for record in progress.values() if self.is_mastered(record))
        active = len(progress) - mastered
        due = sum(
            1
            for record in progress.values()
            if not record.is_well_formed or record.is_due(now)
        )
        pool_limit = self.config.pool_limit

        return ProgressStats(
            total_seen=len(progress),
            mastered=mastered,
            active=active,
            due=due,
            pool_limit=pool_limit,
            available_slots=None if pool_limit is None else max(0, pool_limit - active),
        )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# =============================================================================
# Module-level API (default configuration)
# =============================================================================

_default_scheduler = ReviewScheduler()


def advance(
    prev: ProgressRecord | None,
    grade: int,
    item_id: str,
    now_ms: int | None = None,
) -> ProgressRecord:
    """Next state of item_id after grading; see ReviewScheduler.advance."""
    return _default_scheduler.advance(prev, grade, item_id, now_ms=now_ms)


def plan_session(
    all_ids: Iterable[str],
    progress: Mapping[str, ProgressRecord],
    pool_limit: int | None = 50,
    now_ms: int | None = None,
) -> SessionPlan:
    return _default_scheduler.plan_session(all_ids, progress, pool_limit=pool_limit, now_ms=now_ms)


def select_session(
    all_ids: Iterable[str],
    progress: Mapping[str, ProgressRecord],
    pool_limit: int | None = 50,
    now_ms: int | None = None,
) -> list[str]:
    """Ids for the next session; see ReviewScheduler.plan_session."""
    return _default_scheduler.select_session(all_ids, progress, pool_limit=pool_limit, now_ms=now_ms)


def summarize(progress: Mapping[str, ProgressRecord], now_ms: int | None = None) -> ProgressStats:
    return _default_scheduler.summarize(progress, now_ms=now_ms)


def mastered_ids(progress: Mapping[str, ProgressRecord]) -> list[str]:
    return _default_scheduler.mastered_ids(progress)
