"""
Progress Model: per-word review state.

A ProgressRecord exists for every word that has been graded at least once.
Records are immutable values; the scheduler replaces them wholesale after
each grading and never edits one in place.

A ProgressMap is a plain dict keyed by word id. A missing key means the
word has never been studied.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from enum import Enum

from loguru import logger

from .errors import MalformedProgressRecord

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_INTERVAL = 1
DEFAULT_REPETITION = 0
DEFAULT_EASINESS = 2.5
DEFAULT_MASTERY_COUNT = 0
MINIMUM_EASINESS = 1.3


class Status(str, Enum):
    """Informational learning status shown to the learner."""

    LEARNING = "learning"
    GRADUATED = "graduated"


# Status values written by earlier versions of the app
_LEGACY_STATUS = {
    "new": Status.LEARNING,
    "review": Status.LEARNING,
}

# Serialized key -> accepted aliases (first one is what to_dict writes)
_KEYS = {
    "item_id": ("itemId", "wordId", "item_id"),
    "interval": ("interval",),
    "repetition": ("repetition",),
    "easiness_factor": ("easinessFactor", "efactor", "easiness_factor"),
    "due_at": ("dueAt", "nextReviewDate", "due_at"),
    "mastery_count": ("masteryCount", "easyCounter", "mastery_count"),
    "status": ("status",),
}


# =============================================================================
# Progress Record
# =============================================================================


@dataclass(frozen=True)
class ProgressRecord:
    """Review state for a single word."""

    item_id: str
    interval: int = DEFAULT_INTERVAL  # Days, once graduated
    repetition: int = DEFAULT_REPETITION  # Consecutive "easy" recalls
    easiness_factor: float = DEFAULT_EASINESS
    due_at: int = 0  # Epoch milliseconds
    mastery_count: int = DEFAULT_MASTERY_COUNT  # Times graded "easy"
    status: Status = Status.LEARNING

    @classmethod
    def initial(cls, item_id: str) -> ProgressRecord:
        """Synthesized state for a word that has never been graded."""
        return cls(item_id=item_id)

    def problems(self) -> list[str]:
        """
        List the invariants this record violates.

        An empty list means the record is safe to schedule from.
        """
        found: list[str] = []
        if not isinstance(self.item_id, str) or not self.item_id:
            found.append("item_id must be a non-empty string")
        if not _is_int(self.interval) or self.interval < 0:
            found.append(f"interval must be a non-negative integer, got {self.interval!r}")
        elif self.repetition and self.interval < 1:
            found.append("interval must be >= 1 after a successful review")
        if not _is_int(self.repetition) or self.repetition < 0:
            found.append(f"repetition must be a non-negative integer, got {self.repetition!r}")
        if (
            not _is_number(self.easiness_factor)
            or not math.isfinite(self.easiness_factor)
            or self.easiness_factor < MINIMUM_EASINESS
        ):
            found.append(f"easiness_factor must be >= {MINIMUM_EASINESS}, got {self.easiness_factor!r}")
        if not _is_int(self.due_at):
            found.append(f"due_at must be epoch milliseconds, got {self.due_at!r}")
        if not _is_int(self.mastery_count) or self.mastery_count < 0:
            found.append(f"mastery_count must be a non-negative integer, got {self.mastery_count!r}")
        if not isinstance(self.status, Status):
            found.append(f"unknown status {self.status!r}")
        return found

    @property
    def is_well_formed(self) -> bool:
        return not self.problems()

    def is_due(self, now_ms: int) -> bool:
        """Check if this word is eligible for review at now_ms."""
        return self.due_at <= now_ms

    def to_dict(self) -> dict:
        """Serialize to the camelCase form stored in the progress file."""
        data = asdict(self)
        return {
            "itemId": data["item_id"],
            "interval": data["interval"],
            "repetition": data["repetition"],
            "easinessFactor": data["easiness_factor"],
            "dueAt": data["due_at"],
            "masteryCount": data["mastery_count"],
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping, item_id: str | None = None) -> ProgressRecord:
        """
        Create a ProgressRecord from its serialized form.

        Args:
            data: Dict as written by to_dict (legacy key names accepted)
            item_id: Fallback id when the dict does not carry one (map key)

        Returns:
            ProgressRecord instance. Values are converted but not validated
            against the invariants; see problems().

        Raises:
            MalformedProgressRecord: Missing fields or non-numeric values
        """
        if not isinstance(data, Mapping):
            raise MalformedProgressRecord(f"Expected an object, got {type(data).__name__}")

        raw = {field: _lookup(data, aliases) for field, aliases in _KEYS.items()}
        if raw["item_id"] is None:
            raw["item_id"] = item_id
        if raw["item_id"] is None:
            raise MalformedProgressRecord("Progress record has no item id")

        missing = [f for f in ("interval", "repetition", "easiness_factor", "due_at") if raw[f] is None]
        if missing:
            raise MalformedProgressRecord(
                f"Progress record {raw['item_id']!r} is missing {', '.join(missing)}"
            )

        try:
            return cls(
                item_id=str(raw["item_id"]),
                interval=_to_int(raw["interval"]),
                repetition=_to_int(raw["repetition"]),
                easiness_factor=float(raw["easiness_factor"]),
                due_at=_to_int(raw["due_at"]),
                mastery_count=_to_int(raw["mastery_count"] or 0),
                status=_to_status(raw["status"]),
            )
        except (TypeError, ValueError, OverflowError) as exc:
            raise MalformedProgressRecord(
                f"Progress record {raw['item_id']!r} has an invalid value: {exc}"
            ) from exc


# =============================================================================
# Progress Map helpers
# =============================================================================

ProgressMap = dict[str, ProgressRecord]


def merge_record(progress: Mapping[str, ProgressRecord], record: ProgressRecord) -> ProgressMap:
    """Return a new map with record stored under its item id."""
    merged = dict(progress)
    merged[record.item_id] = record
    return merged


def _lookup(data: Mapping, aliases: tuple[str, ...]):
    for key in aliases:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_int(value) -> int:
    if isinstance(value, bool):
        raise ValueError(f"expected a number, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            # Timestamps and counters are whole numbers; round stray floats
            return int(round(value))
        return int(value)
    return int(value)


def _to_status(value) -> Status:
    if value is None:
        return Status.LEARNING
    if isinstance(value, Status):
        return value
    if isinstance(value, str):
        if value in _LEGACY_STATUS:
            return _LEGACY_STATUS[value]
        if value in {status.value for status in Status}:
            return Status(value)
    logger.warning(f"Unknown progress status {value!r}, treating as learning")
    return Status.LEARNING
