"""
Vocabulary Deck: word loader.

Loads German/Spanish word pairs from a JSON file and keeps them in file
order, which is the order new words are admitted into the learning pool.

Accepted layouts:
- a list of word objects
- {"words": [...]}
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from importlib import resources
from pathlib import Path

from loguru import logger

from .errors import VocabularyError

# =============================================================================
# Word Data Class
# =============================================================================


class WordType(str, Enum):
    """Part of speech."""

    NOUN = "noun"
    VERB = "verb"
    ADJECTIVE = "adjective"
    ADVERB = "adverb"
    PREPOSITION = "preposition"
    CONJUNCTION = "conjunction"
    OTHER = "other"


class StudyMode(str, Enum):
    """Which side of the card is shown first."""

    DE_ES = "de-es"  # German prompt, Spanish answer
    ES_DE = "es-de"  # Spanish prompt, German answer


GENDERS = ("der", "die", "das")


@dataclass(frozen=True)
class Word:
    """A vocabulary entry."""

    id: str
    german: str
    spanish: str
    word_type: WordType = WordType.OTHER
    gender: str | None = None  # Nouns only
    example_german: str | None = None
    example_spanish: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Word:
        """
        Create a Word from a dictionary (JSON).

        Raises:
            VocabularyError: id, german or spanish is missing
        """
        if not isinstance(data, dict):
            raise VocabularyError(f"Word entry must be an object, got {type(data).__name__}")

        missing = [key for key in ("id", "german", "spanish") if not data.get(key)]
        if missing:
            raise VocabularyError(f"Word entry {data.get('id', '?')!r} is missing {', '.join(missing)}")

        try:
            word_type = WordType(str(data.get("type", "other")).lower())
        except ValueError:
            word_type = WordType.OTHER

        gender = data.get("gender")
        if word_type is not WordType.NOUN or gender not in GENDERS:
            gender = None

        return cls(
            id=str(data["id"]),
            german=data["german"],
            spanish=data["spanish"],
            word_type=word_type,
            gender=gender,
            example_german=data.get("exampleGerman"),
            example_spanish=data.get("exampleSpanish"),
        )

    @property
    def german_display(self) -> str:
        """German form with its article, e.g. "der Hund"."""
        return f"{self.gender} {self.german}" if self.gender else self.german

    def prompt(self, mode: StudyMode) -> str:
        return self.german_display if mode is StudyMode.DE_ES else self.spanish

    def answer(self, mode: StudyMode) -> str:
        return self.spanish if mode is StudyMode.DE_ES else self.german_display

    def example(self, mode: StudyMode) -> tuple[str, str] | None:
        """(prompt-side, answer-side) example sentences, if both exist."""
        if not (self.example_german and self.example_spanish):
            return None
        if mode is StudyMode.DE_ES:
            return self.example_german, self.example_spanish
        return self.example_spanish, self.example_german


# =============================================================================
# Vocabulary Deck
# =============================================================================


class VocabularyDeck:
    """
    Ordered collection of words.

    The deck is read-only once loaded; progress lives in the progress map.
    """

    BUNDLED = "words.json"

    def __init__(self, words: list[Word] | None = None):
        self._words: dict[str, Word] = {}
        for word in words or []:
            self._add(word)

    @classmethod
    def load(cls, path: Path | None = None) -> VocabularyDeck:
        """
        Load a deck from a JSON file.

        Args:
            path: Vocabulary file (bundled sample deck if None)

        Returns:
            VocabularyDeck in file order

        Raises:
            VocabularyError: File missing, not JSON, or holding invalid entries
        """
        try:
            if path is None:
                text = resources.files("deutschmeister.data").joinpath(cls.BUNDLED).read_text(encoding="utf-8")
                source = f"<bundled {cls.BUNDLED}>"
            else:
                text = Path(path).read_text(encoding="utf-8")
                source = str(path)
        except OSError as exc:
            raise VocabularyError(f"Cannot read vocabulary file {path}: {exc}") from exc

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise VocabularyError(f"Vocabulary file {source} is not valid JSON: {exc}") from exc

        if isinstance(raw, dict):
            raw = raw.get("words")
        if not isinstance(raw, list):
            raise VocabularyError(f"Vocabulary file {source} must contain a list of words")

        deck = cls([Word.from_dict(entry) for entry in raw])
        logger.info(f"Loaded {len(deck)} words from {source}")
        return deck

    def _add(self, word: Word) -> None:
        if word.id in self._words:
            logger.warning(f"Duplicate word id {word.id!r} ignored")
            return
        self._words[word.id] = word

    def __len__(self) -> int:
        return len(self._words)

    def __iter__(self) -> Iterator[Word]:
        return iter(self._words.values())

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._words

    def ids(self) -> list[str]:
        """All word ids in deck order."""
        return list(self._words)

    def get(self, item_id: str) -> Word | None:
        return self._words.get(item_id)

    def get_by_ids(self, ids: list[str]) -> list[Word]:
        """Words for ids, in the order given. Unknown ids are skipped."""
        return [self._words[i] for i in ids if i in self._words]
