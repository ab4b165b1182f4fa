"""
Unit tests for the vocabulary deck loader.
"""

import json

import pytest

from deutschmeister.errors import VocabularyError
from deutschmeister.vocabulary import StudyMode, VocabularyDeck, Word, WordType


class TestWord:
    def test_from_dict_noun_with_gender(self, sample_words):
        word = Word.from_dict(sample_words[0])
        assert word.word_type is WordType.NOUN
        assert word.gender == "der"
        assert word.german_display == "der Hund"

    def test_gender_dropped_for_non_nouns(self):
        word = Word.from_dict({"id": "x", "german": "gehen", "spanish": "ir", "type": "verb", "gender": "der"})
        assert word.gender is None

    def test_invalid_gender_dropped(self):
        word = Word.from_dict({"id": "x", "german": "Hund", "spanish": "perro", "type": "noun", "gender": "le"})
        assert word.gender is None

    def test_unknown_type_is_other(self):
        word = Word.from_dict({"id": "x", "german": "ja", "spanish": "sí", "type": "interjection"})
        assert word.word_type is WordType.OTHER

    @pytest.mark.parametrize("missing", ["id", "german", "spanish"])
    def test_required_fields(self, sample_words, missing):
        data = dict(sample_words[1])
        del data[missing]
        with pytest.raises(VocabularyError):
            Word.from_dict(data)

    def test_prompt_and_answer_follow_mode(self, sample_words):
        word = Word.from_dict(sample_words[2])

        assert word.prompt(StudyMode.DE_ES) == "das Haus"
        assert word.answer(StudyMode.DE_ES) == "casa"
        assert word.prompt(StudyMode.ES_DE) == "casa"
        assert word.answer(StudyMode.ES_DE) == "das Haus"
        assert word.example(StudyMode.ES_DE) == ("La casa es grande.", "Das Haus ist groß.")

    def test_example_needs_both_sides(self, sample_words):
        assert Word.from_dict(sample_words[0]).example(StudyMode.DE_ES) is None


class TestVocabularyDeck:
    def test_load_list_keeps_file_order(self, tmp_path, sample_words):
        path = tmp_path / "words.json"
        path.write_text(json.dumps(list(reversed(sample_words))), encoding="utf-8")

        deck = VocabularyDeck.load(path)

        assert deck.ids() == ["w3", "w2", "w1"]
        assert len(deck) == 3
        assert "w2" in deck

    def test_load_words_object(self, tmp_path, sample_words):
        path = tmp_path / "words.json"
        path.write_text(json.dumps({"words": sample_words}), encoding="utf-8")
        assert VocabularyDeck.load(path).ids() == ["w1", "w2", "w3"]

    def test_duplicate_ids_keep_first(self, sample_words):
        duplicate = {"id": "w1", "german": "Katze", "spanish": "gato"}
        deck = VocabularyDeck([Word.from_dict(d) for d in [*sample_words, duplicate]])

        assert len(deck) == 3
        assert deck.get("w1").german == "Hund"

    def test_get_by_ids_preserves_requested_order(self, sample_words):
        deck = VocabularyDeck([Word.from_dict(d) for d in sample_words])
        words = deck.get_by_ids(["w3", "unknown", "w1"])
        assert [w.id for w in words] == ["w3", "w1"]

    def test_bundled_deck_loads(self):
        deck = VocabularyDeck.load()
        assert len(deck) > 0
        assert all(isinstance(word, Word) for word in deck)

    def test_missing_file(self, tmp_path):
        with pytest.raises(VocabularyError):
            VocabularyDeck.load(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "words.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(VocabularyError):
            VocabularyDeck.load(path)

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "words.json"
        path.write_text(json.dumps({"items": []}), encoding="utf-8")
        with pytest.raises(VocabularyError):
            VocabularyDeck.load(path)
