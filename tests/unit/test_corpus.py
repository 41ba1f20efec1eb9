"""Unit tests for corpus seed documents."""

import json

import pytest

from wordledger.core.exceptions import CorpusError
from wordledger.db.corpus import Corpus, load_corpus


class TestLoadCorpus:
    def test_loads_valid_file(self, tmp_path):
        path = tmp_path / "corpus.json"
        path.write_text(
            json.dumps({"levels": [{"name": "A", "items": [{"prompt": "p", "answer": "a"}]}]}),
            encoding="utf-8",
        )
        corpus = load_corpus(path)
        assert corpus.item_count == 1
        assert corpus.levels[0].parent is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(CorpusError, match="not found"):
            load_corpus(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "corpus.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CorpusError, match="not valid JSON"):
            load_corpus(path)

    def test_empty_answer_rejected(self, tmp_path):
        path = tmp_path / "corpus.json"
        path.write_text(
            json.dumps({"levels": [{"name": "A", "items": [{"prompt": "p", "answer": ""}]}]}),
            encoding="utf-8",
        )
        with pytest.raises(CorpusError):
            load_corpus(path)


class TestCorpusValidation:
    def test_parent_must_come_first(self):
        with pytest.raises(ValueError):
            Corpus.model_validate({"levels": [{"name": "Unit", "parent": "Grade"}, {"name": "Grade"}]})

    def test_duplicate_level_names_rejected(self):
        with pytest.raises(ValueError):
            Corpus.model_validate({"levels": [{"name": "A"}, {"name": "A"}]})


class TestSeeding:
    def test_seed_once(self, store, sample_corpus):
        created = store.run_in_transaction(lambda tx: store.seed_corpus(sample_corpus, tx))
        again = store.run_in_transaction(lambda tx: store.seed_corpus(sample_corpus, tx))

        assert created == 7
        assert again == 0
        assert len(store.run_in_transaction(store.list_items)) == 7

    def test_levels_keep_hierarchy(self, seeded_store):
        levels = seeded_store.run_in_transaction(seeded_store.list_levels)
        assert [level.name for level in levels] == ["Grade 1", "Unit 1", "Unit 2"]
        assert levels[0].is_parent
        assert levels[1].parent_id == levels[0].id
