"""
Unit tests for the distractor generator.

Tests:
- 4 distinct options with the correct answer exactly once
- Same-level preference with corpus-wide fallback
- Sentinel padding on degenerate corpora
"""

import random

import pytest

from wordledger.core.models import Item
from wordledger.quiz.distractors import (
    SENTINEL_OPTION,
    can_generate_quiz,
    generate_options,
)


def make_items(answers, level_id=1, start_id=1):
    return [
        Item(id=start_id + i, level_id=level_id, prompt=f"word{start_id + i}", answer=answer)
        for i, answer in enumerate(answers)
    ]


@pytest.fixture
def level_items():
    return make_items(["one", "two", "three", "four", "five", "six"])


class TestGenerateOptions:
    @pytest.mark.parametrize("seed", range(20))
    def test_four_distinct_options_with_correct_once(self, level_items, seed):
        correct = level_items[0]
        result = generate_options(correct, level_items, level_items, rng=random.Random(seed))

        assert len(result.options) == 4
        assert len(set(result.options)) == 4
        assert result.options.count(correct.answer) == 1
        assert result.options[result.correct_index] == correct.answer
        assert result.padding == 0

    def test_prefers_same_level_answers(self, level_items):
        other_level = make_items(["x", "y", "z"], level_id=2, start_id=100)
        result = generate_options(
            level_items[0], level_items, level_items + other_level, rng=random.Random(1)
        )
        assert not {"x", "y", "z"} & set(result.options)

    def test_falls_back_to_global_pool(self):
        same_level = make_items(["one", "two"])
        other_level = make_items(["x", "y", "z"], level_id=2, start_id=100)
        result = generate_options(
            same_level[0], same_level, same_level + other_level, rng=random.Random(3)
        )

        assert "two" in result.options
        assert len(set(result.options) & {"x", "y", "z"}) == 2
        assert result.padding == 0

    def test_excludes_items_sharing_the_correct_answer(self):
        items = make_items(["same", "same", "a", "b", "c"])
        for seed in range(10):
            result = generate_options(items[0], items, items, rng=random.Random(seed))
            assert result.options.count("same") == 1

    def test_duplicate_answers_are_collapsed(self):
        items = make_items(["right", "dup", "dup", "dup", "other", "third"])
        result = generate_options(items[0], items, items, rng=random.Random(0))
        assert len(set(result.options)) == 4

    def test_reverse_uses_prompt_text(self, level_items):
        result = generate_options(level_items[0], level_items, level_items, reverse=True, rng=random.Random(0))
        assert result.correct_answer == level_items[0].prompt
        assert all(option.startswith("word") for option in result.options)

    def test_candidate_limit_is_applied_after_shuffle(self):
        items = make_items([f"answer{i}" for i in range(40)])
        seen = set()
        for seed in range(30):
            result = generate_options(items[0], items, rng=random.Random(seed), candidate_limit=10)
            seen.update(result.options)
        # Shuffling before truncation lets every part of the level show up
        assert len(seen) > 12


class TestDegenerateCorpus:
    def test_two_distinct_answers_are_padded(self):
        items = make_items(["yes", "no"])
        result = generate_options(items[0], items, items, rng=random.Random(0))

        assert len(result.options) == 4
        assert result.options[result.correct_index] == "yes"
        assert "no" in result.options
        assert result.options.count(SENTINEL_OPTION) == 2
        assert result.padding == 2

    def test_single_item_corpus_never_raises(self):
        items = make_items(["lonely"])
        result = generate_options(items[0], items, items)
        assert len(result.options) == 4
        assert result.padding == 3

    def test_empty_pools(self):
        item = make_items(["solo"])[0]
        result = generate_options(item, [], [])
        assert result.correct_answer == "solo"
        assert len(result.options) == 4

    def test_sentinel_never_equals_a_real_answer(self):
        items = make_items([SENTINEL_OPTION, "real"])
        result = generate_options(items[1], items, items, rng=random.Random(0))

        assert result.options.count(SENTINEL_OPTION) == 1  # the genuine answer
        padded = [option for option in result.options if option not in {SENTINEL_OPTION, "real"}]
        assert padded and all(option != SENTINEL_OPTION for option in padded)


class TestCanGenerateQuiz:
    def test_requires_four_distinct_answers(self):
        assert can_generate_quiz(make_items(["a", "b", "c", "d"]))
        assert not can_generate_quiz(make_items(["a", "b", "c", "c"]))
