"""
Distractor Generator for 4-choice quizzes.

Wrong answers are sampled from the same level first and topped up from the
whole corpus. Candidates are shuffled before truncation so repeated quizzes
on one item do not always show the same distractors. When the corpus holds
fewer distinct answers than options, the set is padded with a sentinel
placeholder instead of failing.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from wordledger.core.models import Item

SENTINEL_OPTION = "---"
OPTION_COUNT = 4


@dataclass(frozen=True)
class QuizOptions:
    """Shuffled options and the position of the correct answer."""

    options: tuple[str, ...]
    correct_index: int
    padding: int = 0  # sentinel placeholders among the options

    @property
    def correct_answer(self) -> str:
        return self.options[self.correct_index]


def _answer_of(item: Item, reverse: bool) -> str:
    return item.prompt if reverse else item.answer


def _sentinel_for(known_answers: set[str]) -> str:
    """The placeholder, lengthened until it collides with no real answer."""
    sentinel = SENTINEL_OPTION
    while sentinel in known_answers:
        sentinel += "-"
    return sentinel


def can_generate_quiz(pool: Iterable[Item], reverse: bool = False) -> bool:
    """True when the pool has enough distinct answers for an unpadded quiz."""
    return len({_answer_of(item, reverse) for item in pool}) >= OPTION_COUNT


def generate_options(
    correct_item: Item,
    same_level_pool: Sequence[Item],
    global_pool: Sequence[Item] = (),
    *,
    reverse: bool = False,
    rng: random.Random | None = None,
    candidate_limit: int = 10,
    distractor_count: int = OPTION_COUNT - 1,
) -> QuizOptions:
    """
    Build the option set for ``correct_item``.

    Args:
        correct_item: The item being quizzed
        same_level_pool: Items of the same level (preferred distractors)
        global_pool: Items of the whole corpus (fallback distractors)
        reverse: Quiz the prompt text instead of the answer text
        rng: Random source (module-level random if None)
        candidate_limit: Same-level candidates kept after shuffling
        distractor_count: Wrong answers to include

    Returns:
        QuizOptions with ``distractor_count + 1`` options; never raises on a
        small corpus.
    """
    rng = rng or random.Random()
    correct = _answer_of(correct_item, reverse)

    def eligible(pool: Sequence[Item]) -> list[str]:
        return [
            _answer_of(item, reverse)
            for item in pool
            if item.id != correct_item.id and _answer_of(item, reverse) != correct
        ]

    # 1. Same-level candidates, shuffled then truncated
    candidates = eligible(same_level_pool)
    rng.shuffle(candidates)
    candidates = candidates[:candidate_limit]

    wrong: list[str] = []
    for answer in candidates:
        if answer not in wrong:
            wrong.append(answer)

    # 2. Top up from the whole corpus
    if len(wrong) < distractor_count:
        fallback = [answer for answer in eligible(global_pool) if answer not in wrong]
        rng.shuffle(fallback)
        for answer in fallback:
            if len(wrong) >= distractor_count:
                break
            if answer not in wrong:
                wrong.append(answer)

    # 3. Exactly distractor_count wrong answers, padded on degenerate corpora
    wrong = wrong[:distractor_count]
    padding = distractor_count - len(wrong)
    if padding:
        known = {correct}
        known.update(_answer_of(item, reverse) for item in same_level_pool)
        known.update(_answer_of(item, reverse) for item in global_pool)
        wrong.extend([_sentinel_for(known)] * padding)

    # 4. Shuffle in the correct answer
    options = [*wrong, correct]
    rng.shuffle(options)
    return QuizOptions(options=tuple(options), correct_index=options.index(correct), padding=padding)
