"""
Quiz Module.

Builds 4-choice option sets from the vocabulary corpus.
"""

from wordledger.quiz.distractors import (
    OPTION_COUNT,
    SENTINEL_OPTION,
    QuizOptions,
    can_generate_quiz,
    generate_options,
)

__all__ = [
    "OPTION_COUNT",
    "SENTINEL_OPTION",
    "QuizOptions",
    "can_generate_quiz",
    "generate_options",
]
