"""
Corpus seed documents.

A corpus is a JSON document of levels, each holding prompt/answer items:

    {
        "levels": [
            {"name": "Grade 1"},
            {"name": "Unit 1", "parent": "Grade 1",
             "items": [{"prompt": "apple", "answer": "りんご"}]}
        ]
    }

A level's ``parent`` must name a level that appears earlier in the list.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, model_validator

from wordledger.core.exceptions import CorpusError


class CorpusItem(BaseModel):
    prompt: str = Field(min_length=1)
    answer: str = Field(min_length=1)


class CorpusLevel(BaseModel):
    name: str = Field(min_length=1)
    parent: str | None = None
    items: list[CorpusItem] = Field(default_factory=list)


class Corpus(BaseModel):
    levels: list[CorpusLevel] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_parents(self) -> Corpus:
        seen: set[str] = set()
        for level in self.levels:
            if level.name in seen:
                raise ValueError(f"Duplicate level name: {level.name!r}")
            if level.parent is not None and level.parent not in seen:
                raise ValueError(
                    f"Level {level.name!r} references unknown or later parent {level.parent!r}"
                )
            seen.add(level.name)
        return self

    @property
    def item_count(self) -> int:
        return sum(len(level.items) for level in self.levels)


def load_corpus(path: Path) -> Corpus:
    """
    Read and validate a corpus file.

    Raises:
        CorpusError: If the file is missing, not JSON, or fails validation
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise CorpusError(f"Corpus file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise CorpusError(f"Corpus file is not valid JSON: {e}") from e

    try:
        return Corpus.model_validate(data)
    except ValidationError as e:
        raise CorpusError(f"Invalid corpus {path.name}: {e}") from e
