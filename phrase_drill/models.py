from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class WordStatus(str, Enum):
    CORRECT = "correct"
    APPROXIMATE = "approximate"
    MISSING = "missing"


@dataclass
class Group:
    id: str
    name: str
    created_at: datetime | None = None


@dataclass
class LearningItem:
    id: str
    next_due_at: datetime
    level: int = 1  # 1-5 (Leitner box)
    last_reviewed_at: datetime | None = None
    error_count: int = 0
    # Content owned by the repository; the scheduler never touches these
    group_id: str | None = None
    prompt: str = ""
    answer: str = ""
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "group_id": self.group_id,
            "prompt": self.prompt,
            "answer": self.answer,
            "level": self.level,
            "last_reviewed_at": _iso(self.last_reviewed_at),
            "next_due_at": _iso(self.next_due_at),
            "error_count": self.error_count,
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class SimilarityResult:
    is_exact_match: bool
    is_acceptable: bool
    similarity_percent: int  # 0-100
    user_answer: str = ""  # lower-cased, trimmed
    correct_answer: str = ""

    def to_dict(self) -> dict:
        return {
            "is_exact_match": self.is_exact_match,
            "is_acceptable": self.is_acceptable,
            "similarity_percent": self.similarity_percent,
            "user_answer": self.user_answer,
            "correct_answer": self.correct_answer,
        }


@dataclass(frozen=True)
class WordVerdict:
    word: str
    status: WordStatus


@dataclass(frozen=True)
class AlignmentResult:
    words: tuple[WordVerdict, ...] = field(default_factory=tuple)
    accuracy_percent: int = 100  # 0-100

    def to_dict(self) -> dict:
        return {
            "words": [{"word": w.word, "status": w.status.value} for w in self.words],
            "accuracy_percent": self.accuracy_percent,
        }


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
