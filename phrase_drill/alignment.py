"""Word-level grading of a spoken utterance against a reference phrase.

Greedy, left-to-right: each expected word takes the best remaining spoken
word and consumes it, so one spoken word is never credited twice. The
assignment is not globally optimal; a spoken word that would fit a later
expected word better can be taken early.
"""
from __future__ import annotations

import math
from collections.abc import Iterable

from phrase_drill.errors import ValidationError
from phrase_drill.models import AlignmentResult, WordStatus, WordVerdict
from phrase_drill.normalize import normalize
from phrase_drill.similarity import similarity, to_percent

DEFAULT_CORRECT_THRESHOLD = 0.9
DEFAULT_APPROXIMATE_THRESHOLD = 0.6

# Credit awarded per expected word
WEIGHTS = {
    WordStatus.CORRECT: 1.0,
    WordStatus.APPROXIMATE: 0.5,
    WordStatus.MISSING: 0.0,
}

# Line accuracy buckets for the results summary
GOOD_LINE_ACCURACY = 80
PARTIAL_LINE_ACCURACY = 50


def validate_word_thresholds(correct_threshold: float, approximate_threshold: float) -> None:
    for name, value in (
        ("correct_threshold", correct_threshold),
        ("approximate_threshold", approximate_threshold),
    ):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"{name} must be a number, got {type(value).__name__}")
        if not 0 <= value <= 1:
            raise ValidationError(f"{name} must be within [0, 1], got {value}")
    if approximate_threshold > correct_threshold:
        raise ValidationError(
            f"approximate_threshold ({approximate_threshold}) must not exceed "
            f"correct_threshold ({correct_threshold})"
        )


def _best_match(word: str, candidates: list[str]) -> tuple[int, float]:
    """Index and score of the most similar candidate; ties go to the first."""
    best_index, best_score = -1, -1.0
    for i, candidate in enumerate(candidates):
        score = similarity(word, candidate)
        if score > best_score:
            best_index, best_score = i, score
    return best_index, best_score


def align(
    expected_text: str,
    spoken_text: str,
    correct_threshold: float = DEFAULT_CORRECT_THRESHOLD,
    approximate_threshold: float = DEFAULT_APPROXIMATE_THRESHOLD,
) -> AlignmentResult:
    """Grade *spoken_text* against *expected_text* word by word.

    Empty expected text is vacuously satisfied (100%). Empty spoken text
    marks every expected word missing (0%).
    """
    validate_word_thresholds(correct_threshold, approximate_threshold)

    expected_words = normalize(expected_text).split()
    remaining = normalize(spoken_text).split()

    verdicts: list[WordVerdict] = []
    credit = 0.0
    for word in expected_words:
        index, score = _best_match(word, remaining)
        if index >= 0 and score >= correct_threshold:
            status = WordStatus.CORRECT
        elif index >= 0 and score >= approximate_threshold:
            status = WordStatus.APPROXIMATE
        else:
            status = WordStatus.MISSING

        if status is not WordStatus.MISSING:
            del remaining[index]
        credit += WEIGHTS[status]
        verdicts.append(WordVerdict(word, status))

    if not expected_words:
        return AlignmentResult(words=(), accuracy_percent=100)
    return AlignmentResult(
        words=tuple(verdicts),
        accuracy_percent=to_percent(credit / len(expected_words)),
    )


def summarize_attempts(results: Iterable[AlignmentResult]) -> dict:
    """Aggregate several graded lines (e.g. a karaoke run) into one summary.

    Returns {"attempts", "overall_accuracy", "good", "partial", "missed"}.
    """
    accuracies = [r.accuracy_percent for r in results]
    overall = int(math.floor(sum(accuracies) / len(accuracies) + 0.5)) if accuracies else 0
    return {
        "attempts": len(accuracies),
        "overall_accuracy": overall,
        "good": sum(1 for a in accuracies if a >= GOOD_LINE_ACCURACY),
        "partial": sum(
            1 for a in accuracies if PARTIAL_LINE_ACCURACY <= a < GOOD_LINE_ACCURACY
        ),
        "missed": sum(1 for a in accuracies if a < PARTIAL_LINE_ACCURACY),
    }
