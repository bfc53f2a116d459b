"""Typed-answer grading: exact match first, fuzzy acceptance second."""
from __future__ import annotations

from phrase_drill.errors import ValidationError
from phrase_drill.models import SimilarityResult
from phrase_drill.similarity import similarity, to_percent

DEFAULT_THRESHOLD_PERCENT = 85


def validate_threshold_percent(threshold_percent: int | float) -> None:
    if isinstance(threshold_percent, bool) or not isinstance(threshold_percent, (int, float)):
        raise ValidationError(
            f"threshold_percent must be a number, got {type(threshold_percent).__name__}"
        )
    if not 0 <= threshold_percent <= 100:
        raise ValidationError(
            f"threshold_percent must be within [0, 100], got {threshold_percent}"
        )


def evaluate(
    user_answer: str,
    correct_answer: str,
    threshold_percent: int = DEFAULT_THRESHOLD_PERCENT,
) -> SimilarityResult:
    """Compare a typed answer with the expected one.

    Only case and surrounding whitespace are normalised here; contractions are
    left alone because exact phrase equality is the primary criterion for
    short answers. Raises ValidationError for a threshold outside [0, 100].
    """
    validate_threshold_percent(threshold_percent)

    normalized_user = user_answer.lower().strip()
    normalized_correct = correct_answer.lower().strip()

    percent = to_percent(similarity(normalized_user, normalized_correct))
    return SimilarityResult(
        is_exact_match=normalized_user == normalized_correct,
        is_acceptable=percent >= threshold_percent,
        similarity_percent=percent,
        user_answer=normalized_user,
        correct_answer=normalized_correct,
    )


def is_answer_acceptable(
    user_answer: str,
    correct_answer: str,
    threshold_percent: int = DEFAULT_THRESHOLD_PERCENT,
) -> bool:
    return evaluate(user_answer, correct_answer, threshold_percent).is_acceptable
