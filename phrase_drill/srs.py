"""Leitner spaced repetition and due-item selection.

Five levels, each with a fixed interval in days. A correct review promotes
one level (level 5 is a plateau), an incorrect review drops back to level 1.
Due dates fall on local midnight; an item is due for the whole calendar day
its due date lands on.

Day arithmetic is done on calendar dates, so a due date stays on midnight
when a daylight-saving change falls inside the interval.

The transition functions are pure: they take ``now`` explicitly and return a
new LearningItem, leaving the input untouched.
"""
from __future__ import annotations

import logging
import warnings
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import date, datetime, time, timedelta, timezone
from typing import TYPE_CHECKING

from phrase_drill.errors import DataRepairWarning
from phrase_drill.models import LearningItem

if TYPE_CHECKING:
    from phrase_drill.db import Database

_log = logging.getLogger("phrase_drill.srs")

LEITNER_INTERVALS: dict[int, int] = {
    1: 0,   # same day
    2: 1,
    3: 3,
    4: 7,
    5: 15,
}
MIN_LEVEL = 1
MAX_LEVEL = 5


def local_now() -> datetime:
    """The current local time, carrying the UTC offset in effect right now."""
    return datetime.now().astimezone()


def _is_system_local(moment: datetime) -> bool:
    # datetime.astimezone() yields a fixed offset; treat a matching one as local time
    return (
        isinstance(moment.tzinfo, timezone)
        and moment.utcoffset() == moment.astimezone().utcoffset()
    )


def midnight_on(day: date, like: datetime) -> datetime:
    """Midnight starting *day*, in the timezone of *like*.

    When *like* is system local time with a fixed offset, the result carries
    the offset in effect on *day*, which differs across a DST change.
    """
    if _is_system_local(like):
        return datetime.combine(day, time()).astimezone()
    return datetime.combine(day, time(), tzinfo=like.tzinfo)


def start_of_day(moment: datetime) -> datetime:
    """Midnight at the start of *moment*'s calendar day, in its own timezone."""
    return midnight_on(moment.date(), moment)


def end_of_day(moment: datetime) -> datetime:
    """Last representable instant of *moment*'s calendar day."""
    return midnight_on(moment.date() + timedelta(days=1), moment) - timedelta(microseconds=1)


def interval_days(level: int) -> int:
    return LEITNER_INTERVALS[level]


def next_due_at(level: int, now: datetime) -> datetime:
    return midnight_on(now.date() + timedelta(days=interval_days(level)), now)


def repair_level(level: int, item_id: str | None = None) -> int:
    """Clamp a level into [1, 5], warning when a repair was needed.

    Out-of-range levels only come from corrupted or hand-edited data; the
    review must still go ahead, so this warns instead of raising.
    """
    if MIN_LEVEL <= level <= MAX_LEVEL:
        return level
    repaired = max(MIN_LEVEL, min(MAX_LEVEL, level))
    _log.warning("Item %s had level %s, clamped to %d", item_id, level, repaired)
    warnings.warn(
        f"item {item_id}: level {level} outside [{MIN_LEVEL}, {MAX_LEVEL}], "
        f"clamped to {repaired}",
        DataRepairWarning,
        stacklevel=3,
    )
    return repaired


def new_item(item_id: str, now: datetime, **content) -> LearningItem:
    """A fresh item at level 1, due immediately."""
    return LearningItem(
        id=item_id,
        next_due_at=next_due_at(MIN_LEVEL, now),
        level=MIN_LEVEL,
        **content,
    )


def on_correct(item: LearningItem, now: datetime) -> LearningItem:
    level = min(repair_level(item.level, item.id) + 1, MAX_LEVEL)
    return replace(
        item,
        level=level,
        last_reviewed_at=now,
        next_due_at=next_due_at(level, now),
    )


def on_incorrect(item: LearningItem, now: datetime) -> LearningItem:
    repair_level(item.level, item.id)
    return replace(
        item,
        level=MIN_LEVEL,
        last_reviewed_at=now,
        next_due_at=next_due_at(MIN_LEVEL, now),
        error_count=item.error_count + 1,
    )


def apply_review(item: LearningItem, correct: bool, now: datetime) -> LearningItem:
    return on_correct(item, now) if correct else on_incorrect(item, now)


# ── Due selection ────────────────────────────────────────────────────────

def is_due(item: LearningItem, now: datetime) -> bool:
    return item.next_due_at <= end_of_day(now)


def in_group(group_id: str) -> Callable[[LearningItem], bool]:
    """Scope filter: items belonging to *group_id*."""
    return lambda item: item.group_id == group_id


def due_items(
    items: Iterable[LearningItem],
    now: datetime,
    scope_filter: Callable[[LearningItem], bool] | None = None,
) -> list[LearningItem]:
    """Items due by the end of *now*'s day, in their original order.

    Neither sorts nor deduplicates; shuffling is left to the caller.
    """
    return [
        item for item in items
        if (scope_filter is None or scope_filter(item)) and is_due(item, now)
    ]


# ── Repository helper ────────────────────────────────────────────────────

def record_review(
    db: Database,
    item_id: str,
    correct: bool,
    now: datetime | None = None,
) -> dict:
    """Apply a review verdict to a stored item and persist the result.

    Returns {"item_id", "correct", "previous_level", "level", "next_due_at",
             "error_count", "repaired"}.
    Raises KeyError for an unknown item.
    """
    item = db.get_item(item_id)
    if item is None:
        raise KeyError(item_id)
    if now is None:
        now = local_now()

    repaired = not MIN_LEVEL <= item.level <= MAX_LEVEL
    updated = apply_review(item, correct, now)
    db.save_item(updated)

    return {
        "item_id": item_id,
        "correct": correct,
        "previous_level": item.level,
        "level": updated.level,
        "next_due_at": updated.next_due_at.isoformat(),
        "error_count": updated.error_count,
        "repaired": repaired,
    }
