"""Shared test fixtures."""
from __future__ import annotations

import os
import time
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pytest

from phrase_drill.db import Database
from phrase_drill.models import LearningItem

# Local wall-clock times a few days before a DST change in each zone.
DST_CASES = [
    ("Europe/Berlin", datetime(2024, 10, 25, 15, 0)),     # clocks go back Oct 27
    ("Europe/Berlin", datetime(2024, 3, 28, 15, 0)),      # clocks go forward Mar 31
    ("America/New_York", datetime(2024, 11, 1, 15, 0)),   # clocks go back Nov 3
]


@pytest.fixture
def now():
    """A fixed mid-afternoon timestamp, so day boundaries are unambiguous."""
    return datetime(2024, 3, 14, 15, 30, tzinfo=timezone.utc)


@pytest.fixture
def midnight(now):
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


@pytest.fixture(params=DST_CASES, ids=lambda case: f"{case[0]}-{case[1]:%m%d}")
def dst_zone(request):
    """Switch the process timezone to a DST zone; yields (zone, local wall time)."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset() is not available on this platform")
    name, wall = request.param
    try:
        zone = ZoneInfo(name)
    except ZoneInfoNotFoundError:
        pytest.skip(f"no tz database entry for {name}")

    previous = os.environ.get("TZ")
    os.environ["TZ"] = name
    time.tzset()
    yield zone, wall
    if previous is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = previous
    time.tzset()


@pytest.fixture(params=["zoneinfo", "system"])
def local_clock(request, dst_zone):
    """Turns a naive local wall time into an aware one.

    "zoneinfo" attaches the ZoneInfo zone; "system" produces what
    ``datetime.now().astimezone()`` returns, a fixed offset for that instant.
    """
    zone, _ = dst_zone
    if request.param == "zoneinfo":
        return lambda wall: wall.replace(tzinfo=zone)
    return lambda wall: wall.astimezone()


@pytest.fixture
def dst_now(dst_zone, local_clock):
    _, wall = dst_zone
    return local_clock(wall)


@pytest.fixture
def tmp_db(tmp_path):
    """Create a fresh temporary database."""
    db = Database(tmp_path / "test.db")
    yield db
    db.close()


@pytest.fixture
def make_item(midnight):
    """Factory for in-memory items; due today at level 1 unless told otherwise."""
    def _make(item_id="item", level=1, due_in_days=0, error_count=0, group_id=None):
        return LearningItem(
            id=item_id,
            next_due_at=midnight + timedelta(days=due_in_days),
            level=level,
            error_count=error_count,
            group_id=group_id,
        )
    return _make


@pytest.fixture
def populated_db(tmp_db, now):
    """Two groups with a few items each, all created (and due) today."""
    travel = tmp_db.add_group("Travel", now=now)
    food = tmp_db.add_group("Food", now=now)
    tmp_db.add_item("Onde fica o hotel?", "Where is the hotel?", travel.id, now=now)
    tmp_db.add_item("Eu preciso estudar todo dia.", "I need to study every day.", travel.id, now=now)
    tmp_db.add_item("Eu gosto de pão.", "I like bread.", food.id, now=now)
    tmp_db.add_item("Obrigado", "Thank you", now=now)
    return tmp_db
