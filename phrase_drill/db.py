from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path

from phrase_drill.models import Group, LearningItem
from phrase_drill.srs import LEITNER_INTERVALS, due_items, in_group, local_now, new_item

_log = logging.getLogger("phrase_drill.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS groups (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS items (
    id TEXT PRIMARY KEY,
    group_id TEXT REFERENCES groups(id),
    prompt TEXT NOT NULL DEFAULT '',
    answer TEXT NOT NULL DEFAULT '',
    level INTEGER NOT NULL DEFAULT 1,
    last_reviewed_at TEXT,
    next_due_at TEXT NOT NULL,
    error_count INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_items_group ON items(group_id);
"""


def _parse(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _row_to_item(row: sqlite3.Row) -> LearningItem:
    return LearningItem(
        id=row["id"],
        next_due_at=datetime.fromisoformat(row["next_due_at"]),
        level=row["level"],
        last_reviewed_at=_parse(row["last_reviewed_at"]),
        error_count=row["error_count"],
        group_id=row["group_id"],
        prompt=row["prompt"],
        answer=row["answer"],
        created_at=_parse(row["created_at"]),
    )


class Database:
    """SQLite-backed repository of groups and learning items.

    Scheduling decisions live in :mod:`phrase_drill.srs`; this class only
    loads and stores the resulting fields.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self._init_schema()

    def _init_schema(self) -> None:
        self.conn.executescript(SCHEMA)
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()

    # ── Groups ────────────────────────────────────────────────────────────

    def add_group(self, name: str, now: datetime | None = None) -> Group:
        group = Group(id=uuid.uuid4().hex, name=name, created_at=now or local_now())
        self.conn.execute(
            "INSERT INTO groups (id, name, created_at) VALUES (?, ?, ?)",
            (group.id, group.name, group.created_at.isoformat()),
        )
        self.conn.commit()
        return group

    def get_group(self, group_id: str) -> Group | None:
        row = self.conn.execute(
            "SELECT * FROM groups WHERE id = ?", (group_id,)
        ).fetchone()
        if row is None:
            return None
        return Group(id=row["id"], name=row["name"], created_at=_parse(row["created_at"]))

    def get_all_groups(self) -> list[Group]:
        rows = self.conn.execute("SELECT * FROM groups ORDER BY rowid").fetchall()
        return [
            Group(id=r["id"], name=r["name"], created_at=_parse(r["created_at"]))
            for r in rows
        ]

    def rename_group(self, group_id: str, name: str) -> bool:
        cur = self.conn.execute(
            "UPDATE groups SET name = ? WHERE id = ?", (name, group_id)
        )
        self.conn.commit()
        return cur.rowcount > 0

    def delete_group(self, group_id: str) -> int:
        """Remove a group and every item in it. Returns the number of items removed."""
        cur = self.conn.execute("DELETE FROM items WHERE group_id = ?", (group_id,))
        removed = cur.rowcount
        self.conn.execute("DELETE FROM groups WHERE id = ?", (group_id,))
        self.conn.commit()
        _log.info("Deleted group %s (%d items)", group_id, removed)
        return removed

    # ── Items ─────────────────────────────────────────────────────────────

    def add_item(
        self,
        prompt: str,
        answer: str,
        group_id: str | None = None,
        now: datetime | None = None,
    ) -> LearningItem:
        """Create an item at level 1, due immediately."""
        now = now or local_now()
        item = new_item(
            uuid.uuid4().hex,
            now,
            group_id=group_id,
            prompt=prompt,
            answer=answer,
            created_at=now,
        )
        self.conn.execute(
            "INSERT INTO items "
            "(id, group_id, prompt, answer, level, last_reviewed_at, next_due_at, "
            "error_count, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                item.id,
                item.group_id,
                item.prompt,
                item.answer,
                item.level,
                None,
                item.next_due_at.isoformat(),
                item.error_count,
                now.isoformat(),
            ),
        )
        self.conn.commit()
        return item

    def get_item(self, item_id: str) -> LearningItem | None:
        row = self.conn.execute(
            "SELECT * FROM items WHERE id = ?", (item_id,)
        ).fetchone()
        return _row_to_item(row) if row else None

    def get_items(self, group_id: str | None = None) -> list[LearningItem]:
        """All items (optionally one group's), in insertion order."""
        if group_id is None:
            rows = self.conn.execute("SELECT * FROM items ORDER BY rowid").fetchall()
        else:
            rows = self.conn.execute(
                "SELECT * FROM items WHERE group_id = ? ORDER BY rowid", (group_id,)
            ).fetchall()
        return [_row_to_item(r) for r in rows]

    def get_item_count(self) -> int:
        row = self.conn.execute("SELECT COUNT(*) FROM items").fetchone()
        return row[0]

    def save_item(self, item: LearningItem) -> None:
        """Store the scheduling fields of an existing item."""
        cur = self.conn.execute(
            "UPDATE items SET level=?, last_reviewed_at=?, next_due_at=?, error_count=? "
            "WHERE id=?",
            (
                item.level,
                item.last_reviewed_at.isoformat() if item.last_reviewed_at else None,
                item.next_due_at.isoformat(),
                item.error_count,
                item.id,
            ),
        )
        self.conn.commit()
        if cur.rowcount == 0:
            raise KeyError(item.id)

    def update_item(
        self,
        item_id: str,
        prompt: str | None = None,
        answer: str | None = None,
    ) -> LearningItem | None:
        """Edit an item's text. Scheduling fields and history are left alone.

        Returns the updated item, or None if *item_id* is unknown.
        """
        item = self.get_item(item_id)
        if item is None:
            return None
        if prompt is not None:
            item.prompt = prompt
        if answer is not None:
            item.answer = answer
        self.conn.execute(
            "UPDATE items SET prompt = ?, answer = ? WHERE id = ?",
            (item.prompt, item.answer, item_id),
        )
        self.conn.commit()
        return item

    def delete_item(self, item_id: str) -> bool:
        cur = self.conn.execute("DELETE FROM items WHERE id = ?", (item_id,))
        self.conn.commit()
        return cur.rowcount > 0

    # ── Review worklists ─────────────────────────────────────────────────

    def get_due_items(
        self, group_id: str | None = None, now: datetime | None = None
    ) -> list[LearningItem]:
        scope = in_group(group_id) if group_id is not None else None
        return due_items(self.get_items(), now or local_now(), scope)

    def get_due_count(self, group_id: str | None = None, now: datetime | None = None) -> int:
        return len(self.get_due_items(group_id, now))

    def get_groups_with_review_count(self, now: datetime | None = None) -> list[dict]:
        """Per-group due and total counts, in group creation order."""
        now = now or local_now()
        items = self.get_items()
        result = []
        for group in self.get_all_groups():
            group_items = [i for i in items if i.group_id == group.id]
            result.append({
                "group_id": group.id,
                "name": group.name,
                "review_count": len(due_items(group_items, now)),
                "total_items": len(group_items),
            })
        return result

    def get_stats(self, now: datetime | None = None) -> dict:
        now = now or local_now()
        items = self.get_items()
        by_level = {level: 0 for level in LEITNER_INTERVALS}
        for item in items:
            if item.level in by_level:
                by_level[item.level] += 1
        reviewed = sum(1 for i in items if i.last_reviewed_at is not None)

        return {
            "total_items": len(items),
            "total_groups": len(self.get_all_groups()),
            "items_due": len(due_items(items, now)),
            "items_reviewed": reviewed,
            "items_new": len(items) - reviewed,
            "items_by_level": by_level,
            "total_errors": sum(i.error_count for i in items),
        }
