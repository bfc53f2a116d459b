"""FastAPI application exposing grading and scheduling over HTTP."""
from __future__ import annotations

import logging

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from phrase_drill.alignment import align, summarize_attempts
from phrase_drill.config import Settings, load_settings, save_settings
from phrase_drill.db import Database
from phrase_drill.errors import ValidationError
from phrase_drill.evaluator import evaluate
from phrase_drill.srs import record_review

app = FastAPI(title="Phrase Drill")

# Global state (initialized in startup)
_db: Database | None = None
_settings: Settings | None = None

_log = logging.getLogger("phrase_drill.api")


def get_db() -> Database:
    assert _db is not None
    return _db


def get_settings() -> Settings:
    assert _settings is not None
    return _settings


@app.on_event("startup")
async def startup():
    global _db, _settings
    if _db is not None:
        return  # Already initialized (e.g. by tests)
    _settings = load_settings()
    _db = Database(_settings.db_full_path)
    _log.info("Opened %s (%d items)", _settings.db_full_path, _db.get_item_count())


@app.on_event("shutdown")
async def shutdown():
    if _db:
        _db.close()


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    _log.warning("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def _require_fields(body, *names: str) -> None:
    if not isinstance(body, dict):
        raise HTTPException(422, "Expected a JSON object")
    missing = [n for n in names if n not in body]
    if missing:
        raise HTTPException(422, f"Missing field(s): {', '.join(missing)}")


def _require_strings(body, *names: str) -> None:
    _require_fields(body, *names)
    wrong = [n for n in names if not isinstance(body[n], str)]
    if wrong:
        raise HTTPException(422, f"Field(s) must be strings: {', '.join(wrong)}")


# ── API: Stats ────────────────────────────────────────────────────────────

@app.get("/api/stats")
async def api_stats():
    return get_db().get_stats()


# ── API: Grading ──────────────────────────────────────────────────────────

@app.post("/api/evaluate")
async def api_evaluate(request: Request):
    body = await request.json()
    _require_strings(body, "user_answer", "correct_answer")
    threshold = body.get("threshold_percent", get_settings().threshold_percent)
    result = evaluate(body["user_answer"], body["correct_answer"], threshold)
    return result.to_dict()


@app.post("/api/align")
async def api_align(request: Request):
    body = await request.json()
    _require_strings(body, "expected_text", "spoken_text")
    s = get_settings()
    result = align(
        body["expected_text"],
        body["spoken_text"],
        s.correct_threshold,
        s.approximate_threshold,
    )
    return result.to_dict()


@app.post("/api/align/summary")
async def api_align_summary(request: Request):
    """Grade a run of lines (e.g. a karaoke song) and summarise it."""
    body = await request.json()
    _require_fields(body, "attempts")
    if not isinstance(body["attempts"], list):
        raise HTTPException(422, "attempts must be a list")
    s = get_settings()
    results = []
    for attempt in body["attempts"]:
        _require_strings(attempt, "expected_text", "spoken_text")
        results.append(align(
            attempt["expected_text"],
            attempt["spoken_text"],
            s.correct_threshold,
            s.approximate_threshold,
        ))
    summary = summarize_attempts(results)
    summary["lines"] = [r.to_dict() for r in results]
    return summary


# ── API: Groups ───────────────────────────────────────────────────────────

@app.get("/api/groups")
async def api_groups():
    return get_db().get_groups_with_review_count()


@app.post("/api/groups")
async def api_create_group(request: Request):
    body = await request.json()
    _require_strings(body, "name")
    group = get_db().add_group(body["name"])
    return {"id": group.id, "name": group.name, "created_at": group.created_at.isoformat()}


@app.put("/api/groups/{group_id}")
async def api_rename_group(group_id: str, request: Request):
    body = await request.json()
    _require_strings(body, "name")
    if not get_db().rename_group(group_id, body["name"]):
        raise HTTPException(404, "Group not found")
    return {"id": group_id, "name": body["name"]}


@app.delete("/api/groups/{group_id}")
async def api_delete_group(group_id: str):
    db = get_db()
    if db.get_group(group_id) is None:
        raise HTTPException(404, "Group not found")
    return {"deleted": group_id, "items_removed": db.delete_group(group_id)}


# ── API: Items ────────────────────────────────────────────────────────────

@app.post("/api/items")
async def api_create_item(request: Request):
    body = await request.json()
    _require_strings(body, "prompt", "answer")
    db = get_db()
    group_id = body.get("group_id")
    if group_id is not None and db.get_group(group_id) is None:
        raise HTTPException(404, "Group not found")
    item = db.add_item(body["prompt"], body["answer"], group_id=group_id)
    return item.to_dict()


@app.get("/api/items")
async def api_items(group_id: str | None = None):
    return [i.to_dict() for i in get_db().get_items(group_id)]


@app.get("/api/items/due")
async def api_due_items(group_id: str | None = None):
    return [i.to_dict() for i in get_db().get_due_items(group_id)]


@app.get("/api/items/{item_id}")
async def api_item(item_id: str):
    item = get_db().get_item(item_id)
    if item is None:
        raise HTTPException(404, "Item not found")
    return item.to_dict()


@app.put("/api/items/{item_id}")
async def api_update_item(item_id: str, request: Request):
    """Edit an item's prompt and/or answer; its review schedule is kept."""
    body = await request.json()
    _require_fields(body)
    fields = [n for n in ("prompt", "answer") if n in body]
    if not fields:
        raise HTTPException(422, "Nothing to update: send prompt and/or answer")
    _require_strings(body, *fields)
    item = get_db().update_item(item_id, body.get("prompt"), body.get("answer"))
    if item is None:
        raise HTTPException(404, "Item not found")
    return item.to_dict()


@app.delete("/api/items/{item_id}")
async def api_delete_item(item_id: str):
    if not get_db().delete_item(item_id):
        raise HTTPException(404, "Item not found")
    return {"deleted": item_id}


@app.post("/api/items/{item_id}/review")
async def api_review_item(item_id: str, request: Request):
    body = await request.json()
    _require_fields(body, "correct")
    if not isinstance(body["correct"], bool):
        raise HTTPException(422, "correct must be true or false")
    try:
        return record_review(get_db(), item_id, body["correct"])
    except KeyError:
        raise HTTPException(404, "Item not found")


@app.post("/api/items/{item_id}/answer")
async def api_answer_item(item_id: str, request: Request):
    """Grade a typed answer against the item's answer, then schedule it."""
    body = await request.json()
    _require_strings(body, "user_answer")
    db = get_db()
    item = db.get_item(item_id)
    if item is None:
        raise HTTPException(404, "Item not found")

    verdict = evaluate(body["user_answer"], item.answer, get_settings().threshold_percent)
    review = record_review(db, item_id, verdict.is_acceptable)
    return {"evaluation": verdict.to_dict(), "review": review}


# ── API: Settings ─────────────────────────────────────────────────────────

@app.get("/api/settings")
async def api_get_settings():
    return get_settings().to_dict()


@app.put("/api/settings")
async def api_update_settings(request: Request):
    body = await request.json()
    _require_fields(body)
    s = get_settings()
    if "db_path" in body and body["db_path"] != s.db_path:
        # The open connection is not swapped at runtime
        raise HTTPException(422, "db_path can only be changed in config.json before startup")
    known = {f.name for f in Settings.__dataclass_fields__.values()}
    updated = Settings(**{**s.to_dict(), **{k: v for k, v in body.items() if k in known}})
    updated.validate()
    for k in known:
        setattr(s, k, getattr(updated, k))
    save_settings(s)
    return s.to_dict()
