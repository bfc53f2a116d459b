"""CLI entry point for phrase-drill.

Usage:
  python -m phrase_drill serve [--port PORT] [--host HOST]
  python -m phrase_drill stop
  python -m phrase_drill status
  python -m phrase_drill stats
  python -m phrase_drill due [--group GROUP_ID]
  python -m phrase_drill evaluate ANSWER EXPECTED [--threshold N]
  python -m phrase_drill align EXPECTED SPOKEN
"""
from __future__ import annotations

import os
import signal
import sys
from pathlib import Path

PID_FILE = Path(__file__).resolve().parent.parent / ".server.pid"

COMMANDS = ("serve", "stop", "status", "stats", "due", "evaluate", "align")


def main():
    args = sys.argv[1:]
    command = args[0] if args else "serve"

    if command == "serve":
        _serve(args[1:])
    elif command == "stop":
        _stop()
    elif command == "status":
        _status()
    elif command == "stats":
        _stats()
    elif command == "due":
        _due(args[1:])
    elif command == "evaluate":
        _evaluate(args[1:])
    elif command == "align":
        _align(args[1:])
    else:
        print(f"Unknown command: {command}")
        print(f"Commands: {', '.join(COMMANDS)}")
        sys.exit(1)


def _parse_flag(args: list[str], name: str, default: str) -> str:
    if name in args[:-1]:
        return args[args.index(name) + 1]
    return default


def _positional(args: list[str]) -> list[str]:
    """Arguments that are neither flags nor flag values."""
    result = []
    skip = False
    for a in args:
        if skip:
            skip = False
        elif a.startswith("--"):
            skip = True
        else:
            result.append(a)
    return result


def _open_db():
    from phrase_drill.config import load_settings
    from phrase_drill.db import Database

    return Database(load_settings().db_full_path)


def _server_pid() -> int | None:
    """PID of the running server, clearing a PID file left by a dead one."""
    try:
        pid = int(PID_FILE.read_text().strip())
        os.kill(pid, 0)
    except FileNotFoundError:
        return None
    except (ValueError, ProcessLookupError, PermissionError):
        PID_FILE.unlink(missing_ok=True)
        return None
    return pid


def _stop():
    pid = _server_pid()
    if pid is None:
        print("No phrase-drill server is running.")
        return
    os.kill(pid, signal.SIGTERM)
    PID_FILE.unlink(missing_ok=True)
    print(f"Sent SIGTERM to phrase-drill server (PID {pid}).")


def _status():
    pid = _server_pid()
    print(f"Server:     {'running, PID %d' % pid if pid else 'stopped'}")
    db = _open_db()
    print(f"Database:   {db.db_path}")
    print(f"Due today:  {db.get_due_count()} of {db.get_item_count()} items")
    db.close()


def _serve(args: list[str]):
    import uvicorn

    from phrase_drill.config import load_settings

    pid = _server_pid()
    if pid is not None:
        print(f"A phrase-drill server is already running (PID {pid}); run 'stop' first.")
        sys.exit(1)

    port = int(_parse_flag(args, "--port", "8765"))
    host = _parse_flag(args, "--host", "127.0.0.1")
    settings = load_settings()

    print(f"Phrase Drill API on http://{host}:{port}/api")
    print(f"  database:  {settings.db_full_path}")
    print(f"  answers accepted at >= {settings.threshold_percent}% similarity")
    PID_FILE.write_text(str(os.getpid()))
    try:
        uvicorn.run("phrase_drill.app:app", host=host, port=port)
    finally:
        PID_FILE.unlink(missing_ok=True)


def _stats():
    db = _open_db()
    stats = db.get_stats()

    print("Phrase Drill Stats")
    print("=" * 40)
    print(f"Total items:        {stats['total_items']}")
    print(f"Groups:             {stats['total_groups']}")
    print(f"Items due today:    {stats['items_due']}")
    print(f"Items reviewed:     {stats['items_reviewed']}")
    print(f"Items new:          {stats['items_new']}")
    print(f"Total errors:       {stats['total_errors']}")
    for level, count in stats["items_by_level"].items():
        print(f"  Level {level}:          {count}")
    db.close()


def _due(args: list[str]):
    group_id = _parse_flag(args, "--group", "") or None

    db = _open_db()
    items = db.get_due_items(group_id)
    if not items:
        print("Nothing due.")
    for item in items:
        print(f"  [L{item.level}] {item.prompt}  ->  {item.answer}")
    db.close()


def _evaluate(args: list[str]):
    from phrase_drill.config import load_settings
    from phrase_drill.evaluator import evaluate

    positional = _positional(args)
    if len(positional) != 2:
        print("Usage: evaluate ANSWER EXPECTED [--threshold N]")
        sys.exit(1)

    default = str(load_settings().threshold_percent)
    threshold = int(_parse_flag(args, "--threshold", default))
    result = evaluate(positional[0], positional[1], threshold)

    if result.is_exact_match:
        verdict = "exact"
    elif result.is_acceptable:
        verdict = "accepted"
    else:
        verdict = "rejected"
    print(f"{verdict} ({result.similarity_percent}% similar, threshold {threshold}%)")


def _align(args: list[str]):
    from phrase_drill.alignment import align
    from phrase_drill.config import load_settings

    positional = _positional(args)
    if len(positional) != 2:
        print("Usage: align EXPECTED SPOKEN")
        sys.exit(1)

    settings = load_settings()
    result = align(
        positional[0],
        positional[1],
        settings.correct_threshold,
        settings.approximate_threshold,
    )
    for verdict in result.words:
        print(f"  {verdict.word:20s} {verdict.status.value}")
    print(f"Accuracy: {result.accuracy_percent}%")


if __name__ == "__main__":
    main()
