"""Structured event log (jsonl) for badge analysis runs.

Events (one JSON object per line, append-only):
- MANIFEST_ENTRY_DROPPED: an @context entry that did not become a validation
  structure; `code`/`msg` lifted from the manifest diagnostic, the rest of the
  diagnostic (property, context_ref) kept under `entry`
- BADGE_ANALYZED: per-run summary, one `structures` row per validated pointer

Default log root: <repo>/logs/
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

TOOL = "badgecheck"
TOOL_VERSION = "0.1"

ENTRY_DROPPED = "MANIFEST_ENTRY_DROPPED"
BADGE_ANALYZED = "BADGE_ANALYZED"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _append(log_path: Path, record: dict[str, Any]) -> dict[str, Any]:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with log_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")
    return record


def log_event(*, event: str, log_path: Path, run_id: str | None = None, **fields: Any) -> dict:
    record: dict[str, Any] = {
        "ts": utc_now(),
        "event": event,
        "run_id": run_id,
        "tool": TOOL,
        "tool_version": TOOL_VERSION,
    }
    record.update({k: v for k, v in fields.items() if k not in record})
    return _append(log_path, record)


def log_diagnostic(diagnostic: dict, *, log_path: Path, run_id: str | None = None) -> dict:
    entry = {k: v for k, v in diagnostic.items() if k not in ("code", "msg")}
    return log_event(
        event=ENTRY_DROPPED,
        log_path=log_path,
        run_id=run_id,
        code=diagnostic.get("code"),
        msg=diagnostic.get("msg"),
        entry=entry or None,
    )


def log_analysis(
    *,
    log_path: Path,
    run_id: str | None,
    status: str,
    fatal: str | None,
    attempted: int,
    dropped: int,
    structures: Iterable[dict],
) -> dict:
    rows = list(structures)
    return log_event(
        event=BADGE_ANALYZED,
        log_path=log_path,
        run_id=run_id,
        status=status,
        fatal=fatal,
        stats={
            "attempted": attempted,
            "structures": len(rows),
            "dropped": dropped,
            "failed": sum(1 for r in rows if not r.get("ok")),
        },
        structures=rows,
    )


def default_log_path(name: str) -> Path:
    return Path(__file__).resolve().parents[1] / "logs" / f"{name}.jsonl"
