from __future__ import annotations

import json
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


def resolve_errors_log_path(explicit: Optional[Path], configured: str) -> Optional[Path]:
    if explicit:
        return explicit
    if configured:
        return Path(configured)
    return None


def _truncate(value: Optional[str], limit: int = 8192) -> Optional[str]:
    if value is None:
        return None
    if len(value) <= limit:
        return value
    return value[:limit]


def log_error(
    errors_log: Optional[Path],
    operation: str,
    exc: Exception,
    *,
    node_id: Optional[int] = None,
    command: Optional[str] = None,
) -> None:
    if not errors_log:
        return
    payload = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "operation": operation,
        "node_id": node_id if node_id is not None else getattr(exc, "node_id", None),
        "command": _truncate(command),
        "exception_class": exc.__class__.__name__,
        "exception_message": str(exc),
        "exception_traceback": _truncate(
            "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        ),
    }
    try:
        errors_log.parent.mkdir(parents=True, exist_ok=True)
        with errors_log.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload, ensure_ascii=False) + "\n")
    except OSError:
        pass
