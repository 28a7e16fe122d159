"""Structured JSON logging to stdout.

Low overhead, minimal dependencies, safe for production stdout collectors.
"""

from typing import Any, Dict
from datetime import datetime, timezone
import json

from flightchat.config import settings
from flightchat.obs.context import request_id_var, session_id_var, service_var


_LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}
_SECRET_MARKERS = ("key", "secret", "token", "password")


def _redact_secret(value: Any) -> Any:
    s = str(value) if value is not None else ""
    if len(s) <= 8:
        return "***"
    return f"{s[:4]}***{s[-4:]}"


def _is_secret(field: str) -> bool:
    name = field.lower()
    return any(marker in name for marker in _SECRET_MARKERS)


def _enabled(level: str) -> bool:
    threshold = _LEVELS.get(settings.log_level, 10)
    return _LEVELS.get(level.upper(), 20) >= threshold


def log_event(event: str, **fields: Any) -> None:
    level = str(fields.pop("level", "INFO")).upper()
    if not _enabled(level):
        return
    now = datetime.now(timezone.utc).isoformat()
    payload: Dict[str, Any] = {
        "ts": now,
        "level": level,
        "event": event,
        "service": service_var.get(),
        "request_id": request_id_var.get(),
    }
    session_id = session_id_var.get()
    if session_id:
        payload["session_id"] = session_id

    # Merge remaining fields
    for k, v in fields.items():
        payload[k] = _redact_secret(v) if _is_secret(k) else v

    try:
        print(json.dumps(payload, separators=(",", ":"), default=str, ensure_ascii=False))
    except (TypeError, ValueError):
        # As a last resort, avoid crashing the app due to logging
        pass
