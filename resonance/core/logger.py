"""
Structured session events: one JSON line per event on ``resonance.events``.

Every line carries the connection, identity and session phase of the
connection it belongs to. What the user said never reaches the log; free-text
fields are reduced to their size.
"""
import json
import logging
from enum import Enum
from typing import Any

logger = logging.getLogger("resonance.events")

FREE_TEXT_FIELDS = frozenset({"text", "transcript", "reply", "note", "context", "audio", "instructions"})


def describe_text(value: Any) -> dict:
    text = str(value or "")
    return {"chars": len(text), "words": len(text.split())}


def _scrub(field: str, value: Any) -> Any:
    if field in FREE_TEXT_FIELDS:
        return describe_text(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): _scrub(str(k).lower(), v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_scrub(field, item) for item in value]
    return value


def session_fields(context) -> dict:
    """Fields every event of a connection shares; ``context`` is a ConnectionContext."""
    engine = context.engine
    return {
        "connection_id": context.connection_id,
        "identity": context.identity,
        "phase": engine.phase.value,
        "messages": engine.state.message_count,
    }


def log_event(component: str, event: str, context, **fields) -> None:
    record = {"component": component, "event": event, **session_fields(context)}
    for key, value in fields.items():
        record[key] = _scrub(key.lower(), value)
    logger.info(json.dumps(record, ensure_ascii=False, default=str))
