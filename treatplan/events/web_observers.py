"""Web-facing observers for plan notifications.

Subscribes to the GLOBAL_EVENT_BUS for plan.toast, plan.error,
plan.committed and plan.refresh, and keeps a small in-memory ring buffer
of recent events that the web layer polls (since=<last_id_seen>) to show
toasts and refresh panels without a full page reload.

Each event gets an auto-increment integer id (cursor). A Lock guards the
buffer; MAX_EVENTS caps its size.
"""
from __future__ import annotations
import logging
from typing import List, Dict, Any
from threading import Lock
from datetime import datetime, timezone

from .Event_Bus import (
    GLOBAL_EVENT_BUS, PLAN_TOAST, PLAN_ERROR, PLAN_COMMITTED, PLAN_REFRESH
)

logger = logging.getLogger(__name__)

_lock = Lock()
_events: List[Dict[str, Any]] = []
_next_id = 1
MAX_EVENTS = 300
_started = False

OBSERVED_EVENTS = (PLAN_TOAST, PLAN_ERROR, PLAN_COMMITTED, PLAN_REFRESH)


def _record(event_name: str, payload: Any):  # signature expected by EventBus
    global _next_id
    with _lock:
        evt = {
            'id': _next_id,
            'type': event_name,
            'ts': datetime.now(timezone.utc).isoformat(timespec='seconds').replace('+00:00', 'Z'),
        }
        if isinstance(payload, dict):
            for k in ('message', 'patient_id', 'table', 'count'):
                if k in payload:
                    evt[k] = payload[k]
        _events.append(evt)
        _next_id += 1
        # Trim buffer
        if len(_events) > MAX_EVENTS:
            del _events[: len(_events) - MAX_EVENTS]


def start():
    """Idempotent start: subscribe observers once."""
    global _started
    if _started:
        return
    for name in OBSERVED_EVENTS:
        GLOBAL_EVENT_BUS.subscribe(name, _record)
    _started = True
    logger.debug("Web observers subscribed to %s", ", ".join(OBSERVED_EVENTS))


def get_events(since: int | None = None) -> Dict[str, Any]:
    """Return events newer than 'since' (exclusive).

    If since is None, returns the last N (up to MAX_EVENTS) events.
    Response includes next_cursor (largest id) so client can poll with since=next_cursor.
    """
    with _lock:
        if since is None:
            data = list(_events)
        else:
            data = [e for e in _events if e['id'] > since]
        next_cursor = _events[-1]['id'] if _events else since or 0
    return {'events': data, 'next_cursor': next_cursor}


__all__ = ['start', 'get_events', 'OBSERVED_EVENTS']
