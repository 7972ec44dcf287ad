"""Event helper utilities.

The notification sink of the plan editor: toasts, errors, and the
commit/refresh notices other panels listen to. Each helper publishes on
the global event bus unless a bus is passed in.

Quick import:
    from treatplan.events.event_helpers import (
        show_toast, show_error, publish_committed, publish_refresh
    )
"""
from __future__ import annotations
from typing import Optional
from .Event_Bus import (
    EventBus, crea,
    PLAN_TOAST, PLAN_ERROR, PLAN_COMMITTED, PLAN_REFRESH,
)

__all__ = [
    'show_toast', 'show_error', 'publish_committed', 'publish_refresh',
    'PLAN_TOAST', 'PLAN_ERROR', 'PLAN_COMMITTED', 'PLAN_REFRESH',
]


def show_toast(message: str, bus: Optional[EventBus] = None):
    """Publish a plan.toast event."""
    crea(PLAN_TOAST, {'message': message}, bus)


def show_error(message: str, bus: Optional[EventBus] = None):
    """Publish a plan.error event."""
    crea(PLAN_ERROR, {'message': message}, bus)


def publish_committed(patient_id: str, table: str, count: int, bus: Optional[EventBus] = None):
    """Publish a plan.committed event after a successful write.

    Payload structure:
        {'patient_id': <str>, 'table': <str>, 'count': <int items written>}
    """
    crea(PLAN_COMMITTED, {
        'patient_id': patient_id,
        'table': table,
        'count': count,
    }, bus)


def publish_refresh(patient_id: str, table: str, bus: Optional[EventBus] = None):
    """Ask listening panels (patient detail, lists) to reload the record."""
    crea(PLAN_REFRESH, {'patient_id': patient_id, 'table': table}, bus)
