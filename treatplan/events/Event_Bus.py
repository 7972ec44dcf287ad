"""Simple Event Bus / Observer implementation for treatment plan notifications.

Event names:
  plan.toast     -> payload {"message": str}
  plan.error     -> payload {"message": str}
  plan.committed -> payload {"patient_id": str, "table": str, "count": int}
  plan.refresh   -> payload {"patient_id": str, "table": str}

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
PLAN_TOAST = "plan.toast"
PLAN_ERROR = "plan.error"
PLAN_COMMITTED = "plan.committed"
PLAN_REFRESH = "plan.refresh"


class EventBus:
	def __init__(self):
		self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)

	def subscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		if callback not in self._subscribers[event_name]:
			self._subscribers[event_name].append(callback)

	def unsubscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		try:
			self._subscribers[event_name].remove(callback)
		except (ValueError, KeyError):
			pass

	def publish(self, event_name: str, payload: Any):
		for cb in list(self._subscribers.get(event_name, [])):
			try:
				cb(event_name, payload)
			except Exception:
				logger.exception("Error delivering %s to %r", event_name, cb)


# A singleton-like instance (can be imported)
GLOBAL_EVENT_BUS = EventBus()


def crea(event_name: str, payload: Any = None, bus: EventBus | None = None) -> None:
	"""Publish an event on the given bus, or the global one (sugar function)."""
	(bus or GLOBAL_EVENT_BUS).publish(event_name, payload)


# Alias semantic
create_event = crea

__all__ = [
	'EventBus', 'GLOBAL_EVENT_BUS', 'crea', 'create_event',
	'PLAN_TOAST', 'PLAN_ERROR', 'PLAN_COMMITTED', 'PLAN_REFRESH'
]
