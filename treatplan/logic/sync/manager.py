"""Persistence/sync manager: optimistic update, whole-list write, rollback on failure.

commit(change) applies the new list to the Plan at once, writes the entire
serialized list to the patient's record and awaits the result. A failed
write restores the pre-commit snapshot and shows an error; a successful
one shows a toast and schedules a refresh notice without waiting on it.
If the plan was closed while the write was in flight, the outcome is only
logged.

Commits on one manager run one at a time. When `change` is a callable it
is called with the current items once the previous commit has settled and
returns the next list (or None to skip the write).
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Iterable, List, Optional, Union

from treatplan.domain.Patient import Patient
from treatplan.domain.Plan import Plan
from treatplan.domain.PlanItem import PlanItem
from treatplan.events.Event_Bus import EventBus
from treatplan.events.event_helpers import publish_committed, publish_refresh, show_error, show_toast
from treatplan.infra.Record_Store import RecordStoreError
from treatplan.infra.plan_codec import serialize_items
from treatplan.utilities.config import DISCUSSED_FIELD

logger = logging.getLogger(__name__)

SAVE_ERROR_MESSAGE = "Failed to save treatment plan"
SAVED_MESSAGE = "Treatment plan saved"

PlanChange = Union[Iterable[PlanItem], Callable[[List[PlanItem]], Optional[Iterable[PlanItem]]]]


class SyncManager:
    def __init__(self, plan: Plan, store, patient: Patient,
                 bus: Optional[EventBus] = None, field_name: str = DISCUSSED_FIELD):
        self.plan = plan
        self.store = store
        self.patient = patient
        self.bus = bus
        self.field_name = field_name
        self.last_error: Optional[str] = None
        self._lock = asyncio.Lock()

    async def commit(self, change: PlanChange, message: str = SAVED_MESSAGE) -> bool:
        async with self._lock:
            items = change(self.plan.get_items()) if callable(change) else change
            if items is None:
                return False
            return await self._write(items, message)

    async def _write(self, items: Iterable[PlanItem], message: str) -> bool:
        snapshot = self.plan.snapshot()
        self.plan.replace_all(items)
        payload = serialize_items(self.plan.get_items())
        logger.debug("Committing %d item(s) for %s", len(self.plan), self.patient.id)

        try:
            await self.store.update_record(
                self.patient.id, self.patient.table_source, {self.field_name: payload}
            )
        except RecordStoreError as e:
            self.last_error = str(e)
            if not self.plan.is_open:
                logger.warning("Commit for closed plan %s failed: %s", self.patient.id, e)
                return False
            self.plan.restore(snapshot)
            logger.error("Commit for %s failed, rolled back: %s", self.patient.id, e)
            show_error(SAVE_ERROR_MESSAGE, self.bus)
            return False
        except BaseException:
            self.plan.restore(snapshot)
            logger.warning("Commit for %s interrupted, rolled back", self.patient.id)
            raise

        self.last_error = None
        self.patient.discussed_field = payload
        if not self.plan.is_open:
            logger.info("Commit for closed plan %s completed", self.patient.id)
            return True
        logger.info("Committed %d item(s) for %s", len(self.plan), self.patient.id)
        if message:
            show_toast(message, self.bus)
        publish_committed(self.patient.id, self.patient.table_source, len(self.plan), self.bus)
        self._schedule_refresh()
        return True

    def _schedule_refresh(self):
        """Refresh listeners on the next loop iteration; the commit does not wait for them."""
        loop = asyncio.get_running_loop()
        loop.call_soon(publish_refresh, self.patient.id, self.patient.table_source, self.bus)


__all__ = ["SyncManager", "PlanChange", "SAVE_ERROR_MESSAGE", "SAVED_MESSAGE"]
