"""Plan editing session.

PlanEditor owns the Plan of one open patient and wires the add-entry
composer, the sync manager and the drag and lifecycle controllers around
it. It lives from open() to close(); nothing else mutates its Plan.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from treatplan.domain.Patient import Patient
from treatplan.domain.Plan import Plan
from treatplan.domain.PlanItem import PlanItem, generate_id, now_iso
from treatplan.events.Event_Bus import EventBus
from treatplan.infra.plan_codec import parse_items
from treatplan.logic.composer.controller import ComposerController
from treatplan.logic.composer.session import AddEntrySession
from treatplan.logic.controllers.drag import DragController
from treatplan.logic.controllers.lifecycle import LifecycleController
from treatplan.logic.reference.tables import ReferenceData
from treatplan.logic.sections.categorizer import categorize
from treatplan.logic.sync.manager import SyncManager
from treatplan.utilities.config import DISCUSSED_FIELD

logger = logging.getLogger(__name__)


class PlanEditor:
    def __init__(self, patient: Patient, plan: Plan, reference: ReferenceData, sync: SyncManager,
                 id_factory: Callable[[], str] = generate_id, clock: Callable[[], str] = now_iso):
        self.patient = patient
        self.plan = plan
        self.reference = reference
        self.sync = sync
        self.session = AddEntrySession(reference, patient.interested_issues)
        self.composer = ComposerController(self.session, sync, id_factory, clock)
        self.drag = DragController(sync)
        self.lifecycle = LifecycleController(sync, id_factory, clock)

    @classmethod
    def open(cls, patient: Patient, store, reference: ReferenceData,
             bus: Optional[EventBus] = None, field_name: str = DISCUSSED_FIELD,
             id_factory: Callable[[], str] = generate_id,
             clock: Callable[[], str] = now_iso) -> "PlanEditor":
        '''Seeds the plan from the patient's stored field (empty or unreadable -> empty plan).'''
        plan = Plan(patient.id, parse_items(patient.discussed_field))
        sync = SyncManager(plan, store, patient, bus=bus, field_name=field_name)
        logger.info("Opened plan for %s with %d item(s)", patient.id, len(plan))
        return cls(patient, plan, reference, sync, id_factory, clock)

    def sections(self) -> List[Tuple[str, List[PlanItem]]]:
        return categorize(self.plan.get_items())

    def close(self):
        self.plan.close()
        self.session.reset()
        logger.info("Closed plan for %s", self.patient.id)

    @property
    def is_open(self) -> bool:
        return self.plan.is_open
