"""Item generation for one "Add to plan" pass.

build_items(session) -> list of new PlanItems (empty when nothing may be added).
Each effective treatment yields one item, or one item per resolved product
when its product list is non-empty. Every item from the same pass shares
interest, region, brand, quantity, recurring, notes and addedAt.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from treatplan.domain.PlanItem import PlanItem, generate_id, now_iso
from treatplan.logic.composer.session import AddEntrySession
from treatplan.utilities.constants import (
    DEFAULT_TIMELINE,
    QUANTITY_PLACEHOLDER_UNIT,
    SKINCARE,
    SKINCARE_TIMELINE,
    TREATMENT_GOAL_ONLY,
)

logger = logging.getLogger(__name__)

__all__ = ["format_quantity", "effective_treatments", "build_items"]


def format_quantity(value: Optional[str], unit: Optional[str]) -> Optional[str]:
    """'20' + 'Units' -> '20 Units'; the placeholder unit is never appended."""
    value = (value or "").strip()
    if not value:
        return None
    unit = (unit or "").strip()
    if unit and unit != QUANTITY_PLACEHOLDER_UNIT:
        return f"{value} {unit}"
    return value


def effective_treatments(session: AddEntrySession) -> List[str]:
    treatments = session.effective_treatments()
    if not treatments and session.has_goal_or_finding():
        return [TREATMENT_GOAL_ONLY]
    return treatments


def build_items(session: AddEntrySession,
                id_factory: Callable[[], str] = generate_id,
                clock: Callable[[], str] = now_iso) -> List[PlanItem]:
    treatments = effective_treatments(session)
    if not treatments:
        logger.debug("Add ignored: no treatment, goal or finding selected")
        return []

    added_at = clock()
    findings = session.selected_findings() or None
    quantity_unit = session.quantity_unit or session.quantity_context().unit_label
    shared = dict(
        interest=session.derived_interest(),
        findings=findings,
        region=session.derived_region(),
        brand=session.brand,
        quantity=format_quantity(session.quantity, quantity_unit),
        recurring=session.recurring,
        notes=session.notes,
    )

    items: List[PlanItem] = []
    for treatment in treatments:
        timeline = SKINCARE_TIMELINE if treatment == SKINCARE else (session.timeline or DEFAULT_TIMELINE)
        products = session.resolved_products(treatment)
        for product in (products or [None]):
            items.append(PlanItem(
                id=id_factory(),
                treatment=treatment,
                added_at=added_at,
                product=product,
                timeline=timeline,
                **shared,
            ))
    logger.debug("Built %d item(s) from %d treatment(s)", len(items), len(treatments))
    return items
