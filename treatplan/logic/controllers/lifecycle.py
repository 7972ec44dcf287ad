"""Lifecycle controller: complete, add again, remove, edit, and post-care adds.

Every transition hands the sync manager a function that builds the next
item list from the settled plan; the manager applies it optimistically
and persists it in one write. Transitions on unknown item ids are ignored
and return False.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from treatplan.domain.PlanItem import PlanItem, generate_id, now_iso
from treatplan.logic.composer.builder import format_quantity
from treatplan.logic.sections.categorizer import section_for
from treatplan.logic.sync.manager import SyncManager
from treatplan.utilities.constants import (
    DEFAULT_TIMELINE,
    POST_CARE_PREFIX,
    SKINCARE,
    SKINCARE_TIMELINE,
    TIMELINE_COMPLETED,
    TIMELINE_NEXT_VISIT,
    TIMELINE_OPTIONS,
)

logger = logging.getLogger(__name__)

_UNSET = object()


def post_care_note(treatment: str) -> str:
    return f"{POST_CARE_PREFIX} {treatment}"


def is_post_care_item(item: PlanItem) -> bool:
    return POST_CARE_PREFIX.lower() in (item.notes or "").lower()


class LifecycleController:
    def __init__(self, sync: SyncManager,
                 id_factory: Callable[[], str] = generate_id,
                 clock: Callable[[], str] = now_iso):
        self.sync = sync
        self.id_factory = id_factory
        self.clock = clock
        self.pending_removal: Optional[str] = None

    @property
    def plan(self):
        return self.sync.plan

    async def _replace(self, item_id: str, transform: Callable[[PlanItem], Optional[PlanItem]],
                       message: str) -> bool:
        def replaced(items):
            item = _find(items, item_id)
            updated = transform(item) if item is not None else None
            if updated is None:
                return None
            return [updated if i.id == item_id else i for i in items]

        return await self.sync.commit(replaced, message=message)

    # --- Completion -----------------------------------------------------------
    async def mark_completed(self, item_id: str) -> bool:
        return await self._replace(
            item_id, lambda item: item.with_changes(timeline=TIMELINE_COMPLETED), "Marked completed"
        )

    async def complete_and_add_next_visit(self, item_id: str) -> bool:
        '''
        Replaces the item with a fresh copy scheduled for the next visit (new id, new addedAt,
        notes cleared). Removal and addition go out in a single commit.
        '''
        def forked(items):
            item = _find(items, item_id)
            if item is None:
                return None
            follow_up = item.with_changes(
                id=self.id_factory(),
                added_at=self.clock(),
                timeline=TIMELINE_NEXT_VISIT,
                notes=None,
            )
            return [i for i in items if i.id != item_id] + [follow_up]

        return await self.sync.commit(forked, message="Completed and added for next visit")

    async def add_again(self, item_id: str) -> bool:
        """Move a Completed item back to "Add next visit", keeping its identity."""
        def again(item):
            if section_for(item) != TIMELINE_COMPLETED:
                return None
            return item.with_changes(timeline=TIMELINE_NEXT_VISIT)

        return await self._replace(item_id, again, "Added again")

    # --- Removal (two-phase) --------------------------------------------------
    def request_remove(self, item_id: str) -> bool:
        if self.plan.find(item_id) is None:
            return False
        self.pending_removal = item_id
        return True

    def cancel_remove(self):
        self.pending_removal = None

    async def confirm_remove(self, item_id: Optional[str] = None) -> bool:
        target = item_id or self.pending_removal
        if target is None or target != self.pending_removal:
            logger.debug("Remove of %s not confirmed (pending: %s)", target, self.pending_removal)
            return False
        self.pending_removal = None

        def removed(items):
            if _find(items, target) is None:
                return None
            return [i for i in items if i.id != target]

        return await self.sync.commit(removed, message="Removed from plan")

    # --- Edit -----------------------------------------------------------------
    async def edit(self, item_id: str, *, treatment=_UNSET, product=_UNSET, quantity=_UNSET,
                   quantity_unit: Optional[str] = None, timeline=_UNSET, notes=_UNSET) -> bool:
        '''
        Rewrites the given fields in place; id and addedAt never change.
        Omitted fields are kept; passing None or "" clears an optional field.
        '''
        changes = {}
        if treatment is not _UNSET:
            treatment = (treatment or "").strip()
            if not treatment:
                logger.debug("Edit ignored: empty treatment for %s", item_id)
                return False
            changes["treatment"] = treatment
        if product is not _UNSET:
            changes["product"] = (product or "").strip() or None
        if quantity is not _UNSET:
            changes["quantity"] = format_quantity(quantity, quantity_unit)
        if timeline is not _UNSET:
            changes["timeline"] = (timeline or "").strip() or None
        if notes is not _UNSET:
            changes["notes"] = (notes or "").strip() or None

        def edited(item):
            updated = item.with_changes(**changes)
            if updated.is_skincare:
                updated.timeline = SKINCARE_TIMELINE
            elif updated.timeline not in TIMELINE_OPTIONS:
                updated.timeline = DEFAULT_TIMELINE
            return updated

        return await self._replace(item_id, edited, "Item updated")

    # --- Post-care ------------------------------------------------------------
    def has_post_care_product(self, product: str) -> bool:
        return _has_post_care(self.plan.get_items(), product)

    def can_add_post_care(self, product: str) -> bool:
        return bool(product) and not self.has_post_care_product(product)

    async def add_post_care_product(self, treatment: str, product: str) -> bool:
        """Add a suggested post-care product as a Skincare item; a no-op when already present."""
        if not product:
            return False

        def with_post_care(items):
            if _has_post_care(items, product):
                return None
            item = PlanItem(
                id=self.id_factory(),
                treatment=SKINCARE,
                added_at=self.clock(),
                product=product,
                timeline=SKINCARE_TIMELINE,
                notes=post_care_note(treatment),
            )
            return items + [item]

        return await self.sync.commit(with_post_care, message=f"Added {product}")


def _find(items: List[PlanItem], item_id: str) -> Optional[PlanItem]:
    return next((i for i in items if i.id == item_id), None)


def _has_post_care(items: List[PlanItem], product: str) -> bool:
    return any(i.product == product and is_post_care_item(i) for i in items)


__all__ = ["LifecycleController", "post_care_note", "is_post_care_item"]
