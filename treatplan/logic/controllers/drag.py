"""Drag/move controller: reassign an item's section and persist."""
import logging

from treatplan.logic.sections.categorizer import section_for
from treatplan.logic.sync.manager import SyncManager
from treatplan.utilities.constants import SECTION_ORDER, SKINCARE

logger = logging.getLogger(__name__)


def is_legal_move(is_skincare: bool, current: str, target: str) -> bool:
    if target not in SECTION_ORDER or target == current:
        return False
    # Skincare items never leave Skincare and nothing else may enter it
    return (target == SKINCARE) == is_skincare


class DragController:
    def __init__(self, sync: SyncManager):
        self.sync = sync

    async def move(self, item_id: str, target_section: str) -> bool:
        '''
        Moves an item to target_section. Unknown items and illegal moves are ignored (returns False).
        '''
        def moved(items):
            item = next((i for i in items if i.id == item_id), None)
            if item is None:
                logger.debug("Move ignored: no item %s", item_id)
                return None
            current = section_for(item)
            if not is_legal_move(item.is_skincare, current, target_section):
                logger.debug("Move ignored: %s from %s to %s", item_id, current, target_section)
                return None
            updated = item.with_changes(timeline=target_section)
            return [updated if i.id == item_id else i for i in items]

        return await self.sync.commit(moved, message=f"Moved to {target_section}")
