"""Add-entry controller: turns the current session into items and commits them."""
import logging
from typing import Callable, List

from treatplan.domain.PlanItem import PlanItem, generate_id, now_iso
from treatplan.logic.composer.builder import build_items
from treatplan.logic.composer.session import AddEntrySession
from treatplan.logic.sync.manager import SyncManager

logger = logging.getLogger(__name__)


class ComposerController:
    def __init__(self, session: AddEntrySession, sync: SyncManager,
                 id_factory: Callable[[], str] = generate_id,
                 clock: Callable[[], str] = now_iso):
        self.session = session
        self.sync = sync
        self.id_factory = id_factory
        self.clock = clock

    async def add_to_plan(self) -> List[PlanItem]:
        '''
        Appends the session's items to the plan in one commit and returns them.
        The session is reset only when the commit succeeds; a disabled add returns [].
        '''
        new_items = build_items(self.session, self.id_factory, self.clock)
        if not new_items:
            return []
        count = len(new_items)
        ok = await self.sync.commit(
            lambda items: items + new_items,
            message=f"Added {count} item{'s' if count != 1 else ''} to plan",
        )
        if not ok:
            return []
        self.session.reset()
        return new_items
