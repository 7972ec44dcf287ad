"""Plan aggregate: the in-memory list of PlanItems for the patient whose plan is open for editing."""
import copy
from typing import Iterable, List, Optional

from treatplan.domain.PlanItem import PlanItem


class Plan:
    def __init__(self, patient_id: str, items: Optional[Iterable[PlanItem]] = None):
        self.patient_id = patient_id
        self.items: List[PlanItem] = list(items) if items else []
        self.closed = False

    def get_items(self) -> List[PlanItem]:
        '''
        Returns a shallow copy of the item list.
        '''
        return list(self.items)

    def find(self, item_id: str) -> Optional[PlanItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def replace_all(self, items: Iterable[PlanItem]):
        '''
        Swaps in a whole new item list (used for optimistic updates).
        '''
        self.items = list(items)

    # --- Snapshot / rollback ------------------------------------------------
    def snapshot(self) -> List[PlanItem]:
        return copy.deepcopy(self.items)

    def restore(self, snapshot: List[PlanItem]):
        self.items = copy.deepcopy(snapshot)

    def close(self):
        '''
        Marks the editing session as gone; in-flight writes still finish but are no longer observed.
        '''
        self.closed = True

    @property
    def is_open(self) -> bool:
        return not self.closed

    def to_dict(self):
        return [item.to_dict() for item in self.items]

    def __len__(self) -> int:
        return len(self.items)

    def __str__(self) -> str:
        items_str = ",\n\t".join(str(item) for item in self.items)
        return f"Plan {self.patient_id}:\n\t{items_str}"

    def __repr__(self) -> str:
        return self.__str__()
