"""PlanItem domain entity: one discussed/planned treatment or product for one patient."""
import copy
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from treatplan.utilities.constants import SKINCARE

# Key order of the persisted JSON object
FIELD_ORDER = (
    "id", "addedAt", "interest", "findings", "treatment", "product", "brand",
    "region", "timeline", "quantity", "recurring", "notes",
)
OPTIONAL_TEXT_FIELDS = ("interest", "product", "brand", "region", "timeline", "quantity", "recurring", "notes")


def generate_id() -> str:
    return str(uuid.uuid4())


def now_iso() -> str:
    """UTC timestamp in the same shape as JavaScript's Date.toISOString()."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class PlanItem:
    def __init__(self, id: str, treatment: str, added_at: Optional[str] = None,
                 interest: Optional[str] = None, findings: Optional[List[str]] = None,
                 product: Optional[str] = None, brand: Optional[str] = None,
                 region: Optional[str] = None, timeline: Optional[str] = None,
                 quantity: Optional[str] = None, recurring: Optional[str] = None,
                 notes: Optional[str] = None):
        self.id = id
        self.added_at = added_at
        self.treatment = treatment
        self.interest = interest
        # Avoid sharing the caller's list
        self.findings = list(findings) if findings else None
        self.product = product
        self.brand = brand
        self.region = region
        self.timeline = timeline
        self.quantity = quantity
        self.recurring = recurring
        self.notes = notes

    @property
    def is_skincare(self) -> bool:
        return (self.treatment or "").strip() == SKINCARE

    def with_changes(self, **changes) -> "PlanItem":
        """Return a copy with the given attributes replaced; the original is left untouched."""
        clone = copy.deepcopy(self)
        for key, value in changes.items():
            if not hasattr(clone, key):
                raise AttributeError(f"PlanItem has no field '{key}'")
            setattr(clone, key, value)
        return clone

    def __eq__(self, other) -> bool:
        if not isinstance(other, PlanItem):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash(self.id)

    def __str__(self) -> str:
        parts = [self.treatment]
        if self.product:
            parts.append(self.product)
        if self.quantity:
            parts.append(f"Qty: {self.quantity}")
        parts.append(self.timeline or "-")
        return f"PlanItem({self.id}: {' - '.join(parts)})"

    __repr__ = __str__

    @staticmethod
    def from_dict(data) -> "PlanItem":
        '''Creates a PlanItem from its persisted dictionary. Ignores unknown keys.'''
        d = dict(data) if isinstance(data, dict) else {}
        findings = d.get("findings")
        if isinstance(findings, list):
            findings = [str(f) for f in findings if f is not None and str(f).strip()]
        else:
            findings = None
        kwargs = {k: _clean(d.get(k)) for k in OPTIONAL_TEXT_FIELDS}
        return PlanItem(
            id=str(d.get("id") or ""),
            treatment=str(d.get("treatment") or "").strip(),
            added_at=_clean(d.get("addedAt")),
            findings=findings,
            **kwargs,
        )

    def to_dict(self) -> dict:
        '''Converts the item to a dictionary for JSON persistence; absent optional fields are omitted.'''
        values = {
            "id": self.id,
            "addedAt": self.added_at,
            "interest": self.interest,
            "findings": list(self.findings) if self.findings else None,
            "treatment": self.treatment,
            "product": self.product,
            "brand": self.brand,
            "region": self.region,
            "timeline": self.timeline,
            "quantity": self.quantity,
            "recurring": self.recurring,
            "notes": self.notes,
        }
        return {k: values[k] for k in FIELD_ORDER if values[k] is not None or k in ("id", "treatment")}
