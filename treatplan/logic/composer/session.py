"""Add-entry session: the transient form state behind "Add to plan".

One mutation method per form action (set mode, pick a goal, toggle a
finding, pick a treatment or product, edit the detail fields). Derived
values such as the interest and region implied by selected findings are
computed from the state on demand, never stored.

Selection semantics per mode:
  - goal:      one goal, one treatment (radio), treatments filtered by goal
  - finding:   many findings (checkbox), many treatments (checkbox) drawn
               from the findings' mapped treatments
  - treatment: one treatment (radio) first, then many findings relevant to it
Products: Skincare accepts many products per add, every other treatment one.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from treatplan.domain.Choice import Choice, Custom, choice_from_label, choice_label
from treatplan.logic.reference.tables import FindingMatch, QuantityContext, ReferenceData
from treatplan.utilities.constants import (
    INTEREST_SEPARATOR,
    MULTIPLE_REGION,
    OTHER_FINDING_LABEL,
    OTHER_LABEL,
    TIMELINE_OPTIONS,
)

logger = logging.getLogger(__name__)

MODE_GOAL = "goal"
MODE_FINDING = "finding"
MODE_TREATMENT = "treatment"
MODES = (MODE_GOAL, MODE_FINDING, MODE_TREATMENT)

DETAIL_FIELDS = ("quantity", "quantity_unit", "timeline", "recurring", "notes", "brand")


def _unique(values) -> List[str]:
    seen = set()
    out = []
    for v in values:
        if v and v not in seen:
            seen.add(v)
            out.append(v)
    return out


class AddEntrySession:
    def __init__(self, reference: ReferenceData, known_interests: Optional[List[str]] = None):
        self.reference = reference
        self.known_interests = list(known_interests) if known_interests else []
        self.mode: Optional[str] = None
        self._clear()

    def _clear(self):
        self.goal: Optional[Choice] = None
        self.findings: List[str] = []
        self.other_finding: Optional[str] = None
        self.treatments: List[str] = []
        self.other_treatment: Optional[str] = None
        self.products: Dict[str, List[Choice]] = {}
        self.region: Optional[Choice] = None
        self.quantity: Optional[str] = None
        self.quantity_unit: Optional[str] = None
        self.timeline: Optional[str] = None
        self.recurring: Optional[str] = None
        self.notes: Optional[str] = None
        self.brand: Optional[str] = None

    # --- Mode -----------------------------------------------------------------
    def set_mode(self, mode: str):
        '''
        Switches the add-by mode; choosing the active mode again clears its selections.
        '''
        if mode not in MODES:
            raise ValueError(f"Unknown add-entry mode: {mode}")
        if mode == self.mode:
            logger.debug("Mode %s re-selected; clearing selections", mode)
        self.mode = mode
        self._clear()

    def reset(self):
        self.mode = None
        self._clear()

    # --- Goal -----------------------------------------------------------------
    def select_goal(self, label: str, other_text: str = "") -> bool:
        if self.mode != MODE_GOAL:
            return False
        self.goal = choice_from_label(label, other_text)
        # Keep only treatments still offered for the new goal
        allowed = set(self.treatment_options())
        self.treatments = [t for t in self.treatments if t in allowed]
        return True

    def clear_goal(self):
        self.goal = None

    # --- Findings -------------------------------------------------------------
    def toggle_finding(self, finding: str) -> bool:
        """Check/uncheck a catalog finding. Returns whether it is now selected."""
        if self.mode not in (MODE_FINDING, MODE_TREATMENT):
            return False
        if finding == OTHER_FINDING_LABEL:
            self.other_finding = None if self.other_finding is not None else ""
            return self.other_finding is not None
        if finding in self.findings:
            self.findings.remove(finding)
            selected = False
        else:
            self.findings.append(finding)
            selected = True
        if self.mode == MODE_FINDING:
            allowed = set(self.treatment_options())
            self.treatments = [t for t in self.treatments if t in allowed]
        return selected

    def set_other_finding(self, text: Optional[str]):
        if self.mode not in (MODE_FINDING, MODE_TREATMENT):
            return
        self.other_finding = text

    # --- Treatments -----------------------------------------------------------
    def select_treatment(self, label: str, other_text: str = "") -> bool:
        """Pick a treatment: radio in goal/treatment mode, checkbox in finding mode."""
        if self.mode is None:
            return False
        is_other = label == OTHER_LABEL
        if not is_other and label not in self.treatment_options():
            logger.debug("Treatment %r not offered in %s mode", label, self.mode)
            return False
        if self.mode == MODE_FINDING:
            if is_other:
                self.other_treatment = None if self.other_treatment is not None else (other_text or "")
                return self.other_treatment is not None
            if label in self.treatments:
                self.treatments.remove(label)
                return False
            self.treatments.append(label)
            return True
        # Radio semantics: the catalog pick and the free-text pick exclude each other
        if is_other:
            self.treatments = []
            self.other_treatment = other_text or ""
        else:
            self.treatments = [label]
            self.other_treatment = None
        if self.mode == MODE_TREATMENT:
            relevant = set(self.finding_options())
            self.findings = [f for f in self.findings if f in relevant]
        return True

    def set_other_treatment(self, text: Optional[str]):
        if self.mode is None:
            return
        self.other_treatment = text
        if self.mode != MODE_FINDING and text is not None:
            self.treatments = []

    # --- Products -------------------------------------------------------------
    def select_product(self, treatment: str, label: str, other_text: str = "") -> bool:
        """Select a product for a treatment; Skincare toggles within many, others keep one."""
        choice = choice_from_label(label, other_text)
        current = self.products.get(treatment, [])
        if self.reference.supports_multiple_products(treatment):
            existing = self._find_product(current, choice)
            if existing is not None:
                current = [c for c in current if c is not existing]
                self.products[treatment] = current
                return False
            self.products[treatment] = current + [choice]
            return True
        self.products[treatment] = [choice]
        return True

    def set_other_product_text(self, treatment: str, text: str):
        current = self.products.get(treatment, [])
        updated = [Custom(text or "") if isinstance(c, Custom) else c for c in current]
        if not any(isinstance(c, Custom) for c in current):
            if self.reference.supports_multiple_products(treatment):
                updated.append(Custom(text or ""))
            else:
                updated = [Custom(text or "")]
        self.products[treatment] = updated

    def clear_products(self, treatment: str):
        self.products.pop(treatment, None)

    @staticmethod
    def _find_product(current: List[Choice], choice: Choice) -> Optional[Choice]:
        for c in current:
            if isinstance(choice, Custom) and isinstance(c, Custom):
                return c
            if c == choice:
                return c
        return None

    # --- Region / details -----------------------------------------------------
    def set_region(self, label: Optional[str], other_text: str = ""):
        self.region = choice_from_label(label, other_text) if label else None

    def set_details(self, **fields):
        '''
        Updates the scratch detail fields (quantity, quantity_unit, timeline, recurring, notes, brand).
        '''
        for key, value in fields.items():
            if key not in DETAIL_FIELDS:
                raise ValueError(f"Unknown add-entry field: {key}")
            if key == "timeline" and value and value not in TIMELINE_OPTIONS:
                raise ValueError(f"Unknown timeline: {value}")
            setattr(self, key, value.strip() if isinstance(value, str) and value.strip() else None)

    # --- Options offered to the provider --------------------------------------
    def goal_options(self) -> List[str]:
        return _unique(self.known_interests + self.reference.goals)

    def treatment_options(self) -> List[str]:
        if self.mode == MODE_GOAL:
            return self.reference.treatments_for_goal(self.goal.value if self.goal else None)
        if self.mode == MODE_FINDING:
            return _unique(t for m in self.finding_matches() for t in m.treatments)
        return self.reference.treatments

    def finding_options(self) -> List[str]:
        if self.mode == MODE_TREATMENT:
            selected = self.selected_treatment()
            return self.reference.findings_for_treatment(selected) if selected else []
        return self.reference.findings

    def product_options(self, treatment: str) -> List[str]:
        return self.reference.products_for_treatment(treatment)

    def selected_treatment(self) -> Optional[str]:
        if self.treatments:
            return self.treatments[0]
        if self.other_treatment and self.other_treatment.strip():
            return self.other_treatment.strip()
        return None

    # --- Derived values -------------------------------------------------------
    def selected_findings(self) -> List[str]:
        values = list(self.findings)
        if self.other_finding and self.other_finding.strip():
            values.append(self.other_finding.strip())
        return _unique(values)

    def finding_matches(self) -> List[FindingMatch]:
        matches = (self.reference.lookup_finding(f) for f in self.findings)
        return [m for m in matches if m is not None]

    def derived_interest(self) -> Optional[str]:
        if self.mode == MODE_GOAL:
            return self.goal.value if self.goal else None
        goals = _unique(m.goal for m in self.finding_matches())
        return INTEREST_SEPARATOR.join(goals) or None

    def derived_region(self) -> Optional[str]:
        if self.region is not None and self.region.value:
            return self.region.value
        regions = _unique(m.region for m in self.finding_matches())
        if not regions:
            return None
        return regions[0] if len(regions) == 1 else MULTIPLE_REGION

    def effective_treatments(self) -> List[str]:
        """Explicit picks plus a non-empty free-text treatment (without the goal-only fallback)."""
        values = list(self.treatments)
        if self.other_treatment and self.other_treatment.strip():
            values.append(self.other_treatment.strip())
        return _unique(values)

    def has_goal_or_finding(self) -> bool:
        return bool((self.goal is not None and self.goal.value) or self.selected_findings())

    @property
    def can_add(self) -> bool:
        return bool(self.effective_treatments()) or self.has_goal_or_finding()

    def resolved_products(self, treatment: str) -> List[str]:
        """Product names to emit for a treatment; a blank "Other" product is dropped."""
        if not self.reference.has_products(treatment):
            return []
        names = []
        for choice in self.products.get(treatment, []):
            value = choice.value
            if value is None:
                logger.warning("Dropping 'Other' product with no text for treatment %s", treatment)
                continue
            names.append(value)
        names = _unique(names)
        if not self.reference.supports_multiple_products(treatment):
            names = names[:1]
        return names

    def quantity_context(self) -> QuantityContext:
        treatments = self.effective_treatments()
        return self.reference.quantity_context(treatments[0] if treatments else None)

    def to_dict(self) -> Dict[str, Any]:
        '''Form state plus derived values, as echoed to API clients.'''
        qty = self.quantity_context()
        return {
            "mode": self.mode,
            "goal": choice_label(self.goal) if self.goal else None,
            "goal_other_text": self.goal.text if isinstance(self.goal, Custom) else None,
            "findings": list(self.findings),
            "other_finding": self.other_finding,
            "treatments": list(self.treatments),
            "other_treatment": self.other_treatment,
            "products": {t: [choice_label(c) if isinstance(c, Custom) else c.name for c in cs]
                         for t, cs in self.products.items()},
            "other_products": {t: next((c.text for c in cs if isinstance(c, Custom)), None)
                               for t, cs in self.products.items()},
            "region": self.derived_region(),
            "interest": self.derived_interest(),
            "quantity": self.quantity,
            "quantity_unit": self.quantity_unit or qty.unit_label,
            "quantity_options": list(qty.options),
            "timeline": self.timeline,
            "recurring": self.recurring,
            "notes": self.notes,
            "brand": self.brand,
            "goal_options": self.goal_options(),
            "finding_options": self.finding_options(),
            "treatment_options": self.treatment_options(),
            "can_add": self.can_add,
        }


__all__ = ["AddEntrySession", "MODES", "MODE_GOAL", "MODE_FINDING", "MODE_TREATMENT"]
