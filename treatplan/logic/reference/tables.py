"""Reference data lookups: findings, goals, treatments, products, quantities, post-care.

ReferenceData is immutable and built once from a plain dict (see
infra.Reference_Repository for the shipped JSON). Callers receive it as an
argument instead of importing module globals, so tests can pass small
fixture tables.

Matching follows the clinic's keyword tables: a finding or goal matches a
row when its lower-cased text contains one of the row's keywords.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Tuple

from treatplan.utilities.constants import (
    OTHER_FINDING_LABEL,
    OTHER_LABEL,
    QUANTITY_PLACEHOLDER_UNIT,
    SKINCARE,
    TIMELINE_OPTIONS,
)

__all__ = ["FindingMatch", "QuantityContext", "PostCare", "ReferenceData"]


@dataclass(frozen=True)
class FindingMatch:
    goal: str
    region: str
    treatments: Tuple[str, ...]


@dataclass(frozen=True)
class QuantityContext:
    unit_label: str
    options: Tuple[str, ...]


@dataclass(frozen=True)
class PostCare:
    label: str
    instructions: str
    suggested_products: Tuple[str, ...]


@dataclass(frozen=True)
class _KeywordRow:
    keywords: Tuple[str, ...]
    values: Tuple[str, ...]

    def matches(self, lower_text: str) -> bool:
        return any(k in lower_text for k in self.keywords)


@dataclass(frozen=True)
class _FindingRow:
    keywords: Tuple[str, ...]
    match: FindingMatch


@dataclass(frozen=True)
class _QuantityRule:
    exact: Tuple[str, ...]
    contains: Tuple[str, ...]
    context: QuantityContext


def _strs(values) -> Tuple[str, ...]:
    return tuple(str(v) for v in (values or []) if v is not None)


def _keywords(values) -> Tuple[str, ...]:
    return tuple(str(v).lower() for v in (values or []) if v)


def _unique(values) -> List[str]:
    seen = set()
    out = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out


class ReferenceData:
    def __init__(self, *, treatments, goals, regions, findings_by_area, finding_rules,
                 goal_treatment_rules, goal_region_rules, products, recommended_products,
                 quantity_rules, quantity_default, post_care, recurring_options=()):
        self._treatments = treatments
        self._goals = goals
        self._regions = regions
        self._findings_by_area = findings_by_area
        self._finding_rows = finding_rules
        self._goal_treatment_rows = goal_treatment_rules
        self._goal_region_rows = goal_region_rules
        self._products = products
        self._recommended = recommended_products
        self._quantity_rules = quantity_rules
        self._quantity_default = quantity_default
        self._post_care = post_care
        self._recurring = recurring_options

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReferenceData":
        surgical = set(_strs(data.get("surgical_treatments")))
        treatments = tuple(t for t in _strs(data.get("treatments")) if t not in surgical)
        findings_by_area = tuple(
            (str(row.get("area", "")), _strs(row.get("findings")))
            for row in data.get("findings_by_area", [])
        )
        finding_rows = tuple(
            _FindingRow(
                keywords=_keywords(row.get("keywords")),
                match=FindingMatch(
                    goal=str(row.get("goal", "")),
                    region=str(row.get("region", "")),
                    treatments=_strs(row.get("treatments")),
                ),
            )
            for row in data.get("finding_rules", [])
        )
        goal_treatment_rows = tuple(
            _KeywordRow(_keywords(row.get("keywords")), _strs(row.get("treatments")))
            for row in data.get("goal_treatment_rules", [])
        )
        goal_region_rows = tuple(
            _KeywordRow(_keywords(row.get("keywords")), _strs(row.get("regions")))
            for row in data.get("goal_region_rules", [])
        )
        products = MappingProxyType({
            str(t): _strs(p) for t, p in (data.get("products") or {}).items()
        })
        recommended = tuple(
            (str(row.get("treatment", "")), _KeywordRow(_keywords(row.get("keywords")), _strs(row.get("products"))))
            for row in data.get("recommended_products", [])
        )
        quantity_rules = tuple(
            _QuantityRule(
                exact=_keywords(row.get("exact")),
                contains=_keywords(row.get("contains")),
                context=QuantityContext(str(row.get("unit", QUANTITY_PLACEHOLDER_UNIT)), _strs(row.get("options"))),
            )
            for row in data.get("quantity_rules", [])
        )
        default = data.get("quantity_default") or {}
        quantity_default = QuantityContext(
            str(default.get("unit", QUANTITY_PLACEHOLDER_UNIT)),
            _strs(default.get("options")) or ("1", "2", "3", "4", "5"),
        )
        post_care = MappingProxyType({
            str(t): PostCare(
                label=str(pc.get("label", "")),
                instructions=str(pc.get("instructions", "")),
                suggested_products=_strs(pc.get("suggested_products")),
            )
            for t, pc in (data.get("post_care") or {}).items()
        })
        return cls(
            treatments=treatments,
            goals=_strs(data.get("goals")),
            regions=_strs(data.get("regions")),
            findings_by_area=findings_by_area,
            finding_rules=finding_rows,
            goal_treatment_rules=goal_treatment_rows,
            goal_region_rules=goal_region_rows,
            products=products,
            recommended_products=recommended,
            quantity_rules=quantity_rules,
            quantity_default=quantity_default,
            post_care=post_care,
            recurring_options=_strs(data.get("recurring_options")),
        )

    # --- Catalog listings ---------------------------------------------------
    @property
    def treatments(self) -> List[str]:
        return list(self._treatments)

    @property
    def goals(self) -> List[str]:
        return list(self._goals)

    @property
    def regions(self) -> List[str]:
        return list(self._regions)

    @property
    def timelines(self) -> List[str]:
        return list(TIMELINE_OPTIONS)

    @property
    def recurring_options(self) -> List[str]:
        return list(self._recurring)

    @property
    def findings(self) -> List[str]:
        return _unique(f for _, findings in self._findings_by_area for f in findings)

    @property
    def findings_by_area(self) -> List[Tuple[str, List[str]]]:
        return [(area, list(findings)) for area, findings in self._findings_by_area]

    # --- Findings -----------------------------------------------------------
    def lookup_finding(self, finding: Optional[str]) -> Optional[FindingMatch]:
        """Resolve an assessment finding to its (goal, region, treatments); first keyword row wins."""
        if not finding or finding == OTHER_FINDING_LABEL:
            return None
        lower = finding.lower()
        for row in self._finding_rows:
            if any(k in lower for k in row.keywords):
                return row.match
        return None

    def findings_for_treatment(self, treatment: Optional[str]) -> List[str]:
        lower = (treatment or "").lower()
        found = []
        for finding in self.findings:
            match = self.lookup_finding(finding)
            if match and any(t.lower() == lower for t in match.treatments):
                found.append(finding)
        return found

    def findings_by_area_for_treatment(self, treatment: Optional[str]) -> List[Tuple[str, List[str]]]:
        relevant = set(self.findings_for_treatment(treatment))
        grouped = [(area, [f for f in findings if f in relevant]) for area, findings in self._findings_by_area]
        return [(area, findings) for area, findings in grouped if findings]

    # --- Goals --------------------------------------------------------------
    def treatments_for_goal(self, goal: Optional[str]) -> List[str]:
        if not goal or goal == OTHER_LABEL:
            return self.treatments
        lower = goal.lower()
        matched = _unique(t for row in self._goal_treatment_rows if row.matches(lower) for t in row.values)
        return matched or self.treatments

    def goals_and_regions_for_treatment(self, treatment: Optional[str]) -> Tuple[List[str], List[str]]:
        lower = (treatment or "").lower()
        goals: List[str] = []
        for row in self._goal_treatment_rows:
            if any(t.lower() == lower for t in row.values):
                goals.extend(g for g in self._goals if any(k in g.lower() for k in row.keywords))
        goals = _unique(goals)
        if not goals:
            return self.goals, self.regions
        regions = _unique(
            r for row in self._goal_region_rows for g in goals if row.matches(g.lower()) for r in row.values
        )
        return goals, (regions or self.regions)

    # --- Products -----------------------------------------------------------
    def products_for_treatment(self, treatment: Optional[str]) -> List[str]:
        return list(self._products.get(treatment or "", ()))

    def has_products(self, treatment: Optional[str]) -> bool:
        return bool(self._products.get(treatment or ""))

    @staticmethod
    def supports_multiple_products(treatment: Optional[str]) -> bool:
        return (treatment or "").strip() == SKINCARE

    def recommended_products(self, treatment: str, context: str) -> List[str]:
        """Catalog products recommended for a goal/finding context string."""
        if not context or not context.strip():
            return []
        catalog = [p for p in self.products_for_treatment(treatment) if p != OTHER_LABEL]
        if not catalog:
            return []
        lower = context.lower()
        return _unique(
            p for t, row in self._recommended
            if t == treatment and row.matches(lower)
            for p in row.values if p in catalog
        )

    # --- Quantity / post-care -----------------------------------------------
    def quantity_context(self, treatment: Optional[str]) -> QuantityContext:
        t = (treatment or "").strip().lower()
        if not t:
            return self._quantity_default
        for rule in self._quantity_rules:
            if t in rule.exact or any(k in t for k in rule.contains):
                return rule.context
        return self._quantity_default

    def post_care(self, treatment: Optional[str]) -> Optional[PostCare]:
        return self._post_care.get(treatment or "")
