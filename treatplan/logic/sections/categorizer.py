"""Section categorizer.

Provides categorize(items) -> ordered list of (section, items) pairs.
Skincare items always land in the Skincare section whatever their
timeline; everything else is bucketed by timeline, unknown or empty
timelines falling back to Wishlist. Empty sections are left out.
"""
from __future__ import annotations
from typing import Dict, Iterable, List, Tuple

from treatplan.domain.PlanItem import PlanItem
from treatplan.utilities.constants import DEFAULT_TIMELINE, SECTION_ORDER, SKINCARE, TIMELINE_OPTIONS

__all__ = ["section_for", "categorize", "categorize_map", "flatten"]


def section_for(item: PlanItem) -> str:
    """Name of the section an item is displayed in."""
    if item.is_skincare:
        return SKINCARE
    timeline = (item.timeline or "").strip()
    return timeline if timeline in TIMELINE_OPTIONS else DEFAULT_TIMELINE


def _sort_key(section: str):
    if section == SKINCARE:
        return lambda item: item.product or ""
    return lambda item: item.treatment or ""


def categorize_map(items: Iterable[PlanItem]) -> Dict[str, List[PlanItem]]:
    """All five sections (including empty ones), each sorted."""
    buckets: Dict[str, List[PlanItem]] = {section: [] for section in SECTION_ORDER}
    for item in items:
        buckets[section_for(item)].append(item)
    for section, bucket in buckets.items():
        bucket.sort(key=_sort_key(section))
    return buckets


def categorize(items: Iterable[PlanItem]) -> List[Tuple[str, List[PlanItem]]]:
    buckets = categorize_map(items)
    return [(section, buckets[section]) for section in SECTION_ORDER if buckets[section]]


def flatten(sections: List[Tuple[str, List[PlanItem]]]) -> List[PlanItem]:
    return [item for _, bucket in sections for item in bucket]
