"""Plan presentation helpers.

Display names, area labels and one-line summaries for plan items, plus the
SMS body used when sharing a plan with the patient.
"""
from typing import Iterable, List, Optional

from treatplan.domain.PlanItem import PlanItem
from treatplan.logic.sections.categorizer import categorize
from treatplan.utilities.constants import RECORD_BULLET, TREATMENT_GOAL_ONLY

# (keywords, area) checked in order after the forehead and eye rules
_AREA_RULES = (
    (("under eye", "tear trough", "eyelid", "crow", "bunny"), "Eyes"),
    (("nose", "nasal"), "Nose"),
    (("cheek",), "Cheeks"),
    (("lip",), "Lips"),
    (("chin",), "Chin"),
    (("jaw", "jowl"), "Jawline"),
    (("neck", "platysma"), "Neck"),
    (("full face",), "Full face"),
    (("skin",), "Skin"),
)


def _normalize_area(text: Optional[str]) -> Optional[str]:
    lower = (text or "").strip().lower()
    if not lower:
        return None
    if "forehead" in lower:
        return "Forehead"
    # "eye" but not "eyebrow"
    if "eye" in lower and "eyebrow" not in lower:
        return "Eyes"
    for keywords, area in _AREA_RULES:
        if any(k in lower for k in keywords):
            return area
    return None


def display_area_for_item(item: PlanItem) -> Optional[str]:
    """Region, else interest, else the first finding that names an area."""
    for text in (item.region, item.interest, *(item.findings or [])):
        area = _normalize_area(text)
        if area:
            return area
    return None


def treatment_display_name(item: PlanItem) -> str:
    if item.treatment == TREATMENT_GOAL_ONLY and (item.interest or "").strip():
        return item.interest.strip()
    return (item.treatment or "").strip() or "—"


def format_meta_line(item: PlanItem) -> str:
    parts = []
    area = display_area_for_item(item)
    if area:
        parts.append(area)
    if (item.product or "").strip():
        parts.append(item.product.strip())
    if (item.quantity or "").strip():
        parts.append(f"Qty: {item.quantity}")
    return RECORD_BULLET.join(parts)


def format_record_line(item: PlanItem) -> str:
    treatment = (item.treatment or "").strip()
    meta = format_meta_line(item)
    if treatment and meta:
        return f"{treatment}{RECORD_BULLET}{meta}"
    return treatment or meta


def build_share_message(provider_name: str, items: Iterable[PlanItem]) -> str:
    """SMS body listing the plan by section.

    Example:
        We: Your treatment plan is ready. Here's what we discussed:

        Now:
        • Neurotoxin (Forehead) — Botox
    """
    items = list(items)
    if not items:
        return (f"{provider_name}: Your treatment plan is ready. "
                "Here's a summary of the treatments we discussed for you.")
    lines: List[str] = [f"{provider_name}: Your treatment plan is ready. Here's what we discussed:", ""]
    for section, bucket in categorize(items):
        lines.append(f"{section}:")
        for item in bucket:
            parts = [treatment_display_name(item)]
            if item.region:
                parts.append(f"({item.region})")
            if item.product:
                parts.append(f"— {item.product}")
            lines.append(f"• {' '.join(parts)}")
        lines.append("")
    return "\n".join(lines).rstrip()
