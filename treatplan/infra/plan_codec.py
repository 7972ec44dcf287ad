"""Encoding of the "Treatments Discussed" record field.

The field holds the whole plan as one text value: an empty plan is the
empty string, anything else a compact JSON array of item objects (the
same bytes JavaScript's JSON.stringify produces for them).
"""
import json
import logging
from typing import Iterable, List

from treatplan.domain.PlanItem import PlanItem, generate_id

logger = logging.getLogger(__name__)


def serialize_items(items: Iterable[PlanItem]) -> str:
    data = [item.to_dict() for item in items]
    if not data:
        return ""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def parse_items(raw) -> List[PlanItem]:
    '''
    Parses a stored field value back into PlanItems. Tolerant of legacy or hand-edited
    values: anything that is not a JSON array yields an empty plan.
    '''
    if not isinstance(raw, str) or not raw.strip():
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Discarding unparseable discussed-items field (%d chars)", len(raw))
        return []
    if not isinstance(data, list):
        return []

    items = []
    for entry in data:
        if not isinstance(entry, dict):
            continue
        item = PlanItem.from_dict(entry)
        if not item.treatment:
            continue
        if not item.id:
            item.id = generate_id()
        items.append(item)
    return items


__all__ = ["serialize_items", "parse_items"]
