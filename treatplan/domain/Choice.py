"""Catalog-or-custom selection used by the add-entry form.

A goal, finding, treatment, product or region is either an entry of a
reference catalog or a free-text value typed next to an "Other" option.
"""
from dataclasses import dataclass
from typing import Optional, Union

from treatplan.utilities.constants import OTHER_FINDING_LABEL, OTHER_LABEL


@dataclass(frozen=True)
class Catalog:
    name: str

    @property
    def value(self) -> Optional[str]:
        return self.name.strip() or None


@dataclass(frozen=True)
class Custom:
    text: str = ""

    @property
    def value(self) -> Optional[str]:
        return self.text.strip() or None


Choice = Union[Catalog, Custom]


def choice_from_label(label: str, other_text: str = "") -> Choice:
    """Turn a selected option label into a Choice; the "Other" sentinels become Custom."""
    if label in (OTHER_LABEL, OTHER_FINDING_LABEL):
        return Custom(other_text or "")
    return Catalog(label)


def choice_label(choice: Choice) -> str:
    """Inverse of choice_from_label, used when echoing form state back to a client."""
    if isinstance(choice, Custom):
        return OTHER_LABEL
    return choice.name
