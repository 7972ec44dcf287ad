from typing import Final

# Sentinel labels shared by the add-entry form and the reference tables
OTHER_LABEL: Final[str] = "Other"
OTHER_FINDING_LABEL: Final[str] = "Other finding"
TREATMENT_GOAL_ONLY: Final[str] = "Goal only"
MULTIPLE_REGION: Final[str] = "Multiple"

SKINCARE: Final[str] = "Skincare"
SKINCARE_TIMELINE: Final[str] = "Skincare"

TIMELINE_NOW: Final[str] = "Now"
TIMELINE_NEXT_VISIT: Final[str] = "Add next visit"
TIMELINE_WISHLIST: Final[str] = "Wishlist"
TIMELINE_COMPLETED: Final[str] = "Completed"
TIMELINE_OPTIONS: Final[tuple] = (TIMELINE_NOW, TIMELINE_NEXT_VISIT, TIMELINE_WISHLIST, TIMELINE_COMPLETED)
DEFAULT_TIMELINE: Final[str] = TIMELINE_WISHLIST

# Display order of plan sections (Skincare only shown when non-empty)
SECTION_ORDER: Final[tuple] = (SKINCARE,) + TIMELINE_OPTIONS

QUANTITY_PLACEHOLDER_UNIT: Final[str] = "Quantity"
QUANTITY_UNIT_OPTIONS: Final[tuple] = ("Syringes", "Units", "Sessions", "Areas", QUANTITY_PLACEHOLDER_UNIT)

POST_CARE_PREFIX: Final[str] = "Post care for"

INTEREST_SEPARATOR: Final[str] = ", "
RECORD_BULLET: Final[str] = " • "
