"""
Input validation schemas using Pydantic for the plan editing API.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from treatplan.utilities.constants import SECTION_ORDER, TIMELINE_OPTIONS

_TIMELINE_PATTERN = r'^(' + '|'.join(TIMELINE_OPTIONS) + r')$'
_SECTION_PATTERN = r'^(' + '|'.join(SECTION_ORDER) + r')$'


class OpenPlanInput(BaseModel):
    """Schema for opening a patient's plan for editing."""
    patient_id: str = Field(..., min_length=1, max_length=100)
    table_source: str = Field(default="Patients", min_length=1, max_length=100)
    name: Optional[str] = None
    interested_issues: List[str] = Field(default_factory=list)
    discussed: Optional[str] = Field(default=None, description="Stored field value; read from the store when omitted")

    @field_validator('patient_id', 'table_source')
    @classmethod
    def strip_whitespace(cls, v):
        """Remove leading/trailing whitespace."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator('interested_issues')
    @classmethod
    def validate_issues(cls, v):
        """Ensure interests are non-empty strings."""
        return [i.strip() for i in v if i and i.strip()]


class EntryModeInput(BaseModel):
    mode: str = Field(..., pattern=r'^(goal|finding|treatment)$')


class ChoiceInput(BaseModel):
    """A catalog label, or "Other"/"Other finding" with free text."""
    label: str = Field(..., min_length=1, max_length=200)
    other_text: str = Field(default="", max_length=500)


class ProductChoiceInput(ChoiceInput):
    treatment: str = Field(..., min_length=1, max_length=200)


class EntryFieldsInput(BaseModel):
    """Scratch fields of the add-entry form; omitted fields are left unchanged."""
    quantity: Optional[str] = Field(default=None, max_length=50)
    quantity_unit: Optional[str] = Field(default=None, max_length=50)
    timeline: Optional[str] = Field(default=None, pattern=_TIMELINE_PATTERN)
    recurring: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = Field(default=None, max_length=2000)
    brand: Optional[str] = Field(default=None, max_length=200)
    region: Optional[str] = Field(default=None, max_length=200)
    region_other_text: str = Field(default="", max_length=200)


class MoveInput(BaseModel):
    item_id: str = Field(..., min_length=1)
    target: str = Field(..., pattern=_SECTION_PATTERN)


class EditItemInput(BaseModel):
    """Schema for editing a plan item in place; omitted fields are kept."""
    treatment: Optional[str] = Field(default=None, max_length=200)
    product: Optional[str] = Field(default=None, max_length=200)
    quantity: Optional[str] = Field(default=None, max_length=50)
    quantity_unit: Optional[str] = Field(default=None, max_length=50)
    timeline: Optional[str] = Field(default=None, max_length=50)
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator('treatment')
    @classmethod
    def validate_treatment(cls, v):
        """Treatment may be omitted but never blanked."""
        if v is not None and not v.strip():
            raise ValueError('Treatment cannot be empty')
        return v.strip() if v is not None else v


class PostCareInput(BaseModel):
    treatment: str = Field(..., min_length=1, max_length=200)
    product: str = Field(..., min_length=1, max_length=200)
