"""Patient domain entity: the slice of a patient record the treatment plan needs."""
from typing import Any, Dict, List, Optional

from treatplan.utilities.config import DISCUSSED_FIELD


def parse_interested_issues(raw) -> List[str]:
    """Known interests arrive either as a list or as a comma-separated string."""
    if not raw:
        return []
    if isinstance(raw, (list, tuple)):
        return [str(i).strip() for i in raw if i and str(i).strip()]
    return [part.strip() for part in str(raw).split(",") if part.strip()]


class Patient:
    def __init__(self, id: str, name: str = "", table_source: str = "Patients",
                 interested_issues: Optional[List[str]] = None, discussed_field: str = ""):
        self.id = id
        self.name = name
        self.table_source = table_source
        self.interested_issues = interested_issues[:] if interested_issues else []
        self.discussed_field = discussed_field or ""

    @staticmethod
    def from_record(record: Dict[str, Any], table_source: str = "Patients",
                    field_name: str = DISCUSSED_FIELD) -> "Patient":
        '''Builds a Patient from a store record shaped {"id": ..., "fields": {...}}.'''
        fields = record.get("fields") or {}
        raw_discussed = fields.get(field_name)
        return Patient(
            id=str(record.get("id") or ""),
            name=str(fields.get("Name") or fields.get("name") or "").strip(),
            table_source=record.get("tableSource") or table_source,
            interested_issues=parse_interested_issues(fields.get("Interested Issues")),
            discussed_field=raw_discussed if isinstance(raw_discussed, str) else "",
        )

    def __str__(self) -> str:
        return f"Patient({self.id}, {self.name or '-'}, {self.table_source})"

    __repr__ = __str__
