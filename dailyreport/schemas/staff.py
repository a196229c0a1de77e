# dailyreport/schemas/staff.py
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional, Set

from ..core.config import NA


def _as_text(v):
    """Spreadsheet cells and JSON clients send codes and phone numbers as numbers too."""
    if v is None:
        return v
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    return str(v).strip()


def _as_name_list(v):
    """Accept a list or a comma-joined string ("Zone-1, Zone-2")."""
    if v is None:
        return []
    if isinstance(v, str):
        return [part.strip() for part in v.split(",") if part.strip()]
    return [str(part).strip() for part in v if str(part).strip()]


class OrgModel(BaseModel):
    """Base model: snake_case attributes, camelCase accepted on input and emitted on output."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ====================================================================
# STORED RECORD
# ====================================================================

class StaffMember(OrgModel):
    id: str
    employee_code: str
    employee_name: str
    contact_number: str = NA
    function: str = "BRANCH OFFICER"
    branch_name: str = NA
    zone: str = NA
    region: str = NA
    district_name: str = NA
    managed_zones: List[str] = []
    managed_branches: List[str] = []
    reports_to_employee_code: Optional[str] = None


# ====================================================================
# REQUEST BODIES
# ====================================================================

class StaffCreate(OrgModel):
    """
    Input for adding a staff member. Shapes are lenient on purpose: every
    business rule is checked by the staff service so failures come back as a
    field -> message map instead of a schema error.
    """
    employee_name: str = ""
    employee_code: str = ""
    contact_number: str = ""
    function: str = "BRANCH OFFICER"
    branch_name: str = NA
    # Location fields are derived from the branch; values sent here are ignored
    zone: Optional[str] = None
    region: Optional[str] = None
    district_name: Optional[str] = None
    managed_zones: List[str] = []
    managed_branches: List[str] = []
    reports_to_employee_code: Optional[str] = None

    @field_validator("employee_name", "employee_code", "contact_number", "function", "branch_name", mode="before")
    def coerce_text(cls, v):
        v = _as_text(v)
        return "" if v is None else v

    @field_validator("reports_to_employee_code", mode="before")
    def blank_is_none(cls, v):
        v = _as_text(v)
        return v or None

    @field_validator("managed_zones", "managed_branches", mode="before")
    def coerce_names(cls, v):
        return _as_name_list(v)


class StaffUpdate(OrgModel):
    """Partial update: only fields that were explicitly set are applied."""
    employee_name: Optional[str] = None
    employee_code: Optional[str] = None
    contact_number: Optional[str] = None
    function: Optional[str] = None
    branch_name: Optional[str] = None
    managed_zones: Optional[List[str]] = None
    managed_branches: Optional[List[str]] = None
    reports_to_employee_code: Optional[str] = None

    @field_validator("employee_name", "employee_code", "contact_number", "function", "branch_name", mode="before")
    def coerce_text(cls, v):
        return _as_text(v)

    @field_validator("reports_to_employee_code", mode="before")
    def blank_is_none(cls, v):
        v = _as_text(v)
        return v or None

    @field_validator("managed_zones", "managed_branches", mode="before")
    def coerce_names(cls, v):
        return None if v is None else _as_name_list(v)


class StaffReassignment(OrgModel):
    """One entry of a bulk reassignment (branch and/or designation change)."""
    id: str
    branch_name: Optional[str] = None
    function: Optional[str] = None


class BulkReassignPayload(OrgModel):
    changes: List[StaffReassignment]


class BatchDeleteStaffPayload(OrgModel):
    ids: List[str]


# ====================================================================
# RESPONSES
# ====================================================================

class StaffRead(StaffMember):
    """A staff record with its direct reports resolved at read time."""
    subordinates: List[StaffMember] = []
    subordinate_count: int = 0
    reports_to_name: str = NA


class BulkResult(OrgModel):
    added: int = 0
    skipped: int = 0


class SubordinateInfo(OrgModel):
    employee_codes: Set[str] = set()
    branch_names: Set[str] = set()
