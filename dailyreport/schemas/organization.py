# dailyreport/schemas/organization.py
from pydantic import field_validator
from typing import Dict, Optional

from ..core.config import NA
from .staff import OrgModel, _as_text

# ====================================================================
# MASTER DATA: ZONE / REGION / DISTRICT
# ====================================================================

class Zone(OrgModel):
    id: str
    name: str


class Region(OrgModel):
    id: str
    name: str
    zone_id: Optional[str] = None


class District(OrgModel):
    id: str
    name: str
    region_id: Optional[str] = None


class ZoneCreate(OrgModel):
    name: str


class ZoneUpdate(OrgModel):
    name: Optional[str] = None


class RegionCreate(OrgModel):
    name: str
    zone_id: Optional[str] = None


class RegionUpdate(OrgModel):
    name: Optional[str] = None
    zone_id: Optional[str] = None


class DistrictCreate(OrgModel):
    name: str
    region_id: Optional[str] = None


class DistrictUpdate(OrgModel):
    name: Optional[str] = None
    region_id: Optional[str] = None


# ====================================================================
# BRANCH
# ====================================================================

class Branch(OrgModel):
    id: str
    branch_name: str
    zone: str
    region: str
    district_name: str
    # Snapshot of the first BRANCH MANAGER on this branch, refreshed on every commit
    branch_manager_name: str = NA
    branch_manager_code: str = NA
    mobile_number: str = NA


class BranchCreate(OrgModel):
    branch_name: str = ""
    zone: str = ""
    region: str = ""
    district_name: str = ""
    mobile_number: str = NA

    @field_validator("branch_name", "zone", "region", "district_name", "mobile_number", mode="before")
    def coerce_text(cls, v):
        v = _as_text(v)
        return "" if v is None else v


class BranchUpdate(OrgModel):
    branch_name: Optional[str] = None
    zone: Optional[str] = None
    region: Optional[str] = None
    district_name: Optional[str] = None
    mobile_number: Optional[str] = None

    @field_validator("branch_name", "zone", "region", "district_name", "mobile_number", mode="before")
    def coerce_text(cls, v):
        return _as_text(v)


class BranchLocation(OrgModel):
    zone: str = NA
    region: str = NA
    district_name: str = NA


class BranchReassignPayload(OrgModel):
    """Targets for staff blocking a branch deletion: staff id -> branch name, plus an optional default."""
    assignments: Dict[str, str] = {}
    default_branch: Optional[str] = None
