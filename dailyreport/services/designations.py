"""
Designation classification.

Every designation maps to a fixed role tier and a multi-unit management
capability, computed once here instead of substring checks at call sites.
"""
from typing import Dict, NamedTuple, Optional

from ..core.config import DESIGNATIONS

MANAGES_ZONES = "zones"
MANAGES_BRANCHES = "branches"

BRANCH_MANAGER = "BRANCH MANAGER"


class DesignationClass(NamedTuple):
    role: str                 # "manager" | "user"
    manages: Optional[str]    # MANAGES_ZONES | MANAGES_BRANCHES | None


def _classify(designation: str) -> DesignationClass:
    upper = designation.upper()
    if upper == "ZONAL MANAGER":
        manages = MANAGES_ZONES
    elif upper in ("DISTRICT HEAD", "SENIOR DISTRICT HEAD", "ASSISTANT DISTRICT HEAD") or upper.startswith("TL-"):
        manages = MANAGES_BRANCHES
    else:
        manages = None
    is_manager = "MANAGER" in upper or "HEAD" in upper or "TL" in upper
    return DesignationClass("manager" if is_manager else "user", manages)


DESIGNATION_TABLE: Dict[str, DesignationClass] = {d: _classify(d) for d in DESIGNATIONS}


def classify(designation: Optional[str]) -> DesignationClass:
    """Unknown designations fall back to the same rules so legacy data still gets a role."""
    if not designation:
        return DesignationClass("user", None)
    return DESIGNATION_TABLE.get(designation.upper()) or _classify(designation)


def is_known(designation: Optional[str]) -> bool:
    return bool(designation) and designation.upper() in DESIGNATION_TABLE


def role_for(designation: Optional[str]) -> str:
    return classify(designation).role


def manages_zones(designation: Optional[str]) -> bool:
    return classify(designation).manages == MANAGES_ZONES


def manages_branches(designation: Optional[str]) -> bool:
    return classify(designation).manages == MANAGES_BRANCHES
