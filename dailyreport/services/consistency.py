"""
Field-level consistency rules shared by the store and the services.

Each function returns a new model; inputs are never mutated.
"""
from typing import List

from ..core.config import NA
from ..schemas.organization import Branch, Zone
from ..schemas.staff import StaffMember
from .designations import BRANCH_MANAGER, manages_branches, manages_zones
from .location_service import find_branch, resolve_branch_location


def derive_location(member: StaffMember, branches: List[Branch]) -> StaffMember:
    """Zone / region / district always follow the branch; an unknown branch means unassigned."""
    if find_branch(branches, member.branch_name) is None:
        return member.model_copy(update={"branch_name": NA, "zone": NA, "region": NA, "district_name": NA})
    location = resolve_branch_location(branches, member.branch_name)
    return member.model_copy(update=location.model_dump())


def normalize_managed_units(member: StaffMember, zones: List[Zone], branches: List[Branch]) -> StaffMember:
    """
    Only zone managers keep managed zones; only district heads and team leads
    keep managed branches. A qualifying member with nothing assigned defaults to
    their own zone / branch, or the first one on record.
    """
    managed_zones = list(dict.fromkeys(member.managed_zones)) if manages_zones(member.function) else []
    managed_branches = list(dict.fromkeys(member.managed_branches)) if manages_branches(member.function) else []

    if manages_zones(member.function) and not managed_zones:
        if member.zone and member.zone != NA:
            managed_zones = [member.zone]
        elif zones:
            managed_zones = [zones[0].name]

    if manages_branches(member.function) and not managed_branches:
        if member.branch_name and member.branch_name != NA:
            managed_branches = [member.branch_name]
        elif branches:
            managed_branches = [branches[0].branch_name]

    return member.model_copy(update={"managed_zones": managed_zones, "managed_branches": managed_branches})


def refresh_branch_managers(branches: List[Branch], staff: List[StaffMember]) -> List[Branch]:
    """
    Manager summary on each branch: the first BRANCH MANAGER working there, or
    "N/A". The branch's own mobile number is left alone.
    """
    refreshed = []
    for branch in branches:
        manager = next(
            (s for s in staff if s.function.upper() == BRANCH_MANAGER and s.branch_name == branch.branch_name),
            None,
        )
        refreshed.append(branch.model_copy(update={
            "branch_manager_name": manager.employee_name if manager else NA,
            "branch_manager_code": manager.employee_code if manager else NA,
        }))
    return refreshed
