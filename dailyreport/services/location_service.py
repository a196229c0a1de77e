from typing import List, Optional

from ..core.config import NA
from ..schemas.organization import Branch, BranchLocation, District, Region, Zone


def find_branch(branches: List[Branch], branch_name: Optional[str]) -> Optional[Branch]:
    if not branch_name or branch_name == NA:
        return None
    return next((b for b in branches if b.branch_name == branch_name), None)


def resolve_branch_location(branches: List[Branch], branch_name: Optional[str]) -> BranchLocation:
    """
    Zone / region / district of a branch, by exact name. Unknown names resolve
    to the "N/A" location; callers treat that as unassigned, not as an error.
    """
    branch = find_branch(branches, branch_name)
    if branch is None:
        return BranchLocation()
    return BranchLocation(zone=branch.zone, region=branch.region, district_name=branch.district_name)


def regions_in_zone(zones: List[Zone], regions: List[Region], zone_name: str) -> List[Region]:
    zone = next((z for z in zones if z.name == zone_name), None)
    if zone is None:
        return []
    return [r for r in regions if r.zone_id == zone.id]


def districts_in_region(regions: List[Region], districts: List[District], region_name: str) -> List[District]:
    region = next((r for r in regions if r.name == region_name), None)
    if region is None:
        return []
    return [d for d in districts if d.region_id == region.id]
