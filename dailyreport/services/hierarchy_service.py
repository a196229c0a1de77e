from collections import deque
from typing import List, Optional, Set

from ..core.config import NA
from ..schemas.organization import Branch
from ..schemas.staff import StaffMember, SubordinateInfo
from ..schemas.user import User
from .designations import manages_branches, manages_zones


def recursive_subordinate_info(staff: StaffMember, all_staff: List[StaffMember]) -> SubordinateInfo:
    """
    Employee codes and branch names of `staff` and everyone below them in the
    reporting tree, at any depth.

    The starting member's own code (and own branch, when assigned) is part of the
    result. Traversal is breadth-first over codes with a visited set, so it
    terminates even when the stored data already contains a cycle.
    """
    codes: Set[str] = set()
    branches: Set[str] = set()
    if staff.employee_code:
        codes.add(staff.employee_code)
    if staff.branch_name and staff.branch_name != NA:
        branches.add(staff.branch_name)

    queue = deque([staff.employee_code] if staff.employee_code else [])
    while queue:
        manager_code = queue.popleft()
        for member in all_staff:
            if member.reports_to_employee_code != manager_code or not member.employee_code:
                continue
            if member.employee_code in codes:
                continue
            codes.add(member.employee_code)
            if member.branch_name and member.branch_name != NA:
                branches.add(member.branch_name)
            queue.append(member.employee_code)

    return SubordinateInfo(employee_codes=codes, branch_names=branches)


def recursive_subordinate_codes(staff: StaffMember, all_staff: List[StaffMember]) -> Set[str]:
    """Codes of direct and indirect reports only (the member itself is excluded)."""
    codes = recursive_subordinate_info(staff, all_staff).employee_codes
    codes.discard(staff.employee_code)
    return codes


def direct_reports(staff: StaffMember, all_staff: List[StaffMember]) -> List[StaffMember]:
    return [
        s for s in all_staff
        if s.reports_to_employee_code == staff.employee_code and s.id != staff.id
    ]


def would_create_cycle(staff: StaffMember, manager_code: Optional[str], all_staff: List[StaffMember]) -> bool:
    """True when `manager_code` is `staff` itself or anyone below `staff`."""
    if not manager_code:
        return False
    return manager_code in recursive_subordinate_info(staff, all_staff).employee_codes


def find_by_code(all_staff: List[StaffMember], employee_code: Optional[str]) -> Optional[StaffMember]:
    if not employee_code:
        return None
    return next((s for s in all_staff if s.employee_code == employee_code), None)


def user_scope(user: User, all_staff: List[StaffMember], branches: List[Branch]) -> SubordinateInfo:
    """
    Employee codes and branch names a logged-in user may see.

    Admins see everything. Everyone else sees themselves, their reporting tree,
    the branches they manage (by zone for zone managers, by branch list for
    district heads and team leads, otherwise their own branch), and every staff
    member working at one of those branches.
    """
    codes: Set[str] = set()
    branch_names: Set[str] = set()

    if user.role == "admin":
        codes.update(s.employee_code for s in all_staff if s.employee_code)
        branch_names.update(b.branch_name for b in branches)
        return SubordinateInfo(employee_codes=codes, branch_names=branch_names)

    if user.employee_code:
        codes.add(user.employee_code)

    node = next((s for s in all_staff if s.id == user.id), None)
    if node is not None:
        info = recursive_subordinate_info(node, all_staff)
        codes |= info.employee_codes
        branch_names |= info.branch_names

    if manages_zones(user.designation) and user.managed_zones:
        branch_names.update(b.branch_name for b in branches if b.zone in user.managed_zones)
    elif manages_branches(user.designation) and user.managed_branches:
        branch_names.update(user.managed_branches)
    elif user.branch_name and user.branch_name != NA:
        branch_names.add(user.branch_name)

    codes.update(
        s.employee_code for s in all_staff
        if s.employee_code and s.branch_name in branch_names
    )
    return SubordinateInfo(employee_codes=codes, branch_names=branch_names)
