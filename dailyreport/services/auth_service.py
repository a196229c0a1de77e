from typing import List, Optional

from ..core.config import ADMIN_USER_ID, ZONAL_MANAGER_USER_ID, logger
from ..core.exceptions import AuthError
from ..schemas.staff import StaffMember
from ..schemas.user import AuthProjection, User
from .designations import role_for
from .hierarchy_service import direct_reports

# System identities: staff record id -> (username, designation shown, role)
SYSTEM_IDENTITIES = {
    ADMIN_USER_ID: ("admin", "ADMINISTRATOR", "admin"),
    ZONAL_MANAGER_USER_ID: ("zm", None, "admin"),
}


def _project(staff: StaffMember, username: str, role: str, designation: Optional[str] = None,
             subordinates: Optional[List[User]] = None) -> User:
    return User(
        id=staff.id,
        username=username,
        role=role,
        staff_name=staff.employee_name,
        designation=designation or staff.function,
        contact_number=staff.contact_number,
        branch_name=staff.branch_name,
        employee_code=staff.employee_code,
        zone=staff.zone,
        region=staff.region,
        district_name=staff.district_name,
        managed_zones=list(staff.managed_zones),
        managed_branches=list(staff.managed_branches),
        reports_to_employee_code=staff.reports_to_employee_code,
        subordinates=subordinates or [],
    )


def _one_level(staff: StaffMember, all_staff: List[StaffMember]) -> List[User]:
    # Direct reports only; deeper levels are walked on demand by the hierarchy service
    return [
        _project(sub, sub.employee_code, role_for(sub.function))
        for sub in direct_reports(staff, all_staff)
    ]


def recompute(all_staff: List[StaffMember], admin_password: str = "admin123",
              zm_password: str = "zm123") -> AuthProjection:
    """
    Derive every login from the staff collection. Deterministic: the same staff
    list always yields the same users and passwords.
    """
    users: List[User] = []
    passwords = {}
    system_passwords = {ADMIN_USER_ID: admin_password, ZONAL_MANAGER_USER_ID: zm_password}

    # 1. System identities first, each backed by its record when present
    for record_id, (username, designation, role) in SYSTEM_IDENTITIES.items():
        staff = next((s for s in all_staff if s.id == record_id), None)
        if staff is None:
            continue
        users.append(_project(staff, username, role, designation, _one_level(staff, all_staff)))
        passwords[username] = system_passwords[record_id]

    # 2. One login per remaining staff member; username and password are the employee code
    for staff in all_staff:
        if staff.id in SYSTEM_IDENTITIES or not staff.employee_code:
            continue
        username = staff.employee_code
        if username in passwords:
            logger.warning(f"[AUTH] Employee code '{username}' clashes with a system login; no login created.")
            continue
        users.append(_project(staff, username, role_for(staff.function), subordinates=_one_level(staff, all_staff)))
        passwords[username] = username

    return AuthProjection(users=users, passwords=passwords)


def login(projection: AuthProjection, username: str, password: str) -> User:
    user = next((u for u in projection.users if u.username == username), None)
    if user is None or projection.passwords.get(username) != password:
        logger.info(f"[AUTH] Failed login for '{username}'.")
        raise AuthError()
    logger.info(f"[AUTH] '{username}' logged in with role '{user.role}'.")
    return user
