from typing import Dict, List, Optional

from .staff import OrgModel


class User(OrgModel):
    """A login, projected from a staff record. Never stored or edited directly."""
    id: str
    username: str
    role: str
    staff_name: str
    designation: str
    contact_number: str
    branch_name: Optional[str] = None
    employee_code: Optional[str] = None
    zone: Optional[str] = None
    region: Optional[str] = None
    district_name: Optional[str] = None
    managed_zones: List[str] = []
    managed_branches: List[str] = []
    reports_to_employee_code: Optional[str] = None
    subordinates: List["User"] = []


class AuthProjection(OrgModel):
    users: List[User] = []
    passwords: Dict[str, str] = {}


class LoginPayload(OrgModel):
    username: str
    password: str
