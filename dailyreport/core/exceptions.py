from typing import Dict, List, Optional


class ReportingError(Exception):
    """Base class for every expected, recoverable failure of the organisation engine."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ReportingError):
    """One or more fields were rejected; `errors` maps field name -> message."""

    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        super().__init__(message or "; ".join(errors.values()) or "Invalid data.")
        self.errors = dict(errors)


class DuplicateError(ValidationError):
    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        super().__init__(errors, message or errors.get("employee_code", "Employee Code must be unique."))


class CycleError(ValidationError):
    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        super().__init__(errors, message or errors.get("reports_to_employee_code", "Circular reporting line."))


class NotFoundError(ReportingError):
    def __init__(self, entity: str, id: str):
        super().__init__(f"{entity} not found.")
        self.entity = entity
        self.id = id


class BranchDeletionError(ReportingError):
    """
    Raised when a branch still has staff assigned. Carries the branch and the
    blocking staff so the caller can reassign them and retry.
    """

    def __init__(self, branch, staff: List):
        super().__init__(
            f'Cannot delete branch "{branch.branch_name}" as it has {len(staff)} staff member(s) assigned.'
        )
        self.branch = branch
        self.staff = list(staff)


class InUseError(ReportingError):
    """A zone, region or district is still referenced and cannot be deleted."""


class AuthError(ReportingError):
    def __init__(self, message: str = "Invalid Employee Code or password"):
        super().__init__(message)


class AccessError(ReportingError):
    """The logged-in user may not read or write records outside their scope."""

    def __init__(self, message: str = "You do not have access to this staff member's records."):
        super().__init__(message)
