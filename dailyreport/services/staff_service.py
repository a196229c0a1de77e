# dailyreport/services/staff_service.py
import re
import uuid
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from ..core.config import NA, logger
from ..core.exceptions import CycleError, DuplicateError, NotFoundError, ValidationError
from ..db.store import OrgStore
from ..schemas.organization import Branch, Zone
from ..schemas.staff import BulkResult, StaffCreate, StaffMember, StaffRead, StaffReassignment, StaffUpdate
from .designations import is_known, manages_branches, manages_zones
from .hierarchy_service import direct_reports, find_by_code, would_create_cycle
from .location_service import find_branch

CONTACT_PATTERN = re.compile(r"^\d{10}$")

# Messages shown next to each form field
MSG_NAME_REQUIRED = "Employee Name is required."
MSG_CODE_REQUIRED = "Employee Code is required."
MSG_CODE_TOO_SHORT = "Employee Code must be at least 3 characters."
MSG_CODE_DUPLICATE = "Employee Code must be unique."
MSG_CONTACT_REQUIRED = "Contact Number is required."
MSG_CONTACT_INVALID = "Please enter a valid 10-digit mobile number."
MSG_BRANCH_UNKNOWN = "Selected Primary Branch does not exist."
MSG_SELF_REPORT = "A staff member cannot report to themselves."
MSG_MANAGER_UNKNOWN = "Selected Reporting Manager does not exist."
MSG_CYCLE = "Cannot report to a subordinate in the hierarchy."


def _new_id() -> str:
    return f"staff-{uuid.uuid4().hex[:12]}"


def _apply_update(all_staff: List[StaffMember], current: StaffMember, candidate: StaffMember) -> List[StaffMember]:
    """Staff list with `candidate` in place of `current`; a code rename carries over to direct reports."""
    renamed = candidate.employee_code != current.employee_code
    result = []
    for s in all_staff:
        if s.id == current.id:
            result.append(candidate)
        elif renamed and s.reports_to_employee_code == current.employee_code:
            result.append(s.model_copy(update={"reports_to_employee_code": candidate.employee_code}))
        else:
            result.append(s)
    return result


class StaffService:
    """
    Add / update / remove staff while keeping the collection consistent:
    unique employee codes, an acyclic reporting forest, location fields that
    follow the branch and managed units only on qualifying designations.

    Every operation either commits once to the store or raises before touching it.
    """

    def __init__(self, store: OrgStore):
        self.store = store

    # ====================================================================
    # READS
    # ====================================================================

    def list(self) -> List[StaffMember]:
        return self.store.staff

    def get(self, staff_id: str) -> StaffMember:
        member = next((s for s in self.store.staff if s.id == staff_id), None)
        if member is None:
            raise NotFoundError("Staff member", staff_id)
        return member

    def by_branch(self, branch_name: str) -> List[StaffMember]:
        return [s for s in self.store.staff if s.branch_name == branch_name]

    def read_model(self, member: StaffMember, all_staff: Optional[List[StaffMember]] = None) -> StaffRead:
        """Record plus its direct reports and manager name, resolved now. Dangling links read as "N/A"."""
        all_staff = self.store.staff if all_staff is None else all_staff
        subordinates = direct_reports(member, all_staff)
        manager = find_by_code(all_staff, member.reports_to_employee_code)
        return StaffRead(
            **member.model_dump(),
            subordinates=subordinates,
            subordinate_count=len(subordinates),
            reports_to_name=manager.employee_name if manager else NA,
        )

    # ====================================================================
    # VALIDATION
    # ====================================================================

    def _collect_errors(
        self,
        candidate: StaffMember,
        all_staff: List[StaffMember],
        zones: List[Zone],
        branches: List[Branch],
        current: Optional[StaffMember] = None,
    ) -> Tuple[Dict[str, str], bool, bool]:
        """
        Field -> message map for `candidate`, plus whether the code collides and
        whether the reporting line closes a cycle.

        `current` is the stored record when updating; it is excluded from the
        uniqueness check and is the root of the pre-mutation subordinate set.
        """
        errors: Dict[str, str] = {}
        duplicate = cycle = False
        others = [s for s in all_staff if s.id != candidate.id]

        if not candidate.employee_name.strip():
            errors["employee_name"] = MSG_NAME_REQUIRED

        code = candidate.employee_code
        if not code:
            errors["employee_code"] = MSG_CODE_REQUIRED
        elif len(code) < 3:
            errors["employee_code"] = MSG_CODE_TOO_SHORT
        elif any(s.employee_code == code for s in others):
            errors["employee_code"] = MSG_CODE_DUPLICATE
            duplicate = True

        if not candidate.contact_number:
            errors["contact_number"] = MSG_CONTACT_REQUIRED
        elif not CONTACT_PATTERN.match(candidate.contact_number):
            errors["contact_number"] = MSG_CONTACT_INVALID

        if candidate.branch_name != NA and find_branch(branches, candidate.branch_name) is None:
            errors["branch_name"] = MSG_BRANCH_UNKNOWN

        if not is_known(candidate.function):
            errors["function"] = f'Designation "{candidate.function}" is not recognised.'

        if manages_zones(candidate.function):
            zone_names = {z.name for z in zones}
            unknown = [z for z in candidate.managed_zones if z not in zone_names]
            if unknown:
                errors["managed_zones"] = f"Unknown zone(s): {', '.join(unknown)}."
        if manages_branches(candidate.function):
            unknown = [b for b in candidate.managed_branches if find_branch(branches, b) is None]
            if unknown:
                errors["managed_branches"] = f"Unknown branch(es): {', '.join(unknown)}."

        manager_code = candidate.reports_to_employee_code
        if manager_code:
            changed = current is None or manager_code != current.reports_to_employee_code
            # Checked against the staff list as it would look after the write. A new
            # or renamed code may already be referenced by dangling links.
            proposed = all_staff + [candidate] if current is None else _apply_update(all_staff, current, candidate)
            if manager_code == code or (current is not None and manager_code == current.employee_code):
                errors["reports_to_employee_code"] = MSG_SELF_REPORT
                cycle = True
            elif changed and find_by_code(others, manager_code) is None:
                errors["reports_to_employee_code"] = MSG_MANAGER_UNKNOWN
            elif would_create_cycle(candidate, manager_code, proposed):
                errors["reports_to_employee_code"] = MSG_CYCLE
                cycle = True

        return errors, duplicate, cycle

    def _validate(self, candidate, all_staff, zones, branches, current=None, only: Optional[Set[str]] = None):
        errors, duplicate, cycle = self._collect_errors(candidate, all_staff, zones, branches, current)
        if only is not None:
            errors = {k: v for k, v in errors.items() if k in only}
            duplicate = duplicate and "employee_code" in errors
            cycle = cycle and "reports_to_employee_code" in errors
        if duplicate:
            raise DuplicateError(errors)
        if cycle:
            raise CycleError(errors)
        if errors:
            raise ValidationError(errors)

    def _release_reports(self, staff: List[StaffMember], removed_codes: Set[str]) -> List[StaffMember]:
        # Dangling reporting links are tolerated unless configured otherwise
        if not self.store.settings.CLEAR_DANGLING_REPORTS:
            return staff
        return [
            s.model_copy(update={"reports_to_employee_code": None})
            if s.reports_to_employee_code in removed_codes else s
            for s in staff
        ]

    # ====================================================================
    # MUTATIONS
    # ====================================================================

    def add(self, data: Union[StaffCreate, dict]) -> StaffMember:
        if not isinstance(data, StaffCreate):
            data = StaffCreate.model_validate(data)

        with self.store.lock:
            all_staff = self.store.staff
            candidate = StaffMember(
                id=_new_id(),
                employee_name=data.employee_name.strip(),
                employee_code=data.employee_code,
                contact_number=data.contact_number,
                function=data.function.upper(),
                branch_name=data.branch_name or NA,
                managed_zones=data.managed_zones,
                managed_branches=data.managed_branches,
                reports_to_employee_code=data.reports_to_employee_code,
            )
            self._validate(candidate, all_staff, self.store.zones, self.store.branches)

            self.store.commit(staff=all_staff + [candidate])
            logger.info(f"[STAFF] Added '{candidate.employee_code}' ({candidate.employee_name}) as {candidate.function}.")
            return self.get(candidate.id)

    def update(self, staff_id: str, data: Union[StaffUpdate, dict]) -> StaffMember:
        if not isinstance(data, StaffUpdate):
            data = StaffUpdate.model_validate(data)
        # Only the reporting line may be explicitly cleared
        changes = {
            k: v for k, v in data.model_dump(exclude_unset=True).items()
            if v is not None or k == "reports_to_employee_code"
        }
        if "function" in changes:
            changes["function"] = changes["function"].upper()
        if changes.get("branch_name") == "":
            changes["branch_name"] = NA

        with self.store.lock:
            all_staff = self.store.staff
            current = next((s for s in all_staff if s.id == staff_id), None)
            if current is None:
                raise NotFoundError("Staff member", staff_id)

            candidate = current.model_copy(update=changes)
            self._validate(candidate, all_staff, self.store.zones, self.store.branches, current=current)

            renamed = candidate.employee_code != current.employee_code
            achievements = projections = None
            if renamed:
                # Submitted records follow the member to the new code
                old_code, new_code = current.employee_code, candidate.employee_code
                achievements = [
                    r.model_copy(update={"employee_code": new_code}) if r.employee_code == old_code else r
                    for r in self.store.achievements
                ]
                projections = [
                    p.model_copy(update={"employee_code": new_code}) if p.employee_code == old_code else p
                    for p in self.store.projections
                ]
            self.store.commit(
                staff=_apply_update(all_staff, current, candidate),
                achievements=achievements,
                projections=projections,
            )
            if renamed:
                logger.info(f"[STAFF] Employee code '{current.employee_code}' renamed to '{candidate.employee_code}'.")
            logger.info(f"[STAFF] Updated '{candidate.employee_code}': {', '.join(sorted(changes)) or 'no changes'}.")
            return self.get(staff_id)

    def remove(self, staff_id: str) -> None:
        with self.store.lock:
            all_staff = self.store.staff
            member = next((s for s in all_staff if s.id == staff_id), None)
            if member is None:
                raise NotFoundError("Staff member", staff_id)
            if staff_id in self.store.protected_ids:
                raise ValidationError({"id": "System accounts cannot be deleted."})

            remaining = [s for s in all_staff if s.id != staff_id]
            self.store.commit(staff=self._release_reports(remaining, {member.employee_code}))
            logger.info(f"[STAFF] Removed '{member.employee_code}' ({member.employee_name}).")

    def remove_multiple(self, ids: Iterable[str]) -> int:
        """Delete every listed record except system accounts. Returns how many were deleted."""
        with self.store.lock:
            wanted = set(ids) - self.store.protected_ids
            all_staff = self.store.staff
            removed = [s for s in all_staff if s.id in wanted]
            if not removed:
                return 0
            remaining = [s for s in all_staff if s.id not in wanted]
            self.store.commit(staff=self._release_reports(remaining, {s.employee_code for s in removed}))
            logger.info(f"[STAFF] Removed {len(removed)} staff member(s).")
            return len(removed)

    def remove_all(self, except_id: Optional[str] = None) -> int:
        """Delete everyone but the system accounts and `except_id`."""
        with self.store.lock:
            keep = set(self.store.protected_ids)
            if except_id:
                keep.add(except_id)
            ids = [s.id for s in self.store.staff if s.id not in keep]
            return self.remove_multiple(ids)

    def bulk_add(self, records: Iterable[Union[StaffCreate, dict]]) -> BulkResult:
        """
        Lenient import. Rows with an empty name or code, or a code already
        present (in the store or earlier in the batch), are skipped. Everything
        else is repaired with a warning instead of rejected.
        """
        default_designation = self.store.settings.DEFAULT_DESIGNATION
        added = skipped = 0

        with self.store.lock:
            new_staff = self.store.staff
            branches = self.store.branches
            zone_names = {z.name for z in self.store.zones}
            seen_codes = {s.employee_code for s in new_staff}

            for row_number, record in enumerate(records, start=1):
                data = record if isinstance(record, StaffCreate) else StaffCreate.model_validate(record)
                code = data.employee_code
                name = data.employee_name.strip()

                if not code or not name:
                    logger.warning(f"[IMPORT] Row {row_number}: missing name or code, skipped.")
                    skipped += 1
                    continue
                if code in seen_codes:
                    logger.info(f"[IMPORT] Row {row_number}: employee code '{code}' already exists, skipped.")
                    skipped += 1
                    continue

                function = data.function.upper()
                if not is_known(function):
                    logger.warning(
                        f"[IMPORT] Row {row_number}: unknown designation '{data.function}', "
                        f"using '{default_designation}'."
                    )
                    function = default_designation

                branch_name = data.branch_name or NA
                if branch_name != NA and find_branch(branches, branch_name) is None:
                    logger.warning(f"[IMPORT] Row {row_number}: unknown branch '{branch_name}', left unassigned.")
                    branch_name = NA

                managed_zones = [z for z in data.managed_zones if z in zone_names]
                managed_branches = [b for b in data.managed_branches if find_branch(branches, b)]
                if len(managed_zones) != len(data.managed_zones) or len(managed_branches) != len(data.managed_branches):
                    logger.warning(f"[IMPORT] Row {row_number}: unknown managed zones/branches dropped.")

                member = StaffMember(
                    id=_new_id(),
                    employee_name=name,
                    employee_code=code,
                    contact_number=data.contact_number or NA,
                    function=function,
                    branch_name=branch_name,
                    managed_zones=managed_zones,
                    managed_branches=managed_branches,
                    reports_to_employee_code=data.reports_to_employee_code,
                )
                manager_code = member.reports_to_employee_code
                if manager_code and would_create_cycle(member, manager_code, new_staff + [member]):
                    logger.warning(
                        f"[IMPORT] Row {row_number}: reporting line '{code}' -> '{manager_code}' "
                        f"would create a cycle, dropped."
                    )
                    member.reports_to_employee_code = None

                new_staff.append(member)
                seen_codes.add(code)
                added += 1

            if added:
                self.store.commit(staff=new_staff)

        logger.info(f"[IMPORT] Staff import finished: {added} added, {skipped} skipped.")
        return BulkResult(added=added, skipped=skipped)

    def bulk_reassign(self, changes: Iterable[Union[StaffReassignment, dict]]) -> List[StaffMember]:
        """
        Move many records to another branch and/or designation in one commit.
        Nothing is applied unless every change is valid.
        """
        with self.store.lock:
            all_staff = self.store.staff
            zones = self.store.zones
            branches = self.store.branches
            by_id = {s.id: s for s in all_staff}
            updated: Dict[str, StaffMember] = {}

            for change in changes:
                if not isinstance(change, StaffReassignment):
                    change = StaffReassignment.model_validate(change)
                member = updated.get(change.id) or by_id.get(change.id)
                if member is None:
                    raise NotFoundError("Staff member", change.id)

                update = {}
                if change.branch_name is not None:
                    update["branch_name"] = change.branch_name or NA
                if change.function is not None:
                    update["function"] = change.function.upper()
                candidate = member.model_copy(update=update)
                self._validate(candidate, all_staff, zones, branches, current=member, only={"branch_name", "function"})
                updated[change.id] = candidate

            if not updated:
                return []
            self.store.commit(staff=[updated.get(s.id, s) for s in all_staff])
            logger.info(f"[STAFF] Reassigned {len(updated)} staff member(s).")

            snapshot = {s.id: s for s in self.store.staff}
            return [snapshot[staff_id] for staff_id in updated]


def filter_staff(staff: List[StaffMember], all_staff: List[StaffMember], search: str = "",
                 designation: Optional[str] = None, branch_name: Optional[str] = None) -> List[StaffMember]:
    """Staff list search: free text over names, codes, locations, managed units and manager name."""
    result = staff
    term = (search or "").strip().lower()
    if term:
        names = {s.employee_code: s.employee_name.lower() for s in all_staff}

        def matches(s: StaffMember) -> bool:
            fields = [s.employee_name, s.employee_code, s.function, s.branch_name, s.district_name, s.zone, s.region]
            fields += s.managed_zones + s.managed_branches
            if any(term in f.lower() for f in fields):
                return True
            return term in names.get(s.reports_to_employee_code or "", "")

        result = [s for s in result if matches(s)]
    if designation:
        result = [s for s in result if s.function == designation.upper()]
    if branch_name:
        result = [s for s in result if s.branch_name == branch_name]
    return result
