# dailyreport/services/branch_service.py
import uuid
from typing import Dict, Iterable, List, Optional, Union

from ..core.config import NA, logger
from ..core.exceptions import BranchDeletionError, InUseError, NotFoundError, ValidationError
from ..db.store import OrgStore
from ..schemas.organization import Branch, BranchCreate, BranchUpdate
from ..schemas.staff import BulkResult, StaffMember, StaffReassignment
from .staff_service import StaffService


def _new_id() -> str:
    return f"branch-{uuid.uuid4().hex[:12]}"


class BranchService:
    def __init__(self, store: OrgStore):
        self.store = store

    # --- READS ---

    def list(self) -> List[Branch]:
        return self.store.branches

    def get(self, branch_id: str) -> Branch:
        branch = next((b for b in self.store.branches if b.id == branch_id), None)
        if branch is None:
            raise NotFoundError("Branch", branch_id)
        return branch

    def blocking_staff(self, branch: Branch) -> List[StaffMember]:
        """Staff whose primary branch is `branch`, in store order."""
        return [s for s in self.store.staff if s.branch_name == branch.branch_name]

    # --- VALIDATION ---

    def _master_data_errors(self, branch: Branch) -> Dict[str, str]:
        errors = {}
        if not any(z.name == branch.zone for z in self.store.zones):
            errors["zone"] = f'Zone "{branch.zone}" not found in master data.'
        if not any(r.name == branch.region for r in self.store.regions):
            errors["region"] = f'Region "{branch.region}" not found in master data.'
        if not any(d.name == branch.district_name for d in self.store.districts):
            errors["district_name"] = f'District "{branch.district_name}" not found in master data.'
        return errors

    def _validate(self, branch: Branch, branches: List[Branch]):
        errors = {}
        name = branch.branch_name.strip()
        if not name:
            errors["branch_name"] = "Branch Name is required."
        elif name.upper() == NA:
            errors["branch_name"] = f'"{NA}" is reserved and cannot be used as a branch name.'
        elif any(b.branch_name.lower() == name.lower() for b in branches if b.id != branch.id):
            errors["branch_name"] = "Branch name must be unique."
        errors.update(self._master_data_errors(branch))
        if errors:
            raise ValidationError(errors)

    # --- MUTATIONS ---

    def add(self, data: Union[BranchCreate, dict]) -> Branch:
        if not isinstance(data, BranchCreate):
            data = BranchCreate.model_validate(data)

        with self.store.lock:
            branches = self.store.branches
            branch = Branch(id=_new_id(), **data.model_dump())
            branch.branch_name = branch.branch_name.strip()
            self._validate(branch, branches)

            self.store.commit(branches=branches + [branch])
            logger.info(f"[BRANCH] Added branch '{branch.branch_name}' ({branch.zone} / {branch.region} / {branch.district_name}).")
            return self.get(branch.id)

    def bulk_add(self, rows: Iterable[Union[BranchCreate, dict]]) -> BulkResult:
        """Import branches; rows with a duplicate name or unknown master data are skipped."""
        added = skipped = 0
        with self.store.lock:
            branches = self.store.branches
            for row_number, row in enumerate(rows, start=1):
                data = row if isinstance(row, BranchCreate) else BranchCreate.model_validate(row)
                branch = Branch(id=_new_id(), **data.model_dump())
                try:
                    self._validate(branch, branches)
                except ValidationError as e:
                    logger.warning(f"[IMPORT] Branch row {row_number} skipped: {e.message}")
                    skipped += 1
                    continue
                branches.append(branch)
                added += 1

            if added:
                self.store.commit(branches=branches)

        logger.info(f"[IMPORT] Branch import finished: {added} added, {skipped} skipped.")
        return BulkResult(added=added, skipped=skipped)

    def update(self, branch_id: str, data: Union[BranchUpdate, dict]) -> Branch:
        """
        Edit a branch. A rename is carried over to every staff member's primary
        branch and managed branches; location changes reach the staff on the
        branch through the store's re-derivation on commit.
        """
        if not isinstance(data, BranchUpdate):
            data = BranchUpdate.model_validate(data)
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

        with self.store.lock:
            branches = self.store.branches
            current = next((b for b in branches if b.id == branch_id), None)
            if current is None:
                raise NotFoundError("Branch", branch_id)

            updated = current.model_copy(update=changes)
            self._validate(updated, branches)

            old_name, new_name = current.branch_name, updated.branch_name
            staff = None
            if old_name != new_name:
                staff = [
                    s.model_copy(update={
                        "branch_name": new_name if s.branch_name == old_name else s.branch_name,
                        "managed_branches": [new_name if b == old_name else b for b in s.managed_branches],
                    })
                    for s in self.store.staff
                ]
                logger.info(f"[BRANCH] Renamed '{old_name}' to '{new_name}'; staff references updated.")

            self.store.commit(branches=[updated if b.id == branch_id else b for b in branches], staff=staff)
            return self.get(branch_id)

    def remove(self, branch_id: str) -> None:
        """
        Delete a branch. Refused with `BranchDeletionError` while any staff
        member still works there; nothing is reassigned here.
        """
        with self.store.lock:
            branch = self.get(branch_id)
            blocking = self.blocking_staff(branch)
            if blocking:
                logger.warning(f"[BRANCH] Delete of '{branch.branch_name}' refused: {len(blocking)} staff assigned.")
                raise BranchDeletionError(branch, blocking)

            # Managed-branch lists must not point at a branch that no longer exists
            staff = [
                s.model_copy(update={"managed_branches": [b for b in s.managed_branches if b != branch.branch_name]})
                for s in self.store.staff
            ]
            self.store.commit(branches=[b for b in self.store.branches if b.id != branch_id], staff=staff)
            logger.info(f"[BRANCH] Deleted branch '{branch.branch_name}'.")

    def remove_all(self) -> int:
        """
        Delete every branch. Refused with `InUseError` while any staff member is
        still assigned to one of them. Returns how many branches were deleted.
        """
        with self.store.lock:
            branches = self.store.branches
            names = {b.branch_name for b in branches}
            blocking = [s for s in self.store.staff if s.branch_name in names]
            if blocking:
                logger.warning(f"[BRANCH] Delete of all branches refused: {len(blocking)} staff assigned.")
                raise InUseError(
                    "Cannot delete all branches because some still have staff assigned. "
                    "Please reassign or delete staff first."
                )

            staff = [s.model_copy(update={"managed_branches": []}) for s in self.store.staff]
            self.store.commit(branches=[], staff=staff)
            logger.warning(f"[BRANCH] Deleted all {len(branches)} branches.")
            return len(branches)

    def reassign_and_remove(self, branch_id: str, assignments: Optional[Dict[str, str]] = None,
                            default_branch: Optional[str] = None) -> int:
        """
        Move every blocking staff member to their target branch (or the
        default), then delete the branch. Returns how many were moved.
        """
        assignments = assignments or {}
        staff_service = StaffService(self.store)

        with self.store.lock:
            branch = self.get(branch_id)
            blocking = self.blocking_staff(branch)

            errors = {}
            changes = []
            for member in blocking:
                target = assignments.get(member.id) or default_branch
                if not target:
                    errors[member.id] = f"No target branch given for {member.employee_name}."
                elif target == branch.branch_name:
                    errors[member.id] = f"{member.employee_name} must be moved to a different branch."
                elif not any(b.branch_name == target for b in self.store.branches):
                    errors[member.id] = f'Branch "{target}" does not exist.'
                else:
                    changes.append(StaffReassignment(id=member.id, branch_name=target))
            if errors:
                raise ValidationError(errors)

            if changes:
                staff_service.bulk_reassign(changes)
            self.remove(branch_id)
            return len(changes)
