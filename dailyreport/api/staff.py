from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile

from ..core.config import STAFF_COLUMNS, logger
from ..core.exceptions import NotFoundError
from ..core.security import get_current_user, require_admin
from ..core.utils import export_filename
from ..db.store import OrgStore, get_store
from ..schemas.staff import (
    BatchDeleteStaffPayload, BulkReassignPayload, BulkResult,
    StaffCreate, StaffMember, StaffRead, StaffUpdate,
)
from ..schemas.user import User
from ..services import spreadsheet_service
from ..services.hierarchy_service import recursive_subordinate_info, user_scope
from ..services.staff_service import StaffService, filter_staff
from .utils import read_upload_rows, xlsx_response

router = APIRouter(prefix="/api/staff")


def _visible_staff(user: User, store: OrgStore) -> List[StaffMember]:
    all_staff = store.staff
    if user.role == "admin":
        return all_staff
    scope = user_scope(user, all_staff, store.branches)
    return [s for s in all_staff if s.employee_code in scope.employee_codes]


def _visible_member(staff_id: str, user: User, store: OrgStore) -> StaffMember:
    """A single record, read under the same scope as the list; out-of-scope ids read as missing."""
    member = StaffService(store).get(staff_id)
    if user.role != "admin" and all(s.id != staff_id for s in _visible_staff(user, store)):
        raise NotFoundError("Staff member", staff_id)
    return member


@router.get("", response_model=List[StaffRead])
def list_staff(
    search: str = "",
    designation: Optional[str] = None,
    branch: Optional[str] = None,
    user: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    """Staff visible to the current user; admins see everyone."""
    all_staff = store.staff
    service = StaffService(store)
    rows = filter_staff(_visible_staff(user, store), all_staff, search, designation, branch)
    return [service.read_model(s, all_staff) for s in rows]


@router.get("/export")
def export_staff(
    user: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    rows = spreadsheet_service.staff_to_rows(_visible_staff(user, store), store.staff)
    output = spreadsheet_service.build_workbook(rows, "Staff", STAFF_COLUMNS + ["Subordinates Count"])
    return xlsx_response(output, export_filename("staff_export"))


@router.post("/import", response_model=BulkResult)
def import_staff(
    file: UploadFile = File(...),
    user: User = Depends(require_admin),
    store: OrgStore = Depends(get_store),
):
    records = spreadsheet_service.staff_rows_to_records(read_upload_rows(file))
    result = StaffService(store).bulk_add(records)
    logger.info(f"[IMPORT] '{user.username}' imported {file.filename}: {result.added} added, {result.skipped} skipped.")
    return result


@router.post("/bulk-reassign", response_model=List[StaffMember])
def bulk_reassign(
    payload: BulkReassignPayload,
    _: User = Depends(require_admin),
    store: OrgStore = Depends(get_store),
):
    return StaffService(store).bulk_reassign(payload.changes)


@router.post("/batch-delete")
def batch_delete(
    payload: BatchDeleteStaffPayload,
    _: User = Depends(require_admin),
    store: OrgStore = Depends(get_store),
):
    deleted = StaffService(store).remove_multiple(payload.ids)
    return {"status": "success", "deleted": deleted}


@router.post("/delete-all")
def delete_all(
    user: User = Depends(require_admin),
    store: OrgStore = Depends(get_store),
):
    """Remove everyone except the system accounts and the caller."""
    deleted = StaffService(store).remove_all(except_id=user.id)
    logger.warning(f"[STAFF] '{user.username}' deleted all staff ({deleted} records).")
    return {"status": "success", "deleted": deleted}


@router.post("", response_model=StaffMember, status_code=201)
def create_staff(
    payload: StaffCreate,
    _: User = Depends(require_admin),
    store: OrgStore = Depends(get_store),
):
    return StaffService(store).add(payload)


@router.get("/{staff_id}", response_model=StaffRead)
def read_staff(
    staff_id: str,
    user: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    return StaffService(store).read_model(_visible_member(staff_id, user, store))


@router.get("/{staff_id}/hierarchy")
def read_hierarchy(
    staff_id: str,
    user: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    """Codes and branches of the member and everyone below them."""
    member = _visible_member(staff_id, user, store)
    info = recursive_subordinate_info(member, store.staff)
    return {
        "employeeCodes": sorted(info.employee_codes),
        "branchNames": sorted(info.branch_names),
    }


@router.put("/{staff_id}", response_model=StaffMember)
def update_staff(
    staff_id: str,
    payload: StaffUpdate,
    _: User = Depends(require_admin),
    store: OrgStore = Depends(get_store),
):
    return StaffService(store).update(staff_id, payload)


@router.delete("/{staff_id}")
def delete_staff(
    staff_id: str,
    _: User = Depends(require_admin),
    store: OrgStore = Depends(get_store),
):
    StaffService(store).remove(staff_id)
    return {"status": "success"}
