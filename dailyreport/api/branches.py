from typing import List

from fastapi import APIRouter, Depends, File, UploadFile

from ..core.config import BRANCH_COLUMNS, logger
from ..core.security import get_current_user, require_admin
from ..core.utils import export_filename
from ..db.store import OrgStore, get_store
from ..schemas.organization import Branch, BranchCreate, BranchReassignPayload, BranchUpdate
from ..schemas.staff import BulkResult, StaffMember
from ..schemas.user import User
from ..services import spreadsheet_service
from ..services.branch_service import BranchService
from .utils import read_upload_rows, xlsx_response

router = APIRouter(prefix="/api/branches")


@router.get("", response_model=List[Branch])
def list_branches(
    _: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    return BranchService(store).list()


@router.get("/export")
def export_branches(
    _: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    rows = spreadsheet_service.branches_to_rows(store.branches)
    output = spreadsheet_service.build_workbook(rows, "Branches", BRANCH_COLUMNS)
    return xlsx_response(output, export_filename("branch_export"))


@router.post("/import", response_model=BulkResult)
def import_branches(
    file: UploadFile = File(...),
    user: User = Depends(require_admin),
    store: OrgStore = Depends(get_store),
):
    records = spreadsheet_service.branch_rows_to_records(read_upload_rows(file))
    result = BranchService(store).bulk_add(records)
    logger.info(f"[IMPORT] '{user.username}' imported {file.filename}: {result.added} added, {result.skipped} skipped.")
    return result


@router.post("/delete-all")
def delete_all_branches(
    user: User = Depends(require_admin),
    store: OrgStore = Depends(get_store),
):
    """409 while any staff member is still assigned to a branch."""
    deleted = BranchService(store).remove_all()
    logger.warning(f"[BRANCH] '{user.username}' deleted all branches ({deleted} records).")
    return {"status": "success", "deleted": deleted}


@router.post("", response_model=Branch, status_code=201)
def create_branch(
    payload: BranchCreate,
    _: User = Depends(require_admin),
    store: OrgStore = Depends(get_store),
):
    return BranchService(store).add(payload)


@router.get("/{branch_id}", response_model=Branch)
def read_branch(
    branch_id: str,
    _: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    return BranchService(store).get(branch_id)


@router.get("/{branch_id}/staff", response_model=List[StaffMember])
def read_branch_staff(
    branch_id: str,
    _: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    service = BranchService(store)
    return service.blocking_staff(service.get(branch_id))


@router.put("/{branch_id}", response_model=Branch)
def update_branch(
    branch_id: str,
    payload: BranchUpdate,
    _: User = Depends(require_admin),
    store: OrgStore = Depends(get_store),
):
    return BranchService(store).update(branch_id, payload)


@router.delete("/{branch_id}")
def delete_branch(
    branch_id: str,
    _: User = Depends(require_admin),
    store: OrgStore = Depends(get_store),
):
    """409 with the blocking staff list while anyone is still assigned."""
    BranchService(store).remove(branch_id)
    return {"status": "success"}


@router.post("/{branch_id}/reassign-and-delete")
def reassign_and_delete(
    branch_id: str,
    payload: BranchReassignPayload,
    _: User = Depends(require_admin),
    store: OrgStore = Depends(get_store),
):
    moved = BranchService(store).reassign_and_remove(branch_id, payload.assignments, payload.default_branch)
    return {"status": "success", "reassigned": moved}
