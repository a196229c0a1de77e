import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile

from ..core.config import ACHIEVEMENT_COLUMNS, logger
from ..core.security import get_current_user, require_admin
from ..core.utils import export_filename
from ..db.store import OrgStore, get_store
from ..schemas.report import (
    AchievementCreate, AchievementImportResult, AchievementUpdate, DailyAchievement,
    Projection, ProjectionCreate, ProjectionUpdate,
)
from ..schemas.user import User
from ..services import spreadsheet_service
from ..services.report_service import ReportService
from .utils import read_upload_rows, xlsx_response

router = APIRouter(prefix="/api")


# ====================================================================
# DAILY ACHIEVEMENTS
# ====================================================================

@router.get("/achievements", response_model=List[DailyAchievement])
def list_achievements(
    date_from: Optional[dt.date] = None,
    date_to: Optional[dt.date] = None,
    employee_code: Optional[str] = None,
    user: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    """Records inside the caller's scope, oldest first."""
    return ReportService(store).list_achievements(user, date_from, date_to, employee_code)


@router.get("/achievements/export")
def export_achievements(
    date_from: Optional[dt.date] = None,
    date_to: Optional[dt.date] = None,
    user: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    records = ReportService(store).list_achievements(user, date_from, date_to)
    output = spreadsheet_service.build_workbook(
        spreadsheet_service.achievements_to_rows(records), "Achievements", ACHIEVEMENT_COLUMNS
    )
    return xlsx_response(output, export_filename("achievement_export"))


@router.post("/achievements/import", response_model=AchievementImportResult)
def import_achievements(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    records = spreadsheet_service.achievement_rows_to_records(read_upload_rows(file))
    result = ReportService(store).bulk_add_achievements(records, user)
    logger.info(f"[IMPORT] '{user.username}' imported {file.filename}: {result.added} added, {result.updated} updated.")
    return result


@router.post("/achievements/bulk", response_model=AchievementImportResult)
def bulk_add_achievements(
    payload: List[dict],
    user: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    return ReportService(store).bulk_add_achievements(payload, user)


@router.post("/achievements/clear")
def clear_achievements(
    _: User = Depends(require_admin),
    store: OrgStore = Depends(get_store),
):
    deleted = ReportService(store).clear_achievements()
    return {"status": "success", "deleted": deleted}


@router.post("/achievements", response_model=DailyAchievement, status_code=201)
def add_achievement(
    payload: AchievementCreate,
    user: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    return ReportService(store).add_achievement(payload, user)


@router.get("/achievements/{record_id}", response_model=DailyAchievement)
def read_achievement(
    record_id: str,
    user: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    return ReportService(store).get_achievement(record_id, user)


@router.put("/achievements/{record_id}", response_model=DailyAchievement)
def update_achievement(
    record_id: str,
    payload: AchievementUpdate,
    user: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    return ReportService(store).update_achievement(record_id, payload, user)


# ====================================================================
# PROJECTIONS
# ====================================================================

@router.get("/projections", response_model=List[Projection])
def list_projections(
    employee_code: Optional[str] = None,
    date: Optional[dt.date] = None,
    user: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    return ReportService(store).list_projections(user, employee_code, date)


@router.post("/projections", response_model=Projection, status_code=201)
def save_projection(
    payload: ProjectionCreate,
    user: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    return ReportService(store).save_projection(payload, user)


@router.put("/projections/{projection_id}", response_model=Projection)
def update_projection(
    projection_id: str,
    payload: ProjectionUpdate,
    user: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    return ReportService(store).update_projection(projection_id, payload, user)


@router.delete("/projections/{projection_id}")
def delete_projection(
    projection_id: str,
    user: User = Depends(get_current_user),
    store: OrgStore = Depends(get_store),
):
    ReportService(store).delete_projection(projection_id, user)
    return {"status": "success"}
