# dailyreport/services/report_service.py
"""
Daily achievement and projection records.

Both are keyed by employee code and date. Admins read and write every record;
anyone else only the employee codes inside their user scope (themselves, their
reporting tree and the staff of the branches they look after).
"""
import datetime as dt
import uuid
from typing import Dict, Iterable, List, Optional, Set, Union

from pydantic import ValidationError as SchemaError

from ..core.config import (
    GRAND_TOTAL_AC, GRAND_TOTAL_AMT, METRIC_NAMES, TOTAL_ACCOUNTS, TOTAL_AMOUNTS, TOTAL_METRIC_NAMES, logger,
)
from ..core.exceptions import AccessError, DuplicateError, NotFoundError, ValidationError
from ..db.store import OrgStore
from ..schemas.report import (
    AchievementCreate, AchievementImportResult, AchievementUpdate, DailyAchievement,
    Projection, ProjectionCreate, ProjectionUpdate,
)
from ..schemas.staff import StaffMember
from ..schemas.user import User
from .hierarchy_service import find_by_code, user_scope

MSG_ACHIEVEMENT_EXISTS = "A daily achievement record for this staff and date already exists. Please update it instead."


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def with_totals(metrics: Dict[str, float]) -> Dict[str, float]:
    """
    Every product metric (missing ones as 0) plus the four totals, recomputed:
    amounts are the `AMT` metrics, accounts are all the others. Totals sent by
    the client are ignored.
    """
    values = {name: float(metrics.get(name) or 0) for name in METRIC_NAMES}
    amount = sum(v for name, v in values.items() if "AMT" in name)
    accounts = sum(v for name, v in values.items() if "AMT" not in name)
    values[TOTAL_ACCOUNTS] = values[GRAND_TOTAL_AC] = accounts
    values[TOTAL_AMOUNTS] = values[GRAND_TOTAL_AMT] = amount
    return values


def _unknown_metrics(metrics: Dict[str, float]) -> List[str]:
    return [name for name in metrics if name not in METRIC_NAMES and name not in TOTAL_METRIC_NAMES]


class ReportService:
    def __init__(self, store: OrgStore):
        self.store = store

    # ====================================================================
    # SCOPE
    # ====================================================================

    def visible_codes(self, user: User) -> Optional[Set[str]]:
        """Employee codes `user` may see; None means everything."""
        if user.role == "admin":
            return None
        return user_scope(user, self.store.staff, self.store.branches).employee_codes

    def _check_access(self, user: User, employee_code: str):
        codes = self.visible_codes(user)
        if codes is not None and employee_code not in codes:
            logger.warning(f"[REPORT] '{user.username}' tried to access records of '{employee_code}'.")
            raise AccessError()

    def _member(self, employee_code: str) -> StaffMember:
        member = find_by_code(self.store.staff, employee_code)
        if member is None:
            raise ValidationError({"employee_code": f'No staff member with Employee Code "{employee_code}".'})
        return member

    # ====================================================================
    # DAILY ACHIEVEMENTS
    # ====================================================================

    def list_achievements(
        self,
        user: User,
        date_from: Optional[dt.date] = None,
        date_to: Optional[dt.date] = None,
        employee_code: Optional[str] = None,
    ) -> List[DailyAchievement]:
        codes = self.visible_codes(user)
        records = self.store.achievements
        if codes is not None:
            records = [r for r in records if r.employee_code in codes]
        if employee_code:
            records = [r for r in records if r.employee_code == employee_code]
        if date_from:
            records = [r for r in records if r.date >= date_from]
        if date_to:
            records = [r for r in records if r.date <= date_to]
        return sorted(records, key=lambda r: (r.date, r.employee_code))

    def get_achievement(self, record_id: str, user: User) -> DailyAchievement:
        record = next((r for r in self.store.achievements if r.id == record_id), None)
        if record is None:
            raise NotFoundError("Daily achievement record", record_id)
        self._check_access(user, record.employee_code)
        return record

    def add_achievement(self, data: Union[AchievementCreate, dict], user: User) -> DailyAchievement:
        if not isinstance(data, AchievementCreate):
            data = AchievementCreate.model_validate(data)

        with self.store.lock:
            member = self._member(data.employee_code)
            self._check_access(user, member.employee_code)
            unknown = _unknown_metrics(data.metrics)
            if unknown:
                raise ValidationError({"metrics": f"Unknown metric(s): {', '.join(unknown)}."})

            records = self.store.achievements
            if any(r.employee_code == member.employee_code and r.date == data.date for r in records):
                raise DuplicateError({"date": MSG_ACHIEVEMENT_EXISTS}, MSG_ACHIEVEMENT_EXISTS)

            record = DailyAchievement(
                id=_new_id("daily-ach"),
                date=data.date,
                employee_code=member.employee_code,
                staff_name=member.employee_name,
                branch_name=member.branch_name,
                metrics=with_totals(data.metrics),
            )
            self.store.commit(achievements=records + [record])
            logger.info(
                f"[REPORT] '{user.username}' submitted achievement of '{record.employee_code}' for {record.date}: "
                f"{record.metrics[GRAND_TOTAL_AMT]:g} amount, {record.metrics[GRAND_TOTAL_AC]:g} accounts."
            )
            return record

    def update_achievement(self, record_id: str, data: Union[AchievementUpdate, dict], user: User) -> DailyAchievement:
        if not isinstance(data, AchievementUpdate):
            data = AchievementUpdate.model_validate(data)

        with self.store.lock:
            current = self.get_achievement(record_id, user)
            unknown = _unknown_metrics(data.metrics)
            if unknown:
                raise ValidationError({"metrics": f"Unknown metric(s): {', '.join(unknown)}."})

            updated = current.model_copy(update={"metrics": with_totals(data.metrics)})
            self.store.commit(achievements=[updated if r.id == record_id else r for r in self.store.achievements])
            logger.info(f"[REPORT] '{user.username}' updated achievement of '{updated.employee_code}' for {updated.date}.")
            return updated

    def bulk_add_achievements(self, rows: Iterable[Union[AchievementCreate, dict]], user: User) -> AchievementImportResult:
        """
        Upsert by employee code and date. Rows for unknown or out-of-scope staff,
        or without a readable date, are skipped; unknown metric columns are dropped.
        """
        added = updated = skipped = 0
        with self.store.lock:
            all_staff = self.store.staff
            codes = self.visible_codes(user)
            records = self.store.achievements
            index = {(r.employee_code, r.date): i for i, r in enumerate(records)}

            for row_number, row in enumerate(rows, start=1):
                try:
                    data = row if isinstance(row, AchievementCreate) else AchievementCreate.model_validate(row)
                except SchemaError as e:
                    logger.warning(f"[IMPORT] Achievement row {row_number} skipped: {e.error_count()} invalid field(s).")
                    skipped += 1
                    continue

                member = find_by_code(all_staff, data.employee_code)
                if member is None:
                    logger.warning(f"[IMPORT] Achievement row {row_number}: unknown employee code '{data.employee_code}', skipped.")
                    skipped += 1
                    continue
                if codes is not None and member.employee_code not in codes:
                    logger.warning(f"[IMPORT] Achievement row {row_number}: '{member.employee_code}' is outside the caller's scope, skipped.")
                    skipped += 1
                    continue
                unknown = _unknown_metrics(data.metrics)
                if unknown:
                    logger.warning(f"[IMPORT] Achievement row {row_number}: unknown metric(s) {', '.join(unknown)} dropped.")

                metrics = with_totals(data.metrics)
                key = (member.employee_code, data.date)
                if key in index:
                    i = index[key]
                    records[i] = records[i].model_copy(update={"metrics": metrics})
                    updated += 1
                else:
                    records.append(DailyAchievement(
                        id=_new_id("daily-ach"),
                        date=data.date,
                        employee_code=member.employee_code,
                        staff_name=member.employee_name,
                        branch_name=member.branch_name,
                        metrics=metrics,
                    ))
                    index[key] = len(records) - 1
                    added += 1

            if added or updated:
                self.store.commit(achievements=records)

        logger.info(f"[IMPORT] Achievement import finished: {added} added, {updated} updated, {skipped} skipped.")
        return AchievementImportResult(added=added, updated=updated, skipped=skipped)

    def clear_achievements(self) -> int:
        with self.store.lock:
            count = len(self.store.achievements)
            self.store.commit(achievements=[])
        logger.warning(f"[REPORT] Cleared {count} daily achievement record(s).")
        return count

    # ====================================================================
    # PROJECTIONS
    # ====================================================================

    def list_projections(
        self,
        user: User,
        employee_code: Optional[str] = None,
        day: Optional[dt.date] = None,
    ) -> List[Projection]:
        codes = self.visible_codes(user)
        projections = self.store.projections
        if codes is not None:
            projections = [p for p in projections if p.employee_code in codes]
        if employee_code:
            projections = [p for p in projections if p.employee_code == employee_code]
        if day:
            projections = [p for p in projections if p.date == day]
        return projections

    def _get_projection(self, projection_id: str, user: User) -> Projection:
        projection = next((p for p in self.store.projections if p.id == projection_id), None)
        if projection is None:
            raise NotFoundError("Projection", projection_id)
        self._check_access(user, projection.employee_code)
        return projection

    def _check_projection(self, projection: Projection, projections: List[Projection]):
        if projection.metric not in METRIC_NAMES:
            raise ValidationError({"metric": f'Unknown metric "{projection.metric}".'})
        clash = any(
            p.id != projection.id
            and (p.employee_code, p.date, p.metric) == (projection.employee_code, projection.date, projection.metric)
            for p in projections
        )
        if clash:
            message = f'A projection for "{projection.metric}" already exists for this date. Please edit the existing one.'
            raise DuplicateError({"metric": message}, message)

    def save_projection(self, data: Union[ProjectionCreate, dict], user: User) -> Projection:
        if not isinstance(data, ProjectionCreate):
            data = ProjectionCreate.model_validate(data)

        with self.store.lock:
            member = self._member(data.employee_code)
            self._check_access(user, member.employee_code)
            projections = self.store.projections
            projection = Projection(id=_new_id("proj"), **data.model_dump())
            self._check_projection(projection, projections)

            self.store.commit(projections=projections + [projection])
            logger.info(
                f"[REPORT] '{user.username}' projected {projection.metric}={projection.value:g} "
                f"for '{projection.employee_code}' on {projection.date}."
            )
            return projection

    def update_projection(self, projection_id: str, data: Union[ProjectionUpdate, dict], user: User) -> Projection:
        if not isinstance(data, ProjectionUpdate):
            data = ProjectionUpdate.model_validate(data)
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

        with self.store.lock:
            current = self._get_projection(projection_id, user)
            projections = self.store.projections
            updated = current.model_copy(update=changes)
            self._check_projection(updated, projections)

            self.store.commit(projections=[updated if p.id == projection_id else p for p in projections])
            return updated

    def delete_projection(self, projection_id: str, user: User) -> None:
        with self.store.lock:
            projection = self._get_projection(projection_id, user)
            self.store.commit(projections=[p for p in self.store.projections if p.id != projection_id])
        logger.info(f"[REPORT] '{user.username}' deleted projection {projection.metric} of '{projection.employee_code}'.")
