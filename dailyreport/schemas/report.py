# dailyreport/schemas/report.py
import datetime as dt
from pydantic import field_validator
from typing import Dict, Optional

from .staff import OrgModel, _as_text


def _as_date(v):
    """ISO dates from JSON, datetimes from spreadsheet cells, DD/MM/YYYY from exported sheets."""
    if isinstance(v, dt.datetime):
        return v.date()
    if isinstance(v, str) and "/" in v:
        return dt.datetime.strptime(v.strip(), "%d/%m/%Y").date()
    return v


def _as_metric_map(v):
    if v is None:
        return {}
    return {str(k).strip().upper(): (0 if value in (None, "") else value) for k, value in dict(v).items()}


# ====================================================================
# DAILY ACHIEVEMENT
# ====================================================================

class DailyAchievement(OrgModel):
    """
    What one staff member achieved on one day. At most one record exists per
    employee code and date. `staff_name` and `branch_name` are taken from the
    staff record when the achievement is first saved.
    """
    id: str
    date: dt.date
    employee_code: str
    staff_name: str
    branch_name: str
    metrics: Dict[str, float] = {}


class AchievementCreate(OrgModel):
    date: dt.date
    employee_code: str
    metrics: Dict[str, float] = {}

    @field_validator("date", mode="before")
    def coerce_date(cls, v):
        return _as_date(v)

    @field_validator("employee_code", mode="before")
    def coerce_code(cls, v):
        return _as_text(v) or ""

    @field_validator("metrics", mode="before")
    def coerce_metrics(cls, v):
        return _as_metric_map(v)


class AchievementUpdate(OrgModel):
    """Replaces the metric values; date and staff member stay as they are."""
    metrics: Dict[str, float]

    @field_validator("metrics", mode="before")
    def coerce_metrics(cls, v):
        return _as_metric_map(v)


class AchievementImportResult(OrgModel):
    added: int = 0
    updated: int = 0
    skipped: int = 0


# ====================================================================
# PROJECTION
# ====================================================================

class Projection(OrgModel):
    """A staff member's expected value for one metric on one day."""
    id: str
    employee_code: str
    date: dt.date
    metric: str
    value: float


class ProjectionCreate(OrgModel):
    employee_code: str
    date: dt.date
    metric: str
    value: float = 0

    @field_validator("date", mode="before")
    def coerce_date(cls, v):
        return _as_date(v)

    @field_validator("employee_code", mode="before")
    def coerce_code(cls, v):
        return _as_text(v) or ""

    @field_validator("metric", mode="before")
    def upper_metric(cls, v):
        return str(v).strip().upper()


class ProjectionUpdate(OrgModel):
    metric: Optional[str] = None
    value: Optional[float] = None

    @field_validator("metric", mode="before")
    def upper_metric(cls, v):
        return None if v is None else str(v).strip().upper()
