import datetime as dt

import pytest

from dailyreport.core.config import GRAND_TOTAL_AC, GRAND_TOTAL_AMT, TOTAL_AMOUNTS
from dailyreport.core.exceptions import AccessError, DuplicateError, NotFoundError, ValidationError
from dailyreport.services.report_service import ReportService, with_totals

DAY = dt.date(2025, 10, 20)


@pytest.fixture
def reports(store):
    return ReportService(store)


@pytest.fixture
def login(store):
    """Projected login by username."""
    return lambda username: next(u for u in store.projection.users if u.username == username)


def _achievement(code="E123", day=DAY, **metrics):
    return {"date": day, "employee_code": code, "metrics": metrics or {"DDS AMT": 1000, "DDS AC": 2}}


# ====================================================================
# DAILY ACHIEVEMENTS
# ====================================================================

def test_totals_are_computed_from_metrics():
    values = with_totals({"DDS AMT": 1000, "FD AMT": 500, "DDS AC": 2, "NEW-SS/AGNT": 1, GRAND_TOTAL_AMT: 99})
    assert values[GRAND_TOTAL_AMT] == values[TOTAL_AMOUNTS] == 1500
    assert values[GRAND_TOTAL_AC] == 3
    assert values["RD AMT"] == 0


def test_add_achievement_takes_name_and_branch_from_staff(reports, login):
    record = reports.add_achievement(_achievement(), login("admin"))
    assert (record.staff_name, record.branch_name) == ("DEEPA", "BETA")
    assert record.metrics[GRAND_TOTAL_AMT] == 1000
    assert record.metrics[GRAND_TOTAL_AC] == 2


def test_one_achievement_per_staff_and_day(store, reports, login):
    reports.add_achievement(_achievement(), login("admin"))
    with pytest.raises(DuplicateError) as exc:
        reports.add_achievement(_achievement(**{"FD AMT": 5}), login("admin"))
    assert "already exists" in exc.value.errors["date"]
    assert len(store.achievements) == 1

    reports.add_achievement(_achievement(day=DAY + dt.timedelta(days=1)), login("admin"))
    assert len(store.achievements) == 2


def test_add_achievement_validation(reports, login):
    with pytest.raises(ValidationError) as exc:
        reports.add_achievement(_achievement(code="E999"), login("admin"))
    assert "employee_code" in exc.value.errors

    with pytest.raises(ValidationError) as exc:
        reports.add_achievement(_achievement(**{"GOLD BARS": 3}), login("admin"))
    assert exc.value.errors["metrics"] == "Unknown metric(s): GOLD BARS."


def test_users_write_only_inside_their_scope(reports, login):
    # E123 sees itself and the staff of BETA
    reports.add_achievement(_achievement(code="E100"), login("E123"))
    with pytest.raises(AccessError):
        reports.add_achievement(_achievement(code="E300"), login("E123"))


def test_list_achievements_is_scoped_and_filtered(reports, login):
    admin = login("admin")
    reports.add_achievement(_achievement(code="E300"), admin)
    reports.add_achievement(_achievement(code="E123"), admin)
    reports.add_achievement(_achievement(code="E123", day=DAY + dt.timedelta(days=1)), admin)

    assert [r.employee_code for r in reports.list_achievements(admin, date_to=DAY)] == ["E123", "E300"]
    own = reports.list_achievements(login("E123"))
    assert [(r.employee_code, r.date) for r in own] == [("E123", DAY), ("E123", DAY + dt.timedelta(days=1))]
    assert reports.list_achievements(admin, date_from=DAY + dt.timedelta(days=1), employee_code="E300") == []


def test_update_achievement_replaces_metrics(reports, login):
    record = reports.add_achievement(_achievement(), login("admin"))
    updated = reports.update_achievement(record.id, {"metrics": {"RD AMT": 250}}, login("E123"))
    assert updated.metrics["DDS AMT"] == 0
    assert updated.metrics[GRAND_TOTAL_AMT] == 250
    assert reports.get_achievement(record.id, login("E123")).metrics["RD AMT"] == 250

    with pytest.raises(AccessError):
        reports.get_achievement(record.id, _outsider(reports, login))
    with pytest.raises(NotFoundError):
        reports.update_achievement("nope", {"metrics": {}}, login("admin"))


def _outsider(reports, login):
    # A branch officer at GAMMA, where nobody else works
    user = login("E123").model_copy(update={"id": "nobody", "employee_code": "X1", "branch_name": "GAMMA"})
    assert "E123" not in reports.visible_codes(user)
    return user


def test_bulk_add_upserts_by_code_and_date(store, reports, login):
    reports.add_achievement(_achievement(), login("admin"))
    result = reports.bulk_add_achievements([
        _achievement(**{"DDS AMT": 300}),
        _achievement(code="E100", **{"FD AC": 4, "UNKNOWN": 1}),
        _achievement(code="E300"),
        _achievement(code="E999"),
        {"date": "not a date", "employee_code": "E123"},
    ], login("E123"))

    assert (result.added, result.updated, result.skipped) == (1, 1, 3)
    by_code = {r.employee_code: r for r in store.achievements}
    assert by_code["E123"].metrics[GRAND_TOTAL_AMT] == 300
    assert by_code["E100"].metrics[GRAND_TOTAL_AC] == 4
    assert "E300" not in by_code


def test_clear_achievements(store, reports, login):
    reports.add_achievement(_achievement(), login("admin"))
    assert reports.clear_achievements() == 1
    assert store.achievements == []


def test_records_follow_employee_code_rename(store, reports, staff_service, login):
    reports.add_achievement(_achievement(), login("admin"))
    reports.save_projection({"employee_code": "E123", "date": DAY, "metric": "DDS AMT", "value": 50}, login("admin"))

    staff_service.update("s-d", {"employee_code": "E124"})
    assert [r.employee_code for r in store.achievements] == ["E124"]
    assert [p.employee_code for p in store.projections] == ["E124"]


# ====================================================================
# PROJECTIONS
# ====================================================================

def _projection(metric="DDS AMT", value=500, code="E123"):
    return {"employee_code": code, "date": DAY, "metric": metric, "value": value}


def test_save_projection_one_per_metric_and_day(store, reports, login):
    user = login("E123")
    saved = reports.save_projection(_projection(metric="dds amt"), user)
    assert saved.metric == "DDS AMT"

    with pytest.raises(DuplicateError) as exc:
        reports.save_projection(_projection(value=900), user)
    assert exc.value.message == 'A projection for "DDS AMT" already exists for this date. Please edit the existing one.'

    reports.save_projection(_projection(metric="FD AMT"), user)
    assert [p.metric for p in reports.list_projections(user, employee_code="E123", day=DAY)] == ["DDS AMT", "FD AMT"]


def test_save_projection_validation(reports, login):
    with pytest.raises(ValidationError) as exc:
        reports.save_projection(_projection(metric="GRAND TOTAL AMT"), login("admin"))
    assert "metric" in exc.value.errors
    with pytest.raises(AccessError):
        reports.save_projection(_projection(code="E300"), login("E123"))


def test_update_and_delete_projection(store, reports, login):
    user = login("E123")
    first = reports.save_projection(_projection(), user)
    reports.save_projection(_projection(metric="FD AMT"), user)

    assert reports.update_projection(first.id, {"value": 750}, user).value == 750
    with pytest.raises(DuplicateError):
        reports.update_projection(first.id, {"metric": "FD AMT"}, user)

    reports.delete_projection(first.id, user)
    assert [p.metric for p in store.projections] == ["FD AMT"]
    with pytest.raises(NotFoundError):
        reports.delete_projection(first.id, user)


def test_list_projections_is_scoped(reports, login):
    admin = login("admin")
    reports.save_projection(_projection(code="E300"), admin)
    reports.save_projection(_projection(code="E100"), admin)
    assert [p.employee_code for p in reports.list_projections(login("E123"))] == ["E100"]
    assert len(reports.list_projections(admin)) == 2
