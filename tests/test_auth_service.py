import pytest

from dailyreport.core.exceptions import AuthError
from dailyreport.schemas.staff import StaffMember
from dailyreport.services import auth_service
from dailyreport.services.designations import classify, is_known, manages_branches, manages_zones, role_for


def _user(projection, username):
    return next(u for u in projection.users if u.username == username)


def test_recompute_is_deterministic(store):
    first = auth_service.recompute(store.staff)
    second = auth_service.recompute(store.staff)
    assert first.model_dump() == second.model_dump()


def test_system_identities(store):
    projection = store.projection
    assert [u.username for u in projection.users[:2]] == ["admin", "zm"]
    admin, zm = projection.users[0], projection.users[1]
    assert (admin.role, admin.designation) == ("admin", "ADMINISTRATOR")
    assert zm.role == "admin"
    assert projection.passwords["admin"] == "admin123"
    assert projection.passwords["zm"] == "zm123"


def test_staff_logins_use_employee_code(store):
    projection = store.projection
    assert projection.passwords["E123"] == "E123"
    assert _user(projection, "E200").role == "manager"
    assert _user(projection, "E300").role == "manager"
    assert _user(projection, "E123").role == "user"


def test_subordinates_are_one_level_deep(store):
    head = _user(store.projection, "E200")
    assert [s.username for s in head.subordinates] == ["E100"]
    assert head.subordinates[0].subordinates == []


def test_login(store):
    user = auth_service.login(store.projection, "E123", "E123")
    assert user.staff_name == "DEEPA"

    with pytest.raises(AuthError) as wrong_password:
        auth_service.login(store.projection, "E123", "wrong")
    with pytest.raises(AuthError) as unknown_user:
        auth_service.login(store.projection, "nobody", "nobody")
    # Same message either way
    assert wrong_password.value.message == unknown_user.value.message == "Invalid Employee Code or password"


def test_empty_and_clashing_codes_get_no_login():
    staff = [
        StaffMember(id="admin-user-0", employee_code="ADMIN", employee_name="System Admin", function="ADMINISTRATOR"),
        StaffMember(id="x", employee_code="", employee_name="NO CODE"),
        StaffMember(id="y", employee_code="admin", employee_name="IMPOSTOR"),
    ]
    projection = auth_service.recompute(staff)
    assert [u.username for u in projection.users] == ["admin"]
    assert projection.passwords == {"admin": "admin123"}


def test_projection_follows_staff_mutations(store, staff_service):
    staff_service.update("s-d", {"function": "TL-DDS"})
    assert _user(store.projection, "E123").role == "manager"
    staff_service.remove("s-d")
    with pytest.raises(AuthError):
        auth_service.login(store.projection, "E123", "E123")


# --- designation table ---

def test_designation_classification():
    assert classify("ZONAL MANAGER") == ("manager", "zones")
    assert classify("SENIOR DISTRICT HEAD") == ("manager", "branches")
    assert classify("tl-casa") == ("manager", "branches")
    assert classify("SALES MANAGER-DDS") == ("manager", None)
    assert classify("BRANCH OFFICER") == ("user", None)
    assert role_for("RO-CASA") == "user"
    assert manages_zones("ZONAL MANAGER") and not manages_branches("ZONAL MANAGER")
    assert is_known("branch manager") and not is_known("WIZARD") and not is_known(None)
