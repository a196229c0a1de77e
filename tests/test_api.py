from io import BytesIO

import openpyxl

from dailyreport.core.config import ACHIEVEMENT_COLUMNS, STAFF_COLUMNS
from dailyreport.services import spreadsheet_service


def _login(client, username, password=None):
    return client.post("/login", data={"username": username, "password": password or username})


# --- AUTH ---

def test_ping(client):
    response = client.get("/ping")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_login_failure_is_generic(client):
    response = _login(client, "E123", "wrong")
    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid Employee Code or password"}


def test_login_and_me(client):
    response = _login(client, "E123")
    assert response.status_code == 200
    assert response.json()["role"] == "user"

    me = client.get("/api/me").json()
    assert me["employeeCode"] == "E123"
    assert me["staffName"] == "DEEPA"
    assert me["reportsToEmployeeCode"] == "E100"

    client.post("/logout")
    assert client.get("/api/me").status_code == 401


def test_session_ends_when_login_disappears(admin_client):
    client = admin_client
    _login(client, "E123")
    # Deleting the member removes the login behind the session
    client.app.state.store.commit(staff=[s for s in client.app.state.store.staff if s.id != "s-d"])
    assert client.get("/api/me").status_code == 401


def test_users_list_is_admin_only(client):
    assert client.get("/api/users").status_code == 401
    _login(client, "E200")
    assert client.get("/api/users").status_code == 403

    _login(client, "admin", "admin123")
    usernames = [u["username"] for u in client.get("/api/users").json()]
    assert usernames[:2] == ["admin", "zm"]
    assert "E123" in usernames


# --- STAFF ---

def test_staff_list_is_scoped_for_non_admins(client):
    _login(client, "E123")
    codes = [s["employeeCode"] for s in client.get("/api/staff").json()]
    assert codes == ["E100", "E123"]


def test_single_record_reads_follow_list_scope(client):
    _login(client, "E123")
    assert client.get("/api/staff/s-a").json()["employeeCode"] == "E100"
    assert client.get("/api/staff/s-d/hierarchy").json()["employeeCodes"] == ["E123"]
    # E300 and E200 are outside E123's scope
    assert client.get("/api/staff/s-c").status_code == 404
    assert client.get("/api/staff/s-b/hierarchy").status_code == 404


def test_staff_list_for_admin_with_filters(admin_client):
    body = admin_client.get("/api/staff", params={"branch": "BETA"}).json()
    assert [s["employeeCode"] for s in body] == ["E100", "E123"]
    assert body[0]["subordinateCount"] == 1
    assert body[0]["reportsToName"] == "BHAVESH"


def test_mutations_require_admin(client):
    _login(client, "E200")
    response = client.post("/api/staff", json={"employeeName": "X", "employeeCode": "E900"})
    assert response.status_code == 403


def test_create_staff_and_duplicate(admin_client):
    payload = {
        "employeeName": "NEW STARTER",
        "employeeCode": "E500",
        "contactNumber": "9000000009",
        "function": "BRANCH OFFICER",
        "branchName": "GAMMA",
    }
    response = admin_client.post("/api/staff", json=payload)
    assert response.status_code == 201
    assert response.json()["zone"] == "Zone-1"

    response = admin_client.post("/api/staff", json=payload)
    assert response.status_code == 409
    assert response.json()["errors"] == {"employeeCode": "Employee Code must be unique."}


def test_update_cycle_and_not_found(admin_client):
    response = admin_client.put("/api/staff/s-c", json={"reportsToEmployeeCode": "E123"})
    assert response.status_code == 422
    assert "reportsToEmployeeCode" in response.json()["errors"]

    assert admin_client.put("/api/staff/nope", json={"employeeName": "X"}).status_code == 404
    assert admin_client.get("/api/staff/nope").status_code == 404


def test_hierarchy_endpoint(admin_client):
    body = admin_client.get("/api/staff/s-b/hierarchy").json()
    assert body == {"employeeCodes": ["E100", "E123", "E200"], "branchNames": ["ALPHA", "BETA"]}


def test_delete_staff(admin_client):
    assert admin_client.delete("/api/staff/s-d").status_code == 200
    assert admin_client.delete("/api/staff/admin-user-0").status_code == 422
    body = admin_client.post("/api/staff/batch-delete", json={"ids": ["s-a", "zm-user-0"]}).json()
    assert body["deleted"] == 1


def test_staff_export_and_import(admin_client):
    response = admin_client.get("/api/staff/export")
    assert response.status_code == 200
    assert response.headers["content-type"] == spreadsheet_service.XLSX_MEDIA_TYPE
    assert "staff_export_" in response.headers["content-disposition"]

    ws = openpyxl.load_workbook(BytesIO(response.content)).active
    assert [c.value for c in ws[1]] == STAFF_COLUMNS + ["Subordinates Count"]

    rows = [{"Staff Name": "imported one", "Employee Code": "E700", "Designation": "BRANCH OFFICER",
             "Branch Name": "GAMMA", "Contact Number": "9000000070"}]
    upload = spreadsheet_service.build_workbook(rows, "Staff", STAFF_COLUMNS)
    response = admin_client.post(
        "/api/staff/import",
        files={"file": ("staff.xlsx", upload.getvalue(), spreadsheet_service.XLSX_MEDIA_TYPE)},
    )
    assert response.json() == {"added": 1, "skipped": 0}
    names = [s["employeeName"] for s in admin_client.get("/api/staff", params={"search": "E700"}).json()]
    assert names == ["IMPORTED ONE"]


def test_import_rejects_non_spreadsheet(admin_client):
    response = admin_client.post("/api/staff/import", files={"file": ("staff.csv", b"a,b", "text/csv")})
    assert response.status_code == 400


def test_bulk_reassign(admin_client):
    response = admin_client.post("/api/staff/bulk-reassign", json={"changes": [{"id": "s-d", "branchName": "GAMMA"}]})
    assert response.status_code == 200
    assert response.json()[0]["zone"] == "Zone-1"


# --- BRANCHES ---

def test_branch_delete_guard_and_reassign(admin_client):
    response = admin_client.delete("/api/branches/branch-b")
    assert response.status_code == 409
    body = response.json()
    assert body["branch"]["branchName"] == "BETA"
    assert [s["id"] for s in body["staff"]] == ["s-a", "s-d"]

    response = admin_client.post("/api/branches/branch-b/reassign-and-delete", json={"defaultBranch": "GAMMA"})
    assert response.json() == {"status": "success", "reassigned": 2}
    assert admin_client.get("/api/branches/branch-b").status_code == 404
    assert admin_client.get("/api/branches/branch-c/staff").json()[0]["employeeCode"] == "E100"


def test_branch_create_validation(admin_client):
    response = admin_client.post("/api/branches", json={"branchName": "ALPHA", "zone": "Zone-1",
                                                        "region": "Region-1", "districtName": "District-A"})
    assert response.status_code == 422
    assert response.json()["errors"]["branchName"] == "Branch name must be unique."


# --- MASTER DATA ---

def test_master_data(admin_client):
    assert [r["name"] for r in admin_client.get("/api/zones/Zone-1/regions").json()] == ["Region-1"]
    assert [d["name"] for d in admin_client.get("/api/regions/Region-2/districts").json()] == ["District-B"]

    response = admin_client.delete("/api/zones/zone-1")
    assert response.status_code == 409

    created = admin_client.post("/api/zones", json={"name": "Zone-3"})
    assert created.status_code == 201
    assert admin_client.delete(f"/api/zones/{created.json()['id']}").status_code == 200


def test_delete_all_branches_is_guarded(admin_client):
    response = admin_client.post("/api/branches/delete-all")
    assert response.status_code == 409
    assert len(admin_client.get("/api/branches").json()) == 3


def test_reset_keeps_caller(admin_client):
    assert admin_client.post("/api/reset").json() == {"status": "success"}
    codes = [s["employeeCode"] for s in admin_client.get("/api/staff").json()]
    assert codes == ["ADMIN", "ZM001"]
    assert admin_client.get("/api/branches").json() == []


# --- REPORTS ---

def test_submit_and_list_achievements(client):
    _login(client, "E123")
    payload = {"date": "2025-10-20", "employeeCode": "E123", "metrics": {"DDS AMT": 1200, "DDS AC": 3}}
    response = client.post("/api/achievements", json=payload)
    assert response.status_code == 201
    body = response.json()
    assert body["staffName"] == "DEEPA"
    assert body["metrics"]["GRAND TOTAL AMT"] == 1200

    assert client.post("/api/achievements", json=payload).status_code == 409
    payload["employeeCode"] = "E300"
    assert client.post("/api/achievements", json=payload).status_code == 403

    listed = client.get("/api/achievements", params={"date_from": "2025-10-01"}).json()
    assert [r["employeeCode"] for r in listed] == ["E123"]

    response = client.put(f"/api/achievements/{body['id']}", json={"metrics": {"FD AMT": 10}})
    assert response.json()["metrics"]["GRAND TOTAL AMT"] == 10
    assert client.post("/api/achievements/clear").status_code == 403


def test_achievement_export_and_import(admin_client):
    rows = [{"Date": "20/10/2025", "Employee Code": "E100", "DDS AMT": 500, "FD AC": 2}]
    upload = spreadsheet_service.build_workbook(rows, "Achievements", ACHIEVEMENT_COLUMNS)
    response = admin_client.post(
        "/api/achievements/import",
        files={"file": ("daily.xlsx", upload.getvalue(), spreadsheet_service.XLSX_MEDIA_TYPE)},
    )
    assert response.json() == {"added": 1, "updated": 0, "skipped": 0}

    response = admin_client.get("/api/achievements/export")
    ws = openpyxl.load_workbook(BytesIO(response.content)).active
    assert [c.value for c in ws[1]] == ACHIEVEMENT_COLUMNS
    assert [c.value for c in ws[2]][:4] == ["20/10/2025", "E100", "ANIL", "BETA"]


def test_projection_endpoints(client):
    _login(client, "E123")
    payload = {"employeeCode": "E123", "date": "2025-10-20", "metric": "DDS AMT", "value": 400}
    created = client.post("/api/projections", json=payload)
    assert created.status_code == 201
    assert client.post("/api/projections", json=payload).status_code == 409

    projection_id = created.json()["id"]
    assert client.put(f"/api/projections/{projection_id}", json={"value": 450}).json()["value"] == 450
    listed = client.get("/api/projections", params={"employee_code": "E123", "date": "2025-10-20"}).json()
    assert [p["metric"] for p in listed] == ["DDS AMT"]

    assert client.delete(f"/api/projections/{projection_id}").status_code == 200
    assert client.delete(f"/api/projections/{projection_id}").status_code == 404
