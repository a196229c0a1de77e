import pytest
from fastapi.testclient import TestClient

from dailyreport.core.config import Settings
from dailyreport.db.store import OrgStore
from dailyreport.main import create_app
from dailyreport.schemas.organization import Branch, District, Region, Zone
from dailyreport.schemas.staff import StaffMember
from dailyreport.services.branch_service import BranchService
from dailyreport.services.org_service import OrgService
from dailyreport.services.staff_service import StaffService


def build_store(settings=None) -> OrgStore:
    """
    Small organisation used across the tests:

        E300 (ZONAL MANAGER, ALPHA)
          └─ E200 (DISTRICT HEAD, ALPHA)
               └─ E100 (BRANCH MANAGER, BETA)
                    └─ E123 (BRANCH OFFICER, BETA)

    GAMMA has nobody assigned. The two system accounts are added by the store.
    """
    zones = [Zone(id="zone-1", name="Zone-1"), Zone(id="zone-2", name="Zone-2")]
    regions = [
        Region(id="region-1", name="Region-1", zone_id="zone-1"),
        Region(id="region-2", name="Region-2", zone_id="zone-2"),
    ]
    districts = [
        District(id="district-a", name="District-A", region_id="region-1"),
        District(id="district-b", name="District-B", region_id="region-2"),
    ]
    branches = [
        Branch(id="branch-a", branch_name="ALPHA", zone="Zone-1", region="Region-1", district_name="District-A",
               mobile_number="9111111111"),
        Branch(id="branch-b", branch_name="BETA", zone="Zone-2", region="Region-2", district_name="District-B",
               mobile_number="9222222222"),
        Branch(id="branch-c", branch_name="GAMMA", zone="Zone-1", region="Region-1", district_name="District-A"),
    ]
    staff = [
        StaffMember(id="s-c", employee_code="E300", employee_name="CHARU", contact_number="9000000003",
                    function="ZONAL MANAGER", branch_name="ALPHA", managed_zones=["Zone-1", "Zone-2"]),
        StaffMember(id="s-b", employee_code="E200", employee_name="BHAVESH", contact_number="9000000002",
                    function="DISTRICT HEAD", branch_name="ALPHA", managed_branches=["ALPHA", "GAMMA"],
                    reports_to_employee_code="E300"),
        StaffMember(id="s-a", employee_code="E100", employee_name="ANIL", contact_number="9000000001",
                    function="BRANCH MANAGER", branch_name="BETA", reports_to_employee_code="E200"),
        StaffMember(id="s-d", employee_code="E123", employee_name="DEEPA", contact_number="9000000004",
                    function="BRANCH OFFICER", branch_name="BETA", reports_to_employee_code="E100"),
    ]
    return OrgStore(zones=zones, regions=regions, districts=districts, branches=branches, staff=staff,
                    settings=settings)


def by_id(store: OrgStore, staff_id: str) -> StaffMember:
    return next(s for s in store.staff if s.id == staff_id)


@pytest.fixture
def store():
    return build_store()


@pytest.fixture
def staff_service(store):
    return StaffService(store)


@pytest.fixture
def branch_service(store):
    return BranchService(store)


@pytest.fixture
def org_service(store):
    return OrgService(store)


@pytest.fixture
def clearing_store():
    return build_store(Settings(CLEAR_DANGLING_REPORTS=True))


@pytest.fixture
def client(store):
    with TestClient(create_app(store=store)) as c:
        yield c


@pytest.fixture
def admin_client(client):
    response = client.post("/login", data={"username": "admin", "password": "admin123"})
    assert response.status_code == 200
    return client


@pytest.fixture
def member(store):
    """Current stored copy of a staff record, looked up by id."""
    return lambda staff_id: by_id(store, staff_id)


@pytest.fixture
def make_store():
    return build_store
