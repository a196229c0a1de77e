import pytest

from dailyreport.core.config import NA
from dailyreport.core.exceptions import InUseError, NotFoundError, ValidationError
from dailyreport.services.report_service import ReportService


def test_zone_names_are_unique(org_service):
    with pytest.raises(ValidationError) as exc:
        org_service.add_zone({"name": "zone-1"})
    assert exc.value.errors["name"] == "Zone name must be unique."


def test_zone_rename_cascades(store, org_service, member):
    org_service.update_zone("zone-2", {"name": "West"})
    beta = next(b for b in store.branches if b.branch_name == "BETA")
    assert beta.zone == "West"
    assert member("s-a").zone == "West"
    assert member("s-c").managed_zones == ["Zone-1", "West"]


def test_zone_in_use_cannot_be_deleted(org_service):
    with pytest.raises(InUseError) as exc:
        org_service.remove_zone("zone-1")
    assert "regions are still assigned" in exc.value.message


def test_zone_managed_by_staff_cannot_be_deleted(org_service):
    zone = org_service.add_zone({"name": "Zone-3"})
    org_service.store.commit(staff=[
        s.model_copy(update={"managed_zones": s.managed_zones + ["Zone-3"]}) if s.id == "s-c" else s
        for s in org_service.store.staff
    ])
    with pytest.raises(InUseError) as exc:
        org_service.remove_zone(zone.id)
    assert "still managing it" in exc.value.message


def test_unused_zone_can_be_deleted(store, org_service):
    zone = org_service.add_zone({"name": "Zone-3"})
    org_service.remove_zone(zone.id)
    assert "Zone-3" not in {z.name for z in store.zones}
    with pytest.raises(NotFoundError):
        org_service.remove_zone(zone.id)


def test_region_requires_known_zone(org_service):
    with pytest.raises(ValidationError) as exc:
        org_service.add_region({"name": "Region-3", "zoneId": "zone-9"})
    assert "zone_id" in exc.value.errors
    assert org_service.add_region({"name": "Region-3", "zoneId": "zone-2"}).zone_id == "zone-2"


def test_region_with_districts_cannot_be_deleted(org_service):
    with pytest.raises(InUseError):
        org_service.remove_region("region-1")


def test_region_rename_cascades(store, org_service, member):
    org_service.update_region("region-1", {"name": "North"})
    assert {b.region for b in store.branches if b.zone == "Zone-1"} == {"North"}
    assert member("s-c").region == "North"


def test_district_rename_and_delete(store, org_service, member):
    org_service.update_district("district-b", {"name": "District-Z"})
    assert member("s-d").district_name == "District-Z"
    with pytest.raises(InUseError):
        org_service.remove_district("district-b")

    district = org_service.add_district({"name": "District-C", "region_id": "region-2"})
    org_service.remove_district(district.id)
    assert "District-C" not in {d.name for d in store.districts}


def test_cascading_lookups(org_service):
    assert [r.name for r in org_service.regions_in_zone("Zone-2")] == ["Region-2"]
    assert [d.name for d in org_service.districts_in_region("Region-1")] == ["District-A"]


def test_reset_keeps_system_accounts_and_caller(store, org_service, member):
    admin = next(u for u in store.projection.users if u.username == "admin")
    ReportService(store).add_achievement({"date": "2025-10-20", "employeeCode": "E123", "metrics": {"DDS AMT": 10}}, admin)

    org_service.reset(except_id="s-b")

    assert {s.id for s in store.staff} == {"admin-user-0", "zm-user-0", "s-b"}
    assert member("s-b").reports_to_employee_code is None
    assert member("s-b").branch_name == NA
    assert store.branches == []
    assert store.achievements == []
    assert [z.name for z in store.zones] == ["Zone-1", "Zone-2", "Zone-3", "Zone-4", "Zone-5"]
    assert store.projection.passwords["E200"] == "E200"
