from dailyreport.core.config import NA
from dailyreport.services.location_service import (
    districts_in_region, find_branch, regions_in_zone, resolve_branch_location,
)


def test_resolve_known_branch(store):
    location = resolve_branch_location(store.branches, "BETA")
    assert (location.zone, location.region, location.district_name) == ("Zone-2", "Region-2", "District-B")


def test_resolve_unknown_or_unassigned_branch_is_na(store):
    for name in ("NOWHERE", NA, "", None, "beta"):
        location = resolve_branch_location(store.branches, name)
        assert (location.zone, location.region, location.district_name) == (NA, NA, NA)


def test_find_branch_never_matches_sentinel(store):
    assert find_branch(store.branches, NA) is None
    assert find_branch(store.branches, "GAMMA").id == "branch-c"


def test_regions_in_zone(store):
    assert [r.name for r in regions_in_zone(store.zones, store.regions, "Zone-1")] == ["Region-1"]
    assert regions_in_zone(store.zones, store.regions, "Zone-9") == []


def test_districts_in_region(store):
    assert [d.name for d in districts_in_region(store.regions, store.districts, "Region-2")] == ["District-B"]
    assert districts_in_region(store.regions, store.districts, "Region-9") == []
