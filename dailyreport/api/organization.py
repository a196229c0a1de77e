from typing import List

from fastapi import APIRouter, Depends

from ..core.security import get_current_user, require_admin
from ..db.store import OrgStore, get_store
from ..schemas.organization import (
    District, DistrictCreate, DistrictUpdate,
    Region, RegionCreate, RegionUpdate,
    Zone, ZoneCreate, ZoneUpdate,
)
from ..schemas.user import User
from ..services.org_service import OrgService

router = APIRouter(prefix="/api")


# ====================================================================
# ZONES
# ====================================================================

@router.get("/zones", response_model=List[Zone])
def list_zones(_: User = Depends(get_current_user), store: OrgStore = Depends(get_store)):
    return store.zones


@router.get("/zones/{zone_name}/regions", response_model=List[Region])
def list_regions_in_zone(zone_name: str, _: User = Depends(get_current_user), store: OrgStore = Depends(get_store)):
    return OrgService(store).regions_in_zone(zone_name)


@router.post("/zones", response_model=Zone, status_code=201)
def create_zone(payload: ZoneCreate, _: User = Depends(require_admin), store: OrgStore = Depends(get_store)):
    return OrgService(store).add_zone(payload)


@router.put("/zones/{zone_id}", response_model=Zone)
def update_zone(zone_id: str, payload: ZoneUpdate, _: User = Depends(require_admin),
                store: OrgStore = Depends(get_store)):
    return OrgService(store).update_zone(zone_id, payload)


@router.delete("/zones/{zone_id}")
def delete_zone(zone_id: str, _: User = Depends(require_admin), store: OrgStore = Depends(get_store)):
    OrgService(store).remove_zone(zone_id)
    return {"status": "success"}


# ====================================================================
# REGIONS
# ====================================================================

@router.get("/regions", response_model=List[Region])
def list_regions(_: User = Depends(get_current_user), store: OrgStore = Depends(get_store)):
    return store.regions


@router.get("/regions/{region_name}/districts", response_model=List[District])
def list_districts_in_region(region_name: str, _: User = Depends(get_current_user),
                             store: OrgStore = Depends(get_store)):
    return OrgService(store).districts_in_region(region_name)


@router.post("/regions", response_model=Region, status_code=201)
def create_region(payload: RegionCreate, _: User = Depends(require_admin), store: OrgStore = Depends(get_store)):
    return OrgService(store).add_region(payload)


@router.put("/regions/{region_id}", response_model=Region)
def update_region(region_id: str, payload: RegionUpdate, _: User = Depends(require_admin),
                  store: OrgStore = Depends(get_store)):
    return OrgService(store).update_region(region_id, payload)


@router.delete("/regions/{region_id}")
def delete_region(region_id: str, _: User = Depends(require_admin), store: OrgStore = Depends(get_store)):
    OrgService(store).remove_region(region_id)
    return {"status": "success"}


# ====================================================================
# DISTRICTS
# ====================================================================

@router.get("/districts", response_model=List[District])
def list_districts(_: User = Depends(get_current_user), store: OrgStore = Depends(get_store)):
    return store.districts


@router.post("/districts", response_model=District, status_code=201)
def create_district(payload: DistrictCreate, _: User = Depends(require_admin), store: OrgStore = Depends(get_store)):
    return OrgService(store).add_district(payload)


@router.put("/districts/{district_id}", response_model=District)
def update_district(district_id: str, payload: DistrictUpdate, _: User = Depends(require_admin),
                    store: OrgStore = Depends(get_store)):
    return OrgService(store).update_district(district_id, payload)


@router.delete("/districts/{district_id}")
def delete_district(district_id: str, _: User = Depends(require_admin), store: OrgStore = Depends(get_store)):
    OrgService(store).remove_district(district_id)
    return {"status": "success"}


# ====================================================================
# RESET
# ====================================================================

@router.post("/reset")
def reset_app_data(user: User = Depends(require_admin), store: OrgStore = Depends(get_store)):
    """Wipe the organisation; the system accounts and the caller are kept."""
    OrgService(store).reset(except_id=user.id)
    return {"status": "success"}
