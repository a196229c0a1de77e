# dailyreport/services/org_service.py
"""
Zone / region / district master data.

Names are unique (case-insensitive). Renames are carried over to branches,
and from there to staff locations when the store re-derives them. Deletion is
refused while anything still points at the unit. `reset` wipes the
organisation back to its initial master data.
"""
import uuid
from typing import List, Optional, Union

from ..core.config import logger
from ..core.exceptions import InUseError, NotFoundError, ValidationError
from ..db.store import OrgStore
from ..schemas.organization import (
    District, DistrictCreate, DistrictUpdate,
    Region, RegionCreate, RegionUpdate,
    Zone, ZoneCreate, ZoneUpdate,
)
from .location_service import districts_in_region, regions_in_zone
from .. import seed


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def _find(items, item_id: str, entity: str):
    item = next((i for i in items if i.id == item_id), None)
    if item is None:
        raise NotFoundError(entity, item_id)
    return item


def _check_name(items, name: str, entity: str, exclude_id: str = None):
    if not name or not name.strip():
        raise ValidationError({"name": f"{entity} name is required."})
    if any(i.name.lower() == name.strip().lower() and i.id != exclude_id for i in items):
        raise ValidationError({"name": f"{entity} name must be unique."})


class OrgService:
    def __init__(self, store: OrgStore):
        self.store = store

    # ====================================================================
    # LOOKUPS
    # ====================================================================

    def regions_in_zone(self, zone_name: str) -> List[Region]:
        return regions_in_zone(self.store.zones, self.store.regions, zone_name)

    def districts_in_region(self, region_name: str) -> List[District]:
        return districts_in_region(self.store.regions, self.store.districts, region_name)

    # ====================================================================
    # ZONES
    # ====================================================================

    def add_zone(self, data: Union[ZoneCreate, dict]) -> Zone:
        if not isinstance(data, ZoneCreate):
            data = ZoneCreate.model_validate(data)
        with self.store.lock:
            zones = self.store.zones
            _check_name(zones, data.name, "Zone")
            zone = Zone(id=_new_id("zone"), name=data.name.strip())
            self.store.commit(zones=zones + [zone])
            logger.info(f"[ORG] Added zone '{zone.name}'.")
            return zone

    def update_zone(self, zone_id: str, data: Union[ZoneUpdate, dict]) -> Zone:
        if not isinstance(data, ZoneUpdate):
            data = ZoneUpdate.model_validate(data)
        with self.store.lock:
            zones = self.store.zones
            old = _find(zones, zone_id, "Zone")
            if data.name is None or data.name.strip() == old.name:
                return old
            _check_name(zones, data.name, "Zone", exclude_id=zone_id)
            new_name = data.name.strip()

            branches = [
                b.model_copy(update={"zone": new_name}) if b.zone == old.name else b
                for b in self.store.branches
            ]
            staff = [
                s.model_copy(update={"managed_zones": [new_name if z == old.name else z for z in s.managed_zones]})
                for s in self.store.staff
            ]
            updated = old.model_copy(update={"name": new_name})
            self.store.commit(
                zones=[updated if z.id == zone_id else z for z in zones],
                branches=branches,
                staff=staff,
            )
            logger.info(f"[ORG] Renamed zone '{old.name}' to '{new_name}'.")
            return updated

    def remove_zone(self, zone_id: str) -> None:
        with self.store.lock:
            zones = self.store.zones
            zone = _find(zones, zone_id, "Zone")
            if any(r.zone_id == zone_id for r in self.store.regions):
                raise InUseError(
                    f'Cannot delete zone "{zone.name}" as regions are still assigned to it. '
                    f'Please reassign or delete regions first.'
                )
            if any(b.zone == zone.name for b in self.store.branches):
                raise InUseError(
                    f'Cannot delete zone "{zone.name}" as branches are still assigned to it. '
                    f'Please reassign or delete branches first.'
                )
            if any(zone.name in s.managed_zones for s in self.store.staff):
                raise InUseError(
                    f'Cannot delete zone "{zone.name}" as staff members are still managing it. '
                    f'Please update staff assignments first.'
                )
            self.store.commit(zones=[z for z in zones if z.id != zone_id])
            logger.info(f"[ORG] Deleted zone '{zone.name}'.")

    # ====================================================================
    # REGIONS
    # ====================================================================

    def _check_zone_ref(self, zone_id):
        if zone_id and not any(z.id == zone_id for z in self.store.zones):
            raise ValidationError({"zone_id": f'Zone with ID "{zone_id}" not found.'})

    def add_region(self, data: Union[RegionCreate, dict]) -> Region:
        if not isinstance(data, RegionCreate):
            data = RegionCreate.model_validate(data)
        with self.store.lock:
            regions = self.store.regions
            _check_name(regions, data.name, "Region")
            self._check_zone_ref(data.zone_id)
            region = Region(id=_new_id("region"), name=data.name.strip(), zone_id=data.zone_id)
            self.store.commit(regions=regions + [region])
            logger.info(f"[ORG] Added region '{region.name}'.")
            return region

    def update_region(self, region_id: str, data: Union[RegionUpdate, dict]) -> Region:
        if not isinstance(data, RegionUpdate):
            data = RegionUpdate.model_validate(data)
        with self.store.lock:
            regions = self.store.regions
            old = _find(regions, region_id, "Region")
            changes = {}
            if data.name is not None and data.name.strip() != old.name:
                _check_name(regions, data.name, "Region", exclude_id=region_id)
                changes["name"] = data.name.strip()
            if data.zone_id is not None:
                self._check_zone_ref(data.zone_id)
                changes["zone_id"] = data.zone_id or None
            updated = old.model_copy(update=changes)

            branches = None
            if updated.name != old.name:
                branches = [
                    b.model_copy(update={"region": updated.name}) if b.region == old.name else b
                    for b in self.store.branches
                ]
                logger.info(f"[ORG] Renamed region '{old.name}' to '{updated.name}'.")
            self.store.commit(regions=[updated if r.id == region_id else r for r in regions], branches=branches)
            return updated

    def remove_region(self, region_id: str) -> None:
        with self.store.lock:
            regions = self.store.regions
            region = _find(regions, region_id, "Region")
            if any(d.region_id == region_id for d in self.store.districts):
                raise InUseError(
                    f'Cannot delete region "{region.name}" as districts are still assigned to it. '
                    f'Please reassign or delete districts first.'
                )
            if any(b.region == region.name for b in self.store.branches):
                raise InUseError(
                    f'Cannot delete region "{region.name}" as branches are still assigned to it. '
                    f'Please reassign or delete branches first.'
                )
            self.store.commit(regions=[r for r in regions if r.id != region_id])
            logger.info(f"[ORG] Deleted region '{region.name}'.")

    # ====================================================================
    # DISTRICTS
    # ====================================================================

    def _check_region_ref(self, region_id):
        if region_id and not any(r.id == region_id for r in self.store.regions):
            raise ValidationError({"region_id": f'Region with ID "{region_id}" not found.'})

    def add_district(self, data: Union[DistrictCreate, dict]) -> District:
        if not isinstance(data, DistrictCreate):
            data = DistrictCreate.model_validate(data)
        with self.store.lock:
            districts = self.store.districts
            _check_name(districts, data.name, "District")
            self._check_region_ref(data.region_id)
            district = District(id=_new_id("district"), name=data.name.strip(), region_id=data.region_id)
            self.store.commit(districts=districts + [district])
            logger.info(f"[ORG] Added district '{district.name}'.")
            return district

    def update_district(self, district_id: str, data: Union[DistrictUpdate, dict]) -> District:
        if not isinstance(data, DistrictUpdate):
            data = DistrictUpdate.model_validate(data)
        with self.store.lock:
            districts = self.store.districts
            old = _find(districts, district_id, "District")
            changes = {}
            if data.name is not None and data.name.strip() != old.name:
                _check_name(districts, data.name, "District", exclude_id=district_id)
                changes["name"] = data.name.strip()
            if data.region_id is not None:
                self._check_region_ref(data.region_id)
                changes["region_id"] = data.region_id or None
            updated = old.model_copy(update=changes)

            branches = None
            if updated.name != old.name:
                branches = [
                    b.model_copy(update={"district_name": updated.name}) if b.district_name == old.name else b
                    for b in self.store.branches
                ]
                logger.info(f"[ORG] Renamed district '{old.name}' to '{updated.name}'.")
            self.store.commit(districts=[updated if d.id == district_id else d for d in districts], branches=branches)
            return updated

    def remove_district(self, district_id: str) -> None:
        with self.store.lock:
            districts = self.store.districts
            district = _find(districts, district_id, "District")
            if any(b.district_name == district.name for b in self.store.branches):
                raise InUseError(
                    f'Cannot delete district "{district.name}" as branches are still assigned to it. '
                    f'Please reassign or delete branches first.'
                )
            self.store.commit(districts=[d for d in districts if d.id != district_id])
            logger.info(f"[ORG] Deleted district '{district.name}'.")

    # ====================================================================
    # RESET
    # ====================================================================

    def reset(self, except_id: Optional[str] = None) -> None:
        """
        Start over: master data goes back to the initial zones, regions and
        districts; branches, daily achievements, projections and every staff
        member except the system accounts and `except_id` are deleted. The
        members kept lose their reporting line and managed units.
        """
        with self.store.lock:
            keep = set(self.store.protected_ids)
            if except_id:
                keep.add(except_id)
            staff = [
                s.model_copy(update={"managed_zones": [], "managed_branches": [], "reports_to_employee_code": None})
                for s in self.store.staff if s.id in keep
            ]
            self.store.commit(
                zones=[Zone(**z) for z in seed.zones],
                regions=[Region(**r) for r in seed.regions],
                districts=[District(**d) for d in seed.districts],
                branches=[],
                staff=staff,
                achievements=[],
                projections=[],
            )
        logger.warning(f"[ORG] Application data reset; {len(staff)} staff record(s) kept.")
