import threading
from typing import Iterable, List, Optional

from fastapi import Request

from ..core.config import ADMIN_USER_ID, ZONAL_MANAGER_USER_ID, Settings, logger, settings as default_settings
from ..schemas.organization import Branch, District, Region, Zone
from ..schemas.report import DailyAchievement, Projection
from ..schemas.staff import StaffMember
from ..schemas.user import AuthProjection
from ..services import auth_service
from ..services.consistency import derive_location, normalize_managed_units, refresh_branch_managers
from .. import seed


def _copies(items):
    return [item.model_copy(deep=True) for item in items]


class OrgStore:
    """
    In-memory home of the organisation: master data, branches, staff, the
    login projection derived from staff, and the daily achievement and
    projection records submitted against employee codes.

    One instance is owned by the application (``app.state.store``). Every
    mutation goes through :meth:`commit`, which holds the lock, swaps in the new
    collections and re-derives everything that depends on them before anyone
    can read again.
    """

    def __init__(
        self,
        zones: Iterable[Zone] = (),
        regions: Iterable[Region] = (),
        districts: Iterable[District] = (),
        branches: Iterable[Branch] = (),
        staff: Iterable[StaffMember] = (),
        settings: Optional[Settings] = None,
        achievements: Iterable[DailyAchievement] = (),
        projections: Iterable[Projection] = (),
    ):
        self.settings = settings or default_settings
        self.lock = threading.RLock()
        self.version = 0
        # System identity records can never be deleted
        self.protected_ids = {ADMIN_USER_ID, ZONAL_MANAGER_USER_ID}
        self.projection = AuthProjection()

        self._zones: List[Zone] = list(zones)
        self._regions: List[Region] = list(regions)
        self._districts: List[District] = list(districts)
        self._branches: List[Branch] = list(branches)
        self._staff: List[StaffMember] = list(staff)
        self._achievements: List[DailyAchievement] = list(achievements)
        self._projections: List[Projection] = list(projections)
        self._load_system_fixtures()
        self._sync()

    def _load_system_fixtures(self):
        present = {s.id for s in self._staff}
        fixtures = [StaffMember(**s) for s in seed.system_staff if s["id"] not in present]
        self._staff = fixtures + self._staff

    @classmethod
    def seeded(cls, settings: Optional[Settings] = None) -> "OrgStore":
        """Store pre-loaded with the demo organisation from `seed.py`."""
        store = cls(
            zones=[Zone(**z) for z in seed.zones],
            regions=[Region(**r) for r in seed.regions],
            districts=[District(**d) for d in seed.districts],
            branches=[Branch(**b) for b in seed.branches],
            staff=[StaffMember(**s) for s in seed.staff],
            settings=settings,
        )
        logger.info(
            f"[STORE] Seeded {len(store._zones)} zones, {len(store._branches)} branches "
            f"and {len(store._staff)} staff members."
        )
        return store

    # --- READ ACCESS (copies, so callers cannot bypass commit) ---

    @property
    def zones(self) -> List[Zone]:
        return _copies(self._zones)

    @property
    def regions(self) -> List[Region]:
        return _copies(self._regions)

    @property
    def districts(self) -> List[District]:
        return _copies(self._districts)

    @property
    def branches(self) -> List[Branch]:
        return _copies(self._branches)

    @property
    def staff(self) -> List[StaffMember]:
        return _copies(self._staff)

    @property
    def achievements(self) -> List[DailyAchievement]:
        return _copies(self._achievements)

    @property
    def projections(self) -> List[Projection]:
        return _copies(self._projections)

    # --- WRITE ACCESS ---

    def commit(
        self,
        zones: Optional[List[Zone]] = None,
        regions: Optional[List[Region]] = None,
        districts: Optional[List[District]] = None,
        branches: Optional[List[Branch]] = None,
        staff: Optional[List[StaffMember]] = None,
        achievements: Optional[List[DailyAchievement]] = None,
        projections: Optional[List[Projection]] = None,
    ) -> int:
        """Replace the given collections and re-derive dependent state. Returns the new version."""
        with self.lock:
            if zones is not None:
                self._zones = list(zones)
            if regions is not None:
                self._regions = list(regions)
            if districts is not None:
                self._districts = list(districts)
            if branches is not None:
                self._branches = list(branches)
            if staff is not None:
                self._staff = list(staff)
            if achievements is not None:
                self._achievements = list(achievements)
            if projections is not None:
                self._projections = list(projections)
            self._sync()
            return self.version

    def _sync(self):
        # 1. Location and managed units follow the branch and the designation
        self._staff = [
            normalize_managed_units(derive_location(s, self._branches), self._zones, self._branches)
            for s in self._staff
        ]
        # 2. Branch manager snapshot
        self._branches = refresh_branch_managers(self._branches, self._staff)
        # 3. Logins are a pure function of staff, always rebuilt after the collections settle
        self.version += 1
        self.projection = auth_service.recompute(
            self._staff,
            admin_password=self.settings.ADMIN_PASSWORD,
            zm_password=self.settings.ZM_PASSWORD,
        )
        logger.debug(f"[STORE] Version {self.version}: {len(self._staff)} staff, {len(self.projection.users)} logins.")


def get_store(request: Request) -> OrgStore:
    """Dependency returning the application's store."""
    return request.app.state.store
