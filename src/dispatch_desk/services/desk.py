"""
Dispatch Desk - single owner of all desk state

Every command and query from the API and the simulation timers goes through
one DispatchDesk instance, which serializes them behind a single re-entrant
lock. Results handed back to callers are copies, so nobody outside the lock
holds a live reference to desk state.
"""

import logging
import random
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

from pydantic import BaseModel

from ..config import DeskConfig
from ..domain import (
    Call,
    CallStatus,
    CallType,
    ContractStatus,
    CustomStatus,
    DeskError,
    EffectiveStatus,
    Employee,
    EmployeeStatus,
    HistoryEntry,
    Zone,
)
from .call_queue import CallQueue
from .history_log import HistoryLog, utc_now
from .seed_data import create_standard_employees, create_standard_zones
from .staff_roster import StaffRoster
from .views import DeskStats, build_stats, effective_status, sort_zones
from .zone_registry import ZoneRegistry


logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _snapshot(model: M) -> M:
    return model.model_copy(deep=True)


@dataclass
class ZoneView:
    """A zone together with its derived display status."""
    zone: Zone
    status: EffectiveStatus
    has_pending_call: bool


@dataclass
class BulkResult:
    """Outcome of a bulk command: applied ids and per-id rejection reasons."""
    applied: List[int] = field(default_factory=list)
    rejected: Dict[int, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "applied": self.applied,
            "rejected": {str(k): v for k, v in self.rejected.items()},
        }


class DispatchDesk:
    """State manager owning zones, calls, staff, custom statuses and history."""

    def __init__(
        self,
        config: Optional[DeskConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or DeskConfig()
        self._clock = clock or utc_now
        self._rng = rng or random.Random()
        self._lock = threading.RLock()

        self.history = HistoryLog(clock=self._clock)
        self.registry = ZoneRegistry(self.config, self.history, self._clock)
        self.roster = StaffRoster(self.config.ranks)
        self.calls = CallQueue(self.registry, self.roster, self.history, self._clock)

    @classmethod
    def seeded(
        cls,
        config: Optional[DeskConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
    ) -> "DispatchDesk":
        """Desk loaded with the standard startup zones and staff."""
        desk = cls(config=config, clock=clock, rng=rng)
        now = desk._clock()
        for zone in create_standard_zones(desk.config, now, desk._rng):
            desk.registry.add_zone(zone)
        for employee in create_standard_employees(desk.config):
            desk.roster.add(employee)
        logger.info(
            "[STARTUP] seeded %d zones, %d employees",
            len(desk.registry.zones), len(desk.roster.employees),
        )
        return desk

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    # =========================================================================
    # Zone commands
    # =========================================================================

    def create_zone(self, address: str, phone: str) -> Zone:
        with self._lock:
            return _snapshot(self.registry.create_zone(address, phone))

    def set_guard(self, zone_id: int, guarded: bool) -> Zone:
        with self._lock:
            return _snapshot(self.registry.set_guard(zone_id, guarded))

    def set_battery(self, zone_id: int, level: int) -> Zone:
        with self._lock:
            return _snapshot(self.registry.set_battery(zone_id, level))

    def charge_battery(self, zone_id: int) -> Zone:
        with self._lock:
            return _snapshot(self.registry.charge(zone_id))

    def discharge_battery(self, zone_id: int) -> Zone:
        with self._lock:
            return _snapshot(self.registry.discharge(zone_id))

    def set_custom_status(self, zone_id: int, status_id: Optional[str]) -> Zone:
        with self._lock:
            return _snapshot(self.registry.set_custom_status(zone_id, status_id))

    def set_contract_status(self, zone_id: int, status: ContractStatus) -> Zone:
        """Change a zone's contract.

        Resuming a suspended/terminated contract also resolves every active
        call on the zone, so no responder stays tied to a stale dispatch.
        """
        with self._lock:
            change = self.registry.set_contract_status(zone_id, status)
            if change.resumed:
                self.calls.close_zone_calls(zone_id)
            return _snapshot(change.zone)

    def create_custom_status(self, name: str, color: Optional[str] = None) -> CustomStatus:
        with self._lock:
            return _snapshot(self.registry.create_custom_status(name, color))

    # =========================================================================
    # Bulk commands
    # =========================================================================

    def bulk_set_guard(self, zone_ids: Iterable[int], guarded: bool) -> BulkResult:
        """Set the guard flag on each zone; one history entry per applied zone."""
        with self._lock:
            return self._bulk(zone_ids, lambda zone_id: self.registry.set_guard(zone_id, guarded))

    def bulk_raise_call(
        self,
        zone_ids: Iterable[int],
        call_type: CallType = CallType.ALARM,
    ) -> BulkResult:
        """Raise a call on each zone; zones without an active contract are rejected."""
        with self._lock:
            return self._bulk(zone_ids, lambda zone_id: self.calls.raise_call(zone_id, call_type))

    def _bulk(self, zone_ids: Iterable[int], apply: Callable[[int], object]) -> BulkResult:
        result = BulkResult()
        for zone_id in dict.fromkeys(zone_ids):
            try:
                apply(zone_id)
            except DeskError as e:
                result.rejected[zone_id] = e.message
            else:
                result.applied.append(zone_id)
        return result

    # =========================================================================
    # Call commands
    # =========================================================================

    def raise_call(self, zone_id: int, call_type: CallType) -> Call:
        with self._lock:
            return _snapshot(self.calls.raise_call(zone_id, call_type))

    def assign_employee(self, call_id: str, employee_id: str) -> Call:
        with self._lock:
            return _snapshot(self.calls.assign(call_id, employee_id))

    def complete_call(self, call_id: str) -> Call:
        with self._lock:
            return _snapshot(self.calls.complete(call_id))

    def reset_call(self, call_id: str) -> Call:
        with self._lock:
            return _snapshot(self.calls.reset(call_id))

    # =========================================================================
    # Staff commands
    # =========================================================================

    def create_employee(self, name: str, rank: str) -> Employee:
        with self._lock:
            return _snapshot(self.roster.create_employee(name, rank))

    def remove_employee(self, employee_id: str) -> Employee:
        with self._lock:
            return _snapshot(self.roster.remove_employee(employee_id))

    # =========================================================================
    # Simulation hooks
    # =========================================================================

    def inject_random_alarm(self) -> Optional[Call]:
        """Raise an alarm on a random guarded zone with an active contract.

        Returns:
            The new call, or None when no zone is eligible
        """
        with self._lock:
            eligible = [
                z.id for z in self.registry.list_zones()
                if z.is_guarded and z.is_active_contract
            ]
            if not eligible:
                logger.debug("[SIM] no eligible zone for alarm")
                return None
            zone_id = self._rng.choice(eligible)
            return _snapshot(self.calls.raise_call(zone_id, CallType.ALARM))

    def drain_batteries(self) -> int:
        """Apply one battery-drain step to every zone."""
        with self._lock:
            changed = self.registry.drain_all(self.config.drain_step)
            logger.debug("[SIM] drained %d zone(s) by %d%%", changed, self.config.drain_step)
            return changed

    # =========================================================================
    # Queries
    # =========================================================================

    def get_zone(self, zone_id: int) -> Zone:
        with self._lock:
            return _snapshot(self.registry.get_zone(zone_id))

    def get_zone_view(self, zone_id: int) -> ZoneView:
        with self._lock:
            return self._view(self.registry.get_zone(zone_id))

    def list_zone_views(self, priority: bool = False) -> List[ZoneView]:
        """All zones with their status, by id or in operator priority order."""
        with self._lock:
            zones = self.registry.list_zones()
            if priority:
                zones = sort_zones(
                    zones,
                    self.calls.pending_zone_ids(),
                    self.config.low_battery_threshold,
                )
            return [self._view(z) for z in zones]

    def zone_status(self, zone_id: int) -> EffectiveStatus:
        with self._lock:
            return self._view(self.registry.get_zone(zone_id)).status

    def _view(self, zone: Zone) -> ZoneView:
        pending = self.calls.has_pending_call(zone.id)
        custom = (
            self.registry.custom_statuses.get(zone.custom_status_id)
            if zone.custom_status_id is not None else None
        )
        status = effective_status(zone, pending, custom, self.config.low_battery_threshold)
        return ZoneView(zone=_snapshot(zone), status=status, has_pending_call=pending)

    def list_history(self, zone_id: int, limit: Optional[int] = None) -> List[HistoryEntry]:
        with self._lock:
            return self.history.entries(self.registry.get_zone(zone_id), limit)

    def guarded_zone_ids(self) -> List[int]:
        with self._lock:
            return self.registry.guarded_zone_ids()

    def get_call(self, call_id: str) -> Call:
        with self._lock:
            return _snapshot(self.calls.get_call(call_id))

    def list_calls(self, status: Optional[CallStatus] = None) -> List[Call]:
        with self._lock:
            return [_snapshot(c) for c in self.calls.list_active(status)]

    def list_resolved_calls(self) -> List[Call]:
        with self._lock:
            return [_snapshot(c) for c in self.calls.list_resolved()]

    def get_employee(self, employee_id: str) -> Employee:
        with self._lock:
            return _snapshot(self.roster.get(employee_id))

    def list_employees(self, status: Optional[EmployeeStatus] = None) -> List[Employee]:
        with self._lock:
            return [_snapshot(e) for e in self.roster.list(status)]

    def list_custom_statuses(self) -> List[CustomStatus]:
        with self._lock:
            return [_snapshot(s) for s in self.registry.list_custom_statuses()]

    def stats(self) -> DeskStats:
        with self._lock:
            return build_stats(
                self.registry.zones.values(),
                self.calls.active,
                self.calls.resolved,
                self.registry.custom_statuses,
                self.config.low_battery_threshold,
            )
