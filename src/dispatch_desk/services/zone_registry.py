"""
Zone Registry

Owns the security zones and the operator-defined custom statuses.

Operations:
- create_zone: add a zone (address + phone required)
- set_guard / set_battery / charge / discharge / drain_all
- set_custom_status: attach or clear a custom status overlay
- set_contract_status: active / suspended / terminated transitions

Every operation on an unknown id raises NotFound; validation runs before any
field is written.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ..config import DeskConfig
from ..domain.enums import ContractStatus
from ..domain.errors import InvalidTransition, NotFound, ValidationError
from ..domain.models import (
    BATTERY_MAX,
    HEX_COLOR_RE,
    CustomStatus,
    Zone,
    clamp_battery,
    timestamp_id,
)
from .history_log import HistoryLog, utc_now


logger = logging.getLogger(__name__)


# =============================================================================
# Contract transitions
# =============================================================================

# Same-state changes are not transitions; terminated contracts can only be
# resumed, never suspended.
ALLOWED_CONTRACT_TRANSITIONS: Dict[ContractStatus, frozenset] = {
    ContractStatus.ACTIVE: frozenset({ContractStatus.SUSPENDED, ContractStatus.TERMINATED}),
    ContractStatus.SUSPENDED: frozenset({ContractStatus.ACTIVE, ContractStatus.TERMINATED}),
    ContractStatus.TERMINATED: frozenset({ContractStatus.ACTIVE}),
}

CONTRACT_ACTIONS: Dict[ContractStatus, str] = {
    ContractStatus.TERMINATED: "contract terminated",
    ContractStatus.SUSPENDED: "tariff suspended",
    ContractStatus.ACTIVE: "contract resumed",
}


@dataclass
class ContractChange:
    """Result of a contract status transition."""
    zone: Zone
    from_status: ContractStatus
    to_status: ContractStatus

    @property
    def resumed(self) -> bool:
        """True when the zone came back to ACTIVE from a non-active state."""
        return (
            self.to_status == ContractStatus.ACTIVE
            and self.from_status != ContractStatus.ACTIVE
        )


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class ZoneRegistry:
    """In-memory store of zones and custom statuses."""

    def __init__(
        self,
        config: Optional[DeskConfig] = None,
        history: Optional[HistoryLog] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config or DeskConfig()
        self._clock = clock or utc_now
        self.history = history or HistoryLog(clock=self._clock)

        self.zones: Dict[int, Zone] = {}
        self.custom_statuses: Dict[str, CustomStatus] = {}

    # =========================================================================
    # Lookup
    # =========================================================================

    def get_zone(self, zone_id: int) -> Zone:
        zone = self.zones.get(zone_id)
        if zone is None:
            raise NotFound("zone", zone_id)
        return zone

    def list_zones(self) -> List[Zone]:
        """All zones in ascending id order."""
        return [self.zones[zone_id] for zone_id in sorted(self.zones)]

    def get_custom_status(self, status_id: str) -> CustomStatus:
        status = self.custom_statuses.get(status_id)
        if status is None:
            raise NotFound("custom status", status_id)
        return status

    def list_custom_statuses(self) -> List[CustomStatus]:
        return list(self.custom_statuses.values())

    def guarded_zone_ids(self) -> List[int]:
        """Ids of every guarded zone, for "select all guarded"."""
        return [z.id for z in self.list_zones() if z.is_guarded]

    def next_zone_id(self) -> int:
        return max(self.zones) + 1 if self.zones else 1

    # =========================================================================
    # Zone creation
    # =========================================================================

    def add_zone(self, zone: Zone) -> Zone:
        """Register a fully built zone (seed data)."""
        if zone.id in self.zones:
            raise ValidationError(f"zone {zone.id} already exists")
        self.zones[zone.id] = zone
        return zone

    def create_zone(self, address: str, phone: str) -> Zone:
        """Create a new zone from the operator form.

        Raises:
            ValidationError: address or phone is empty/blank
        """
        if _is_blank(address) or _is_blank(phone):
            raise ValidationError("address and phone are required")

        address = address.strip()
        phone = phone.strip()
        now = self._clock()
        zone_id = self.next_zone_id()

        zone = Zone(
            id=zone_id,
            name=f"Zone {zone_id}",
            address=address,
            phone=phone,
            is_guarded=False,
            battery_level=BATTERY_MAX,
            contract_status=ContractStatus.ACTIVE,
            created_at=now,
            last_update=now,
        )
        self.zones[zone_id] = zone
        self.history.append(zone, "zone created", f"Address: {address}, Phone: {phone}")

        logger.info("[ZONE] created %s (%s)", zone_id, address)
        return zone

    # =========================================================================
    # Guard
    # =========================================================================

    def set_guard(self, zone_id: int, guarded: bool) -> Zone:
        zone = self.get_zone(zone_id)
        old = zone.is_guarded

        zone.is_guarded = guarded
        zone.last_update = self._clock()
        self.history.append(
            zone,
            "guard enabled" if guarded else "guard disabled",
            f"{_guard_text(old)} -> {_guard_text(guarded)}",
            old_value=_guard_text(old),
            new_value=_guard_text(guarded),
        )
        return zone

    # =========================================================================
    # Battery
    # =========================================================================

    def set_battery(self, zone_id: int, level: int) -> Zone:
        """Set the battery level (clamped to [0, 100])."""
        zone = self.get_zone(zone_id)
        old = zone.battery_level
        new = clamp_battery(level)

        zone.battery_level = new
        zone.last_update = self._clock()
        self.history.append(
            zone,
            "battery charged" if new == BATTERY_MAX else "battery discharged",
            f"Level: {new}%",
            old_value=str(old),
            new_value=str(new),
        )
        return zone

    def charge(self, zone_id: int) -> Zone:
        return self.set_battery(zone_id, BATTERY_MAX)

    def discharge(self, zone_id: int) -> Zone:
        zone = self.get_zone(zone_id)
        return self.set_battery(zone_id, zone.battery_level - self.config.discharge_step)

    def drain_all(self, step: int) -> int:
        """Drop every zone's battery by ``step``; no history is written.

        Returns:
            Number of zones whose level changed
        """
        changed = 0
        for zone in self.zones.values():
            new = clamp_battery(zone.battery_level - step)
            if new != zone.battery_level:
                zone.battery_level = new
                changed += 1
        return changed

    # =========================================================================
    # Custom statuses
    # =========================================================================

    def create_custom_status(self, name: str, color: Optional[str] = None) -> CustomStatus:
        """Create an operator-defined status.

        Raises:
            ValidationError: blank name or color not in #rrggbb form
        """
        if _is_blank(name):
            raise ValidationError("status name is required")
        color = (color or self.config.default_status_color).strip()
        if not HEX_COLOR_RE.match(color):
            raise ValidationError(f"invalid color {color!r}, expected #rrggbb")

        status = CustomStatus(id=timestamp_id(), name=name.strip(), color=color)
        self.custom_statuses[status.id] = status
        logger.info("[STATUS] created %s (%s)", status.name, status.color)
        return status

    def set_custom_status(self, zone_id: int, status_id: Optional[str]) -> Zone:
        """Attach a custom status to a zone, or clear it with ``None``."""
        zone = self.get_zone(zone_id)
        new_status = self.get_custom_status(status_id) if status_id is not None else None
        old_name = self._status_name(zone.custom_status_id)
        new_name = new_status.name if new_status else "none"

        zone.custom_status_id = new_status.id if new_status else None
        zone.last_update = self._clock()
        self.history.append(
            zone,
            "status changed",
            f"{old_name} -> {new_name}",
            old_value=old_name,
            new_value=new_name,
        )
        return zone

    def _status_name(self, status_id: Optional[str]) -> str:
        if status_id is None:
            return "none"
        status = self.custom_statuses.get(status_id)
        return status.name if status else status_id

    # =========================================================================
    # Contract
    # =========================================================================

    def set_contract_status(self, zone_id: int, status: ContractStatus) -> ContractChange:
        """Move a zone's contract to ``status``.

        Resuming (non-active -> active) puts the zone back unguarded with no
        custom status. Closing the zone's calls is the caller's job (see
        DispatchDesk.set_contract_status).

        Raises:
            InvalidTransition: transition not in ALLOWED_CONTRACT_TRANSITIONS
        """
        zone = self.get_zone(zone_id)
        old = zone.contract_status
        if status not in ALLOWED_CONTRACT_TRANSITIONS[old]:
            raise InvalidTransition(
                f"zone {zone_id}: contract cannot go from {old.value} to {status.value}"
            )

        change = ContractChange(zone=zone, from_status=old, to_status=status)
        details = f"{old.value} -> {status.value}"
        if change.resumed:
            zone.is_guarded = False
            zone.custom_status_id = None
            details += "; guard off, custom status cleared"

        zone.contract_status = status
        zone.last_update = self._clock()
        self.history.append(
            zone,
            CONTRACT_ACTIONS[status],
            details,
            old_value=old.value,
            new_value=status.value,
        )
        logger.info("[CONTRACT] zone %s: %s -> %s", zone_id, old.value, status.value)
        return change


def _guard_text(guarded: bool) -> str:
    return "guarded" if guarded else "not guarded"
