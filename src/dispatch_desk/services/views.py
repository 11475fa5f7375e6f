"""
Derived View Builder

Pure functions recomputed on every read; nothing here is stored.

- effective_status: the single precedence rule for a zone's display status
- sort_zones: operator queue order
- build_stats: dashboard counters
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from ..domain.enums import CallStatus, CallType, ContractStatus, ZoneStatusKind
from ..domain.models import Call, CustomStatus, EffectiveStatus, Zone


STATUS_COLORS: Dict[ZoneStatusKind, str] = {
    ZoneStatusKind.TERMINATED: "#ef4444",
    ZoneStatusKind.SUSPENDED: "#f97316",
    ZoneStatusKind.LOW_BATTERY: "#f97316",
    ZoneStatusKind.EMERGENCY: "#ef4444",
    ZoneStatusKind.GUARDED: "#22c55e",
    ZoneStatusKind.UNGUARDED: "#3b82f6",
}

STATUS_LABELS: Dict[ZoneStatusKind, str] = {
    ZoneStatusKind.TERMINATED: "contract terminated",
    ZoneStatusKind.SUSPENDED: "tariff suspended",
    ZoneStatusKind.LOW_BATTERY: "battery low",
    ZoneStatusKind.EMERGENCY: "emergency dispatch",
    ZoneStatusKind.GUARDED: "guarded",
    ZoneStatusKind.UNGUARDED: "not guarded",
}


def _fixed(kind: ZoneStatusKind) -> EffectiveStatus:
    return EffectiveStatus(kind=kind, label=STATUS_LABELS[kind], color=STATUS_COLORS[kind])


def effective_status(
    zone: Zone,
    has_pending_call: bool,
    custom_status: Optional[CustomStatus],
    low_battery_threshold: int,
) -> EffectiveStatus:
    """Resolve a zone's display status.

    Precedence (highest first):
        terminated > suspended > low battery > pending call > custom > guard

    Args:
        zone: The zone
        has_pending_call: Latest active emergency call on the zone is PENDING
        custom_status: The zone's custom status, already looked up (None if
            unset or dangling)
        low_battery_threshold: Battery level at or below which the zone is low
    """
    if zone.contract_status == ContractStatus.TERMINATED:
        return _fixed(ZoneStatusKind.TERMINATED)
    if zone.contract_status == ContractStatus.SUSPENDED:
        return _fixed(ZoneStatusKind.SUSPENDED)
    if zone.is_low_battery(low_battery_threshold):
        return _fixed(ZoneStatusKind.LOW_BATTERY)
    if has_pending_call:
        return _fixed(ZoneStatusKind.EMERGENCY)
    if custom_status is not None:
        return EffectiveStatus(
            kind=ZoneStatusKind.CUSTOM,
            label=custom_status.name,
            color=custom_status.color,
            custom_status_id=custom_status.id,
        )
    if zone.is_guarded:
        return _fixed(ZoneStatusKind.GUARDED)
    return _fixed(ZoneStatusKind.UNGUARDED)


def sort_zones(
    zones: Iterable[Zone],
    pending_zone_ids: Set[int],
    low_battery_threshold: int,
) -> List[Zone]:
    """Operator queue order: pending call, then low battery, then id."""
    return sorted(
        zones,
        key=lambda z: (
            z.id not in pending_zone_ids,
            not z.is_low_battery(low_battery_threshold),
            z.id,
        ),
    )


@dataclass
class DeskStats:
    """Dashboard counters."""
    total_zones: int = 0
    guarded_zones: int = 0            # guarded AND active contract
    custom_status_zones: int = 0
    not_guarded_zones: int = 0        # not guarded OR contract not active
    low_battery_zones: int = 0
    emergency_calls: int = 0          # emergency-type calls ever raised
    pending_calls: int = 0
    assigned_calls: int = 0
    completed_calls: int = 0
    average_response_min: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_stats(
    zones: Iterable[Zone],
    active_calls: Iterable[Call],
    resolved_calls: Iterable[Call],
    custom_statuses: Mapping[str, CustomStatus],
    low_battery_threshold: int,
) -> DeskStats:
    """Compute dashboard counters from current state."""
    stats = DeskStats()
    for zone in zones:
        stats.total_zones += 1
        if zone.is_guarded and zone.is_active_contract:
            stats.guarded_zones += 1
        else:
            stats.not_guarded_zones += 1
        if zone.custom_status_id is not None and zone.custom_status_id in custom_statuses:
            stats.custom_status_zones += 1
        if zone.is_low_battery(low_battery_threshold):
            stats.low_battery_zones += 1

    active_calls = list(active_calls)
    resolved_calls = list(resolved_calls)
    for call in active_calls + resolved_calls:
        if call.type == CallType.EMERGENCY:
            stats.emergency_calls += 1

    stats.pending_calls = sum(1 for c in active_calls if c.status == CallStatus.PENDING)
    stats.assigned_calls = sum(1 for c in active_calls if c.status == CallStatus.ASSIGNED)

    response_times = [
        c.response_time_sec for c in resolved_calls
        if c.status == CallStatus.COMPLETED and c.response_time_sec is not None
    ]
    stats.completed_calls = len(response_times)
    if response_times:
        stats.average_response_min = round(sum(response_times) / len(response_times) / 60.0, 1)
    return stats
