"""
Call Queue - dispatch request lifecycle

State machine per call:
    PENDING -> ASSIGNED -> COMPLETED      (responder sent and back)
    PENDING|ASSIGNED -> RESOLVED          (reset without a responder)

Key rules:
1. Calls can only be raised on zones with an ACTIVE contract
2. Only PENDING calls can be assigned, and only to AVAILABLE employees
3. Closing a call always releases its responder, even if bookkeeping fails
4. Closed calls leave the active queue for the resolved archive
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Set

from ..domain.enums import CallStatus, CallType
from ..domain.errors import InvalidTransition, NotFound
from ..domain.models import Call, timestamp_id
from .history_log import HistoryLog, utc_now
from .staff_roster import StaffRoster
from .zone_registry import ZoneRegistry


logger = logging.getLogger(__name__)


CALL_ACTIONS = {
    CallType.EMERGENCY: "emergency dispatch called",
    CallType.ALARM: "alarm triggered",
}


class CallQueue:
    """Active dispatch calls plus the archive of closed ones."""

    def __init__(
        self,
        registry: ZoneRegistry,
        roster: StaffRoster,
        history: Optional[HistoryLog] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._registry = registry
        self._roster = roster
        self._clock = clock or utc_now
        self._history = history or registry.history

        # Both newest first
        self.active: List[Call] = []
        self.resolved: List[Call] = []

    # =========================================================================
    # Queries
    # =========================================================================

    def get_call(self, call_id: str) -> Call:
        """Look up an active call."""
        for call in self.active:
            if call.id == call_id:
                return call
        raise NotFound("call", call_id)

    def list_active(self, status: Optional[CallStatus] = None) -> List[Call]:
        return [c for c in self.active if status is None or c.status == status]

    def list_resolved(self) -> List[Call]:
        return list(self.resolved)

    def all_calls(self) -> List[Call]:
        return self.active + self.resolved

    def latest_active_call(
        self,
        zone_id: int,
        call_type: Optional[CallType] = None,
    ) -> Optional[Call]:
        for call in self.active:
            if call.zone_id == zone_id and (call_type is None or call.type == call_type):
                return call
        return None

    def has_pending_call(self, zone_id: int) -> bool:
        """The zone's latest active emergency call is still waiting for a responder.

        Alarm calls never set this flag.
        """
        call = self.latest_active_call(zone_id, CallType.EMERGENCY)
        return call is not None and call.status == CallStatus.PENDING

    def pending_zone_ids(self) -> Set[int]:
        """Zones whose latest active emergency call is PENDING."""
        seen: Set[int] = set()
        pending: Set[int] = set()
        for call in self.active:
            if call.type != CallType.EMERGENCY or call.zone_id in seen:
                continue
            seen.add(call.zone_id)
            if call.status == CallStatus.PENDING:
                pending.add(call.zone_id)
        return pending

    # =========================================================================
    # Commands
    # =========================================================================

    def raise_call(self, zone_id: int, call_type: CallType) -> Call:
        """Create a PENDING call on a zone.

        Raises:
            NotFound: unknown zone
            InvalidTransition: zone contract is not active
        """
        zone = self._registry.get_zone(zone_id)
        if not zone.is_active_contract:
            raise InvalidTransition(
                f"zone {zone_id}: contract is {zone.contract_status.value}, calls not allowed"
            )

        now = self._clock()
        call = Call(
            id=timestamp_id(),
            zone_id=zone_id,
            type=call_type,
            timestamp=now,
            status=CallStatus.PENDING,
        )
        self.active.insert(0, call)
        zone.last_update = now
        self._history.append(zone, CALL_ACTIONS[call_type], f"Call {call.id}")

        logger.info("[CALL] %s raised on zone %s (%s)", call_type.value, zone_id, call.id)
        return call

    def assign(self, call_id: str, employee_id: str) -> Call:
        """Send an available employee to a pending call.

        Raises:
            NotFound: unknown call or employee
            InvalidTransition: call not PENDING or employee not AVAILABLE
        """
        call = self.get_call(call_id)
        employee = self._roster.get(employee_id)
        if call.status != CallStatus.PENDING:
            raise InvalidTransition(f"call {call_id} is {call.status.value}, not pending")
        if not employee.is_available:
            raise InvalidTransition(f"employee {employee_id} is {employee.status.value}")

        now = self._clock()
        self._roster.mark_on_call(employee_id)
        call.status = CallStatus.ASSIGNED
        call.assigned_employee_id = employee_id
        call.assigned_at = now

        zone = self._registry.get_zone(call.zone_id)
        self._history.append(
            zone,
            "responder assigned",
            f"{employee.rank} {employee.name}",
            new_value=employee_id,
        )
        logger.info("[CALL] %s assigned to %s", call_id, employee_id)
        return call

    def complete(self, call_id: str) -> Call:
        """Close a call as COMPLETED and free its responder.

        A second complete on the same id raises NotFound, the call having
        left the active queue.
        """
        call = self.get_call(call_id)
        self._close(call, CallStatus.COMPLETED)
        logger.info("[CALL] %s completed in %ss", call_id, call.response_time_sec)
        return call

    def reset(self, call_id: str) -> Call:
        """Force-resolve a call without a responder (alarm reset)."""
        call = self.get_call(call_id)
        self._close(call, CallStatus.RESOLVED)
        logger.info("[CALL] %s reset", call_id)
        return call

    def close_zone_calls(self, zone_id: int) -> List[Call]:
        """Resolve every active call on a zone."""
        closed = [c for c in self.active if c.zone_id == zone_id]
        for call in closed:
            self._close(call, CallStatus.RESOLVED)
        if closed:
            logger.info("[CALL] cleared %d call(s) on zone %s", len(closed), zone_id)
        return closed

    def _close(self, call: Call, status: CallStatus) -> None:
        self.active.remove(call)
        try:
            now = self._clock()
            call.status = status
            call.closed_at = now
            if status == CallStatus.COMPLETED:
                call.response_time_sec = max(0, int((now - call.timestamp).total_seconds()))
            self.resolved.insert(0, call)

            zone = self._registry.get_zone(call.zone_id)
            if status == CallStatus.COMPLETED:
                details = f"Call {call.id}, response time {call.response_time_sec}s"
                self._history.append(zone, "dispatch completed", details)
            else:
                self._history.append(zone, "call reset", f"Call {call.id}")
        finally:
            if call.assigned_employee_id is not None:
                self._roster.release(call.assigned_employee_id)
