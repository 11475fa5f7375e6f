"""
Tests for DispatchDesk - end-to-end operator scenarios on the seeded desk
"""

import logging
import random

import pytest

from dispatch_desk.config import DeskConfig
from dispatch_desk.domain import (
    CallStatus,
    CallType,
    ContractStatus,
    EmployeeStatus,
    InvalidTransition,
    NotFound,
    ValidationError,
    ZoneStatusKind,
)
from dispatch_desk.services.desk import DispatchDesk


# =============================================================================
# Seed data
# =============================================================================

class TestSeed:
    """DispatchDesk.seeded"""

    def test_standard_zones(self, desk):
        zones = [v.zone for v in desk.list_zone_views()]

        assert [z.id for z in zones] == list(range(1, 426))
        assert all(z.contract_status == ContractStatus.ACTIVE for z in zones)
        assert all(1 <= z.battery_level <= 100 for z in zones)
        assert all(len(z.history) == 1 for z in zones)
        assert any(z.is_guarded for z in zones)
        assert not all(z.is_guarded for z in zones)

    def test_standard_staff(self, desk):
        employees = desk.list_employees()
        assert [e.id for e in employees] == ["emp-1", "emp-2", "emp-3", "emp-4", "emp-5"]
        assert all(e.status == EmployeeStatus.AVAILABLE for e in employees)

    def test_same_seed_same_zones(self, config, clock):
        a = DispatchDesk.seeded(config, clock=clock, rng=random.Random(7))
        b = DispatchDesk.seeded(config, clock=clock, rng=random.Random(7))
        assert a.guarded_zone_ids() == b.guarded_zone_ids()

    def test_seed_count_from_config(self, clock):
        desk = DispatchDesk.seeded(DeskConfig(seed_zone_count=3), clock=clock)
        assert len(desk.list_zone_views()) == 3

    def test_responders_with_unknown_rank_are_reported(self, clock, caplog):
        config = DeskConfig(seed_zone_count=1, ranks=("Sergeant", "Major"))

        with caplog.at_level(logging.WARNING, logger="dispatch_desk.services.seed_data"):
            desk = DispatchDesk.seeded(config, clock=clock)

        assert [e.id for e in desk.list_employees()] == ["emp-3", "emp-4"]
        warned = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warned) == 3
        assert any("emp-1" in m and "Captain" in m for m in warned)

    def test_empty_desk(self):
        desk = DispatchDesk()
        assert desk.list_zone_views() == []
        assert desk.inject_random_alarm() is None


# =============================================================================
# Operator scenarios
# =============================================================================

class TestScenarios:
    """Typical operator flows"""

    def test_charge_battery_history(self, desk):
        desk.set_battery(5, 100)

        zone = desk.get_zone(5)
        assert zone.battery_level == 100
        assert zone.history[0].action == "battery charged"

    def test_emergency_dispatch_round_trip(self, desk, clock):
        call = desk.raise_call(10, CallType.EMERGENCY)
        assert desk.zone_status(10).kind in (ZoneStatusKind.EMERGENCY, ZoneStatusKind.LOW_BATTERY)

        desk.assign_employee(call.id, "emp-1")
        assert desk.get_employee("emp-1").status == EmployeeStatus.ON_CALL
        clock.advance(300)

        done = desk.complete_call(call.id)

        assert done.status == CallStatus.COMPLETED
        assert done.response_time_sec == 300
        assert desk.get_employee("emp-1").status == EmployeeStatus.AVAILABLE
        assert desk.list_calls() == []
        assert [c.id for c in desk.list_resolved_calls()] == [call.id]
        actions = [h.action for h in desk.list_history(10, limit=3)]
        assert actions == ["dispatch completed", "responder assigned", "emergency dispatch called"]

    def test_terminated_zone_refuses_calls(self, desk):
        desk.set_contract_status(12, ContractStatus.TERMINATED)

        with pytest.raises(InvalidTransition):
            desk.raise_call(12, CallType.ALARM)
        assert desk.list_calls() == []
        assert desk.zone_status(12).label == "contract terminated"

    def test_bulk_guard_one_entry_per_zone(self, desk):
        before = {i: len(desk.list_history(i)) for i in (3, 7, 19)}

        result = desk.bulk_set_guard([3, 7, 19], True)

        assert result.applied == [3, 7, 19]
        assert result.rejected == {}
        for zone_id, size in before.items():
            zone = desk.get_zone(zone_id)
            assert zone.is_guarded is True
            assert len(zone.history) == size + 1
            assert zone.history[0].action == "guard enabled"

    def test_bulk_guard_reports_unknown_ids(self, desk):
        result = desk.bulk_set_guard([3, 9999, 3], False)

        assert result.applied == [3]
        assert result.rejected == {9999: "zone 9999 not found"}
        assert result.to_dict()["rejected"] == {"9999": "zone 9999 not found"}

    def test_bulk_calls_skip_inactive_contracts(self, desk):
        desk.set_contract_status(8, ContractStatus.SUSPENDED)

        result = desk.bulk_raise_call([4, 8, 15])

        assert result.applied == [4, 15]
        assert 8 in result.rejected
        calls = desk.list_calls()
        assert sorted(c.zone_id for c in calls) == [4, 15]
        assert all(c.type == CallType.ALARM for c in calls)

    def test_double_complete(self, desk):
        call = desk.raise_call(30, CallType.ALARM)
        desk.assign_employee(call.id, "emp-2")
        desk.complete_call(call.id)

        with pytest.raises(NotFound):
            desk.complete_call(call.id)
        assert desk.get_employee("emp-2").status == EmployeeStatus.AVAILABLE
        assert len(desk.list_resolved_calls()) == 1

    def test_assign_unavailable_leaves_state(self, desk):
        first = desk.raise_call(40, CallType.EMERGENCY)
        second = desk.raise_call(41, CallType.EMERGENCY)
        desk.assign_employee(first.id, "emp-3")

        with pytest.raises(InvalidTransition):
            desk.assign_employee(second.id, "emp-3")

        assert desk.get_call(second.id).status == CallStatus.PENDING
        assert desk.get_call(second.id).assigned_employee_id is None
        assert desk.get_call(first.id).assigned_employee_id == "emp-3"

    def test_battery_stays_in_range(self, desk):
        for _ in range(25):
            desk.drain_batteries()
        desk.discharge_battery(1)
        desk.set_battery(2, 250)
        desk.set_battery(3, -40)

        levels = [v.zone.battery_level for v in desk.list_zone_views()]
        assert all(0 <= level <= 100 for level in levels)
        assert desk.get_zone(1).battery_level == 0
        assert desk.get_zone(2).battery_level == 100
        assert desk.get_zone(3).battery_level == 0

    def test_drain_writes_no_history(self, desk):
        desk.drain_batteries()
        assert len(desk.list_history(1)) == 1

    def test_create_zone_after_seed(self, desk):
        zone = desk.create_zone("Sadovaya St, 12", "+7 900 123-45-67")
        assert zone.id == 426

        with pytest.raises(ValidationError):
            desk.create_zone("", "+7 900 123-45-67")
        assert len(desk.list_zone_views()) == 426


# =============================================================================
# Contract resume
# =============================================================================

class TestResume:
    """Resuming a contract resets the zone and clears its calls"""

    def test_resume_clears_calls_and_releases_staff(self, desk):
        desk.set_guard(20, True)
        call = desk.raise_call(20, CallType.ALARM)
        desk.assign_employee(call.id, "emp-4")
        desk.set_contract_status(20, ContractStatus.SUSPENDED)

        # still active while suspended
        assert desk.get_call(call.id).status == CallStatus.ASSIGNED

        zone = desk.set_contract_status(20, ContractStatus.ACTIVE)

        assert zone.is_guarded is False
        assert zone.custom_status_id is None
        assert desk.list_calls() == []
        assert desk.list_resolved_calls()[0].status == CallStatus.RESOLVED
        assert desk.get_employee("emp-4").status == EmployeeStatus.AVAILABLE

    def test_suspend_keeps_calls(self, desk):
        desk.raise_call(21, CallType.ALARM)
        desk.set_contract_status(21, ContractStatus.SUSPENDED)
        assert len(desk.list_calls()) == 1


# =============================================================================
# Staff and custom statuses
# =============================================================================

class TestStaff:
    """create_employee / remove_employee"""

    def test_create_and_remove(self, desk):
        employee = desk.create_employee("Smirnov Oleg", "Sergeant")

        assert employee.id.startswith("emp-")
        assert employee.status == EmployeeStatus.AVAILABLE
        assert len(desk.list_employees()) == 6

        desk.remove_employee(employee.id)
        with pytest.raises(NotFound):
            desk.get_employee(employee.id)

    @pytest.mark.parametrize("name,rank", [("", "Sergeant"), ("Smirnov", "Admiral")])
    def test_create_invalid(self, desk, name, rank):
        with pytest.raises(ValidationError):
            desk.create_employee(name, rank)
        assert len(desk.list_employees()) == 5

    def test_filter_available(self, desk):
        call = desk.raise_call(1, CallType.EMERGENCY)
        desk.assign_employee(call.id, "emp-5")

        available = desk.list_employees(EmployeeStatus.AVAILABLE)
        assert "emp-5" not in [e.id for e in available]
        assert len(available) == 4


class TestCustomStatuses:
    """Custom status overlay through the desk"""

    def test_custom_status_shows_on_zone(self, desk):
        desk.set_battery(50, 90)
        status = desk.create_custom_status("Key holder away", "#123abc")

        desk.set_custom_status(50, status.id)

        effective = desk.zone_status(50)
        assert effective.kind == ZoneStatusKind.CUSTOM
        assert effective.label == "Key holder away"
        assert effective.color == "#123abc"
        assert desk.stats().custom_status_zones == 1


# =============================================================================
# Views and simulation hooks
# =============================================================================

class TestViews:
    """Queries return copies; priority order; stats"""

    def test_returned_zone_is_a_copy(self, desk):
        zone = desk.get_zone(1)
        zone.battery_level = 0
        zone.history.clear()

        # seeded levels start at 1
        fresh = desk.get_zone(1)
        assert fresh.battery_level >= 1
        assert len(fresh.history) == 1

    def test_priority_order_puts_pending_first(self, desk):
        desk.raise_call(300, CallType.EMERGENCY)

        views = desk.list_zone_views(priority=True)

        assert views[0].zone.id == 300
        assert views[0].has_pending_call is True
        low = [v.zone.id for v in views[1:] if v.zone.battery_level <= 20]
        assert [v.zone.id for v in views[1:len(low) + 1]] == low

    def test_alarm_call_is_not_an_emergency(self, desk):
        desk.set_battery(300, 90)
        desk.raise_call(300, CallType.ALARM)

        views = desk.list_zone_views(priority=True)

        assert views[0].zone.id != 300
        view = desk.get_zone_view(300)
        assert view.has_pending_call is False
        assert view.status.kind != ZoneStatusKind.EMERGENCY
        assert len(desk.list_calls()) == 1

    def test_stats_partition(self, desk):
        stats = desk.stats()
        assert stats.total_zones == 425
        assert stats.guarded_zones + stats.not_guarded_zones == 425

    def test_inject_random_alarm_targets_guarded_zone(self, desk):
        call = desk.inject_random_alarm()

        assert call is not None
        assert call.type == CallType.ALARM
        zone = desk.get_zone(call.zone_id)
        assert zone.is_guarded
        assert zone.history[0].action == "alarm triggered"

    def test_inject_random_alarm_no_guarded_zones(self, desk):
        desk.bulk_set_guard(desk.guarded_zone_ids(), False)
        assert desk.inject_random_alarm() is None
        assert desk.list_calls() == []
