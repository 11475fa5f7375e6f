"""Dispatch Desk Services"""

from .history_log import HistoryLog
from .zone_registry import (
    ZoneRegistry,
    ContractChange,
    ALLOWED_CONTRACT_TRANSITIONS,
)
from .staff_roster import StaffRoster
from .call_queue import CallQueue
from .views import (
    DeskStats,
    effective_status,
    sort_zones,
    build_stats,
)
from .desk import (
    DispatchDesk,
    ZoneView,
    BulkResult,
)
from .simulation import (
    PeriodicTask,
    SimulationTimers,
)

__all__ = [
    # History Log
    'HistoryLog',
    # Zone Registry
    'ZoneRegistry',
    'ContractChange',
    'ALLOWED_CONTRACT_TRANSITIONS',
    # Staff Roster
    'StaffRoster',
    # Call Queue
    'CallQueue',
    # Derived Views
    'DeskStats',
    'effective_status',
    'sort_zones',
    'build_stats',
    # Desk
    'DispatchDesk',
    'ZoneView',
    'BulkResult',
    # Simulation
    'PeriodicTask',
    'SimulationTimers',
]
