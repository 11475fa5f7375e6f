"""Dispatch Desk Domain Models"""

from .enums import (
    # Zone
    ContractStatus,
    ZoneStatusKind,
    BatteryAction,

    # Calls
    CallType,
    CallStatus,
    ACTIVE_CALL_STATUSES,

    # Staff
    EmployeeStatus,
)

from .models import (
    Zone,
    CustomStatus,
    HistoryEntry,
    Call,
    Employee,
    EffectiveStatus,
    clamp_battery,
    timestamp_id,
)

from .errors import (
    DeskError,
    ValidationError,
    NotFound,
    InvalidTransition,
)

__all__ = [
    # Enums
    'ContractStatus',
    'ZoneStatusKind',
    'BatteryAction',
    'CallType',
    'CallStatus',
    'ACTIVE_CALL_STATUSES',
    'EmployeeStatus',

    # Models
    'Zone',
    'CustomStatus',
    'HistoryEntry',
    'Call',
    'Employee',
    'EffectiveStatus',
    'clamp_battery',
    'timestamp_id',

    # Errors
    'DeskError',
    'ValidationError',
    'NotFound',
    'InvalidTransition',
]
