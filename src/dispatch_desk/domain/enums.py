"""
Dispatch Desk Core Enums

Enumerations shared by the domain models, the services and the API.
Values are the wire spelling used in JSON payloads.
"""

from enum import Enum


# =============================================================================
# Zone
# =============================================================================

class ContractStatus(str, Enum):
    """Service agreement state of a zone, independent of guard state."""
    ACTIVE = "active"
    SUSPENDED = "suspended"       # Tariff paused
    TERMINATED = "terminated"     # Contract cancelled


class ZoneStatusKind(str, Enum):
    """Effective display status of a zone.

    Declared in precedence order, highest first.
    """
    TERMINATED = "terminated"
    SUSPENDED = "suspended"
    LOW_BATTERY = "low_battery"
    EMERGENCY = "emergency"       # Latest active call still pending
    CUSTOM = "custom"             # Operator-defined overlay
    GUARDED = "guarded"
    UNGUARDED = "unguarded"


class BatteryAction(str, Enum):
    """Shortcut battery commands."""
    CHARGE = "charge"
    DISCHARGE = "discharge"


# =============================================================================
# Calls
# =============================================================================

class CallType(str, Enum):
    """Dispatch request origin."""
    EMERGENCY = "emergency"   # Raised by the operator
    ALARM = "alarm"           # Raised by a zone alarm (or the alarm injector)


class CallStatus(str, Enum):
    """Call lifecycle.

    pending -> assigned -> completed
    pending|assigned -> resolved   (reset without a responder)
    """
    PENDING = "pending"
    ASSIGNED = "assigned"
    COMPLETED = "completed"
    RESOLVED = "resolved"


ACTIVE_CALL_STATUSES = frozenset({CallStatus.PENDING, CallStatus.ASSIGNED})


# =============================================================================
# Staff
# =============================================================================

class EmployeeStatus(str, Enum):
    """Responder availability."""
    AVAILABLE = "available"
    ON_CALL = "on_call"
