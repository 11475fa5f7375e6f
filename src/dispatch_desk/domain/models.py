"""
Dispatch Desk Core Models

Data models for Zone, CustomStatus, HistoryEntry, Call and Employee.
Uses Pydantic for validation and serialization.
"""

import itertools
import re
import time
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import (
    ACTIVE_CALL_STATUSES,
    CallStatus,
    CallType,
    ContractStatus,
    EmployeeStatus,
    ZoneStatusKind,
)


BATTERY_MIN = 0
BATTERY_MAX = 100

HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")

# Alpha suffix appended to a status color for its background tint
BACKGROUND_ALPHA = "20"

_id_seq = itertools.count(1)


def timestamp_id(prefix: str = "") -> str:
    """Creation-time based id, unique within the process.

    Millisecond timestamps collide when a bulk command creates many records
    in one tick, so a process-wide sequence number is appended.
    """
    ms = int(time.time() * 1000)
    return f"{prefix}{ms}-{next(_id_seq)}"


def clamp_battery(level: int) -> int:
    """Clamp a battery level into [0, 100]."""
    return max(BATTERY_MIN, min(BATTERY_MAX, int(level)))


# =============================================================================
# History
# =============================================================================

class HistoryEntry(BaseModel):
    """One line of a zone's history trail. Never mutated once written."""
    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime
    action: str
    details: str = ""
    old_value: Optional[str] = None
    new_value: Optional[str] = None


# =============================================================================
# Custom Status
# =============================================================================

class CustomStatus(BaseModel):
    """Operator-defined label/color overlay for zones."""
    id: str
    name: str
    color: str

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if not HEX_COLOR_RE.match(v):
            raise ValueError("color must be a #rrggbb hex string")
        return v.lower()

    @property
    def background(self) -> str:
        """Light tint of ``color`` for row backgrounds."""
        return f"{self.color}{BACKGROUND_ALPHA}"


# =============================================================================
# Zone
# =============================================================================

class Zone(BaseModel):
    """Monitored security location."""
    model_config = ConfigDict(validate_assignment=True)

    id: int = Field(ge=1)
    name: str
    address: str
    phone: Optional[str] = None

    is_guarded: bool = False
    battery_level: int = Field(default=BATTERY_MAX, ge=BATTERY_MIN, le=BATTERY_MAX)
    custom_status_id: Optional[str] = None
    contract_status: ContractStatus = ContractStatus.ACTIVE

    created_at: datetime
    last_update: datetime

    # Newest first
    history: list[HistoryEntry] = Field(default_factory=list)

    @property
    def is_active_contract(self) -> bool:
        return self.contract_status == ContractStatus.ACTIVE

    def is_low_battery(self, threshold: int) -> bool:
        return self.battery_level <= threshold


# =============================================================================
# Calls
# =============================================================================

class Call(BaseModel):
    """Dispatch request raised against a zone."""
    id: str
    zone_id: int
    type: CallType
    timestamp: datetime
    status: CallStatus = CallStatus.PENDING

    assigned_employee_id: Optional[str] = None
    assigned_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    response_time_sec: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_CALL_STATUSES


# =============================================================================
# Staff
# =============================================================================

class Employee(BaseModel):
    """Rapid response team member."""
    id: str
    name: str
    rank: str
    status: EmployeeStatus = EmployeeStatus.AVAILABLE

    @property
    def is_available(self) -> bool:
        return self.status == EmployeeStatus.AVAILABLE


# =============================================================================
# Derived
# =============================================================================

class EffectiveStatus(BaseModel):
    """Display status resolved from a zone's state (never stored on the zone)."""
    model_config = ConfigDict(frozen=True)

    kind: ZoneStatusKind
    label: str
    color: str
    custom_status_id: Optional[str] = None

    @property
    def background(self) -> str:
        return f"{self.color}{BACKGROUND_ALPHA}"
