"""
Standard startup data

Builds the zones and staff the desk starts with. State is not persisted, so
this runs on every start.

Standard layout:
- zones 1..N at "Guard Street, N", battery random in [1, 100], about
  two thirds guarded, all contracts active, one "zone created" history entry
- five available responders
"""

import logging
import random
from datetime import datetime
from typing import List, Optional

from ..config import DeskConfig
from ..domain import ContractStatus, Employee, EmployeeStatus, HistoryEntry, Zone


logger = logging.getLogger(__name__)


STANDARD_EMPLOYEES = [
    ("emp-1", "Ivanov Ivan Ivanovich", "Captain"),
    ("emp-2", "Petrov Petr Petrovich", "Lieutenant"),
    ("emp-3", "Sidorov Sidor Sidorovich", "Sergeant"),
    ("emp-4", "Kozlov Andrey Mikhailovich", "Major"),
    ("emp-5", "Morozov Alexey Viktorovich", "Senior Sergeant"),
]


def create_standard_zones(
    config: DeskConfig,
    now: datetime,
    rng: Optional[random.Random] = None,
) -> List[Zone]:
    """Create the startup zone set.

    Args:
        config: Seed count and guarded ratio come from here
        now: Creation timestamp for every zone
        rng: Random source (seed it for reproducible data)

    Returns:
        Zones with ids 1..config.seed_zone_count
    """
    rng = rng or random.Random()
    zones = []
    for i in range(1, config.seed_zone_count + 1):
        zones.append(Zone(
            id=i,
            name=f"Zone {i}",
            address=f"Guard Street, {i}",
            is_guarded=rng.random() < config.seed_guarded_ratio,
            battery_level=rng.randint(1, 100),
            contract_status=ContractStatus.ACTIVE,
            created_at=now,
            last_update=now,
            history=[HistoryEntry(
                id=f"h{i}",
                timestamp=now,
                action="zone created",
                details="Zone added to the system",
            )],
        ))
    return zones


def create_standard_employees(config: DeskConfig) -> List[Employee]:
    """Create the startup responders.

    A responder whose rank is missing from ``config.ranks`` is left out with a
    warning naming the rank.
    """
    employees = []
    for emp_id, name, rank in STANDARD_EMPLOYEES:
        if rank not in config.ranks:
            logger.warning(
                "[STARTUP] responder %s (%s) not seeded: rank %r is not in the configured ranks",
                emp_id, name, rank,
            )
            continue
        employees.append(
            Employee(id=emp_id, name=name, rank=rank, status=EmployeeStatus.AVAILABLE)
        )
    return employees
