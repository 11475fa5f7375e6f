"""
Staff Roster

Employees available to answer dispatch calls. Availability only changes
through the Call Queue (assign -> on_call, complete/reset -> available).
"""

import logging
import uuid
from typing import Dict, Iterable, List, Optional

from ..domain.enums import EmployeeStatus
from ..domain.errors import NotFound, ValidationError
from ..domain.models import Employee


logger = logging.getLogger(__name__)


class StaffRoster:
    """In-memory employee list."""

    def __init__(self, ranks: Iterable[str]):
        self.ranks: List[str] = list(ranks)
        self.employees: Dict[str, Employee] = {}

    def get(self, employee_id: str) -> Employee:
        employee = self.employees.get(employee_id)
        if employee is None:
            raise NotFound("employee", employee_id)
        return employee

    def list(self, status: Optional[EmployeeStatus] = None) -> List[Employee]:
        """Employees in insertion order, optionally filtered by status."""
        return [
            e for e in self.employees.values()
            if status is None or e.status == status
        ]

    def add(self, employee: Employee) -> Employee:
        """Register a fully built employee (seed data)."""
        if employee.id in self.employees:
            raise ValidationError(f"employee {employee.id} already exists")
        self.employees[employee.id] = employee
        return employee

    def create_employee(self, name: str, rank: str) -> Employee:
        """Hire a new, available employee.

        Raises:
            ValidationError: blank name or rank not in the configured list
        """
        if name is None or not name.strip():
            raise ValidationError("employee name is required")
        if rank not in self.ranks:
            raise ValidationError(f"unknown rank {rank!r}")

        employee = Employee(
            id=f"emp-{uuid.uuid4().hex[:8]}",
            name=name.strip(),
            rank=rank,
            status=EmployeeStatus.AVAILABLE,
        )
        self.employees[employee.id] = employee
        logger.info("[STAFF] added %s (%s)", employee.name, employee.rank)
        return employee

    def remove_employee(self, employee_id: str) -> Employee:
        """Remove an employee unconditionally, even while on a call."""
        employee = self.employees.pop(employee_id, None)
        if employee is None:
            raise NotFound("employee", employee_id)
        if employee.status == EmployeeStatus.ON_CALL:
            logger.warning("[STAFF] removed %s while on call", employee_id)
        else:
            logger.info("[STAFF] removed %s", employee_id)
        return employee

    def mark_on_call(self, employee_id: str) -> Employee:
        employee = self.get(employee_id)
        employee.status = EmployeeStatus.ON_CALL
        return employee

    def release(self, employee_id: str) -> Optional[Employee]:
        """Make an employee available again.

        Returns None when the employee has been removed meanwhile.
        """
        employee = self.employees.get(employee_id)
        if employee is None:
            logger.warning("[STAFF] release of removed employee %s ignored", employee_id)
            return None
        employee.status = EmployeeStatus.AVAILABLE
        return employee
