from __future__ import annotations

from typing import Optional, Sequence

from ..common.validators import require_non_empty
from ..core.exceptions import ValidationError
from ..users.model import User
from ..users.service import require_admin
from .model import Employee
from .repository import EmployeeRepository


class EmployeeService:
    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def list_employees(self) -> Sequence[Employee]:
        return self._employees.list_all()

    def get(self, record_id: str) -> Employee:
        employee = self._employees.get_by_id(record_id)
        if not employee:
            raise ValidationError("Employee not found")
        return employee

    def name_for(self, employee_number: str) -> str:
        for employee in self._employees.list_all():
            if employee.employee_number == employee_number:
                return employee.name
        return ""

    @staticmethod
    def _build(employee_number: Optional[str], name: Optional[str], phone: Optional[str]) -> Employee:
        return Employee(
            employee_number=require_non_empty(employee_number, "Employee number"),
            name=require_non_empty(name, "Name"),
            phone=(phone or "").strip(),
        )

    def add(self, *, current_user: User, employee_number: str, name: str, phone: str = "") -> None:
        require_admin(current_user)
        employee = self._build(employee_number, name, phone)
        if any(e.employee_number == employee.employee_number for e in self._employees.list_all()):
            raise ValidationError("Employee number already exists")
        self._employees.create(employee)

    def update(self, *, current_user: User, record_id: str, employee_number: str, name: str, phone: str = "") -> None:
        require_admin(current_user)
        self._employees.update(record_id, self._build(employee_number, name, phone))

    def delete(self, *, current_user: User, record_id: str) -> None:
        require_admin(current_user)
        self._employees.delete(record_id)
