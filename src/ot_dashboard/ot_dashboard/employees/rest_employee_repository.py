from __future__ import annotations

from typing import Optional, Sequence

from ..api.client import ApiClient
from ..core.exceptions import ApiError
from .model import Employee
from .repository import EmployeeRepository


class RestEmployeeRepository(EmployeeRepository):
    def __init__(self, api: ApiClient):
        self._api = api

    def list_all(self) -> Sequence[Employee]:
        return [Employee.from_payload(r) for r in self._api.get_json("/employees") or []]

    def get_by_id(self, record_id: str) -> Optional[Employee]:
        try:
            data = self._api.get_json(f"/employees/{record_id}")
        except ApiError as e:
            if e.status == 404:
                return None
            raise
        return Employee.from_payload(data) if data else None

    def create(self, employee: Employee) -> None:
        self._api.post_json("/employees", employee.to_payload())

    def update(self, record_id: str, employee: Employee) -> None:
        self._api.put_json(f"/employees/{record_id}", employee.to_payload())

    def delete(self, record_id: str) -> None:
        self._api.delete(f"/employees/{record_id}")
